"""Repository for manufacturers and suppliers, which share one table shape"""

from typing import Any, ClassVar, Dict, Optional, Sequence, Tuple, Type

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.manufacturer import Manufacturer
from ..models.part import ManufacturerPart, SupplierPart
from ..models.supplier import Supplier


class CompanyRepository:
    """Subclasses name the table and the part-link table referencing it."""

    model: ClassVar[Type[Manufacturer | Supplier]]
    link_model: ClassVar[Type[ManufacturerPart | SupplierPart]]
    link_column: ClassVar[str]

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, data: Dict[str, Any]):
        company = self.model(**data)
        self.db.add(company)
        await self.db.flush()
        return company

    async def get_by_id(self, company_id: int):
        result = await self.db.execute(
            select(self.model).where(self.model.id == company_id)
        )
        return result.scalar_one_or_none()

    async def get_by_name(self, name: str):
        result = await self.db.execute(
            select(self.model).where(func.lower(self.model.name) == name.lower())
        )
        return result.scalars().first()

    async def list_companies(
        self, search: Optional[str] = None, limit: int = 100, offset: int = 0
    ) -> Tuple[Sequence[Any], int]:
        query = select(self.model)
        count_query = select(func.count(self.model.id))
        if search:
            pattern = f"%{search.lower()}%"
            condition = or_(
                func.lower(self.model.name).like(pattern),
                func.lower(func.coalesce(self.model.description, "")).like(pattern),
            )
            query = query.where(condition)
            count_query = count_query.where(condition)

        total = await self.db.scalar(count_query) or 0
        result = await self.db.execute(
            query.order_by(self.model.name).offset(offset).limit(limit)
        )
        return result.scalars().all(), total

    async def update(self, company, changes: Dict[str, Any]):
        for field, value in changes.items():
            setattr(company, field, value)
        await self.db.flush()
        return company

    async def delete(self, company) -> None:
        await self.db.delete(company)
        await self.db.flush()

    async def count_part_links(self, company_id: int) -> int:
        column = getattr(self.link_model, self.link_column)
        return await self.db.scalar(
            select(func.count(self.link_model.id)).where(column == company_id)
        ) or 0


class ManufacturerRepository(CompanyRepository):
    model = Manufacturer
    link_model = ManufacturerPart
    link_column = "manufacturer_id"


class SupplierRepository(CompanyRepository):
    model = Supplier
    link_model = SupplierPart
    link_column = "supplier_id"
