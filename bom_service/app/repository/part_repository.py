"""Part repository for database operations"""

from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.category import Category
from ..models.part import (
    ManufacturerPart,
    Part,
    PartVersion,
    PartVersionCategory,
    SupplierPart,
)

# PartVersion columns carried over when a new version is cut from an old one
_NON_COPIED_VERSION_COLUMNS = frozenset(
    {"id", "part_id", "version", "created_at", "updated_at", "released_at"}
)


class PartRepository:
    """Repository for parts, their versions and the links of each version.

    Methods flush but never commit; the calling service owns the transaction.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_part(self, values: Dict[str, Any]) -> Part:
        part = Part(**values)
        self.db.add(part)
        await self.db.flush()
        return part

    async def create_version(
        self, part_id: int, values: Dict[str, Any]
    ) -> PartVersion:
        version = PartVersion(part_id=part_id, **values)
        self.db.add(version)
        await self.db.flush()
        return version

    async def copy_version(
        self, source: PartVersion, new_version: str, values: Dict[str, Any]
    ) -> PartVersion:
        """Cut a new version of ``source``'s part from its columns plus ``values``."""
        copied = {
            column.key: getattr(source, column.key)
            for column in PartVersion.__table__.columns
            if column.key not in _NON_COPIED_VERSION_COLUMNS
        }
        copied.update(values)
        copied["version"] = new_version
        return await self.create_version(source.part_id, copied)

    async def get_part_by_id(self, part_id: int) -> Optional[Part]:
        result = await self.db.execute(select(Part).where(Part.id == part_id))
        return result.scalar_one_or_none()

    async def get_version_by_id(self, version_id: int) -> Optional[PartVersion]:
        result = await self.db.execute(
            select(PartVersion).where(PartVersion.id == version_id)
        )
        return result.scalar_one_or_none()

    async def get_version_labels(self, part_id: int) -> List[str]:
        result = await self.db.execute(
            select(PartVersion.version).where(PartVersion.part_id == part_id)
        )
        return list(result.scalars().all())

    async def list_parts(
        self,
        search: Optional[str] = None,
        status: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> Tuple[Sequence[Tuple[Part, Optional[PartVersion]]], int]:
        """Parts joined with their current version, newest first."""
        query = select(Part, PartVersion).outerjoin(
            PartVersion, PartVersion.id == Part.current_version_id
        )
        count_query = select(func.count(Part.id)).outerjoin(
            PartVersion, PartVersion.id == Part.current_version_id
        )
        conditions = []
        if status:
            conditions.append(Part.status == status)
        if search:
            pattern = f"%{search.lower()}%"
            conditions.append(
                or_(
                    func.lower(PartVersion.name).like(pattern),
                    func.lower(func.coalesce(Part.global_part_number, "")).like(
                        pattern
                    ),
                    func.lower(func.coalesce(PartVersion.short_description, "")).like(
                        pattern
                    ),
                )
            )
        if conditions:
            query = query.where(*conditions)
            count_query = count_query.where(*conditions)

        total = await self.db.scalar(count_query) or 0
        result = await self.db.execute(
            query.order_by(Part.updated_at.desc(), Part.id.desc())
            .offset(offset)
            .limit(limit)
        )
        return [tuple(row) for row in result.all()], total

    async def delete_part(self, part: Part) -> None:
        """Remove a part, its versions and every link of those versions."""
        part.current_version_id = None
        await self.db.flush()

        version_ids = select(PartVersion.id).where(PartVersion.part_id == part.id)
        for link_model in (PartVersionCategory, ManufacturerPart, SupplierPart):
            await self.db.execute(
                delete(link_model)
                .where(link_model.part_version_id.in_(version_ids))
                .execution_options(synchronize_session=False)
            )
        await self.db.execute(
            delete(PartVersion)
            .where(PartVersion.part_id == part.id)
            .execution_options(synchronize_session=False)
        )
        await self.db.delete(part)
        await self.db.flush()

    # --------------------------------------------------------------
    # Version links
    # --------------------------------------------------------------

    async def find_missing_categories(
        self, category_ids: Iterable[int]
    ) -> List[int]:
        """Ids among ``category_ids`` that do not name a live category."""
        wanted = set(category_ids)
        if not wanted:
            return []
        result = await self.db.execute(
            select(Category.id).where(
                Category.id.in_(wanted), Category.is_deleted.is_(False)
            )
        )
        return sorted(wanted - set(result.scalars().all()))

    async def get_category_ids(self, version_id: int) -> List[int]:
        result = await self.db.execute(
            select(PartVersionCategory.category_id)
            .where(PartVersionCategory.part_version_id == version_id)
            .order_by(PartVersionCategory.category_id)
        )
        return list(result.scalars().all())

    async def replace_categories(
        self, version_id: int, category_ids: Iterable[int]
    ) -> None:
        await self.db.execute(
            delete(PartVersionCategory).where(
                PartVersionCategory.part_version_id == version_id
            )
        )
        for category_id in sorted(set(category_ids)):
            self.db.add(
                PartVersionCategory(
                    part_version_id=version_id, category_id=category_id
                )
            )
        await self.db.flush()

    async def get_manufacturer_links(
        self, version_id: int
    ) -> Sequence[ManufacturerPart]:
        result = await self.db.execute(
            select(ManufacturerPart)
            .where(ManufacturerPart.part_version_id == version_id)
            .order_by(ManufacturerPart.id)
        )
        return result.scalars().all()

    async def replace_manufacturer_links(
        self, version_id: int, links: Iterable[Dict[str, Any]]
    ) -> None:
        await self.db.execute(
            delete(ManufacturerPart).where(
                ManufacturerPart.part_version_id == version_id
            )
        )
        for link in links:
            self.db.add(ManufacturerPart(part_version_id=version_id, **link))
        await self.db.flush()

    async def get_supplier_links(self, version_id: int) -> Sequence[SupplierPart]:
        result = await self.db.execute(
            select(SupplierPart)
            .where(SupplierPart.part_version_id == version_id)
            .order_by(SupplierPart.id)
        )
        return result.scalars().all()

    async def replace_supplier_links(
        self, version_id: int, links: Iterable[Dict[str, Any]]
    ) -> None:
        await self.db.execute(
            delete(SupplierPart).where(SupplierPart.part_version_id == version_id)
        )
        for link in links:
            self.db.add(SupplierPart(part_version_id=version_id, **link))
        await self.db.flush()
