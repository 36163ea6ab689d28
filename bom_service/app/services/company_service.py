"""Shared behaviour of the manufacturer and supplier services"""

from typing import Any, ClassVar, Dict, Optional, Type

from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import (
    ConstraintViolationError,
    ForbiddenError,
    InvalidInputError,
    NotFoundError,
)
from ..core.settings import get_settings
from ..repository.company_repository import CompanyRepository
from ..repository.custom_field_repository import CustomFieldRepository
from ..schemas.company import CompanyCreate, CompanyResponse, CompanyUpdate
from ..utils.logging import setup_bom_logging as setup_logging
from .transaction import transaction

logger = setup_logging("company_service", log_level=get_settings().LOG_LEVEL)


class CompanyService:
    """CRUD for a company-like entity plus its custom field values.

    Subclasses set ``repository_class``, ``response_class`` and ``label``;
    ``label`` doubles as the custom field target ("manufacturer"/"supplier").
    """

    repository_class: ClassVar[Type[CompanyRepository]]
    response_class: ClassVar[Type[CompanyResponse]]
    label: ClassVar[str]

    def __init__(self, db: AsyncSession):
        self.db = db
        self.repository = self.repository_class(db)
        self.custom_fields = CustomFieldRepository(db)

    @property
    def _already_exists(self) -> str:
        return f"{self.label.capitalize()} with this name already exists"

    async def _get_or_404(self, company_id: int):
        company = await self.repository.get_by_id(company_id)
        if company is None:
            raise NotFoundError(f"{self.label.capitalize()} {company_id} not found")
        return company

    def _ensure_can_modify(self, company, user_id: Optional[int], is_admin: bool):
        if is_admin:
            return
        if user_id is None or company.created_by != user_id:
            raise ForbiddenError(
                f"Only the creator can modify this {self.label}",
                details={f"{self.label}_id": company.id},
            )

    async def _to_response(self, company) -> CompanyResponse:
        custom_fields = await self.custom_fields.get_values(self.label, company.id)
        return self.response_class.model_validate(company).model_copy(
            update={"custom_fields": custom_fields}
        )

    async def create(
        self, data: CompanyCreate, user_id: Optional[int]
    ) -> CompanyResponse:
        values = data.model_dump(exclude={"custom_fields"})
        values.update(created_by=user_id, updated_by=user_id)

        async with transaction(self.db, self._already_exists):
            company = await self.repository.create(values)
            if data.custom_fields:
                await self.custom_fields.replace_values(
                    self.label, company.id, data.custom_fields
                )

        logger.info(
            f"{self.label.capitalize()} created successfully",
            extra={f"{self.label}_id": company.id, "user_id": user_id},
        )
        return await self._to_response(company)

    async def get(self, company_id: int) -> CompanyResponse:
        return await self._to_response(await self._get_or_404(company_id))

    async def list_all(
        self, search: Optional[str] = None, limit: int = 100, offset: int = 0
    ) -> Dict[str, Any]:
        companies, total = await self.repository.list_companies(
            search=search, limit=limit, offset=offset
        )
        items = [await self._to_response(company) for company in companies]
        return {"items": items, "total": total, "limit": limit, "offset": offset}

    async def update(
        self,
        company_id: int,
        patch: CompanyUpdate,
        user_id: Optional[int],
        is_admin: bool = False,
    ) -> CompanyResponse:
        company = await self._get_or_404(company_id)
        self._ensure_can_modify(company, user_id, is_admin)

        changes = patch.model_dump(exclude_unset=True)
        custom_fields = changes.pop("custom_fields", None)
        if "name" in changes:
            name = (changes["name"] or "").strip()
            if not name:
                raise InvalidInputError(f"{self.label.capitalize()} name is required")
            changes["name"] = name
        changes["updated_by"] = user_id

        async with transaction(self.db, self._already_exists):
            await self.repository.update(company, changes)
            if custom_fields is not None:
                await self.custom_fields.replace_values(
                    self.label, company_id, custom_fields
                )

        logger.info(
            f"{self.label.capitalize()} updated successfully",
            extra={
                f"{self.label}_id": company_id,
                "fields": sorted(changes),
                "user_id": user_id,
            },
        )
        return await self._to_response(company)

    async def delete(
        self, company_id: int, user_id: Optional[int], is_admin: bool = False
    ) -> None:
        """Delete unless part versions still reference the company."""
        company = await self._get_or_404(company_id)
        self._ensure_can_modify(company, user_id, is_admin)

        linked = await self.repository.count_part_links(company_id)
        if linked:
            raise ConstraintViolationError(
                f"{self.label.capitalize()} is referenced by {linked} part(s)",
                details={f"{self.label}_id": company_id, "part_links": linked},
            )

        async with transaction(self.db):
            await self.repository.delete(company)

        logger.info(
            f"{self.label.capitalize()} deleted",
            extra={f"{self.label}_id": company_id, "user_id": user_id},
        )
