"""Part service for business logic"""

from typing import Any, Dict, Mapping, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import ForbiddenError, InvalidInputError, NotFoundError
from ..core.settings import get_settings
from ..models.base import utcnow
from ..models.enums import FROZEN_LIFECYCLE_STATUSES, LifecycleStatus
from ..models.part import Part, PartVersion
from ..repository.part_repository import PartRepository
from ..schemas.part import (
    PART_FIELDS,
    VERSION_FIELDS,
    ManufacturerPartResponse,
    PartCreate,
    PartListResponse,
    PartResponse,
    PartSummary,
    PartUpdate,
    PartVersionResponse,
    SupplierPartResponse,
)
from ..utils.form_normalization import normalize_part_form
from ..utils.logging import setup_bom_logging as setup_logging
from .transaction import transaction

logger = setup_logging("part_service", log_level=get_settings().LOG_LEVEL)

PART_EXISTS = "A part with this part number already exists"


def next_version_label(labels) -> str:
    """One above the highest integer version label; "1" for a part without any."""
    numbers = [int(label) for label in labels if str(label).isdigit()]
    return str(max(numbers, default=0) + 1)


class PartService:
    """Parts with versioned details.

    A part always has exactly one current version. Editing a part changes its
    current version in place unless that version is released, in which case
    a new draft version is cut from it and becomes current.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.repository = PartRepository(db)

    async def _get_or_404(self, part_id: int) -> Part:
        part = await self.repository.get_part_by_id(part_id)
        if part is None:
            raise NotFoundError(f"Part {part_id} not found")
        return part

    @staticmethod
    def _ensure_can_modify(part: Part, user_id: Optional[int], is_admin: bool) -> None:
        if is_admin:
            return
        if user_id is None or part.creator_id != user_id:
            raise ForbiddenError(
                "Only the creator can modify this part", details={"part_id": part.id}
            )

    async def _ensure_categories_exist(self, category_ids) -> None:
        missing = await self.repository.find_missing_categories(category_ids)
        if missing:
            raise NotFoundError(
                "Category not found", details={"category_ids": missing}
            )

    async def _replace_links(self, version_id: int, links: Mapping[str, Any]) -> None:
        if links.get("category_ids") is not None:
            await self._ensure_categories_exist(links["category_ids"])
            await self.repository.replace_categories(version_id, links["category_ids"])
        if links.get("manufacturer_parts") is not None:
            await self.repository.replace_manufacturer_links(
                version_id, links["manufacturer_parts"]
            )
        if links.get("supplier_parts") is not None:
            await self.repository.replace_supplier_links(
                version_id, links["supplier_parts"]
            )

    async def _current_links(self, version_id: int) -> Dict[str, Any]:
        manufacturer_links = await self.repository.get_manufacturer_links(version_id)
        supplier_links = await self.repository.get_supplier_links(version_id)
        return {
            "category_ids": await self.repository.get_category_ids(version_id),
            "manufacturer_parts": [
                ManufacturerPartResponse.model_validate(link).model_dump(
                    exclude={"id"}
                )
                for link in manufacturer_links
            ],
            "supplier_parts": [
                SupplierPartResponse.model_validate(link).model_dump(exclude={"id"})
                for link in supplier_links
            ],
        }

    async def create_part(
        self, form: Mapping[str, Any], user_id: Optional[int]
    ) -> PartResponse:
        """Normalize and validate a part form, then store the part as version "1"."""
        data = PartCreate.model_validate(normalize_part_form(form))
        values = data.model_dump(mode="json")

        version_values = {key: values[key] for key in VERSION_FIELDS}
        version_values.update(created_by=user_id, updated_by=user_id)
        if version_values["lifecycle_status"] in FROZEN_LIFECYCLE_STATUSES:
            version_values["released_at"] = utcnow()

        async with transaction(self.db, PART_EXISTS):
            part = await self.repository.create_part(
                {
                    "creator_id": user_id,
                    "status": values["status"],
                    "global_part_number": values["global_part_number"],
                }
            )
            version = await self.repository.create_version(
                part.id, {"version": "1", **version_values}
            )
            part.current_version_id = version.id
            await self.db.flush()
            await self._replace_links(version.id, values)

        logger.info(
            "Part created successfully",
            extra={"part_id": part.id, "version_id": version.id, "user_id": user_id},
        )
        return await self.get_part(part.id)

    async def get_part(self, part_id: int) -> PartResponse:
        part = await self._get_or_404(part_id)
        response = PartResponse.model_validate(part)
        if part.current_version_id is None:
            return response

        version = await self.repository.get_version_by_id(part.current_version_id)
        if version is None:
            return response
        links = await self.repository.get_manufacturer_links(version.id)
        supplier_links = await self.repository.get_supplier_links(version.id)
        return response.model_copy(
            update={
                "current_version": PartVersionResponse.model_validate(version),
                "category_ids": await self.repository.get_category_ids(version.id),
                "manufacturer_parts": [
                    ManufacturerPartResponse.model_validate(link) for link in links
                ],
                "supplier_parts": [
                    SupplierPartResponse.model_validate(link) for link in supplier_links
                ],
            }
        )

    async def list_parts(
        self,
        search: Optional[str] = None,
        status: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> PartListResponse:
        rows, total = await self.repository.list_parts(
            search=search, status=status, limit=limit, offset=offset
        )
        items = [
            PartSummary(
                id=part.id,
                status=part.status,
                global_part_number=part.global_part_number,
                name=version.name if version else None,
                version=version.version if version else None,
                lifecycle_status=version.lifecycle_status if version else None,
                updated_at=part.updated_at,
            )
            for part, version in rows
        ]
        return PartListResponse(items=items, total=total, limit=limit, offset=offset)

    async def update_part(
        self,
        part_id: int,
        form: Mapping[str, Any],
        user_id: Optional[int],
        is_admin: bool = False,
    ) -> PartResponse:
        """Apply a part form to the part's current version.

        The form is merged over the current version before normalization so
        that value/unit pairs are reconciled against the stored values.
        """
        if not isinstance(form, Mapping):
            raise InvalidInputError("Part form must be an object")

        part = await self._get_or_404(part_id)
        self._ensure_can_modify(part, user_id, is_admin)
        current = await self.repository.get_version_by_id(part.current_version_id)
        if current is None:
            raise NotFoundError(f"Part {part_id} has no current version")

        stored = {field: getattr(current, field) for field in VERSION_FIELDS}
        baseline = self._validated_update(stored)
        patch = self._validated_update({**stored, **form})

        version_changes = {
            key: value
            for key, value in patch.items()
            if key in VERSION_FIELDS and value != baseline.get(key)
        }
        if "name" in version_changes and not version_changes["name"]:
            raise InvalidInputError("Part name is required")
        if version_changes.get("lifecycle_status", "") is None:
            version_changes.pop("lifecycle_status")
        part_changes = {key: patch[key] for key in PART_FIELDS if key in form}
        if part_changes.get("status", "") is None:
            raise InvalidInputError("Part status cannot be empty")
        links = {
            key: patch.get(key)
            for key in ("category_ids", "manufacturer_parts", "supplier_parts")
            if key in form
        }

        async with transaction(self.db, PART_EXISTS):
            target = current
            if current.lifecycle_status in FROZEN_LIFECYCLE_STATUSES and (
                version_changes or links
            ):
                target = await self._cut_new_version(current, user_id)
                part.current_version_id = target.id

            for field, value in version_changes.items():
                setattr(target, field, value)
            if version_changes:
                target.updated_by = user_id
            if (
                version_changes.get("lifecycle_status") in FROZEN_LIFECYCLE_STATUSES
                and target.released_at is None
            ):
                target.released_at = utcnow()

            for field, value in part_changes.items():
                setattr(part, field, value)
            part.updated_at = utcnow()
            await self.db.flush()
            await self._replace_links(target.id, links)

        logger.info(
            "Part updated successfully",
            extra={
                "part_id": part_id,
                "version_id": target.id,
                "new_version": target.id != current.id,
                "fields": sorted(version_changes) + sorted(part_changes),
                "user_id": user_id,
            },
        )
        return await self.get_part(part_id)

    @staticmethod
    def _validated_update(form: Mapping[str, Any]) -> Dict[str, Any]:
        return PartUpdate.model_validate(normalize_part_form(form)).model_dump(
            mode="json", exclude_unset=True
        )

    async def _cut_new_version(
        self, current: PartVersion, user_id: Optional[int]
    ) -> PartVersion:
        label = next_version_label(
            await self.repository.get_version_labels(current.part_id)
        )
        links = await self._current_links(current.id)
        version = await self.repository.copy_version(
            current,
            label,
            {
                "lifecycle_status": LifecycleStatus.DRAFT.value,
                "created_by": user_id,
                "updated_by": user_id,
            },
        )
        await self._replace_links(version.id, links)
        return version

    async def delete_part(
        self, part_id: int, user_id: Optional[int], is_admin: bool = False
    ) -> None:
        part = await self._get_or_404(part_id)
        self._ensure_can_modify(part, user_id, is_admin)

        async with transaction(self.db):
            await self.repository.delete_part(part)

        logger.info("Part deleted", extra={"part_id": part_id, "user_id": user_id})
