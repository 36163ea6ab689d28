"""Part API endpoints

Part bodies are loosely typed form payloads; they are normalized and
validated by the part service rather than by the request schema.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Query, status

from bom_service.app.api.dependencies import (
    AuthenticatedUserDep,
    CorrelationIdDep,
    PartServiceDep,
)
from bom_service.app.models.enums import PartStatus
from bom_service.app.schemas.part import PartListResponse, PartResponse
from bom_service.app.schemas.user import CurrentUser
from bom_service.app.services.part_service import PartService
from bom_service.app.utils.logging import setup_bom_logging

logger = setup_bom_logging("parts_api")
router = APIRouter(prefix="/parts")


@router.get("", response_model=PartListResponse)
async def list_parts(
    search: Optional[str] = None,
    status_filter: Optional[PartStatus] = Query(None, alias="status"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    service: PartService = PartServiceDep,
) -> PartListResponse:
    return await service.list_parts(
        search=search,
        status=status_filter.value if status_filter else None,
        limit=limit,
        offset=offset,
    )


@router.post("", response_model=PartResponse, status_code=status.HTTP_201_CREATED)
async def create_part(
    form: Dict[str, Any] = Body(...),
    user: CurrentUser = AuthenticatedUserDep,
    service: PartService = PartServiceDep,
    correlation_id: Optional[str] = CorrelationIdDep,
) -> PartResponse:
    part = await service.create_part(form, user_id=user.user_id)
    logger.info(
        f"Part created: {part.id}",
        extra={"correlation_id": correlation_id, "user_id": user.user_id},
    )
    return part


@router.get("/{part_id}", response_model=PartResponse)
async def get_part(
    part_id: int,
    service: PartService = PartServiceDep,
) -> PartResponse:
    """Get a part with its current version and links"""
    return await service.get_part(part_id)


@router.put("/{part_id}", response_model=PartResponse)
async def update_part(
    part_id: int,
    form: Dict[str, Any] = Body(...),
    user: CurrentUser = AuthenticatedUserDep,
    service: PartService = PartServiceDep,
) -> PartResponse:
    """Update a part; a released version is never edited in place."""
    return await service.update_part(
        part_id, form, user_id=user.user_id, is_admin=user.is_admin
    )


@router.delete("/{part_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_part(
    part_id: int,
    user: CurrentUser = AuthenticatedUserDep,
    service: PartService = PartServiceDep,
    correlation_id: Optional[str] = CorrelationIdDep,
) -> None:
    await service.delete_part(part_id, user_id=user.user_id, is_admin=user.is_admin)
    logger.info(
        f"Part deleted: {part_id}",
        extra={"correlation_id": correlation_id, "user_id": user.user_id},
    )
