"""Manufacturer API endpoints"""

from typing import Optional

from fastapi import APIRouter, Query, status

from bom_service.app.api.dependencies import (
    AuthenticatedUserDep,
    CorrelationIdDep,
    ManufacturerServiceDep,
)
from bom_service.app.schemas.manufacturer import (
    ManufacturerCreate,
    ManufacturerListResponse,
    ManufacturerResponse,
    ManufacturerUpdate,
)
from bom_service.app.schemas.user import CurrentUser
from bom_service.app.services.manufacturer_service import ManufacturerService
from bom_service.app.utils.logging import setup_bom_logging

logger = setup_bom_logging("manufacturers_api")
router = APIRouter(prefix="/manufacturers")


@router.get("", response_model=ManufacturerListResponse)
async def list_manufacturers(
    search: Optional[str] = None,
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    service: ManufacturerService = ManufacturerServiceDep,
) -> ManufacturerListResponse:
    result = await service.list_all(search=search, limit=limit, offset=offset)
    return ManufacturerListResponse(**result)


@router.post(
    "", response_model=ManufacturerResponse, status_code=status.HTTP_201_CREATED
)
async def create_manufacturer(
    data: ManufacturerCreate,
    user: CurrentUser = AuthenticatedUserDep,
    service: ManufacturerService = ManufacturerServiceDep,
    correlation_id: Optional[str] = CorrelationIdDep,
) -> ManufacturerResponse:
    manufacturer = await service.create(data, user_id=user.user_id)
    logger.info(
        f"Manufacturer created: {manufacturer.id}",
        extra={"correlation_id": correlation_id, "user_id": user.user_id},
    )
    return manufacturer


@router.get("/{manufacturer_id}", response_model=ManufacturerResponse)
async def get_manufacturer(
    manufacturer_id: int,
    service: ManufacturerService = ManufacturerServiceDep,
) -> ManufacturerResponse:
    return await service.get(manufacturer_id)


@router.put("/{manufacturer_id}", response_model=ManufacturerResponse)
async def update_manufacturer(
    manufacturer_id: int,
    data: ManufacturerUpdate,
    user: CurrentUser = AuthenticatedUserDep,
    service: ManufacturerService = ManufacturerServiceDep,
) -> ManufacturerResponse:
    return await service.update(
        manufacturer_id, data, user_id=user.user_id, is_admin=user.is_admin
    )


@router.delete("/{manufacturer_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_manufacturer(
    manufacturer_id: int,
    user: CurrentUser = AuthenticatedUserDep,
    service: ManufacturerService = ManufacturerServiceDep,
    correlation_id: Optional[str] = CorrelationIdDep,
) -> None:
    await service.delete(manufacturer_id, user_id=user.user_id, is_admin=user.is_admin)
    logger.info(
        f"Manufacturer deleted: {manufacturer_id}",
        extra={"correlation_id": correlation_id, "user_id": user.user_id},
    )
