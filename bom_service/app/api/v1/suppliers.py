"""Supplier API endpoints"""

from typing import Optional

from fastapi import APIRouter, Query, status

from bom_service.app.api.dependencies import (
    AuthenticatedUserDep,
    CorrelationIdDep,
    SupplierServiceDep,
)
from bom_service.app.schemas.supplier import (
    SupplierCreate,
    SupplierListResponse,
    SupplierResponse,
    SupplierUpdate,
)
from bom_service.app.schemas.user import CurrentUser
from bom_service.app.services.supplier_service import SupplierService
from bom_service.app.utils.logging import setup_bom_logging

logger = setup_bom_logging("suppliers_api")
router = APIRouter(prefix="/suppliers")


@router.get("", response_model=SupplierListResponse)
async def list_suppliers(
    search: Optional[str] = None,
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    service: SupplierService = SupplierServiceDep,
) -> SupplierListResponse:
    result = await service.list_all(search=search, limit=limit, offset=offset)
    return SupplierListResponse(**result)


@router.post(
    "", response_model=SupplierResponse, status_code=status.HTTP_201_CREATED
)
async def create_supplier(
    data: SupplierCreate,
    user: CurrentUser = AuthenticatedUserDep,
    service: SupplierService = SupplierServiceDep,
    correlation_id: Optional[str] = CorrelationIdDep,
) -> SupplierResponse:
    supplier = await service.create(data, user_id=user.user_id)
    logger.info(
        f"Supplier created: {supplier.id}",
        extra={"correlation_id": correlation_id, "user_id": user.user_id},
    )
    return supplier


@router.get("/{supplier_id}", response_model=SupplierResponse)
async def get_supplier(
    supplier_id: int,
    service: SupplierService = SupplierServiceDep,
) -> SupplierResponse:
    return await service.get(supplier_id)


@router.put("/{supplier_id}", response_model=SupplierResponse)
async def update_supplier(
    supplier_id: int,
    data: SupplierUpdate,
    user: CurrentUser = AuthenticatedUserDep,
    service: SupplierService = SupplierServiceDep,
) -> SupplierResponse:
    return await service.update(
        supplier_id, data, user_id=user.user_id, is_admin=user.is_admin
    )


@router.delete("/{supplier_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_supplier(
    supplier_id: int,
    user: CurrentUser = AuthenticatedUserDep,
    service: SupplierService = SupplierServiceDep,
    correlation_id: Optional[str] = CorrelationIdDep,
) -> None:
    await service.delete(supplier_id, user_id=user.user_id, is_admin=user.is_admin)
    logger.info(
        f"Supplier deleted: {supplier_id}",
        extra={"correlation_id": correlation_id, "user_id": user.user_id},
    )
