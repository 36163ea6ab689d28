from typing import List

from pydantic import BaseModel

from .company import CompanyCreate, CompanyResponse, CompanyUpdate

# --------------------------------------------------------------
# Supplier Schemas
# --------------------------------------------------------------


class SupplierCreate(CompanyCreate):
    pass


class SupplierUpdate(CompanyUpdate):
    pass


class SupplierResponse(CompanyResponse):
    pass


class SupplierListResponse(BaseModel):
    items: List[SupplierResponse]
    total: int
    limit: int
    offset: int
