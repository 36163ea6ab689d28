from typing import List

from pydantic import BaseModel

from .company import CompanyCreate, CompanyResponse, CompanyUpdate

# --------------------------------------------------------------
# Manufacturer Schemas
# --------------------------------------------------------------


class ManufacturerCreate(CompanyCreate):
    pass


class ManufacturerUpdate(CompanyUpdate):
    pass


class ManufacturerResponse(CompanyResponse):
    pass


class ManufacturerListResponse(BaseModel):
    items: List[ManufacturerResponse]
    total: int
    limit: int
    offset: int
