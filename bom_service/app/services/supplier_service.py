"""Supplier service for business logic"""

from ..repository.company_repository import SupplierRepository
from ..schemas.supplier import SupplierResponse
from .company_service import CompanyService


class SupplierService(CompanyService):
    repository_class = SupplierRepository
    response_class = SupplierResponse
    label = "supplier"
