"""Manufacturer service for business logic"""

from ..repository.company_repository import ManufacturerRepository
from ..schemas.manufacturer import ManufacturerResponse
from .company_service import CompanyService


class ManufacturerService(CompanyService):
    repository_class = ManufacturerRepository
    response_class = ManufacturerResponse
    label = "manufacturer"
