"""
BOM Service Models
"""

from .base import BomServiceBase, BomServiceBaseModel
from .category import Category
from .custom_field import (
    CategoryCustomField,
    CustomField,
    ManufacturerCustomField,
    SupplierCustomField,
)
from .manufacturer import Manufacturer
from .part import ManufacturerPart, Part, PartVersion, PartVersionCategory, SupplierPart
from .project import Project
from .supplier import Supplier
from .user import Session, User

__all__ = [
    "BomServiceBase",
    "BomServiceBaseModel",
    "User",
    "Session",
    "Category",
    "CustomField",
    "CategoryCustomField",
    "ManufacturerCustomField",
    "SupplierCustomField",
    "Manufacturer",
    "Supplier",
    "Part",
    "PartVersion",
    "PartVersionCategory",
    "ManufacturerPart",
    "SupplierPart",
    "Project",
]
