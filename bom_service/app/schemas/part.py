from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..models.enums import (
    DimensionUnit,
    LifecycleStatus,
    MountingType,
    PackageType,
    PartStatus,
    TemperatureUnit,
    WeightUnit,
)

NUMERIC_FIELDS = (
    "weight",
    "tolerance",
    "operating_temperature_min",
    "operating_temperature_max",
    "storage_temperature_min",
    "storage_temperature_max",
)

# Columns of PartVersion that a part form may set
VERSION_FIELDS = frozenset(
    {
        "name",
        "short_description",
        "full_description",
        "functional_description",
        "notes",
        "revision_notes",
        "lifecycle_status",
        "weight",
        "weight_unit",
        "tolerance",
        "tolerance_unit",
        "dimensions",
        "dimensions_unit",
        "operating_temperature_min",
        "operating_temperature_max",
        "storage_temperature_min",
        "storage_temperature_max",
        "temperature_unit",
        "package_type",
        "package_case",
        "mounting_style",
        "termination_style",
        "technical_specifications",
        "properties",
        "electrical_properties",
        "mechanical_properties",
        "thermal_properties",
        "material_composition",
        "environmental_data",
    }
)

PART_FIELDS = frozenset({"status", "global_part_number"})

# --------------------------------------------------------------
# Link Schemas
# --------------------------------------------------------------


class ManufacturerPartLink(BaseModel):
    manufacturer_id: int
    manufacturer_part_number: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    is_recommended: bool = False


class SupplierPartLink(BaseModel):
    supplier_id: int
    supplier_part_number: str = Field(..., min_length=1, max_length=255)
    unit_price: Optional[float] = Field(None, ge=0)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    stock_quantity: Optional[int] = Field(None, ge=0)
    lead_time_days: Optional[int] = Field(None, ge=0)
    is_preferred: bool = False


class ManufacturerPartResponse(ManufacturerPartLink):
    id: int

    model_config = ConfigDict(from_attributes=True)


class SupplierPartResponse(SupplierPartLink):
    id: int

    model_config = ConfigDict(from_attributes=True)


# --------------------------------------------------------------
# Part Schemas
# --------------------------------------------------------------


class PartVersionFields(BaseModel):
    """Fields stored on a part version, as accepted from a normalized form."""

    model_config = ConfigDict(extra="ignore")

    short_description: Optional[str] = Field(None, max_length=512)
    full_description: Optional[str] = None
    functional_description: Optional[str] = None
    notes: Optional[str] = None
    revision_notes: Optional[str] = None

    weight: Optional[float] = None
    weight_unit: Optional[WeightUnit] = None
    tolerance: Optional[float] = None
    tolerance_unit: Optional[str] = Field(None, max_length=20)
    dimensions: Optional[Dict[str, Any]] = None
    dimensions_unit: Optional[DimensionUnit] = None
    operating_temperature_min: Optional[float] = None
    operating_temperature_max: Optional[float] = None
    storage_temperature_min: Optional[float] = None
    storage_temperature_max: Optional[float] = None
    temperature_unit: Optional[TemperatureUnit] = None

    package_type: Optional[PackageType] = None
    package_case: Optional[str] = Field(None, max_length=100)
    mounting_style: Optional[MountingType] = None
    termination_style: Optional[str] = Field(None, max_length=100)

    technical_specifications: Optional[Dict[str, Any]] = None
    properties: Optional[Dict[str, Any]] = None
    electrical_properties: Optional[Dict[str, Any]] = None
    mechanical_properties: Optional[Dict[str, Any]] = None
    thermal_properties: Optional[Dict[str, Any]] = None
    material_composition: Optional[Dict[str, Any]] = None
    environmental_data: Optional[Dict[str, Any]] = None

    @field_validator(*NUMERIC_FIELDS, mode="before")
    @classmethod
    def blank_number_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class PartCreate(PartVersionFields):
    name: str = Field(..., min_length=1, max_length=255, examples=["10k resistor"])
    lifecycle_status: LifecycleStatus = LifecycleStatus.DRAFT
    status: PartStatus = PartStatus.CONCEPT
    global_part_number: Optional[str] = Field(None, max_length=255)

    category_ids: List[int] = Field(default_factory=list)
    manufacturer_parts: List[ManufacturerPartLink] = Field(default_factory=list)
    supplier_parts: List[SupplierPartLink] = Field(default_factory=list)


class PartUpdate(PartVersionFields):
    """Partial update; only fields present in the form are applied."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    lifecycle_status: Optional[LifecycleStatus] = None
    status: Optional[PartStatus] = None
    global_part_number: Optional[str] = Field(None, max_length=255)

    category_ids: Optional[List[int]] = None
    manufacturer_parts: Optional[List[ManufacturerPartLink]] = None
    supplier_parts: Optional[List[SupplierPartLink]] = None


class PartVersionResponse(PartVersionFields):
    id: int
    part_id: int
    version: str
    name: str
    lifecycle_status: LifecycleStatus
    released_at: Optional[datetime] = None
    created_by: Optional[int] = None
    updated_by: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PartResponse(BaseModel):
    id: int
    creator_id: Optional[int] = None
    status: PartStatus
    global_part_number: Optional[str] = None
    current_version_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime
    current_version: Optional[PartVersionResponse] = None
    category_ids: List[int] = Field(default_factory=list)
    manufacturer_parts: List[ManufacturerPartResponse] = Field(default_factory=list)
    supplier_parts: List[SupplierPartResponse] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class PartSummary(BaseModel):
    id: int
    status: PartStatus
    global_part_number: Optional[str] = None
    name: Optional[str] = None
    version: Optional[str] = None
    lifecycle_status: Optional[LifecycleStatus] = None
    updated_at: datetime


class PartListResponse(BaseModel):
    items: List[PartSummary]
    total: int
    limit: int
    offset: int
