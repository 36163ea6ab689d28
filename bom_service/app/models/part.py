from datetime import datetime
from typing import Any

from sqlalchemy import (
    JSON,
    TEXT,
    DateTime,
    Float,
    ForeignKey,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from .base import BomServiceBaseModel
from .enums import LifecycleStatus, PartStatus


class Part(BomServiceBaseModel):
    __tablename__ = "parts"

    creator_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=PartStatus.CONCEPT.value
    )
    global_part_number: Mapped[str | None] = mapped_column(
        String(255), unique=True, nullable=True
    )
    # parts <-> part_versions is circular; this side is added after both exist
    current_version_id: Mapped[int | None] = mapped_column(
        ForeignKey(
            "part_versions.id",
            use_alter=True,
            name="fk_parts_current_version_id",
            ondelete="SET NULL",
        ),
        nullable=True,
    )


class PartVersion(BomServiceBaseModel):
    __tablename__ = "part_versions"

    part_id: Mapped[int] = mapped_column(
        ForeignKey("parts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    version: Mapped[str] = mapped_column(String(50), nullable=False, default="1")
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    # Descriptions
    short_description: Mapped[str | None] = mapped_column(String(512), nullable=True)
    full_description: Mapped[str | None] = mapped_column(TEXT, nullable=True)
    functional_description: Mapped[str | None] = mapped_column(TEXT, nullable=True)
    notes: Mapped[str | None] = mapped_column(TEXT, nullable=True)
    revision_notes: Mapped[str | None] = mapped_column(TEXT, nullable=True)

    lifecycle_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=LifecycleStatus.DRAFT.value
    )
    released_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=False), nullable=True
    )

    # Physical values and their units
    weight: Mapped[float | None] = mapped_column(Float, nullable=True)
    weight_unit: Mapped[str | None] = mapped_column(String(10), nullable=True)
    tolerance: Mapped[float | None] = mapped_column(Float, nullable=True)
    tolerance_unit: Mapped[str | None] = mapped_column(String(20), nullable=True)
    dimensions: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    dimensions_unit: Mapped[str | None] = mapped_column(String(10), nullable=True)
    operating_temperature_min: Mapped[float | None] = mapped_column(
        Float, nullable=True
    )
    operating_temperature_max: Mapped[float | None] = mapped_column(
        Float, nullable=True
    )
    storage_temperature_min: Mapped[float | None] = mapped_column(
        Float, nullable=True
    )
    storage_temperature_max: Mapped[float | None] = mapped_column(
        Float, nullable=True
    )
    temperature_unit: Mapped[str | None] = mapped_column(String(5), nullable=True)

    # Packaging
    package_type: Mapped[str | None] = mapped_column(String(20), nullable=True)
    package_case: Mapped[str | None] = mapped_column(String(100), nullable=True)
    mounting_style: Mapped[str | None] = mapped_column(String(20), nullable=True)
    termination_style: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # Structured properties
    technical_specifications: Mapped[dict[str, Any] | None] = mapped_column(
        JSON, nullable=True
    )
    properties: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    electrical_properties: Mapped[dict[str, Any] | None] = mapped_column(
        JSON, nullable=True
    )
    mechanical_properties: Mapped[dict[str, Any] | None] = mapped_column(
        JSON, nullable=True
    )
    thermal_properties: Mapped[dict[str, Any] | None] = mapped_column(
        JSON, nullable=True
    )
    material_composition: Mapped[dict[str, Any] | None] = mapped_column(
        JSON, nullable=True
    )
    environmental_data: Mapped[dict[str, Any] | None] = mapped_column(
        JSON, nullable=True
    )

    created_by: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    updated_by: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    __table_args__ = (
        UniqueConstraint("part_id", "version", name="uq_part_version"),
    )


class PartVersionCategory(BomServiceBaseModel):
    __tablename__ = "part_version_categories"

    part_version_id: Mapped[int] = mapped_column(
        ForeignKey("part_versions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    category_id: Mapped[int] = mapped_column(
        ForeignKey("categories.id", ondelete="CASCADE"), nullable=False, index=True
    )

    __table_args__ = (
        UniqueConstraint(
            "part_version_id", "category_id", name="uq_part_version_category"
        ),
    )


class ManufacturerPart(BomServiceBaseModel):
    __tablename__ = "manufacturer_parts"

    part_version_id: Mapped[int] = mapped_column(
        ForeignKey("part_versions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    manufacturer_id: Mapped[int] = mapped_column(
        ForeignKey("manufacturers.id"), nullable=False, index=True
    )
    manufacturer_part_number: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(TEXT, nullable=True)
    is_recommended: Mapped[bool] = mapped_column(default=False, nullable=False)

    __table_args__ = (
        UniqueConstraint(
            "part_version_id",
            "manufacturer_id",
            "manufacturer_part_number",
            name="uq_manufacturer_part_number",
        ),
    )


class SupplierPart(BomServiceBaseModel):
    __tablename__ = "supplier_parts"

    part_version_id: Mapped[int] = mapped_column(
        ForeignKey("part_versions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    supplier_id: Mapped[int] = mapped_column(
        ForeignKey("suppliers.id"), nullable=False, index=True
    )
    supplier_part_number: Mapped[str] = mapped_column(String(255), nullable=False)
    unit_price: Mapped[float | None] = mapped_column(Float, nullable=True)
    currency: Mapped[str | None] = mapped_column(String(3), nullable=True)
    stock_quantity: Mapped[int | None] = mapped_column(nullable=True)
    lead_time_days: Mapped[int | None] = mapped_column(nullable=True)
    is_preferred: Mapped[bool] = mapped_column(default=False, nullable=False)
