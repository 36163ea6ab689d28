from sqlalchemy import TEXT, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import BomServiceBaseModel


class CustomField(BomServiceBaseModel):
    """Definition of a user-defined attribute, shared by all owners of one kind."""

    __tablename__ = "custom_fields"

    field_name: Mapped[str] = mapped_column(String(255), nullable=False)
    data_type: Mapped[str] = mapped_column(String(20), nullable=False, default="text")
    # category | manufacturer | supplier
    applies_to: Mapped[str] = mapped_column(String(20), nullable=False)
    description: Mapped[str | None] = mapped_column(TEXT, nullable=True)

    __table_args__ = (
        UniqueConstraint("field_name", "applies_to", name="uq_custom_field_target"),
    )


class CategoryCustomField(BomServiceBaseModel):
    __tablename__ = "category_custom_fields"

    category_id: Mapped[int] = mapped_column(
        ForeignKey("categories.id", ondelete="CASCADE"), nullable=False, index=True
    )
    field_id: Mapped[int] = mapped_column(
        ForeignKey("custom_fields.id", ondelete="CASCADE"), nullable=False
    )
    # JSON-encoded value
    value: Mapped[str] = mapped_column(TEXT, nullable=False)

    __table_args__ = (
        UniqueConstraint("category_id", "field_id", name="uq_category_custom_field"),
    )


class ManufacturerCustomField(BomServiceBaseModel):
    __tablename__ = "manufacturer_custom_fields"

    manufacturer_id: Mapped[int] = mapped_column(
        ForeignKey("manufacturers.id", ondelete="CASCADE"), nullable=False, index=True
    )
    field_id: Mapped[int] = mapped_column(
        ForeignKey("custom_fields.id", ondelete="CASCADE"), nullable=False
    )
    value: Mapped[str] = mapped_column(TEXT, nullable=False)

    __table_args__ = (
        UniqueConstraint(
            "manufacturer_id", "field_id", name="uq_manufacturer_custom_field"
        ),
    )


class SupplierCustomField(BomServiceBaseModel):
    __tablename__ = "supplier_custom_fields"

    supplier_id: Mapped[int] = mapped_column(
        ForeignKey("suppliers.id", ondelete="CASCADE"), nullable=False, index=True
    )
    field_id: Mapped[int] = mapped_column(
        ForeignKey("custom_fields.id", ondelete="CASCADE"), nullable=False
    )
    value: Mapped[str] = mapped_column(TEXT, nullable=False)

    __table_args__ = (
        UniqueConstraint("supplier_id", "field_id", name="uq_supplier_custom_field"),
    )
