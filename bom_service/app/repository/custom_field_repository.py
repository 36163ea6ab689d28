"""Custom field repository shared by categories, manufacturers and suppliers"""

from typing import Any, Dict, Mapping, Optional, Tuple, Type

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.custom_field import (
    CategoryCustomField,
    CustomField,
    ManufacturerCustomField,
    SupplierCustomField,
)
from ..utils.custom_fields import decode_value, encode_value, infer_data_type

ValueModel = Type[CategoryCustomField | ManufacturerCustomField | SupplierCustomField]

_VALUE_MODELS: Dict[str, Tuple[ValueModel, str]] = {
    "category": (CategoryCustomField, "category_id"),
    "manufacturer": (ManufacturerCustomField, "manufacturer_id"),
    "supplier": (SupplierCustomField, "supplier_id"),
}


class CustomFieldRepository:
    """Definitions are keyed by ``(field_name, applies_to)``; values by owner."""

    def __init__(self, db: AsyncSession):
        self.db = db

    @staticmethod
    def _value_model(applies_to: str) -> Tuple[ValueModel, str]:
        try:
            return _VALUE_MODELS[applies_to]
        except KeyError:
            raise ValueError(f"Unknown custom field target: {applies_to}") from None

    async def get_field(
        self, field_name: str, applies_to: str
    ) -> Optional[CustomField]:
        result = await self.db.execute(
            select(CustomField).where(
                CustomField.field_name == field_name,
                CustomField.applies_to == applies_to,
            )
        )
        return result.scalar_one_or_none()

    async def get_or_create_field(
        self, field_name: str, applies_to: str, sample_value: Any
    ) -> CustomField:
        field = await self.get_field(field_name, applies_to)
        if field is None:
            field = CustomField(
                field_name=field_name,
                applies_to=applies_to,
                data_type=infer_data_type(sample_value),
            )
            self.db.add(field)
            await self.db.flush()
        return field

    async def get_values(self, applies_to: str, owner_id: int) -> Dict[str, Any]:
        model, owner_column = self._value_model(applies_to)
        result = await self.db.execute(
            select(CustomField.field_name, model.value)
            .join(CustomField, CustomField.id == model.field_id)
            .where(getattr(model, owner_column) == owner_id)
            .order_by(CustomField.field_name)
        )
        return {name: decode_value(raw) for name, raw in result.all()}

    async def replace_values(
        self, applies_to: str, owner_id: int, fields: Mapping[str, Any]
    ) -> None:
        """Delete every value of the owner, then insert ``fields``. Flushes only."""
        model, owner_column = self._value_model(applies_to)
        await self.db.execute(
            delete(model).where(getattr(model, owner_column) == owner_id)
        )
        for field_name, value in fields.items():
            field = await self.get_or_create_field(field_name, applies_to, value)
            self.db.add(
                model(
                    **{owner_column: owner_id},
                    field_id=field.id,
                    value=encode_value(value),
                )
            )
        await self.db.flush()
