"""
Encoding of user-defined custom field values.

Values are stored as JSON text next to a ``CustomField`` definition whose
``data_type`` is inferred from the first value written for that name.
"""

import json
from typing import Any

from ..models.enums import CustomFieldDataType


def infer_data_type(value: Any) -> str:
    # bool is an int subclass, so it has to be checked first
    if isinstance(value, bool):
        return CustomFieldDataType.BOOLEAN.value
    if isinstance(value, (int, float)):
        return CustomFieldDataType.NUMBER.value
    if isinstance(value, (dict, list)):
        return CustomFieldDataType.JSON.value
    return CustomFieldDataType.TEXT.value


def encode_value(value: Any) -> str:
    return json.dumps(value, default=str)


def decode_value(raw: str) -> Any:
    """Inverse of :func:`encode_value`; legacy non-JSON text is returned as-is."""
    try:
        return json.loads(raw)
    except (TypeError, ValueError):
        return raw
