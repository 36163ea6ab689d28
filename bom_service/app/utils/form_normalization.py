"""
Part form normalization.

Reconciles loosely typed part form payloads with the shape the part tables
expect. ``normalize_part_form`` is pure and total: it never raises, never
mutates its input, and applying it twice gives the same result as once.
"""

import copy
import json
from typing import Any, Dict, Mapping

from .logging import setup_bom_logging as setup_logging

logger = setup_logging("form_normalization")

ENUM_FIELDS = (
    "weight_unit",
    "dimensions_unit",
    "temperature_unit",
    "tolerance_unit",
    "package_type",
    "package_case",
    "mounting_style",
    "termination_style",
)

STRING_FIELDS = (
    "full_description",
    "functional_description",
    "notes",
    "revision_notes",
    "long_description",
)

JSON_FIELDS = (
    "technical_specifications",
    "properties",
    "electrical_properties",
    "mechanical_properties",
    "thermal_properties",
    "material_composition",
    "environmental_data",
)

TEMPERATURE_FIELDS = (
    "operating_temperature_min",
    "operating_temperature_max",
    "storage_temperature_min",
    "storage_temperature_max",
)

# value field(s) -> unit field
PAIRED_FIELDS = (
    (("weight",), "weight_unit"),
    (("tolerance",), "tolerance_unit"),
    (("dimensions",), "dimensions_unit"),
    (TEMPERATURE_FIELDS, "temperature_unit"),
)

DIMENSION_KEYS = ("length", "width", "height")


def _is_absent(value: Any) -> bool:
    """Missing, ``None``, an empty string or an empty object."""
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, Mapping) and len(value) == 0:
        return True
    return False


def _copy_long_description(form: Dict[str, Any]) -> None:
    if _is_absent(form.get("full_description")) and not _is_absent(
        form.get("long_description")
    ):
        form["full_description"] = form["long_description"]


def _clear_empty_enums(form: Dict[str, Any]) -> None:
    for field in ENUM_FIELDS:
        if field in form and form[field] == "":
            form[field] = None


def _reconcile_pairs(form: Dict[str, Any]) -> None:
    for value_fields, unit_field in PAIRED_FIELDS:
        present = [field for field in value_fields if field in form]
        if not present and unit_field not in form:
            continue

        has_value = any(not _is_absent(form.get(field)) for field in value_fields)
        has_unit = not _is_absent(form.get(unit_field))
        if has_value and has_unit:
            continue

        # a value is meaningless without its unit and vice versa
        if unit_field in form:
            form[unit_field] = None
        for field in present:
            form[field] = None


def _to_text(field: str, value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, Mapping) and not value:
        return ""
    try:
        return json.dumps(value, default=str)
    except (TypeError, ValueError):
        logger.warning(
            "Text form field is not JSON serializable",
            extra={"field": field, "value_type": type(value).__name__},
        )
        return str(value)


def _normalize_strings(form: Dict[str, Any]) -> None:
    for field in STRING_FIELDS:
        if field in form:
            form[field] = _to_text(field, form[field])


def _to_json_object(field: str, value: Any) -> Dict[str, Any]:
    if value is None:
        return {}
    if isinstance(value, str):
        if not value.strip():
            return {}
        try:
            parsed = json.loads(value)
        except ValueError:
            logger.warning(
                "Discarding unparsable JSON form field",
                extra={"field": field, "value_length": len(value)},
            )
            return {}
    else:
        parsed = value

    if isinstance(parsed, Mapping):
        return dict(parsed)
    return {"value": value}


def _normalize_json_fields(form: Dict[str, Any]) -> None:
    for field in JSON_FIELDS:
        if field in form:
            form[field] = _to_json_object(field, form[field])


def _normalize_dimensions(form: Dict[str, Any]) -> None:
    if "dimensions" not in form or form["dimensions"] is None:
        return

    raw = form["dimensions"]
    if isinstance(raw, str):
        try:
            raw = json.loads(raw) if raw.strip() else {}
        except ValueError:
            logger.warning("Discarding unparsable dimensions form field")
            raw = None

    source = raw if isinstance(raw, Mapping) else {}
    dimensions = {key: source.get(key) for key in DIMENSION_KEYS}
    for key, value in source.items():
        if key not in dimensions:
            dimensions[key] = value
    form["dimensions"] = dimensions


def _copy_form(data: Mapping[str, Any]) -> Dict[str, Any]:
    try:
        return copy.deepcopy(dict(data))
    except (TypeError, ValueError, copy.Error):
        logger.warning("Part form payload cannot be deep-copied, copying shallowly")
        return dict(data)


def normalize_part_form(data: Any) -> Dict[str, Any]:
    """Return a normalized copy of a part form payload.

    Rules, applied in order:

    1. ``long_description`` is copied into an absent ``full_description``.
    2. Empty-string enum values become ``None``.
    3. A value without a unit loses its value; a unit without a value is cleared.
    4. Free-text fields are coerced to strings.
    5. JSON property fields are coerced to objects.
    6. ``dimensions`` always carries ``length``, ``width`` and ``height``.

    Non-mapping input yields an empty dict.
    """
    if not isinstance(data, Mapping):
        logger.warning(
            "Part form payload is not a mapping",
            extra={"payload_type": type(data).__name__},
        )
        return {}

    form = _copy_form(data)
    _copy_long_description(form)
    _clear_empty_enums(form)
    _reconcile_pairs(form)
    _normalize_strings(form)
    _normalize_json_fields(form)
    _normalize_dimensions(form)
    return form
