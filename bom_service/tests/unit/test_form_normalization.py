import threading

import pytest

from bom_service.app.utils.form_normalization import normalize_part_form


class TestNormalizePartForm:
    """Unit tests for part form normalization."""

    def test_weight_without_unit_is_cleared(self):
        result = normalize_part_form({"weight": 10, "weight_unit": ""})

        assert result["weight"] is None
        assert result["weight_unit"] is None

    def test_unit_without_weight_is_cleared(self):
        result = normalize_part_form({"weight": "", "weight_unit": "g"})

        assert result["weight"] is None
        assert result["weight_unit"] is None

    def test_weight_with_unit_is_kept(self):
        result = normalize_part_form({"weight": 10, "weight_unit": "g"})

        assert result["weight"] == 10
        assert result["weight_unit"] == "g"

    def test_dimensions_are_completed(self):
        result = normalize_part_form(
            {"dimensions": {"length": 1}, "dimensions_unit": "mm"}
        )

        assert result["dimensions"] == {"length": 1, "width": None, "height": None}
        assert result["dimensions_unit"] == "mm"

    def test_dimensions_from_json_string_keep_extra_keys(self):
        result = normalize_part_form(
            {"dimensions": '{"height": 2, "pitch": 0.5}', "dimensions_unit": "mm"}
        )

        assert result["dimensions"] == {
            "length": None,
            "width": None,
            "height": 2,
            "pitch": 0.5,
        }

    def test_empty_dimensions_clear_the_unit(self):
        result = normalize_part_form({"dimensions": {}, "dimensions_unit": "mm"})

        assert result["dimensions"] is None
        assert result["dimensions_unit"] is None

    def test_temperatures_share_one_unit(self):
        result = normalize_part_form(
            {"operating_temperature_min": -40, "temperature_unit": "C"}
        )

        assert result["operating_temperature_min"] == -40
        assert result["temperature_unit"] == "C"

        cleared = normalize_part_form(
            {"operating_temperature_min": -40, "operating_temperature_max": 85}
        )
        assert cleared["operating_temperature_min"] is None
        assert cleared["operating_temperature_max"] is None

    def test_empty_enum_values_become_none(self):
        result = normalize_part_form({"package_type": "", "mounting_style": ""})

        assert result["package_type"] is None
        assert result["mounting_style"] is None

    def test_long_description_copied_into_full_description(self):
        result = normalize_part_form({"long_description": "A long text"})

        assert result["full_description"] == "A long text"

    def test_full_description_not_overwritten(self):
        result = normalize_part_form(
            {"full_description": "Kept", "long_description": "Ignored"}
        )

        assert result["full_description"] == "Kept"

    @pytest.mark.parametrize(
        "value,expected",
        [
            (None, ""),
            ({}, ""),
            ({"a": 1}, '{"a": 1}'),
            (42, "42"),
            ("text", "text"),
        ],
    )
    def test_text_fields_become_strings(self, value, expected):
        assert normalize_part_form({"notes": value})["notes"] == expected

    @pytest.mark.parametrize(
        "value,expected",
        [
            (None, {}),
            ("", {}),
            ('{"r": "10k"}', {"r": "10k"}),
            ("not json", {}),
            ("[1, 2]", {"value": "[1, 2]"}),
            (7, {"value": 7}),
        ],
    )
    def test_json_fields_become_objects(self, value, expected):
        result = normalize_part_form({"electrical_properties": value})

        assert result["electrical_properties"] == expected

    def test_absent_fields_are_not_added(self):
        assert normalize_part_form({"name": "Resistor"}) == {"name": "Resistor"}

    def test_input_is_not_mutated(self):
        form = {"dimensions": {"length": 1}, "dimensions_unit": "mm"}

        normalize_part_form(form)

        assert form == {"dimensions": {"length": 1}, "dimensions_unit": "mm"}

    def test_non_mapping_input_yields_empty_dict(self):
        assert normalize_part_form(["not", "a", "form"]) == {}
        assert normalize_part_form(None) == {}

    def test_unserializable_text_field_falls_back_to_str(self):
        value = {(1, 2): "x"}

        result = normalize_part_form({"notes": value})

        assert result["notes"] == str(value)
        assert normalize_part_form(result) == result

    def test_uncopyable_values_do_not_raise(self):
        lock = threading.Lock()

        result = normalize_part_form({"name": "r", "extra": lock, "notes": None})

        assert result["name"] == "r"
        assert result["extra"] is lock
        assert result["notes"] == ""

    @pytest.mark.parametrize(
        "form",
        [
            {"weight": 10, "weight_unit": ""},
            {"dimensions": {"length": 1}, "dimensions_unit": "mm"},
            {"dimensions": {}, "dimensions_unit": "mm"},
            {"dimensions": "garbage", "dimensions_unit": "mm"},
            {"notes": {"a": 1}, "properties": "[1]", "package_type": ""},
            {"long_description": "x", "tolerance": 5, "tolerance_unit": "%"},
        ],
    )
    def test_normalization_is_idempotent(self, form):
        once = normalize_part_form(form)

        assert normalize_part_form(once) == once
