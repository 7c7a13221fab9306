"""
Tests for per-value validation of custom fields.

Pure functions only; no database.
"""

import json
import math

import pytest

from custom_fields_core.enums import DataType
from custom_fields_core.validation import VALUE_CHECKERS, to_iso_string, validate_value
from tests.fixtures.factories import build_field, build_option_set

# A value each data type accepts
VALID_VALUES = {
    "string": "hello",
    "longtext": "a much longer\nmultiline note",
    "number": 42,
    "currency": 19.99,
    "boolean": False,
    "date": "2024-01-15T00:00:00.000Z",
    "datetime": "2024-01-15T13:45:30.250Z",
    "email": "jane@example.com",
    "phone": "+1 (555) 123-4567",
    "url": "https://example.com/path?q=1",
    "json": {"nested": [1, 2, 3]},
    "enum": "na",
    "multienum": ["na", "apac"],
}


def _field(data_type: str, required: bool = False):
    option_set = None
    if data_type in ("enum", "multienum"):
        option_set = build_option_set([("na", True), ("apac", True), ("eu", False)])
    return build_field(
        field_key="value", data_type=data_type, required=required, label="Value",
        option_set=option_set,
    )


class TestDispatchTable:
    """The checker table covers the whole DataType enum."""

    def test_every_data_type_has_a_checker(self):
        assert set(VALUE_CHECKERS) == set(DataType)

    def test_valid_values_cover_every_data_type(self):
        assert set(VALID_VALUES) == {data_type.value for data_type in DataType}


class TestRequiredAndAbsent:
    """Required and optional handling, independent of data type."""

    @pytest.mark.parametrize("data_type", [data_type.value for data_type in DataType])
    @pytest.mark.parametrize("missing", [None, ""])
    def test_required_field_rejects_missing_value(self, data_type, missing):
        error = validate_value(_field(data_type, required=True), missing)

        assert error is not None
        assert error.path == "customFields.value"
        assert error.message == "Value is required"

    @pytest.mark.parametrize("data_type", [data_type.value for data_type in DataType])
    def test_required_field_accepts_valid_value(self, data_type):
        assert validate_value(_field(data_type, required=True), VALID_VALUES[data_type]) is None

    @pytest.mark.parametrize("data_type", [data_type.value for data_type in DataType])
    def test_optional_field_accepts_none(self, data_type):
        assert validate_value(_field(data_type), None) is None

    def test_required_boolean_accepts_false(self):
        assert validate_value(_field("boolean", required=True), False) is None

    def test_required_number_accepts_zero(self):
        assert validate_value(_field("number", required=True), 0) is None


class TestTypeChecks:
    """Type conformance per data type."""

    @pytest.mark.parametrize(
        "data_type,value,message",
        [
            ("string", 5, "Expected string"),
            ("longtext", ["a"], "Expected string"),
            ("number", "50", "Expected number"),
            ("number", True, "Expected number"),
            ("number", math.nan, "Expected number"),
            ("currency", math.inf, "Expected number"),
            ("boolean", "true", "Expected boolean"),
            ("boolean", 1, "Expected boolean"),
            ("email", "not-an-email", "Expected valid email"),
            ("email", "jane@example", "Expected valid email"),
            ("email", "ja ne@example.com", "Expected valid email"),
            ("email", "jane@example.com\n", "Expected valid email"),
            ("email", "\njane@example.com", "Expected valid email"),
            ("email", 7, "Expected valid email"),
            ("phone", "555-CALL-NOW", "Expected valid phone number"),
            ("phone", "555+123", "Expected valid phone number"),
            ("phone", "555-1234x", "Expected valid phone number"),
            ("url", "example.com", "Expected valid URL"),
            ("url", "not a url", "Expected valid URL"),
            ("url", 123, "Expected valid URL"),
            ("date", "Jan 15 2024", "Expected valid ISO date string"),
            ("date", "2024-01-15", "Expected valid ISO date string"),
            ("datetime", "2024-01-15T13:45:30Z", "Expected valid ISO date string"),
            ("datetime", "2024-01-15T13:45:30.000+01:00", "Expected valid ISO date string"),
            ("datetime", 1705276800000, "Expected valid ISO date string"),
            ("json", "{\"a\": 1}", "Expected object or array"),
            ("json", 12, "Expected object or array"),
            ("enum", 3, "Expected string option key"),
            ("multienum", "na", "Expected array of option keys"),
        ],
    )
    def test_rejects_wrong_type(self, data_type, value, message):
        error = validate_value(_field(data_type), value)

        assert error is not None
        assert error.path == "customFields.value"
        assert error.message == message

    @pytest.mark.parametrize("value", [12, 12.5, -3, 0.0])
    def test_number_accepts_finite_numbers(self, value):
        assert validate_value(_field("number"), value) is None

    @pytest.mark.parametrize("data_type", ["number", "currency"])
    def test_number_accepts_ints_too_large_for_float(self, data_type):
        huge = json.loads("1" + "0" * 400)

        assert validate_value(_field(data_type), huge) is None
        assert validate_value(_field(data_type), -huge) is None

    @pytest.mark.parametrize("value", [{}, [], [{"a": 1}], True])
    def test_json_accepts_non_primitive_values(self, value):
        assert validate_value(_field("json"), value) is None

    @pytest.mark.parametrize("value", ["5551234567", "+44 20 7946 0958", "(555) 123-4567"])
    def test_phone_accepts_loose_formats(self, value):
        assert validate_value(_field("phone"), value) is None

    @pytest.mark.parametrize("value", ["http://localhost:8080", "ftp://files.example.com/a.txt"])
    def test_url_accepts_absolute_urls(self, value):
        assert validate_value(_field("url"), value) is None

    def test_empty_string_is_valid_for_optional_string(self):
        assert validate_value(_field("string"), "") is None

    def test_unknown_data_type_is_reported(self):
        field = build_field(field_key="legacy", data_type="geo_point")

        error = validate_value(field, "52.5,13.4")

        assert error.path == "customFields.legacy"
        assert error.message == "Unsupported data type: geo_point"


class TestIsoDateStrictness:
    """Dates must already be in canonical form."""

    def test_accepts_canonical_date(self):
        assert validate_value(_field("date"), "2024-01-15T00:00:00.000Z") is None

    @pytest.mark.parametrize("value", ["Jan 15 2024", "2024-01-15", "2024-13-01T00:00:00.000Z"])
    def test_rejects_non_canonical_strings(self, value):
        error = validate_value(_field("date"), value)

        assert error.message == "Expected valid ISO date string"

    def test_to_iso_string_renders_milliseconds_in_utc(self):
        from datetime import datetime, timedelta, timezone

        value = datetime(2024, 1, 15, 14, 0, 0, 123456, tzinfo=timezone(timedelta(hours=1)))

        assert to_iso_string(value) == "2024-01-15T13:00:00.123Z"


class TestEnumMembership:
    """Enum and multienum checks use only active options."""

    @pytest.fixture
    def region_field(self):
        option_set = build_option_set([("na", True), ("apac", True), ("eu", False)])
        return build_field(field_key="region", data_type="enum", option_set=option_set)

    @pytest.mark.parametrize("value", ["na", "apac"])
    def test_accepts_active_keys(self, region_field, value):
        assert validate_value(region_field, value) is None

    @pytest.mark.parametrize("value", ["eu", "latam"])
    def test_inactive_and_unknown_keys_get_identical_message(self, region_field, value):
        error = validate_value(region_field, value)

        assert error.path == "customFields.region"
        assert error.message == "Invalid option. Must be one of: na, apac"

    def test_only_active_option_is_listed(self):
        option_set = build_option_set([("na", True), ("eu", False)])
        field = build_field(field_key="region", data_type="enum", option_set=option_set)

        error = validate_value(field, "eu")

        assert error.message == "Invalid option. Must be one of: na"

    def test_enum_without_option_set_accepts_nothing(self):
        field = build_field(field_key="region", data_type="enum")

        error = validate_value(field, "na")

        assert error.message == "Invalid option. Must be one of: "

    def test_multienum_reports_first_invalid_item(self, region_field):
        field = region_field.model_copy(update={"data_type": DataType.MULTIENUM})

        error = validate_value(field, ["na", "eu", "latam"])

        assert error.message == "Invalid option: eu. Must be one of: na, apac"

    def test_multienum_rejects_non_string_items(self, region_field):
        field = region_field.model_copy(update={"data_type": DataType.MULTIENUM})

        error = validate_value(field, ["na", 3])

        assert error.message == "Invalid option: 3. Must be one of: na, apac"

    def test_multienum_accepts_empty_list(self, region_field):
        field = region_field.model_copy(update={"data_type": DataType.MULTIENUM})

        assert validate_value(field, []) is None
