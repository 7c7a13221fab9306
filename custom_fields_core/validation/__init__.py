"""Pure validation of custom field values. No I/O happens in this package."""

from .custom_fields_validator import validate_custom_fields
from .field_value_validator import (
    VALUE_CHECKERS,
    is_canonical_iso_string,
    to_iso_string,
    validate_value,
)

__all__ = [
    "VALUE_CHECKERS",
    "is_canonical_iso_string",
    "to_iso_string",
    "validate_custom_fields",
    "validate_value",
]
