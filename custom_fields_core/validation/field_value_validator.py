"""
Per-value type conformance for custom fields.

Each DataType has exactly one checker in `VALUE_CHECKERS`. A checker receives
the field definition and a non-null value and returns an error message or
None. The table is checked against DataType at import time, so adding a data
type without a checker fails loudly instead of silently accepting values.
"""

import math
import re
from datetime import datetime, timezone
from typing import AbstractSet, Any, Callable, Dict, Optional
from urllib.parse import urlsplit

from ..enums import DataType
from ..exceptions import ErrorCode, ServiceError
from ..schemas.field_definition_schema import FieldDefinitionRead
from ..schemas.validation_schema import FieldValidationError

EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
PHONE_PATTERN = re.compile(r"\+?[\d\s\-()]+")

ValueChecker = Callable[[FieldDefinitionRead, Any], Optional[str]]


def field_path(field_key: str) -> str:
    return f"customFields.{field_key}"


def to_iso_string(value: datetime) -> str:
    """
    Render a datetime in the canonical stored form, e.g. 2024-01-15T00:00:00.000Z.

    Naive datetimes are taken to be UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return (
        f"{value.year:04d}-{value.month:02d}-{value.day:02d}"
        f"T{value.hour:02d}:{value.minute:02d}:{value.second:02d}"
        f".{value.microsecond // 1000:03d}Z"
    )


def is_canonical_iso_string(value: str) -> bool:
    """True only if value parses and re-renders to the identical string."""
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return False
    return to_iso_string(parsed) == value


def is_valid_email(value: str) -> bool:
    return EMAIL_PATTERN.fullmatch(value) is not None


def is_valid_phone(value: str) -> bool:
    return PHONE_PATTERN.fullmatch(value) is not None


def is_valid_url(value: str) -> bool:
    try:
        parts = urlsplit(value)
    except ValueError:
        return False
    return bool(parts.scheme and parts.netloc)


def _is_number(value: Any) -> bool:
    # bool is an int subclass but never a number here
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    # Arbitrarily large ints are finite and may not convert to float
    if isinstance(value, int):
        return True
    return math.isfinite(value)


def _active_keys(field: FieldDefinitionRead) -> AbstractSet[str]:
    if field.option_set is None:
        return frozenset()
    return field.option_set.active_option_keys()


def _check_string(field: FieldDefinitionRead, value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return "Expected string"
    return None


def _check_number(field: FieldDefinitionRead, value: Any) -> Optional[str]:
    if not _is_number(value):
        return "Expected number"
    return None


def _check_boolean(field: FieldDefinitionRead, value: Any) -> Optional[str]:
    if not isinstance(value, bool):
        return "Expected boolean"
    return None


def _check_email(field: FieldDefinitionRead, value: Any) -> Optional[str]:
    if not isinstance(value, str) or not is_valid_email(value):
        return "Expected valid email"
    return None


def _check_phone(field: FieldDefinitionRead, value: Any) -> Optional[str]:
    if not isinstance(value, str) or not is_valid_phone(value):
        return "Expected valid phone number"
    return None


def _check_url(field: FieldDefinitionRead, value: Any) -> Optional[str]:
    if not isinstance(value, str) or not is_valid_url(value):
        return "Expected valid URL"
    return None


def _check_iso_date(field: FieldDefinitionRead, value: Any) -> Optional[str]:
    if not isinstance(value, str) or not is_canonical_iso_string(value):
        return "Expected valid ISO date string"
    return None


def _check_json(field: FieldDefinitionRead, value: Any) -> Optional[str]:
    if isinstance(value, str) or (isinstance(value, (int, float)) and not isinstance(value, bool)):
        return "Expected object or array"
    return None


def _check_enum(field: FieldDefinitionRead, value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return "Expected string option key"
    valid_keys = _active_keys(field)
    if value not in valid_keys:
        return f"Invalid option. Must be one of: {', '.join(valid_keys)}"
    return None


def _check_multienum(field: FieldDefinitionRead, value: Any) -> Optional[str]:
    if not isinstance(value, list):
        return "Expected array of option keys"
    valid_keys = _active_keys(field)
    for item in value:
        if not isinstance(item, str) or item not in valid_keys:
            return f"Invalid option: {item}. Must be one of: {', '.join(valid_keys)}"
    return None


VALUE_CHECKERS: Dict[DataType, ValueChecker] = {
    DataType.STRING: _check_string,
    DataType.LONGTEXT: _check_string,
    DataType.NUMBER: _check_number,
    DataType.CURRENCY: _check_number,
    DataType.BOOLEAN: _check_boolean,
    DataType.DATE: _check_iso_date,
    DataType.DATETIME: _check_iso_date,
    DataType.EMAIL: _check_email,
    DataType.PHONE: _check_phone,
    DataType.URL: _check_url,
    DataType.JSON: _check_json,
    DataType.ENUM: _check_enum,
    DataType.MULTIENUM: _check_multienum,
}


def _ensure_every_data_type_has_checker() -> None:
    missing = [data_type.value for data_type in DataType if data_type not in VALUE_CHECKERS]
    if missing:
        raise ServiceError(
            f"No value checker registered for data types: {', '.join(missing)}",
            error_code=ErrorCode.CONFIGURATION_ERROR,
            operation="field_value_validator",
        )


_ensure_every_data_type_has_checker()


def validate_value(field: FieldDefinitionRead, value: Any) -> Optional[FieldValidationError]:
    """
    Check one candidate value against its field definition.

    Args:
        field: The field definition, with its option set resolved for enum types
        value: The candidate value; None means absent

    Returns:
        A FieldValidationError, or None when the value is acceptable
    """
    path = field_path(field.field_key)

    if field.required and (value is None or value == ""):
        return FieldValidationError(path=path, message=f"{field.label} is required")

    if value is None:
        return None

    data_type = field.data_type
    checker = VALUE_CHECKERS.get(data_type) if isinstance(data_type, DataType) else None
    if checker is None:
        return FieldValidationError(path=path, message=f"Unsupported data type: {data_type}")

    message = checker(field, value)
    if message is not None:
        return FieldValidationError(path=path, message=message)
    return None
