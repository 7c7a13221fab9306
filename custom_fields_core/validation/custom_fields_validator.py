"""
Validation of a whole custom-fields payload against a tenant's definitions.
"""

from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..schemas.field_definition_schema import FieldDefinitionRead
from ..schemas.validation_schema import FieldValidationError, ValidationResult
from .field_value_validator import field_path, validate_value


def validate_custom_fields(
    candidate: Optional[Mapping[str, Any]],
    definitions: Sequence[FieldDefinitionRead],
) -> ValidationResult:
    """
    Validate every defined field and reject keys with no definition.

    Unknown-key errors come first, in candidate order, followed by
    definition errors in the order of `definitions`. Only keys present in the
    candidate are copied into `validated_data`; absent fields are not defaulted.

    Args:
        candidate: Submitted custom field values; None is treated as empty
        definitions: Live field definitions for the entity type

    Returns:
        ValidationResult with validated_data set only when valid
    """
    candidate = candidate or {}
    errors: List[FieldValidationError] = []
    validated_data: Dict[str, Any] = {}

    defined_keys = {definition.field_key for definition in definitions}
    for key in candidate:
        if key not in defined_keys:
            errors.append(
                FieldValidationError(path=field_path(key), message="Unknown custom field")
            )

    for definition in definitions:
        value = candidate.get(definition.field_key)
        error = validate_value(definition, value)
        if error is not None:
            errors.append(error)
        elif definition.field_key in candidate:
            validated_data[definition.field_key] = value

    valid = not errors
    return ValidationResult(
        valid=valid,
        errors=errors,
        validated_data=validated_data if valid else None,
    )
