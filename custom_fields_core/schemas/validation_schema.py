"""
Schemas for the results of custom-field and entity validation.

These are plain data carriers. Field-level problems are reported as lists of
FieldValidationError so a form can show every problem at once.
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from ..enums import EntityType


class FieldValidationError(BaseModel):
    """One problem with one value, located by a dotted path."""

    path: str
    message: str

    model_config = ConfigDict(frozen=True)


class ValidationResult(BaseModel):
    """
    Outcome of validating a custom-fields payload.

    `validated_data` is set only when `valid` is True.
    """

    valid: bool
    errors: List[FieldValidationError] = Field(default_factory=list)
    validated_data: Optional[Dict[str, Any]] = None


class EntityValidationInput(BaseModel):
    """Everything needed to decide whether an entity write may proceed."""

    tenant_id: str = Field(..., min_length=1, max_length=100)
    entity_type: Union[EntityType, str] = Field(union_mode="left_to_right")
    custom_fields: Optional[Dict[str, Any]] = None
    # Checked whenever present, even as None; leave unset to skip the check
    catalog_type: Optional[str] = None
    quote_status: Optional[str] = None

    model_config = ConfigDict(extra="forbid")


class EntityValidationResult(BaseModel):
    """Merged verdict for an entity write."""

    valid: bool
    errors: List[FieldValidationError] = Field(default_factory=list)
    validated_custom_fields: Optional[Dict[str, Any]] = None
