"""Pydantic schemas for option sets, field definitions, settings and validation results."""

from .field_definition_schema import (
    FieldDefinitionCreate,
    FieldDefinitionRead,
    FieldDefinitionUpdate,
    FieldUiConfig,
    coerce_data_type,
    coerce_entity_type,
)
from .option_set_schema import (
    OptionSetOptionCreate,
    OptionSetOptionRead,
    OptionSetOptionUpdate,
    OptionSetRead,
    OptionSetWithOptions,
)
from .settings_schema import CatalogSettings, CatalogType, QuoteSettings, QuoteStatus, UnitType
from .validation_schema import (
    EntityValidationInput,
    EntityValidationResult,
    FieldValidationError,
    ValidationResult,
)

__all__ = [
    # Field definitions
    "FieldDefinitionCreate",
    "FieldDefinitionRead",
    "FieldDefinitionUpdate",
    "FieldUiConfig",
    "coerce_data_type",
    "coerce_entity_type",
    # Option sets
    "OptionSetOptionCreate",
    "OptionSetOptionRead",
    "OptionSetOptionUpdate",
    "OptionSetRead",
    "OptionSetWithOptions",
    # Settings
    "CatalogSettings",
    "CatalogType",
    "QuoteSettings",
    "QuoteStatus",
    "UnitType",
    # Validation
    "EntityValidationInput",
    "EntityValidationResult",
    "FieldValidationError",
    "ValidationResult",
]
