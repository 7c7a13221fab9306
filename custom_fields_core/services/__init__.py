"""Services for option sets, field definitions, settings and entity validation."""

from .base_service import SessionManagedService
from .entity_validation_service import EntityValidationService
from .field_definition_service import FieldDefinitionService
from .option_set_service import OptionSetService
from .settings_service import SettingsService

__all__ = [
    "EntityValidationService",
    "FieldDefinitionService",
    "OptionSetService",
    "SessionManagedService",
    "SettingsService",
]
