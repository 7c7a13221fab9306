"""
Tenant-scoped custom fields and option sets for CRM entities.

Services cover option sets, field definitions and settings; the validation
package checks dynamic payloads against a tenant's definitions.
"""

from .enums import DataType, EntityType
from .exceptions import (
    BaseError,
    ConflictError,
    ErrorCode,
    NotFoundError,
    ServiceError,
    StorageError,
    ValidationError,
)
from .services import (
    EntityValidationService,
    FieldDefinitionService,
    OptionSetService,
    SettingsService,
)
from .validation import validate_custom_fields, validate_value

__all__ = [
    "BaseError",
    "ConflictError",
    "DataType",
    "EntityType",
    "EntityValidationService",
    "ErrorCode",
    "FieldDefinitionService",
    "NotFoundError",
    "OptionSetService",
    "ServiceError",
    "SettingsService",
    "StorageError",
    "ValidationError",
    "validate_custom_fields",
    "validate_value",
]
