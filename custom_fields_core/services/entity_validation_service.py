"""
Entity validation: the gate every entity create/update must pass.

Loads the tenant's field definitions and the built-in vocabularies that back
enumerated entity attributes, then merges every problem into one verdict.
Nothing is persisted here; callers must not write when the result is invalid.
"""

from typing import Any, Dict, List, Optional, Union

from sqlalchemy.orm import Session

from ..config import get_config
from ..constants import BuiltinOptionSet
from ..context.operation_context import operation
from ..enums import EntityType
from ..exceptions import ErrorCode, ValidationError
from ..schemas.field_definition_schema import coerce_entity_type
from ..schemas.validation_schema import (
    EntityValidationInput,
    EntityValidationResult,
    FieldValidationError,
)
from ..utils.logger import ContextAwareLogger
from ..validation import validate_custom_fields
from .base_service import SessionManagedService
from .field_definition_service import FieldDefinitionService
from .option_set_service import OptionSetService


class EntityValidationService(SessionManagedService):
    """
    Validates entity payloads against a tenant's schema customizations.
    """

    def __init__(
        self,
        session: Optional[Session] = None,
        logger: Optional[ContextAwareLogger] = None,
        field_definition_service: Optional[FieldDefinitionService] = None,
        option_set_service: Optional[OptionSetService] = None,
    ):
        super().__init__(session=session, logger=logger)
        self.field_definition_service = field_definition_service or FieldDefinitionService(
            session=self.session, logger=self.logger
        )
        self.option_set_service = option_set_service or OptionSetService(
            session=self.session, logger=self.logger
        )

    def _check_builtin_value(
        self,
        tenant_id: str,
        option_set_name: BuiltinOptionSet,
        value: Optional[str],
        path: str,
        noun: str,
    ) -> Optional[FieldValidationError]:
        valid_keys = self.option_set_service.get_active_option_keys(
            tenant_id, option_set_name.value
        )
        if value in valid_keys:
            return None
        return FieldValidationError(
            path=path, message=f"Invalid {noun}. Must be one of: {', '.join(valid_keys)}"
        )

    @operation()
    def validate_entity(
        self, validation_input: Union[EntityValidationInput, Dict[str, Any]]
    ) -> EntityValidationResult:
        """
        Decide whether an entity payload may be written.

        Steps run in order and every problem is collected:
        1. custom fields against the live definitions of the entity type
        2. catalogType against catalog_item_type, for catalog items
        3. quoteStatus against quote_status, for quotes

        An unknown entity type is reported at path `entityType` and nothing
        is loaded.

        Args:
            validation_input: Tenant, entity type and the values to check

        Returns:
            EntityValidationResult with validated_custom_fields set only when valid
        """
        validation_input = self._coerce_schema(EntityValidationInput, validation_input)
        tenant_id = validation_input.tenant_id

        entity_type = coerce_entity_type(validation_input.entity_type)
        if entity_type is None:
            result = EntityValidationResult(
                valid=False,
                errors=[FieldValidationError(path="entityType", message="Invalid entity type")],
            )
            self._log_rejection(tenant_id, str(validation_input.entity_type), result)
            return result

        errors: List[FieldValidationError] = []

        definitions = self.field_definition_service.load_field_definitions(tenant_id, entity_type)
        custom_fields_result = validate_custom_fields(validation_input.custom_fields, definitions)
        errors.extend(custom_fields_result.errors)

        supplied = validation_input.model_fields_set

        if entity_type == EntityType.CATALOG_ITEM and "catalog_type" in supplied:
            error = self._check_builtin_value(
                tenant_id,
                BuiltinOptionSet.CATALOG_ITEM_TYPE,
                validation_input.catalog_type,
                path="type",
                noun="catalog type",
            )
            if error is not None:
                errors.append(error)

        if entity_type == EntityType.QUOTE and "quote_status" in supplied:
            error = self._check_builtin_value(
                tenant_id,
                BuiltinOptionSet.QUOTE_STATUS,
                validation_input.quote_status,
                path="status",
                noun="quote status",
            )
            if error is not None:
                errors.append(error)

        valid = not errors
        result = EntityValidationResult(
            valid=valid,
            errors=errors,
            validated_custom_fields=custom_fields_result.validated_data if valid else None,
        )
        if not valid:
            self._log_rejection(tenant_id, entity_type.value, result)
        return result

    @operation()
    def ensure_valid(
        self, validation_input: Union[EntityValidationInput, Dict[str, Any]]
    ) -> Dict[str, Any]:
        """
        Validate and return the sanitized custom fields, or raise.

        Raises:
            ValidationError: With the full error list under `errors` in its context
        """
        result = self.validate_entity(validation_input)
        if not result.valid:
            raise ValidationError(
                f"Entity validation failed with {len(result.errors)} error(s)",
                error_code=ErrorCode.CONSTRAINT_VIOLATION,
                errors=[error.model_dump() for error in result.errors],
            )
        return result.validated_custom_fields or {}

    def _log_rejection(
        self, tenant_id: str, entity_type: str, result: EntityValidationResult
    ) -> None:
        if not get_config().features.log_validation_failures:
            return
        self.logger.info(
            "Entity payload rejected",
            extra={
                "tenant_id": tenant_id,
                "entity_type": entity_type,
                "error_count": len(result.errors),
                "paths": [error.path for error in result.errors],
            },
        )
