"""
Field definition service with direct SQLAlchemy access.

A field definition describes one custom attribute a tenant adds to an entity
type. `field_key` and `data_type` are fixed at creation. Definitions are
archived, never deleted, and an archived key may be reused by a new
definition.
"""

from typing import Any, Dict, List, Union

from sqlalchemy import exists

from ..context.operation_context import operation
from ..db.db_field_definition_models import FieldDefinition
from ..db.db_option_set_models import OptionSet
from ..enums import DataType
from ..exceptions import ErrorCode, ValidationError, duplicate, not_found
from ..schemas.field_definition_schema import (
    FieldDefinitionCreate,
    FieldDefinitionRead,
    FieldDefinitionUpdate,
    FieldUiConfig,
    coerce_data_type,
    coerce_entity_type,
)
from .base_service import SessionManagedService
from .option_set_service import OptionSetService

# Create-time attributes and the names callers know them by
_REQUIRED_CREATE_FIELDS = (
    ("entity_type", "entityType"),
    ("field_key", "fieldKey"),
    ("label", "label"),
    ("data_type", "dataType"),
)

_NON_NULLABLE_UPDATE_FIELDS = ("label", "required", "searchable", "is_archived")


def _dump_ui_config(raw: Any) -> Any:
    ui_config = FieldUiConfig.parse(raw)
    return ui_config.model_dump(exclude_none=True) if ui_config is not None else None


class FieldDefinitionService(SessionManagedService):
    """
    Service for managing custom field definitions.
    """

    def _live_key_exists(self, tenant_id: str, entity_type: str, field_key: str) -> bool:
        return self.session.query(
            exists().where(
                FieldDefinition.tenant_id == tenant_id,
                FieldDefinition.entity_type == entity_type,
                FieldDefinition.field_key == field_key,
                FieldDefinition.is_archived.is_(False),
            )
        ).scalar()

    def _get_owned_definition(self, definition_id: str) -> FieldDefinition:
        tenant_id = self._current_tenant_id()
        definition = (
            self.session.query(FieldDefinition)
            .filter(FieldDefinition.id == definition_id, FieldDefinition.tenant_id == tenant_id)
            .first()
        )
        if definition is None:
            raise not_found("FieldDefinition", definition_id=definition_id)
        return definition

    @staticmethod
    def _conflict(definition: FieldDefinition, cause=None):
        return duplicate(
            "FieldDefinition",
            cause=cause,
            tenant_id=definition.tenant_id,
            entity_type=definition.entity_type,
            field_key=definition.field_key,
        )

    @operation()
    def load_field_definitions(self, tenant_id: str, entity_type: str) -> List[FieldDefinitionRead]:
        """
        Load the live definitions of an entity type, ordered by label.

        Enum and multienum definitions come with their option set resolved,
        options included and sorted.

        Raises:
            ValidationError: If entity_type is not a known entity type
        """
        self._require_tenant_id(tenant_id)
        resolved_type = coerce_entity_type(entity_type)
        if resolved_type is None:
            raise ValidationError(
                f"Invalid entity type: {entity_type}", field="entity_type", value=str(entity_type)
            )

        try:
            definitions = (
                self.session.query(FieldDefinition)
                .filter(
                    FieldDefinition.tenant_id == tenant_id,
                    FieldDefinition.entity_type == resolved_type.value,
                    FieldDefinition.is_archived.is_(False),
                )
                .order_by(FieldDefinition.label)
                .all()
            )

            needs_options = [
                definition
                for definition in definitions
                if definition.option_set_id
                and coerce_data_type(definition.data_type) in (DataType.ENUM, DataType.MULTIENUM)
            ]
            option_sets = OptionSetService(session=self.session).get_option_sets_by_ids(
                tenant_id, [definition.option_set_id for definition in needs_options]
            )

            results = []
            for definition in definitions:
                read = FieldDefinitionRead.model_validate(definition)
                if definition in needs_options:
                    read = read.model_copy(
                        update={"option_set": option_sets.get(definition.option_set_id)}
                    )
                results.append(read)

            self.logger.debug(
                "Loaded field definitions",
                extra={
                    "tenant_id": tenant_id,
                    "entity_type": resolved_type.value,
                    "count": len(results),
                },
            )
            return results
        except Exception as e:
            self._handle_service_exception("load_field_definitions", e)

    @operation()
    def create_field_definition(
        self,
        tenant_id: str,
        field_data: Union[FieldDefinitionCreate, Dict[str, Any]],
    ) -> FieldDefinitionRead:
        """
        Create a field definition.

        An option_set_id given for a type other than enum/multienum is dropped.

        Raises:
            ValidationError: If required attributes are missing, the entity or
                data type is unknown, an enum type has no option set, or
                ui_config is malformed
            NotFoundError: If option_set_id does not belong to the tenant
            ConflictError: If a live definition already uses the field key
        """
        self._require_tenant_id(tenant_id)
        field_data = self._coerce_schema(FieldDefinitionCreate, field_data)

        missing = [
            public_name
            for attr, public_name in _REQUIRED_CREATE_FIELDS
            if not (getattr(field_data, attr) or "").strip()
        ]
        if missing:
            raise ValidationError(
                f"Missing required fields: {', '.join(missing)}",
                error_code=ErrorCode.MISSING_REQUIRED,
                missing_fields=missing,
            )

        entity_type = coerce_entity_type(field_data.entity_type)
        if entity_type is None:
            raise ValidationError(
                f"Invalid entity type: {field_data.entity_type}",
                field="entity_type",
                value=field_data.entity_type,
            )
        data_type = coerce_data_type(field_data.data_type)
        if data_type is None:
            raise ValidationError(
                f"Unsupported data type: {field_data.data_type}",
                field="data_type",
                value=field_data.data_type,
            )
        if data_type.requires_option_set and not field_data.option_set_id:
            raise ValidationError(
                "optionSetId required for enum/multienum fields",
                field="option_set_id",
                error_code=ErrorCode.MISSING_REQUIRED,
            )
        ui_config = _dump_ui_config(field_data.ui_config)

        try:
            option_set_id = field_data.option_set_id if data_type.requires_option_set else None
            if option_set_id and not self.session.query(
                exists().where(OptionSet.id == option_set_id, OptionSet.tenant_id == tenant_id)
            ).scalar():
                raise not_found("OptionSet", option_set_id=option_set_id)

            definition = FieldDefinition(
                tenant_id=tenant_id,
                entity_type=entity_type.value,
                field_key=field_data.field_key,
                label=field_data.label,
                description=field_data.description,
                data_type=data_type.value,
                required=field_data.required,
                searchable=field_data.searchable,
                option_set_id=option_set_id,
                default_value=field_data.default_value,
                ui_config=ui_config,
                is_archived=False,
            )
            if self._live_key_exists(tenant_id, entity_type.value, field_data.field_key):
                raise self._conflict(definition)

            with self._savepoint(lambda e: self._conflict(definition, cause=e)):
                self.session.add(definition)
            self.commit()

            self.logger.info(
                "Created field definition",
                extra={
                    "definition_id": definition.id,
                    "tenant_id": tenant_id,
                    "entity_type": entity_type.value,
                    "field_key": field_data.field_key,
                    "data_type": data_type.value,
                },
            )
            return FieldDefinitionRead.model_validate(definition)
        except Exception as e:
            self._handle_service_exception("create_field_definition", e)

    @operation()
    def update_field_definition(
        self,
        definition_id: str,
        update_data: Union[FieldDefinitionUpdate, Dict[str, Any]],
    ) -> FieldDefinitionRead:
        """
        Apply a partial update to a definition of the caller's tenant.

        field_key, data_type and option_set_id are rejected as unknown keys.

        Raises:
            ValidationError: If the patch has unknown keys or invalid values
            NotFoundError: If the definition does not belong to the caller's tenant
            ConflictError: If un-archiving would duplicate a live field key
        """
        update_data = self._coerce_schema(FieldDefinitionUpdate, update_data)
        changes = update_data.model_dump(exclude_unset=True)
        for key in _NON_NULLABLE_UPDATE_FIELDS:
            if key in changes and changes[key] is None:
                raise ValidationError(f"{key} cannot be null", field=key)
        if "ui_config" in changes:
            changes["ui_config"] = _dump_ui_config(changes["ui_config"])

        try:
            definition = self._get_owned_definition(definition_id)
            reviving = definition.is_archived and changes.get("is_archived") is False
            if reviving and self._live_key_exists(
                definition.tenant_id, definition.entity_type, definition.field_key
            ):
                raise self._conflict(definition)

            with self._savepoint(lambda e: self._conflict(definition, cause=e)):
                for key, value in changes.items():
                    setattr(definition, key, value)
            self.commit()
            return FieldDefinitionRead.model_validate(definition)
        except Exception as e:
            self._handle_service_exception("update_field_definition", e, definition_id)

    @operation()
    def archive_field_definition(self, definition_id: str) -> FieldDefinitionRead:
        """
        Archive a definition. Archiving an archived definition changes nothing.

        Raises:
            NotFoundError: If the definition does not belong to the caller's tenant
        """
        try:
            definition = self._get_owned_definition(definition_id)
            if not definition.is_archived:
                definition.is_archived = True
                self.session.flush()
                self.commit()
                self.logger.info(
                    "Archived field definition",
                    extra={"definition_id": definition_id, "field_key": definition.field_key},
                )
            return FieldDefinitionRead.model_validate(definition)
        except Exception as e:
            self._handle_service_exception("archive_field_definition", e, definition_id)
