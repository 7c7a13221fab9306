"""
Pydantic schemas for custom field definitions.

`ui_config` is stored as a JSON blob. It is parsed into FieldUiConfig once at
the write boundary (strict) and again on read (lenient), so nothing past the
schema layer ever handles the raw blob.
"""

from typing import Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from ..constants import Limits
from ..enums import DataType, EntityType
from ..exceptions import ErrorCode, ValidationError
from .mixins import StoredRecord, TenantOwned
from .option_set_schema import OptionSetWithOptions

UI_CONFIG_VERSION = 1


class FieldUiConfig(BaseModel):
    """
    Presentation hints for rendering a custom field in forms and tables.
    """

    version: int = Field(default=UI_CONFIG_VERSION, ge=1)
    placeholder: Optional[str] = Field(default=None, max_length=200)
    help_text: Optional[str] = Field(default=None, max_length=500)
    width: Literal["full", "half", "third"] = "full"
    display_order: Optional[int] = Field(default=None, ge=0)
    hidden: bool = False
    rows: Optional[int] = Field(default=None, ge=1, le=50)

    model_config = ConfigDict(extra="forbid", frozen=True)

    @classmethod
    def parse(cls, raw: Optional[Dict[str, Any]]) -> Optional["FieldUiConfig"]:
        """
        Strictly parse a ui_config payload submitted by an admin.

        Raises:
            ValidationError: If the payload has unknown keys or bad values
        """
        if raw is None:
            return None
        if isinstance(raw, FieldUiConfig):
            return raw
        if not isinstance(raw, dict):
            raise ValidationError(
                "uiConfig must be an object",
                field="ui_config",
                error_code=ErrorCode.TYPE_MISMATCH,
            )
        try:
            return cls.model_validate(raw)
        except PydanticValidationError as e:
            raise ValidationError(
                f"Invalid uiConfig: {e.error_count()} problem(s)",
                field="ui_config",
                error_code=ErrorCode.INVALID_FORMAT,
                validation_errors=[
                    {"loc": ".".join(str(p) for p in err["loc"]), "msg": err["msg"]}
                    for err in e.errors()
                ],
            ) from e

    @classmethod
    def from_stored(cls, raw: Any) -> Optional["FieldUiConfig"]:
        """
        Parse a stored blob, dropping keys this version does not know.

        Returns None when the blob is absent or unusable.
        """
        if raw is None or isinstance(raw, FieldUiConfig):
            return raw
        if not isinstance(raw, dict):
            return None
        known = {k: v for k, v in raw.items() if k in cls.model_fields}
        try:
            return cls.model_validate(known)
        except PydanticValidationError:
            from ..utils.logger import get_logger

            get_logger().warning(
                "Discarding unreadable stored uiConfig", extra={"keys": sorted(raw)}
            )
            return None


class FieldDefinitionCreate(BaseModel):
    """
    Schema for creating a custom field definition.

    The four identifying attributes are optional here so the service can
    report every missing one in a single error.
    """

    entity_type: Optional[str] = None
    field_key: Optional[str] = Field(default=None, max_length=Limits.FIELD_KEY_LENGTH)
    label: Optional[str] = Field(default=None, max_length=Limits.LABEL_LENGTH)
    data_type: Optional[str] = None
    description: Optional[str] = None
    required: bool = False
    searchable: bool = False
    option_set_id: Optional[str] = None
    default_value: Any = None
    ui_config: Optional[Dict[str, Any]] = None

    model_config = ConfigDict(extra="forbid")


class FieldDefinitionUpdate(BaseModel):
    """
    Schema for a partial definition update.

    field_key and data_type are immutable and rejected as unknown keys.
    """

    label: Optional[str] = Field(default=None, max_length=Limits.LABEL_LENGTH)
    description: Optional[str] = None
    required: Optional[bool] = None
    searchable: Optional[bool] = None
    default_value: Any = None
    ui_config: Optional[Dict[str, Any]] = None
    is_archived: Optional[bool] = None

    model_config = ConfigDict(extra="forbid")

    @field_validator("label")
    def validate_label(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValidationError(
                "label must not be empty",
                error_code=ErrorCode.MISSING_REQUIRED,
                field="label",
            )
        return v


class FieldDefinitionRead(StoredRecord, TenantOwned):
    """
    Schema for reading a field definition.

    `option_set` is populated only for enum/multienum fields that reference a
    set. `data_type` falls back to the raw string for types this version does
    not recognize; the value validator reports those per field.
    """

    entity_type: str
    field_key: str
    label: str
    description: Optional[str] = None
    data_type: Union[DataType, str] = Field(union_mode="left_to_right")
    required: bool = False
    searchable: bool = False
    option_set_id: Optional[str] = None
    default_value: Any = None
    ui_config: Optional[FieldUiConfig] = None
    is_archived: bool = False
    option_set: Optional[OptionSetWithOptions] = None

    model_config = ConfigDict(from_attributes=True, extra="ignore")

    @field_validator("ui_config", mode="before")
    def parse_stored_ui_config(cls, v: Any) -> Optional[FieldUiConfig]:
        return FieldUiConfig.from_stored(v)


def coerce_entity_type(value: Any) -> Optional[EntityType]:
    """Return the EntityType for value, or None if it is not one."""
    if isinstance(value, EntityType):
        return value
    try:
        return EntityType(value)
    except ValueError:
        return None


def coerce_data_type(value: Any) -> Optional[DataType]:
    """Return the DataType for value, or None if it is not one."""
    if isinstance(value, DataType):
        return value
    try:
        return DataType(value)
    except ValueError:
        return None
