"""
Pydantic schemas for option sets and their options.
"""

from typing import AbstractSet, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..constants import Limits
from ..exceptions import ErrorCode, ValidationError
from .mixins import StoredRecord, TenantOwned


class OptionSetRead(StoredRecord, TenantOwned):
    """
    Schema for reading an option set without its options.
    """

    name: str
    entity_type: Optional[str] = None

    model_config = ConfigDict(from_attributes=True, extra="ignore")


class OptionSetOptionCreate(BaseModel):
    """
    Schema for appending an option to an option set.
    """

    option_key: str = Field(max_length=Limits.OPTION_KEY_LENGTH)
    label: str = Field(max_length=Limits.LABEL_LENGTH)
    description: Optional[str] = None
    color: Optional[str] = Field(default=None, max_length=Limits.COLOR_LENGTH)
    sort_order: int = 0
    is_active: bool = True

    model_config = ConfigDict(extra="forbid")

    @field_validator("option_key", "label")
    def validate_not_blank(cls, v: str, info) -> str:
        """optionKey and label are mandatory and must carry text."""
        if not v or not v.strip():
            raise ValidationError(
                "optionKey and label are required",
                error_code=ErrorCode.MISSING_REQUIRED,
                field=info.field_name,
            )
        return v


class OptionSetOptionUpdate(BaseModel):
    """
    Schema for a partial option update. Only explicitly set fields are applied.
    """

    label: Optional[str] = Field(default=None, max_length=Limits.LABEL_LENGTH)
    description: Optional[str] = None
    color: Optional[str] = Field(default=None, max_length=Limits.COLOR_LENGTH)
    sort_order: Optional[int] = None
    is_active: Optional[bool] = None

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


class OptionSetOptionRead(StoredRecord):
    """
    Schema for reading an option.
    """

    option_set_id: str
    option_key: str
    label: str
    description: Optional[str] = None
    color: Optional[str] = None
    sort_order: int = 0
    is_active: bool = True

    model_config = ConfigDict(from_attributes=True, extra="ignore")


class OptionSetWithOptions(OptionSetRead):
    """
    Option set with every option, ordered by sort_order, active or not.
    """

    options: List[OptionSetOptionRead] = Field(default_factory=list)

    def active_options(self) -> List[OptionSetOptionRead]:
        return [option for option in self.options if option.is_active]

    def active_option_keys(self) -> AbstractSet[str]:
        """Active keys as an ordered set, in sort_order."""
        return dict.fromkeys(option.option_key for option in self.active_options()).keys()
