"""
Schemas for the catalog and quote settings screens.

Both screens are views over built-in option sets; see SettingsService.
"""

from typing import List

from pydantic import BaseModel, Field

from ..constants import DEFAULT_COLOR


class CatalogType(BaseModel):
    id: str
    name: str = Field(..., min_length=1)
    key: str
    is_standard: bool = False
    color: str = DEFAULT_COLOR


class UnitType(BaseModel):
    id: str
    name: str = Field(..., min_length=1)
    key: str
    enabled: bool = True


class QuoteStatus(BaseModel):
    id: str
    name: str = Field(..., min_length=1)
    key: str
    is_standard: bool = False
    color: str = DEFAULT_COLOR
    order: int


class CatalogSettings(BaseModel):
    types: List[CatalogType] = Field(default_factory=list)
    unit_types: List[UnitType] = Field(default_factory=list)


class QuoteSettings(BaseModel):
    statuses: List[QuoteStatus] = Field(default_factory=list)
