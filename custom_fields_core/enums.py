"""
Enums used across the custom_fields_core package.

This module contains enum definitions that are used by multiple modules
to avoid circular import issues.
"""

from enum import Enum


class EntityType(str, Enum):
    """Standard entities a tenant can extend with custom fields."""

    COMPANY = "company"
    CONTACT = "contact"
    CATALOG_ITEM = "catalog_item"
    QUOTE = "quote"


class DataType(str, Enum):
    """Data types a custom field definition can declare."""

    STRING = "string"
    LONGTEXT = "longtext"
    NUMBER = "number"
    CURRENCY = "currency"
    BOOLEAN = "boolean"
    DATE = "date"
    DATETIME = "datetime"
    EMAIL = "email"
    PHONE = "phone"
    URL = "url"
    JSON = "json"
    ENUM = "enum"
    MULTIENUM = "multienum"

    @property
    def requires_option_set(self) -> bool:
        return self in (DataType.ENUM, DataType.MULTIENUM)
