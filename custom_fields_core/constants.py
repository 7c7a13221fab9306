"""
Constants and enums for the custom fields engine.

This module centralizes magic strings and default data so that services
and tests agree on them.
"""

from enum import Enum


class LogLevel(str, Enum):
    """Standard logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class EnvironmentVariable(str, Enum):
    """Standard environment variable names."""

    APP_ENV = "APP_ENV"
    LOG_LEVEL = "LOG_LEVEL"
    DEBUG = "DEBUG"
    DB_HOST = "DB_HOST"
    DB_PORT = "DB_PORT"
    DB_NAME = "DB_NAME"
    DB_USER = "DB_USER"
    DB_PASSWORD = "DB_PASSWORD"
    DB_POOL_SIZE = "DB_POOL_SIZE"
    DB_MAX_OVERFLOW = "DB_MAX_OVERFLOW"
    DB_POOL_TIMEOUT = "DB_POOL_TIMEOUT"
    DB_ECHO = "DB_ECHO"
    DEV_DB_PATH = "DEV_DB_PATH"


class BuiltinOptionSet(str, Enum):
    """Option sets that back built-in enumerated entity attributes."""

    CATALOG_ITEM_TYPE = "catalog_item_type"
    CATALOG_ITEM_UNIT = "catalog_item_unit"
    QUOTE_STATUS = "quote_status"


# Default vocabularies seeded for a new tenant: (option_key, label, color)
DEFAULT_OPTION_SETS = {
    BuiltinOptionSet.CATALOG_ITEM_TYPE: {
        "entity_type": "catalog_item",
        "options": [
            ("resource_role", "Resource Role", "#3b82f6"),
            ("product", "Product", "#10b981"),
            ("add_on", "Add On", "#f59e0b"),
        ],
    },
    BuiltinOptionSet.CATALOG_ITEM_UNIT: {
        "entity_type": "catalog_item",
        "options": [
            ("flat", "Flat", None),
            ("hourly", "Hourly", None),
            ("weekly", "Weekly", None),
            ("monthly", "Monthly", None),
            ("quarterly", "Quarterly", None),
            ("yearly", "Yearly", None),
        ],
    },
    BuiltinOptionSet.QUOTE_STATUS: {
        "entity_type": "quote",
        "options": [
            ("draft", "Draft", "#6b7280"),
            ("pending_approval", "Pending Approval", "#f59e0b"),
            ("approved", "Approved", "#10b981"),
            ("rejected", "Rejected", "#ef4444"),
        ],
    },
}

# Fallback unit list shown when a tenant has no catalog_item_unit set
DEFAULT_UNIT_TYPES = [
    ("hourly", "Hourly"),
    ("daily", "Daily"),
    ("monthly", "Monthly"),
    ("fixed", "Fixed"),
]

DEFAULT_COLOR = "#000000"


class Limits:
    """Column sizes shared by models and schemas."""

    TENANT_ID_LENGTH = 100
    FIELD_KEY_LENGTH = 100
    LABEL_LENGTH = 200
    OPTION_SET_NAME_LENGTH = 100
    OPTION_KEY_LENGTH = 100
    COLOR_LENGTH = 20
