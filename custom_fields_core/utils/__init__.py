"""Utility modules for the custom fields engine."""

from .logger import (
    ContextAwareLogger,
    TenantContextFilter,
    configure_logging,
    get_logger,
    reset_logging,
)

__all__ = [
    "ContextAwareLogger",
    "TenantContextFilter",
    "configure_logging",
    "get_logger",
    "reset_logging",
]
