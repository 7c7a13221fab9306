"""
Console logging for the custom fields engine.

Log calls pass structured values through `extra`. ContextAwareLogger also
appends them to the message as ` | key=value` pairs, so they survive host
applications that install their own formatters. TenantContextFilter stamps
the bound tenant id on every record that reaches the console handler.
"""

import logging
import sys
from typing import Any, Dict, Optional, Union

from ..config import get_config

LOGGER_PREFIX = "custom_fields"

# Attributes LogRecord already defines; passing one as `extra` raises KeyError
_RECORD_ATTRIBUTES = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}

_configured_logger: Optional["ContextAwareLogger"] = None


def _as_level(level: Union[int, str]) -> int:
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.INFO)
    return level


class ContextAwareLogger:
    """Thin wrapper over a stdlib logger that renders `extra` into the message."""

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def _log(self, level: str, msg: str, extra: Optional[Dict[str, Any]] = None, **kwargs):
        extra = extra or {}
        if extra:
            msg = " | ".join([msg, *(f"{k}={v}" for k, v in extra.items())])
        record_extra = {k: v for k, v in extra.items() if k not in _RECORD_ATTRIBUTES}
        getattr(self.logger, level)(msg, extra=record_extra, **kwargs)

    def debug(self, msg, **kwargs):
        self._log("debug", msg, **kwargs)

    def info(self, msg, **kwargs):
        self._log("info", msg, **kwargs)

    def warning(self, msg, **kwargs):
        self._log("warning", msg, **kwargs)

    def error(self, msg, **kwargs):
        self._log("error", msg, **kwargs)

    def exception(self, msg, **kwargs):
        """ERROR with the active exception's traceback attached."""
        self._log("exception", msg, **kwargs)


class TenantContextFilter(logging.Filter):
    """Adds `tenant_id` to records emitted while a tenant is bound."""

    def filter(self, record: logging.LogRecord) -> bool:
        # Imported here: tenant_context imports this module
        from ..context.tenant_context import TenantContext

        tenant_id = TenantContext.get_current_tenant_id()
        if tenant_id:
            record.tenant_id = tenant_id
        return True


def configure_logging(
    name: str, log_level: Optional[Union[int, str]] = None
) -> ContextAwareLogger:
    """
    Install a stdout handler on the `custom_fields.<name>` logger.

    Calling it again for the same name replaces the handler rather than
    adding a second one. The result becomes what get_logger() returns.

    Args:
        name: Component or host application name
        log_level: Defaults to the configured logging level
    """
    global _configured_logger

    config = get_config().logging
    level = _as_level(log_level if log_level is not None else config.level)

    logger = logging.getLogger(f"{LOGGER_PREFIX}.{name}")
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(config.format))
    handler.addFilter(TenantContextFilter())
    logger.addHandler(handler)

    _configured_logger = ContextAwareLogger(logger)
    _configured_logger.info("Logger configured", extra={"logger_name": logger.name})
    return _configured_logger


def reset_logging() -> None:
    """Forget the configured logger so get_logger() falls back to the root logger."""
    global _configured_logger
    _configured_logger = None


def get_logger(log_level: Optional[Union[int, str]] = None) -> ContextAwareLogger:
    """The logger from configure_logging(), or the root logger at the configured level."""
    if _configured_logger is not None:
        return _configured_logger

    root = logging.getLogger()
    root.setLevel(_as_level(log_level if log_level is not None else get_config().logging.level))
    return ContextAwareLogger(root)
