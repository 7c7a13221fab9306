"""
Exceptions raised by the custom fields engine.

Per-field data problems are never raised; they come back as
FieldValidationError lists so a form can show all of them at once. The
classes here cover bad administrative input, lookups that miss (including
rows owned by another tenant), uniqueness conflicts and storage failures.

Every error carries an ErrorCode, an HTTP-style status, free-form context and
the current correlation id, and logs itself when constructed.
"""

import threading
import traceback
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

_thread_local = threading.local()


class ErrorCode(str, Enum):
    # 1xxx: infrastructure and programming errors
    INTERNAL_ERROR = "1000"
    DATABASE_ERROR = "1001"
    CONFIGURATION_ERROR = "1003"

    # 2xxx: rejected input
    VALIDATION_FAILED = "2000"
    INVALID_FORMAT = "2001"
    MISSING_REQUIRED = "2002"
    TYPE_MISMATCH = "2003"
    CONSTRAINT_VIOLATION = "2004"

    # 3xxx: record lookups and uniqueness
    NOT_FOUND = "3000"
    DUPLICATE = "3001"


class BaseError(Exception):
    """
    Root of the hierarchy.

    Subclasses fix `status_code` and usually `default_code`; callers add
    whatever identifiers help diagnose the failure as keyword context.
    """

    status_code = 500
    default_code = ErrorCode.INTERNAL_ERROR

    def __init__(
        self,
        message: str,
        error_code: Optional[ErrorCode] = None,
        cause: Optional[Exception] = None,
        **context: Any,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.default_code
        self.cause = cause
        self.error_id = str(uuid.uuid4())
        self.timestamp = datetime.now(timezone.utc).isoformat()
        self.context: Dict[str, Any] = dict(context)
        self.context["error_id"] = self.error_id

        correlation_id = get_correlation_id()
        if correlation_id:
            self.context["correlation_id"] = correlation_id
        if cause is not None:
            self.context["cause"] = {
                "type": type(cause).__name__,
                "message": str(cause),
                "traceback": traceback.format_exception(type(cause), cause, cause.__traceback__),
            }

        self._log()

    def _log(self) -> None:
        # Imported here: the logger pulls in tenant context, which imports this module
        from .utils.logger import get_logger

        details = {
            "error_id": self.error_id,
            "error_code": self.error_code.value,
            "status_code": self.status_code,
            "context": {k: v for k, v in self.context.items() if k not in ("cause", "error_id")},
        }
        summary = f"{type(self).__name__} {self.error_code.value}: {self.message}"
        if self.status_code >= 500:
            get_logger().error(summary, extra=details)
        else:
            get_logger().warning(summary, extra=details)

    def add_context(self, **kwargs: Any) -> "BaseError":
        self.context.update(kwargs)
        return self

    def to_dict(
        self, include_cause: bool = False, include_traceback: bool = False
    ) -> Dict[str, Any]:
        """Body for an API error response. The cause is left out unless asked for."""
        body: Dict[str, Any] = {
            "id": self.error_id,
            "code": self.error_code.value,
            "message": self.message,
            "timestamp": self.timestamp,
            "context": {
                k: v
                for k, v in self.context.items()
                if k not in ("cause", "error_id", "correlation_id")
            },
        }
        if "correlation_id" in self.context:
            body["correlation_id"] = self.context["correlation_id"]

        cause = self.context.get("cause")
        if include_cause and cause:
            body["cause"] = {"type": cause["type"], "message": cause["message"]}
            if include_traceback:
                body["cause"]["traceback"] = cause["traceback"]
        return {"error": body}

    @property
    def error_chain(self) -> List[Exception]:
        """This error followed by its causes, outermost first."""
        chain: List[Exception] = [self]
        current = self.cause
        while current is not None:
            chain.append(current)
            current = getattr(current, "cause", None)
        return chain


class RepositoryError(BaseError):
    """Failures tied to stored records."""

    default_code = ErrorCode.DATABASE_ERROR


class NotFoundError(RepositoryError):
    """The id does not exist, or exists under another tenant."""

    status_code = 404
    default_code = ErrorCode.NOT_FOUND


class ConflictError(RepositoryError):
    """A live record already holds the same uniqueness key."""

    status_code = 409
    default_code = ErrorCode.DUPLICATE


class StorageError(RepositoryError):
    """The database itself failed. Not retried here."""


class ServiceError(BaseError):
    """Unexpected failure inside a service operation."""

    def __init__(
        self,
        message: str,
        error_code: Optional[ErrorCode] = None,
        operation: Optional[str] = None,
        cause: Optional[Exception] = None,
        **context: Any,
    ):
        if operation:
            context["operation"] = operation
        super().__init__(message, error_code, cause, **context)


class ValidationError(BaseError):
    """Administrative input rejected before anything was written."""

    status_code = 400
    default_code = ErrorCode.VALIDATION_FAILED

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        error_code: Optional[ErrorCode] = None,
        cause: Optional[Exception] = None,
        **context: Any,
    ):
        if field:
            context["field"] = field
        super().__init__(message, error_code, cause, **context)


def _describe(identifiers: Dict[str, Any]) -> str:
    return ", ".join(f"{k}={v}" for k, v in identifiers.items())


def not_found(
    resource_type: str, cause: Optional[Exception] = None, **identifiers: Any
) -> NotFoundError:
    """
    NotFoundError for `resource_type`, e.g. not_found("OptionSet", option_set_id=...).

    The message names only what the caller asked for, never whether the row
    exists under a different tenant.
    """
    message = f"{resource_type} not found"
    if identifiers:
        message = f"{message}: {_describe(identifiers)}"
    return NotFoundError(message, cause=cause, resource_type=resource_type, **identifiers)


def duplicate(
    resource_type: str, cause: Optional[Exception] = None, **identifiers: Any
) -> ConflictError:
    """ConflictError for a uniqueness key already in use."""
    message = f"Duplicate {resource_type}"
    if identifiers:
        message = f"{message}: {_describe(identifiers)}"
    return ConflictError(message, cause=cause, resource_type=resource_type, **identifiers)


def set_correlation_id(correlation_id: str) -> None:
    _thread_local.correlation_id = correlation_id


def get_correlation_id() -> Optional[str]:
    return getattr(_thread_local, "correlation_id", None)


def clear_correlation_id() -> None:
    if hasattr(_thread_local, "correlation_id"):
        del _thread_local.correlation_id
