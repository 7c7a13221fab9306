"""
Operation tracking for service calls.

`@operation()` wraps a service method so that each call gets an operation id
and shares one correlation id with every nested call on the same thread. It
logs ENTER/EXIT at debug level (see FeatureFlags.enable_operation_logging)
and records where an engine error happened on the error itself.
"""

import time
import uuid
from contextlib import contextmanager
from functools import wraps
from typing import Any, Callable, Dict, Iterator, Optional, TypeVar, Union, cast

from ..config import get_config
from ..exceptions import BaseError, get_correlation_id, set_correlation_id
from ..utils.logger import ContextAwareLogger, get_logger
from .tenant_context import TenantContext

F = TypeVar("F", bound=Callable[..., Any])


class OperationContext:
    """Identity and timing of one running operation."""

    def __init__(self, operation_name: str, correlation_id: Optional[str] = None, **context):
        self.operation_name = operation_name
        self.operation_id = str(uuid.uuid4())
        # Nested operations reuse the outermost correlation id
        self.correlation_id = correlation_id or get_correlation_id() or str(uuid.uuid4())
        set_correlation_id(self.correlation_id)

        self.context: Dict[str, Any] = dict(context)
        self.started = time.perf_counter()

    @property
    def duration_ms(self) -> float:
        return round((time.perf_counter() - self.started) * 1000, 3)

    def log_fields(self, **extra) -> Dict[str, Any]:
        return {
            **self.context,
            "operation_id": self.operation_id,
            "correlation_id": self.correlation_id,
            **extra,
        }


class OperationHandler:
    """Logs the lifecycle of operations and enriches engine errors."""

    def __init__(self, logger: Optional[ContextAwareLogger] = None):
        self.logger = logger if logger is not None else get_logger()

    @contextmanager
    def operation(self, name: str, **context) -> Iterator[OperationContext]:
        tenant_id = TenantContext.get_current_tenant_id()
        if tenant_id:
            context.setdefault("tenant_id", tenant_id)

        op = OperationContext(name, **context)
        verbose = get_config().features.enable_operation_logging
        if verbose:
            self.logger.debug(f"ENTER: {name}", extra=op.log_fields())

        try:
            yield op
        except BaseError as e:
            # The error logged itself when raised; say which operation it escaped from
            e.add_context(
                operation_name=name,
                operation_id=op.operation_id,
                operation_duration_ms=op.duration_ms,
            )
            self.logger.info(
                f"ERROR: {name} -> {e.error_code.value}: {e.message}",
                extra=op.log_fields(
                    duration_ms=op.duration_ms, error_id=e.error_id, status="error"
                ),
            )
            raise
        except Exception as e:
            self.logger.exception(
                f"ERROR: {name} -> {type(e).__name__}: {e}",
                extra=op.log_fields(
                    duration_ms=op.duration_ms, error_type=type(e).__name__, status="error"
                ),
            )
            raise

        if verbose:
            self.logger.debug(
                f"EXIT: {name}",
                extra=op.log_fields(duration_ms=op.duration_ms, status="success"),
            )


def _operation_name(func: Callable, args: tuple) -> str:
    """`<module>.<Class>.<method>` for methods, `<module>.<function>` otherwise."""
    module = func.__module__.rsplit(".", 1)[-1]
    if args and hasattr(args[0], func.__name__):
        return f"{module}.{type(args[0]).__name__}.{func.__name__}"
    return f"{module}.{func.__name__}"


def operation(name: Union[Optional[str], Callable] = None):
    """
    Decorator that runs the function inside an OperationHandler.operation.

    Usable bare (`@operation`) or with an explicit name (`@operation("x")`).
    """

    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(*args, **kwargs) -> Any:
            op_name = name or _operation_name(func, args)
            with OperationHandler().operation(op_name, source_module=func.__module__):
                return func(*args, **kwargs)

        return cast(F, wrapper)

    if callable(name):
        func, name = name, None
        return decorator(func)
    return decorator
