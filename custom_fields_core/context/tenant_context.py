"""
The tenant the current thread acts for.

Option set, option and field definition mutations address rows by id. Those
ids never grant access on their own: the services resolve them only within
the tenant bound here, so a row owned by anyone else is simply not found.
"""

import threading
from contextlib import contextmanager
from functools import wraps
from typing import Any, Callable, Iterator, Optional, Union

from ..exceptions import ErrorCode, ValidationError
from ..utils.logger import get_logger


def _missing_tenant(message: str, value: Any = None) -> ValidationError:
    context = {} if value is None else {"value": str(value)}
    return ValidationError(
        message, field="tenant_id", error_code=ErrorCode.MISSING_REQUIRED, **context
    )


class TenantContext:
    """Thread-local holder for the current tenant id."""

    _local = threading.local()

    @classmethod
    def set_current_tenant(cls, tenant_id: str) -> None:
        """
        Bind `tenant_id` (stripped) to the current thread.

        Raises:
            ValidationError: If tenant_id is not a non-blank string
        """
        if not isinstance(tenant_id, str) or not tenant_id.strip():
            raise _missing_tenant("tenant_id must be a non-empty string", tenant_id)
        cls._local.tenant_id = tenant_id.strip()
        get_logger().debug("Tenant bound", extra={"tenant_id": cls._local.tenant_id})

    @classmethod
    def get_current_tenant_id(cls) -> Optional[str]:
        return getattr(cls._local, "tenant_id", None)

    @classmethod
    def require_current_tenant_id(cls) -> str:
        tenant_id = cls.get_current_tenant_id()
        if not tenant_id:
            raise _missing_tenant("No tenant context set")
        return tenant_id

    @classmethod
    def clear_current_tenant(cls) -> None:
        if hasattr(cls._local, "tenant_id"):
            del cls._local.tenant_id


@contextmanager
def tenant_context(tenant_id: str) -> Iterator[str]:
    """Act for `tenant_id` inside the block; the previous binding comes back afterwards."""
    previous = TenantContext.get_current_tenant_id()
    TenantContext.set_current_tenant(tenant_id)
    try:
        yield TenantContext.get_current_tenant_id()
    finally:
        if previous:
            TenantContext.set_current_tenant(previous)
        else:
            TenantContext.clear_current_tenant()


def tenant_aware(tenant_id: Union[Optional[str], Callable] = None):
    """
    Run the decorated function for `tenant_id`, or for the tenant already bound.

    Usable bare (`@tenant_aware`) or with arguments (`@tenant_aware("acme")`).
    Calling it with no tenant either way raises ValidationError.
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            effective = tenant_id or TenantContext.get_current_tenant_id()
            if not effective:
                raise _missing_tenant("No tenant ID provided for tenant-aware function")
            with tenant_context(effective):
                return func(*args, **kwargs)

        return wrapper

    if callable(tenant_id):
        func, tenant_id = tenant_id, None
        return decorator(func)
    return decorator
