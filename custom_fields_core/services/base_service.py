"""
Shared plumbing for the option set, field definition, settings and entity
validation services.

A service either borrows a session or opens its own. A borrowed session is
never committed here; the caller decides. An owned session is committed
after each successful write and closed when the service is used as a
context manager:

    with FieldDefinitionService() as service:
        service.create_field_definition(tenant_id, data)
"""

from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, NoReturn, Optional, Type, TypeVar, Union

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..context.tenant_context import TenantContext
from ..db.db_config import get_db_manager
from ..exceptions import BaseError, ErrorCode, ServiceError, StorageError, ValidationError
from ..utils.logger import ContextAwareLogger, get_logger

TSchema = TypeVar("TSchema", bound=BaseModel)


class SessionManagedService:
    """Base class holding the session, the logger and the error mapping."""

    def __init__(
        self,
        session: Optional[Session] = None,
        logger: Optional[ContextAwareLogger] = None,
    ):
        """
        Args:
            session: Session to borrow; a new one is opened when omitted
            logger: Logger to use instead of get_logger()
        """
        self._owns_session = session is None
        self.session = session if session is not None else get_db_manager().new_session()
        self.logger = logger or get_logger()

    # ==================== SESSION LIFECYCLE ====================

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """Commit when the block succeeds, roll back when it raises."""
        try:
            yield self.session
        except Exception:
            self.rollback()
            raise
        self.commit()

    def commit(self) -> None:
        if self._owns_session:
            self.session.commit()

    def rollback(self) -> None:
        if self._owns_session:
            self.session.rollback()

    def close(self) -> None:
        if self._owns_session:
            self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        try:
            if exc_type is None:
                self.commit()
            else:
                self.rollback()
        finally:
            self.close()

    # ==================== INPUT HELPERS ====================

    def _current_tenant_id(self) -> str:
        """The tenant id-addressed mutations are scoped to."""
        return TenantContext.require_current_tenant_id()

    @staticmethod
    def _require_tenant_id(tenant_id: Optional[str]) -> str:
        if not isinstance(tenant_id, str) or not tenant_id.strip():
            raise ValidationError(
                "tenant_id must be a non-empty string",
                field="tenant_id",
                error_code=ErrorCode.MISSING_REQUIRED,
            )
        return tenant_id

    @staticmethod
    def _coerce_schema(
        schema_class: Type[TSchema], data: Union[TSchema, Dict[str, Any]]
    ) -> TSchema:
        """Validate a plain dict into `schema_class`; instances pass through."""
        if isinstance(data, schema_class):
            return data
        try:
            return schema_class.model_validate(data)
        except PydanticValidationError as e:
            raise ValidationError(
                f"Invalid {schema_class.__name__}: {e.error_count()} problem(s)",
                error_code=ErrorCode.INVALID_FORMAT,
                validation_errors=[
                    {"loc": ".".join(str(part) for part in err["loc"]), "msg": err["msg"]}
                    for err in e.errors()
                ],
                cause=e,
            ) from e

    # ==================== ERROR MAPPING ====================

    @contextmanager
    def _savepoint(self, on_conflict: Callable[[Exception], BaseError]) -> Iterator[None]:
        """
        Run the block in a SAVEPOINT and flush it, turning a unique-constraint
        violation into `on_conflict(error)`.

        Only the savepoint is rolled back on conflict, so a borrowed session
        keeps whatever the caller had pending.
        """
        try:
            with self.session.begin_nested():
                yield
        except IntegrityError as e:
            raise on_conflict(e) from e

    def _handle_service_exception(
        self, operation: str, exception: Exception, entity_id: Optional[str] = None
    ) -> NoReturn:
        """
        Re-raise `exception` as an engine error.

        BaseError subclasses pass through unchanged, SQLAlchemy errors become
        StorageError after a rollback, anything else becomes ServiceError.
        """
        if isinstance(exception, BaseError):
            raise exception

        if isinstance(exception, SQLAlchemyError):
            self.rollback()
            raise StorageError(
                f"Database error in {operation}: {exception}",
                cause=exception,
                operation=operation,
                entity_id=entity_id,
            ) from exception

        self.logger.error(
            f"Unexpected error in {operation}",
            extra={
                "operation": operation,
                "entity_id": entity_id,
                "error_type": type(exception).__name__,
            },
        )
        raise ServiceError(
            f"Error in {operation}: {exception}",
            error_code=ErrorCode.INTERNAL_ERROR,
            operation=operation,
            cause=exception,
            entity_id=entity_id,
        ) from exception
