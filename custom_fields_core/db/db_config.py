"""
Database configuration and the process-wide DatabaseManager.

PostgreSQL (through psycopg 3) in production, SQLite for development and
tests. Services take their sessions from the manager installed with
initialize_db() or set_db_manager().
"""

from typing import Any, Optional

from pydantic import BaseModel
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from ..config import env_flag, env_value
from ..constants import EnvironmentVariable as Env
from ..exceptions import ErrorCode, ServiceError, ValidationError
from ..utils import get_logger

Base: Any = declarative_base()

SQLITE = "sqlite"
POSTGRES = "postgres"
IN_MEMORY = ":memory:"


class DatabaseConfig(BaseModel):
    db_type: str = POSTGRES
    database: str
    host: str = ""
    port: str = "5432"
    username: str = ""
    password: str = ""
    pool_size: int = 5
    max_overflow: int = 10
    pool_timeout: int = 30
    echo: bool = False
    # Allows drop_tables(); never set for a shared database
    development_mode: bool = False

    @property
    def dialect(self) -> str:
        return self.db_type.lower()

    def get_connection_string(self) -> str:
        if self.dialect == SQLITE:
            return f"sqlite:///{self.database}"
        if self.dialect != POSTGRES:
            raise ValidationError(
                f"Unsupported database type: {self.db_type}",
                field="db_type",
                error_code=ErrorCode.INVALID_FORMAT,
                value=self.db_type,
            )

        missing = [
            name for name in ("host", "database", "username", "password") if not getattr(self, name)
        ]
        if missing:
            raise ValidationError(
                "Missing required Postgres configuration parameters",
                field="database_config",
                error_code=ErrorCode.MISSING_REQUIRED,
                missing=missing,
            )
        return (
            f"postgresql+psycopg://{self.username}:{self.password}"
            f"@{self.host}:{self.port}/{self.database}"
        )

    def __repr__(self) -> str:
        return (
            f"DatabaseConfig(db_type={self.db_type!r}, host={self.host!r}, port={self.port!r}, "
            f"database={self.database!r}, username={self.username!r}, password='***')"
        )

    __str__ = __repr__


def _create_engine(config: DatabaseConfig) -> Engine:
    url = config.get_connection_string()
    if config.dialect == POSTGRES:
        return create_engine(
            url,
            echo=config.echo,
            pool_size=config.pool_size,
            max_overflow=config.max_overflow,
            pool_timeout=config.pool_timeout,
            pool_pre_ping=True,
        )

    options: dict = {"echo": config.echo, "connect_args": {"check_same_thread": False}}
    if config.database == IN_MEMORY:
        # Every session has to see the same in-memory database
        options["poolclass"] = StaticPool
    return create_engine(url, **options)


class DatabaseManager:
    """
    Owns the engine and hands out sessions.

    Sessions are not scoped: each service that creates one is responsible
    for committing and closing it.
    """

    def __init__(self, config: DatabaseConfig):
        self.config = config
        self.engine = _create_engine(config)
        self.session_factory = sessionmaker(bind=self.engine)

    def create_tables(self) -> None:
        Base.metadata.create_all(self.engine)

    def drop_tables(self) -> None:
        if not self.config.development_mode:
            raise ServiceError(
                "Cannot drop tables: not in development mode",
                error_code=ErrorCode.CONFIGURATION_ERROR,
                operation="drop_tables",
            )
        Base.metadata.drop_all(self.engine)

    def new_session(self) -> Session:
        return self.session_factory()

    def close(self) -> None:
        self.engine.dispose()


def get_development_config() -> DatabaseConfig:
    """SQLite, in memory unless DEV_DB_PATH names a file."""
    return DatabaseConfig(
        db_type=SQLITE,
        database=env_value(Env.DEV_DB_PATH, IN_MEMORY),
        echo=env_flag(Env.DB_ECHO),
        development_mode=True,
    )


def get_production_config() -> DatabaseConfig:
    """PostgreSQL settings from the DB_* environment variables."""
    return DatabaseConfig(
        db_type=POSTGRES,
        host=env_value(Env.DB_HOST, "localhost"),
        port=env_value(Env.DB_PORT, "5432"),
        database=env_value(Env.DB_NAME, "crm"),
        username=env_value(Env.DB_USER, "postgres"),
        password=env_value(Env.DB_PASSWORD, ""),
        pool_size=int(env_value(Env.DB_POOL_SIZE, "5")),
        max_overflow=int(env_value(Env.DB_MAX_OVERFLOW, "10")),
        pool_timeout=int(env_value(Env.DB_POOL_TIMEOUT, "30")),
        echo=env_flag(Env.DB_ECHO),
    )


def import_all_models() -> None:
    """Register every model with Base.metadata."""
    from sqlalchemy.orm import configure_mappers

    from .db_field_definition_models import FieldDefinition  # noqa: F401
    from .db_option_set_models import OptionSet, OptionSetOption  # noqa: F401

    configure_mappers()


_db_manager: Optional[DatabaseManager] = None


def get_db_manager() -> DatabaseManager:
    """
    The installed manager.

    Raises:
        ServiceError: If neither initialize_db() nor set_db_manager() was called
    """
    if _db_manager is None:
        raise ServiceError(
            "Database manager not initialized. Call initialize_db() first.",
            error_code=ErrorCode.CONFIGURATION_ERROR,
            operation="get_db_manager",
        )
    return _db_manager


def set_db_manager(manager: Optional[DatabaseManager]) -> None:
    global _db_manager
    _db_manager = manager


def initialize_db(config: Optional[DatabaseConfig] = None) -> DatabaseManager:
    """
    Install a manager for `config` (production settings by default) and create tables.

    Deployments that manage the schema with Alembic can skip this and call
    set_db_manager() instead.
    """
    config = config or get_production_config()
    manager = DatabaseManager(config)
    import_all_models()
    manager.create_tables()
    set_db_manager(manager)

    get_logger().info(
        "Database initialized", extra={"db_type": config.dialect, "database": config.database}
    )
    return manager


def close_db() -> None:
    """Dispose of the installed manager's engine and uninstall it."""
    if _db_manager is not None:
        _db_manager.close()
    set_db_manager(None)
