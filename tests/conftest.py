"""
Shared test fixtures.

Provides an in-memory SQLite database, a fresh schema per test, factory
wiring, and tenant context helpers.
"""

import pytest
from sqlalchemy.orm import Session

from custom_fields_core.config import reset_config
from custom_fields_core.context.tenant_context import TenantContext, tenant_context
from custom_fields_core.db import (
    DatabaseConfig,
    DatabaseManager,
    import_all_models,
    set_db_manager,
)
from custom_fields_core.db.db_config import Base
from custom_fields_core.exceptions import clear_correlation_id
from custom_fields_core.utils.logger import reset_logging
from tests.fixtures.factories import DEFAULT_TENANT, configure_factories

TENANT_A = DEFAULT_TENANT
TENANT_B = "tenant-globex"


@pytest.fixture(scope="session")
def db_config() -> DatabaseConfig:
    """Create SQLite in-memory database configuration for testing."""
    return DatabaseConfig(
        db_type="sqlite",
        database=":memory:",
        echo=False,
        development_mode=True,
    )


@pytest.fixture(scope="session")
def db_manager(db_config: DatabaseConfig) -> DatabaseManager:
    """Database manager registered as the global one for the whole run."""
    import_all_models()
    manager = DatabaseManager(db_config)
    set_db_manager(manager)

    yield manager

    set_db_manager(None)
    manager.close()


@pytest.fixture(scope="function")
def db_session(db_manager: DatabaseManager) -> Session:
    """
    Create a database session for each test.

    Tables are created before and dropped after every test so each test
    starts from an empty schema.
    """
    Base.metadata.create_all(db_manager.engine)
    session = db_manager.new_session()
    configure_factories(session)

    yield session

    session.rollback()
    session.close()
    Base.metadata.drop_all(db_manager.engine)


@pytest.fixture(autouse=True)
def clean_context():
    """Reset thread-local and global state between tests."""
    yield
    TenantContext.clear_current_tenant()
    clear_correlation_id()
    reset_config()
    reset_logging()


@pytest.fixture
def tenant_id() -> str:
    """Tenant bound to the execution context for the test."""
    with tenant_context(TENANT_A):
        yield TENANT_A


@pytest.fixture
def other_tenant_id() -> str:
    """A second tenant used for isolation checks; not bound to the context."""
    return TENANT_B
