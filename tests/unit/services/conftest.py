"""
Service fixtures bound to the per-test session.
"""

import pytest

from custom_fields_core.services import (
    EntityValidationService,
    FieldDefinitionService,
    OptionSetService,
    SettingsService,
)


@pytest.fixture(scope="function")
def option_set_service(db_session):
    """Option set service with test session."""
    return OptionSetService(session=db_session)


@pytest.fixture(scope="function")
def field_definition_service(db_session):
    """Field definition service with test session."""
    return FieldDefinitionService(session=db_session)


@pytest.fixture(scope="function")
def entity_validation_service(db_session):
    """Entity validation service with test session."""
    return EntityValidationService(session=db_session)


@pytest.fixture(scope="function")
def settings_service(db_session):
    """Settings service with test session."""
    return SettingsService(session=db_session)
