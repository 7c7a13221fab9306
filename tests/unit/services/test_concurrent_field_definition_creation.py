"""
Concurrent creation of the same field key.

Each thread uses a service that owns its session, against a file-backed
SQLite database so the threads really hold separate connections.
"""

import threading

import pytest

from custom_fields_core.context.tenant_context import tenant_context
from custom_fields_core.db import DatabaseConfig, DatabaseManager, get_db_manager, set_db_manager
from custom_fields_core.db.db_field_definition_models import FieldDefinition
from custom_fields_core.exceptions import ConflictError
from custom_fields_core.services import FieldDefinitionService

TENANT = "tenant-race"


@pytest.fixture
def file_db(tmp_path, db_manager):
    manager = DatabaseManager(
        DatabaseConfig(
            db_type="sqlite", database=str(tmp_path / "race.db"), development_mode=True
        )
    )
    manager.create_tables()
    set_db_manager(manager)

    yield manager

    set_db_manager(db_manager)
    manager.close()


def _create_in_thread(barrier, results, errors):
    with tenant_context(TENANT):
        barrier.wait()
        try:
            with FieldDefinitionService() as service:
                results.append(
                    service.create_field_definition(
                        TENANT,
                        {
                            "entity_type": "company",
                            "field_key": "industry",
                            "label": "Industry",
                            "data_type": "string",
                        },
                    )
                )
        except ConflictError as e:
            errors.append(e)


def test_exactly_one_concurrent_create_wins(file_db):
    assert get_db_manager() is file_db
    barrier = threading.Barrier(2)
    results, errors = [], []
    threads = [
        threading.Thread(target=_create_in_thread, args=(barrier, results, errors))
        for _ in range(2)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)

    assert len(results) == 1
    assert len(errors) == 1
    assert errors[0].status_code == 409

    session = file_db.new_session()
    try:
        rows = session.query(FieldDefinition).filter(FieldDefinition.tenant_id == TENANT).all()
    finally:
        session.close()
    assert [row.field_key for row in rows] == ["industry"]
