"""
Column types and mixins shared by the option set and field definition tables.

PostgreSQL stores JSON natively; SQLite gets it serialized into a TEXT column.
"""

import json
import uuid
from datetime import UTC, datetime

from pydantic_core import to_jsonable_python
from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.types import TypeDecorator


def utc_now() -> datetime:
    return datetime.now(UTC)


def new_uuid() -> str:
    return str(uuid.uuid4())


class JSON(TypeDecorator):
    """
    JSON column for field default values and uiConfig blobs.

    Values go through pydantic_core first, so dates or enums inside a default
    value are stored in their JSON form.
    """

    impl = Text
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(JSONB())
        return dialect.type_descriptor(Text())

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        jsonable = to_jsonable_python(value)
        return jsonable if dialect.name == "postgresql" else json.dumps(jsonable)

    def process_result_value(self, value, dialect):
        if value is None or dialect.name == "postgresql":
            return value
        return json.loads(value)


class TimestampMixin:
    """created_at and updated_at, timezone-aware UTC."""

    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now
    )


class UUIDMixin:
    """String UUID primary key, portable across SQLite and PostgreSQL."""

    id = Column(String(36), primary_key=True, default=new_uuid)
