"""
Field definition model: one custom attribute a tenant adds to an entity type.

Just the data structure. Definitions are archived, never deleted, so stored
values and audit history remain interpretable.
"""

from sqlalchemy import Boolean, Column, ForeignKey, Index, String, Text, text

from ..constants import Limits
from .db_base import JSON, TimestampMixin, UUIDMixin
from .db_config import Base


class FieldDefinition(Base, UUIDMixin, TimestampMixin):
    """Custom field schema entry for (tenant, entity_type, field_key)."""

    __tablename__ = "tenant_field_definition"

    tenant_id = Column(String(Limits.TENANT_ID_LENGTH), nullable=False)
    entity_type = Column(String(50), nullable=False)
    field_key = Column(String(Limits.FIELD_KEY_LENGTH), nullable=False)
    label = Column(String(Limits.LABEL_LENGTH), nullable=False)
    description = Column(Text, nullable=True)
    data_type = Column(String(50), nullable=False)
    required = Column(Boolean, nullable=False, default=False)
    searchable = Column(Boolean, nullable=False, default=False)
    option_set_id = Column(
        String(36), ForeignKey("tenant_option_set.id", ondelete="SET NULL"), nullable=True
    )
    default_value = Column(JSON, nullable=True)
    ui_config = Column(JSON, nullable=True)
    is_archived = Column(Boolean, nullable=False, default=False)

    __table_args__ = (
        Index("ix_field_definition_tenant_entity", "tenant_id", "entity_type"),
        # A field key is unique among the live definitions of a tenant's entity type
        Index(
            "uq_field_definition_live_key",
            "tenant_id",
            "entity_type",
            "field_key",
            unique=True,
            sqlite_where=text("is_archived = 0"),
            postgresql_where=text("is_archived = false"),
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<FieldDefinition(id='{self.id}', tenant_id='{self.tenant_id}', "
            f"entity_type='{self.entity_type}', field_key='{self.field_key}')>"
        )
