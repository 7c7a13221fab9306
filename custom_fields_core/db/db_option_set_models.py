"""
Option set models: tenant-scoped controlled vocabularies.

Just the data structure - no business logic or class methods. Options are
never deleted; `is_active` is cleared instead so values already stored on
records stay interpretable.
"""

from sqlalchemy import (
    Boolean,
    Column,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)

from ..constants import Limits
from .db_base import TimestampMixin, UUIDMixin
from .db_config import Base


class OptionSet(Base, UUIDMixin, TimestampMixin):
    """Named list of valid choices owned by one tenant."""

    __tablename__ = "tenant_option_set"

    tenant_id = Column(String(Limits.TENANT_ID_LENGTH), nullable=False)
    name = Column(String(Limits.OPTION_SET_NAME_LENGTH), nullable=False)
    # Informational only, not enforced against field definitions
    entity_type = Column(String(50), nullable=True)

    __table_args__ = (
        UniqueConstraint("tenant_id", "name", name="uq_option_set_tenant_name"),
        Index("ix_option_set_tenant", "tenant_id"),
    )

    def __repr__(self) -> str:
        return f"<OptionSet(id='{self.id}', tenant_id='{self.tenant_id}', name='{self.name}')>"


class OptionSetOption(Base, UUIDMixin, TimestampMixin):
    """One choice inside an option set."""

    __tablename__ = "tenant_option_set_option"

    option_set_id = Column(
        String(36), ForeignKey("tenant_option_set.id", ondelete="CASCADE"), nullable=False
    )
    option_key = Column(String(Limits.OPTION_KEY_LENGTH), nullable=False)
    label = Column(String(Limits.LABEL_LENGTH), nullable=False)
    description = Column(Text, nullable=True)
    color = Column(String(Limits.COLOR_LENGTH), nullable=True)
    sort_order = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)

    __table_args__ = (
        UniqueConstraint("option_set_id", "option_key", name="uq_option_set_option_key"),
        Index("ix_option_set_option_set_sort", "option_set_id", "sort_order"),
    )

    def __repr__(self) -> str:
        return (
            f"<OptionSetOption(id='{self.id}', option_set_id='{self.option_set_id}', "
            f"option_key='{self.option_key}', is_active={self.is_active})>"
        )
