"""create option set and field definition tables

Revision ID: 4f2a9c1d7e35
Revises:
Create Date: 2026-10-19 09:12:41.118532

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

from custom_fields_core.db.db_base import JSON


# revision identifiers, used by Alembic.
revision: str = '4f2a9c1d7e35'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'tenant_option_set',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('tenant_id', sa.String(length=100), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('entity_type', sa.String(length=50), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('tenant_id', 'name', name='uq_option_set_tenant_name'),
    )
    op.create_index('ix_option_set_tenant', 'tenant_option_set', ['tenant_id'])

    op.create_table(
        'tenant_option_set_option',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column(
            'option_set_id',
            sa.String(length=36),
            sa.ForeignKey('tenant_option_set.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('option_key', sa.String(length=100), nullable=False),
        sa.Column('label', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('color', sa.String(length=20), nullable=True),
        sa.Column('sort_order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.UniqueConstraint('option_set_id', 'option_key', name='uq_option_set_option_key'),
    )
    op.create_index(
        'ix_option_set_option_set_sort', 'tenant_option_set_option', ['option_set_id', 'sort_order']
    )

    op.create_table(
        'tenant_field_definition',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('tenant_id', sa.String(length=100), nullable=False),
        sa.Column('entity_type', sa.String(length=50), nullable=False),
        sa.Column('field_key', sa.String(length=100), nullable=False),
        sa.Column('label', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('data_type', sa.String(length=50), nullable=False),
        sa.Column('required', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('searchable', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            'option_set_id',
            sa.String(length=36),
            sa.ForeignKey('tenant_option_set.id', ondelete='SET NULL'),
            nullable=True,
        ),
        sa.Column('default_value', JSON(), nullable=True),
        sa.Column('ui_config', JSON(), nullable=True),
        sa.Column('is_archived', sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index(
        'ix_field_definition_tenant_entity', 'tenant_field_definition', ['tenant_id', 'entity_type']
    )
    # Archived definitions keep their key so it can be reused by a new live definition
    op.create_index(
        'uq_field_definition_live_key',
        'tenant_field_definition',
        ['tenant_id', 'entity_type', 'field_key'],
        unique=True,
        sqlite_where=sa.text('is_archived = 0'),
        postgresql_where=sa.text('is_archived = false'),
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('uq_field_definition_live_key', table_name='tenant_field_definition')
    op.drop_index('ix_field_definition_tenant_entity', table_name='tenant_field_definition')
    op.drop_table('tenant_field_definition')
    op.drop_index('ix_option_set_option_set_sort', table_name='tenant_option_set_option')
    op.drop_table('tenant_option_set_option')
    op.drop_index('ix_option_set_tenant', table_name='tenant_option_set')
    op.drop_table('tenant_option_set')
