"""Create inventory tables

Revision ID: 20261019_000001
Revises: None
Create Date: 2026-10-19

This migration creates tenants, projects, towers, unit_type_rules and units
for unit pricing and reservation locks.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '20261019_000001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    """Create the inventory tables."""
    op.create_table(
        'tenants',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('domain', sa.String(length=255), nullable=True),
        sa.Column('active', sa.Boolean(), nullable=False),
        sa.Column('settings', sa.JSON(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('domain', name='uq_tenants_domain'),
    )

    op.create_table(
        'projects',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('tenant_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('city', sa.String(length=100), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('gst_rate', sa.Numeric(precision=5, scale=2), nullable=True),
        sa.Column('stamp_duty_rate', sa.Numeric(precision=5, scale=2), nullable=True),
        sa.Column('registration_rate', sa.Numeric(precision=5, scale=2), nullable=True),
        sa.Column('custom_pricing_model', sa.JSON(), nullable=True),
        sa.Column('active', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(
            ['tenant_id'],
            ['tenants.id'],
            name='fk_projects_tenant_id',
            ondelete='CASCADE'
        ),
    )
    op.create_index('ix_projects_tenant_id', 'projects', ['tenant_id'])

    op.create_table(
        'towers',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('project_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('total_floors', sa.Integer(), nullable=True),
        sa.Column('premiums', sa.JSON(), nullable=True),
        sa.Column('active', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(
            ['project_id'],
            ['projects.id'],
            name='fk_towers_project_id',
            ondelete='CASCADE'
        ),
    )
    op.create_index('ix_towers_project_id', 'towers', ['project_id'])

    op.create_table(
        'unit_type_rules',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('tenant_id', sa.Integer(), nullable=False),
        sa.Column('project_id', sa.Integer(), nullable=False),
        sa.Column('unit_type', sa.String(length=100), nullable=False),
        sa.Column('pricing_rules', sa.JSON(), nullable=False),
        sa.Column('active', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(
            ['tenant_id'],
            ['tenants.id'],
            name='fk_unit_type_rules_tenant_id',
            ondelete='CASCADE'
        ),
        sa.ForeignKeyConstraint(
            ['project_id'],
            ['projects.id'],
            name='fk_unit_type_rules_project_id',
            ondelete='CASCADE'
        ),
        sa.UniqueConstraint('tenant_id', 'project_id', 'unit_type', name='uq_unit_type_rules_key'),
    )
    op.create_index('ix_unit_type_rules_tenant_id', 'unit_type_rules', ['tenant_id'])
    op.create_index('ix_unit_type_rules_project_id', 'unit_type_rules', ['project_id'])
    op.create_index('ix_unit_type_rules_unit_type', 'unit_type_rules', ['unit_type'])

    op.create_table(
        'units',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('tenant_id', sa.Integer(), nullable=False),
        sa.Column('project_id', sa.Integer(), nullable=False),
        sa.Column('tower_id', sa.Integer(), nullable=False),
        sa.Column('number', sa.String(length=50), nullable=False),
        sa.Column('unit_type', sa.String(length=100), nullable=False),
        sa.Column('floor', sa.Integer(), nullable=False),
        sa.Column('carpet_area', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('built_up_area', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('super_built_up_area', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('base_price', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('views', sa.JSON(), nullable=False),
        sa.Column('premium_adjustments', sa.JSON(), nullable=False),
        sa.Column('additional_charges', sa.JSON(), nullable=False),
        sa.Column(
            'status',
            sa.Enum('available', 'locked', 'booked', 'sold', name='unit_status', create_constraint=True),
            nullable=False,
            server_default='available'
        ),
        sa.Column('locked_by', sa.String(length=64), nullable=True),
        sa.Column('locked_until', sa.DateTime(), nullable=True),
        sa.Column('booking_id', sa.String(length=64), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['tenant_id'], ['tenants.id'], name='fk_units_tenant_id'),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id'], name='fk_units_project_id'),
        sa.ForeignKeyConstraint(['tower_id'], ['towers.id'], name='fk_units_tower_id'),
    )

    # Create indexes for common queries
    op.create_index('ix_units_tenant_id', 'units', ['tenant_id'])
    op.create_index('ix_units_project_id', 'units', ['project_id'])
    op.create_index('ix_units_tower_id', 'units', ['tower_id'])
    op.create_index('ix_units_unit_type', 'units', ['unit_type'])
    op.create_index('ix_units_status', 'units', ['status'])
    op.create_index('ix_units_locked_until', 'units', ['locked_until'])


def downgrade() -> None:
    """Drop the inventory tables."""
    op.drop_index('ix_units_locked_until', table_name='units')
    op.drop_index('ix_units_status', table_name='units')
    op.drop_index('ix_units_unit_type', table_name='units')
    op.drop_index('ix_units_tower_id', table_name='units')
    op.drop_index('ix_units_project_id', table_name='units')
    op.drop_index('ix_units_tenant_id', table_name='units')
    op.drop_table('units')

    op.drop_index('ix_unit_type_rules_unit_type', table_name='unit_type_rules')
    op.drop_index('ix_unit_type_rules_project_id', table_name='unit_type_rules')
    op.drop_index('ix_unit_type_rules_tenant_id', table_name='unit_type_rules')
    op.drop_table('unit_type_rules')

    op.drop_index('ix_towers_project_id', table_name='towers')
    op.drop_table('towers')

    op.drop_index('ix_projects_tenant_id', table_name='projects')
    op.drop_table('projects')

    op.drop_table('tenants')

    # Drop the enum type
    if op.get_bind().dialect.name == 'postgresql':
        op.execute("DROP TYPE IF EXISTS unit_status")
