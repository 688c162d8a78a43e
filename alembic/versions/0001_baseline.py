"""Baseline migration - profiles, clients, satellites, tasks, alerts, audit log

Revision ID: 0001_baseline
Revises:
Create Date: 2026-10-18

Creates every table used by the intake API. Column types are portable so
the same migration runs on PostgreSQL and SQLite.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001_baseline'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    """Create all tables."""

    # ==========================================================================
    # Profiles
    # ==========================================================================
    op.create_table(
        'profiles',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False, unique=True),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('role', sa.String(30), nullable=False),
        sa.Column('phone', sa.String(30), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('token_version', sa.Integer(), nullable=False),
        *_timestamps(),
    )

    # ==========================================================================
    # Clients
    # ==========================================================================
    op.create_table(
        'clients',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('middle_name', sa.String(100), nullable=True),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('preferred_name', sa.String(100), nullable=True),
        sa.Column('date_of_birth', sa.Date(), nullable=True),
        sa.Column('ssn_encrypted', sa.Text(), nullable=True),
        sa.Column('ssn_last_four', sa.String(4), nullable=True),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('phone', sa.String(30), nullable=True),
        sa.Column('alternate_phone', sa.String(30), nullable=True),
        sa.Column('street_address', sa.String(255), nullable=True),
        sa.Column('apartment_unit', sa.String(50), nullable=True),
        sa.Column('city', sa.String(100), nullable=True),
        sa.Column('state', sa.String(50), nullable=True),
        sa.Column('zip_code', sa.String(10), nullable=True),
        sa.Column('mailing_same_as_physical', sa.Boolean(), nullable=False),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('has_portal_access', sa.Boolean(), nullable=False),
        sa.Column(
            'portal_user_id', sa.Uuid(),
            sa.ForeignKey('profiles.id', ondelete='SET NULL'),
            nullable=True, unique=True,
        ),
        sa.Column('intake_completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_by', sa.Uuid(), sa.ForeignKey('profiles.id', ondelete='SET NULL'), nullable=True),
        sa.Column(
            'assigned_case_manager', sa.Uuid(),
            sa.ForeignKey('profiles.id', ondelete='SET NULL'), nullable=True,
        ),
        *_timestamps(),
    )
    op.create_index('idx_clients_created', 'clients', ['created_at'])
    op.create_index('idx_clients_status_created', 'clients', ['status', 'created_at'])

    # ==========================================================================
    # One-to-one satellites
    # ==========================================================================
    op.create_table(
        'case_management',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column(
            'client_id', sa.Uuid(),
            sa.ForeignKey('clients.id', ondelete='CASCADE'), nullable=False, unique=True,
        ),
        sa.Column('client_id_number', sa.String(100), nullable=True),
        sa.Column('housing_status', sa.String(20), nullable=False),
        sa.Column('primary_language', sa.String(50), nullable=False),
        sa.Column('secondary_language', sa.String(50), nullable=True),
        sa.Column('needs_interpreter', sa.Boolean(), nullable=False),
        sa.Column('vi_spdat_score', sa.Integer(), nullable=True),
        sa.Column('health_insurance', sa.Boolean(), nullable=False),
        sa.Column('health_insurance_type', sa.String(100), nullable=True),
        sa.Column('non_cash_benefits', sa.JSON(), nullable=False),
        sa.Column('health_status', sa.String(100), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'demographics',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column(
            'client_id', sa.Uuid(),
            sa.ForeignKey('clients.id', ondelete='CASCADE'), nullable=False, unique=True,
        ),
        sa.Column('gender', sa.String(50), nullable=True),
        sa.Column('ethnicity', sa.String(100), nullable=True),
        sa.Column('race', sa.JSON(), nullable=False),
        sa.Column('marital_status', sa.String(50), nullable=True),
        sa.Column('employment_status', sa.String(50), nullable=True),
        sa.Column('monthly_income', sa.Numeric(10, 2), nullable=True),
        sa.Column('income_source', sa.String(100), nullable=True),
        sa.Column('veteran_status', sa.Boolean(), nullable=False),
        sa.Column('disability_status', sa.Boolean(), nullable=False),
        *_timestamps(),
    )

    # ==========================================================================
    # List satellites
    # ==========================================================================
    op.create_table(
        'emergency_contacts',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('client_id', sa.Uuid(), sa.ForeignKey('clients.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('relationship', sa.String(50), nullable=True),
        sa.Column('phone', sa.String(30), nullable=False),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('idx_emergency_contacts_client', 'emergency_contacts', ['client_id'])

    op.create_table(
        'household_members',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('client_id', sa.Uuid(), sa.ForeignKey('clients.id', ondelete='CASCADE'), nullable=False),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('relationship', sa.String(50), nullable=False),
        sa.Column('date_of_birth', sa.Date(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('idx_household_members_client', 'household_members', ['client_id'])

    # ==========================================================================
    # Tasks and alerts
    # ==========================================================================
    op.create_table(
        'tasks',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('client_id', sa.Uuid(), sa.ForeignKey('clients.id', ondelete='CASCADE'), nullable=True),
        sa.Column('assigned_to', sa.Uuid(), sa.ForeignKey('profiles.id', ondelete='SET NULL'), nullable=True),
        sa.Column('assigned_by', sa.Uuid(), sa.ForeignKey('profiles.id', ondelete='SET NULL'), nullable=True),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('priority', sa.String(20), nullable=False),
        sa.Column('due_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('completed_by', sa.Uuid(), sa.ForeignKey('profiles.id', ondelete='SET NULL'), nullable=True),
        sa.Column('category', sa.String(50), nullable=True),
        *_timestamps(),
    )
    op.create_index('idx_tasks_client_status', 'tasks', ['client_id', 'status'])
    op.create_index('idx_tasks_assigned', 'tasks', ['assigned_to', 'status'])

    op.create_table(
        'alerts',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('profiles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('client_id', sa.Uuid(), sa.ForeignKey('clients.id', ondelete='CASCADE'), nullable=True),
        sa.Column('task_id', sa.Uuid(), sa.ForeignKey('tasks.id', ondelete='CASCADE'), nullable=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('message', sa.Text(), nullable=True),
        sa.Column('alert_type', sa.String(30), nullable=False),
        sa.Column('trigger_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('is_read', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )

    # ==========================================================================
    # Audit log (append-only)
    # ==========================================================================
    op.create_table(
        'audit_log',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), nullable=True),
        sa.Column('action', sa.String(50), nullable=False),
        sa.Column('table_name', sa.String(50), nullable=True),
        sa.Column('record_id', sa.Uuid(), nullable=True),
        sa.Column('old_values', sa.JSON(), nullable=True),
        sa.Column('new_values', sa.JSON(), nullable=True),
        sa.Column('ip_address', sa.String(45), nullable=True),
        sa.Column('user_agent', sa.String(500), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('idx_audit_record', 'audit_log', ['table_name', 'record_id', 'created_at'])
    op.create_index('idx_audit_actor', 'audit_log', ['user_id', 'created_at'])


def downgrade() -> None:
    """Drop all tables."""

    # Drop tables in reverse order (respecting foreign keys)
    op.drop_table('audit_log')
    op.drop_table('alerts')
    op.drop_table('tasks')
    op.drop_table('household_members')
    op.drop_table('emergency_contacts')
    op.drop_table('demographics')
    op.drop_table('case_management')
    op.drop_table('clients')
    op.drop_table('profiles')
