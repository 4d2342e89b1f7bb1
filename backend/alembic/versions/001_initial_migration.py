"""Initial migration

Revision ID: 001_initial
Revises: 
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Create departments table
    op.create_table(
        'departments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_departments_id'), 'departments', ['id'], unique=False)
    op.create_index(op.f('ix_departments_name'), 'departments', ['name'], unique=False)

    # Create profiles table
    op.create_table(
        'profiles',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('first_name', sa.String(), nullable=True),
        sa.Column('last_name', sa.String(), nullable=True),
        sa.Column('role', sa.String(50), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_profiles_id'), 'profiles', ['id'], unique=False)
    op.create_index(op.f('ix_profiles_email'), 'profiles', ['email'], unique=True)
    op.create_index(op.f('ix_profiles_role'), 'profiles', ['role'], unique=False)

    # Create fund_types table
    op.create_table(
        'fund_types',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('opening_balance', sa.Numeric(12, 2), nullable=False),
        sa.Column('current_balance', sa.Numeric(12, 2), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_fund_types_id'), 'fund_types', ['id'], unique=False)
    op.create_index(op.f('ix_fund_types_name'), 'fund_types', ['name'], unique=False)

    # Create approval_templates table
    op.create_table(
        'approval_templates',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('department_id', sa.Integer(), nullable=True),
        sa.Column('min_amount', sa.Numeric(12, 2), nullable=True),
        sa.Column('max_amount', sa.Numeric(12, 2), nullable=True),
        sa.Column('approval_steps', sa.JSON(), nullable=False),
        sa.Column('is_default', sa.Boolean(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_by', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.ForeignKeyConstraint(['department_id'], ['departments.id'], ),
        sa.ForeignKeyConstraint(['created_by'], ['profiles.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_approval_templates_id'), 'approval_templates', ['id'], unique=False)
    op.create_index(op.f('ix_approval_templates_department_id'), 'approval_templates', ['department_id'], unique=False)
    op.create_index(op.f('ix_approval_templates_is_active'), 'approval_templates', ['is_active'], unique=False)

    # Create money_requests table
    op.create_table(
        'money_requests',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('requester_id', sa.Integer(), nullable=False),
        sa.Column('requesting_department_id', sa.Integer(), nullable=False),
        sa.Column('fund_type_id', sa.Integer(), nullable=False),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('purpose', sa.Text(), nullable=False),
        sa.Column('suggested_vendor', sa.String(), nullable=True),
        sa.Column('associated_project', sa.String(), nullable=True),
        sa.Column('budget_code', sa.String(), nullable=True),
        sa.Column('priority', sa.String(6), nullable=False),
        sa.Column('status', sa.String(64), nullable=False),
        sa.Column('approval_template_id', sa.Integer(), nullable=True),
        sa.Column('request_date', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.ForeignKeyConstraint(['requester_id'], ['profiles.id'], ),
        sa.ForeignKeyConstraint(['requesting_department_id'], ['departments.id'], ),
        sa.ForeignKeyConstraint(['fund_type_id'], ['fund_types.id'], ),
        sa.ForeignKeyConstraint(['approval_template_id'], ['approval_templates.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_money_requests_id'), 'money_requests', ['id'], unique=False)
    op.create_index(op.f('ix_money_requests_requester_id'), 'money_requests', ['requester_id'], unique=False)
    op.create_index(op.f('ix_money_requests_requesting_department_id'), 'money_requests', ['requesting_department_id'], unique=False)
    op.create_index(op.f('ix_money_requests_priority'), 'money_requests', ['priority'], unique=False)
    op.create_index(op.f('ix_money_requests_status'), 'money_requests', ['status'], unique=False)
    op.create_index(op.f('ix_money_requests_created_at'), 'money_requests', ['created_at'], unique=False)

    # Create approval_steps table
    op.create_table(
        'approval_steps',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('money_request_id', sa.Integer(), nullable=False),
        sa.Column('approver_role', sa.String(50), nullable=False),
        sa.Column('step_order', sa.Integer(), nullable=False),
        sa.Column('decision', sa.String(8), nullable=False),
        sa.Column('pending_status', sa.String(64), nullable=False),
        sa.Column('decided_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('comments', sa.Text(), nullable=True),
        sa.Column('due_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('approver_id', sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(['money_request_id'], ['money_requests.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['approver_id'], ['profiles.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('money_request_id', 'step_order', name='uq_approval_step_order')
    )
    op.create_index(op.f('ix_approval_steps_id'), 'approval_steps', ['id'], unique=False)
    op.create_index(op.f('ix_approval_steps_money_request_id'), 'approval_steps', ['money_request_id'], unique=False)
    op.create_index(op.f('ix_approval_steps_approver_role'), 'approval_steps', ['approver_role'], unique=False)
    op.create_index(op.f('ix_approval_steps_decision'), 'approval_steps', ['decision'], unique=False)

    # Create money_request_status_history table
    op.create_table(
        'money_request_status_history',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('money_request_id', sa.Integer(), nullable=False),
        sa.Column('old_status', sa.String(64), nullable=True),
        sa.Column('new_status', sa.String(64), nullable=False),
        sa.Column('changed_by', sa.Integer(), nullable=True),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.ForeignKeyConstraint(['money_request_id'], ['money_requests.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['changed_by'], ['profiles.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_money_request_status_history_id'), 'money_request_status_history', ['id'], unique=False)
    op.create_index(op.f('ix_money_request_status_history_money_request_id'), 'money_request_status_history', ['money_request_id'], unique=False)

    # Create money_request_comments table
    op.create_table(
        'money_request_comments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('money_request_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('comment', sa.Text(), nullable=False),
        sa.Column('is_internal', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.ForeignKeyConstraint(['money_request_id'], ['money_requests.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['profiles.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_money_request_comments_id'), 'money_request_comments', ['id'], unique=False)
    op.create_index(op.f('ix_money_request_comments_money_request_id'), 'money_request_comments', ['money_request_id'], unique=False)


def downgrade() -> None:
    op.drop_table('money_request_comments')
    op.drop_table('money_request_status_history')
    op.drop_table('approval_steps')
    op.drop_table('money_requests')
    op.drop_table('approval_templates')
    op.drop_table('fund_types')
    op.drop_table('profiles')
    op.drop_table('departments')
