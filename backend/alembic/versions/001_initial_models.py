"""initial_models

Revision ID: 001
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ACTIVE_ONLY = sa.text("status = 'active'")


def _subscription_columns() -> list:
    return [
        sa.Column('uuid', sa.String(36), nullable=False),
        sa.Column('status', sa.String(50), nullable=False, server_default='pending'),
        sa.Column('user_id', sa.String(36), nullable=False),
        sa.Column('start_date', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('end_date', sa.DateTime(), nullable=True),
        sa.Column('stripe_payment_intent_id', sa.String(255), nullable=True),
        sa.Column('stripe_subscription_id', sa.String(255), nullable=True),
        sa.Column('stripe_price_id', sa.String(255), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    # Create users table
    op.create_table(
        'users',
        sa.Column('uuid', sa.String(36), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('status', sa.String(50), nullable=False, server_default='active'),
        sa.Column('user_role', sa.String(50), nullable=False, server_default='user'),
        sa.Column('stripe_customer_id', sa.String(255), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('uuid'),
        sa.UniqueConstraint('email'),
    )
    op.create_index('ix_users_email', 'users', ['email'])
    op.create_index('idx_user_status', 'users', ['status'])

    # Create agent_teams table
    op.create_table(
        'agent_teams',
        sa.Column('uuid', sa.String(36), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('category', sa.String(100), nullable=False),
        sa.Column('price', sa.Integer(), nullable=False),
        sa.Column('target', sa.Text(), nullable=True),
        sa.Column('impact', sa.Text(), nullable=True),
        sa.Column('workflow', sa.JSON(), nullable=True),
        sa.Column('icon_class', sa.String(100), nullable=True),
        sa.Column('gradient_class', sa.String(100), nullable=True),
        sa.Column('is_popular', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_featured', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_by', sa.String(36), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('uuid'),
        sa.ForeignKeyConstraint(['created_by'], ['users.uuid']),
    )

    # Create agents table
    op.create_table(
        'agents',
        sa.Column('uuid', sa.String(36), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('price', sa.Integer(), nullable=False),
        sa.Column('category', sa.String(100), nullable=False),
        sa.Column('features', sa.Text(), nullable=False, server_default=''),
        sa.Column('is_popular', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_new', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_enterprise', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('icon_class', sa.String(100), nullable=True),
        sa.Column('icon_bg_class', sa.String(100), nullable=True),
        sa.Column('gradient_class', sa.String(100), nullable=True),
        sa.Column('team_id', sa.String(36), nullable=True),
        sa.Column('team_role', sa.String(100), nullable=True),
        sa.Column('created_by', sa.String(36), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('uuid'),
        sa.ForeignKeyConstraint(['team_id'], ['agent_teams.uuid']),
        sa.ForeignKeyConstraint(['created_by'], ['users.uuid']),
    )
    op.create_index('idx_agent_category', 'agents', ['category'])
    op.create_index('idx_agent_team_id', 'agents', ['team_id'])

    # Create subscriptions table (agent subscriptions)
    op.create_table(
        'subscriptions',
        *_subscription_columns(),
        sa.Column('agent_id', sa.String(36), nullable=False),
        sa.PrimaryKeyConstraint('uuid'),
        sa.ForeignKeyConstraint(['user_id'], ['users.uuid']),
        sa.ForeignKeyConstraint(['agent_id'], ['agents.uuid']),
    )
    op.create_index('idx_subscription_user_id', 'subscriptions', ['user_id'])
    op.create_index('idx_subscription_agent_id', 'subscriptions', ['agent_id'])
    op.create_index('idx_subscription_status', 'subscriptions', ['status'])
    op.create_index('idx_subscription_payment_intent', 'subscriptions', ['stripe_payment_intent_id'])
    op.create_index(
        'uq_subscription_active_user_agent',
        'subscriptions',
        ['user_id', 'agent_id'],
        unique=True,
        postgresql_where=ACTIVE_ONLY,
        sqlite_where=ACTIVE_ONLY,
    )

    # Create team_subscriptions table
    op.create_table(
        'team_subscriptions',
        *_subscription_columns(),
        sa.Column('team_id', sa.String(36), nullable=False),
        sa.PrimaryKeyConstraint('uuid'),
        sa.ForeignKeyConstraint(['user_id'], ['users.uuid']),
        sa.ForeignKeyConstraint(['team_id'], ['agent_teams.uuid']),
    )
    op.create_index('idx_team_subscription_user_id', 'team_subscriptions', ['user_id'])
    op.create_index('idx_team_subscription_team_id', 'team_subscriptions', ['team_id'])
    op.create_index('idx_team_subscription_status', 'team_subscriptions', ['status'])
    op.create_index('idx_team_subscription_payment_intent', 'team_subscriptions', ['stripe_payment_intent_id'])
    op.create_index(
        'uq_team_subscription_active_user_team',
        'team_subscriptions',
        ['user_id', 'team_id'],
        unique=True,
        postgresql_where=ACTIVE_ONLY,
        sqlite_where=ACTIVE_ONLY,
    )

    # Create workflow_requests table
    op.create_table(
        'workflow_requests',
        sa.Column('uuid', sa.String(36), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('complexity', sa.String(50), nullable=False),
        sa.Column('integrations', sa.Text(), nullable=True),
        sa.Column('status', sa.String(50), nullable=False, server_default='pending'),
        sa.Column('user_id', sa.String(36), nullable=False),
        sa.Column('team_id', sa.String(36), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('uuid'),
        sa.ForeignKeyConstraint(['user_id'], ['users.uuid']),
        sa.ForeignKeyConstraint(['team_id'], ['agent_teams.uuid']),
    )
    op.create_index('idx_workflow_request_user_id', 'workflow_requests', ['user_id'])
    op.create_index('idx_workflow_request_status', 'workflow_requests', ['status'])


def downgrade() -> None:
    op.drop_table('workflow_requests')
    op.drop_table('team_subscriptions')
    op.drop_table('subscriptions')
    op.drop_table('agents')
    op.drop_table('agent_teams')
    op.drop_table('users')
