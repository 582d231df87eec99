"""create activity session tables

Revision ID: a001_create_activity_session_tables
Revises:
Create Date: 2026-10-18 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = 'a001_create_activity_session_tables'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_json = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def upgrade() -> None:
    op.create_table(
        'activities',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('code', sa.String(length=8), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('sport', sa.String(length=50), nullable=False),
        sa.Column('min_players', sa.Integer(), nullable=False),
        sa.Column('max_players', sa.Integer(), nullable=False),
        sa.Column('recurring_days', _json, nullable=False),
        sa.Column('recurring_type', sa.String(length=10), nullable=False),
        sa.Column('start_time', sa.String(length=5), nullable=False),
        sa.Column('end_time', sa.String(length=5), nullable=False),
        sa.Column('created_by', sa.String(), nullable=False),
        sa.Column('is_public', sa.Boolean(), server_default=sa.text('true'), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('min_players >= 2', name='check_activity_min_players'),
        sa.CheckConstraint('max_players <= 100', name='check_activity_max_players'),
        sa.CheckConstraint('min_players <= max_players', name='check_activity_player_bounds'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_activities_code', 'activities', ['code'], unique=True)
    op.create_index('ix_activities_sport', 'activities', ['sport'])
    op.create_index('ix_activities_created_by', 'activities', ['created_by'])

    op.create_table(
        'activity_sessions',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('activity_id', sa.String(), nullable=False),
        sa.Column('date', sa.DateTime(), nullable=False),
        sa.Column('session_day', sa.Date(), nullable=False),
        sa.Column('max_players', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=20), server_default='active', nullable=False),
        sa.Column('is_cancelled', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['activity_id'], ['activities.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('activity_id', 'session_day', name='unique_activity_session_day'),
    )
    op.create_index('ix_activity_sessions_activity_id', 'activity_sessions', ['activity_id'])
    op.create_index('ix_activity_sessions_date', 'activity_sessions', ['date'])

    op.create_table(
        'activity_participants',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('session_id', sa.String(), nullable=False),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('joined_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['session_id'], ['activity_sessions.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('session_id', 'user_id', name='unique_session_participant'),
    )
    op.create_index('ix_activity_participants_session_id', 'activity_participants', ['session_id'])
    op.create_index('ix_activity_participants_user_id', 'activity_participants', ['user_id'])

    op.create_table(
        'activity_subscriptions',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('activity_id', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['activity_id'], ['activities.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'activity_id', name='unique_user_activity_subscription'),
    )
    op.create_index('ix_activity_subscriptions_user_id', 'activity_subscriptions', ['user_id'])
    op.create_index('ix_activity_subscriptions_activity_id', 'activity_subscriptions', ['activity_id'])

    op.create_table(
        'notification_outbox',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('event_type', sa.String(length=50), nullable=False),
        sa.Column('activity_id', sa.String(), nullable=True),
        sa.Column('session_id', sa.String(), nullable=True),
        sa.Column('payload', _json, nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('dispatched_at', sa.DateTime(), nullable=True),
        sa.Column('attempts', sa.Integer(), server_default='0', nullable=False),
        sa.Column('last_error', sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_notification_outbox_event_type', 'notification_outbox', ['event_type'])
    op.create_index('ix_notification_outbox_activity_id', 'notification_outbox', ['activity_id'])
    op.create_index('ix_notification_outbox_session_id', 'notification_outbox', ['session_id'])
    op.create_index('ix_notification_outbox_created_at', 'notification_outbox', ['created_at'])

    op.create_table(
        'notifications',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('type', sa.String(length=50), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('activity_id', sa.String(), nullable=True),
        sa.Column('session_id', sa.String(), nullable=True),
        sa.Column('data', _json, nullable=True),
        sa.Column('read', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_notifications_user_id', 'notifications', ['user_id'])


def downgrade() -> None:
    op.drop_table('notifications')
    op.drop_table('notification_outbox')
    op.drop_table('activity_subscriptions')
    op.drop_table('activity_participants')
    op.drop_table('activity_sessions')
    op.drop_table('activities')
