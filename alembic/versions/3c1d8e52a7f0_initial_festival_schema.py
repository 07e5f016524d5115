"""Initial festival schema: users, events, attendance, feedback and RSVP history

Revision ID: 3c1d8e52a7f0
Revises:
Create Date: 2026-10-18 11:20:04.512337

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3c1d8e52a7f0'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.String(128), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False, unique=True),
        sa.Column('hashed_password', sa.String(255), nullable=False),
        sa.Column('fullname', sa.String(255), nullable=True),
        sa.Column('age', sa.Integer(), nullable=True),
        sa.Column('gender', sa.String(50), nullable=True),
        sa.Column('role', sa.Enum('user', 'organizer', 'admin', name='roleenum'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_users_email', 'users', ['email'])

    op.create_table(
        'events',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('category', sa.String(100), nullable=True),
        sa.Column('location', sa.String(255), nullable=True),
        sa.Column('start_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('max_attendees', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('title', name='uq_event_title'),
    )
    op.create_index('idx_event_start_time', 'events', ['start_time'])
    op.create_index('idx_event_created_at', 'events', ['created_at'])

    # One row per active RSVP; the unique pair rejects concurrent duplicates
    op.create_table(
        'event_attendees',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('event_id', sa.String(36), sa.ForeignKey('events.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.String(128), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('event_id', 'user_id', name='uq_event_attendee'),
    )
    op.create_index('idx_attendee_user', 'event_attendees', ['user_id'])
    op.create_index('idx_attendee_event', 'event_attendees', ['event_id'])

    op.create_table(
        'event_feedback',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('event_id', sa.String(36), sa.ForeignKey('events.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.String(128), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.Column('comment', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('idx_feedback_event', 'event_feedback', ['event_id'])

    op.create_table(
        'rsvps',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('user_id', sa.String(128), nullable=False),
        sa.Column('event_id', sa.String(36), nullable=False),
        sa.Column('event_name', sa.String(255), nullable=False),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('idx_rsvp_user', 'rsvps', ['user_id'])
    op.create_index('idx_rsvp_event', 'rsvps', ['event_id'])


def downgrade() -> None:
    op.drop_index('idx_rsvp_event', table_name='rsvps')
    op.drop_index('idx_rsvp_user', table_name='rsvps')
    op.drop_table('rsvps')

    op.drop_index('idx_feedback_event', table_name='event_feedback')
    op.drop_table('event_feedback')

    op.drop_index('idx_attendee_event', table_name='event_attendees')
    op.drop_index('idx_attendee_user', table_name='event_attendees')
    op.drop_table('event_attendees')

    op.drop_index('idx_event_created_at', table_name='events')
    op.drop_index('idx_event_start_time', table_name='events')
    op.drop_table('events')

    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
    sa.Enum(name='roleenum').drop(op.get_bind(), checkfirst=True)
