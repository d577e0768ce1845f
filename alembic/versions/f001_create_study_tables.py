"""Create events, bookings and attendance_records tables

Revision ID: f001_create_study_tables
Revises:
Create Date: 2026-01-12

- events: study events with a positive capacity
- bookings: confirmed/cancelled reservations, at most one confirmed per user and event
- attendance_records: per-participant attendance and measurements
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'f001_create_study_tables'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'events',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('description', sa.String(), nullable=True),
        sa.Column('location', sa.String(), nullable=True),
        sa.Column('category', sa.String(10), nullable=False),
        sa.Column('start_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_time', sa.DateTime(timezone=True), nullable=True),
        sa.Column('capacity', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.CheckConstraint('capacity > 0', name='check_event_capacity_positive'),
        sa.CheckConstraint(
            "category IN ('assessment', 'scan', 'touchpoint', 'other')",
            name='check_event_category',
        ),
    )
    op.create_index('ix_events_category', 'events', ['category'])
    op.create_index('ix_events_start_time', 'events', ['start_time'])

    op.create_table(
        'bookings',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('user_id', sa.String(), nullable=False),  # No FK - users live with the identity provider
        sa.Column('event_id', sa.String(), sa.ForeignKey('events.id', ondelete='CASCADE'), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='confirmed'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('cancelled_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("status IN ('confirmed', 'cancelled')", name='check_booking_status'),
    )
    op.create_index('ix_bookings_user_id', 'bookings', ['user_id'])
    op.create_index('ix_bookings_event_id', 'bookings', ['event_id'])

    # Only confirmed bookings are unique; cancelled rows are kept for history.
    op.execute("""
        CREATE UNIQUE INDEX uq_bookings_event_user_confirmed
        ON bookings(event_id, user_id)
        WHERE status = 'confirmed'
    """)

    op.create_table(
        'attendance_records',
        sa.Column('event_id', sa.String(), sa.ForeignKey('events.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('user_id', sa.String(), primary_key=True),
        sa.Column('attended', sa.Boolean(), nullable=True),
        sa.Column('grip_strength', sa.Numeric(), nullable=True),
        sa.Column('inbody', sa.Boolean(), nullable=True),
        sa.Column('chair_stand_30s', sa.Integer(), nullable=True),
        sa.Column('single_leg_stand', sa.Numeric(), nullable=True),
        sa.Column('up_down_step_count', sa.Integer(), nullable=True),
        sa.Column('dexa_scanned', sa.Boolean(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
    )
    op.create_index('ix_attendance_records_user_id', 'attendance_records', ['user_id'])


def downgrade() -> None:
    op.drop_index('ix_attendance_records_user_id', table_name='attendance_records')
    op.drop_table('attendance_records')
    op.execute("DROP INDEX IF EXISTS uq_bookings_event_user_confirmed")
    op.drop_index('ix_bookings_event_id', table_name='bookings')
    op.drop_index('ix_bookings_user_id', table_name='bookings')
    op.drop_table('bookings')
    op.drop_index('ix_events_start_time', table_name='events')
    op.drop_index('ix_events_category', table_name='events')
    op.drop_table('events')
