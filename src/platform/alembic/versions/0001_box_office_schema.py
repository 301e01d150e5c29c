"""box_office_schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19

Schema:
- venue_seat: physical seats of a venue
- recital_show: one performance
- show_seat: per-show seat inventory (available / reserved / sold)
- seat_reservation + reservation_seat: time-boxed holds and the seats they own
- ticket_order + ticket: paid orders and one ticket per seat
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create all box office tables."""

    # ========== Venue / show inventory ==========
    op.create_table(
        'venue_seat',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('venue_name', sa.String(length=200), nullable=False),
        sa.Column('section', sa.String(length=50), nullable=False),
        sa.Column('row_label', sa.String(length=10), nullable=False),
        sa.Column('seat_number', sa.Integer(), nullable=False),
        sa.Column('seat_type', sa.String(length=20), nullable=False),
        sa.Column('is_handicap_accessible', sa.Boolean(), nullable=False),
        sa.Column('base_price_in_cents', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_venue_seat_venue_name'), 'venue_seat', ['venue_name'])

    op.create_table(
        'recital_show',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('show_date', sa.Date(), nullable=False),
        sa.Column('start_time', sa.String(length=5), nullable=True),
        sa.Column('venue_name', sa.String(length=200), nullable=True),
        sa.Column('venue_address', sa.String(length=500), nullable=True),
        sa.Column(
            'created_at',
            sa.DateTime(timezone=True),
            server_default=sa.text('now()'),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'show_seat',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('show_id', sa.Uuid(), nullable=False),
        sa.Column('seat_id', sa.Uuid(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('price_in_cents', sa.Integer(), nullable=False),
        sa.Column('reserved_until', sa.DateTime(timezone=True), nullable=True),
        sa.Column('reserved_by', sa.Uuid(), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['show_id'], ['recital_show.id']),
        sa.ForeignKeyConstraint(['seat_id'], ['venue_seat.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint(
            "status IN ('available', 'reserved', 'sold')", name='ck_show_seat_status'
        ),
    )
    op.create_index(op.f('ix_show_seat_show_id'), 'show_seat', ['show_id'])
    op.create_index(op.f('ix_show_seat_reserved_by'), 'show_seat', ['reserved_by'])

    # ========== Holds ==========
    op.create_table(
        'seat_reservation',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('reservation_token', sa.String(length=64), nullable=False),
        sa.Column('session_id', sa.String(length=128), nullable=False),
        sa.Column('show_id', sa.Uuid(), nullable=False),
        sa.Column('email', sa.String(length=320), nullable=False),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('extension_count', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['show_id'], ['recital_show.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('reservation_token'),
    )
    op.create_index(op.f('ix_seat_reservation_session_id'), 'seat_reservation', ['session_id'])
    op.create_index(op.f('ix_seat_reservation_expires_at'), 'seat_reservation', ['expires_at'])

    op.create_table(
        'reservation_seat',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('reservation_id', sa.Uuid(), nullable=False),
        sa.Column('show_seat_id', sa.Uuid(), nullable=False),
        sa.ForeignKeyConstraint(['reservation_id'], ['seat_reservation.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['show_seat_id'], ['show_seat.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('reservation_id', 'show_seat_id', name='uq_reservation_seat'),
    )
    op.create_index(
        op.f('ix_reservation_seat_reservation_id'), 'reservation_seat', ['reservation_id']
    )

    # ========== Orders / tickets ==========
    op.create_table(
        'ticket_order',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('order_number', sa.String(length=32), nullable=False),
        sa.Column('show_id', sa.Uuid(), nullable=False),
        sa.Column('customer_name', sa.String(length=200), nullable=False),
        sa.Column('customer_email', sa.String(length=320), nullable=False),
        sa.Column('customer_phone', sa.String(length=50), nullable=True),
        sa.Column('payment_intent_id', sa.String(length=255), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('total_amount_in_cents', sa.Integer(), nullable=False),
        sa.Column('refunded_amount_in_cents', sa.Integer(), server_default='0', nullable=False),
        sa.Column('session_id', sa.String(length=128), nullable=True),
        sa.Column('user_id', sa.String(length=64), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['show_id'], ['recital_show.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('order_number'),
        sa.UniqueConstraint('payment_intent_id', name='uq_ticket_order_payment_intent_id'),
    )
    op.create_index(op.f('ix_ticket_order_customer_email'), 'ticket_order', ['customer_email'])

    op.create_table(
        'ticket',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('order_id', sa.Uuid(), nullable=False),
        sa.Column('show_seat_id', sa.Uuid(), nullable=False),
        sa.Column('ticket_code', sa.String(length=40), nullable=False),
        sa.Column('is_valid', sa.Boolean(), nullable=False),
        sa.Column('pdf_url', sa.String(length=1024), nullable=True),
        sa.Column('pdf_generated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('scanned_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('scan_count', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['order_id'], ['ticket_order.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['show_seat_id'], ['show_seat.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('ticket_code'),
    )
    op.create_index(op.f('ix_ticket_order_id'), 'ticket', ['order_id'])
    op.create_index(op.f('ix_ticket_show_seat_id'), 'ticket', ['show_seat_id'])


def downgrade() -> None:
    op.drop_table('ticket')
    op.drop_table('ticket_order')
    op.drop_table('reservation_seat')
    op.drop_table('seat_reservation')
    op.drop_table('show_seat')
    op.drop_table('recital_show')
    op.drop_table('venue_seat')
