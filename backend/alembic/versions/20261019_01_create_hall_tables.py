"""create hall reservation tables

Revision ID: 20261019_01
Revises:
Create Date: 2026-10-19 00:00:00.000000
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = '20261019_01'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

EVENT_TYPES = ('wedding', 'corporate', 'birthday', 'anniversary', 'conference', 'seminar', 'party', 'meeting', 'other')
LINE_ITEM_TYPES = (
    'hall_rental', 'chair', 'table', 'decoration', 'lighting', 'av_equipment',
    'catering', 'security', 'generator', 'cleaning', 'parking', 'other',
)


def _enum(*values, name):
    return sa.Enum(*values, name=name, native_enum=False, length=32)


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        'halls',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('capacity', sa.Integer(), nullable=False),
        sa.Column('area', sa.Numeric(10, 2), nullable=True),
        sa.Column('location', sa.String(255), nullable=True),
        sa.Column('amenities', sa.JSON(), nullable=False),
        sa.Column('base_rate', sa.Numeric(12, 2), nullable=False),
        sa.Column('hourly_rate', sa.Numeric(12, 2), nullable=True),
        sa.Column('daily_rate', sa.Numeric(12, 2), nullable=True),
        sa.Column('weekend_rate', sa.Numeric(12, 2), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('is_available', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index('ix_halls_id', 'halls', ['id'])
    op.create_index('ix_halls_name', 'halls', ['name'], unique=True)
    op.create_index('ix_halls_location', 'halls', ['location'])

    op.create_table(
        'hall_availability_blocks',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('hall_id', sa.Integer(), sa.ForeignKey('halls.id', ondelete='CASCADE'), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('start_time', sa.String(5), nullable=False),
        sa.Column('end_time', sa.String(5), nullable=False),
        sa.Column('is_available', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('reason', sa.String(255), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_hall_availability_blocks_id', 'hall_availability_blocks', ['id'])
    op.create_index('ix_hall_availability_blocks_hall_date', 'hall_availability_blocks', ['hall_id', 'date'])

    op.create_table(
        'hall_quotations',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('quotation_number', sa.String(16), nullable=False),
        sa.Column('hall_id', sa.Integer(), sa.ForeignKey('halls.id'), nullable=False),
        sa.Column('customer_id', sa.Integer(), nullable=False),
        sa.Column('event_name', sa.String(255), nullable=False),
        sa.Column('event_type', _enum(*EVENT_TYPES, name='eventtype'), nullable=False),
        sa.Column('event_date', sa.Date(), nullable=False),
        sa.Column('start_time', sa.String(5), nullable=False),
        sa.Column('end_time', sa.String(5), nullable=False),
        sa.Column('guest_count', sa.Integer(), nullable=False),
        sa.Column('base_amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('subtotal', sa.Numeric(12, 2), nullable=False),
        sa.Column('discount_amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('tax_amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('total_amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('currency', sa.String(3), nullable=False),
        sa.Column('valid_until', sa.DateTime(), nullable=False),
        sa.Column(
            'status',
            _enum('draft', 'sent', 'accepted', 'rejected', 'expired', name='quotationstatus'),
            nullable=False,
        ),
        sa.Column('is_accepted', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_expired', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('accepted_at', sa.DateTime(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_hall_quotations_id', 'hall_quotations', ['id'])
    op.create_index('ix_hall_quotations_quotation_number', 'hall_quotations', ['quotation_number'], unique=True)
    op.create_index('ix_hall_quotations_hall_id', 'hall_quotations', ['hall_id'])
    op.create_index('ix_hall_quotations_customer_id', 'hall_quotations', ['customer_id'])
    op.create_index('ix_hall_quotations_status', 'hall_quotations', ['status'])

    op.create_table(
        'hall_bookings',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('hall_id', sa.Integer(), sa.ForeignKey('halls.id'), nullable=False),
        sa.Column('customer_id', sa.Integer(), nullable=False),
        sa.Column('quotation_id', sa.Integer(), sa.ForeignKey('hall_quotations.id'), nullable=True, unique=True),
        sa.Column('event_name', sa.String(255), nullable=False),
        sa.Column('event_type', _enum(*EVENT_TYPES, name='eventtype'), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('start_time', sa.String(5), nullable=False),
        sa.Column('end_time', sa.String(5), nullable=False),
        sa.Column('duration', sa.Numeric(8, 2), nullable=False),
        sa.Column('guest_count', sa.Integer(), nullable=False),
        sa.Column('special_requests', sa.Text(), nullable=True),
        sa.Column('base_amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('additional_charges', sa.Numeric(12, 2), nullable=False),
        sa.Column('discount', sa.Numeric(12, 2), nullable=False),
        sa.Column('tax_amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('total_amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('deposit_amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('balance_amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('amount_paid', sa.Numeric(12, 2), nullable=False),
        sa.Column('deposit_paid', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('currency', sa.String(3), nullable=False),
        sa.Column(
            'status',
            _enum('pending', 'confirmed', 'checked_in', 'completed', 'cancelled', 'no_show', name='bookingstatus'),
            nullable=False,
        ),
        sa.Column(
            'payment_status',
            _enum(
                'pending', 'processing', 'completed', 'failed', 'refunded', 'partially_refunded',
                name='paymentstatus',
            ),
            nullable=False,
        ),
        sa.Column('is_confirmed', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('confirmed_at', sa.DateTime(), nullable=True),
        sa.Column('checked_in_at', sa.DateTime(), nullable=True),
        sa.Column('checked_out_at', sa.DateTime(), nullable=True),
        sa.Column('is_cancelled', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('cancelled_at', sa.DateTime(), nullable=True),
        sa.Column('cancellation_reason', sa.Text(), nullable=True),
        sa.Column('refund_amount', sa.Numeric(12, 2), nullable=True),
        *_timestamps(),
        sa.CheckConstraint('end_date >= start_date', name='ck_hall_bookings_date_span'),
        sa.CheckConstraint('end_time > start_time', name='ck_hall_bookings_time_window'),
    )
    op.create_index('ix_hall_bookings_id', 'hall_bookings', ['id'])
    op.create_index('ix_hall_bookings_customer_id', 'hall_bookings', ['customer_id'])
    op.create_index('ix_hall_bookings_status', 'hall_bookings', ['status'])
    op.create_index('ix_hall_bookings_hall_dates', 'hall_bookings', ['hall_id', 'start_date', 'end_date'])

    op.create_table(
        'line_items',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('owner_kind', _enum('quotation', 'booking', name='lineitemowner'), nullable=False),
        sa.Column(
            'quotation_id', sa.Integer(),
            sa.ForeignKey('hall_quotations.id', ondelete='CASCADE'), nullable=True,
        ),
        sa.Column(
            'booking_id', sa.Integer(),
            sa.ForeignKey('hall_bookings.id', ondelete='CASCADE'), nullable=True,
        ),
        sa.Column('type', _enum(*LINE_ITEM_TYPES, name='lineitemtype'), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('unit_price', sa.Numeric(12, 2), nullable=False),
        sa.Column('total_price', sa.Numeric(12, 2), nullable=False),
        *_timestamps(),
        sa.CheckConstraint(
            "(owner_kind = 'quotation' AND quotation_id IS NOT NULL AND booking_id IS NULL)"
            " OR (owner_kind = 'booking' AND booking_id IS NOT NULL AND quotation_id IS NULL)",
            name='ck_line_items_single_owner',
        ),
        sa.CheckConstraint('quantity > 0', name='ck_line_items_quantity_positive'),
    )
    op.create_index('ix_line_items_id', 'line_items', ['id'])
    op.create_index('ix_line_items_quotation_id', 'line_items', ['quotation_id'])
    op.create_index('ix_line_items_booking_id', 'line_items', ['booking_id'])


def downgrade() -> None:
    op.drop_table('line_items')
    op.drop_table('hall_bookings')
    op.drop_table('hall_quotations')
    op.drop_table('hall_availability_blocks')
    op.drop_table('halls')
