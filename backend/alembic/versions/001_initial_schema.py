"""Initial marketplace schema

Revision ID: 001
Revises:
Create Date: 2026-10-19

WHAT: Creates users, services, bookings and decorator_requests.

WHY: Enum columns are stored as plain strings with CHECK constraints
(non-native enums) so new booking stages can be added without an
ALTER TYPE.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


BOOKING_STATUSES = (
    'pending',
    'paid',
    'planning',
    'materials_prepared',
    'on_the_way',
    'setup_in_progress',
    'completed',
    'cancelled',
)


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    ]


def upgrade() -> None:
    """Create the four marketplace tables."""
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=True),
        sa.Column('photo_url', sa.String(length=1024), nullable=True),
        sa.Column(
            'role',
            sa.Enum('user', 'decorator', 'admin', name='userrole', native_enum=False, length=32),
            nullable=False,
        ),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_role', 'users', ['role'])
    op.create_index('ix_users_created_at', 'users', ['created_at'])

    op.create_table(
        'services',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('category', sa.String(length=100), nullable=False),
        sa.Column('location', sa.String(length=255), nullable=True),
        sa.Column('cost', sa.Integer(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('image_url', sa.String(length=1024), nullable=True),
        sa.Column('attributes', sa.JSON(), nullable=False),
        sa.Column('created_by', sa.String(length=255), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_services_id', 'services', ['id'])
    op.create_index('ix_services_name', 'services', ['name'])
    op.create_index('ix_services_category', 'services', ['category'])
    op.create_index('ix_services_location', 'services', ['location'])
    op.create_index('ix_services_created_at', 'services', ['created_at'])

    op.create_table(
        'bookings',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('service_id', sa.Integer(), nullable=True),
        sa.Column('service_name', sa.String(length=255), nullable=False),
        sa.Column('price', sa.Integer(), nullable=False),
        sa.Column('user_email', sa.String(length=255), nullable=False),
        sa.Column('user_name', sa.String(length=255), nullable=True),
        sa.Column('decorator_email', sa.String(length=255), nullable=True),
        sa.Column(
            'status',
            sa.Enum(*BOOKING_STATUSES, name='bookingstatus', native_enum=False, length=32),
            nullable=False,
        ),
        sa.Column('event_date', sa.DateTime(), nullable=True),
        sa.Column('location', sa.String(length=255), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('addons', sa.JSON(), nullable=False),
        sa.Column('coupon_code', sa.String(length=64), nullable=True),
        sa.Column('checkout_session_id', sa.String(length=255), nullable=True),
        sa.Column('transaction_id', sa.String(length=255), nullable=True),
        sa.Column('amount_paid', sa.Integer(), nullable=True),
        sa.Column('paid_at', sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['service_id'], ['services.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_bookings_id', 'bookings', ['id'])
    op.create_index('ix_bookings_service_id', 'bookings', ['service_id'])
    op.create_index('ix_bookings_user_email', 'bookings', ['user_email'])
    op.create_index('ix_bookings_decorator_email', 'bookings', ['decorator_email'])
    op.create_index('ix_bookings_status', 'bookings', ['status'])
    op.create_index('ix_bookings_checkout_session_id', 'bookings', ['checkout_session_id'])
    op.create_index('ix_bookings_transaction_id', 'bookings', ['transaction_id'])
    op.create_index('ix_bookings_created_at', 'bookings', ['created_at'])

    op.create_table(
        'decorator_requests',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('specialty', sa.String(length=255), nullable=True),
        sa.Column('experience_years', sa.Integer(), nullable=True),
        sa.Column('portfolio_url', sa.String(length=1024), nullable=True),
        sa.Column('message', sa.Text(), nullable=True),
        sa.Column(
            'status',
            sa.Enum('pending', 'approved', 'rejected', name='decoratorrequeststatus', native_enum=False, length=32),
            nullable=False,
        ),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_decorator_requests_id', 'decorator_requests', ['id'])
    op.create_index('ix_decorator_requests_email', 'decorator_requests', ['email'], unique=True)
    op.create_index('ix_decorator_requests_status', 'decorator_requests', ['status'])
    op.create_index('ix_decorator_requests_created_at', 'decorator_requests', ['created_at'])


def downgrade() -> None:
    """Drop all marketplace tables."""
    op.drop_table('decorator_requests')
    op.drop_table('bookings')
    op.drop_table('services')
    op.drop_table('users')
