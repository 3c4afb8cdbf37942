"""
Booking model for the service booking lifecycle.

WHAT: SQLAlchemy model representing a client's request to engage a service
and its assigned decorator.

WHY: Bookings are the only records with real state transitions:
1. Created by a client, always in PENDING
2. Settled to PAID by payment reconciliation
3. Progressed by the assigned decorator until COMPLETED
4. Cancelled (deleted) by the client while still PENDING

HOW: Status stored as a string enum; the allowed transitions live in
BOOKING_STATUS_TRANSITIONS next to the enum so every writer shares them.
"""

from enum import Enum
from typing import Dict, FrozenSet
from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Integer,
    JSON,
    String,
    Text,
    Enum as SQLEnum,
)

from marketplace.models.base import Base, TimestampMixin, PrimaryKeyMixin
from marketplace.models.user import enum_values


class BookingStatus(str, Enum):
    """
    Booking lifecycle status.

    - PENDING: Requested, awaiting payment; the only cancellable state
    - PAID: Payment confirmed by the provider
    - PLANNING .. SETUP_IN_PROGRESS: Decorator progress stages
    - COMPLETED: Service delivered
    - CANCELLED: Terminal; kept for admin edits of legacy records
    """

    PENDING = "pending"
    PAID = "paid"
    PLANNING = "planning"
    MATERIALS_PREPARED = "materials_prepared"
    ON_THE_WAY = "on_the_way"
    SETUP_IN_PROGRESS = "setup_in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


BOOKING_STATUS_TRANSITIONS: Dict[BookingStatus, FrozenSet[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({BookingStatus.PAID, BookingStatus.CANCELLED}),
    BookingStatus.PAID: frozenset({BookingStatus.PLANNING, BookingStatus.COMPLETED}),
    BookingStatus.PLANNING: frozenset({BookingStatus.MATERIALS_PREPARED, BookingStatus.COMPLETED}),
    BookingStatus.MATERIALS_PREPARED: frozenset({BookingStatus.ON_THE_WAY, BookingStatus.COMPLETED}),
    BookingStatus.ON_THE_WAY: frozenset({BookingStatus.SETUP_IN_PROGRESS, BookingStatus.COMPLETED}),
    BookingStatus.SETUP_IN_PROGRESS: frozenset({BookingStatus.COMPLETED}),
    BookingStatus.COMPLETED: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
}

# Statuses that mean the provider has confirmed payment
SETTLED_STATUSES: FrozenSet[BookingStatus] = frozenset(
    {
        BookingStatus.PAID,
        BookingStatus.PLANNING,
        BookingStatus.MATERIALS_PREPARED,
        BookingStatus.ON_THE_WAY,
        BookingStatus.SETUP_IN_PROGRESS,
        BookingStatus.COMPLETED,
    }
)


def can_transition(current: BookingStatus, target: BookingStatus) -> bool:
    """Return True if ``current -> target`` is an allowed lifecycle step."""
    return target in BOOKING_STATUS_TRANSITIONS.get(current, frozenset())


class Booking(Base, PrimaryKeyMixin, TimestampMixin):
    """
    A client's booking of a catalog service.

    Ownership is expressed by two emails: ``user_email`` (the client) and
    ``decorator_email`` (the assigned provider). Authorization filters on
    these columns directly.
    """

    __tablename__ = "bookings"

    # Service reference with denormalized name and price
    service_id = Column(Integer, ForeignKey("services.id", ondelete="SET NULL"), nullable=True, index=True)
    service_name = Column(String(255), nullable=False)
    price = Column(Integer, nullable=False, default=0)

    # Parties
    user_email = Column(String(255), nullable=False, index=True)
    user_name = Column(String(255), nullable=True)
    decorator_email = Column(String(255), nullable=True, index=True)

    status = Column(
        SQLEnum(
            BookingStatus,
            name="bookingstatus",
            native_enum=False,
            length=32,
            values_callable=enum_values,
        ),
        nullable=False,
        default=BookingStatus.PENDING,
        index=True,
    )

    # Event details
    event_date = Column(DateTime, nullable=True)
    location = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)

    # Pricing inputs: [{"name": str, "price": int}, ...]
    addons = Column(JSON, nullable=False, default=list)
    coupon_code = Column(String(64), nullable=True)

    # Payment reconciliation
    checkout_session_id = Column(String(255), nullable=True, index=True)
    transaction_id = Column(String(255), nullable=True, index=True)
    amount_paid = Column(Integer, nullable=True)
    paid_at = Column(DateTime, nullable=True)

    @property
    def is_cancellable(self) -> bool:
        """Only pending bookings may be cancelled."""
        return self.status == BookingStatus.PENDING

    @property
    def is_settled(self) -> bool:
        """True once the provider has confirmed payment."""
        return self.status in SETTLED_STATUSES

    def __repr__(self) -> str:
        return f"<Booking(id={self.id}, user={self.user_email}, status={self.status})>"
