"""
Database models package.

WHY: Centralizing model imports ensures Alembic can discover all models
for migration generation and makes it easier to import models elsewhere.
"""

from marketplace.models.base import Base, TimestampMixin, PrimaryKeyMixin
from marketplace.models.user import User, UserRole
from marketplace.models.service import Service
from marketplace.models.booking import (
    Booking,
    BookingStatus,
    BOOKING_STATUS_TRANSITIONS,
    SETTLED_STATUSES,
    can_transition,
)
from marketplace.models.decorator_request import DecoratorRequest, DecoratorRequestStatus

__all__ = [
    "Base",
    "TimestampMixin",
    "PrimaryKeyMixin",
    "User",
    "UserRole",
    "Service",
    "Booking",
    "BookingStatus",
    "BOOKING_STATUS_TRANSITIONS",
    "SETTLED_STATUSES",
    "can_transition",
    "DecoratorRequest",
    "DecoratorRequestStatus",
]
