"""
Decorator request model.

WHAT: A user's application to become a decorator.

WHY: One request per email. The unique constraint on ``email`` makes a
second submission impossible to persist even under concurrent requests.
"""

from enum import Enum
from sqlalchemy import Column, Integer, String, Text, Enum as SQLEnum

from marketplace.models.base import Base, TimestampMixin, PrimaryKeyMixin
from marketplace.models.user import enum_values


class DecoratorRequestStatus(str, Enum):
    """Decorator request review status."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class DecoratorRequest(Base, PrimaryKeyMixin, TimestampMixin):
    """Application to be promoted from user to decorator."""

    __tablename__ = "decorator_requests"

    email = Column(String(255), unique=True, index=True, nullable=False)
    name = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    specialty = Column(String(255), nullable=True)
    experience_years = Column(Integer, nullable=True)
    portfolio_url = Column(String(1024), nullable=True)
    message = Column(Text, nullable=True)

    status = Column(
        SQLEnum(
            DecoratorRequestStatus,
            name="decoratorrequeststatus",
            native_enum=False,
            length=32,
            values_callable=enum_values,
        ),
        nullable=False,
        default=DecoratorRequestStatus.PENDING,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<DecoratorRequest(id={self.id}, email={self.email}, status={self.status})>"
