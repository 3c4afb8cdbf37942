"""
User model.

WHY: Users are the root of every authorization decision. The email is the
identity claim carried by bearer tokens; the role decides which operations
the identity may perform.
"""

import enum
from sqlalchemy import Column, String, Enum

from marketplace.models.base import Base, TimestampMixin, PrimaryKeyMixin


class UserRole(str, enum.Enum):
    """User role enumeration."""

    USER = "user"  # Client booking services
    DECORATOR = "decorator"  # Service provider assigned to bookings
    ADMIN = "admin"  # Marketplace operator


def enum_values(enum_cls):
    """Persist enum values ("user") rather than member names ("USER")."""
    return [member.value for member in enum_cls]


class User(Base, PrimaryKeyMixin, TimestampMixin):
    """
    User registry entry.

    Created on first authenticated contact, mutated only by admins (role
    changes) or by the decorator promotion workflow. Never deleted.
    """

    __tablename__ = "users"

    email = Column(String(255), unique=True, index=True, nullable=False)
    name = Column(String(255), nullable=True)
    photo_url = Column(String(1024), nullable=True)

    # Default USER role ensures least-privilege access
    role = Column(
        Enum(UserRole, name="userrole", native_enum=False, length=32, values_callable=enum_values),
        nullable=False,
        default=UserRole.USER,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
