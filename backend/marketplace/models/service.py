"""
Service catalog model.

WHAT: A decoration package clients can book.

WHY: Bookings copy the service name and cost at creation time, so later
catalog edits never change what a client agreed to pay.
"""

from sqlalchemy import Column, Integer, String, Text, JSON

from marketplace.models.base import Base, TimestampMixin, PrimaryKeyMixin


class Service(Base, PrimaryKeyMixin, TimestampMixin):
    """Catalog entry. Created, updated and deleted by admins; read by anyone."""

    __tablename__ = "services"

    name = Column(String(255), nullable=False, index=True)
    category = Column(String(100), nullable=False, index=True)
    location = Column(String(255), nullable=True, index=True)

    # Whole currency units
    cost = Column(Integer, nullable=False, default=0)

    description = Column(Text, nullable=True)
    image_url = Column(String(1024), nullable=True)
    attributes = Column(JSON, nullable=False, default=dict)
    created_by = Column(String(255), nullable=True)

    def __repr__(self) -> str:
        return f"<Service(id={self.id}, name={self.name}, cost={self.cost})>"
