"""
Base model class for all SQLAlchemy models.

WHY: Centralizing common model functionality (timestamps, ID) in a base class
ensures consistency across all models and reduces code duplication.
"""

from datetime import datetime
from sqlalchemy import Column, Integer, DateTime
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class TimestampMixin:
    """
    Mixin to add created_at and updated_at timestamps to models.

    WHY: Listings sort newest first on created_at, so every record gets
    the timestamp at insert time rather than from the client.
    """

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class PrimaryKeyMixin:
    """Mixin to add an integer primary key to models."""

    id = Column(Integer, primary_key=True, index=True)
