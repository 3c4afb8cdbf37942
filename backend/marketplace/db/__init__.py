"""Database package"""

from marketplace.db.session import Database, get_db
from marketplace.models.base import Base

__all__ = ["Base", "Database", "get_db"]
