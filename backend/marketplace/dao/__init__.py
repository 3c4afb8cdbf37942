"""
Data Access Object (DAO) package.

WHY: DAOs provide a clean separation between database operations and business logic,
making the codebase more testable and maintainable.
"""

from marketplace.dao.base import BaseDAO
from marketplace.dao.user import UserDAO
from marketplace.dao.service import ServiceDAO
from marketplace.dao.booking import BookingDAO
from marketplace.dao.decorator_request import DecoratorRequestDAO

__all__ = [
    "BaseDAO",
    "UserDAO",
    "ServiceDAO",
    "BookingDAO",
    "DecoratorRequestDAO",
]
