"""
Admin dashboard statistics.
"""

from typing import Any, Dict
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.dao.booking import BookingDAO
from marketplace.dao.decorator_request import DecoratorRequestDAO
from marketplace.dao.service import ServiceDAO
from marketplace.dao.user import UserDAO
from marketplace.models.decorator_request import DecoratorRequestStatus


class StatsService:
    """Aggregates counts across the marketplace collections."""

    def __init__(self, session: AsyncSession):
        self.user_dao = UserDAO(session)
        self.service_dao = ServiceDAO(session)
        self.booking_dao = BookingDAO(session)
        self.request_dao = DecoratorRequestDAO(session)

    async def get_stats(self) -> Dict[str, Any]:
        """
        Returns:
            Dictionary matching StatsResponse
        """
        users_by_role = await self.user_dao.count_by_role()
        bookings_by_status = await self.booking_dao.count_by_status()

        return {
            "total_users": sum(users_by_role.values()),
            "users_by_role": users_by_role,
            "total_services": await self.service_dao.count(),
            "total_bookings": sum(bookings_by_status.values()),
            "bookings_by_status": bookings_by_status,
            "total_revenue": await self.booking_dao.total_revenue(),
            "pending_decorator_requests": await self.request_dao.count(
                status=DecoratorRequestStatus.PENDING
            ),
        }
