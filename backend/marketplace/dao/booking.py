"""
Booking Data Access Object (DAO).

WHAT: Database operations for the Booking model.

WHY: Every booking read or write that depends on who the caller is goes
through an owner-filtered query. "Not found" and "not yours" are the same
empty result, so the service layer cannot accidentally tell them apart.

HOW: Extends BaseDAO with:
- Owner-scoped lookups and listings
- Compare-and-set status writes
- Aggregates for the admin dashboard
"""

from typing import Any, Dict, List, Optional
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.dao.base import BaseDAO
from marketplace.models.booking import Booking, BookingStatus, SETTLED_STATUSES


class BookingDAO(BaseDAO[Booking]):
    """Data Access Object for Booking model."""

    NEWEST_FIRST = (Booking.created_at.desc(), Booking.id.desc())

    def __init__(self, session: AsyncSession):
        """
        Initialize BookingDAO.

        Args:
            session: Async database session
        """
        super().__init__(Booking, session)

    async def get_owned_by_id(self, id: int, **owner_filter: Any) -> Optional[Booking]:
        """
        Get a booking by id, restricted by an ownership filter.

        Args:
            id: Booking ID
            **owner_filter: e.g. user_email=..., decorator_email=...; empty for admins

        Returns:
            Booking if it exists and matches the filter, None otherwise
        """
        return await self.find_one(id=id, **owner_filter)

    async def list_scoped(
        self,
        skip: int = 0,
        limit: Optional[int] = 100,
        **scope: Any,
    ) -> List[Booking]:
        """
        List bookings newest first within a scope.

        Args:
            skip: Records to skip
            limit: Page size
            **scope: Ownership filter; empty lists everything

        Returns:
            Bookings sorted by created_at descending
        """
        return await self.find_many(skip=skip, limit=limit, order_by=self.NEWEST_FIRST, **scope)

    async def update_status_if(
        self,
        id: int,
        expected_status: BookingStatus,
        values: Dict[str, Any],
        **owner_filter: Any,
    ) -> Optional[Booking]:
        """
        Write ``values`` only if the booking is still in ``expected_status``.

        WHY: Compare-and-set keeps concurrent transitions from overwriting
        each other without in-process locks.

        Returns:
            Updated Booking, or None if id, owner or status no longer match
        """
        return await self.update_by_filter(values, id=id, status=expected_status, **owner_filter)

    async def delete_if_status(
        self,
        id: int,
        expected_status: BookingStatus,
        **owner_filter: Any,
    ) -> bool:
        """
        Delete a booking only if it is still in ``expected_status``.

        Returns:
            True if a booking was deleted
        """
        return await self.delete_by_filter(id=id, status=expected_status, **owner_filter)

    async def count_by_status(self) -> Dict[str, int]:
        """
        Count bookings per status.

        Returns:
            Mapping of status value to count
        """
        result = await self.session.execute(
            select(Booking.status, func.count(Booking.id)).group_by(Booking.status)
        )
        return {status.value: count for status, count in result.all()}

    async def total_revenue(self) -> int:
        """
        Sum of amounts paid on settled bookings.

        Returns:
            Revenue in whole currency units
        """
        result = await self.session.execute(
            select(func.coalesce(func.sum(Booking.amount_paid), 0)).where(
                Booking.status.in_(list(SETTLED_STATUSES))
            )
        )
        return int(result.scalar_one())
