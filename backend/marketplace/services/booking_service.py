"""
Booking Service.

WHAT: Business logic for creating, reading, updating and cancelling
bookings.

WHY: Every operation derives its scope from the caller's authenticated
role, never from request data:
1. Admins see and edit everything
2. Decorators see bookings assigned to them and may only move their status
3. Clients see and cancel their own bookings

HOW: The ownership filter is folded into the DAO lookup and into the
write itself, so a booking that exists but belongs to someone else is
indistinguishable from one that does not exist.
"""

import logging
from typing import Any, Dict, List, Tuple
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.dao.booking import BookingDAO
from marketplace.dao.service import ServiceDAO
from marketplace.models.booking import Booking, BookingStatus, can_transition
from marketplace.models.user import User, UserRole
from marketplace.core.exceptions import (
    AuthorizationError,
    BookingNotFoundError,
    InvalidStateTransitionError,
    ServiceNotFoundError,
)

logger = logging.getLogger(__name__)

# Fields a decorator may patch on an assigned booking
DECORATOR_PATCHABLE_FIELDS = frozenset({"status"})


def owner_filter(user: User) -> Dict[str, Any]:
    """
    Ownership filter for the caller's role.

    Returns:
        {} for admins, {"decorator_email": ...} for decorators,
        {"user_email": ...} for clients
    """
    if user.role == UserRole.ADMIN:
        return {}
    if user.role == UserRole.DECORATOR:
        return {"decorator_email": user.email.lower()}
    return {"user_email": user.email.lower()}


class BookingService:
    """
    Service for booking lifecycle operations.

    Args:
        session: Async database session
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.booking_dao = BookingDAO(session)
        self.service_dao = ServiceDAO(session)

    async def create_booking(self, user: User, data: Dict[str, Any]) -> Booking:
        """
        Create a booking for the caller.

        The client identity comes from ``user`` and the status is always
        PENDING; ``data`` cannot override either.

        Args:
            user: Authenticated caller
            data: service_id plus optional decorator_email, user_name,
                event_date, location, notes, addons

        Returns:
            Created Booking

        Raises:
            ServiceNotFoundError: If the service doesn't exist
        """
        service = await self.service_dao.get_by_id(data["service_id"])
        if service is None:
            raise ServiceNotFoundError(service_id=data["service_id"])

        decorator_email = data.get("decorator_email")
        booking = await self.booking_dao.create(
            service_id=service.id,
            service_name=service.name,
            price=service.cost,
            user_email=user.email.lower(),
            user_name=data.get("user_name") or user.name,
            decorator_email=decorator_email.lower() if decorator_email else None,
            status=BookingStatus.PENDING,
            event_date=data.get("event_date"),
            location=data.get("location"),
            notes=data.get("notes"),
            addons=list(data.get("addons") or []),
        )

        logger.info(
            f"Booking {booking.id} created",
            extra={"booking_id": booking.id, "service_id": service.id, "user_email": booking.user_email},
        )
        return booking

    async def list_bookings(
        self,
        user: User,
        skip: int = 0,
        limit: int = 100,
    ) -> Tuple[List[Booking], int]:
        """
        List the bookings visible to the caller, newest first.

        Returns:
            Tuple of (bookings, total visible)
        """
        scope = owner_filter(user)
        items = await self.booking_dao.list_scoped(skip=skip, limit=limit, **scope)
        total = await self.booking_dao.count(**scope)
        return items, total

    async def get_booking(self, user: User, booking_id: int) -> Booking:
        """
        Get one booking visible to the caller.

        Raises:
            BookingNotFoundError: If it doesn't exist or isn't visible
        """
        booking = await self.booking_dao.get_owned_by_id(booking_id, **owner_filter(user))
        if booking is None:
            raise BookingNotFoundError(booking_id=booking_id)
        return booking

    async def update_booking(self, user: User, booking_id: int, patch: Dict[str, Any]) -> Booking:
        """
        Patch a booking.

        Admins: the patch is applied as given.
        Decorators: only ``status``, only on their own bookings, only along
        the lifecycle, and never to PAID.
        Clients: denied.

        Args:
            user: Authenticated caller
            booking_id: Booking ID
            patch: Fields to set; ``id`` is never accepted

        Returns:
            Updated Booking

        Raises:
            AuthorizationError: Client caller, or decorator patching other fields
            BookingNotFoundError: No booking matches the id and ownership filter
            InvalidStateTransitionError: Transition not allowed
        """
        patch = {key: value for key, value in patch.items() if key != "id"}

        if user.role == UserRole.ADMIN:
            return await self._admin_update(booking_id, patch)
        if user.role == UserRole.DECORATOR:
            return await self._decorator_update(user, booking_id, patch)

        raise AuthorizationError(
            message="Only admins and assigned decorators can update bookings",
            user_role=user.role.value,
        )

    async def _admin_update(self, booking_id: int, patch: Dict[str, Any]) -> Booking:
        if not patch:
            return await self._require(booking_id)

        for key in ("user_email", "decorator_email"):
            if patch.get(key):
                patch[key] = patch[key].lower()

        booking = await self.booking_dao.update(booking_id, **patch)
        if booking is None:
            raise BookingNotFoundError(booking_id=booking_id)

        logger.info(
            f"Booking {booking_id} updated by admin",
            extra={"booking_id": booking_id, "fields": sorted(patch)},
        )
        return booking

    async def _decorator_update(self, user: User, booking_id: int, patch: Dict[str, Any]) -> Booking:
        forbidden = set(patch) - DECORATOR_PATCHABLE_FIELDS
        if forbidden:
            raise AuthorizationError(
                message="Decorators can only update booking status",
                fields=sorted(forbidden),
            )

        scope = owner_filter(user)
        booking = await self.booking_dao.get_owned_by_id(booking_id, **scope)
        if booking is None:
            raise BookingNotFoundError(booking_id=booking_id)

        target = patch.get("status")
        if target is None:
            return booking
        target = BookingStatus(target)

        if target == BookingStatus.PAID:
            raise InvalidStateTransitionError(
                message="Bookings become paid only through payment verification",
                current_status=booking.status.value,
            )
        if not can_transition(booking.status, target):
            raise InvalidStateTransitionError(
                message=f"Cannot move booking from {booking.status.value} to {target.value}",
                current_status=booking.status.value,
                target_status=target.value,
            )

        current = booking.status
        updated = await self.booking_dao.update_status_if(
            booking_id, current, {"status": target}, **scope
        )
        if updated is None:
            raise InvalidStateTransitionError(
                message="Booking status changed concurrently; reload and retry",
                expected_status=current.value,
            )

        logger.info(
            f"Booking {booking_id} moved {current.value} -> {target.value}",
            extra={"booking_id": booking_id, "decorator_email": user.email},
        )
        return updated

    async def cancel_booking(self, user: User, booking_id: int) -> None:
        """
        Cancel (delete) one of the caller's own pending bookings.

        Raises:
            BookingNotFoundError: No booking with this id belongs to the caller
            InvalidStateTransitionError: The booking is no longer pending
        """
        scope = {"user_email": user.email.lower()}
        booking = await self.booking_dao.get_owned_by_id(booking_id, **scope)
        if booking is None:
            raise BookingNotFoundError(booking_id=booking_id)

        if not booking.is_cancellable:
            raise InvalidStateTransitionError(
                message="Only pending bookings can be cancelled",
                current_status=booking.status.value,
            )

        deleted = await self.booking_dao.delete_if_status(booking_id, BookingStatus.PENDING, **scope)
        if not deleted:
            raise InvalidStateTransitionError(
                message="Booking is no longer pending",
                booking_id=booking_id,
            )

        logger.info(f"Booking {booking_id} cancelled", extra={"booking_id": booking_id})

    async def _require(self, booking_id: int) -> Booking:
        booking = await self.booking_dao.get_by_id(booking_id)
        if booking is None:
            raise BookingNotFoundError(booking_id=booking_id)
        return booking

