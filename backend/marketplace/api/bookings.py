"""
Booking API endpoints.

WHAT: Create, list, read, update and cancel bookings.

HOW: FastAPI router with:
- Scope derived from the authenticated role (admin / decorator / client)
- Owner-filtered lookups so "not yours" and "not found" are both 404
- Status always PENDING on creation
"""

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.core.config import settings
from marketplace.core.deps import get_current_user, require_role
from marketplace.db.session import get_db
from marketplace.models.user import User, UserRole
from marketplace.schemas.booking import (
    BookingCreate,
    BookingListResponse,
    BookingResponse,
    BookingUpdate,
)
from marketplace.services.booking_service import BookingService


router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.post(
    "",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create booking",
)
async def create_booking(
    data: BookingCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> BookingResponse:
    """
    Book a catalog service for the caller.

    Any ``status`` in the body is ignored; new bookings are always pending.

    Raises:
        ServiceNotFoundError (404): If the service doesn't exist
    """
    service = BookingService(db)
    booking = await service.create_booking(current_user, data.model_dump())
    return BookingResponse.model_validate(booking)


@router.get(
    "",
    response_model=BookingListResponse,
    summary="List bookings",
)
async def list_bookings(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=settings.MAX_PAGE_SIZE),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> BookingListResponse:
    """
    List bookings visible to the caller, newest first.

    Admins see all bookings, decorators the ones assigned to them and
    clients their own.
    """
    service = BookingService(db)
    items, total = await service.list_bookings(current_user, skip=skip, limit=limit)
    return BookingListResponse(
        items=[BookingResponse.model_validate(b) for b in items],
        total=total,
        skip=skip,
        limit=limit,
    )


@router.get("/{booking_id}", response_model=BookingResponse, summary="Get booking")
async def get_booking(
    booking_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> BookingResponse:
    booking = await BookingService(db).get_booking(current_user, booking_id)
    return BookingResponse.model_validate(booking)


@router.patch(
    "/{booking_id}",
    response_model=BookingResponse,
    summary="Update booking",
    description="Admins may edit any field; assigned decorators may only advance the status",
)
async def update_booking(
    booking_id: int,
    data: BookingUpdate,
    current_user: User = Depends(require_role(UserRole.ADMIN, UserRole.DECORATOR)),
    db: AsyncSession = Depends(get_db),
) -> BookingResponse:
    """
    Raises:
        AuthorizationError (403): Client caller, or decorator editing other fields
        BookingNotFoundError (404): Not found or not assigned to the decorator
        InvalidStateTransitionError (400): Status change not allowed
    """
    booking = await BookingService(db).update_booking(
        current_user,
        booking_id,
        data.model_dump(exclude_unset=True),
    )
    return BookingResponse.model_validate(booking)


@router.delete(
    "/{booking_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Cancel booking",
)
async def cancel_booking(
    booking_id: int,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> Response:
    """
    Cancel one of the caller's own pending bookings.

    Raises:
        BookingNotFoundError (404): Not found or not the caller's
        InvalidStateTransitionError (400): Booking is no longer pending
    """
    await BookingService(db).cancel_booking(current_user, booking_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
