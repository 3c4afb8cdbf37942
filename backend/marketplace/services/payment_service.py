"""
Payment Session Orchestrator.

WHAT: Turns a pending booking into a Stripe Checkout Session, and later
reconciles the completed session back into the booking.

WHY: Payment is two-step and crosses a trust boundary:
1. create_session prices the booking and sends the client to Stripe
2. verify_and_settle asks Stripe (the source of truth) whether the
   session was paid, then moves the booking pending -> paid

The settle write is a compare-and-set on ``status = pending``, so running
verification twice, or concurrently, settles the booking exactly once.

HOW: The gateway and pricing calculator are injected; the booking store is
reached through BookingDAO on the request session.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, Optional, Tuple
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.core.auth import Identity, get_identity_resolver
from marketplace.core.authorization import AuthorizationGate
from marketplace.core.config import settings
from marketplace.core.exceptions import (
    BookingNotFoundError,
    InvalidStateTransitionError,
    PaymentNotCompletedError,
    ValidationError,
)
from marketplace.dao.booking import BookingDAO
from marketplace.dao.user import UserDAO
from marketplace.models.booking import Booking, BookingStatus
from marketplace.services.pricing import PriceBreakdown, PricingCalculator, round_half_up
from marketplace.services.stripe_service import CheckoutLineItem, CheckoutSession, StripeService

logger = logging.getLogger(__name__)

NO_COUPON = "none"


def to_minor_units(amount: int) -> int:
    """Whole currency units -> cents."""
    return round_half_up(Decimal(amount) * 100)


def from_minor_units(amount_cents: Optional[int]) -> Optional[int]:
    """Cents -> whole currency units."""
    if amount_cents is None:
        return None
    return round_half_up(Decimal(amount_cents) / 100)


class PaymentSessionOrchestrator:
    """
    Creates and settles checkout sessions for bookings.

    Args:
        session: Async database session
        gateway: Stripe Checkout gateway
        pricing: Pricing calculator with the configured coupon rules
        frontend_url: Base URL for the success and cancel redirects
        gate: Ownership and role checks for settlement
    """

    def __init__(
        self,
        session: AsyncSession,
        gateway: StripeService,
        pricing: PricingCalculator,
        frontend_url: Optional[str] = None,
        gate: Optional[AuthorizationGate] = None,
    ):
        self.session = session
        self.gateway = gateway
        self.pricing = pricing
        self.frontend_url = (frontend_url or settings.FRONTEND_URL).rstrip("/")
        self.booking_dao = BookingDAO(session)
        self.user_dao = UserDAO(session)
        self.gate = gate or AuthorizationGate(get_identity_resolver(), self.user_dao)

    def _success_url(self, booking_id: int) -> str:
        # {CHECKOUT_SESSION_ID} is substituted by Stripe
        return (
            f"{self.frontend_url}/dashboard/payment-success"
            f"?session_id={{CHECKOUT_SESSION_ID}}&booking_id={booking_id}"
        )

    def _cancel_url(self, booking_id: int) -> str:
        return f"{self.frontend_url}/dashboard/payment-cancelled?booking_id={booking_id}"

    async def create_session(
        self,
        identity: Identity,
        booking_id: int,
        addons: Optional[Iterable[Any]] = None,
        coupon_code: Optional[str] = None,
    ) -> Tuple[CheckoutSession, PriceBreakdown]:
        """
        Price a pending booking and create its checkout session.

        Args:
            identity: Authenticated caller; recorded as ``userEmail``
            booking_id: Booking to pay for
            addons: Add-ons to price; defaults to the booking's own
            coupon_code: Optional coupon; unknown codes give no discount

        Returns:
            Tuple of (checkout session, price breakdown)

        Raises:
            BookingNotFoundError: If the booking doesn't exist
            InvalidStateTransitionError: If the booking is not pending
            ValidationError: If the final amount is not positive
            PaymentProviderError: If Stripe rejects the session
            PaymentProviderUnavailableError: If Stripe cannot be reached
        """
        booking = await self.booking_dao.get_by_id(booking_id)
        if booking is None:
            raise BookingNotFoundError(booking_id=booking_id)
        if booking.status != BookingStatus.PENDING:
            raise InvalidStateTransitionError(
                message="Only pending bookings can be paid",
                current_status=booking.status.value,
            )

        selected_addons = list(addons) if addons is not None else list(booking.addons or [])
        breakdown = self.pricing.compute_final_amount(
            booking.price or 0,
            selected_addons,
            coupon_code,
        )
        if breakdown.final_amount <= 0:
            raise ValidationError(
                message="Final amount must be greater than zero",
                final_amount=breakdown.final_amount,
            )

        description = (
            f"Base: {breakdown.base_price}, "
            f"Add-ons: {breakdown.addons_total}, "
            f"Discount: {breakdown.discount_amount}"
        )
        line_item = CheckoutLineItem(
            name=booking.service_name,
            description=description,
            unit_amount=to_minor_units(breakdown.final_amount),
        )
        metadata = {
            "bookingId": str(booking.id),
            "userEmail": identity.email,
            "couponCode": breakdown.coupon_code or NO_COUPON,
            "addonsTotal": str(breakdown.addons_total),
            "discount": str(breakdown.discount_amount),
        }

        checkout = await self.gateway.create_checkout_session(
            line_item=line_item,
            success_url=self._success_url(booking.id),
            cancel_url=self._cancel_url(booking.id),
            metadata=metadata,
            customer_email=identity.email,
        )

        logger.info(
            f"Checkout session {checkout.id} created for booking {booking.id}",
            extra={
                "booking_id": booking.id,
                "checkout_session_id": checkout.id,
                "final_amount": breakdown.final_amount,
            },
        )
        return checkout, breakdown

    async def verify_and_settle(
        self,
        identity: Identity,
        session_id: str,
        booking_id: int,
    ) -> Booking:
        """
        Reconcile a checkout session into its booking.

        Args:
            identity: Authenticated caller
            session_id: Stripe Checkout Session ID
            booking_id: Booking the session was created for

        Returns:
            The settled booking; unchanged if it was already settled

        Raises:
            ValidationError: If the session belongs to another booking
            BookingNotFoundError: If the booking doesn't exist
            AuthorizationError: If the caller may not settle this booking
            PaymentNotCompletedError: If Stripe reports the session unpaid
            InvalidStateTransitionError: If the booking is cancelled
        """
        checkout = await self.gateway.retrieve_checkout_session(session_id)

        if checkout.metadata.get("bookingId") != str(booking_id):
            raise ValidationError(
                message="Checkout session does not belong to this booking",
                booking_id=booking_id,
            )

        booking = await self.booking_dao.get_by_id(booking_id)
        if booking is None:
            raise BookingNotFoundError(booking_id=booking_id)

        # The paying client, the email the checkout was opened for, or an admin
        await self.gate.authorize_owner_or_role(
            identity,
            (booking.user_email, checkout.metadata.get("userEmail")),
            message="Not permitted to verify this payment",
            booking_id=booking_id,
        )

        if not checkout.is_paid:
            raise PaymentNotCompletedError(
                payment_status=checkout.payment_status,
                booking_id=booking_id,
            )

        if booking.is_settled:
            logger.info(
                f"Booking {booking_id} already settled",
                extra={"booking_id": booking_id, "checkout_session_id": session_id},
            )
            return booking
        if booking.status != BookingStatus.PENDING:
            raise InvalidStateTransitionError(
                message=f"Cannot settle a {booking.status.value} booking",
                current_status=booking.status.value,
            )

        coupon = checkout.metadata.get("couponCode")
        values: Dict[str, Any] = {
            "status": BookingStatus.PAID,
            "transaction_id": checkout.payment_intent_id,
            "checkout_session_id": checkout.id,
            "amount_paid": from_minor_units(checkout.amount_total),
            "coupon_code": coupon if coupon and coupon != NO_COUPON else None,
            "paid_at": datetime.utcnow(),
        }
        settled = await self.booking_dao.update_status_if(booking_id, BookingStatus.PENDING, values)

        if settled is None:
            # Lost the race to a concurrent verification
            await self.session.refresh(booking)
            if booking.is_settled:
                return booking
            raise InvalidStateTransitionError(
                message="Booking is no longer pending",
                booking_id=booking_id,
            )

        logger.info(
            f"Booking {booking_id} settled",
            extra={
                "booking_id": booking_id,
                "checkout_session_id": checkout.id,
                "transaction_id": checkout.payment_intent_id,
                "amount_paid": settled.amount_paid,
            },
        )
        return settled
