"""
Payment API endpoints.

WHAT: Stripe Checkout creation and post-checkout verification.

WHY: Verification is the only path that marks a booking as paid, and it
asks Stripe for the session outcome instead of trusting the redirect.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.core.auth import Identity
from marketplace.core.deps import get_identity
from marketplace.db.session import get_db
from marketplace.schemas.booking import BookingResponse
from marketplace.schemas.payment import (
    CheckoutRequest,
    CheckoutResponse,
    PriceBreakdownResponse,
    VerifyPaymentRequest,
    VerifyPaymentResponse,
)
from marketplace.services.payment_service import PaymentSessionOrchestrator
from marketplace.services.pricing import PricingCalculator, get_pricing_calculator
from marketplace.services.stripe_service import StripeService, get_stripe_service


router = APIRouter(tags=["payments"])


def get_payment_orchestrator(
    db: AsyncSession = Depends(get_db),
    gateway: StripeService = Depends(get_stripe_service),
    pricing: PricingCalculator = Depends(get_pricing_calculator),
) -> PaymentSessionOrchestrator:
    return PaymentSessionOrchestrator(db, gateway, pricing)


@router.post(
    "/create-checkout-session",
    response_model=CheckoutResponse,
    summary="Create Stripe checkout session",
)
async def create_checkout_session(
    data: CheckoutRequest,
    identity: Identity = Depends(get_identity),
    orchestrator: PaymentSessionOrchestrator = Depends(get_payment_orchestrator),
) -> CheckoutResponse:
    """
    Price a pending booking and return the hosted checkout URL.

    Raises:
        BookingNotFoundError (404): Unknown booking
        InvalidStateTransitionError (400): Booking is not pending
        ValidationError (400): Final amount is not positive
        PaymentProviderError (400): Stripe rejected the session
        PaymentProviderUnavailableError (503): Stripe unreachable, retry later
    """
    addons = [a.model_dump() for a in data.addons] if data.addons is not None else None
    checkout, breakdown = await orchestrator.create_session(
        identity,
        data.booking_id,
        addons=addons,
        coupon_code=data.coupon_code,
    )
    return CheckoutResponse(
        url=checkout.url,
        session_id=checkout.id,
        pricing=PriceBreakdownResponse(
            base_price=breakdown.base_price,
            addons_total=breakdown.addons_total,
            subtotal=breakdown.subtotal,
            discount_amount=breakdown.discount_amount,
            final_amount=breakdown.final_amount,
            coupon_code=breakdown.coupon_code,
        ),
    )


@router.post(
    "/payments/verify",
    response_model=VerifyPaymentResponse,
    summary="Verify checkout and settle booking",
)
async def verify_payment(
    data: VerifyPaymentRequest,
    identity: Identity = Depends(get_identity),
    orchestrator: PaymentSessionOrchestrator = Depends(get_payment_orchestrator),
) -> VerifyPaymentResponse:
    """
    Reconcile a completed checkout into its booking. Safe to call repeatedly.

    Raises:
        ValidationError (400): Session belongs to another booking
        AuthorizationError (403): Caller is not the client, payer or an admin
        PaymentNotCompletedError (400): Stripe reports the session unpaid
    """
    booking = await orchestrator.verify_and_settle(identity, data.session_id, data.booking_id)
    return VerifyPaymentResponse(
        transaction_id=booking.transaction_id,
        booking=BookingResponse.model_validate(booking),
    )
