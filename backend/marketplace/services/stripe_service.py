"""
Stripe Checkout gateway.

WHAT: Creates hosted checkout sessions and retrieves their outcome.

WHY: The payment provider is the source of truth for payment state. This
module is the only place that talks to Stripe, and it translates SDK
failures into two distinct outcomes:
1. Rejections (bad amount, bad parameters) -> PaymentProviderError (400)
2. Unavailability (network, timeout, rate limit, 5xx) ->
   PaymentProviderUnavailableError (503, retryable)

HOW: Uses the Stripe Python SDK with a bounded HTTP timeout and network
retries configured once per process.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional

import stripe

from marketplace.core.config import settings
from marketplace.core.exceptions import PaymentProviderError, PaymentProviderUnavailableError

logger = logging.getLogger(__name__)


# --- SDK setup ---


def configure_stripe(
    api_key: str,
    timeout_seconds: int = 20,
    max_network_retries: int = 2,
) -> None:
    """
    Configure the Stripe SDK.

    Args:
        api_key: Stripe secret key
        timeout_seconds: Per-request HTTP timeout
        max_network_retries: Retries for idempotent network failures
    """
    stripe.api_key = api_key
    stripe.max_network_retries = max_network_retries
    stripe.default_http_client = stripe.RequestsClient(timeout=timeout_seconds)


# --- gateway value types ---


class CheckoutPaymentStatus(str, Enum):
    """Stripe Checkout Session ``payment_status`` values."""

    PAID = "paid"
    UNPAID = "unpaid"
    NO_PAYMENT_REQUIRED = "no_payment_required"


@dataclass
class CheckoutLineItem:
    """A single priced line on the checkout page."""

    name: str
    description: str
    unit_amount: int
    """Amount in the smallest currency unit (cents)."""

    quantity: int = 1


@dataclass
class CheckoutSession:
    """Subset of a Stripe Checkout Session the marketplace reads."""

    id: str
    """Stripe Checkout Session ID (cs_xxx)."""

    url: Optional[str] = None
    """URL to redirect the client to for payment."""

    payment_status: str = CheckoutPaymentStatus.UNPAID.value
    """paid, unpaid or no_payment_required."""

    payment_intent_id: Optional[str] = None
    """Associated PaymentIntent ID (pi_xxx) once payment started."""

    amount_total: Optional[int] = None
    """Charged total in minor units."""

    currency: Optional[str] = None

    metadata: Dict[str, str] = field(default_factory=dict)

    @property
    def is_paid(self) -> bool:
        return self.payment_status == CheckoutPaymentStatus.PAID.value


# --- gateway ---


def _is_unavailable(error: stripe.StripeError) -> bool:
    if isinstance(error, (stripe.APIConnectionError, stripe.RateLimitError, stripe.APIError)):
        return True
    http_status = getattr(error, "http_status", None)
    return http_status is not None and http_status >= 500


def _translate_error(error: stripe.StripeError, action: str, **context) -> Exception:
    provider_message = getattr(error, "user_message", None) or str(error)
    if _is_unavailable(error):
        return PaymentProviderUnavailableError(
            message=f"Payment provider unavailable while trying to {action}",
            provider_error=provider_message,
            **context,
        )
    return PaymentProviderError(message=provider_message, **context)


def _to_checkout_session(session) -> CheckoutSession:
    payment_intent = session.get("payment_intent")
    if payment_intent is not None and not isinstance(payment_intent, str):
        # Expanded PaymentIntent object
        payment_intent = payment_intent.get("id")

    return CheckoutSession(
        id=session["id"],
        url=session.get("url"),
        payment_status=session.get("payment_status") or CheckoutPaymentStatus.UNPAID.value,
        payment_intent_id=payment_intent,
        amount_total=session.get("amount_total"),
        currency=session.get("currency"),
        metadata=dict(session.get("metadata") or {}),
    )


class StripeService:
    """
    Payment gateway backed by Stripe Checkout.

    Args:
        currency: ISO currency code for line items
    """

    def __init__(self, currency: str = "usd"):
        self.currency = currency

    async def create_checkout_session(
        self,
        line_item: CheckoutLineItem,
        success_url: str,
        cancel_url: str,
        metadata: Dict[str, str],
        customer_email: Optional[str] = None,
    ) -> CheckoutSession:
        """
        Create a hosted checkout session.

        Args:
            line_item: The single priced line
            success_url: Redirect after payment
            cancel_url: Redirect if the client abandons checkout
            metadata: String key/values attached for reconciliation
            customer_email: Prefills the checkout email field

        Returns:
            CheckoutSession with the redirect URL

        Raises:
            PaymentProviderError: If Stripe rejects the request
            PaymentProviderUnavailableError: If Stripe cannot be reached
        """
        params = {
            "mode": "payment",
            "payment_method_types": ["card"],
            "line_items": [
                {
                    "price_data": {
                        "currency": self.currency,
                        "product_data": {
                            "name": line_item.name,
                            "description": line_item.description,
                        },
                        "unit_amount": line_item.unit_amount,
                    },
                    "quantity": line_item.quantity,
                }
            ],
            "metadata": metadata,
            "success_url": success_url,
            "cancel_url": cancel_url,
        }
        if customer_email:
            params["customer_email"] = customer_email

        try:
            session = stripe.checkout.Session.create(**params)
        except stripe.StripeError as e:
            logger.error(f"Stripe checkout session error: {e}", extra={"metadata": metadata})
            raise _translate_error(e, "create a checkout session", booking_id=metadata.get("bookingId"))

        logger.info(
            f"Created checkout session {session['id']}",
            extra={
                "checkout_session_id": session["id"],
                "amount_cents": line_item.unit_amount * line_item.quantity,
            },
        )
        return _to_checkout_session(session)

    async def retrieve_checkout_session(self, session_id: str) -> CheckoutSession:
        """
        Retrieve a checkout session and its payment status.

        Args:
            session_id: Stripe Checkout Session ID

        Returns:
            CheckoutSession

        Raises:
            PaymentProviderError: If the session does not exist or the id is malformed
            PaymentProviderUnavailableError: If Stripe cannot be reached
        """
        try:
            session = stripe.checkout.Session.retrieve(session_id)
        except stripe.StripeError as e:
            logger.error(f"Stripe session retrieve error: {e}", extra={"checkout_session_id": session_id})
            raise _translate_error(e, "retrieve a checkout session", session_id=session_id)

        return _to_checkout_session(session)


_stripe_service: Optional[StripeService] = None


def get_stripe_service() -> StripeService:
    """Process-wide gateway; the SDK is configured on first use."""
    global _stripe_service

    if _stripe_service is None:
        configure_stripe(
            settings.STRIPE_SECRET_KEY,
            timeout_seconds=settings.STRIPE_TIMEOUT_SECONDS,
            max_network_retries=settings.STRIPE_MAX_NETWORK_RETRIES,
        )
        _stripe_service = StripeService(currency=settings.STRIPE_CURRENCY)

    return _stripe_service
