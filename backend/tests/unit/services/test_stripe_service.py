"""
Tests for the Stripe Checkout gateway.

WHY: Stripe failures must split cleanly into rejections (400) and
unavailability (503) so clients know whether to retry.

HOW: stripe.checkout.Session is patched; no network calls are made.
"""

import pytest
import stripe
from unittest.mock import patch

from marketplace.core.exceptions import PaymentProviderError, PaymentProviderUnavailableError
from marketplace.services.stripe_service import CheckoutLineItem, StripeService


def _session_payload(**overrides) -> dict:
    payload = {
        "id": "cs_test_1",
        "url": "https://checkout.stripe.com/pay/cs_test_1",
        "payment_status": "unpaid",
        "payment_intent": None,
        "amount_total": 10800,
        "currency": "usd",
        "metadata": {"bookingId": "1"},
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def line_item() -> CheckoutLineItem:
    return CheckoutLineItem(name="Wedding Stage", description="Base: 100", unit_amount=10800)


class TestCreateCheckoutSession:
    """Session creation."""

    @pytest.mark.asyncio
    async def test_builds_payment_mode_session(self, line_item):
        with patch.object(stripe.checkout.Session, "create", return_value=_session_payload()) as create:
            session = await StripeService(currency="usd").create_checkout_session(
                line_item=line_item,
                success_url="http://front/success",
                cancel_url="http://front/cancel",
                metadata={"bookingId": "1"},
                customer_email="client@example.com",
            )

        params = create.call_args.kwargs
        assert params["mode"] == "payment"
        assert params["line_items"][0]["price_data"]["unit_amount"] == 10800
        assert params["line_items"][0]["price_data"]["product_data"]["name"] == "Wedding Stage"
        assert params["customer_email"] == "client@example.com"
        assert session.id == "cs_test_1"
        assert session.url.endswith("cs_test_1")

    @pytest.mark.asyncio
    async def test_invalid_request_is_provider_error(self, line_item):
        error = stripe.InvalidRequestError("Amount must be at least 50 cents", param="unit_amount")

        with patch.object(stripe.checkout.Session, "create", side_effect=error):
            with pytest.raises(PaymentProviderError) as exc_info:
                await StripeService().create_checkout_session(
                    line_item, "http://s", "http://c", {"bookingId": "1"}
                )

        assert exc_info.value.status_code == 400

    @pytest.mark.asyncio
    async def test_connection_error_is_unavailable(self, line_item):
        with patch.object(
            stripe.checkout.Session, "create", side_effect=stripe.APIConnectionError("timeout")
        ):
            with pytest.raises(PaymentProviderUnavailableError) as exc_info:
                await StripeService().create_checkout_session(
                    line_item, "http://s", "http://c", {"bookingId": "1"}
                )

        assert exc_info.value.status_code == 503

    @pytest.mark.asyncio
    async def test_rate_limit_is_unavailable(self, line_item):
        with patch.object(
            stripe.checkout.Session, "create", side_effect=stripe.RateLimitError("slow down")
        ):
            with pytest.raises(PaymentProviderUnavailableError):
                await StripeService().create_checkout_session(
                    line_item, "http://s", "http://c", {"bookingId": "1"}
                )


class TestRetrieveCheckoutSession:
    """Session retrieval."""

    @pytest.mark.asyncio
    async def test_paid_session(self):
        payload = _session_payload(payment_status="paid", payment_intent="pi_123")

        with patch.object(stripe.checkout.Session, "retrieve", return_value=payload):
            session = await StripeService().retrieve_checkout_session("cs_test_1")

        assert session.is_paid
        assert session.payment_intent_id == "pi_123"
        assert session.amount_total == 10800
        assert session.metadata == {"bookingId": "1"}

    @pytest.mark.asyncio
    async def test_expanded_payment_intent(self):
        payload = _session_payload(payment_status="paid", payment_intent={"id": "pi_456"})

        with patch.object(stripe.checkout.Session, "retrieve", return_value=payload):
            session = await StripeService().retrieve_checkout_session("cs_test_1")

        assert session.payment_intent_id == "pi_456"

    @pytest.mark.asyncio
    async def test_unknown_session_is_provider_error(self):
        error = stripe.InvalidRequestError("No such checkout.session", param="id")

        with patch.object(stripe.checkout.Session, "retrieve", side_effect=error):
            with pytest.raises(PaymentProviderError):
                await StripeService().retrieve_checkout_session("cs_missing")
