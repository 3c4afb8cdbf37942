"""
Tests for PaymentSessionOrchestrator.

WHY: Payment crosses a trust boundary:
1. Sessions are created only for pending bookings with a positive amount
2. Settlement trusts Stripe's reported status, not the caller
3. Settling twice changes nothing the second time
"""

import pytest

from marketplace.core.auth import Identity
from marketplace.core.exceptions import (
    AuthorizationError,
    BookingNotFoundError,
    InvalidStateTransitionError,
    PaymentNotCompletedError,
    PaymentProviderUnavailableError,
    ValidationError,
)
from marketplace.models.booking import BookingStatus
from marketplace.services.payment_service import PaymentSessionOrchestrator
from marketplace.services.pricing import CouponRules, PricingCalculator
from marketplace.services.stripe_service import CheckoutSession
from tests.fakes import FakeCheckoutGateway
from tests.factories import BookingFactory, UserFactory

CLIENT = Identity(email="client@example.com")


@pytest.fixture
def orchestrator_factory(gateway):
    pricing = PricingCalculator(CouponRules({"SAVE10": 0.10}))

    def build(session) -> PaymentSessionOrchestrator:
        return PaymentSessionOrchestrator(session, gateway, pricing, frontend_url="http://front.test/")

    return build


class TestCreateSession:
    """Checkout creation."""

    @pytest.mark.asyncio
    async def test_prices_booking_and_sets_metadata(self, db_session, gateway, orchestrator_factory):
        booking = await BookingFactory.create(db_session, price=100)

        checkout, breakdown = await orchestrator_factory(db_session).create_session(
            CLIENT, booking.id, addons=[{"name": "Lights", "price": 20}], coupon_code="save10"
        )

        assert breakdown.final_amount == 108
        created = gateway.created[0]
        assert created["line_item"].unit_amount == 10800
        assert created["metadata"] == {
            "bookingId": str(booking.id),
            "userEmail": "client@example.com",
            "couponCode": "SAVE10",
            "addonsTotal": "20",
            "discount": "12",
        }
        assert created["success_url"] == (
            "http://front.test/dashboard/payment-success"
            f"?session_id={{CHECKOUT_SESSION_ID}}&booking_id={booking.id}"
        )
        assert created["cancel_url"] == f"http://front.test/dashboard/payment-cancelled?booking_id={booking.id}"
        assert checkout.url

    @pytest.mark.asyncio
    async def test_defaults_to_booking_addons(self, db_session, gateway, orchestrator_factory):
        booking = await BookingFactory.create(
            db_session, price=50, addons=[{"name": "Flowers", "price": 25}]
        )

        _, breakdown = await orchestrator_factory(db_session).create_session(CLIENT, booking.id)

        assert breakdown.addons_total == 25
        assert gateway.created[0]["metadata"]["couponCode"] == "none"

    @pytest.mark.asyncio
    async def test_zero_amount_rejected(self, db_session, gateway, orchestrator_factory):
        booking = await BookingFactory.create(db_session, price=0)

        with pytest.raises(ValidationError):
            await orchestrator_factory(db_session).create_session(CLIENT, booking.id)

        assert gateway.created == []

    @pytest.mark.asyncio
    async def test_non_pending_booking_rejected(self, db_session, orchestrator_factory):
        booking = await BookingFactory.create(db_session, status=BookingStatus.PAID)

        with pytest.raises(InvalidStateTransitionError):
            await orchestrator_factory(db_session).create_session(CLIENT, booking.id)

    @pytest.mark.asyncio
    async def test_missing_booking(self, db_session, orchestrator_factory):
        with pytest.raises(BookingNotFoundError):
            await orchestrator_factory(db_session).create_session(CLIENT, 12345)


class TestVerifyAndSettle:
    """Reconciliation."""

    async def _checkout(self, db_session, gateway: FakeCheckoutGateway, orchestrator_factory):
        booking = await BookingFactory.create(db_session, price=100)
        checkout, _ = await orchestrator_factory(db_session).create_session(
            CLIENT, booking.id, coupon_code="SAVE10"
        )
        return booking, checkout

    @pytest.mark.asyncio
    async def test_paid_session_settles_booking(self, db_session, gateway, orchestrator_factory):
        booking, checkout = await self._checkout(db_session, gateway, orchestrator_factory)
        gateway.mark_paid(checkout.id, payment_intent_id="pi_abc")

        settled = await orchestrator_factory(db_session).verify_and_settle(CLIENT, checkout.id, booking.id)

        assert settled.status == BookingStatus.PAID
        assert settled.transaction_id == "pi_abc"
        assert settled.checkout_session_id == checkout.id
        assert settled.amount_paid == 90
        assert settled.coupon_code == "SAVE10"
        assert settled.paid_at is not None

    @pytest.mark.asyncio
    async def test_settling_twice_is_idempotent(self, db_session, gateway, orchestrator_factory):
        booking, checkout = await self._checkout(db_session, gateway, orchestrator_factory)
        gateway.mark_paid(checkout.id)
        orchestrator = orchestrator_factory(db_session)

        first = await orchestrator.verify_and_settle(CLIENT, checkout.id, booking.id)
        paid_at = first.paid_at
        transaction_id = first.transaction_id
        second = await orchestrator.verify_and_settle(CLIENT, checkout.id, booking.id)

        assert second.status == BookingStatus.PAID
        assert second.paid_at == paid_at
        assert second.transaction_id == transaction_id == "pi_test_123"

    @pytest.mark.asyncio
    async def test_progressed_booking_returned_unchanged(self, db_session, gateway, orchestrator_factory):
        booking = await BookingFactory.create(db_session, status=BookingStatus.PLANNING)
        gateway.add_session(
            CheckoutSession(
                id="cs_old",
                payment_status="paid",
                payment_intent_id="pi_old",
                amount_total=10000,
                metadata={"bookingId": str(booking.id), "userEmail": CLIENT.email},
            )
        )

        result = await orchestrator_factory(db_session).verify_and_settle(CLIENT, "cs_old", booking.id)

        assert result.status == BookingStatus.PLANNING

    @pytest.mark.asyncio
    async def test_unpaid_session_changes_nothing(self, db_session, gateway, orchestrator_factory):
        booking, checkout = await self._checkout(db_session, gateway, orchestrator_factory)

        with pytest.raises(PaymentNotCompletedError):
            await orchestrator_factory(db_session).verify_and_settle(CLIENT, checkout.id, booking.id)

        await db_session.refresh(booking)
        assert booking.status == BookingStatus.PENDING

    @pytest.mark.asyncio
    async def test_session_for_other_booking_rejected(self, db_session, gateway, orchestrator_factory):
        booking, checkout = await self._checkout(db_session, gateway, orchestrator_factory)
        other = await BookingFactory.create(db_session)
        gateway.mark_paid(checkout.id)

        with pytest.raises(ValidationError):
            await orchestrator_factory(db_session).verify_and_settle(CLIENT, checkout.id, other.id)

    @pytest.mark.asyncio
    async def test_stranger_cannot_settle(self, db_session, gateway, orchestrator_factory):
        booking, checkout = await self._checkout(db_session, gateway, orchestrator_factory)
        gateway.mark_paid(checkout.id)
        await UserFactory.create(db_session, email="stranger@example.com")

        with pytest.raises(AuthorizationError):
            await orchestrator_factory(db_session).verify_and_settle(
                Identity(email="stranger@example.com"), checkout.id, booking.id
            )

        await db_session.refresh(booking)
        assert booking.status == BookingStatus.PENDING

    @pytest.mark.asyncio
    async def test_admin_can_settle(self, db_session, gateway, orchestrator_factory):
        booking, checkout = await self._checkout(db_session, gateway, orchestrator_factory)
        gateway.mark_paid(checkout.id)
        admin = await UserFactory.create_admin(db_session)

        settled = await orchestrator_factory(db_session).verify_and_settle(
            Identity(email=admin.email), checkout.id, booking.id
        )

        assert settled.status == BookingStatus.PAID

    @pytest.mark.asyncio
    async def test_provider_unavailable_propagates(self, db_session, gateway, orchestrator_factory):
        booking, checkout = await self._checkout(db_session, gateway, orchestrator_factory)
        gateway.retrieve_error = PaymentProviderUnavailableError()

        with pytest.raises(PaymentProviderUnavailableError):
            await orchestrator_factory(db_session).verify_and_settle(CLIENT, checkout.id, booking.id)
