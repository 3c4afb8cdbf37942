"""
Tests for the pricing calculator.

WHY: The amount charged must be reproducible from the booking alone:
discounts round half up, unknown coupons are ignored and bad rules are
rejected at configuration time.
"""

import pytest
from decimal import Decimal

from marketplace.core.exceptions import PricingConfigurationError, ValidationError
from marketplace.services.pricing import CouponRules, PricingCalculator, round_half_up


@pytest.fixture
def calculator() -> PricingCalculator:
    return PricingCalculator(CouponRules({"SAVE10": 0.10, "SAVE20": 0.20, "DECOR25": 0.25}))


class TestComputeFinalAmount:
    """Pricing scenarios."""

    def test_addons_and_coupon(self, calculator):
        result = calculator.compute_final_amount(100, [{"name": "Lights", "price": 20}], "SAVE10")

        assert result.addons_total == 20
        assert result.subtotal == 120
        assert result.discount_amount == 12
        assert result.final_amount == 108
        assert result.coupon_code == "SAVE10"

    def test_unknown_coupon_gives_no_discount(self, calculator):
        result = calculator.compute_final_amount(100, [], "UNKNOWN")

        assert result.discount_amount == 0
        assert result.final_amount == 100
        assert result.coupon_code is None

    def test_zero_price(self, calculator):
        assert calculator.compute_final_amount(0, [], None).final_amount == 0

    def test_coupon_code_is_normalized(self, calculator):
        result = calculator.compute_final_amount(200, [], "  decor25 ")

        assert result.discount_amount == 50
        assert result.coupon_code == "DECOR25"

    def test_discount_rounds_half_up(self):
        calculator = PricingCalculator(CouponRules({"HALF": 0.5}))

        # 45 * 0.5 = 22.5 -> 23
        result = calculator.compute_final_amount(45, [], "HALF")

        assert result.discount_amount == 23
        assert result.final_amount == 22

    def test_addons_accept_objects_with_price(self, calculator):
        class Addon:
            price = 15

        assert calculator.compute_final_amount(10, [Addon(), Addon()]).addons_total == 30

    def test_negative_base_price_rejected(self, calculator):
        with pytest.raises(ValidationError):
            calculator.compute_final_amount(-1)

    def test_negative_addon_rejected(self, calculator):
        with pytest.raises(ValidationError):
            calculator.compute_final_amount(100, [{"price": -5}])


class TestCouponRules:
    """Rule validation."""

    @pytest.mark.parametrize("rate", [0, -0.1, 1.5])
    def test_rate_outside_range_rejected(self, rate):
        with pytest.raises(PricingConfigurationError):
            CouponRules({"BAD": rate})

    def test_full_discount_allowed(self):
        assert CouponRules({"FREE": 1}).rate_for("free") == Decimal("1")

    def test_empty_code(self):
        assert CouponRules({"SAVE10": 0.1}).rate_for("") is None


def test_round_half_up():
    assert round_half_up(Decimal("2.5")) == 3
    assert round_half_up(Decimal("2.4")) == 2
