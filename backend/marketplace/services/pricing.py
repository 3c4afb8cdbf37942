"""
Pricing calculator for bookings.

WHAT: Computes the chargeable amount from a base price, add-ons and an
optional coupon.

WHY: The amount sent to the payment provider must be reproducible from
the booking alone, so pricing is a pure function of its inputs plus an
injected coupon table.

HOW:
    addons_total = sum(addon.price)
    subtotal     = base_price + addons_total
    discount     = round_half_up(subtotal * rate)   # 0 for unknown coupons
    final        = subtotal - discount
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Iterable, Mapping, Optional

from marketplace.core.config import settings
from marketplace.core.exceptions import PricingConfigurationError, ValidationError


def round_half_up(value: Decimal) -> int:
    """Round to the nearest integer, halves away from zero."""
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class CouponRules:
    """
    Coupon code -> discount rate table.

    Codes are matched case-insensitively after trimming.

    Raises:
        PricingConfigurationError: If any rate is outside (0, 1]
    """

    def __init__(self, rates: Mapping[str, Any]):
        self._rates = {}
        for code, rate in rates.items():
            decimal_rate = Decimal(str(rate))
            if not (Decimal("0") < decimal_rate <= Decimal("1")):
                raise PricingConfigurationError(
                    message=f"Coupon rate for {code!r} must be in (0, 1]",
                    coupon_code=code,
                    rate=str(rate),
                )
            self._rates[self.normalize(code)] = decimal_rate

    @staticmethod
    def normalize(code: str) -> str:
        return code.strip().upper()

    def rate_for(self, code: Optional[str]) -> Optional[Decimal]:
        """Return the rate for ``code``, or None if unknown or empty."""
        if not code:
            return None
        return self._rates.get(self.normalize(code))


@dataclass(frozen=True)
class PriceBreakdown:
    """Result of a pricing computation, in whole currency units."""

    base_price: int
    addons_total: int
    subtotal: int
    discount_amount: int
    final_amount: int
    coupon_code: Optional[str] = None
    """Normalized coupon code when a discount applied, else None."""


def _addon_price(addon: Any) -> int:
    price = addon.get("price") if isinstance(addon, Mapping) else getattr(addon, "price")
    return int(price)


class PricingCalculator:
    """
    Computes final booking amounts.

    Args:
        coupon_rules: Injected coupon table
    """

    def __init__(self, coupon_rules: CouponRules):
        self.coupon_rules = coupon_rules

    def compute_final_amount(
        self,
        base_price: int,
        addons: Iterable[Any] = (),
        coupon_code: Optional[str] = None,
    ) -> PriceBreakdown:
        """
        Compute the chargeable amount.

        Args:
            base_price: Service price, integer >= 0
            addons: Mappings or objects with an integer ``price`` >= 0
            coupon_code: Optional code; unknown codes give no discount

        Returns:
            PriceBreakdown

        Raises:
            ValidationError: If the base price or an add-on price is negative

        Example:
            >>> calc.compute_final_amount(100, [{"price": 20}], "SAVE10").final_amount
            108
        """
        if base_price < 0:
            raise ValidationError(message="Base price must not be negative", base_price=base_price)

        addon_prices = [_addon_price(addon) for addon in addons]
        if any(price < 0 for price in addon_prices):
            raise ValidationError(message="Add-on prices must not be negative")

        addons_total = sum(addon_prices)
        subtotal = base_price + addons_total

        rate = self.coupon_rules.rate_for(coupon_code)
        discount = round_half_up(Decimal(subtotal) * rate) if rate is not None else 0

        return PriceBreakdown(
            base_price=base_price,
            addons_total=addons_total,
            subtotal=subtotal,
            discount_amount=discount,
            final_amount=subtotal - discount,
            coupon_code=CouponRules.normalize(coupon_code) if rate is not None else None,
        )


_pricing_calculator: Optional[PricingCalculator] = None


def get_pricing_calculator() -> PricingCalculator:
    """
    Get or create the calculator configured from ``settings.COUPON_RATES``.

    Returns:
        PricingCalculator instance
    """
    global _pricing_calculator

    if _pricing_calculator is None:
        _pricing_calculator = PricingCalculator(CouponRules(settings.COUPON_RATES))

    return _pricing_calculator
