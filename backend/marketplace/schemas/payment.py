"""
Payment schemas for checkout and settlement.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from marketplace.schemas.booking import AddonItem, BookingResponse


class CheckoutRequest(BaseModel):
    """
    Schema for creating a Stripe Checkout Session for a booking.

    When ``addons`` is omitted the add-ons stored on the booking are used.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    booking_id: int = Field(..., gt=0)
    addons: Optional[List[AddonItem]] = None
    coupon_code: Optional[str] = Field(default=None, max_length=64)


class PriceBreakdownResponse(BaseModel):
    """Pricing shown to the client before redirecting to checkout."""

    base_price: int
    addons_total: int
    subtotal: int
    discount_amount: int
    final_amount: int
    coupon_code: Optional[str]


class CheckoutResponse(BaseModel):
    """Redirect target for the hosted checkout page."""

    url: str
    session_id: str
    pricing: PriceBreakdownResponse


class VerifyPaymentRequest(BaseModel):
    """Schema for reconciling a completed checkout into a booking."""

    model_config = ConfigDict(str_strip_whitespace=True)

    session_id: str = Field(..., min_length=1, max_length=255)
    booking_id: int = Field(..., gt=0)


class VerifyPaymentResponse(BaseModel):
    """Settled booking."""

    success: bool = True
    transaction_id: Optional[str]
    booking: BookingResponse
