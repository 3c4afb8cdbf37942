"""
Booking schemas for API request/response validation.

WHAT: Pydantic schemas for booking creation, updates and responses.

WHY: The create schema has no ``status`` field; anything a client sends
there is dropped before it reaches the service layer, so every booking
starts PENDING. The update schema forbids unknown fields, which keeps the
booking id immutable.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from marketplace.models.booking import BookingStatus


# ============================================================================
# Shared
# ============================================================================


class AddonItem(BaseModel):
    """An optional extra priced on top of the service cost."""

    name: str = Field(..., min_length=1, max_length=255)
    price: int = Field(..., ge=0, description="Whole currency units")


# ============================================================================
# Request Schemas
# ============================================================================


class BookingCreate(BaseModel):
    """
    Schema for creating a booking.

    The client identity comes from the bearer token, never from this body.
    """

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    service_id: int = Field(..., gt=0, description="Catalog service to book")
    decorator_email: Optional[EmailStr] = Field(
        default=None,
        description="Decorator assigned to the booking",
    )
    user_name: Optional[str] = Field(default=None, max_length=255)
    event_date: Optional[datetime] = None
    location: Optional[str] = Field(default=None, max_length=255)
    notes: Optional[str] = Field(default=None, max_length=5000)
    addons: List[AddonItem] = Field(default_factory=list)


class BookingUpdate(BaseModel):
    """
    Schema for patching a booking.

    Admins may set any of these fields. Decorators may set ``status`` only.
    """

    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    status: Optional[BookingStatus] = None
    service_id: Optional[int] = Field(default=None, gt=0)
    service_name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    price: Optional[int] = Field(default=None, ge=0)
    user_email: Optional[EmailStr] = None
    user_name: Optional[str] = Field(default=None, max_length=255)
    decorator_email: Optional[EmailStr] = None
    event_date: Optional[datetime] = None
    location: Optional[str] = Field(default=None, max_length=255)
    notes: Optional[str] = Field(default=None, max_length=5000)
    addons: Optional[List[AddonItem]] = None
    coupon_code: Optional[str] = Field(default=None, max_length=64)
    transaction_id: Optional[str] = Field(default=None, max_length=255)
    amount_paid: Optional[int] = Field(default=None, ge=0)

    @field_validator("status", "service_name", "price", "user_email", "addons")
    @classmethod
    def reject_null(cls, v):
        """NOT NULL columns can be changed but not cleared."""
        if v is None:
            raise ValueError("Field cannot be null")
        return v

    @field_validator("user_email", "decorator_email")
    @classmethod
    def normalize_email(cls, v: Optional[str]) -> Optional[str]:
        """Ownership filters compare lower-cased emails."""
        return v.lower() if v is not None else v


# ============================================================================
# Response Schemas
# ============================================================================


class BookingResponse(BaseModel):
    """Schema for booking response data."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    service_id: Optional[int]
    service_name: str
    price: int
    user_email: str
    user_name: Optional[str]
    decorator_email: Optional[str]
    status: BookingStatus

    event_date: Optional[datetime]
    location: Optional[str]
    notes: Optional[str]

    addons: List[AddonItem]
    coupon_code: Optional[str]

    checkout_session_id: Optional[str]
    transaction_id: Optional[str]
    amount_paid: Optional[int]
    paid_at: Optional[datetime]

    created_at: datetime
    updated_at: datetime


class BookingListResponse(BaseModel):
    """Paginated list response for bookings, newest first."""

    items: List[BookingResponse]
    total: int
    skip: int
    limit: int
