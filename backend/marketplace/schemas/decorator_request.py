"""
Decorator request schemas.
"""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from marketplace.models.decorator_request import DecoratorRequestStatus


class DecoratorRequestCreate(BaseModel):
    """Application details. The applicant email comes from the token."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(default=None, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=50)
    specialty: Optional[str] = Field(default=None, max_length=255)
    experience_years: Optional[int] = Field(default=None, ge=0, le=80)
    portfolio_url: Optional[str] = Field(default=None, max_length=1024)
    message: Optional[str] = Field(default=None, max_length=5000)


class DecoratorRequestDecision(BaseModel):
    """Admin decision on a request."""

    status: Literal["approved", "rejected"]
    email: Optional[EmailStr] = Field(
        default=None,
        description="Applicant email; must match the request when supplied",
    )


class DecoratorRequestResponse(BaseModel):
    """Decorator request data."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    name: Optional[str]
    phone: Optional[str]
    specialty: Optional[str]
    experience_years: Optional[int]
    portfolio_url: Optional[str]
    message: Optional[str]
    status: DecoratorRequestStatus
    created_at: datetime
    updated_at: datetime


class DecoratorRequestSubmitResponse(BaseModel):
    """
    Result of a submission.

    ``created`` is False when a request for the email already existed; the
    existing request is returned unchanged.
    """

    message: str
    created: bool
    request: DecoratorRequestResponse


class DecoratorRequestDecisionResponse(BaseModel):
    """Result of an admin decision."""

    request: DecoratorRequestResponse
    role_updated: bool


class DecoratorRequestListResponse(BaseModel):
    items: List[DecoratorRequestResponse]
    total: int
