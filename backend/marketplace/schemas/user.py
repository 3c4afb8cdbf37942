"""
User schemas.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from marketplace.models.user import UserRole


class UserUpsert(BaseModel):
    """
    Profile data sent on first (and every) authenticated contact.

    The email is taken from the verified token.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(default=None, max_length=255)
    photo_url: Optional[str] = Field(default=None, max_length=1024)


class UserResponse(BaseModel):
    """User data returned to clients."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    name: Optional[str]
    photo_url: Optional[str]
    role: UserRole
    created_at: datetime


class UserListResponse(BaseModel):
    """Paginated user list response."""

    items: List[UserResponse]
    total: int
    skip: int
    limit: int


class RoleResponse(BaseModel):
    """A user's role."""

    email: str
    role: UserRole


class RoleUpdate(BaseModel):
    """Admin role change."""

    role: UserRole
