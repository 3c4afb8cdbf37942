"""
Service catalog schemas.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ServiceCreate(BaseModel):
    """Schema for creating a catalog service (admin)."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=255)
    category: str = Field(..., min_length=1, max_length=100)
    location: Optional[str] = Field(default=None, max_length=255)
    cost: int = Field(..., ge=0, description="Whole currency units")
    description: Optional[str] = Field(default=None, max_length=10000)
    image_url: Optional[str] = Field(default=None, max_length=1024)
    attributes: Dict[str, Any] = Field(default_factory=dict)


class ServiceUpdate(BaseModel):
    """Schema for updating a catalog service (admin)."""

    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    category: Optional[str] = Field(default=None, min_length=1, max_length=100)
    location: Optional[str] = Field(default=None, max_length=255)
    cost: Optional[int] = Field(default=None, ge=0)
    description: Optional[str] = Field(default=None, max_length=10000)
    image_url: Optional[str] = Field(default=None, max_length=1024)
    attributes: Optional[Dict[str, Any]] = None


class ServiceResponse(BaseModel):
    """Schema for catalog service responses."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    category: str
    location: Optional[str]
    cost: int
    description: Optional[str]
    image_url: Optional[str]
    attributes: Dict[str, Any]
    created_by: Optional[str]
    created_at: datetime
    updated_at: datetime


class ServiceListResponse(BaseModel):
    """Paginated catalog page."""

    items: List[ServiceResponse]
    total: int
    page: int
    limit: int
    total_pages: int
