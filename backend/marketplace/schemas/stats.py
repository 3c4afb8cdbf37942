"""
Admin dashboard statistics schema.
"""

from typing import Dict

from pydantic import BaseModel


class StatsResponse(BaseModel):
    """Aggregate counts for the admin dashboard."""

    total_users: int
    users_by_role: Dict[str, int]
    total_services: int
    total_bookings: int
    bookings_by_status: Dict[str, int]
    total_revenue: int
    pending_decorator_requests: int
