"""
Service catalog Data Access Object.

WHAT: Queries for browsing the catalog: text search, category/location
filters, price ranges, pagination and distinct values.
"""

from typing import List, Optional, Tuple
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.dao.base import BaseDAO
from marketplace.models.service import Service


class ServiceDAO(BaseDAO[Service]):
    """Data Access Object for Service model."""

    def __init__(self, session: AsyncSession):
        """
        Initialize ServiceDAO.

        Args:
            session: Async database session
        """
        super().__init__(Service, session)

    def _search_conditions(
        self,
        search: Optional[str],
        category: Optional[str],
        location: Optional[str],
        min_price: Optional[int],
        max_price: Optional[int],
    ) -> list:
        conditions = []
        if search:
            conditions.append(Service.name.ilike(f"%{search.strip()}%"))
        if category:
            conditions.append(func.lower(Service.category) == category.strip().lower())
        if location:
            conditions.append(Service.location.ilike(f"%{location.strip()}%"))
        if min_price is not None:
            conditions.append(Service.cost >= min_price)
        if max_price is not None:
            conditions.append(Service.cost <= max_price)
        return conditions

    async def search(
        self,
        search: Optional[str] = None,
        category: Optional[str] = None,
        location: Optional[str] = None,
        min_price: Optional[int] = None,
        max_price: Optional[int] = None,
        skip: int = 0,
        limit: int = 12,
    ) -> Tuple[List[Service], int]:
        """
        Search the catalog.

        Args:
            search: Case-insensitive substring of the service name
            category: Exact category (case-insensitive)
            location: Case-insensitive substring of the location
            min_price: Inclusive lower bound on cost
            max_price: Inclusive upper bound on cost
            skip: Records to skip
            limit: Page size

        Returns:
            Tuple of (page of services newest first, total matching count)
        """
        conditions = self._search_conditions(search, category, location, min_price, max_price)

        total_result = await self.session.execute(
            select(func.count(Service.id)).where(*conditions)
        )
        total = int(total_result.scalar_one())

        result = await self.session.execute(
            select(Service)
            .where(*conditions)
            .order_by(Service.created_at.desc(), Service.id.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(result.scalars().all()), total

    async def distinct_locations(self) -> List[str]:
        """Return every distinct non-empty location, sorted."""
        result = await self.session.execute(
            select(Service.location)
            .where(Service.location.is_not(None), Service.location != "")
            .group_by(Service.location)
            .order_by(Service.location)
        )
        return [row[0] for row in result.all()]

    async def distinct_categories(self) -> List[str]:
        """Return every distinct category, sorted."""
        result = await self.session.execute(
            select(Service.category).group_by(Service.category).order_by(Service.category)
        )
        return [row[0] for row in result.all()]
