"""
Service Catalog.

WHAT: Browsing and admin maintenance of the decoration services catalog.
"""

import logging
import math
from typing import Any, Dict, List, Optional, Tuple
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.core.exceptions import ServiceNotFoundError
from marketplace.dao.service import ServiceDAO
from marketplace.models.service import Service
from marketplace.models.user import User

logger = logging.getLogger(__name__)


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0


class CatalogService:
    """Service for catalog operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.service_dao = ServiceDAO(session)

    async def search(
        self,
        search: Optional[str] = None,
        category: Optional[str] = None,
        location: Optional[str] = None,
        min_price: Optional[int] = None,
        max_price: Optional[int] = None,
        page: int = 1,
        limit: int = 12,
    ) -> Tuple[List[Service], int]:
        """
        Search the catalog, one page at a time.

        Args:
            page: 1-based page number

        Returns:
            Tuple of (services, total matching)
        """
        return await self.service_dao.search(
            search=search,
            category=category,
            location=location,
            min_price=min_price,
            max_price=max_price,
            skip=(page - 1) * limit,
            limit=limit,
        )

    async def get_service(self, service_id: int) -> Service:
        service = await self.service_dao.get_by_id(service_id)
        if service is None:
            raise ServiceNotFoundError(service_id=service_id)
        return service

    async def locations(self) -> List[str]:
        return await self.service_dao.distinct_locations()

    async def categories(self) -> List[str]:
        return await self.service_dao.distinct_categories()

    async def create_service(self, admin: User, data: Dict[str, Any]) -> Service:
        service = await self.service_dao.create(created_by=admin.email, **data)
        logger.info(f"Service {service.id} created", extra={"service_id": service.id, "admin_email": admin.email})
        return service

    async def update_service(self, service_id: int, data: Dict[str, Any]) -> Service:
        """
        Raises:
            ServiceNotFoundError: If the service doesn't exist
        """
        if not data:
            return await self.get_service(service_id)

        service = await self.service_dao.update(service_id, **data)
        if service is None:
            raise ServiceNotFoundError(service_id=service_id)
        return service

    async def delete_service(self, service_id: int) -> None:
        """
        Existing bookings keep their denormalized service name and price.

        Raises:
            ServiceNotFoundError: If the service doesn't exist
        """
        if not await self.service_dao.delete(service_id):
            raise ServiceNotFoundError(service_id=service_id)
        logger.info(f"Service {service_id} deleted", extra={"service_id": service_id})
