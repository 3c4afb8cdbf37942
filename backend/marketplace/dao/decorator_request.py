"""
Decorator request Data Access Object.
"""

from typing import List, Optional
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.dao.base import BaseDAO
from marketplace.models.decorator_request import DecoratorRequest, DecoratorRequestStatus


class DecoratorRequestDAO(BaseDAO[DecoratorRequest]):
    """Data Access Object for DecoratorRequest model."""

    def __init__(self, session: AsyncSession):
        super().__init__(DecoratorRequest, session)

    async def get_by_email(self, email: str) -> Optional[DecoratorRequest]:
        """Return the request submitted by ``email``, if any."""
        result = await self.session.execute(
            select(DecoratorRequest).where(func.lower(DecoratorRequest.email) == email.lower())
        )
        return result.scalar_one_or_none()

    async def list_requests(
        self,
        status: Optional[DecoratorRequestStatus] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[DecoratorRequest]:
        """List requests newest first, optionally by status."""
        filters = {"status": status} if status else {}
        return await self.find_many(
            skip=skip,
            limit=limit,
            order_by=[DecoratorRequest.created_at.desc(), DecoratorRequest.id.desc()],
            **filters,
        )
