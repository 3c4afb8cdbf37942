"""
User Data Access Object.

WHY: UserDAO is the role store lookup every authorization decision goes
through.
"""

from typing import Dict, List, Optional
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.dao.base import BaseDAO
from marketplace.models.user import User, UserRole


class UserDAO(BaseDAO[User]):
    """Data Access Object for User model."""

    def __init__(self, session: AsyncSession):
        """Initialize UserDAO with session."""
        super().__init__(User, session)

    async def get_by_email(self, email: str) -> Optional[User]:
        """
        Retrieve user by email address.

        WHY: Email is the identity claim. Case-insensitive comparison prevents
        duplicate accounts with different casing.

        Args:
            email: User's email address

        Returns:
            User instance if found, None otherwise
        """
        result = await self.session.execute(
            select(User).where(func.lower(User.email) == email.lower())
        )
        return result.scalar_one_or_none()

    async def get_role(self, email: str) -> Optional[UserRole]:
        """
        Resolve an email to its role.

        Returns:
            The role, or None when no user record exists
        """
        result = await self.session.execute(
            select(User.role).where(func.lower(User.email) == email.lower())
        )
        return result.scalar_one_or_none()

    async def set_role(self, email: str, role: UserRole) -> Optional[User]:
        """
        Set a user's role.

        WHY: Setting the same role twice is a no-op, which makes re-running a
        half-applied promotion safe.

        Returns:
            Updated User, or None if no user has this email
        """
        return await self.update_by_filter({"role": role}, email=email.lower())

    async def list_users(
        self,
        skip: int = 0,
        limit: Optional[int] = 100,
        role: Optional[UserRole] = None,
    ) -> List[User]:
        """List users newest first, optionally filtered by role."""
        filters = {"role": role} if role else {}
        return await self.find_many(
            skip=skip,
            limit=limit,
            order_by=[User.created_at.desc(), User.id.desc()],
            **filters,
        )

    async def count_by_role(self) -> Dict[str, int]:
        """
        Count users per role.

        Returns:
            Mapping of role value to count; roles with no users are omitted
        """
        result = await self.session.execute(
            select(User.role, func.count(User.id)).group_by(User.role)
        )
        return {role.value: count for role, count in result.all()}
