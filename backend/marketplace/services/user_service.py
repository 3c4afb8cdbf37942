"""
User Service.

WHAT: User registry operations: upsert on first contact, role lookup,
admin listing and role changes, and the public decorator directory.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.core.auth import Identity
from marketplace.core.exceptions import UserNotFoundError
from marketplace.dao.user import UserDAO
from marketplace.models.user import User, UserRole

logger = logging.getLogger(__name__)


class UserService:
    """Service for the user registry."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.user_dao = UserDAO(session)

    async def upsert_user(self, identity: Identity, profile: Dict[str, Any]) -> Tuple[User, bool]:
        """
        Create the caller's user record, or refresh its profile fields.

        The role is never changed here; new users start as USER.

        Returns:
            Tuple of (user, created)
        """
        profile = {key: value for key, value in profile.items() if value is not None}

        user = await self.user_dao.get_by_email(identity.email)
        if user is None:
            user = await self.user_dao.create(
                email=identity.email.lower(),
                role=UserRole.USER,
                **profile,
            )
            logger.info("User registered", extra={"user_id": user.id, "email": user.email})
            return user, True

        if profile:
            user = await self.user_dao.update(user.id, **profile)
        return user, False

    async def get_role(self, email: str) -> UserRole:
        """
        Raises:
            UserNotFoundError: If no user has this email
        """
        role = await self.user_dao.get_role(email)
        if role is None:
            raise UserNotFoundError(email=email)
        return role

    async def list_users(
        self,
        skip: int = 0,
        limit: int = 100,
        role: Optional[UserRole] = None,
    ) -> Tuple[List[User], int]:
        filters = {"role": role} if role else {}
        items = await self.user_dao.list_users(skip=skip, limit=limit, role=role)
        total = await self.user_dao.count(**filters)
        return items, total

    async def change_role(self, admin: User, email: str, role: UserRole) -> User:
        """
        Set a user's role (admin).

        Raises:
            UserNotFoundError: If no user has this email
        """
        user = await self.user_dao.set_role(email, role)
        if user is None:
            raise UserNotFoundError(email=email)

        logger.info(
            f"Role of {user.email} set to {role.value}",
            extra={"admin_email": admin.email, "user_id": user.id},
        )
        return user

    async def list_decorators(self) -> List[User]:
        return await self.user_dao.list_users(skip=0, limit=None, role=UserRole.DECORATOR)
