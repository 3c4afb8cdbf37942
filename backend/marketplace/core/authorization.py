"""
Authorization gate.

WHAT: Combines the identity resolver with the role store lookup to admit
or deny operations by role and ownership.

WHY: Every denial is an exception raised before the wrapped operation
runs. There is no path where a denied caller falls through to a side
effect.
"""

import logging
from typing import Iterable, Optional

from marketplace.core.auth import Identity, JWTIdentityResolver
from marketplace.core.exceptions import AuthenticationError, AuthorizationError
from marketplace.dao.user import UserDAO
from marketplace.models.user import User, UserRole

logger = logging.getLogger(__name__)


class AuthorizationGate:
    """
    Admits or denies callers.

    Args:
        resolver: Verifies bearer tokens
        user_dao: Role store lookup
    """

    def __init__(self, resolver: JWTIdentityResolver, user_dao: UserDAO):
        self.resolver = resolver
        self.user_dao = user_dao

    def authenticate(self, credential: Optional[str]) -> Identity:
        """
        Turn a bearer credential into a verified identity.

        Raises:
            AuthenticationError: If no credential was supplied or it fails verification
        """
        if not credential:
            raise AuthenticationError(message="Missing bearer token")
        return self.resolver.verify(credential)

    async def authorize(self, identity: Identity, roles: Optional[Iterable[UserRole]] = None) -> User:
        """
        Look up the caller's user record and check its role.

        Args:
            identity: Verified identity
            roles: Allowed roles; None admits any registered user

        Returns:
            The caller's User record

        Raises:
            AuthorizationError: If no user record exists or the role is not allowed
        """
        user = await self.user_dao.get_by_email(identity.email)
        if user is None:
            raise AuthorizationError(message="User is not registered", email=identity.email)

        allowed = set(roles) if roles is not None else None
        if allowed is not None and user.role not in allowed:
            logger.warning(
                f"Role check denied for {identity.email}",
                extra={"user_role": user.role.value, "required": sorted(r.value for r in allowed)},
            )
            raise AuthorizationError(
                message=f"{' or '.join(sorted(r.value for r in allowed))} access required",
                user_role=user.role.value,
            )
        return user

    async def authorize_owner_or_role(
        self,
        identity: Identity,
        owner_emails: Iterable[Optional[str]],
        roles: Iterable[UserRole] = (UserRole.ADMIN,),
        message: str = "Not the owner of this resource",
        **context,
    ) -> None:
        """
        Admit any of the resource's owners, or any holder of ``roles``.

        Owners are matched on the verified email alone; the role store is
        only consulted when the caller owns nothing.

        Raises:
            AuthorizationError: If the caller is neither
        """
        caller = identity.email.lower()
        if any(owner and owner.lower() == caller for owner in owner_emails):
            return

        role = await self.user_dao.get_role(caller)
        if role is not None and role in set(roles):
            return

        logger.warning(
            f"Ownership check denied for {caller}",
            extra={"user_role": role.value if role else None, **context},
        )
        raise AuthorizationError(message=message, **context)

    @staticmethod
    def require_self(identity: Identity, email: str) -> None:
        """
        Self-service check: the requested email must be the caller's own.

        Raises:
            AuthorizationError: If the emails differ
        """
        if identity.email.lower() != email.strip().lower():
            raise AuthorizationError(message="You can only access your own record")
