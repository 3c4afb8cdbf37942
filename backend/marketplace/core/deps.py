"""
FastAPI dependencies for authentication and authorization.

WHY: Dependencies run before the route body. A route declaring
``Depends(require_admin)`` cannot execute a single statement for a
non-admin caller.
"""

from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.core.auth import Identity, JWTIdentityResolver, get_identity_resolver
from marketplace.core.authorization import AuthorizationGate
from marketplace.db.session import get_db
from marketplace.dao.user import UserDAO
from marketplace.models.user import User, UserRole


# WHY: auto_error=False so a missing header becomes our 401 AuthenticationError
# instead of FastAPI's default response
security = HTTPBearer(auto_error=False)


async def get_authorization_gate(
    db: AsyncSession = Depends(get_db),
    resolver: JWTIdentityResolver = Depends(get_identity_resolver),
) -> AuthorizationGate:
    """Build the gate for this request's session."""
    return AuthorizationGate(resolver, UserDAO(db))


async def get_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    gate: AuthorizationGate = Depends(get_authorization_gate),
) -> Identity:
    """
    Authenticate the caller from the Authorization header.

    Usage:
        @router.post("/auth/user")
        async def upsert(identity: Identity = Depends(get_identity)): ...

    Raises:
        AuthenticationError: If the token is missing, invalid or expired
    """
    return gate.authenticate(credentials.credentials if credentials else None)


async def get_current_user(
    identity: Identity = Depends(get_identity),
    gate: AuthorizationGate = Depends(get_authorization_gate),
) -> User:
    """
    Authenticated caller with a user record, any role.

    Raises:
        AuthenticationError: If the token is missing or invalid
        AuthorizationError: If the identity has no user record
    """
    return await gate.authorize(identity)


def require_role(*roles: UserRole):
    """
    Factory function to create a role requirement dependency.

    Usage:
        @router.patch("/bookings/{id}")
        async def update(user: User = Depends(require_role(UserRole.ADMIN, UserRole.DECORATOR))): ...

    Args:
        *roles: Roles allowed through

    Returns:
        Dependency function that checks for one of the roles
    """

    async def role_checker(
        identity: Identity = Depends(get_identity),
        gate: AuthorizationGate = Depends(get_authorization_gate),
    ) -> User:
        return await gate.authorize(identity, roles)

    return role_checker


require_admin = require_role(UserRole.ADMIN)
