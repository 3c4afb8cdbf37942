"""
User registry API endpoints.

WHAT: First-contact upsert, role lookups, admin user management and the
public decorator directory.

WHY: The email in every request here comes from the verified token.
Role lookups are self-service only, and role changes are admin only.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.core.auth import Identity
from marketplace.core.authorization import AuthorizationGate
from marketplace.core.config import settings
from marketplace.core.deps import get_identity, require_admin
from marketplace.db.session import get_db
from marketplace.models.user import User, UserRole
from marketplace.schemas.user import (
    RoleResponse,
    RoleUpdate,
    UserListResponse,
    UserResponse,
    UserUpsert,
)
from marketplace.services.user_service import UserService


router = APIRouter(tags=["users"])


@router.post(
    "/auth/user",
    response_model=UserResponse,
    summary="Register or refresh the caller's user record",
)
async def upsert_user(
    data: UserUpsert,
    response: Response,
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
) -> UserResponse:
    """
    Idempotent upsert keyed on the token email.

    Returns 201 when the record was created, 200 otherwise. The role is
    never changed by this endpoint.
    """
    user, created = await UserService(db).upsert_user(identity, data.model_dump())
    if created:
        response.status_code = status.HTTP_201_CREATED
    return UserResponse.model_validate(user)


@router.get("/users/role/{email}", response_model=RoleResponse, summary="Get own role")
async def get_user_role(
    email: str,
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
) -> RoleResponse:
    """
    Raises:
        AuthorizationError (403): If ``email`` is not the caller's
        UserNotFoundError (404): If the caller has no user record
    """
    AuthorizationGate.require_self(identity, email)
    role = await UserService(db).get_role(identity.email)
    return RoleResponse(email=identity.email, role=role)


@router.get("/users", response_model=UserListResponse, summary="List users (admin)")
async def list_users(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=settings.MAX_PAGE_SIZE),
    role: Optional[UserRole] = Query(None),
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> UserListResponse:
    items, total = await UserService(db).list_users(skip=skip, limit=limit, role=role)
    return UserListResponse(
        items=[UserResponse.model_validate(u) for u in items],
        total=total,
        skip=skip,
        limit=limit,
    )


@router.patch("/users/{email}/role", response_model=UserResponse, summary="Change role (admin)")
async def change_user_role(
    email: str,
    data: RoleUpdate,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> UserResponse:
    user = await UserService(db).change_role(current_user, email, data.role)
    return UserResponse.model_validate(user)


@router.get("/decorators", response_model=List[UserResponse], summary="Public decorator directory")
async def list_decorators(db: AsyncSession = Depends(get_db)) -> List[UserResponse]:
    users = await UserService(db).list_decorators()
    return [UserResponse.model_validate(u) for u in users]
