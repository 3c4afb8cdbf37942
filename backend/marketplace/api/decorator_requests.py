"""
Decorator request API endpoints.

WHAT: Users apply to become decorators; admins review and decide.
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.core.auth import Identity
from marketplace.core.deps import get_identity, require_admin
from marketplace.db.session import get_db
from marketplace.models.decorator_request import DecoratorRequestStatus
from marketplace.models.user import User
from marketplace.schemas.decorator_request import (
    DecoratorRequestCreate,
    DecoratorRequestDecision,
    DecoratorRequestDecisionResponse,
    DecoratorRequestListResponse,
    DecoratorRequestResponse,
    DecoratorRequestSubmitResponse,
)
from marketplace.services.decorator_request_service import DecoratorRequestService


router = APIRouter(prefix="/decorator-requests", tags=["decorator-requests"])


@router.post(
    "",
    response_model=DecoratorRequestSubmitResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Apply to become a decorator",
)
async def submit_request(
    data: DecoratorRequestCreate,
    response: Response,
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
) -> DecoratorRequestSubmitResponse:
    """
    One request per email. A repeat submission returns the existing
    request with HTTP 200 and ``created=False``.
    """
    request, created = await DecoratorRequestService(db).submit_request(identity, data.model_dump())
    if not created:
        response.status_code = status.HTTP_200_OK
        message = f"Request already {request.status.value}"
    else:
        message = "Request submitted"
    return DecoratorRequestSubmitResponse(
        message=message,
        created=created,
        request=DecoratorRequestResponse.model_validate(request),
    )


@router.get("", response_model=DecoratorRequestListResponse, summary="List requests (admin)")
async def list_requests(
    status_filter: Optional[DecoratorRequestStatus] = Query(None, alias="status"),
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> DecoratorRequestListResponse:
    items, total = await DecoratorRequestService(db).list_requests(status=status_filter)
    return DecoratorRequestListResponse(
        items=[DecoratorRequestResponse.model_validate(r) for r in items],
        total=total,
    )


@router.get("/me", response_model=DecoratorRequestResponse, summary="Get own request")
async def get_my_request(
    identity: Identity = Depends(get_identity),
    db: AsyncSession = Depends(get_db),
) -> DecoratorRequestResponse:
    request = await DecoratorRequestService(db).get_my_request(identity)
    return DecoratorRequestResponse.model_validate(request)


@router.patch(
    "/{request_id}",
    response_model=DecoratorRequestDecisionResponse,
    summary="Approve or reject (admin)",
)
async def decide_request(
    request_id: int,
    data: DecoratorRequestDecision,
    current_user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> DecoratorRequestDecisionResponse:
    """
    Approving also promotes the applicant to decorator.

    Raises:
        ValidationError (400): Supplied email doesn't match the request
        PromotionPartiallyAppliedError (500): Approved, but the role update failed;
            re-run the decision to complete it
    """
    request, role_updated = await DecoratorRequestService(db).decide(
        current_user,
        request_id,
        DecoratorRequestStatus(data.status),
        email=data.email,
    )
    return DecoratorRequestDecisionResponse(
        request=DecoratorRequestResponse.model_validate(request),
        role_updated=role_updated,
    )
