"""
Decorator Promotion Workflow.

WHAT: Users apply to become decorators; admins approve or reject.

WHY: Approval touches two records, the request and the user's role, with
no transaction spanning both in the document model. The request status is
committed first; if the role update then fails the caller gets
PromotionPartiallyAppliedError describing exactly what was applied.
Re-running the decision is idempotent and completes the promotion.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.core.auth import Identity
from marketplace.core.exceptions import (
    DecoratorRequestNotFoundError,
    PromotionPartiallyAppliedError,
    ValidationError,
)
from marketplace.dao.decorator_request import DecoratorRequestDAO
from marketplace.dao.user import UserDAO
from marketplace.models.decorator_request import DecoratorRequest, DecoratorRequestStatus
from marketplace.models.user import User, UserRole

logger = logging.getLogger(__name__)


class DecoratorRequestService:
    """
    Service for the decorator request lifecycle.

    Args:
        session: Async database session
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.request_dao = DecoratorRequestDAO(session)
        self.user_dao = UserDAO(session)

    async def submit_request(
        self,
        identity: Identity,
        data: Dict[str, Any],
    ) -> Tuple[DecoratorRequest, bool]:
        """
        Submit an application for the caller's email.

        A second submission is acknowledged without touching the original.

        Returns:
            Tuple of (request, created)
        """
        existing = await self.request_dao.get_by_email(identity.email)
        if existing is not None:
            logger.info(
                "Duplicate decorator request ignored",
                extra={"email": identity.email, "request_status": existing.status.value},
            )
            return existing, False

        request = await self.request_dao.create(
            email=identity.email,
            status=DecoratorRequestStatus.PENDING,
            **data,
        )
        logger.info("Decorator request submitted", extra={"request_id": request.id, "email": identity.email})
        return request, True

    async def list_requests(
        self,
        status: Optional[DecoratorRequestStatus] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> Tuple[List[DecoratorRequest], int]:
        filters = {"status": status} if status else {}
        items = await self.request_dao.list_requests(status=status, skip=skip, limit=limit)
        total = await self.request_dao.count(**filters)
        return items, total

    async def get_my_request(self, identity: Identity) -> DecoratorRequest:
        """
        Get the caller's own request.

        Raises:
            DecoratorRequestNotFoundError: If the caller never applied
        """
        request = await self.request_dao.get_by_email(identity.email)
        if request is None:
            raise DecoratorRequestNotFoundError(email=identity.email)
        return request

    async def decide(
        self,
        admin: User,
        request_id: int,
        new_status: DecoratorRequestStatus,
        email: Optional[str] = None,
    ) -> Tuple[DecoratorRequest, bool]:
        """
        Approve or reject a request.

        Args:
            admin: Deciding admin
            request_id: Request ID
            new_status: APPROVED or REJECTED
            email: Optional applicant email; must match the request

        Returns:
            Tuple of (request, role_updated)

        Raises:
            DecoratorRequestNotFoundError: If the request doesn't exist
            ValidationError: If ``email`` doesn't match or the status is PENDING
            PromotionPartiallyAppliedError: If approved but the role update failed
        """
        new_status = DecoratorRequestStatus(new_status)
        if new_status == DecoratorRequestStatus.PENDING:
            raise ValidationError(message="Decision must be approved or rejected")

        request = await self.request_dao.get_by_id(request_id)
        if request is None:
            raise DecoratorRequestNotFoundError(request_id=request_id)

        if email is not None and email.strip().lower() != request.email.lower():
            raise ValidationError(
                message="Email does not match the decorator request",
                request_id=request_id,
            )

        if request.status != new_status:
            request = await self.request_dao.update(request_id, status=new_status)
        # The request decision stands even if the role update below fails
        await self.session.commit()

        logger.info(
            f"Decorator request {request_id} {new_status.value}",
            extra={"request_id": request_id, "admin_email": admin.email},
        )

        if new_status != DecoratorRequestStatus.APPROVED:
            return request, False

        await self._promote(request)
        return request, True

    async def _promote(self, request: DecoratorRequest) -> None:
        # Rollback expires loaded instances; read what the error needs up front
        request_id = request.id
        request_status = request.status.value
        email = request.email

        try:
            user = await self.user_dao.set_role(email, UserRole.DECORATOR)
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(
                f"Role update failed for approved request {request_id}",
                extra={"request_id": request_id, "error": str(e)},
            )
            raise PromotionPartiallyAppliedError(
                request_id=request_id,
                request_status=request_status,
                role_updated=False,
            ) from e

        if user is None:
            logger.error(
                f"No user record for approved request {request_id}",
                extra={"request_id": request_id, "email": email},
            )
            raise PromotionPartiallyAppliedError(
                message="Decorator request approved but no user record exists for the email",
                request_id=request_id,
                request_status=request_status,
                role_updated=False,
            )
