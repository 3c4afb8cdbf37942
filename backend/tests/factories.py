"""
Test factories for creating test data.

WHY: Factories provide a consistent, reusable way to create test objects,
reducing duplication and making tests more maintainable.
"""

from typing import Any, Dict, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.core.auth import create_identity_token
from marketplace.models.booking import Booking, BookingStatus
from marketplace.models.decorator_request import DecoratorRequest, DecoratorRequestStatus
from marketplace.models.service import Service
from marketplace.models.user import User, UserRole


def auth_headers(email: str) -> Dict[str, str]:
    """Bearer header carrying an identity token for ``email``."""
    return {"Authorization": f"Bearer {create_identity_token(email)}"}


class UserFactory:
    """Factory for creating User test instances."""

    @staticmethod
    async def create(
        session: AsyncSession,
        email: str = "client@example.com",
        name: Optional[str] = "Test Client",
        role: UserRole = UserRole.USER,
    ) -> User:
        user = User(email=email.lower(), name=name, role=role)
        session.add(user)
        await session.commit()
        await session.refresh(user)
        return user

    @staticmethod
    async def create_admin(session: AsyncSession, email: str = "admin@example.com") -> User:
        return await UserFactory.create(session, email=email, name="Test Admin", role=UserRole.ADMIN)

    @staticmethod
    async def create_decorator(session: AsyncSession, email: str = "decorator@example.com") -> User:
        return await UserFactory.create(session, email=email, name="Test Decorator", role=UserRole.DECORATOR)


class ServiceFactory:
    """Factory for creating catalog Service test instances."""

    @staticmethod
    async def create(
        session: AsyncSession,
        name: str = "Wedding Stage Decoration",
        category: str = "wedding",
        location: Optional[str] = "Dhaka",
        cost: int = 100,
        description: Optional[str] = None,
        attributes: Optional[Dict[str, Any]] = None,
    ) -> Service:
        service = Service(
            name=name,
            category=category,
            location=location,
            cost=cost,
            description=description or f"Description for {name}",
            attributes=attributes or {},
            created_by="admin@example.com",
        )
        session.add(service)
        await session.commit()
        await session.refresh(service)
        return service


class BookingFactory:
    """
    Factory for creating Booking test instances.

    Bypasses BookingService so tests can start from any status.
    """

    @staticmethod
    async def create(
        session: AsyncSession,
        user_email: str = "client@example.com",
        decorator_email: Optional[str] = "decorator@example.com",
        status: BookingStatus = BookingStatus.PENDING,
        service: Optional[Service] = None,
        price: int = 100,
        addons: Optional[List[Dict[str, Any]]] = None,
    ) -> Booking:
        booking = Booking(
            service_id=service.id if service else None,
            service_name=service.name if service else "Birthday Balloon Setup",
            price=service.cost if service else price,
            user_email=user_email.lower(),
            user_name="Test Client",
            decorator_email=decorator_email.lower() if decorator_email else None,
            status=status,
            addons=addons or [],
        )
        session.add(booking)
        await session.commit()
        await session.refresh(booking)
        return booking


class DecoratorRequestFactory:
    """Factory for creating DecoratorRequest test instances."""

    @staticmethod
    async def create(
        session: AsyncSession,
        email: str = "client@example.com",
        status: DecoratorRequestStatus = DecoratorRequestStatus.PENDING,
        specialty: Optional[str] = "Weddings",
    ) -> DecoratorRequest:
        request = DecoratorRequest(
            email=email.lower(),
            name="Applicant",
            specialty=specialty,
            experience_years=3,
            status=status,
        )
        session.add(request)
        await session.commit()
        await session.refresh(request)
        return request
