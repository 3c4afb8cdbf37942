"""
Shared fixtures: a fresh in-memory database per test, a session bound to
it, a fake checkout gateway and an HTTP client wired to both.
"""

import os

# Settings are read at import time
os.environ.setdefault("JWT_SECRET", "test-secret-key-for-identity-tokens")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("STRIPE_SECRET_KEY", "sk_test_dummy")

import pytest
import pytest_asyncio
from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool
from httpx import AsyncClient, ASGITransport

from marketplace.main import app
from marketplace.models.base import Base
from marketplace.db.session import get_db
from marketplace.services.stripe_service import get_stripe_service
from tests.fakes import FakeCheckoutGateway


SQLITE_MEMORY_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture(scope="function")
async def db_engine():
    """Schema created before and dropped after every test; StaticPool shares the one in-memory DB."""
    engine = create_async_engine(
        SQLITE_MEMORY_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    session_factory = async_sessionmaker(db_engine, expire_on_commit=False)

    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def gateway() -> FakeCheckoutGateway:
    return FakeCheckoutGateway()


@pytest_asyncio.fixture
async def client(
    db_session: AsyncSession,
    gateway: FakeCheckoutGateway,
) -> AsyncGenerator[AsyncClient, None]:
    """
    ASGI client for the app with the test session and fake gateway injected.

    Routes share ``db_session`` with the test body, so rows created through
    factories are visible to requests and vice versa.
    """

    async def _test_db():
        yield db_session

    app.dependency_overrides[get_db] = _test_db
    app.dependency_overrides[get_stripe_service] = lambda: gateway

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http:
        yield http

    app.dependency_overrides.clear()
