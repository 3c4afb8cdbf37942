"""
Database session management.

WHY: The store handle is an explicit object with a connect/disconnect
lifecycle. The app factory owns one instance; each request borrows a
session from it through the ``get_db`` dependency, and DAOs receive that
session by constructor injection.
"""

import logging
from typing import AsyncGenerator, Optional

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from marketplace.core.exceptions import DatabaseConnectionError

logger = logging.getLogger(__name__)


class Database:
    """
    Owns the async engine and session factory.

    Usage:
        database = Database(settings.async_database_url)
        await database.connect()
        async with database.session() as session:
            ...
        await database.disconnect()
    """

    def __init__(self, url: str, echo: bool = False, **engine_options):
        self.url = url
        self.echo = echo
        self.engine_options = engine_options
        self._engine: Optional[AsyncEngine] = None
        self._sessionmaker: Optional[async_sessionmaker[AsyncSession]] = None

    @property
    def is_connected(self) -> bool:
        return self._engine is not None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise DatabaseConnectionError(message="Database is not connected")
        return self._engine

    async def connect(self) -> None:
        """
        Create the engine and verify connectivity with a ping.

        Raises:
            DatabaseConnectionError: If the ping fails
        """
        if self._engine is not None:
            return

        # WHY: pool_pre_ping recycles stale connections in long-running processes
        engine = create_async_engine(
            self.url,
            echo=self.echo,
            pool_pre_ping=True,
            **self.engine_options,
        )
        try:
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except Exception as e:
            await engine.dispose()
            raise DatabaseConnectionError(message="Database ping failed", error=str(e)) from e

        self._engine = engine
        # expire_on_commit=False prevents lazy-loading issues after commit
        self._sessionmaker = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
        logger.info("Database connected")

    async def disconnect(self) -> None:
        """Dispose the engine. Safe to call when not connected."""
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._sessionmaker = None
        logger.info("Database disconnected")

    def session(self) -> AsyncSession:
        """
        Open a new session.

        Raises:
            DatabaseConnectionError: If connect() has not been called
        """
        if self._sessionmaker is None:
            raise DatabaseConnectionError(message="Database is not connected")
        return self._sessionmaker()


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency to get a database session for the request.

    WHY: Each request gets its own session. The transaction commits when the
    route returns and rolls back if it raises.

    Yields:
        AsyncSession: Database session for the request
    """
    database: Database = request.app.state.database
    async with database.session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
