"""
ASGI entry point for the marketplace API.

``create_app`` wires logging, the database lifecycle, error handlers,
middleware and routers; ``app`` is the instance uvicorn serves.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from marketplace.core.config import settings
from marketplace.core.exceptions import AppException
from marketplace.core.exception_handlers import (
    app_exception_handler,
    validation_exception_handler,
    http_exception_handler,
    generic_exception_handler,
)
from marketplace.core.logging_config import configure_logging
from marketplace.db.session import Database
from marketplace.middleware import RequestContextMiddleware
from marketplace.api import auth, bookings, decorator_requests, payments, services, stats

logger = logging.getLogger(__name__)


def create_app(database: Optional[Database] = None) -> FastAPI:
    """
    Build the application.

    Args:
        database: Store handle to own; one is built from settings if omitted
    """
    configure_logging(settings.LOG_LEVEL)

    database = database or Database(settings.async_database_url, echo=settings.DEBUG)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await database.connect()
        logger.info(f"{settings.PROJECT_NAME} {settings.VERSION} started")
        try:
            yield
        finally:
            await database.disconnect()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="Decoration services marketplace API",
        version=settings.VERSION,
        docs_url=f"{settings.API_PREFIX}/docs",
        redoc_url=f"{settings.API_PREFIX}/redoc",
        openapi_url=f"{settings.API_PREFIX}/openapi.json",
        lifespan=lifespan,
    )
    app.state.database = database

    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    app.add_middleware(RequestContextMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health", tags=["health"])
    async def health_check() -> dict:
        """Liveness plus the store handle state; does not query the database."""
        return {
            "status": "healthy",
            "version": settings.VERSION,
            "database": "connected" if app.state.database.is_connected else "disconnected",
        }

    @app.get("/", tags=["root"])
    async def root() -> dict:
        """Name, version and docs location."""
        return {
            "name": settings.PROJECT_NAME,
            "version": settings.VERSION,
            "docs": f"{settings.API_PREFIX}/docs",
        }

    app.include_router(services.router, prefix=settings.API_PREFIX)
    app.include_router(auth.router, prefix=settings.API_PREFIX)
    app.include_router(stats.router, prefix=settings.API_PREFIX)
    app.include_router(decorator_requests.router, prefix=settings.API_PREFIX)
    app.include_router(payments.router, prefix=settings.API_PREFIX)
    app.include_router(bookings.router, prefix=settings.API_PREFIX)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "marketplace.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level="info" if settings.DEBUG else "warning",
    )
