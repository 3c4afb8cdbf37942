"""
Exception handlers registered on the FastAPI app.

Every error leaves the API in the same envelope:

    {"error": <class name>, "message": str, "status_code": int, "details": dict | null}
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from marketplace.core.exceptions import AppException
from marketplace.middleware.request_context import get_request_context

logger = logging.getLogger(__name__)


def _request_id(request: Request):
    # The generic handler runs outside the middleware, after the ContextVar is reset
    context = get_request_context() or getattr(request.state, "context", None)
    return context.request_id if context else None


def _envelope(error: str, message: str, status_code: int, details=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": error,
            "message": message,
            "status_code": status_code,
            "details": details,
        },
    )


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """
    Render an AppException.

    Server-side failures (5xx) are logged at error level with their
    context; client errors at info.
    """
    if exc.status_code >= 500:
        logger.error(
            f"{exc.__class__.__name__}: {exc.message}",
            extra={"path": request.url.path, "request_id": _request_id(request), "details": exc.context},
        )
    else:
        logger.info(
            f"{exc.__class__.__name__} on {request.method} {request.url.path}",
            extra={"status_code": exc.status_code, "request_id": _request_id(request)},
        )

    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Request body/query validation failures become 400 with one entry per field."""
    errors = [
        {
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]
    return _envelope("ValidationError", "Request validation failed", 400, {"errors": errors})


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Unknown routes, wrong methods and other framework-raised HTTP errors."""
    return _envelope("HTTPException", exc.detail, exc.status_code)


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log the traceback; never echo internals to the client."""
    logger.exception(
        f"Unhandled error on {request.method} {request.url.path}",
        exc_info=exc,
        extra={"request_id": _request_id(request)},
    )
    return _envelope("InternalServerError", "An unexpected error occurred", 500)
