"""
Request context middleware.

WHAT: Assigns every request an ID, exposes it to the rest of the request
lifecycle and logs the request's outcome.

HOW: An incoming ``X-Request-ID`` is reused so IDs correlate across
services; otherwise a UUID4 is generated. The context is stored on
``request.state`` and in a ContextVar for code without request access.
"""

import logging
import time
import uuid
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Callable, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


@dataclass(frozen=True)
class RequestContext:
    """
    Request-scoped context.

    Fields:
    - request_id: Correlation ID, echoed in the response header
    - client_ip: Direct client address or first X-Forwarded-For hop
    - path: Request path
    - method: HTTP method
    """

    request_id: str
    client_ip: str
    path: str
    method: str


# Each async request gets its own isolated value
_request_context: ContextVar[Optional[RequestContext]] = ContextVar(
    "request_context", default=None
)


def get_request_context() -> Optional[RequestContext]:
    """Context of the request being served, or None outside a request."""
    return _request_context.get()


def get_client_ip(request: Request) -> str:
    """
    Extract the client IP address, honouring X-Forwarded-For.

    These headers can be spoofed when not behind a trusted proxy; the
    value is used for logging only.
    """
    x_forwarded_for = request.headers.get("X-Forwarded-For")
    if x_forwarded_for:
        return x_forwarded_for.split(",")[0].strip()

    if request.client and request.client.host:
        return request.client.host

    return "unknown"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Tags each request with a correlation id and logs one line when it completes."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())

        context = RequestContext(
            request_id=request_id,
            client_ip=get_client_ip(request),
            path=request.url.path,
            method=request.method,
        )
        request.state.context = context
        token = _request_context.set(context)

        started = time.perf_counter()
        try:
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id

            logger.info(
                f"{request.method} {request.url.path} {response.status_code}",
                extra={
                    "request_id": request_id,
                    "status_code": response.status_code,
                    "duration_ms": round((time.perf_counter() - started) * 1000, 2),
                    "client_ip": context.client_ip,
                },
            )
            return response

        finally:
            _request_context.reset(token)
