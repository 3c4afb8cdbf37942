"""
Middleware package.

WHY: Middleware provides cross-cutting concerns like request correlation
and request logging that apply to all requests.
"""

from marketplace.middleware.request_context import (
    RequestContextMiddleware,
    get_request_context,
    get_client_ip,
    RequestContext,
)

__all__ = [
    "RequestContextMiddleware",
    "get_request_context",
    "get_client_ip",
    "RequestContext",
]
