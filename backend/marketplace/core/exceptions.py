"""
Marketplace error types.

Each class carries the HTTP status it maps to and a default message, so
services raise domain errors and the handlers in ``exception_handlers``
render them. Keyword context passed to an error ends up under
``details`` in the response, minus anything that looks like a secret.
"""

from typing import Any, Dict, Optional

_SECRET_KEYS = frozenset({"password", "token", "secret", "key", "api_key", "credential"})


class AppException(Exception):
    """Root of every error the API turns into a structured response."""

    status_code: int = 500
    default_message: str = "An unexpected error occurred"

    def __init__(
        self,
        message: Optional[str] = None,
        status_code: Optional[int] = None,
        **context: Any,
    ):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        self.context = context
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Response body for this error; secret-looking context keys are dropped."""
        details = {k: v for k, v in self.context.items() if k.lower() not in _SECRET_KEYS}

        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "status_code": self.status_code,
            "details": details or None,
        }


# --- identity and access (401 / 403) ---


class AuthenticationError(AppException):
    """No bearer credential, or the identity resolver refused it."""

    status_code = 401
    default_message = "Authentication failed"


class TokenExpiredError(AuthenticationError):
    """Token signature is fine but ``exp`` has passed; clients can refresh and retry."""

    default_message = "Token has expired"


class TokenInvalidError(AuthenticationError):
    """Malformed token, bad signature, or no email claim."""

    default_message = "Token is invalid"


class AuthorizationError(AppException):
    """
    Caller is known but their role or ownership doesn't cover the action.

    Kept apart from AuthenticationError so a frontend can tell "log in
    again" (401) from "not allowed" (403).
    """

    status_code = 403
    default_message = "You do not have permission to perform this action"


# --- input ---


class ValidationError(AppException):
    status_code = 400
    default_message = "Validation failed"


# --- missing records (404) ---


class ResourceNotFoundError(AppException):
    status_code = 404
    default_message = "Resource not found"


class ServiceNotFoundError(ResourceNotFoundError):
    default_message = "Service not found"


class BookingNotFoundError(ResourceNotFoundError):
    """
    No booking with this id inside the caller's ownership scope.

    Someone else's booking and a nonexistent one look identical from
    outside.
    """

    default_message = "Booking not found or not permitted"


class DecoratorRequestNotFoundError(ResourceNotFoundError):
    default_message = "Decorator request not found"


class UserNotFoundError(ResourceNotFoundError):
    default_message = "User not found"


# --- workflow state ---


class InvalidStateTransitionError(AppException):
    """A record's current status doesn't allow the requested change (400)."""

    status_code = 400
    default_message = "Invalid state transition"


class PromotionPartiallyAppliedError(AppException):
    """
    Decorator request status was committed but the user's role was not changed.

    ``details`` carries ``request_id``, ``request_status`` and
    ``role_updated``. Repeating the decision finishes the role write.
    """

    status_code = 500
    default_message = "Decorator request approved but the user role was not updated"


class PricingConfigurationError(AppException):
    """A configured coupon rate falls outside (0, 1]."""

    status_code = 500
    default_message = "Invalid pricing configuration"


# --- payments ---


class PaymentProviderError(AppException):
    """Stripe refused the request, typically over bad parameters (400)."""

    status_code = 400
    default_message = "Payment processing error"


class PaymentProviderUnavailableError(AppException):
    """Stripe unreachable, timed out or rate limited (503). Retrying is safe."""

    status_code = 503
    default_message = "Payment provider is temporarily unavailable"


class PaymentNotCompletedError(AppException):
    """
    Checkout session exists but isn't paid yet.

    Nothing local changes when this is raised.
    """

    status_code = 400
    default_message = "Payment has not been completed"


# --- persistence ---


class DatabaseError(AppException):
    status_code = 500
    default_message = "Database error"


class DatabaseConnectionError(DatabaseError):
    """Session requested before ``connect()`` or after ``disconnect()`` (503)."""

    status_code = 503
    default_message = "Database connection failed"
