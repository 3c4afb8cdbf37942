"""
Tests for custom exception hierarchy.

WHY: Exception testing ensures:
1. Exceptions serialize correctly without leaking sensitive data
2. HTTP status codes map correctly
3. Exception handlers produce the shared error envelope
"""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from pydantic import BaseModel

from fastapi.exceptions import RequestValidationError

from marketplace.core.exceptions import (
    AppException,
    AuthenticationError,
    AuthorizationError,
    BookingNotFoundError,
    InvalidStateTransitionError,
    PaymentNotCompletedError,
    PaymentProviderError,
    PaymentProviderUnavailableError,
    PricingConfigurationError,
    PromotionPartiallyAppliedError,
    ResourceNotFoundError,
    TokenExpiredError,
    TokenInvalidError,
    ValidationError,
)
from marketplace.core.exception_handlers import (
    app_exception_handler,
    generic_exception_handler,
    validation_exception_handler,
)


class TestAppException:
    """Test base AppException class."""

    def test_default_message(self):
        """Verify default message is used when none provided."""
        exc = AppException()
        assert exc.message == "An unexpected error occurred"
        assert exc.status_code == 500

    def test_custom_status_code(self):
        """Verify custom status code overrides class default."""
        exc = AppException(status_code=418)
        assert exc.status_code == 418

    def test_to_dict_filters_sensitive_context(self):
        """Secrets passed as context never reach the response body."""
        exc = AppException(message="boom", booking_id=7, token="abc", credential="xyz")

        result = exc.to_dict()

        assert result["error"] == "AppException"
        assert result["details"] == {"booking_id": 7}

    def test_to_dict_without_context(self):
        """Details are None when there is no context."""
        assert AppException().to_dict()["details"] is None


class TestStatusCodes:
    """Each exception maps to its HTTP status."""

    @pytest.mark.parametrize(
        "exc_class, status_code",
        [
            (AuthenticationError, 401),
            (TokenExpiredError, 401),
            (TokenInvalidError, 401),
            (AuthorizationError, 403),
            (ValidationError, 400),
            (ResourceNotFoundError, 404),
            (BookingNotFoundError, 404),
            (InvalidStateTransitionError, 400),
            (PaymentProviderError, 400),
            (PaymentNotCompletedError, 400),
            (PaymentProviderUnavailableError, 503),
            (PromotionPartiallyAppliedError, 500),
            (PricingConfigurationError, 500),
        ],
    )
    def test_status_code(self, exc_class, status_code):
        assert exc_class().status_code == status_code

    def test_token_errors_are_authentication_errors(self):
        """Token failures are caught by AuthenticationError handlers."""
        assert issubclass(TokenExpiredError, AuthenticationError)
        assert issubclass(TokenInvalidError, AuthenticationError)

    def test_booking_not_found_message_does_not_reveal_existence(self):
        assert BookingNotFoundError().message == "Booking not found or not permitted"


class _Payload(BaseModel):
    amount: int


def _build_app() -> FastAPI:
    app = FastAPI()
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    @app.get("/partial")
    async def partial():
        raise PromotionPartiallyAppliedError(request_status="approved", role_updated=False)

    @app.get("/crash")
    async def crash():
        raise RuntimeError("unexpected")

    @app.post("/validate")
    async def validate(payload: _Payload):
        return payload

    return app


class TestExceptionHandlers:
    """Handlers render the shared error envelope."""

    def test_app_exception_handler_includes_partial_state(self):
        client = TestClient(_build_app())

        response = client.get("/partial")

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "PromotionPartiallyAppliedError"
        assert body["details"] == {"request_status": "approved", "role_updated": False}

    def test_validation_errors_are_400(self):
        client = TestClient(_build_app())

        response = client.post("/validate", json={"amount": "not-a-number"})

        assert response.status_code == 400
        errors = response.json()["details"]["errors"]
        assert errors[0]["field"] == "body.amount"

    def test_unexpected_errors_are_500_without_detail(self):
        client = TestClient(_build_app(), raise_server_exceptions=False)

        response = client.get("/crash")

        assert response.status_code == 500
        assert response.json()["message"] == "An unexpected error occurred"
