"""Tests for global exception handlers.

Validates that all exception types are handled consistently with
proper HTTP status codes, error format, and no information leakage.
"""

import asyncio
import json
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from slidelimit.core.config import settings
from slidelimit.core.errors import AppError, RateLimitAppError, ValidationAppError
from slidelimit.core.exception_handlers import general_exception_handler, setup_exception_handlers


@pytest.fixture
def app_with_handlers() -> FastAPI:
    """Create FastAPI app with exception handlers registered."""
    app = FastAPI()
    setup_exception_handlers(app)
    return app


@pytest.fixture
def client(app_with_handlers: FastAPI) -> TestClient:
    return TestClient(app_with_handlers)


class TestAppErrorHandler:
    def test_rate_limit_error_returns_429_with_headers(
        self, client: TestClient, app_with_handlers: FastAPI, monkeypatch: pytest.MonkeyPatch
    ):
        monkeypatch.setattr(settings.rate_limit, "include_headers", True)

        @app_with_handlers.get("/test-rate-limit")
        async def test_endpoint():
            raise RateLimitAppError(
                code="rate_limit_exceeded",
                message="Rate limit exceeded for ip:1.2.3.4: 12 actions in the window (limit: 10)",
                details={"limit": 10, "limit_type": "window", "remaining": 0, "retry_after": 10},
            )

        response = client.get("/test-rate-limit")

        assert response.status_code == 429
        assert response.headers["Retry-After"] == "10"
        assert response.headers["X-RateLimit-Limit"] == "10"
        assert response.headers["X-RateLimit-Remaining"] == "0"
        assert response.headers["X-RateLimit-Scope"] == "window"
        data = response.json()
        assert data["error"]["code"] == "rate_limit_exceeded"
        assert data["error"]["details"]["retry_after"] == 10
        assert "request_id" in data["error"]

    def test_rate_limit_error_without_details_has_no_headers(
        self, client: TestClient, app_with_handlers: FastAPI
    ):
        @app_with_handlers.get("/test-rate-limit-bare")
        async def test_endpoint():
            raise RateLimitAppError(code="rate_limit_exceeded", message="Slow down")

        response = client.get("/test-rate-limit-bare")

        assert response.status_code == 429
        assert "Retry-After" not in response.headers
        assert "details" not in response.json()["error"]

    def test_generic_app_error_returns_400(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-app-error")
        async def test_endpoint():
            raise AppError(code="bad_request", message="Something was off")

        response = client.get("/test-app-error")

        assert response.status_code == 400
        data = response.json()
        assert data["error"]["code"] == "bad_request"
        assert data["error"]["message"] == "Something was off"
        assert "request_id" in data["error"]
        assert "Retry-After" not in response.headers

    def test_validation_error_returns_400(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-validation-error")
        async def test_endpoint():
            raise ValidationAppError(
                code="invalid_api_key",
                message="X-API-Key header must not be empty.",
                details={"hint": "Omit the header to be limited by client IP."},
            )

        response = client.get("/test-validation-error")

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "invalid_api_key"
        assert error["details"]["hint"].startswith("Omit the header")

    def test_app_error_str_is_message(self):
        assert str(RateLimitAppError(code="c", message="readable")) == "readable"


class TestGeneralExceptionHandler:
    def test_unexpected_exception_handler_registered(self, app_with_handlers: FastAPI):
        assert Exception in app_with_handlers.exception_handlers

    def test_unexpected_exception_returns_500(self, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-crash")
        async def test_endpoint():
            raise ConnectionError("counter store at 10.0.0.5:11211 refused connection")

        client = TestClient(app_with_handlers, raise_server_exceptions=False)
        response = client.get("/test-crash")

        assert response.status_code == 500
        assert response.json()["error"]["code"] == "internal_server_error"
        assert "10.0.0.5" not in response.text

    def test_general_exception_handler_never_leaks_stack_trace(self):
        request = AsyncMock()
        request.url.path = "/test"
        request.method = "GET"

        exc = ValueError("Test error with details")
        response = asyncio.run(general_exception_handler(request, exc))

        response_body = response.body if isinstance(response.body, bytes) else bytes(response.body)
        response_text = response_body.decode()
        data = json.loads(response_text)
        assert response.status_code == 500
        assert "Traceback" not in response_text
        assert "ValueError" not in response_text
        assert "request_id" in data["error"]


def test_multiple_handler_setups_does_not_fail():
    app = FastAPI()

    setup_exception_handlers(app)
    setup_exception_handlers(app)

    assert AppError in app.exception_handlers
