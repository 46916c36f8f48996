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
from pydantic import BaseModel

from rental_api.adapters.rate_limit.base import RateLimitResult
from rental_api.core.errors import (
    AppError,
    RateLimitExceeded,
    ValidationAppError,
)
from rental_api.core.exception_handlers import setup_exception_handlers


@pytest.fixture
def app_with_handlers() -> FastAPI:
    """Create FastAPI app with exception handlers registered."""
    app = FastAPI()
    setup_exception_handlers(app)
    return app


@pytest.fixture
def handler_client(app_with_handlers: FastAPI) -> TestClient:
    return TestClient(app_with_handlers)


class TestAppErrorHandler:
    """Test handler for AppError and subclasses."""

    def test_validation_error_returns_400(self, handler_client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-validation")
        async def endpoint():
            raise ValidationAppError(code="account_exists", message="User with this email already exists")

        response = handler_client.get("/test-validation")

        assert response.status_code == 400
        data = response.json()
        assert data["error"]["code"] == "account_exists"
        assert data["error"]["message"] == "User with this email already exists"
        assert "request_id" in data["error"]

    def test_details_included_when_provided(self, handler_client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-details")
        async def endpoint():
            raise ValidationAppError(
                code="account_exists",
                message="User with this email already exists",
                details={"account_type": "RENTER"},
            )

        response = handler_client.get("/test-details")

        assert response.json()["error"]["details"] == {"account_type": "RENTER"}


class TestRateLimitExceededHandler:
    def test_renders_429_contract(self, handler_client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-limited")
        async def endpoint():
            raise RateLimitExceeded(RateLimitResult(allowed=False, limit=5, remaining=0, reset_at=0), now_ms=0)

        response = handler_client.get("/test-limited")

        assert response.status_code == 429
        assert response.json()["error"] == "Too many requests. Please try again later."
        assert response.headers["X-RateLimit-Limit"] == "5"
        assert response.headers["X-RateLimit-Remaining"] == "0"
        assert response.headers["X-RateLimit-Reset"] == "0"
        assert response.headers["Retry-After"] == "0"

    def test_retry_after_uses_the_time_of_the_decision(self, handler_client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-limited-later")
        async def endpoint():
            result = RateLimitResult(allowed=False, limit=1, remaining=0, reset_at=61_000)
            raise RateLimitExceeded(result, now_ms=1_000)

        response = handler_client.get("/test-limited-later")

        assert response.status_code == 429
        assert response.headers["Retry-After"] == "60"
        assert response.headers["X-RateLimit-Reset"] == "61"
        assert response.json()["retry_after"] == 60


class TestRequestValidationHandler:
    def test_invalid_body_returns_400(self, handler_client: TestClient, app_with_handlers: FastAPI):
        class Body(BaseModel):
            count: int

        @app_with_handlers.post("/test-body")
        async def endpoint(body: Body):
            return {"count": body.count}

        response = handler_client.post("/test-body", json={"count": "many"})

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "validation_error"
        assert error["details"] == {"field": "count"}


class TestGeneralExceptionHandler:
    """Test fallback handler for unexpected exceptions."""

    def test_unexpected_exception_handler_registered(self, app_with_handlers: FastAPI):
        assert Exception in app_with_handlers.exception_handlers

    def test_general_exception_handler_never_leaks_details(self):
        from rental_api.core.exception_handlers import general_exception_handler

        request = AsyncMock()
        request.url.path = "/test"
        request.method = "GET"

        exc = RuntimeError("Unexpected error: store connection failed")
        response = asyncio.run(general_exception_handler(request, exc))

        data = json.loads(bytes(response.body).decode())
        assert response.status_code == 500
        assert data["error"]["code"] == "internal_server_error"
        assert "store connection" not in data["error"]["message"]
        assert "RuntimeError" not in bytes(response.body).decode()

    def test_unhandled_error_in_route_returns_500(self, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-boom")
        async def endpoint():
            raise RuntimeError("boom")

        client = TestClient(app_with_handlers, raise_server_exceptions=False)
        response = client.get("/test-boom")

        assert response.status_code == 500
        assert response.json()["error"]["code"] == "internal_server_error"


def test_setup_registers_all_handlers(app_with_handlers: FastAPI):
    assert AppError in app_with_handlers.exception_handlers
    assert RateLimitExceeded in app_with_handlers.exception_handlers
    assert Exception in app_with_handlers.exception_handlers
