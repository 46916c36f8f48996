"""Pytest configuration and fixtures shared across all test modules.

This file is automatically loaded by pytest before running any tests.
It selects the testing environment before any module reads settings.
"""

import os

# CRITICAL: Set this before any imports that might load settings
os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("APP_RATE_LIMIT_ENABLED", "true")
# Route tests identify callers through X-Forwarded-For
os.environ.setdefault("APP_TRUST_PROXY_HEADERS", "true")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from rental_api.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter, epoch_ms
from rental_api.core.app_factory import create_app


class FakeClock:
    """Deterministic epoch-millisecond clock, starting at the real time."""

    def __init__(self, start_ms: int | None = None) -> None:
        self.now_ms = epoch_ms() if start_ms is None else start_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, ms: int) -> None:
        self.now_ms += ms


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def limiter(clock: FakeClock) -> InMemoryFixedWindowRateLimiter:
    return InMemoryFixedWindowRateLimiter(clock=clock)


@pytest.fixture
def app(limiter: InMemoryFixedWindowRateLimiter) -> FastAPI:
    """Fresh application per test so counters never leak between tests."""
    return create_app(rate_limiter=limiter, configure_logs=False)


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)
