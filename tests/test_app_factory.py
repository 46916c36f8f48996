"""Tests for the application factory (composition root)."""

from fastapi.testclient import TestClient

from rental_api.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter
from rental_api.core.app_factory import create_app
from rental_api.core.config import settings

MINUTE_MS = 60_000


def test_injected_empty_limiter_is_used(limiter: InMemoryFixedWindowRateLimiter) -> None:
    assert len(limiter) == 0

    app = create_app(rate_limiter=limiter, configure_logs=False)

    assert app.state.rate_limiter is limiter


def test_builds_limiter_from_settings_when_none_given() -> None:
    app = create_app(configure_logs=False)

    built = app.state.rate_limiter
    assert isinstance(built, InMemoryFixedWindowRateLimiter)
    assert built.stats()["max_entries"] == (settings.app.rate_limit_max_entries or None)


def test_injected_limiter_counts_requests(client: TestClient, limiter: InMemoryFixedWindowRateLimiter) -> None:
    resp = client.post("/api/auth/check-email", json={"email": "x@example.com"})

    assert resp.status_code == 200
    assert len(limiter) == 1


def test_injected_clock_drives_the_window(client: TestClient, clock) -> None:
    for _ in range(5):
        client.post("/api/auth/check-email", json={"email": "x@example.com"})
    assert client.post("/api/auth/check-email", json={"email": "x@example.com"}).status_code == 429

    clock.advance(MINUTE_MS)

    resp = client.post("/api/auth/check-email", json={"email": "x@example.com"})
    assert resp.status_code == 200
    assert resp.headers["X-RateLimit-Remaining"] == "4"
