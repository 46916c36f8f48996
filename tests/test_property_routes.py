"""Tests for property view counting."""

from fastapi.testclient import TestClient

HOUR_MS = 3_600_000


def _view(client: TestClient, property_id: str, ip: str = "1.2.3.4"):
    return client.post(f"/api/properties/{property_id}/view", headers={"X-Forwarded-For": ip})


def test_first_view_is_counted(client: TestClient, app) -> None:
    resp = _view(client, "abc")

    assert resp.status_code == 200
    assert resp.json() == {"message": "View counted", "views": 1}
    assert resp.headers["X-RateLimit-Limit"] == "1"
    assert resp.headers["X-RateLimit-Remaining"] == "0"
    assert app.state.property_views.get("abc") == 1


def test_repeat_view_within_the_hour_is_rejected_and_not_counted(client: TestClient, app, clock) -> None:
    _view(client, "abc")
    clock.advance(10)

    resp = _view(client, "abc")

    assert resp.status_code == 429
    assert resp.headers["X-RateLimit-Remaining"] == "0"
    assert "Retry-After" in resp.headers
    assert app.state.property_views.get("abc") == 1


def test_retry_after_follows_the_limiter_clock(client: TestClient, clock) -> None:
    _view(client, "abc")
    clock.advance(HOUR_MS // 2)

    resp = _view(client, "abc")

    assert resp.status_code == 429
    assert resp.headers["Retry-After"] == "1800"
    assert resp.json()["retry_after"] == 1800


def test_view_counts_again_after_the_window(client: TestClient, app, clock) -> None:
    _view(client, "abc")
    _view(client, "abc")

    clock.advance(HOUR_MS + 1)
    resp = _view(client, "abc")

    assert resp.status_code == 200
    assert resp.json()["views"] == 2


def test_limit_is_per_ip_and_property(client: TestClient, app) -> None:
    assert _view(client, "abc", ip="1.2.3.4").status_code == 200
    assert _view(client, "xyz", ip="1.2.3.4").status_code == 200
    assert _view(client, "abc", ip="5.6.7.8").status_code == 200

    assert app.state.property_views.get("abc") == 2
    assert app.state.property_views.get("xyz") == 1


def test_apps_do_not_share_counters(client: TestClient) -> None:
    from rental_api.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter
    from rental_api.core.app_factory import create_app

    other = TestClient(create_app(rate_limiter=InMemoryFixedWindowRateLimiter(), configure_logs=False))

    assert _view(client, "abc").status_code == 200
    assert _view(other, "abc").status_code == 200
