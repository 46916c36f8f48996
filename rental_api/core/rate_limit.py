"""Rate limiting helpers for FastAPI routes.

This module wires the rate limiting adapter into the HTTP layer.

Design goals:
- Minimal coupling: routes call check_rate_limit() with a key and a policy.
- Swap-friendly: storage backend can be replaced (e.g., Redis) behind an
  abstract interface.
- One limiter per application: created by the app factory and kept on
  ``app.state``, never as a module-level singleton.

Rate limiting strategy:
- Fixed-window counter per composite key ("<purpose>:<identity>[:<resource>]").
- One static policy per route purpose (see RATE_LIMITS).
- X-RateLimit-Reset is sent as whole UNIX epoch seconds.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from fastapi import Request, Response, status
from fastapi.responses import JSONResponse

from rental_api.adapters.rate_limit.base import (
    AbstractRateLimiter,
    RateLimitPolicy,
    RateLimitResult,
    epoch_ms,
)
from rental_api.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter
from rental_api.core.config import AppSettings, settings
from rental_api.core.errors import RateLimitExceeded
from rental_api.core.logging import hash_identifier

logger = logging.getLogger(__name__)

MINUTE_MS = 60 * 1000
HOUR_MS = 60 * MINUTE_MS
DAY_MS = 24 * HOUR_MS

RATE_LIMIT_MESSAGE = "Too many requests. Please try again later."

_PROXY_IP_HEADERS = ("x-real-ip", "cf-connecting-ip")


@dataclass(frozen=True)
class RateLimitTable:
    """Per-route policies, tuned for fixed-window semantics."""

    check_email: RateLimitPolicy
    signup: RateLimitPolicy
    forgot_password: RateLimitPolicy
    property_view: RateLimitPolicy


RATE_LIMITS = RateLimitTable(
    check_email=RateLimitPolicy(max_requests=5, window_ms=MINUTE_MS),
    signup=RateLimitPolicy(max_requests=5, window_ms=DAY_MS),
    forgot_password=RateLimitPolicy(max_requests=3, window_ms=HOUR_MS),
    # per IP + property
    property_view=RateLimitPolicy(max_requests=1, window_ms=HOUR_MS),
)


def build_rate_limiter(app_settings: AppSettings | None = None) -> AbstractRateLimiter:
    """Create the limiter owned by one application instance.

    Args:
        app_settings: Optional settings; defaults to global settings.app.

    Returns:
        AbstractRateLimiter: Configured in-memory limiter.
    """

    cfg = app_settings or settings.app
    return InMemoryFixedWindowRateLimiter(
        sweep_interval_ms=cfg.rate_limit_sweep_interval_seconds * 1000,
        max_entries=cfg.rate_limit_max_entries or None,
    )


def get_rate_limiter(request: Request) -> AbstractRateLimiter:
    """Return the limiter owned by the application serving this request."""

    return request.app.state.rate_limiter


def get_client_ip(request: Request) -> str:
    """Resolve the client IP used to build rate limit keys.

    Proxy headers (X-Forwarded-For first hop, X-Real-IP, CF-Connecting-IP)
    are honoured only when ``trust_proxy_headers`` is enabled; otherwise the
    socket peer address is used.

    Args:
        request: FastAPI request.

    Returns:
        str: Client IP, or "unknown" when nothing identifies the caller.
    """

    if settings.app.trust_proxy_headers:
        forwarded_for = request.headers.get("x-forwarded-for")
        if forwarded_for:
            first_hop = forwarded_for.split(",")[0].strip()
            if first_hop:
                return first_hop

        for header in _PROXY_IP_HEADERS:
            value = request.headers.get(header)
            if value and value.strip():
                return value.strip()

    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def check_rate_limit(
    request: Request,
    key: str,
    policy: RateLimitPolicy,
) -> RateLimitResult | None:
    """Count the current request against a key and enforce its policy.

    Args:
        request: FastAPI request (used to reach the application's limiter).
        key: Composite rate limit key, e.g. "forgot-password:<email>".
        policy: Policy for the route purpose.

    Returns:
        RateLimitResult for an admitted request, or None when rate limiting
        is disabled by configuration.

    Raises:
        RateLimitExceeded: When the key is over its quota (rendered as 429).
    """

    if not settings.app.rate_limit_enabled:
        return None

    limiter = get_rate_limiter(request)
    result = limiter.check(key, policy)

    log_extra = {
        "purpose": key.split(":", 1)[0],
        "key_hash": hash_identifier(key),
        "limit": result.limit,
        "remaining": result.remaining,
        "window_s": policy.window_seconds,
    }

    if result.allowed:
        logger.debug("rate_limit.allowed", extra=log_extra)
        return result

    now_ms = limiter.now_ms()
    logger.warning(
        "rate_limit.exceeded",
        extra={**log_extra, "retry_after_s": result.retry_after_seconds(now_ms)},
    )
    raise RateLimitExceeded(result, now_ms)


def rate_limit_headers(result: RateLimitResult) -> dict[str, str]:
    """Build the X-RateLimit-* headers describing a check result."""

    return {
        "X-RateLimit-Limit": str(result.limit),
        "X-RateLimit-Remaining": str(result.remaining),
        "X-RateLimit-Reset": str(result.reset_at_seconds),
    }


def rate_limit_response(result: RateLimitResult, now_ms: int | None = None) -> JSONResponse:
    """Create the standard 429 response for a rejected request.

    Args:
        result: The rejected check result.
        now_ms: Current epoch milliseconds on the clock that produced the
            result (defaults to the wall clock).

    Returns:
        JSONResponse with status 429, Retry-After and X-RateLimit-* headers.
    """

    now = epoch_ms() if now_ms is None else now_ms
    retry_after = result.retry_after_seconds(now)

    headers = rate_limit_headers(result)
    headers["X-RateLimit-Remaining"] = "0"
    headers["Retry-After"] = str(retry_after)

    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={"error": RATE_LIMIT_MESSAGE, "retry_after": retry_after},
        headers=headers,
    )


def add_rate_limit_headers(response: Response, result: RateLimitResult | None) -> Response:
    """Attach quota headers to an otherwise successful response.

    Status and body are left untouched. A None result (rate limiting
    disabled) leaves the response as is.
    """

    if result is not None:
        for name, value in rate_limit_headers(result).items():
            response.headers[name] = value
    return response
