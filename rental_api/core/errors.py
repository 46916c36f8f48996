"""Application-level exception types.

This module defines domain errors used across services and routes, enabling
consistent error handling, logging, and API responses.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypedDict

from rental_api.adapters.rate_limit.base import RateLimitResult


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients."""

    field: str
    account_type: str


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when input validation or a business rule fails."""


class RateLimitExceeded(Exception):
    """Raised by the HTTP layer when a request is over its quota.

    Quota exhaustion is a normal outcome of the limiter, not a failure; this
    exception only carries the rejected result, and the limiter time of the
    decision, to the 429 handler.
    """

    def __init__(self, result: RateLimitResult, now_ms: int) -> None:
        super().__init__("Rate limit exceeded")
        self.result = result
        self.now_ms = now_ms
