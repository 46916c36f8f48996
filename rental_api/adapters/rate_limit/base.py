"""Rate limiter interfaces.

The API should depend on this abstraction (not the concrete implementation)
so we can swap storage backends later (e.g., Redis) with minimal changes.

All timestamps are UNIX epoch milliseconds.
"""

from __future__ import annotations

import math
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass


def epoch_ms() -> int:
    """Current UNIX time in whole milliseconds."""
    return int(time.time() * 1000)


@dataclass(frozen=True)
class RateLimitPolicy:
    """Limit applied to one logical route purpose.

    Attributes:
        max_requests: Maximum admitted requests per window.
        window_ms: Size of the fixed window in milliseconds.

    Raises:
        ValueError: If either field is not a positive integer.
    """

    max_requests: int
    window_ms: int

    def __post_init__(self) -> None:
        if self.max_requests < 1:
            raise ValueError("max_requests must be >= 1")
        if self.window_ms < 1:
            raise ValueError("window_ms must be >= 1")

    @property
    def window_seconds(self) -> float:
        return self.window_ms / 1000


@dataclass(frozen=True)
class RateLimitResult:
    """Result of a rate limit check.

    Attributes:
        allowed: Whether the request is allowed to proceed.
        limit: Max requests per window (echo of the policy).
        remaining: Remaining requests in the current window (0 when blocked).
        reset_at: Epoch milliseconds when the current window resets.
    """

    allowed: bool
    limit: int
    remaining: int
    reset_at: int

    @property
    def reset_at_seconds(self) -> int:
        """Reset time as whole epoch seconds, as sent in X-RateLimit-Reset."""
        return self.reset_at // 1000

    def retry_after_seconds(self, now_ms: int) -> int:
        """Seconds a client should wait before the window resets."""
        return max(0, math.ceil((self.reset_at - now_ms) / 1000))


class AbstractRateLimiter(ABC):
    """Interface for rate limiters."""

    def now_ms(self) -> int:
        """Current time as seen by this limiter, in epoch milliseconds."""
        return epoch_ms()

    @abstractmethod
    def check(self, key: str, policy: RateLimitPolicy) -> RateLimitResult:
        """Count one request for a key and decide whether it is admitted.

        Args:
            key: Opaque subject identifier (e.g., "check-email:1.2.3.4").
            policy: Limit and window to enforce for this key.

        Returns:
            RateLimitResult describing whether it was allowed.
        """
        raise NotImplementedError
