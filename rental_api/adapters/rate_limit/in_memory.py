"""In-memory fixed-window rate limiter.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Thread-safe: a single lock guards the whole store, so the read/update of an
  entry is atomic with respect to concurrent requests.
- Bounded: expired entries are swept periodically, and an optional capacity
  evicts the least recently used keys.
"""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable

from rental_api.adapters.rate_limit.base import (
    AbstractRateLimiter,
    RateLimitPolicy,
    RateLimitResult,
    epoch_ms,
)

logger = logging.getLogger(__name__)

DEFAULT_SWEEP_INTERVAL_MS = 5 * 60 * 1000


@dataclass
class RateLimitEntry:
    """Counter state for one key within its current window."""

    count: int
    reset_at: int


class InMemoryFixedWindowRateLimiter(AbstractRateLimiter):
    """Rate limiter using a fixed time window per key.

    The first request for a key opens a window of ``policy.window_ms``; the
    window closes at ``reset_at`` and the next request after that opens a
    fresh one. Up to ``2 * max_requests`` requests can therefore pass around
    a window boundary.

    Important:
        This limiter is per-process only. If the API runs with multiple workers
        (e.g., multiple Uvicorn/Gunicorn workers), each worker will enforce its
        own independent limits.
    """

    def __init__(
        self,
        *,
        sweep_interval_ms: int | None = DEFAULT_SWEEP_INTERVAL_MS,
        max_entries: int | None = None,
        clock: Callable[[], int] = epoch_ms,
    ) -> None:
        """Initialize the in-memory rate limiter.

        Args:
            sweep_interval_ms: Minimum delay between automatic sweeps of
                expired entries. None or 0 disables automatic sweeping.
            max_entries: Maximum number of tracked keys (None for unlimited).
            clock: Time source returning UNIX time in milliseconds.

        Raises:
            ValueError: If sweep_interval_ms or max_entries are invalid.
        """
        if sweep_interval_ms is not None and sweep_interval_ms < 0:
            raise ValueError("sweep_interval_ms must be >= 0")
        if max_entries is not None and max_entries < 1:
            raise ValueError("max_entries must be >= 1")

        self._sweep_interval_ms = sweep_interval_ms or None
        self._max_entries = max_entries
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: OrderedDict[str, RateLimitEntry] = OrderedDict()
        self._last_sweep = clock()
        self._sweeps = 0
        self._expired_removed = 0
        self._evictions = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __repr__(self) -> str:  # pragma: no cover - representation only
        return (
            f"InMemoryFixedWindowRateLimiter(max_entries={self._max_entries}, "
            f"sweep_interval_ms={self._sweep_interval_ms}, size={len(self._entries)})"
        )

    def now_ms(self) -> int:
        return self._clock()

    def check(self, key: str, policy: RateLimitPolicy) -> RateLimitResult:
        """Count one request for the key and decide whether it is admitted.

        This method both checks the current window usage and mutates the state
        if the request is allowed. A rejected request does not count.

        Args:
            key: Unique identifier for rate limiting (e.g., "check-email:<ip>").
            policy: Limit and window for this key.

        Returns:
            RateLimitResult with allowance decision and metadata.

        Raises:
            ValueError: If key is empty.
        """
        if not key:
            raise ValueError("key must be a non-empty string")

        now = self._clock()

        with self._lock:
            self._maybe_sweep_locked(now)

            entry = self._entries.get(key)
            if entry is None or now >= entry.reset_at:
                if entry is None:
                    self._make_room_locked(now)
                entry = RateLimitEntry(count=1, reset_at=now + policy.window_ms)
                self._entries[key] = entry
                self._entries.move_to_end(key)
                return RateLimitResult(
                    allowed=True,
                    limit=policy.max_requests,
                    remaining=policy.max_requests - 1,
                    reset_at=entry.reset_at,
                )

            self._entries.move_to_end(key)

            if entry.count < policy.max_requests:
                entry.count += 1
                return RateLimitResult(
                    allowed=True,
                    limit=policy.max_requests,
                    remaining=policy.max_requests - entry.count,
                    reset_at=entry.reset_at,
                )

            return RateLimitResult(
                allowed=False,
                limit=policy.max_requests,
                remaining=0,
                reset_at=entry.reset_at,
            )

    def sweep(self) -> int:
        """Remove every entry whose window has expired.

        Returns:
            Number of removed entries.
        """

        now = self._clock()
        with self._lock:
            return self._sweep_locked(now)

    def reset(self, key: str | None = None) -> None:
        """Forget one key's counter, or every counter when key is None."""

        with self._lock:
            if key is None:
                self._entries.clear()
            else:
                self._entries.pop(key, None)

    def stats(self) -> dict[str, int | None]:
        """Return lightweight store metrics without exposing keys."""

        with self._lock:
            return {
                "entries": len(self._entries),
                "max_entries": self._max_entries,
                "sweeps": self._sweeps,
                "expired_removed": self._expired_removed,
                "evictions": self._evictions,
            }

    def _maybe_sweep_locked(self, now: int) -> None:
        if self._sweep_interval_ms is None:
            return
        if now - self._last_sweep < self._sweep_interval_ms:
            return
        self._sweep_locked(now)

    def _sweep_locked(self, now: int) -> int:
        self._last_sweep = now
        self._sweeps += 1
        expired_keys = [k for k, entry in self._entries.items() if now >= entry.reset_at]
        for key in expired_keys:
            del self._entries[key]
        self._expired_removed += len(expired_keys)

        logger.debug(
            "rate_limit.sweep",
            extra={
                "removed": len(expired_keys),
                "entries": len(self._entries),
            },
        )
        return len(expired_keys)

    def _make_room_locked(self, now: int) -> None:
        if self._max_entries is None or len(self._entries) < self._max_entries:
            return

        self._sweep_locked(now)

        evicted = 0
        while len(self._entries) >= self._max_entries:
            # popitem(last=False) removes the least recently used entry
            self._entries.popitem(last=False)
            evicted += 1

        if evicted:
            self._evictions += evicted
            logger.warning(
                "rate_limit.evicted",
                extra={
                    "evicted": evicted,
                    "max_entries": self._max_entries,
                },
            )
