"""Concurrency tests: checks for one key must never over-admit."""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from rental_api.adapters.rate_limit.base import RateLimitPolicy
from rental_api.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter


@pytest.mark.parametrize("workers", [2, 8, 32])
def test_simultaneous_checks_admit_exactly_the_limit(workers: int) -> None:
    limiter = InMemoryFixedWindowRateLimiter()
    policy = RateLimitPolicy(max_requests=workers - 1, window_ms=60_000)
    barrier = threading.Barrier(workers)

    def hit() -> bool:
        barrier.wait()
        return limiter.check("property-view:1.2.3.4:abc", policy).allowed

    with ThreadPoolExecutor(max_workers=workers) as pool:
        outcomes = list(pool.map(lambda _: hit(), range(workers)))

    assert outcomes.count(True) == workers - 1
    assert outcomes.count(False) == 1


def test_many_threads_many_rounds_never_exceed_limit() -> None:
    limiter = InMemoryFixedWindowRateLimiter()
    policy = RateLimitPolicy(max_requests=25, window_ms=60_000)
    admitted: list[int] = []
    lock = threading.Lock()

    def worker() -> None:
        count = sum(1 for _ in range(20) if limiter.check("check-email:10.0.0.9", policy).allowed)
        with lock:
            admitted.append(count)

    threads = [threading.Thread(target=worker) for _ in range(10)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert sum(admitted) == 25
