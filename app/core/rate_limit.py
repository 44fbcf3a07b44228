"""In-memory fixed-window rate limiter.

Counters live in a per-process dict keyed by identifier (e.g. ``api:<user_id>``
or ``auth:login:<ip>``). Every entry holds a request count and the monotonic
time at which its window resets. Expired entries are swept opportunistically
on a small fraction of calls rather than by a background task.
"""

from __future__ import annotations

import math
import random
import time
from collections.abc import Callable
from dataclasses import dataclass
from threading import Lock

from fastapi import HTTPException

from app.core.constants import TOO_MANY_REQUESTS

CLEANUP_PROBABILITY = 0.01


@dataclass(frozen=True)
class RateLimitConfig:
    window_seconds: float
    max_requests: int


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    remaining: int
    reset_in: float  # seconds until the window resets


# Presets shared by route handlers.
RATE_LIMITS: dict[str, RateLimitConfig] = {
    "auth": RateLimitConfig(window_seconds=15 * 60, max_requests=10),
    "api": RateLimitConfig(window_seconds=60, max_requests=60),
    "workout_create": RateLimitConfig(window_seconds=60, max_requests=10),
    "payment": RateLimitConfig(window_seconds=60, max_requests=5),
    "signup": RateLimitConfig(window_seconds=60 * 60, max_requests=5),
    "password_reset": RateLimitConfig(window_seconds=60 * 60, max_requests=3),
}


class RateLimiter:
    """Fixed-window counter map guarded by a lock.

    ``clock`` and ``rng`` are injectable so tests can control time and the
    cleanup sweep.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        rng: Callable[[], float] = random.random,
        cleanup_probability: float = CLEANUP_PROBABILITY,
    ):
        self._store: dict[str, tuple[int, float]] = {}
        self._lock = Lock()
        self._clock = clock
        self._rng = rng
        self._cleanup_probability = cleanup_probability

    def __len__(self) -> int:
        return len(self._store)

    def check(self, identifier: str, config: RateLimitConfig) -> RateLimitResult:
        """Count one request for identifier and report whether it is allowed."""
        with self._lock:
            now = self._clock()
            if self._rng() < self._cleanup_probability:
                self._sweep(now)

            entry = self._store.get(identifier)
            if entry is None or now > entry[1]:
                self._store[identifier] = (1, now + config.window_seconds)
                return RateLimitResult(
                    allowed=True,
                    remaining=config.max_requests - 1,
                    reset_in=config.window_seconds,
                )

            count, reset_time = entry
            if count >= config.max_requests:
                return RateLimitResult(allowed=False, remaining=0, reset_in=reset_time - now)

            count += 1
            self._store[identifier] = (count, reset_time)
            return RateLimitResult(
                allowed=True,
                remaining=config.max_requests - count,
                reset_in=reset_time - now,
            )

    def cleanup(self) -> int:
        """Drop every expired entry. Returns the number removed."""
        with self._lock:
            return self._sweep(self._clock())

    def reset(self) -> None:
        with self._lock:
            self._store.clear()

    def _sweep(self, now: float) -> int:
        expired = [key for key, (_, reset_time) in self._store.items() if now > reset_time]
        for key in expired:
            del self._store[key]
        return len(expired)


rate_limiter = RateLimiter()


def rate_limit_headers(result: RateLimitResult) -> dict[str, str]:
    """Headers advertising the remaining budget and seconds until reset."""
    return {
        "X-RateLimit-Remaining": str(result.remaining),
        "X-RateLimit-Reset": str(math.ceil(result.reset_in)),
    }


def enforce_rate_limit(
    identifier: str,
    config: RateLimitConfig,
    detail: str = TOO_MANY_REQUESTS,
) -> RateLimitResult:
    """Check identifier against config; raise 429 with rate limit headers when exceeded."""
    result = rate_limiter.check(identifier, config)
    if not result.allowed:
        raise HTTPException(status_code=429, detail=detail, headers=rate_limit_headers(result))
    return result

