"""Fixed-window limiter behaviour with a controllable clock."""

import pytest
from fastapi import HTTPException

from app.core import rate_limit
from app.core.rate_limit import RateLimitConfig, RateLimiter, RateLimitResult, rate_limit_headers

CONFIG = RateLimitConfig(window_seconds=60, max_requests=3)


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def limiter(clock):
    return RateLimiter(clock=clock, rng=lambda: 1.0)


def test_allows_up_to_max_then_denies(limiter):
    results = [limiter.check("api:u1", CONFIG) for _ in range(4)]
    assert [r.allowed for r in results] == [True, True, True, False]
    assert [r.remaining for r in results] == [2, 1, 0, 0]


def test_denied_request_does_not_extend_window(limiter, clock):
    for _ in range(3):
        limiter.check("api:u1", CONFIG)
    clock.now += 30
    denied = limiter.check("api:u1", CONFIG)
    assert not denied.allowed
    assert denied.reset_in == pytest.approx(30)


def test_window_resets_after_expiry(limiter, clock):
    for _ in range(3):
        limiter.check("api:u1", CONFIG)
    clock.now += 60.5
    result = limiter.check("api:u1", CONFIG)
    assert result.allowed
    assert result.remaining == 2
    assert result.reset_in == 60


def test_identifiers_are_independent(limiter):
    for _ in range(3):
        limiter.check("api:u1", CONFIG)
    assert limiter.check("api:u2", CONFIG).allowed
    assert not limiter.check("api:u1", CONFIG).allowed


def test_cleanup_removes_only_expired_entries(limiter, clock):
    limiter.check("old", CONFIG)
    clock.now += 45
    limiter.check("new", CONFIG)
    clock.now += 20
    assert limiter.cleanup() == 1
    assert len(limiter) == 1


def test_probabilistic_sweep_runs_on_check(clock):
    limiter = RateLimiter(clock=clock, rng=lambda: 0.0)
    limiter.check("old", CONFIG)
    clock.now += 120
    limiter.check("fresh", CONFIG)
    assert len(limiter) == 1


def test_reset_clears_everything(limiter):
    limiter.check("a", CONFIG)
    limiter.check("b", CONFIG)
    limiter.reset()
    assert len(limiter) == 0


def test_headers_round_reset_up():
    headers = rate_limit_headers(RateLimitResult(allowed=False, remaining=0, reset_in=12.2))
    assert headers == {"X-RateLimit-Remaining": "0", "X-RateLimit-Reset": "13"}


def test_enforce_raises_429_with_headers(monkeypatch, clock):
    monkeypatch.setattr(rate_limit, "rate_limiter", RateLimiter(clock=clock, rng=lambda: 1.0))
    config = RateLimitConfig(window_seconds=10, max_requests=1)
    assert rate_limit.enforce_rate_limit("k", config).allowed
    with pytest.raises(HTTPException) as exc_info:
        rate_limit.enforce_rate_limit("k", config)
    assert exc_info.value.status_code == 429
    assert exc_info.value.detail == "Too many requests. Please try again later."
    assert exc_info.value.headers["X-RateLimit-Remaining"] == "0"
    assert exc_info.value.headers["X-RateLimit-Reset"] == "10"
