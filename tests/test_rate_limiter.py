"""Unit tests for the per-client rate limiter."""

import threading
from unittest.mock import Mock

import pytest

from app.adapters.rate_limit.in_memory import InMemoryRateLimitStore
from app.services.rate_limiter import RateLimiter


def _limiter(limit: int = 2, window_seconds: float = 3600, now: float = 1000.0):
    clock = Mock(return_value=now)
    store = InMemoryRateLimitStore()
    return RateLimiter(store, limit=limit, window_seconds=window_seconds, clock=clock), clock, store


def test_allows_up_to_limit_in_same_window() -> None:
    limiter, _, _ = _limiter(limit=3, window_seconds=60)

    assert limiter.admit("k").allowed is True
    assert limiter.admit("k").allowed is True
    result = limiter.admit("k")
    assert result.allowed is True
    assert result.remaining == 0


def test_blocks_when_over_limit() -> None:
    limiter, _, _ = _limiter(limit=2, window_seconds=60)

    assert limiter.admit("k").allowed is True
    assert limiter.admit("k").allowed is True

    blocked = limiter.admit("k")
    assert blocked.allowed is False
    assert blocked.remaining == 0
    assert blocked.retry_after_seconds == 60


def test_rejected_request_does_not_extend_window() -> None:
    limiter, clock, store = _limiter(limit=1, window_seconds=60)

    limiter.admit("k")
    clock.return_value = 1030.0
    blocked = limiter.admit("k")

    assert blocked.allowed is False
    assert blocked.reset_at == 1060.0
    assert blocked.retry_after_seconds == 30
    assert store.get("k", now=1030.0).count == 1


def test_window_starts_at_first_request() -> None:
    limiter, clock, _ = _limiter(limit=2, window_seconds=60, now=1007.5)

    first = limiter.admit("k")
    clock.return_value = 1050.0
    second = limiter.admit("k")

    assert first.reset_at == 1067.5
    assert second.reset_at == 1067.5


def test_resets_on_new_window() -> None:
    limiter, clock, store = _limiter(limit=1, window_seconds=10)

    assert limiter.admit("k").allowed is True
    assert limiter.admit("k").allowed is False

    clock.return_value = 1010.0
    fresh = limiter.admit("k")
    assert fresh.allowed is True
    assert fresh.reset_at == 1020.0
    assert store.get("k", now=1010.0).count == 1


def test_isolated_by_key() -> None:
    limiter, _, _ = _limiter(limit=1, window_seconds=60)

    assert limiter.admit("203.0.113.7").allowed is True
    assert limiter.admit("203.0.113.7").allowed is False
    assert limiter.admit("198.51.100.9").allowed is True


@pytest.mark.parametrize("key", [None, "", "unknown"])
def test_unidentified_client_fails_open_without_accounting(key) -> None:
    limiter, _, store = _limiter(limit=1, window_seconds=60)

    for _ in range(5):
        decision = limiter.admit(key)
        assert decision.allowed is True
        assert decision.tracked is False

    assert len(store) == 0


def test_explicit_now_overrides_clock() -> None:
    limiter, clock, _ = _limiter(limit=1, window_seconds=60)

    decision = limiter.admit("k", now=2000.0)

    assert decision.reset_at == 2060.0
    clock.assert_not_called()


def test_concurrent_requests_admit_exactly_limit() -> None:
    limiter, _, store = _limiter(limit=2, window_seconds=3600)
    results: list[bool] = []
    results_lock = threading.Lock()
    barrier = threading.Barrier(10)

    def worker() -> None:
        barrier.wait()
        decision = limiter.admit("203.0.113.7")
        with results_lock:
            results.append(decision.allowed)

    threads = [threading.Thread(target=worker) for _ in range(10)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert results.count(True) == 2
    assert results.count(False) == 8
    assert store.get("203.0.113.7", now=1000.0).count == 2


def test_headers_for_allowed_and_rejected_decisions() -> None:
    limiter, _, _ = _limiter(limit=2, window_seconds=3600, now=0.0)

    allowed = limiter.admit("k").headers()
    assert allowed == {
        "X-RateLimit-Limit": "2",
        "X-RateLimit-Remaining": "1",
        "X-RateLimit-Reset": "1970-01-01T01:00:00.000Z",
    }

    limiter.admit("k")
    rejected = limiter.admit("k").headers()
    assert rejected["X-RateLimit-Remaining"] == "0"
    assert rejected["Retry-After"] == "3600"


def test_retry_after_is_at_least_one_second() -> None:
    limiter, clock, _ = _limiter(limit=1, window_seconds=60)

    limiter.admit("k")
    clock.return_value = 1059.9
    blocked = limiter.admit("k")

    assert blocked.allowed is False
    assert blocked.retry_after_seconds == 1


@pytest.mark.parametrize(
    "limit, window_seconds",
    [(0, 60), (-1, 60), (1, 0), (1, -5)],
)
def test_rejects_invalid_configuration(limit: int, window_seconds: float) -> None:
    with pytest.raises(ValueError):
        RateLimiter(InMemoryRateLimitStore(), limit=limit, window_seconds=window_seconds)
