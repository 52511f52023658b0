"""Per-client admission policy for the intake endpoints.

Strategy:
- Fixed window per client key, started by the client's first request
  (``window_reset_at = first_request + window``), not aligned to the clock.
- At most ``limit`` admissions per window; later requests are rejected with
  a retry delay until the window ends, after which the count starts at 1.
- Unknown client keys fail open: the request is admitted without accounting.

The store is injected so tests (and a future shared backend) control state;
``RateLimitSweeper`` evicts windows of clients that never came back.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import math
import time
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Callable

from app.adapters.rate_limit.base import AbstractRateLimitStore, RateWindowEntry
from app.core.logging import hash_identifier

logger = logging.getLogger(__name__)

UNKNOWN_CLIENT = "unknown"


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of one admission attempt.

    Attributes:
        allowed: Whether the request may proceed.
        limit: Max requests per window.
        remaining: Requests left in the current window (0 when rejected).
        reset_at: UNIX epoch seconds when the current window ends.
        retry_after_seconds: Seconds to wait before retrying (rejections only).
        tracked: False when the client could not be identified and the
            request was admitted without accounting.
    """

    allowed: bool
    limit: int
    remaining: int
    reset_at: float
    retry_after_seconds: int | None = None
    tracked: bool = True

    @property
    def reset_at_iso(self) -> str:
        reset = datetime.fromtimestamp(self.reset_at, tz=timezone.utc)
        return reset.isoformat(timespec="milliseconds").replace("+00:00", "Z")

    def headers(self) -> dict[str, str]:
        """Response headers describing this decision."""

        headers = {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
            "X-RateLimit-Reset": self.reset_at_iso,
        }
        if not self.allowed and self.retry_after_seconds is not None:
            headers["Retry-After"] = str(self.retry_after_seconds)
        return headers


class RateLimiter:
    """Admit or reject requests per client key.

    Example:
        >>> limiter = RateLimiter(InMemoryRateLimitStore(), limit=2, window_seconds=3600)
        >>> limiter.admit("203.0.113.7").allowed
        True
    """

    def __init__(
        self,
        store: AbstractRateLimitStore,
        *,
        limit: int,
        window_seconds: float,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be > 0")

        self._store = store
        self._limit = limit
        self._window_seconds = window_seconds
        self._clock = clock

    @property
    def store(self) -> AbstractRateLimitStore:
        return self._store

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def window_seconds(self) -> float:
        return self._window_seconds

    @property
    def clock(self) -> Callable[[], float]:
        return self._clock

    def admit(self, key: str | None, now: float | None = None) -> RateLimitDecision:
        """Record one request for ``key`` and decide whether it is admitted.

        Args:
            key: Client key; None, empty or "unknown" fails open.
            now: Override for the current time (UNIX seconds).

        Returns:
            RateLimitDecision with header metadata; rejections carry
            ``retry_after_seconds``.
        """
        now = self._clock() if now is None else now

        if not key or key == UNKNOWN_CLIENT:
            logger.warning("rate_limit.client_unidentified", extra={"limit": self._limit})
            return RateLimitDecision(
                allowed=True,
                limit=self._limit,
                remaining=self._limit,
                reset_at=now + self._window_seconds,
                tracked=False,
            )

        admitted = False

        def _apply(current: RateWindowEntry | None) -> RateWindowEntry:
            nonlocal admitted
            if current is None or current.is_expired(now):
                admitted = True
                return RateWindowEntry(key=key, count=1, window_reset_at=now + self._window_seconds)
            if current.count < self._limit:
                admitted = True
                return replace(current, count=current.count + 1)
            admitted = False
            return current

        entry = self._store.update(key, _apply)

        if admitted:
            logger.debug(
                "rate_limit.allowed",
                extra={
                    "client_hash": hash_identifier(key),
                    "count": entry.count,
                    "limit": self._limit,
                },
            )
            return RateLimitDecision(
                allowed=True,
                limit=self._limit,
                remaining=max(0, self._limit - entry.count),
                reset_at=entry.window_reset_at,
            )

        retry_after = max(1, math.ceil(entry.window_reset_at - now))
        logger.warning(
            "rate_limit.exceeded",
            extra={
                "client_hash": hash_identifier(key),
                "limit": self._limit,
                "window_s": self._window_seconds,
                "retry_after_s": retry_after,
            },
        )
        return RateLimitDecision(
            allowed=False,
            limit=self._limit,
            remaining=0,
            reset_at=entry.window_reset_at,
            retry_after_seconds=retry_after,
        )


class RateLimitSweeper:
    """Background task evicting expired windows at a fixed interval.

    Owned by the application lifespan: ``start()`` on startup and
    ``await stop()`` on shutdown, so no task outlives the app (or a test).
    """

    def __init__(
        self,
        store: AbstractRateLimitStore,
        *,
        interval_seconds: float,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be > 0")
        self._store = store
        self._interval = interval_seconds
        self._clock = clock
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def run_once(self) -> int:
        """Run a single sweep tick and return the number of evicted entries."""

        evicted = self._store.sweep_expired(self._clock())
        logger.debug("rate_limit.sweep", extra={"evicted": evicted})
        return evicted

    def start(self) -> None:
        """Schedule the sweep loop on the running event loop (idempotent)."""

        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(
            self._run(), name="rate-limit-sweeper"
        )

    async def stop(self) -> None:
        """Cancel the sweep loop and wait for it to finish (idempotent)."""

        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            try:
                self.run_once()
            except Exception:
                # Keep sweeping on the next tick
                logger.exception("rate_limit.sweep_failed")
