"""Rate limit storage interfaces.

The limiter depends on this abstraction (not the concrete implementation)
so the in-process store can later be swapped for a shared one (e.g., Redis)
without touching the admission policy.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable


@dataclass(frozen=True)
class RateWindowEntry:
    """Window state for one client key.

    Entries are immutable: an increment or a window reset replaces the entry.

    Attributes:
        key: Client key (normalized source address).
        count: Requests observed in the current window (always >= 1).
        window_reset_at: UNIX epoch seconds when the window expires.
    """

    key: str
    count: int
    window_reset_at: float

    def __post_init__(self) -> None:
        if self.count < 1:
            raise ValueError("count must be >= 1")

    def is_expired(self, now: float) -> bool:
        return self.window_reset_at <= now


EntryUpdater = Callable[[RateWindowEntry | None], RateWindowEntry]


class AbstractRateLimitStore(ABC):
    """Concurrency-safe mapping from client key to window state."""

    @abstractmethod
    def get(self, key: str, now: float) -> RateWindowEntry | None:
        """Return the live entry for key, purging it if already expired."""
        raise NotImplementedError

    @abstractmethod
    def set(self, key: str, entry: RateWindowEntry) -> None:
        raise NotImplementedError

    @abstractmethod
    def delete(self, key: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def update(self, key: str, updater: EntryUpdater) -> RateWindowEntry:
        """Atomically replace the entry for key with ``updater(current)``.

        The read, the updater call and the write happen in one critical
        section, so two concurrent updates for the same key never observe
        the same current entry.

        Args:
            key: Client key.
            updater: Receives the stored entry (or None) and returns the entry
                to store. Returning the same object leaves the store unchanged.

        Returns:
            The entry stored after the update.
        """
        raise NotImplementedError

    @abstractmethod
    def sweep_expired(self, now: float) -> int:
        """Remove every entry whose window ended before ``now``.

        Returns:
            Number of evicted entries.
        """
        raise NotImplementedError
