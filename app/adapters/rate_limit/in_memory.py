"""In-memory rate limit store.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Thread-safe: a single lock guards the map, so the store can be shared by
  async handlers and threadpool-bound code alike.
"""

from __future__ import annotations

import threading

from app.adapters.rate_limit.base import (
    AbstractRateLimitStore,
    EntryUpdater,
    RateWindowEntry,
)


class InMemoryRateLimitStore(AbstractRateLimitStore):
    """Dictionary-backed window store guarded by a lock.

    Critical sections are short (a dict lookup plus a replacement), so one
    lock for the whole map is enough; the periodic sweep takes it once per
    key instead of once for the whole pass.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: dict[str, RateWindowEntry] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def get(self, key: str, now: float) -> RateWindowEntry | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and entry.is_expired(now):
                del self._entries[key]
                return None
            return entry

    def set(self, key: str, entry: RateWindowEntry) -> None:
        with self._lock:
            self._entries[key] = entry

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def update(self, key: str, updater: EntryUpdater) -> RateWindowEntry:
        with self._lock:
            current = self._entries.get(key)
            new_entry = updater(current)
            if new_entry is not current:
                self._entries[key] = new_entry
            return new_entry

    def sweep_expired(self, now: float) -> int:
        with self._lock:
            candidates = [k for k, e in self._entries.items() if e.window_reset_at < now]

        evicted = 0
        for key in candidates:
            with self._lock:
                # The key may have been refreshed since the snapshot
                entry = self._entries.get(key)
                if entry is not None and entry.window_reset_at < now:
                    del self._entries[key]
                    evicted += 1
        return evicted
