"""In-memory content store for local development and tests.

Used when no content backend URL is configured. Documents live only as long
as the process.
"""

from __future__ import annotations

import threading
import uuid
from collections import defaultdict
from typing import Any

from app.adapters.content_store.base import AbstractContentStore


class InMemoryContentStore(AbstractContentStore):
    """Thread-safe list of created documents per collection."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._collections: defaultdict[str, list[dict[str, Any]]] = defaultdict(list)

    async def create(self, collection: str, document: dict[str, Any]) -> str | None:
        document_id = uuid.uuid4().hex
        with self._lock:
            self._collections[collection].append({"documentId": document_id, **document})
        return document_id

    def documents(self, collection: str) -> list[dict[str, Any]]:
        with self._lock:
            return list(self._collections.get(collection, []))
