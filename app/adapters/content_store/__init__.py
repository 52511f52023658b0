"""Content backend adapters used to persist submission records."""

from app.adapters.content_store.base import AbstractContentStore
from app.adapters.content_store.http_store import HttpContentStore
from app.adapters.content_store.in_memory import InMemoryContentStore

__all__ = [
    "AbstractContentStore",
    "HttpContentStore",
    "InMemoryContentStore",
]
