"""Content backend adapter speaking the REST collection API."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from app.adapters.content_store.base import AbstractContentStore
from app.core.errors import PersistenceAppError

logger = logging.getLogger(__name__)


class HttpContentStore(AbstractContentStore):
    """Create documents through ``POST {base_url}/api/{collection}``.

    The backend expects the document wrapped as ``{"data": {...}}`` and
    answers with ``{"data": {"documentId": ...}}`` (or ``id`` on older
    versions).
    """

    def __init__(
        self,
        base_url: str,
        *,
        api_token: str | None = None,
        timeout_seconds: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self._headers = {"Content-Type": "application/json"}
        if api_token:
            self._headers["Authorization"] = f"Bearer {api_token}"
        self._transport = transport

    async def create(self, collection: str, document: dict[str, Any]) -> str | None:
        url = f"{self.base_url}/api/{collection}"
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_seconds,
                transport=self._transport,
            ) as client:
                response = await client.post(url, json={"data": document}, headers=self._headers)
        except httpx.HTTPError as exc:
            raise PersistenceAppError(
                code="content_store_unreachable",
                message=f"Content backend request failed: {type(exc).__name__}",
                details={"context": {"collection": collection}},
            ) from exc

        if response.status_code >= 400:
            raise PersistenceAppError(
                code="content_store_rejected",
                message=f"Content backend returned HTTP {response.status_code}",
                details={"context": {"collection": collection, "status_code": response.status_code}},
            )

        try:
            data = response.json().get("data") or {}
        except (ValueError, AttributeError):
            logger.debug("content_store.unparsed_response", extra={"collection": collection})
            return None

        document_id = data.get("documentId") or data.get("id")
        return str(document_id) if document_id is not None else None
