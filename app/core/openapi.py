"""OpenAPI metadata and customization utilities.

Enriches the generated OpenAPI schema with:
- Tags metadata
- The rate-limit response headers on every intake operation

This keeps documentation concerns decoupled from the app factory.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI

RATE_LIMIT_HEADERS: Dict[str, Dict[str, Any]] = {
    "X-RateLimit-Limit": {
        "description": "Maximum submissions per window for this client.",
        "schema": {"type": "integer"},
    },
    "X-RateLimit-Remaining": {
        "description": "Submissions left in the current window.",
        "schema": {"type": "integer"},
    },
    "X-RateLimit-Reset": {
        "description": "ISO-8601 UTC time at which the current window ends.",
        "schema": {"type": "string", "format": "date-time"},
    },
}

RETRY_AFTER_HEADER: Dict[str, Any] = {
    "description": "Seconds to wait before submitting again.",
    "schema": {"type": "integer"},
}


def apply_openapi_customizations(app: FastAPI) -> None:
    """Patch FastAPI's OpenAPI generation to add metadata and headers.

    - Adds tags metadata if not present
    - Documents X-RateLimit-* headers on every response of intake
      operations, plus Retry-After on 429
    """

    original_openapi = app.openapi

    def custom_openapi() -> Dict[str, Any]:
        if app.openapi_schema:
            return app.openapi_schema

        schema = original_openapi()

        tags = schema.setdefault("tags", [])
        existing_tag_names = {t.get("name") for t in tags}
        desired_tags = [
            {
                "name": "Intake",
                "description": "Rate-limited contact and work view submissions.",
            },
            {
                "name": "Health",
                "description": "Liveness checks.",
            },
        ]
        for tag in desired_tags:
            if tag["name"] not in existing_tag_names:
                tags.append(tag)

        for methods in schema.get("paths", {}).values():
            for operation in methods.values():
                if not isinstance(operation, dict) or "Intake" not in operation.get("tags", []):
                    continue
                for status_code, response in operation.get("responses", {}).items():
                    headers = response.setdefault("headers", {})
                    headers.update(RATE_LIMIT_HEADERS)
                    if status_code == "429":
                        headers["Retry-After"] = RETRY_AFTER_HEADER

        app.openapi_schema = schema
        return schema

    app.openapi = custom_openapi  # type: ignore[assignment]
