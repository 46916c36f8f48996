"""OpenAPI metadata and customization utilities.

Enriches the generated OpenAPI schema with:
- Tags metadata
- A documented 429 response (with rate limit headers) on every rate limited
  operation

This keeps documentation concerns decoupled from the app factory.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI

RATE_LIMITED_PREFIX = "/api/"

_RATE_LIMIT_HEADERS = {
    "Retry-After": "Seconds until the current window resets.",
    "X-RateLimit-Limit": "Maximum requests allowed in the window.",
    "X-RateLimit-Remaining": "Requests left in the current window.",
    "X-RateLimit-Reset": "UNIX epoch seconds when the window resets.",
}


def _too_many_requests_response() -> Dict[str, Any]:
    return {
        "description": "Too many requests for this client and route.",
        "headers": {
            name: {"description": description, "schema": {"type": "integer"}}
            for name, description in _RATE_LIMIT_HEADERS.items()
        },
        "content": {
            "application/json": {
                "schema": {
                    "type": "object",
                    "properties": {
                        "error": {"type": "string"},
                        "retry_after": {"type": "integer"},
                    },
                    "required": ["error"],
                }
            }
        },
    }


def apply_openapi_customizations(app: FastAPI) -> None:
    """Patch FastAPI's OpenAPI generation to add metadata and 429 docs."""

    original_openapi = app.openapi

    def custom_openapi() -> Dict[str, Any]:
        if app.openapi_schema:
            return app.openapi_schema

        schema = original_openapi()

        tags = schema.setdefault("tags", [])
        existing_tag_names = {t.get("name") for t in tags}
        desired_tags = [
            {
                "name": "Auth",
                "description": "Account lookup, signup and password reset requests.",
            },
            {
                "name": "Properties",
                "description": "Property listing interactions such as view counting.",
            },
            {
                "name": "Health",
                "description": "Liveness and readiness checks.",
            },
        ]
        for tag in desired_tags:
            if tag["name"] not in existing_tag_names:
                tags.append(tag)

        for path, methods in schema.get("paths", {}).items():
            if not path.startswith(RATE_LIMITED_PREFIX):
                continue
            for method_obj in methods.values():
                if isinstance(method_obj, dict):
                    responses = method_obj.setdefault("responses", {})
                    responses.setdefault("429", _too_many_requests_response())

        app.openapi_schema = schema
        return schema

    app.openapi = custom_openapi  # type: ignore[assignment]
