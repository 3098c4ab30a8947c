# This file builds response envelopes for API endpoints in a consistent format.
# It exists so clients always receive `success`, `data`, and pagination fields in the same places.
# The helpers return plain dictionaries that FastAPI serializes directly.
# This keeps endpoint functions focused on data retrieval instead of repetitive envelope assembly.

from __future__ import annotations

from typing import Any

from portfolio.catalog.query_plan import QueryResult


def pagination_metadata(result: QueryResult) -> dict[str, Any]:
    return {
        "currentPage": result.page,
        "totalPages": result.total_pages,
        "totalDocuments": result.total_matching,
        "hasNextPage": result.has_next_page,
        "hasPrevPage": result.has_prev_page,
        "limit": result.limit,
    }


def build_list_envelope(result: QueryResult, **extra: Any) -> dict[str, Any]:
    """Build standard paginated list response envelope."""

    return {
        "success": True,
        "results": len(result.items),
        "pagination": pagination_metadata(result),
        "data": result.items,
        **extra,
    }


def build_collection_envelope(items: list[Any], **extra: Any) -> dict[str, Any]:
    """Unpaginated list: featured, recent, popular, and similar shortcuts."""

    return {"success": True, "results": len(items), "data": items, **extra}


def build_object_envelope(data: Any, *, message: str | None = None, **extra: Any) -> dict[str, Any]:
    """Build standard non-list response envelope."""

    payload: dict[str, Any] = {"success": True}
    if message is not None:
        payload["message"] = message
    payload["data"] = data
    payload.update(extra)
    return payload


def build_message_envelope(message: str, **extra: Any) -> dict[str, Any]:
    return {"success": True, "message": message, **extra}
