"""
Timestamp helpers for stored documents.
Every date is kept as a fixed-width UTC string (`YYYY-MM-DDTHH:MM:SS.mmmZ`) so that plain
string comparison in the store orders values chronologically.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated

from pydantic import BeforeValidator

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S"


def utc_now() -> datetime:
    return datetime.now(tz=UTC)


def to_utc(value: datetime) -> datetime:
    """Attach UTC to naive values and convert aware ones."""

    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def format_timestamp(value: datetime) -> str:
    value = to_utc(value)
    return f"{value.strftime(TIMESTAMP_FORMAT)}.{value.microsecond // 1000:03d}Z"


def parse_timestamp(raw: str | datetime) -> datetime:
    """Parse ISO-8601 text (date-only or full) into an aware UTC datetime."""

    if isinstance(raw, datetime):
        return to_utc(raw)
    text = str(raw).strip()
    if not text:
        raise ValueError("Empty date value")
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as exc:
        raise ValueError(f"Invalid date value: {raw!r}") from exc
    return to_utc(parsed)


def normalize_timestamp(raw: str | datetime) -> str:
    return format_timestamp(parse_timestamp(raw))


def now_timestamp() -> str:
    return format_timestamp(utc_now())


def _coerce_timestamp(value: object) -> object:
    if isinstance(value, (str, datetime)):
        return normalize_timestamp(value)
    return value


Timestamp = Annotated[str, BeforeValidator(_coerce_timestamp)]
