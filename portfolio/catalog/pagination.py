# This file handles page-window and sort parsing for list endpoints.
# It exists so every entity uses the same deterministic rules for page size and ordering.
# The helpers validate caller input and produce stable skip/limit behavior.

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PaginationSpec:
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(frozen=True)
class SortToken:
    field: str
    descending: bool


def _parse_positive_int(name: str, raw: object, default: int) -> int:
    if raw is None or (isinstance(raw, str) and raw.strip() == ""):
        return default
    try:
        return int(str(raw).strip())
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


def normalize_pagination(
    *,
    page: object,
    limit: object,
    default_limit: int,
    max_limit: int,
) -> PaginationSpec:
    """Validate and normalize page/limit values."""

    resolved_page = _parse_positive_int("page", page, 1)
    resolved_limit = _parse_positive_int("limit", limit, default_limit)
    if resolved_page < 1:
        raise ValueError("page must be >= 1")
    if resolved_limit < 1:
        raise ValueError("limit must be >= 1")
    if resolved_limit > max_limit:
        raise ValueError(f"limit must be <= {max_limit}")
    return PaginationSpec(page=resolved_page, limit=resolved_limit)


def parse_sort(*, requested_sort: str | None, default_sort: str) -> list[SortToken]:
    """Parse sort input in the form `field,-other` (leading `-` means descending)."""

    raw_sort = (requested_sort or "").strip() or default_sort
    tokens: list[SortToken] = []
    for part in raw_sort.split(","):
        part = part.strip()
        if not part:
            continue
        descending = part.startswith("-")
        name = part.lstrip("-+").strip()
        if not name:
            raise ValueError(f"Invalid sort token: {part!r}")
        tokens.append(SortToken(field=name, descending=descending))
    if not tokens:
        raise ValueError("sort cannot be empty")
    return tokens


def compute_total_pages(*, total_count: int, limit: int) -> int:
    """Compute deterministic total page count."""

    if total_count <= 0:
        return 0
    return ((total_count - 1) // limit) + 1
