"""
Typed query plan shared by the query builder and the document store.
A plan is a store-agnostic description of one list request: AND-ed conditions,
optional OR groups, sort keys, projection, and the page window.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from portfolio.catalog.pagination import compute_total_pages


class FieldKind(str, Enum):
    STRING = "string"
    ENUM = "enum"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    STRING_LIST = "string_list"
    REFERENCE = "reference"
    REFERENCE_LIST = "reference_list"

    @property
    def is_list(self) -> bool:
        return self in {FieldKind.STRING_LIST, FieldKind.REFERENCE_LIST}

    @property
    def is_ordered(self) -> bool:
        return self in {FieldKind.NUMBER, FieldKind.DATE}


# Columns kept outside the JSON document.
COLUMN_FIELDS = {"id": "id", "createdAt": "created_at", "updatedAt": "updated_at"}


@dataclass(frozen=True)
class FieldSpec:
    """One filterable or sortable document field."""

    name: str
    kind: FieldKind
    path: tuple[str, ...] = ()
    # key read from each element when the array holds objects
    item_key: str | None = None

    @property
    def json_path(self) -> tuple[str, ...]:
        return self.path or tuple(self.name.split("."))

    @property
    def column(self) -> str | None:
        return COLUMN_FIELDS.get(self.name)


class Op(str, Enum):
    EQ = "$eq"
    NE = "$ne"
    GT = "$gt"
    GTE = "$gte"
    LT = "$lt"
    LTE = "$lte"
    IN = "$in"
    NIN = "$nin"
    CONTAINS = "$contains"
    EXISTS = "$exists"
    REGEX = "$regex"


RANGE_OPS = {Op.GT, Op.GTE, Op.LT, Op.LTE}


@dataclass(frozen=True)
class Condition:
    field: FieldSpec
    op: Op
    value: Any = None


@dataclass(frozen=True)
class AllOf:
    conditions: tuple[Condition, ...]


@dataclass(frozen=True)
class AnyOf:
    """Disjunction of branches; matches when at least one branch holds."""

    conditions: tuple[Condition | AllOf, ...]


@dataclass(frozen=True)
class SortKey:
    field: FieldSpec
    descending: bool = False

    @property
    def as_text(self) -> str:
        return f"-{self.field.name}" if self.descending else self.field.name


@dataclass(frozen=True)
class QueryPlan:
    conditions: tuple[Condition | AllOf | AnyOf, ...] = ()
    sort: tuple[SortKey, ...] = ()
    fields: tuple[str, ...] | None = None
    page: int = 1
    limit: int = 20

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def with_conditions(self, *extra: Condition | AllOf | AnyOf) -> QueryPlan:
        return QueryPlan(
            conditions=self.conditions + tuple(extra),
            sort=self.sort,
            fields=self.fields,
            page=self.page,
            limit=self.limit,
        )


@dataclass
class QueryResult:
    items: list[dict[str, Any]] = field(default_factory=list)
    total_matching: int = 0
    page: int = 1
    limit: int = 20

    @property
    def total_pages(self) -> int:
        return compute_total_pages(total_count=self.total_matching, limit=self.limit)

    @property
    def has_next_page(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev_page(self) -> bool:
        return self.page > 1
