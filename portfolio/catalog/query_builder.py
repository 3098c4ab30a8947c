"""
Generic query builder.
Turns raw request parameters into a `QueryPlan` for one entity descriptor: allow-listed
filters with bracket operators, free-text search, sort keys, projection, and the page
window. Every malformed input raises `ValidationError` before the store is touched.
"""

from __future__ import annotations

import math
import re
from collections.abc import Iterable, Mapping
from datetime import datetime

from portfolio.catalog.descriptors import EntityDescriptor
from portfolio.catalog.pagination import normalize_pagination, parse_sort
from portfolio.catalog.query_plan import (
    AllOf,
    AnyOf,
    Condition,
    FieldKind,
    FieldSpec,
    Op,
    QueryPlan,
    RANGE_OPS,
    SortKey,
)
from portfolio.catalog.timestamps import normalize_timestamp, utc_now
from portfolio.common.errors import ValidationError

RESERVED_KEYS = frozenset({"page", "sort", "limit", "fields", "search"})

DEFAULT_LIMIT = 20
MAX_LIMIT = 100

_KEY_RE = re.compile(r"^(?P<field>[^\[\]]+)(?:\[(?P<op>[^\[\]]*)\])?$")
_RANGE_TOKEN_RE = re.compile(r"(?<!\$)\b(gte|gt|lte|lt)\b")
_NAMED_OPS = {"eq": Op.EQ, "ne": Op.NE, "in": Op.IN, "nin": Op.NIN, "exists": Op.EXISTS}
_CALLER_OPS = frozenset({Op.EQ, Op.NE, Op.IN, Op.NIN, Op.EXISTS, *RANGE_OPS})
_ID_RE = re.compile(r"^[0-9a-f]{32}$")
_TRUE_VALUES = {"true", "1", "yes"}
_FALSE_VALUES = {"false", "0", "no"}

ParamItems = Iterable[tuple[str, str]] | Mapping[str, str | list[str]]


def translate_operator(token: str) -> Op:
    """Map a bracket operator token (`gte`, `$lt`, `ne`, ...) to an `Op`."""

    rewritten = _RANGE_TOKEN_RE.sub(r"$\1", token.strip())
    op = _NAMED_OPS.get(rewritten)
    if op is None:
        try:
            op = Op(rewritten)
        except ValueError as exc:
            raise ValidationError(f"Unsupported filter operator '{token}'") from exc
    if op not in _CALLER_OPS:
        raise ValidationError(f"Unsupported filter operator '{token}'")
    return op


def is_document_id(value: str) -> bool:
    return bool(_ID_RE.match(value))


def validate_document_id(value: str, *, name: str = "id") -> str:
    candidate = str(value).strip().lower()
    if not is_document_id(candidate):
        raise ValidationError(f"Invalid {name}: {value}")
    return candidate


def parse_boolean(raw: str, *, name: str) -> bool:
    value = str(raw).strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValidationError(f"Invalid boolean value for '{name}': {raw}")


def coerce_value(spec: FieldSpec, raw: str) -> object:
    """Coerce one raw query value to the field's comparable type."""

    kind = spec.kind
    if kind in {FieldKind.REFERENCE, FieldKind.REFERENCE_LIST}:
        return validate_document_id(raw, name=spec.name)
    if kind is FieldKind.NUMBER:
        try:
            number = float(str(raw).strip())
        except ValueError as exc:
            raise ValidationError(f"Invalid number for '{spec.name}': {raw}") from exc
        if not math.isfinite(number):
            raise ValidationError(f"Invalid number for '{spec.name}': {raw}")
        return number
    if kind is FieldKind.BOOLEAN:
        return parse_boolean(raw, name=spec.name)
    if kind is FieldKind.DATE:
        try:
            return normalize_timestamp(raw)
        except ValueError as exc:
            raise ValidationError(f"Invalid date for '{spec.name}': {raw}") from exc
    return str(raw)


def _split_values(raw_values: list[str]) -> list[str]:
    values: list[str] = []
    for raw in raw_values:
        values.extend(part.strip() for part in str(raw).split(",") if part.strip())
    return values


def _param_items(params: ParamItems) -> list[tuple[str, str]]:
    if isinstance(params, Mapping):
        items: list[tuple[str, str]] = []
        for key, value in params.items():
            if isinstance(value, list):
                items.extend((key, str(item)) for item in value)
            else:
                items.append((key, str(value)))
        return items
    return [(str(key), str(value)) for key, value in params]


def parse_projection(raw: str | None) -> tuple[str, ...] | None:
    if raw is None or not raw.strip():
        return None
    names = tuple(part.strip() for part in raw.split(",") if part.strip())
    return names or None


def apply_projection(document: dict[str, object], fields: tuple[str, ...] | None) -> dict[str, object]:
    """Keep (or, with `-name` entries, drop) top-level keys; `id` always survives."""

    if not fields:
        return document
    excluded = {name[1:] for name in fields if name.startswith("-")}
    included = [name for name in fields if not name.startswith("-")]
    if included:
        projected = {"id": document.get("id")}
        for name in included:
            if name in document:
                projected[name] = document[name]
        return projected
    return {key: value for key, value in document.items() if key == "id" or key not in excluded}


class QueryBuilder:
    """Build query plans for one entity."""

    def __init__(
        self,
        descriptor: EntityDescriptor,
        *,
        default_limit: int = DEFAULT_LIMIT,
        max_limit: int = MAX_LIMIT,
    ) -> None:
        self.descriptor = descriptor
        self.default_limit = default_limit
        self.max_limit = max_limit

    def build(
        self,
        params: ParamItems,
        *,
        role: str | None = None,
        now: datetime | None = None,
        extra_conditions: Iterable[Condition | AllOf | AnyOf] = (),
        default_sort: str | None = None,
        default_limit: int | None = None,
        apply_overlay: bool = True,
    ) -> QueryPlan:
        controls: dict[str, str] = {}
        filters: dict[str, list[str]] = {}
        for key, value in _param_items(params):
            if key in RESERVED_KEYS:
                controls[key] = value
            else:
                filters.setdefault(key, []).append(value)

        conditions: list[Condition | AllOf | AnyOf] = list(self.filter_conditions(filters))
        search_condition = self.search_condition(controls.get("search"))
        if search_condition is not None:
            conditions.append(search_condition)
        if apply_overlay:
            conditions.extend(self.descriptor.overlay(now or utc_now(), role=role))
        conditions.extend(extra_conditions)

        try:
            pagination = normalize_pagination(
                page=controls.get("page"),
                limit=controls.get("limit"),
                default_limit=default_limit or self.default_limit,
                max_limit=self.max_limit,
            )
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc

        return QueryPlan(
            conditions=tuple(conditions),
            sort=self.sort_keys(controls.get("sort"), default_sort=default_sort),
            fields=parse_projection(controls.get("fields")),
            page=pagination.page,
            limit=pagination.limit,
        )

    def filter_conditions(self, filters: Mapping[str, list[str]]) -> list[Condition | AnyOf]:
        conditions: list[Condition | AnyOf] = []
        for key, raw_values in filters.items():
            match = _KEY_RE.match(key)
            if match is None:
                raise ValidationError(f"Invalid filter key '{key}'")
            spec = self.descriptor.resolve_field(match.group("field"))
            if spec is None:
                raise ValidationError(
                    f"Unknown filter field '{match.group('field')}' for {self.descriptor.label}"
                )
            op_token = match.group("op")
            if op_token is None:
                op = Op.IN if len(raw_values) > 1 else Op.EQ
            else:
                op = translate_operator(op_token)

            if op in {Op.IN, Op.NIN}:
                values = [coerce_value(spec, value) for value in _split_values(raw_values)]
                if not values:
                    raise ValidationError(f"Filter '{key}' needs at least one value")
                conditions.append(Condition(spec, op, tuple(values)))
                continue
            for raw in raw_values:
                conditions.append(self._single_condition(spec, op, raw))
        return conditions

    def _single_condition(self, spec: FieldSpec, op: Op, raw: str) -> Condition:
        if op is Op.EXISTS:
            return Condition(spec, op, parse_boolean(raw, name=spec.name))
        if op in RANGE_OPS and not spec.kind.is_ordered:
            raise ValidationError(f"Range operators are not supported on '{spec.name}'")
        return Condition(spec, op, coerce_value(spec, raw))

    def search_condition(self, raw: str | None) -> AnyOf | None:
        """Free-text search: any term on text-indexed fields, else the whole phrase."""

        if raw is None:
            return None
        phrase = raw.strip()
        if not phrase:
            return None
        specs = self.descriptor.search_field_specs()
        if not specs:
            raise ValidationError(f"Free-text search is not supported for {self.descriptor.label}")
        if self.descriptor.text_fields:
            terms = phrase.split()
        else:
            terms = [phrase]
        return AnyOf(
            tuple(Condition(spec, Op.REGEX, term) for term in terms for spec in specs)
        )

    def sort_keys(self, raw: str | None, *, default_sort: str | None = None) -> tuple[SortKey, ...]:
        try:
            tokens = parse_sort(
                requested_sort=raw,
                default_sort=default_sort or self.descriptor.default_sort,
            )
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc
        keys: list[SortKey] = []
        for token in tokens:
            spec = self.descriptor.resolve_field(token.field)
            if spec is None:
                raise ValidationError(
                    f"Unsupported sort field '{token.field}' for {self.descriptor.label}"
                )
            keys.append(SortKey(spec, token.descending))
        return tuple(keys)
