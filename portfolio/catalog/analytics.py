"""
Analytics aggregation helper.
Every entity's analytics endpoint describes its statistics as named `AggregationSpec`
records (group key or derived bucket, optional array explode, row predicate, measures)
and runs them over a collection scan with pandas. Results are plain JSON values: no NaN
and no numpy scalars leak out.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Literal

import pandas as pd

from portfolio.catalog.timestamps import parse_timestamp

Document = dict[str, Any]
ValueSource = str | Callable[[Document], Any]
MeasureKind = Literal["sum", "avg", "round_avg", "count_if", "max", "collect"]
Ordering = Literal["count_desc", "key_asc", "key_desc"]

MONTHLY_TREND_LIMIT = 12

_PANDAS_FUNCS: dict[str, Any] = {
    "sum": "sum",
    "avg": "mean",
    "round_avg": "mean",
    "count_if": "sum",
    "max": "max",
    "collect": list,
}


@dataclass(frozen=True)
class Measure:
    name: str
    kind: MeasureKind
    value: ValueSource | None = None
    digits: int = 2


@dataclass(frozen=True)
class AggregationSpec:
    """One named grouping over a collection."""

    name: str
    key: ValueSource
    measures: tuple[Measure, ...] = ()
    explode: bool = False
    where: Callable[[Document], bool] | None = None
    order: Ordering = "count_desc"
    limit: int | None = None
    label: Callable[[Any], Any] | None = None


def get_path(document: Any, path: str) -> Any:
    current = document
    for part in path.split("."):
        if not isinstance(current, dict):
            return None
        current = current.get(part)
    return current


def _resolve(document: Document, source: ValueSource | None) -> Any:
    if source is None:
        return None
    if callable(source):
        return source(document)
    return get_path(document, source)


def _number(value: Any) -> float:
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)) and math.isfinite(value):
        return float(value)
    return math.nan


def plain(value: Any) -> Any:
    """Convert numpy/pandas scalars to builtins; NaN becomes None."""

    if value is None:
        return None
    if hasattr(value, "item") and not isinstance(value, (list, dict, str)):
        value = value.item()
    if isinstance(value, float) and math.isnan(value):
        return None
    return value


def safe_rate(numerator: float, denominator: float, *, scale: float = 100.0, digits: int = 2) -> float:
    if not denominator:
        return 0
    return round(numerator / denominator * scale, digits)


def month_key(value: Any) -> str | None:
    if not value:
        return None
    try:
        moment = parse_timestamp(value)
    except ValueError:
        return None
    return f"{moment.year:04d}-{moment.month:02d}"


def month_label(key: str) -> dict[str, int]:
    year, month = key.split("-")
    return {"year": int(year), "month": int(month)}


def elapsed(start: Any, end: Any, *, unit_seconds: float) -> float | None:
    """Elapsed time between two stored timestamps in the given unit, or None."""

    if not start or not end:
        return None
    try:
        delta = parse_timestamp(end) - parse_timestamp(start)
    except ValueError:
        return None
    return delta.total_seconds() / unit_seconds


def days_between(start: Any, end: Any) -> float | None:
    return elapsed(start, end, unit_seconds=86400.0)


def hours_between(start: Any, end: Any) -> float | None:
    return elapsed(start, end, unit_seconds=3600.0)


def _measure_value(measure: Measure, raw: Any) -> Any:
    if measure.kind == "collect":
        return [plain(item) for item in raw if item is not None]
    value = plain(raw)
    if value is None:
        return 0 if measure.kind in {"sum", "count_if"} else None
    if measure.kind == "count_if":
        return int(value)
    if measure.kind == "round_avg":
        return round(float(value), measure.digits)
    if measure.kind == "sum" and float(value).is_integer():
        return int(value)
    return value


def _order_token(key: Any) -> tuple[int, Any]:
    return (0, "") if key is None else (1, key)


def run_spec(documents: Iterable[Document], spec: AggregationSpec) -> list[dict[str, Any]]:
    measure_names = [measure.name for measure in spec.measures]
    rows: list[dict[str, Any]] = []
    for document in documents:
        if spec.where is not None and not spec.where(document):
            continue
        row: dict[str, Any] = {"_key": _resolve(document, spec.key)}
        for measure in spec.measures:
            resolved = _resolve(document, measure.value)
            if measure.kind == "collect":
                row[measure.name] = resolved
            elif measure.kind == "count_if":
                row[measure.name] = bool(resolved)
            else:
                row[measure.name] = _number(resolved)
        rows.append(row)
    if not rows:
        return []

    frame = pd.DataFrame(rows, columns=["_key", *measure_names])
    frame["_row"] = 1
    if spec.explode:
        frame = frame.explode("_key")
        frame = frame[frame["_key"].notna()]
        if frame.empty:
            return []

    named_aggs: dict[str, tuple[str, str]] = {"count": ("_row", "size")}
    for measure in spec.measures:
        named_aggs[measure.name] = (measure.name, _PANDAS_FUNCS[measure.kind])
    summary = frame.groupby("_key", dropna=False, sort=False).agg(**named_aggs).reset_index()

    pairs: list[tuple[Any, dict[str, Any]]] = []
    for record in summary.to_dict(orient="records"):
        key = plain(record["_key"])
        bucket: dict[str, Any] = {"count": int(record["count"])}
        for measure in spec.measures:
            bucket[measure.name] = _measure_value(measure, record[measure.name])
        pairs.append((key, bucket))

    if spec.order == "count_desc":
        pairs.sort(key=lambda pair: (-pair[1]["count"], _order_token(pair[0])))
    elif spec.order == "key_asc":
        pairs.sort(key=lambda pair: _order_token(pair[0]))
    else:
        pairs.sort(key=lambda pair: _order_token(pair[0]), reverse=True)
    if spec.limit is not None:
        pairs = pairs[: spec.limit]

    return [
        {"_id": spec.label(key) if spec.label and key is not None else key, **bucket}
        for key, bucket in pairs
    ]


def aggregate(documents: Sequence[Document], specs: Iterable[AggregationSpec]) -> dict[str, list[dict[str, Any]]]:
    """Run every spec over the same documents."""

    return {spec.name: run_spec(documents, spec) for spec in specs}


def monthly_trend(
    name: str,
    date_field: str,
    *,
    measures: tuple[Measure, ...] = (),
    where: Callable[[Document], bool] | None = None,
) -> AggregationSpec:
    """Most recent twelve year/month buckets, newest first."""

    def _key(document: Document) -> str | None:
        return month_key(get_path(document, date_field))

    return AggregationSpec(
        name=name,
        key=_key,
        measures=measures,
        where=lambda document: _key(document) is not None and (where is None or where(document)),
        order="key_desc",
        limit=MONTHLY_TREND_LIMIT,
        label=month_label,
    )


def distinct_values(documents: Iterable[Document], path: str, *, explode: bool = False) -> list[Any]:
    """Sorted distinct non-empty values at `path`."""

    seen: set[Any] = set()
    for document in documents:
        value = get_path(document, path)
        values = value if explode and isinstance(value, list) else [value]
        seen.update(item for item in values if item not in (None, "") and not isinstance(item, (dict, list)))
    return sorted(seen, key=str)


def average(values: Iterable[Any], *, digits: int | None = None) -> float | None:
    series = pd.Series([_number(value) for value in values], dtype="float64").dropna()
    if series.empty:
        return None
    mean = float(series.mean())
    return round(mean, digits) if digits is not None else mean


def since(now: datetime, days: int) -> datetime:
    return now - timedelta(days=days)
