"""
Unit tests for the query builder.
Covers bracket operators, allow-listed filters, value coercion, sort keys, and projection.
"""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from portfolio.catalog.descriptors import BLOGS, SERVICES, TESTIMONIALS
from portfolio.catalog.query_builder import (
    QueryBuilder,
    apply_projection,
    translate_operator,
    validate_document_id,
)
from portfolio.catalog.query_plan import AnyOf, Condition, Op
from portfolio.common.errors import ValidationError


@pytest.mark.parametrize(
    ("token", "expected"),
    [("gte", Op.GTE), ("$lt", Op.LT), ("ne", Op.NE), ("in", Op.IN), ("exists", Op.EXISTS)],
)
def test_translate_operator(token: str, expected: Op) -> None:
    assert translate_operator(token) is expected


def test_translate_operator_rejects_regex() -> None:
    with pytest.raises(ValidationError):
        translate_operator("regex")


def test_build_rating_range_and_paging() -> None:
    plan = QueryBuilder(TESTIMONIALS).build(
        [("rating[gte]", "4"), ("page", "2"), ("limit", "5"), ("sort", "-rating")],
        role="Admin",
    )

    assert plan.conditions == (Condition(TESTIMONIALS.resolve_field("rating"), Op.GTE, 4.0),)
    assert (plan.page, plan.limit, plan.offset) == (2, 5, 5)
    assert [key.as_text for key in plan.sort] == ["-rating"]


def test_repeated_key_becomes_membership() -> None:
    plan = QueryBuilder(SERVICES).build([("category", "Consulting"), ("category", "Web Development")])

    (condition,) = plan.conditions
    assert condition.op is Op.IN
    assert condition.value == ("Consulting", "Web Development")


def test_unknown_field_and_bad_values_are_rejected() -> None:
    builder = QueryBuilder(SERVICES)
    with pytest.raises(ValidationError, match="Unknown filter field"):
        builder.build([("secret", "x")])
    with pytest.raises(ValidationError, match="Invalid boolean"):
        builder.build([("featured", "maybe")])
    with pytest.raises(ValidationError, match="Range operators"):
        builder.build([("name[gt]", "a")])
    with pytest.raises(ValidationError, match="limit must be <= 100"):
        builder.build([("limit", "500")])
    with pytest.raises(ValidationError, match="Unsupported sort field"):
        builder.build([("sort", "password")])


def test_anonymous_blog_plan_carries_publication_overlay() -> None:
    now = datetime(2026, 3, 1, tzinfo=UTC)
    plan = QueryBuilder(BLOGS).build([], now=now)
    admin_plan = QueryBuilder(BLOGS).build([], role="Admin", now=now)

    values = {condition.field.name: condition.value for condition in plan.conditions}
    assert values == {"status": "Published", "publishedDate": "2026-03-01T00:00:00.000Z"}
    assert admin_plan.conditions == ()


def test_text_search_splits_terms() -> None:
    condition = QueryBuilder(SERVICES).search_condition("cloud  setup")

    assert isinstance(condition, AnyOf)
    assert {branch.value for branch in condition.conditions} == {"cloud", "setup"}


def test_projection_include_and_exclude() -> None:
    document = {"id": "a" * 32, "name": "Audit", "price": 10, "tags": []}

    assert apply_projection(document, ("name",)) == {"id": "a" * 32, "name": "Audit"}
    assert apply_projection(document, ("-price", "-id")) == {"id": "a" * 32, "name": "Audit", "tags": []}


def test_validate_document_id() -> None:
    assert validate_document_id("A" * 32) == "a" * 32
    with pytest.raises(ValidationError, match="Invalid id"):
        validate_document_id("123")
