"""
Unit tests for cross-entity search helpers.
"""

from __future__ import annotations

import pytest

from portfolio.api.services.search_service import (
    DEFAULT_ENTITIES,
    build_suggestions,
    normalize_query,
    parse_entities,
    split_filters,
)
from portfolio.common.errors import ValidationError


def test_normalize_query_trims_and_checks_length() -> None:
    assert normalize_query("  cloud ") == "cloud"
    with pytest.raises(ValidationError, match="at least 2 characters"):
        normalize_query(" a ")
    with pytest.raises(ValidationError):
        normalize_query(None)


def test_parse_entities() -> None:
    assert parse_entities(None) == DEFAULT_ENTITIES
    assert parse_entities("blog, services,blog") == ("blog", "services")
    with pytest.raises(ValidationError, match="Unknown search entities: widgets"):
        parse_entities("services,widgets")


def test_split_filters_groups_dotted_keys() -> None:
    grouped = split_filters([("q", "cloud"), ("services.category", "Consulting"), ("blog.tags", "ai")])
    assert grouped == {"services": {"category": ["Consulting"]}, "blog": {"tags": ["ai"]}}

    with pytest.raises(ValidationError):
        split_filters([("widgets.size", "xl")])


def test_suggestions_order_and_skill_cap() -> None:
    results = {
        "services": [{"category": "Consulting"}, {"category": "Consulting"}],
        "teamMembers": [{"skills": ["a", "b", "c"]}, {"skills": ["d", "e", "f", "a"]}],
        "projects": [{"category": "Web Development"}],
        "blog": [],
    }

    suggestions = build_suggestions(results)

    assert [item["type"] for item in suggestions] == [
        "service-category",
        "skill",
        "skill",
        "skill",
        "skill",
        "skill",
        "project-category",
    ]
    assert [item["text"] for item in suggestions if item["type"] == "skill"] == ["a", "b", "c", "d", "e"]
