"""
Unit tests for request payload models.
Create and update payloads share field rules; update payloads only carry the keys sent.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError as PayloadError

from portfolio.api.schemas.common import slugify
from portfolio.api.schemas.service_schemas import ServiceCreate, ServiceUpdate


def test_create_payload_normalizes_input() -> None:
    payload = ServiceCreate.model_validate(
        {
            "name": "  Cloud Audit ",
            "description": "Review of cloud spend",
            "category": "Consulting",
            "relatedProjects": ["A" * 32, "a" * 32],
            "unknownKey": "ignored",
        }
    )

    document = payload.to_document()
    assert document["name"] == "Cloud Audit"
    assert document["priceRange"] == "Custom Quote"
    assert document["relatedProjects"] == ["a" * 32]
    assert "unknownKey" not in document


def test_create_payload_rejects_unknown_category() -> None:
    with pytest.raises(PayloadError):
        ServiceCreate.model_validate({"name": "x", "description": "y", "category": "Catering"})


def test_update_payload_keeps_only_sent_keys() -> None:
    patch = ServiceUpdate.model_validate({"featured": True, "shortDescription": "Short"}).to_patch()
    assert patch == {"featured": True, "shortDescription": "Short"}


def test_update_payload_keeps_field_constraints() -> None:
    with pytest.raises(PayloadError):
        ServiceUpdate.model_validate({"name": "x" * 101})


@pytest.mark.parametrize(
    ("title", "slug"),
    [("Hello World", "hello-world"), ("  Q&A: 2026 -- Edition! ", "qa-2026-edition"), ("Ünïcode", "ncode")],
)
def test_slugify(title: str, slug: str) -> None:
    assert slugify(title) == slug
