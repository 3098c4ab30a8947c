# This file tests client endpoints that are gated to staff roles and the retention metrics.

from __future__ import annotations

from pathlib import Path

from tests.api.support import api_test_client, auth_headers, build_store, build_test_config, seed


def test_retention_over_zero_clients_returns_zeros(tmp_path: Path) -> None:
    config = build_test_config(tmp_path)
    store = build_store(config)
    manager = auth_headers(config, store, role="Manager")

    with api_test_client(config=config, store=store) as client:
        response = client.get("/api/v1/clients/retention", headers=manager)

    assert response.status_code == 200
    assert response.json()["data"]["retentionRate"] == 0


def test_featured_is_public_but_list_is_not(tmp_path: Path) -> None:
    config = build_test_config(tmp_path)
    store = build_store(config)
    seed(store, "clients", {"name": "Acme", "industry": "Technology", "featured": True})

    with api_test_client(config=config, store=store) as client:
        featured = client.get("/api/v1/clients/featured")
        listing = client.get("/api/v1/clients")

    assert featured.json()["results"] == 1
    assert listing.status_code == 401


def test_editor_cannot_read_analytics(tmp_path: Path) -> None:
    config = build_test_config(tmp_path)
    store = build_store(config)
    editor = auth_headers(config, store, role="Editor")

    with api_test_client(config=config, store=store) as client:
        listing = client.get("/api/v1/clients", headers=editor)
        analytics = client.get("/api/v1/clients/analytics", headers=editor)

    assert listing.status_code == 200
    assert analytics.status_code == 403


def test_search_matches_nested_contact_name(tmp_path: Path) -> None:
    config = build_test_config(tmp_path)
    store = build_store(config)
    editor = auth_headers(config, store, role="Editor")
    seed(
        store,
        "clients",
        {"name": "Acme", "industry": "Technology", "contactPerson": {"name": "Wile Coyote"}},
        {"name": "Globex", "industry": "Finance"},
    )

    with api_test_client(config=config, store=store) as client:
        payload = client.get("/api/v1/clients/search", params={"query": "coyote"}, headers=editor).json()

    assert [item["name"] for item in payload["data"]] == ["Acme"]
