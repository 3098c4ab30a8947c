# This file tests service catalog endpoints end to end against a SQLite store.
# It covers filtered pagination, the generic shortcuts, CRUD, and role checks.

from __future__ import annotations

from pathlib import Path

from tests.api.support import api_test_client, auth_headers, build_store, build_test_config, seed

SERVICE_PAYLOAD = {
    "name": "Web Apps",
    "description": "Full stack web applications.",
    "category": "Web Development",
    "tags": ["react", "fastapi"],
}


def _seed_services(store) -> list[dict]:
    return seed(
        store,
        "services",
        {"name": "Web Apps", "description": "Apps", "category": "Web Development", "featured": True},
        {"name": "Sites", "description": "Sites", "category": "Web Development", "featured": False},
        {"name": "Mobile", "description": "Mobile apps", "category": "Mobile Development", "featured": True},
    )


def test_category_filter_paginates_matching_services(tmp_path: Path) -> None:
    config = build_test_config(tmp_path)
    store = build_store(config)
    _seed_services(store)

    with api_test_client(config=config, store=store) as client:
        response = client.get(
            "/api/v1/services",
            params={"category": "Web Development", "page": 1, "limit": 1},
        )

    assert response.status_code == 200
    payload = response.json()
    assert len(payload["data"]) == 1
    assert payload["pagination"]["totalDocuments"] == 2
    assert payload["pagination"]["totalPages"] == 2
    assert payload["pagination"]["hasNextPage"] is True
    assert payload["pagination"]["hasPrevPage"] is False


def test_unknown_filter_key_is_rejected(tmp_path: Path) -> None:
    config = build_test_config(tmp_path)
    store = build_store(config)

    with api_test_client(config=config, store=store) as client:
        response = client.get("/api/v1/services", params={"owner": "x"})

    assert response.status_code == 400
    assert response.json()["success"] is False


def test_featured_and_stats_shortcuts(tmp_path: Path) -> None:
    config = build_test_config(tmp_path)
    store = build_store(config)
    _seed_services(store)

    with api_test_client(config=config, store=store) as client:
        featured = client.get("/api/v1/services/featured").json()
        stats = client.get("/api/v1/services/stats").json()

    assert featured["results"] == 2
    assert all(item["featured"] for item in featured["data"])
    assert stats["data"] == {"total": 3, "featured": 2}


def test_search_requires_query(tmp_path: Path) -> None:
    config = build_test_config(tmp_path)
    store = build_store(config)

    with api_test_client(config=config, store=store) as client:
        response = client.get("/api/v1/services/search")

    assert response.status_code == 400
    assert response.json()["error"] == "Search query is required"


def test_popular_ranks_by_project_usage(tmp_path: Path) -> None:
    config = build_test_config(tmp_path)
    store = build_store(config)
    web, sites, mobile = _seed_services(store)
    seed(
        store,
        "projects",
        {"title": "A", "category": "Web Application", "servicesUsed": [mobile["id"]]},
        {"title": "B", "category": "Web Application", "servicesUsed": [mobile["id"], web["id"]]},
    )

    with api_test_client(config=config, store=store) as client:
        payload = client.get("/api/v1/services/popular", params={"limit": 2}).json()

    assert [item["id"] for item in payload["data"]] == [mobile["id"], web["id"]]
    assert [item["projectCount"] for item in payload["data"]] == [2, 1]


def test_create_then_fetch_returns_submitted_fields(tmp_path: Path) -> None:
    config = build_test_config(tmp_path)
    store = build_store(config)
    headers = auth_headers(config, store, role="Editor")

    with api_test_client(config=config, store=store) as client:
        created = client.post("/api/v1/services", json=SERVICE_PAYLOAD, headers=headers)
        service_id = created.json()["data"]["id"]
        fetched = client.get(f"/api/v1/services/{service_id}")

    assert created.status_code == 201
    data = fetched.json()["data"]
    for key, value in SERVICE_PAYLOAD.items():
        assert data[key] == value
    assert data["priceRange"] == "Custom Quote"
    assert data["createdAt"]


def test_duplicate_name_is_a_conflict(tmp_path: Path) -> None:
    config = build_test_config(tmp_path)
    store = build_store(config)
    headers = auth_headers(config, store)

    with api_test_client(config=config, store=store) as client:
        client.post("/api/v1/services", json=SERVICE_PAYLOAD, headers=headers)
        response = client.post("/api/v1/services", json=SERVICE_PAYLOAD, headers=headers)

    assert response.status_code == 409


def test_update_merges_partial_body(tmp_path: Path) -> None:
    config = build_test_config(tmp_path)
    store = build_store(config)
    headers = auth_headers(config, store)
    (service,) = seed(store, "services", {"name": "Web Apps", "description": "Apps", "category": "Web Development"})

    with api_test_client(config=config, store=store) as client:
        response = client.put(
            f"/api/v1/services/{service['id']}",
            json={"featured": True},
            headers=headers,
        )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["featured"] is True
    assert data["name"] == "Web Apps"


def test_write_permissions(tmp_path: Path) -> None:
    config = build_test_config(tmp_path)
    store = build_store(config)
    viewer = auth_headers(config, store, role="Viewer")
    editor = auth_headers(config, store, role="Editor")
    (service,) = seed(store, "services", {"name": "Web Apps", "description": "Apps", "category": "Web Development"})

    with api_test_client(config=config, store=store) as client:
        anonymous = client.post("/api/v1/services", json=SERVICE_PAYLOAD)
        forbidden = client.post("/api/v1/services", json=SERVICE_PAYLOAD, headers=viewer)
        editor_delete = client.delete(f"/api/v1/services/{service['id']}", headers=editor)

    assert anonymous.status_code == 401
    assert forbidden.status_code == 403
    assert editor_delete.status_code == 403


def test_delete_then_fetch_is_not_found(tmp_path: Path) -> None:
    config = build_test_config(tmp_path)
    store = build_store(config)
    headers = auth_headers(config, store)
    (service,) = seed(store, "services", {"name": "Web Apps", "description": "Apps", "category": "Web Development"})

    with api_test_client(config=config, store=store) as client:
        deleted = client.delete(f"/api/v1/services/{service['id']}", headers=headers)
        fetched = client.get(f"/api/v1/services/{service['id']}")
        malformed = client.get("/api/v1/services/not-an-id")

    assert deleted.status_code == 204
    assert fetched.status_code == 404
    assert malformed.status_code == 400
