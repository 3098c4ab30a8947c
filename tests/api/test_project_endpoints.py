# This file tests project endpoints against a SQLite store.
# It covers the nested team member filter, timeline windows, recommendations, and analytics.

from __future__ import annotations

from pathlib import Path

from tests.api.support import api_test_client, auth_headers, build_store, build_test_config, seed


def _seed_portfolio(store) -> dict[str, dict]:
    ada, ian = seed(
        store,
        "team_members",
        {"firstName": "Ada", "lastName": "King", "position": "Lead"},
        {"firstName": "Ian", "lastName": "Wu", "position": "Designer"},
    )
    portal, kiosk, app = seed(
        store,
        "projects",
        {
            "title": "Portal",
            "category": "Web Development",
            "status": "Completed",
            "startDate": "2024-12-10T00:00:00.000Z",
            "completionDate": "2025-02-01T00:00:00.000Z",
            "teamMembers": [{"member": ada["id"], "role": "Lead"}],
        },
        {
            "title": "Kiosk",
            "category": "Web Development",
            "status": "In Progress",
            "startDate": "2025-01-05T00:00:00.000Z",
            "teamMembers": [{"member": ada["id"]}, {"member": ian["id"]}],
        },
        {
            "title": "App",
            "category": "Mobile Development",
            "status": "Planning",
            "startDate": "2023-06-01T00:00:00.000Z",
        },
    )
    return {"ada": ada, "ian": ian, "portal": portal, "kiosk": kiosk, "app": app}


def test_team_member_alias_filters_nested_assignments(tmp_path: Path) -> None:
    config = build_test_config(tmp_path)
    store = build_store(config)
    seeded = _seed_portfolio(store)

    with api_test_client(config=config, store=store) as client:
        payload = client.get("/api/v1/projects", params={"teamMember": seeded["ian"]["id"]}).json()

    assert [project["title"] for project in payload["data"]] == ["Kiosk"]
    assert payload["pagination"]["totalDocuments"] == 1


def test_timeline_window_covers_december(tmp_path: Path) -> None:
    config = build_test_config(tmp_path)
    store = build_store(config)
    _seed_portfolio(store)

    with api_test_client(config=config, store=store) as client:
        december = client.get("/api/v1/projects/timeline", params={"year": 2024, "month": 12}).json()
        january = client.get("/api/v1/projects/timeline", params={"year": 2025, "month": 1}).json()
        whole = client.get("/api/v1/projects/timeline").json()

    assert [project["title"] for project in december["data"]] == ["Portal"]
    assert [project["title"] for project in january["data"]] == ["Kiosk"]
    assert [project["title"] for project in whole["data"]] == ["App", "Portal", "Kiosk"]


def test_recommendations_share_category_and_exclude_self(tmp_path: Path) -> None:
    config = build_test_config(tmp_path)
    store = build_store(config)
    seeded = _seed_portfolio(store)

    with api_test_client(config=config, store=store) as client:
        payload = client.get(f"/api/v1/projects/{seeded['portal']['id']}/recommendations").json()
        missing = client.get(f"/api/v1/projects/{'0' * 32}/recommendations")

    assert [project["title"] for project in payload["data"]] == ["Kiosk"]
    assert missing.status_code == 404


def test_analytics_reports_completion_and_team_performance(tmp_path: Path) -> None:
    config = build_test_config(tmp_path)
    store = build_store(config)
    _seed_portfolio(store)

    with api_test_client(config=config, store=store) as client:
        data = client.get("/api/v1/projects/analytics").json()["data"]

    assert data["total"] == 3
    assert data["completed"] == 1
    assert data["active"] == 2
    assert data["completionRate"] == "33.33"
    performance = {entry["memberName"]: entry for entry in data["teamPerformance"]}
    assert performance["Ada King"]["projectCount"] == 2
    assert performance["Ada King"]["completedProjects"] == 1
    assert performance["Ada King"]["completionRate"] == 50.0
    assert performance["Ian Wu"]["completionRate"] == 0


def test_editor_creates_but_cannot_delete(tmp_path: Path) -> None:
    config = build_test_config(tmp_path)
    store = build_store(config)
    editor = auth_headers(config, store, role="Editor")
    (project,) = seed(store, "projects", {"title": "Portal", "category": "Web Development"})

    with api_test_client(config=config, store=store) as client:
        response = client.delete(f"/api/v1/projects/{project['id']}", headers=editor)

    assert response.status_code == 403
    assert store.get("projects", project["id"]) is not None
