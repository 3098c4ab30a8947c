# This file tests team member endpoints against a SQLite store.
# It covers skill lookups, free-text search over skills, and the staffing analytics.

from __future__ import annotations

from pathlib import Path

from tests.api.support import api_test_client, auth_headers, build_store, build_test_config, seed


def _seed_members(store) -> list[dict]:
    return seed(
        store,
        "team_members",
        {
            "firstName": "Zoë",
            "lastName": "Ruiz",
            "position": "Engineer",
            "skills": ["Python", "Español"],
            "experience": [
                {
                    "jobTitle": "Developer",
                    "companyName": "Acme",
                    "startDate": "2015-01-01T00:00:00.000Z",
                    "endDate": "2018-01-01T00:00:00.000Z",
                }
            ],
        },
        {"firstName": "Ian", "lastName": "Wu", "position": "Designer", "skills": ["Python"]},
    )


def test_skill_lookup_and_search_match_non_ascii_skills(tmp_path: Path) -> None:
    config = build_test_config(tmp_path)
    store = build_store(config)
    _seed_members(store)

    with api_test_client(config=config, store=store) as client:
        by_skill = client.get("/api/v1/team-members/skills/español").json()
        listed = client.get("/api/v1/team-members", params={"search": "Español"}).json()
        exact = client.get("/api/v1/team-members", params={"skills": "python"}).json()

    assert [member["firstName"] for member in by_skill["data"]] == ["Zoë"]
    assert [member["firstName"] for member in listed["data"]] == ["Zoë"]
    assert exact["data"] == []


def test_analytics_buckets_experience(tmp_path: Path) -> None:
    config = build_test_config(tmp_path)
    store = build_store(config)
    _seed_members(store)

    with api_test_client(config=config, store=store) as client:
        data = client.get("/api/v1/team-members/analytics").json()["data"]

    assert data["total"] == 2
    experience = {bucket["_id"]: bucket["count"] for bucket in data["experienceDistribution"]}
    assert experience == {"2-5 years": 1, "0-2 years": 1}
    assert data["skillsDistribution"][0] == {"_id": "Python", "count": 2}


def test_skills_summary_collects_member_cards(tmp_path: Path) -> None:
    config = build_test_config(tmp_path)
    store = build_store(config)
    _seed_members(store)

    with api_test_client(config=config, store=store) as client:
        payload = client.get("/api/v1/team-members/skills-summary").json()

    python = payload["data"][0]
    assert python["_id"] == "Python"
    assert python["count"] == 2
    assert sorted(card["name"] for card in python["members"]) == ["Ian Wu", "Zoë Ruiz"]


def test_project_count_orders_busiest_first(tmp_path: Path) -> None:
    config = build_test_config(tmp_path)
    store = build_store(config)
    zoe, ian = _seed_members(store)
    seed(
        store,
        "projects",
        {"title": "Portal", "teamMembers": [{"member": ian["id"]}]},
        {"title": "Kiosk", "teamMembers": [{"member": ian["id"]}, {"member": zoe["id"]}]},
    )

    with api_test_client(config=config, store=store) as client:
        data = client.get("/api/v1/team-members/with-project-count").json()["data"]

    assert [(member["firstName"], member["projectCount"]) for member in data] == [("Ian", 2), ("Zoë", 1)]


def test_members_by_team_rejects_malformed_id(tmp_path: Path) -> None:
    config = build_test_config(tmp_path)
    store = build_store(config)

    with api_test_client(config=config, store=store) as client:
        response = client.get("/api/v1/team-members/team/not-an-id")

    assert response.status_code == 400


def test_create_requires_editor_or_admin(tmp_path: Path) -> None:
    config = build_test_config(tmp_path)
    store = build_store(config)
    viewer = auth_headers(config, store, role="Viewer")
    editor = auth_headers(config, store, role="Editor")
    body = {"firstName": "Ada", "lastName": "King", "position": "Engineer", "skills": ["Go"]}

    with api_test_client(config=config, store=store) as client:
        denied = client.post("/api/v1/team-members", json=body, headers=viewer)
        created = client.post("/api/v1/team-members", json=body, headers=editor)

    assert denied.status_code == 403
    assert created.status_code == 201
    assert created.json()["data"]["skills"] == ["Go"]
