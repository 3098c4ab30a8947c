# This file tests team endpoints against a SQLite store.
# It covers the lead-is-a-member rule, specialty lookups, workload, and performance.

from __future__ import annotations

from pathlib import Path

from tests.api.support import api_test_client, auth_headers, build_store, build_test_config, seed


def test_team_lead_is_added_to_members(tmp_path: Path) -> None:
    config = build_test_config(tmp_path)
    store = build_store(config)
    manager = auth_headers(config, store, role="Manager")
    lead, member = seed(
        store,
        "team_members",
        {"firstName": "Ada", "lastName": "King", "position": "Lead"},
        {"firstName": "Ian", "lastName": "Wu", "position": "Designer"},
    )

    with api_test_client(config=config, store=store) as client:
        response = client.post(
            "/api/v1/teams",
            json={"teamName": "Platform", "members": [member["id"]], "teamLead": lead["id"]},
            headers=manager,
        )

    assert response.status_code == 201
    assert response.json()["data"]["members"] == [member["id"], lead["id"]]


def test_specialty_lookup_matches_tags_and_specialties(tmp_path: Path) -> None:
    config = build_test_config(tmp_path)
    store = build_store(config)
    seed(
        store,
        "teams",
        {"teamName": "Data", "tags": ["Análisis"], "specialties": []},
        {"teamName": "Mobile", "tags": [], "specialties": ["iOS"]},
    )

    with api_test_client(config=config, store=store) as client:
        by_tag = client.get("/api/v1/teams/specialty/análisis").json()
        by_specialty = client.get("/api/v1/teams/specialty/ios").json()

    assert [team["teamName"] for team in by_tag["data"]] == ["Data"]
    assert [team["teamName"] for team in by_specialty["data"]] == ["Mobile"]


def test_workload_counts_active_projects_per_member(tmp_path: Path) -> None:
    config = build_test_config(tmp_path)
    store = build_store(config)
    ada, ian = seed(
        store,
        "team_members",
        {"firstName": "Ada", "lastName": "King", "position": "Lead"},
        {"firstName": "Ian", "lastName": "Wu", "position": "Designer"},
    )
    seed(
        store,
        "teams",
        {"teamName": "Platform", "members": [ada["id"], ian["id"]], "isActive": True},
        {"teamName": "Design", "members": [ian["id"]], "isActive": True},
    )
    seed(
        store,
        "projects",
        {"title": "Portal", "status": "In Progress", "teamMembers": [{"member": ada["id"]}]},
        {"title": "Kiosk", "status": "Review", "teamMembers": [{"member": ian["id"]}]},
        {"title": "Beacon", "status": "Planning", "teamMembers": [{"member": ian["id"]}]},
        {"title": "Legacy", "status": "Completed", "teamMembers": [{"member": ian["id"]}]},
    )

    with api_test_client(config=config, store=store) as client:
        data = client.get("/api/v1/teams/workload").json()["data"]

    assert [(team["teamName"], team["activeProjectCount"], team["workloadRatio"]) for team in data] == [
        ("Design", 2, 2.0),
        ("Platform", 3, 1.5),
    ]


def test_performance_ranks_projects_per_member(tmp_path: Path) -> None:
    config = build_test_config(tmp_path)
    store = build_store(config)
    seed(
        store,
        "teams",
        {"teamName": "Empty", "members": [], "relatedProjects": []},
        {"teamName": "Busy", "members": ["a" * 32], "relatedProjects": ["b" * 32, "c" * 32, "d" * 32]},
    )

    with api_test_client(config=config, store=store) as client:
        data = client.get("/api/v1/teams/performance").json()["data"]

    assert [(team["teamName"], team["projectsPerMember"]) for team in data] == [("Busy", 3.0), ("Empty", 0)]


def test_analytics_buckets_team_sizes(tmp_path: Path) -> None:
    config = build_test_config(tmp_path)
    store = build_store(config)
    seed(
        store,
        "teams",
        {"teamName": "Duo", "members": ["a" * 32, "b" * 32], "isActive": True},
        {"teamName": "Trio", "members": ["a" * 32, "b" * 32, "c" * 32], "isActive": False},
    )

    with api_test_client(config=config, store=store) as client:
        data = client.get("/api/v1/teams/analytics").json()["data"]

    assert data["total"] == 2
    assert data["active"] == 1
    sizes = {bucket["_id"]: bucket["teams"] for bucket in data["sizeDistribution"]}
    assert sizes == {"Small (1-2)": ["Duo"], "Medium (3-5)": ["Trio"]}
