"""
Unit tests for the SQLAlchemy document store.
Runs against a per-test SQLite file; the same compiled SQL targets PostgreSQL in deployment.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from sqlalchemy.exc import IntegrityError

from portfolio.api.db_access import DocumentStore
from portfolio.catalog.descriptors import PROJECTS, SERVICES, TEAM_MEMBERS, TESTIMONIALS
from portfolio.catalog.query_builder import QueryBuilder
from portfolio.catalog.query_plan import Condition, FieldKind, FieldSpec, Op


@pytest.fixture()
def store(tmp_path: Path) -> DocumentStore:
    document_store = DocumentStore(database_url=f"sqlite:///{tmp_path / 'store.db'}")
    document_store.create_all()
    return document_store


def test_insert_and_get_round_trip(store: DocumentStore) -> None:
    created = store.insert("services", {"name": "Audit", "tags": ["cloud"]})

    fetched = store.get("services", created["id"])

    assert fetched == created
    assert len(created["id"]) == 32
    assert created["createdAt"].endswith("Z")


def test_unique_key_is_enforced(store: DocumentStore) -> None:
    store.insert("services", {"name": "Audit"}, unique_key="Audit")
    with pytest.raises(IntegrityError):
        store.insert("services", {"name": "Audit"}, unique_key="Audit")


def test_filters_sort_and_page(store: DocumentStore) -> None:
    for rating in (3, 5, 4, 5):
        store.insert("testimonials", {"clientName": f"c{rating}", "rating": rating, "approved": True})
    store.insert("testimonials", {"clientName": "hidden", "rating": 5, "approved": False})

    plan = QueryBuilder(TESTIMONIALS).build([("rating[gte]", "4"), ("sort", "-rating"), ("limit", "2")])
    page = store.find("testimonials", plan)

    assert [item["rating"] for item in page] == [5, 5]
    assert store.count("testimonials", plan.conditions) == 3


def test_list_membership_and_text_match(store: DocumentStore) -> None:
    store.insert("services", {"name": "Cloud Audit", "tags": ["cloud", "cost"]})
    store.insert("services", {"name": "App Build", "tags": ["mobile"]})

    tagged = store.find_all("services", [Condition(SERVICES.resolve_field("tags"), Op.EQ, "cost")])
    matched = store.find_all("services", [Condition(FieldSpec("name", FieldKind.STRING), Op.REGEX, "AUDIT")])
    literal = store.find_all("services", [Condition(FieldSpec("name", FieldKind.STRING), Op.REGEX, "%")])

    assert [item["name"] for item in tagged] == ["Cloud Audit"]
    assert [item["name"] for item in matched] == ["Cloud Audit"]
    assert literal == []


def test_modify_increment_and_delete(store: DocumentStore) -> None:
    created = store.insert("blogs", {"title": "Post", "views": 0})

    store.increment("blogs", created["id"], "views")
    updated = store.push("blogs", created["id"], "comments", {"content": "Nice"})

    assert updated["views"] == 1
    assert updated["comments"] == [{"content": "Nice"}]
    assert store.delete("blogs", created["id"])
    assert not store.delete("blogs", created["id"])
    assert store.modify("blogs", created["id"], lambda body: body) is None


def test_update_many_counts_real_changes(store: DocumentStore) -> None:
    first = store.insert("contact_submissions", {"status": "New"})
    second = store.insert("contact_submissions", {"status": "Archived"})

    def archive(body: dict) -> dict:
        body["status"] = "Archived"
        return body

    assert store.update_many("contact_submissions", [first["id"], second["id"], "0" * 32], archive) == (2, 1)


def test_unknown_collection(store: DocumentStore) -> None:
    with pytest.raises(ValueError, match="Unknown collection"):
        store.scan("widgets")


def test_array_elements_match_exactly_and_by_substring(store: DocumentStore) -> None:
    store.insert("team_members", {"firstName": "Zoë", "skills": ["Español", "React"]})
    store.insert("team_members", {"firstName": "Ian", "skills": ["react native"]})
    skills = TEAM_MEMBERS.resolve_field("skills")

    def names(*conditions: Condition) -> list[str]:
        return [item["firstName"] for item in store.find_all("team_members", list(conditions))]

    assert names(Condition(skills, Op.REGEX, "español")) == ["Zoë"]
    assert names(Condition(skills, Op.EQ, "Español")) == ["Zoë"]
    assert names(Condition(skills, Op.EQ, "react")) == []
    assert names(Condition(skills, Op.IN, ["React", "Go"])) == ["Zoë"]
    assert names(Condition(skills, Op.NIN, ["React"])) == ["Ian"]
    assert names(Condition(skills, Op.NE, "react native")) == ["Zoë"]


def test_object_array_matches_on_item_key(store: DocumentStore) -> None:
    lead_id = "a" * 32
    store.insert("projects", {"title": "Portal", "teamMembers": [{"member": lead_id, "role": "Lead"}]})
    store.insert("projects", {"title": "Kiosk", "teamMembers": [{"member": "b" * 32, "role": lead_id}]})

    plan = QueryBuilder(PROJECTS).build([("teamMember", lead_id)])

    assert [item["title"] for item in store.find("projects", plan)] == ["Portal"]
