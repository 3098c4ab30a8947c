# This file tests blog visibility, slug lookups, view counting, and engagement endpoints.
# It exists because blog reads are the one public surface with a time-based visibility rule.

from __future__ import annotations

from datetime import timedelta
from pathlib import Path

from portfolio.catalog.timestamps import format_timestamp, utc_now
from tests.api.support import api_test_client, auth_headers, build_store, build_test_config, seed


def _seed_posts(store) -> list[dict]:
    now = utc_now()
    return seed(
        store,
        "blogs",
        {
            "title": "Live post",
            "slug": "live-post",
            "category": "Technology",
            "tags": ["python"],
            "status": "Published",
            "publishedDate": format_timestamp(now - timedelta(days=2)),
            "views": 0,
        },
        {
            "title": "Draft post",
            "slug": "draft-post",
            "category": "Technology",
            "tags": ["python"],
            "status": "Draft",
        },
        {
            "title": "Scheduled post",
            "slug": "scheduled-post",
            "category": "Technology",
            "tags": ["python"],
            "status": "Published",
            "publishedDate": format_timestamp(now + timedelta(days=3)),
        },
    )


def test_anonymous_list_only_shows_published_posts(tmp_path: Path) -> None:
    config = build_test_config(tmp_path)
    store = build_store(config)
    _seed_posts(store)

    with api_test_client(config=config, store=store) as client:
        anonymous = client.get("/api/v1/blog", params={"status": "Draft"}).json()
        public = client.get("/api/v1/blog").json()

    assert anonymous["data"] == []
    assert [post["slug"] for post in public["data"]] == ["live-post"]


def test_admin_list_is_unrestricted(tmp_path: Path) -> None:
    config = build_test_config(tmp_path)
    store = build_store(config)
    _seed_posts(store)
    headers = auth_headers(config, store)

    with api_test_client(config=config, store=store) as client:
        payload = client.get("/api/v1/blog", headers=headers).json()

    assert payload["pagination"]["totalDocuments"] == 3


def test_slug_lookup_hides_unpublished_posts(tmp_path: Path) -> None:
    config = build_test_config(tmp_path)
    store = build_store(config)
    _seed_posts(store)

    with api_test_client(config=config, store=store) as client:
        live = client.get("/api/v1/blog/slug/live-post")
        draft = client.get("/api/v1/blog/slug/draft-post")

    assert live.status_code == 200
    assert draft.status_code == 404
    assert draft.json()["error"] == "Blog post not found"


def test_detail_reads_increment_views(tmp_path: Path) -> None:
    config = build_test_config(tmp_path)
    store = build_store(config)
    live, _, _ = _seed_posts(store)

    with api_test_client(config=config, store=store) as client:
        first = client.get(f"/api/v1/blog/{live['id']}").json()["data"]["views"]
        second = client.get(f"/api/v1/blog/{live['id']}").json()["data"]["views"]

    assert second >= first
    assert store.get("blogs", live["id"])["views"] == 2


def test_like_and_comment(tmp_path: Path) -> None:
    config = build_test_config(tmp_path)
    store = build_store(config)
    live, _, _ = _seed_posts(store)

    with api_test_client(config=config, store=store) as client:
        liked = client.post(f"/api/v1/blog/{live['id']}/like")
        commented = client.post(
            f"/api/v1/blog/{live['id']}/comments",
            json={"name": "Ada", "email": "ada@example.com", "comment": "Great read"},
        )

    assert liked.json()["data"] == {"likes": 1}
    assert commented.status_code == 201
    (comment,) = store.get("blogs", live["id"])["comments"]
    assert comment["approved"] is False
    assert comment["comment"] == "Great read"


def test_all_posts_requires_editor(tmp_path: Path) -> None:
    config = build_test_config(tmp_path)
    store = build_store(config)
    _seed_posts(store)
    editor = auth_headers(config, store, role="Editor")

    with api_test_client(config=config, store=store) as client:
        anonymous = client.get("/api/v1/blog/all")
        allowed = client.get("/api/v1/blog/all", headers=editor)

    assert anonymous.status_code == 401
    assert allowed.json()["pagination"]["totalDocuments"] == 3


def test_create_derives_slug_excerpt_and_publish_date(tmp_path: Path) -> None:
    config = build_test_config(tmp_path)
    store = build_store(config)
    headers = auth_headers(config, store)
    (author,) = seed(store, "team_members", {"firstName": "Ada", "lastName": "Lovelace", "position": "Writer"})

    with api_test_client(config=config, store=store) as client:
        response = client.post(
            "/api/v1/blog",
            json={
                "title": "Hello, World!",
                "author": author["id"],
                "content": "word " * 450,
                "category": "Technology",
                "status": "Published",
            },
            headers=headers,
        )

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["slug"] == "hello-world"
    assert data["readTimeMinutes"] == 3
    assert data["excerpt"]
    assert data["publishedDate"]
