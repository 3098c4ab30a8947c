# This file tests media uploads, entity association, and deletion.
# Files land in a per-test upload directory.

from __future__ import annotations

from pathlib import Path

from tests.api.support import api_test_client, auth_headers, build_store, build_test_config, seed

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake"


def test_single_upload_sets_project_thumbnail(tmp_path: Path) -> None:
    config = build_test_config(tmp_path)
    store = build_store(config)
    editor = auth_headers(config, store, role="Editor")
    (project,) = seed(store, "projects", {"title": "Portal", "category": "Web Development"})

    with api_test_client(config=config, store=store) as client:
        response = client.post(
            "/api/v1/upload/single",
            headers=editor,
            files={"file": ("shot.png", PNG_BYTES, "image/png")},
            data={"entityType": "project", "entityId": project["id"], "imageType": "thumbnail"},
        )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["url"].startswith("/uploads/")
    assert data["entityUpdate"]["field"] == "thumbnail"
    assert store.get("projects", project["id"])["thumbnail"] == data["url"]
    assert (tmp_path / "uploads" / f"{data['publicId']}.png").read_bytes() == PNG_BYTES


def test_stored_suffix_follows_content_type(tmp_path: Path) -> None:
    config = build_test_config(tmp_path)
    store = build_store(config)
    editor = auth_headers(config, store, role="Editor")

    with api_test_client(config=config, store=store) as client:
        response = client.post(
            "/api/v1/upload/single",
            headers=editor,
            files={"file": ("page.html", PNG_BYTES, "image/png")},
        )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["url"].endswith(".png")
    assert data["format"] == "png"
    assert not list((tmp_path / "uploads").glob("*.html"))


def test_rejects_unsupported_file_type(tmp_path: Path) -> None:
    config = build_test_config(tmp_path)
    store = build_store(config)
    editor = auth_headers(config, store, role="Editor")

    with api_test_client(config=config, store=store) as client:
        response = client.post(
            "/api/v1/upload/single",
            headers=editor,
            files={"file": ("notes.txt", b"plain", "text/plain")},
        )

    assert response.status_code == 400
    assert response.json()["error"].startswith("Invalid file type")


def test_profile_image_accepts_only_images(tmp_path: Path) -> None:
    config = build_test_config(tmp_path)
    store = build_store(config)
    editor = auth_headers(config, store, role="Editor")

    with api_test_client(config=config, store=store) as client:
        response = client.post(
            "/api/v1/upload/profile-image",
            headers=editor,
            files={"profileImage": ("cv.pdf", b"%PDF", "application/pdf")},
        )

    assert response.status_code == 400


def test_viewer_cannot_upload(tmp_path: Path) -> None:
    config = build_test_config(tmp_path)
    store = build_store(config)
    viewer = auth_headers(config, store, role="Viewer")

    with api_test_client(config=config, store=store) as client:
        response = client.post(
            "/api/v1/upload/single",
            headers=viewer,
            files={"file": ("shot.png", PNG_BYTES, "image/png")},
        )

    assert response.status_code == 403


def test_delete_upload(tmp_path: Path) -> None:
    config = build_test_config(tmp_path)
    store = build_store(config)
    admin = auth_headers(config, store, role="Admin")

    with api_test_client(config=config, store=store) as client:
        public_id = client.post(
            "/api/v1/upload/single",
            headers=admin,
            files={"file": ("shot.png", PNG_BYTES, "image/png")},
        ).json()["data"]["publicId"]
        deleted = client.delete(f"/api/v1/upload/{public_id}", headers=admin)
        again = client.delete(f"/api/v1/upload/{public_id}", headers=admin)

    assert deleted.json()["data"] == {"ok": True}
    assert again.status_code == 404
