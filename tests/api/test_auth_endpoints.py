# This file tests registration, login lockout, token refresh, and caller resolution.

from __future__ import annotations

from pathlib import Path

from tests.api.support import api_test_client, auth_headers, build_store, build_test_config, seed

ACCOUNT = {"username": "ada", "email": "ada@example.com", "password": "secret123"}


def test_register_sets_cookies_and_hides_password(tmp_path: Path) -> None:
    config = build_test_config(tmp_path)
    store = build_store(config)

    with api_test_client(config=config, store=store) as client:
        response = client.post("/api/v1/auth/register", json=ACCOUNT)

    assert response.status_code == 201
    payload = response.json()
    assert payload["token"]
    assert payload["data"]["user"]["role"] == "Viewer"
    assert "passwordHash" not in payload["data"]["user"]
    assert "jwt" in response.cookies


def test_self_registration_cannot_choose_a_role(tmp_path: Path) -> None:
    config = build_test_config(tmp_path)
    store = build_store(config)
    service = seed(store, "services", {"name": "Audit"})[0]

    with api_test_client(config=config, store=store) as client:
        response = client.post("/api/v1/auth/register", json={**ACCOUNT, "role": "Admin"})
        token = response.json()["token"]
        deleted = client.delete(
            f"/api/v1/services/{service['id']}",
            headers={"Authorization": f"Bearer {token}"},
        )

    assert response.status_code == 201
    assert response.json()["data"]["user"]["role"] == "Viewer"
    assert deleted.status_code == 403


def test_admin_can_register_a_user_with_a_role(tmp_path: Path) -> None:
    config = build_test_config(tmp_path)
    store = build_store(config)
    headers = auth_headers(config, store, role="Admin")

    with api_test_client(config=config, store=store) as client:
        response = client.post("/api/v1/auth/register", json={**ACCOUNT, "role": "Editor"}, headers=headers)

    assert response.status_code == 201
    assert response.json()["data"]["user"]["role"] == "Editor"


def test_duplicate_registration_conflicts(tmp_path: Path) -> None:
    config = build_test_config(tmp_path)
    store = build_store(config)

    with api_test_client(config=config, store=store) as client:
        client.post("/api/v1/auth/register", json=ACCOUNT)
        response = client.post("/api/v1/auth/register", json={**ACCOUNT, "username": "other"})

    assert response.status_code == 409


def test_login_locks_after_repeated_failures(tmp_path: Path) -> None:
    config = build_test_config(tmp_path, max_login_attempts=3)
    store = build_store(config)

    with api_test_client(config=config, store=store) as client:
        client.post("/api/v1/auth/register", json=ACCOUNT)
        failures = [
            client.post("/api/v1/auth/login", json={"email": ACCOUNT["email"], "password": "wrong"}).status_code
            for _ in range(3)
        ]
        locked = client.post("/api/v1/auth/login", json={"email": ACCOUNT["email"], "password": "secret123"})

    assert failures == [401, 401, 401]
    assert locked.status_code == 423


def test_login_requires_both_fields(tmp_path: Path) -> None:
    config = build_test_config(tmp_path)
    store = build_store(config)

    with api_test_client(config=config, store=store) as client:
        response = client.post("/api/v1/auth/login", json={"email": ACCOUNT["email"]})

    assert response.status_code == 400
    assert response.json()["error"] == "Please provide email and password"


def test_refresh_token_from_body(tmp_path: Path) -> None:
    config = build_test_config(tmp_path)
    store = build_store(config)

    with api_test_client(config=config, store=store) as client:
        registered = client.post("/api/v1/auth/register", json=ACCOUNT).json()
        refreshed = client.post("/api/v1/auth/refresh-token", json={"refreshToken": registered["refreshToken"]})
        rejected = client.post("/api/v1/auth/refresh-token", json={"refreshToken": registered["token"]})

    assert refreshed.status_code == 200
    assert refreshed.json()["data"]["user"]["email"] == ACCOUNT["email"]
    assert rejected.status_code == 401


def test_me_requires_valid_token(tmp_path: Path) -> None:
    config = build_test_config(tmp_path)
    store = build_store(config)

    with api_test_client(config=config, store=store) as client:
        token = client.post("/api/v1/auth/register", json=ACCOUNT).json()["token"]
        client.cookies.clear()
        anonymous = client.get("/api/v1/auth/me")
        garbage = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-token"})
        me = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})

    assert anonymous.status_code == 401
    assert garbage.status_code == 401
    assert me.json()["data"]["user"]["username"] == "ada"


def test_logout_clears_cookies(tmp_path: Path) -> None:
    config = build_test_config(tmp_path)
    store = build_store(config)

    with api_test_client(config=config, store=store) as client:
        response = client.post("/api/v1/auth/logout")

    assert response.json()["message"] == "Logged out successfully"
    assert response.cookies.get("jwt") == "loggedout"
