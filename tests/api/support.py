# This file provides shared helpers for API endpoint tests.
# It exists so tests run against a fresh SQLite store without touching a real database.
# The helpers build consistent config objects, seed documents, and mint caller tokens.

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from fastapi.testclient import TestClient

from portfolio.api.api_config import ApiConfig
from portfolio.api.app import app
from portfolio.api.db_access import DocumentStore
from portfolio.api.dependencies import (
    get_config,
    get_context_cache,
    get_document_store,
    get_openai_client,
)
from portfolio.api.services.ai_service import ContextCache
from portfolio.api.services.auth_service import AuthService


def build_test_config(tmp_path: Path, **overrides: Any) -> ApiConfig:
    """Create deterministic API config for tests."""

    values: dict[str, Any] = {
        "api_name": "Test Portfolio API",
        "api_version_path": "/api/v1",
        "environment": "test",
        "database_url": f"sqlite:///{tmp_path / 'portfolio.db'}",
        "default_page_size": 20,
        "max_page_size": 100,
        "jwt_secret": "test-jwt-secret",
        "bcrypt_rounds": 4,
        "rate_limit_enabled": False,
        "upload_path": str(tmp_path / "uploads"),
        "upload_base_url": "/uploads",
        "app_version": "0.1.0",
    }
    values.update(overrides)
    return ApiConfig(**values)


def build_store(config: ApiConfig) -> DocumentStore:
    store = DocumentStore(database_url=config.database_url)
    store.create_all()
    return store


def seed(store: DocumentStore, collection: str, *documents: dict[str, Any]) -> list[dict[str, Any]]:
    return [store.insert(collection, dict(document)) for document in documents]


def auth_headers(
    config: ApiConfig,
    store: DocumentStore,
    *,
    role: str = "Admin",
    username: str | None = None,
) -> dict[str, str]:
    """Register a user with `role` and return a Bearer header for it."""

    name = username or f"{role.lower()}user"
    auth = AuthService(config=config, store=store)
    _, tokens = auth.register(
        {"username": name, "email": f"{name}@example.com", "password": "secret123", "role": role}
    )
    return {"Authorization": f"Bearer {tokens.token}"}


@contextmanager
def api_test_client(
    *,
    config: ApiConfig,
    store: DocumentStore,
    openai_client: Any | None = None,
) -> Iterator[TestClient]:
    """Yield a TestClient with scoped dependency overrides."""

    cache = ContextCache(ttl_seconds=config.ai_context_ttl_seconds)
    app.dependency_overrides[get_config] = lambda: config
    app.dependency_overrides[get_document_store] = lambda: store
    app.dependency_overrides[get_context_cache] = lambda: cache
    app.dependency_overrides[get_openai_client] = lambda: openai_client

    try:
        with TestClient(app) as client:
            yield client
    finally:
        app.dependency_overrides.clear()
