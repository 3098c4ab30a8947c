# This file defines liveness, readiness, and version endpoints for API operations.
# They are mounted at the root, outside the versioned prefix, for probes and monitors.
# Readiness requires a reachable database and a table for every portfolio collection.

from __future__ import annotations

import subprocess
from datetime import UTC, datetime
from functools import lru_cache
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Request

from portfolio.api.api_config import ApiConfig
from portfolio.api.db_access import DocumentStore
from portfolio.api.dependencies import get_config, get_document_store
from portfolio.api.schemas.health_schemas import HealthResponse, ReadinessResponse, VersionResponse
from portfolio.catalog.descriptors import COLLECTIONS

router = APIRouter(tags=["health"])
ConfigDep = Annotated[ApiConfig, Depends(get_config)]
StoreDep = Annotated[DocumentStore, Depends(get_document_store)]


def api_version_label(api_version_path: str) -> str:
    """`/api/v1` -> `v1`."""

    return api_version_path.rstrip("/").rsplit("/", 1)[-1]


@lru_cache(maxsize=1)
def git_commit() -> str | None:
    try:
        completed = subprocess.run(
            ["git", "rev-parse", "--short", "HEAD"],
            check=True,
            capture_output=True,
            text=True,
        )
    except (OSError, subprocess.CalledProcessError):
        return None
    return completed.stdout.strip() or None


def _operational(request: Request, config: ApiConfig, **fields: Any) -> dict[str, Any]:
    return {
        "api_version": api_version_label(config.api_version_path),
        "request_id": request.state.request_id,
        "timestamp": datetime.now(tz=UTC),
        **fields,
    }


@router.get("/health", response_model=HealthResponse)
def health(request: Request, config: ConfigDep) -> dict[str, Any]:
    return _operational(
        request,
        config,
        status="ok",
        environment=config.environment,
        service_name=config.api_name,
    )


@router.get("/ready", response_model=ReadinessResponse)
def ready(request: Request, config: ConfigDep, store: StoreDep) -> dict[str, Any]:
    db_connected = store.can_connect()
    if db_connected:
        missing = [name for name in COLLECTIONS if not store.table_exists(name)]
    else:
        missing = list(COLLECTIONS)
    collections_ready = db_connected and not missing
    return _operational(
        request,
        config,
        db_connected=db_connected,
        collections_ready=collections_ready,
        missing_collections=missing,
        ready=collections_ready,
        database="reachable" if db_connected else "unreachable",
    )


@router.get("/version", response_model=VersionResponse)
def version(request: Request, config: ConfigDep) -> dict[str, Any]:
    return _operational(
        request,
        config,
        api_version_path=config.api_version_path,
        app_version=config.app_version,
        git_commit=git_commit(),
        project=config.api_name,
        version=config.app_version,
    )
