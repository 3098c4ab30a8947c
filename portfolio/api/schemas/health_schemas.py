# This file defines response models for the operational endpoints outside the versioned API.
# Every operational payload carries the API version label, the request id, and a UTC timestamp.
# Readiness lists the collections whose tables are missing instead of one flag per table.

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class OperationalResponse(BaseModel):
    api_version: str
    request_id: str
    timestamp: datetime


class HealthResponse(OperationalResponse):
    status: str
    environment: str
    service_name: str


class ReadinessResponse(OperationalResponse):
    db_connected: bool
    collections_ready: bool
    missing_collections: list[str]
    ready: bool
    database: str


class VersionResponse(OperationalResponse):
    api_version_path: str
    app_version: str
    git_commit: str | None = None
    project: str
    version: str
