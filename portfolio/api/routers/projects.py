# This file defines project portfolio endpoints under the versioned API path.
# It exists so clients can browse case studies by category, status, and timeline.
# List filters accept `teamMember` and `service` as shorthands for the nested reference fields.

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, Response, status

from portfolio.api.dependencies import get_project_service
from portfolio.api.response_envelope import (
    build_collection_envelope,
    build_list_envelope,
    build_object_envelope,
)
from portfolio.api.schemas.common import ListResponse
from portfolio.api.schemas.project_schemas import ProjectCreate, ProjectUpdate
from portfolio.api.security import Caller, CallerDep, require_permission
from portfolio.api.services.project_service import ProjectService

router = APIRouter(prefix="/projects", tags=["projects"])
ProjectServiceDep = Annotated[ProjectService, Depends(get_project_service)]


@router.get("", response_model=ListResponse)
def list_projects(request: Request, service: ProjectServiceDep, caller: CallerDep) -> dict[str, object]:
    result = service.paginate(request.query_params.multi_items(), role=caller.role)
    return build_list_envelope(result)


@router.get("/featured")
def featured_projects(service: ProjectServiceDep, caller: CallerDep) -> dict[str, object]:
    return build_collection_envelope(service.featured(role=caller.role))


@router.get("/recent")
def recent_projects(
    service: ProjectServiceDep,
    limit: int = Query(default=10, ge=1, le=100),
) -> dict[str, object]:
    return build_collection_envelope(service.recent(limit=limit))


@router.get("/analytics")
def project_analytics(service: ProjectServiceDep) -> dict[str, object]:
    return build_object_envelope(service.analytics())


@router.get("/stats")
def project_stats(service: ProjectServiceDep) -> dict[str, object]:
    return build_object_envelope(service.stats())


@router.get("/search")
def search_projects(
    service: ProjectServiceDep,
    caller: CallerDep,
    q: str | None = Query(default=None),
) -> dict[str, object]:
    return build_collection_envelope(service.search(q, role=caller.role))


@router.get("/timeline")
def project_timeline(
    service: ProjectServiceDep,
    year: int | None = Query(default=None, ge=1900, le=3000),
    month: int | None = Query(default=None, ge=1, le=12),
) -> dict[str, object]:
    return build_collection_envelope(service.timeline(year=year, month=month))


@router.get("/category/{category_name}")
def projects_by_category(category_name: str, service: ProjectServiceDep) -> dict[str, object]:
    return build_collection_envelope(service.by_category(category_name))


@router.get("/status/{project_status}")
def projects_by_status(project_status: str, service: ProjectServiceDep) -> dict[str, object]:
    return build_collection_envelope(service.by_status(project_status))


@router.get("/{project_id}")
def get_project(project_id: str, service: ProjectServiceDep, caller: CallerDep) -> dict[str, object]:
    return build_object_envelope(service.get(project_id, role=caller.role))


@router.get("/{project_id}/recommendations")
def project_recommendations(project_id: str, service: ProjectServiceDep) -> dict[str, object]:
    return build_collection_envelope(service.recommendations(project_id))


@router.post("", status_code=status.HTTP_201_CREATED)
def create_project(
    body: ProjectCreate,
    service: ProjectServiceDep,
    caller: Annotated[Caller, Depends(require_permission("projects", "create"))],
) -> dict[str, object]:
    return build_object_envelope(service.create(body.to_document()))


@router.put("/{project_id}")
def update_project(
    project_id: str,
    body: ProjectUpdate,
    service: ProjectServiceDep,
    caller: Annotated[Caller, Depends(require_permission("projects", "update"))],
) -> dict[str, object]:
    return build_object_envelope(service.update(project_id, body.to_patch()))


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_project(
    project_id: str,
    service: ProjectServiceDep,
    caller: Annotated[Caller, Depends(require_permission("projects", "delete"))],
) -> Response:
    service.delete(project_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
