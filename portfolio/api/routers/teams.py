# This file defines team endpoints under the versioned API path.
# It exists so visitors can browse teams by specialty and managers can track load per team.

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, Response, status

from portfolio.api.dependencies import get_team_service
from portfolio.api.response_envelope import (
    build_collection_envelope,
    build_list_envelope,
    build_object_envelope,
)
from portfolio.api.schemas.common import ListResponse
from portfolio.api.schemas.team_schemas import TeamCreate, TeamUpdate
from portfolio.api.security import Caller, CallerDep, require_permission
from portfolio.api.services.team_service import TeamService

router = APIRouter(prefix="/teams", tags=["teams"])
TeamServiceDep = Annotated[TeamService, Depends(get_team_service)]


@router.get("", response_model=ListResponse)
def list_teams(request: Request, service: TeamServiceDep, caller: CallerDep) -> dict[str, object]:
    result = service.paginate(request.query_params.multi_items(), role=caller.role)
    return build_list_envelope(result)


@router.get("/featured")
def featured_teams(service: TeamServiceDep, caller: CallerDep) -> dict[str, object]:
    return build_collection_envelope(service.featured(role=caller.role))


@router.get("/analytics")
def team_analytics(service: TeamServiceDep) -> dict[str, object]:
    return build_object_envelope(service.analytics())


@router.get("/performance")
def team_performance(service: TeamServiceDep) -> dict[str, object]:
    return build_collection_envelope(service.performance())


@router.get("/workload")
def team_workload(service: TeamServiceDep) -> dict[str, object]:
    return build_collection_envelope(service.workload())


@router.get("/stats")
def team_stats(service: TeamServiceDep) -> dict[str, object]:
    return build_object_envelope(service.stats())


@router.get("/search")
def search_teams(
    service: TeamServiceDep,
    caller: CallerDep,
    q: str | None = Query(default=None),
) -> dict[str, object]:
    return build_collection_envelope(service.search(q, role=caller.role))


@router.get("/specialty/{specialty}")
def teams_by_specialty(specialty: str, service: TeamServiceDep) -> dict[str, object]:
    return build_collection_envelope(service.by_specialty(specialty))


@router.get("/{team_id}")
def get_team(team_id: str, service: TeamServiceDep, caller: CallerDep) -> dict[str, object]:
    return build_object_envelope(service.get(team_id, role=caller.role))


@router.post("", status_code=status.HTTP_201_CREATED)
def create_team(
    body: TeamCreate,
    service: TeamServiceDep,
    caller: Annotated[Caller, Depends(require_permission("teams", "create"))],
) -> dict[str, object]:
    return build_object_envelope(service.create(body.to_document()))


@router.put("/{team_id}")
def update_team(
    team_id: str,
    body: TeamUpdate,
    service: TeamServiceDep,
    caller: Annotated[Caller, Depends(require_permission("teams", "update"))],
) -> dict[str, object]:
    return build_object_envelope(service.update(team_id, body.to_patch()))


@router.delete("/{team_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_team(
    team_id: str,
    service: TeamServiceDep,
    caller: Annotated[Caller, Depends(require_permission("teams", "delete"))],
) -> Response:
    service.delete(team_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
