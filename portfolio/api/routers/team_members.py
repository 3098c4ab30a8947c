# This file defines team member profile endpoints under the versioned API path.
# It exists so visitors can find people by skill or team and staff can maintain profiles.

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, Response, status

from portfolio.api.dependencies import get_team_member_service
from portfolio.api.response_envelope import (
    build_collection_envelope,
    build_list_envelope,
    build_object_envelope,
)
from portfolio.api.schemas.common import ListResponse
from portfolio.api.schemas.team_schemas import TeamMemberCreate, TeamMemberUpdate
from portfolio.api.security import Caller, CallerDep, require_permission
from portfolio.api.services.team_member_service import TeamMemberService

router = APIRouter(prefix="/team-members", tags=["team-members"])
TeamMemberServiceDep = Annotated[TeamMemberService, Depends(get_team_member_service)]


@router.get("", response_model=ListResponse)
def list_team_members(
    request: Request, service: TeamMemberServiceDep, caller: CallerDep
) -> dict[str, object]:
    result = service.paginate(request.query_params.multi_items(), role=caller.role)
    return build_list_envelope(result)


@router.get("/featured")
def featured_team_members(service: TeamMemberServiceDep, caller: CallerDep) -> dict[str, object]:
    return build_collection_envelope(service.featured(role=caller.role))


@router.get("/analytics")
def team_member_analytics(service: TeamMemberServiceDep) -> dict[str, object]:
    return build_object_envelope(service.analytics())


@router.get("/stats")
def team_member_stats(service: TeamMemberServiceDep) -> dict[str, object]:
    return build_object_envelope(service.stats())


@router.get("/search")
def search_team_members(
    service: TeamMemberServiceDep,
    query: str | None = Query(default=None),
    q: str | None = Query(default=None),
) -> dict[str, object]:
    return build_collection_envelope(service.search_members(query or q))


@router.get("/skills-summary")
def skills_summary(service: TeamMemberServiceDep) -> dict[str, object]:
    return build_collection_envelope(service.skills_summary())


@router.get("/with-project-count")
def team_members_with_project_count(service: TeamMemberServiceDep) -> dict[str, object]:
    return build_collection_envelope(service.with_project_count())


@router.get("/skills/{skill_name}")
def team_members_by_skill(skill_name: str, service: TeamMemberServiceDep) -> dict[str, object]:
    return build_collection_envelope(service.by_skill(skill_name))


@router.get("/team/{team_id}")
def team_members_by_team(team_id: str, service: TeamMemberServiceDep) -> dict[str, object]:
    return build_collection_envelope(service.by_team(team_id))


@router.get("/{member_id}")
def get_team_member(member_id: str, service: TeamMemberServiceDep, caller: CallerDep) -> dict[str, object]:
    return build_object_envelope(service.get(member_id, role=caller.role))


@router.post("", status_code=status.HTTP_201_CREATED)
def create_team_member(
    body: TeamMemberCreate,
    service: TeamMemberServiceDep,
    caller: Annotated[Caller, Depends(require_permission("team-members", "create"))],
) -> dict[str, object]:
    return build_object_envelope(service.create(body.to_document()))


@router.put("/{member_id}")
def update_team_member(
    member_id: str,
    body: TeamMemberUpdate,
    service: TeamMemberServiceDep,
    caller: Annotated[Caller, Depends(require_permission("team-members", "update"))],
) -> dict[str, object]:
    return build_object_envelope(service.update(member_id, body.to_patch()))


@router.delete("/{member_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_team_member(
    member_id: str,
    service: TeamMemberServiceDep,
    caller: Annotated[Caller, Depends(require_permission("team-members", "delete"))],
) -> Response:
    service.delete(member_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
