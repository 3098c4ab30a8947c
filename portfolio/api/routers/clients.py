# This file defines client relationship endpoints under the versioned API path.
# It exists so staff can review clients, satisfaction, and retention in one place.
# Only the featured list is public; every other read needs a staff role.

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, Response, status

from portfolio.api.dependencies import get_client_service
from portfolio.api.response_envelope import (
    build_collection_envelope,
    build_list_envelope,
    build_object_envelope,
)
from portfolio.api.schemas.client_schemas import ClientCreate, ClientUpdate
from portfolio.api.schemas.common import ListResponse
from portfolio.api.security import Caller, CallerDep, require_permission
from portfolio.api.services.client_service import ClientService

router = APIRouter(prefix="/clients", tags=["clients"])
ClientServiceDep = Annotated[ClientService, Depends(get_client_service)]
StaffDep = Annotated[Caller, Depends(require_permission("clients", "read"))]
ManagerDep = Annotated[Caller, Depends(require_permission("clients", "analytics"))]


@router.get("/featured")
def featured_clients(service: ClientServiceDep, caller: CallerDep) -> dict[str, object]:
    return build_collection_envelope(service.featured(role=caller.role))


@router.get("", response_model=ListResponse)
def list_clients(request: Request, service: ClientServiceDep, caller: StaffDep) -> dict[str, object]:
    result = service.paginate(request.query_params.multi_items(), role=caller.role)
    return build_list_envelope(result)


@router.get("/analytics")
def client_analytics(service: ClientServiceDep, caller: ManagerDep) -> dict[str, object]:
    return build_object_envelope(service.analytics())


@router.get("/top")
def top_clients(
    service: ClientServiceDep,
    caller: ManagerDep,
    limit: int = Query(default=10, ge=1, le=100),
) -> dict[str, object]:
    return build_collection_envelope(service.top(limit=limit))


@router.get("/satisfaction")
def client_satisfaction(service: ClientServiceDep, caller: ManagerDep) -> dict[str, object]:
    return build_collection_envelope(service.satisfaction())


@router.get("/retention")
def client_retention(service: ClientServiceDep, caller: ManagerDep) -> dict[str, object]:
    return build_object_envelope(service.retention())


@router.get("/stats")
def client_stats(service: ClientServiceDep, caller: StaffDep) -> dict[str, object]:
    return build_object_envelope(service.stats())


@router.get("/search")
def search_clients(
    service: ClientServiceDep,
    caller: StaffDep,
    query: str | None = Query(default=None),
    q: str | None = Query(default=None),
) -> dict[str, object]:
    return build_collection_envelope(service.search_clients(query or q))


@router.get("/industry/{industry}")
def clients_by_industry(industry: str, service: ClientServiceDep, caller: StaffDep) -> dict[str, object]:
    return build_collection_envelope(service.by_industry(industry))


@router.get("/{client_id}")
def get_client(client_id: str, service: ClientServiceDep, caller: StaffDep) -> dict[str, object]:
    return build_object_envelope(service.get(client_id, role=caller.role))


@router.post("", status_code=status.HTTP_201_CREATED)
def create_client(
    body: ClientCreate,
    service: ClientServiceDep,
    caller: Annotated[Caller, Depends(require_permission("clients", "create"))],
) -> dict[str, object]:
    return build_object_envelope(service.create(body.to_document()))


@router.put("/{client_id}")
def update_client(
    client_id: str,
    body: ClientUpdate,
    service: ClientServiceDep,
    caller: Annotated[Caller, Depends(require_permission("clients", "update"))],
) -> dict[str, object]:
    return build_object_envelope(service.update(client_id, body.to_patch()))


@router.delete("/{client_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_client(
    client_id: str,
    service: ClientServiceDep,
    caller: Annotated[Caller, Depends(require_permission("clients", "delete"))],
) -> Response:
    service.delete(client_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
