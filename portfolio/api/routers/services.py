# This file defines service catalog endpoints under the versioned API path.
# It exists so clients can browse, rank, and manage the services the company offers.
# Static paths are declared before `/{service_id}` so they are never captured as ids.

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, Response, status

from portfolio.api.dependencies import get_service_catalog
from portfolio.api.response_envelope import (
    build_collection_envelope,
    build_list_envelope,
    build_object_envelope,
)
from portfolio.api.schemas.common import ListResponse
from portfolio.api.schemas.service_schemas import ServiceCreate, ServiceUpdate
from portfolio.api.security import Caller, CallerDep, require_permission
from portfolio.api.services.catalog_service import ServiceCatalogService

router = APIRouter(prefix="/services", tags=["services"])
ServiceCatalogDep = Annotated[ServiceCatalogService, Depends(get_service_catalog)]
EditorDep = Annotated[Caller, Depends(require_permission("services", "update"))]


@router.get("", response_model=ListResponse)
def list_services(request: Request, service: ServiceCatalogDep, caller: CallerDep) -> dict[str, object]:
    result = service.paginate(request.query_params.multi_items(), role=caller.role)
    return build_list_envelope(result)


@router.get("/featured")
def featured_services(service: ServiceCatalogDep, caller: CallerDep) -> dict[str, object]:
    return build_collection_envelope(service.featured(role=caller.role))


@router.get("/popular")
def popular_services(
    service: ServiceCatalogDep,
    limit: int = Query(default=5, ge=1, le=100),
) -> dict[str, object]:
    return build_collection_envelope(service.popular(limit=limit))


@router.get("/analytics")
def service_analytics(service: ServiceCatalogDep) -> dict[str, object]:
    return build_object_envelope(service.analytics())


@router.get("/stats")
def service_stats(service: ServiceCatalogDep) -> dict[str, object]:
    return build_object_envelope(service.stats())


@router.get("/search")
def search_services(
    service: ServiceCatalogDep,
    caller: CallerDep,
    q: str | None = Query(default=None),
) -> dict[str, object]:
    return build_collection_envelope(service.search(q, role=caller.role))


@router.get("/category/{category_name}")
def services_by_category(category_name: str, service: ServiceCatalogDep) -> dict[str, object]:
    return build_collection_envelope(service.by_category(category_name))


@router.get("/with-project-count")
def services_with_project_count(service: ServiceCatalogDep) -> dict[str, object]:
    return build_collection_envelope(service.with_project_count())


@router.get("/{service_id}")
def get_service(service_id: str, service: ServiceCatalogDep, caller: CallerDep) -> dict[str, object]:
    return build_object_envelope(service.get(service_id, role=caller.role))


@router.post("", status_code=status.HTTP_201_CREATED)
def create_service(
    body: ServiceCreate,
    service: ServiceCatalogDep,
    caller: Annotated[Caller, Depends(require_permission("services", "create"))],
) -> dict[str, object]:
    return build_object_envelope(service.create(body.to_document()))


@router.put("/{service_id}")
def update_service(
    service_id: str,
    body: ServiceUpdate,
    service: ServiceCatalogDep,
    caller: EditorDep,
) -> dict[str, object]:
    return build_object_envelope(service.update(service_id, body.to_patch()))


@router.delete("/{service_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_service(
    service_id: str,
    service: ServiceCatalogDep,
    caller: Annotated[Caller, Depends(require_permission("services", "delete"))],
) -> Response:
    service.delete(service_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
