# This file defines testimonial endpoints under the versioned API path.
# It exists so visitors can submit feedback and editors can moderate it before it is shown.
# Public submissions always start unapproved; only moderators may set approval on create.

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, Response, status

from portfolio.api.dependencies import get_testimonial_service
from portfolio.api.response_envelope import (
    build_collection_envelope,
    build_list_envelope,
    build_object_envelope,
)
from portfolio.api.schemas.common import ListResponse
from portfolio.api.schemas.testimonial_schemas import TestimonialCreate, TestimonialUpdate
from portfolio.api.security import Caller, CallerDep, require_permission
from portfolio.api.services.testimonial_service import TestimonialService
from portfolio.catalog.permissions import is_allowed

router = APIRouter(prefix="/testimonials", tags=["testimonials"])
TestimonialServiceDep = Annotated[TestimonialService, Depends(get_testimonial_service)]
ModeratorDep = Annotated[Caller, Depends(require_permission("testimonials", "moderate"))]


@router.get("", response_model=ListResponse)
def list_testimonials(
    request: Request, service: TestimonialServiceDep, caller: CallerDep
) -> dict[str, object]:
    result = service.paginate(request.query_params.multi_items(), role=caller.role)
    return build_list_envelope(result)


@router.get("/featured")
def featured_testimonials(service: TestimonialServiceDep, caller: CallerDep) -> dict[str, object]:
    return build_collection_envelope(service.featured(role=caller.role))


@router.get("/high-rated")
def high_rated_testimonials(
    service: TestimonialServiceDep,
    min_rating: float = Query(default=4, ge=1, le=5, alias="minRating"),
    limit: int = Query(default=10, ge=1, le=100),
) -> dict[str, object]:
    return build_collection_envelope(service.high_rated(min_rating=min_rating, limit=limit))


@router.get("/analytics")
def testimonial_analytics(service: TestimonialServiceDep) -> dict[str, object]:
    return build_object_envelope(service.analytics())


@router.get("/stats")
def testimonial_stats(service: TestimonialServiceDep) -> dict[str, object]:
    return build_object_envelope(service.stats())


@router.get("/search")
def search_testimonials(
    service: TestimonialServiceDep,
    caller: CallerDep,
    q: str | None = Query(default=None),
) -> dict[str, object]:
    return build_collection_envelope(service.search(q, role=caller.role))


@router.get("/all", response_model=ListResponse)
def all_testimonials(
    request: Request,
    service: TestimonialServiceDep,
    caller: Annotated[Caller, Depends(require_permission("testimonials", "view_all"))],
) -> dict[str, object]:
    return build_list_envelope(service.all_testimonials(request.query_params.multi_items()))


@router.get("/rating/{rating}")
def testimonials_by_rating(rating: int, service: TestimonialServiceDep, caller: CallerDep) -> dict[str, object]:
    return build_collection_envelope(service.by_rating(rating, role=caller.role))


@router.get("/category/{category}")
def testimonials_by_category(
    category: str, service: TestimonialServiceDep, caller: CallerDep
) -> dict[str, object]:
    return build_collection_envelope(service.by_category(category, role=caller.role))


@router.get("/project/{project_id}")
def testimonials_by_project(
    project_id: str, service: TestimonialServiceDep, caller: CallerDep
) -> dict[str, object]:
    return build_collection_envelope(service.by_project(project_id, role=caller.role))


@router.get("/client/{client_id}")
def testimonials_by_client(
    client_id: str, service: TestimonialServiceDep, caller: CallerDep
) -> dict[str, object]:
    return build_collection_envelope(service.by_client(client_id, role=caller.role))


@router.get("/{testimonial_id}")
def get_testimonial(
    testimonial_id: str, service: TestimonialServiceDep, caller: CallerDep
) -> dict[str, object]:
    return build_object_envelope(service.get(testimonial_id, role=caller.role))


@router.post("", status_code=status.HTTP_201_CREATED)
def create_testimonial(
    body: TestimonialCreate,
    service: TestimonialServiceDep,
    caller: Annotated[Caller, Depends(require_permission("testimonials", "create"))],
) -> dict[str, object]:
    document = body.to_document()
    if not is_allowed("testimonials", "moderate", caller.role):
        document["approved"] = False
    return build_object_envelope(service.create(document))


@router.patch("/{testimonial_id}/approve")
def approve_testimonial(
    testimonial_id: str, service: TestimonialServiceDep, caller: ModeratorDep
) -> dict[str, object]:
    updated = service.set_approval(testimonial_id, True)
    return build_object_envelope(updated, message="Testimonial approved successfully")


@router.patch("/{testimonial_id}/reject")
def reject_testimonial(
    testimonial_id: str, service: TestimonialServiceDep, caller: ModeratorDep
) -> dict[str, object]:
    updated = service.set_approval(testimonial_id, False)
    return build_object_envelope(updated, message="Testimonial rejected")


@router.put("/{testimonial_id}")
def update_testimonial(
    testimonial_id: str,
    body: TestimonialUpdate,
    service: TestimonialServiceDep,
    caller: Annotated[Caller, Depends(require_permission("testimonials", "update"))],
) -> dict[str, object]:
    return build_object_envelope(service.update(testimonial_id, body.to_patch()))


@router.delete("/{testimonial_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_testimonial(
    testimonial_id: str,
    service: TestimonialServiceDep,
    caller: Annotated[Caller, Depends(require_permission("testimonials", "delete"))],
) -> Response:
    service.delete(testimonial_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
