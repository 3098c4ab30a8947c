# This file defines cross-entity search endpoints under the versioned API path.
# It exists so one query can cover services, projects, people, posts, and testimonials.
# Per-entity filters are passed as `<entity>.<field>` query keys alongside `q`.

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from portfolio.api.dependencies import get_search_service
from portfolio.api.rate_limits import limiter, search_limit
from portfolio.api.response_envelope import build_object_envelope
from portfolio.api.services.search_service import SearchService

router = APIRouter(prefix="/search", tags=["search"])
SearchServiceDep = Annotated[SearchService, Depends(get_search_service)]


@router.get("/global")
@limiter.limit(search_limit)
def global_search(
    request: Request,
    service: SearchServiceDep,
    q: str | None = Query(default=None),
    limit: int = Query(default=50, ge=1, le=200),
    entities: str | None = Query(default=None),
) -> dict[str, object]:
    return service.global_search(
        q,
        limit=limit,
        entities=entities,
        filters=request.query_params.multi_items(),
    )


@router.get("/smart")
@limiter.limit(search_limit)
def smart_search(
    request: Request,
    service: SearchServiceDep,
    q: str | None = Query(default=None),
    limit: int = Query(default=20, ge=1, le=100),
) -> dict[str, object]:
    return service.smart_search(q, limit=limit)


@router.get("/autocomplete")
@limiter.limit(search_limit)
def autocomplete(request: Request, service: SearchServiceDep) -> dict[str, object]:
    return build_object_envelope(service.autocomplete())
