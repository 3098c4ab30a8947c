# This file defines blog endpoints under the versioned API path.
# It exists so readers can browse published posts and editors can manage drafts and schedules.
# Detail reads bump the view counter in a background task after the response is built.
# Unprivileged readers never see drafts or posts scheduled for the future.

from __future__ import annotations

from typing import Annotated, Literal

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request, Response, status

from portfolio.api.dependencies import get_blog_service
from portfolio.api.response_envelope import (
    build_collection_envelope,
    build_list_envelope,
    build_message_envelope,
    build_object_envelope,
)
from portfolio.api.schemas.blog_schemas import BlogCreate, BlogUpdate, CommentCreate
from portfolio.api.schemas.common import ListResponse
from portfolio.api.security import Caller, CallerDep, require_permission
from portfolio.api.services.blog_service import COMMENT_RECEIVED, BlogService

router = APIRouter(prefix="/blog", tags=["blog"])
BlogServiceDep = Annotated[BlogService, Depends(get_blog_service)]
EditorDep = Annotated[Caller, Depends(require_permission("blog", "view_all"))]


@router.get("", response_model=ListResponse)
def list_posts(request: Request, service: BlogServiceDep, caller: CallerDep) -> dict[str, object]:
    result = service.paginate(request.query_params.multi_items(), role=caller.role)
    return build_list_envelope(result)


@router.get("/featured")
def featured_posts(service: BlogServiceDep, caller: CallerDep) -> dict[str, object]:
    return build_collection_envelope(service.featured(role=caller.role))


@router.get("/popular")
def popular_posts(
    service: BlogServiceDep,
    limit: int = Query(default=10, ge=1, le=100),
    timeframe: Literal["all", "week", "month", "year"] = Query(default="all"),
) -> dict[str, object]:
    return build_collection_envelope(service.popular(limit=limit, timeframe=timeframe))


@router.get("/analytics")
def blog_analytics(service: BlogServiceDep) -> dict[str, object]:
    return build_object_envelope(service.analytics())


@router.get("/stats")
def blog_stats(service: BlogServiceDep) -> dict[str, object]:
    return build_object_envelope(service.stats())


@router.get("/search")
def search_posts(
    service: BlogServiceDep,
    caller: CallerDep,
    q: str | None = Query(default=None),
) -> dict[str, object]:
    return build_collection_envelope(service.search(q, role=caller.role))


@router.get("/all", response_model=ListResponse)
def all_posts(request: Request, service: BlogServiceDep, caller: EditorDep) -> dict[str, object]:
    return build_list_envelope(service.all_posts(request.query_params.multi_items()))


@router.get("/category/{category}", response_model=ListResponse)
def posts_by_category(
    category: str, request: Request, service: BlogServiceDep, caller: CallerDep
) -> dict[str, object]:
    result = service.by_category(category, request.query_params.multi_items(), role=caller.role)
    return build_list_envelope(result)


@router.get("/tags/{tag_name}", response_model=ListResponse)
def posts_by_tag(
    tag_name: str, request: Request, service: BlogServiceDep, caller: CallerDep
) -> dict[str, object]:
    result = service.by_tag(tag_name, request.query_params.multi_items(), role=caller.role)
    return build_list_envelope(result)


@router.get("/slug/{slug}")
def get_post_by_slug(
    slug: str,
    service: BlogServiceDep,
    caller: CallerDep,
    background_tasks: BackgroundTasks,
) -> dict[str, object]:
    post = service.by_slug(slug, role=caller.role)
    background_tasks.add_task(service.record_view, post["id"])
    return build_object_envelope(post)


@router.get("/{post_id}/related")
def related_posts(post_id: str, service: BlogServiceDep) -> dict[str, object]:
    return build_collection_envelope(service.related(post_id))


@router.get("/{post_id}")
def get_post(
    post_id: str,
    service: BlogServiceDep,
    caller: CallerDep,
    background_tasks: BackgroundTasks,
) -> dict[str, object]:
    post = service.get(post_id, role=caller.role)
    background_tasks.add_task(service.record_view, post["id"])
    return build_object_envelope(post)


@router.post("/{post_id}/like")
def like_post(post_id: str, service: BlogServiceDep) -> dict[str, object]:
    return build_object_envelope(service.like(post_id))


@router.post("/{post_id}/comments", status_code=status.HTTP_201_CREATED)
def comment_on_post(post_id: str, body: CommentCreate, service: BlogServiceDep) -> dict[str, object]:
    service.add_comment(post_id, body.to_document())
    return build_message_envelope(COMMENT_RECEIVED)


@router.post("", status_code=status.HTTP_201_CREATED)
def create_post(
    body: BlogCreate,
    service: BlogServiceDep,
    caller: Annotated[Caller, Depends(require_permission("blog", "create"))],
) -> dict[str, object]:
    return build_object_envelope(service.create(body.to_document()))


@router.put("/{post_id}")
def update_post(
    post_id: str,
    body: BlogUpdate,
    service: BlogServiceDep,
    caller: Annotated[Caller, Depends(require_permission("blog", "update"))],
) -> dict[str, object]:
    return build_object_envelope(service.update(post_id, body.to_patch()))


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_post(
    post_id: str,
    service: BlogServiceDep,
    caller: Annotated[Caller, Depends(require_permission("blog", "delete"))],
) -> Response:
    service.delete(post_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
