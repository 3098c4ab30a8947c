# This file implements blog post writes, public lookups, and reader engagement.
# It exists so slug, excerpt, and read-time derivation happen in one place before storage.
# Unprivileged readers only ever see published posts whose publish date has passed.
# Analytics cover published posts only.

from __future__ import annotations

import math
import re
from datetime import timedelta
from typing import Any

from portfolio.api.schemas.common import slugify
from portfolio.api.services.resource_service import Document, ResourceService
from portfolio.catalog.analytics import (
    AggregationSpec,
    Measure,
    average,
    monthly_trend,
    run_spec,
)
from portfolio.catalog.descriptors import BLOGS, PopulateSpec, published_blog_overlay
from portfolio.catalog.population import populate
from portfolio.catalog.query_builder import ParamItems, validate_document_id
from portfolio.catalog.query_plan import AnyOf, Op, QueryResult
from portfolio.catalog.timestamps import format_timestamp, now_timestamp, utc_now
from portfolio.common.errors import NotFoundError

EXCERPT_LENGTH = 200
WORDS_PER_MINUTE = 200
TAXONOMY_PAGE_SIZE = 10
POPULAR_LIMIT = 10
RELATED_LIMIT = 5
TAG_LIMIT = 20

TIMEFRAME_DAYS = {"week": 7, "month": 30, "year": 365}

POPULAR_FIELDS = (
    "title",
    "slug",
    "thumbnail",
    "views",
    "likes",
    "publishedDate",
    "category",
    "readTimeMinutes",
    "author",
)
RELATED_FIELDS = ("title", "slug", "thumbnail", "publishedDate", "category", "readTimeMinutes", "author")
AUTHOR_NAME = (PopulateSpec("author", "team_members", ("firstName", "lastName")),)

COMMENT_RECEIVED = "Comment submitted successfully. It will be visible after approval."

_TAG_RE = re.compile(r"<[^>]*>")


def make_excerpt(content: str) -> str:
    text = _TAG_RE.sub("", content)
    return text[:EXCERPT_LENGTH] + ("..." if len(text) > EXCERPT_LENGTH else "")


def read_time_minutes(content: str) -> int:
    return max(1, math.ceil(len(content.split()) / WORDS_PER_MINUTE))


class BlogService(ResourceService):
    descriptor = BLOGS

    def not_found(self) -> NotFoundError:
        return NotFoundError("Blog post not found")

    def prepare(self, body: Document, *, existing: Document | None) -> Document:
        if not body.get("slug") and body.get("title"):
            body["slug"] = slugify(body["title"])
        self.ensure_unique("slug", body.get("slug"), exclude_id=existing["id"] if existing else None)
        content = body.get("content") or ""
        if not body.get("excerpt") and content:
            body["excerpt"] = make_excerpt(content)
        if not body.get("readTimeMinutes") and content:
            body["readTimeMinutes"] = read_time_minutes(content)
        if body.get("status") == "Published" and not body.get("publishedDate"):
            body["publishedDate"] = now_timestamp()
        body.setdefault("views", 0)
        body.setdefault("likes", 0)
        body.setdefault("comments", [])
        return body

    # Reader lookups

    def by_slug(self, slug: str, *, role: str | None = None) -> Document:
        document = self.store.find_one(
            self.collection,
            (self.where("slug", Op.EQ, slug.strip().lower()), *self.visible(role)),
        )
        if document is None:
            raise self.not_found()
        self.populate_detail(document)
        return document

    def populate_detail(self, document: Document) -> Document:
        populate(self.store, [document], self.descriptor.detail_populate)
        return document

    def _taxonomy_page(self, params: ParamItems, condition: Any, *, role: str | None) -> QueryResult:
        return self.paginate(
            params,
            role=role,
            extra_conditions=(condition,),
            default_sort="-publishedDate",
            default_limit=TAXONOMY_PAGE_SIZE,
        )

    def by_category(self, category: str, params: ParamItems, *, role: str | None = None) -> QueryResult:
        return self._taxonomy_page(params, self.matches("category", category), role=role)

    def by_tag(self, tag: str, params: ParamItems, *, role: str | None = None) -> QueryResult:
        return self._taxonomy_page(params, self.matches("tags", tag), role=role)

    def all_posts(self, params: ParamItems) -> QueryResult:
        return self.paginate(params, apply_overlay=False)

    def popular(self, *, limit: int = POPULAR_LIMIT, timeframe: str = "all") -> list[Document]:
        now = utc_now()
        conditions = list(published_blog_overlay(now))
        days = TIMEFRAME_DAYS.get(timeframe)
        if days is not None:
            conditions.append(self.where("publishedDate", Op.GTE, format_timestamp(now - timedelta(days=days))))
        return self.find(conditions, apply_overlay=False, sort="-views,-likes", limit=limit, fields=POPULAR_FIELDS)

    def related(self, post_id: str, *, limit: int = RELATED_LIMIT) -> list[Document]:
        current = self.require(post_id)
        branches = [self.where("category", Op.EQ, current.get("category"))]
        if current.get("tags"):
            branches.append(self.where("tags", Op.IN, tuple(current["tags"])))
        conditions = [
            self.where("id", Op.NE, current["id"]),
            *published_blog_overlay(utc_now()),
            AnyOf(tuple(branches)),
        ]
        return self.find(
            conditions,
            apply_overlay=False,
            sort="-publishedDate",
            limit=limit,
            populate_specs=AUTHOR_NAME,
            fields=RELATED_FIELDS,
        )

    # Engagement

    def like(self, post_id: str) -> dict[str, int]:
        updated = self.store.increment(self.collection, validate_document_id(post_id), "likes")
        if updated is None:
            raise self.not_found()
        return {"likes": updated["likes"]}

    def add_comment(self, post_id: str, comment: dict[str, Any]) -> None:
        entry = {**comment, "approved": False, "createdAt": now_timestamp()}
        if self.store.push(self.collection, validate_document_id(post_id), "comments", entry) is None:
            raise self.not_found()

    # Analytics

    def author_productivity(self, published: list[Document]) -> list[dict[str, Any]]:
        buckets = run_spec(
            published,
            AggregationSpec(
                name="authorProductivity",
                key="author",
                measures=(
                    Measure("totalViews", "sum", "views"),
                    Measure("avgViews", "round_avg", "views"),
                ),
            ),
        )
        authors = self.store.get_many("team_members", [bucket["_id"] for bucket in buckets])
        productivity = []
        for bucket in buckets:
            author = authors.get(bucket["_id"])
            if author is None:
                continue
            productivity.append(
                {
                    "_id": bucket["_id"],
                    "authorName": f"{author.get('firstName', '')} {author.get('lastName', '')}".strip(),
                    "postCount": bucket["count"],
                    "totalViews": bucket["totalViews"],
                    "avgViews": bucket["avgViews"],
                }
            )
        return productivity

    @staticmethod
    def engagement(published: list[Document]) -> dict[str, Any]:
        if not published:
            return {}

        def _total(field_name: str) -> int:
            return sum(int(post.get(field_name) or 0) for post in published)

        return {
            "totalPosts": len(published),
            "totalViews": _total("views"),
            "totalLikes": _total("likes"),
            "totalComments": sum(
                1
                for post in published
                for comment in post.get("comments") or []
                if isinstance(comment, dict) and comment.get("approved") is True
            ),
            "avgViews": average((post.get("views") or 0 for post in published), digits=2),
            "avgLikes": average((post.get("likes") or 0 for post in published), digits=2),
            "avgReadTime": average((post.get("readTimeMinutes") for post in published), digits=1),
        }

    def analytics(self) -> dict[str, Any]:
        posts = self.store.scan(self.collection)
        published = [post for post in posts if post.get("status") == "Published"]
        views = Measure("totalViews", "sum", "views")
        return {
            "total": len(posts),
            "published": len(published),
            "drafts": sum(1 for post in posts if post.get("status") == "Draft"),
            "categoryDistribution": run_spec(
                published,
                AggregationSpec(
                    name="category",
                    key="category",
                    measures=(views, Measure("avgViews", "avg", "views")),
                ),
            ),
            "authorProductivity": self.author_productivity(published),
            "monthlyTrend": run_spec(
                published,
                monthly_trend("monthlyTrend", "publishedDate", measures=(Measure("views", "sum", "views"),)),
            ),
            "popularTags": run_spec(
                published,
                AggregationSpec(name="tags", key="tags", explode=True, measures=(views,), limit=TAG_LIMIT),
            ),
            "engagement": self.engagement(published),
        }
