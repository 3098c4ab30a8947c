# This file defines request payloads for blog endpoints.
# It exists so post writes enforce slug shape, SEO limits, and read-time bounds before storage.
# Reader engagement payloads (comments) are validated here as well.

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import Field, StringConstraints

from portfolio.api.schemas.common import (
    CamelModel,
    DocumentId,
    DocumentIdList,
    Email,
    LowerTag,
    Timestamp,
    Url,
    bounded_text,
    partial_model,
)

BlogCategory = Literal[
    "Technology",
    "Design",
    "Business",
    "Real Estate",
    "Industry Insights",
    "Case Studies",
    "Tutorials",
    "News",
    "Other",
]
BlogStatus = Literal["Draft", "Published", "Archived"]
Slug = Annotated[str, StringConstraints(strip_whitespace=True, to_lower=True, pattern=r"^[a-z0-9-]+$")]


class SeoMeta(CamelModel):
    title: bounded_text(60) | None = None
    description: bounded_text(160) | None = None
    keywords: bounded_text(255) | None = None
    canonical_url: Url | None = None


class SocialMedia(CamelModel):
    twitter_card: str | None = None
    og_image: Url | None = None
    og_description: bounded_text(300) | None = None


class BlogCreate(CamelModel):
    title: bounded_text(200, min_length=1)
    slug: Slug | None = None
    author: DocumentId
    content: bounded_text(200000, min_length=1)
    excerpt: bounded_text(300) | None = None
    thumbnail: Url | None = None
    images: list[Url] = Field(default_factory=list)
    tags: list[LowerTag] = Field(default_factory=list)
    category: BlogCategory
    status: BlogStatus = "Draft"
    read_time_minutes: int | None = Field(default=None, ge=1, le=120)
    published_date: Timestamp | None = None
    featured: bool = False
    seo_meta: SeoMeta | None = None
    social_media: SocialMedia | None = None
    related_posts: DocumentIdList = Field(default_factory=list)


BlogUpdate = partial_model(BlogCreate, "BlogUpdate")


class CommentCreate(CamelModel):
    name: bounded_text(100, min_length=1)
    email: Email
    comment: bounded_text(1000, min_length=1)
