# This file defines request payloads for testimonial endpoints.
# It exists so public submissions and editor updates share rating, source, and category rules.

from __future__ import annotations

from typing import Literal

from pydantic import Field

from portfolio.api.schemas.common import (
    CamelModel,
    DocumentId,
    Email,
    Tag,
    Timestamp,
    Url,
    bounded_text,
    partial_model,
)
from portfolio.api.schemas.service_schemas import ServiceCategory

TestimonialSource = Literal[
    "Website Form",
    "Email",
    "Phone",
    "Meeting",
    "Social Media",
    "Third Party",
    "Other",
]


class TestimonialLocation(CamelModel):
    city: str | None = None
    state: str | None = None
    country: str | None = None


class TestimonialCreate(CamelModel):
    client_name: bounded_text(100, min_length=1)
    client_company: bounded_text(100) | None = None
    client_designation: bounded_text(100) | None = None
    client_image: Url | None = None
    client_email: Email | None = None
    quote: bounded_text(1000, min_length=1)
    rating: int = Field(ge=1, le=5)
    featured: bool = False
    approved: bool = False
    related_project: DocumentId | None = None
    client: DocumentId | None = None
    service_category: ServiceCategory | None = None
    location: TestimonialLocation | None = None
    date_given: Timestamp | None = None
    source: TestimonialSource = "Website Form"
    verified: bool = False
    tags: list[Tag] = Field(default_factory=list)


TestimonialUpdate = partial_model(TestimonialCreate, "TestimonialUpdate")
