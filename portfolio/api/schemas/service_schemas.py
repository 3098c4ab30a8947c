# This file defines request payloads for service catalog endpoints.
# It exists so create and update calls enforce the same category, URL, and length rules.
# Benefits and process steps are validated as nested objects rather than free-form JSON.

from __future__ import annotations

from typing import Literal

from pydantic import Field

from portfolio.api.schemas.common import (
    CamelModel,
    DocumentIdList,
    Tag,
    Url,
    bounded_text,
    partial_model,
)

ServiceCategory = Literal[
    "Web Development",
    "Mobile Development",
    "UI/UX Design",
    "Property Management",
    "Real Estate",
    "Software Development",
    "Consulting",
    "Other",
]


class ServiceBenefit(CamelModel):
    title: bounded_text(200, min_length=1)
    description: bounded_text(1000) | None = None


class ServiceProcessStep(CamelModel):
    step_number: int = Field(ge=1)
    title: bounded_text(200, min_length=1)
    description: bounded_text(1000) | None = None


class ServiceCreate(CamelModel):
    name: bounded_text(100, min_length=1)
    description: bounded_text(2000, min_length=1)
    short_description: bounded_text(200) | None = None
    icon: Url | None = None
    images: list[Url] = Field(default_factory=list)
    videos: list[Url] = Field(default_factory=list)
    benefits: list[ServiceBenefit] = Field(default_factory=list)
    process: list[ServiceProcessStep] = Field(default_factory=list)
    category: ServiceCategory
    price_range: bounded_text(100) = "Custom Quote"
    related_projects: DocumentIdList = Field(default_factory=list)
    tags: list[Tag] = Field(default_factory=list)
    featured: bool = False


ServiceUpdate = partial_model(ServiceCreate, "ServiceUpdate")
