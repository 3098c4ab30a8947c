# This file defines request payloads for project endpoints.
# It exists so project writes enforce category, status, priority, and coordinate bounds in one place.
# Nested team assignments, testimonials, challenges, and results are validated as typed objects.

from __future__ import annotations

from typing import Literal

from pydantic import Field

from portfolio.api.schemas.common import (
    CamelModel,
    DocumentId,
    DocumentIdList,
    Tag,
    Timestamp,
    Url,
    bounded_text,
    partial_model,
)

ProjectCategory = Literal[
    "Website",
    "Mobile App",
    "Web App",
    "E-commerce",
    "Residential",
    "Commercial",
    "Industrial",
    "Software",
    "Design",
    "Consulting",
    "Other",
]
ProjectStatus = Literal["Planning", "In Progress", "Review", "Completed", "On Hold", "Cancelled"]
ProjectPriority = Literal["Low", "Medium", "High", "Critical"]


class ProjectTeamAssignment(CamelModel):
    member: DocumentId
    role: bounded_text(100, min_length=1)
    contribution: bounded_text(500) | None = None


class ProjectCoordinates(CamelModel):
    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)


class ProjectLocation(CamelModel):
    address: str | None = None
    city: str | None = None
    state: str | None = None
    country: str | None = None
    zip_code: str | None = None
    coordinates: ProjectCoordinates | None = None


class ProjectTestimonial(CamelModel):
    client_name: bounded_text(100) | None = None
    testimonial_text: bounded_text(1000) | None = None
    rating: int | None = Field(default=None, ge=1, le=5)
    date: Timestamp | None = None


class ProjectChallenge(CamelModel):
    challenge: bounded_text(1000, min_length=1)
    solution: bounded_text(1000) | None = None


class ProjectResult(CamelModel):
    metric: bounded_text(200, min_length=1)
    value: bounded_text(200, min_length=1)
    description: bounded_text(500) | None = None


class ProjectCreate(CamelModel):
    title: bounded_text(200, min_length=1)
    short_description: bounded_text(300) | None = None
    full_description: bounded_text(20000, min_length=1)
    category: ProjectCategory
    client: DocumentId | None = None
    team_members: list[ProjectTeamAssignment] = Field(default_factory=list)
    services_used: DocumentIdList = Field(default_factory=list)
    start_date: Timestamp
    completion_date: Timestamp | None = None
    estimated_completion_date: Timestamp | None = None
    status: ProjectStatus = "Planning"
    priority: ProjectPriority = "Medium"
    location: ProjectLocation | None = None
    thumbnail: Url | None = None
    images: list[Url] = Field(default_factory=list)
    videos: list[Url] = Field(default_factory=list)
    live_link: Url | None = None
    case_study_link: Url | None = None
    testimonials: list[ProjectTestimonial] = Field(default_factory=list)
    budget: bounded_text(100) = "Confidential"
    technologies: list[Tag] = Field(default_factory=list)
    tags: list[Tag] = Field(default_factory=list)
    challenges: list[ProjectChallenge] = Field(default_factory=list)
    results: list[ProjectResult] = Field(default_factory=list)
    featured: bool = False


ProjectUpdate = partial_model(ProjectCreate, "ProjectUpdate")
