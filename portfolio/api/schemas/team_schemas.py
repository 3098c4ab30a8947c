# This file defines request payloads for team member and team endpoints.
# It exists so profile writes enforce social-link hosts, award years, and nested history entries.
# Team payloads keep the lead reference alongside the member list.

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated

from pydantic import AfterValidator, Field, StringConstraints

from portfolio.api.schemas.common import (
    CamelModel,
    DocumentId,
    DocumentIdList,
    Email,
    Phone,
    Tag,
    Timestamp,
    Url,
    bounded_text,
    partial_model,
)

LinkedInUrl = Annotated[str, StringConstraints(strip_whitespace=True, pattern=r"^https?://(www\.)?linkedin\.com/")]
GitHubUrl = Annotated[str, StringConstraints(strip_whitespace=True, pattern=r"^https?://(www\.)?github\.com/")]
TwitterUrl = Annotated[
    str, StringConstraints(strip_whitespace=True, pattern=r"^https?://(www\.)?(twitter|x)\.com/")
]


def _award_year(value: int) -> int:
    latest = datetime.now(tz=UTC).year + 1
    if not 1900 <= value <= latest:
        raise ValueError(f"year must be between 1900 and {latest}")
    return value


AwardYear = Annotated[int, AfterValidator(_award_year)]


class SocialLinks(CamelModel):
    linkedin: LinkedInUrl | None = None
    github: GitHubUrl | None = None
    twitter: TwitterUrl | None = None
    portfolio: Url | None = None


class Certificate(CamelModel):
    name: bounded_text(200, min_length=1)
    url: Url | None = None
    issue_date: Timestamp | None = None


class EducationEntry(CamelModel):
    degree: bounded_text(200, min_length=1)
    institution: bounded_text(200, min_length=1)
    start_date: Timestamp | None = None
    end_date: Timestamp | None = None
    description: bounded_text(1000) | None = None
    certificates: list[Certificate] = Field(default_factory=list)
    certificate_images: list[Url] = Field(default_factory=list)


class ExperienceEntry(CamelModel):
    job_title: bounded_text(200, min_length=1)
    company_name: bounded_text(200, min_length=1)
    start_date: Timestamp | None = None
    end_date: Timestamp | None = None
    description: bounded_text(2000) | None = None
    achievements: list[Tag] = Field(default_factory=list)
    images: list[Url] = Field(default_factory=list)


class Award(CamelModel):
    name: bounded_text(200, min_length=1)
    year: AwardYear | None = None
    issuer: bounded_text(200) | None = None
    description: bounded_text(1000) | None = None


class TeamMemberCreate(CamelModel):
    first_name: bounded_text(50, min_length=1)
    last_name: bounded_text(50, min_length=1)
    email: Email | None = None
    phone: Phone | None = None
    position: bounded_text(100, min_length=1)
    bio: bounded_text(1000) | None = None
    profile_image: Url | None = None
    social_links: SocialLinks | None = None
    education: list[EducationEntry] = Field(default_factory=list)
    experience: list[ExperienceEntry] = Field(default_factory=list)
    awards: list[Award] = Field(default_factory=list)
    current_team: DocumentId | None = None
    related_projects: DocumentIdList = Field(default_factory=list)
    skills: list[Tag] = Field(default_factory=list)
    featured: bool = False


TeamMemberUpdate = partial_model(TeamMemberCreate, "TeamMemberUpdate")


class TeamCreate(CamelModel):
    team_name: bounded_text(100, min_length=1)
    description: bounded_text(1000) | None = None
    members: DocumentIdList = Field(default_factory=list)
    related_projects: DocumentIdList = Field(default_factory=list)
    tags: list[Tag] = Field(default_factory=list)
    team_lead: DocumentId | None = None
    specialties: list[Tag] = Field(default_factory=list)
    is_active: bool = True


TeamUpdate = partial_model(TeamCreate, "TeamUpdate")
