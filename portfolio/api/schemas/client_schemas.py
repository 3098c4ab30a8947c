# This file defines request payloads for client endpoints.
# It exists so client writes enforce company size, partnership, contact, and URL rules in one place.

from __future__ import annotations

from typing import Literal

from pydantic import Field

from portfolio.api.schemas.common import (
    CamelModel,
    DocumentIdList,
    Email,
    LocationPayload,
    Phone,
    Timestamp,
    Url,
    bounded_text,
    partial_model,
)
from portfolio.catalog.timestamps import now_timestamp

CompanySize = Literal[
    "Startup (1-10)",
    "Small (11-50)",
    "Medium (51-200)",
    "Large (201-1000)",
    "Enterprise (1000+)",
    "Other",
]
PartnershipStatus = Literal["Active", "Completed", "On Hold", "Terminated"]
PartnershipType = Literal["One-time Project", "Ongoing", "Retainer", "Partnership"]


class ContactPerson(CamelModel):
    name: bounded_text(100) | None = None
    title: bounded_text(100) | None = None
    email: Email | None = None
    phone: Phone | None = None


class Partnership(CamelModel):
    start_date: Timestamp = Field(default_factory=now_timestamp)
    end_date: Timestamp | None = None
    status: PartnershipStatus = "Active"
    type: PartnershipType = "One-time Project"


class ClientCreate(CamelModel):
    name: bounded_text(100, min_length=1)
    logo: Url | None = None
    industry: bounded_text(100) | None = None
    website: Url | None = None
    description: bounded_text(1000) | None = None
    contact_person: ContactPerson | None = None
    contact_email: Email | None = None
    contact_phone: Phone | None = None
    company_size: CompanySize | None = None
    location: LocationPayload | None = None
    partnership: Partnership = Field(default_factory=Partnership)
    projects: DocumentIdList = Field(default_factory=list)
    featured: bool = False


ClientUpdate = partial_model(ClientCreate, "ClientUpdate")
