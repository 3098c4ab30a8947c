# This file defines request payloads for contact submission endpoints.
# It exists so the public form and the internal workflow endpoints validate enums the same way.
# Workflow payloads (status, assignment, notes, bulk update) are kept small and explicit.

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import Field, StringConstraints

from portfolio.api.schemas.common import (
    CamelModel,
    DocumentId,
    Email,
    Tag,
    Timestamp,
    bounded_text,
    partial_model,
)
from portfolio.api.schemas.service_schemas import ServiceCategory

InquiryType = Literal[
    "General Inquiry",
    "Project Quote",
    "Partnership",
    "Support",
    "Feedback",
    "Career",
    "Media",
    "Other",
]
Budget = Literal[
    "< $5,000",
    "$5,000 - $15,000",
    "$15,000 - $50,000",
    "$50,000 - $100,000",
    "> $100,000",
    "Not Sure",
]
Timeline = Literal["ASAP", "1-3 months", "3-6 months", "6+ months", "Flexible"]
ContactStatus = Literal[
    "New",
    "Viewed",
    "In Progress",
    "Responded",
    "Follow-up Required",
    "Converted",
    "Archived",
    "Spam",
]
ContactPriority = Literal["Low", "Medium", "High", "Urgent"]
ContactSource = Literal[
    "Website Contact Form",
    "Landing Page",
    "Social Media",
    "Referral",
    "Google Ads",
    "Email Campaign",
    "Other",
]
ContactPhone = Annotated[str, StringConstraints(strip_whitespace=True, pattern=r"^[\+]?[1-9][\d]{0,15}$")]


class ContactCreate(CamelModel):
    name: bounded_text(100, min_length=1)
    email: Email
    phone: ContactPhone | None = None
    company: bounded_text(100) | None = None
    subject: bounded_text(200) | None = None
    message: bounded_text(2000, min_length=1)
    inquiry_type: InquiryType = "General Inquiry"
    interested_services: list[ServiceCategory] = Field(default_factory=list)
    budget: Budget | None = None
    timeline: Timeline | None = None
    source: ContactSource = "Website Contact Form"
    is_subscribed_to_newsletter: bool = False


class ContactAdminFields(ContactCreate):
    status: ContactStatus = "New"
    priority: ContactPriority = "Medium"
    assigned_to: DocumentId | None = None
    follow_up_date: Timestamp | None = None
    response_date: Timestamp | None = None
    conversion_date: Timestamp | None = None
    tags: list[Tag] = Field(default_factory=list)


ContactUpdate = partial_model(ContactAdminFields, "ContactUpdate")


class ContactStatusUpdate(CamelModel):
    status: ContactStatus
    response_date: Timestamp | None = None
    conversion_date: Timestamp | None = None


class ContactAssignment(CamelModel):
    assigned_to: DocumentId


class ContactNoteCreate(CamelModel):
    note: bounded_text(1000, min_length=1)


class ContactBulkUpdate(CamelModel):
    ids: list[DocumentId] = Field(min_length=1)
    updates: ContactUpdate
