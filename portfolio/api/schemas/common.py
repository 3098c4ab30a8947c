# This file defines shared schema pieces reused by multiple API endpoints.
# It exists so envelope metadata, pagination, and field shapes (ids, URLs, emails, phones) stay consistent.
# Payload models use camelCase wire names, strip surrounding whitespace, and ignore unknown keys.
# Update payloads are derived from create payloads so both paths enforce the same field rules.

from __future__ import annotations

import re
from datetime import datetime
from typing import Annotated, Any

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    StringConstraints,
    create_model,
)
from pydantic.alias_generators import to_camel

from portfolio.catalog.timestamps import Timestamp

URL_PATTERN = r"^https?://.+"
EMAIL_PATTERN = r"^[\w.+-]+@[\w-]+(\.[\w-]+)*\.\w{2,}$"
PHONE_PATTERN = r"^[\+]?[0-9\-\s\(\)]+$"
DOCUMENT_ID_PATTERN = r"^[0-9a-f]{32}$"

SERVICE_CATEGORIES = (
    "Web Development",
    "Mobile Development",
    "UI/UX Design",
    "Property Management",
    "Real Estate",
    "Software Development",
    "Consulting",
    "Other",
)


def _normalize_id(value: object) -> object:
    if isinstance(value, str):
        return value.strip().lower()
    return value


def _lower(value: object) -> object:
    if isinstance(value, str):
        return value.strip().lower()
    return value


DocumentId = Annotated[str, BeforeValidator(_normalize_id), StringConstraints(pattern=DOCUMENT_ID_PATTERN)]
Url = Annotated[str, StringConstraints(strip_whitespace=True, pattern=URL_PATTERN)]
Email = Annotated[str, BeforeValidator(_lower), StringConstraints(max_length=254, pattern=EMAIL_PATTERN)]
Phone = Annotated[str, StringConstraints(strip_whitespace=True, pattern=PHONE_PATTERN)]
Tag = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
LowerTag = Annotated[str, BeforeValidator(_lower), StringConstraints(min_length=1)]


def _unique_ids(values: list[str]) -> list[str]:
    return list(dict.fromkeys(values))


DocumentIdList = Annotated[list[DocumentId], AfterValidator(_unique_ids)]


def bounded_text(max_length: int, *, min_length: int = 0) -> Any:
    return Annotated[str, StringConstraints(strip_whitespace=True, min_length=min_length, max_length=max_length)]


class CamelModel(BaseModel):
    """Base for request payloads: camelCase aliases, trimmed strings, unknown keys ignored."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        str_strip_whitespace=True,
    )

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)

    def to_patch(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, exclude_unset=True)


def partial_model(model: type[CamelModel], name: str) -> type[CamelModel]:
    """Copy of `model` with every field optional and no defaults, for partial updates."""

    fields: dict[str, Any] = {}
    for field_name, info in model.model_fields.items():
        annotation = info.annotation
        if info.metadata:
            annotation = Annotated[(annotation, *info.metadata)]
        fields[field_name] = (annotation | None, Field(default=None, alias=info.alias))
    return create_model(name, __base__=CamelModel, **fields)


class LocationPayload(CamelModel):
    address: str | None = None
    city: str | None = None
    state: str | None = None
    country: str | None = None
    zip_code: str | None = None


class PaginationMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current_page: int = Field(ge=1, alias="currentPage")
    total_pages: int = Field(ge=0, alias="totalPages")
    total_documents: int = Field(ge=0, alias="totalDocuments")
    has_next_page: bool = Field(alias="hasNextPage")
    has_prev_page: bool = Field(alias="hasPrevPage")
    limit: int = Field(ge=1)


class ListResponse(BaseModel):
    success: bool
    results: int = Field(ge=0)
    pagination: PaginationMetadata
    data: list[dict[str, Any]]


class ErrorResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = False
    error: str
    error_code: str = Field(alias="errorCode")
    details: Any | None = None
    request_id: str = Field(alias="requestId")
    timestamp: datetime


def slugify(title: str) -> str:
    slug = re.sub(r"[^a-z0-9\s-]", "", title.lower())
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    return slug.strip("-")


__all__ = [
    "CamelModel",
    "DocumentId",
    "DocumentIdList",
    "Email",
    "ErrorResponse",
    "ListResponse",
    "LocationPayload",
    "PaginationMetadata",
    "Phone",
    "SERVICE_CATEGORIES",
    "Tag",
    "LowerTag",
    "Timestamp",
    "Url",
    "bounded_text",
    "partial_model",
    "slugify",
]
