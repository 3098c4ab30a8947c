# This file implements the generic resource service shared by every portfolio entity.
# It exists so list, detail, featured, stats, search, and CRUD behave the same across collections.
# Entity services subclass it with a descriptor and override hooks for their own write rules.
# Store failures are translated here into API errors before they reach routers.

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from datetime import datetime
from typing import Any, ClassVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from portfolio.api.api_config import ApiConfig
from portfolio.api.db_access import DocumentStore
from portfolio.catalog.descriptors import EntityDescriptor, PopulateSpec
from portfolio.catalog.population import populate
from portfolio.catalog.query_builder import (
    ParamItems,
    QueryBuilder,
    apply_projection,
    validate_document_id,
)
from portfolio.catalog.query_plan import (
    AllOf,
    AnyOf,
    COLUMN_FIELDS,
    Condition,
    FieldKind,
    FieldSpec,
    Op,
    QueryResult,
)
from portfolio.catalog.timestamps import utc_now
from portfolio.common.errors import ConflictError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

Clause = Condition | AllOf | AnyOf
Document = dict[str, Any]

FEATURED_LIMIT = 10


def document_body(document: Document) -> Document:
    """Strip store-managed keys so the rest can be written back."""

    return {key: value for key, value in document.items() if key not in COLUMN_FIELDS}


class ResourceService:
    """Descriptor-driven reads and writes for one collection."""

    descriptor: ClassVar[EntityDescriptor]

    def __init__(self, *, config: ApiConfig, store: DocumentStore) -> None:
        self.config = config
        self.store = store
        self.builder = QueryBuilder(
            self.descriptor,
            default_limit=config.default_page_size,
            max_limit=config.max_page_size,
        )

    @property
    def collection(self) -> str:
        return self.descriptor.collection

    @property
    def label(self) -> str:
        return self.descriptor.label

    def not_found(self) -> NotFoundError:
        return NotFoundError(f"{self.label} not found")

    # Condition helpers

    def field(self, name: str) -> FieldSpec:
        spec = self.descriptor.resolve_field(name)
        if spec is None:
            raise KeyError(f"{self.label} has no field {name!r}")
        return spec

    def where(self, name: str, op: Op, value: Any = None) -> Condition:
        return Condition(self.field(name), op, value)

    def matches(self, name: str, text: str) -> Condition:
        """Case-insensitive substring match on one field."""

        spec = self.descriptor.resolve_field(name) or FieldSpec(name, FieldKind.STRING)
        return Condition(spec, Op.REGEX, text)

    def visible(self, role: str | None, now: datetime | None = None) -> tuple[Condition, ...]:
        return self.descriptor.overlay(now or utc_now(), role=role)

    # Reads

    def paginate(
        self,
        params: ParamItems,
        *,
        role: str | None = None,
        extra_conditions: Iterable[Clause] = (),
        default_sort: str | None = None,
        default_limit: int | None = None,
        populate_specs: Sequence[PopulateSpec] | None = None,
        apply_overlay: bool = True,
    ) -> QueryResult:
        plan = self.builder.build(
            params,
            role=role,
            apply_overlay=apply_overlay,
            extra_conditions=extra_conditions,
            default_sort=default_sort,
            default_limit=default_limit,
        )
        items = self.store.find(self.collection, plan)
        total = self.store.count(self.collection, plan.conditions)
        specs = self.descriptor.list_populate if populate_specs is None else populate_specs
        populate(self.store, items, specs)
        return QueryResult(
            items=[apply_projection(item, plan.fields) for item in items],
            total_matching=total,
            page=plan.page,
            limit=plan.limit,
        )

    def find(
        self,
        conditions: Iterable[Clause] = (),
        *,
        role: str | None = None,
        sort: str | None = None,
        limit: int | None = None,
        populate_specs: Sequence[PopulateSpec] | None = None,
        fields: Sequence[str] | None = None,
        apply_overlay: bool = True,
    ) -> list[Document]:
        """Unpaginated shortcut read; the visibility overlay applies unless disabled."""

        overlay = self.visible(role) if apply_overlay else ()
        clauses = (*conditions, *overlay)
        items = self.store.find_all(
            self.collection,
            clauses,
            sort=self.builder.sort_keys(sort),
            limit=limit,
        )
        specs = self.descriptor.list_populate if populate_specs is None else populate_specs
        populate(self.store, items, specs)
        if fields:
            items = [apply_projection(item, tuple(fields)) for item in items]
        return items

    def require(self, document_id: str) -> Document:
        """Stored document without overlay or population; NotFound when absent."""

        document = self.store.get(self.collection, validate_document_id(document_id))
        if document is None:
            raise self.not_found()
        return document

    def get(self, document_id: str, *, role: str | None = None) -> Document:
        identifier = validate_document_id(document_id)
        conditions = (self.where("id", Op.EQ, identifier), *self.visible(role))
        document = self.store.find_one(self.collection, conditions)
        if document is None:
            raise self.not_found()
        populate(self.store, [document], self.descriptor.detail_populate)
        return document

    def featured(self, *, role: str | None = None, limit: int = FEATURED_LIMIT) -> list[Document]:
        if not self.descriptor.has_featured:
            return []
        return self.find(
            [self.where("featured", Op.EQ, True)],
            role=role,
            sort="-createdAt",
            limit=limit,
        )

    def stats(self) -> dict[str, int]:
        total = self.store.count(self.collection)
        featured = (
            self.store.count(self.collection, [self.where("featured", Op.EQ, True)])
            if self.descriptor.has_featured
            else 0
        )
        return {"total": total, "featured": featured}

    def search(self, query: str | None, *, role: str | None = None) -> list[Document]:
        if query is None or not query.strip():
            raise ValidationError("Search query is required")
        condition = self.builder.search_condition(query)
        return self.find(
            [condition] if condition is not None else [],
            role=role,
            limit=self.config.max_page_size,
        )

    def record_view(self, document_id: str) -> None:
        """Bump `views`; failures are logged and never reach the caller."""

        try:
            self.store.increment(self.collection, document_id, "views")
        except SQLAlchemyError:
            logger.warning("Failed to record view for %s %s", self.label, document_id, exc_info=True)

    # Writes

    def prepare(self, body: Document, *, existing: Document | None) -> Document:
        """Entity hook applied to the merged body before every write."""

        return body

    def unique_value(self, body: Document) -> str | None:
        field_name = self.descriptor.unique_field
        if field_name is None:
            return None
        value = body.get(field_name)
        return str(value) if value not in (None, "") else None

    def ensure_unique(self, field_name: str, value: Any, *, exclude_id: str | None = None) -> None:
        if value in (None, ""):
            return
        conditions: list[Clause] = [self.where(field_name, Op.EQ, value)]
        if exclude_id is not None:
            conditions.append(self.where("id", Op.NE, exclude_id))
        if self.store.exists(self.collection, conditions):
            raise self.conflict(field_name)

    def conflict(self, field_name: str | None = None) -> ConflictError:
        name = field_name or self.descriptor.unique_field or "key"
        return ConflictError(
            f"{self.label} with this {name} already exists",
            details={"field": name},
        )

    def create(self, body: Document) -> Document:
        prepared = self.prepare(dict(body), existing=None)
        try:
            created = self.store.insert(self.collection, prepared, unique_key=self.unique_value(prepared))
        except IntegrityError as exc:
            raise self.conflict() from exc
        logger.info("Created %s %s", self.label, created["id"])
        return created

    def update(self, document_id: str, patch: Document) -> Document:
        existing = self.require(document_id)
        merged = {**document_body(existing), **patch}
        prepared = self.prepare(merged, existing=existing)
        try:
            updated = self.store.replace(
                self.collection,
                existing["id"],
                prepared,
                unique_key=self.unique_value(prepared),
            )
        except IntegrityError as exc:
            raise self.conflict() from exc
        if updated is None:
            raise self.not_found()
        return updated

    def delete(self, document_id: str) -> None:
        if not self.store.delete(self.collection, validate_document_id(document_id)):
            raise self.not_found()
        logger.info("Deleted %s %s", self.label, document_id)

    def modify(self, document_id: str, change: Callable[[Document], Document]) -> Document:
        updated = self.store.modify(self.collection, validate_document_id(document_id), change)
        if updated is None:
            raise self.not_found()
        return updated
