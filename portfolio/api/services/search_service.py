# This file implements cross-entity search, suggestions, and autocomplete data.
# It exists so one query can fan out to several collections without coupling their services.
# Sub-queries run in a bounded thread pool; one failing entity degrades to an empty list.
# Visibility overlays apply to every sub-query regardless of the caller.

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any

from portfolio.api.api_config import ApiConfig
from portfolio.api.db_access import DocumentStore
from portfolio.catalog.analytics import AggregationSpec, distinct_values, run_spec
from portfolio.catalog.descriptors import (
    BLOGS,
    PROJECTS,
    SERVICES,
    TEAM_MEMBERS,
    TESTIMONIALS,
    EntityDescriptor,
    PopulateSpec,
)
from portfolio.catalog.population import populate, select_fields
from portfolio.catalog.query_builder import QueryBuilder
from portfolio.catalog.query_plan import AnyOf, Condition, Op
from portfolio.catalog.timestamps import utc_now
from portfolio.common.errors import InternalError, ValidationError

logger = logging.getLogger(__name__)

MIN_QUERY_LENGTH = 2
DEFAULT_LIMIT = 50
SMART_LIMIT = 20
SUGGESTION_LIMIT = 10
SKILL_SUGGESTIONS = 5
AUTOCOMPLETE_SKILLS = 50


@dataclass(frozen=True)
class SearchTarget:
    """How one entity takes part in cross-entity search."""

    key: str
    result_key: str
    descriptor: EntityDescriptor
    search_fields: tuple[str, ...]
    select: tuple[str, ...]
    populate: tuple[PopulateSpec, ...] = ()


SEARCH_TARGETS: Mapping[str, SearchTarget] = {
    target.key: target
    for target in (
        SearchTarget(
            key="services",
            result_key="services",
            descriptor=SERVICES,
            search_fields=("name", "description", "category", "tags"),
            select=("name", "description", "category", "icon", "featured"),
        ),
        SearchTarget(
            key="projects",
            result_key="projects",
            descriptor=PROJECTS,
            search_fields=("title", "shortDescription", "fullDescription", "category", "tags", "technologies"),
            select=("title", "shortDescription", "category", "thumbnail", "featured", "client"),
            populate=(PopulateSpec("client", "clients", ("name", "logo")),),
        ),
        SearchTarget(
            key="team-members",
            result_key="teamMembers",
            descriptor=TEAM_MEMBERS,
            search_fields=("firstName", "lastName", "position", "skills", "bio"),
            select=("firstName", "lastName", "position", "profileImage", "skills", "featured"),
        ),
        SearchTarget(
            key="blog",
            result_key="blog",
            descriptor=BLOGS,
            search_fields=("title", "content", "excerpt", "tags"),
            select=("title", "excerpt", "thumbnail", "publishedDate", "category", "featured", "author"),
            populate=(PopulateSpec("author", "team_members", ("firstName", "lastName")),),
        ),
        SearchTarget(
            key="testimonials",
            result_key="testimonials",
            descriptor=TESTIMONIALS,
            search_fields=("clientName", "clientCompany", "quote", "serviceCategory"),
            select=("clientName", "clientCompany", "quote", "rating", "serviceCategory", "featured"),
        ),
    )
}
DEFAULT_ENTITIES = tuple(SEARCH_TARGETS)


def normalize_query(query: str | None) -> str:
    text = (query or "").strip()
    if len(text) < MIN_QUERY_LENGTH:
        raise ValidationError("Search query must be at least 2 characters long")
    return text


def parse_entities(raw: str | Sequence[str] | None) -> tuple[str, ...]:
    if raw is None or raw == "":
        return DEFAULT_ENTITIES
    names = raw.split(",") if isinstance(raw, str) else list(raw)
    entities = tuple(dict.fromkeys(name.strip() for name in names if name.strip()))
    unknown = [name for name in entities if name not in SEARCH_TARGETS]
    if unknown:
        raise ValidationError(
            f"Unknown search entities: {', '.join(unknown)}",
            details={"allowed": list(DEFAULT_ENTITIES)},
        )
    return entities or DEFAULT_ENTITIES


def split_filters(params: Iterable[tuple[str, str]]) -> dict[str, dict[str, list[str]]]:
    """Group `<entity>.<field>` query keys by entity."""

    grouped: dict[str, dict[str, list[str]]] = {}
    for key, value in params:
        entity, _, field_key = key.partition(".")
        if not field_key:
            continue
        if entity not in SEARCH_TARGETS:
            raise ValidationError(f"Unknown search entity in filter '{key}'")
        grouped.setdefault(entity, {}).setdefault(field_key, []).append(value)
    return grouped


def _distinct(values: Iterable[Any]) -> list[Any]:
    return [value for value in dict.fromkeys(values) if value not in (None, "")]


def build_suggestions(results: Mapping[str, list[dict[str, Any]]]) -> list[dict[str, str]]:
    suggestions: list[dict[str, str]] = []
    for category in _distinct(service.get("category") for service in results.get("services", [])):
        suggestions.append({"type": "service-category", "text": category, "category": "Service Categories"})
    skills = _distinct(skill for member in results.get("teamMembers", []) for skill in member.get("skills") or [])
    for skill in skills[:SKILL_SUGGESTIONS]:
        suggestions.append({"type": "skill", "text": skill, "category": "Team Skills"})
    for category in _distinct(project.get("category") for project in results.get("projects", [])):
        suggestions.append({"type": "project-category", "text": category, "category": "Project Categories"})
    for category in _distinct(post.get("category") for post in results.get("blog", [])):
        suggestions.append({"type": "blog-category", "text": category, "category": "Blog Topics"})
    return suggestions[:SUGGESTION_LIMIT]


class SearchService:
    def __init__(self, *, config: ApiConfig, store: DocumentStore) -> None:
        self.config = config
        self.store = store

    def _search_entity(
        self,
        target: SearchTarget,
        query: str,
        filters: Mapping[str, list[str]],
        limit: int,
    ) -> list[dict[str, Any]]:
        builder = QueryBuilder(target.descriptor, max_limit=self.config.max_page_size)
        text_match = AnyOf(
            tuple(Condition(target.descriptor.text_spec(name), Op.REGEX, query) for name in target.search_fields)
        )
        conditions = (
            text_match,
            *builder.filter_conditions(filters),
            *target.descriptor.overlay(utc_now(), role=None),
        )
        documents = self.store.find_all(
            target.descriptor.collection,
            conditions,
            sort=builder.sort_keys(None),
            limit=limit,
        )
        selected = [select_fields(document, target.select) for document in documents]
        return populate(self.store, selected, target.populate)

    def global_search(
        self,
        query: str | None,
        *,
        limit: int = DEFAULT_LIMIT,
        entities: str | Sequence[str] | None = None,
        filters: Iterable[tuple[str, str]] = (),
    ) -> dict[str, Any]:
        text = normalize_query(query)
        names = parse_entities(entities)
        grouped = split_filters(filters)
        per_entity = limit // len(names)

        # filter keys are validated before any sub-query runs
        for name in names:
            QueryBuilder(SEARCH_TARGETS[name].descriptor).filter_conditions(grouped.get(name, {}))

        results: dict[str, list[dict[str, Any]]] = {}
        failed: list[str] = []
        with ThreadPoolExecutor(max_workers=min(self.config.search_max_workers, len(names))) as pool:
            futures = {
                name: pool.submit(self._search_entity, SEARCH_TARGETS[name], text, grouped.get(name, {}), per_entity)
                for name in names
            }
            for name, future in futures.items():
                target = SEARCH_TARGETS[name]
                try:
                    results[target.result_key] = future.result()
                except Exception:
                    logger.exception("Search over %s failed for query %r", name, text)
                    results[target.result_key] = []
                    failed.append(name)

        if len(failed) == len(names):
            raise InternalError("Search failed")

        total = sum(len(items) for items in results.values())
        logger.info("Global search performed: %r - %s results", text, total)
        return {
            "success": True,
            "query": text,
            "totalResults": total,
            "results": results,
            "failedEntities": failed,
        }

    def smart_search(self, query: str | None, *, limit: int = SMART_LIMIT) -> dict[str, Any]:
        payload = self.global_search(query, limit=limit)
        payload["suggestions"] = build_suggestions(payload["results"])
        return payload

    def autocomplete(self) -> dict[str, Any]:
        skills = run_spec(
            self.store.scan(TEAM_MEMBERS.collection),
            AggregationSpec(name="skills", key="skills", explode=True, limit=AUTOCOMPLETE_SKILLS),
        )
        return {
            "serviceCategories": distinct_values(self.store.scan(SERVICES.collection), "category"),
            "projectCategories": distinct_values(self.store.scan(PROJECTS.collection), "category"),
            "skills": [bucket["_id"] for bucket in skills],
            "blogCategories": distinct_values(self.store.scan(BLOGS.collection), "category"),
        }
