# This file implements the service catalog endpoints' data access.
# It exists so category lookups, project-usage rankings, and catalog analytics stay out of routers.
# Project usage is counted from the projects collection because services do not store it.

from __future__ import annotations

from typing import Any

from portfolio.api.services.resource_service import Document, ResourceService
from portfolio.catalog.analytics import AggregationSpec, Measure, run_spec
from portfolio.catalog.descriptors import SERVICES, PopulateSpec

CATEGORY_PROJECT_BRIEF = (PopulateSpec("relatedProjects", "projects", ("title", "thumbnail")),)
POPULAR_LIMIT = 5


class ServiceCatalogService(ResourceService):
    descriptor = SERVICES

    def by_category(self, category_name: str) -> list[Document]:
        return self.find(
            [self.matches("category", category_name)],
            populate_specs=CATEGORY_PROJECT_BRIEF,
        )

    def project_counts(self) -> dict[str, int]:
        usage = run_spec(
            self.store.scan("projects"),
            AggregationSpec(name="usage", key="servicesUsed", explode=True),
        )
        return {bucket["_id"]: bucket["count"] for bucket in usage}

    def with_project_count(self, *, limit: int | None = None) -> list[dict[str, Any]]:
        counts = self.project_counts()
        services = [
            {**service, "projectCount": counts.get(service["id"], 0)}
            for service in self.store.scan(self.collection)
        ]
        # newest first within equal counts
        services.sort(key=lambda service: service["createdAt"], reverse=True)
        services.sort(key=lambda service: service["projectCount"], reverse=True)
        return services[:limit] if limit is not None else services

    def popular(self, *, limit: int = POPULAR_LIMIT) -> list[dict[str, Any]]:
        return self.with_project_count(limit=limit)

    def analytics(self) -> dict[str, Any]:
        services = self.store.scan(self.collection)
        by_category = run_spec(
            services,
            AggregationSpec(
                name="byCategory",
                key="category",
                measures=(Measure("featured", "count_if", "featured"),),
            ),
        )
        return {
            "total": len(services),
            "featured": sum(1 for service in services if service.get("featured")),
            "byCategory": by_category,
        }
