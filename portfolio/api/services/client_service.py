# This file implements client-specific reads and relationship analytics.
# It exists so industry lookups, satisfaction scoring, and retention metrics share one module.
# Ratings and project counts are joined in memory after one scan per collection.

from __future__ import annotations

import json
from typing import Any

from portfolio.api.services.resource_service import Document, ResourceService
from portfolio.catalog.analytics import (
    AggregationSpec,
    Measure,
    average,
    days_between,
    get_path,
    monthly_trend,
    run_spec,
    safe_rate,
)
from portfolio.catalog.descriptors import CLIENTS, PopulateSpec
from portfolio.catalog.timestamps import now_timestamp
from portfolio.common.errors import ValidationError

TOP_CLIENT_LIMIT = 10
GEOGRAPHIC_LIMIT = 20

PROJECT_BRIEF = (PopulateSpec("projects", "projects", ("title", "category", "status")),)
SEARCH_PROJECT_BRIEF = (PopulateSpec("projects", "projects", ("title", "category")),)

SATISFACTION_LEVELS = (
    (4.5, "Excellent"),
    (4.0, "Very Good"),
    (3.5, "Good"),
    (3.0, "Fair"),
)


def satisfaction_level(rating: float | None) -> str:
    if rating is None:
        return "No Rating"
    for threshold, label in SATISFACTION_LEVELS:
        if rating >= threshold:
            return label
    return "Poor"


def _location_key(client: Document) -> str:
    # pandas turns tuple keys into a MultiIndex, so the pair is grouped as JSON text
    return json.dumps([get_path(client, "location.country"), get_path(client, "location.state")])


def _location_label(key: str) -> dict[str, Any]:
    country, state = json.loads(key)
    return {"country": country, "state": state}


class ClientService(ResourceService):
    descriptor = CLIENTS

    def by_industry(self, industry: str) -> list[Document]:
        return self.find(
            [self.matches("industry", industry)],
            sort="name",
            populate_specs=PROJECT_BRIEF,
        )

    def search_clients(self, query: str | None) -> list[Document]:
        condition = self.builder.search_condition(query)
        if condition is None:
            raise ValidationError("Search query is required")
        return self.find(
            [condition],
            sort="name",
            populate_specs=SEARCH_PROJECT_BRIEF,
        )

    def analytics(self) -> dict[str, Any]:
        clients = self.store.scan(self.collection)
        distributions = {
            spec.name: run_spec(clients, spec)
            for spec in (
                AggregationSpec(
                    name="industryDistribution",
                    key="industry",
                    measures=(
                        Measure(
                            "activeClients",
                            "count_if",
                            lambda client: get_path(client, "partnership.status") == "Active",
                        ),
                    ),
                ),
                AggregationSpec(name="sizeDistribution", key="companySize"),
                AggregationSpec(name="statusDistribution", key="partnership.status"),
                AggregationSpec(name="typeDistribution", key="partnership.type"),
                AggregationSpec(
                    name="geographicDistribution",
                    key=_location_key,
                    limit=GEOGRAPHIC_LIMIT,
                    label=_location_label,
                ),
                monthly_trend("acquisitionTrend", "partnership.startDate"),
            )
        }
        return {
            "total": len(clients),
            "active": sum(
                1 for client in clients if get_path(client, "partnership.status") == "Active"
            ),
            **distributions,
        }

    def top(self, *, limit: int = TOP_CLIENT_LIMIT) -> list[dict[str, Any]]:
        clients = self.store.scan(self.collection)
        statuses = {project["id"]: project.get("status") for project in self.store.scan("projects")}
        ranked = []
        for client in clients:
            project_ids = client.get("projects") or []
            ranked.append(
                {
                    "id": client["id"],
                    "name": client.get("name"),
                    "logo": client.get("logo"),
                    "industry": client.get("industry"),
                    "projectCount": len(project_ids),
                    "partnershipStatus": get_path(client, "partnership.status"),
                    "completedProjects": sum(
                        1 for project_id in project_ids if statuses.get(project_id) == "Completed"
                    ),
                }
            )
        ranked.sort(key=lambda entry: entry["projectCount"], reverse=True)
        return ranked[:limit]

    def satisfaction(self) -> list[dict[str, Any]]:
        ratings: dict[str, list[Any]] = {}
        for testimonial in self.store.scan("testimonials"):
            if testimonial.get("approved") and testimonial.get("client"):
                ratings.setdefault(testimonial["client"], []).append(testimonial.get("rating"))

        report = []
        for client in self.store.scan(self.collection):
            client_ratings = ratings.get(client["id"], [])
            avg_rating = average(client_ratings, digits=2)
            report.append(
                {
                    "id": client["id"],
                    "name": client.get("name"),
                    "logo": client.get("logo"),
                    "industry": client.get("industry"),
                    "avgRating": avg_rating,
                    "testimonialCount": len(client_ratings),
                    "projectCount": len(client.get("projects") or []),
                    "satisfactionLevel": satisfaction_level(avg_rating),
                }
            )
        report.sort(key=lambda entry: (entry["avgRating"] is not None, entry["avgRating"] or 0), reverse=True)
        return report

    def retention(self) -> dict[str, Any]:
        clients = self.store.scan(self.collection)
        if not clients:
            return {
                "totalClients": 0,
                "retainedClients": 0,
                "retentionRate": 0,
                "avgPartnershipDuration": 0,
                "avgProjectsPerClient": 0,
            }
        now = now_timestamp()
        project_counts = [len(client.get("projects") or []) for client in clients]
        retained = sum(1 for count in project_counts if count > 1)
        durations = [
            days_between(
                get_path(client, "partnership.startDate"),
                get_path(client, "partnership.endDate") or now,
            )
            for client in clients
        ]
        return {
            "totalClients": len(clients),
            "retainedClients": retained,
            "retentionRate": safe_rate(retained, len(clients)),
            "avgPartnershipDuration": round(average(durations) or 0),
            "avgProjectsPerClient": round(sum(project_counts) / len(clients), 2),
        }
