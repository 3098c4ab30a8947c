# This file implements project-specific reads on top of the generic resource service.
# It exists so category, status, timeline, recommendation, and analytics queries share one home.
# Timeline windows are expressed as timestamp ranges so the store can filter them directly.
# Team performance joins member names after aggregation to keep the scan single-pass.

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from portfolio.api.services.resource_service import Document, ResourceService
from portfolio.catalog.analytics import (
    AggregationSpec,
    Measure,
    days_between,
    monthly_trend,
    run_spec,
    safe_rate,
)
from portfolio.catalog.descriptors import PROJECTS, PopulateSpec
from portfolio.catalog.query_plan import AllOf, AnyOf, Op
from portfolio.catalog.timestamps import format_timestamp

ACTIVE_STATUSES = ("Planning", "In Progress", "Review")
RECENT_LIMIT = 10
RECOMMENDATION_LIMIT = 5
TEAM_PERFORMANCE_LIMIT = 10

CLIENT_BRIEF = PopulateSpec("client", "clients", ("name", "logo"))
SERVICE_BRIEF = PopulateSpec("servicesUsed", "services", ("name", "category"))
MEMBER_BRIEF = PopulateSpec("teamMembers.member", "team_members", ("firstName", "lastName", "position"))
TIMELINE_FIELDS = ("title", "startDate", "completionDate", "status", "category", "client", "thumbnail")


def _period(year: int, month: int | None) -> tuple[str, str]:
    if month is None:
        start = datetime(year, 1, 1, tzinfo=UTC)
        end = datetime(year + 1, 1, 1, tzinfo=UTC)
    else:
        start = datetime(year, month, 1, tzinfo=UTC)
        end = datetime(year + (month // 12), month % 12 + 1, 1, tzinfo=UTC)
    return format_timestamp(start), format_timestamp(end)


def _member_ids(project: Document) -> list[str]:
    return [
        assignment["member"]
        for assignment in project.get("teamMembers") or []
        if isinstance(assignment, dict) and assignment.get("member")
    ]


class ProjectService(ResourceService):
    descriptor = PROJECTS

    def by_category(self, category_name: str) -> list[Document]:
        return self.find(
            [self.matches("category", category_name)],
            sort="-completionDate",
            populate_specs=(CLIENT_BRIEF, SERVICE_BRIEF),
        )

    def by_status(self, status: str) -> list[Document]:
        return self.find(
            [self.where("status", Op.EQ, status)],
            sort="-startDate",
            populate_specs=(CLIENT_BRIEF, MEMBER_BRIEF),
        )

    def recent(self, *, limit: int = RECENT_LIMIT) -> list[Document]:
        return self.find(sort="-createdAt", limit=limit, populate_specs=(CLIENT_BRIEF, SERVICE_BRIEF))

    def timeline(self, *, year: int | None = None, month: int | None = None) -> list[Document]:
        conditions = []
        if year is not None:
            start, end = _period(year, month)
            conditions.append(
                AnyOf(
                    tuple(
                        AllOf(
                            (
                                self.where(field_name, Op.GTE, start),
                                self.where(field_name, Op.LT, end),
                            )
                        )
                        for field_name in ("startDate", "completionDate")
                    )
                )
            )
        return self.find(
            conditions,
            sort="startDate",
            populate_specs=(CLIENT_BRIEF,),
            fields=TIMELINE_FIELDS,
        )

    def recommendations(self, project_id: str, *, limit: int = RECOMMENDATION_LIMIT) -> list[Document]:
        current = self.require(project_id)
        branches = [self.where("category", Op.EQ, current.get("category"))]
        if current.get("servicesUsed"):
            branches.append(self.where("servicesUsed", Op.IN, tuple(current["servicesUsed"])))
        if current.get("client"):
            branches.append(self.where("client", Op.EQ, current["client"]))
        return self.find(
            [self.where("id", Op.NE, current["id"]), AnyOf(tuple(branches))],
            sort="-createdAt",
            limit=limit,
            populate_specs=(CLIENT_BRIEF, SERVICE_BRIEF),
        )

    def team_performance(self, projects: list[Document]) -> list[dict[str, Any]]:
        buckets = run_spec(
            projects,
            AggregationSpec(
                name="teamPerformance",
                key=_member_ids,
                explode=True,
                measures=(
                    Measure(
                        "completedProjects",
                        "count_if",
                        lambda project: project.get("status") == "Completed",
                    ),
                ),
            ),
        )
        members = self.store.get_many("team_members", [bucket["_id"] for bucket in buckets])
        performance = []
        for bucket in buckets:
            member = members.get(bucket["_id"])
            if member is None:
                continue
            performance.append(
                {
                    "_id": bucket["_id"],
                    "memberName": f"{member.get('firstName', '')} {member.get('lastName', '')}".strip(),
                    "position": member.get("position"),
                    "projectCount": bucket["count"],
                    "completedProjects": bucket["completedProjects"],
                    "completionRate": safe_rate(bucket["completedProjects"], bucket["count"]),
                }
            )
        return performance[:TEAM_PERFORMANCE_LIMIT]

    def analytics(self) -> dict[str, Any]:
        projects = self.store.scan(self.collection)
        total = len(projects)
        completed = sum(1 for project in projects if project.get("status") == "Completed")
        active = sum(1 for project in projects if project.get("status") in ACTIVE_STATUSES)
        distributions = {
            spec.name: run_spec(projects, spec)
            for spec in (
                AggregationSpec(name="statusDistribution", key="status"),
                AggregationSpec(
                    name="categoryDistribution",
                    key="category",
                    measures=(
                        Measure(
                            "avgDuration",
                            "avg",
                            lambda project: days_between(project.get("startDate"), project.get("completionDate")),
                        ),
                    ),
                ),
                monthly_trend("monthlyTrend", "completionDate"),
            )
        }
        return {
            "total": total,
            "completed": completed,
            "active": active,
            "completionRate": f"{completed / total * 100:.2f}" if total else 0,
            **distributions,
            "teamPerformance": self.team_performance(projects),
        }
