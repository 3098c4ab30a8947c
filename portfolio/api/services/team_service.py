# This file implements team reads, membership rules, and team-level analytics.
# It exists so the lead-is-a-member rule runs on every write path.
# Workload is measured from active projects that staff at least one of the team's members.

from __future__ import annotations

from typing import Any

from portfolio.api.services.project_service import ACTIVE_STATUSES
from portfolio.api.services.resource_service import Document, ResourceService
from portfolio.catalog.analytics import AggregationSpec, Measure, run_spec
from portfolio.catalog.descriptors import TEAMS, PopulateSpec
from portfolio.catalog.query_plan import AnyOf

TAG_LIMIT = 10

SPECIALTY_POPULATE = (
    PopulateSpec("members", "team_members", ("firstName", "lastName", "position", "profileImage")),
    PopulateSpec("teamLead", "team_members", ("firstName", "lastName", "position")),
)

SIZE_BUCKETS = (
    (3, "Small (1-2)"),
    (6, "Medium (3-5)"),
    (11, "Large (6-10)"),
)


def size_bucket(member_count: int) -> str:
    for upper, label in SIZE_BUCKETS:
        if member_count < upper:
            return label
    return "Extra Large (11+)"


def _ratio(numerator: int, denominator: int) -> float:
    return round(numerator / denominator, 2) if denominator > 0 else 0


def _summary(team: Document) -> dict[str, Any]:
    return {
        "id": team["id"],
        "teamName": team.get("teamName"),
        "memberCount": len(team.get("members") or []),
        "isActive": team.get("isActive"),
    }


class TeamService(ResourceService):
    descriptor = TEAMS

    def prepare(self, body: Document, *, existing: Document | None) -> Document:
        lead = body.get("teamLead")
        members = list(body.get("members") or [])
        if lead and lead not in members:
            members.append(lead)
        body["members"] = members
        return body

    def by_specialty(self, specialty: str) -> list[Document]:
        condition = AnyOf((self.matches("tags", specialty), self.matches("specialties", specialty)))
        return self.find([condition], populate_specs=SPECIALTY_POPULATE)

    def analytics(self) -> dict[str, Any]:
        teams = self.store.scan(self.collection)
        active = sum(1 for team in teams if team.get("isActive"))
        return {
            "total": len(teams),
            "active": active,
            "inactive": len(teams) - active,
            "sizeDistribution": run_spec(
                teams,
                AggregationSpec(
                    name="size",
                    key=lambda team: size_bucket(len(team.get("members") or [])),
                    measures=(Measure("teams", "collect", "teamName"),),
                ),
            ),
            "tagsDistribution": run_spec(
                teams,
                AggregationSpec(name="tags", key="tags", explode=True, limit=TAG_LIMIT),
            ),
            "statusDistribution": run_spec(teams, AggregationSpec(name="status", key="isActive")),
        }

    def performance(self) -> list[dict[str, Any]]:
        metrics = []
        for team in self.store.scan(self.collection):
            summary = _summary(team)
            project_count = len(team.get("relatedProjects") or [])
            metrics.append(
                {
                    **summary,
                    "projectCount": project_count,
                    "projectsPerMember": _ratio(project_count, summary["memberCount"]),
                }
            )
        metrics.sort(key=lambda entry: entry["projectsPerMember"], reverse=True)
        return metrics

    def workload(self) -> list[dict[str, Any]]:
        active_projects = [
            {assignment.get("member") for assignment in project.get("teamMembers") or [] if isinstance(assignment, dict)}
            for project in self.store.scan("projects")
            if project.get("status") in ACTIVE_STATUSES
        ]
        report = []
        for team in self.store.scan(self.collection):
            summary = _summary(team)
            members = set(team.get("members") or [])
            active_count = sum(1 for staffed in active_projects if staffed & members)
            report.append(
                {
                    **summary,
                    "activeProjectCount": active_count,
                    "workloadRatio": _ratio(active_count, summary["memberCount"]),
                }
            )
        report.sort(key=lambda entry: entry["workloadRatio"], reverse=True)
        return report
