# This file implements team member lookups, skill summaries, and staffing analytics.
# It exists so skill and team filters reuse the shared resource service conditions.
# Experience buckets are derived from the member's work history at request time.

from __future__ import annotations

from typing import Any

from portfolio.api.services.resource_service import Document, ResourceService
from portfolio.catalog.analytics import AggregationSpec, Measure, elapsed, run_spec
from portfolio.catalog.descriptors import TEAM_MEMBERS
from portfolio.catalog.query_builder import validate_document_id
from portfolio.catalog.query_plan import Op
from portfolio.catalog.timestamps import now_timestamp
from portfolio.common.errors import ValidationError

SKILL_LIMIT = 20
SECONDS_PER_YEAR = 365 * 86400.0

EXPERIENCE_BUCKETS = (
    (2, "0-2 years"),
    (5, "2-5 years"),
    (10, "5-10 years"),
)


def experience_years(member: Document, *, now: str | None = None) -> float | None:
    """Summed length of every experience entry; open entries run until now."""

    until = now or now_timestamp()
    total = 0.0
    for entry in member.get("experience") or []:
        if not isinstance(entry, dict) or not entry.get("startDate"):
            continue
        years = elapsed(entry["startDate"], entry.get("endDate") or until, unit_seconds=SECONDS_PER_YEAR)
        if years is None:
            return None
        total += years
    return total


def experience_bucket(years: float | None) -> str:
    if years is None:
        return "Unknown"
    for upper, label in EXPERIENCE_BUCKETS:
        if years < upper:
            return label
    return "10+ years"


def member_card(member: Document) -> dict[str, Any]:
    return {
        "id": member["id"],
        "name": f"{member.get('firstName', '')} {member.get('lastName', '')}".strip(),
        "position": member.get("position"),
        "profileImage": member.get("profileImage"),
    }


class TeamMemberService(ResourceService):
    descriptor = TEAM_MEMBERS

    def by_skill(self, skill_name: str) -> list[Document]:
        return self.find([self.matches("skills", skill_name)])

    def by_team(self, team_id: str) -> list[Document]:
        team_id = validate_document_id(team_id, name="team id")
        return self.find([self.where("currentTeam", Op.EQ, team_id)])

    def search_members(self, query: str | None) -> list[Document]:
        condition = self.builder.search_condition(query)
        if condition is None:
            raise ValidationError("Search query is required")
        return self.find([condition])

    def analytics(self) -> dict[str, Any]:
        members = self.store.scan(self.collection)
        now = now_timestamp()
        return {
            "total": len(members),
            "featured": sum(1 for member in members if member.get("featured")),
            "skillsDistribution": run_spec(
                members,
                AggregationSpec(name="skills", key="skills", explode=True, limit=SKILL_LIMIT),
            ),
            "positionDistribution": run_spec(members, AggregationSpec(name="positions", key="position")),
            "experienceDistribution": run_spec(
                members,
                AggregationSpec(
                    name="experience",
                    key=lambda member: experience_bucket(experience_years(member, now=now)),
                ),
            ),
        }

    def skills_summary(self) -> list[dict[str, Any]]:
        return run_spec(
            self.store.scan(self.collection),
            AggregationSpec(
                name="skillsSummary",
                key="skills",
                explode=True,
                measures=(Measure("members", "collect", member_card),),
            ),
        )

    def with_project_count(self) -> list[dict[str, Any]]:
        counts: dict[str, int] = {}
        for project in self.store.scan("projects"):
            assigned = {
                assignment.get("member")
                for assignment in project.get("teamMembers") or []
                if isinstance(assignment, dict)
            }
            for member_id in assigned:
                if member_id:
                    counts[member_id] = counts.get(member_id, 0) + 1
        members = [
            {**member, "projectCount": counts.get(member["id"], 0)}
            for member in self.store.scan(self.collection)
        ]
        members.sort(key=lambda member: member["createdAt"], reverse=True)
        members.sort(key=lambda member: member["projectCount"], reverse=True)
        return members
