# This file implements testimonial lookups, moderation, and rating analytics.
# It exists so approval rules are enforced the same way on every read path.
# Unprivileged callers only see approved testimonials; moderators see everything.

from __future__ import annotations

from typing import Any

from portfolio.api.services.resource_service import Document, ResourceService
from portfolio.catalog.analytics import (
    AggregationSpec,
    Measure,
    average,
    monthly_trend,
    run_spec,
    safe_rate,
)
from portfolio.catalog.descriptors import TESTIMONIALS, PopulateSpec
from portfolio.catalog.query_builder import ParamItems, validate_document_id
from portfolio.catalog.query_plan import Op, QueryResult
from portfolio.catalog.timestamps import now_timestamp
from portfolio.common.errors import ValidationError

HIGH_RATING = 4
HIGH_RATED_LIMIT = 10

PROJECT_BRIEF = PopulateSpec("relatedProject", "projects", ("title", "category"))
CLIENT_BRIEF = PopulateSpec("client", "clients", ("name", "logo"))
HIGH_RATED_POPULATE = (
    PopulateSpec("relatedProject", "projects", ("title", "category", "thumbnail")),
    CLIENT_BRIEF,
)


def satisfaction_summary(approved: list[Document]) -> dict[str, Any]:
    if not approved:
        return {}
    ratings = [testimonial.get("rating") for testimonial in approved]
    breakdown = {str(stars): sum(1 for rating in ratings if rating == stars) for stars in range(5, 0, -1)}
    return {
        "totalTestimonials": len(approved),
        "averageRating": average(ratings, digits=2),
        "satisfactionRate": safe_rate(breakdown["5"] + breakdown["4"], len(approved)),
        "ratingBreakdown": breakdown,
    }


class TestimonialService(ResourceService):
    descriptor = TESTIMONIALS

    def prepare(self, body: Document, *, existing: Document | None) -> Document:
        if not body.get("dateGiven"):
            body["dateGiven"] = now_timestamp()
        return body

    def by_rating(self, rating: int, *, role: str | None = None) -> list[Document]:
        if not 1 <= rating <= 5:
            raise ValidationError("Rating must be between 1 and 5")
        return self.find(
            [self.where("rating", Op.EQ, rating)],
            role=role,
            sort="-dateGiven",
            populate_specs=(PROJECT_BRIEF, CLIENT_BRIEF),
        )

    def by_category(self, category: str, *, role: str | None = None) -> list[Document]:
        return self.find(
            [self.matches("serviceCategory", category)],
            role=role,
            sort="-dateGiven",
            populate_specs=(PROJECT_BRIEF, CLIENT_BRIEF),
        )

    def by_project(self, project_id: str, *, role: str | None = None) -> list[Document]:
        project_id = validate_document_id(project_id, name="project id")
        return self.find(
            [self.where("relatedProject", Op.EQ, project_id)],
            role=role,
            sort="-dateGiven",
            populate_specs=(CLIENT_BRIEF,),
        )

    def by_client(self, client_id: str, *, role: str | None = None) -> list[Document]:
        client_id = validate_document_id(client_id, name="client id")
        return self.find(
            [self.where("client", Op.EQ, client_id)],
            role=role,
            sort="-dateGiven",
            populate_specs=(PROJECT_BRIEF,),
        )

    def high_rated(self, *, min_rating: float = HIGH_RATING, limit: int = HIGH_RATED_LIMIT) -> list[Document]:
        return self.find(
            [self.where("rating", Op.GTE, min_rating), self.where("approved", Op.EQ, True)],
            apply_overlay=False,
            sort="-rating,-dateGiven",
            limit=limit,
            populate_specs=HIGH_RATED_POPULATE,
        )

    def all_testimonials(self, params: ParamItems) -> QueryResult:
        return self.paginate(params, apply_overlay=False)

    def set_approval(self, testimonial_id: str, approved: bool) -> Document:
        def _apply(body: Document) -> Document:
            body["approved"] = approved
            return body

        return self.modify(testimonial_id, _apply)

    def analytics(self) -> dict[str, Any]:
        testimonials = self.store.scan(self.collection)
        approved = [testimonial for testimonial in testimonials if testimonial.get("approved") is True]
        avg_rating = Measure("avgRating", "avg", "rating")
        return {
            "total": len(testimonials),
            "approved": len(approved),
            "pending": sum(1 for testimonial in testimonials if testimonial.get("approved") is False),
            "featured": sum(1 for testimonial in approved if testimonial.get("featured")),
            "ratingDistribution": run_spec(
                approved, AggregationSpec(name="rating", key="rating", order="key_asc")
            ),
            "categoryDistribution": run_spec(
                approved,
                AggregationSpec(
                    name="category",
                    key="serviceCategory",
                    measures=(avg_rating,),
                    where=lambda testimonial: testimonial.get("serviceCategory") is not None,
                ),
            ),
            "sourceDistribution": run_spec(
                approved, AggregationSpec(name="source", key="source", measures=(avg_rating,))
            ),
            "monthlyTrend": run_spec(approved, monthly_trend("monthlyTrend", "dateGiven", measures=(avg_rating,))),
            "satisfaction": satisfaction_summary(approved),
        }
