# This file implements the contact submission workflow and inquiry analytics.
# It exists so intake metadata, status stamps, and follow-up queries live outside the routers.
# Status changes are caller-driven; any status may follow any other.
# Entering Responded or Converted stamps the matching date when it is still empty.

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from portfolio.api.services.resource_service import Document, ResourceService
from portfolio.catalog.analytics import (
    AggregationSpec,
    Measure,
    average,
    hours_between,
    monthly_trend,
    run_spec,
    safe_rate,
)
from portfolio.catalog.descriptors import CONTACT_SUBMISSIONS, PopulateSpec
from portfolio.catalog.population import populate
from portfolio.catalog.query_builder import validate_document_id
from portfolio.catalog.query_plan import Op
from portfolio.catalog.timestamps import now_timestamp

logger = logging.getLogger(__name__)

CLOSED_STATUSES = ("Converted", "Archived")
STATUS_STAMPS = {"Responded": "responseDate", "Converted": "conversionDate"}

ASSIGNEE_BRIEF = (PopulateSpec("assignedTo", "team_members", ("firstName", "lastName")),)
ASSIGNEE_CARD = (PopulateSpec("assignedTo", "team_members", ("firstName", "lastName", "position")),)

SUBMISSION_RECEIVED = "Thank you for your inquiry. We will get back to you soon!"


def apply_status_stamps(body: Document, *, stamp: str | None = None) -> Document:
    """Fill the response/conversion date for the body's status when missing."""

    date_field = STATUS_STAMPS.get(body.get("status"))
    if date_field is not None and not body.get(date_field):
        body[date_field] = stamp or now_timestamp()
    return body


def _submissions_bucket(bucket: dict[str, Any]) -> dict[str, Any]:
    renamed = dict(bucket)
    renamed["submissions"] = renamed.pop("count")
    return renamed


def is_overdue(submission: Document, now: str) -> bool:
    follow_up = submission.get("followUpDate")
    return bool(follow_up) and follow_up < now and submission.get("status") not in CLOSED_STATUSES


class ContactService(ResourceService):
    descriptor = CONTACT_SUBMISSIONS

    def prepare(self, body: Document, *, existing: Document | None) -> Document:
        return apply_status_stamps(body)

    def submit(self, body: Document, *, client_meta: Mapping[str, Any]) -> dict[str, Any]:
        submission = {
            **body,
            **{key: value for key, value in client_meta.items() if value is not None},
            "submittedAt": now_timestamp(),
        }
        submission.setdefault("status", "New")
        submission.setdefault("priority", "Medium")
        created = self.create(submission)
        logger.info("New contact submission received from %s", created.get("email"))
        return {"id": created["id"], "submittedAt": created["submittedAt"]}

    def overdue(self) -> list[Document]:
        return self.find(
            [
                self.where("followUpDate", Op.LT, now_timestamp()),
                self.where("status", Op.NIN, CLOSED_STATUSES),
            ],
            sort="followUpDate",
            populate_specs=ASSIGNEE_BRIEF,
        )

    def by_assignee(self, assignee_id: str) -> list[Document]:
        assignee_id = validate_document_id(assignee_id, name="assignee id")
        return self.find(
            [self.where("assignedTo", Op.EQ, assignee_id)],
            sort="-submittedAt",
            populate_specs=ASSIGNEE_CARD,
        )

    def update_status(
        self,
        submission_id: str,
        status: str,
        *,
        response_date: str | None = None,
        conversion_date: str | None = None,
    ) -> Document:
        def _apply(body: Document) -> Document:
            body["status"] = status
            if response_date:
                body["responseDate"] = response_date
            if conversion_date:
                body["conversionDate"] = conversion_date
            return apply_status_stamps(body)

        return self.modify(submission_id, _apply)

    def assign(self, submission_id: str, assignee_id: str | None) -> Document:
        def _apply(body: Document) -> Document:
            body["assignedTo"] = assignee_id
            return body

        updated = self.modify(submission_id, _apply)
        self.populate_assignee(updated)
        return updated

    def add_note(self, submission_id: str, note: str, *, added_by: str) -> Document:
        entry = {"note": note, "addedBy": added_by, "addedAt": now_timestamp()}
        updated = self.store.push(self.collection, validate_document_id(submission_id), "notes", entry)
        if updated is None:
            raise self.not_found()
        return updated

    def bulk_update(self, submission_ids: list[str], updates: Document) -> dict[str, int]:
        ids = [validate_document_id(value) for value in submission_ids]
        stamp = now_timestamp()

        def _apply(body: Document) -> Document:
            return apply_status_stamps({**body, **updates}, stamp=stamp)

        matched, modified = self.store.update_many(self.collection, ids, _apply)
        logger.info("Bulk updated contact submissions matched=%s modified=%s", matched, modified)
        return {"matchedCount": matched, "modifiedCount": modified}

    def populate_assignee(self, submission: Document) -> Document:
        populate(self.store, [submission], ASSIGNEE_CARD)
        return submission

    def analytics(self) -> dict[str, Any]:
        submissions = self.store.scan(self.collection)
        now = now_timestamp()
        total = len(submissions)
        responded = [
            submission
            for submission in submissions
            if submission.get("submittedAt") and submission.get("responseDate")
        ]
        converted_total = sum(1 for submission in submissions if submission.get("status") == "Converted")
        responded_total = sum(1 for submission in submissions if submission.get("status") == "Responded")
        response_hours = [
            hours_between(submission["submittedAt"], submission["responseDate"]) for submission in responded
        ]
        return {
            "total": total,
            "new": sum(1 for submission in submissions if submission.get("status") == "New"),
            "overdue": sum(1 for submission in submissions if is_overdue(submission, now)),
            "statusDistribution": run_spec(submissions, AggregationSpec(name="status", key="status")),
            "inquiryTypeDistribution": run_spec(
                submissions,
                AggregationSpec(
                    name="inquiryType",
                    key="inquiryType",
                    measures=(
                        Measure(
                            "avgResponseTime",
                            "avg",
                            lambda submission: hours_between(
                                submission.get("submittedAt"), submission.get("responseDate")
                            ),
                        ),
                    ),
                ),
            ),
            "sourceDistribution": run_spec(submissions, AggregationSpec(name="source", key="source")),
            "monthlyTrend": [
                _submissions_bucket(bucket)
                for bucket in run_spec(
                    submissions,
                    monthly_trend(
                        "monthlyTrend",
                        "submittedAt",
                        measures=(
                            Measure("responded", "count_if", lambda submission: submission.get("status") == "Responded"),
                            Measure("converted", "count_if", lambda submission: submission.get("status") == "Converted"),
                        ),
                    ),
                )
            ],
            "responseMetrics": {
                "avgResponseTimeHours": average(response_hours) or 0,
                "totalResponded": len(responded),
            },
            "conversionMetrics": {
                "totalSubmissions": total,
                "totalConverted": converted_total,
                "totalResponded": responded_total,
                "conversionRate": safe_rate(converted_total, total),
                "responseRate": safe_rate(responded_total, total),
            },
        }
