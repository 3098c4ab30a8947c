# This file defines contact inquiry endpoints under the versioned API path.
# It exists so visitors can reach the company and staff can triage, assign, and follow up.
# Public submissions are rate limited and only echo back the new id and submission time.
# Any listed status may follow any other; Responded and Converted stamp their dates once.

from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response, status

from portfolio.api.dependencies import get_contact_service
from portfolio.api.rate_limits import contact_limit, limiter
from portfolio.api.response_envelope import (
    build_collection_envelope,
    build_list_envelope,
    build_object_envelope,
)
from portfolio.api.schemas.common import ListResponse
from portfolio.api.schemas.contact_schemas import (
    ContactAssignment,
    ContactBulkUpdate,
    ContactCreate,
    ContactNoteCreate,
    ContactStatusUpdate,
    ContactUpdate,
)
from portfolio.api.security import Caller, require_permission
from portfolio.api.services.contact_service import SUBMISSION_RECEIVED, ContactService

router = APIRouter(prefix="/contact", tags=["contact"])
ContactServiceDep = Annotated[ContactService, Depends(get_contact_service)]
StaffDep = Annotated[Caller, Depends(require_permission("contact", "read"))]
ManagerDep = Annotated[Caller, Depends(require_permission("contact", "analytics"))]


def _client_meta(request: Request) -> dict[str, str | None]:
    forwarded = request.headers.get("x-forwarded-for")
    ip_address = forwarded.split(",")[0].strip() if forwarded else None
    if ip_address is None and request.client is not None:
        ip_address = request.client.host
    return {
        "ipAddress": ip_address,
        "userAgent": request.headers.get("user-agent"),
        "referrer": request.headers.get("referer"),
    }


@router.post("", status_code=status.HTTP_201_CREATED)
@limiter.limit(contact_limit)
def submit_contact(request: Request, body: ContactCreate, service: ContactServiceDep) -> dict[str, object]:
    created = service.submit(body.to_document(), client_meta=_client_meta(request))
    return build_object_envelope(created, message=SUBMISSION_RECEIVED)


@router.get("", response_model=ListResponse)
def list_submissions(request: Request, service: ContactServiceDep, caller: StaffDep) -> dict[str, object]:
    result = service.paginate(request.query_params.multi_items(), role=caller.role)
    return build_list_envelope(result)


@router.get("/analytics")
def contact_analytics(service: ContactServiceDep, caller: ManagerDep) -> dict[str, object]:
    return build_object_envelope(service.analytics())


@router.get("/stats")
def contact_stats(service: ContactServiceDep, caller: StaffDep) -> dict[str, object]:
    return build_object_envelope(service.stats())


@router.get("/search")
def search_submissions(service: ContactServiceDep, caller: StaffDep, q: str | None = None) -> dict[str, object]:
    return build_collection_envelope(service.search(q, role=caller.role))


@router.get("/overdue")
def overdue_submissions(service: ContactServiceDep, caller: StaffDep) -> dict[str, object]:
    return build_collection_envelope(service.overdue())


@router.get("/assignee/{assignee_id}")
def submissions_by_assignee(
    assignee_id: str, service: ContactServiceDep, caller: StaffDep
) -> dict[str, object]:
    return build_collection_envelope(service.by_assignee(assignee_id))


@router.patch("/bulk-update")
def bulk_update_submissions(
    body: ContactBulkUpdate,
    service: ContactServiceDep,
    caller: Annotated[Caller, Depends(require_permission("contact", "bulk_update"))],
) -> dict[str, object]:
    result = service.bulk_update(body.ids, body.updates.to_patch())
    return build_object_envelope(result, message=f"{result['modifiedCount']} submissions updated")


@router.get("/{submission_id}")
def get_submission(submission_id: str, service: ContactServiceDep, caller: StaffDep) -> dict[str, object]:
    return build_object_envelope(service.get(submission_id, role=caller.role))


@router.patch("/{submission_id}/status")
def update_submission_status(
    submission_id: str,
    body: ContactStatusUpdate,
    service: ContactServiceDep,
    caller: Annotated[Caller, Depends(require_permission("contact", "status"))],
) -> dict[str, object]:
    updated = service.update_status(
        submission_id,
        body.status,
        response_date=body.response_date,
        conversion_date=body.conversion_date,
    )
    return build_object_envelope(updated)


@router.patch("/{submission_id}/assign")
def assign_submission(
    submission_id: str,
    body: ContactAssignment,
    service: ContactServiceDep,
    caller: Annotated[Caller, Depends(require_permission("contact", "assign"))],
) -> dict[str, object]:
    return build_object_envelope(service.assign(submission_id, body.assigned_to))


@router.post("/{submission_id}/notes", status_code=status.HTTP_201_CREATED)
def add_submission_note(
    submission_id: str,
    body: ContactNoteCreate,
    service: ContactServiceDep,
    caller: Annotated[Caller, Depends(require_permission("contact", "notes"))],
) -> dict[str, object]:
    return build_object_envelope(service.add_note(submission_id, body.note, added_by=caller.id))


@router.put("/{submission_id}")
def update_submission(
    submission_id: str,
    body: ContactUpdate,
    service: ContactServiceDep,
    caller: Annotated[Caller, Depends(require_permission("contact", "update"))],
) -> dict[str, object]:
    return build_object_envelope(service.update(submission_id, body.to_patch()))


@router.delete("/{submission_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_submission(
    submission_id: str,
    service: ContactServiceDep,
    caller: Annotated[Caller, Depends(require_permission("contact", "delete"))],
) -> Response:
    service.delete(submission_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
