"""
Unit tests for contact submission status stamps and overdue detection.
"""

from __future__ import annotations

from portfolio.api.services.contact_service import apply_status_stamps, is_overdue

STAMP = "2026-05-01T09:00:00.000Z"


def test_responded_stamps_response_date_once() -> None:
    body = apply_status_stamps({"status": "Responded"}, stamp=STAMP)
    assert body["responseDate"] == STAMP

    again = apply_status_stamps(dict(body), stamp="2026-06-01T09:00:00.000Z")
    assert again["responseDate"] == STAMP


def test_converted_stamps_conversion_date() -> None:
    body = apply_status_stamps({"status": "Converted"}, stamp=STAMP)
    assert body == {"status": "Converted", "conversionDate": STAMP}


def test_other_statuses_are_untouched() -> None:
    assert apply_status_stamps({"status": "In Progress"}, stamp=STAMP) == {"status": "In Progress"}


def test_overdue_requires_past_follow_up_and_open_status() -> None:
    now = "2026-05-10T00:00:00.000Z"
    assert is_overdue({"status": "New", "followUpDate": "2026-05-01T00:00:00.000Z"}, now)
    assert not is_overdue({"status": "Converted", "followUpDate": "2026-05-01T00:00:00.000Z"}, now)
    assert not is_overdue({"status": "New", "followUpDate": "2026-06-01T00:00:00.000Z"}, now)
    assert not is_overdue({"status": "New"}, now)
