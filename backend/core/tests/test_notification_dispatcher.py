"""
Unit tests for ``NotificationDispatcher`` over ``InMemoryNotificationStore``.
"""

from __future__ import annotations

from datetime import date

import pytest

from cases.models import CasePriority, CaseStatus
from cases.records import CaseRecord
from core.domain.change_feed import ChangeFeed
from core.domain.notifications import NotificationDispatcher
from core.models import NotificationKind, NotificationPriority
from core.stores import InMemoryNotificationStore

VICTIM_ID = 11


def _case(victim_id: int | None = VICTIM_ID) -> CaseRecord:
    return CaseRecord(
        id=3,
        case_number="CT-2025-123456",
        type="Burglary",
        status=CaseStatus.INVESTIGATION,
        priority=CasePriority.MEDIUM,
        submitted_date=date(2025, 2, 1),
        last_update=date(2025, 2, 3),
        victim_id=victim_id,
    )


@pytest.fixture()
def dispatcher() -> NotificationDispatcher:
    return NotificationDispatcher(InMemoryNotificationStore(), feed=ChangeFeed("test"))


class TestStatusChange:

    def test_message_and_default_details(self, dispatcher):
        record = dispatcher.notify_status_change(_case(), CaseStatus.INVESTIGATION, "")

        assert record.recipient_id == VICTIM_ID
        assert record.case_number == "CT-2025-123456"
        assert record.case_id == 3
        assert record.message == "Case CT-2025-123456 has moved to Investigation Started"
        assert record.details == (
            "Your case status has been updated. "
            "The case is now in the investigation started stage."
        )
        assert record.priority == NotificationPriority.MEDIUM
        assert record.kind == NotificationKind.INFO
        assert record.unread is True

    def test_note_becomes_details(self, dispatcher):
        record = dispatcher.notify_status_change(_case(), CaseStatus.UNDER_REVIEW, "Please visit the station.")
        assert record.details == "Please visit the station."

    def test_completion_is_low_priority_success(self, dispatcher):
        record = dispatcher.notify_status_change(_case(), CaseStatus.COMPLETED, "Resolved.")
        assert record.priority == NotificationPriority.LOW
        assert record.kind == NotificationKind.SUCCESS

    def test_no_victim_no_notification(self, dispatcher):
        assert dispatcher.notify_status_change(_case(victim_id=None), CaseStatus.COMPLETED) is None
        assert dispatcher.store.unread_count(VICTIM_ID) == 0


class TestEscalation:

    def test_high_priority_warning(self, dispatcher):
        record = dispatcher.notify_escalation(_case())
        assert record.priority == NotificationPriority.HIGH
        assert record.kind == NotificationKind.WARNING
        assert "escalated" in record.message

    def test_no_victim_no_notification(self, dispatcher):
        assert dispatcher.notify_escalation(_case(victim_id=None)) is None


class TestNotices:

    def test_notice_has_no_case_number(self, dispatcher):
        records = dispatcher.notify_notice([1, 2], "New support line opened", "Call 10111.")
        assert [r.recipient_id for r in records] == [1, 2]
        assert all(r.case_number == "" and r.case_id is None for r in records)

    def test_no_recipients(self, dispatcher):
        assert dispatcher.notify_notice([], "Nobody listening") == []


class TestInbox:

    def test_mark_read_is_idempotent(self, dispatcher):
        record = dispatcher.notify_escalation(_case())

        assert dispatcher.mark_read(record.id) is True
        assert dispatcher.mark_read(record.id) is True
        assert dispatcher.store.get(record.id).unread is False
        assert dispatcher.unread_count(VICTIM_ID) == 0

    def test_mark_read_unknown_id_is_not_an_error(self, dispatcher):
        assert dispatcher.mark_read(9999) is False

    def test_mark_all_read(self, dispatcher):
        dispatcher.notify_escalation(_case())
        dispatcher.notify_status_change(_case(), CaseStatus.RESOLUTION, "")
        dispatcher.notify_notice([VICTIM_ID + 1], "Someone else")

        assert dispatcher.mark_all_read(VICTIM_ID) == 2
        assert dispatcher.mark_all_read(VICTIM_ID) == 0
        assert dispatcher.unread_count(VICTIM_ID + 1) == 1

    def test_list_most_recent_first(self, dispatcher):
        first = dispatcher.notify_escalation(_case())
        second = dispatcher.notify_status_change(_case(), CaseStatus.RESOLUTION, "")

        assert [r.id for r in dispatcher.list_for_user(VICTIM_ID)] == [second.id, first.id]

    def test_every_write_publishes(self, dispatcher):
        calls = []
        dispatcher.feed.subscribe(lambda: calls.append(1))

        record = dispatcher.notify_escalation(_case())
        dispatcher.mark_read(record.id)
        dispatcher.mark_read(9999)

        assert len(calls) == 2
