"""
Database-backed repository tests: the same lifecycle rules as the
in-memory suite, run through ``DjangoCaseStore`` and
``DjangoNotificationStore``.
"""

from __future__ import annotations

import pytest
from django.utils import timezone

from cases.models import Case, CasePriority, CaseStatus, CaseUpdate, StatusLabel
from cases.records import CaseRecord, UpdateDraft
from cases.services import CaseRepository, get_case_repository
from cases.stores import DjangoCaseStore
from core.domain.exceptions import Conflict
from core.models import Notification, NotificationPriority

pytestmark = pytest.mark.django_db


@pytest.fixture()
def victim(create_user):
    return create_user(full_name="Thandi Nkosi")


@pytest.fixture()
def officer(create_user):
    return create_user(role="police", full_name="Sgt Mokoena")


@pytest.fixture()
def repository() -> CaseRepository:
    return get_case_repository()


class TestDjangoCaseStore:

    def test_create_persists_case_and_first_entry(self, repository, victim):
        record = repository.create(victim.pk, "Fraud", province="Limpopo")

        case = Case.objects.get(pk=record.id)
        assert case.status == CaseStatus.SUBMITTED
        assert case.station_name == "Limpopo Central SAPS"
        assert CaseUpdate.objects.filter(case=case).count() == 1
        assert record.updates[0].created_by == victim.pk

    def test_duplicate_case_number_is_conflict(self, victim):
        store = DjangoCaseStore()
        today = timezone.localdate()
        draft = CaseRecord(
            id=None,
            case_number="CT-2025-999999",
            type="Theft",
            status=CaseStatus.SUBMITTED,
            priority=CasePriority.MEDIUM,
            submitted_date=today,
            last_update=today,
            victim_id=victim.pk,
        )
        first = UpdateDraft("Case Submitted", "Submitted.", CaseStatus.SUBMITTED)
        store.add(draft, first)

        with pytest.raises(Conflict):
            store.add(draft, first)
        assert Case.objects.filter(case_number="CT-2025-999999").count() == 1

    def test_transition_updates_row_and_notifies(self, repository, victim, officer):
        record = repository.create(victim.pk, "Assault")

        assert repository.transition(record.id, CaseStatus.COMPLETED, "Resolved.", officer.pk) is True

        case = Case.objects.get(pk=record.id)
        assert case.status == CaseStatus.COMPLETED
        entries = list(case.updates.all())
        assert len(entries) == 2
        assert entries[-1].stage == CaseStatus.COMPLETED
        assert entries[-1].created_by_id == officer.pk

        notification = Notification.objects.get(recipient=victim)
        assert notification.case_id == record.id
        assert notification.priority == NotificationPriority.LOW
        assert notification.is_read is False

    def test_unknown_case(self, repository):
        assert repository.transition(987654, CaseStatus.RESOLUTION, "x") is False
        assert repository.escalate(987654) is False
        assert CaseUpdate.objects.count() == 0
        assert Notification.objects.count() == 0

    def test_escalate_twice(self, repository, victim):
        record = repository.create(victim.pk, "Burglary")

        repository.escalate(record.id)
        repository.escalate(record.id)

        refreshed = repository.get(record.id)
        assert refreshed.priority == CasePriority.HIGH
        assert [u.title for u in refreshed.updates].count("Case Escalated") == 2
        assert Notification.objects.filter(recipient=victim).count() == 2

    def test_list_by_victim_newest_first(self, repository, victim, create_user):
        other = create_user()
        first = repository.create(victim.pk, "Theft")
        repository.create(other.pk, "Theft")
        second = repository.create(victim.pk, "Vandalism")

        assert [c.id for c in repository.list_by_victim(victim.pk)] == [second.id, first.id]

    def test_assign_and_flag(self, repository, victim, officer):
        record = repository.create(victim.pk, "Cybercrime")

        repository.assign_officer(record.id, officer.pk)
        repository.flag_overdue(record.id)

        refreshed = repository.get(record.id)
        assert refreshed.officer_id == officer.pk
        assert refreshed.status_label == StatusLabel.OVERDUE
        assert len(refreshed.updates) == 1

    def test_scenario_against_database(self, repository, victim, officer):
        record = repository.create(victim.pk, "Theft")
        repository.transition(record.id, CaseStatus.UNDER_REVIEW, "Statement captured.", officer.pk)
        repository.transition(record.id, CaseStatus.INVESTIGATION, "Detective assigned.", officer.pk)

        final = repository.get(record.id)
        assert final.progress == 60
        assert final.status_label == StatusLabel.IN_PROGRESS
        assert len(final.updates) == 3
        assert Notification.objects.filter(recipient=victim, is_read=False).count() == 2
