"""
Integration tests for the notification inbox endpoints.

- GET  /api/core/notifications/
- GET  /api/core/notifications/unread-count/
- POST /api/core/notifications/{id}/read/
- POST /api/core/notifications/read-all/
- POST /api/core/notifications/broadcast/
"""

from __future__ import annotations

import pytest
from django.urls import reverse
from rest_framework import status

from cases.models import CaseStatus
from cases.services import get_case_repository
from core.models import Notification

pytestmark = pytest.mark.django_db


@pytest.fixture()
def victim(create_user):
    return create_user(full_name="Naledi Sithole")


@pytest.fixture()
def admin_user(create_user):
    return create_user(role="admin", full_name="Capt. Botha")


@pytest.fixture()
def notified_case(victim):
    """A case whose victim has received two status notifications."""
    repository = get_case_repository()
    case = repository.create(victim.pk, "Robbery", province="KwaZulu-Natal")
    repository.transition(case.id, CaseStatus.UNDER_REVIEW, "Statement captured.")
    repository.transition(case.id, CaseStatus.COMPLETED, "Suspect convicted.")
    return case


class TestInbox:

    def test_list_most_recent_first(self, client_for, victim, notified_case):
        resp = client_for(victim).get(reverse("core:notification-list"))

        assert resp.status_code == status.HTTP_200_OK
        assert len(resp.data) == 2
        newest, oldest = resp.data
        assert newest["message"] == f"Case {notified_case.case_number} has moved to Case Resolved"
        assert newest["priority"] == "low"
        assert newest["kind"] == "success"
        assert newest["details"] == "Suspect convicted."
        assert newest["unread"] is True
        assert oldest["priority"] == "medium"

    def test_inbox_is_private(self, client_for, create_user, notified_case):
        stranger = create_user()
        resp = client_for(stranger).get(reverse("core:notification-list"))
        assert resp.data == []

    def test_unread_count(self, client_for, victim, notified_case):
        resp = client_for(victim).get(reverse("core:notification-unread-count"))
        assert resp.data == {"unread": 2}

    def test_mark_read_twice(self, client_for, victim, notified_case):
        client = client_for(victim)
        notification = Notification.objects.filter(recipient=victim).first()
        url = reverse("core:notification-mark-as-read", kwargs={"pk": notification.pk})

        first = client.post(url)
        second = client.post(url)

        assert first.status_code == status.HTTP_200_OK
        assert second.status_code == status.HTTP_200_OK
        assert second.data["unread"] is False
        assert client.get(reverse("core:notification-unread-count")).data == {"unread": 1}

    def test_mark_read_foreign_notification(self, client_for, create_user, victim, notified_case):
        notification = Notification.objects.filter(recipient=victim).first()
        url = reverse("core:notification-mark-as-read", kwargs={"pk": notification.pk})

        resp = client_for(create_user()).post(url)

        assert resp.status_code == status.HTTP_404_NOT_FOUND
        notification.refresh_from_db()
        assert notification.is_read is False

    def test_mark_read_unknown(self, client_for, victim):
        url = reverse("core:notification-mark-as-read", kwargs={"pk": 424242})
        assert client_for(victim).post(url).status_code == status.HTTP_404_NOT_FOUND

    def test_mark_all_read(self, client_for, victim, notified_case):
        client = client_for(victim)

        resp = client.post(reverse("core:notification-mark-all-as-read"))
        assert resp.data == {"updated": 2}

        resp = client.post(reverse("core:notification-mark-all-as-read"))
        assert resp.data == {"updated": 0}

    def test_requires_authentication(self, api_client):
        resp = api_client.get(reverse("core:notification-list"))
        assert resp.status_code == status.HTTP_401_UNAUTHORIZED


class TestBroadcast:

    def test_admin_broadcast_reaches_victims_only(self, client_for, admin_user, victim, create_user):
        officer = create_user(role="police")
        second_victim = create_user()

        resp = client_for(admin_user).post(
            reverse("core:notification-broadcast"),
            {"message": "New GBV support line", "details": "Call 0800 150 150.", "priority": "high"},
            format="json",
        )

        assert resp.status_code == status.HTTP_201_CREATED
        assert len(resp.data) == 2
        recipients = set(Notification.objects.values_list("recipient_id", flat=True))
        assert recipients == {victim.pk, second_victim.pk}
        assert officer.pk not in recipients
        assert set(Notification.objects.values_list("case_number", flat=True)) == {""}

    def test_victim_cannot_broadcast(self, client_for, victim):
        resp = client_for(victim).post(
            reverse("core:notification-broadcast"),
            {"message": "Hello"},
            format="json",
        )
        assert resp.status_code == status.HTTP_403_FORBIDDEN
        assert Notification.objects.count() == 0
