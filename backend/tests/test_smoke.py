"""
Smoke tests — verify that Django boots, URL routing resolves, and
the core domain modules are importable.

These tests do NOT require real data — they just prove the plumbing
works.
"""

from __future__ import annotations

import pytest
from django.core.management import call_command
from django.urls import resolve, reverse


# ════════════════════════════════════════════════════════════════════
#  URL Routing Smoke Tests
# ════════════════════════════════════════════════════════════════════

class TestURLRouting:
    """Ensure all top-level app URL namespaces resolve without 404."""

    EXPECTED_URLS = [
        # (url_name, expected_path)
        ("accounts:register",            "/api/accounts/auth/register/"),
        ("accounts:login",               "/api/accounts/auth/login/"),
        ("accounts:me",                  "/api/accounts/me/"),
        ("case-list",                    "/api/cases/"),
        ("core:dashboard-stats",         "/api/core/dashboard/"),
        ("core:system-constants",        "/api/core/constants/"),
        ("core:notification-list",       "/api/core/notifications/"),
        ("core:notification-unread-count", "/api/core/notifications/unread-count/"),
    ]

    @pytest.mark.parametrize("url_name,expected_path", EXPECTED_URLS)
    def test_url_reverses(self, url_name: str, expected_path: str):
        assert reverse(url_name) == expected_path

    @pytest.mark.parametrize("url_name,expected_path", EXPECTED_URLS)
    def test_url_resolve_matches_view(self, url_name: str, expected_path: str):
        match = resolve(expected_path)
        assert match.func is not None

    @pytest.mark.parametrize(
        "url_name,expected_path",
        [
            ("case-detail",         "/api/cases/5/"),
            ("case-transition",     "/api/cases/5/transition/"),
            ("case-escalate",       "/api/cases/5/escalate/"),
            ("case-assign-officer", "/api/cases/5/assign-officer/"),
            ("case-flag-overdue",   "/api/cases/5/flag-overdue/"),
            ("case-timeline",       "/api/cases/5/timeline/"),
            ("case-report",         "/api/cases/5/report/"),
        ],
    )
    def test_case_actions(self, url_name: str, expected_path: str):
        assert reverse(url_name, kwargs={"pk": 5}) == expected_path


# ════════════════════════════════════════════════════════════════════
#  Core Domain Module Tests
# ════════════════════════════════════════════════════════════════════

class TestDomainExceptions:
    """Unit tests for domain exception classes."""

    def test_hierarchy(self):
        from core.domain.exceptions import (
            Conflict,
            DomainError,
            InvalidTransition,
            NotFound,
            PermissionDenied,
            Unauthorized,
            ValidationFailed,
        )
        assert issubclass(InvalidTransition, Conflict)
        assert issubclass(Conflict, DomainError)
        for exc in (PermissionDenied, NotFound, Unauthorized, ValidationFailed):
            assert issubclass(exc, DomainError)

    def test_invalid_transition_structured(self):
        from core.domain.exceptions import InvalidTransition
        err = InvalidTransition(
            current="completed",
            target="archived",
            reason="Unknown case status",
        )
        assert "completed" in str(err)
        assert "archived" in str(err)
        assert err.target == "archived"

    def test_invalid_transition_plain_message(self):
        from core.domain.exceptions import InvalidTransition
        err = InvalidTransition("Cannot move case.")
        assert str(err) == "Cannot move case."


class TestDomainExceptionHandler:
    """core.domain.exception_handler maps domain errors to HTTP."""

    @pytest.mark.parametrize(
        "exc_name,expected",
        [
            ("Unauthorized", 401),
            ("PermissionDenied", 403),
            ("NotFound", 404),
            ("Conflict", 409),
            ("InvalidTransition", 409),
            ("ValidationFailed", 400),
            ("DomainError", 400),
        ],
    )
    def test_status_mapping(self, exc_name: str, expected: int):
        from core.domain import exceptions
        from core.domain.exception_handler import domain_exception_handler

        exc = getattr(exceptions, exc_name)("boom")
        response = domain_exception_handler(exc, {"view": None})

        assert response.status_code == expected
        assert response.data == {"detail": "boom"}

    def test_unauthorized_carries_bearer_challenge(self):
        from core.domain.exception_handler import domain_exception_handler
        from core.domain.exceptions import Unauthorized

        response = domain_exception_handler(Unauthorized(), {})
        assert response["WWW-Authenticate"].startswith("Bearer ")

    def test_foreign_exception_is_left_alone(self):
        from core.domain.exception_handler import domain_exception_handler

        assert domain_exception_handler(KeyError("x"), {}) is None


class TestAccessHelpers:
    """Unit tests for core.domain.access helpers."""

    def test_unknown_role_default_none(self):
        from unittest.mock import MagicMock
        from core.domain.access import apply_role_scope

        user = MagicMock(is_superuser=False, role="")
        qs = MagicMock()
        apply_role_scope(qs, user, scope_config={"victim": lambda q, u: q}, default="none")
        qs.none.assert_called_once()

    def test_unknown_role_default_all(self):
        from unittest.mock import MagicMock
        from core.domain.access import apply_role_scope

        user = MagicMock(is_superuser=False, role="auditor")
        qs = MagicMock()
        assert apply_role_scope(qs, user, scope_config={}, default="all") is qs

    def test_require_role_raises(self):
        from unittest.mock import MagicMock
        from core.domain.access import require_role
        from core.domain.exceptions import PermissionDenied

        user = MagicMock(is_superuser=False, role="victim")
        with pytest.raises(PermissionDenied):
            require_role(user, "police", "admin")

    def test_superuser_is_admin(self):
        from unittest.mock import MagicMock
        from core.domain.access import get_user_role_name

        assert get_user_role_name(MagicMock(is_superuser=True)) == "admin"


# ════════════════════════════════════════════════════════════════════
#  Management Commands
# ════════════════════════════════════════════════════════════════════

@pytest.mark.django_db
class TestSeedTestUsers:

    def test_seed_is_idempotent(self):
        from accounts.models import User

        call_command("seed_test_users")
        call_command("seed_test_users")

        assert User.objects.count() == 3
        assert set(User.objects.values_list("role", flat=True)) == {"victim", "police", "admin"}
        admin = User.objects.get(national_id="1111222233334")
        assert admin.check_password("admin1234")
        assert admin.email == "1111222233334@casetrack.saps.gov.za"
