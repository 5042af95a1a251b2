"""
Root conftest.py — shared fixtures for the entire test suite.

Provides:
  - ``api_client`` fixture returning a DRF ``APIClient``.
  - ``create_user`` factory fixture for creating test users.
  - ``auth_header`` fixture for authenticated requests (JWT).
  - ``client_for`` fixture returning an ``APIClient`` logged in as a user.
  - ``memory_repository`` fixture: a ``CaseRepository`` over in-memory stores.
"""

from __future__ import annotations

import pytest
from django.core.cache import cache
from rest_framework.test import APIClient


@pytest.fixture(autouse=True)
def _clear_cache():
    """Dashboard stats are cached; start every test from a cold cache."""
    cache.clear()
    yield
    cache.clear()


@pytest.fixture()
def api_client() -> APIClient:
    """Unauthenticated DRF test client."""
    return APIClient()


@pytest.fixture()
def create_user(db):
    """
    Factory fixture that creates a user with sensible defaults.

    Usage::

        def test_something(create_user):
            victim = create_user()
            officer = create_user(role="police", full_name="Sgt Dlamini")
    """
    from accounts.models import User, UserRole

    _counter = 0

    def _factory(
        *,
        username: str | None = None,
        password: str = "TestPass123!",
        email: str | None = None,
        national_id: str | None = None,
        phone_number: str | None = None,
        role=UserRole.VICTIM,
        is_active: bool = True,
        **kwargs,
    ) -> User:
        nonlocal _counter
        _counter += 1
        if national_id is None:
            national_id = f"{_counter:013d}"
        if username is None:
            username = national_id
        if email is None:
            email = f"{username}@test.local"
        if phone_number is None:
            phone_number = f"08{_counter:08d}"

        return User.objects.create_user(
            username=username,
            password=password,
            email=email,
            national_id=national_id,
            phone_number=phone_number,
            role=role,
            is_active=is_active,
            **kwargs,
        )

    return _factory


@pytest.fixture()
def auth_header(create_user):
    """
    Returns a helper function that creates a user and returns an
    ``Authorization`` header dict with a valid JWT access token.

    Usage::

        def test_protected(auth_header, api_client):
            header = auth_header(role="police")
            api_client.credentials(HTTP_AUTHORIZATION=header["Authorization"])
            resp = api_client.get("/api/core/dashboard/")
            assert resp.status_code != 401
    """
    from rest_framework_simplejwt.tokens import AccessToken

    def _make(**user_kwargs) -> dict[str, str]:
        user = create_user(**user_kwargs)
        token = AccessToken.for_user(user)
        return {"Authorization": f"Bearer {token}"}

    return _make


@pytest.fixture()
def client_for():
    """
    Returns a helper that builds an ``APIClient`` carrying a JWT for an
    existing user.
    """
    from rest_framework_simplejwt.tokens import AccessToken

    def _make(user) -> APIClient:
        client = APIClient()
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {AccessToken.for_user(user)}")
        return client

    return _make


@pytest.fixture()
def memory_repository():
    """
    A ``CaseRepository`` wired to in-memory stores and a private change
    feed.  No database access.
    """
    from cases.services import CaseRepository
    from cases.stores import InMemoryCaseStore
    from core.domain.change_feed import ChangeFeed
    from core.domain.notifications import NotificationDispatcher
    from core.stores import InMemoryNotificationStore

    notifications = InMemoryNotificationStore()
    dispatcher = NotificationDispatcher(notifications, feed=ChangeFeed("test-notifications"))
    return CaseRepository(
        InMemoryCaseStore(),
        dispatcher=dispatcher,
        feed=ChangeFeed("test-cases"),
    )
