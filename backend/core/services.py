"""
Core app services — **Service Layer**.

Contains cross-app aggregation and notification logic.  Views delegate
all business logic to the service classes defined here, keeping views
thin and ensuring testability.

╔══════════════════════════════════════════════════════════════════════╗
║  CROSS-APP IMPORT RULEBOOK                                         ║
║                                                                    ║
║  The core app is the ONLY app allowed to query models from other   ║
║  apps.  To prevent circular imports at module load time:           ║
║                                                                    ║
║  1. NEVER import models from other apps at the **module level**.   ║
║     Always import inside the method/function that needs them.      ║
║                                                                    ║
║  2. Preferred pattern:                                             ║
║       from django.apps import apps                                 ║
║       Case = apps.get_model("cases", "Case")                      ║
║                                                                    ║
║  3. Choice/enum classes (e.g. CaseStatus, CaseType) live in the   ║
║     respective app's ``models.py`` alongside the models.           ║
║     Import them lazily inside methods too.                          ║
║                                                                    ║
║  4. For aggregations, prefer Django ORM ``.aggregate()`` and       ║
║     ``.values().annotate()`` over Python-side loops.               ║
╚══════════════════════════════════════════════════════════════════════╝
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from django.apps import apps
from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.db.models import Count, Q, QuerySet

from core.constants import (
    DASHBOARD_CACHE_KEY_PREFIX,
    DASHBOARD_CACHE_TTL_SECONDS,
    PROVINCES,
)
from core.domain.access import ScopeConfig, apply_role_scope, get_user_role_name, require_role
from core.domain.exceptions import NotFound
from core.domain.notifications import NotificationDispatcher
from core.stores import DjangoNotificationStore, NotificationRecord

if TYPE_CHECKING:
    from accounts.models import User

logger = logging.getLogger(__name__)


# ════════════════════════════════════════════════════════════════════
#  Dashboard Aggregation Service
# ════════════════════════════════════════════════════════════════════

class DashboardAggregationService:
    """
    Produces an aggregated statistics dict consumed by
    ``DashboardStatsSerializer``.

    The statistics are **role-aware**:

    * **Police / Admin**: every case, with breakdowns by status, type and
      station, plus the number of high-priority and unassigned cases.
    * **Victim**: only the cases the victim reported, plus their unread
      notification count.  Staff-only breakdowns are returned empty.

    Results are cached per user.  The cache is invalidated as a whole by
    bumping a version number whenever a case or notification change is
    published (see ``CasesConfig.ready`` / ``CoreConfig.ready``).
    """

    _VERSION_KEY = f"{DASHBOARD_CACHE_KEY_PREFIX}:version"

    _DASHBOARD_SCOPE: ScopeConfig = {
        "admin":  lambda qs, u: qs,
        "police": lambda qs, u: qs,
        "victim": lambda qs, u: qs.filter(victim=u),
    }

    def __init__(self, user: User) -> None:
        self.user = user
        self.role = get_user_role_name(user)

    # ── Public API ──────────────────────────────────────────────────

    def get_stats(self) -> dict[str, Any]:
        """Return the dashboard statistics, from cache when fresh."""
        key = self._cache_key()
        stats = cache.get(key)
        if stats is None:
            stats = self._compute_stats()
            cache.set(key, stats, DASHBOARD_CACHE_TTL_SECONDS)
        return stats

    @classmethod
    def invalidate(cls) -> None:
        """Drop every cached dashboard (change-feed subscriber)."""
        cache.add(cls._VERSION_KEY, 1, timeout=None)
        try:
            cache.incr(cls._VERSION_KEY)
        except ValueError:
            # Evicted between add() and incr()
            cache.set(cls._VERSION_KEY, 1, timeout=None)

    # ── Private helpers ─────────────────────────────────────────────

    def _cache_key(self) -> str:
        version = cache.get(self._VERSION_KEY, 0)
        return f"{DASHBOARD_CACHE_KEY_PREFIX}:v{version}:user{self.user.pk}"

    def _get_case_queryset(self) -> QuerySet:
        """Return a ``Case`` queryset scoped to the requesting user's role."""
        Case = apps.get_model("cases", "Case")
        return apply_role_scope(
            Case.objects.all(),
            self.user,
            scope_config=self._DASHBOARD_SCOPE,
            default="none",
        )

    def _compute_stats(self) -> dict[str, Any]:
        from cases.models import CasePriority, CaseStatus

        case_qs = self._get_case_queryset()
        open_case = ~Q(status=CaseStatus.COMPLETED)

        aggregates = case_qs.aggregate(
            total_cases=Count("id"),
            in_progress=Count("id", filter=open_case & Q(is_overdue=False)),
            overdue=Count("id", filter=open_case & Q(is_overdue=True)),
            resolved=Count("id", filter=Q(status=CaseStatus.COMPLETED)),
            high_priority=Count("id", filter=Q(priority=CasePriority.HIGH)),
            unassigned=Count("id", filter=open_case & Q(officer__isnull=True)),
        )

        stats: dict[str, Any] = {
            "role": self.role or "",
            **aggregates,
            "unread_notifications": NotificationService(self.user).unread_count(),
            "cases_by_status": self._get_cases_by_status(case_qs),
            "cases_by_type": [],
            "cases_by_station": [],
        }
        if self.role in ("police", "admin"):
            stats["cases_by_type"] = self._group_count(case_qs, "type")
            stats["cases_by_station"] = self._group_count(case_qs, "station_name")
        return stats

    def _get_cases_by_status(self, case_qs: QuerySet) -> list[dict[str, Any]]:
        """Counts for every lifecycle status, in lifecycle order (zeros included)."""
        from cases.models import CaseStatus

        counts = {
            row["status"]: row["count"]
            for row in case_qs.values("status").annotate(count=Count("id")).order_by()
        }
        return [
            {"status": s.value, "label": s.label, "count": counts.get(s.value, 0)}
            for s in CaseStatus
        ]

    @staticmethod
    def _group_count(case_qs: QuerySet, field: str) -> list[dict[str, Any]]:
        rows = (
            case_qs
            .values(field)
            .annotate(count=Count("id"))
            .order_by("-count", field)
        )
        return [{"key": row[field] or "Unassigned", "count": row["count"]} for row in rows]


# ════════════════════════════════════════════════════════════════════
#  System Constants Service
# ════════════════════════════════════════════════════════════════════

class SystemConstantsService:
    """
    Gathers all system-wide choice enumerations into a single dict for
    the frontend, including the full status table (progress, label and
    timeline title per stage).

    This service is **stateless** — it does not depend on the requesting
    user.
    """

    @staticmethod
    def get_constants() -> dict[str, Any]:
        """Return all system constants as a dict."""
        from accounts.models import UserRole
        from cases.models import CasePriority, CaseType, StatusLabel
        from cases.policy import StatusPolicy

        to_list = SystemConstantsService._choices_to_list

        return {
            "case_statuses": StatusPolicy.stages(),
            "status_labels": to_list(StatusLabel),
            "case_types": to_list(CaseType),
            "case_priorities": to_list(CasePriority),
            "provinces": [{"value": p, "label": p} for p in PROVINCES],
            "roles": to_list(UserRole),
        }

    @staticmethod
    def _choices_to_list(
        choices_class: type,
    ) -> list[dict[str, str]]:
        """
        Convert a Django ``TextChoices`` class to a list of
        ``{"value": ..., "label": ...}`` dicts.
        """
        return [
            {"value": str(value), "label": str(label)}
            for value, label in choices_class.choices
        ]


# ═══════════════════════════════════════════════════════════════════
#  Notification Service
# ═══════════════════════════════════════════════════════════════════

class NotificationService:
    """
    Inbox operations for a given user, plus the admin-only broadcast of
    general notices.
    """

    def __init__(self, user: Any, dispatcher: NotificationDispatcher | None = None) -> None:
        self.user = user
        self.dispatcher = dispatcher or NotificationDispatcher(
            DjangoNotificationStore(),
            feed=apps.get_app_config("core").notification_feed,
        )

    def list_notifications(self) -> list[NotificationRecord]:
        """Return all notifications for ``self.user``, most recent first."""
        return self.dispatcher.list_for_user(self.user.pk)

    def unread_count(self) -> int:
        return self.dispatcher.unread_count(self.user.pk)

    def mark_as_read(self, notification_id: int) -> NotificationRecord:
        """
        Mark one of the user's notifications as read.

        Repeating the call is harmless.

        Raises:
            NotFound: The id is unknown or addressed to someone else.
        """
        record = self.dispatcher.store.get(notification_id)
        if record is None or record.recipient_id != self.user.pk:
            raise NotFound(f"Notification {notification_id} was not found.")
        self.dispatcher.mark_read(notification_id)
        return self.dispatcher.store.get(notification_id)

    def mark_all_as_read(self) -> int:
        """Mark every unread notification of the user; return how many changed."""
        return self.dispatcher.mark_all_read(self.user.pk)

    def broadcast(
        self,
        message: str,
        details: str = "",
        priority: str | None = None,
    ) -> list[NotificationRecord]:
        """
        Send a general notice (no case number) to every active victim.

        Raises:
            PermissionDenied: The requesting user is not an administrator.
        """
        from accounts.models import UserRole

        require_role(self.user, "admin", message="Only administrators can broadcast notices.")

        User = get_user_model()
        recipient_ids = list(
            User.objects
            .filter(role=UserRole.VICTIM, is_active=True)
            .values_list("pk", flat=True)
        )
        records = self.dispatcher.notify_notice(recipient_ids, message, details, priority)
        logger.info(
            "Broadcast notice to %d victim(s) by admin=%s", len(records), self.user.pk,
        )
        return records
