"""
Core app serializers.

Serializers for the aggregated endpoints served by the core app
(dashboard, system constants) and for the notification inbox.  The
response serializers work exclusively with plain Python dicts and
records produced by the service layer, keeping the core app decoupled
from concrete model implementations in ``cases`` and ``accounts``.
"""

from __future__ import annotations

from rest_framework import serializers

from .models import NotificationPriority


# ════════════════════════════════════════════════════════════════════
#  Dashboard Statistics
# ════════════════════════════════════════════════════════════════════

class CasesByStatusSerializer(serializers.Serializer):
    """
    Case count for one lifecycle status.

    Example::

        {"status": "investigation", "label": "Investigation", "count": 12}
    """

    status = serializers.CharField(help_text="Machine-readable status key.")
    label = serializers.CharField(help_text="Human-readable status label.")
    count = serializers.IntegerField(help_text="Number of cases in this status.")


class GroupCountSerializer(serializers.Serializer):
    """
    Case count for one value of a grouping field (type or station).

    Example::

        {"key": "Gauteng Central SAPS", "count": 7}
    """

    key = serializers.CharField()
    count = serializers.IntegerField()


class DashboardStatsSerializer(serializers.Serializer):
    """
    Top-level response serializer for ``GET /api/core/dashboard/``.

    Response shape::

        {
            "role": "police",
            "total_cases": 40,
            "in_progress": 25,
            "overdue": 3,
            "resolved": 12,
            "high_priority": 4,
            "unassigned": 9,
            "unread_notifications": 0,
            "cases_by_status": [...],
            "cases_by_type": [...],
            "cases_by_station": [...]
        }
    """

    role = serializers.CharField(allow_blank=True)
    total_cases = serializers.IntegerField(help_text="Cases visible to the user.")
    in_progress = serializers.IntegerField(help_text="Open cases not flagged overdue.")
    overdue = serializers.IntegerField(help_text="Open cases flagged as stalled.")
    resolved = serializers.IntegerField(help_text="Completed cases.")
    high_priority = serializers.IntegerField(help_text="Escalated cases.")
    unassigned = serializers.IntegerField(help_text="Open cases without an investigating officer.")
    unread_notifications = serializers.IntegerField(help_text="Unread notifications of the requesting user.")

    cases_by_status = CasesByStatusSerializer(many=True)
    cases_by_type = GroupCountSerializer(many=True, help_text="Police/admin only.")
    cases_by_station = GroupCountSerializer(many=True, help_text="Police/admin only.")


# ════════════════════════════════════════════════════════════════════
#  System Constants / Enums
# ════════════════════════════════════════════════════════════════════

class ChoiceItemSerializer(serializers.Serializer):
    """
    A single key-label pair representing one choice/enum option.

    Example::

        {"value": "Theft", "label": "Theft"}
    """

    value = serializers.CharField(
        help_text="Machine-readable value to send in API requests.",
    )
    label = serializers.CharField(
        help_text="Human-readable display label for the UI.",
    )


class StatusStageSerializer(ChoiceItemSerializer):
    """
    One row of the status table.

    Example::

        {"value": "investigation", "label": "Investigation", "progress": 60,
         "title": "Investigation Started", "status_label": "In Progress"}
    """

    progress = serializers.IntegerField()
    title = serializers.CharField(help_text="Timeline title written on entry.")
    status_label = serializers.CharField(help_text="Dashboard label when not overdue.")


class SystemConstantsSerializer(serializers.Serializer):
    """
    Top-level response serializer for ``GET /api/core/constants/``.

    Provides all system-wide choice enumerations so the frontend can
    dynamically build dropdowns, filters, and progress bars **without**
    hardcoding values.
    """

    case_statuses = StatusStageSerializer(many=True)
    status_labels = ChoiceItemSerializer(many=True)
    case_types = ChoiceItemSerializer(many=True)
    case_priorities = ChoiceItemSerializer(many=True)
    provinces = ChoiceItemSerializer(many=True)
    roles = ChoiceItemSerializer(many=True)


# ════════════════════════════════════════════════════════════════════
#  Notifications
# ════════════════════════════════════════════════════════════════════

class NotificationSerializer(serializers.Serializer):
    """
    Read-only serializer for ``NotificationRecord`` snapshots.

    ``case_number`` is an empty string for general notices.
    """

    id = serializers.IntegerField(read_only=True, help_text="Notification PK.")
    case_id = serializers.IntegerField(read_only=True, allow_null=True)
    case_number = serializers.CharField(read_only=True, allow_blank=True)
    message = serializers.CharField(read_only=True)
    details = serializers.CharField(read_only=True, allow_blank=True)
    priority = serializers.CharField(read_only=True, allow_null=True)
    kind = serializers.CharField(read_only=True)
    unread = serializers.BooleanField(read_only=True)
    created_at = serializers.DateTimeField(read_only=True)


class UnreadCountSerializer(serializers.Serializer):
    unread = serializers.IntegerField(read_only=True)


class MarkAllReadResponseSerializer(serializers.Serializer):
    updated = serializers.IntegerField(read_only=True)


class BroadcastNoticeSerializer(serializers.Serializer):
    """Request body for ``POST /api/core/notifications/broadcast/``."""

    message = serializers.CharField(max_length=500)
    details = serializers.CharField(required=False, allow_blank=True, default="")
    priority = serializers.ChoiceField(
        choices=NotificationPriority.choices,
        required=False,
        allow_null=True,
        default=None,
    )
