"""
Cases app serializers.

Contains all Request and Response serializers for the Cases API.
Serializers handle field definitions, read/write constraints, and field-level
validation only.  **No lifecycle logic lives here** — that belongs in
``services.py``.

Response serializers read ``CaseRecord`` / ``CaseUpdateRecord`` objects
(not model instances), so they are plain ``Serializer`` classes.

Structure
---------
1. Filter / query-param serializers
2. Case read serializers (timeline entry, list, detail)
3. Case write serializers (create)
4. Workflow action serializers (transition, assignment, overdue flag)
"""

from __future__ import annotations

from django.contrib.auth import get_user_model
from django.utils import timezone
from rest_framework import serializers

from core.constants import PROVINCES

from .models import CasePriority, CaseStatus, CaseType, StatusLabel

User = get_user_model()


# ═══════════════════════════════════════════════════════════════════
#  1. Filter / Query-Parameter Serializers
# ═══════════════════════════════════════════════════════════════════


class CaseFilterSerializer(serializers.Serializer):
    """
    Validates and cleans query-parameter filters for ``GET /api/cases/``.

    All fields are optional.  The view passes the validated dict directly
    to ``CaseQueryService.get_filtered_cases``.
    """

    search = serializers.CharField(
        required=False,
        max_length=100,
        allow_blank=True,
        help_text="Matches case number or case type (case-insensitive).",
    )
    status = serializers.ChoiceField(choices=CaseStatus.choices, required=False)
    status_label = serializers.ChoiceField(
        choices=StatusLabel.choices,
        required=False,
        help_text="Derived label: 'Completed', 'In Progress' or 'Overdue'.",
    )
    priority = serializers.ChoiceField(choices=CasePriority.choices, required=False)
    type = serializers.ChoiceField(choices=CaseType.choices, required=False)


# ═══════════════════════════════════════════════════════════════════
#  2. Case Read Serializers
# ═══════════════════════════════════════════════════════════════════


class CaseUpdateSerializer(serializers.Serializer):
    """One timeline entry."""

    id = serializers.IntegerField(read_only=True)
    date = serializers.DateField(read_only=True)
    title = serializers.CharField(read_only=True)
    description = serializers.CharField(read_only=True)
    stage = serializers.CharField(read_only=True)
    created_by = serializers.IntegerField(read_only=True, allow_null=True)


class CaseListSerializer(serializers.Serializer):
    """
    Compact representation for the list endpoint and dashboards.

    ``progress`` and ``status_label`` are derived from the status on
    every read.
    """

    id = serializers.IntegerField(read_only=True)
    case_number = serializers.CharField(read_only=True)
    type = serializers.CharField(read_only=True)
    status = serializers.CharField(read_only=True)
    status_label = serializers.CharField(read_only=True)
    progress = serializers.IntegerField(read_only=True)
    priority = serializers.CharField(read_only=True)
    is_overdue = serializers.BooleanField(read_only=True)
    province = serializers.CharField(read_only=True)
    city = serializers.CharField(read_only=True)
    station_name = serializers.CharField(read_only=True)
    victim_id = serializers.IntegerField(read_only=True, allow_null=True)
    officer_id = serializers.IntegerField(read_only=True, allow_null=True)
    anonymous = serializers.BooleanField(read_only=True)
    submitted_date = serializers.DateField(read_only=True)
    last_update = serializers.DateField(read_only=True)


class CaseDetailSerializer(CaseListSerializer):
    """Full case with its chronological timeline."""

    description = serializers.CharField(read_only=True)
    location = serializers.CharField(read_only=True)
    updates = CaseUpdateSerializer(many=True, read_only=True)


# ═══════════════════════════════════════════════════════════════════
#  3. Case Write Serializers
# ═══════════════════════════════════════════════════════════════════


class CaseCreateSerializer(serializers.Serializer):
    """
    Request body for ``POST /api/cases/``.

    The victim is always the requesting user; the case number, status,
    priority and station are assigned by the repository.
    """

    type = serializers.ChoiceField(choices=CaseType.choices, help_text="Crime category.")
    description = serializers.CharField(required=False, allow_blank=True, default="", max_length=5000)
    province = serializers.ChoiceField(
        choices=[(p, p) for p in PROVINCES],
        required=False,
        allow_blank=True,
        default="",
    )
    city = serializers.CharField(required=False, allow_blank=True, default="", max_length=100)
    location = serializers.CharField(required=False, allow_blank=True, default="", max_length=500)
    anonymous = serializers.BooleanField(required=False, default=False)
    incident_date = serializers.DateField(
        required=False,
        allow_null=True,
        default=None,
        help_text="Date of the incident; defaults to today.",
    )

    def validate_incident_date(self, value):
        if value is not None and value > timezone.localdate():
            raise serializers.ValidationError("Incident date cannot be in the future.")
        return value


# ═══════════════════════════════════════════════════════════════════
#  4. Workflow Action Serializers
# ═══════════════════════════════════════════════════════════════════


class CaseTransitionSerializer(serializers.Serializer):
    """
    Request body for ``POST /api/cases/{id}/transition/``.

    A non-empty note is required: it becomes the timeline description
    and the details of the victim's notification.
    """

    status = serializers.ChoiceField(choices=CaseStatus.choices, help_text="Target lifecycle status.")
    note = serializers.CharField(
        max_length=2000,
        allow_blank=False,
        trim_whitespace=True,
        help_text="Progress note shown to the victim.",
    )


class AssignOfficerSerializer(serializers.Serializer):
    """
    Request body for ``POST /api/cases/{id}/assign-officer/``.

    ``officer_id`` must reference an active police user; ``null``
    clears the assignment.
    """

    officer_id = serializers.IntegerField(allow_null=True, min_value=1)

    def validate_officer_id(self, value: int | None) -> int | None:
        if value is None:
            return value
        from accounts.models import UserRole

        if not User.objects.filter(pk=value, role=UserRole.POLICE, is_active=True).exists():
            raise serializers.ValidationError("No active police officer with this id.")
        return value


class FlagOverdueSerializer(serializers.Serializer):
    """Request body for ``POST /api/cases/{id}/flag-overdue/``."""

    overdue = serializers.BooleanField(required=False, default=True)
