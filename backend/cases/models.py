"""
Cases app models.

Covers a reported crime from submission by the victim, through police
review and investigation, to resolution.  Each case keeps an
append-only timeline of ``CaseUpdate`` entries.

``progress`` and the display label of a case are **not** stored: they
are derived from ``status`` (and the overdue flag) by
``cases.policy.StatusPolicy``.
"""

from django.conf import settings
from django.db import models
from django.utils import timezone

from core.models import TimeStampedModel


# ────────────────────────────────────────────────────────────────────
# Choice enumerations
# ────────────────────────────────────────────────────────────────────

class CaseStatus(models.TextChoices):
    """
    Lifecycle stages, in their natural order.

    The declaration order is significant: it is the order the stages
    are presented in and the order ``StatusPolicy`` checks its table
    against.
    """

    SUBMITTED = "submitted", "Submitted"
    UNDER_REVIEW = "under-review", "Under Review"
    INVESTIGATION = "investigation", "Investigation"
    RESOLUTION = "resolution", "Resolution"
    COMPLETED = "completed", "Completed"


class StatusLabel(models.TextChoices):
    """Coarse label shown on dashboards."""

    COMPLETED = "Completed", "Completed"
    IN_PROGRESS = "In Progress", "In Progress"
    OVERDUE = "Overdue", "Overdue"


class CasePriority(models.TextChoices):
    LOW = "low", "Low"
    MEDIUM = "medium", "Medium"
    HIGH = "high", "High"


class CaseType(models.TextChoices):
    """Crime categories a victim can report."""

    THEFT = "Theft", "Theft"
    ASSAULT = "Assault", "Assault"
    BURGLARY = "Burglary", "Burglary"
    FRAUD = "Fraud", "Fraud"
    ROBBERY = "Robbery", "Robbery"
    DOMESTIC_VIOLENCE = "Domestic Violence", "Domestic Violence"
    VEHICLE_THEFT = "Vehicle Theft", "Vehicle Theft"
    VANDALISM = "Vandalism", "Vandalism"
    CYBERCRIME = "Cybercrime", "Cybercrime"
    OTHER = "Other", "Other"


# ────────────────────────────────────────────────────────────────────
# Models
# ────────────────────────────────────────────────────────────────────

class Case(TimeStampedModel):
    """
    A crime report and its investigation state.

    * ``case_number`` and ``type`` never change after creation.
    * ``status`` changes only through ``CaseRepository.transition``.
    * ``priority`` changes only through ``CaseRepository.escalate``.
    """

    case_number = models.CharField(
        max_length=20,
        unique=True,
        verbose_name="Case Number",
        help_text="CT-<year>-<6 digits>, assigned at creation.",
    )
    type = models.CharField(
        max_length=40,
        choices=CaseType.choices,
        verbose_name="Case Type",
        db_index=True,
    )
    description = models.TextField(
        blank=True,
        default="",
        verbose_name="Description",
    )
    status = models.CharField(
        max_length=20,
        choices=CaseStatus.choices,
        default=CaseStatus.SUBMITTED,
        verbose_name="Current Status",
        db_index=True,
    )
    priority = models.CharField(
        max_length=10,
        choices=CasePriority.choices,
        default=CasePriority.MEDIUM,
        verbose_name="Priority",
        db_index=True,
    )
    is_overdue = models.BooleanField(
        default=False,
        verbose_name="Overdue",
        help_text="Set by an administrator when the case has stalled.",
    )

    # ── Where it happened ───────────────────────────────────────────
    province = models.CharField(max_length=50, blank=True, default="", verbose_name="Province")
    city = models.CharField(max_length=100, blank=True, default="", verbose_name="City")
    location = models.CharField(
        max_length=500,
        blank=True,
        default="",
        verbose_name="Incident Location",
    )
    station_name = models.CharField(
        max_length=120,
        blank=True,
        default="",
        verbose_name="Police Station",
    )

    # ── People ──────────────────────────────────────────────────────
    victim = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="reported_cases",
        verbose_name="Victim",
    )
    officer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="assigned_cases",
        verbose_name="Investigating Officer",
    )
    anonymous = models.BooleanField(
        default=False,
        verbose_name="Anonymous Report",
    )

    # ── Dates ───────────────────────────────────────────────────────
    submitted_date = models.DateField(
        default=timezone.localdate,
        verbose_name="Submitted / Incident Date",
    )
    last_update = models.DateField(
        default=timezone.localdate,
        verbose_name="Last Update",
    )

    class Meta:
        verbose_name = "Case"
        verbose_name_plural = "Cases"
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return f"{self.case_number} ({self.type}) [{self.get_status_display()}]"


class CaseUpdate(models.Model):
    """
    One entry of a case's timeline.

    Entries are written only by case creation, a status transition or an
    escalation, and are never edited or deleted.  Insertion order is
    chronological order.
    """

    case = models.ForeignKey(
        Case,
        on_delete=models.CASCADE,
        related_name="updates",
        verbose_name="Case",
    )
    date = models.DateField(default=timezone.localdate, verbose_name="Date")
    title = models.CharField(max_length=255, verbose_name="Title")
    description = models.TextField(verbose_name="Description")
    stage = models.CharField(
        max_length=20,
        choices=CaseStatus.choices,
        verbose_name="Stage",
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="case_updates",
        verbose_name="Created By",
    )
    created_at = models.DateTimeField(auto_now_add=True, verbose_name="Created At")

    class Meta:
        verbose_name = "Case Update"
        verbose_name_plural = "Case Updates"
        ordering = ["created_at", "id"]

    def __str__(self):
        return f"{self.case.case_number}: {self.title} ({self.date})"
