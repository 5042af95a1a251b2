"""
Core app models.

Provides abstract base models and the ``Notification`` record shared by
every app.
"""

from django.conf import settings
from django.db import models


class TimeStampedModel(models.Model):
    """
    Abstract base model that provides self-updating ``created_at`` and
    ``updated_at`` timestamp fields for every concrete child model.
    """

    created_at = models.DateTimeField(
        auto_now_add=True,
        verbose_name="Created At",
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        verbose_name="Updated At",
    )

    class Meta:
        abstract = True


class NotificationKind(models.TextChoices):
    """Visual category of a notification in the victim's inbox."""

    INFO = "info", "Info"
    SUCCESS = "success", "Success"
    WARNING = "warning", "Warning"


class NotificationPriority(models.TextChoices):
    LOW = "low", "Low"
    MEDIUM = "medium", "Medium"
    HIGH = "high", "High"


class Notification(TimeStampedModel):
    """
    Message addressed to a single user.

    Case notifications (status change, escalation) carry the case number
    and a nullable link to the case; general notices such as new
    support resources have an empty ``case_number``.

    The only mutation after creation is marking it as read.
    """

    recipient = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="notifications",
        verbose_name="Recipient",
    )
    case = models.ForeignKey(
        "cases.Case",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="notifications",
        verbose_name="Related Case",
    )
    case_number = models.CharField(
        max_length=20,
        blank=True,
        default="",
        verbose_name="Case Number",
    )
    message = models.CharField(max_length=500, verbose_name="Message")
    details = models.TextField(blank=True, default="", verbose_name="Details")
    priority = models.CharField(
        max_length=10,
        choices=NotificationPriority.choices,
        null=True,
        blank=True,
        verbose_name="Priority",
    )
    kind = models.CharField(
        max_length=10,
        choices=NotificationKind.choices,
        default=NotificationKind.INFO,
        verbose_name="Kind",
    )
    is_read = models.BooleanField(default=False, verbose_name="Read")

    class Meta:
        verbose_name = "Notification"
        verbose_name_plural = "Notifications"
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["recipient", "is_read"]),
        ]

    def __str__(self):
        return f"[{self.recipient}] {self.message}"
