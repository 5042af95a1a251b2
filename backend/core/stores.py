"""
Notification storage.

``NotificationStore`` is the port the ``NotificationDispatcher`` writes
through.  Two implementations are provided:

* ``InMemoryNotificationStore`` — process-local, used by unit tests and
  by anything that needs a dispatcher without a database.
* ``DjangoNotificationStore`` — backed by ``core.models.Notification``.

Both return immutable ``NotificationRecord`` snapshots so callers never
hold a live ORM object.
"""

from __future__ import annotations

import itertools
import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from datetime import datetime

from django.utils import timezone

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NotificationRecord:
    """Snapshot of a stored notification."""

    id: int
    recipient_id: int
    message: str
    case_number: str = ""
    case_id: int | None = None
    details: str = ""
    priority: str | None = None
    kind: str = "info"
    unread: bool = True
    created_at: datetime | None = None

    @property
    def is_read(self) -> bool:
        return not self.unread


class NotificationStore(ABC):
    """Port for notification persistence."""

    @abstractmethod
    def add(
        self,
        recipient_id: int,
        *,
        message: str,
        case_number: str = "",
        case_id: int | None = None,
        details: str = "",
        priority: str | None = None,
        kind: str = "info",
    ) -> NotificationRecord:
        """Persist a new unread notification and return it."""

    @abstractmethod
    def get(self, notification_id: int) -> NotificationRecord | None:
        """Return the notification, or ``None`` if it does not exist."""

    @abstractmethod
    def mark_read(self, notification_id: int) -> bool:
        """
        Clear the unread flag.

        Returns ``True`` if the notification exists (whether or not it
        was already read), ``False`` for unknown ids.
        """

    @abstractmethod
    def mark_all_read(self, recipient_id: int) -> int:
        """Mark every unread notification of a recipient; return how many changed."""

    @abstractmethod
    def list_for_recipient(self, recipient_id: int) -> list[NotificationRecord]:
        """All notifications of a recipient, most recent first."""

    @abstractmethod
    def unread_count(self, recipient_id: int) -> int:
        """Number of unread notifications of a recipient."""


# ═══════════════════════════════════════════════════════════════════
#  In-memory implementation
# ═══════════════════════════════════════════════════════════════════


class InMemoryNotificationStore(NotificationStore):
    """Thread-safe dict-backed store.  Nothing survives the process."""

    def __init__(self) -> None:
        self._records: dict[int, NotificationRecord] = {}
        self._ids = itertools.count(1)
        self._lock = threading.RLock()

    def add(
        self,
        recipient_id: int,
        *,
        message: str,
        case_number: str = "",
        case_id: int | None = None,
        details: str = "",
        priority: str | None = None,
        kind: str = "info",
    ) -> NotificationRecord:
        with self._lock:
            record = NotificationRecord(
                id=next(self._ids),
                recipient_id=recipient_id,
                message=message,
                case_number=case_number,
                case_id=case_id,
                details=details,
                priority=priority,
                kind=kind,
                unread=True,
                created_at=timezone.now(),
            )
            self._records[record.id] = record
            return record

    def get(self, notification_id: int) -> NotificationRecord | None:
        with self._lock:
            return self._records.get(notification_id)

    def mark_read(self, notification_id: int) -> bool:
        with self._lock:
            record = self._records.get(notification_id)
            if record is None:
                return False
            if record.unread:
                self._records[notification_id] = replace(record, unread=False)
            return True

    def mark_all_read(self, recipient_id: int) -> int:
        with self._lock:
            changed = 0
            for record in list(self._records.values()):
                if record.recipient_id == recipient_id and record.unread:
                    self._records[record.id] = replace(record, unread=False)
                    changed += 1
            return changed

    def list_for_recipient(self, recipient_id: int) -> list[NotificationRecord]:
        with self._lock:
            mine = [r for r in self._records.values() if r.recipient_id == recipient_id]
        # ids grow monotonically, so they break created_at ties
        return sorted(mine, key=lambda r: (r.created_at, r.id), reverse=True)

    def unread_count(self, recipient_id: int) -> int:
        with self._lock:
            return sum(
                1 for r in self._records.values()
                if r.recipient_id == recipient_id and r.unread
            )


# ═══════════════════════════════════════════════════════════════════
#  Django ORM implementation
# ═══════════════════════════════════════════════════════════════════


class DjangoNotificationStore(NotificationStore):
    """Store backed by ``core.models.Notification``."""

    @staticmethod
    def to_record(notification) -> NotificationRecord:
        return NotificationRecord(
            id=notification.pk,
            recipient_id=notification.recipient_id,
            message=notification.message,
            case_number=notification.case_number,
            case_id=notification.case_id,
            details=notification.details,
            priority=notification.priority,
            kind=notification.kind,
            unread=not notification.is_read,
            created_at=notification.created_at,
        )

    def add(
        self,
        recipient_id: int,
        *,
        message: str,
        case_number: str = "",
        case_id: int | None = None,
        details: str = "",
        priority: str | None = None,
        kind: str = "info",
    ) -> NotificationRecord:
        from core.models import Notification

        notification = Notification.objects.create(
            recipient_id=recipient_id,
            case_id=case_id,
            case_number=case_number,
            message=message,
            details=details or "",
            priority=priority,
            kind=kind,
        )
        return self.to_record(notification)

    def get(self, notification_id: int) -> NotificationRecord | None:
        from core.models import Notification

        notification = Notification.objects.filter(pk=notification_id).first()
        return self.to_record(notification) if notification else None

    def mark_read(self, notification_id: int) -> bool:
        from core.models import Notification

        qs = Notification.objects.filter(pk=notification_id)
        if not qs.exists():
            return False
        qs.filter(is_read=False).update(is_read=True, updated_at=timezone.now())
        return True

    def mark_all_read(self, recipient_id: int) -> int:
        from core.models import Notification

        return (
            Notification.objects
            .filter(recipient_id=recipient_id, is_read=False)
            .update(is_read=True, updated_at=timezone.now())
        )

    def list_for_recipient(self, recipient_id: int) -> list[NotificationRecord]:
        from core.models import Notification

        qs = (
            Notification.objects
            .filter(recipient_id=recipient_id)
            .order_by("-created_at", "-id")
        )
        return [self.to_record(n) for n in qs]

    def unread_count(self, recipient_id: int) -> int:
        from core.models import Notification

        return Notification.objects.filter(
            recipient_id=recipient_id, is_read=False,
        ).count()
