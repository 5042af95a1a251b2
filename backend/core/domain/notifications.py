"""
core.domain.notifications — Notification dispatcher.

Centralises notification creation so every app uses one consistent
entry-point rather than writing ``Notification`` rows directly.

Design decisions
----------------
* **Synchronous** — the dispatcher writes in the calling thread.  The
  case repository calls it after the case mutation has been stored and
  treats any failure here as non-fatal.
* **Store-agnostic** — writes go through a ``core.stores.NotificationStore``
  so the same message rules run against the ORM and the in-memory store.
* **Change feed** — every stored notification publishes on the feed
  given at construction so inbox badges can refresh.

Usage::

    from core.domain.notifications import NotificationDispatcher

    dispatcher = NotificationDispatcher(DjangoNotificationStore(), feed=feed)
    dispatcher.notify_status_change(case, "investigation", note="")
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable

from core.models import NotificationKind, NotificationPriority

if TYPE_CHECKING:
    from cases.records import CaseRecord
    from core.domain.change_feed import ChangeFeed
    from core.stores import NotificationRecord, NotificationStore

logger = logging.getLogger(__name__)

# ── Message templates ───────────────────────────────────────────────
STATUS_CHANGE_MESSAGE = "Case {case_number} has moved to {title}"
STATUS_CHANGE_DETAILS = (
    "Your case status has been updated. The case is now in the {stage} stage."
)
ESCALATION_MESSAGE = "Case {case_number} has been escalated for priority handling"
ESCALATION_DETAILS = (
    "Your case has been flagged for urgent attention. "
    "A senior officer will review it shortly."
)


class NotificationDispatcher:
    """
    Builds and stores notifications addressed to case victims.

    Parameters
    ----------
    store : NotificationStore
        Where notifications are written.
    feed : ChangeFeed, optional
        Published once per stored notification.
    """

    def __init__(self, store: NotificationStore, feed: ChangeFeed | None = None) -> None:
        self.store = store
        self.feed = feed

    # ── Case events ─────────────────────────────────────────────────

    def notify_status_change(
        self,
        case: CaseRecord,
        new_status: str,
        note: str = "",
    ) -> NotificationRecord | None:
        """
        Tell the victim their case moved to ``new_status``.

        Completion is reported as a low-priority success; every other
        stage as a medium-priority info message.  The officer's note
        becomes the details text when one was given.

        Returns the stored notification, or ``None`` when the case has
        no victim.
        """
        from cases.models import CaseStatus
        from cases.policy import StatusPolicy

        if case.victim_id is None:
            return None

        title = StatusPolicy.title_of(new_status)
        completed = new_status == CaseStatus.COMPLETED
        details = (note or "").strip() or STATUS_CHANGE_DETAILS.format(stage=title.lower())

        return self._store(
            case.victim_id,
            case_id=case.id,
            case_number=case.case_number,
            message=STATUS_CHANGE_MESSAGE.format(case_number=case.case_number, title=title),
            details=details,
            priority=NotificationPriority.LOW if completed else NotificationPriority.MEDIUM,
            kind=NotificationKind.SUCCESS if completed else NotificationKind.INFO,
        )

    def notify_escalation(self, case: CaseRecord) -> NotificationRecord | None:
        """Tell the victim their case was escalated.  No-op without a victim."""
        if case.victim_id is None:
            return None

        return self._store(
            case.victim_id,
            case_id=case.id,
            case_number=case.case_number,
            message=ESCALATION_MESSAGE.format(case_number=case.case_number),
            details=ESCALATION_DETAILS,
            priority=NotificationPriority.HIGH,
            kind=NotificationKind.WARNING,
        )

    # ── General notices ─────────────────────────────────────────────

    def notify_notice(
        self,
        recipient_ids: Iterable[int],
        message: str,
        details: str = "",
        priority: str | None = None,
    ) -> list[NotificationRecord]:
        """Store a notice that is not tied to any case (empty case number)."""
        recipient_ids = list(recipient_ids)
        if not recipient_ids:
            logger.warning("notify_notice called with no recipients: %r", message)
            return []

        return [
            self._store(
                recipient_id,
                case_id=None,
                case_number="",
                message=message,
                details=details,
                priority=priority,
                kind=NotificationKind.INFO,
            )
            for recipient_id in recipient_ids
        ]

    # ── Inbox operations ────────────────────────────────────────────

    def mark_read(self, notification_id: int) -> bool:
        """Mark one notification read.  Unknown ids are ignored (returns ``False``)."""
        found = self.store.mark_read(notification_id)
        if found:
            self._publish()
        return found

    def mark_all_read(self, user_id: int) -> int:
        changed = self.store.mark_all_read(user_id)
        if changed:
            self._publish()
        return changed

    def list_for_user(self, user_id: int) -> list[NotificationRecord]:
        return self.store.list_for_recipient(user_id)

    def unread_count(self, user_id: int) -> int:
        return self.store.unread_count(user_id)

    # ── Internals ───────────────────────────────────────────────────

    def _store(self, recipient_id: int, **fields) -> NotificationRecord:
        record = self.store.add(recipient_id, **fields)
        logger.info(
            "Created notification #%s for user=%s [%s]",
            record.id,
            recipient_id,
            fields.get("case_number") or "notice",
        )
        self._publish()
        return record

    def _publish(self) -> None:
        if self.feed is not None:
            self.feed.publish()
