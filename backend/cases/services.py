"""
Cases Service Layer.

This module is the **single source of truth** for case lifecycle logic.
Views stay *thin*: they validate input through serializers, call one
of the services below, and wrap the result in a DRF ``Response``.

Architecture
------------
- ``CaseRepository``    — create / get / list / transition / escalate,
                          plus officer assignment and the overdue flag.
                          Works over any ``CaseStore`` and notifies the
                          victim through a ``NotificationDispatcher``.
- ``CaseWorkflowService`` — role guard in front of the repository for
                          the HTTP layer.
- ``CaseQueryService``  — role-scoped, filtered case listings (ORM).
- ``get_case_repository`` — the production wiring (Django stores and
                          the feeds owned by the app configs).

Repository instances are explicit: tests build one over
``InMemoryCaseStore`` / ``InMemoryNotificationStore`` and nothing is
shared between them.
"""

from __future__ import annotations

import logging
import random
from datetime import date
from typing import TYPE_CHECKING, Any, Callable

from django.apps import apps
from django.db.models import Q, QuerySet
from django.utils import timezone

from core.constants import (
    CASE_NUMBER_MAX_ATTEMPTS,
    CASE_NUMBER_MAX_SUFFIX,
    CASE_NUMBER_MIN_SUFFIX,
    CASE_NUMBER_PREFIX,
    STATION_SUFFIX,
)
from core.domain.access import ScopeConfig, apply_role_scope, require_role
from core.domain.exceptions import Conflict, InvalidTransition, NotFound, ValidationFailed

from .models import CasePriority, CaseStatus, CaseType, StatusLabel
from .policy import StatusPolicy
from .records import CaseRecord, UpdateDraft
from .stores import CaseStore, DjangoCaseStore

if TYPE_CHECKING:
    from accounts.models import User
    from core.domain.change_feed import ChangeFeed
    from core.domain.notifications import NotificationDispatcher

logger = logging.getLogger(__name__)

SUBMITTED_TITLE = "Case Submitted"
SUBMITTED_DESCRIPTION = (
    "Your case has been successfully submitted and assigned a case number."
)
ESCALATED_TITLE = "Case Escalated"
ESCALATED_DESCRIPTION = (
    "This case has been escalated for priority handling by administration."
)


def generate_case_number(today: date | None = None, rng: random.Random | None = None) -> str:
    """
    Draw a case number of the form ``CT-<year>-<6 digits>``.

    Uniqueness is **not** guaranteed here; ``CaseRepository.create``
    checks the store and redraws on collision.
    """
    today = today or timezone.localdate()
    rng = rng or random
    suffix = rng.randint(CASE_NUMBER_MIN_SUFFIX, CASE_NUMBER_MAX_SUFFIX)
    return f"{CASE_NUMBER_PREFIX}-{today.year}-{suffix:06d}"


def station_for(province: str) -> str:
    """Name of the station that handles reports from ``province``."""
    province = (province or "").strip()
    return f"{province} {STATION_SUFFIX}" if province else ""


# ═══════════════════════════════════════════════════════════════════
#  Case Repository
# ═══════════════════════════════════════════════════════════════════


class CaseRepository:
    """
    Owns case records and their timelines.

    Parameters
    ----------
    store : CaseStore
        Persistence backend.
    dispatcher : NotificationDispatcher, optional
        Receives status-change and escalation events for cases that have
        a victim.  Failures are logged and do not undo the case change.
    feed : ChangeFeed, optional
        Published after every successful create or mutation.
    case_number_factory : callable, optional
        Zero-argument callable returning a candidate case number.
        Defaults to ``generate_case_number``.
    """

    def __init__(
        self,
        store: CaseStore,
        dispatcher: NotificationDispatcher | None = None,
        feed: ChangeFeed | None = None,
        case_number_factory: Callable[[], str] | None = None,
    ) -> None:
        self.store = store
        self.dispatcher = dispatcher
        self.feed = feed
        self.case_number_factory = case_number_factory or generate_case_number

    # ── Creation ────────────────────────────────────────────────────

    def create(
        self,
        victim_id: int | None,
        type: str,
        *,
        province: str = "",
        city: str = "",
        location: str = "",
        description: str = "",
        anonymous: bool = False,
        incident_date: date | None = None,
    ) -> CaseRecord:
        """
        Register a new case in the ``submitted`` stage.

        The case starts with a single "Case Submitted" timeline entry
        dated today and attributed to the victim.  No notification is
        sent; the change feed is published.

        Raises
        ------
        ValidationFailed
            If ``type`` is not a known case type.
        Conflict
            If no unused case number was found within
            ``CASE_NUMBER_MAX_ATTEMPTS`` draws.
        """
        if type not in CaseType.values:
            raise ValidationFailed(
                f"Unknown case type '{type}'. Expected one of: {', '.join(CaseType.values)}."
            )

        today = timezone.localdate()
        initial = UpdateDraft(
            title=SUBMITTED_TITLE,
            description=SUBMITTED_DESCRIPTION,
            stage=CaseStatus.SUBMITTED,
            created_by=victim_id,
        )

        for attempt in range(1, CASE_NUMBER_MAX_ATTEMPTS + 1):
            case_number = self.case_number_factory()
            if self.store.case_number_exists(case_number):
                logger.debug("Case number %s taken (attempt %d)", case_number, attempt)
                continue

            draft = CaseRecord(
                id=None,
                case_number=case_number,
                type=type,
                status=CaseStatus.SUBMITTED,
                priority=CasePriority.MEDIUM,
                submitted_date=incident_date or today,
                last_update=today,
                victim_id=victim_id,
                description=description,
                province=province,
                city=city,
                location=location,
                station_name=station_for(province),
                anonymous=anonymous,
            )
            try:
                record = self.store.add(draft, initial)
            except Conflict:
                # Lost a race for the number between the check and the insert.
                logger.debug("Case number %s taken on insert (attempt %d)", case_number, attempt)
                continue

            logger.info(
                "Case %s created (id=%s, type=%s, victim=%s)",
                record.case_number, record.id, record.type, victim_id,
            )
            self._publish()
            return record

        raise Conflict(
            f"Could not allocate a unique case number after {CASE_NUMBER_MAX_ATTEMPTS} attempts."
        )

    # ── Reads ───────────────────────────────────────────────────────

    def get(self, case_id: int) -> CaseRecord | None:
        return self.store.get(case_id)

    def list_by_victim(self, victim_id: int) -> list[CaseRecord]:
        """Cases reported by ``victim_id``, newest first."""
        return self.store.list_by_victim(victim_id)

    def list_all(self) -> list[CaseRecord]:
        return self.store.list_all()

    # ── Mutations ───────────────────────────────────────────────────

    def transition(
        self,
        case_id: int,
        new_status: str,
        note: str = "",
        acting_user_id: int | None = None,
    ) -> bool:
        """
        Move a case to ``new_status`` and record it on the timeline.

        Any status may follow any other, including the current one;
        every call appends exactly one timeline entry.  The overdue flag
        is cleared.

        Returns
        -------
        bool
            ``False`` (nothing changed, nobody notified) if the case
            does not exist.

        Raises
        ------
        InvalidTransition
            If ``new_status`` is not a ``CaseStatus`` value.
        """
        if new_status not in CaseStatus.values:
            raise InvalidTransition(
                target=str(new_status),
                reason=f"Unknown case status; expected one of {', '.join(CaseStatus.values)}",
            )

        entry = UpdateDraft(
            title=StatusPolicy.title_of(new_status),
            description=StatusPolicy.describe(new_status, note),
            stage=new_status,
            created_by=acting_user_id,
        )
        record = self.store.apply(
            case_id, {"status": new_status, "is_overdue": False}, entry,
        )
        if record is None:
            logger.info("Transition of unknown case id=%s ignored", case_id)
            return False

        logger.info(
            "Case %s moved to %s by user=%s", record.case_number, new_status, acting_user_id,
        )
        self._after_change(
            record,
            lambda dispatcher: dispatcher.notify_status_change(record, new_status, note),
        )
        return True

    def escalate(self, case_id: int, acting_user_id: int | None = None) -> bool:
        """
        Raise a case to high priority and record the escalation.

        The status is unchanged; the timeline entry carries the current
        stage.  Escalating twice appends two entries.
        """
        entry = UpdateDraft(
            title=ESCALATED_TITLE,
            description=ESCALATED_DESCRIPTION,
            stage=None,
            created_by=acting_user_id,
        )
        record = self.store.apply(
            case_id, {"priority": CasePriority.HIGH, "is_overdue": False}, entry,
        )
        if record is None:
            logger.info("Escalation of unknown case id=%s ignored", case_id)
            return False

        logger.info("Case %s escalated by user=%s", record.case_number, acting_user_id)
        self._after_change(record, lambda dispatcher: dispatcher.notify_escalation(record))
        return True

    def assign_officer(self, case_id: int, officer_id: int | None) -> bool:
        """Set (or with ``None`` clear) the investigating officer."""
        record = self.store.apply(case_id, {"officer_id": officer_id})
        if record is None:
            return False
        logger.info("Case %s assigned to officer=%s", record.case_number, officer_id)
        self._after_change(record)
        return True

    def flag_overdue(self, case_id: int, overdue: bool = True) -> bool:
        """Set the stalled flag that turns an open case's label to ``Overdue``."""
        record = self.store.apply(case_id, {"is_overdue": bool(overdue)})
        if record is None:
            return False
        logger.info("Case %s overdue flag set to %s", record.case_number, bool(overdue))
        self._after_change(record)
        return True

    # ── Internals ───────────────────────────────────────────────────

    def _after_change(
        self,
        record: CaseRecord,
        dispatch: Callable[[NotificationDispatcher], Any] | None = None,
    ) -> None:
        if dispatch is not None and self.dispatcher is not None:
            try:
                dispatch(self.dispatcher)
            except Exception:
                logger.exception(
                    "Notification dispatch failed for case %s", record.case_number,
                )
        self._publish()

    def _publish(self) -> None:
        if self.feed is not None:
            self.feed.publish()


def get_case_repository() -> CaseRepository:
    """Repository over the database, wired to the app-level change feeds."""
    from core.domain.notifications import NotificationDispatcher
    from core.stores import DjangoNotificationStore

    return CaseRepository(
        store=DjangoCaseStore(),
        dispatcher=NotificationDispatcher(
            DjangoNotificationStore(),
            feed=apps.get_app_config("core").notification_feed,
        ),
        feed=apps.get_app_config("cases").change_feed,
    )


# ═══════════════════════════════════════════════════════════════════
#  Workflow Service
# ═══════════════════════════════════════════════════════════════════


class CaseWorkflowService:
    """
    Role-guarded entry point used by ``CaseViewSet`` for every write.

    Wraps a ``CaseRepository``: checks the caller's role, turns a
    ``False`` result (unknown case) into ``NotFound`` and returns the
    fresh record for the response.
    """

    def __init__(self, repository: CaseRepository | None = None) -> None:
        self.repository = repository or get_case_repository()

    def create_case(self, user: User, validated_data: dict[str, Any]) -> CaseRecord:
        """Victims report cases for themselves."""
        require_role(user, "victim", message="Only victims can report a case.")
        return self.repository.create(
            user.pk,
            validated_data["type"],
            province=validated_data.get("province", ""),
            city=validated_data.get("city", ""),
            location=validated_data.get("location", ""),
            description=validated_data.get("description", ""),
            anonymous=validated_data.get("anonymous", False),
            incident_date=validated_data.get("incident_date"),
        )

    def transition(self, user: User, case_id: int, new_status: str, note: str) -> CaseRecord:
        require_role(user, "police", "admin")
        ok = self.repository.transition(case_id, new_status, note, acting_user_id=user.pk)
        return self._fetch(ok, case_id)

    def escalate(self, user: User, case_id: int) -> CaseRecord:
        require_role(user, "admin", message="Only administrators can escalate a case.")
        ok = self.repository.escalate(case_id, acting_user_id=user.pk)
        return self._fetch(ok, case_id)

    def assign_officer(self, user: User, case_id: int, officer_id: int | None) -> CaseRecord:
        require_role(user, "police", "admin")
        ok = self.repository.assign_officer(case_id, officer_id)
        return self._fetch(ok, case_id)

    def flag_overdue(self, user: User, case_id: int, overdue: bool) -> CaseRecord:
        require_role(user, "admin", message="Only administrators can flag a case as overdue.")
        ok = self.repository.flag_overdue(case_id, overdue)
        return self._fetch(ok, case_id)

    def _fetch(self, ok: bool, case_id: int) -> CaseRecord:
        record = self.repository.get(case_id) if ok else None
        if record is None:
            raise NotFound(f"Case with id {case_id} was not found.")
        return record


# ═══════════════════════════════════════════════════════════════════
#  Query Service
# ═══════════════════════════════════════════════════════════════════


class CaseQueryService:
    """
    Role-scoped case listings for the HTTP layer.

    Victims see only the cases they reported; police officers and
    administrators see every case.
    """

    _CASE_SCOPE: ScopeConfig = {
        "admin":  lambda qs, u: qs,
        "police": lambda qs, u: qs,
        "victim": lambda qs, u: qs.filter(victim=u),
    }

    @staticmethod
    def scoped_queryset(user: User) -> QuerySet:
        from .models import Case

        qs = Case.objects.prefetch_related("updates").order_by("-created_at", "-id")
        return apply_role_scope(
            qs, user, scope_config=CaseQueryService._CASE_SCOPE, default="none",
        )

    @staticmethod
    def get_filtered_cases(user: User, filters: dict[str, Any]) -> list[CaseRecord]:
        """
        Apply the role scope and the optional list filters.

        Parameters
        ----------
        user : User
            The requesting user.
        filters : dict
            Validated output of ``CaseFilterSerializer``: any of
            ``search`` (case number or type), ``status``,
            ``status_label``, ``priority``, ``type``.

        Returns
        -------
        list[CaseRecord]
            Newest first.
        """
        qs = CaseQueryService.scoped_queryset(user)

        search = (filters.get("search") or "").strip()
        if search:
            qs = qs.filter(Q(case_number__icontains=search) | Q(type__icontains=search))
        if filters.get("status"):
            qs = qs.filter(status=filters["status"])
        if filters.get("priority"):
            qs = qs.filter(priority=filters["priority"])
        if filters.get("type"):
            qs = qs.filter(type=filters["type"])
        if filters.get("status_label"):
            qs = qs.filter(CaseQueryService.label_filter(filters["status_label"]))

        return [DjangoCaseStore.to_record(case) for case in qs]

    @staticmethod
    def label_filter(label: str) -> Q:
        """Translate a derived status label into a database condition."""
        if label == StatusLabel.COMPLETED:
            return Q(status=CaseStatus.COMPLETED)
        open_case = ~Q(status=CaseStatus.COMPLETED)
        if label == StatusLabel.OVERDUE:
            return open_case & Q(is_overdue=True)
        return open_case & Q(is_overdue=False)

    @staticmethod
    def get_case_detail(user: User, case_id: int) -> CaseRecord:
        """
        Return one case visible to ``user``.

        Raises
        ------
        NotFound
            If the case does not exist or lies outside the user's scope.
        """
        case = CaseQueryService.scoped_queryset(user).filter(pk=case_id).first()
        if case is None:
            raise NotFound(f"Case with id {case_id} was not found.")
        return DjangoCaseStore.to_record(case)
