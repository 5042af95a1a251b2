"""
Case storage.

``CaseStore`` is the port the ``CaseRepository`` is written against.
Lifecycle rules (numbering, timeline titles, notifications) live once
in the repository; a store only persists records and guarantees that a
mutation and its timeline entry are applied together or not at all.

Implementations
---------------
``InMemoryCaseStore``  process-local, lock-guarded; used by unit tests.
``DjangoCaseStore``    ``Case`` / ``CaseUpdate`` rows, each mutation in
                       ``transaction.atomic()`` with the case row locked.
"""

from __future__ import annotations

import itertools
import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Any

from django.db import IntegrityError, transaction
from django.utils import timezone

from core.domain.exceptions import Conflict
from core.domain.transactions import locked_or_none

from .records import CaseRecord, CaseUpdateRecord, UpdateDraft

logger = logging.getLogger(__name__)

#: Fields ``apply`` may change.  Everything else is fixed at creation.
MUTABLE_FIELDS = frozenset({"status", "priority", "is_overdue", "officer_id"})


class CaseStore(ABC):
    """Port for case persistence."""

    @abstractmethod
    def case_number_exists(self, case_number: str) -> bool:
        """Whether a case already uses ``case_number``."""

    @abstractmethod
    def add(self, record: CaseRecord, initial: UpdateDraft) -> CaseRecord:
        """
        Persist a new case together with its first timeline entry.

        ``record.id`` and ``record.updates`` are ignored; the stored
        record is returned with both filled in.

        Raises
        ------
        Conflict
            If ``record.case_number`` is already taken.
        """

    @abstractmethod
    def get(self, case_id: int) -> CaseRecord | None:
        """Return the case with its timeline, or ``None``."""

    @abstractmethod
    def list_by_victim(self, victim_id: int) -> list[CaseRecord]:
        """Cases reported by ``victim_id``, most recently created first."""

    @abstractmethod
    def list_all(self) -> list[CaseRecord]:
        """Every case, most recently created first."""

    @abstractmethod
    def apply(
        self,
        case_id: int,
        changes: dict[str, Any],
        update: UpdateDraft | None = None,
    ) -> CaseRecord | None:
        """
        Atomically change fields, refresh ``last_update`` and optionally
        append a timeline entry.

        Returns the updated record, or ``None`` (and changes nothing)
        when the case does not exist.
        """

    @staticmethod
    def _check_changes(changes: dict[str, Any]) -> None:
        illegal = set(changes) - MUTABLE_FIELDS
        if illegal:
            raise ValueError(
                f"Case field(s) cannot be changed after creation: {', '.join(sorted(illegal))}"
            )


# ═══════════════════════════════════════════════════════════════════
#  In-memory implementation
# ═══════════════════════════════════════════════════════════════════


class InMemoryCaseStore(CaseStore):
    """
    Dict-backed store.

    All reads and writes hold one re-entrant lock, so concurrent
    ``apply`` calls on the same case are serialised.  Returned records
    are copies; mutating them does not affect the store.
    """

    def __init__(self) -> None:
        self._cases: dict[int, CaseRecord] = {}
        self._case_ids = itertools.count(1)
        self._update_ids = itertools.count(1)
        self._lock = threading.RLock()

    @staticmethod
    def _copy(record: CaseRecord) -> CaseRecord:
        return replace(record, updates=list(record.updates))

    def _entry(self, draft: UpdateDraft, stage: str) -> CaseUpdateRecord:
        return CaseUpdateRecord(
            id=next(self._update_ids),
            date=timezone.localdate(),
            title=draft.title,
            description=draft.description,
            stage=draft.stage or stage,
            created_by=draft.created_by,
        )

    def case_number_exists(self, case_number: str) -> bool:
        with self._lock:
            return any(c.case_number == case_number for c in self._cases.values())

    def add(self, record: CaseRecord, initial: UpdateDraft) -> CaseRecord:
        with self._lock:
            if self.case_number_exists(record.case_number):
                raise Conflict(f"Case number {record.case_number} is already in use.")
            stored = replace(
                record,
                id=next(self._case_ids),
                created_at=timezone.now(),
                updates=[],
            )
            stored.updates.append(self._entry(initial, stored.status))
            self._cases[stored.id] = stored
            return self._copy(stored)

    def get(self, case_id: int) -> CaseRecord | None:
        with self._lock:
            record = self._cases.get(case_id)
            return self._copy(record) if record is not None else None

    def list_by_victim(self, victim_id: int) -> list[CaseRecord]:
        with self._lock:
            mine = [c for c in self._cases.values() if c.victim_id == victim_id]
            return [self._copy(c) for c in sorted(mine, key=lambda c: c.id, reverse=True)]

    def list_all(self) -> list[CaseRecord]:
        with self._lock:
            everything = sorted(self._cases.values(), key=lambda c: c.id, reverse=True)
            return [self._copy(c) for c in everything]

    def apply(
        self,
        case_id: int,
        changes: dict[str, Any],
        update: UpdateDraft | None = None,
    ) -> CaseRecord | None:
        self._check_changes(changes)
        with self._lock:
            current = self._cases.get(case_id)
            if current is None:
                return None
            changed = replace(
                current,
                last_update=timezone.localdate(),
                updates=list(current.updates),
                **changes,
            )
            if update is not None:
                changed.updates.append(self._entry(update, changed.status))
            self._cases[case_id] = changed
            return self._copy(changed)


# ═══════════════════════════════════════════════════════════════════
#  Django ORM implementation
# ═══════════════════════════════════════════════════════════════════


class DjangoCaseStore(CaseStore):
    """Store backed by ``cases.models.Case`` and ``CaseUpdate``."""

    @staticmethod
    def to_record(case) -> CaseRecord:
        """Convert a ``Case`` row (ideally with ``updates`` prefetched)."""
        return CaseRecord(
            id=case.pk,
            case_number=case.case_number,
            type=case.type,
            status=case.status,
            priority=case.priority,
            submitted_date=case.submitted_date,
            last_update=case.last_update,
            victim_id=case.victim_id,
            officer_id=case.officer_id,
            description=case.description,
            province=case.province,
            city=case.city,
            location=case.location,
            station_name=case.station_name,
            anonymous=case.anonymous,
            is_overdue=case.is_overdue,
            created_at=case.created_at,
            updates=[
                CaseUpdateRecord(
                    id=u.pk,
                    date=u.date,
                    title=u.title,
                    description=u.description,
                    stage=u.stage,
                    created_by=u.created_by_id,
                )
                for u in case.updates.all()
            ],
        )

    @staticmethod
    def _queryset():
        from .models import Case

        return Case.objects.prefetch_related("updates").order_by("-created_at", "-id")

    def case_number_exists(self, case_number: str) -> bool:
        from .models import Case

        return Case.objects.filter(case_number=case_number).exists()

    def add(self, record: CaseRecord, initial: UpdateDraft) -> CaseRecord:
        from .models import Case, CaseUpdate

        try:
            with transaction.atomic():
                case = Case.objects.create(
                    case_number=record.case_number,
                    type=record.type,
                    description=record.description,
                    status=record.status,
                    priority=record.priority,
                    is_overdue=record.is_overdue,
                    province=record.province,
                    city=record.city,
                    location=record.location,
                    station_name=record.station_name,
                    victim_id=record.victim_id,
                    officer_id=record.officer_id,
                    anonymous=record.anonymous,
                    submitted_date=record.submitted_date,
                    last_update=record.last_update,
                )
                CaseUpdate.objects.create(
                    case=case,
                    title=initial.title,
                    description=initial.description,
                    stage=initial.stage or case.status,
                    created_by_id=initial.created_by,
                )
        except IntegrityError:
            if self.case_number_exists(record.case_number):
                raise Conflict(f"Case number {record.case_number} is already in use.")
            raise

        return self.get(case.pk)

    def get(self, case_id: int) -> CaseRecord | None:
        case = self._queryset().filter(pk=case_id).first()
        return self.to_record(case) if case is not None else None

    def list_by_victim(self, victim_id: int) -> list[CaseRecord]:
        return [self.to_record(c) for c in self._queryset().filter(victim_id=victim_id)]

    def list_all(self) -> list[CaseRecord]:
        return [self.to_record(c) for c in self._queryset()]

    def apply(
        self,
        case_id: int,
        changes: dict[str, Any],
        update: UpdateDraft | None = None,
    ) -> CaseRecord | None:
        from .models import Case, CaseUpdate

        self._check_changes(changes)
        with transaction.atomic():
            case = locked_or_none(Case, case_id)
            if case is None:
                return None

            for field_name, value in changes.items():
                setattr(case, field_name, value)
            case.last_update = timezone.localdate()
            case.save(update_fields=[*changes, "last_update", "updated_at"])

            if update is not None:
                CaseUpdate.objects.create(
                    case=case,
                    title=update.title,
                    description=update.description,
                    stage=update.stage or case.status,
                    created_by_id=update.created_by,
                )

        return self.get(case_id)
