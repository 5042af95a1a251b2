"""
Plain-Python snapshots of cases, independent of the storage backend.

``CaseStore`` implementations return these records; the repository,
serializers and report renderer only ever see records, never ORM rows.
Derived values (``progress``, ``status_label``) are properties computed
by ``StatusPolicy`` on every access, so they cannot drift from
``status``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime

from .policy import StatusPolicy


@dataclass(frozen=True)
class CaseUpdateRecord:
    """One timeline entry."""

    id: int | None
    date: date
    title: str
    description: str
    stage: str
    created_by: int | None = None


@dataclass(frozen=True)
class UpdateDraft:
    """
    A timeline entry about to be appended.

    ``stage=None`` means "the case's status once the accompanying
    changes are applied", which is what an escalation records.
    """

    title: str
    description: str
    stage: str | None = None
    created_by: int | None = None


@dataclass
class CaseRecord:
    id: int | None
    case_number: str
    type: str
    status: str
    priority: str
    submitted_date: date
    last_update: date
    victim_id: int | None = None
    officer_id: int | None = None
    description: str = ""
    province: str = ""
    city: str = ""
    location: str = ""
    station_name: str = ""
    anonymous: bool = False
    is_overdue: bool = False
    created_at: datetime | None = None
    updates: list[CaseUpdateRecord] = field(default_factory=list)

    @property
    def progress(self) -> int:
        return StatusPolicy.progress_of(self.status)

    @property
    def status_label(self) -> str:
        return StatusPolicy.label_of(self.status, overdue=self.is_overdue)

    @property
    def latest_update(self) -> CaseUpdateRecord | None:
        return self.updates[-1] if self.updates else None
