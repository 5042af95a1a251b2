"""
Status policy — the single mapping from a case status to everything
derived from it.

| status        | progress | label        | timeline title        |
|---------------|----------|--------------|-----------------------|
| submitted     | 10       | In Progress  | Case Submitted        |
| under-review  | 35       | In Progress  | Under Review          |
| investigation | 60       | In Progress  | Investigation Started |
| resolution    | 85       | In Progress  | Resolution Phase      |
| completed     | 100      | Completed    | Case Resolved         |

A case flagged overdue shows ``Overdue`` instead of ``In Progress``;
a completed case is always ``Completed``.

Every function here is pure.  The table is checked against
``CaseStatus`` when the module is imported, so adding a status without
a row fails at startup rather than at request time.
"""

from __future__ import annotations

from typing import NamedTuple

from django.core.exceptions import ImproperlyConfigured

from core.domain.exceptions import InvalidTransition

from .models import CaseStatus, StatusLabel


class StageInfo(NamedTuple):
    progress: int
    title: str


_STAGES: dict[str, StageInfo] = {
    CaseStatus.SUBMITTED:     StageInfo(10, "Case Submitted"),
    CaseStatus.UNDER_REVIEW:  StageInfo(35, "Under Review"),
    CaseStatus.INVESTIGATION: StageInfo(60, "Investigation Started"),
    CaseStatus.RESOLUTION:    StageInfo(85, "Resolution Phase"),
    CaseStatus.COMPLETED:     StageInfo(100, "Case Resolved"),
}

_missing = [s for s in CaseStatus.values if s not in _STAGES]
if _missing:
    raise ImproperlyConfigured(
        f"StatusPolicy has no entry for status(es): {', '.join(_missing)}"
    )


class StatusPolicy:
    """Stateless lookups over the stage table."""

    @staticmethod
    def _stage(status: str) -> StageInfo:
        try:
            return _STAGES[status]
        except KeyError:
            raise InvalidTransition(
                target=str(status),
                reason=f"Unknown case status; expected one of {', '.join(CaseStatus.values)}",
            )

    @staticmethod
    def progress_of(status: str) -> int:
        """Completion percentage shown on the progress bar."""
        return StatusPolicy._stage(status).progress

    @staticmethod
    def label_of(status: str, overdue: bool = False) -> str:
        """
        Dashboard label for ``status``.

        Parameters
        ----------
        status : str
            A ``CaseStatus`` value.
        overdue : bool
            The administrator's stalled flag.  Ignored for completed cases.
        """
        StatusPolicy._stage(status)
        if status == CaseStatus.COMPLETED:
            return StatusLabel.COMPLETED.value
        if overdue:
            return StatusLabel.OVERDUE.value
        return StatusLabel.IN_PROGRESS.value

    @staticmethod
    def title_of(status: str) -> str:
        """Title of the timeline entry written when a case enters ``status``."""
        return StatusPolicy._stage(status).title

    @staticmethod
    def describe(status: str, note: str = "") -> str:
        """Timeline description: the officer's note, or a generic sentence."""
        note = (note or "").strip()
        if note:
            return note
        return f"Case has been updated to {StatusPolicy.title_of(status)}"

    @staticmethod
    def stages() -> list[dict[str, object]]:
        """The whole table, in lifecycle order (for the constants endpoint)."""
        return [
            {
                "value": status.value,
                "label": status.label,
                "progress": _STAGES[status].progress,
                "title": _STAGES[status].title,
                "status_label": StatusPolicy.label_of(status),
            }
            for status in CaseStatus
        ]
