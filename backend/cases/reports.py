"""
Plain-text case report for download by the case participant.

Layout::

    SOUTH AFRICAN POLICE SERVICE
    CASE REPORT
    ==========================================

    Case Number: CT-2024-482913
    Type: Theft
    ...

    CASE TIMELINE
    ------------------------------------------
    2024-03-01 - Case Submitted
      Your case has been successfully submitted ...

    ------------------------------------------
    Generated on: 2024-03-05 14:02
    This document is confidential and for the case participant's records only.
"""

from __future__ import annotations

from datetime import datetime

from django.utils import timezone

from core.constants import SERVICE_NAME

from .records import CaseRecord

RULE = "=" * 42
THIN_RULE = "-" * 42
CONFIDENTIALITY_NOTE = (
    "This document is confidential and for the case participant's records only."
)


class CaseReportRenderer:
    """Renders a ``CaseRecord`` (with timeline) as a text document."""

    @staticmethod
    def filename(case: CaseRecord) -> str:
        return f"{case.case_number}-report.txt"

    @staticmethod
    def render(case: CaseRecord, generated_at: datetime | None = None) -> str:
        generated_at = generated_at or timezone.localtime()

        lines = [
            SERVICE_NAME,
            "CASE REPORT",
            RULE,
            "",
            f"Case Number: {case.case_number}",
            f"Type: {case.type}",
            f"Status: {case.status_label}",
            f"Priority: {str(case.priority).upper()}",
            f"Station: {case.station_name or 'Not assigned'}",
            f"Location: {case.location or 'Not specified'}",
            f"Submitted: {case.submitted_date.isoformat()}",
            f"Last Update: {case.last_update.isoformat()}",
            f"Progress: {case.progress}%",
            "",
            "CASE TIMELINE",
            THIN_RULE,
        ]

        for update in case.updates:
            lines.append(f"{update.date.isoformat()} - {update.title}")
            lines.append(f"  {update.description}")
            lines.append("")

        lines.extend([
            THIN_RULE,
            f"Generated on: {generated_at:%Y-%m-%d %H:%M}",
            CONFIDENTIALITY_NOTE,
        ])
        return "\n".join(lines) + "\n"
