"""
Audit reports of an ingest run.

Two CSV files are written per run: one row per placed script
(``<stamp>-learn-success.csv``) and one row per student needing manual
follow-up (``<stamp>-learn-errors.csv``).
"""

import csv
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable

from ..processing.models import Placed, Quarantined, SubmissionOutcome, Unmatched
from ..utils.logging import get_logger

logger = get_logger(__name__)

REPORT_TIMESTAMP_FORMAT = "%Y-%m-%d-%H-%M-%S"
SUCCESS_SUFFIX = "learn-success.csv"
ERRORS_SUFFIX = "learn-errors.csv"

REPORT_FIELDS = [
    "identifier",
    "exam_number",
    "first_name",
    "last_name",
    "extra_time_minutes",
    "outcome",
    "status",
    "reason",
    "source_filename",
    "original_filename",
    "submitted_at",
    "declared_file_count",
    "output_path",
    "late",
    "pages",
    "notes",
]


def outcome_to_row(outcome: SubmissionOutcome) -> dict[str, Any]:
    """Flatten an outcome into a report row."""
    student = outcome.student
    row: dict[str, Any] = {
        "identifier": student.identifier,
        "exam_number": student.exam_number,
        "first_name": student.first_name,
        "last_name": student.last_name,
        "extra_time_minutes": student.extra_time_minutes,
        "outcome": type(outcome).__name__.lower(),
    }

    candidate = getattr(outcome, "candidate", None)
    if candidate is not None:
        row["source_filename"] = candidate.source_path.name
        row["original_filename"] = candidate.original_filename
        row["declared_file_count"] = candidate.declared_file_count
        if candidate.submitted_at is not None:
            row["submitted_at"] = candidate.submitted_at.strftime(REPORT_TIMESTAMP_FORMAT)

    if isinstance(outcome, Placed):
        row["status"] = outcome.status.value
        row["output_path"] = str(outcome.output_path)
        row["late"] = "LATE" if outcome.late else ""
        row["pages"] = "" if outcome.pages is None else outcome.pages
        row["notes"] = outcome.notes
    else:
        row["reason"] = outcome.reason

    return row


def write_report(outcomes: Iterable[SubmissionOutcome], path: Path) -> Path:
    """
    Write outcomes to a CSV report.

    The header is always written, even when there are no outcomes.

    Args:
        outcomes: Outcomes in processing order
        path: Destination CSV path

    Returns:
        The path written
    """
    with open(path, "w", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=REPORT_FIELDS, restval="")
        writer.writeheader()
        for outcome in outcomes:
            writer.writerow(outcome_to_row(outcome))

    logger.info(f"Generated: {path}")
    return path


class ReportAggregator:
    """Collects outcomes in processing order and writes the audit reports."""

    def __init__(self):
        self._outcomes: list[SubmissionOutcome] = []

    def add(self, outcome: SubmissionOutcome) -> None:
        self._outcomes.append(outcome)

    @property
    def outcomes(self) -> tuple[SubmissionOutcome, ...]:
        return tuple(self._outcomes)

    @property
    def successes(self) -> tuple[Placed, ...]:
        return tuple(o for o in self._outcomes if isinstance(o, Placed))

    @property
    def bad_submissions(self) -> tuple[Quarantined | Unmatched, ...]:
        return tuple(o for o in self._outcomes if not isinstance(o, Placed))

    def __len__(self) -> int:
        return len(self._outcomes)

    def write(self, report_dir: Path, timestamp: datetime | None = None) -> tuple[Path, Path]:
        """
        Write the success and bad-submission reports.

        Args:
            report_dir: Directory for the reports; must exist
            timestamp: Time used in the report filenames (defaults to now)

        Returns:
            Tuple of (success report path, errors report path)
        """
        stamp = (timestamp or datetime.now()).strftime(REPORT_TIMESTAMP_FORMAT)
        success_path = write_report(self.successes, report_dir / f"{stamp}-{SUCCESS_SUFFIX}")
        errors_path = write_report(self.bad_submissions, report_dir / f"{stamp}-{ERRORS_SUFFIX}")
        return success_path, errors_path
