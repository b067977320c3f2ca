"""Data models for students, submissions and placement outcomes."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path

LATE_PREFIX = "LATE-"


@dataclass(frozen=True)
class StudentRecord:
    """One row of the class list."""

    identifier: str
    exam_number: str
    first_name: str = ""
    last_name: str = ""
    extra_time_minutes: int = 0

    @property
    def fallback_filename(self) -> str:
        """Name of a manually placed script for this student."""
        return f"{self.identifier.lower()}.pdf"


@dataclass(frozen=True)
class Receipt:
    """Metadata from a Learn submission receipt."""

    identifier: str
    submitted_at: datetime
    declared_file_count: int
    source_filename: str
    original_filename: str = ""
    filetype_error: str = ""
    receipt_path: Path | None = None
    name: str = ""
    assignment: str = ""
    exam_number: str = ""


class Provenance(Enum):
    """Where a candidate artifact came from."""

    RECEIPT = "receipt"
    MANUAL = "manual"


@dataclass(frozen=True)
class CandidateArtifact:
    """A file on disk believed to be one student's submission."""

    student_identifier: str
    source_path: Path
    provenance: Provenance
    receipt: Receipt | None = None

    @property
    def submitted_at(self) -> datetime | None:
        return self.receipt.submitted_at if self.receipt else None

    @property
    def declared_file_count(self) -> int:
        # A manual fallback is, by construction, exactly one file
        return self.receipt.declared_file_count if self.receipt else 1

    @property
    def filetype_error(self) -> str:
        return self.receipt.filetype_error if self.receipt else ""

    @property
    def original_filename(self) -> str:
        if self.receipt and self.receipt.original_filename:
            return self.receipt.original_filename
        return self.source_path.name


class PlacementStatus(Enum):
    """How a placed file came to be at its output path."""

    CREATED = "File created"
    ALREADY_EXISTS = "File already exists"
    REPLACED = "File replaced"
    PREVIOUSLY_PLACED = "Previously placed"


@dataclass(frozen=True)
class PlacementDecision:
    """Target chosen for a student's submission."""

    student: StudentRecord
    candidate: CandidateArtifact
    target: Path
    late: bool


def output_filename(exam_number: str, late: bool) -> str:
    """Build ``{LATE-}{examNumber}.pdf``."""
    prefix = LATE_PREFIX if late else ""
    return f"{prefix}{exam_number}.pdf"


# -----------------------------------------------------------------------------
# Outcomes
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class Placed:
    """Submission is in the output directory."""

    student: StudentRecord
    output_path: Path
    late: bool
    status: PlacementStatus
    candidate: CandidateArtifact | None = None
    pages: int | None = None
    notes: str = ""


@dataclass(frozen=True)
class Quarantined:
    """Submission needs manual handling."""

    student: StudentRecord
    reason: str
    candidate: CandidateArtifact | None = None


@dataclass(frozen=True)
class Unmatched:
    """No submission could be found for the student."""

    student: StudentRecord
    reason: str = "No submission found"


SubmissionOutcome = Placed | Quarantined | Unmatched
