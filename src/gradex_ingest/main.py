"""
Gradex Ingest Pipeline

Orchestrates one ingest run: load the class list, match each student to a
Learn submission or manual fallback, decide lateness, place the script and
record the outcome.
"""

from dataclasses import dataclass, replace
from datetime import datetime
from pathlib import Path

from .config.models import IngestConfig
from .errors import ConfigurationError
from .output.reports import ReportAggregator
from .processing.classlist import load_class_list
from .processing.documents import describe_document
from .processing.lateness import is_late, parse_deadline
from .processing.matcher import Matched, SubmissionMatcher, build_receipt_index
from .processing.models import (
    Placed,
    PlacementStatus,
    Quarantined,
    StudentRecord,
    SubmissionOutcome,
    Unmatched,
)
from .processing.placement import PlacementEngine
from .utils.files import ensure_dir
from .utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class RunResult:
    """Everything one run produced."""

    outcomes: tuple[SubmissionOutcome, ...]
    successes: tuple[Placed, ...]
    bad_submissions: tuple[Quarantined | Unmatched, ...]
    success_report: Path
    errors_report: Path


class IngestPipeline:
    """Runs the ingest workflow for one course."""

    def __init__(self, config: IngestConfig):
        """Initialize the pipeline.

        Fatal problems (bad deadline, missing ingest folder, uncreatable
        output folder) are raised here, before any file is touched.

        Args:
            config: Run configuration

        Raises:
            IngestError: On any fatal configuration problem
        """
        self.config = config
        self.deadline = parse_deadline(config.deadline)

        if not config.ingest_dir.is_dir():
            raise ConfigurationError(f"Learn folder not found: {config.ingest_dir}")

        self.output_dir = ensure_dir(config.output_dir)
        self.report_dir = ensure_dir(config.reports_path)

        self.engine = PlacementEngine(self.output_dir)

    def run(self, timestamp: datetime | None = None) -> RunResult:
        """Run the pipeline over the whole class list.

        Args:
            timestamp: Time used in report filenames (defaults to now)

        Returns:
            RunResult with outcomes and report paths

        Raises:
            ClassListError: If the class list cannot be loaded
        """
        logger.info(f"course: {self.config.course}")
        logger.info(f"deadline: {self.deadline:%Y-%m-%d at %H:%M}")
        logger.info(f"class list csv: {self.config.class_list}")
        logger.info(f"learn folder: {self.config.ingest_dir}")

        students = load_class_list(self.config.class_list)
        matcher = SubmissionMatcher(
            self.config.ingest_dir,
            build_receipt_index(self.config.ingest_dir),
        )
        report = ReportAggregator()

        for student in students:
            logger.info(
                f"{student.identifier} -> {student.exam_number} "
                f"(extra time: {student.extra_time_minutes})"
            )
            try:
                outcome = self._process_student(student, matcher)
            except Exception as e:
                logger.exception(f"Error processing {student.identifier}: {e}")
                outcome = Quarantined(student, f"Unexpected error: {e}")

            self._log_outcome(outcome)
            report.add(outcome)

        logger.info(f"Successful submissions: {len(report.successes)}")
        logger.info(f"Bad submissions: {len(report.bad_submissions)}")

        success_report, errors_report = report.write(self.report_dir, timestamp)

        return RunResult(
            outcomes=report.outcomes,
            successes=report.successes,
            bad_submissions=report.bad_submissions,
            success_report=success_report,
            errors_report=errors_report,
        )

    def _process_student(
        self,
        student: StudentRecord,
        matcher: SubmissionMatcher,
    ) -> SubmissionOutcome:
        """Resolve, classify and place one student's submission."""
        match = matcher.resolve(student)

        if isinstance(match, Matched):
            candidate = match.candidate
            late = is_late(candidate.submitted_at, self.deadline, student.extra_time_minutes)
            outcome = self.engine.place(student, candidate, late)
            if isinstance(outcome, Placed) and self.config.count_pages:
                outcome = self._with_diagnostics(outcome)
            return outcome

        if match.ambiguous:
            return Quarantined(student, match.reason)

        settled = self.engine.settled(student)
        if settled is not None:
            return settled

        return Unmatched(student, match.reason)

    def _with_diagnostics(self, outcome: Placed) -> Placed:
        pages, notes = describe_document(outcome.output_path)
        return replace(outcome, pages=pages, notes=notes)

    def _log_outcome(self, outcome: SubmissionOutcome) -> None:
        if isinstance(outcome, Placed):
            late = " (LATE)" if outcome.late else ""
            if outcome.status is PlacementStatus.PREVIOUSLY_PLACED:
                logger.info(f" --- {outcome.status.value}: {outcome.output_path.name}{late}")
            else:
                logger.info(f" -- Submission: {outcome.output_path.name}{late}")
                logger.info(f" --- {outcome.status.value}")
        elif isinstance(outcome, Quarantined):
            logger.warning(f" --- Bad submission: {outcome.reason}")
        else:
            logger.warning(f" --- Unmatched: {outcome.reason}")


def run_ingest(config: IngestConfig, timestamp: datetime | None = None) -> RunResult:
    """Convenience wrapper: build a pipeline and run it."""
    return IngestPipeline(config).run(timestamp)
