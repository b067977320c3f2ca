"""
Matching class-list students to submitted files.

A student's submission is found either through a Learn receipt in the
ingest directory or, failing that, through a manually placed
``<uun>.pdf`` in the same directory.
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Callable

from ..errors import ReceiptParseError
from ..utils.logging import get_logger
from .identifiers import extract_identifier
from .models import CandidateArtifact, Provenance, Receipt, StudentRecord
from .receipts import parse_receipt

logger = get_logger(__name__)

RECEIPT_SUFFIX = ".txt"

# Receipts end in the attempt stamp; submitted .txt files carry their own name after it
RECEIPT_NAME = re.compile(r"_attempt_\d{4}-\d{2}-\d{2}-\d{2}-\d{2}-\d{2}\.txt$", re.IGNORECASE)

ReceiptIndex = Mapping[str, tuple[Path, ...]]


@dataclass(frozen=True)
class Matched:
    """A single candidate file was found for the student."""

    candidate: CandidateArtifact


@dataclass(frozen=True)
class NotMatched:
    """No usable candidate; ``ambiguous`` marks cases needing quarantine."""

    reason: str
    ambiguous: bool = False


MatchResult = Matched | NotMatched


def build_receipt_index(ingest_dir: Path) -> ReceiptIndex:
    """
    Index every Learn receipt in the ingest directory by student identifier.

    Receipts whose filename carries no identifier are logged and skipped.
    Submitted text files (``..._attempt_<stamp>_notes.txt``) are not receipts.

    Args:
        ingest_dir: Directory holding the unzipped Learn export

    Returns:
        Read-only mapping of identifier to receipt paths, sorted by name
    """
    index: dict[str, list[Path]] = {}
    skipped = 0

    for path in sorted(ingest_dir.iterdir()):
        if not path.is_file() or path.suffix.lower() != RECEIPT_SUFFIX:
            continue

        identifier = extract_identifier(path.name)
        if identifier is None:
            logger.warning(f"No student identifier in receipt name, skipping: {path.name}")
            skipped += 1
            continue

        if not RECEIPT_NAME.search(path.name):
            logger.debug(f"Submitted text file, not a receipt: {path.name}")
            continue

        index.setdefault(identifier, []).append(path)

    logger.info(f"Learn receipts: {sum(len(v) for v in index.values())} ({skipped} skipped)")
    return MappingProxyType({k: tuple(v) for k, v in index.items()})


class SubmissionMatcher:
    """Resolves each student to at most one candidate artifact."""

    def __init__(
        self,
        ingest_dir: Path,
        receipt_index: ReceiptIndex,
        receipt_parser: Callable[[Path], Receipt] = parse_receipt,
    ):
        """Initialize the matcher.

        Args:
            ingest_dir: Directory holding receipts, submissions and fallbacks
            receipt_index: Index built by build_receipt_index
            receipt_parser: Callable turning a receipt path into a Receipt
        """
        self.ingest_dir = ingest_dir
        self.receipt_index = receipt_index
        self.receipt_parser = receipt_parser

    def resolve(self, student: StudentRecord) -> MatchResult:
        """
        Find the submission for a student.

        Receipt-backed submissions always win over a manual fallback file.

        Args:
            student: Class-list record

        Returns:
            Matched with the candidate, or NotMatched with a reason
        """
        receipts = self.receipt_index.get(student.identifier, ())

        if len(receipts) > 1:
            names = ", ".join(p.name for p in receipts)
            return NotMatched(f"Multiple receipts: {names}", ambiguous=True)

        reason = "No submission found"
        if receipts:
            result = self._from_receipt(student, receipts[0])
            if isinstance(result, Matched) or result.ambiguous:
                return result
            reason = result.reason

        fallback = self._from_fallback(student)
        if fallback is not None:
            return fallback

        return NotMatched(reason)

    def _from_receipt(self, student: StudentRecord, receipt_path: Path) -> MatchResult:
        logger.info(f" - Learn file: {receipt_path.name}")
        try:
            receipt = self.receipt_parser(receipt_path)
        except ReceiptParseError as e:
            logger.warning(f"Error with {receipt_path.name}: {e}")
            return NotMatched(f"Receipt parse failed: {e}")

        if receipt.identifier != student.identifier:
            logger.warning(
                f"Receipt {receipt_path.name} names {receipt.identifier}, "
                f"indexed under {student.identifier}"
            )

        name = receipt.source_filename
        if name in (".", "..") or Path(name).name != name:
            logger.warning(f"Receipt {receipt_path.name} points outside the Learn folder: {name}")
            return NotMatched(f"Submitted file outside the Learn folder: {name}", ambiguous=True)

        return Matched(
            CandidateArtifact(
                student_identifier=student.identifier,
                source_path=self.ingest_dir / name,
                provenance=Provenance.RECEIPT,
                receipt=receipt,
            )
        )

    def _from_fallback(self, student: StudentRecord) -> Matched | None:
        path = self.ingest_dir / student.fallback_filename
        if not path.is_file():
            return None

        logger.info(f" - Manual file: {path.name}")
        return Matched(
            CandidateArtifact(
                student_identifier=student.identifier,
                source_path=path,
                provenance=Provenance.MANUAL,
            )
        )
