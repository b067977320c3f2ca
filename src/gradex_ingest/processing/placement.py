"""
Placement of matched submissions into the output directory.

Each placed script is named ``<exam number>.pdf`` or ``LATE-<exam number>.pdf``.
An existing output is only overwritten by a strictly newer source, so
re-running over a folder that has been edited by hand leaves those edits in
place. This is a modification-time heuristic, not a content comparison.
"""

import os
import shutil
import tempfile
from pathlib import Path

from ..errors import PlacementError
from ..utils.files import is_newer, remove_file
from ..utils.logging import get_logger
from .identifiers import is_safe_exam_number
from .models import (
    LATE_PREFIX,
    CandidateArtifact,
    Placed,
    PlacementDecision,
    PlacementStatus,
    Quarantined,
    StudentRecord,
    output_filename,
)

logger = get_logger(__name__)


def copy_file(source: Path, target: Path) -> None:
    """
    Make ``target`` hold the contents of ``source``.

    A hard link is used when the target does not exist yet and both paths
    are on the same volume. Otherwise the bytes are written to a temporary
    sibling of the target, synced, and renamed over it, so a partially
    written file is never visible under the final name.

    Raises:
        PlacementError: If the copy fails; the target is left untouched
    """
    if not source.is_file():
        raise PlacementError(f"Copy failed: no such file {source}")

    if target.exists():
        if os.path.samefile(source, target):
            return
    else:
        try:
            os.link(source, target)
            return
        except OSError as e:
            logger.debug(f"Hard link {source.name} -> {target.name} failed ({e}), copying")

    try:
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{target.name}.", suffix=".partial", dir=target.parent
        )
    except OSError as e:
        raise PlacementError(f"Copy failed: {e}") from e
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as out, open(source, "rb") as src:
            shutil.copyfileobj(src, out)
            out.flush()
            os.fsync(out.fileno())
        os.replace(tmp_path, target)
    except OSError as e:
        tmp_path.unlink(missing_ok=True)
        raise PlacementError(f"Copy failed: {e}") from e
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise


class PlacementEngine:
    """Decides output names and moves submissions into place for one run."""

    def __init__(self, output_dir: Path):
        """Initialize the engine.

        Args:
            output_dir: Directory the anonymised scripts go to; must exist
        """
        self.output_dir = output_dir
        # exam number -> identifier of the student it was assigned to this run
        self._claimed: dict[str, str] = {}

    def target_for(self, student: StudentRecord, late: bool) -> Path:
        return self.output_dir / output_filename(student.exam_number, late)

    def existing_output(self, exam_number: str, prefer_late: bool = False) -> Path | None:
        """Return whichever output variant for an exam number is on disk."""
        variants = [
            self.output_dir / output_filename(exam_number, late=prefer_late),
            self.output_dir / output_filename(exam_number, late=not prefer_late),
        ]
        for path in variants:
            if path.is_file():
                return path
        return None

    def _claim(self, student: StudentRecord) -> str | None:
        """Reserve the student's exam number, returning the holder on collision."""
        holder = self._claimed.get(student.exam_number)
        if holder is not None and holder != student.identifier:
            return holder
        self._claimed[student.exam_number] = student.identifier
        return None

    def decide(
        self,
        student: StudentRecord,
        candidate: CandidateArtifact,
        late: bool,
    ) -> PlacementDecision | Quarantined:
        """
        Check a candidate can be placed automatically and pick its target.

        Returns:
            The decision, or Quarantined when the submission has the wrong
            number of files, a non-PDF file, an exam number that is not a
            plain file name, or an exam number already taken by another
            student in this run
        """
        if candidate.declared_file_count != 1:
            return Quarantined(
                student,
                f"Expected 1 file, receipt declares {candidate.declared_file_count}",
                candidate,
            )
        if candidate.filetype_error:
            return Quarantined(student, candidate.filetype_error, candidate)
        if not is_safe_exam_number(student.exam_number):
            return Quarantined(student, f"Unusable exam number: {student.exam_number!r}", candidate)

        target = self.target_for(student, late)
        holder = self._claim(student)
        if holder is not None:
            return Quarantined(
                student,
                f"Collision: {target.name} already assigned to {holder}",
                candidate,
            )

        return PlacementDecision(student=student, candidate=candidate, target=target, late=late)

    def place(
        self,
        student: StudentRecord,
        candidate: CandidateArtifact,
        late: bool,
    ) -> Placed | Quarantined:
        """
        Move a candidate into the output directory.

        1. No output yet: publish the source, remove source and receipt.
        2. Output newer than source: keep the output, remove the source.
        3. Source newer: overwrite the output, remove the source.

        An existing output under the other late/on-time name counts as the
        existing output and is removed when replaced.

        Returns:
            Placed with the resulting status, or Quarantined if the decision
            or the copy failed
        """
        decision = self.decide(student, candidate, late)
        if isinstance(decision, Quarantined):
            return decision

        source = candidate.source_path
        if not source.is_file():
            return Quarantined(student, f"Submitted file missing: {source.name}", candidate)

        target = decision.target
        existing = self.existing_output(student.exam_number, prefer_late=late)

        if existing is not None and is_newer(existing, source):
            self._discard(candidate)
            kept_late = existing.name.startswith(LATE_PREFIX)
            return Placed(student, existing, kept_late, PlacementStatus.ALREADY_EXISTS, candidate)

        try:
            copy_file(source, target)
        except PlacementError as e:
            logger.error(f"{source.name} -> {target.name}: {e}")
            return Quarantined(student, str(e), candidate)

        if existing is not None and existing != target:
            logger.info(f"Removing superseded {existing.name}")
            try:
                remove_file(existing)
            except OSError as e:
                logger.warning(f"Could not remove superseded {existing.name}: {e}")

        self._discard(candidate)
        status = PlacementStatus.REPLACED if existing is not None else PlacementStatus.CREATED
        return Placed(student, target, late, status, candidate)

    def settled(self, student: StudentRecord) -> Placed | Quarantined | None:
        """
        Look for a script placed by an earlier run.

        Returns:
            Placed with status "Previously placed", Quarantined on exam
            number collision or an unusable exam number, or None if nothing
            is on disk
        """
        if not is_safe_exam_number(student.exam_number):
            return Quarantined(student, f"Unusable exam number: {student.exam_number!r}")

        existing = self.existing_output(student.exam_number)
        if existing is None:
            return None

        holder = self._claim(student)
        if holder is not None:
            return Quarantined(student, f"Collision: {existing.name} already assigned to {holder}")

        late = existing.name.startswith(LATE_PREFIX)
        return Placed(student, existing, late, PlacementStatus.PREVIOUSLY_PLACED)

    def _discard(self, candidate: CandidateArtifact) -> None:
        """Remove a consumed source file and its receipt."""
        paths = [candidate.source_path]
        if candidate.receipt and candidate.receipt.receipt_path:
            paths.append(candidate.receipt.receipt_path)

        for path in paths:
            try:
                remove_file(path)
            except FileNotFoundError:
                continue
            except OSError as e:
                logger.warning(f"Could not remove {path.name}: {e}")
