"""
Class list loading.

The class list is a CSV exported from the enrolment system with columns in
a fixed order: UUN, Exam Number, First Name, Last Name, Minutes of Extra
Time Allowed.
"""

import csv
from pathlib import Path

from ..errors import ClassListError
from ..utils.logging import get_logger
from .identifiers import looks_like_identifier
from .models import StudentRecord

logger = get_logger(__name__)

EXPECTED_COLUMNS = 5

# Column titles in the enrolment export
IDENTIFIER_TITLE = "uun"
EXAM_NUMBER_TITLE = "exam number"


def is_header_row(row: list[str]) -> bool:
    """Check whether a row holds the column titles rather than a student."""
    return (
        row[0].strip().lower() == IDENTIFIER_TITLE
        or row[1].strip().lower() == EXAM_NUMBER_TITLE
    )


def parse_extra_time(value: str) -> int:
    """Parse an extra-time cell; blank or malformed values count as 0."""
    value = value.strip()
    if not value:
        return 0
    try:
        minutes = int(value)
    except ValueError:
        logger.warning(f"Malformed extra time {value!r}, using 0")
        return 0
    if minutes < 0:
        logger.warning(f"Negative extra time {minutes}, using 0")
        return 0
    return minutes


def load_class_list(path: Path) -> tuple[StudentRecord, ...]:
    """
    Load student records from a class list CSV.

    A first row holding the column titles is skipped. Every other row is a
    student, even one with a malformed UUN, so no student drops out of the
    reports. Blank lines are ignored.

    Args:
        path: Path to the class list CSV

    Returns:
        Student records in file order

    Raises:
        ClassListError: If the file cannot be read or a row has the wrong
            number of columns
    """
    records: list[StudentRecord] = []
    width: int | None = None

    try:
        with open(path, encoding="utf-8-sig", newline="") as f:
            reader = csv.reader(f)
            for row in reader:
                if not any(cell.strip() for cell in row):
                    continue

                if width is None:
                    width = len(row)
                    if width < EXPECTED_COLUMNS:
                        raise ClassListError(
                            f"{path}:{reader.line_num}: expected {EXPECTED_COLUMNS} columns, got {width}"
                        )
                    if is_header_row(row):
                        logger.info(f"Skipping header row in {path}: {row}")
                        continue
                elif len(row) != width:
                    raise ClassListError(
                        f"{path}:{reader.line_num}: expected {width} columns, got {len(row)}"
                    )

                if not looks_like_identifier(row[0]):
                    logger.warning(f"{path}:{reader.line_num}: unusual UUN {row[0]!r}, keeping the row")

                records.append(
                    StudentRecord(
                        identifier=row[0].strip().upper(),
                        exam_number=row[1].strip(),
                        first_name=row[2].strip(),
                        last_name=row[3].strip(),
                        extra_time_minutes=parse_extra_time(row[4]),
                    )
                )
    except OSError as e:
        raise ClassListError(f"Couldn't open the class list {path}: {e}") from e
    except (csv.Error, UnicodeDecodeError) as e:
        raise ClassListError(f"Malformed class list {path}: {e}") from e

    logger.info(f"Loaded {len(records)} students from {path}")
    return tuple(records)
