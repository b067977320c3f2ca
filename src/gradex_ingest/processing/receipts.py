"""
Learn submission receipt parsing.

Each Learn submission is exported as a text receipt next to the submitted
files. A typical receipt looks like::

    Name: Jane Doe (s1234567)
    Assignment: Exam Drop Box
    Date Submitted: Wednesday, 22 April 2020 15:59:00 o'clock BST
    Current Mark: Needs Marking
    ...
    Files:
        Original filename: exam.pdf
        Filename: Exam Drop Box_s1234567_attempt_2020-04-22-15-59-00_exam.pdf
"""

import re
from dataclasses import replace
from datetime import datetime
from pathlib import Path

import chardet

from ..errors import ReceiptParseError
from ..utils.logging import get_logger
from .identifiers import extract_identifier
from .lateness import parse_submission_time
from .models import Receipt

logger = get_logger(__name__)

NAME_LINE = re.compile(r"^Name:\s*(?P<name>.*?)\s*\((?P<uun>[^)]+)\)\s*$")
ASSIGNMENT_LINE = re.compile(r"^Assignment:\s*(?P<value>.*?)\s*$")
DATE_LINE = re.compile(r"^Date Submitted:\s*(?P<value>.*?)\s*$")
ORIGINAL_FILENAME_LINE = re.compile(r"^Original filename:\s*(?P<value>.*?)\s*$")
FILENAME_LINE = re.compile(r"^Filename:\s*(?P<value>.*?)\s*$")
ATTEMPT_STAMP = re.compile(r"_attempt_(\d{4}-\d{2}-\d{2}-\d{2}-\d{2}-\d{2})")

# "Wednesday, 22 April 2020 15:59:00 o'clock BST" -> drop the "o'clock BST" tail
LEARN_DATE_FORMAT = "%A, %d %B %Y %H:%M:%S"
OCLOCK_SUFFIX = re.compile(r"\s*o'clock.*$", re.IGNORECASE)

FALLBACK_ENCODINGS = ["utf-8", "utf-8-sig", "latin-1", "cp1252"]


def _detect_encoding(raw: bytes) -> str | None:
    """Detect text encoding with chardet, ignoring low-confidence guesses."""
    result = chardet.detect(raw[:10000])
    if result and (result.get("confidence") or 0) > 0.7:
        return result.get("encoding")
    return None


def read_receipt_text(path: Path) -> str:
    """
    Read a receipt with encoding detection.

    Raises:
        ReceiptParseError: If the file cannot be read
    """
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise ReceiptParseError(f"Cannot read receipt {path.name}: {e}") from e

    detected = _detect_encoding(raw)
    encodings = [detected] if detected else []
    encodings.extend(enc for enc in FALLBACK_ENCODINGS if enc != detected)

    for encoding in encodings:
        try:
            return raw.decode(encoding)
        except (UnicodeDecodeError, LookupError):
            continue

    # latin-1 decodes any byte sequence, so this is unreachable in practice
    raise ReceiptParseError(f"Cannot decode receipt {path.name}")


def parse_learn_date(value: str) -> datetime | None:
    """Parse Learn's long-form submission date, or return None."""
    value = OCLOCK_SUFFIX.sub("", value).strip()
    try:
        return datetime.strptime(value, LEARN_DATE_FORMAT)
    except ValueError:
        return None


def parse_receipt_text(text: str, receipt_name: str = "") -> Receipt:
    """
    Parse the contents of a Learn receipt.

    Args:
        text: Receipt text
        receipt_name: File name of the receipt, used for the identifier and
            attempt stamp when the text lacks them

    Returns:
        Parsed Receipt

    Raises:
        ReceiptParseError: If no identifier or submission time can be found
    """
    name = ""
    identifier = extract_identifier(receipt_name) if receipt_name else None
    assignment = ""
    submitted_at: datetime | None = None
    original_filenames: list[str] = []
    filenames: list[str] = []

    for line in text.splitlines():
        line = line.strip()
        if not line:
            continue

        name_match = NAME_LINE.match(line)
        if name_match:
            name = name_match.group("name")
            identifier = identifier or name_match.group("uun").strip().upper()
            continue

        for pattern, field in (
            (ASSIGNMENT_LINE, "assignment"),
            (DATE_LINE, "date"),
            (ORIGINAL_FILENAME_LINE, "original"),
            (FILENAME_LINE, "filename"),
        ):
            match = pattern.match(line)
            if not match:
                continue
            value = match.group("value")
            if field == "assignment":
                assignment = value
            elif field == "date":
                submitted_at = parse_learn_date(value)
            elif field == "original":
                original_filenames.append(value)
            else:
                filenames.append(value)
            break

    if submitted_at is None:
        stamp = ATTEMPT_STAMP.search(receipt_name)
        if stamp:
            submitted_at = parse_submission_time(stamp.group(1))

    if not identifier:
        raise ReceiptParseError(f"No student identifier in receipt {receipt_name}")
    if submitted_at is None:
        raise ReceiptParseError(f"No submission time in receipt {receipt_name}")

    non_pdf = [f for f in filenames if not f.lower().endswith(".pdf")]
    filetype_error = ""
    if non_pdf:
        filetype_error = f"Not a PDF: {', '.join(non_pdf)}"

    return Receipt(
        identifier=identifier,
        submitted_at=submitted_at,
        declared_file_count=len(filenames),
        source_filename=filenames[0] if filenames else "",
        original_filename=original_filenames[0] if original_filenames else "",
        filetype_error=filetype_error,
        name=name,
        assignment=assignment,
    )


def parse_receipt(path: Path) -> Receipt:
    """
    Parse a Learn receipt file.

    Args:
        path: Path to the ``.txt`` receipt

    Returns:
        Parsed Receipt with ``receipt_path`` set

    Raises:
        ReceiptParseError: If the receipt cannot be read or parsed
    """
    text = read_receipt_text(path)
    receipt = parse_receipt_text(text, receipt_name=path.name)
    logger.debug(
        f"Parsed receipt {path.name}: {receipt.declared_file_count} file(s), "
        f"submitted {receipt.submitted_at:%Y-%m-%d %H:%M:%S}"
    )
    return replace(receipt, receipt_path=path)
