"""
Student identifier extraction and validation.

Learn names every exported file ``<assignment>_<uun>_attempt_<stamp>...``;
the UUN between those markers is what ties a receipt to a class-list row.
"""

import re

IDENTIFIER_PATTERN = re.compile(r"_(s[0-9]{7})_attempt_", re.IGNORECASE)

# A letter followed by seven digits, e.g. S1234567
IDENTIFIER_SHAPE = re.compile(r"^[A-Za-z][0-9]{7}$")

IDENTIFIER_LENGTH = 8
EXAM_NUMBER_LENGTH = 7


def extract_identifier(filename: str) -> str | None:
    """
    Extract the upper-cased student identifier from a Learn filename.

    Args:
        filename: File name (not a full path) of a Learn export file

    Returns:
        The identifier, e.g. ``"S1234567"``, or None if the name does not
        carry one
    """
    match = IDENTIFIER_PATTERN.search(filename)
    if match is None:
        return None
    return match.group(1).upper()


def looks_like_identifier(value: str) -> bool:
    """Check whether a class-list cell has the shape of an identifier."""
    return bool(IDENTIFIER_SHAPE.match(value.strip()))


def _check(value: str, expected_length: int, reserved_prefix: str) -> str | None:
    actual_length = len(value)
    if actual_length != expected_length:
        return f"Wrong length got {actual_length} not {expected_length}"
    if reserved_prefix and value.lower().startswith(reserved_prefix.lower()):
        return f"Starts with reserved prefix '{reserved_prefix}'"
    return None


def check_identifier(value: str, reserved_prefix: str = "s") -> str | None:
    """
    Validate a matriculation identifier.

    Args:
        value: Identifier to check
        reserved_prefix: Leading letter reserved for another namespace

    Returns:
        None if valid, otherwise a description of the problem
    """
    return _check(value, IDENTIFIER_LENGTH, reserved_prefix)


def check_exam_number(value: str, reserved_prefix: str = "b") -> str | None:
    """
    Validate an exam number in the alternate seven-character format.

    Args:
        value: Exam number to check
        reserved_prefix: Leading letter reserved for another namespace

    Returns:
        None if valid, otherwise a description of the problem
    """
    return _check(value, EXAM_NUMBER_LENGTH, reserved_prefix)


def is_safe_exam_number(value: str) -> bool:
    """Check an exam number can be used as an output file name as it stands."""
    if value in ("", ".", ".."):
        return False
    return "/" not in value and "\\" not in value and "\0" not in value
