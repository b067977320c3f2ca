"""Deadline parsing and lateness classification."""

from datetime import datetime, timedelta

from ..errors import DeadlineFormatError

DEADLINE_FORMAT = "%Y-%m-%d-%H-%M"
SUBMISSION_FORMAT = "%Y-%m-%d-%H-%M-%S"


def parse_deadline(value: str) -> datetime:
    """
    Parse a deadline given as ``YYYY-MM-DD-HH-MM``.

    Raises:
        DeadlineFormatError: If the string does not match
    """
    try:
        return datetime.strptime(value.strip(), DEADLINE_FORMAT)
    except ValueError as e:
        raise DeadlineFormatError(
            f"Deadline {value!r} does not match YYYY-MM-DD-HH-MM"
        ) from e


def parse_submission_time(value: str) -> datetime:
    """Parse a Learn attempt stamp ``YYYY-MM-DD-HH-MM-SS``."""
    return datetime.strptime(value, SUBMISSION_FORMAT)


def effective_deadline(deadline: datetime, extra_time_minutes: int) -> datetime:
    """Deadline shifted by a student's extra-time allowance."""
    if extra_time_minutes > 0:
        return deadline + timedelta(minutes=extra_time_minutes)
    return deadline


def is_late(
    submitted_at: datetime | None,
    deadline: datetime,
    extra_time_minutes: int = 0,
) -> bool:
    """
    Decide whether a submission is late.

    A submission exactly at the (shifted) deadline is on time. Submissions
    without a timestamp, such as manually placed scripts, are never late.

    Args:
        submitted_at: When the submission was made, if known
        deadline: The course deadline
        extra_time_minutes: Student's extra-time allowance

    Returns:
        True if the submission is after the student's effective deadline
    """
    if submitted_at is None:
        return False
    if not submitted_at > deadline:
        return False
    return submitted_at > effective_deadline(deadline, extra_time_minutes)
