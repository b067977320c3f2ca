"""
Submission processing module.

Handles matching Learn exports to the class list, lateness decisions and
placement of anonymised scripts.
"""

from .classlist import load_class_list, parse_extra_time
from .documents import count_pages, describe_document, is_pdf
from .identifiers import (
    check_exam_number,
    check_identifier,
    extract_identifier,
    is_safe_exam_number,
    looks_like_identifier,
)
from .lateness import effective_deadline, is_late, parse_deadline, parse_submission_time
from .matcher import Matched, NotMatched, SubmissionMatcher, build_receipt_index
from .models import (
    CandidateArtifact,
    Placed,
    PlacementDecision,
    PlacementStatus,
    Provenance,
    Quarantined,
    Receipt,
    StudentRecord,
    SubmissionOutcome,
    Unmatched,
    output_filename,
)
from .placement import PlacementEngine, copy_file
from .receipts import parse_receipt, parse_receipt_text

__all__ = [
    # Class list
    "load_class_list",
    "parse_extra_time",
    # Documents
    "count_pages",
    "describe_document",
    "is_pdf",
    # Identifiers
    "check_exam_number",
    "check_identifier",
    "extract_identifier",
    "is_safe_exam_number",
    "looks_like_identifier",
    # Lateness
    "effective_deadline",
    "is_late",
    "parse_deadline",
    "parse_submission_time",
    # Matching
    "Matched",
    "NotMatched",
    "SubmissionMatcher",
    "build_receipt_index",
    # Models
    "CandidateArtifact",
    "Placed",
    "PlacementDecision",
    "PlacementStatus",
    "Provenance",
    "Quarantined",
    "Receipt",
    "StudentRecord",
    "SubmissionOutcome",
    "Unmatched",
    "output_filename",
    # Placement
    "PlacementEngine",
    "copy_file",
    # Receipts
    "parse_receipt",
    "parse_receipt_text",
]
