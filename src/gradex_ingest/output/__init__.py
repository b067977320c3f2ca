"""Output module for audit reports."""

from .reports import REPORT_FIELDS, ReportAggregator, outcome_to_row, write_report

__all__ = ["REPORT_FIELDS", "ReportAggregator", "outcome_to_row", "write_report"]
