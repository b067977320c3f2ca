"""
Exception hierarchy for the ingest pipeline.

Fatal errors abort the run before any student is processed. Recoverable
errors are caught per student and end up in the bad-submissions report.
"""


class IngestError(Exception):
    """Base class for all ingest errors."""

    pass


# -----------------------------------------------------------------------------
# Fatal
# -----------------------------------------------------------------------------


class ConfigurationError(IngestError):
    """Invalid or missing run configuration."""

    pass


class DeadlineFormatError(ConfigurationError):
    """Deadline string does not match YYYY-MM-DD-HH-MM."""

    pass


class ClassListError(IngestError):
    """Class list cannot be opened or is structurally malformed."""

    pass


class OutputDirectoryError(IngestError):
    """Output or report directory cannot be created."""

    pass


# -----------------------------------------------------------------------------
# Recoverable
# -----------------------------------------------------------------------------


class ReceiptParseError(IngestError):
    """A Learn receipt could not be read or lacks required fields."""

    pass


class DocumentError(IngestError):
    """A PDF could not be opened, decrypted or counted."""

    pass


class PlacementError(IngestError):
    """Copying a submission into the output directory failed."""

    pass
