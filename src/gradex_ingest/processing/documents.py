"""
PDF inspection for report diagnostics.

Nothing here gates placement; page counts and format warnings are only
recorded in the success report.
"""

from pathlib import Path

import pypdf
from pypdf.errors import DependencyError, PyPdfError

from ..errors import DocumentError
from ..utils.logging import get_logger

logger = get_logger(__name__)

PDF_MAGIC = b"%PDF"


def is_pdf(path: Path) -> bool:
    """Check the file starts with the PDF signature."""
    try:
        with open(path, "rb") as f:
            return f.read(len(PDF_MAGIC)) == PDF_MAGIC
    except OSError as e:
        logger.warning(f"Could not read file for magic detection: {e}")
        return False


def count_pages(path: Path) -> int:
    """
    Count the pages of a PDF, decrypting it with an empty password if needed.

    Args:
        path: Path to the PDF

    Returns:
        Number of pages

    Raises:
        DocumentError: If the PDF cannot be opened, decrypted or read
    """
    try:
        reader = pypdf.PdfReader(path)
        if reader.is_encrypted:
            if not reader.decrypt(""):
                raise DocumentError(f"Cannot decrypt {path.name}")
        return len(reader.pages)
    except DocumentError:
        raise
    except (OSError, PyPdfError, DependencyError, ValueError) as e:
        raise DocumentError(f"Cannot count pages of {path.name}: {e}") from e


def describe_document(path: Path) -> tuple[int | None, str]:
    """
    Collect diagnostics for a placed script.

    Returns:
        Tuple of (page count or None, notes)
    """
    if not is_pdf(path):
        return None, "Missing PDF signature"
    try:
        return count_pages(path), ""
    except DocumentError as e:
        logger.warning(str(e))
        return None, str(e)
