"""File handling utilities."""

import os
from pathlib import Path

from ..errors import OutputDirectoryError
from .logging import get_logger

logger = get_logger(__name__)


def ensure_dir(path: Path, mode: int = 0o700) -> Path:
    """Ensure a directory exists, creating it if necessary.

    Permissions are reset to ``mode`` on every call, since ``mkdir`` is
    subject to the process umask.

    Args:
        path: Directory path to ensure exists
        mode: Permission bits for the directory

    Returns:
        The path (for chaining)

    Raises:
        OutputDirectoryError: If the path cannot be created or is not a directory
    """
    try:
        path.mkdir(mode=mode, parents=True, exist_ok=True)
        os.chmod(path, mode)
    except FileExistsError as e:
        raise OutputDirectoryError(f"Not a directory: {path}") from e
    except OSError as e:
        raise OutputDirectoryError(f"Cannot create directory {path}: {e}") from e

    if not path.is_dir():
        raise OutputDirectoryError(f"Not a directory: {path}")

    return path


def remove_file(path: Path) -> None:
    """Remove a file, logging the removal."""
    path.unlink()
    logger.debug(f"Removed {path}")


def is_newer(path: Path, other: Path) -> bool:
    """Check whether ``path`` was modified strictly after ``other``."""
    return path.stat().st_mtime_ns > other.stat().st_mtime_ns
