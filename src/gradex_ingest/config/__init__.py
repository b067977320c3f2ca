"""
Configuration module.

Handles loading and validation of per-course ingest settings.
"""

from .loader import ConfigLoader
from .models import IngestConfig

__all__ = ["ConfigLoader", "IngestConfig"]
