"""Configuration loader for course ingest settings."""

from pathlib import Path
from typing import Any

import yaml

from ..errors import ConfigurationError
from .models import IngestConfig


class ConfigLoader:
    """Loads and validates course configuration files."""

    def __init__(self, config_dir: Path | None = None):
        """Initialize the config loader.

        Args:
            config_dir: Directory relative paths are resolved against.
                Defaults to the current working directory.
        """
        self.config_dir = config_dir or Path.cwd()

    def load_course(self, course_file: str | Path) -> IngestConfig:
        """Load a course configuration from YAML.

        Args:
            course_file: Path to the course YAML file

        Returns:
            Parsed IngestConfig object

        Raises:
            ConfigurationError: If the file is missing or malformed
        """
        path = self._resolve_path(course_file)
        data = self._load_yaml(path)
        if not isinstance(data, dict):
            raise ConfigurationError(f"Expected a mapping at top level of {path}")
        return IngestConfig.from_dict(data)

    def _resolve_path(self, file_path: str | Path) -> Path:
        """Resolve a config file path."""
        path = Path(file_path)
        if not path.is_absolute():
            path = self.config_dir / path
        return path

    def _load_yaml(self, path: Path) -> Any:
        """Load and parse a YAML file."""
        if not path.exists():
            raise ConfigurationError(f"Config file not found: {path}")

        try:
            with open(path, encoding="utf-8") as f:
                return yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e
