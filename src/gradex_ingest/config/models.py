"""Configuration data models."""

from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

from ..errors import ConfigurationError

DEFAULT_COURSE = "MATH00000"
DEFAULT_DEADLINE = "2020-04-22-16-00"


@dataclass(frozen=True)
class IngestConfig:
    """Settings for one ingest run of one course."""

    course: str = DEFAULT_COURSE
    deadline: str = DEFAULT_DEADLINE
    class_list: Path = Path(f"{DEFAULT_COURSE}_enrolment.csv")
    ingest_dir: Path = Path("learn_dir")
    output_dir: Path = Path("output_dir")
    report_dir: Path | None = None
    count_pages: bool = False

    @property
    def reports_path(self) -> Path:
        """Directory the audit reports are written to."""
        return self.report_dir or self.output_dir

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "IngestConfig":
        """Build a config from a parsed YAML mapping.

        Accepts the original command-line spellings ``classlist``,
        ``learndir`` and ``outputdir`` as aliases.

        Raises:
            ConfigurationError: If unknown keys are present
        """
        aliases = {
            "classlist": "class_list",
            "learndir": "ingest_dir",
            "learn_dir": "ingest_dir",
            "outputdir": "output_dir",
            "reportdir": "report_dir",
        }
        known = {f.name for f in fields(cls)}

        values: dict[str, Any] = {}
        for key, value in (data or {}).items():
            name = aliases.get(key, key)
            if name not in known:
                raise ConfigurationError(f"Unknown configuration key: {key}")
            values[name] = value

        for name in ("class_list", "ingest_dir", "output_dir", "report_dir"):
            if values.get(name) is not None:
                values[name] = Path(values[name])
        if "deadline" in values:
            values["deadline"] = str(values["deadline"])
        if "course" in values:
            values["course"] = str(values["course"])
        if "count_pages" in values:
            values["count_pages"] = bool(values["count_pages"])

        return cls(**values)

    def merged(self, **overrides: Any) -> "IngestConfig":
        """Return a copy with every non-None override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})
