"""Configuration management for doccov."""

import logging
from pathlib import Path
from typing import Any

import pydantic
import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from doccov.errors import ValidationError
from doccov.validation import (
    DEFAULT_THRESHOLD,
    CoverageOptions,
    check_glob_patterns,
    check_thresholds,
    format_validation_error,
    validate_options,
)

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = ".doccov"
DEFAULT_NOTES_DIR = "docs/notes"


class CoverageConfig(BaseModel):
    """Project-level coverage settings.

    Attributes:
        include: Glob patterns of files to analyze. None means the engine defaults.
        exclude: Glob patterns to ignore. None means the engine defaults.
        thresholds: Minimum coverage percentages. ``overall`` applies to the
            whole project, any other key names a scope (top-level directory).
        notes_dir: Directory holding Markdown notes, relative to the root.
        root_dir: Project root, relative to the configuration file's directory.
        scan_source_files: Whether to discover files on disk or only analyze
            documented ones.
    """

    model_config = ConfigDict(extra="ignore")

    include: list[str] | None = None
    exclude: list[str] | None = None
    thresholds: dict[str, float] = Field(default_factory=dict)
    notes_dir: str = DEFAULT_NOTES_DIR
    root_dir: str | None = None
    scan_source_files: bool = True

    @field_validator("include", "exclude")
    @classmethod
    def _validate_patterns(cls, value: list[str] | None) -> list[str] | None:
        return check_glob_patterns(value)

    @field_validator("thresholds")
    @classmethod
    def _validate_thresholds(cls, value: dict[str, float]) -> dict[str, float]:
        return check_thresholds(value)

    @property
    def overall_threshold(self) -> float | None:
        return self.thresholds.get("overall")

    def resolve_root(self, base_dir: Path, root_override: Path | None = None) -> Path:
        """Return the project root: the override, else ``root_dir`` under ``base_dir``."""
        if root_override is not None:
            return Path(root_override)
        if self.root_dir is not None:
            return base_dir / self.root_dir
        return base_dir

    def to_options(
        self,
        base_dir: Path,
        threshold: float | None = None,
        include: list[str] | None = None,
        exclude: list[str] | None = None,
        root_dir: Path | None = None,
        scan_source_files: bool | None = None
    ) -> CoverageOptions:
        """Merge command-line overrides into engine options.

        Priority is: explicit argument, then configuration file, then defaults.
        The low-coverage threshold falls back to ``thresholds.overall`` and
        then to 80.

        Raises:
            ValidationError: If the merged options are invalid.
        """
        if threshold is None:
            threshold = self.overall_threshold
        if threshold is None:
            threshold = DEFAULT_THRESHOLD

        options: dict[str, Any] = {
            "include": include or self.include,
            "exclude": exclude or self.exclude,
            "root_dir": self.resolve_root(base_dir, root_dir),
            "threshold": threshold,
            "thresholds": dict(self.thresholds),
            "scan_source_files": self.scan_source_files if scan_source_files is None else scan_source_files,
        }
        return validate_options(options)


def _reject(message: str, explicit: bool) -> CoverageConfig:
    if explicit:
        raise ValidationError(message)
    logger.warning(f"{message}; using default configuration")
    return CoverageConfig()


def load_config(repo_root: Path | None = None, config_path: Path | None = None) -> CoverageConfig:
    """Load coverage configuration from a YAML file.

    Args:
        repo_root: Directory searched for a ``.doccov`` file. If None, uses
            the current directory.
        config_path: Explicit configuration file. Takes precedence over
            ``repo_root``.

    Returns:
        CoverageConfig with loaded or default values.

    Raises:
        ValidationError: If an explicitly requested file is missing,
            unparseable or invalid. Problems with an auto-discovered file
            only log a warning and yield defaults.

    Notes:
        JSON files are accepted as they are valid YAML. Expected structure:

        ```yaml
        coverage:
          include: ["src/**/*.ts"]
          exclude: ["node_modules/**"]
          thresholds:
            overall: 80
            src: 70
          notes_dir: docs/notes
        ```
    """
    explicit = config_path is not None
    if explicit:
        path = Path(config_path)
    else:
        path = (repo_root if repo_root is not None else Path.cwd()) / CONFIG_FILE_NAME

    if not path.exists():
        if explicit:
            raise ValidationError(f"Config file not found: {path}")
        return CoverageConfig()

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (yaml.YAMLError, OSError, UnicodeDecodeError) as e:
        return _reject(f"Failed to parse config file {path}: {e}", explicit)

    if data is None:
        return CoverageConfig()
    if not isinstance(data, dict):
        return _reject(f"Config file {path} must contain a mapping", explicit)

    section = data.get("coverage", {})
    if section is None:
        return CoverageConfig()
    if not isinstance(section, dict):
        return _reject(f"'coverage' in {path} must be a mapping", explicit)

    try:
        return CoverageConfig.model_validate(section)
    except pydantic.ValidationError as e:
        return _reject(format_validation_error(e, f"Invalid configuration in {path}"), explicit)
