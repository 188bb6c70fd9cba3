"""Path safety checks and validation of caller-supplied coverage options."""

import ntpath
import posixpath
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import pydantic
from pydantic import BaseModel, ConfigDict, Field, field_validator

from doccov.errors import ValidationError

DEFAULT_INCLUDE = ["src/**/*.ts", "src/**/*.js"]
DEFAULT_EXCLUDE = ["node_modules/**", "dist/**"]
DEFAULT_THRESHOLD = 80.0


def _is_absolute(path: str) -> bool:
    return posixpath.isabs(path) or ntpath.isabs(path) or bool(ntpath.splitdrive(path)[0])


def is_valid_glob_pattern(pattern: str) -> bool:
    """Check that a glob pattern stays inside the project root.

    Rejects empty patterns, NUL bytes, absolute paths and any parent
    traversal. The glob grammar itself is left to the glob engine.
    """
    if not isinstance(pattern, str) or not pattern:
        return False
    if "\x00" in pattern:
        return False
    if _is_absolute(pattern):
        return False

    normalized = pattern.replace("\\", "/")
    if "../" in normalized or normalized == ".." or normalized.endswith("/.."):
        return False

    return True


def is_safe_relative_path(file_path: str) -> bool:
    """Check that a documented file path is project-relative.

    Args:
        file_path: Path taken from a documentation source reference

    Returns:
        False for empty paths, NUL bytes, absolute paths, and paths that
        normalize to somewhere above the project root.
    """
    if not isinstance(file_path, str) or not file_path:
        return False
    if "\x00" in file_path:
        return False
    if _is_absolute(file_path):
        return False

    normalized = posixpath.normpath(file_path.replace("\\", "/"))
    if normalized == ".." or normalized.startswith("../"):
        return False

    return True


def normalize_relative_path(file_path: str) -> str:
    """Normalize a safe relative path to forward slashes without ``./`` segments."""
    return posixpath.normpath(file_path.replace("\\", "/"))


def check_glob_patterns(patterns: list[str] | None) -> list[str] | None:
    if patterns is None:
        return None
    for pattern in patterns:
        if not is_valid_glob_pattern(pattern):
            raise ValueError(
                f"contains invalid glob pattern {pattern!r} "
                "(absolute paths and parent traversal are not allowed)"
            )
    return patterns


def check_thresholds(thresholds: dict[str, float]) -> dict[str, float]:
    for name, value in thresholds.items():
        if not 0 <= value <= 100:
            raise ValueError(f"threshold for {name!r} must be between 0 and 100, got {value}")
    return thresholds


class CoverageOptions(BaseModel):
    """Options accepted by ``CoverageAggregator.generate_report``.

    ``include`` and ``exclude`` left as ``None`` fall back to
    ``DEFAULT_INCLUDE`` and ``DEFAULT_EXCLUDE``. Scope inference only looks at
    include patterns the caller actually supplied.
    """

    model_config = ConfigDict(extra="forbid")

    include: list[str] | None = None
    exclude: list[str] | None = None
    root_dir: Path | None = None
    threshold: float = Field(default=DEFAULT_THRESHOLD, ge=0, le=100)
    thresholds: dict[str, float] = Field(default_factory=dict)
    scan_source_files: bool = True

    @field_validator("include")
    @classmethod
    def _validate_include(cls, value: list[str] | None) -> list[str] | None:
        if value is not None and len(value) == 0:
            raise ValueError("at least one include pattern is required")
        return check_glob_patterns(value)

    @field_validator("exclude")
    @classmethod
    def _validate_exclude(cls, value: list[str] | None) -> list[str] | None:
        return check_glob_patterns(value)

    @field_validator("thresholds")
    @classmethod
    def _validate_thresholds(cls, value: dict[str, float]) -> dict[str, float]:
        return check_thresholds(value)

    @property
    def effective_include(self) -> list[str]:
        return list(self.include) if self.include is not None else list(DEFAULT_INCLUDE)

    @property
    def effective_exclude(self) -> list[str]:
        return list(self.exclude) if self.exclude is not None else list(DEFAULT_EXCLUDE)

    @property
    def effective_root(self) -> Path:
        return self.root_dir if self.root_dir is not None else Path.cwd()


def format_validation_error(error: pydantic.ValidationError, prefix: str) -> str:
    """Render the first pydantic issue as ``"<prefix> - field: message"``."""
    issue = error.errors()[0]
    location = ".".join(str(part) for part in issue.get("loc", ()))
    label = f"{location}: " if location else ""
    message = issue.get("msg", "invalid value")
    # pydantic prefixes messages raised from validators
    message = message.removeprefix("Value error, ")
    return f"{prefix} - {label}{message}"


def validate_options(options: CoverageOptions | Mapping[str, Any] | None) -> CoverageOptions:
    """Coerce caller options into a validated ``CoverageOptions``.

    Raises:
        ValidationError: If any option is out of range or unsafe.
    """
    if options is None:
        return CoverageOptions()
    if isinstance(options, CoverageOptions):
        return options

    try:
        return CoverageOptions.model_validate(dict(options))
    except pydantic.ValidationError as e:
        raise ValidationError(format_validation_error(e, "Invalid options")) from e
