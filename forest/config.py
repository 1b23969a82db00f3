"""Run configuration for Forest.

Settings come from keyword arguments (the CLI) with environment variable
overrides for the knobs that matter when Forest is embedded in other tooling:

    FOREST_WORKERS          number of files extracted concurrently
    FOREST_LINE_RESOLUTION  "span" (tree-sitter spans) or "text" (text search)
    FOREST_MAX_FILE_SIZE    files larger than this many bytes are skipped
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Literal

from forest.constants import DEFAULT_IGNORE_DIRS, MAX_FILE_SIZE
from forest.types.errors import ConfigurationError

LineResolution = Literal["span", "text"]

_LINE_RESOLUTIONS: tuple[str, ...] = ("span", "text")


@dataclass(frozen=True)
class ForestConfig:
    """Settings for one analysis run."""

    workers: int = 1
    line_resolution: LineResolution = "span"
    max_file_size: int = MAX_FILE_SIZE
    ignore_dirs: frozenset[str] = field(default_factory=lambda: DEFAULT_IGNORE_DIRS)
    follow_hidden: bool = False

    def __post_init__(self) -> None:
        if self.workers < 1:
            raise ConfigurationError(
                f"workers must be >= 1, got {self.workers}",
                user_message="The number of workers must be at least 1.",
            )
        if self.line_resolution not in _LINE_RESOLUTIONS:
            raise ConfigurationError(
                f"unknown line resolution: {self.line_resolution!r}",
                user_message="Line resolution must be 'span' or 'text'.",
            )
        if self.max_file_size < 1:
            raise ConfigurationError(
                f"max_file_size must be positive, got {self.max_file_size}",
                user_message="The maximum file size must be positive.",
            )

    @classmethod
    def from_env(cls, **overrides: object) -> ForestConfig:
        """Build a config from FOREST_* environment variables.

        Explicit keyword overrides win over the environment.
        """
        values: dict[str, object] = {}

        workers = os.environ.get("FOREST_WORKERS")
        if workers:
            values["workers"] = _parse_int("FOREST_WORKERS", workers)

        resolution = os.environ.get("FOREST_LINE_RESOLUTION")
        if resolution:
            values["line_resolution"] = resolution.strip().lower()

        max_size = os.environ.get("FOREST_MAX_FILE_SIZE")
        if max_size:
            values["max_file_size"] = _parse_int("FOREST_MAX_FILE_SIZE", max_size)

        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)  # type: ignore[arg-type]


def _parse_int(name: str, raw: str) -> int:
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigurationError(
            f"{name} must be an integer, got {raw!r}",
            user_message=f"Environment variable {name} is not a valid integer.",
            original_error=e,
        ) from e
