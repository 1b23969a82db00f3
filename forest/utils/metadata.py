"""
Project metadata from the Cargo manifest.

A missing or malformed manifest is not an error: the report simply shows
"unknown" for the name and version.
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from forest.constants import MANIFEST_FILE, UNKNOWN, utcnow
from forest.utils.logger import logger


@dataclass(frozen=True)
class AnalysisMetadata:
    """Run metadata shown at the top of every report."""

    project_name: str = UNKNOWN
    version: str = UNKNOWN
    timestamp: datetime = field(default_factory=utcnow)

    @property
    def datetime_label(self) -> str:
        return self.timestamp.strftime("%Y-%m-%d %H:%M:%S")


def find_manifest(project_dir: str | Path) -> Path | None:
    """Search ``project_dir`` and its parents for a Cargo manifest."""
    current = Path(project_dir).resolve()
    for directory in (current, *current.parents):
        candidate = directory / MANIFEST_FILE
        if candidate.is_file():
            return candidate
    return None


def load_project_metadata(project_dir: str | Path) -> AnalysisMetadata:
    """Read ``[package] name/version`` for the project containing ``project_dir``."""
    manifest = find_manifest(project_dir)
    if manifest is None:
        logger.warning(f"No {MANIFEST_FILE} found for {project_dir}")
        return AnalysisMetadata()

    try:
        with manifest.open("rb") as fh:
            data = tomllib.load(fh)
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning(f"Could not read {manifest}: {e}")
        return AnalysisMetadata()

    package = data.get("package")
    if not isinstance(package, dict):
        logger.warning(f"{manifest} has no [package] table")
        return AnalysisMetadata()

    name = package.get("name")
    version = package.get("version")
    return AnalysisMetadata(
        project_name=name if isinstance(name, str) else UNKNOWN,
        # Workspace-inherited versions appear as tables
        version=version if isinstance(version, str) else UNKNOWN,
    )
