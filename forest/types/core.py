"""
Core types shared across the extraction pipeline.
"""

import os
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class SourceLocation:
    """A file path plus a 1-based line number."""

    file_path: str
    line: int

    def __post_init__(self) -> None:
        if self.line < 1:
            raise ValueError("line must be >= 1")

    def __str__(self) -> str:
        return f"{self.file_path}:{self.line}"

    def absolute_path(self) -> Path:
        """Resolve the file path against the current directory if needed."""
        path = Path(self.file_path)
        if path.is_absolute():
            return path
        try:
            return path.resolve(strict=True)
        except OSError:
            return Path(os.getcwd()) / path

    def vscode_link(self) -> str:
        """Editor link in the form ``vscode://file/<absolute path>:<line>``."""
        absolute = str(self.absolute_path()).replace("\\", "/")
        return f"vscode://file/{absolute}:{self.line}"
