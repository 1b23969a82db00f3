"""Output types for the extraction pipeline.

Record types live in ``forest.types.records`` and are re-exported here so
callers can import everything extraction produces from one place.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

from forest.types.errors import ErrorCode
from forest.types.records import (
    BindingDraft,
    BindingRecord,
    DeclarationRecord,
    DeclarationType,
)

__all__ = [
    "AnalysisResults",
    "BindingDraft",
    "BindingRecord",
    "DeclarationRecord",
    "DeclarationType",
    "FileError",
    "FileExtraction",
]


@dataclass
class FileExtraction:
    """Records extracted from one file, in traversal order."""

    file_path: str
    bindings: list[BindingRecord] = field(default_factory=list)
    declarations: list[DeclarationRecord] = field(default_factory=list)
    backend_used: str = "none"
    used_fallback: bool = False

    @property
    def mutable_bindings(self) -> list[BindingRecord]:
        return [b for b in self.bindings if b.is_mutable]

    @property
    def immutable_bindings(self) -> list[BindingRecord]:
        return [b for b in self.bindings if not b.is_mutable]


@dataclass(frozen=True)
class FileError:
    """A file that could not be analysed."""

    file_path: str
    message: str
    code: ErrorCode = ErrorCode.FILE_READ_FAILED

    def to_dict(self) -> dict[str, Any]:
        return {"file": self.file_path, "message": self.message, "code": self.code.value}


@dataclass
class AnalysisResults:
    """Run-wide collections. Bindings are split by mutability on insertion."""

    mutable_bindings: list[BindingRecord] = field(default_factory=list)
    immutable_bindings: list[BindingRecord] = field(default_factory=list)
    declarations: list[DeclarationRecord] = field(default_factory=list)
    errors: list[FileError] = field(default_factory=list)
    files_analyzed: int = 0
    fallback_files: list[str] = field(default_factory=list)

    def add(self, extraction: FileExtraction) -> None:
        """Merge one file's records, preserving their order."""
        for binding in extraction.bindings:
            if binding.is_mutable:
                self.mutable_bindings.append(binding)
            else:
                self.immutable_bindings.append(binding)
        self.declarations.extend(extraction.declarations)
        self.files_analyzed += 1
        if extraction.used_fallback:
            self.fallback_files.append(extraction.file_path)

    def add_error(self, error: FileError) -> None:
        self.errors.append(error)

    def sorted_by_name(self) -> AnalysisResults:
        """Copy with both binding lists stably sorted by name."""
        return replace(
            self,
            mutable_bindings=sorted(self.mutable_bindings, key=lambda b: b.name),
            immutable_bindings=sorted(self.immutable_bindings, key=lambda b: b.name),
            declarations=list(self.declarations),
            errors=list(self.errors),
            fallback_files=list(self.fallback_files),
        )

    @property
    def counts(self) -> dict[str, int]:
        return {
            "mutable_variables": len(self.mutable_bindings),
            "immutable_variables": len(self.immutable_bindings),
            "data_structures": len(self.declarations),
        }
