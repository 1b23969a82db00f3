"""
Binding and declaration records.

Records are created during a single extraction pass and never modified
afterwards. ``BindingDraft`` is the scope-less form produced by the pattern
decomposer; the visitor that knows the enclosing function turns it into a
``BindingRecord``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from .core import SourceLocation


class DeclarationType(StrEnum):
    """Kinds of top-level declaration."""

    FUNCTION = "function"
    STRUCT = "struct"
    ENUM = "enum"


@dataclass(frozen=True)
class BindingRecord:
    """One discovered variable binding."""

    name: str
    is_mutable: bool
    source_location: SourceLocation
    context_line: str
    declaration_kind: str
    inferred_type: str
    basic_type: str
    scope: str = ""

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("binding name must be non-empty")

    @property
    def file_path(self) -> str:
        return self.source_location.file_path

    @property
    def line(self) -> int:
        return self.source_location.line

    @property
    def mutability(self) -> str:
        return "mutable" if self.is_mutable else "immutable"

    def to_dict(self, link: bool = False) -> dict[str, Any]:
        """Serialize with the report field names."""
        data: dict[str, Any] = {
            "name": self.name,
            "file": self.file_path,
            "line": self.line,
            "context": self.context_line,
            "kind": self.declaration_kind,
            "type": self.inferred_type,
            "basic_type": self.basic_type,
            "scope": self.scope,
        }
        if link:
            data["vscode_link"] = self.source_location.vscode_link()
        return data


@dataclass(frozen=True)
class DeclarationRecord:
    """One function, struct or enum declaration."""

    name: str
    declaration_type: DeclarationType
    source_location: SourceLocation

    @property
    def file_path(self) -> str:
        return self.source_location.file_path

    @property
    def line(self) -> int:
        return self.source_location.line

    def to_dict(self, link: bool = False) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "type": str(self.declaration_type),
            "file": self.file_path,
            "line": self.line,
        }
        if link:
            data["vscode_link"] = self.source_location.vscode_link()
        return data


@dataclass(frozen=True)
class BindingDraft:
    """A binding whose enclosing scope is not yet attached."""

    name: str
    is_mutable: bool
    source_location: SourceLocation
    context_line: str
    declaration_kind: str
    inferred_type: str
    basic_type: str

    def to_record(self, scope: str) -> BindingRecord:
        return BindingRecord(
            name=self.name,
            is_mutable=self.is_mutable,
            source_location=self.source_location,
            context_line=self.context_line,
            declaration_kind=self.declaration_kind,
            inferred_type=self.inferred_type,
            basic_type=self.basic_type,
            scope=scope,
        )
