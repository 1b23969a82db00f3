"""Backend protocol for the extraction pipeline.

Every backend turns the text of one Rust file into a ``FileExtraction``.
The orchestrator tries backends in priority order.

Priority convention:
    50 = tree-sitter (syntax tree visitor)
    10 = line scanner (text-level fallback)
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from forest.extraction.types import FileExtraction


@runtime_checkable
class ExtractionBackend(Protocol):
    """A way of extracting bindings and declarations from source text.

    A backend that cannot handle a particular file raises ``ParseError`` from
    ``extract``; the orchestrator then moves on to the next backend. Any
    other outcome is final for that file.
    """

    @property
    def name(self) -> str:
        """Backend identifier (e.g., 'tree_sitter', 'line_scanner')."""
        ...

    @property
    def priority(self) -> int:
        """Higher priority backends are tried first."""
        ...

    def supports(self, content: str) -> bool:
        """Check if this backend can be attempted at all."""
        ...

    def extract(self, content: str, file_path: str) -> FileExtraction:
        """Extract all records from one file."""
        ...
