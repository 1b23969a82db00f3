"""
Extraction pipeline.

- protocols: the ExtractionBackend protocol
- backends: tree-sitter (primary) and line scanner (fallback)
- orchestrator: per-file backend selection and run-wide merging
- cache: parse tree cache keyed by content hash
"""

from .cache import ParseCache
from .orchestrator import ExtractionOrchestrator, analyse_project
from .protocols import ExtractionBackend
from .types import (
    AnalysisResults,
    BindingRecord,
    DeclarationRecord,
    DeclarationType,
    FileError,
    FileExtraction,
)

__all__ = [
    "AnalysisResults",
    "BindingRecord",
    "DeclarationRecord",
    "DeclarationType",
    "ExtractionBackend",
    "ExtractionOrchestrator",
    "FileError",
    "FileExtraction",
    "ParseCache",
    "analyse_project",
]
