"""Extraction backends.

Available backends:
- TreeSitterBackend (priority=50): syntax-tree visitor
- LineScannerBackend (priority=10): text-level fallback for unparseable files
"""

from forest.extraction.backends.line_scanner_backend import LineScannerBackend
from forest.extraction.backends.tree_sitter_backend import TreeSitterBackend

__all__ = ["LineScannerBackend", "TreeSitterBackend"]
