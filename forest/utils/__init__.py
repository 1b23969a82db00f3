"""
Forest utility modules.

This package provides shared utilities used across the Forest codebase:
- Logging (loguru, STDERR only)
- Rust file discovery, reading and tree rendering
- Project metadata from Cargo.toml
"""

# Logger
from .logger import configure_logging, is_debug_enabled, logger

# Files
from .files import discover_rust_files, read_source, render_tree

# Metadata
from .metadata import AnalysisMetadata, find_manifest, load_project_metadata

__all__ = [
    # Logger
    "configure_logging",
    "is_debug_enabled",
    "logger",
    # Files
    "discover_rust_files",
    "read_source",
    "render_tree",
    # Metadata
    "AnalysisMetadata",
    "find_manifest",
    "load_project_metadata",
]
