"""Report rendering (text, JSON and CSV)."""

from forest.utils.metadata import AnalysisMetadata

from .formatter import (
    OutputFormat,
    format_binding,
    format_declaration,
    render,
    render_csv,
    render_json,
    render_text,
    write_report,
)

__all__ = [
    "AnalysisMetadata",
    "OutputFormat",
    "format_binding",
    "format_declaration",
    "render",
    "render_csv",
    "render_json",
    "render_text",
    "write_report",
]
