"""Report rendering for analysis results.

Three layouts share one data model:

- text: human-readable sections, optionally with markdown editor links
- json: ``metadata`` plus the three record lists
- csv: metadata rows, then one table for bindings and one for declarations

Rendering is pure; ``write_report`` is the only function that touches disk.
"""

from __future__ import annotations

import csv
import io
import json
from enum import StrEnum
from pathlib import Path
from typing import Any

from forest.extraction.types import AnalysisResults, BindingRecord, DeclarationRecord
from forest.types.errors import ConfigurationError, ErrorCode, ErrorContext, OutputError
from forest.utils.logger import logger
from forest.utils.metadata import AnalysisMetadata

_BINDING_COLUMNS = ["mutability", "name", "file", "line", "context", "kind", "type", "basic_type", "scope"]
_DECLARATION_COLUMNS = ["type", "name", "file", "line"]


class OutputFormat(StrEnum):
    """Supported report formats."""

    TEXT = "text"
    JSON = "json"
    CSV = "csv"

    @classmethod
    def parse(cls, value: str | OutputFormat) -> OutputFormat:
        """Resolve a format selector.

        Raises:
            ConfigurationError: If ``value`` names no supported format.
        """
        try:
            return cls(str(value).lower())
        except ValueError as e:
            allowed = ", ".join(f.value for f in cls)
            raise ConfigurationError(
                f"Invalid output format: {value!r}",
                user_message=f"Unknown format '{value}'. Choose one of: {allowed}.",
                code=ErrorCode.INVALID_OUTPUT_FORMAT,
                original_error=e,
            ) from e


# ============================================================================
# Line formatting
# ============================================================================


def _location(record: BindingRecord | DeclarationRecord, link: bool) -> str:
    location = str(record.source_location)
    if link:
        return f"[{location}]({record.source_location.vscode_link()})"
    return location


def format_binding(binding: BindingRecord, link: bool = False) -> str:
    """One report line for a binding."""
    return (
        f"{binding.name} ({binding.mutability}): {binding.context_line.strip()} "
        f"at {_location(binding, link)} - kind: {binding.declaration_kind}, "
        f"type: {binding.inferred_type}, basic type: {binding.basic_type}, "
        f"scope: {binding.scope}"
    )


def format_declaration(declaration: DeclarationRecord, link: bool = False) -> str:
    """One report line for a declaration."""
    return f"{declaration.name} ({declaration.declaration_type}): at {_location(declaration, link)}"


# ============================================================================
# Renderers
# ============================================================================


def _section(title: str, rule: str, lines: list[str]) -> list[str]:
    return [title, rule, *lines]


def render_text(results: AnalysisResults, metadata: AnalysisMetadata, link: bool = False) -> str:
    out = [
        "Project Information",
        "-------------------",
        f"Project Name: {metadata.project_name}",
        f"Version: {metadata.version}",
        f"Analysis Run At: {metadata.datetime_label}",
        "",
    ]
    out += _section(
        f"Mutable Variables ({len(results.mutable_bindings)})",
        "-------------------",
        [format_binding(b, link) for b in results.mutable_bindings],
    )
    out.append("")
    out += _section(
        f"Immutable Variables ({len(results.immutable_bindings)})",
        "---------------------",
        [format_binding(b, link) for b in results.immutable_bindings],
    )
    out.append("")
    out += _section(
        f"data_structures ({len(results.declarations)})",
        "----------------",
        [format_declaration(d, link) for d in results.declarations],
    )
    return "\n".join(out) + "\n"


def _binding_dict(binding: BindingRecord, link: bool) -> dict[str, Any]:
    data = binding.to_dict(link)
    data["context"] = binding.context_line.strip()
    return data


def render_json(results: AnalysisResults, metadata: AnalysisMetadata, link: bool = False) -> str:
    counts = results.counts
    payload = {
        "metadata": {
            "project_name": metadata.project_name,
            "version": metadata.version,
            "datetime": metadata.datetime_label,
            "mutable_variable_count": counts["mutable_variables"],
            "immutable_variable_count": counts["immutable_variables"],
            "data_structure_count": counts["data_structures"],
        },
        "mutable_variables": [_binding_dict(b, link) for b in results.mutable_bindings],
        "immutable_variables": [_binding_dict(b, link) for b in results.immutable_bindings],
        "data_structures": [d.to_dict(link) for d in results.declarations],
    }
    return json.dumps(payload, indent=2, ensure_ascii=False) + "\n"


def render_csv(results: AnalysisResults, metadata: AnalysisMetadata, link: bool = False) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")

    writer.writerow(["Project Name", metadata.project_name])
    writer.writerow(["Version", metadata.version])
    writer.writerow(["Analysis Run At", metadata.datetime_label])
    writer.writerow([])

    link_column = ["vscode_link"] if link else []
    writer.writerow(_BINDING_COLUMNS + link_column)
    for binding in (*results.mutable_bindings, *results.immutable_bindings):
        row = [
            binding.mutability,
            binding.name,
            binding.file_path,
            binding.line,
            binding.context_line.strip(),
            binding.declaration_kind,
            binding.inferred_type,
            binding.basic_type,
            binding.scope,
        ]
        if link:
            row.append(binding.source_location.vscode_link())
        writer.writerow(row)

    writer.writerow(_DECLARATION_COLUMNS + link_column)
    for declaration in results.declarations:
        row = [str(declaration.declaration_type), declaration.name, declaration.file_path, declaration.line]
        if link:
            row.append(declaration.source_location.vscode_link())
        writer.writerow(row)

    return buffer.getvalue()


_RENDERERS = {
    OutputFormat.TEXT: render_text,
    OutputFormat.JSON: render_json,
    OutputFormat.CSV: render_csv,
}


def render(
    results: AnalysisResults,
    metadata: AnalysisMetadata,
    fmt: OutputFormat | str = OutputFormat.TEXT,
    link: bool = False,
) -> str:
    """Render a report as a string.

    Raises:
        ConfigurationError: If ``fmt`` is not a supported format.
    """
    return _RENDERERS[OutputFormat.parse(fmt)](results, metadata, link)


def write_report(
    results: AnalysisResults,
    metadata: AnalysisMetadata,
    path: str | Path,
    fmt: OutputFormat | str = OutputFormat.TEXT,
    link: bool = False,
) -> Path:
    """Render and write a report to ``path``.

    Returns:
        The path written.

    Raises:
        ConfigurationError: If ``fmt`` is not a supported format.
        OutputError: If the file cannot be written.
    """
    content = render(results, metadata, fmt, link)
    target = Path(path)
    try:
        target.write_text(content, encoding="utf-8")
    except OSError as e:
        raise OutputError(
            f"Failed to write report to {target}: {e}",
            user_message=f"Could not write results to {target}.",
            context=ErrorContext(operation="write_report", file_path=str(target)),
            original_error=e,
        ) from e
    logger.info(f"Wrote {OutputFormat.parse(fmt)} report to {target}")
    return target
