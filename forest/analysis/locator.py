"""Line-number resolution for syntax nodes.

``locate_line`` is the single place where a node is mapped back to a source
line. With a span row (tree-sitter gives one for every node) the answer is
exact. Without one it falls back to a best-effort textual search that is
NOT guaranteed to find the right line: repeated text resolves to its first
occurrence and unmatched text resolves to line 1.
"""

from __future__ import annotations

from forest.constants import UNKNOWN_CONTEXT

_PREFIX_LENGTH = 10


def locate_line(lines: list[str], token_text: str, span_row: int | None = None) -> int:
    """Return the 1-based line for ``token_text``.

    Args:
        lines: The file's lines.
        token_text: Source text of the node being located.
        span_row: 0-based row reported by the parser, if known.

    Returns:
        ``span_row + 1`` when the span is usable, otherwise the first line
        matching by exact content, then containment, then a 10-character
        prefix, and finally 1.
    """
    if span_row is not None and 0 <= span_row < len(lines):
        return span_row + 1

    stripped = token_text.strip()
    if not stripped:
        return 1
    needle = stripped.splitlines()[0].strip()

    for idx, line in enumerate(lines):
        if line.strip() == needle:
            return idx + 1

    for idx, line in enumerate(lines):
        if needle in line:
            return idx + 1

    if len(needle) > _PREFIX_LENGTH:
        prefix = needle[:_PREFIX_LENGTH]
        for idx, line in enumerate(lines):
            if prefix in line:
                return idx + 1

    return 1


def context_line(lines: list[str], line_number: int) -> str:
    """Text of the 1-based ``line_number``, or "unknown" when out of range."""
    if 1 <= line_number <= len(lines):
        return lines[line_number - 1]
    return UNKNOWN_CONTEXT
