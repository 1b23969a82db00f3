"""Tree-sitter wrapper for Rust sources.

The Rust grammar comes from tree-sitter-language-pack and is loaded lazily on
first use. A ``Parser`` instance is not safe to share between threads, so
each thread gets its own.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from forest.types.errors import ErrorCode, ErrorContext, ParseError
from forest.utils.logger import logger

if TYPE_CHECKING:
    from tree_sitter import Language, Node, Parser, Tree

RUST_LANGUAGE = "rust"

_availability_lock = threading.Lock()
_available: bool | None = None
_language: Language | None = None
_local = threading.local()


def is_tree_sitter_available() -> bool:
    """Check once per process whether the Rust grammar can be loaded."""
    global _available, _language
    if _available is not None:
        return _available
    with _availability_lock:
        if _available is None:
            try:
                import tree_sitter_language_pack as tslp

                _language = tslp.get_language(RUST_LANGUAGE)
                _available = True
            except Exception as e:
                logger.warning(
                    f"tree-sitter Rust grammar not available, using line scanner only: {e}. "
                    "Install with: pip install tree-sitter tree-sitter-language-pack"
                )
                _available = False
    return _available


def _thread_parser() -> Parser:
    parser = getattr(_local, "parser", None)
    if parser is None:
        from tree_sitter import Parser

        parser = Parser(_language)
        _local.parser = parser
    return parser


def split_lines(content: str) -> list[str]:
    """Split on "\\n" only, matching the row numbering tree-sitter uses."""
    return [line.rstrip("\r") for line in content.split("\n")]


def node_text(node: Node, source: bytes) -> str:
    """Source text covered by ``node``."""
    return source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")


def has_mut(node: Node) -> bool:
    """True when ``node`` carries a direct ``mut`` keyword child."""
    return any(child.type == "mutable_specifier" for child in node.children)


@dataclass
class ParsedSource:
    """A parsed file: the tree plus the text it was built from."""

    tree: Tree
    source: bytes
    file_path: str
    lines: list[str] = field(default_factory=list)

    @property
    def root(self) -> Node:
        return self.tree.root_node

    @property
    def has_errors(self) -> bool:
        """True when the tree contains any ERROR or MISSING node."""
        return self.tree.root_node.has_error

    def text(self, node: Node) -> str:
        return node_text(node, self.source)


class RustParser:
    """Parses Rust source into ``ParsedSource`` objects."""

    def parse(self, content: str, file_path: str = "<memory>") -> ParsedSource:
        """Parse ``content``.

        Raises:
            ParseError: If the grammar is unavailable.
        """
        if not is_tree_sitter_available():
            raise ParseError(
                "tree-sitter Rust grammar is not installed",
                code=ErrorCode.TREE_SITTER_UNAVAILABLE,
                context=ErrorContext(operation="parse", file_path=file_path),
            )
        source = content.encode("utf-8")
        tree = _thread_parser().parse(source)
        return ParsedSource(
            tree=tree,
            source=source,
            file_path=file_path,
            lines=split_lines(content),
        )
