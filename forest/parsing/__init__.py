"""
Tree-sitter parsing for Rust sources.
"""

from .tree_sitter_wrapper import (
    RUST_LANGUAGE,
    ParsedSource,
    RustParser,
    has_mut,
    is_tree_sitter_available,
    node_text,
    split_lines,
)

__all__ = [
    "RUST_LANGUAGE",
    "ParsedSource",
    "RustParser",
    "has_mut",
    "is_tree_sitter_available",
    "node_text",
    "split_lines",
]
