"""
Forest - explore a Rust project.

Scans a Rust source tree and produces an inventory of:
- Every variable binding, with mutability, declaration kind, inferred type
  and enclosing function
- Every function, struct and enum declaration

Extraction runs on a tree-sitter syntax tree when the file parses cleanly
and falls back to a heuristic line scanner when it does not.
"""

__version__ = "0.2.0"
