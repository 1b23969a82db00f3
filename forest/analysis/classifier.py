"""Type classifier: Rust type expressions to readable descriptions.

Two axes are produced for every type:

- ``classify`` gives the fully expanded description used as a binding's
  inferred type ("vector of optional owned string").
- ``basic_type`` gives a compact canonical spelling used for grouping
  ("Vec<Option<String>>").

Both accept either annotation text or a tree-sitter type node (with the
source bytes it came from). Both are pure, so the same input always yields
the same output.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from forest.analysis.text import (
    annotation_at,
    assignment_rhs,
    encloses,
    find_binding_colon,
    first_single_colon,
    last_path_segment,
    mask_strings,
    split_top_level,
)
from forest.constants import INFERRED, UNKNOWN
from forest.parsing.tree_sitter_wrapper import has_mut, node_text
from forest.utils.logger import logger

if TYPE_CHECKING:
    from tree_sitter import Node

# ============================================================================
# Primitive tables
# ============================================================================

SIGNED_INTEGERS = frozenset({"i8", "i16", "i32", "i64", "i128", "isize"})
UNSIGNED_INTEGERS = frozenset({"u8", "u16", "u32", "u64", "u128", "usize"})
FLOATS = frozenset({"f32", "f64"})

PRIMITIVE_BASIC_TYPES = SIGNED_INTEGERS | UNSIGNED_INTEGERS | FLOATS | {"bool", "char", "String"}

_PRIMITIVE_LABELS: dict[str, str] = {
    **{name: f"integer ({name})" for name in SIGNED_INTEGERS},
    **{name: f"unsigned integer ({name})" for name in UNSIGNED_INTEGERS},
    **{name: f"floating-point ({name})" for name in FLOATS},
    "bool": "boolean",
    "char": "character",
    "String": "owned string",
    "str": "string slice",
}

_MAPS = frozenset({"HashMap", "BTreeMap"})
_SETS = frozenset({"HashSet", "BTreeSet"})

_FLOAT_LITERAL_RE = re.compile(r"^\d[\d_]*\.\d")
_LET_RE = re.compile(r"\blet\s+")


# ============================================================================
# Descriptive classification
# ============================================================================


def classify(type_expr: str | Node, source: bytes | None = None) -> str:
    """Describe a type expression.

    Args:
        type_expr: Annotation text such as ``"Vec<i32>"`` or a tree-sitter
            type node.
        source: Source bytes the node was parsed from. Required for nodes.

    Returns:
        The canonical description. Empty input and the literal "inferred"
        both yield "inferred".
    """
    if not isinstance(type_expr, str) and source is None:
        raise ValueError("source bytes are required to classify a syntax node")
    try:
        if isinstance(type_expr, str):
            return _classify_text(type_expr)
        return _classify_node(type_expr, source)
    except RecursionError:
        return _raw_type_text(type_expr, source)


def _raw_type_text(type_expr: str | Node, source: bytes | None) -> str:
    """Fallback for types nested too deeply to walk: the annotation as written."""
    text = type_expr if isinstance(type_expr, str) else node_text(type_expr, source or b"")
    logger.debug(f"Type nested too deeply to classify ({len(text)} chars); using raw text")
    return text.strip() or UNKNOWN


def _describe_generic(base: str, args: list[str], raw_params: str) -> str:
    """Description for ``base<args>`` where ``args`` are already classified."""
    name = last_path_segment(base)
    if name == "Vec":
        return f"vector of {args[0] if args else INFERRED}"
    if name == "Option":
        return f"optional {args[0] if args else INFERRED}"
    if name == "Result":
        if len(args) >= 2:
            return f"result with Ok({args[0]}) or Err({args[1]})"
        return f"result of {args[0] if args else INFERRED}"
    if name in _MAPS:
        if len(args) >= 2:
            return f"map from {args[0]} to {args[1]}"
        return "map"
    if name in _SETS:
        return f"set of {args[0] if args else INFERRED}"
    return f"{base}<{raw_params}>"


def _strip_reference(text: str) -> tuple[bool, str]:
    """Split ``&'a mut T`` into (is_mutable, "T")."""
    rest = text[1:].lstrip()
    if rest.startswith("'"):
        # Lifetime
        parts = rest.split(None, 1)
        rest = parts[1] if len(parts) > 1 else ""
    if rest.startswith("mut "):
        return True, rest[4:].lstrip()
    return False, rest


def _classify_text(text: str) -> str:
    t = text.strip()
    if not t or t == INFERRED:
        return INFERRED

    if t.startswith("&"):
        mutable, inner = _strip_reference(t)
        prefix = "mutable " if mutable else ""
        return f"{prefix}reference to {_classify_text(inner)}"

    if encloses(t, "(", ")"):
        inner = t[1:-1].strip()
        if not inner:
            return "unit type ()"
        parts = [p for p in split_top_level(inner) if p]
        return f"tuple of ({', '.join(_classify_text(p) for p in parts)})"

    if encloses(t, "[", "]"):
        inner = t[1:-1]
        parts = split_top_level(inner, ";")
        if len(parts) == 2:
            return f"array of {_classify_text(parts[0])} with size {parts[1]}"
        return f"slice of {_classify_text(inner)}"

    lt = t.find("<")
    if lt > 0 and t.endswith(">"):
        base = t[:lt].strip()
        params = t[lt + 1 : -1].strip()
        args = [
            _classify_text(p) for p in split_top_level(params) if p and not p.startswith("'")
        ]
        return _describe_generic(base, args, params)

    return _PRIMITIVE_LABELS.get(t, t)


def _classify_node(node: Node, source: bytes) -> str:
    kind = node.type

    if kind == "reference_type":
        mutable = has_mut(node)
        inner = node.child_by_field_name("type")
        described = _classify_node(inner, source) if inner is not None else INFERRED
        return f"{'mutable ' if mutable else ''}reference to {described}"

    if kind == "generic_type":
        base_node = node.child_by_field_name("type")
        args_node = node.child_by_field_name("type_arguments")
        if base_node is None or args_node is None:
            return _classify_text(node_text(node, source))
        base = node_text(base_node, source)
        raw_params = node_text(args_node, source).strip()[1:-1].strip()
        args = [
            _classify_node(c, source)
            for c in args_node.named_children
            if c.type not in ("lifetime", "type_binding", "block")
        ]
        return _describe_generic(base, args, raw_params)

    if kind == "array_type":
        element = node.child_by_field_name("element")
        length = node.child_by_field_name("length")
        described = _classify_node(element, source) if element is not None else INFERRED
        if length is None:
            return f"slice of {described}"
        return f"array of {described} with size {node_text(length, source).strip()}"

    if kind == "tuple_type":
        parts = [_classify_node(c, source) for c in node.named_children]
        if not parts:
            return "unit type ()"
        return f"tuple of ({', '.join(parts)})"

    if kind == "unit_type":
        return "unit type ()"

    if kind in ("primitive_type", "type_identifier", "scoped_type_identifier"):
        text = node_text(node, source).strip()
        return _PRIMITIVE_LABELS.get(text, text)

    return _classify_text(node_text(node, source))


# ============================================================================
# Basic (canonical) type
# ============================================================================


def basic_type(type_expr: str | Node, source: bytes | None = None) -> str:
    """Compact canonical spelling of a type expression.

    Primitives and ``String`` stay verbatim, ``Option``/``Vec`` keep their
    simplified parameter, references, arrays, slices and tuples keep their
    shape, and any other path collapses to its last segment.
    """
    if not isinstance(type_expr, str) and source is None:
        raise ValueError("source bytes are required to simplify a syntax node")
    try:
        if isinstance(type_expr, str):
            return _basic_text(type_expr)
        return _basic_node(type_expr, source)
    except RecursionError:
        return _raw_type_text(type_expr, source)


def _basic_generic(name: str, first_arg: str | None) -> str:
    if name in ("Option", "Vec"):
        return f"{name}<{first_arg or 'T'}>"
    return name


def _basic_text(text: str) -> str:
    t = text.strip()
    if not t:
        return UNKNOWN

    if t.startswith("&"):
        mutable, inner = _strip_reference(t)
        return f"&{'mut ' if mutable else ''}{_basic_text(inner)}"

    if encloses(t, "(", ")"):
        parts = [p for p in split_top_level(t[1:-1]) if p]
        if not parts:
            return "()"
        return f"({', '.join(_basic_text(p) for p in parts)})"

    if encloses(t, "[", "]"):
        parts = split_top_level(t[1:-1], ";")
        if len(parts) == 2:
            return f"[{_basic_text(parts[0])}; N]"
        return f"[{_basic_text(t[1:-1])}]"

    lt = t.find("<")
    if lt > 0 and t.endswith(">"):
        name = last_path_segment(t[:lt])
        params = [p for p in split_top_level(t[lt + 1 : -1]) if p and not p.startswith("'")]
        return _basic_generic(name, _basic_text(params[0]) if params else None)

    return last_path_segment(t)


def _basic_node(node: Node, source: bytes) -> str:
    kind = node.type

    if kind == "reference_type":
        mutable = has_mut(node)
        inner = node.child_by_field_name("type")
        inner_text = _basic_node(inner, source) if inner is not None else UNKNOWN
        return f"&{'mut ' if mutable else ''}{inner_text}"

    if kind == "generic_type":
        base_node = node.child_by_field_name("type")
        args_node = node.child_by_field_name("type_arguments")
        if base_node is None:
            return _basic_text(node_text(node, source))
        name = last_path_segment(node_text(base_node, source))
        first = None
        if args_node is not None:
            for child in args_node.named_children:
                if child.type not in ("lifetime", "type_binding", "block"):
                    first = _basic_node(child, source)
                    break
        return _basic_generic(name, first)

    if kind == "array_type":
        element = node.child_by_field_name("element")
        inner = _basic_node(element, source) if element is not None else UNKNOWN
        if node.child_by_field_name("length") is None:
            return f"[{inner}]"
        return f"[{inner}; N]"

    if kind == "tuple_type":
        parts = [_basic_node(c, source) for c in node.named_children]
        return f"({', '.join(parts)})" if parts else "()"

    if kind == "unit_type":
        return "()"

    return _basic_text(node_text(node, source))


def basic_type_from_context(line: str) -> str:
    """Guess the basic type from a raw source line.

    An annotation after ``:`` wins; otherwise the shape of the assigned
    value decides. Returns "unknown" when neither is recognisable.
    """
    masked = mask_strings(line)
    let_match = _LET_RE.search(masked)
    if let_match:
        colon = find_binding_colon(masked, let_match.end())
    else:
        colon = first_single_colon(masked)
    if colon is not None:
        annotation = annotation_at(masked, colon)
        if annotation:
            return annotation

    rhs = assignment_rhs(line)
    if not rhs:
        return UNKNOWN
    if rhs.startswith('"'):
        return "String"
    if rhs in ("true", "false"):
        return "bool"
    if rhs[0].isdigit():
        return "f64" if _FLOAT_LITERAL_RE.match(rhs) else "i32"
    if rhs.startswith("'") and len(rhs) >= 3:
        return "char"
    if rhs.startswith("vec!") or "Vec::" in rhs:
        return "Vec<T>"
    if rhs.startswith("Some("):
        return "Option<T>"
    return UNKNOWN


def is_float_literal(text: str) -> bool:
    return bool(_FLOAT_LITERAL_RE.match(text))
