"""Expression type inference over tree-sitter expression nodes.

Three views of an initializer or loop iterator:

- ``infer_expression_type``: descriptive label ("integer (i64)", "iterator")
- ``infer_loop_type``: label for the element a ``for`` loop binds
- ``basic_type_of_expression``: coarse basic type ("String", "Iterator")
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from forest.analysis.classifier import SIGNED_INTEGERS, UNSIGNED_INTEGERS
from forest.analysis.context import (
    MUTABLE_REFERENCE_ELEMENT,
    OWNED_ELEMENT,
    REFERENCE_ELEMENT,
)
from forest.analysis.text import last_path_segment
from forest.constants import UNKNOWN
from forest.parsing.tree_sitter_wrapper import has_mut, node_text

if TYPE_CHECKING:
    from tree_sitter import Node

_INT_SUFFIX_RE = re.compile(r"(i8|i16|i32|i64|i128|isize|u8|u16|u32|u64|u128|usize)$")
_FLOAT_SUFFIX_RE = re.compile(r"(f32|f64)$")
_TURBOFISH_RE = re.compile(r"::<.*>")

_ARITHMETIC_OPS = frozenset({"+", "-", "*", "/", "%"})
_LOGICAL_OPS = frozenset({"&&", "||"})
_BITWISE_OPS = frozenset({"&", "|", "^", "<<", ">>"})
_COMPARISON_OPS = frozenset({"==", "!=", "<", "<=", ">", ">="})

_METHOD_LABELS: dict[str, str] = {
    "iter": "iterator",
    "iter_mut": "mutable iterator",
    "into_iter": "owned iterator",
    "collect": "collection",
    "map": "mapped iterator",
    "filter": "filtered iterator",
    "unwrap": "unwrapped value",
    "expect": "unwrapped value",
    "clone": "cloned value",
    "to_string": "string",
}

_CONSTRUCTOR_LABELS: dict[str, str] = {
    "Vec": "vector",
    "String": "string",
    "HashMap": "hash map",
    "BTreeMap": "tree map",
}

_LOOP_LABELS: dict[str, str] = {
    "iter": REFERENCE_ELEMENT,
    "iter_mut": MUTABLE_REFERENCE_ELEMENT,
    "into_iter": OWNED_ELEMENT,
}

_BASIC_METHOD_LABELS: dict[str, str] = {
    "iter": "Iterator",
    "iter_mut": "Mutable Iterator",
    "into_iter": "Owned Iterator",
    "collect": "Collection",
}


# ============================================================================
# Node helpers
# ============================================================================


def _unwrap_parens(node: Node) -> Node:
    while node.type == "parenthesized_expression" and node.named_child_count:
        node = node.named_children[0]
    return node


def method_name(call: Node, source: bytes) -> str | None:
    """Name of the method for ``receiver.method(..)`` calls, else None."""
    if call.type != "call_expression":
        return None
    function = call.child_by_field_name("function")
    if function is not None and function.type == "generic_function":
        function = function.child_by_field_name("function")
    if function is None or function.type != "field_expression":
        return None
    field = function.child_by_field_name("field")
    return node_text(field, source) if field is not None else None


def constructor_type(call: Node, source: bytes) -> str | None:
    """Type name for ``Type::new(..)`` calls, else None."""
    if call.type != "call_expression":
        return None
    function = call.child_by_field_name("function")
    if function is None or function.type not in ("scoped_identifier", "generic_function"):
        return None
    path = _TURBOFISH_RE.sub("", node_text(function, source).strip())
    if not path.endswith("::new"):
        return None
    return path[: -len("::new")]


def _macro_name(node: Node, source: bytes) -> str:
    macro = node.child_by_field_name("macro")
    return last_path_segment(node_text(macro, source)) if macro is not None else ""


def _literal_label(node: Node, source: bytes) -> str | None:
    kind = node.type
    text = node_text(node, source)
    if kind in ("string_literal", "raw_string_literal"):
        return "byte string" if text.startswith("b") else "string"
    if kind == "char_literal":
        return "byte" if text.startswith("b") else "character"
    if kind == "integer_literal":
        match = _INT_SUFFIX_RE.search(text)
        if match is None:
            return "integer"
        suffix = match.group(1)
        if suffix in SIGNED_INTEGERS:
            return f"integer ({suffix})"
        if suffix in UNSIGNED_INTEGERS:
            return f"unsigned integer ({suffix})"
        return "integer"
    if kind == "float_literal":
        match = _FLOAT_SUFFIX_RE.search(text)
        return f"floating-point ({match.group(1)})" if match else "floating-point"
    if kind == "boolean_literal":
        return "boolean"
    return None


# ============================================================================
# Descriptive inference
# ============================================================================


def infer_expression_type(node: Node, source: bytes) -> str:
    """Descriptive type label for an expression node."""
    node = _unwrap_parens(node)
    kind = node.type

    literal = _literal_label(node, source)
    if literal is not None:
        return literal

    if kind == "array_expression":
        return "array"

    if kind == "call_expression":
        name = method_name(node, source)
        if name is not None:
            return _METHOD_LABELS.get(name, "method result")
        type_name = constructor_type(node, source)
        if type_name is not None:
            short = last_path_segment(type_name)
            return _CONSTRUCTOR_LABELS.get(short, f"{type_name} instance")
        return "function result"

    if kind == "struct_expression":
        name = node.child_by_field_name("name")
        return node_text(name, source) if name is not None else "struct"

    if kind == "reference_expression":
        mutable = has_mut(node)
        return "mutable reference" if mutable else "reference"

    if kind == "binary_expression":
        operator = node.child_by_field_name("operator")
        op = node_text(operator, source) if operator is not None else ""
        if op in _ARITHMETIC_OPS:
            return "numeric"
        if op in _LOGICAL_OPS or op in _COMPARISON_OPS:
            return "boolean"
        if op in _BITWISE_OPS:
            return "integer"
        return "expression result"

    if kind == "match_expression":
        return "match result"
    if kind == "if_expression":
        return "conditional result"

    if kind == "macro_invocation":
        macro = _macro_name(node, source)
        if macro == "vec":
            return "vector"
        if macro == "format":
            return "owned string"

    return "expression result"


def infer_loop_type(node: Node, source: bytes) -> str:
    """Label for the element bound by ``for pat in <node>``."""
    node = _unwrap_parens(node)
    if node.type == "range_expression":
        return "integer (range)"
    name = method_name(node, source)
    if name is not None:
        return _LOOP_LABELS.get(name, "collection element")
    return "collection element"


# ============================================================================
# Basic type
# ============================================================================


def basic_type_of_expression(node: Node, source: bytes) -> str:
    """Coarse basic type for an expression node."""
    node = _unwrap_parens(node)
    kind = node.type
    text = node_text(node, source)

    if kind in ("string_literal", "raw_string_literal"):
        return "Vec<u8>" if text.startswith("b") else "String"
    if kind == "char_literal":
        return "u8" if text.startswith("b") else "char"
    if kind == "integer_literal":
        match = _INT_SUFFIX_RE.search(text)
        if match and match.group(1).startswith("u"):
            return "unsigned integer"
        return "integer"
    if kind == "float_literal":
        return "f64"
    if kind == "boolean_literal":
        return "bool"
    if kind == "array_expression":
        return "Array"

    if kind == "call_expression":
        name = method_name(node, source)
        if name is not None:
            return _BASIC_METHOD_LABELS.get(name, "Method call result")
        type_name = constructor_type(node, source)
        if type_name is not None:
            return f"Instance of {type_name}"
        return "Function call result"

    if kind == "struct_expression":
        return "Struct instance"
    if kind == "reference_expression":
        mutable = has_mut(node)
        return "Mutable reference" if mutable else "Reference"
    if kind == "binary_expression":
        return "Binary expression result"
    if kind == "match_expression":
        return "Match result"
    if kind == "if_expression":
        return "Conditional result"
    if kind == "range_expression":
        return "Range"
    if kind == "macro_invocation" and _macro_name(node, source) == "vec":
        return "Vec<T>"

    return UNKNOWN if kind == "ERROR" else "Unknown expression"
