"""Context inferencer: type guesses from a raw source line.

Used wherever no syntax tree is available (the line scanner) and wherever
the tree offers no declared type (untyped pattern bindings). Every function
here returns a label string and never raises; input that matches nothing
yields a sentinel such as "inferred from context".
"""

from __future__ import annotations

import re

from forest.analysis.classifier import classify, is_float_literal
from forest.analysis.text import (
    annotation_at,
    assignment_rhs,
    find_binding_colon,
    mask_strings,
)
from forest.constants import INFERRED, INFERRED_FROM_CONTEXT

_LET_RE = re.compile(r"\blet\s+")
_FN_RE = re.compile(r"\bfn\b")
_FOR_RE = re.compile(r"\bfor\b")
_IN_RE = re.compile(r"\bin\b")
_ANGLE_HINT_RE = re.compile(r"<([^<>]+)>")

_LET_WRAPPER_LABELS = (
    (re.compile(r"\blet\s+Some\("), "value inside Option"),
    (re.compile(r"\blet\s+Ok\("), "success value from Result"),
    (re.compile(r"\blet\s+Err\("), "error value from Result"),
)

REFERENCE_ELEMENT = "reference to collection element"
MUTABLE_REFERENCE_ELEMENT = "mutable reference to collection element"
OWNED_ELEMENT = "owned collection element"


def _iterator_element(text: str) -> str | None:
    # into_iter() ends with "iter()", so it must be checked first
    if "into_iter()" in text:
        return OWNED_ELEMENT
    if "iter_mut()" in text:
        return MUTABLE_REFERENCE_ELEMENT
    if "iter()" in text:
        return REFERENCE_ELEMENT
    return None


def rhs_shape(rhs: str) -> str | None:
    """Label for the shape of an initializer, or None if unrecognised."""
    r = rhs.strip().rstrip(";").strip()
    if not r:
        return None
    if r.startswith('"') or r.startswith('r"') or r.startswith("r#"):
        return "string"
    if r[0].isdigit():
        return "floating-point" if is_float_literal(r) else "integer"
    if r in ("true", "false"):
        return "boolean"
    if r.startswith("'") and len(r) >= 3:
        return "character"
    if "Some(" in r:
        return "value inside Option"
    if "Ok(" in r:
        return "success value"
    if "Err(" in r:
        return "error value"
    for method, label in (
        (".into_iter()", OWNED_ELEMENT),
        (".iter_mut()", MUTABLE_REFERENCE_ELEMENT),
        (".iter()", REFERENCE_ELEMENT),
    ):
        if method in r:
            return label
    return None


def _pattern_after_let(text: str) -> str:
    pattern = text.lstrip()
    if pattern.startswith("mut "):
        pattern = pattern[4:].lstrip()
    return pattern


def infer_from_context(line: str) -> str:
    """Infer a type label for a binding from the line it appears on.

    Rules are tried in order and the first match wins:

    1. an explicit ``: Type`` annotation after ``let``
    2. array or vector destructuring
    3. the shape of the initializer
    4. a function signature ("function parameter")
    5. a ``for .. in`` loop
    6. ``let Some(``/``let Ok(``/``let Err(`` pattern matches
    7. otherwise "inferred from context"
    """
    masked = mask_strings(line)
    let_match = _LET_RE.search(masked)
    if let_match:
        after_let = let_match.end()

        colon = find_binding_colon(masked, after_let)
        if colon is not None:
            annotation = annotation_at(masked, colon)
            if annotation:
                return classify(annotation)

        rhs = assignment_rhs(line[after_let:])
        if rhs:
            if _pattern_after_let(line[after_let:]).startswith("["):
                if "vec!" in rhs or "Vec::" in rhs:
                    hint = _ANGLE_HINT_RE.search(rhs)
                    if hint:
                        return f"vector element of {classify(hint.group(1))}"
                    return "vector element"
                return "array element"

            shape = rhs_shape(rhs)
            if shape is not None:
                return shape

    if _FN_RE.search(masked) and "(" in masked:
        return "function parameter"

    if _FOR_RE.search(masked) and _IN_RE.search(masked):
        if ".." in masked:
            return "integer from range"
        return _iterator_element(masked) or "iteration variable"

    for pattern, label in _LET_WRAPPER_LABELS:
        if pattern.search(masked):
            return label

    return INFERRED_FROM_CONTEXT


# ============================================================================
# Line-scanner helpers
# ============================================================================


def infer_destructuring_type(rhs: str, pattern: str) -> str:
    """Kind label for a destructuring ``let`` without an annotation."""
    rhs = rhs.strip()
    pattern = pattern.strip()

    if (rhs.startswith("vec!") or "Vec::" in rhs) and pattern.startswith("["):
        return "vector element"
    if rhs.startswith("[") and pattern.startswith("["):
        return "array element"
    if "Some(" in rhs and pattern.startswith("Some("):
        return "optional value"
    if "Ok(" in rhs or "Err(" in rhs:
        if pattern.startswith("Ok("):
            return "success value"
        if pattern.startswith("Err("):
            return "error value"
    if (pattern.startswith("(") and "(" in rhs) or (pattern.startswith("{") and "{" in rhs):
        return "tuple or struct field"
    return "destructured value"


def infer_type_from_initialization(line: str) -> str:
    """Type label from the value assigned on ``line``."""
    rhs = assignment_rhs(line)
    if not rhs:
        return INFERRED

    if rhs.startswith('"') or rhs.startswith('r"') or rhs.startswith("r#"):
        return "string"
    if rhs.startswith("'") and len(rhs) >= 3:
        return "character"
    if rhs[0].isdigit():
        return "floating-point" if is_float_literal(rhs) else "integer"
    if rhs in ("true", "false"):
        return "boolean"
    if rhs.startswith("vec!") or rhs.startswith("Vec::new"):
        return "vector"
    if rhs.startswith("["):
        return "array"

    head = rhs.split("{", 1)[0].strip()
    is_control = rhs.startswith(("if ", "match ", "loop", "unsafe", "async"))
    if "{" in rhs and not is_control:
        # Only a bare path before '{' is a struct literal
        if head and re.fullmatch(r"[A-Za-z_][\w:]*", head):
            return head
        if not head:
            return "struct"
    if "(" in rhs and not is_control:
        return "function result"
    return INFERRED


def infer_type_from_loop_line(line: str) -> str:
    """Element type label for a ``for`` loop written on ``line``."""
    masked = mask_strings(line)
    if _FOR_RE.search(masked) and _IN_RE.search(masked):
        element = _iterator_element(masked)
        if element is not None:
            return element
        if ".." in masked:
            return "integer (range)"
        return "collection element"
    return "inferred from loop"


def infer_pattern_match_type(pattern: str) -> str:
    """Type label for a binding inside an if-let or while-let pattern."""
    if "Some(" in pattern:
        return "optional value content"
    if "Ok(" in pattern:
        return "success result value"
    if "Err(" in pattern:
        return "error result value"
    if "&" in pattern:
        return "reference value"
    return "pattern matched value"


def infer_type_from_pattern_line(line: str) -> str:
    """Type label for a ``mut`` binding found in a pattern-matching line."""
    if "Some(" in line:
        return "optional value content"
    if "Ok(" in line:
        return "success result value"
    if "Err(" in line:
        return "error result value"
    if "if let" in line:
        rhs = assignment_rhs(line)
        if rhs:
            return f"part of {infer_type_from_initialization(f'let x = {rhs}')}"
    return "pattern matched value"
