"""Pattern decomposer: binding patterns to named sub-bindings.

Walks a tree-sitter pattern node and yields one ``BindingDraft`` per name
it binds. When an enclosing declared type is available it is paired with
the pattern positionally (tuples) to give each name a precise type;
otherwise types come from the context inferencer.

Known limitation: only the first alternative of an or-pattern (``A | B``)
is decomposed.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from forest.analysis.classifier import basic_type, basic_type_from_context, classify
from forest.analysis.context import infer_from_context
from forest.analysis.text import last_path_segment
from forest.parsing.tree_sitter_wrapper import has_mut, node_text
from forest.types.records import BindingDraft

if TYPE_CHECKING:
    from tree_sitter import Node

    from forest.types.core import SourceLocation

_WRAPPER_HINTS: dict[str, str] = {
    "Some": "optional value",
    "Ok": "success value",
    "Err": "error value",
}


def simple_binding(node: Node, source: bytes) -> tuple[str, bool] | None:
    """``(name, is_mutable)`` for ``x``, ``mut x``, ``ref x`` or ``ref mut x``."""
    mutable = False
    while node.type in ("mut_pattern", "ref_pattern"):
        if node.type == "mut_pattern" or has_mut(node):
            mutable = True
        inner = [c for c in node.named_children if c.type != "mutable_specifier"]
        if not inner:
            return None
        node = inner[0]
    if node.type != "identifier":
        return None
    return node_text(node, source), mutable


def _pattern_children(node: Node, exclude: Node | None = None) -> list[Node]:
    return [
        child
        for child in node.named_children
        if child.type not in ("mutable_specifier", "line_comment", "block_comment")
        and (exclude is None or child.id != exclude.id)
    ]


class _Decomposer:
    """Carries the per-pattern constants through the recursion."""

    def __init__(self, source: bytes, location: SourceLocation, context: str) -> None:
        self.source = source
        self.location = location
        self.context = context
        self.drafts: list[BindingDraft] = []

    def emit(
        self, name: str, is_mutable: bool, kind: str, inferred_type: str, basic: str | None = None
    ) -> None:
        self.drafts.append(
            BindingDraft(
                name=name,
                is_mutable=is_mutable,
                source_location=self.location,
                context_line=self.context,
                declaration_kind=kind,
                inferred_type=inferred_type,
                basic_type=basic if basic is not None else basic_type_from_context(self.context),
            )
        )

    def visit(self, node: Node, declared: Node | None, mutable: bool = False) -> None:
        kind = node.type

        if kind == "identifier":
            self._identifier(node_text(node, self.source), mutable, declared)
        elif kind in ("mut_pattern", "ref_pattern"):
            inner = _pattern_children(node)
            if inner:
                is_mut = mutable or kind == "mut_pattern" or has_mut(node)
                self.visit(inner[0], declared, is_mut)
        elif kind == "captured_pattern":
            # name @ subpattern binds only the name
            ident = node.named_children[0] if node.named_child_count else None
            if ident is not None and ident.type == "identifier":
                self._identifier(node_text(ident, self.source), mutable, declared)
        elif kind == "tuple_pattern":
            self._tuple(node, declared)
        elif kind == "tuple_struct_pattern":
            self._tuple_struct(node)
        elif kind == "struct_pattern":
            self._struct(node)
        elif kind == "reference_pattern":
            self._reference(node)
        elif kind == "slice_pattern":
            self._slice(node)
        elif kind == "or_pattern":
            alternatives = _pattern_children(node)
            if alternatives:
                self.visit(alternatives[0], declared, mutable)
        else:
            pattern = node.child_by_field_name("pattern")
            type_node = node.child_by_field_name("type")
            if pattern is not None and type_node is not None:
                self.visit(pattern, type_node, mutable or has_mut(node))
            # Anything else binds nothing we report

    def _identifier(self, name: str, mutable: bool, declared: Node | None) -> None:
        if declared is not None:
            self.emit(
                name,
                mutable,
                "explicitly typed pattern",
                classify(declared, self.source),
                basic_type(declared, self.source),
            )
        else:
            self.emit(name, mutable, "pattern match", infer_from_context(self.context))

    def _tuple(self, node: Node, declared: Node | None) -> None:
        element_types: list[Node] = []
        if declared is not None and declared.type == "tuple_type":
            element_types = list(declared.named_children)
        for i, element in enumerate(_pattern_children(node)):
            self.visit(element, element_types[i] if i < len(element_types) else None)

    def _tuple_struct(self, node: Node) -> None:
        type_node = node.child_by_field_name("type")
        variant = last_path_segment(node_text(type_node, self.source)) if type_node else ""
        hint = _WRAPPER_HINTS.get(variant)
        for element in _pattern_children(node, exclude=type_node):
            binding = simple_binding(element, self.source)
            if binding is None:
                self.visit(element, None)
                continue
            name, is_mut = binding
            self.emit(
                name,
                is_mut,
                f"destructured from {variant}",
                hint if hint is not None else infer_from_context(self.context),
            )

    def _struct(self, node: Node) -> None:
        type_node = node.child_by_field_name("type")
        struct_name = last_path_segment(node_text(type_node, self.source)) if type_node else ""
        for field in node.named_children:
            if field.type != "field_pattern":
                continue
            name_node = field.child_by_field_name("name")
            if name_node is None:
                continue
            field_name = node_text(name_node, self.source)
            sub = field.child_by_field_name("pattern")
            if sub is None:
                # Shorthand `x` or `mut x`
                binding: tuple[str, bool] | None = (field_name, has_mut(field))
            else:
                binding = simple_binding(sub, self.source)
            if binding is None:
                self.visit(sub, None)
                continue
            name, is_mut = binding
            self.emit(
                name,
                is_mut or has_mut(field),
                f"destructured from struct {struct_name}",
                f"field '{field_name}' of {struct_name}",
            )

    def _reference(self, node: Node) -> None:
        ref_mut = has_mut(node)
        inner = _pattern_children(node)
        if not inner:
            return
        binding = simple_binding(inner[0], self.source)
        if binding is None:
            self.visit(inner[0], None)
            return
        name, is_mut = binding
        prefix = "mutable reference to" if ref_mut else "reference to"
        self.emit(
            name,
            is_mut or ref_mut,
            "reference pattern",
            f"{prefix} {infer_from_context(self.context)}",
        )

    def _slice(self, node: Node) -> None:
        for element in _pattern_children(node):
            if element.type == "captured_pattern" and element.named_child_count >= 2:
                ident, rest = element.named_children[0], element.named_children[-1]
                if ident.type == "identifier" and node_text(rest, self.source).strip() == "..":
                    self.emit(
                        node_text(ident, self.source),
                        False,
                        "slice pattern",
                        "remaining slice elements",
                    )
                    continue
            binding = simple_binding(element, self.source)
            if binding is None:
                self.visit(element, None)
                continue
            name, is_mut = binding
            self.emit(name, is_mut, "slice pattern", "slice element")


def decompose(
    pattern: Node,
    source: bytes,
    declared_type: Node | None,
    location: SourceLocation,
    context: str,
    mutable: bool = False,
) -> list[BindingDraft]:
    """Destructure ``pattern`` into one draft per bound name.

    Args:
        pattern: The pattern node (identifier, tuple, struct, slice...).
        source: Source bytes of the file.
        declared_type: Type node annotating the whole pattern, if any.
        location: Location assigned to every draft.
        context: Source line used for context inference.
        mutable: Whether an enclosing ``mut`` applies to a bare identifier.

    Returns:
        Drafts in pattern order. Unsupported pattern shapes contribute
        nothing.
    """
    decomposer = _Decomposer(source, location, context)
    decomposer.visit(pattern, declared_type, mutable)
    return decomposer.drafts
