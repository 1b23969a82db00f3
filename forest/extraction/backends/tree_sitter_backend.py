"""Tree-sitter extraction backend.

Parses the file with the Rust grammar and walks the syntax tree, emitting
binding and declaration records. Files whose tree contains syntax errors
are refused with ``ParseError`` so the orchestrator can hand them to the
line scanner.

Priority: 50 (above the line scanner at 10).
"""

from __future__ import annotations

import re
from enum import StrEnum
from typing import TYPE_CHECKING, Callable

from forest.analysis.classifier import basic_type, basic_type_from_context, classify
from forest.analysis.context import infer_pattern_match_type
from forest.analysis.expressions import (
    basic_type_of_expression,
    infer_expression_type,
    infer_loop_type,
)
from forest.analysis.locator import context_line, locate_line
from forest.analysis.patterns import decompose, simple_binding
from forest.constants import INFERRED
from forest.extraction.types import (
    BindingRecord,
    DeclarationRecord,
    DeclarationType,
    FileExtraction,
)
from forest.parsing.tree_sitter_wrapper import has_mut, is_tree_sitter_available
from forest.types.core import SourceLocation
from forest.types.errors import ErrorContext, ParseError
from forest.utils.logger import logger

if TYPE_CHECKING:
    from tree_sitter import Node

    from forest.config import LineResolution
    from forest.extraction.cache import ParseCache
    from forest.parsing.tree_sitter_wrapper import ParsedSource


# ============================================================================
# Node classification
# ============================================================================


class NodeKind(StrEnum):
    """The syntax shapes the visitor reacts to."""

    LET = "let"
    FN_ARG = "fn_arg"
    FOR_LOOP = "for_loop"
    IF_LET = "if_let"
    FN_ITEM = "fn_item"
    STRUCT_ITEM = "struct_item"
    ENUM_ITEM = "enum_item"
    OTHER = "other"


_SIMPLE_KINDS: dict[str, NodeKind] = {
    "let_declaration": NodeKind.LET,
    "for_expression": NodeKind.FOR_LOOP,
    "if_let_expression": NodeKind.IF_LET,
    "while_let_expression": NodeKind.IF_LET,
    "function_item": NodeKind.FN_ITEM,
    "function_signature_item": NodeKind.FN_ITEM,
    "struct_item": NodeKind.STRUCT_ITEM,
    "enum_item": NodeKind.ENUM_ITEM,
}

_LET_CONDITIONS = frozenset({"let_condition", "let_chain"})

_MUT_NAME_RE = re.compile(r"\bmut\s+([A-Za-z_][A-Za-z0-9_]*)")


def node_kind(node: Node) -> NodeKind:
    """Map a tree-sitter node onto the visitor's tagged union."""
    kind = _SIMPLE_KINDS.get(node.type)
    if kind is not None:
        return kind
    if node.type == "parameter":
        parent = node.parent
        # Closure parameters live under closure_parameters instead
        if parent is not None and parent.type == "parameters":
            return NodeKind.FN_ARG
        return NodeKind.OTHER
    if node.type in ("if_expression", "while_expression"):
        condition = node.child_by_field_name("condition")
        if condition is not None and condition.type in _LET_CONDITIONS:
            return NodeKind.IF_LET
    return NodeKind.OTHER


# ============================================================================
# Visitor
# ============================================================================


class TreeVisitor:
    """Walks one parsed file and collects records.

    The enclosing function name is threaded through the walk with each node
    rather than kept as visitor state, so nested functions and the code after
    them get the right scope.
    """

    def __init__(self, parsed: ParsedSource, line_resolution: LineResolution = "span") -> None:
        self._parsed = parsed
        self._source = parsed.source
        self._lines = parsed.lines
        self._file_path = parsed.file_path
        self._use_spans = line_resolution == "span"
        self.bindings: list[BindingRecord] = []
        self.declarations: list[DeclarationRecord] = []
        self._handlers: dict[NodeKind, Callable[[Node, str], str]] = {
            NodeKind.LET: self._visit_let,
            NodeKind.FN_ARG: self._visit_fn_arg,
            NodeKind.FOR_LOOP: self._visit_for_loop,
            NodeKind.IF_LET: self._visit_if_let,
            NodeKind.FN_ITEM: self._visit_fn_item,
            NodeKind.STRUCT_ITEM: self._visit_struct_item,
            NodeKind.ENUM_ITEM: self._visit_enum_item,
        }

    def visit(self) -> FileExtraction:
        """Walk the whole tree in source order."""
        # Explicit stack: deeply nested expressions would exhaust recursion
        stack: list[tuple[Node, str]] = [(self._parsed.root, "")]
        while stack:
            node, scope = stack.pop()
            handler = self._handlers.get(node_kind(node))
            child_scope = handler(node, scope) if handler is not None else scope
            for child in reversed(node.named_children):
                stack.append((child, child_scope))

        return FileExtraction(
            file_path=self._file_path,
            bindings=self.bindings,
            declarations=self.declarations,
            backend_used=TreeSitterBackend.NAME,
        )

    # ----------------------------------------------------------------
    # Helpers
    # ----------------------------------------------------------------

    def _text(self, node: Node) -> str:
        return self._parsed.text(node)

    def _locate(self, node: Node) -> tuple[SourceLocation, str]:
        span_row = node.start_point[0] if self._use_spans else None
        line = locate_line(self._lines, self._text(node), span_row)
        return SourceLocation(self._file_path, line), context_line(self._lines, line)

    def _add(
        self,
        name: str,
        is_mutable: bool,
        location: SourceLocation,
        context: str,
        kind: str,
        inferred_type: str,
        basic: str,
        scope: str,
    ) -> None:
        self.bindings.append(
            BindingRecord(
                name=name,
                is_mutable=is_mutable,
                source_location=location,
                context_line=context,
                declaration_kind=kind,
                inferred_type=inferred_type,
                basic_type=basic,
                scope=scope,
            )
        )

    def _add_pattern(
        self,
        pattern: Node,
        declared: Node | None,
        location: SourceLocation,
        context: str,
        scope: str,
        mutable: bool = False,
    ) -> None:
        for draft in decompose(pattern, self._source, declared, location, context, mutable):
            self.bindings.append(draft.to_record(scope))

    def _declare(self, node: Node, declaration_type: DeclarationType) -> str | None:
        name_node = node.child_by_field_name("name")
        if name_node is None:
            return None
        name = self._text(name_node)
        location, _ = self._locate(node)
        self.declarations.append(DeclarationRecord(name, declaration_type, location))
        return name

    # ----------------------------------------------------------------
    # Handlers (each returns the scope for the node's children)
    # ----------------------------------------------------------------

    def _visit_let(self, node: Node, scope: str) -> str:
        pattern = node.child_by_field_name("pattern")
        if pattern is None:
            return scope
        declared = node.child_by_field_name("type")
        value = node.child_by_field_name("value")
        mutable = has_mut(node)
        location, context = self._locate(node)

        binding = simple_binding(pattern, self._source) if declared is None else None
        if binding is None:
            self._add_pattern(pattern, declared, location, context, scope, mutable)
            return scope

        name, pattern_mut = binding
        if value is not None:
            inferred = infer_expression_type(value, self._source)
            basic = basic_type_of_expression(value, self._source)
        else:
            inferred = INFERRED
            basic = basic_type_from_context(context)
        self._add(
            name,
            mutable or pattern_mut,
            location,
            context,
            "inferred from initialization",
            inferred,
            basic,
            scope,
        )
        return scope

    def _visit_fn_arg(self, node: Node, scope: str) -> str:
        pattern = node.child_by_field_name("pattern")
        if pattern is None:
            return scope
        binding = simple_binding(pattern, self._source)
        if binding is None:
            return scope
        name, pattern_mut = binding
        # Immutable parameters are not reported
        if not (pattern_mut or has_mut(node)) or name == "self":
            return scope

        declared = node.child_by_field_name("type")
        location, context = self._locate(node)
        if declared is not None:
            kind = f"function parameter: {self._text(declared)}"
            inferred = classify(declared, self._source)
            basic = basic_type(declared, self._source)
        else:
            kind, inferred, basic = "inferred parameter", INFERRED, basic_type_from_context(context)
        self._add(name, True, location, context, kind, inferred, basic, scope)
        return scope

    def _visit_for_loop(self, node: Node, scope: str) -> str:
        pattern = node.child_by_field_name("pattern")
        value = node.child_by_field_name("value")
        if pattern is None:
            return scope
        location, context = self._locate(node)

        binding = simple_binding(pattern, self._source)
        if binding is None:
            self._add_pattern(pattern, None, location, context, scope)
            return scope

        name, mutable = binding
        # Only `for mut x` is reported, matching the line scanner
        if not mutable:
            return scope
        if value is not None:
            inferred = infer_loop_type(value, self._source)
            basic = basic_type_of_expression(value, self._source)
        else:
            inferred, basic = "collection element", basic_type_from_context(context)
        self._add(name, True, location, context, "for loop variable", inferred, basic, scope)
        return scope

    def _let_patterns(self, node: Node) -> list[str]:
        """Pattern texts of every ``let`` in an if-let/while-let condition."""
        if node.type in ("if_let_expression", "while_let_expression"):
            pattern = node.child_by_field_name("pattern")
            return [self._text(pattern)] if pattern is not None else []

        condition = node.child_by_field_name("condition")
        if condition is None:
            return []
        lets = [condition] if condition.type == "let_condition" else [
            c for c in condition.named_children if c.type == "let_condition"
        ]
        patterns = []
        for let in lets:
            pattern = let.child_by_field_name("pattern")
            if pattern is not None:
                patterns.append(self._text(pattern))
        return patterns

    def _visit_if_let(self, node: Node, scope: str) -> str:
        is_while = node.type.startswith("while")
        kind = "while-let pattern" if is_while else "if-let pattern"
        location, context = self._locate(node)
        for pattern_text in self._let_patterns(node):
            # Text-level scan: every `mut name` in the pattern is a binding
            for match in _MUT_NAME_RE.finditer(pattern_text):
                self._add(
                    match.group(1),
                    True,
                    location,
                    context,
                    kind,
                    infer_pattern_match_type(pattern_text),
                    basic_type_from_context(context),
                    scope,
                )
        return scope

    def _visit_fn_item(self, node: Node, scope: str) -> str:
        name = self._declare(node, DeclarationType.FUNCTION)
        return name if name is not None else scope

    def _visit_struct_item(self, node: Node, scope: str) -> str:
        self._declare(node, DeclarationType.STRUCT)
        return scope

    def _visit_enum_item(self, node: Node, scope: str) -> str:
        self._declare(node, DeclarationType.ENUM)
        return scope


# ============================================================================
# Backend
# ============================================================================


class TreeSitterBackend:
    """Syntax-tree extraction backend.

    Shares parse trees via ParseCache so repeated analysis of unchanged
    files does not reparse them.
    """

    NAME = "tree_sitter"

    def __init__(
        self,
        parse_cache: ParseCache | None = None,
        line_resolution: LineResolution = "span",
    ) -> None:
        from forest.extraction.cache import ParseCache as PC

        self._parse_cache = parse_cache or PC()
        self._line_resolution = line_resolution

    @property
    def name(self) -> str:
        return self.NAME

    @property
    def priority(self) -> int:
        return 50

    @property
    def parse_cache(self) -> ParseCache:
        return self._parse_cache

    @property
    def line_resolution(self) -> LineResolution:
        return self._line_resolution

    def supports(self, content: str) -> bool:
        """Tree-sitter handles any content once the grammar is installed."""
        return is_tree_sitter_available()

    def extract(self, content: str, file_path: str) -> FileExtraction:
        """Parse and visit one file.

        Raises:
            ParseError: If the grammar is missing or the tree has syntax errors.
        """
        parsed = self._parse_cache.get_or_parse(content, file_path)
        if parsed.has_errors:
            raise ParseError(
                f"Syntax errors in {file_path}",
                context=ErrorContext(
                    operation="extract", file_path=file_path, component=self.NAME
                ),
            )
        extraction = TreeVisitor(parsed, self._line_resolution).visit()
        logger.debug(
            f"{self.NAME}: {len(extraction.bindings)} bindings, "
            f"{len(extraction.declarations)} declarations in {file_path}"
        )
        return extraction
