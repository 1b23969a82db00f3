"""Line scanner extraction backend (text-level fallback).

Reconstructs bindings and declarations from raw lines when no usable syntax
tree exists. Each non-comment line is checked independently for:

- ``let mut <pat>`` / ``let <pat>`` bindings
- ``for mut <name> in`` loop bindings
- ``mut <name>`` parameters on function signature lines
- ``mut <name>`` bindings on if-let / while-let / match lines
- ``fn`` / ``struct`` / ``enum`` declarations

Known limitation: destructuring patterns are cut at the first closing
bracket, so nested patterns are mis-segmented.

Priority: 10 (fallback; never refuses a file).
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from forest.analysis.classifier import basic_type, basic_type_from_context, classify
from forest.analysis.context import (
    infer_destructuring_type,
    infer_type_from_initialization,
    infer_type_from_loop_line,
    infer_type_from_pattern_line,
    rhs_shape,
)
from forest.analysis.text import (
    annotation_at,
    find_assignment,
    find_binding_colon,
    leading_identifier,
    mask_strings,
    strip_line_comment,
)
from forest.constants import INFERRED
from forest.extraction.types import (
    BindingRecord,
    DeclarationRecord,
    DeclarationType,
    FileExtraction,
)
from forest.parsing.tree_sitter_wrapper import split_lines
from forest.types.core import SourceLocation
from forest.utils.logger import logger

# ============================================================================
# Line patterns
# ============================================================================

# `if let` / `while let` are handled by the pattern-matching rule
_LET_MUT_RE = re.compile(r"(?<!\bif )(?<!\bwhile )\blet\s+mut\s+")
_LET_RE = re.compile(r"(?<!\bif )(?<!\bwhile )\blet\s+")
_FOR_MUT_RE = re.compile(r"\bfor\s+mut\s+([A-Za-z_][A-Za-z0-9_]*)")
_FN_RE = re.compile(r"\bfn\s+([A-Za-z_][A-Za-z0-9_]*)")
_STRUCT_RE = re.compile(r"\bstruct\s+([A-Za-z_][A-Za-z0-9_]*)")
_ENUM_RE = re.compile(r"\benum\s+([A-Za-z_][A-Za-z0-9_]*)")
_PATTERN_LINE_RE = re.compile(r"\bif\s+let\b|\bwhile\s+let\b|\bmatch\b")
_MUT_NAME_RE = re.compile(r"(?<![&\w])mut\s+([A-Za-z_][A-Za-z0-9_]*)")

_CLOSERS = {"(": ")", "{": "}", "[": "]"}

_DECLARATION_RULES = (
    (_FN_RE, DeclarationType.FUNCTION),
    (_STRUCT_RE, DeclarationType.STRUCT),
    (_ENUM_RE, DeclarationType.ENUM),
)


# ============================================================================
# Name / kind extraction
# ============================================================================


@dataclass(frozen=True)
class NameAndKind:
    """A binding name plus the kind text that came with it."""

    name: str
    kind: str
    annotation: str | None = None


def _clean_pattern_token(token: str) -> str | None:
    token = token.strip()
    # Struct field `x: renamed` binds the name after the colon
    if ":" in token and "::" not in token:
        token = token.split(":", 1)[1].strip()
    for prefix in ("mut ", "ref ", "&"):
        if token.startswith(prefix):
            token = token[len(prefix) :].strip()
    return leading_identifier(token)


def extract_name_and_kind(rest: str) -> NameAndKind | None:
    """Pull the bound name and its kind from the text following ``let``.

    Destructuring patterns (opening with ``(``, ``{`` or ``[``) give their
    first plain name; the pattern ends at the first closing bracket of the
    same kind.
    """
    if not rest:
        return None

    if rest[0] in _CLOSERS:
        close = rest.find(_CLOSERS[rest[0]])
        end = close if close >= 0 else len(rest) - 1
        pattern = rest[: end + 1]

        name = None
        for token in re.split(r"[()\[\]{},]", pattern):
            token = token.strip()
            if not token or token.startswith(".."):
                continue
            name = _clean_pattern_token(token)
            if name:
                break
        if not name:
            return None

        tail = rest[end + 1 :]
        colon = find_binding_colon(tail)
        if colon is not None:
            annotation = annotation_at(tail, colon)
            if annotation:
                return NameAndKind(name, annotation, annotation)
            return NameAndKind(name, "complex pattern")
        eq = find_assignment(tail)
        if eq is not None:
            return NameAndKind(name, infer_destructuring_type(tail[eq + 1 :], pattern))
        return NameAndKind(name, "complex pattern")

    name = leading_identifier(rest)
    if name is None:
        return None
    tail = rest[len(name) :]
    colon = find_binding_colon(tail)
    if colon is not None:
        annotation = annotation_at(tail, colon)
        if annotation:
            return NameAndKind(name, annotation, annotation)
    eq = find_assignment(tail)
    if eq is not None:
        shape = rhs_shape(tail[eq + 1 :])
        if shape is not None:
            return NameAndKind(name, shape)
    return NameAndKind(name, INFERRED)


# ============================================================================
# Scope tracking
# ============================================================================


@dataclass
class _ScopeTracker:
    """Tracks the enclosing function by brace depth.

    Braces inside string and character literals and after ``//`` are not
    counted. String state carries across lines for multi-line literals.
    """

    depth: int = 0
    pending_fn: str | None = None
    stack: list[tuple[str, int]] = field(default_factory=list)
    in_string: bool = False

    @property
    def current(self) -> str:
        if self.pending_fn is not None:
            return self.pending_fn
        return self.stack[-1][0] if self.stack else ""

    def declare_fn(self, name: str) -> None:
        self.pending_fn = name

    def feed(self, line: str) -> None:
        i = 0
        n = len(line)
        while i < n:
            ch = line[i]
            if self.in_string:
                if ch == "\\":
                    i += 2
                    continue
                if ch == '"':
                    self.in_string = False
            elif ch == '"':
                self.in_string = True
            elif ch == "'":
                # Char literal ('x' or '\n'); otherwise a lifetime
                if i + 1 < n and line[i + 1] == "\\":
                    close = line.find("'", i + 2)
                    i = close + 1 if close >= 0 else n
                    continue
                if i + 2 < n and line[i + 2] == "'":
                    i += 3
                    continue
            elif ch == "/" and i + 1 < n and line[i + 1] == "/":
                break
            elif ch == "{":
                self.depth += 1
                if self.pending_fn is not None:
                    self.stack.append((self.pending_fn, self.depth))
                    self.pending_fn = None
            elif ch == "}":
                if self.stack and self.stack[-1][1] == self.depth:
                    self.stack.pop()
                self.depth = max(self.depth - 1, 0)
            elif ch == ";" and self.pending_fn is not None and _ends_signature(line, i):
                # Bodiless signature such as a trait method
                self.pending_fn = None
            i += 1


def _ends_signature(line: str, index: int) -> bool:
    # A ';' inside `[T; N]` in a signature is not the end
    return line.count("[", 0, index) <= line.count("]", 0, index)


# ============================================================================
# Scanner
# ============================================================================


class LineScanner:
    """Scans one file's lines and collects records."""

    def __init__(self, content: str, file_path: str) -> None:
        self._lines = split_lines(content)
        self._file_path = file_path
        self.bindings: list[BindingRecord] = []
        self.declarations: list[DeclarationRecord] = []

    def scan(self) -> FileExtraction:
        scope = _ScopeTracker()
        in_block_comment = False

        for index, line in enumerate(self._lines):
            trimmed = line.strip()

            if in_block_comment:
                if "*/" in trimmed:
                    in_block_comment = False
                continue
            if trimmed.startswith("//"):
                continue
            if "/*" in trimmed and "*/" not in trimmed:
                in_block_comment = True
                continue
            if not trimmed:
                continue

            line_number = index + 1
            masked = strip_line_comment(mask_strings(line))
            code = line[: len(masked)]

            # Declarations first so a signature's own parameters get its scope
            for pattern, declaration_type in _DECLARATION_RULES:
                match = pattern.search(masked)
                if match:
                    self.declarations.append(
                        DeclarationRecord(
                            match.group(1),
                            declaration_type,
                            SourceLocation(self._file_path, line_number),
                        )
                    )
                    if declaration_type is DeclarationType.FUNCTION:
                        scope.declare_fn(match.group(1))

            self._scan_line(code, masked, line_number, scope.current)
            scope.feed(line)

        return FileExtraction(
            file_path=self._file_path,
            bindings=self.bindings,
            declarations=self.declarations,
            backend_used=LineScannerBackend.NAME,
        )

    def _add(
        self,
        name: str,
        is_mutable: bool,
        line: str,
        line_number: int,
        kind: str,
        inferred_type: str,
        basic: str,
        scope: str,
    ) -> None:
        self.bindings.append(
            BindingRecord(
                name=name,
                is_mutable=is_mutable,
                source_location=SourceLocation(self._file_path, line_number),
                context_line=line,
                declaration_kind=kind,
                inferred_type=inferred_type,
                basic_type=basic,
                scope=scope,
            )
        )

    def _scan_line(self, line: str, masked: str, line_number: int, scope: str) -> None:
        # 1-2. let bindings
        let_mut = _LET_MUT_RE.search(masked)
        let_plain = None if let_mut else _LET_RE.search(masked)
        let_match = let_mut or let_plain
        if let_match:
            found = extract_name_and_kind(line[let_match.end() :])
            if found is not None:
                if found.annotation is not None:
                    inferred = classify(found.annotation)
                else:
                    inferred = infer_type_from_initialization(line)
                self._add(
                    found.name,
                    let_mut is not None,
                    line,
                    line_number,
                    found.kind,
                    inferred,
                    basic_type_from_context(line),
                    scope,
                )

        # 3. for mut x in ...
        for_match = _FOR_MUT_RE.search(masked)
        if for_match:
            self._add(
                for_match.group(1),
                True,
                line,
                line_number,
                "inferred from loop",
                infer_type_from_loop_line(line),
                basic_type_from_context(line),
                scope,
            )

        # 4. mut parameters on a signature line
        fn_match = _FN_RE.search(masked)
        if fn_match and "mut " in masked:
            self._scan_parameters(line, masked, fn_match.end(), line_number, scope)

        # 5. mut bindings in pattern-matching lines
        if _PATTERN_LINE_RE.search(masked) and "mut " in masked:
            pattern_type = infer_type_from_pattern_line(line)
            for match in _MUT_NAME_RE.finditer(masked):
                self._add(
                    match.group(1),
                    True,
                    line,
                    line_number,
                    "pattern matched",
                    pattern_type,
                    basic_type_from_context(line),
                    scope,
                )

    def _scan_parameters(
        self, line: str, masked: str, start: int, line_number: int, scope: str
    ) -> None:
        open_paren = masked.find("(", start)
        if open_paren < 0:
            return
        for match in _MUT_NAME_RE.finditer(masked, open_paren):
            name = match.group(1)
            if name == "self":
                continue
            after = masked[match.end() :]
            annotation = None
            if after.lstrip().startswith(":"):
                annotation = annotation_at(after, after.index(":"))
            if annotation:
                kind = f"function parameter: {annotation}"
                inferred = classify(annotation)
                basic = basic_type(annotation)
            else:
                kind, inferred, basic = "inferred parameter", INFERRED, basic_type_from_context(line)
            self._add(name, True, line, line_number, kind, inferred, basic, scope)


# ============================================================================
# Backend
# ============================================================================


class LineScannerBackend:
    """Text-level fallback backend. Never refuses a file and never raises
    for unusual source; unrecognised lines are skipped.
    """

    NAME = "line_scanner"

    @property
    def name(self) -> str:
        return self.NAME

    @property
    def priority(self) -> int:
        return 10

    def supports(self, content: str) -> bool:
        return True

    def extract(self, content: str, file_path: str) -> FileExtraction:
        extraction = LineScanner(content, file_path).scan()
        logger.debug(
            f"{self.NAME}: {len(extraction.bindings)} bindings, "
            f"{len(extraction.declarations)} declarations in {file_path}"
        )
        return extraction
