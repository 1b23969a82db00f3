"""Tests for the line scanner fallback backend."""

from __future__ import annotations

from hypothesis import given, settings
from hypothesis import strategies as st

from forest.extraction.backends.line_scanner_backend import (
    LineScannerBackend,
    NameAndKind,
    extract_name_and_kind,
)
from forest.extraction.protocols import ExtractionBackend
from forest.extraction.types import DeclarationType

from tests.conftest import BROKEN_RUST


def _scan(content: str, path: str = "lib.rs"):
    return LineScannerBackend().extract(content, path)


def _by_name(extraction):
    return {b.name: b for b in extraction.bindings}


# ============================================================================
# Name / kind extraction
# ============================================================================


class TestExtractNameAndKind:
    def test_annotated(self):
        assert extract_name_and_kind("x: i32 = 5;") == NameAndKind("x", "i32", "i32")

    def test_rhs_shape(self):
        assert extract_name_and_kind("count = 0;") == NameAndKind("count", "integer")

    def test_no_initializer(self):
        assert extract_name_and_kind("value;") == NameAndKind("value", "inferred")

    def test_unrecognised_rhs(self):
        assert extract_name_and_kind("v = compute();").kind == "inferred"

    def test_tuple_destructuring_takes_first_name(self):
        found = extract_name_and_kind("(a, b) = (1, 2);")
        assert found == NameAndKind("a", "tuple or struct field")

    def test_annotated_destructuring(self):
        found = extract_name_and_kind("(x, y): (i32, i32) = p;")
        assert found == NameAndKind("x", "(i32, i32)", "(i32, i32)")

    def test_rest_token_skipped(self):
        assert extract_name_and_kind("[.., last] = arr;").name == "last"

    def test_mut_and_ref_prefixes_stripped(self):
        assert extract_name_and_kind("(mut a, ref b) = pair;").name == "a"

    def test_nested_pattern_cut_at_first_closer(self):
        found = extract_name_and_kind("((a, b), c) = nested;")
        assert found is not None
        assert found.name == "a"

    def test_no_name(self):
        assert extract_name_and_kind("") is None
        assert extract_name_and_kind("123 = x;") is None
        assert extract_name_and_kind("(..) = x;") is None


# ============================================================================
# Scanning
# ============================================================================


class TestLineScanner:
    def test_satisfies_protocol(self):
        backend = LineScannerBackend()
        assert isinstance(backend, ExtractionBackend)
        assert backend.priority == 10
        assert backend.supports("anything")

    def test_broken_file_bindings(self):
        extraction = _scan(BROKEN_RUST, "broken.rs")
        assert extraction.backend_used == "line_scanner"
        assert [b.name for b in extraction.bindings] == [
            "count",
            "total",
            "label",
            "first",
            "step",
            "value",
            "oops",
        ]

    def test_broken_file_details(self):
        bindings = _by_name(_scan(BROKEN_RUST, "broken.rs"))

        count = bindings["count"]
        assert count.is_mutable
        assert count.declaration_kind == "function parameter: i32"
        assert count.inferred_type == "integer (i32)"
        assert count.basic_type == "i32"
        assert count.line == 1

        total = bindings["total"]
        assert total.is_mutable
        assert total.declaration_kind == "integer"
        assert total.inferred_type == "integer"
        assert total.basic_type == "i32"

        label = bindings["label"]
        assert not label.is_mutable
        assert label.inferred_type == "string"
        assert label.basic_type == "String"

        assert bindings["first"].declaration_kind == "tuple or struct field"

        step = bindings["step"]
        assert step.is_mutable
        assert step.declaration_kind == "inferred from loop"
        assert step.inferred_type == "integer (range)"

        value = bindings["value"]
        assert value.is_mutable
        assert value.declaration_kind == "pattern matched"
        assert value.inferred_type == "optional value content"

        oops = bindings["oops"]
        assert oops.declaration_kind == "inferred"
        assert oops.basic_type == "unknown"

    def test_broken_file_scope(self):
        extraction = _scan(BROKEN_RUST, "broken.rs")
        assert {b.scope for b in extraction.bindings} == {"broken"}

    def test_declarations(self):
        content = "pub struct A;\nenum B { X }\npub(crate) fn c() {}\n"
        declarations = _scan(content).declarations
        assert [(d.name, d.declaration_type, d.line) for d in declarations] == [
            ("A", DeclarationType.STRUCT, 1),
            ("B", DeclarationType.ENUM, 2),
            ("c", DeclarationType.FUNCTION, 3),
        ]

    def test_comments_skipped(self):
        content = (
            "// let ignored = 1;\n"
            "/* let also_ignored = 2;\n"
            "   let still_ignored = 3; */\n"
            "let kept = 4; // let trailing = 5;\n"
        )
        extraction = _scan(content)
        assert [b.name for b in extraction.bindings] == ["kept"]
        assert extraction.bindings[0].line == 4

    def test_if_let_not_counted_as_let(self):
        content = "fn f() {\n    if let Some(x) = opt {\n    }\n    while let Some(y) = it.next() {}\n}\n"
        assert _scan(content).bindings == []

    def test_let_inside_string_ignored(self):
        content = 'fn f() {\n    println!("let fake = 1;");\n}\n'
        assert _scan(content).bindings == []

    def test_immutable_and_self_parameters_skipped(self):
        content = "fn g(&mut self, a: i32, mut b: Vec<u8>) {}\n"
        bindings = _scan(content).bindings
        assert [b.name for b in bindings] == ["b"]
        assert bindings[0].inferred_type == "vector of unsigned integer (u8)"
        assert bindings[0].basic_type == "Vec<u8>"

    def test_array_annotations_kept_whole(self):
        content = "fn f(mut b: [u8; 4]) {\n    let t: [u8; 4] = [0; 4];\n"
        bindings = _by_name(_scan(content))

        t = bindings["t"]
        assert t.declaration_kind == "[u8; 4]"
        assert t.inferred_type == "array of unsigned integer (u8) with size 4"
        assert t.basic_type == "[u8; 4]"

        b = bindings["b"]
        assert b.declaration_kind == "function parameter: [u8; 4]"
        assert b.inferred_type == "array of unsigned integer (u8) with size 4"
        assert b.basic_type == "[u8; N]"

    def test_untyped_mut_parameter(self):
        content = "let f = |mut acc| acc;\nfn h(mut x) {}\n"
        x = _by_name(_scan(content))["x"]
        assert x.declaration_kind == "inferred parameter"

    def test_match_arm_mut_binding(self):
        content = "fn m() {\n    match opt { Some(mut v) => v += 1, None => {} }\n}\n"
        bindings = _scan(content).bindings
        assert [b.name for b in bindings] == ["v"]
        assert bindings[0].declaration_kind == "pattern matched"


class TestScopeTracking:
    CONTENT = (
        "trait Speak {\n"
        "    fn speak(&self);\n"
        "}\n"
        "\n"
        "fn first() {\n"
        "    let a = 1;\n"
        "    if a > 0 {\n"
        '        let b = "}";\n'
        "    }\n"
        "    let c = 2;\n"
        "}\n"
        "\n"
        "let stray = 3;\n"
    )

    def test_bindings_get_enclosing_function(self):
        bindings = _by_name(_scan(self.CONTENT))
        assert bindings["a"].scope == "first"
        assert bindings["b"].scope == "first"
        assert bindings["c"].scope == "first"

    def test_scope_closes_with_function_body(self):
        assert _by_name(_scan(self.CONTENT))["stray"].scope == ""

    def test_bodiless_signature_opens_no_scope(self):
        declarations = [d.name for d in _scan(self.CONTENT).declarations]
        assert declarations == ["speak", "first"]
        assert _by_name(_scan(self.CONTENT))["a"].scope == "first"


# ============================================================================
# Properties
# ============================================================================


rust_like = st.text(
    alphabet=st.sampled_from(list("letmufnsrcia_xyz0123456789 ()[]{}<>:;=,&'\"/*.\n")),
    max_size=300,
)


class TestScannerProperties:
    @given(content=st.text(max_size=400))
    @settings(max_examples=200, deadline=None)
    def test_never_raises_on_arbitrary_text(self, content):
        _scan(content)

    @given(content=rust_like)
    @settings(max_examples=300, deadline=None)
    def test_records_point_at_real_lines(self, content):
        extraction = _scan(content)
        line_count = len(content.split("\n"))
        for binding in extraction.bindings:
            assert binding.name
            assert 1 <= binding.line <= line_count
        for declaration in extraction.declarations:
            assert 1 <= declaration.line <= line_count

    @given(content=rust_like)
    @settings(max_examples=100, deadline=None)
    def test_deterministic(self, content):
        first = [b.to_dict() for b in _scan(content).bindings]
        second = [b.to_dict() for b in _scan(content).bindings]
        assert first == second
