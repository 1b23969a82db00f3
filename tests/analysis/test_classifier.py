"""Tests for the type classifier (descriptive labels and basic types)."""

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from forest.analysis.classifier import (
    basic_type,
    basic_type_from_context,
    classify,
    is_float_literal,
)
from forest.parsing.tree_sitter_wrapper import RustParser, is_tree_sitter_available

from tests.conftest import first_node_of_type


class TestClassify:
    @pytest.mark.parametrize(
        "type_text, expected",
        [
            ("i32", "integer (i32)"),
            ("isize", "integer (isize)"),
            ("u8", "unsigned integer (u8)"),
            ("f64", "floating-point (f64)"),
            ("bool", "boolean"),
            ("char", "character"),
            ("String", "owned string"),
            ("str", "string slice"),
            ("MyType", "MyType"),
        ],
    )
    def test_primitives(self, type_text, expected):
        assert classify(type_text) == expected

    @pytest.mark.parametrize(
        "type_text, expected",
        [
            ("&str", "reference to string slice"),
            ("&'a str", "reference to string slice"),
            ("&mut Vec<i32>", "mutable reference to vector of integer (i32)"),
            ("&'static mut String", "mutable reference to owned string"),
        ],
    )
    def test_references(self, type_text, expected):
        assert classify(type_text) == expected

    @pytest.mark.parametrize(
        "type_text, expected",
        [
            ("Vec<String>", "vector of owned string"),
            ("Vec<Option<String>>", "vector of optional owned string"),
            ("Option<u64>", "optional unsigned integer (u64)"),
            ("Result<i32, String>", "result with Ok(integer (i32)) or Err(owned string)"),
            ("HashMap<String, u64>", "map from owned string to unsigned integer (u64)"),
            ("std::collections::BTreeMap<K, V>", "map from K to V"),
            ("HashSet<char>", "set of character"),
            ("Box<dyn Fn()>", "Box<dyn Fn()>"),
            ("Cow<'a, str>", "Cow<'a, str>"),
        ],
    )
    def test_generics(self, type_text, expected):
        assert classify(type_text) == expected

    @pytest.mark.parametrize(
        "type_text, expected",
        [
            ("[u8; 4]", "array of unsigned integer (u8) with size 4"),
            ("[i32]", "slice of integer (i32)"),
            ("(i32, bool)", "tuple of (integer (i32), boolean)"),
            ("()", "unit type ()"),
        ],
    )
    def test_compound(self, type_text, expected):
        assert classify(type_text) == expected

    def test_empty_is_inferred(self):
        assert classify("") == "inferred"
        assert classify("   ") == "inferred"
        assert classify("inferred") == "inferred"

    def test_node_requires_source(self):
        with pytest.raises(ValueError):
            classify(object())  # type: ignore[arg-type]

    @given(st.text(max_size=80))
    @settings(max_examples=300)
    def test_deterministic(self, text):
        assert classify(text) == classify(text)
        assert basic_type(text) == basic_type(text)


class TestBasicType:
    @pytest.mark.parametrize(
        "type_text, expected",
        [
            ("i32", "i32"),
            ("String", "String"),
            ("Vec<Option<String>>", "Vec<Option<String>>"),
            ("Option<Vec<u8>>", "Option<Vec<u8>>"),
            ("Vec<std::path::PathBuf>", "Vec<PathBuf>"),
            ("HashMap<String, i32>", "HashMap"),
            ("&mut i32", "&mut i32"),
            ("&'a str", "&str"),
            ("[u8; 16]", "[u8; N]"),
            ("[i32]", "[i32]"),
            ("(i32, String)", "(i32, String)"),
            ("()", "()"),
            ("std::path::PathBuf", "PathBuf"),
            ("", "unknown"),
        ],
    )
    def test_basic_type(self, type_text, expected):
        assert basic_type(type_text) == expected


class TestBasicTypeFromContext:
    @pytest.mark.parametrize(
        "line, expected",
        [
            ("let x: u64 = 3;", "u64"),
            ("let m: HashMap<String, i32> = HashMap::new();", "HashMap<String, i32>"),
            ('let s = "hi";', "String"),
            ("let f = 2.5;", "f64"),
            ("let n = 42;", "i32"),
            ("let c = 'z';", "char"),
            ("let v = vec![1];", "Vec<T>"),
            ("let v = Vec::with_capacity(3);", "Vec<T>"),
            ("let o = Some(3);", "Option<T>"),
            ("let b = true;", "bool"),
            ("let q = compute();", "unknown"),
            ("fn f(mut x: i32) {", "i32"),
            ("let map = HashMap::<u8, u8>::new();", "unknown"),
        ],
    )
    def test_context(self, line, expected):
        assert basic_type_from_context(line) == expected

    def test_colon_in_string_ignored(self):
        assert basic_type_from_context('let s = "a: b";') == "String"


def test_float_literal():
    assert is_float_literal("2.5")
    assert is_float_literal("1_000.0")
    assert not is_float_literal("25")
    assert not is_float_literal("1..3")


@pytest.mark.skipif(not is_tree_sitter_available(), reason="tree-sitter Rust grammar not installed")
class TestClassifyNodes:
    """Node and text paths must agree."""

    @pytest.mark.parametrize(
        "type_text",
        [
            "i32",
            "&'a mut String",
            "Vec<Option<u8>>",
            "Result<(), std::io::Error>",
            "HashMap<String, Vec<i64>>",
            "[u8; 32]",
            "(bool, char)",
            "()",
            "std::path::PathBuf",
        ],
    )
    def test_node_matches_text(self, type_text):
        parsed = RustParser().parse(f"fn f() {{ let value: {type_text} = todo!(); }}", "t.rs")
        type_node = first_node_of_type(parsed.root, "let_declaration").child_by_field_name("type")
        assert classify(type_node, parsed.source) == classify(type_text)
        assert basic_type(type_node, parsed.source) == basic_type(type_text)

    def test_deeply_nested_node_falls_back_to_text(self):
        deep = "Vec<" * 2000 + "i32" + ">" * 2000
        parsed = RustParser().parse(f"fn f() {{ let value: {deep} = todo!(); }}", "t.rs")
        type_node = first_node_of_type(parsed.root, "let_declaration").child_by_field_name("type")
        assert classify(type_node, parsed.source) == deep
        assert basic_type(type_node, parsed.source) == deep


class TestDeepNesting:
    DEEP = "Vec<" * 2000 + "i32" + ">" * 2000

    def test_classify_returns_annotation_as_written(self):
        assert classify(self.DEEP) == self.DEEP

    def test_basic_type_returns_annotation_as_written(self):
        assert basic_type(f"  {self.DEEP} ") == self.DEEP

    def test_shallow_types_unaffected(self):
        assert classify("Vec<Vec<i32>>") == "vector of vector of integer (i32)"
