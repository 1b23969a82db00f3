"""Tests for expression-node type inference."""

import pytest

from forest.analysis.expressions import (
    basic_type_of_expression,
    constructor_type,
    infer_expression_type,
    infer_loop_type,
    method_name,
)
from forest.parsing.tree_sitter_wrapper import RustParser, is_tree_sitter_available

from tests.conftest import first_node_of_type

pytestmark = pytest.mark.skipif(
    not is_tree_sitter_available(), reason="tree-sitter Rust grammar not installed"
)


def _let_value(expression):
    parsed = RustParser().parse(f"fn f() {{ let v = {expression}; }}", "t.rs")
    value = first_node_of_type(parsed.root, "let_declaration").child_by_field_name("value")
    return value, parsed.source


def _loop_value(iterable):
    parsed = RustParser().parse(f"fn f() {{ for x in {iterable} {{}} }}", "t.rs")
    value = first_node_of_type(parsed.root, "for_expression").child_by_field_name("value")
    return value, parsed.source


class TestInferExpressionType:
    @pytest.mark.parametrize(
        "expression, expected",
        [
            ('"hi"', "string"),
            ('r"raw"', "string"),
            ('b"bytes"', "byte string"),
            ("'c'", "character"),
            ("b'c'", "byte"),
            ("42", "integer"),
            ("7i64", "integer (i64)"),
            ("7u16", "unsigned integer (u16)"),
            ("2.5", "floating-point"),
            ("2.5f32", "floating-point (f32)"),
            ("true", "boolean"),
            ("(5)", "integer"),
            ("[1, 2]", "array"),
        ],
    )
    def test_literals(self, expression, expected):
        node, source = _let_value(expression)
        assert infer_expression_type(node, source) == expected

    @pytest.mark.parametrize(
        "expression, expected",
        [
            ("Vec::new()", "vector"),
            ("Vec::<u8>::new()", "vector"),
            ("String::new()", "string"),
            ("std::collections::HashMap::new()", "hash map"),
            ("Point::new(1, 2)", "Point instance"),
            ("v.iter()", "iterator"),
            ("v.into_iter()", "owned iterator"),
            ("v.iter().collect::<Vec<_>>()", "collection"),
            ("x.to_string()", "string"),
            ("v.len()", "method result"),
            ("compute(1)", "function result"),
        ],
    )
    def test_calls(self, expression, expected):
        node, source = _let_value(expression)
        assert infer_expression_type(node, source) == expected

    @pytest.mark.parametrize(
        "expression, expected",
        [
            ("a + b", "numeric"),
            ("a == b", "boolean"),
            ("a && b", "boolean"),
            ("a & b", "integer"),
            ("&x", "reference"),
            ("&mut x", "mutable reference"),
            ("match x { _ => 1 }", "match result"),
            ("if c { 1 } else { 2 }", "conditional result"),
            ("vec![1, 2]", "vector"),
            ('format!("{}", x)', "owned string"),
            ("Point { x: 1, y: 2 }", "Point"),
            ("x", "expression result"),
        ],
    )
    def test_compound(self, expression, expected):
        node, source = _let_value(expression)
        assert infer_expression_type(node, source) == expected


class TestCallHelpers:
    def test_method_name(self):
        node, source = _let_value("items.iter()")
        assert method_name(node, source) == "iter"
        assert constructor_type(node, source) is None

    def test_constructor_type_strips_turbofish(self):
        node, source = _let_value("HashMap::<u8, u8>::new()")
        assert constructor_type(node, source) == "HashMap"
        assert method_name(node, source) is None

    def test_non_new_path_is_not_a_constructor(self):
        node, source = _let_value("Vec::with_capacity(4)")
        assert constructor_type(node, source) is None


class TestInferLoopType:
    @pytest.mark.parametrize(
        "iterable, expected",
        [
            ("0..10", "integer (range)"),
            ("(0..=n)", "integer (range)"),
            ("v.iter()", "reference to collection element"),
            ("v.iter_mut()", "mutable reference to collection element"),
            ("v.into_iter()", "owned collection element"),
            ("v.iter().enumerate()", "collection element"),
            ("items", "collection element"),
        ],
    )
    def test_loop_labels(self, iterable, expected):
        node, source = _loop_value(iterable)
        assert infer_loop_type(node, source) == expected


class TestBasicTypeOfExpression:
    @pytest.mark.parametrize(
        "expression, expected",
        [
            ('"hi"', "String"),
            ('b"hi"', "Vec<u8>"),
            ("'c'", "char"),
            ("3u16", "unsigned integer"),
            ("3", "integer"),
            ("1.0", "f64"),
            ("true", "bool"),
            ("[1]", "Array"),
            ("v.iter()", "Iterator"),
            ("v.len()", "Method call result"),
            ("HashMap::new()", "Instance of HashMap"),
            ("compute()", "Function call result"),
            ("Point { x: 1 }", "Struct instance"),
            ("&x", "Reference"),
            ("&mut x", "Mutable reference"),
            ("a + b", "Binary expression result"),
            ("vec![]", "Vec<T>"),
            ("0..3", "Range"),
            ("x", "Unknown expression"),
        ],
    )
    def test_basic(self, expression, expected):
        node, source = _let_value(expression)
        assert basic_type_of_expression(node, source) == expected
