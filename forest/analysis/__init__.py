"""
Type inference shared by both extraction paths.

- classifier: type expressions to descriptive labels and basic types
- context: text-only inference from a raw source line
- expressions: inference over tree-sitter expression nodes
- patterns: destructuring patterns into named bindings
- locator: mapping nodes back to source lines
"""

from .classifier import basic_type, basic_type_from_context, classify
from .context import (
    infer_destructuring_type,
    infer_from_context,
    infer_pattern_match_type,
    infer_type_from_initialization,
    infer_type_from_loop_line,
    infer_type_from_pattern_line,
)
from .expressions import basic_type_of_expression, infer_expression_type, infer_loop_type
from .locator import context_line, locate_line
from .patterns import decompose, simple_binding

__all__ = [
    # Classifier
    "basic_type",
    "basic_type_from_context",
    "classify",
    # Context
    "infer_destructuring_type",
    "infer_from_context",
    "infer_pattern_match_type",
    "infer_type_from_initialization",
    "infer_type_from_loop_line",
    "infer_type_from_pattern_line",
    # Expressions
    "basic_type_of_expression",
    "infer_expression_type",
    "infer_loop_type",
    # Locator
    "context_line",
    "locate_line",
    # Patterns
    "decompose",
    "simple_binding",
]
