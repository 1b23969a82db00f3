"""
Forest type definitions.

This module exports the location type, the binding and declaration records
and the error taxonomy.
"""

# Core types
from .core import SourceLocation

# Records
from .records import BindingDraft, BindingRecord, DeclarationRecord, DeclarationType

# Error types
from .errors import (
    ConfigurationError,
    ErrorCode,
    ErrorContext,
    ErrorSeverity,
    ForestError,
    OutputError,
    ParseError,
    ResourceError,
)

__all__ = [
    # Core types
    "SourceLocation",
    # Records
    "BindingDraft",
    "BindingRecord",
    "DeclarationRecord",
    "DeclarationType",
    # Error types
    "ErrorCode",
    "ErrorSeverity",
    "ErrorContext",
    "ForestError",
    "ConfigurationError",
    "ResourceError",
    "ParseError",
    "OutputError",
]
