"""
Structured error handling for Forest.

Every failure the tool can surface carries an internal error code, a
user-facing message and optional context about the file or operation
involved. Extraction itself never raises for malformed source; these types
cover I/O, configuration and output problems plus the internal parse signal
that routes a file to the fallback scanner.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, IntEnum
from typing import Any

from forest.constants import utcnow


class ErrorCode(IntEnum):
    """Internal error codes for categorization."""

    # File System Errors (2000-2999)
    FILE_NOT_FOUND = 2001
    FILE_READ_FAILED = 2002
    DIRECTORY_NOT_FOUND = 2004
    PERMISSION_DENIED = 2005

    # Parsing Errors (3000-3999)
    PARSE_FAILED = 3002
    TREE_SITTER_UNAVAILABLE = 3003

    # Configuration Errors (4000-4999)
    INVALID_CONFIG = 4001
    INVALID_OUTPUT_FORMAT = 4002

    # Output Errors (5000-5999)
    OUTPUT_WRITE_FAILED = 5001


class ErrorSeverity(str, Enum):
    """Error severity levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass
class ErrorContext:
    """Context information for an error."""

    operation: str | None = None
    file_path: str | None = None
    component: str | None = None
    timestamp: datetime = field(default_factory=utcnow)
    additional_info: dict[str, Any] = field(default_factory=dict)


class ForestError(Exception):
    """Base error class for Forest."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        user_message: str,
        severity: str = ErrorSeverity.MEDIUM,
        context: ErrorContext | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.severity = severity
        self.user_message = user_message
        self.context = context or ErrorContext()
        self.original_error = original_error

        self.context.timestamp = utcnow()

    def get_formatted_message(self) -> str:
        """Get a formatted error message for display to users."""
        parts = [
            f"[Error] {self.user_message}",
            f"   Code: {self.code.value}",
        ]

        if self.context.operation:
            parts.append(f"   Operation: {self.context.operation}")
        if self.context.file_path:
            parts.append(f"   File: {self.context.file_path}")
        if self.context.component:
            parts.append(f"   Component: {self.context.component}")
        if self.original_error:
            parts.append(f"   Cause: {self.original_error}")

        return "\n".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "name": self.__class__.__name__,
            "code": self.code.value,
            "message": str(self),
            "user_message": self.user_message,
            "severity": self.severity,
            "context": {
                "operation": self.context.operation,
                "file_path": self.context.file_path,
                "component": self.context.component,
                "timestamp": self.context.timestamp.isoformat(),
                "additional_info": self.context.additional_info,
            },
            "original_error": str(self.original_error) if self.original_error else None,
        }


class ConfigurationError(ForestError):
    """Invalid configuration or output format selector. Fatal for the run."""

    def __init__(
        self,
        message: str,
        user_message: str | None = None,
        code: ErrorCode = ErrorCode.INVALID_CONFIG,
        context: ErrorContext | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(
            code=code,
            message=message,
            user_message=user_message or "Configuration error occurred.",
            severity=ErrorSeverity.HIGH,
            context=context,
            original_error=original_error,
        )


class ResourceError(ForestError):
    """A file or directory could not be read."""

    def __init__(
        self,
        message: str,
        user_message: str | None = None,
        code: ErrorCode = ErrorCode.FILE_READ_FAILED,
        context: ErrorContext | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(
            code=code,
            message=message,
            user_message=user_message or "Resource access failed.",
            severity=ErrorSeverity.MEDIUM,
            context=context,
            original_error=original_error,
        )

    @classmethod
    def from_os_error(cls, error: OSError, file_path: str, operation: str) -> "ResourceError":
        """Wrap an OSError raised while touching ``file_path``."""
        if isinstance(error, FileNotFoundError):
            code = ErrorCode.FILE_NOT_FOUND
        elif isinstance(error, PermissionError):
            code = ErrorCode.PERMISSION_DENIED
        else:
            code = ErrorCode.FILE_READ_FAILED
        return cls(
            f"{operation} failed for {file_path}: {error}",
            user_message=f"Could not read {file_path}.",
            code=code,
            context=ErrorContext(operation=operation, file_path=file_path),
            original_error=error,
        )


class ParseError(ForestError):
    """Syntax tree construction failed. Routes the file to the fallback scanner."""

    def __init__(
        self,
        message: str,
        user_message: str | None = None,
        code: ErrorCode = ErrorCode.PARSE_FAILED,
        context: ErrorContext | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(
            code=code,
            message=message,
            user_message=user_message or "Source could not be parsed.",
            severity=ErrorSeverity.LOW,
            context=context,
            original_error=original_error,
        )


class OutputError(ForestError):
    """Writing the report failed."""

    def __init__(
        self,
        message: str,
        user_message: str | None = None,
        context: ErrorContext | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.OUTPUT_WRITE_FAILED,
            message=message,
            user_message=user_message or "Could not write the report.",
            severity=ErrorSeverity.HIGH,
            context=context,
            original_error=original_error,
        )
