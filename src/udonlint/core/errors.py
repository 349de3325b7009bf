"""udonlint error types with typed error codes.

Error code ranges:
- 1xxx: Input (directory, source files)
- 2xxx: Config
- 9xxx: Internal

These are run-level failures. Rule violations are ``Diagnostic`` values,
never exceptions, and symbol resolution failures are plain ``None`` results.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Input (1xxx)
    INPUT_DIRECTORY_NOT_FOUND = 1001
    INPUT_NOT_A_DIRECTORY = 1002
    INPUT_NO_READABLE_FILES = 1003

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002
    CONFIG_FILE_NOT_FOUND = 2004

    # Internal (9xxx)
    INTERNAL_ERROR = 9001


@dataclass(frozen=True, slots=True)
class UdonLintError(Exception):
    """Base error with structured context."""

    code: ErrorCode
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'CONFIG_PARSE_ERROR')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class InputError(UdonLintError):
    """Problems with the directory or files handed to the linter."""

    @classmethod
    def directory_not_found(cls, path: str) -> "InputError":
        return cls(
            code=ErrorCode.INPUT_DIRECTORY_NOT_FOUND,
            message=f"Directory '{path}' does not exist.",
            details={"path": path},
        )

    @classmethod
    def not_a_directory(cls, path: str) -> "InputError":
        return cls(
            code=ErrorCode.INPUT_NOT_A_DIRECTORY,
            message=f"'{path}' is not a directory.",
            details={"path": path},
        )

    @classmethod
    def no_readable_files(cls, count: int) -> "InputError":
        return cls(
            code=ErrorCode.INPUT_NO_READABLE_FILES,
            message=f"None of the {count} source files could be read.",
            details={"candidates": count},
        )


class ConfigError(UdonLintError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )

    @classmethod
    def file_not_found(cls, path: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_FILE_NOT_FOUND,
            message=f"Config file not found: {path}",
            details={"path": path},
        )


class InternalError(UdonLintError):
    """Internal/unexpected errors."""

    @classmethod
    def unexpected(cls, reason: str, **details: Any) -> "InternalError":
        return cls(
            code=ErrorCode.INTERNAL_ERROR,
            message=f"Internal error: {reason}",
            details=details,
        )
