"""reportgen error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Parse
- 4xxx: Tracefile I/O
- 9xxx: Internal
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002
    CONFIG_FILE_NOT_FOUND = 2004

    # Parse (3xxx)
    PARSE_MISSING_INPUT = 3001
    PARSE_MALFORMED_RECORD = 3002
    PARSE_UNTERMINATED_BLOCK = 3003

    # Tracefile I/O (4xxx)
    TRACEFILE_NOT_FOUND = 4001
    TRACEFILE_UNREADABLE = 4002

    # Internal (9xxx)
    INTERNAL_ERROR = 9001


@dataclass(frozen=True, slots=True)
class ReportGenError(Exception):
    """Base error with structured context."""

    code: ErrorCode
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'PARSE_MALFORMED_RECORD')."""
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


class ConfigError(ReportGenError):
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


class ParseError(ReportGenError):
    """Fatal errors while parsing a tracefile.

    A parse error aborts the whole report; there is no partial-document
    recovery.
    """

    @classmethod
    def missing_input(cls) -> "ParseError":
        return cls(
            code=ErrorCode.PARSE_MISSING_INPUT,
            message="No report lines given (got None)",
        )

    @classmethod
    def malformed_record(cls, line_number: int, record: str, reason: str) -> "ParseError":
        return cls(
            code=ErrorCode.PARSE_MALFORMED_RECORD,
            message=f"Malformed record at line {line_number}: {reason}",
            details={"line": line_number, "record": record, "reason": reason},
        )

    @classmethod
    def unterminated_block(cls, path: str, line_number: int) -> "ParseError":
        return cls(
            code=ErrorCode.PARSE_UNTERMINATED_BLOCK,
            message=f"Block for {path} opened at line {line_number} has no end_of_record",
            details={"path": path, "line": line_number},
        )


class TracefileError(ReportGenError):
    """Errors reading a tracefile from disk."""

    @classmethod
    def not_found(cls, path: str) -> "TracefileError":
        return cls(
            code=ErrorCode.TRACEFILE_NOT_FOUND,
            message=f"Tracefile not found: {path}",
            details={"path": path},
        )

    @classmethod
    def unreadable(cls, path: str, reason: str) -> "TracefileError":
        return cls(
            code=ErrorCode.TRACEFILE_UNREADABLE,
            message=f"Failed to read tracefile {path}: {reason}",
            details={"path": path, "reason": reason},
        )


class InternalError(ReportGenError):
    """Internal/unexpected errors."""

    @classmethod
    def unexpected(cls, reason: str, **details: Any) -> "InternalError":
        return cls(
            code=ErrorCode.INTERNAL_ERROR,
            message=f"Internal error: {reason}",
            details=details,
        )
