"""Core module exports."""

from reportgen.core.errors import (
    ConfigError,
    ErrorCode,
    InternalError,
    ParseError,
    ReportGenError,
    TracefileError,
)
from reportgen.core.logging import (
    configure_logging,
    get_log_file_path,
    get_logger,
)

__all__ = [
    # Errors
    "ConfigError",
    "ErrorCode",
    "InternalError",
    "ParseError",
    "ReportGenError",
    "TracefileError",
    # Logging
    "configure_logging",
    "get_log_file_path",
    "get_logger",
]
