"""Config module exports."""

from reportgen.config.loader import load_config
from reportgen.config.models import (
    LoggingConfig,
    LogOutputConfig,
    ParserConfig,
    ReportGenConfig,
)

__all__ = [
    "load_config",
    "LoggingConfig",
    "LogOutputConfig",
    "ParserConfig",
    "ReportGenConfig",
]
