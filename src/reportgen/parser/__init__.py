"""LCOV parsing entry points.

This module provides:
- LcovParser: the tracefile parser
- DefaultFilter: glob include/exclude filters
- parse_tracefile: read a tracefile from disk and parse it with configured filters
"""

from pathlib import Path

from reportgen.analysis.models import ParserResult
from reportgen.config.models import ParserConfig
from reportgen.core.errors import TracefileError
from reportgen.core.logging import get_logger

from .base import Filter, ReportParser
from .derive import MethodDeclaration, derive_line_coverage, range_methods
from .filters import DefaultFilter
from .lcov import LcovParser, class_name_for, normalize_path

logger = get_logger(__name__)

__all__ = [
    "DefaultFilter",
    "Filter",
    "LcovParser",
    "MethodDeclaration",
    "ReportParser",
    "class_name_for",
    "derive_line_coverage",
    "normalize_path",
    "parse_tracefile",
    "range_methods",
    "read_tracefile",
]


def read_tracefile(path: Path) -> list[str]:
    """Read a tracefile into lines.

    Undecodable bytes are replaced rather than rejected; record prefixes are
    ASCII so a stray byte in a path never hides a record.

    Raises:
        TracefileError: If the file is missing or cannot be read.
    """
    if not path.is_file():
        raise TracefileError.not_found(str(path))
    try:
        content = path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise TracefileError.unreadable(str(path), str(e)) from e
    return content.splitlines()


def parse_tracefile(path: Path, *, config: ParserConfig | None = None) -> ParserResult:
    """Parse an LCOV tracefile from disk.

    Args:
        path: Path to the tracefile (e.g., coverage/lcov.info).
        config: Parser settings (filters, assembly name). Defaults apply if None.

    Returns:
        Parsed ParserResult.

    Raises:
        TracefileError: If the file cannot be read.
        ParseError: If the tracefile is malformed.
    """
    lines = read_tracefile(path)
    logger.debug("lcov_read", path=str(path), lines=len(lines))
    parser: ReportParser = LcovParser.from_config(config or ParserConfig())
    return parser.parse(lines)
