"""Parser and filter protocols."""

from collections.abc import Sequence
from typing import Protocol

from reportgen.analysis.models import ParserResult


class Filter(Protocol):
    """Decides whether a file path or class name is part of the report."""

    def is_included(self, name: str) -> bool: ...


class ReportParser(Protocol):
    """Protocol for coverage format parsers.

    Each parser handles one coverage format and converts its report lines
    into the assembly/class/file model.
    """

    @property
    def name(self) -> str:
        """Parser identifier recorded on the result (e.g., 'LcovParser')."""
        ...

    def parse(self, lines: Sequence[str]) -> ParserResult:
        """Parse report lines into a ParserResult.

        Raises:
            ParseError: If the report is malformed.
        """
        ...
