"""LCOV tracefile parser.

LCOV is a plain text format, one record per line, grouped in blocks:
- SF:<source file path>           opens a block
- FN:<line>,<name>                function declaration
- DA:<line>,<hits>[,<checksum>]   line visits
- BRDA:<line>,<block>,<branch>,<taken>   branch visits, taken may be '-'
- end_of_record                   closes the block

Other records (TN:, FNDA:, FNF:, FNH:, LF:, LH:, BRF:, BRH:, ...) are
ignored; totals are derived from the detailed records instead.

Used by: gcov/lcov, cargo-llvm-cov, pytest-cov, dart test, c8
"""

from __future__ import annotations

import os
import re
from collections.abc import Sequence
from dataclasses import dataclass, field

from reportgen.analysis.models import Assembly, Branch, Class, CodeFile, ParserResult
from reportgen.config.models import DEFAULT_ASSEMBLY_NAME, ParserConfig
from reportgen.core.errors import ParseError
from reportgen.core.logging import get_logger
from reportgen.parser.base import Filter
from reportgen.parser.derive import MethodDeclaration, derive_line_coverage, range_methods
from reportgen.parser.filters import DefaultFilter

logger = get_logger(__name__)

END_OF_RECORD = "end_of_record"

_NUMBER_RE = re.compile(r"[0-9]+")


def normalize_path(path: str) -> str:
    """Normalize separators to os.sep, leaving http(s) URLs untouched."""
    if path.startswith(("http://", "https://")):
        return path
    return path.replace("\\", os.sep).replace("/", os.sep)


def class_name_for(path: str) -> str:
    """Class name for a normalized path: its base name."""
    return path[path.rfind(os.sep) + 1 :]


def _parse_number(text: str, line_number: int, record: str, what: str) -> int:
    # Python ints are unbounded: huge visit counts are kept exact.
    text = text.strip()
    if not _NUMBER_RE.fullmatch(text):
        raise ParseError.malformed_record(line_number, record, f"invalid {what}: {text!r}")
    return int(text)


@dataclass(slots=True)
class _BlockAccumulator:
    """Mutable state for one SF: ... end_of_record block."""

    path: str
    declarations: list[MethodDeclaration] = field(default_factory=list)
    visits_by_line: dict[int, int] = field(default_factory=dict)
    branches_by_line: dict[int, dict[tuple[int, str, str], Branch]] = field(default_factory=dict)
    max_line: int = -1

    def add_record(self, record: str, line_number: int) -> None:
        if record.startswith("FN:"):
            self._add_function(record, line_number)
        elif record.startswith("BRDA:"):
            self._add_branch(record, line_number)
        elif record.startswith("DA:"):
            self._add_line(record, line_number)

    def _add_function(self, record: str, line_number: int) -> None:
        first_line, sep, name = record[3:].partition(",")
        if not sep:
            raise ParseError.malformed_record(line_number, record, "expected FN:<line>,<name>")
        self.declarations.append(
            MethodDeclaration(
                name=name,
                first_line=_parse_number(first_line, line_number, record, "line number"),
            )
        )

    def _add_line(self, record: str, line_number: int) -> None:
        parts = record[3:].split(",")
        if len(parts) < 2:
            raise ParseError.malformed_record(line_number, record, "expected DA:<line>,<hits>")
        line = _parse_number(parts[0], line_number, record, "line number")
        visits = _parse_number(parts[1], line_number, record, "hit count")

        self.max_line = max(self.max_line, line)
        self.visits_by_line[line] = self.visits_by_line.get(line, 0) + visits

    def _add_branch(self, record: str, line_number: int) -> None:
        # Branch ids may themselves contain commas (lcov 2.x expressions):
        # split the first two fields from the left and the count from the right.
        parts = record[5:].split(",", 2)
        if len(parts) < 3:
            raise ParseError.malformed_record(
                line_number, record, "expected BRDA:<line>,<block>,<branch>,<taken>"
            )
        line_text, block, rest = parts
        branch, sep, taken = rest.rpartition(",")
        if not sep:
            raise ParseError.malformed_record(
                line_number, record, "expected BRDA:<line>,<block>,<branch>,<taken>"
            )

        line = _parse_number(line_text, line_number, record, "line number")
        visits = 0 if taken.strip() == "-" else _parse_number(taken, line_number, record, "taken")

        branches = self.branches_by_line.setdefault(line, {})
        key = (line, block, branch)
        if key in branches:
            branches[key].visits += visits
        else:
            branches[key] = Branch(line=line, block=block, branch=branch, visits=visits)

    def to_code_file(self) -> CodeFile:
        branches_by_line = {line: list(b.values()) for line, b in self.branches_by_line.items()}
        coverage, status = derive_line_coverage(
            self.visits_by_line, branches_by_line, self.max_line
        )
        code_file = CodeFile(
            path=self.path,
            line_coverage=coverage,
            line_visit_status=status,
            branches_by_line=branches_by_line,
        )
        for element in range_methods(self.declarations, code_file):
            code_file.add_code_element(element)
        return code_file


class LcovParser:
    """Parser for LCOV tracefiles.

    The instance holds only immutable configuration, so one parser may be
    shared across threads; all parse state is local to parse().
    """

    def __init__(
        self,
        file_filter: Filter | None = None,
        class_filter: Filter | None = None,
        default_assembly_name: str = DEFAULT_ASSEMBLY_NAME,
    ) -> None:
        self._file_filter = file_filter or DefaultFilter()
        self._class_filter = class_filter or DefaultFilter()
        self._default_assembly_name = default_assembly_name

    @classmethod
    def from_config(cls, config: ParserConfig) -> LcovParser:
        return cls(
            file_filter=DefaultFilter(config.file_filters),
            class_filter=DefaultFilter(config.class_filters),
            default_assembly_name=config.default_assembly_name,
        )

    @property
    def name(self) -> str:
        return "LcovParser"

    def __str__(self) -> str:
        return self.name

    def parse(self, lines: Sequence[str] | None) -> ParserResult:
        """Parse tracefile lines into a single-assembly ParserResult.

        Raises:
            ParseError: On None input, a malformed record, or a block
                without end_of_record.
        """
        if lines is None:
            raise ParseError.missing_input()

        assembly = Assembly(name=self._default_assembly_name)
        self._process_assembly(assembly, lines)

        # Not every tool that writes LCOV emits branch records
        supports_branch_coverage = any(c.total_branches > 0 for c in assembly.classes)

        logger.debug(
            "lcov_parsed",
            assembly=assembly.name,
            classes=len(assembly.classes),
            files=sum(len(c.files) for c in assembly.classes),
            supports_branch_coverage=supports_branch_coverage,
        )
        return ParserResult(
            assemblies=[assembly],
            supports_branch_coverage=supports_branch_coverage,
            parser_name=self.name,
        )

    def _process_assembly(self, assembly: Assembly, lines: Sequence[str]) -> None:
        classes_by_path: dict[str, Class] = {}

        index = 0
        while index < len(lines):
            record = lines[index].strip()
            index += 1

            # Anything outside a block, including stray DA:/BRDA: records, is ignored
            if not record.startswith("SF:"):
                continue

            path = normalize_path(record.partition(":")[2])
            if not self._file_filter.is_included(path):
                logger.debug("lcov_file_excluded", path=path, line=index)
                continue

            class_name = class_name_for(path)
            if not self._class_filter.is_included(class_name):
                logger.debug("lcov_class_excluded", path=path, cls=class_name, line=index)
                continue

            cls = Class(name=class_name, assembly_name=assembly.name)
            code_file, index = self._process_block(path, lines, index)
            cls.add_file(code_file)

            existing = classes_by_path.get(path)
            if existing is not None:
                logger.debug("lcov_class_merged", path=path, cls=class_name)
                existing.merge(cls)
            else:
                assembly.add_class(cls)
                classes_by_path[path] = cls

    def _process_block(self, path: str, lines: Sequence[str], start: int) -> tuple[CodeFile, int]:
        """Accumulate one block starting after its SF: line.

        Returns the derived file and the index following end_of_record.
        Lines are stripped first, so a terminator with surrounding whitespace
        still closes the block.
        """
        accumulator = _BlockAccumulator(path=path)

        index = start
        while True:
            if index >= len(lines):
                # start is the 1-based line number of the SF: record
                raise ParseError.unterminated_block(path, start)

            record = lines[index].strip()
            index += 1

            if record == END_OF_RECORD:
                break
            accumulator.add_record(record, index)

        return accumulator.to_code_file(), index
