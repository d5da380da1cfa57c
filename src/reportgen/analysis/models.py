"""Coverage analysis model.

Assembly-centric hierarchy consumed by report renderers:

    ParserResult -> Assembly -> Class -> CodeFile -> (lines, branches, CodeElement)

Line arrays are indexed by 1-based source line number; index 0 is never
instrumented. A visit count of -1 marks a line without executable code.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import IntEnum
from typing import TypeVar

from reportgen.core.errors import InternalError

NOT_INSTRUMENTED = -1

T = TypeVar("T")


class LineVisitStatus(IntEnum):
    """Qualitative coverage of a source line.

    Ordered: a merged status is the max of its inputs and never decreases.
    """

    NOT_COVERABLE = 0
    NOT_COVERED = 1
    PARTIALLY_COVERED = 2
    COVERED = 3


@dataclass(slots=True)
class Branch:
    """A single branch of a conditional, identified by (line, block, branch).

    Block and branch ids are kept verbatim from the tracefile.
    """

    line: int
    block: str
    branch: str
    visits: int

    @property
    def key(self) -> tuple[int, str, str]:
        return (self.line, self.block, self.branch)

    @property
    def identifier(self) -> str:
        return f"{self.line}_{self.block}_{self.branch}"


@dataclass(frozen=True, slots=True)
class CodeElement:
    """A method with its line range and coverage quota.

    coverage_quota is the covered fraction (0.0 to 1.0) of the instrumented
    lines in [first_line, last_line], or None if the range has none.
    """

    name: str
    first_line: int
    last_line: int
    coverage_quota: float | None = None


@dataclass(slots=True)
class CodeFile:
    """Coverage data for one physical source path."""

    path: str
    line_coverage: list[int] = field(default_factory=list)
    line_visit_status: list[LineVisitStatus] = field(default_factory=list)
    branches_by_line: dict[int, list[Branch]] = field(default_factory=dict)
    code_elements: list[CodeElement] = field(default_factory=list)

    def __post_init__(self) -> None:
        if len(self.line_coverage) != len(self.line_visit_status):
            raise InternalError.unexpected(
                "line coverage and status arrays differ in length",
                path=self.path,
                coverage=len(self.line_coverage),
                status=len(self.line_visit_status),
            )

    @property
    def max_line(self) -> int:
        """Highest line number covered by the arrays, -1 if empty."""
        return len(self.line_coverage) - 1

    @property
    def coverable_lines(self) -> int:
        return sum(1 for visits in self.line_coverage if visits >= 0)

    @property
    def covered_lines(self) -> int:
        return sum(1 for visits in self.line_coverage if visits > 0)

    @property
    def total_branches(self) -> int:
        return sum(len(branches) for branches in self.branches_by_line.values())

    @property
    def covered_branches(self) -> int:
        return sum(
            1
            for branches in self.branches_by_line.values()
            for branch in branches
            if branch.visits > 0
        )

    def coverage_quota(self, first_line: int, last_line: int) -> float | None:
        """Covered fraction of the instrumented lines in [first_line, last_line].

        Returns None if the range is inverted, lies outside the arrays, or
        contains no instrumented line.
        """
        if first_line < 0 or last_line < first_line or last_line >= len(self.line_coverage):
            return None

        window = self.line_coverage[first_line : last_line + 1]
        coverable = sum(1 for visits in window if visits >= 0)
        if coverable == 0:
            return None
        covered = sum(1 for visits in window if visits > 0)
        return covered / coverable

    def add_code_element(self, element: CodeElement) -> None:
        self.code_elements.append(element)

    def merge(self, other: CodeFile) -> None:
        """Merge coverage of the same path from another parse block.

        Visits are summed, statuses take the max, branches with the same key
        sum their visits, and code elements are matched by name and line range
        with their quotas recomputed from the merged visits.
        """
        length = max(len(self.line_coverage), len(other.line_coverage))
        merged_coverage: list[int] = []
        merged_status: list[LineVisitStatus] = []
        for i in range(length):
            mine = _at(self.line_coverage, i, NOT_INSTRUMENTED)
            theirs = _at(other.line_coverage, i, NOT_INSTRUMENTED)
            if mine < 0 and theirs < 0:
                merged_coverage.append(NOT_INSTRUMENTED)
            else:
                merged_coverage.append(max(mine, 0) + max(theirs, 0))
            merged_status.append(
                max(
                    _at(self.line_visit_status, i, LineVisitStatus.NOT_COVERABLE),
                    _at(other.line_visit_status, i, LineVisitStatus.NOT_COVERABLE),
                )
            )
        self.line_coverage = merged_coverage
        self.line_visit_status = merged_status

        for line, branches in other.branches_by_line.items():
            existing = {b.key: b for b in self.branches_by_line.setdefault(line, [])}
            for branch in branches:
                if branch.key in existing:
                    existing[branch.key].visits += branch.visits
                else:
                    copy = Branch(branch.line, branch.block, branch.branch, branch.visits)
                    self.branches_by_line[line].append(copy)
                    existing[copy.key] = copy

        # Quotas are recomputed against the merged arrays
        by_range: dict[tuple[str, int, int], CodeElement] = {}
        for element in [*self.code_elements, *other.code_elements]:
            key = (element.name, element.first_line, element.last_line)
            if key not in by_range:
                by_range[key] = CodeElement(
                    name=element.name,
                    first_line=element.first_line,
                    last_line=element.last_line,
                    coverage_quota=self.coverage_quota(element.first_line, element.last_line),
                )
        self.code_elements = list(by_range.values())


def _at(values: list[T], index: int, default: T) -> T:
    return values[index] if index < len(values) else default


@dataclass(slots=True)
class Class:
    """One logical source file within an assembly, named by its base name."""

    name: str
    assembly_name: str
    files: list[CodeFile] = field(default_factory=list)

    def add_file(self, code_file: CodeFile) -> None:
        if any(f.path == code_file.path for f in self.files):
            raise InternalError.unexpected(
                "file already registered on class", class_name=self.name, path=code_file.path
            )
        self.files.append(code_file)

    def merge(self, other: Class) -> None:
        """Merge another class for the same source path into this one."""
        by_path = {f.path: f for f in self.files}
        for code_file in other.files:
            if code_file.path in by_path:
                by_path[code_file.path].merge(code_file)
            else:
                self.files.append(code_file)
                by_path[code_file.path] = code_file

    @property
    def coverable_lines(self) -> int:
        return sum(f.coverable_lines for f in self.files)

    @property
    def covered_lines(self) -> int:
        return sum(f.covered_lines for f in self.files)

    @property
    def total_branches(self) -> int:
        return sum(f.total_branches for f in self.files)

    @property
    def covered_branches(self) -> int:
        return sum(f.covered_branches for f in self.files)

    @property
    def code_elements(self) -> list[CodeElement]:
        return [element for f in self.files for element in f.code_elements]


@dataclass(slots=True)
class Assembly:
    """Named container of classes."""

    name: str
    classes: list[Class] = field(default_factory=list)

    def add_class(self, cls: Class) -> None:
        self.classes.append(cls)


@dataclass(frozen=True, slots=True)
class ParserResult:
    """Outcome of one parse run.

    parser_name identifies the producing parser in combined reports.
    """

    assemblies: list[Assembly]
    supports_branch_coverage: bool
    parser_name: str

    def iter_classes(self) -> Iterator[Class]:
        for assembly in self.assemblies:
            yield from assembly.classes
