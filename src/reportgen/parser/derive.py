"""Line status derivation and method ranging.

Both steps run once per tracefile block, after all of its records have been
accumulated.
"""

from __future__ import annotations

from collections.abc import Collection, Mapping, Sequence
from dataclasses import dataclass

from reportgen.analysis.models import (
    NOT_INSTRUMENTED,
    Branch,
    CodeElement,
    CodeFile,
    LineVisitStatus,
)


@dataclass(frozen=True, slots=True)
class MethodDeclaration:
    """A function declared by an FN: record."""

    name: str
    first_line: int


def derive_line_coverage(
    visits_by_line: Mapping[int, int],
    branches_by_line: Mapping[int, Collection[Branch]],
    max_line: int,
) -> tuple[list[int], list[LineVisitStatus]]:
    """Build the per-line visit and status arrays for one file.

    Both arrays have max_line + 1 entries. Lines without a visit total stay at
    NOT_INSTRUMENTED / NOT_COVERABLE. A visited line with at least one
    unvisited branch is only partially covered.

    Args:
        visits_by_line: Summed visit count per line number.
        branches_by_line: Branches recorded per line number.
        max_line: Highest line number with a visit total, -1 if none.

    Returns:
        (line_coverage, line_visit_status)
    """
    size = max_line + 1
    coverage = [NOT_INSTRUMENTED] * size
    status = [LineVisitStatus.NOT_COVERABLE] * size

    for line, visits in visits_by_line.items():
        coverage[line] = visits

        partially = any(b.visits == 0 for b in branches_by_line.get(line, ()))
        if visits > 0:
            candidate = LineVisitStatus.PARTIALLY_COVERED if partially else LineVisitStatus.COVERED
        else:
            candidate = LineVisitStatus.NOT_COVERED

        status[line] = max(status[line], candidate)

    return coverage, status


def range_methods(
    declarations: Sequence[MethodDeclaration],
    code_file: CodeFile,
) -> list[CodeElement]:
    """Assign each declared method a closed line range and coverage quota.

    A method ends one line before the next declaration, in declaration order;
    the last one ends at the file's max line. Declarations are not sorted, so
    out-of-order FN: records yield inverted or overlapping ranges.
    """
    elements = []
    for i, declaration in enumerate(declarations):
        if i < len(declarations) - 1:
            last_line = declarations[i + 1].first_line - 1
        else:
            last_line = code_file.max_line

        elements.append(
            CodeElement(
                name=declaration.name,
                first_line=declaration.first_line,
                last_line=last_line,
                coverage_quota=code_file.coverage_quota(declaration.first_line, last_line),
            )
        )
    return elements
