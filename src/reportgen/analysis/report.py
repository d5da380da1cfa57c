"""Structured output of a ParserResult.

Transforms the analysis model into JSON-ready dicts and a compact text
summary. Only per-class and per-file data is emitted; aggregate statistics
are left to report renderers.

Output schema for result_to_dict:
{
    "parser": str,
    "supports_branch_coverage": bool,
    "assemblies": [
        {
            "name": str,
            "classes": [
                {
                    "name": str,
                    "files": [
                        {
                            "path": str,
                            "coverable_lines": int,
                            "covered_lines": int,
                            "line_coverage": [int, ...],      # -1 = not instrumented
                            "line_status": [str, ...],        # LineVisitStatus names
                            "branches": {line: [{"id": str, "visits": int}, ...]},
                            "methods": [
                                {"name": str, "first_line": int, "last_line": int,
                                 "coverage_quota": float | null},
                            ]
                        }
                    ]
                }
            ]
        }
    ]
}
"""

from typing import Any

from reportgen.analysis.models import Class, CodeFile, ParserResult


def file_to_dict(code_file: CodeFile) -> dict[str, Any]:
    """Serialize one CodeFile."""
    return {
        "path": code_file.path,
        "coverable_lines": code_file.coverable_lines,
        "covered_lines": code_file.covered_lines,
        "line_coverage": list(code_file.line_coverage),
        "line_status": [status.name for status in code_file.line_visit_status],
        "branches": {
            str(line): [{"id": b.identifier, "visits": b.visits} for b in branches]
            for line, branches in sorted(code_file.branches_by_line.items())
        },
        "methods": [
            {
                "name": element.name,
                "first_line": element.first_line,
                "last_line": element.last_line,
                "coverage_quota": (
                    round(element.coverage_quota, 4)
                    if element.coverage_quota is not None
                    else None
                ),
            }
            for element in code_file.code_elements
        ],
    }


def class_to_dict(cls: Class) -> dict[str, Any]:
    return {
        "name": cls.name,
        "files": [file_to_dict(f) for f in cls.files],
    }


def result_to_dict(result: ParserResult) -> dict[str, Any]:
    """Serialize a full ParserResult (see module docstring for the schema)."""
    return {
        "parser": result.parser_name,
        "supports_branch_coverage": result.supports_branch_coverage,
        "assemblies": [
            {
                "name": assembly.name,
                "classes": [class_to_dict(c) for c in assembly.classes],
            }
            for assembly in result.assemblies
        ],
    }


def build_text_summary(result: ParserResult) -> str:
    """One line per class: name, covered/coverable lines, branches if any.

    Args:
        result: The parser result to summarize.

    Returns:
        Human-readable text, or a placeholder when nothing was parsed.
    """
    lines = []
    for cls in result.iter_classes():
        text = f"{cls.name}: {cls.covered_lines}/{cls.coverable_lines} lines"
        if result.supports_branch_coverage:
            text += f", {cls.covered_branches}/{cls.total_branches} branches"
        lines.append(text)

    if not lines:
        return "No coverage data"
    return "\n".join(lines)
