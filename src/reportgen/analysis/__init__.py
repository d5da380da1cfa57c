"""Coverage analysis model and its structured output.

Usage:
    from reportgen.analysis import ParserResult, result_to_dict

    payload = result_to_dict(result)
"""

from reportgen.analysis.models import (
    NOT_INSTRUMENTED,
    Assembly,
    Branch,
    Class,
    CodeElement,
    CodeFile,
    LineVisitStatus,
    ParserResult,
)
from reportgen.analysis.report import (
    build_text_summary,
    class_to_dict,
    file_to_dict,
    result_to_dict,
)

__all__ = [
    # Models
    "NOT_INSTRUMENTED",
    "Assembly",
    "Branch",
    "Class",
    "CodeElement",
    "CodeFile",
    "LineVisitStatus",
    "ParserResult",
    # Report
    "build_text_summary",
    "class_to_dict",
    "file_to_dict",
    "result_to_dict",
]
