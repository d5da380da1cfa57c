"""Tests for the LCOV tracefile parser.

Covers:
- Block scanning, path normalization, class naming
- DA:/BRDA:/FN: accumulation including duplicate records
- Line status derivation and method ranging through parse()
- Same-path merging and the branch coverage flag
- Filters, stray records, and fatal parse errors
"""

import os

import pytest

from reportgen.analysis import NOT_INSTRUMENTED, CodeFile, LineVisitStatus, ParserResult
from reportgen.core.errors import ErrorCode, ParseError
from reportgen.parser import DefaultFilter, LcovParser


def _parse(text: str, parser: LcovParser | None = None) -> ParserResult:
    return (parser or LcovParser()).parse(text.splitlines())


def _only_file(result: ParserResult) -> CodeFile:
    classes = list(result.iter_classes())
    assert len(classes) == 1
    assert len(classes[0].files) == 1
    return classes[0].files[0]


def _p(*parts: str) -> str:
    return os.sep.join(parts)


# =============================================================================
# Input and result shape
# =============================================================================


class TestParseInput:
    """Tests for parse() input handling and result shape."""

    def test_none_input_is_fatal(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            LcovParser().parse(None)
        assert exc_info.value.code == ErrorCode.PARSE_MISSING_INPUT

    def test_empty_input_yields_empty_default_assembly(self) -> None:
        result = LcovParser().parse([])
        assert len(result.assemblies) == 1
        assert result.assemblies[0].name == "Default"
        assert result.assemblies[0].classes == []
        assert result.supports_branch_coverage is False

    def test_parser_name_recorded(self) -> None:
        result = LcovParser().parse([])
        assert result.parser_name == "LcovParser"
        assert str(LcovParser()) == "LcovParser"

    def test_custom_assembly_name(self) -> None:
        parser = LcovParser(default_assembly_name="MyProject")
        result = _parse("SF:a.c\nDA:1,1\nend_of_record\n", parser)
        assert result.assemblies[0].name == "MyProject"
        assert result.assemblies[0].classes[0].assembly_name == "MyProject"

    def test_sample_tracefile(self, sample_lines: list[str]) -> None:
        result = LcovParser().parse(sample_lines)
        classes = result.assemblies[0].classes
        assert [c.name for c in classes] == ["ops.c", "main.c"]
        assert classes[0].files[0].path == _p("src", "calc", "ops.c")
        assert result.supports_branch_coverage is True


# =============================================================================
# DA: records
# =============================================================================


class TestLineVisits:
    """Tests for DA: accumulation."""

    def test_array_length_is_max_line_plus_one(self) -> None:
        code_file = _only_file(_parse("SF:a.c\nDA:3,1\nDA:7,0\nDA:5,2\nend_of_record\n"))
        assert len(code_file.line_coverage) == 8
        assert len(code_file.line_visit_status) == 8
        assert code_file.max_line == 7

    def test_unseen_lines_stay_at_sentinel(self) -> None:
        code_file = _only_file(_parse("SF:a.c\nDA:3,1\nend_of_record\n"))
        assert code_file.line_coverage == [NOT_INSTRUMENTED, NOT_INSTRUMENTED, NOT_INSTRUMENTED, 1]
        assert code_file.line_visit_status[:3] == [LineVisitStatus.NOT_COVERABLE] * 3

    def test_repeated_lines_sum_visits(self) -> None:
        code_file = _only_file(_parse("SF:a.c\nDA:5,2\nDA:5,3\nend_of_record\n"))
        assert code_file.line_coverage[5] == 5

    def test_large_visit_counts_are_exact(self) -> None:
        text = "SF:a.c\nDA:1,9223372036854775807\nDA:1,9223372036854775807\nend_of_record\n"
        code_file = _only_file(_parse(text))
        assert code_file.line_coverage[1] == 2 * 9223372036854775807

    def test_checksum_field_ignored(self) -> None:
        code_file = _only_file(_parse("SF:a.c\nDA:3,2,PF4Rz2r7RTliO9u6bZ7h6g\nend_of_record\n"))
        assert code_file.line_coverage[3] == 2

    def test_block_without_da_has_empty_arrays(self) -> None:
        code_file = _only_file(_parse("SF:a.c\nend_of_record\n"))
        assert code_file.line_coverage == []
        assert code_file.line_visit_status == []
        assert code_file.max_line == -1

    def test_crlf_lines_tolerated(self) -> None:
        lines = "SF:a.c\r\nDA:1,1\r\nend_of_record\r\n".split("\n")
        code_file = _only_file(LcovParser().parse(lines))
        assert code_file.path == "a.c"
        assert code_file.line_coverage[1] == 1

    def test_terminator_with_surrounding_whitespace_closes_block(self) -> None:
        lines = ["SF:a.c", "DA:1,1", "  end_of_record \t", "SF:b.c", "DA:2,1", "end_of_record"]
        classes = list(LcovParser().parse(lines).iter_classes())
        assert [c.name for c in classes] == ["a.c", "b.c"]


# =============================================================================
# BRDA: records
# =============================================================================


class TestBranches:
    """Tests for BRDA: accumulation."""

    def test_repeated_branch_key_sums_visits(self) -> None:
        text = "SF:a.c\nDA:10,1\nBRDA:10,0,0,1\nBRDA:10,0,0,2\nend_of_record\n"
        code_file = _only_file(_parse(text))
        branches = code_file.branches_by_line[10]
        assert len(branches) == 1
        assert branches[0].visits == 3
        assert branches[0].identifier == "10_0_0"

    def test_dash_means_not_taken(self) -> None:
        code_file = _only_file(_parse("SF:a.c\nDA:4,1\nBRDA:4,0,1,-\nend_of_record\n"))
        assert code_file.branches_by_line[4][0].visits == 0

    def test_same_ids_on_different_lines_do_not_collide(self) -> None:
        text = "SF:a.c\nBRDA:1,0,0,1\nBRDA:2,0,0,5\nend_of_record\n"
        code_file = _only_file(_parse(text))
        assert code_file.branches_by_line[1][0].visits == 1
        assert code_file.branches_by_line[2][0].visits == 5
        assert code_file.total_branches == 2

    def test_distinct_branches_on_one_line(self) -> None:
        text = "SF:a.c\nBRDA:3,0,0,1\nBRDA:3,0,1,0\nBRDA:3,1,0,2\nend_of_record\n"
        code_file = _only_file(_parse(text))
        assert [b.identifier for b in code_file.branches_by_line[3]] == ["3_0_0", "3_0_1", "3_1_0"]
        assert code_file.covered_branches == 2

    def test_branch_ids_kept_verbatim(self) -> None:
        text = "SF:a.c\nBRDA:5,e0,(x > 1, y) True,7\nend_of_record\n"
        branch = _only_file(_parse(text)).branches_by_line[5][0]
        assert branch.block == "e0"
        assert branch.branch == "(x > 1, y) True"
        assert branch.visits == 7

    def test_branches_without_da_do_not_extend_arrays(self) -> None:
        code_file = _only_file(_parse("SF:a.c\nDA:2,1\nBRDA:9,0,0,1\nend_of_record\n"))
        assert len(code_file.line_coverage) == 3
        assert 9 in code_file.branches_by_line


# =============================================================================
# Line status
# =============================================================================


class TestLineStatus:
    """Tests for line status derived during parsing."""

    def test_unvisited_branch_makes_line_partial(self) -> None:
        text = "SF:a.c\nDA:7,4\nBRDA:7,0,0,4\nBRDA:7,0,1,0\nend_of_record\n"
        code_file = _only_file(_parse(text))
        assert code_file.line_visit_status[7] == LineVisitStatus.PARTIALLY_COVERED

    def test_all_branches_visited_is_covered(self) -> None:
        text = "SF:a.c\nDA:7,4\nBRDA:7,0,0,3\nBRDA:7,0,1,1\nend_of_record\n"
        code_file = _only_file(_parse(text))
        assert code_file.line_visit_status[7] == LineVisitStatus.COVERED

    def test_zero_visits_is_not_covered_regardless_of_branches(self) -> None:
        text = "SF:a.c\nDA:3,0\nBRDA:3,0,0,5\nBRDA:3,0,1,0\nend_of_record\n"
        code_file = _only_file(_parse(text))
        assert code_file.line_visit_status[3] == LineVisitStatus.NOT_COVERED

    def test_repeated_branch_records_can_lift_partial_to_covered(self) -> None:
        text = "SF:a.c\nDA:7,4\nBRDA:7,0,1,-\nBRDA:7,0,1,2\nend_of_record\n"
        code_file = _only_file(_parse(text))
        assert code_file.line_visit_status[7] == LineVisitStatus.COVERED


# =============================================================================
# FN: records and method ranging
# =============================================================================


class TestMethods:
    """Tests for FN: declarations and method ranges."""

    def test_ranges_follow_next_declaration(self) -> None:
        text = "SF:a.c\nFN:2,first\nFN:10,second\nDA:2,1\nDA:15,1\nend_of_record\n"
        elements = _only_file(_parse(text)).code_elements
        assert [(e.name, e.first_line, e.last_line) for e in elements] == [
            ("first", 2, 9),
            ("second", 10, 15),
        ]

    def test_quota_over_instrumented_lines(self, sample_lines: list[str]) -> None:
        result = LcovParser().parse(sample_lines)
        ops, main = result.assemblies[0].classes
        add, divide = ops.files[0].code_elements
        assert add.coverage_quota == pytest.approx(2 / 3)
        assert divide.coverage_quota == pytest.approx(2 / 3)
        assert main.files[0].code_elements[0].coverage_quota == 1.0

    def test_declaration_order_not_sorted(self) -> None:
        text = "SF:a.c\nFN:10,late\nFN:2,early\nDA:2,1\nDA:15,1\nend_of_record\n"
        late, early = _only_file(_parse(text)).code_elements
        assert (late.first_line, late.last_line) == (10, 1)
        assert late.coverage_quota is None
        assert (early.first_line, early.last_line) == (2, 15)
        assert early.coverage_quota == 1.0

    def test_method_without_instrumented_lines_has_no_quota(self) -> None:
        text = "SF:a.c\nFN:1,stub\nend_of_record\n"
        (stub,) = _only_file(_parse(text)).code_elements
        assert stub.last_line == -1
        assert stub.coverage_quota is None

    def test_name_is_everything_after_first_comma(self) -> None:
        text = "SF:a.c\nFN:4,std::pair<int, int> make()\nDA:4,1\nend_of_record\n"
        (element,) = _only_file(_parse(text)).code_elements
        assert element.name == "std::pair<int, int> make()"


# =============================================================================
# Paths, classes and merging
# =============================================================================


class TestPathsAndClasses:
    """Tests for path normalization, class identity and merging."""

    def test_separators_normalize_to_same_class(self) -> None:
        text = "SF:a\\b\\c.cs\nDA:1,1\nend_of_record\nSF:a/b/c.cs\nDA:2,1\nend_of_record\n"
        result = _parse(text)
        classes = result.assemblies[0].classes
        assert len(classes) == 1
        assert classes[0].name == "c.cs"
        assert classes[0].files[0].path == _p("a", "b", "c.cs")

    def test_url_paths_left_unmodified(self) -> None:
        code_file = _only_file(_parse("SF:http://host/src/a.cs\nDA:1,1\nend_of_record\n"))
        assert code_file.path == "http://host/src/a.cs"

    def test_same_path_merges_into_one_class(self) -> None:
        text = (
            "SF:src/a.c\nDA:1,1\nDA:2,0\nBRDA:2,0,0,0\nend_of_record\n"
            "SF:src/a.c\nDA:2,3\nDA:4,1\nBRDA:2,0,0,1\nend_of_record\n"
        )
        result = _parse(text)
        assert len(result.assemblies[0].classes) == 1
        code_file = _only_file(result)
        assert code_file.line_coverage == [NOT_INSTRUMENTED, 1, 3, NOT_INSTRUMENTED, 1]
        assert code_file.branches_by_line[2][0].visits == 1
        assert code_file.line_visit_status[2] == LineVisitStatus.COVERED

    def test_same_path_method_listed_once(self) -> None:
        text = "SF:a.c\nFN:1,f\nDA:1,0\nend_of_record\nSF:a.c\nFN:1,f\nDA:1,1\nend_of_record\n"
        code_file = _only_file(_parse(text))
        assert [e.name for e in code_file.code_elements] == ["f"]
        assert code_file.code_elements[0].coverage_quota == 1.0

    def test_same_basename_different_paths_are_separate_classes(self) -> None:
        text = "SF:x/util.c\nDA:1,1\nend_of_record\nSF:y/util.c\nDA:1,1\nend_of_record\n"
        classes = _parse(text).assemblies[0].classes
        assert [c.name for c in classes] == ["util.c", "util.c"]
        assert classes[0].files[0].path != classes[1].files[0].path


# =============================================================================
# Branch coverage capability
# =============================================================================


class TestSupportsBranchCoverage:
    """Tests for the report-level branch coverage flag."""

    def test_false_without_branch_records(self) -> None:
        result = _parse("SF:a.c\nDA:1,1\nend_of_record\n")
        assert result.supports_branch_coverage is False

    def test_true_with_any_branch_record(self) -> None:
        text = "SF:a.c\nDA:1,1\nend_of_record\nSF:b.c\nDA:1,0\nBRDA:1,0,0,-\nend_of_record\n"
        assert _parse(text).supports_branch_coverage is True

    def test_branches_of_excluded_files_do_not_count(self) -> None:
        text = "SF:a.c\nDA:1,1\nend_of_record\nSF:b.c\nBRDA:1,0,0,1\nend_of_record\n"
        parser = LcovParser(file_filter=DefaultFilter(["-b.c"]))
        assert _parse(text, parser).supports_branch_coverage is False


# =============================================================================
# Filters and stray records
# =============================================================================


class TestFiltersAndStrayRecords:
    """Tests for excluded blocks and records outside blocks."""

    def test_file_filter_skips_block(self) -> None:
        text = "SF:src/a.c\nDA:1,1\nend_of_record\nSF:tests/t.c\nDA:1,1\nend_of_record\n"
        parser = LcovParser(file_filter=DefaultFilter(["-tests*"]))
        result = _parse(text, parser)
        assert [c.name for c in result.iter_classes()] == ["a.c"]

    def test_class_filter_skips_block(self) -> None:
        text = "SF:src/a.c\nDA:1,1\nend_of_record\nSF:src/b.h\nDA:1,1\nend_of_record\n"
        parser = LcovParser(class_filter=DefaultFilter(["+*.c"]))
        assert [c.name for c in _parse(text, parser).iter_classes()] == ["a.c"]

    def test_excluded_block_data_not_attributed_elsewhere(self) -> None:
        text = (
            "SF:skip.c\nDA:1,100\nBRDA:1,0,0,1\nend_of_record\n"
            "SF:keep.c\nDA:1,1\nend_of_record\n"
        )
        parser = LcovParser(file_filter=DefaultFilter(["-skip.c"]))
        code_file = _only_file(_parse(text, parser))
        assert code_file.path == "keep.c"
        assert code_file.line_coverage[1] == 1
        assert code_file.branches_by_line == {}

    def test_reopened_excluded_path_stays_excluded(self) -> None:
        text = "SF:skip.c\nDA:1,1\nend_of_record\nSF:skip.c\nDA:2,1\nend_of_record\n"
        parser = LcovParser(file_filter=DefaultFilter(["-skip.c"]))
        assert list(_parse(text, parser).iter_classes()) == []

    def test_excluded_block_needs_no_terminator(self) -> None:
        parser = LcovParser(file_filter=DefaultFilter(["-skip.c"]))
        assert list(_parse("SF:skip.c\nDA:1,1\n", parser).iter_classes()) == []

    def test_any_filter_object_is_accepted(self) -> None:
        class _OnlyHeaders:
            def is_included(self, name: str) -> bool:
                return name.endswith(".h")

        text = "SF:a.c\nDA:1,1\nend_of_record\nSF:a.h\nDA:1,1\nend_of_record\n"
        parser = LcovParser(class_filter=_OnlyHeaders())
        assert [c.name for c in _parse(text, parser).iter_classes()] == ["a.h"]

    def test_records_after_end_of_record_are_ignored(self) -> None:
        text = "SF:a.c\nDA:1,1\nend_of_record\nDA:1,50\nBRDA:1,0,0,0\nFN:1,ghost\n"
        code_file = _only_file(_parse(text))
        assert code_file.line_coverage[1] == 1
        assert code_file.branches_by_line == {}
        assert code_file.code_elements == []

    def test_unknown_records_ignored(self) -> None:
        text = (
            "TN:suite\nSF:a.c\nVER:1\nFNDA:3,f\nFNF:1\nFNH:1\nDA:1,3\n"
            "LF:1\nLH:1\nBRF:0\nBRH:0\nSF:other.c\nend_of_record\n"
        )
        code_file = _only_file(_parse(text))
        assert code_file.path == "a.c"
        assert code_file.line_coverage[1] == 3


# =============================================================================
# Fatal errors
# =============================================================================


class TestParseErrors:
    """Tests for malformed tracefiles."""

    def test_unterminated_block(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            _parse("SF:a.c\nDA:1,1\n")
        error = exc_info.value
        assert error.code == ErrorCode.PARSE_UNTERMINATED_BLOCK
        assert error.details == {"path": "a.c", "line": 1}

    @pytest.mark.parametrize(
        "record",
        [
            "FN:12",
            "FN:x,name",
            "DA:5",
            "DA:five,1",
            "DA:5,lots",
            "DA:5,-3",
            "DA:-5,1",
            "BRDA:5,0,1",
            "BRDA:5,0",
            "BRDA:5,0,0,many",
        ],
    )
    def test_malformed_records_are_fatal(self, record: str) -> None:
        with pytest.raises(ParseError) as exc_info:
            _parse(f"SF:a.c\nDA:1,1\n{record}\nend_of_record\n")
        error = exc_info.value
        assert error.code == ErrorCode.PARSE_MALFORMED_RECORD
        assert error.details["line"] == 3
        assert error.details["record"] == record

    def test_parser_reusable_after_error(self) -> None:
        parser = LcovParser()
        with pytest.raises(ParseError):
            _parse("SF:a.c\nDA:x,1\nend_of_record\n", parser)
        code_file = _only_file(_parse("SF:b.c\nDA:1,1\nend_of_record\n", parser))
        assert code_file.path == "b.c"
