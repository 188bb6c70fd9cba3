"""Tests for report rendering and exit codes."""

import json

import pytest
from rich.console import Console

from doccov.models import (
    CoverageReport,
    CoverageSummary,
    DryRunResult,
    FileCoverage,
    Recommendation,
    ScopeSummary,
    ScopeViolation,
    Span,
    SymbolCoverage,
)
from doccov.report import (
    color_for_percentage,
    exit_code_for,
    render_dry_run,
    render_report,
    report_to_dict,
)


def make_report(coverage=50.0, violations=None):
    file = FileCoverage(
        path="src/[weird].ts",
        total_lines=10,
        covered_lines=5,
        covered_sections=[Span(1, 5)],
        uncovered_sections=[Span(6, 10)],
        functions=[
            SymbolCoverage(name="load", span=Span(1, 3), is_covered=True),
            SymbolCoverage(name="save", span=Span(7, 9), is_covered=False),
        ],
        classes=[SymbolCoverage(name="Store", span=Span(1, 10), is_covered=True)],
    )
    summary = CoverageSummary(
        total_files=1,
        total_lines=10,
        covered_lines=5,
        coverage_percentage=coverage,
        low_coverage_files=["src/[weird].ts"],
        functions_total=2,
        functions_covered=1,
        classes_total=1,
        classes_covered=1,
        functions_coverage_percentage=50.0,
        classes_coverage_percentage=100.0,
        scopes=[ScopeSummary(name="src", total_lines=10, covered_lines=5, coverage_percentage=50.0, threshold=60)],
        scope_threshold_violations=violations or [],
    )
    return CoverageReport(
        summary=summary,
        files=[file],
        recommendations=[Recommendation(file="src/[weird].ts", message="Document it", priority="medium")],
        generated_at="2024-01-01T00:00:00+00:00",
    )


def render_text(renderer, *args, **kwargs):
    console = Console(record=True, width=200, color_system=None)
    renderer(*args, console, **kwargs)
    return console.export_text()


class TestColorForPercentage:
    """Tests for color_for_percentage."""

    @pytest.mark.parametrize("pct, color", [
        (100, "green"),
        (90, "green"),
        (89.99, "yellow"),
        (60, "yellow"),
        (59.9, "red"),
        (0, "red"),
    ])
    def test_bands(self, pct, color):
        assert color_for_percentage(pct) == color


class TestExitCode:
    """Tests for exit_code_for."""

    def test_no_threshold_passes(self):
        assert exit_code_for(make_report(coverage=10), None) == 0

    def test_below_threshold_fails(self):
        assert exit_code_for(make_report(coverage=50), 80) == 1

    def test_meeting_threshold_passes(self):
        assert exit_code_for(make_report(coverage=80), 80) == 0

    def test_scope_violation_fails_without_threshold(self):
        violation = ScopeViolation(scope="src", actual=50.0, threshold=60)

        assert exit_code_for(make_report(violations=[violation]), None) == 1


class TestReportToDict:
    """Tests for report_to_dict."""

    def test_json_serializable(self):
        data = report_to_dict(make_report())

        assert json.loads(json.dumps(data)) == data

    def test_file_entries_carry_derived_values(self):
        data = report_to_dict(make_report())

        file = data["files"][0]
        assert file["path"] == "src/[weird].ts"
        assert file["coverage_percentage"] == 50.0
        assert file["functions_total"] == 2
        assert file["functions_covered"] == 1
        assert file["classes_total"] == 1
        assert file["classes_covered"] == 1
        assert file["uncovered_sections"] == [{"start": 6, "end": 10}]

    def test_summary_and_metadata(self):
        data = report_to_dict(make_report())

        assert data["summary"]["coverage_percentage"] == 50.0
        assert data["summary"]["scopes"][0]["name"] == "src"
        assert data["recommendations"] == [
            {"file": "src/[weird].ts", "message": "Document it", "priority": "medium"}
        ]
        assert data["generated_at"] == "2024-01-01T00:00:00+00:00"


class TestRenderReport:
    """Tests for render_report."""

    def test_renders_sections(self):
        text = render_text(render_report, make_report())

        assert "Documentation Coverage Report" in text
        assert "50.00%" in text
        assert "Scopes" in text
        assert "Low coverage files (1)" in text
        assert "Recommendations" in text
        assert "[medium]" in text

    def test_paths_with_brackets_are_not_markup(self):
        text = render_text(render_report, make_report())

        assert "src/[weird].ts" in text

    def test_symbols_listed(self):
        text = render_text(render_report, make_report())

        assert "load✓" in text
        assert "save✗" in text
        assert "6-10" in text

    def test_files_table_optional(self):
        text = render_text(render_report, make_report(), show_files=False)

        assert "load✓" not in text


class TestRenderDryRun:
    """Tests for render_dry_run."""

    def test_lists_files(self):
        result = DryRunResult(
            total_files=2,
            source_files=["src/a.ts", "src/b.ts"],
            excluded_files=["src/legacy/old.ts"],
            estimated_lines=120,
        )

        text = render_text(render_dry_run, result)

        assert "src/a.ts" in text
        assert "Excluded source files (1)" in text
        assert "Total files: 2" in text
        assert "Estimated lines: 120" in text
