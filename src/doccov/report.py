"""Rendering of coverage reports for the console and as JSON."""

from dataclasses import asdict
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from doccov.models import CoverageReport, DryRunResult, FileCoverage


def color_for_percentage(pct: float) -> str:
    """Rich style for a coverage percentage."""
    if pct >= 90:
        return "green"
    if pct >= 60:
        return "yellow"
    return "red"


def _pct(pct: float) -> str:
    style = color_for_percentage(pct)
    return f"[{style}]{pct:.2f}%[/{style}]"


def _file_to_dict(file: FileCoverage) -> dict[str, Any]:
    data = asdict(file)
    data["coverage_percentage"] = file.coverage_percentage
    data["functions_total"] = file.functions_total
    data["functions_covered"] = file.functions_covered
    data["classes_total"] = file.classes_total
    data["classes_covered"] = file.classes_covered
    return data


def report_to_dict(report: CoverageReport) -> dict[str, Any]:
    """Convert a report to plain JSON-serializable data.

    File entries carry their derived percentages and symbol counts in
    addition to the dataclass fields.
    """
    return {
        "summary": asdict(report.summary),
        "files": [_file_to_dict(f) for f in report.files],
        "recommendations": [asdict(r) for r in report.recommendations],
        "generated_at": report.generated_at,
    }


def exit_code_for(report: CoverageReport, threshold: float | None) -> int:
    """Process exit code for CI use.

    Returns:
        1 if overall coverage is below ``threshold`` (when one is set) or any
        scope threshold is violated, 0 otherwise.
    """
    if threshold is not None and report.summary.coverage_percentage < threshold:
        return 1
    if report.summary.scope_threshold_violations:
        return 1
    return 0


def _symbol_list(symbols) -> str:
    return ", ".join(f"{escape(s.name)}{'✓' if s.is_covered else '✗'}" for s in symbols)


def render_report(report: CoverageReport, console: Console, show_files: bool = True) -> None:
    """Print a human-readable report."""
    summary = report.summary

    console.print("[bold]Documentation Coverage Report[/bold]")
    console.print(f"Generated: {report.generated_at}")

    table = Table(title="Summary", show_header=True, header_style="bold")
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    table.add_row("Files", str(summary.total_files))
    table.add_row("Lines", str(summary.total_lines))
    table.add_row("Covered", str(summary.covered_lines))
    table.add_row("Coverage", _pct(summary.coverage_percentage))
    table.add_row(
        "Functions",
        f"{summary.functions_covered}/{summary.functions_total} ({_pct(summary.functions_coverage_percentage)})",
    )
    table.add_row(
        "Classes",
        f"{summary.classes_covered}/{summary.classes_total} ({_pct(summary.classes_coverage_percentage)})",
    )
    console.print(table)

    if summary.scopes:
        scopes = Table(title="Scopes", show_header=True, header_style="bold")
        scopes.add_column("Scope")
        scopes.add_column("Lines", justify="right")
        scopes.add_column("Covered", justify="right")
        scopes.add_column("Coverage", justify="right")
        scopes.add_column("Threshold", justify="right")
        for scope in summary.scopes:
            scopes.add_row(
                escape(scope.name),
                str(scope.total_lines),
                str(scope.covered_lines),
                _pct(scope.coverage_percentage),
                "-" if scope.threshold is None else f"{scope.threshold:g}%",
            )
        console.print(scopes)

    if show_files and report.files:
        files = Table(title="Files", show_header=True, header_style="bold")
        files.add_column("Path")
        files.add_column("Coverage", justify="right")
        files.add_column("Lines", justify="right")
        files.add_column("Symbols")
        files.add_column("Uncovered")
        for file in report.files:
            symbols = []
            if file.functions:
                symbols.append(f"functions {_symbol_list(file.functions)}")
            if file.classes:
                symbols.append(f"classes {_symbol_list(file.classes)}")
            uncovered = ", ".join(f"{s.start}-{s.end}" for s in file.uncovered_sections)
            files.add_row(
                escape(file.path),
                _pct(file.coverage_percentage),
                f"{file.covered_lines}/{file.total_lines}",
                "\n".join(symbols),
                uncovered,
            )
        console.print(files)

    if summary.undocumented_files:
        console.print(f"[bold]Undocumented files ({len(summary.undocumented_files)}):[/bold]")
        for path in summary.undocumented_files:
            console.print(f"  - {escape(path)}")

    if summary.low_coverage_files:
        console.print(f"[bold]Low coverage files ({len(summary.low_coverage_files)}):[/bold]")
        for path in summary.low_coverage_files:
            console.print(f"  - {escape(path)}")

    if report.recommendations:
        console.print("[bold]Recommendations:[/bold]")
        for recommendation in report.recommendations:
            console.print(
                f"  \\[{recommendation.priority}] {escape(recommendation.file)}: {recommendation.message}"
            )


def render_dry_run(result: DryRunResult, console: Console) -> None:
    """Print the preview produced by a dry-run scan."""
    console.print("[bold]Dry run: files that would be analyzed[/bold]")
    for path in result.source_files:
        console.print(f"  {escape(path)}")

    if result.excluded_files:
        console.print(f"[bold]Excluded source files ({len(result.excluded_files)}):[/bold]")
        for path in result.excluded_files:
            console.print(f"  {escape(path)}")

    console.print(f"Total files: {result.total_files}")
    console.print(f"Estimated lines: {result.estimated_lines}")
