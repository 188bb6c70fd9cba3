import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from doccov import __version__
from doccov.config import CoverageConfig, load_config
from doccov.coverage import CoverageAggregator
from doccov.discovery import dry_run_scan
from doccov.docstore import MarkdownDocumentationStore
from doccov.errors import ScanError, ValidationError
from doccov.report import exit_code_for, render_dry_run, render_report, report_to_dict

app = typer.Typer(
    help="doccov - documentation coverage for JavaScript and TypeScript projects",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)


def _configure_logging(verbose: bool) -> None:
    if verbose:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")


def _load(root: Path | None, config: Path | None) -> tuple[CoverageConfig, Path]:
    """Load configuration and return it with the directory relative paths resolve against."""
    search_dir = root if root is not None else Path.cwd()
    cfg = load_config(search_dir, config)
    base_dir = config.parent if config is not None else search_dir
    return cfg, base_dir


def _print_progress(processed: int, total: int, path: str) -> None:
    err_console.print(f"[{processed}/{total}] {path}", markup=False, highlight=False)


@app.command()
def report(
    threshold: Optional[float] = typer.Option(
        None, "--threshold", "-t", help="Minimum overall coverage percentage (0-100)"
    ),
    include: Optional[list[str]] = typer.Option(
        None, "--include", "-i", help="Glob pattern of files to analyze (repeatable)"
    ),
    exclude: Optional[list[str]] = typer.Option(
        None, "--exclude", "-e", help="Glob pattern of files to ignore (repeatable)"
    ),
    root: Optional[Path] = typer.Option(None, "--root", "-r", help="Project root directory"),
    notes: Optional[Path] = typer.Option(None, "--notes", "-n", help="Directory of Markdown notes"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Configuration file"),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
    no_scan: bool = typer.Option(False, "--no-scan", help="Only analyze documented files"),
    verbose: bool = typer.Option(False, "--verbose", "-V", help="Log progress to stderr"),
):
    """Generate a documentation coverage report.

    Exits with code 1 when coverage is below the threshold or a scope
    threshold is violated, and 2 on invalid options.

    Examples:
        doccov report --threshold 80
        doccov report -i "src/**/*.ts" -i "lib/**/*.js" --json
    """
    _configure_logging(verbose)

    try:
        cfg, base_dir = _load(root, config)
        options = cfg.to_options(
            base_dir,
            threshold=threshold,
            include=include,
            exclude=exclude,
            root_dir=root,
            scan_source_files=False if no_scan else None,
        )
    except ValidationError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=2)

    notes_dir = notes if notes is not None else options.effective_root / cfg.notes_dir
    aggregator = CoverageAggregator(MarkdownDocumentationStore(notes_dir))

    try:
        coverage_report = aggregator.generate_report(
            options, on_progress=_print_progress if verbose else None
        )
    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=2)

    if json_output:
        typer.echo(json.dumps(report_to_dict(coverage_report), indent=2))
    else:
        render_report(coverage_report, console)

    enforced = threshold if threshold is not None else cfg.overall_threshold
    exit_code = exit_code_for(coverage_report, enforced)
    if exit_code != 0:
        summary = coverage_report.summary
        if enforced is not None and summary.coverage_percentage < enforced:
            typer.echo(
                f"Coverage {summary.coverage_percentage:.2f}% is below threshold {enforced:g}%",
                err=True,
            )
        for violation in summary.scope_threshold_violations:
            typer.echo(
                f"Scope {violation.scope}: {violation.actual:.2f}% is below threshold {violation.threshold:g}%",
                err=True,
            )
        raise typer.Exit(code=exit_code)


@app.command()
def scan(
    include: Optional[list[str]] = typer.Option(
        None, "--include", "-i", help="Glob pattern of files to analyze (repeatable)"
    ),
    exclude: Optional[list[str]] = typer.Option(
        None, "--exclude", "-e", help="Glob pattern of files to ignore (repeatable)"
    ),
    root: Optional[Path] = typer.Option(None, "--root", "-r", help="Project root directory"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Configuration file"),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
):
    """Preview which files a report would analyze (dry run)."""
    try:
        cfg, base_dir = _load(root, config)
        options = cfg.to_options(base_dir, include=include, exclude=exclude, root_dir=root)
        result = dry_run_scan(options.effective_include, options.effective_exclude, options.effective_root)
    except (ValidationError, ScanError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=2)

    if json_output:
        typer.echo(json.dumps(asdict(result), indent=2))
    else:
        render_dry_run(result, console)


def _version_callback(value: bool):
    """Show version and exit."""
    if value:
        console.print(f"doccov version {__version__}")
        raise typer.Exit()


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    )):
    pass
