"""Documentation coverage analysis.

This module combines file discovery, documentation source references, symbol
extraction and line-range algebra into a single ``CoverageReport``. Every
file found on disk is analyzed, documented or not, so undocumented files pull
the percentages down instead of silently disappearing from the report.
"""

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Protocol

from doccov.discovery import count_file_lines, expand_braces, scan_source_files
from doccov.docstore import DocumentationStore
from doccov.errors import ScanError, SourceReferenceError
from doccov.models import (
    CoverageReport,
    CoverageSummary,
    FileCoverage,
    Recommendation,
    ScopeSummary,
    ScopeViolation,
    SourceReference,
    Span,
    SymbolCoverage,
    percentage,
)
from doccov.parsers import extract_symbols
from doccov.ranges import (
    clamp_ranges,
    covered_line_count,
    invert_ranges,
    merge_ranges,
    range_overlaps_any,
)
from doccov.references import parse_source_reference
from doccov.validation import CoverageOptions, validate_options

logger = logging.getLogger(__name__)

DEFAULT_SCOPES = ("src", "tests")
RECOMMENDATION_MESSAGE = "Add documentation sources covering uncovered sections"
RECOMMENDATION_PRIORITY = "medium"

_GLOB_MAGIC = re.compile(r"[*?\[\]{}]")


class ProgressObserver(Protocol):
    """Callback invoked after each analyzed file.

    Observers must not raise; anything they raise is discarded and has no
    effect on the report.
    """

    def __call__(self, processed: int, total: int, path: str) -> None:
        ...


@dataclass
class _ReportContext:
    """State scoped to a single ``generate_report`` call."""
    root: Path
    line_totals: dict[str, int] = field(default_factory=dict)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def empty_report() -> CoverageReport:
    """Report returned when the documentation store cannot be read."""
    return CoverageReport(
        summary=CoverageSummary(),
        files=[],
        recommendations=[],
        generated_at=_now(),
    )


def symbol_coverage_percentage(total: int, covered: int, covered_lines: int) -> float:
    """Percentage of covered symbols.

    With no symbols at all the result is 0 when nothing in the project is
    documented and 100 otherwise.
    """
    if total == 0:
        return 0.0 if covered_lines == 0 else 100.0
    return covered / total * 100


def infer_scope_names(include: list[str] | None, thresholds: Mapping[str, float]) -> list[str]:
    """Derive scope names from include patterns and named thresholds.

    Args:
        include: Include patterns supplied by the caller, or None
        thresholds: Threshold mapping; every key except ``overall`` names a scope

    Returns:
        Top-level directories of the include patterns (``src`` and ``tests``
        when no patterns were given), followed by any threshold scopes not
        already present.
    """
    names: list[str] = []
    if include:
        for pattern in include:
            for expanded in expand_braces(pattern.replace("\\", "/")):
                top = expanded.split("/")[0]
                if top and top != "**" and not _GLOB_MAGIC.search(top) and top not in names:
                    names.append(top)
    else:
        names.extend(DEFAULT_SCOPES)

    for name in thresholds:
        if name != "overall" and name not in names:
            names.append(name)

    return names


def summarize_scopes(
    files: list[FileCoverage],
    scope_names: list[str],
    thresholds: Mapping[str, float]
) -> tuple[list[ScopeSummary], list[ScopeViolation]]:
    """Aggregate file coverage per scope and collect threshold violations."""
    scopes = []
    violations = []

    for name in scope_names:
        prefix = f"{name}/"
        members = [f for f in files if f.path.startswith(prefix)]
        total = sum(f.total_lines for f in members)
        covered = sum(f.covered_lines for f in members)
        threshold = thresholds.get(name)

        scope = ScopeSummary(
            name=name,
            total_lines=total,
            covered_lines=covered,
            coverage_percentage=percentage(covered, total),
            threshold=threshold,
        )
        scopes.append(scope)

        if threshold is not None and scope.coverage_percentage < threshold:
            violations.append(ScopeViolation(
                scope=name,
                actual=scope.coverage_percentage,
                threshold=threshold,
            ))

    return scopes, violations


def _notify_progress(observer: ProgressObserver | None, processed: int, total: int, path: str) -> None:
    if observer is None:
        return
    try:
        observer(processed, total, path)
    except Exception as e:
        logger.debug(f"Ignoring error raised by progress observer: {e}")


class CoverageAggregator:
    """Computes documentation coverage reports.

    The aggregator only holds its documentation store. All per-report state
    lives in a context object created by ``generate_report``, so one instance
    can serve repeated or concurrent calls.
    """

    def __init__(self, store: DocumentationStore):
        self.store = store

    def build_coverage_map(self) -> dict[str, list[SourceReference]]:
        """Collect parsed source references from the store, keyed by file path.

        Invalid or unsafe source strings are logged and skipped.

        Raises:
            Exception: Whatever the store raises when it cannot be read.
        """
        coverage_map: dict[str, list[SourceReference]] = {}

        for owner in self.store.get_all_reference_owners():
            for source in owner.source_strings:
                try:
                    reference = parse_source_reference(source)
                except SourceReferenceError as e:
                    logger.warning(
                        f'Skipping invalid source entry in "{owner.owner_id}" ("{owner.title}"): '
                        f'"{source}" - reason: {e}'
                    )
                    continue

                coverage_map.setdefault(reference.file_path, []).append(reference)

        return coverage_map

    def analyze_file_coverage(
        self,
        file_path: str,
        references: list[SourceReference],
        total_lines: int,
        root_dir: Path | None = None
    ) -> FileCoverage:
        """Compute line and symbol coverage for one file.

        Args:
            file_path: Project-relative path of the file
            references: All references naming this file (may be empty)
            total_lines: Line count of the file
            root_dir: Project root used to read the file. Defaults to cwd.

        Returns:
            FileCoverage whose covered and uncovered sections partition
            ``[1, total_lines]``.
        """
        covered = merge_ranges(span for reference in references for span in reference.ranges)
        if total_lines > 0 and any(reference.is_full_file for reference in references):
            covered = [Span(1, total_lines)]
        covered = clamp_ranges(covered, total_lines)

        coverage = FileCoverage(
            path=file_path,
            total_lines=total_lines,
            covered_lines=covered_line_count(covered),
            covered_sections=covered,
            uncovered_sections=invert_ranges(covered, total_lines),
        )

        root = root_dir if root_dir is not None else Path.cwd()
        try:
            source_code = (root / file_path).read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            logger.warning(f"Could not read {file_path} for symbol analysis: {e}")
            return coverage

        extraction = extract_symbols(source_code, Path(file_path).suffix.lower())
        for symbol in extraction.symbols:
            if not symbol.name:
                continue
            if symbol.kind == "function":
                coverage.functions.append(SymbolCoverage(
                    name=symbol.name,
                    span=symbol.span,
                    is_covered=range_overlaps_any(symbol.span, covered),
                ))
            elif symbol.kind == "class":
                coverage.classes.append(SymbolCoverage(
                    name=symbol.name,
                    span=symbol.span,
                    is_covered=range_overlaps_any(symbol.span, covered),
                ))

        return coverage

    def generate_report(
        self,
        options: CoverageOptions | Mapping[str, Any] | None = None,
        on_progress: ProgressObserver | None = None
    ) -> CoverageReport:
        """Generate a documentation coverage report.

        Args:
            options: CoverageOptions or a mapping of its fields
            on_progress: Optional observer called as ``(processed, total, path)``
                after each file

        Returns:
            CoverageReport. If the documentation store cannot be read, an empty
            report with 100% coverage is returned and the cause is logged.

        Raises:
            ValidationError: If options are invalid. Raised before any I/O.
        """
        options = validate_options(options)

        try:
            coverage_map = self.build_coverage_map()
        except Exception as e:
            logger.error(f"Failed to build coverage map from documentation store: {e}")
            return empty_report()

        context = _ReportContext(root=options.effective_root)

        discovered = self._discover(options)
        file_paths = list(dict.fromkeys([*discovered, *coverage_map]))

        for file_path in file_paths:
            context.line_totals[file_path] = count_file_lines(context.root / file_path)

        files = []
        for index, file_path in enumerate(file_paths, start=1):
            files.append(self.analyze_file_coverage(
                file_path,
                coverage_map.get(file_path, []),
                context.line_totals[file_path],
                context.root,
            ))
            _notify_progress(on_progress, index, len(file_paths), file_path)

        summary = self._summarize(files, options)
        recommendations = [
            Recommendation(file=path, message=RECOMMENDATION_MESSAGE, priority=RECOMMENDATION_PRIORITY)
            for path in summary.low_coverage_files
        ]

        return CoverageReport(
            summary=summary,
            files=files,
            recommendations=recommendations,
            generated_at=_now(),
        )

    def _discover(self, options: CoverageOptions) -> list[str]:
        if not options.scan_source_files:
            return []

        try:
            return scan_source_files(
                options.effective_include,
                options.effective_exclude,
                options.effective_root,
            )
        except ScanError as e:
            logger.warning(f"Filesystem scanning failed, falling back to documentation-only mode: {e}")
            return []

    def _summarize(self, files: list[FileCoverage], options: CoverageOptions) -> CoverageSummary:
        total_lines = sum(f.total_lines for f in files)
        covered_lines = sum(f.covered_lines for f in files)

        functions_total = sum(f.functions_total for f in files)
        functions_covered = sum(f.functions_covered for f in files)
        classes_total = sum(f.classes_total for f in files)
        classes_covered = sum(f.classes_covered for f in files)

        scope_names = infer_scope_names(options.include, options.thresholds)
        scopes, violations = summarize_scopes(files, scope_names, options.thresholds)

        return CoverageSummary(
            total_files=len(files),
            total_lines=total_lines,
            covered_lines=covered_lines,
            coverage_percentage=percentage(covered_lines, total_lines),
            undocumented_files=[f.path for f in files if f.coverage_percentage == 0],
            low_coverage_files=[
                f.path for f in files if 0 < f.coverage_percentage < options.threshold
            ],
            functions_total=functions_total,
            functions_covered=functions_covered,
            classes_total=classes_total,
            classes_covered=classes_covered,
            functions_coverage_percentage=symbol_coverage_percentage(
                functions_total, functions_covered, covered_lines
            ),
            classes_coverage_percentage=symbol_coverage_percentage(
                classes_total, classes_covered, covered_lines
            ),
            scopes=scopes,
            scope_threshold_violations=violations,
        )
