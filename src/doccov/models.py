from dataclasses import dataclass, field


@dataclass
class Span:
    """Represents a line range in a source file (1-indexed, inclusive)."""
    start: int
    end: int

    def __len__(self) -> int:
        return self.end - self.start + 1


@dataclass
class SourceReference:
    """A file path plus the line ranges a piece of documentation covers."""
    file_path: str
    ranges: list[Span] = field(default_factory=list)  # Empty means the whole file

    @property
    def is_full_file(self) -> bool:
        return not self.ranges


@dataclass
class SymbolSpan:
    """A code element (function, class, comment, ...) found in a file."""
    kind: str
    span: Span
    name: str | None = None  # None for imports, exports and comments


@dataclass
class ExtractionResult:
    """Symbols extracted from one file and the strategy that produced them."""
    symbols: list[SymbolSpan]
    total_lines: int
    strategy: str  # "structural", "heuristic" or "none"


@dataclass
class SymbolCoverage:
    """Whether a function or class overlaps any documented range."""
    name: str
    span: Span
    is_covered: bool


@dataclass
class FileCoverage:
    """Line and symbol coverage for a single file."""
    path: str
    total_lines: int
    covered_lines: int = 0
    covered_sections: list[Span] = field(default_factory=list)
    uncovered_sections: list[Span] = field(default_factory=list)
    functions: list[SymbolCoverage] = field(default_factory=list)
    classes: list[SymbolCoverage] = field(default_factory=list)

    @property
    def coverage_percentage(self) -> float:
        return percentage(self.covered_lines, self.total_lines)

    @property
    def functions_total(self) -> int:
        return len(self.functions)

    @property
    def functions_covered(self) -> int:
        return sum(1 for fn in self.functions if fn.is_covered)

    @property
    def classes_total(self) -> int:
        return len(self.classes)

    @property
    def classes_covered(self) -> int:
        return sum(1 for cls in self.classes if cls.is_covered)


@dataclass
class ScopeSummary:
    """Aggregated coverage for a named group of files."""
    name: str
    total_lines: int
    covered_lines: int
    coverage_percentage: float
    threshold: float | None = None  # None when no threshold configured for the scope


@dataclass
class ScopeViolation:
    """A scope whose coverage fell below its threshold."""
    scope: str
    actual: float
    threshold: float


@dataclass
class Recommendation:
    file: str
    message: str
    priority: str


@dataclass
class CoverageSummary:
    """Project-wide totals of a coverage report."""
    total_files: int = 0
    total_lines: int = 0
    covered_lines: int = 0
    coverage_percentage: float = 100.0
    undocumented_files: list[str] = field(default_factory=list)
    low_coverage_files: list[str] = field(default_factory=list)
    functions_total: int = 0
    functions_covered: int = 0
    classes_total: int = 0
    classes_covered: int = 0
    functions_coverage_percentage: float = 100.0
    classes_coverage_percentage: float = 100.0
    scopes: list[ScopeSummary] = field(default_factory=list)
    scope_threshold_violations: list[ScopeViolation] = field(default_factory=list)


@dataclass
class CoverageReport:
    """Result of one report generation."""
    summary: CoverageSummary
    files: list[FileCoverage]
    recommendations: list[Recommendation]
    generated_at: str  # ISO-8601, UTC


@dataclass
class DryRunResult:
    """Preview of what a file scan would process."""
    total_files: int
    source_files: list[str]
    excluded_files: list[str]
    estimated_lines: int


@dataclass
class ReferenceOwner:
    """A documentation store entry and the raw source strings it declares."""
    owner_id: str
    title: str
    source_strings: list[str] = field(default_factory=list)


def percentage(covered: int, total: int) -> float:
    """Return covered/total as a percentage; an empty denominator counts as 100%."""
    if total == 0:
        return 100.0
    return covered / total * 100
