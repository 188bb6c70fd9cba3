"""Discovery of source files in a project tree and line counting."""

import logging
import re
from collections.abc import Iterable
from pathlib import Path

from doccov.errors import ScanError, ValidationError
from doccov.models import DryRunResult
from doccov.validation import is_valid_glob_pattern

logger = logging.getLogger(__name__)

SOURCE_EXTENSIONS = (
    ".ts", ".tsx", ".js", ".jsx", ".mjs", ".cjs",
    ".vue", ".svelte", ".astro", ".mdx", ".md",
)

NON_SOURCE_MARKERS = (
    ".d.ts", ".map", ".min.", ".bundle.", ".test.", ".spec.", ".stories.", ".config.",
)

DRY_RUN_SAMPLE_SIZE = 5

_CHUNK_SIZE = 64 * 1024
_LINE_BREAK = re.compile(r"\r?\n")
_GLOBSTAR_RUN = re.compile(r"\*{2,}")


def is_source_file(file_path: str) -> bool:
    """Check whether a path names a source file worth analyzing.

    Args:
        file_path: Path to check (any separator style)

    Returns:
        True if the path has a source extension and is not a declaration,
        map, minified, bundled, test, spec, story or config file.
    """
    lower_path = file_path.lower()

    if not lower_path.endswith(SOURCE_EXTENSIONS):
        return False

    return not any(marker in lower_path for marker in NON_SOURCE_MARKERS)


def _split_alternatives(body: str) -> list[str]:
    """Split a brace body on commas that are not nested in inner braces."""
    parts = []
    depth = 0
    current = []
    for char in body:
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
        if char == "," and depth == 0:
            parts.append("".join(current))
            current = []
        else:
            current.append(char)
    parts.append("".join(current))
    return parts


def expand_braces(pattern: str) -> list[str]:
    """Expand ``{a,b}`` alternatives into separate patterns.

    Nested groups are expanded recursively. A brace group without a comma is
    kept literally.

    Examples:
        >>> expand_braces("src/**/*.{ts,tsx}")
        ['src/**/*.ts', 'src/**/*.tsx']
    """
    depth = 0
    group_start = -1
    for index, char in enumerate(pattern):
        if char == "{":
            if depth == 0:
                group_start = index
            depth += 1
        elif char == "}" and depth > 0:
            depth -= 1
            if depth == 0:
                alternatives = _split_alternatives(pattern[group_start + 1:index])
                if len(alternatives) < 2:
                    continue
                prefix, suffix = pattern[:group_start], pattern[index + 1:]
                expanded = []
                for alternative in alternatives:
                    for candidate in expand_braces(prefix + alternative + suffix):
                        if candidate not in expanded:
                            expanded.append(candidate)
                return expanded

    return [pattern]


def collapse_globstars(pattern: str) -> str:
    """Reduce `**` inside a path segment to `*`.

    Only a whole `**` segment crosses directories; `src/**.ts` means
    `src/*.ts`.
    """
    segments = []
    for segment in pattern.split("/"):
        if segment != "**" and "**" in segment:
            segment = _GLOBSTAR_RUN.sub("*", segment)
        segments.append(segment)
    return "/".join(segments)


def _iter_matches(root: Path, patterns: Iterable[str]) -> Iterable[Path]:
    for pattern in patterns:
        for expanded in expand_braces(pattern.replace("\\", "/")):
            expanded = collapse_globstars(expanded)
            yield from root.glob(expanded)
            # Older pathlib only yields directories for a trailing "**"
            if expanded.endswith("**"):
                yield from root.glob(f"{expanded}/*")


def _is_hidden(relative_path: str) -> bool:
    return any(part.startswith(".") and part not in (".", "..") for part in relative_path.split("/"))


def _matched_files(root: Path, patterns: Iterable[str]) -> list[str]:
    """Resolve include patterns to relative POSIX file paths, in match order."""
    seen: dict[str, None] = {}
    for match in _iter_matches(root, patterns):
        relative_path = match.relative_to(root).as_posix()
        if relative_path in seen or _is_hidden(relative_path):
            continue
        if not match.is_file():
            continue
        seen[relative_path] = None
    return list(seen)


def _excluded_paths(root: Path, patterns: Iterable[str]) -> tuple[set[str], tuple[str, ...]]:
    """Resolve exclude patterns to excluded files and excluded directory prefixes."""
    files = set()
    directories = set()
    for match in _iter_matches(root, patterns):
        relative_path = match.relative_to(root).as_posix()
        if match.is_dir():
            directories.add("" if relative_path == "." else f"{relative_path}/")
        else:
            files.add(relative_path)
    return files, tuple(directories)


def _validate_patterns(include: list[str], exclude: list[str]) -> None:
    if not include:
        raise ValidationError("At least one include pattern is required for filesystem scanning")

    for pattern in [*include, *exclude]:
        if not is_valid_glob_pattern(pattern):
            raise ValidationError(
                f"Invalid glob pattern {pattern!r}: absolute paths and parent traversal are not allowed"
            )


def _apply_exclude(root: Path, files: list[str], exclude: list[str]) -> list[str]:
    if not exclude:
        return files

    excluded_files, excluded_dirs = _excluded_paths(root, exclude)
    return [
        path for path in files
        if path not in excluded_files and not path.startswith(excluded_dirs)
    ]


def scan_source_files(
    include: list[str],
    exclude: list[str] | None = None,
    root_dir: Path | None = None
) -> list[str]:
    """Find all source files matching the include patterns.

    Args:
        include: Glob patterns relative to ``root_dir`` (``*``, ``**``, ``?``,
            ``[]`` and ``{}`` are supported)
        exclude: Glob patterns to ignore; a matched directory excludes
            everything beneath it
        root_dir: Project root. Defaults to the current directory.

    Returns:
        Sorted forward-slash paths relative to ``root_dir``.

    Raises:
        ValidationError: If ``include`` is empty or any pattern is unsafe.
        ScanError: If the filesystem cannot be traversed.
    """
    exclude = list(exclude or [])
    _validate_patterns(include, exclude)

    root = Path(root_dir) if root_dir is not None else Path.cwd()

    try:
        matched = _matched_files(root, include)
        kept = _apply_exclude(root, matched, exclude)
    except (OSError, ValueError) as e:
        raise ScanError(f"Failed to scan filesystem under {root}: {e}") from e

    return sorted(path for path in kept if is_source_file(path))


def dry_run_scan(
    include: list[str],
    exclude: list[str] | None = None,
    root_dir: Path | None = None
) -> DryRunResult:
    """Preview what ``scan_source_files`` would process.

    The line estimate averages the line counts of the first few source files
    and scales by the file count, so it is an approximation only.

    Raises:
        ValidationError: If ``include`` is empty or any pattern is unsafe.
        ScanError: If the filesystem cannot be traversed.
    """
    exclude = list(exclude or [])
    source_files = scan_source_files(include, exclude, root_dir)

    root = Path(root_dir) if root_dir is not None else Path.cwd()
    try:
        all_files = _matched_files(root, include)
    except (OSError, ValueError) as e:
        raise ScanError(f"Dry run scan failed under {root}: {e}") from e

    kept = set(source_files)
    excluded_files = sorted(
        path for path in all_files if path not in kept and is_source_file(path)
    )

    estimated_lines = 0
    sample = source_files[:DRY_RUN_SAMPLE_SIZE]
    if sample:
        sample_lines = [count_file_lines(root / path) for path in sample]
        average = sum(sample_lines) / len(sample)
        estimated_lines = round(average * len(source_files))

    return DryRunResult(
        total_files=len(source_files),
        source_files=source_files,
        excluded_files=excluded_files,
        estimated_lines=estimated_lines,
    )


def count_lines_in_text(text: str) -> int:
    """Count lines, including a final line without a trailing newline."""
    if not text:
        return 0
    lines = len(_LINE_BREAK.split(text))
    return lines - 1 if text.endswith("\n") else lines


def _count_lines_streaming(path: Path) -> int:
    lines = 0
    last_char = ""
    with open(path, "r", encoding="utf-8", newline="") as f:
        while True:
            chunk = f.read(_CHUNK_SIZE)
            if not chunk:
                break
            lines += chunk.count("\n")
            last_char = chunk[-1]

    if last_char and last_char != "\n":
        lines += 1
    return lines


def count_file_lines(path: Path) -> int:
    """Count the lines of a file without loading it whole.

    Falls back to a buffered, lenient read if streaming fails (for example on
    invalid UTF-8), and to 0 if the file cannot be read at all.
    """
    try:
        return _count_lines_streaming(path)
    except (OSError, UnicodeDecodeError) as e:
        logger.debug(f"Streaming line count failed for {path} ({e}), retrying with buffered read")

    try:
        text = Path(path).read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        logger.warning(f"Could not read {path}, counting 0 lines: {e}")
        return 0

    return count_lines_in_text(text)
