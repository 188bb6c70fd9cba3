"""Set algebra over inclusive 1-indexed line ranges."""

from collections.abc import Iterable

from doccov.models import Span


def merge_ranges(spans: Iterable[Span]) -> list[Span]:
    """Merge overlapping or adjacent spans.

    Spans are sorted by (start, end) and folded left. A span starting at most
    one line after the previous one ends is absorbed into it, so ``1-3`` and
    ``4-6`` merge into ``1-6``.

    Args:
        spans: Spans in any order. They are not modified.

    Returns:
        Sorted, pairwise-disjoint spans with at least one uncovered line
        between consecutive spans.
    """
    ordered = sorted(spans, key=lambda s: (s.start, s.end))
    if not ordered:
        return []

    merged = [Span(ordered[0].start, ordered[0].end)]
    for current in ordered[1:]:
        previous = merged[-1]
        if current.start <= previous.end + 1:
            previous.end = max(previous.end, current.end)
        else:
            merged.append(Span(current.start, current.end))

    return merged


def invert_ranges(spans: Iterable[Span], total: int) -> list[Span]:
    """Return the lines of ``[1, total]`` not covered by ``spans``.

    Args:
        spans: Covered spans; merged again here so any order is accepted.
        total: Number of lines in the file.

    Returns:
        The complementary spans, sorted. Empty when ``total <= 0``.
    """
    if total <= 0:
        return []

    merged = merge_ranges(spans)
    if not merged:
        return [Span(1, total)]

    gaps = []
    cursor = 1
    for span in merged:
        if span.start > cursor:
            gaps.append(Span(cursor, min(span.start - 1, total)))
        cursor = max(cursor, span.end + 1)
        if cursor > total:
            break

    if cursor <= total:
        gaps.append(Span(cursor, total))

    return gaps


def range_overlaps_any(span: Span, spans: Iterable[Span]) -> bool:
    """Check whether ``span`` shares at least one line with any of ``spans``."""
    return any(span.start <= other.end and span.end >= other.start for other in spans)


def clamp_ranges(spans: Iterable[Span], total: int) -> list[Span]:
    """Clip spans to ``[1, total]``, dropping those entirely outside it."""
    clamped = []
    for span in spans:
        start = max(span.start, 1)
        end = min(span.end, total)
        if start <= end:
            clamped.append(Span(start, end))
    return clamped


def covered_line_count(spans: Iterable[Span]) -> int:
    """Sum the lengths of disjoint spans."""
    return sum(len(span) for span in spans)
