"""Parsing of documentation source reference strings.

A reference names a project file and, optionally, the line ranges that a
note documents::

    src/auth/session.ts
    src/auth/session.ts:10-42
    src/auth/session.ts:1-5,20-30

A reference without ranges covers the whole file.
"""

import re

from doccov.errors import InvalidFormatError, UnsafePathError
from doccov.models import SourceReference, Span
from doccov.validation import is_safe_relative_path, normalize_relative_path

_RANGE = re.compile(r"^\s*(\d+)\s*-\s*(\d+)\s*$")


def parse_ranges(range_text: str) -> list[Span]:
    """Parse ``START-END(,START-END)*`` into spans.

    Raises:
        InvalidFormatError: If any range is malformed, non-positive, or reversed.
    """
    spans = []
    for part in range_text.split(","):
        match = _RANGE.match(part)
        if not match:
            raise InvalidFormatError(f"Invalid range {part.strip()!r}, expected START-END")

        start, end = int(match.group(1)), int(match.group(2))
        if start < 1:
            raise InvalidFormatError(f"Line numbers must be positive: {part.strip()!r}")
        if end < start:
            raise InvalidFormatError(f"Range end must be >= start: {part.strip()!r}")

        spans.append(Span(start, end))

    return spans


def parse_source_reference(text: str) -> SourceReference:
    """Parse a source reference string.

    Everything after the first colon is the range list, which must hold at
    least one range.

    Args:
        text: Reference in the form ``path`` or ``path:START-END[,START-END...]``

    Returns:
        SourceReference with a normalized project-relative path. ``ranges`` is
        empty when the reference covers the whole file.

    Raises:
        InvalidFormatError: If the string is empty, or the range list is missing
            after a colon or malformed.
        UnsafePathError: If the path is absolute, traverses above the project
            root, or contains NUL bytes.
    """
    stripped = (text or "").strip()
    if not stripped:
        raise InvalidFormatError("Source string is empty")

    path, colon, range_text = stripped.partition(":")
    path = path.strip()
    range_text = range_text.strip()
    if not path:
        raise InvalidFormatError(f"Missing file path in source string {text!r}")
    if colon and not range_text:
        raise InvalidFormatError(f"Missing line ranges after ':' in source string {text!r}")

    ranges = parse_ranges(range_text) if colon else []

    if not is_safe_relative_path(path):
        raise UnsafePathError(
            f"Invalid source file path: {path!r}. Only project-relative paths are "
            "allowed and parent traversal is forbidden."
        )

    return SourceReference(file_path=normalize_relative_path(path), ranges=ranges)
