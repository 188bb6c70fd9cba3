"""Tests for source reference parsing."""

import pytest

from doccov.errors import InvalidFormatError, SourceReferenceError, UnsafePathError
from doccov.models import Span
from doccov.references import parse_ranges, parse_source_reference


class TestParseSourceReference:
    """Tests for parse_source_reference."""

    def test_path_only_means_whole_file(self):
        reference = parse_source_reference("src/a.ts")

        assert reference.file_path == "src/a.ts"
        assert reference.ranges == []
        assert reference.is_full_file

    def test_single_range(self):
        reference = parse_source_reference("src/a.ts:10-20")

        assert reference.file_path == "src/a.ts"
        assert reference.ranges == [Span(10, 20)]
        assert not reference.is_full_file

    def test_multiple_ranges_keep_order(self):
        reference = parse_source_reference("src/a.ts:20-30,1-10")

        assert reference.ranges == [Span(20, 30), Span(1, 10)]

    def test_whitespace_is_tolerated(self):
        reference = parse_source_reference("  src/a.ts : 1 - 5 , 7-9 ")

        assert reference.file_path == "src/a.ts"
        assert reference.ranges == [Span(1, 5), Span(7, 9)]

    @pytest.mark.parametrize("text", ["src/a.ts:", "src/a.ts:   "])
    def test_colon_without_ranges_rejected(self, text):
        """A dangling colon is a typo, not a whole-file reference."""
        with pytest.raises(InvalidFormatError, match="Missing line ranges"):
            parse_source_reference(text)

    def test_single_line_range(self):
        assert parse_source_reference("src/a.ts:4-4").ranges == [Span(4, 4)]

    def test_path_is_normalized(self):
        assert parse_source_reference("./src/lib/../a.ts").file_path == "src/a.ts"
        assert parse_source_reference("src\\win\\a.ts").file_path == "src/win/a.ts"

    @pytest.mark.parametrize("text", ["", "   ", None])
    def test_empty_source_rejected(self, text):
        with pytest.raises(InvalidFormatError, match="empty"):
            parse_source_reference(text)

    def test_missing_path_rejected(self):
        with pytest.raises(InvalidFormatError):
            parse_source_reference(":1-5")

    @pytest.mark.parametrize("text", [
        "src/a.ts:abc",
        "src/a.ts:10-x",
        "src/a.ts:10",
        "src/a.ts:1-5,",
        "src/a.ts:-3-5",
        "src/a.ts:1.5-3",
    ])
    def test_malformed_ranges_rejected(self, text):
        with pytest.raises(InvalidFormatError):
            parse_source_reference(text)

    def test_zero_line_rejected(self):
        with pytest.raises(InvalidFormatError, match="positive"):
            parse_source_reference("src/a.ts:0-5")

    def test_reversed_range_rejected(self):
        with pytest.raises(InvalidFormatError, match=">= start"):
            parse_source_reference("src/a.ts:9-3")

    @pytest.mark.parametrize("text", [
        "/etc/passwd:1-1",
        "/etc/passwd",
        "../outside.ts",
        "src/../../outside.ts:1-2",
        "..",
        "src/a\x00.ts",
    ])
    def test_unsafe_paths_rejected(self, text):
        with pytest.raises(UnsafePathError):
            parse_source_reference(text)

    def test_windows_drive_path_rejected(self):
        """A drive letter splits at the first colon, so the range part is malformed."""
        with pytest.raises(SourceReferenceError):
            parse_source_reference("C:\\secret\\a.ts")

    def test_errors_are_value_errors(self):
        with pytest.raises(ValueError):
            parse_source_reference("/abs.ts")


class TestParseRanges:
    """Tests for parse_ranges."""

    def test_parses_list(self):
        assert parse_ranges("1-2,4-8") == [Span(1, 2), Span(4, 8)]

    def test_empty_part_rejected(self):
        with pytest.raises(InvalidFormatError):
            parse_ranges("1-2,,4-8")
