import re

from doccov.models import Span, SymbolSpan
from doccov.parsers.base import BaseParser, ParseResult

FUNCTION_PATTERN = re.compile(r"(export\s+)?(async\s+)?function\s+([A-Za-z0-9_]+)")
ARROW_FUNCTION_PATTERN = re.compile(
    r"(export\s+)?(const|let|var)\s+([A-Za-z0-9_]+)\s*=\s*(async\s+)?\([^)]*\)\s*=>"
)
CLASS_PATTERN = re.compile(r"(export\s+)?class\s+([A-Za-z0-9_]+)")
EXPORT_PATTERN = re.compile(r"^\s*export\s+")
IMPORT_PATTERN = re.compile(r"^\s*import\s+")
# "//", " * " continuation lines, and anything else starting with "/"
COMMENT_PATTERN = re.compile(r"^\s*(//|\*|/)")


def _line_symbol(kind: str, line_number: int, name: str | None = None) -> SymbolSpan:
    return SymbolSpan(kind=kind, span=Span(line_number, line_number), name=name)


class HeuristicParser(BaseParser):
    """Line-by-line regex extraction used when structural parsing is unavailable.

    Every match is a single-line span, so symbol extents are approximate:
    a function counts as covered only if its declaration line is documented.
    """

    name = "heuristic"

    def extract_symbols(self, source_code: str) -> ParseResult:
        symbols = []

        for line_number, line in enumerate(re.split(r"\r?\n", source_code), start=1):
            if EXPORT_PATTERN.search(line):
                symbols.append(_line_symbol("export", line_number))
            if IMPORT_PATTERN.search(line):
                symbols.append(_line_symbol("import", line_number))

            match = FUNCTION_PATTERN.search(line)
            if match:
                symbols.append(_line_symbol("function", line_number, match.group(3) or "anonymous"))

            match = ARROW_FUNCTION_PATTERN.search(line)
            if match:
                symbols.append(_line_symbol("function", line_number, match.group(3) or "anonymous"))

            match = CLASS_PATTERN.search(line)
            if match:
                symbols.append(_line_symbol("class", line_number, match.group(2) or "AnonymousClass"))

            if COMMENT_PATTERN.search(line):
                symbols.append(_line_symbol("comment", line_number))

        return ParseResult(symbols=symbols)
