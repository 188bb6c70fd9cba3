import logging
from pathlib import Path

from doccov.discovery import count_lines_in_text
from doccov.models import ExtractionResult
from doccov.parsers.base import BaseParser, ParseResult
from doccov.parsers.heuristic_parser import HeuristicParser
from doccov.parsers.structural_parser import StructuralParser

logger = logging.getLogger(__name__)

# Extension -> tree-sitter dialect
DIALECTS = {
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".tsx": "tsx",
    ".js": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".jsx": "javascript",
}

__all__ = [
    "BaseParser",
    "HeuristicParser",
    "ParseResult",
    "StructuralParser",
    "extract_symbols",
    "get_parser_for_file",
]


def get_parser_for_file(file_path: Path) -> BaseParser | None:
    """Get the structural parser for a file based on its extension.

    Args:
        file_path: Path to the source file

    Returns:
        StructuralParser for JavaScript/TypeScript files, None for anything else
    """
    dialect = DIALECTS.get(Path(file_path).suffix.lower())
    if dialect is None:
        return None
    return StructuralParser(dialect)


def extract_symbols(source_code: str, extension: str) -> ExtractionResult:
    """Extract symbol spans, preferring the syntax tree over line heuristics.

    Args:
        source_code: File content
        extension: File extension including the dot (e.g. ".ts")

    Returns:
        ExtractionResult. Files without a recognized extension get no symbols
        but still report their line count.
    """
    total_lines = count_lines_in_text(source_code)

    parser = get_parser_for_file(Path(f"file{extension}"))
    if parser is None:
        return ExtractionResult(symbols=[], total_lines=total_lines, strategy="none")

    result = parser.extract_symbols(source_code)
    if result.ok:
        return ExtractionResult(symbols=result.symbols, total_lines=total_lines, strategy=parser.name)

    logger.debug(f"Structural parse failed ({result.error}), using line heuristics")
    fallback = HeuristicParser().extract_symbols(source_code)
    return ExtractionResult(symbols=fallback.symbols, total_lines=total_lines, strategy="heuristic")
