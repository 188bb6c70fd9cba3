from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from doccov.models import SymbolSpan


@dataclass
class ParseResult:
    """Outcome of one extraction attempt: symbols on success, a reason on failure."""
    symbols: list[SymbolSpan] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class BaseParser(ABC):
    """Abstract base class for symbol extraction strategies."""

    name: str = "base"

    @abstractmethod
    def extract_symbols(self, source_code: str) -> ParseResult:
        """Extract functions, classes, imports, exports and comments from source code.

        Implementations report failure through ``ParseResult.error`` rather
        than raising.

        Args:
            source_code: The source code to parse

        Returns:
            ParseResult with 1-indexed symbol spans
        """
        pass
