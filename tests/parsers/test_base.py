import pytest

from doccov.models import Span, SymbolSpan
from doccov.parsers.base import BaseParser, ParseResult


def test_cannot_instantiate_base_parser():
    with pytest.raises(TypeError) as exc_info:
        BaseParser()

    assert "abstract" in str(exc_info.value).lower()


def test_subclass_must_implement_extract_symbols():
    class IncompleteParser(BaseParser):
        pass

    with pytest.raises(TypeError) as exc_info:
        IncompleteParser()

    assert "extract_symbols" in str(exc_info.value)


def test_parse_result_ok_without_error():
    result = ParseResult(symbols=[SymbolSpan(kind="comment", span=Span(1, 1))])

    assert result.ok


def test_parse_result_with_error_is_not_ok():
    result = ParseResult(error="boom")

    assert not result.ok
    assert result.symbols == []
