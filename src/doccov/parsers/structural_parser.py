import tree_sitter_javascript
import tree_sitter_typescript
from tree_sitter import Language, Parser

from doccov.models import Span, SymbolSpan
from doccov.parsers.base import BaseParser, ParseResult

FUNCTION_DECLARATIONS = ("function_declaration", "generator_function_declaration")
FUNCTION_VALUES = ("arrow_function", "function_expression", "function", "generator_function")
CLASS_DECLARATIONS = ("class_declaration", "abstract_class_declaration")
METHOD_MEMBERS = ("method_definition", "abstract_method_signature")
IMPORT_STATEMENTS = ("import_statement", "import_alias")


def _load_language(dialect: str) -> Language:
    if dialect == "typescript":
        return Language(tree_sitter_typescript.language_typescript())
    if dialect == "tsx":
        return Language(tree_sitter_typescript.language_tsx())
    if dialect == "javascript":
        return Language(tree_sitter_javascript.language())
    raise ValueError(f"Unsupported dialect: {dialect}")


def _decorated_start_row(node) -> int:
    """First row of a declaration, including decorators held by its parent.

    Decorators on an exported class belong to the `export_statement` and
    method decorators sit in the class body, so both precede the node as
    siblings rather than children.
    """
    start = node.start_point[0]
    sibling = node.prev_sibling
    while sibling is not None and sibling.type in ("decorator", "export"):
        if sibling.type == "decorator":
            start = min(start, sibling.start_point[0])
        sibling = sibling.prev_sibling
    return start


class StructuralParser(BaseParser):
    """Parser for extracting symbols from JavaScript/TypeScript using tree-sitter."""

    name = "structural"

    def __init__(self, dialect: str = "typescript"):
        self.dialect = dialect
        self.language = _load_language(dialect)
        self.parser = Parser(self.language)

    def extract_symbols(self, source_code: str) -> ParseResult:
        """Walk the whole syntax tree and record symbol spans.

        A tree containing syntax errors is reported as a failure so the caller
        can fall back to line heuristics.

        Args:
            source_code: JavaScript or TypeScript source

        Returns:
            ParseResult with symbols in document order, or an error message
        """
        source_bytes = bytes(source_code, "utf8")
        try:
            tree = self.parser.parse(source_bytes)
        except (ValueError, TypeError, RuntimeError) as e:
            return ParseResult(error=f"tree-sitter failed: {e}")

        root = tree.root_node
        if root.has_error:
            return ParseResult(error=f"syntax errors in {self.dialect} source")

        symbols = []
        stack = [root]
        while stack:
            node = stack.pop()
            symbols.extend(self._symbols_for_node(node, source_bytes))
            stack.extend(reversed(node.children))

        return ParseResult(symbols=symbols)

    def _symbols_for_node(self, node, source_bytes: bytes) -> list[SymbolSpan]:
        """Return the symbols a single node contributes (not its descendants)."""
        if node.type in FUNCTION_DECLARATIONS:
            name = self._field_text(node, "name", source_bytes)
            return [self._symbol("function", node, name)] if name else []

        if node.type == "variable_declarator":
            value = node.child_by_field_name("value")
            name_node = node.child_by_field_name("name")
            if value is not None and value.type in FUNCTION_VALUES and name_node is not None \
                    and name_node.type == "identifier":
                return [self._symbol("function", node, self._text(name_node, source_bytes))]
            return []

        if node.type in CLASS_DECLARATIONS:
            name = self._field_text(node, "name", source_bytes)
            if not name:
                return []
            return [self._symbol("class", node, name), *self._methods(node, source_bytes)]

        if node.type == "interface_declaration":
            return [self._symbol("interface", node, self._field_text(node, "name", source_bytes))]

        if node.type in IMPORT_STATEMENTS:
            return [self._symbol("import", node)]

        if node.type == "export_statement":
            return [self._symbol("export", node)]

        if node.type == "comment":
            return [self._symbol("comment", node)]

        return []

    def _methods(self, class_node, source_bytes: bytes) -> list[SymbolSpan]:
        """Extract method definitions directly inside a class body."""
        methods = []
        body = class_node.child_by_field_name("body")
        if body is None:
            return methods

        for member in body.children:
            if member.type in METHOD_MEMBERS:
                name = self._field_text(member, "name", source_bytes)
                if name:
                    methods.append(self._symbol("method", member, name))

        return methods

    @staticmethod
    def _symbol(kind: str, node, name: str | None = None) -> SymbolSpan:
        # tree-sitter rows are 0-indexed
        span = Span(start=_decorated_start_row(node) + 1, end=node.end_point[0] + 1)
        return SymbolSpan(kind=kind, span=span, name=name)

    @staticmethod
    def _text(node, source_bytes: bytes) -> str:
        return source_bytes[node.start_byte:node.end_byte].decode("utf8", errors="replace")

    def _field_text(self, node, field: str, source_bytes: bytes) -> str | None:
        child = node.child_by_field_name(field)
        if child is None:
            return None
        return self._text(child, source_bytes)
