from doccov.models import Span
from doccov.parsers.heuristic_parser import HeuristicParser


def kinds(symbols, kind):
    return [s for s in symbols if s.kind == kind]


def test_extract_function_declarations():
    source = """function first() {}
export async function second() {}
"""
    result = HeuristicParser().extract_symbols(source)

    functions = kinds(result.symbols, "function")
    assert [f.name for f in functions] == ["first", "second"]
    assert functions[1].span == Span(2, 2)


def test_extract_arrow_functions():
    source = """const add = (a, b) => a + b;
export const load = async () => {
let helper = x => x;
"""
    result = HeuristicParser().extract_symbols(source)

    # Arrow functions without parenthesized parameters are not recognized
    assert [f.name for f in kinds(result.symbols, "function")] == ["add", "load"]


def test_extract_classes():
    source = """class Plain {}
export class Exported extends Base {
"""
    result = HeuristicParser().extract_symbols(source)

    classes = kinds(result.symbols, "class")
    assert [c.name for c in classes] == ["Plain", "Exported"]
    assert classes[0].span == Span(1, 1)


def test_extract_imports_and_exports():
    source = """import { x } from './x';
  import y from 'y';
export default x;
const notExported = 1;
"""
    result = HeuristicParser().extract_symbols(source)

    assert [s.span.start for s in kinds(result.symbols, "import")] == [1, 2]
    assert [s.span.start for s in kinds(result.symbols, "export")] == [3]


def test_extract_comments():
    source = """// line comment
/**
 * doc comment
 */
const x = 1;
"""
    result = HeuristicParser().extract_symbols(source)

    assert [s.span.start for s in kinds(result.symbols, "comment")] == [1, 2, 3, 4]


def test_spans_are_single_lines():
    source = """export function spread(
  a,
  b
) {
  return a + b;
}
"""
    result = HeuristicParser().extract_symbols(source)

    assert all(s.span.start == s.span.end for s in result.symbols)


def test_never_fails():
    result = HeuristicParser().extract_symbols("}{ ]]] not even code (((")

    assert result.ok
    assert result.symbols == []


def test_empty_source():
    result = HeuristicParser().extract_symbols("")

    assert result.ok
    assert result.symbols == []
