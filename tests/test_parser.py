import pytest

from shunt.errors import ErrorKind, FormulaError
from shunt.operators import Op
from shunt.parser import Parser, parse_formula
from shunt.tree import NodeKind, render
from shunt.values import Value


@pytest.mark.parametrize("formula, expected", [
    ("1+2*3", "(1 + (2 * 3))"),
    ("1*2+3", "((1 * 2) + 3)"),
    ("1-2-3", "((1 - 2) - 3)"),
    ("8/4/2", "((8 / 4) / 2)"),
    ("-2*3", "((-2) * 3)"),
    ("2*-3", "(2 * (-3))"),
    ("- 2 - 3", "((-2) - 3)"),
    ("1 - - 2", "(1 - (-2))"),
    ("--2", "(-(-2))"),
    ("+2", "(+2)"),
    ("(1+2)*3", "((1 + 2) * 3)"),
    ("1+2*((3+4)*2-6)", "(1 + (2 * (((3 + 4) * 2) - 6)))"),
    ("min(1+2, 3)", "min((1 + 2), 3)"),
    ("sin(Pi)", "sin(Pi)"),
    ('"junk"', '"junk"'),
    ("2.5", "2.5"),
])
def test_tree_shape(formula, expected):
    assert render(parse_formula(formula)) == expected


def test_operator_children_in_source_order():
    root = parse_formula("7 - 2")
    assert root.kind is NodeKind.OPERATOR
    assert root.op is Op.MINUS
    left, right = root.children
    assert left.value == Value.integer(7)
    assert right.value == Value.integer(2)
    assert root.offset == 2


def test_group_node_wraps_child():
    root = parse_formula("(4)")
    assert root.kind is NodeKind.GROUP
    assert len(root.children) == 1
    assert root.children[0].value == Value.integer(4)


def test_function_node():
    root = parse_formula("min (3, 2.)")
    assert root.kind is NodeKind.FUNCTION
    assert root.name == "min"
    assert [c.value for c in root.children] == [Value.integer(3), Value.double(2.0)]


def test_literal_kinds():
    assert parse_formula("12").value == Value.integer(12)
    assert parse_formula("12.").value == Value.double(12.0)
    assert parse_formula("1e2").value == Value.double(100.0)
    assert parse_formula('"a b"').value == Value.text("a b")


def test_whitespace_everywhere():
    assert render(parse_formula(" \t1 +\n2\r\n* 3 ")) == "(1 + (2 * 3))"


@pytest.mark.parametrize("formula, kind, offset", [
    ("", ErrorKind.EMPTY_INPUT, 0),
    ("   ", ErrorKind.EMPTY_INPUT, 3),
    ("()", ErrorKind.EMPTY_INPUT, 1),
    ("(1+2", ErrorKind.UNBALANCED_PARENTHESIS, 4),
    ("((1)", ErrorKind.UNBALANCED_PARENTHESIS, 4),
    ("1+2)", ErrorKind.UNBALANCED_PARENTHESIS, 3),
    ("min(3)", ErrorKind.ARGUMENT_COUNT_MISMATCH, 0),
    ("min(1, 2, 3)", ErrorKind.ARGUMENT_COUNT_MISMATCH, 0),
    ("sin()", ErrorKind.ARGUMENT_COUNT_MISMATCH, 0),
    ("foo(1)", ErrorKind.UNKNOWN_FUNCTION, 0),
    ("1 + bar", ErrorKind.UNKNOWN_IDENTIFIER, 4),
    ("pi", ErrorKind.UNKNOWN_IDENTIFIER, 0),
    ('"junk', ErrorKind.UNTERMINATED_STRING, 0),
    ('1 + "junk', ErrorKind.UNTERMINATED_STRING, 4),
    ("1, 2", ErrorKind.UNEXPECTED_COMMA, 1),
    ("(1, 2)", ErrorKind.UNEXPECTED_COMMA, 2),
    ("min(,1)", ErrorKind.UNEXPECTED_COMMA, 4),
    ("min(1,)", ErrorKind.UNEXPECTED_COMMA, 5),
    ("min(1+,2)", ErrorKind.UNEXPECTED_COMMA, 6),
    ("1 2", ErrorKind.UNEXPECTED_OPERAND, 2),
    ("2(3)", ErrorKind.UNEXPECTED_OPERAND, 1),
    ('"a" "b"', ErrorKind.UNEXPECTED_OPERAND, 4),
    ("1e", ErrorKind.UNEXPECTED_OPERAND, 1),
    ("Pi e", ErrorKind.UNEXPECTED_OPERAND, 3),
    ("*2", ErrorKind.UNEXPECTED_OPERATOR, 0),
    ("1 + * 2", ErrorKind.UNEXPECTED_OPERATOR, 4),
    ("1 +", ErrorKind.UNEXPECTED_OPERATOR, 2),
    ("(1 -)", ErrorKind.UNEXPECTED_OPERATOR, 3),
    ("1 % 2", ErrorKind.UNEXPECTED_CHARACTER, 2),
    (".", ErrorKind.UNEXPECTED_CHARACTER, 0),
    ("1 + $", ErrorKind.UNEXPECTED_CHARACTER, 4),
])
def test_parse_errors(formula, kind, offset):
    with pytest.raises(FormulaError) as info:
        parse_formula(formula)
    assert info.value.kind is kind
    assert info.value.offset == offset


def test_unknown_function_reported_before_arguments_are_parsed():
    with pytest.raises(FormulaError) as info:
        parse_formula("foo(1 +")
    assert info.value.kind is ErrorKind.UNKNOWN_FUNCTION


def test_error_message_mentions_kind_and_offset():
    with pytest.raises(FormulaError) as info:
        parse_formula("min(3)")
    assert str(info.value).startswith("ArgumentCountMismatch at offset 0")


def test_nesting_is_bounded():
    formula = "(" * 30 + "1" + ")" * 30
    assert render(parse_formula(formula, max_depth=30)) == "1"
    with pytest.raises(FormulaError) as info:
        parse_formula(formula, max_depth=29)
    assert info.value.kind is ErrorKind.NESTING_TOO_DEEP
    assert info.value.offset == 29


def test_default_nesting_bound_stops_pathological_input():
    formula = "(" * 5000 + "1" + ")" * 5000
    with pytest.raises(FormulaError) as info:
        parse_formula(formula)
    assert info.value.kind is ErrorKind.NESTING_TOO_DEEP


def test_long_operator_chain():
    formula = "+".join(["1"] * 5000)
    root = parse_formula(formula)
    assert root.op is Op.PLUS
    assert sum(1 for _ in iter_nodes(root)) == 9999


def test_parser_reusable():
    parser = Parser("1+1")
    first = parser.parse()
    second = parser.parse()
    assert first.same_shape(second)
    assert first is not second


def iter_nodes(root):
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(node.children)


def test_render_and_compare_long_chain():
    formula = "*".join(["2"] * 3000)
    root = parse_formula(formula)
    assert render(root) == "(" * 2999 + "2" + " * 2)" * 2999
    assert root.same_shape(parse_formula(formula))
    assert not root.same_shape(parse_formula(formula + "*3"))


def test_render_calls_and_unary():
    assert render(parse_formula("-min(1 + 2, -3)")) == "(-min((1 + 2), (-3)))"
