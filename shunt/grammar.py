"""Grammar-based front end for formulas.

This module is an alternative to the shunting-yard parser in
`shunt.parser`. The formula is fed into a Lark LALR(1) parser configured
with a small expression grammar, and the resulting parse tree is
transformed into the same `Node` tree the shunting-yard parser builds,
so both front ends share one evaluator.

Name resolution and arity checks happen in the transformer against the
registry in use. Lark's syntax errors are translated to the closest
`ErrorKind` based on the token the parser tripped over.
"""

from __future__ import annotations

from typing import Optional, Tuple

from lark import Lark, Token, v_args
from lark.exceptions import UnexpectedCharacters, UnexpectedEOF, UnexpectedToken, VisitError
from lark.visitors import Transformer_NonRecursive

from .errors import ErrorKind, FormulaError
from .operators import BINARY_FORMS, UNARY_FORMS
from .parser import DEFAULT_MAX_DEPTH
from .registry import Registry, default_registry
from .scanner import QUOTE, scan_number
from .tree import Node
from .values import Value


FORMULA_GRAMMAR = r"""
    ?start: sum

    // Binary operators, loosest first
    ?sum: product
        | sum PLUS product      -> binary
        | sum MINUS product     -> binary
    ?product: unary
        | product STAR unary    -> binary
        | product SLASH unary   -> binary

    // Prefix operators bind tightest
    ?unary: atom
        | PLUS unary            -> prefix
        | MINUS unary           -> prefix

    ?atom: NUMBER               -> number
         | STRING               -> string
         | NAME LPAR [arguments] _RPAR -> call
         | NAME                 -> constant
         | LPAR sum _RPAR       -> group
    arguments: sum (_COMMA sum)*

    // Tokens
    PLUS: "+"
    MINUS: "-"
    STAR: "*"
    SLASH: "/"
    LPAR: "("
    _RPAR: ")"
    _COMMA: ","
    NUMBER: /(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?/
    STRING: /"[^"]*"/
    NAME: /[^\W\d]\w*/

    %ignore /[ \t\r\n]+/
"""


FORMULA_PARSER = Lark(
    FORMULA_GRAMMAR,
    parser='lalr',
    propagate_positions=True,
    maybe_placeholders=False,
    lexer='basic',
)

OPERATOR_TOKENS = {'PLUS', 'MINUS', 'STAR', 'SLASH'}


@v_args(inline=True)
class TreeBuilder(Transformer_NonRecursive):
    """Transforms the raw parse tree into an expression tree."""

    def __init__(self, registry: Registry):
        super().__init__()
        self.registry = registry

    def binary(self, left, op_token, right):
        op = BINARY_FORMS[str(op_token)]
        return Node.operator(op, op_token.start_pos, [left, right])

    def prefix(self, op_token, operand):
        op = UNARY_FORMS[str(op_token)]
        return Node.operator(op, op_token.start_pos, [operand])

    def number(self, token):
        value, _ = scan_number(str(token), 0)
        return Node.literal(value, token.start_pos)

    def string(self, token):
        return Node.literal(Value.text(str(token)[1:-1]), token.start_pos)

    def constant(self, name):
        if not self.registry.has_constant(str(name)):
            raise FormulaError(ErrorKind.UNKNOWN_IDENTIFIER, name.start_pos, f"unknown identifier {name}")
        return Node.constant(str(name), name.start_pos)

    def call(self, name, lpar, args=None):
        args = args or []
        if not self.registry.has_function(str(name)):
            raise FormulaError(ErrorKind.UNKNOWN_FUNCTION, name.start_pos, f"unknown function {name}")
        func = self.registry.function(str(name))
        if len(args) != func.arity:
            raise FormulaError(
                ErrorKind.ARGUMENT_COUNT_MISMATCH, name.start_pos,
                f"{name} expects {func.arity} arguments, got {len(args)}",
            )
        return Node.call(str(name), name.start_pos, args)

    def group(self, lpar, child):
        return Node.group(child, lpar.start_pos)

    def arguments(self, *items):
        return list(items)


def paren_depth(text: str) -> Tuple[int, int, int]:
    """Scan parentheses outside quoted text.

    Returns `(final_depth, max_depth, offset_of_deepest_open)`.
    """
    depth = 0
    deepest = 0
    deepest_at = 0
    in_text = False
    for i, c in enumerate(text):
        if c == QUOTE:
            in_text = not in_text
        elif in_text:
            continue
        elif c == '(':
            depth += 1
            if depth > deepest:
                deepest = depth
                deepest_at = i
        elif c == ')':
            depth -= 1
    return depth, deepest, deepest_at


def _syntax_error(text: str, err: Exception) -> FormulaError:
    if isinstance(err, UnexpectedCharacters):
        pos = err.pos_in_stream
        if text[pos:pos + 1] == QUOTE:
            return FormulaError(ErrorKind.UNTERMINATED_STRING, pos, 'missing closing quote')
        return FormulaError(ErrorKind.UNEXPECTED_CHARACTER, pos, f"unexpected character {text[pos:pos + 1]!r}")
    token: Optional[Token] = getattr(err, 'token', None)
    if isinstance(err, UnexpectedEOF) or token is None or token.type == '$END':
        if paren_depth(text)[0] > 0:
            return FormulaError(ErrorKind.UNBALANCED_PARENTHESIS, len(text), "missing ')'")
        return FormulaError(ErrorKind.UNEXPECTED_OPERATOR, len(text), 'operator is missing its right operand')
    pos = token.start_pos
    if token.type == '_RPAR':
        return FormulaError(ErrorKind.UNBALANCED_PARENTHESIS, pos, "unexpected ')'")
    if token.type == '_COMMA':
        return FormulaError(ErrorKind.UNEXPECTED_COMMA, pos, "unexpected ','")
    if token.type in OPERATOR_TOKENS:
        return FormulaError(ErrorKind.UNEXPECTED_OPERATOR, pos, f"unexpected operator {token.value!r}")
    return FormulaError(ErrorKind.UNEXPECTED_OPERAND, pos, f"unexpected {token.value!r}")


def parse_formula_lark(text: str, registry: Optional[Registry] = None,
                       max_depth: int = DEFAULT_MAX_DEPTH) -> Node:
    """Parse a formula with the Lark grammar into an expression tree."""
    if registry is None:
        registry = default_registry()
    if not text.strip(' \t\r\n'):
        raise FormulaError(ErrorKind.EMPTY_INPUT, len(text), 'nothing to evaluate')
    _, deepest, deepest_at = paren_depth(text)
    if deepest > max_depth:
        raise FormulaError(ErrorKind.NESTING_TOO_DEEP, deepest_at, f"nesting deeper than {max_depth}")
    try:
        tree = FORMULA_PARSER.parse(text)
    except (UnexpectedCharacters, UnexpectedToken, UnexpectedEOF) as e:
        raise _syntax_error(text, e) from None
    try:
        return TreeBuilder(registry).transform(tree)
    except VisitError as e:
        if isinstance(e.orig_exc, FormulaError):
            raise e.orig_exc from None
        raise
