"""Shunting-yard parser for arithmetic formulas.

The parser makes a single left-to-right pass over the formula. Within
each scope (the whole formula, a parenthesized group, or one function
argument) it keeps two stacks:

* an **operand stack** of finished subtrees (literals, constants,
  calls, groups and already-reduced operator applications), and
* an **operator stack** of operators still waiting for their operands.

Before an operator is pushed, every stacked operator that binds at least
as tightly is *reduced*: it pops as many operands as its arity, adopts
them as children in source order and pushes the resulting subtree back
on the operand stack. At the end of a scope the remaining operators are
reduced the same way, which leaves exactly one tree per scope.

Groups and argument lists are parsed by recursive calls that share the
parser's cursor. Nesting depth is bounded by `max_depth`.

The `parse_formula` function is the public entry point and returns the
root `Node` of the expression tree.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from .debug import DebugSink, NULL_SINK
from .errors import ErrorKind, FormulaError
from .operators import Op, resolve_operator
from .registry import Registry, default_registry
from .scanner import (
    is_comma, is_group_close, is_group_open, is_letter, is_operator, is_quote,
    scan_identifier, scan_number, scan_text, skip_space,
)
from .tree import Node

DEFAULT_MAX_DEPTH = 200

# categories of the previous token within the current scope
OPERAND = 'operand'
OPERATOR = 'operator'
SEPARATOR = 'comma'


class _Scope:
    """Working state for one group, argument list or the whole formula."""
    def __init__(self, in_group: bool, in_args: bool):
        self.in_group = in_group
        self.in_args = in_args
        self.operands: List[Node] = []
        self.operators: List[Tuple[Op, int]] = []
        self.args: List[Node] = []
        self.last: Optional[str] = None
        self.last_offset = 0

    def reset_segment(self):
        self.operands = []
        self.operators = []


class Parser:
    def __init__(self, text: str, registry: Optional[Registry] = None,
                 max_depth: int = DEFAULT_MAX_DEPTH, debug: Optional[DebugSink] = None):
        self.text = text
        self.pos = 0
        self.registry = registry if registry is not None else default_registry()
        self.max_depth = max_depth
        self.sink = debug if debug is not None else NULL_SINK

    def error(self, kind: ErrorKind, offset: int, message: str = '') -> FormulaError:
        return FormulaError(kind, offset, message)

    def parse(self) -> Node:
        self.pos = 0
        self.sink.debug(1, f"parse {self.text!r}")
        (root,) = self.parse_scope(0, in_group=False, in_args=False)
        return root

    def parse_scope(self, depth: int, in_group: bool, in_args: bool) -> List[Node]:
        """Parse until the closing bracket of this scope (or end of input).

        Returns the finished argument trees: exactly one for the formula
        and for groups, zero or more for argument lists.
        """
        scope = _Scope(in_group, in_args)
        text = self.text
        while True:
            pos = skip_space(text, self.pos)
            self.pos = pos
            if pos >= len(text):
                if in_group:
                    raise self.error(ErrorKind.UNBALANCED_PARENTHESIS, len(text), "missing ')'")
                break
            c = text[pos]
            if is_group_close(text, pos):
                if not in_group:
                    raise self.error(ErrorKind.UNBALANCED_PARENTHESIS, pos, "unmatched ')'")
                self.pos = pos + 1
                break
            if is_comma(text, pos):
                if not in_args or scope.last != OPERAND:
                    raise self.error(ErrorKind.UNEXPECTED_COMMA, pos, "unexpected ','")
                scope.args.append(self.finish_segment(scope, pos))
                scope.reset_segment()
                scope.last = SEPARATOR
                scope.last_offset = pos
                self.pos = pos + 1
                continue
            if is_operator(text, pos):
                self.parse_operator(scope, c, pos)
                continue
            if is_group_open(text, pos):
                self.expect_operand(scope, pos)
                self.check_depth(depth, pos)
                self.pos = pos + 1
                (child,) = self.parse_scope(depth + 1, in_group=True, in_args=False)
                self.push_operand(scope, Node.group(child, pos))
                continue
            if is_quote(text, pos):
                self.expect_operand(scope, pos)
                scanned = scan_text(text, pos)
                if scanned is None:
                    raise self.error(ErrorKind.UNTERMINATED_STRING, pos, 'missing closing quote')
                value, self.pos = scanned
                self.push_operand(scope, Node.literal(value, pos))
                continue
            scanned = scan_number(text, pos)
            if scanned is not None:
                self.expect_operand(scope, pos)
                value, self.pos = scanned
                self.push_operand(scope, Node.literal(value, pos))
                continue
            if is_letter(text, pos):
                self.expect_operand(scope, pos)
                self.push_operand(scope, self.parse_name(depth, pos))
                continue
            raise self.error(ErrorKind.UNEXPECTED_CHARACTER, pos, f"unexpected character {c!r}")

        end = self.pos - 1 if in_group else self.pos
        if scope.last == SEPARATOR:
            raise self.error(ErrorKind.UNEXPECTED_COMMA, scope.last_offset, 'missing argument after \',\'')
        if scope.last is None and in_args:
            return scope.args
        scope.args.append(self.finish_segment(scope, end))
        return scope.args

    def parse_operator(self, scope: _Scope, c: str, pos: int):
        op = resolve_operator(c, scope.last != OPERAND)
        if op.arity == 2 and scope.last != OPERAND:
            raise self.error(ErrorKind.UNEXPECTED_OPERATOR, pos, f"operator {c!r} is missing its left operand")
        entry = op.entry
        while scope.operators and entry.yields_to(scope.operators[-1][0].entry):
            self.reduce(scope)
        scope.operators.append((op, pos))
        scope.last = OPERATOR
        scope.last_offset = pos
        self.pos = pos + 1
        self.sink.debug(3, f"token {op.name} at {pos}")

    def parse_name(self, depth: int, pos: int) -> Node:
        text = self.text
        name, end = scan_identifier(text, pos)
        look = skip_space(text, end)
        if is_group_open(text, look):
            if not self.registry.has_function(name):
                raise self.error(ErrorKind.UNKNOWN_FUNCTION, pos, f"unknown function {name}")
            self.check_depth(depth, look)
            self.pos = look + 1
            args = self.parse_scope(depth + 1, in_group=True, in_args=True)
            func = self.registry.function(name)
            if len(args) != func.arity:
                raise self.error(
                    ErrorKind.ARGUMENT_COUNT_MISMATCH, pos,
                    f"{name} expects {func.arity} arguments, got {len(args)}",
                )
            self.sink.debug(3, f"token call {name}/{len(args)} at {pos}")
            return Node.call(name, pos, args)
        if not self.registry.has_constant(name):
            raise self.error(ErrorKind.UNKNOWN_IDENTIFIER, pos, f"unknown identifier {name}")
        self.pos = end
        self.sink.debug(3, f"token constant {name} at {pos}")
        return Node.constant(name, pos)

    def expect_operand(self, scope: _Scope, pos: int):
        if scope.last == OPERAND:
            raise self.error(ErrorKind.UNEXPECTED_OPERAND, pos, 'operand follows another operand')

    def check_depth(self, depth: int, pos: int):
        if depth + 1 > self.max_depth:
            raise self.error(ErrorKind.NESTING_TOO_DEEP, pos, f"nesting deeper than {self.max_depth}")

    def push_operand(self, scope: _Scope, node: Node):
        scope.operands.append(node)
        scope.last = OPERAND
        scope.last_offset = node.offset
        if self.sink.enabled(3):
            self.sink.debug(3, f"token {node.kind.value} {node} at {node.offset}")

    def reduce(self, scope: _Scope):
        op, offset = scope.operators.pop()
        arity = op.arity
        if len(scope.operands) < arity:
            raise self.error(ErrorKind.UNEXPECTED_OPERATOR, offset, f"operator {op.symbol!r} is missing an operand")
        operands = scope.operands[-arity:]
        del scope.operands[-arity:]
        node = Node.operator(op, offset, operands)
        scope.operands.append(node)
        self.sink.debug(2, f"reduce {op.name} at {offset}")

    def finish_segment(self, scope: _Scope, end: int) -> Node:
        """Reduce what is left of the current segment to a single tree."""
        if scope.last is None or scope.last == SEPARATOR:
            raise self.error(ErrorKind.EMPTY_INPUT, end, 'nothing to evaluate')
        if scope.last == OPERATOR:
            raise self.error(
                ErrorKind.UNEXPECTED_OPERATOR, scope.last_offset,
                'operator is missing its right operand',
            )
        while scope.operators:
            self.reduce(scope)
        if len(scope.operands) != 1:
            raise self.error(ErrorKind.UNEXPECTED_OPERAND, scope.operands[1].offset, 'operand follows another operand')
        return scope.operands[0]


def parse_formula(text: str, registry: Optional[Registry] = None,
                  max_depth: int = DEFAULT_MAX_DEPTH, debug: Optional[DebugSink] = None) -> Node:
    """Parse a formula into an expression tree.

    Any problem is raised as a `FormulaError` carrying the error kind
    and the character offset where it was detected.
    """
    return Parser(text, registry, max_depth, debug).parse()
