"""Operator codes and the static operator table.

Precedence numbers follow the usual C++ operator table: a lower number
binds tighter. Unary operators are the tightest and group right to left.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict


class Associativity(Enum):
    LEFT_TO_RIGHT = 'ltr'
    RIGHT_TO_LEFT = 'rtl'


class Op(Enum):
    PLUS = 'plus'
    MINUS = 'minus'
    MULTIPLY = 'multiply'
    DIVIDE = 'divide'
    UNARY_PLUS = 'unary_plus'
    UNARY_MINUS = 'unary_minus'

    @property
    def entry(self) -> 'OperatorEntry':
        return OPERATORS[self]

    @property
    def symbol(self) -> str:
        return OPERATORS[self].symbol

    @property
    def arity(self) -> int:
        return OPERATORS[self].arity


@dataclass(frozen=True)
class OperatorEntry:
    symbol: str
    precedence: int
    associativity: Associativity
    arity: int

    def yields_to(self, stacked: 'OperatorEntry') -> bool:
        """True when `stacked` must be reduced before this operator is pushed."""
        if self.associativity is Associativity.RIGHT_TO_LEFT:
            return stacked.precedence < self.precedence
        return stacked.precedence <= self.precedence


OPERATORS: Dict[Op, OperatorEntry] = {
    Op.PLUS: OperatorEntry('+', 6, Associativity.LEFT_TO_RIGHT, 2),
    Op.MINUS: OperatorEntry('-', 6, Associativity.LEFT_TO_RIGHT, 2),
    Op.MULTIPLY: OperatorEntry('*', 5, Associativity.LEFT_TO_RIGHT, 2),
    Op.DIVIDE: OperatorEntry('/', 5, Associativity.LEFT_TO_RIGHT, 2),
    Op.UNARY_PLUS: OperatorEntry('+', 3, Associativity.RIGHT_TO_LEFT, 1),
    Op.UNARY_MINUS: OperatorEntry('-', 3, Associativity.RIGHT_TO_LEFT, 1),
}

BINARY_FORMS: Dict[str, Op] = {'+': Op.PLUS, '-': Op.MINUS, '*': Op.MULTIPLY, '/': Op.DIVIDE}
UNARY_FORMS: Dict[str, Op] = {'+': Op.UNARY_PLUS, '-': Op.UNARY_MINUS}


def resolve_operator(char: str, leading: bool) -> Op:
    """Map an operator character to its code.

    `leading` is true when no operand precedes the character in the
    current scope; `+` and `-` then take their unary form.
    """
    if leading and char in UNARY_FORMS:
        return UNARY_FORMS[char]
    return BINARY_FORMS[char]
