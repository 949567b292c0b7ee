"""Value model for formula evaluation.

A `Value` is a tagged scalar: it is either void, an integer, a double
precision float or a piece of text. Values are immutable; arithmetic
produces new values. The promotion rules follow the host number types:
int with int stays int, anything mixed with a float becomes a float.
An integer too large for a double converts to +/-inf.

Arithmetic problems are reported with plain Python exceptions
(`TypeError` for operands of the wrong kind, `ZeroDivisionError` for
integer division by zero). The evaluator turns these into
`FormulaError` instances carrying the offending source offset.
"""

from __future__ import annotations

import math
import struct
from enum import Enum
from typing import Any, Optional, Union

from .operators import Op


class Kind(Enum):
    VOID = 'Void'
    INTEGER = 'Integer'
    FLOAT = 'Double'
    TEXT = 'Str'

    def __str__(self) -> str:
        return self.value


class Value:
    """A single typed scalar produced by parsing or evaluation."""

    __slots__ = ('_kind', '_payload')

    def __init__(self, kind: Kind = Kind.VOID, payload: Any = None):
        if kind is Kind.VOID:
            payload = None
        elif kind is Kind.INTEGER:
            if isinstance(payload, bool) or not isinstance(payload, int):
                raise TypeError(f"expected int payload, got {type(payload).__name__}")
        elif kind is Kind.FLOAT:
            if not isinstance(payload, float):
                raise TypeError(f"expected float payload, got {type(payload).__name__}")
        elif kind is Kind.TEXT:
            if not isinstance(payload, str):
                raise TypeError(f"expected str payload, got {type(payload).__name__}")
        self._kind = kind
        self._payload = payload

    # Convenience constructors
    @staticmethod
    def void() -> 'Value':
        return Value()

    @staticmethod
    def integer(value: int) -> 'Value':
        return Value(Kind.INTEGER, value)

    @staticmethod
    def double(value: float) -> 'Value':
        return Value(Kind.FLOAT, to_double(value))

    @staticmethod
    def text(data: str, length: Optional[int] = None) -> 'Value':
        """Build a text value from `data`, or from its first `length` characters."""
        if length is not None:
            if length < 0 or length > len(data):
                raise ValueError(f"text length {length} out of range for {len(data)} characters")
            data = data[:length]
        return Value(Kind.TEXT, str(data))

    @property
    def kind(self) -> Kind:
        return self._kind

    @property
    def is_void(self) -> bool:
        return self._kind is Kind.VOID

    @property
    def is_numeric(self) -> bool:
        return self._kind in (Kind.INTEGER, Kind.FLOAT)

    # Payload access always checks the kind first.
    def as_int(self) -> int:
        if self._kind is not Kind.INTEGER:
            raise TypeError(f"expected Integer, got {self._kind}")
        return self._payload

    def as_float(self) -> float:
        if self._kind is not Kind.FLOAT:
            raise TypeError(f"expected Double, got {self._kind}")
        return self._payload

    def as_text(self) -> str:
        if self._kind is not Kind.TEXT:
            raise TypeError(f"expected Str, got {self._kind}")
        return self._payload

    def as_number(self) -> Union[int, float]:
        if not self.is_numeric:
            raise TypeError(f"expected a number, got {self._kind}")
        return self._payload

    def to_python(self) -> Union[None, int, float, str]:
        return self._payload

    # Arithmetic
    @staticmethod
    def unary(operand: 'Value', op: Op) -> 'Value':
        if op not in (Op.UNARY_PLUS, Op.UNARY_MINUS):
            raise TypeError(f"{op.name} is not a unary operator")
        if operand.kind is Kind.INTEGER:
            return Value.integer(-operand._payload if op is Op.UNARY_MINUS else operand._payload)
        if operand.kind is Kind.FLOAT:
            return Value.double(-operand._payload if op is Op.UNARY_MINUS else operand._payload)
        raise TypeError(f"unary {op.symbol} expects a number, got {operand.kind}")

    @staticmethod
    def binary(left: 'Value', right: 'Value', op: Op) -> 'Value':
        if not (left.is_numeric and right.is_numeric):
            raise TypeError(f"unsupported {op.symbol} for {left.kind} and {right.kind}")
        a = left._payload
        b = right._payload
        if left.kind is Kind.INTEGER and right.kind is Kind.INTEGER:
            return Value.integer(_int_arith(a, b, op))
        return Value.double(_float_arith(to_double(a), to_double(b), op))

    # Comparison
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Value):
            return NotImplemented
        if self._kind is not other._kind:
            return False
        if self._kind is Kind.FLOAT:
            return _float_bits(self._payload) == _float_bits(other._payload)
        return self._payload == other._payload

    def __ne__(self, other: object) -> bool:
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def __hash__(self) -> int:
        if self._kind is Kind.FLOAT:
            return hash((self._kind, _float_bits(self._payload)))
        return hash((self._kind, self._payload))

    def __repr__(self) -> str:
        if self._kind is Kind.VOID:
            return 'Value(Void)'
        if self._kind is Kind.INTEGER:
            return f"Value({self._kind}, {int_to_digits(self._payload)})"
        return f"Value({self._kind}, {self._payload!r})"

    def __str__(self) -> str:
        return to_string(self)


def _int_arith(a: int, b: int, op: Op) -> int:
    if op is Op.PLUS:
        return a + b
    if op is Op.MINUS:
        return a - b
    if op is Op.MULTIPLY:
        return a * b
    if op is Op.DIVIDE:
        if b == 0:
            raise ZeroDivisionError('integer division by zero')
        # truncate toward zero like the host int type, without a float detour
        quotient = abs(a) // abs(b)
        return quotient if (a < 0) == (b < 0) else -quotient
    raise TypeError(f"{op.name} is not a binary operator")


def _float_arith(a: float, b: float, op: Op) -> float:
    if op is Op.PLUS:
        return a + b
    if op is Op.MINUS:
        return a - b
    if op is Op.MULTIPLY:
        return a * b
    if op is Op.DIVIDE:
        if b == 0.0:
            # IEEE-754 result of dividing by a signed zero
            if a == 0.0 or math.isnan(a):
                return math.nan
            return math.copysign(math.inf, a) * math.copysign(1.0, b)
        return a / b
    raise TypeError(f"{op.name} is not a binary operator")


def _float_bits(x: float) -> bytes:
    return struct.pack('<d', x)


def to_string(value: Value) -> str:
    """Render a value for display."""
    if value.kind is Kind.VOID:
        return 'void'
    if value.kind is Kind.FLOAT:
        return repr(value.as_float())
    if value.kind is Kind.INTEGER:
        return int_to_digits(value.as_int())
    return value.as_text()


# Integers are unbounded, but str()/int() refuse more than
# sys.get_int_max_str_digits() digits, so long ones go in chunks.
DIGIT_CHUNK = 1000


def to_double(n: Union[int, float]) -> float:
    """Convert to a double, saturating out-of-range integers to +/-inf."""
    try:
        return float(n)
    except OverflowError:
        return math.inf if n > 0 else -math.inf


def int_from_digits(digits: str) -> int:
    """Parse a run of decimal digits of any length, with an optional leading '-'."""
    negative = digits.startswith('-')
    if negative:
        digits = digits[1:]
    if not digits or not digits.isdigit():
        raise ValueError(f"not an integer: {digits[:20]!r}")
    n = 0
    for start in range(0, len(digits), DIGIT_CHUNK):
        chunk = digits[start:start + DIGIT_CHUNK]
        n = n * 10 ** len(chunk) + int(chunk)
    return -n if negative else n


def int_to_digits(n: int) -> str:
    """Decimal rendering of an integer of any length."""
    base = 10 ** DIGIT_CHUNK
    if -base < n < base:
        return str(n)
    sign = '-' if n < 0 else ''
    n = abs(n)
    chunks = []
    while n >= base:
        n, low = divmod(n, base)
        chunks.append(str(low).zfill(DIGIT_CHUNK))
    chunks.append(str(n))
    return sign + ''.join(reversed(chunks))
