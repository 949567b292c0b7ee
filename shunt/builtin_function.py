import math
from dataclasses import dataclass
from typing import Callable, List

from shunt.values import Kind, Value, to_double


@dataclass(frozen=True)
class BuiltinFunction:
    name: str
    arity: int
    fn: Callable[[List[Value]], Value]
    def __repr__(self) -> str:
        return f"<builtin {self.name}/{self.arity}>"


@dataclass(frozen=True)
class BuiltinConstant:
    name: str
    value: Value
    def __repr__(self) -> str:
        return f"<constant {self.name}={self.value}>"


def std_sin(args: List[Value]) -> Value:
    (x,) = args
    angle = to_double(x.as_number())
    if math.isinf(angle):
        return Value.double(math.nan)
    return Value.double(math.sin(angle))


def std_min(args: List[Value]) -> Value:
    a, b = args
    if not (a.is_numeric and b.is_numeric):
        raise TypeError(f"min expects numbers, got {a.kind} and {b.kind}")
    if a.kind is Kind.INTEGER and b.kind is Kind.INTEGER:
        return a if a.as_int() <= b.as_int() else b
    left, right = to_double(a.as_number()), to_double(b.as_number())
    return Value.double(left if left <= right else right)
