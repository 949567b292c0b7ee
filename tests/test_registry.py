import math

import pytest

from shunt import parse_and_evaluate
from shunt.builtin_function import BuiltinConstant, BuiltinFunction, std_min, std_sin
from shunt.errors import ErrorKind, FormulaError
from shunt.operators import Op
from shunt.registry import Registry, default_registry
from shunt.values import Value


def test_default_registry_contents():
    registry = default_registry()
    assert sorted(registry.constants) == ['Pi', 'e']
    assert sorted(registry.functions) == ['min', 'sin']
    assert registry.function('sin').arity == 1
    assert registry.function('min').arity == 2
    assert registry.constant('Pi').value == Value.double(math.pi)
    assert default_registry() is registry


def test_registry_is_read_only():
    registry = default_registry()
    with pytest.raises(TypeError):
        registry.constants['tau'] = BuiltinConstant('tau', Value.double(2 * math.pi))
    with pytest.raises(TypeError):
        registry.functions['cos'] = BuiltinFunction('cos', 1, std_sin)


def test_names_are_case_sensitive():
    with pytest.raises(FormulaError) as info:
        parse_and_evaluate("PI")
    assert info.value.kind is ErrorKind.UNKNOWN_IDENTIFIER
    with pytest.raises(FormulaError) as info:
        parse_and_evaluate("Min(1, 2)")
    assert info.value.kind is ErrorKind.UNKNOWN_FUNCTION


def test_duplicate_names_rejected():
    with pytest.raises(ValueError):
        Registry(constants=[BuiltinConstant('x', Value.integer(1)), BuiltinConstant('x', Value.integer(2))])
    with pytest.raises(ValueError):
        Registry(functions=[BuiltinFunction('f', 1, std_sin), BuiltinFunction('f', 2, std_min)])


def test_custom_registry():
    def twice(args):
        (x,) = args
        return Value.binary(x, Value.integer(2), Op.MULTIPLY)

    def answer(args):
        return Value.integer(42)

    registry = Registry.build(
        constants={'ten': Value.integer(10)},
        functions={'twice': (1, twice), 'answer': (0, answer)},
    )
    assert parse_and_evaluate("twice(ten) + answer()", registry) == Value.integer(62)
    with pytest.raises(FormulaError) as info:
        parse_and_evaluate("Pi", registry)
    assert info.value.kind is ErrorKind.UNKNOWN_IDENTIFIER
    with pytest.raises(FormulaError) as info:
        parse_and_evaluate("answer(1)", registry)
    assert info.value.kind is ErrorKind.ARGUMENT_COUNT_MISMATCH


def test_function_returning_non_value_is_rejected():
    registry = Registry.build(functions={'bad': (0, lambda args: 3)})
    with pytest.raises(FormulaError) as info:
        parse_and_evaluate("bad()", registry)
    assert info.value.kind is ErrorKind.TYPE_MISMATCH


def test_std_min_ties_and_promotion():
    assert std_min([Value.integer(2), Value.integer(2)]) == Value.integer(2)
    assert std_min([Value.double(2.0), Value.integer(2)]) == Value.double(2.0)
    assert std_min([Value.integer(-1), Value.double(0.5)]) == Value.double(-1.0)
    with pytest.raises(TypeError):
        std_min([Value.text("a"), Value.integer(1)])


def test_std_sin():
    assert std_sin([Value.integer(0)]) == Value.double(0.0)
    assert std_sin([Value.double(3.0)]) == Value.double(math.sin(3.0))
    with pytest.raises(TypeError):
        std_sin([Value.void()])


def test_function_overflow_is_type_mismatch():
    def exp(args):
        return Value.double(math.exp(args[0].as_number()))

    registry = Registry.build(functions={'exp': (1, exp)})
    with pytest.raises(FormulaError) as info:
        parse_and_evaluate("1 + exp(1000)", registry)
    assert info.value.kind is ErrorKind.TYPE_MISMATCH
    assert info.value.offset == 4
