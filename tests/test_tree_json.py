import json
import math

import pytest

from shunt import evaluate, parse_and_evaluate, parse_formula
from shunt.tree_json import tree_from_obj, tree_to_obj, value_from_obj, value_to_obj
from shunt.values import Value


def test_tree_to_obj_layout():
    obj = tree_to_obj(parse_formula("-min(1, 2.5)"))
    assert obj == [
        {"type": "Literal", "offset": 5, "value": {"kind": "Integer", "value": 1}},
        {"type": "Literal", "offset": 8, "value": {"kind": "Double", "value": 2.5}},
        {"type": "Function", "offset": 1, "name": "min", "arity": 2},
        {"type": "Operator", "offset": 0, "op": "unary_minus", "arity": 1},
    ]


def test_json_keeps_integer_and_float_apart():
    root = parse_formula("(2 + 2.) * Pi")
    text = json.dumps(tree_to_obj(root))
    restored = tree_from_obj(json.loads(text))
    assert restored.same_shape(root)
    assert evaluate(restored) == evaluate(root)


def test_long_chain_round_trip():
    formula = "+".join(["1"] * 3000)
    root = parse_formula(formula)
    text = json.dumps(tree_to_obj(root))
    restored = tree_from_obj(json.loads(text))
    assert restored.same_shape(root)
    assert evaluate(restored) == Value.integer(3000)


def test_long_integer_round_trip():
    formula = "7" * 5000 + " + 1"
    restored = tree_from_obj(json.loads(json.dumps(tree_to_obj(parse_formula(formula)))))
    assert evaluate(restored) == parse_and_evaluate(formula)


def test_special_floats_survive():
    v = Value.double(math.inf)
    assert value_from_obj(json.loads(json.dumps(value_to_obj(v)))) == v


def test_text_and_void_values():
    assert value_from_obj(value_to_obj(Value.text("abc"))) == Value.text("abc")
    assert value_from_obj({"kind": "Void", "value": None}).is_void


@pytest.mark.parametrize("obj", [
    {"type": "Literal", "offset": 0, "value": {"kind": "Integer", "value": 1}},
    [],
    [{"type": "Loop", "offset": 0}],
    [{"type": "Operator", "offset": 0, "op": "modulo"}],
    [
        {"type": "Literal", "value": {"kind": "Integer", "value": 1}},
        {"type": "Operator", "offset": 0, "op": "plus", "arity": 1},
    ],
    [{"type": "Group", "offset": 0}],
    [{"type": "Function", "offset": 0, "name": "min", "arity": 2}],
    [
        {"type": "Literal", "value": {"kind": "Integer", "value": 1}},
        {"type": "Literal", "value": {"kind": "Integer", "value": 2}},
    ],
    [{"type": "Literal", "offset": 0, "value": {"kind": "Complex", "value": 1}}],
    [7],
])
def test_malformed_objects_rejected(obj):
    with pytest.raises(ValueError):
        tree_from_obj(obj)
