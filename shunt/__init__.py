# Shunt formula package
# This package provides a parser and evaluator for arithmetic formulas.
from typing import Optional

from .debug import DebugSink
from .errors import ErrorKind, FormulaError
from .evaluator import Evaluator, evaluate
from .parser import DEFAULT_MAX_DEPTH, Parser
from .parser import parse_formula as _parse_shunting_yard
from .registry import Registry, default_registry
from .tree import Node, NodeKind
from .values import Kind, Value

ENGINES = ('shunt', 'lark')


def parse_formula(text: str, registry: Optional[Registry] = None, *, engine: str = 'shunt',
                  max_depth: int = DEFAULT_MAX_DEPTH, debug: Optional[DebugSink] = None) -> Node:
    """Parse `text` into an expression tree with the selected front end."""
    if engine == 'shunt':
        return _parse_shunting_yard(text, registry, max_depth, debug)
    if engine == 'lark':
        from .grammar import parse_formula_lark
        return parse_formula_lark(text, registry, max_depth)
    raise ValueError(f"unknown engine {engine!r}; expected one of {ENGINES}")


def parse_and_evaluate(text: str, registry: Optional[Registry] = None, *, engine: str = 'shunt',
                       max_depth: int = DEFAULT_MAX_DEPTH, debug: Optional[DebugSink] = None) -> Value:
    """Parse and evaluate a formula, returning its Value or raising FormulaError."""
    root = parse_formula(text, registry, engine=engine, max_depth=max_depth, debug=debug)
    return evaluate(root, registry, debug=debug)


__all__ = [
    'parse_formula',
    'parse_and_evaluate',
    'evaluate',
    'Evaluator',
    'Parser',
    'Registry',
    'default_registry',
    'Node',
    'NodeKind',
    'Value',
    'Kind',
    'ErrorKind',
    'FormulaError',
    'DebugSink',
    'ENGINES',
]
