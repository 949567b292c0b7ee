"""Tree-walking evaluator.

Evaluation is a post-order walk: children first, left to right, then the
node itself. Each node stores its result in its own `value` slot and the
root's value is returned. Literal nodes already carry their value.

The walk uses an explicit stack so long operator chains do not run into
the interpreter's recursion limit. The first error aborts the walk;
siblings that were not yet visited are left unevaluated.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from .debug import DebugSink, NULL_SINK
from .errors import ErrorKind, FormulaError
from .registry import Registry, default_registry
from .tree import Node, NodeKind
from .values import Value


class Evaluator:
    """Evaluates expression trees against a registry of constants and functions."""
    def __init__(self, registry: Optional[Registry] = None, debug: Optional[DebugSink] = None):
        self.registry = registry if registry is not None else default_registry()
        self.sink = debug if debug is not None else NULL_SINK

    def evaluate(self, root: Node) -> Value:
        stack: List[Tuple[Node, bool]] = [(root, False)]
        while stack:
            node, ready = stack.pop()
            if ready:
                self.apply(node)
                continue
            stack.append((node, True))
            for child in reversed(node.children):
                stack.append((child, False))
        self.sink.debug(1, f"result {root.value!r}")
        return root.value

    def apply(self, node: Node):
        kind = node.kind
        if kind is NodeKind.LITERAL:
            pass
        elif kind is NodeKind.GROUP:
            node.value = node.children[0].value
        elif kind is NodeKind.CONSTANT:
            if not self.registry.has_constant(node.name):
                raise FormulaError(ErrorKind.UNKNOWN_IDENTIFIER, node.offset, f"unknown identifier {node.name}")
            node.value = self.registry.constant(node.name).value
        elif kind is NodeKind.OPERATOR:
            node.value = self.apply_operator(node)
        elif kind is NodeKind.FUNCTION:
            node.value = self.call_function(node)
        else:
            raise NotImplementedError(f"evaluate: unexpected node kind {kind}")
        if self.sink.enabled(3):
            self.sink.debug(3, f"eval {kind.value} at {node.offset} -> {node.value!r}")

    def apply_operator(self, node: Node) -> Value:
        op = node.op
        operands = [child.value for child in node.children]
        if len(operands) != op.arity:
            raise FormulaError(
                ErrorKind.ARGUMENT_COUNT_MISMATCH, node.offset,
                f"operator {op.symbol!r} expects {op.arity} operands, got {len(operands)}",
            )
        try:
            if op.arity == 1:
                return Value.unary(operands[0], op)
            return Value.binary(operands[0], operands[1], op)
        except TypeError as e:
            raise FormulaError(ErrorKind.TYPE_MISMATCH, node.offset, str(e))
        except OverflowError as e:
            raise FormulaError(ErrorKind.TYPE_MISMATCH, node.offset, f"result out of range: {e}")
        except ZeroDivisionError as e:
            raise FormulaError(ErrorKind.DIVISION_BY_ZERO, node.offset, str(e))

    def call_function(self, node: Node) -> Value:
        if not self.registry.has_function(node.name):
            raise FormulaError(ErrorKind.UNKNOWN_FUNCTION, node.offset, f"unknown function {node.name}")
        func = self.registry.function(node.name)
        args = [child.value for child in node.children]
        if len(args) != func.arity:
            raise FormulaError(
                ErrorKind.ARGUMENT_COUNT_MISMATCH, node.offset,
                f"{func.name} expects {func.arity} arguments, got {len(args)}",
            )
        self.sink.debug(2, f"call {func.name}({', '.join(repr(a) for a in args)})")
        try:
            result = func.fn(args)
        except TypeError as e:
            raise FormulaError(ErrorKind.TYPE_MISMATCH, node.offset, f"{func.name}: {e}")
        except OverflowError as e:
            raise FormulaError(ErrorKind.TYPE_MISMATCH, node.offset, f"{func.name}: result out of range: {e}")
        except ZeroDivisionError as e:
            raise FormulaError(ErrorKind.DIVISION_BY_ZERO, node.offset, f"{func.name}: {e}")
        if not isinstance(result, Value):
            raise FormulaError(ErrorKind.TYPE_MISMATCH, node.offset, f"{func.name} did not return a Value")
        return result


def evaluate(root: Node, registry: Optional[Registry] = None, *, debug: Optional[DebugSink] = None) -> Value:
    """Evaluate an already-built tree and return the root's value."""
    return Evaluator(registry, debug).evaluate(root)
