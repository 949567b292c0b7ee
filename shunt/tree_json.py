"""JSON serialization/deserialization for expression trees.

A tree is stored as a flat list of node objects in post-order: every
node comes after its children and records how many it has under
`"arity"`. Rebuilding is a single pass with a stack, and the JSON stays
two levels deep however long the formula is, so neither direction runs
into a recursion limit.

Values keep their kind, so an Integer `2` and a Double `2.0` survive the
round trip. Integers too long for the json module's int conversion are
stored as digit strings.
"""

from __future__ import annotations

from typing import Any, Dict, List, Tuple

from .operators import Op
from .tree import Node, NodeKind
from .values import DIGIT_CHUNK, Kind, Value, int_from_digits, int_to_digits


def value_to_obj(v: Value) -> Dict[str, Any]:
    if v.kind is Kind.INTEGER and abs(v.as_int()) >= 10 ** DIGIT_CHUNK:
        return {"kind": v.kind.value, "value": int_to_digits(v.as_int())}
    return {"kind": v.kind.value, "value": v.to_python()}


def value_from_obj(o: Dict[str, Any]) -> Value:
    try:
        kind = Kind(o["kind"])
    except ValueError:
        raise ValueError(f"unknown value kind {o['kind']!r}")
    if kind is Kind.VOID:
        return Value.void()
    if kind is Kind.FLOAT:
        return Value.double(o["value"])
    if kind is Kind.INTEGER and isinstance(o["value"], str):
        return Value.integer(int_from_digits(o["value"]))
    return Value(kind, o["value"])


def node_to_obj(node: Node) -> Dict[str, Any]:
    obj: Dict[str, Any] = {"type": node.kind.value, "offset": node.offset}
    if node.kind is NodeKind.LITERAL:
        obj["value"] = value_to_obj(node.value)
    if node.kind is NodeKind.OPERATOR:
        obj["op"] = node.op.value
    if node.kind in (NodeKind.CONSTANT, NodeKind.FUNCTION):
        obj["name"] = node.name
    if node.children:
        obj["arity"] = len(node.children)
    return obj


def node_from_obj(o: Dict[str, Any], children: List[Node]) -> Node:
    try:
        kind = NodeKind(o["type"])
    except ValueError:
        raise ValueError(f"unknown node type {o['type']!r}")
    offset = int(o.get("offset", 0))
    if kind is NodeKind.LITERAL:
        return Node.literal(value_from_obj(o["value"]), offset)
    if kind is NodeKind.OPERATOR:
        try:
            op = Op(o["op"])
        except ValueError:
            raise ValueError(f"unknown operator {o['op']!r}")
        return Node.operator(op, offset, children)
    if kind is NodeKind.GROUP:
        if len(children) != 1:
            raise ValueError(f"group needs exactly one child, got {len(children)}")
        return Node.group(children[0], offset)
    if kind is NodeKind.CONSTANT:
        return Node.constant(o["name"], offset)
    return Node.call(o["name"], offset, children)


def tree_to_obj(root: Node) -> List[Dict[str, Any]]:
    """Flatten a tree into a post-order list of node objects."""
    nodes: List[Dict[str, Any]] = []
    stack: List[Tuple[Node, bool]] = [(root, False)]
    while stack:
        node, ready = stack.pop()
        if ready:
            nodes.append(node_to_obj(node))
            continue
        stack.append((node, True))
        for child in reversed(node.children):
            stack.append((child, False))
    return nodes


def tree_from_obj(nodes: List[Dict[str, Any]]) -> Node:
    """Rebuild a tree from the list `tree_to_obj` produces."""
    if not isinstance(nodes, list):
        raise ValueError(f"tree must be a list of nodes, got {type(nodes).__name__}")
    built: List[Node] = []
    for o in nodes:
        if not isinstance(o, dict):
            raise ValueError(f"tree node must be an object, got {type(o).__name__}")
        arity = o.get("arity", 0)
        if not isinstance(arity, int) or arity < 0 or arity > len(built):
            raise ValueError(f"bad arity {arity!r} with {len(built)} nodes built")
        split = len(built) - arity
        node = node_from_obj(o, built[split:])
        del built[split:]
        built.append(node)
    if len(built) != 1:
        raise ValueError(f"tree must have exactly one root, got {len(built)}")
    return built[0]
