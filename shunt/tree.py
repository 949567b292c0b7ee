"""Expression tree nodes.

The parser builds one `Node` per literal, operator application,
parenthesized group, constant reference or function call. A node owns
its children exclusively; there are no back references. Each node also
has a `value` slot the evaluator fills in.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union

from .operators import Op
from .values import Kind, Value


class NodeKind(Enum):
    LITERAL = 'Literal'
    OPERATOR = 'Operator'
    GROUP = 'Group'
    CONSTANT = 'Constant'
    FUNCTION = 'Function'


@dataclass(eq=False)
class Node:
    """Base element of an expression tree."""
    kind: NodeKind
    offset: int = 0
    op: Optional[Op] = None
    name: Optional[str] = None  # constant or function name
    children: List['Node'] = field(default_factory=list)
    value: Value = field(default_factory=Value.void)

    @staticmethod
    def literal(value: Value, offset: int) -> 'Node':
        return Node(NodeKind.LITERAL, offset, value=value)

    @staticmethod
    def operator(op: Op, offset: int, operands: List['Node']) -> 'Node':
        if len(operands) != op.arity:
            raise ValueError(f"{op.name} takes {op.arity} operands, got {len(operands)}")
        return Node(NodeKind.OPERATOR, offset, op=op, children=list(operands))

    @staticmethod
    def group(child: 'Node', offset: int) -> 'Node':
        return Node(NodeKind.GROUP, offset, children=[child])

    @staticmethod
    def constant(name: str, offset: int) -> 'Node':
        return Node(NodeKind.CONSTANT, offset, name=name)

    @staticmethod
    def call(name: str, offset: int, args: List['Node']) -> 'Node':
        return Node(NodeKind.FUNCTION, offset, name=name, children=list(args))

    def same_shape(self, other: 'Node') -> bool:
        """Structural comparison ignoring offsets and evaluated values of non-literals."""
        pending = [(self, other)]
        while pending:
            a, b = pending.pop()
            if a.kind is not b.kind or a.op is not b.op or a.name != b.name:
                return False
            if a.kind is NodeKind.LITERAL and a.value != b.value:
                return False
            if len(a.children) != len(b.children):
                return False
            pending.extend(zip(a.children, b.children))
        return True

    def __str__(self) -> str:
        return render(self)


def _render_leaf(node: Node) -> str:
    if node.kind is NodeKind.LITERAL:
        if node.value.kind is Kind.TEXT:
            return '"' + node.value.as_text() + '"'
        return str(node.value)
    return node.name


def render(node: Node) -> str:
    """Fully parenthesized rendering, handy for debugging and tests."""
    parts: List[str] = []
    # Work items are nodes still to render or literal pieces of punctuation.
    work: List[Union[Node, str]] = [node]
    while work:
        item = work.pop()
        if isinstance(item, str):
            parts.append(item)
        elif item.kind in (NodeKind.LITERAL, NodeKind.CONSTANT):
            parts.append(_render_leaf(item))
        elif item.kind is NodeKind.GROUP:
            work.append(item.children[0])
        elif item.kind is NodeKind.FUNCTION:
            pieces: List[Union[Node, str]] = [f"{item.name}("]
            for i, child in enumerate(item.children):
                if i:
                    pieces.append(', ')
                pieces.append(child)
            pieces.append(')')
            work.extend(reversed(pieces))
        elif item.op.arity == 1:
            work.extend(reversed([f"({item.op.symbol}", item.children[0], ')']))
        else:
            left, right = item.children
            work.extend(reversed(['(', left, f" {item.op.symbol} ", right, ')']))
    return ''.join(parts)
