#!/usr/bin/env python3
# jsrepl/engine/nodes.py
from __future__ import annotations

"""
Syntax tree node classes.

Every node is a dataclass registered under its class name. `to_data`
turns a tree into plain dicts/lists (each node tagged with "type") and
`node_from_data` rebuilds an equal tree from that form.
"""

from dataclasses import dataclass, field, fields
from typing import Any, Optional

NODE_TYPES: dict[str, type["Node"]] = {}


def node(cls):
    """Class decorator: make `cls` a dataclass and register it by name."""
    cls = dataclass(cls)
    NODE_TYPES[cls.__name__] = cls
    return cls


class Node:
    """Base class for all syntax tree nodes."""


# ---------------------------------------------------------------------------
# Program & statements
# ---------------------------------------------------------------------------

@node
class Program(Node):
    body: list[Node] = field(default_factory=list)


@node
class VarDeclarator(Node):
    name: str
    init: Optional[Node] = None


@node
class VarDeclaration(Node):
    kind: str                       # 'var' | 'let' | 'const'
    declarations: list[VarDeclarator] = field(default_factory=list)


@node
class FunctionDeclaration(Node):
    name: str
    params: list[str] = field(default_factory=list)
    body: list[Node] = field(default_factory=list)


@node
class ReturnStatement(Node):
    argument: Optional[Node] = None


@node
class IfStatement(Node):
    test: Node
    consequent: Node
    alternate: Optional[Node] = None


@node
class WhileStatement(Node):
    test: Node
    body: Node


@node
class DoWhileStatement(Node):
    body: Node
    test: Node


@node
class ForStatement(Node):
    init: Optional[Node]
    test: Optional[Node]
    update: Optional[Node]
    body: Node


@node
class BreakStatement(Node):
    pass


@node
class ContinueStatement(Node):
    pass


@node
class BlockStatement(Node):
    body: list[Node] = field(default_factory=list)


@node
class ThrowStatement(Node):
    argument: Node


@node
class TryStatement(Node):
    block: BlockStatement
    param: Optional[str] = None
    handler: Optional[BlockStatement] = None
    finalizer: Optional[BlockStatement] = None


@node
class ExpressionStatement(Node):
    expression: Node


@node
class EmptyStatement(Node):
    pass


# ---------------------------------------------------------------------------
# Expressions
# ---------------------------------------------------------------------------

@node
class Literal(Node):
    value: Any                      # float | str | bool | None


@node
class Identifier(Node):
    name: str


@node
class ThisExpression(Node):
    pass


@node
class ArrayExpression(Node):
    elements: list[Node] = field(default_factory=list)


@node
class Property(Node):
    key: str
    value: Node


@node
class ObjectExpression(Node):
    properties: list[Property] = field(default_factory=list)


@node
class FunctionExpression(Node):
    name: Optional[str] = None
    params: list[str] = field(default_factory=list)
    body: list[Node] = field(default_factory=list)


@node
class UnaryExpression(Node):
    operator: str
    argument: Node


@node
class UpdateExpression(Node):
    operator: str                   # '++' | '--'
    prefix: bool
    argument: Node


@node
class BinaryExpression(Node):
    operator: str
    left: Node
    right: Node


@node
class LogicalExpression(Node):
    operator: str                   # '&&' | '||' | '??'
    left: Node
    right: Node


@node
class AssignmentExpression(Node):
    operator: str                   # '=' | '+=' | ...
    target: Node
    value: Node


@node
class ConditionalExpression(Node):
    test: Node
    consequent: Node
    alternate: Node


@node
class CallExpression(Node):
    callee: Node
    arguments: list[Node] = field(default_factory=list)


@node
class NewExpression(Node):
    callee: Node
    arguments: list[Node] = field(default_factory=list)


@node
class MemberExpression(Node):
    object: Node
    property: Node                  # Identifier when not computed
    computed: bool = False


@node
class SequenceExpression(Node):
    expressions: list[Node] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Structured form
# ---------------------------------------------------------------------------

def to_data(value: Any) -> Any:
    """Convert a node (or list of nodes) into JSON-compatible data."""
    if isinstance(value, Node):
        data: dict[str, Any] = {"type": type(value).__name__}
        for f in fields(value):
            data[f.name] = to_data(getattr(value, f.name))
        return data
    if isinstance(value, list):
        return [to_data(item) for item in value]
    return value


def node_from_data(data: Any) -> Any:
    """Inverse of to_data."""
    if isinstance(data, dict) and "type" in data:
        try:
            cls = NODE_TYPES[data["type"]]
        except KeyError:
            raise ValueError(f"unknown node type: {data['type']!r}") from None
        kwargs = {k: node_from_data(v) for k, v in data.items() if k != "type"}
        return cls(**kwargs)
    if isinstance(data, list):
        return [node_from_data(item) for item in data]
    return data
