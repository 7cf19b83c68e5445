"""Typed Solidity AST produced by the tree-sitter front-end.

Nodes are immutable. Detectors never mutate them, they only walk them with
:func:`visit` or a shared :class:`DetectorVisitor`.
"""

from collections import defaultdict
from dataclasses import dataclass
from typing import Callable, Iterator, Mapping, Optional


class NodeKind:
    """Node kinds the detectors dispatch on."""

    SOURCE_UNIT = "SourceUnit"
    CONTRACT = "ContractDefinition"
    FUNCTION = "FunctionDefinition"
    IF = "IfStatement"
    FOR = "ForStatement"
    CALL = "FunctionCall"
    MEMBER = "MemberAccess"
    ASSIGNMENT = "Assignment"
    BINARY = "BinaryOperation"
    IDENTIFIER = "Identifier"


@dataclass(frozen=True)
class SourceLocation:
    """Start position of a node. ``line`` is 1-based, ``column`` 0-based."""

    line: int
    column: int


@dataclass(frozen=True, eq=False)
class Node:
    """Generic AST node.

    ``kind`` is either one of :class:`NodeKind` or the raw grammar node type
    for constructs the detectors do not care about.
    """

    kind: str
    loc: SourceLocation
    text: str
    children: tuple["Node", ...] = ()

    def walk(self) -> Iterator["Node"]:
        """Yield this node and all descendants, depth-first in source order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def serialize(self) -> str:
        """Location-free structural form, used to compare operands.

        Leaves render as ``kind(text)``, inner nodes as ``kind[child,...]``.
        """
        parts: list[str] = []
        stack: list = [self]
        while stack:
            item = stack.pop()
            if isinstance(item, str):
                parts.append(item)
            elif not item.children:
                parts.append(f"{item.kind}({' '.join(item.text.split())})")
            else:
                stack.append("]")
                last = len(item.children) - 1
                for index, child in enumerate(reversed(item.children)):
                    stack.append(child)
                    if index < last:
                        stack.append(",")
                stack.append(f"{item.kind}[")
        return "".join(parts)


@dataclass(frozen=True, eq=False)
class SourceUnit(Node):
    @property
    def contracts(self) -> list["ContractNode"]:
        return [node for node in self.walk() if node.kind == NodeKind.CONTRACT]


@dataclass(frozen=True, eq=False)
class ContractNode(Node):
    name: Optional[str] = None
    contract_kind: str = "contract"  # contract, interface, library


@dataclass(frozen=True, eq=False)
class FunctionNode(Node):
    name: Optional[str] = None
    visibility: Optional[str] = None  # public, external, internal, private
    mutability: Optional[str] = None  # view, pure, payable
    is_constructor: bool = False
    body: Optional[Node] = None


@dataclass(frozen=True, eq=False)
class IfNode(Node):
    condition: Optional[Node] = None


@dataclass(frozen=True, eq=False)
class ForNode(Node):
    condition: Optional[Node] = None
    body: Optional[Node] = None


@dataclass(frozen=True, eq=False)
class CallNode(Node):
    callee: Optional[str] = None
    is_member: bool = False


@dataclass(frozen=True, eq=False)
class MemberNode(Node):
    member: Optional[str] = None


@dataclass(frozen=True, eq=False)
class AssignmentNode(Node):
    operator: str = "="


@dataclass(frozen=True, eq=False)
class BinaryNode(Node):
    operator: str = ""
    left: Optional[Node] = None
    right: Optional[Node] = None


Handler = Callable[[Node], None]


def visit(node: Optional[Node], handlers: Mapping[str, Handler]) -> None:
    """Call ``handlers[kind]`` for every node under ``node`` (inclusive)."""
    if node is None:
        return
    for current in node.walk():
        handler = handlers.get(current.kind)
        if handler is not None:
            handler(current)


class DetectorVisitor:
    """Single walk over a tree dispatching to many registered callbacks."""

    def __init__(self):
        self._handlers: dict[str, list[Handler]] = defaultdict(list)

    def on(self, kind: str, handler: Handler) -> None:
        self._handlers[kind].append(handler)

    def run(self, node: Optional[Node]) -> None:
        if node is None:
            return
        for current in node.walk():
            for handler in self._handlers.get(current.kind, ()):
                handler(current)
