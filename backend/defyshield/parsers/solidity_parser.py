"""Solidity parser using tree-sitter for AST-based contract analysis.

Builds the typed tree from :mod:`defyshield.parsers.solidity_ast`:
- Contracts, interfaces and libraries
- Functions, constructors, fallback/receive (with visibility and mutability)
- If/for statements, calls, member access, assignments, binary comparisons
- Everything else is kept as a generic node so the tree stays complete
"""

import logging
from typing import Optional

from tree_sitter import Parser
from tree_sitter_language_pack import get_language

from defyshield.parsers.solidity_ast import (
    AssignmentNode,
    BinaryNode,
    CallNode,
    ContractNode,
    ForNode,
    FunctionNode,
    IfNode,
    MemberNode,
    Node,
    NodeKind,
    SourceLocation,
    SourceUnit,
)

logger = logging.getLogger(__name__)

CONTRACT_TYPES = {
    "contract_declaration": "contract",
    "interface_declaration": "interface",
    "library_declaration": "library",
}
VISIBILITY_KEYWORDS = {"public", "external", "internal", "private"}
MUTABILITY_KEYWORDS = {"view", "pure", "payable"}

# Single-child wrappers that carry no meaning of their own
TRANSPARENT_TYPES = {"expression", "parenthesized_expression", "expression_statement"}

SKIPPED_TYPES = {"comment"}


class SolidityParseError(Exception):
    """Raised when the source does not form a valid Solidity syntax tree."""

    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None):
        super().__init__(message)
        self.line = line
        self.column = column


def unwrap(node: Optional[Node]) -> Optional[Node]:
    """Strip transparent wrapper nodes."""
    while node is not None and node.kind in TRANSPARENT_TYPES and len(node.children) == 1:
        node = node.children[0]
    return node


class SolidityParser:
    """Parser for Solidity code using tree-sitter."""

    def __init__(self):
        self._language = get_language("solidity")
        self._parser = Parser(self._language)
        logger.info("Initialized tree-sitter Solidity parser")

    def parse(self, source: str) -> SourceUnit:
        """Parse Solidity source into a :class:`SourceUnit`.

        Raises:
            SolidityParseError: if the tree contains syntax errors.
        """
        code = source.encode("utf-8")
        tree = self._parser.parse(code)
        root = tree.root_node

        if root.has_error:
            raise self._syntax_error(root, code)

        children = self._convert_tree(root, code)
        return SourceUnit(
            kind=NodeKind.SOURCE_UNIT,
            loc=SourceLocation(line=1, column=0),
            text=source,
            children=tuple(converted for _, converted in children),
        )

    # ------------------------------------------------------------------
    # Errors
    # ------------------------------------------------------------------

    def _syntax_error(self, root, code: bytes) -> SolidityParseError:
        error = self._first_error(root)
        if error is None:
            return SolidityParseError("Syntax error in contract source")

        line, column = error.start_point[0] + 1, error.start_point[1]
        if error.is_missing:
            detail = f"missing '{error.type}'"
        else:
            snippet = self._get_node_text(error, code).strip().split("\n")[0][:40]
            detail = f"unexpected '{snippet}'" if snippet else "unexpected input"
        message = f"Syntax error at line {line}, column {column}: {detail}"
        logger.debug(message)
        return SolidityParseError(message, line=line, column=column)

    def _first_error(self, root):
        """First ERROR or missing node in source order."""
        stack = [root]
        while stack:
            node = stack.pop()
            if node.type == "ERROR" or node.is_missing:
                return node
            stack.extend(
                child for child in reversed(node.children) if child.has_error or child.is_missing
            )
        return None

    # ------------------------------------------------------------------
    # Conversion
    # ------------------------------------------------------------------

    def _convert_tree(self, root, code: bytes) -> list[tuple]:
        """Convert every node under ``root`` bottom-up with an explicit stack.

        Returns ``(ts_child, converted)`` pairs for the direct children of
        ``root``. Depth is bounded by memory, not the interpreter stack.
        """
        # frame: [ts_node, named children, next child index, converted pairs]
        stack = [[root, _named_children(root), 0, []]]
        while True:
            frame = stack[-1]
            ts_node, named, index, pairs = frame
            if index < len(named):
                frame[2] += 1
                child = named[index]
                stack.append([child, _named_children(child), 0, []])
                continue

            stack.pop()
            if not stack:
                return pairs
            stack[-1][3].append((ts_node, self._convert(ts_node, pairs, code)))

    def _convert(self, ts_node, pairs: list[tuple], code: bytes) -> Node:
        children = tuple(converted for _, converted in pairs)
        loc = SourceLocation(line=ts_node.start_point[0] + 1, column=ts_node.start_point[1])
        text = self._get_node_text(ts_node, code)
        fields = _FieldLookup(ts_node, pairs)
        node_type = ts_node.type

        if node_type in CONTRACT_TYPES:
            name_node = fields.get("name") or fields.first("identifier")
            return ContractNode(
                kind=NodeKind.CONTRACT,
                loc=loc,
                text=text,
                children=children,
                name=name_node.text if name_node else None,
                contract_kind=CONTRACT_TYPES[node_type],
            )

        if node_type in ("function_definition", "constructor_definition", "fallback_receive_definition"):
            return self._function(ts_node, loc, text, children, fields, code)

        if node_type == "if_statement":
            condition = fields.get("condition") or (children[0] if children else None)
            return IfNode(
                kind=NodeKind.IF,
                loc=loc,
                text=text,
                children=children,
                condition=unwrap(condition),
            )

        if node_type == "for_statement":
            body = fields.get("body") or (children[-1] if children else None)
            condition = fields.get("condition")
            if condition is None:
                statements = [c for c in children[1:-1] if c.kind == "expression_statement"]
                condition = statements[0] if statements else None
            return ForNode(
                kind=NodeKind.FOR,
                loc=loc,
                text=text,
                children=children,
                condition=unwrap(condition),
                body=body,
            )

        if node_type == "call_expression":
            target = fields.get("function") or (children[0] if children else None)
            callee, is_member = _callee(target)
            return CallNode(
                kind=NodeKind.CALL,
                loc=loc,
                text=text,
                children=children,
                callee=callee,
                is_member=is_member,
            )

        if node_type == "member_expression":
            prop = fields.get("property")
            if prop is None:
                identifiers = [child for child in children if child.kind == NodeKind.IDENTIFIER]
                prop = identifiers[-1] if identifiers else None
            return MemberNode(
                kind=NodeKind.MEMBER,
                loc=loc,
                text=text,
                children=children,
                member=prop.text if prop else None,
            )

        if node_type in ("assignment_expression", "augmented_assignment_expression"):
            return AssignmentNode(
                kind=NodeKind.ASSIGNMENT,
                loc=loc,
                text=text,
                children=children,
                operator=_anonymous_token(ts_node) or "=",
            )

        if node_type == "binary_expression":
            operator_node = ts_node.child_by_field_name("operator")
            operator = operator_node.type if operator_node is not None else _anonymous_token(ts_node)
            left = fields.get("left") or (children[0] if children else None)
            right = fields.get("right") or (children[-1] if len(children) > 1 else None)
            return BinaryNode(
                kind=NodeKind.BINARY,
                loc=loc,
                text=text,
                children=children,
                operator=operator or "",
                left=unwrap(left),
                right=unwrap(right),
            )

        if node_type == "identifier":
            return Node(kind=NodeKind.IDENTIFIER, loc=loc, text=text, children=children)

        return Node(kind=node_type, loc=loc, text=text, children=children)

    def _function(self, ts_node, loc, text, children, fields, code) -> FunctionNode:
        visibility = None
        mutability = None
        for child in ts_node.children:
            if child.type == "visibility":
                visibility = self._get_node_text(child, code).strip()
            elif child.type == "state_mutability":
                mutability = self._get_node_text(child, code).strip()
            elif child.type in VISIBILITY_KEYWORDS:
                visibility = child.type
            elif child.type in MUTABILITY_KEYWORDS:
                mutability = child.type

        name = None
        if ts_node.type == "function_definition":
            name_node = fields.get("name") or fields.first("identifier")
            name = name_node.text if name_node else None

        return FunctionNode(
            kind=NodeKind.FUNCTION,
            loc=loc,
            text=text,
            children=children,
            name=name,
            visibility=visibility,
            mutability=mutability,
            is_constructor=ts_node.type == "constructor_definition",
            body=fields.get("body") or fields.first("function_body"),
        )

    def _get_node_text(self, node, code: bytes) -> str:
        """Get the text content of a node."""
        return code[node.start_byte:node.end_byte].decode("utf-8", errors="replace")


class _FieldLookup:
    """Maps tree-sitter field children to their converted nodes."""

    def __init__(self, ts_node, pairs):
        self._ts_node = ts_node
        self._by_span = {
            (child.start_byte, child.end_byte, child.type): converted for child, converted in pairs
        }
        self._pairs = pairs

    def get(self, field_name: str) -> Optional[Node]:
        child = self._ts_node.child_by_field_name(field_name)
        if child is None:
            return None
        return self._by_span.get((child.start_byte, child.end_byte, child.type))

    def first(self, ts_type: str) -> Optional[Node]:
        for child, converted in self._pairs:
            if child.type == ts_type:
                return converted
        return None


def _named_children(ts_node) -> list:
    return [child for child in ts_node.named_children if child.type not in SKIPPED_TYPES]


def _callee(target: Optional[Node]) -> tuple[Optional[str], bool]:
    """Name of the invoked function and whether it is a member call.

    Call options (``addr.call{value: v}(...)``) wrap the member access in a
    struct expression; the wrapped expression is its first child.
    """
    target = unwrap(target)
    while target is not None and target.kind == "struct_expression" and target.children:
        target = unwrap(target.children[0])
    if target is None:
        return None, False
    if target.kind == NodeKind.MEMBER:
        return target.member, True
    if target.kind == NodeKind.IDENTIFIER:
        return target.text, False
    return None, False


def _anonymous_token(ts_node) -> Optional[str]:
    for child in ts_node.children:
        if not child.is_named:
            return child.type
    return None
