"""Gas inefficiency detection (SWC-128)."""

from typing import Optional

from defyshield.analyzers.base import Detector
from defyshield.analyzers.catalog import IssueSeverity, IssueType
from defyshield.parsers.solidity_ast import ForNode, Node, NodeKind

DYNAMIC_BOUND_MEMBER = "length"


class GasInefficiencyDetector(Detector):
    """Checks every ``for`` loop for a dynamic bound and repeated writes.

    Both checks are independent and may fire for the same loop.
    """

    name = "gas_inefficiency"

    def handlers(self):
        return {NodeKind.FOR: self._check_loop}

    def _check_loop(self, node: ForNode) -> None:
        if _compares_member(node.condition, DYNAMIC_BOUND_MEMBER):
            self.report(
                type=IssueType.GAS_INEFFICIENCY,
                severity=IssueSeverity.LOW,
                title="Unbounded Loop",
                description=(
                    "Loop uses a dynamic bound (like array.length) which can lead to gas "
                    "limit issues with large arrays."
                ),
                recommendation=(
                    "Cache the array length outside the loop or implement pagination "
                    "for large data sets."
                ),
                location=node.loc,
            )

        assignments = 0
        if node.body is not None:
            assignments = sum(1 for child in node.body.walk() if child.kind == NodeKind.ASSIGNMENT)
        if assignments > 1:
            self.report(
                type=IssueType.GAS_INEFFICIENCY,
                severity=IssueSeverity.LOW,
                title="Multiple State Changes in Loop",
                description="Multiple state changes in a loop can be gas inefficient.",
                recommendation=(
                    "Batch operations or restructure the code to minimize state changes "
                    "inside loops."
                ),
                location=node.loc,
            )


def _compares_member(condition: Optional[Node], member: str) -> bool:
    """True when the loop condition is, or directly compares, ``<x>.<member>``."""
    if condition is None:
        return False
    if condition.kind == NodeKind.MEMBER:
        return condition.member == member
    if condition.kind == NodeKind.BINARY:
        operands = (condition.right, condition.left)
        return any(
            operand is not None and operand.kind == NodeKind.MEMBER and operand.member == member
            for operand in operands
        )
    return False
