"""Reentrancy detection (SWC-107).

Flags functions whose first external call appears on an earlier source line
than their first assignment. Line order stands in for execution order; only
the first call and the first assignment of each function are compared.
"""

from typing import Optional

from defyshield.analyzers.base import Detector, function_label
from defyshield.analyzers.catalog import IssueSeverity, IssueType
from defyshield.parsers.solidity_ast import CallNode, FunctionNode, NodeKind, SourceLocation, visit

EXTERNAL_CALL_MEMBERS = frozenset({"call", "send", "transfer"})


class ReentrancyDetector(Detector):
    name = "reentrancy"

    def handlers(self):
        return {NodeKind.FUNCTION: self._check_function}

    def _check_function(self, node: FunctionNode) -> None:
        first_call: Optional[SourceLocation] = None
        first_assignment: Optional[SourceLocation] = None

        def on_call(call: CallNode):
            nonlocal first_call
            if first_call is None and call.is_member and call.callee in EXTERNAL_CALL_MEMBERS:
                first_call = call.loc

        def on_assignment(assignment):
            nonlocal first_assignment
            if first_assignment is None:
                first_assignment = assignment.loc

        visit(node.body, {NodeKind.CALL: on_call, NodeKind.ASSIGNMENT: on_assignment})

        if first_call is None or first_assignment is None:
            return
        if first_call.line >= first_assignment.line:
            return

        name = function_label(node)
        self.report(
            type=IssueType.REENTRANCY,
            severity=IssueSeverity.HIGH,
            title="Reentrancy Vulnerability",
            description=(
                f"Function '{name}' contains an external call before a state change, "
                "which can lead to reentrancy attacks."
            ),
            recommendation=(
                "Implement the checks-effects-interactions pattern by moving state changes "
                "before external calls, or use a reentrancy guard."
            ),
            location=first_call,
            function=name,
        )
