"""Access control detection (SWC-105)."""

from defyshield.analyzers.base import Detector, is_read_only
from defyshield.analyzers.catalog import IssueSeverity, IssueType
from defyshield.parsers.solidity_ast import FunctionNode, NodeKind

GUARD_CALLS = frozenset({"require", "onlyOwner", "isAdmin", "onlyRole"})
EXPOSED_VISIBILITY = frozenset({"public", "external"})


class AccessControlDetector(Detector):
    """Flags state-changing public/external functions without any guard.

    Any ``if`` statement in the body counts as a guard, even one unrelated to
    the caller's identity.
    """

    name = "access_control"

    def handlers(self):
        return {NodeKind.FUNCTION: self._check_function}

    def _check_function(self, node: FunctionNode) -> None:
        if node.is_constructor or is_read_only(node):
            return
        if node.visibility not in EXPOSED_VISIBILITY or node.body is None or not node.name:
            return
        if self._has_guard(node):
            return

        self.report(
            type=IssueType.ACCESS_CONTROL,
            severity=IssueSeverity.MEDIUM,
            title="Missing Access Control",
            description=(
                f"Function '{node.name}' is {node.visibility} but lacks access control checks."
            ),
            recommendation=(
                "Add access control checks (require statements, modifiers like onlyOwner) "
                "to restrict who can call this function."
            ),
            location=node.loc,
            function=node.name,
        )

    def _has_guard(self, node: FunctionNode) -> bool:
        for child in node.body.walk():
            if child.kind == NodeKind.IF:
                return True
            if child.kind == NodeKind.CALL and child.callee in GUARD_CALLS:
                return True
        return False
