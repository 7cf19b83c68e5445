"""Logic error detection (SWC-104).

Two independent checks:

- the same left operand compared with different boundary operators across
  ``if`` conditions of the contract (one contract-level finding per operand);
- exposed, non-view functions that never assign and never call a
  state-mutating method.
"""

from defyshield.analyzers.base import Detector, is_read_only
from defyshield.analyzers.catalog import IssueSeverity, IssueType
from defyshield.parsers.solidity_ast import BinaryNode, FunctionNode, IfNode, NodeKind

BOUNDARY_OPERATORS = ("<", "<=", ">", ">=")
STATE_MUTATING_CALLS = frozenset({"push", "pop", "transfer", "send", "mint", "burn"})
HIDDEN_VISIBILITY = frozenset({"private", "internal"})


class LogicErrorDetector(Detector):
    name = "logic_error"

    def __init__(self):
        super().__init__()
        # serialized left operand -> operators, in first-seen order
        self._operators: dict[str, list[str]] = {}

    def handlers(self):
        return {
            NodeKind.IF: self._collect_condition,
            NodeKind.FUNCTION: self._check_function,
        }

    def _collect_condition(self, node: IfNode) -> None:
        condition = node.condition
        if not isinstance(condition, BinaryNode) or condition.left is None or condition.right is None:
            return
        seen = self._operators.setdefault(condition.left.serialize(), [])
        if condition.operator not in seen:
            seen.append(condition.operator)

    def _check_function(self, node: FunctionNode) -> None:
        if node.is_constructor or is_read_only(node):
            return
        if not node.name or node.visibility in HIDDEN_VISIBILITY:
            return
        if self._updates_state(node):
            return

        self.report(
            type=IssueType.LOGIC_ERROR,
            severity=IssueSeverity.LOW,
            title="Function Might Miss State Updates",
            description=(
                f"Function '{node.name}' doesn't appear to update state but isn't marked "
                "as view or pure."
            ),
            recommendation=(
                "Either add missing state updates or mark the function as view/pure if it "
                "only reads state."
            ),
            location=node.loc,
            function=node.name,
        )

    def _updates_state(self, node: FunctionNode) -> bool:
        if node.body is None:
            return False
        for child in node.body.walk():
            if child.kind == NodeKind.ASSIGNMENT:
                return True
            if child.kind == NodeKind.CALL and child.callee in STATE_MUTATING_CALLS:
                return True
        return False

    def finish(self):
        # Contract-level comparison findings come first, then per-function ones
        function_issues = self.issues
        self.issues = []
        for operators in self._operators.values():
            boundary = [op for op in operators if op in BOUNDARY_OPERATORS]
            if len(boundary) > 1:
                self.report(
                    type=IssueType.LOGIC_ERROR,
                    severity=IssueSeverity.MEDIUM,
                    title="Inconsistent Comparison Operators",
                    description=(
                        "Variable is compared with inconsistent boundary operators: "
                        f"{', '.join(boundary)}. This may indicate a logic error."
                    ),
                    recommendation="Review the conditions to ensure consistent boundary checks.",
                )
        self.issues.extend(function_issues)
        return self.issues
