"""Base detector interfaces and analysis result types."""

import time
import uuid
from dataclasses import dataclass, field
from typing import Mapping, Optional

from defyshield.analyzers.catalog import IssueSeverity, IssueType
from defyshield.parsers.solidity_ast import (
    DetectorVisitor,
    FunctionNode,
    Handler,
    Node,
    SourceLocation,
)


def now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class Issue:
    """A single finding emitted by a detector."""

    type: IssueType
    severity: IssueSeverity
    title: str
    description: str
    recommendation: str
    location: Optional[SourceLocation] = None
    function: Optional[str] = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def content(self) -> tuple:
        """Everything except the generated id, for comparing two runs."""
        return (
            self.type,
            self.severity,
            self.title,
            self.description,
            self.recommendation,
            self.location,
            self.function,
        )


@dataclass
class AnalysisResult:
    """Outcome of analysing one contract."""

    contract_address: str
    issues: list[Issue] = field(default_factory=list)
    contract_name: Optional[str] = None
    success: bool = True
    error_message: Optional[str] = None
    timestamp: int = field(default_factory=now_ms)

    @classmethod
    def failed(cls, contract_address: str, error_message: str) -> "AnalysisResult":
        return cls(
            contract_address=contract_address,
            issues=[],
            success=False,
            error_message=error_message,
        )


class Detector:
    """Base class for detection passes.

    A detector instance lives for exactly one analysis run. It registers node
    handlers on a shared :class:`DetectorVisitor` and collects issues while the
    tree is walked; :meth:`finish` returns them.
    """

    name: str = "base"

    def __init__(self):
        self.issues: list[Issue] = []

    def handlers(self) -> Mapping[str, Handler]:
        raise NotImplementedError

    def finish(self) -> list[Issue]:
        return self.issues

    def report(self, **kwargs) -> None:
        self.issues.append(Issue(**kwargs))

    def detect(self, ast: Node) -> list[Issue]:
        """Run this detector alone over ``ast``."""
        visitor = DetectorVisitor()
        for kind, handler in self.handlers().items():
            visitor.on(kind, handler)
        visitor.run(ast)
        return self.finish()


def function_label(node: FunctionNode) -> str:
    return node.name or "anonymous"


def is_read_only(node: FunctionNode) -> bool:
    return node.mutability in ("view", "pure")
