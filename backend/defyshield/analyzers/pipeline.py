"""Detector pipeline: one shared tree walk, fault-isolated detectors."""

import logging
from typing import Optional, Sequence

from defyshield.analyzers.access_control_detector import AccessControlDetector
from defyshield.analyzers.base import Detector, Issue
from defyshield.analyzers.gas_detector import GasInefficiencyDetector
from defyshield.analyzers.logic_detector import LogicErrorDetector
from defyshield.analyzers.reentrancy_detector import ReentrancyDetector
from defyshield.parsers.solidity_ast import DetectorVisitor, Handler, Node

logger = logging.getLogger(__name__)

DEFAULT_DETECTORS: tuple[type[Detector], ...] = (
    ReentrancyDetector,
    AccessControlDetector,
    GasInefficiencyDetector,
    LogicErrorDetector,
)


def run_detectors(
    ast: Node,
    detectors: Sequence[type[Detector]] = DEFAULT_DETECTORS,
) -> list[Issue]:
    """Run every detector over ``ast`` and concatenate issues in detector order.

    Never raises. A detector that fails is logged and contributes no issues;
    the other detectors still complete.
    """
    instances: list[Optional[Detector]] = []
    failed: set[int] = set()

    visitor = DetectorVisitor()
    for index, detector_cls in enumerate(detectors):
        name = getattr(detector_cls, "name", detector_cls.__name__)
        try:
            detector = detector_cls()
            handlers = detector.handlers()
        except Exception:
            logger.exception(f"Detector '{name}' failed to register")
            instances.append(None)
            failed.add(index)
            continue
        instances.append(detector)
        for kind, handler in handlers.items():
            visitor.on(kind, _guard(index, detector, handler, failed))

    visitor.run(ast)

    issues: list[Issue] = []
    for index, detector in enumerate(instances):
        if detector is None or index in failed:
            continue
        try:
            issues.extend(detector.finish())
        except Exception:
            logger.exception(f"Detector '{detector.name}' failed while collecting issues")
    return issues


def _guard(index: int, detector: Detector, handler: Handler, failed: set[int]) -> Handler:
    """Wrap a handler so a fault disables only its own detector."""

    def guarded(node: Node) -> None:
        if index in failed:
            return
        try:
            handler(node)
        except Exception:
            logger.exception(
                f"Detector '{detector.name}' failed at line {node.loc.line}; "
                "its findings are dropped"
            )
            failed.add(index)

    return guarded
