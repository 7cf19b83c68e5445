"""Detector registry."""

from defyshield.analyzers.access_control_detector import AccessControlDetector
from defyshield.analyzers.base import AnalysisResult, Detector, Issue
from defyshield.analyzers.catalog import (
    DEFAULT_WEIGHTS,
    IssueSeverity,
    IssueType,
    ScoringWeights,
)
from defyshield.analyzers.gas_detector import GasInefficiencyDetector
from defyshield.analyzers.logic_detector import LogicErrorDetector
from defyshield.analyzers.pipeline import DEFAULT_DETECTORS, run_detectors
from defyshield.analyzers.reentrancy_detector import ReentrancyDetector
from defyshield.analyzers.static_analyzer import StaticAnalyzer

__all__ = [
    "AccessControlDetector",
    "AnalysisResult",
    "DEFAULT_DETECTORS",
    "DEFAULT_WEIGHTS",
    "Detector",
    "GasInefficiencyDetector",
    "Issue",
    "IssueSeverity",
    "IssueType",
    "LogicErrorDetector",
    "ReentrancyDetector",
    "ScoringWeights",
    "StaticAnalyzer",
    "run_detectors",
]
