"""Trust score calculation for detected issues.

Starts from 100 and deducts per issue category: ``weight * count``, capped per
category, then clamps at 0. Severity counts are reported but do not affect
the arithmetic.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Optional, Sequence

from defyshield.analyzers.base import Issue, now_ms
from defyshield.analyzers.catalog import DEFAULT_WEIGHTS, IssueSeverity, IssueType, ScoringWeights

logger = logging.getLogger(__name__)

MAX_SCORE = 100
RISK_THRESHOLD = 80

AUDIT_DISCLAIMER = (
    "This score reflects automatically detected vulnerabilities. "
    "Scores below 80 indicate potential security risks. "
    "This automated audit is not a guarantee of security; "
    "please consult security experts for critical dApps."
)


@dataclass(frozen=True)
class ScoreBreakdown:
    """Per-type counts, per-severity counts, and signed per-type deductions."""

    issues_by_type: dict[IssueType, int] = field(default_factory=dict)
    issues_by_severity: dict[IssueSeverity, int] = field(default_factory=dict)
    category_scores: dict[IssueType, int] = field(default_factory=dict)


@dataclass(frozen=True)
class ScoreResult:
    """Trust score for one contract."""

    contract_address: str
    overall_score: int  # 0-100, higher is better
    breakdown: ScoreBreakdown
    issues: tuple[Issue, ...]
    disclaimer: str = AUDIT_DISCLAIMER
    timestamp: int = field(default_factory=now_ms)

    @property
    def at_risk(self) -> bool:
        return self.overall_score < RISK_THRESHOLD


class ScoringService:
    """Service for turning issue lists into trust scores."""

    def __init__(self, weights: Optional[ScoringWeights] = None):
        self.weights = weights or DEFAULT_WEIGHTS

    def score(self, contract_address: str, issues: Sequence[Issue]) -> ScoreResult:
        """Calculate the trust score. Never raises."""
        logger.info(f"Calculating trust score for {contract_address} with {len(issues)} issues")

        issues_by_type = Counter(issue.type for issue in issues)
        issues_by_severity = Counter(issue.severity for issue in issues)

        score = MAX_SCORE
        category_scores: dict[IssueType, int] = {}
        for issue_type, count in issues_by_type.items():
            deduction = self._deduction(issue_type, count)
            category_scores[issue_type] = -deduction
            score -= deduction

        score = min(MAX_SCORE, max(0, score))
        logger.info(f"Trust score for {contract_address}: {score}")

        return ScoreResult(
            contract_address=contract_address,
            overall_score=score,
            breakdown=ScoreBreakdown(
                issues_by_type=dict(issues_by_type),
                issues_by_severity=dict(issues_by_severity),
                category_scores=category_scores,
            ),
            issues=tuple(issues),
        )

    def _deduction(self, issue_type: IssueType, count: int) -> int:
        deduction = self.weights.weight_for(issue_type) * count
        if self.weights.category_cap is not None:
            deduction = min(deduction, self.weights.category_cap)
        return deduction
