"""Audit request/response schemas."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from defyshield.analyzers.base import Issue
from defyshield.services.scoring_service import ScoreResult

ADDRESS_PATTERN = r"^0x[a-fA-F0-9]{40}$"
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


class CamelModel(BaseModel):
    """Serializes with camelCase keys, accepts either form on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SourceAuditRequest(CamelModel):
    """Request to audit posted Solidity source."""

    source: str = Field(min_length=1, max_length=500_000)
    contract_address: str = Field(default=ZERO_ADDRESS, pattern=ADDRESS_PATTERN)


class LocationResponse(CamelModel):
    line: int
    column: int


class IssueResponse(CamelModel):
    id: str
    type: str
    severity: str
    title: str
    description: str
    recommendation: str
    location: Optional[LocationResponse] = None
    function: Optional[str] = None

    @classmethod
    def from_issue(cls, issue: Issue) -> "IssueResponse":
        location = None
        if issue.location is not None:
            location = LocationResponse(line=issue.location.line, column=issue.location.column)
        return cls(
            id=issue.id,
            type=issue.type.value,
            severity=issue.severity.value,
            title=issue.title,
            description=issue.description,
            recommendation=issue.recommendation,
            location=location,
            function=issue.function,
        )


class BreakdownResponse(CamelModel):
    issues_by_type: dict[str, int] = Field(default_factory=dict)
    issues_by_severity: dict[str, int] = Field(default_factory=dict)
    category_scores: dict[str, int] = Field(default_factory=dict)


class AuditResponse(CamelModel):
    """Audit report for one contract."""

    contract_address: str
    contract_name: Optional[str] = None
    score: int = Field(ge=0, le=100)
    issues: list[IssueResponse]
    breakdown: BreakdownResponse
    disclaimer: str
    timestamp: int
    cached: bool = False

    @classmethod
    def from_results(cls, score: ScoreResult, contract_name: Optional[str]) -> "AuditResponse":
        breakdown = score.breakdown
        return cls(
            contract_address=score.contract_address,
            contract_name=contract_name,
            score=score.overall_score,
            issues=[IssueResponse.from_issue(issue) for issue in score.issues],
            breakdown=BreakdownResponse(
                issues_by_type={k.value: v for k, v in breakdown.issues_by_type.items()},
                issues_by_severity={k.value: v for k, v in breakdown.issues_by_severity.items()},
                category_scores={k.value: v for k, v in breakdown.category_scores.items()},
            ),
            disclaimer=score.disclaimer,
            timestamp=score.timestamp,
        )


class ErrorResponse(BaseModel):
    detail: str
