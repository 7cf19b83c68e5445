"""Issue taxonomy and scoring weight tables."""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional


class IssueType(str, Enum):
    """Issue categories. Only the first four are produced by detectors today."""

    REENTRANCY = "reentrancy"
    ACCESS_CONTROL = "access_control"
    GAS_INEFFICIENCY = "gas_inefficiency"
    LOGIC_ERROR = "logic_error"
    UNCHECKED_RETURN = "unchecked_return"
    ARITHMETIC_OVERFLOW = "arithmetic_overflow"
    MISSING_INPUT_VALIDATION = "missing_input_validation"
    UNSAFE_EXTERNAL_CALL = "unsafe_external_call"


class IssueSeverity(str, Enum):
    """Issue severity levels, highest first."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    INFORMATIONAL = "informational"


DEFAULT_SEVERITY_WEIGHTS: Mapping[IssueSeverity, int] = MappingProxyType(
    {
        IssueSeverity.HIGH: 20,
        IssueSeverity.MEDIUM: 15,
        IssueSeverity.LOW: 10,
        IssueSeverity.INFORMATIONAL: 5,
    }
)

DEFAULT_CATEGORY_WEIGHTS: Mapping[IssueType, int] = MappingProxyType(
    {
        IssueType.REENTRANCY: 20,
        IssueType.ACCESS_CONTROL: 15,
        IssueType.GAS_INEFFICIENCY: 10,
        IssueType.LOGIC_ERROR: 10,
        IssueType.UNCHECKED_RETURN: 10,
        IssueType.ARITHMETIC_OVERFLOW: 15,
        IssueType.MISSING_INPUT_VALIDATION: 10,
        IssueType.UNSAFE_EXTERNAL_CALL: 15,
    }
)

DEFAULT_CATEGORY_CAP = 50


@dataclass(frozen=True)
class ScoringWeights:
    """Immutable weight profile handed to the scoring engine.

    ``category_cap`` bounds the points a single issue type can deduct.
    ``None`` disables the cap.
    """

    severity_weights: Mapping[IssueSeverity, int] = field(
        default_factory=lambda: DEFAULT_SEVERITY_WEIGHTS
    )
    category_weights: Mapping[IssueType, int] = field(
        default_factory=lambda: DEFAULT_CATEGORY_WEIGHTS
    )
    category_cap: Optional[int] = DEFAULT_CATEGORY_CAP

    def __post_init__(self):
        # Copies supplied by callers are frozen too
        object.__setattr__(
            self, "severity_weights", MappingProxyType(dict(self.severity_weights))
        )
        object.__setattr__(
            self, "category_weights", MappingProxyType(dict(self.category_weights))
        )
        if self.category_cap is not None and self.category_cap < 0:
            raise ValueError("category_cap must be non-negative")
        for table_name in ("severity_weights", "category_weights"):
            negative = [key for key, weight in getattr(self, table_name).items() if weight < 0]
            if negative:
                raise ValueError(f"{table_name} must be non-negative: {negative}")

    def weight_for(self, issue_type: IssueType) -> int:
        return self.category_weights.get(issue_type, 0)


DEFAULT_WEIGHTS = ScoringWeights()
