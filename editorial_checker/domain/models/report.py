"""Domain models for compiled fact-check reports."""

import math
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field, field_validator

from .verification import Citation, ConfidenceLevel, IssueType, Verdict


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positive values."""
    return int(math.floor(value + 0.5))


def clamp_score(value: Any) -> int:
    """Round a score-like value and clamp it into [0, 100].

    Non-numeric values count as 0.
    """
    if isinstance(value, bool):
        return 0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if math.isnan(number) or math.isinf(number):
        return 0 if math.isnan(number) or number < 0 else 100
    return max(0, min(100, round_half_up(number)))


class Severity(str, Enum):
    """How urgently an editor should act on an issue."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class IssueLabel(str, Enum):
    """Human-readable issue type shown to editors."""

    FACTUAL_ERROR = "Factual Error"
    OUTDATED = "Outdated"
    MISLEADING = "Misleading"
    MISSING_CONTEXT = "Missing Context"
    UNVERIFIED = "Unverified"


class ReportStatus(str, Enum):
    """Overall accuracy status of an article."""

    VERIFIED = "Verified"
    MOSTLY_ACCURATE = "Mostly Accurate"
    NEEDS_REVIEW = "Needs Review"
    MULTIPLE_ERRORS = "Multiple Errors"
    FALSE = "False"
    SATIRE = "Satire"
    ANALYSIS_INCOMPLETE = "Analysis Incomplete"
    UNKNOWN = "Unknown"


# issue type -> (severity, label). Fixed editorial policy.
ISSUE_TYPE_TABLE: Dict[IssueType, Tuple[Severity, IssueLabel]] = {
    IssueType.FACTUAL_ERROR: (Severity.HIGH, IssueLabel.FACTUAL_ERROR),
    IssueType.OUTDATED: (Severity.MEDIUM, IssueLabel.OUTDATED),
    IssueType.MISLEADING: (Severity.MEDIUM, IssueLabel.MISLEADING),
    IssueType.MISSING_CONTEXT: (Severity.LOW, IssueLabel.MISSING_CONTEXT),
    IssueType.UNVERIFIED: (Severity.LOW, IssueLabel.UNVERIFIED),
}

_LABEL_SEVERITY: Dict[IssueLabel, Severity] = {
    label: severity for severity, label in ISSUE_TYPE_TABLE.values()
}


def classify_issue(issue_type: IssueType) -> Tuple[Severity, IssueLabel]:
    """Severity and label for an issue type. ``none`` is treated as unverified."""
    return ISSUE_TYPE_TABLE.get(issue_type, ISSUE_TYPE_TABLE[IssueType.UNVERIFIED])


def severity_for_label(label: IssueLabel) -> Severity:
    """Severity of an issue given its human label."""
    return _LABEL_SEVERITY[label]


class VerificationMode(str, Enum):
    """Which verification path produced a report."""

    MULTISTEP = "multistep"
    AGGREGATE = "aggregate"


class Issue(BaseModel):
    """A claim that failed the accuracy bar, with guidance for the editor."""

    claim: str = Field(..., description="The problematic claim")
    type: IssueLabel = Field(default=IssueLabel.UNVERIFIED, description="Issue type label")
    severity: Severity = Field(default=Severity.LOW, description="Issue severity")
    what_article_says: str = Field(..., description="What the article states")
    the_problem: str = Field(..., description="Why the claim is wrong, misleading or unverified")
    actual_facts: str = Field(..., description="What is actually true")
    why_it_matters: str = Field(..., description="Why readers would care")
    how_to_fix: Optional[str] = Field(None, description="Suggested fix for the editor")
    sources: List[Citation] = Field(default_factory=list, description="Sources backing the issue")

    class Config:
        """Pydantic model configuration."""
        frozen = True


class VerifiedFact(BaseModel):
    """A claim that passed verification."""

    claim: str
    confidence: ConfidenceLevel
    sources: List[Citation] = Field(default_factory=list)

    class Config:
        """Pydantic model configuration."""
        frozen = True


class Report(BaseModel):
    """Final output of one fact-check run."""

    score: int = Field(..., description="Accuracy score between 0 and 100")
    status: ReportStatus = Field(..., description="Overall accuracy status")
    description: str = Field(..., description="One-sentence summary for editors")
    issues: List[Issue] = Field(default_factory=list)
    verified_facts: List[VerifiedFact] = Field(default_factory=list)
    sources: List[Citation] = Field(default_factory=list)
    mode: VerificationMode = Field(..., description="Verification path that produced the report")
    claims: List[Verdict] = Field(
        default_factory=list,
        description="Per-claim verdicts reported by the aggregate pass",
    )
    total_claims: int = Field(default=0, description="Number of claims considered")

    class Config:
        """Pydantic model configuration."""
        frozen = True
        json_schema_extra = {
            "example": {
                "score": 53,
                "status": "Multiple Errors",
                "description": "Multi-step verification analyzed 4 claims: 1 verified accurate, 3 with issues.",
                "issues": [],
                "verified_facts": [],
                "sources": [],
                "mode": "multistep",
            }
        }

    @field_validator("score", mode="before")
    @classmethod
    def _clamp_score(cls, value: Any) -> int:
        return clamp_score(value)

    def to_dict(self) -> Dict[str, Any]:
        """Convert Report to dictionary format for API responses."""
        return self.model_dump(mode="json", exclude_none=True)
