"""Domain models for verification results and related entities."""

from enum import Enum
from typing import Any, List, Optional
from urllib.parse import urlparse

from pydantic import BaseModel, Field, field_validator, model_validator

DEFAULT_EXPLANATION = "No explanation provided"


class ConfidenceLevel(str, Enum):
    """Confidence levels in the verification result."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class CredibilityLevel(str, Enum):
    """How much a citation can be trusted."""

    HIGH = "high"
    MEDIUM = "medium"


class IssueType(str, Enum):
    """Classification of what is wrong with a claim."""

    NONE = "none"
    FACTUAL_ERROR = "factual_error"  # Contradicted by strong, recent evidence
    OUTDATED = "outdated"  # Was true, no longer is
    MISLEADING = "misleading"  # Technically true, lacks context
    UNVERIFIED = "unverified"  # No evidence either way
    MISSING_CONTEXT = "missing_context"


class VerdictLabel(str, Enum):
    """Verdict labels used by the aggregate verification pass."""

    ACCURATE = "Accurate"
    PARTIALLY_TRUE = "Partially True"
    FALSE = "False"
    UNVERIFIED = "Unverified"


def _coerce_enum(enum_cls, value: Any, default):
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        candidate = value.strip()
        for member in enum_cls:
            if candidate.lower() in (member.value.lower(), member.name.lower()):
                return member
    return default


class Citation(BaseModel):
    """An evidence source backing or contradicting a claim.

    Citations are frozen, so two citations are equal (and hash equally)
    only when title, url, date and credibility all match.
    """

    title: str = Field(..., description="Title of the source")
    url: str = Field(..., description="URL of the source")
    date: Optional[str] = Field(None, description="Publication date if known")
    credibility: CredibilityLevel = Field(
        default=CredibilityLevel.MEDIUM,
        description="Credibility of the source",
    )

    class Config:
        """Pydantic model configuration."""
        frozen = True

    @model_validator(mode="before")
    @classmethod
    def _derive_title(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("url") and not data.get("title"):
            data = dict(data)
            data["title"] = urlparse(str(data["url"])).netloc or str(data["url"])
        return data

    @field_validator("credibility", mode="before")
    @classmethod
    def _coerce_credibility(cls, value: Any) -> CredibilityLevel:
        return _coerce_enum(CredibilityLevel, value, CredibilityLevel.MEDIUM)

    @field_validator("date", mode="before")
    @classmethod
    def _stringify_date(cls, value: Any) -> Optional[str]:
        if value is None or value == "":
            return None
        return str(value)


class Verdict(BaseModel):
    """Represents the outcome of verifying one claim."""

    claim: str = Field(..., description="The claim that was verified")
    is_accurate: bool = Field(default=False, description="Whether the claim holds up")
    verdict_label: Optional[VerdictLabel] = Field(
        None, description="Verdict label (aggregate mode only)"
    )
    confidence: ConfidenceLevel = Field(default=ConfidenceLevel.LOW, description="Confidence in the result")
    issue_type: IssueType = Field(default=IssueType.UNVERIFIED, description="What is wrong with the claim")
    explanation: str = Field(default=DEFAULT_EXPLANATION, description="Why the verdict was reached")
    actual_facts: Optional[str] = Field(None, description="What is actually true, if inaccurate")
    why_it_matters: Optional[str] = Field(None, description="Why the inaccuracy matters to readers")
    sources: List[Citation] = Field(default_factory=list, description="Supporting or contradicting sources")

    class Config:
        """Pydantic model configuration."""
        frozen = True
        json_schema_extra = {
            "example": {
                "claim": "Unemployment fell to 3.9% in March.",
                "is_accurate": False,
                "confidence": "high",
                "issue_type": "outdated",
                "explanation": "The March figure was later revised to 4.1%.",
                "actual_facts": "Unemployment was 4.1% in March after revision.",
                "sources": [
                    {"title": "Labour statistics", "url": "https://stats.example.org/march", "credibility": "high"}
                ],
            }
        }

    @field_validator("is_accurate", mode="before")
    @classmethod
    def _coerce_is_accurate(cls, value: Any) -> bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return value.strip().lower() in ("true", "yes", "1", "accurate")
        if isinstance(value, (int, float)):
            return value == 1
        return False

    @field_validator("confidence", mode="before")
    @classmethod
    def _coerce_confidence(cls, value: Any) -> ConfidenceLevel:
        return _coerce_enum(ConfidenceLevel, value, ConfidenceLevel.LOW)

    @field_validator("issue_type", mode="before")
    @classmethod
    def _coerce_issue_type(cls, value: Any) -> IssueType:
        return _coerce_enum(IssueType, value, IssueType.UNVERIFIED)

    @field_validator("verdict_label", mode="before")
    @classmethod
    def _coerce_verdict_label(cls, value: Any) -> Optional[VerdictLabel]:
        if value is None or value == "":
            return None
        return _coerce_enum(VerdictLabel, value, VerdictLabel.UNVERIFIED)

    @field_validator("explanation", mode="before")
    @classmethod
    def _explanation_not_empty(cls, value: Any) -> str:
        if value is None or not str(value).strip():
            return DEFAULT_EXPLANATION
        return str(value)

    @property
    def counts_as_accurate(self) -> bool:
        """Accurate claims must also be stated with better than low confidence."""
        return self.is_accurate and self.confidence != ConfidenceLevel.LOW
