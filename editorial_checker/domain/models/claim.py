"""Domain model for factual claims."""

from enum import Enum

from pydantic import BaseModel, Field, field_validator


class ClaimKind(str, Enum):
    """What sort of assertion a claim makes."""

    STATISTIC = "statistic"
    EVENT = "event"
    APPOINTMENT = "appointment"
    POLICY = "policy"
    GENERAL_FACT = "general_fact"


class ClaimPriority(str, Enum):
    """How important it is to verify the claim."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Claim(BaseModel):
    """Represents an atomic factual statement extracted from an article."""

    text: str = Field(..., description="Verbatim or close paraphrase of the article's statement")
    kind: ClaimKind = Field(default=ClaimKind.GENERAL_FACT, description="Type of the claim")
    priority: ClaimPriority = Field(default=ClaimPriority.MEDIUM, description="Verification priority")

    class Config:
        """Pydantic model configuration."""
        frozen = True  # Immutable model
        json_schema_extra = {
            "example": {
                "text": "Unemployment fell to 3.9% in March.",
                "kind": "statistic",
                "priority": "high",
            }
        }

    @field_validator("text")
    @classmethod
    def _text_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Claim text cannot be empty")
        return value
