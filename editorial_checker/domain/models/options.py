"""Configuration value passed to every fact-checking component."""

import os
from enum import Enum

from pydantic import BaseModel, Field, ValidationError

from ..errors import ConfigurationError


class RecencyWindow(str, Enum):
    """How far back the retrieval search may draw sources from."""

    HOUR = "hour"
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


class FactCheckOptions(BaseModel):
    """Immutable options recognised by the extractor, verifiers and compiler."""

    model: str = Field(default="sonar-pro", description="Reasoning model identifier")
    recency_window: RecencyWindow = Field(default=RecencyWindow.WEEK, description="Search recency filter")
    recency_value: int = Field(default=1, ge=1, description="Number of recency units mentioned in prompts")
    max_claims: int = Field(default=10, ge=1, description="Maximum claims extracted per article")
    multistep_enabled: bool = Field(default=True, description="Verify claims one by one instead of in one pass")
    request_delay: float = Field(default=0.3, ge=0.0, description="Seconds between per-claim requests")

    class Config:
        """Pydantic model configuration."""
        frozen = True

    @property
    def recency_description(self) -> str:
        """Human phrasing of the window, e.g. ``1 week`` or ``3 days``."""
        unit = self.recency_window.value
        return f"{self.recency_value} {unit}{'s' if self.recency_value > 1 else ''}"

    @classmethod
    def from_env(cls) -> "FactCheckOptions":
        """Build options from ``FACT_CHECK_*`` and ``PERPLEXITY_MODEL`` variables.

        Raises:
            ConfigurationError: If a variable holds an unusable value
        """
        defaults = cls()
        multistep = os.getenv("FACT_CHECK_MULTISTEP")
        try:
            return cls(
                model=os.getenv("PERPLEXITY_MODEL", defaults.model),
                recency_window=os.getenv("FACT_CHECK_RECENCY", defaults.recency_window.value),
                recency_value=int(os.getenv("FACT_CHECK_RECENCY_VALUE", defaults.recency_value)),
                max_claims=int(os.getenv("FACT_CHECK_MAX_CLAIMS", defaults.max_claims)),
                multistep_enabled=(
                    defaults.multistep_enabled if multistep is None
                    else multistep.strip().lower() in ("1", "true", "yes", "on")
                ),
                request_delay=float(os.getenv("FACT_CHECK_REQUEST_DELAY", defaults.request_delay)),
            )
        except (ValueError, ValidationError) as e:
            raise ConfigurationError(f"Invalid fact-check configuration: {e}") from e
