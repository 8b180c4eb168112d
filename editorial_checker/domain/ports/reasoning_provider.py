"""Protocol for retrieval-augmented reasoning providers."""

from typing import Any, Dict, List, Optional, Protocol

from pydantic import BaseModel, Field


class CompletionRequest(BaseModel):
    """One chat-completion call to the reasoning service."""

    model: str
    system_prompt: str
    user_prompt: str
    temperature: float = 0.2
    max_tokens: int = 1500
    timeout: float = Field(default=60.0, description="Request timeout in seconds")
    search_recency_filter: Optional[str] = Field(
        None, description="hour/day/week/month/year; omitted when None"
    )
    return_citations: bool = False


class CompletionResult(BaseModel):
    """Message content plus any citations the search layer surfaced natively."""

    content: str
    citations: List[Dict[str, Any]] = Field(default_factory=list)
    model: Optional[str] = None


class ReasoningProvider(Protocol):
    """Protocol defining the interface for reasoning providers.

    ``complete`` raises ``ProviderError`` subclasses on transport, HTTP and
    response-shape failures and ``ConfigurationError`` when credentials are
    missing.
    """

    async def initialize(self) -> None:
        """Initialize the provider."""
        ...

    async def shutdown(self) -> None:
        """Clean up resources."""
        ...

    async def complete(self, request: CompletionRequest) -> CompletionResult:
        """Run one chat completion."""
        ...

    @property
    def provider_name(self) -> str:
        """Get the name of the provider."""
        ...

    @property
    def is_configured(self) -> bool:
        """Whether a non-empty credential is present."""
        ...

    @property
    def is_available(self) -> bool:
        """Check if the provider is initialized and ready."""
        ...
