"""Perplexity implementation of the reasoning provider interface."""

import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import BaseModel, Field

from ...domain.errors import (
    ConfigurationError,
    ProviderHTTPError,
    ProviderResponseError,
    ProviderTransportError,
)
from ...domain.ports.reasoning_provider import CompletionRequest, CompletionResult, ReasoningProvider

logger = logging.getLogger(__name__)


class PerplexityConfig(BaseModel):
    """Configuration for Perplexity adapter."""

    api_key: str = Field(..., description="Perplexity API key")
    base_url: str = Field(default="https://api.perplexity.ai", description="API base URL")
    timeout: float = Field(default=60.0, gt=0, description="Default API timeout in seconds")


def extract_citations(data: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Collect citation objects from a chat-completion response body.

    ``citations`` may hold bare URLs or ``{title, url}`` objects;
    ``search_results`` holds ``{title, url, date}`` objects, usually for the
    same URLs. Both lists describe one set of sources, so entries are merged
    by URL in first-seen order, filling in title and date from whichever
    entry has them. Entries without a URL are skipped.
    """
    by_url: Dict[str, Dict[str, Any]] = {}
    for key in ("citations", "search_results"):
        entries = data.get(key)
        if not isinstance(entries, list):
            continue
        for entry in entries:
            if isinstance(entry, str):
                entry = {"url": entry}
            if not isinstance(entry, dict) or not entry.get("url"):
                continue
            url = str(entry["url"]).strip()
            if not url:
                continue
            citation = by_url.setdefault(url, {"url": url})
            for field in ("title", "date"):
                if entry.get(field) and not citation.get(field):
                    citation[field] = entry[field]
    return list(by_url.values())


def _error_detail(response: httpx.Response) -> Optional[str]:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200] or None
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict):
        return error.get("message")
    if isinstance(error, str):
        return error
    return None


class PerplexityAdapter(ReasoningProvider):
    """Perplexity chat-completions client with web search and citations."""

    def __init__(
        self,
        config: Optional[PerplexityConfig] = None,
    ):
        """Initialize the adapter."""
        self._config = config or PerplexityConfig(api_key="")
        self._client: Optional[httpx.AsyncClient] = None
        self._initialized = False

    async def initialize(self) -> None:
        """Create the HTTP client.

        Raises:
            ConfigurationError: If no API key is configured
        """
        if not self.is_configured:
            raise ConfigurationError("Perplexity API key not configured")
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._config.base_url,
                timeout=self._config.timeout,
                headers={
                    "Authorization": f"Bearer {self._config.api_key}",
                    "Content-Type": "application/json",
                },
            )
        self._initialized = True

    async def complete(self, request: CompletionRequest) -> CompletionResult:
        """Run one chat completion.

        Raises:
            ConfigurationError: If no API key is configured
            ProviderTransportError: On network failure or timeout
            ProviderHTTPError: On non-200 status or an error payload
            ProviderResponseError: If the response carries no message content
        """
        if not self.is_configured:
            raise ConfigurationError("Perplexity API key not configured")
        if not self._client:
            await self.initialize()

        body: Dict[str, Any] = {
            "model": request.model,
            "messages": [
                {"role": "system", "content": request.system_prompt},
                {"role": "user", "content": request.user_prompt},
            ],
            "temperature": request.temperature,
            "max_tokens": request.max_tokens,
        }
        if request.return_citations:
            body["return_citations"] = True
        if request.search_recency_filter:
            body["search_recency_filter"] = request.search_recency_filter

        try:
            response = await self._client.post(
                "/chat/completions",
                json=body,
                timeout=request.timeout,
            )
        except httpx.HTTPError as e:
            logger.error(f"❌ Perplexity request failed: {type(e).__name__}: {e}")
            raise ProviderTransportError(f"API request failed: {e}") from e

        if response.status_code != 200:
            detail = _error_detail(response)
            logger.error(f"❌ Perplexity API error ({response.status_code}): {detail}")
            raise ProviderHTTPError(response.status_code, detail)

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderResponseError("Response body is not JSON") from e

        if not isinstance(data, dict):
            raise ProviderResponseError("Invalid API response format")
        if data.get("error"):
            error = data["error"]
            detail = error.get("message") if isinstance(error, dict) else str(error)
            logger.error(f"❌ Perplexity reported an error: {detail}")
            raise ProviderHTTPError(response.status_code, detail)

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise ProviderResponseError("Invalid API response format") from e
        if not isinstance(content, str):
            raise ProviderResponseError("Invalid API response format")

        return CompletionResult(
            content=content.strip(),
            citations=extract_citations(data),
            model=data.get("model"),
        )

    async def shutdown(self) -> None:
        """Clean up resources and shut down the provider."""
        if self._client:
            await self._client.aclose()
            self._client = None
        self._initialized = False

    @property
    def provider_name(self) -> str:
        """Get the name of the provider."""
        return "Perplexity"

    @property
    def is_configured(self) -> bool:
        """Whether a non-empty API key is present."""
        return bool(self._config.api_key and self._config.api_key.strip())

    @property
    def is_available(self) -> bool:
        """Check if the provider is available and ready."""
        return self._initialized and self._client is not None
