"""Error taxonomy for the fact-checking core.

Only ``ConfigurationError`` is allowed to escape the services. Provider
errors are raised by infrastructure adapters and absorbed by the domain
services into degraded verdicts or reports.
"""

from typing import Optional


class FactCheckError(Exception):
    """Base class for fact-checking errors."""


class ConfigurationError(FactCheckError):
    """Raised when the checker is not configured to run (e.g. missing API key)."""


class ProviderError(FactCheckError):
    """Base class for failures talking to the reasoning provider."""


class ProviderTransportError(ProviderError):
    """Network failure or timeout before a response was received."""


class ProviderHTTPError(ProviderError):
    """Provider answered with a non-success status or an error payload."""

    def __init__(self, status_code: int, detail: Optional[str] = None):
        self.status_code = status_code
        self.detail = detail or "API request failed"
        super().__init__(f"Provider API error ({status_code}): {self.detail}")


class ProviderResponseError(ProviderError):
    """Provider response did not carry the expected message content."""
