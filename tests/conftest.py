"""Test configuration and common fixtures."""

import json
from datetime import date
from typing import Any, Dict, List, Optional, Union

import pytest

from editorial_checker.domain.models.options import FactCheckOptions
from editorial_checker.domain.ports.reasoning_provider import CompletionRequest, CompletionResult
from editorial_checker.domain.services.throttle import NoThrottle


class FakeReasoningProvider:
    """Reasoning provider returning queued results and recording every request."""

    def __init__(self, responses: Optional[List[Union[CompletionResult, Exception]]] = None, api_key: str = "test-key"):
        self.responses = list(responses or [])
        self.requests: List[CompletionRequest] = []
        self._api_key = api_key

    def queue(self, *responses: Union[CompletionResult, Exception]) -> None:
        self.responses.extend(responses)

    async def initialize(self) -> None:
        pass

    async def shutdown(self) -> None:
        pass

    async def complete(self, request: CompletionRequest) -> CompletionResult:
        self.requests.append(request)
        if not self.responses:
            raise AssertionError("No fake response queued")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    @property
    def call_count(self) -> int:
        return len(self.requests)

    @property
    def provider_name(self) -> str:
        return "Fake"

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    @property
    def is_available(self) -> bool:
        return True


def completion(payload: Union[Dict[str, Any], str], citations: Optional[List[Dict[str, Any]]] = None, fenced: bool = False) -> CompletionResult:
    """Build a completion result from a JSON payload or raw text."""
    content = payload if isinstance(payload, str) else json.dumps(payload)
    if fenced:
        content = f"```json\n{content}\n```"
    return CompletionResult(content=content, citations=citations or [])


@pytest.fixture
def make_completion():
    """Factory for completion results."""
    return completion


@pytest.fixture
def fake_provider() -> FakeReasoningProvider:
    """Provide an empty fake provider; tests queue responses on it."""
    return FakeReasoningProvider()


@pytest.fixture
def unconfigured_provider() -> FakeReasoningProvider:
    """Provide a fake provider without an API key."""
    return FakeReasoningProvider(api_key="")


@pytest.fixture
def options() -> FactCheckOptions:
    """Default options with no pacing delay."""
    return FactCheckOptions(request_delay=0.0)


@pytest.fixture
def no_throttle() -> NoThrottle:
    """Throttle that never waits."""
    return NoThrottle()


@pytest.fixture
def today() -> date:
    """Fixed date verdicts are grounded on."""
    return date(2026, 10, 19)
