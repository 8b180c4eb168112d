"""Factory for creating and managing reasoning providers."""

import os
from typing import Callable, Dict, Optional

from pydantic import ValidationError

from ...domain.errors import ConfigurationError
from ...domain.ports.reasoning_provider import ReasoningProvider
from .perplexity_adapter import PerplexityAdapter, PerplexityConfig

ProviderBuilder = Callable[..., ReasoningProvider]


def perplexity_config_from_env(**overrides) -> PerplexityConfig:
    """Build the Perplexity adapter config from ``PERPLEXITY_*`` variables.

    Explicit overrides win over the environment; unset variables fall back
    to the ``PerplexityConfig`` defaults.

    Raises:
        ConfigurationError: If a variable holds an unusable value
    """
    values = {"api_key": os.getenv("PERPLEXITY_API_KEY", "")}
    base_url = os.getenv("PERPLEXITY_BASE_URL")
    if base_url:
        values["base_url"] = base_url.rstrip("/")
    timeout = os.getenv("PERPLEXITY_TIMEOUT")
    try:
        if timeout:
            values["timeout"] = float(timeout)
        values.update({key: value for key, value in overrides.items() if value is not None})
        return PerplexityConfig(**values)
    except (ValueError, ValidationError) as e:
        raise ConfigurationError(f"Invalid Perplexity configuration: {e}") from e


def build_perplexity_provider(**overrides) -> PerplexityAdapter:
    return PerplexityAdapter(config=perplexity_config_from_env(**overrides))


class AIProviderFactory:
    """Factory for creating and managing reasoning providers."""

    def __init__(self):
        """Initialize the factory."""
        self._builders: Dict[str, ProviderBuilder] = {}
        self._instances: Dict[str, ReasoningProvider] = {}

        # Register default providers
        self.register_provider("perplexity", build_perplexity_provider)

    def register_provider(self, name: str, builder: ProviderBuilder) -> None:
        """Register a new reasoning provider.

        Args:
            name: Provider name
            builder: Callable returning an uninitialized provider from config overrides
        """
        self._builders[name] = builder

    async def create_provider(
        self,
        name: str,
        **overrides
    ) -> ReasoningProvider:
        """Create and initialize a provider instance.

        Args:
            name: Provider name
            **overrides: Config values taking precedence over the environment

        Returns:
            Initialized provider instance

        Raises:
            ValueError: If provider not found
            ConfigurationError: If the provider config is missing or invalid
        """
        if name not in self._builders:
            raise ValueError(f"Provider '{name}' not found")

        if name not in self._instances:
            provider = self._builders[name](**overrides)
            await provider.initialize()
            self._instances[name] = provider

        return self._instances[name]

    def get_provider(self, name: str) -> Optional[ReasoningProvider]:
        """Get an existing provider instance.

        Args:
            name: Provider name

        Returns:
            Provider instance if exists, None otherwise
        """
        return self._instances.get(name)

    @property
    def available_providers(self) -> Dict[str, bool]:
        """Get dictionary of registered providers and their availability."""
        return {
            name: name in self._instances
            for name in self._builders
        }

    async def shutdown(self) -> None:
        """Shutdown all provider instances."""
        for provider in self._instances.values():
            await provider.shutdown()
        self._instances.clear()
