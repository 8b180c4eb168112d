"""Dependency injection configuration for hexagonal architecture."""

import logging
import os
from functools import lru_cache
from typing import Any, Dict, Optional

from dotenv import load_dotenv

from ..domain.models.options import FactCheckOptions
from ..domain.services.fact_checking_service import FactCheckingService
from .ai.factory import AIProviderFactory
from .jobs.memory_job_store import InMemoryJobStore

# Load environment variables from .env file if it exists
load_dotenv()

logger = logging.getLogger(__name__)


class ServiceContainer:
    """Service container for dependency injection."""

    def __init__(self, options: Optional[FactCheckOptions] = None):
        """Initialize service container."""
        self._services: Dict[str, Any] = {}
        self._options = options
        self._setup_services()

    def _setup_services(self):
        """Setup services that need no credentials."""
        logger.info("🔧 Setting up service container...")

        options = self._options or FactCheckOptions.from_env()
        if not os.getenv("PERPLEXITY_API_KEY"):
            logger.warning("⚠️ PERPLEXITY_API_KEY not found in environment variables")

        self._services = {
            'options': options,
            'ai_factory': AIProviderFactory(),
            'job_store': InMemoryJobStore(),
            # Created lazily once the provider can be initialized
            'fact_checking_service': None,
        }

        logger.info("✅ Service container setup completed")

    async def _ensure_fact_checking_service(self) -> FactCheckingService:
        """Ensure fact checking service is created with its provider.

        Raises:
            ConfigurationError: If the provider has no API key
        """
        if self._services['fact_checking_service'] is None:
            logger.info("🔧 Creating FactCheckingService with provider...")
            ai_factory: AIProviderFactory = self._services['ai_factory']
            provider = ai_factory.get_provider("perplexity")
            if provider is None:
                provider = await ai_factory.create_provider("perplexity")
            self._services['fact_checking_service'] = FactCheckingService(
                provider, self._services['options']
            )
            logger.info("✅ FactCheckingService created")

        return self._services['fact_checking_service']

    def get(self, service_name: str) -> Any:
        """Get a service by name.

        Raises:
            KeyError: If service not found
        """
        if service_name not in self._services:
            raise KeyError(f"Service '{service_name}' not found")
        return self._services[service_name]

    def set(self, service_name: str, service: Any) -> None:
        """Replace a service, e.g. with a preconfigured instance."""
        self._services[service_name] = service

    def get_options(self) -> FactCheckOptions:
        """Get fact-check options."""
        return self.get('options')

    def get_ai_factory(self) -> AIProviderFactory:
        """Get the provider factory."""
        return self.get('ai_factory')

    def get_job_store(self) -> InMemoryJobStore:
        """Get the job-state store."""
        return self.get('job_store')

    async def get_fact_checking_service(self) -> FactCheckingService:
        """Get fact checking service with its provider."""
        return await self._ensure_fact_checking_service()

    async def shutdown(self) -> None:
        """Shut down providers."""
        await self.get_ai_factory().shutdown()
        self._services['fact_checking_service'] = None


# Global service container instance
@lru_cache()
def get_service_container() -> ServiceContainer:
    """Get global service container instance."""
    return ServiceContainer()


# Convenience functions for FastAPI dependency injection
def get_job_store() -> InMemoryJobStore:
    """FastAPI dependency for the job store."""
    return get_service_container().get_job_store()


async def get_fact_checking_service() -> FactCheckingService:
    """FastAPI dependency for fact checking service."""
    return await get_service_container().get_fact_checking_service()
