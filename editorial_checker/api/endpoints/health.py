"""Health check endpoints."""

from typing import Any, Dict

from fastapi import APIRouter

from ...infrastructure.dependencies import get_service_container

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check() -> Dict[str, Any]:
    """Check the health of the service components.

    Returns:
        Provider availability and the active verification settings
    """
    container = get_service_container()
    options = container.get_options()

    ai_status = {}
    for provider_name, is_active in container.get_ai_factory().available_providers.items():
        ai_status[provider_name.title()] = is_active

    return {
        "status": "healthy",
        "ai_providers": ai_status,
        "verification": {
            "mode": "multistep" if options.multistep_enabled else "aggregate",
            "model": options.model,
            "recency_window": options.recency_window.value,
            "max_claims": options.max_claims,
        },
        "active_jobs": len(container.get_job_store()),
    }
