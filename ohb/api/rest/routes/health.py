"""
Health check endpoints.

Provides:
- /health - Overall health status
- /health/live - Liveness check
"""

from datetime import datetime, timezone
from typing import Literal

from fastapi import APIRouter

from ohb import __version__
from ohb.api.rest.models import HealthResponse
from ohb.api.rest.dependencies import get_app_state

router = APIRouter(prefix="/api/v1/health", tags=["Health"])


@router.get("", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Overall health check.

    Reports degraded until the command handler has been built.
    """
    state = get_app_state()

    components = {
        "api": "healthy",
        "event_bus": "healthy" if state.event_bus else "unhealthy",
        "command_handler": "healthy" if state.has_handler else "not_configured",
    }

    if "unhealthy" in components.values():
        overall_status: Literal["healthy", "degraded", "unhealthy"] = "unhealthy"
    elif "not_configured" in components.values():
        overall_status = "degraded"
    else:
        overall_status = "healthy"

    return HealthResponse(
        status=overall_status,
        version=__version__,
        timestamp=datetime.now(timezone.utc),
        components=components,
    )


@router.get("/live")
async def liveness_check() -> dict:
    """Returns 200 if process is alive."""
    return {
        "alive": True,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
