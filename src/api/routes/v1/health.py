"""
Health check endpoints (v1).

Provides health and liveness probes.
"""

from __future__ import annotations

from fastapi import APIRouter, Request

from api.dependencies import AppSettings
from models.schemas.health import HealthResponse, LivenessResponse, OpenAIHealth

router = APIRouter()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Reports whether the OpenAI proxy routes can be served.",
)
async def health_check(request: Request, settings: AppSettings) -> HealthResponse:
    """Health check endpoint."""
    configured = getattr(request.app.state, "openai_client", None) is not None
    return HealthResponse(
        status="healthy" if configured else "degraded",
        version=settings.app_version,
        environment=settings.app_env,
        openai=OpenAIHealth(configured=configured, base_url=settings.openai_base_url),
    )


@router.get(
    "/health/live",
    response_model=LivenessResponse,
    summary="Liveness probe",
    description="Always succeeds while the process is running.",
)
async def liveness() -> LivenessResponse:
    return LivenessResponse(alive=True)
