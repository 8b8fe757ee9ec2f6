"""
Health check API schemas.

Provides response models for the health and liveness probes.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class OpenAIHealth(BaseModel):
    """OpenAI client configuration state."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "configured": True,
                "base_url": None,
            }
        }
    )

    configured: bool = Field(..., description="An API key is configured")
    base_url: str | None = Field(default=None, description="Custom base URL, if any")


class HealthResponse(BaseModel):
    """Health check response."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "status": "healthy",
                "version": "1.0.0",
                "environment": "development",
                "openai": {"configured": True},
            }
        }
    )

    status: Literal["healthy", "degraded"] = Field(
        ...,
        description="degraded when OpenAI proxy routes cannot be served",
        json_schema_extra={"example": "healthy"},
    )
    version: str = Field(..., description="Application version", json_schema_extra={"example": "1.0.0"})
    environment: str = Field(..., description="APP_ENV the process runs in")
    openai: OpenAIHealth = Field(..., description="OpenAI client state")


class LivenessResponse(BaseModel):
    """Kubernetes-style liveness probe response."""

    alive: bool = Field(
        default=True,
        description="Process is running",
        json_schema_extra={"example": True},
    )
