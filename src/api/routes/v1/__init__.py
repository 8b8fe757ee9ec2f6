"""
API v1 Router - Aggregates all v1 endpoints.

Usage in main.py:
    from api.routes.v1 import router as v1_router
    app.include_router(v1_router, prefix="/api/v1")
"""

from fastapi import APIRouter

from api.routes.v1 import config, connector, health, openai

# Create the v1 API router
router = APIRouter()

# Health endpoints
router.include_router(
    health.router,
    tags=["Health"],
)

# Form catalog
router.include_router(
    config.router,
    tags=["Configuration"],
)

# Schema inference, JSON helpers, request assembly, import/export
router.include_router(
    connector.router,
    prefix="/connector",
    tags=["Connector"],
)

# OpenAI proxy
router.include_router(
    openai.router,
    prefix="/openai",
    tags=["OpenAI"],
)

__all__ = ["router"]
