from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request
from openai import AsyncOpenAI

from api.middleware.exception_handlers import ConfigurationError
from api.services.openai_proxy import OpenAIProxyService
from core.constants import Settings, get_settings


def get_app_settings() -> Settings:
    """Provide the cached application settings."""
    return get_settings()


def get_openai_client(request: Request) -> AsyncOpenAI:
    """Get the OpenAI client created at startup.

    Raises:
        ConfigurationError: If no API key was configured
    """
    client: AsyncOpenAI | None = getattr(request.app.state, "openai_client", None)
    if client is None:
        raise ConfigurationError("OPENAI_API_KEY", "OpenAI API key is not configured on the server")
    return client


def get_openai_service(
    client: Annotated[AsyncOpenAI, Depends(get_openai_client)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> OpenAIProxyService:
    """Provide the OpenAI proxy service."""
    return OpenAIProxyService(client, max_upload_size=settings.max_upload_size)


# Type aliases for cleaner route signatures
AppSettings = Annotated[Settings, Depends(get_app_settings)]
OpenAIProxy = Annotated[OpenAIProxyService, Depends(get_openai_service)]
