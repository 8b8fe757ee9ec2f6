from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from openai import AsyncOpenAI

from api.middleware.exception_handlers import register_exception_handlers
from api.middleware.request_context import RequestContextMiddleware
from api.middleware.request_limits import RequestSizeLimitMiddleware
from api.routes.v1 import router as v1_router
from core.constants import get_settings
from utils.client_factory import create_http_client, create_openai_client
from utils.logger import configure_uvicorn_logging, logger

# Settings are loaded via Pydantic Settings with environment-specific file support
# (.env, .env.{APP_ENV}, .env.local) - no manual dotenv loading needed
settings = get_settings()

if settings.debug:
    from core.constants import _get_env_files

    logger.info(f"Env files: {[f.name for f in _get_env_files()]}")
    logger.info(f"Settings: app_env={settings.app_env}, http_request_logging={settings.http_request_logging}")

# Configure uvicorn logging at module level to ensure workers use it
configure_uvicorn_logging()


def _setup_openai_client() -> AsyncOpenAI | None:
    """Create the OpenAI client used by the proxy endpoints, if a key is configured."""
    if not settings.openai_api_key:
        logger.warning("OPENAI_API_KEY is not set; OpenAI proxy endpoints are disabled")
        return None

    http_client = create_http_client(
        enable_logging=settings.http_request_logging,
        read_timeout=settings.http_read_timeout,
    )
    client = create_openai_client(settings.openai_api_key, base_url=settings.openai_base_url, http_client=http_client)
    logger.info(f"OpenAI client configured (base_url: {settings.openai_base_url or 'default'})")
    return client


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: create the OpenAI client, close it on shutdown."""
    app.state.openai_client = _setup_openai_client()

    try:
        yield
    finally:
        logger.info("Shutting down")
        if app.state.openai_client is not None:
            await app.state.openai_client.close()
            logger.info("OpenAI client closed")


app = FastAPI(
    title="LLM Connector API",
    description="""
## LLM Connector API

Backend for the LLM Connector form: turns a connector configuration into a
provider request body and proxies the OpenAI calls the form needs.

### Features
- **Schema Inference**: Infer a JSON schema from an example output
- **Request Assembly**: Build OpenAI Responses API bodies with tools and structured output
- **Config Import/Export**: Share connector configurations as JSON documents
- **OpenAI Proxy**: File upload, vector stores, model listing and moderation

### Versioning
API uses URL path versioning: `/api/v1/...`
""",
    version=settings.app_version,
    lifespan=lifespan,
    openapi_tags=[
        {
            "name": "Health",
            "description": "Health check endpoints for monitoring and orchestration",
        },
        {
            "name": "Configuration",
            "description": "Provider catalog and form tables",
        },
        {
            "name": "Connector",
            "description": "Schema inference, request assembly and config import/export",
        },
        {
            "name": "OpenAI",
            "description": "Server-side proxy for OpenAI files, vector stores, models and moderation",
        },
    ],
    openapi_url="/api/v1/openapi.json",
    docs_url="/api/v1/docs",
    redoc_url="/api/v1/redoc",
)

# Register global exception handlers for consistent error responses
register_exception_handlers(app)

# Note: Middleware is executed in reverse order of registration
app.add_middleware(RequestContextMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_methods_list,
    allow_headers=settings.cors_headers_list,
)

app.add_middleware(RequestSizeLimitMiddleware)

# Routes - API v1
app.include_router(v1_router, prefix="/api/v1")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.is_development,
        reload_dirs=["src"],
        log_config=None,
    )
