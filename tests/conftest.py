"""Shared test fixtures for the LLM Connector test suite.

Provides settings mocks that work without a .env file, request context
isolation, and common connector config builders.
"""

from __future__ import annotations

from collections.abc import Generator
from typing import Any
from unittest.mock import MagicMock, patch

import pytest

# ============================================================================
# EARLY INITIALIZATION: Runs before test collection
# ============================================================================


def _build_mock_settings() -> MagicMock:
    settings = MagicMock()
    settings.app_env = "test"
    settings.app_version = "1.0.0-test"
    settings.openai_api_key = "test-openai-key"
    settings.openai_base_url = None
    settings.debug = False
    settings.http_request_logging = False
    settings.http_read_timeout = 30.0
    settings.enable_content_logging = False
    settings.max_upload_size = 5 * 1024 * 1024
    settings.max_request_body_size = 1024 * 1024
    settings.cors_origins_list = ["*"]
    settings.cors_methods_list = ["*"]
    settings.cors_headers_list = ["*"]
    settings.cors_allow_credentials = False
    settings.api_host = "127.0.0.1"
    settings.api_port = 8000
    settings.is_development = False
    settings.is_production = False
    settings.config_hot_reload = False
    return settings


def pytest_configure(config: pytest.Config) -> None:
    """Patch get_settings before test modules (and the app) are imported.

    Modules bind get_settings at import time, so the patch must be active
    before collection to keep CI independent of .env files.
    """
    mock_settings = _build_mock_settings()

    cfg: Any = config
    cfg._mock_settings = mock_settings

    patcher = patch("core.constants.get_settings", return_value=mock_settings)
    patcher.start()
    cfg._settings_patcher = patcher


def pytest_unconfigure(config: pytest.Config) -> None:
    """Clean up settings mock after all tests complete."""
    patcher = getattr(config, "_settings_patcher", None)
    if patcher:
        patcher.stop()


# ============================================================================
# Test Isolation
# ============================================================================


@pytest.fixture(autouse=True)
def reset_settings_singleton() -> Generator[None, None, None]:
    """Reset the settings singleton so tests building real Settings start fresh."""
    from core import constants

    constants._settings_manager._instance = None
    yield
    constants._settings_manager._instance = None


@pytest.fixture(autouse=True)
def clear_context() -> Generator[None, None, None]:
    """Ensure no request context leaks between tests."""
    from api.middleware.request_context import clear_request_context

    clear_request_context()
    yield
    clear_request_context()


@pytest.fixture
def mock_settings(pytestconfig: pytest.Config) -> MagicMock:
    """The settings mock installed in pytest_configure."""
    cfg: Any = pytestconfig
    settings: MagicMock = cfg._mock_settings
    return settings


# ============================================================================
# Connector Fixtures
# ============================================================================


@pytest.fixture
def minimal_config_data() -> dict[str, Any]:
    """Smallest form document that assembles: a prompt and a model, nothing optional."""
    return {
        "userPrompt": "Summarize AI in education.",
        "selectedModel": "gpt-4.1",
        "allowWebSearch": False,
        "selectedVectorStoreIds": [],
        "tools": [],
        "jsonSchema": "",
    }


@pytest.fixture
def full_config_data() -> dict[str, Any]:
    """Form document exercising every tool kind and structured output."""
    return {
        "stepName": "Research step",
        "provider": "OpenAI",
        "selectedModel": "gpt-4o",
        "temperature": 0.3,
        "top_p": 0.8,
        "storeLogsProvider": False,
        "backgroundMode": True,
        "systemPrompt": "  You are concise.  ",
        "userPrompt": "Find recent papers.",
        "allowWebSearch": True,
        "webSearch": {
            "search_engine": "bing",
            "num_results": 5,
            "exclude_keywords": ["spam", "ads"],
            "follow_links_depth": None,
            "cache_ttl": None,
            "safe_search": True,
            "rerank_results": False,
        },
        "webSearchParams": {
            "country": "GB",
            "state": "",
            "city": "London",
            "timezone": "Europe/London",
            "search_context_size": "high",
        },
        "selectedVectorStoreIds": ["vs_1", "vs_2"],
        "toolChoice": "lookup",
        "tools": [
            {
                "toolType": "function",
                "name": "lookup",
                "description": "Look something up",
                "parameters": '{"type": "object", "properties": {"q": {"type": "string"}}}',
            },
            {
                "toolType": "mcp",
                "server_label": "docs",
                "server_url": "https://mcp.example.com",
                "auth_token": "tok_123",
            },
        ],
        "jsonSchema": '{"type": "object", "properties": {"title": {"type": "string"}}}',
    }
