"""
Constants and configuration for LLM Connector.
Centralizes all magic numbers, lookup tables and configuration values.
Includes Pydantic validation for environment variables.
"""

from __future__ import annotations

import os
import threading

from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic_settings.sources import (
    DotEnvSettingsSource,
    PydanticBaseSettingsSource,
)

# ============================================================================
# Project Paths
# ============================================================================

#: Project root directory (parent of src/)
PROJECT_ROOT = Path(__file__).parent.parent.parent

# ============================================================================
# Provider Catalog - Single Source of Truth
# ============================================================================


@dataclass(frozen=True, slots=True)
class ProviderConfig:
    """Static description of an LLM provider shown in the connector form.

    Attributes:
        id: Provider key used in connector configs (e.g., "OpenAI")
        label: Human-readable name for the provider selector
        icon: Static asset path of the provider logo
        models: Models offered for the provider, in display order
        apis: Provider APIs a request body can be generated for
        supports_max_tokens: Whether the form exposes a max tokens field
    """

    id: str
    label: str
    icon: str
    models: tuple[str, ...]
    apis: tuple[str, ...] = ()
    supports_max_tokens: bool = True


#: Master provider configuration. Order determines display order in the form.
PROVIDER_CONFIGS: tuple[ProviderConfig, ...] = (
    ProviderConfig(
        "OpenAI",
        "OpenAI ChatGPT",
        "/logos/openai.svg",
        (
            "gpt-4.1",
            "gpt-4.1-mini",
            "gpt-4.1-nano",
            "o1-pro",
            "o1",
            "o3-mini",
            "gpt-4o",
            "gpt-4o-mini",
            "gpt-4.5-preview",
        ),
        ("Responses API",),
    ),
    ProviderConfig(
        "Anthropic",
        "Anthropic Claude",
        "/logos/claude.svg",
        ("claude-3-opus", "claude-3-sonnet", "claude-3-haiku"),
    ),
    ProviderConfig(
        "Google",
        "Google Gemini",
        "/logos/gemini.svg",
        ("gemini-1.5-pro-latest", "gemini-1.5-flash-latest", "gemini-pro", "gemini-pro-vision"),
    ),
    ProviderConfig(
        "DeepSeek",
        "DeepSeek",
        "/logos/deepseek.svg",
        ("deepseek-coder", "deepseek-coder-instruct", "deepseek-chat"),
    ),
    ProviderConfig("Custom", "Custom", "/logos/custom.svg", ()),
)

#: Provider lookup by id (derived from PROVIDER_CONFIGS).
PROVIDERS: MappingProxyType[str, ProviderConfig] = MappingProxyType({p.id: p for p in PROVIDER_CONFIGS})

#: Provider selected in a fresh connector form.
DEFAULT_PROVIDER = "OpenAI"

#: Model selected in a fresh connector form.
DEFAULT_MODEL = PROVIDERS[DEFAULT_PROVIDER].models[0]

#: Only API a request body can currently be assembled for.
RESPONSES_API = "Responses API"

# ============================================================================
# Request Body Defaults
# ============================================================================

DEFAULT_TEMPERATURE = 0.1
DEFAULT_TOP_P = 0.9
DEFAULT_TOP_K = 50
DEFAULT_MAX_TOKENS = "2048"
DEFAULT_TOOL_CHOICE = "auto"

#: Allowed values of the web search tool's search_context_size.
SEARCH_CONTEXT_SIZES: tuple[str, ...] = ("low", "medium", "high")
DEFAULT_SEARCH_CONTEXT_SIZE = "medium"

#: Header of the natural-language web search block appended to the user prompt.
WEB_SEARCH_INSTRUCTIONS_HEADER = "Web Search Instructions:"

#: Name of the structured output format sent with text.format.
STRUCTURED_OUTPUT_NAME = "structured_output"

DEFAULT_OUTPUT_EXAMPLE = (
    '{\n  "name": "John Doe",\n  "age": 40,\n  "active": true,\n'
    '  "hobbies": ["reading",  "gaming",  "music" ]\n}'
)

DEFAULT_JSON_SCHEMA = '{\n  "type": "object",\n  "properties": {\n    "answer": { "type": "string" }\n  }\n}'

DEFAULT_TOOL_PARAMETERS = '{\n  "type": "object",\n  "properties": {},\n  "required": []\n}'

# ============================================================================
# Evaluation Tables
# ============================================================================

#: Evaluation category -> evaluation types, in display order.
EVALUATION_CATEGORIES: MappingProxyType[str, tuple[str, ...]] = MappingProxyType(
    {
        "Structural/Format": ("format_check", "regex", "keyword_presence", "response_lenght"),
        "Content Safety": ("toxicity_check", "bias_detection", "hate_speech"),
        "Factual Integrity": ("hallucination_check", "factual_consistency", "faithfulness"),
        "Semantic Quality": (
            "answer_relevance",
            "instruction_following",
            "completenes",
            "coherence",
            "conciseness_verbosity",
            "reasoning_quality",
        ),
        "Custom": ("custom",),
    }
)

#: Offline evaluation types. These never get a target score or a retry policy.
TYPES_WITHOUT_SCORE_AND_RETRY: frozenset[str] = frozenset(
    {"format_check", "regex", "keyword_presence", "response_lenght"}
)

EVALUATION_TYPE_LABELS: MappingProxyType[str, str] = MappingProxyType(
    {
        "format_check": "Format Check (Offline)",
        "regex": "Regex Pattern Validation (Offline)",
        "keyword_presence": "Keyword Presence (Offline)",
        "response_lenght": "Response Length Check (Offline)",
        "toxicity_check": "Toxicity Check (Online)",
        "bias_detection": "Bias Detection (Online)",
        "hate_speech": "Hate Speech / Threats (Online)",
        "hallucination_check": "Hallucination Check (Online)",
        "factual_consistency": "Factual Consistency (Online)",
        "faithfulness": "Faithfulness (Online)",
        "answer_relevance": "Answer Relevance (Online)",
        "instruction_following": "Instruction Following (Online)",
        "completenes": "Completeness (Online)",
        "coherence": "Coherence (Online)",
        "conciseness_verbosity": "Conciseness / Verbosity (Online)",
        "reasoning_quality": "Reasoning Quality (Online)",
        "custom": "Custom Prompt (Online)",
    }
)

EVALUATION_TYPE_DESCRIPTIONS: MappingProxyType[str, str] = MappingProxyType(
    {
        "format_check": "Verifies if the output matches the expected structural format.",
        "regex": "Checks if the output matches a defined regex pattern.",
        "keyword_presence": "Checks whether specific keywords are present in the response.",
        "response_lenght": "Ensures the response length meets expected constraints.",
        "toxicity_check": "Detects toxic, offensive, or harmful language in the output.",
        "bias_detection": "Detects biased or unfair statements.",
        "hate_speech": "Identifies hate speech, threats, or abusive content.",
        "hallucination_check": "Checks whether the output contains made-up or hallucinated facts.",
        "factual_consistency": "Ensures the output is factually consistent with the input context.",
        "faithfulness": "Measures if the output faithfully represents the source or input.",
        "answer_relevance": "Checks whether the answer is relevant to the question.",
        "instruction_following": "Evaluates if the response correctly follows instructions.",
        "completenes": "Verifies whether the response fully answers the question.",
        "coherence": "Checks whether the output is logically organized and consistent.",
        "conciseness_verbosity": "Evaluates if the output is concise or overly verbose.",
        "reasoning_quality": "Measures logical reasoning quality in the response.",
        "custom": "Define your own evaluation logic with a custom prompt.",
    }
)

#: External evaluation tools a connector run can be sent to.
EVALUATOR_OPTIONS: MappingProxyType[str, MappingProxyType[str, str]] = MappingProxyType(
    {
        "arize": MappingProxyType({"label": "Arize", "icon": "/logos/arize.png"}),
        "opik": MappingProxyType({"label": "Opik", "icon": "/logos/opik.svg"}),
    }
)

#: Starting text of a custom evaluation prompt.
EVALUATOR_PROMPT_TEMPLATE = """You are an evaluator specialized in ......

Check if my output response contains any ......

-----DO NOT CHANGE BEYOND THIS LINE------
Respond ONLY in this JSON format:

{
  "[score_field]": float (0.0 to 1.0),
  "explanation": "A short explanation of the score."
}"""

#: User prompt presets offered by the prompt dropdown.
SAVED_PROMPTS: tuple[MappingProxyType[str, str], ...] = (
    MappingProxyType(
        {
            "label": "Bullet Summary",
            "value": "Summarize the key points about AI in education in 3 clear bullet points.",
        }
    ),
    MappingProxyType(
        {
            "label": "Executive Summary",
            "value": (
                "Write an executive summary highlighting the main impacts of AI in education in a short paragraph."
            ),
        }
    ),
    MappingProxyType(
        {
            "label": "One-Sentence Summary",
            "value": "Summarize the role of AI in education in a single, concise sentence.",
        }
    ),
)

# ============================================================================
# OpenAI Proxy Configuration
# ============================================================================

#: Maximum size in bytes of a file forwarded to the OpenAI files API (5MB).
MAX_UPLOAD_FILE_SIZE = 5 * 1024 * 1024

#: MIME types accepted for upload. Anything else is rejected before forwarding.
ALLOWED_UPLOAD_CONTENT_TYPES: frozenset[str] = frozenset({"text/plain", "text/csv", "application/pdf"})

#: Purpose attached to every uploaded file.
UPLOAD_FILE_PURPOSE = "user_data"

#: Name given to vector stores created without one.
DEFAULT_VECTOR_STORE_NAME = "LLMConnector Vector Store"

#: Expiration anchor used when a vector store is created with expires_in_days.
VECTOR_STORE_EXPIRATION_ANCHOR = "last_active_at"

#: Model id prefixes kept by the model listing endpoint.
CHAT_MODEL_PREFIXES: tuple[str, ...] = ("gpt-", "o")

#: Decimal places kept in moderation category scores.
MODERATION_SCORE_PRECISION = 5

# ============================================================================
# Logging Configuration
# ============================================================================

#: Maximum size in bytes for log files before rotation (10MB).
LOG_MAX_SIZE = 10 * 1024 * 1024

#: Number of connector log backups to retain during rotation.
LOG_BACKUP_COUNT_CONNECTOR = 5

#: Number of error log backups to retain during rotation.
LOG_BACKUP_COUNT_ERRORS = 3

#: Maximum characters to show in log previews of prompts.
LOG_PREVIEW_LENGTH = 50

# ============================================================================
# Environment Configuration with Pydantic Validation
# ============================================================================

#: Valid environment names for configuration loading
Environment = Literal["development", "production", "test"]

#: Source directory for .env file resolution
_SRC_DIR = Path(__file__).parent.parent


def _get_env_files() -> list[Path]:
    """Determine which .env files to load based on APP_ENV.

    Load order (later files override earlier - pydantic-settings last-wins):
    1. .env (base defaults) - lowest priority
    2. .env.{environment} (environment-specific overrides)
    3. .env.local (local developer overrides, gitignored) - highest priority

    Returns:
        List of Path objects for env files that exist.
    """
    env_name = os.getenv("APP_ENV", "development").lower()
    if env_name not in ("development", "production", "test"):
        env_name = "development"

    candidates = [
        _SRC_DIR / ".env",
        _SRC_DIR / f".env.{env_name}",
        _SRC_DIR / ".env.local",
    ]
    return [p for p in candidates if p.exists()]


def _reload_dotenv_into_environ() -> None:
    """Load our dotenv chain into os.environ so .env.{APP_ENV} wins over a bare .env.

    Must be called BEFORE Settings() instantiation.
    """
    from dotenv import load_dotenv

    for env_file in _get_env_files():
        load_dotenv(env_file, override=True)


class Settings(BaseSettings):
    """Environment settings with validation and environment-specific file support.

    Configuration priority (highest to lowest):
    1. Values passed to Settings() constructor
    2. Environment variables (standard Docker/K8s behavior)
    3. .env.local > .env.{APP_ENV} > .env (dotenv files, last wins)

    The OpenAI key is optional at startup so the form endpoints (schema
    inference, payload preview, config import/export) work without one.
    Proxy endpoints fail with a configuration error until it is set.
    """

    # Environment identification
    app_env: Environment = Field(default="development", description="Application environment")

    # OpenAI credentials
    openai_api_key: str | None = Field(default=None, description="OpenAI API key used by the proxy endpoints")
    openai_base_url: str | None = Field(default=None, description="Override for the OpenAI API base URL")

    # Debug and logging
    debug: bool = Field(default=False, description="Enable debug logging")
    http_request_logging: bool = Field(default=False, description="Enable HTTP request/response logging")
    enable_content_logging: bool = Field(
        default=False,
        description="Include (redacted) prompt previews in logs",
    )

    # Request limits
    max_upload_size: int = Field(
        default=MAX_UPLOAD_FILE_SIZE,
        description="Maximum upload file size in bytes (default 5MB)",
    )
    max_request_body_size: int = Field(
        default=1 * 1024 * 1024,
        description="Maximum JSON request body size in bytes (default 1MB)",
    )

    # API server
    api_port: int = Field(default=8000, description="FastAPI port")
    api_host: str = Field(default="0.0.0.0", description="FastAPI host")
    app_version: str = Field(default="1.0.0", description="Application version")

    # CORS
    cors_allow_origins: str = Field(default="*", description="Comma-separated list of allowed origins")
    cors_allow_methods: str = Field(default="*", description="Comma-separated list of allowed methods")
    cors_allow_headers: str = Field(default="*", description="Comma-separated list of allowed headers")
    cors_allow_credentials: bool = Field(default=False, description="Allow credentialed CORS requests")

    # HTTP client timeouts for proxied OpenAI calls
    http_read_timeout: float = Field(default=600.0, description="HTTP read timeout for OpenAI calls (seconds)")

    # Hot-reload support (development only)
    config_hot_reload: bool = Field(
        default=False,
        description="Enable configuration hot-reloading (development only, has performance cost)",
    )

    model_config = SettingsConfigDict(
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize settings source priority for environment-specific config.

        Priority (highest to lowest):
        1. init_settings - Values passed to Settings() constructor
        2. env_settings - Environment variables
        3. dotenv files - .env.local > .env.{APP_ENV} > .env (last-wins in list)
        """
        dotenv_source = DotEnvSettingsSource(
            settings_cls,
            env_file=_get_env_files(),
            env_file_encoding="utf-8",
        )
        return (init_settings, env_settings, dotenv_source)

    @field_validator("app_env", mode="before")
    @classmethod
    def validate_app_env(cls, v: str | None) -> str:
        """Validate and normalize APP_ENV value."""
        if v is None:
            return "development"
        normalized = str(v).lower()
        if normalized not in ("development", "production", "test"):
            raise ValueError(f"app_env must be 'development', 'production', or 'test', got '{v}'")
        return normalized

    @field_validator("openai_api_key")
    @classmethod
    def validate_openai_api_key(cls, v: str | None) -> str | None:
        """Basic validation of OpenAI API key format."""
        if v is not None and (not v or len(v) < 10):
            raise ValueError("Invalid OpenAI API key format")
        return v

    @field_validator("max_upload_size", "max_request_body_size")
    @classmethod
    def validate_positive_size(cls, v: int) -> int:
        """Size limits must be positive."""
        if v <= 0:
            raise ValueError("size limits must be positive")
        return v

    @property
    def cors_origins_list(self) -> list[str]:
        return _split_csv(self.cors_allow_origins)

    @property
    def cors_methods_list(self) -> list[str]:
        return _split_csv(self.cors_allow_methods)

    @property
    def cors_headers_list(self) -> list[str]:
        return _split_csv(self.cors_allow_headers)

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.app_env == "production"


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


# ============================================================================
# Settings Management (Thread-safe with Hot-Reload Support)
# ============================================================================


class _SettingsManager:
    """Thread-safe settings manager with optional hot-reload support.

    Uses a class to avoid global statement warnings from linters.
    """

    __slots__ = ("_instance", "_lock")

    def __init__(self) -> None:
        self._instance: Settings | None = None
        self._lock = threading.Lock()

    def get(self) -> Settings:
        """Get settings instance with optional hot-reload support.

        Returns:
            Validated Settings instance.

        Raises:
            ValueError: If configuration is invalid.
        """
        if self._instance is not None and not self._instance.config_hot_reload:
            return self._instance

        with self._lock:
            # Double-check after acquiring lock
            if self._instance is not None and not self._instance.config_hot_reload:
                return self._instance

            _reload_dotenv_into_environ()
            self._instance = Settings()
            return self._instance

    def reload(self) -> Settings:
        """Force reload settings from environment files."""
        with self._lock:
            _reload_dotenv_into_environ()
            self._instance = Settings()
            return self._instance

    def clear(self) -> None:
        """Clear cached settings instance."""
        with self._lock:
            self._instance = None


# Module-level singleton manager
_settings_manager = _SettingsManager()


def get_settings() -> Settings:
    """Get settings instance with optional hot-reload support.

    This is the primary entry point for accessing application settings.
    Settings are validated on first access and cached.

    In development with CONFIG_HOT_RELOAD=true, settings are reloaded
    on each call to pick up .env file changes without restart.
    """
    return _settings_manager.get()


def reload_settings() -> Settings:
    """Force reload settings from environment files."""
    return _settings_manager.reload()


def clear_settings_cache() -> None:
    """Clear cached settings instance.

    Primarily useful for testing to ensure fresh settings on each test.
    """
    _settings_manager.clear()
