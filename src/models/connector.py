"""
Connector configuration models.

Mirrors everything a user edits in the LLM Connector form. Python field
names are snake_case; the JSON documents exchanged with the form (and the
import/export file format) keep the form's camelCase keys through aliases.

Tool parameters, the output example and the JSON schema are kept as raw
editable text. Values arriving as JSON (for example from an exported
config file) are re-serialized to 2-space indented text on the way in.
The request assembler never reads raw tool text: it asks for a
:class:`ValidatedFunctionTool` through :meth:`FunctionTool.to_validated`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated, Any, Literal

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator, model_validator

from core.constants import (
    DEFAULT_JSON_SCHEMA,
    DEFAULT_MAX_TOKENS,
    DEFAULT_MODEL,
    DEFAULT_OUTPUT_EXAMPLE,
    DEFAULT_PROVIDER,
    DEFAULT_SEARCH_CONTEXT_SIZE,
    DEFAULT_TEMPERATURE,
    DEFAULT_TOOL_CHOICE,
    DEFAULT_TOOL_PARAMETERS,
    DEFAULT_TOP_K,
    DEFAULT_TOP_P,
    EVALUATION_CATEGORIES,
    EVALUATOR_PROMPT_TEMPLATE,
    PROVIDERS,
    RESPONSES_API,
)
from core.exceptions import ConnectorValidationError, InvalidJsonError
from utils.json_utils import json_pretty, parse_json_text


def as_json_text(v: Any) -> Any:
    """Keep strings as typed; serialize any other JSON value as indented text."""
    if v is None or isinstance(v, str):
        return v
    return json_pretty(v)


def force_str(v: Any) -> Any:
    """Coerce numbers typed into text inputs back to strings."""
    if isinstance(v, (int, float)) and not isinstance(v, bool):
        return str(v)
    return v


def blank_to_none(v: Any) -> Any:
    """Treat an empty form input as unset."""
    if isinstance(v, str) and not v.strip():
        return None
    return v


def split_keywords(v: Any) -> Any:
    """Accept comma-separated text for keyword list inputs."""
    if v is None:
        return []
    if isinstance(v, str):
        return [part.strip() for part in v.split(",") if part.strip()]
    return v


JsonText = Annotated[str, BeforeValidator(as_json_text)]
Stringified = Annotated[str, BeforeValidator(force_str)]
OptionalInt = Annotated[int | None, BeforeValidator(blank_to_none)]
OptionalStr = Annotated[str | None, BeforeValidator(blank_to_none)]
KeywordList = Annotated[list[str], BeforeValidator(split_keywords)]


class _FormModel(BaseModel):
    """Base for form-backed models: accept both aliases and field names."""

    model_config = ConfigDict(populate_by_name=True)


# =============================================================================
# Tools
# =============================================================================


@dataclass(frozen=True, slots=True)
class ValidatedFunctionTool:
    """Function tool whose parameters have been parsed into a JSON value."""

    name: str
    description: str
    parameters: Any


class FunctionTool(_FormModel):
    """User-defined function tool with raw, editable parameters text."""

    tool_type: Literal["function"] = Field(default="function", alias="toolType")
    name: str = ""
    description: str = ""
    parameters: JsonText = DEFAULT_TOOL_PARAMETERS

    @property
    def is_emittable(self) -> bool:
        """Whether the tool should be sent at all (named, with parameters text).

        Whitespace counts: a name of spaces is still a name, so its parameters get validated.
        """
        return bool(self.name) and bool(self.parameters)

    def to_validated(self) -> ValidatedFunctionTool:
        """Parse the parameters text.

        Raises:
            ConnectorValidationError: If the parameters are not valid JSON
        """
        try:
            parameters = parse_json_text(self.parameters, field=self.name)
        except InvalidJsonError as e:
            raise ConnectorValidationError(
                f"Invalid JSON in parameters for function '{self.name}': {e.reason}",
                field=self.name,
            ) from e
        return ValidatedFunctionTool(name=self.name, description=self.description or "", parameters=parameters)


class McpTool(_FormModel):
    """Remote MCP tool server reachable with a bearer token."""

    tool_type: Literal["mcp"] = Field(default="mcp", alias="toolType")
    server_label: str = ""
    server_url: str = ""
    auth_token: str = ""

    @property
    def is_complete(self) -> bool:
        return bool(self.server_label and self.server_url and self.auth_token)


ToolDefinition = Annotated[FunctionTool | McpTool, Field(discriminator="tool_type")]

# =============================================================================
# Web search
# =============================================================================


class WebSearchOptions(_FormModel):
    """Advanced web search preferences rendered as natural-language instructions.

    region and language are kept for round-tripping but never produce an
    instruction line.
    """

    search_engine: OptionalStr = "google"
    site_restriction: OptionalStr = None
    region: OptionalStr = None
    language: OptionalStr = None
    num_results: OptionalInt = 10
    date_range: OptionalStr = None
    result_format: OptionalStr = None
    snippet_length: OptionalInt = None
    exclude_keywords: KeywordList = Field(default_factory=list)
    query_boost: KeywordList = Field(default_factory=list)
    follow_links_depth: OptionalInt = 1
    cache_ttl: OptionalInt = 3600
    safe_search: bool | None = False
    rerank_results: bool | None = True

    @classmethod
    def blank(cls) -> WebSearchOptions:
        """Options with every preference unset, producing no instruction lines."""
        return cls(
            search_engine=None,
            num_results=None,
            follow_links_depth=None,
            cache_ttl=None,
            safe_search=None,
            rerank_results=None,
        )


class WebSearchLocation(_FormModel):
    """Approximate user location and context size for the web search tool."""

    country: OptionalStr = "US"
    state: OptionalStr = None
    city: OptionalStr = None
    timezone: OptionalStr = "America/New_York"
    search_context_size: Annotated[Literal["low", "medium", "high"] | None, BeforeValidator(blank_to_none)] = (
        DEFAULT_SEARCH_CONTEXT_SIZE
    )


# =============================================================================
# Evaluations
# =============================================================================


class Evaluation(_FormModel):
    """One evaluation rule attached to the connector.

    Unknown keys are preserved so exported files round-trip unchanged.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    category: str = ""
    type: str = ""
    custom_def: str = Field(default=EVALUATOR_PROMPT_TEMPLATE, alias="customDef")
    format: str = "XML"
    regex: str = ""
    keywords: str = ""
    response_length_type: str = Field(default="character", alias="responseLengthType")
    max_response_length: Stringified = Field(default="", alias="maxResponseLength")
    score: float | None = None
    stop: bool = False

    @model_validator(mode="after")
    def check_type_matches_category(self) -> Evaluation:
        """An evaluation type must belong to its category."""
        if self.category:
            if self.category not in EVALUATION_CATEGORIES:
                raise ValueError(f"Unknown evaluation category '{self.category}'")
            if self.type and self.type not in EVALUATION_CATEGORIES[self.category]:
                raise ValueError(f"Evaluation type '{self.type}' does not belong to category '{self.category}'")
        return self


# =============================================================================
# Connector configuration
# =============================================================================


class ConnectorConfig(_FormModel):
    """Everything the user edited in the connector form."""

    step_name: str = Field(default="", alias="stepName")
    provider: str = DEFAULT_PROVIDER
    provider_url: str = Field(default="", alias="providerUrl")
    account: str = ""
    evaluator_account: str = Field(default="", alias="account2")
    selected_model: str = Field(default=DEFAULT_MODEL, alias="selectedModel")
    api: str = RESPONSES_API

    temperature: float = DEFAULT_TEMPERATURE
    top_p: float = DEFAULT_TOP_P
    top_k: OptionalInt = DEFAULT_TOP_K
    max_tokens: Stringified = Field(default=DEFAULT_MAX_TOKENS, alias="maxTokens")
    store_logs_provider: bool = Field(default=True, alias="storeLogsProvider")
    background_mode: bool = Field(default=False, alias="backgroundMode")

    user_prompt: str = Field(default="", alias="userPrompt")
    system_prompt: str = Field(default="", alias="systemPrompt")

    allow_web_search: bool = Field(default=False, alias="allowWebSearch")
    web_search: WebSearchOptions | None = Field(default_factory=WebSearchOptions, alias="webSearch")
    web_search_params: WebSearchLocation = Field(default_factory=WebSearchLocation, alias="webSearchParams")

    selected_vector_store_ids: list[str] = Field(default_factory=list, alias="selectedVectorStoreIds")

    tool_choice: str = Field(default=DEFAULT_TOOL_CHOICE, alias="toolChoice")
    tools: list[ToolDefinition] = Field(default_factory=list)

    output_example: JsonText = Field(default=DEFAULT_OUTPUT_EXAMPLE, alias="outputExample")
    json_schema: JsonText = Field(default=DEFAULT_JSON_SCHEMA, alias="jsonSchema")

    evaluator_tool: str = Field(default="", alias="evaluatorTool")
    send_to_evaluation_tool: bool = Field(default=False, alias="sendToEvaluationTool")
    evaluations: list[Evaluation] = Field(default_factory=list)

    @field_validator("provider")
    @classmethod
    def validate_provider(cls, v: str) -> str:
        """Provider must be one of the catalog entries."""
        if v not in PROVIDERS:
            raise ValueError(f"provider must be one of {list(PROVIDERS)}")
        return v

    @field_validator("selected_vector_store_ids", mode="before")
    @classmethod
    def coerce_vector_store_ids(cls, v: Any) -> Any:
        """Older exports stored an empty object here."""
        if v is None or v == {}:
            return []
        return v

    @field_validator("web_search", mode="before")
    @classmethod
    def empty_web_search(cls, v: Any) -> Any:
        """An explicit empty object means no preferences, not the form defaults."""
        if v == {}:
            return WebSearchOptions.blank()
        return v

    @field_validator("web_search_params", mode="before")
    @classmethod
    def default_web_search_params(cls, v: Any) -> Any:
        return {} if v is None else v

    @model_validator(mode="after")
    def clear_evaluator_when_disabled(self) -> ConnectorConfig:
        """Evaluator selection only makes sense while sending to an evaluator."""
        if not self.send_to_evaluation_tool:
            self.evaluator_tool = ""
            self.evaluator_account = ""
        return self

    @property
    def function_tools(self) -> list[FunctionTool]:
        return [t for t in self.tools if isinstance(t, FunctionTool)]

    @property
    def mcp_tools(self) -> list[McpTool]:
        return [t for t in self.tools if isinstance(t, McpTool)]

    @property
    def tool_choice_options(self) -> list[str]:
        """Values the tool choice selector offers: auto, none, or a named function."""
        return ["auto", "none", *[t.name for t in self.function_tools if t.name.strip()]]


__all__ = [
    "ConnectorConfig",
    "Evaluation",
    "FunctionTool",
    "McpTool",
    "ToolDefinition",
    "ValidatedFunctionTool",
    "WebSearchLocation",
    "WebSearchOptions",
]
