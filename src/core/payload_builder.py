"""
Request body assembly for provider APIs.

Maps a :class:`models.connector.ConnectorConfig` into the JSON body the
provider expects. Only the OpenAI Responses API has a builder today:

    {
        "model": ..., "temperature": ..., "top_p": ...,
        "background": ..., "store": ...,
        "input": [{"role": "system"|"user", "content": ...}],
        "tool_choice": ...,
        "tools": [file_search | web_search_preview | function | mcp, ...],
        "text": {"format": {"type": "json_schema", ...}}   # optional
    }

Assembly is synchronous and deterministic: the same config always yields
the same body. Any validation failure aborts before a body is returned.
"""

from __future__ import annotations

import copy

from collections.abc import Callable
from types import MappingProxyType
from typing import Any

from core.constants import (
    DEFAULT_SEARCH_CONTEXT_SIZE,
    STRUCTURED_OUTPUT_NAME,
    WEB_SEARCH_INSTRUCTIONS_HEADER,
)
from core.exceptions import ConnectorValidationError, InvalidJsonError, MissingFieldError
from core.schema_inference import enforce_no_additional_properties
from models.connector import ConnectorConfig, McpTool, ValidatedFunctionTool, WebSearchOptions
from utils.json_utils import parse_json_text
from utils.logger import logger

RequestBody = dict[str, Any]


def web_search_instruction_lines(options: WebSearchOptions) -> list[str]:
    """Turn web search options into instruction sentences, in fixed order."""
    lines: list[str] = []

    if options.search_engine:
        lines.append(f'Use "{options.search_engine}" as the search engine.')
    if options.site_restriction:
        lines.append(f'Limit search to "{options.site_restriction}".')
    if options.num_results:
        lines.append(f"Return up to {options.num_results} results.")
    if options.date_range:
        lines.append(f'Restrict results to "{options.date_range}".')
    if options.result_format:
        lines.append(f'Format results as "{options.result_format}".')
    if options.snippet_length:
        lines.append(f"Each snippet should be about {options.snippet_length} characters.")
    if options.exclude_keywords:
        lines.append(f"Exclude results containing: {', '.join(options.exclude_keywords)}.")
    if options.query_boost:
        lines.append(f"Prioritize results including: {', '.join(options.query_boost)}.")
    if options.follow_links_depth:
        lines.append(f"Follow links up to {options.follow_links_depth} levels deep.")
    if options.cache_ttl:
        lines.append(f"Cache results for {options.cache_ttl} seconds.")
    if options.safe_search is not None:
        lines.append(f"Safe Search is {'enabled' if options.safe_search else 'disabled'}.")
    if options.rerank_results is not None:
        lines.append(f"Re-rank results using AI: {'yes' if options.rerank_results else 'no'}.")

    return lines


def web_search_instructions(config: ConnectorConfig) -> str:
    """Suffix appended to the user prompt, or "" when there is nothing to say."""
    if not config.allow_web_search or config.web_search is None:
        return ""

    lines = web_search_instruction_lines(config.web_search)
    if not lines:
        return ""

    body = "\n".join(f"- {line}" for line in lines)
    return f"\n\n{WEB_SEARCH_INSTRUCTIONS_HEADER}\n{body}"


def build_input_messages(config: ConnectorConfig) -> list[dict[str, str]]:
    messages: list[dict[str, str]] = []

    system_prompt = config.system_prompt.strip()
    if system_prompt:
        messages.append({"role": "system", "content": system_prompt})

    user_content = f"{config.user_prompt.strip()}{web_search_instructions(config)}"
    messages.append({"role": "user", "content": user_content.strip()})
    return messages


def _file_search_tool(vector_store_ids: list[str]) -> dict[str, Any]:
    return {"type": "file_search", "vector_store_ids": list(vector_store_ids)}


def _web_search_tool(config: ConnectorConfig) -> dict[str, Any]:
    location = config.web_search_params
    return {
        "type": "web_search_preview",
        "search_context_size": location.search_context_size or DEFAULT_SEARCH_CONTEXT_SIZE,
        "user_location": {
            "type": "approximate",
            "country": location.country or None,
            "region": location.state or None,
            "city": location.city or None,
            "timezone": location.timezone or None,
        },
    }


def _function_tool(tool: ValidatedFunctionTool) -> dict[str, Any]:
    return {
        "type": "function",
        "function": {
            "name": tool.name,
            "description": tool.description,
            "parameters": tool.parameters,
        },
    }


def _mcp_tool(tool: McpTool) -> dict[str, Any]:
    return {
        "type": "mcp",
        "server_label": tool.server_label,
        "server_url": tool.server_url,
        "headers": {"Authorization": f"Bearer {tool.auth_token}"},
    }


def build_tools(config: ConnectorConfig) -> list[dict[str, Any]]:
    """Assemble the ordered tool list.

    Raises:
        ConnectorValidationError: If a named function tool has invalid parameters
    """
    tools: list[dict[str, Any]] = []

    if config.selected_vector_store_ids:
        tools.append(_file_search_tool(config.selected_vector_store_ids))

    if config.allow_web_search:
        tools.append(_web_search_tool(config))

    for function_tool in config.function_tools:
        if function_tool.is_emittable:
            tools.append(_function_tool(function_tool.to_validated()))

    for mcp_tool in config.mcp_tools:
        if mcp_tool.is_complete:
            tools.append(_mcp_tool(mcp_tool))

    return tools


def build_structured_output(json_schema_text: str) -> dict[str, Any] | None:
    """Structured-output directive for a JSON schema, or None when the text is blank.

    Raises:
        ConnectorValidationError: If the schema text is not valid JSON
    """
    if not json_schema_text.strip():
        return None

    try:
        parsed = parse_json_text(json_schema_text, field="jsonSchema")
    except InvalidJsonError as e:
        raise ConnectorValidationError(
            f"Invalid JSON Schema for structured output: {e.reason}",
            field="jsonSchema",
        ) from e

    try:
        schema = enforce_no_additional_properties(copy.deepcopy(parsed))
    except RecursionError as e:
        raise ConnectorValidationError(
            "JSON Schema for structured output is nested too deeply",
            field="jsonSchema",
        ) from e

    return {
        "format": {
            "type": "json_schema",
            "name": STRUCTURED_OUTPUT_NAME,
            "strict": True,
            "schema": schema,
        }
    }


def build_responses_body(config: ConnectorConfig) -> RequestBody:
    """Assemble an OpenAI Responses API request body.

    Raises:
        MissingFieldError: If the user prompt or model is blank
        ConnectorValidationError: If a function tool or the JSON schema is invalid
    """
    if not config.user_prompt.strip():
        raise MissingFieldError("userPrompt", "Please enter a user prompt before generating the request body.")
    if not config.selected_model.strip():
        raise MissingFieldError("selectedModel", "Please select a model before generating the request body.")

    body: RequestBody = {
        "model": config.selected_model,
        "temperature": config.temperature,
        "top_p": config.top_p,
        "background": config.background_mode,
        "store": config.store_logs_provider,
        "input": build_input_messages(config),
        "tool_choice": config.tool_choice,
        "tools": build_tools(config),
    }

    structured_output = build_structured_output(config.json_schema)
    if structured_output is not None:
        body["text"] = structured_output

    logger.debug(
        f"Assembled Responses API body: model={body['model']} "
        f"input={len(body['input'])} tools={len(body['tools'])} structured={'text' in body}"
    )
    return body


#: Body builders by provider id.
BODY_BUILDERS: MappingProxyType[str, Callable[[ConnectorConfig], RequestBody]] = MappingProxyType(
    {"OpenAI": build_responses_body}
)


def build_request_body(config: ConnectorConfig) -> RequestBody:
    """Assemble the request body for the config's provider.

    Raises:
        ConnectorValidationError: If the provider has no body builder
    """
    builder = BODY_BUILDERS.get(config.provider)
    if builder is None:
        raise ConnectorValidationError(
            f"Request bodies cannot be generated for provider '{config.provider}' yet",
            field="provider",
        )
    return builder(config)


__all__ = [
    "BODY_BUILDERS",
    "RequestBody",
    "build_input_messages",
    "build_request_body",
    "build_responses_body",
    "build_structured_output",
    "build_tools",
    "web_search_instruction_lines",
    "web_search_instructions",
]
