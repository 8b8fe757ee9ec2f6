"""
Connector configuration import/export.

Exported documents use the form's camelCase keys. JSON-valued fields
(tool parameters, output example, JSON schema) are written as real JSON
rather than escaped strings so the file stays readable; importing turns
them back into editable text.
"""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from core.exceptions import ConnectorValidationError, InvalidJsonError
from models.connector import ConnectorConfig, FunctionTool
from utils.json_utils import parse_json_text
from utils.logger import logger


def _json_or_text(text: str) -> Any:
    """Parsed JSON when the text parses, the raw text otherwise."""
    try:
        return parse_json_text(text)
    except InvalidJsonError:
        return text


def export_config(config: ConnectorConfig) -> dict[str, Any]:
    """Serialize a connector config into an export document.

    Raises:
        ConnectorValidationError: If a function tool's parameters are not valid JSON
    """
    document = config.model_dump(mode="json", by_alias=True)

    tools: list[dict[str, Any]] = []
    for tool, dumped in zip(config.tools, document["tools"], strict=True):
        if isinstance(tool, FunctionTool):
            try:
                dumped["parameters"] = parse_json_text(tool.parameters, field=tool.name or "parameters")
            except InvalidJsonError as e:
                raise ConnectorValidationError(
                    f"Cannot export tool '{tool.name}': {e.message}",
                    field=tool.name or "parameters",
                ) from e
        tools.append(dumped)
    document["tools"] = tools

    document["outputExample"] = _json_or_text(config.output_example)
    document["jsonSchema"] = _json_or_text(config.json_schema)

    logger.info(f"Exported connector config '{config.step_name}' with {len(tools)} tools")
    return document


def import_config(document: str | dict[str, Any]) -> ConnectorConfig:
    """Load a connector config from an export document or its JSON text.

    Missing sections fall back to form defaults.

    Raises:
        InvalidJsonError: If the text is not valid JSON
        ConnectorValidationError: If the document does not describe a connector config
    """
    data = parse_json_text(document, field="config") if isinstance(document, str) else document
    if not isinstance(data, dict):
        raise ConnectorValidationError("Connector configuration must be a JSON object", field="config")

    cleaned = {key: value for key, value in data.items() if value is not None}
    try:
        config = ConnectorConfig.model_validate(cleaned)
    except ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first["loc"])
        raise ConnectorValidationError(
            f"Invalid connector configuration at '{location}': {first['msg']}",
            field=location,
        ) from e

    logger.info(f"Imported connector config '{config.step_name}' ({config.provider}/{config.selected_model})")
    return config


__all__ = ["export_config", "import_config"]
