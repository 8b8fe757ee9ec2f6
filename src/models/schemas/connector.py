"""
Connector API schemas.

Request/response models for schema inference, the JSON editor helpers,
request body assembly and config import/export. The connector config
itself is :class:`models.connector.ConnectorConfig`.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class SchemaInferenceRequest(BaseModel):
    """Example JSON text to infer a schema from."""

    model_config = ConfigDict(
        json_schema_extra={"example": {"example": '{"name": "Ada", "age": 36}'}},
    )

    example: str = Field(..., description="JSON object text typed into the output example editor")


class SchemaInferenceResponse(BaseModel):
    """Inferred schema as a tree and as editor-ready text."""

    model_config = ConfigDict(populate_by_name=True)

    json_schema: dict[str, Any] = Field(..., alias="schema", description="Inferred schema tree")
    text: str = Field(..., description="Schema pretty-printed with 2-space indentation")


class JsonTextRequest(BaseModel):
    """Raw text from one of the form's JSON editors."""

    text: str = Field(..., description="Text to validate or format")


class JsonValidationResponse(BaseModel):
    """Verdict shown under a JSON editor."""

    model_config = ConfigDict(
        json_schema_extra={"example": {"valid": False, "message": "Invalid JSON: Expecting value"}},
    )

    valid: bool
    message: str


class JsonFormatResponse(BaseModel):
    """Re-indented JSON text."""

    text: str


class PayloadResponse(BaseModel):
    """Request body assembled for a connector."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "provider": "OpenAI",
                "api": "Responses API",
                "body": {
                    "model": "gpt-4.1",
                    "temperature": 0.1,
                    "top_p": 0.9,
                    "background": False,
                    "store": True,
                    "input": [{"role": "user", "content": "Hello"}],
                    "tool_choice": "auto",
                    "tools": [],
                },
            }
        }
    )

    provider: str
    api: str
    body: dict[str, Any] = Field(..., description="Provider request body")


class RunResponse(BaseModel):
    """Result of sending an assembled body to the provider."""

    body: dict[str, Any] = Field(..., description="Request body that was sent")
    response: dict[str, Any] = Field(..., description="Raw provider response")
    output_text: str | None = Field(default=None, description="Concatenated text output")
    structured_output: Any | None = Field(
        default=None,
        description="Parsed output when a JSON schema was requested and the text parses",
    )
