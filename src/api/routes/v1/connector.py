"""
Connector endpoints (v1).

Schema inference, the JSON editor helpers, request body assembly,
config import/export, and running an assembled request against OpenAI.
Connector core errors are turned into 422 responses by the registered
exception handler.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body

from api.dependencies import OpenAIProxy
from api.middleware.request_context import update_request_context
from core.config_io import export_config, import_config
from core.payload_builder import build_request_body
from core.schema_inference import infer_schema_from_text
from models.connector import ConnectorConfig
from models.schemas.connector import (
    JsonFormatResponse,
    JsonTextRequest,
    JsonValidationResponse,
    PayloadResponse,
    RunResponse,
    SchemaInferenceRequest,
    SchemaInferenceResponse,
)
from utils.json_utils import format_json_text, json_pretty, validate_json_text
from utils.logger import logger

router = APIRouter()


@router.post(
    "/schema",
    response_model=SchemaInferenceResponse,
    summary="Infer JSON schema",
    description="Infer a JSON schema from an example JSON object.",
)
async def infer_schema(request: SchemaInferenceRequest) -> SchemaInferenceResponse:
    schema = infer_schema_from_text(request.example)
    return SchemaInferenceResponse(json_schema=schema, text=json_pretty(schema))


@router.post(
    "/json/validate",
    response_model=JsonValidationResponse,
    summary="Validate JSON text",
)
async def validate_json(request: JsonTextRequest) -> JsonValidationResponse:
    valid, message = validate_json_text(request.text)
    return JsonValidationResponse(valid=valid, message=message)


@router.post(
    "/json/format",
    response_model=JsonFormatResponse,
    summary="Format JSON text",
    description="Re-indent JSON text with 2 spaces. Invalid JSON is rejected with 422.",
)
async def format_json(request: JsonTextRequest) -> JsonFormatResponse:
    return JsonFormatResponse(text=format_json_text(request.text, field="text"))


@router.post(
    "/payload",
    response_model=PayloadResponse,
    summary="Assemble request body",
    description="Build the provider request body for a connector configuration.",
)
async def build_payload(config: ConnectorConfig) -> PayloadResponse:
    """Assemble the request body shown in the form's preview."""
    update_request_context(step_name=config.step_name or None)
    body = build_request_body(config)
    logger.log_request_body(config.provider, body)
    return PayloadResponse(provider=config.provider, api=config.api, body=body)


@router.post(
    "/config/export",
    summary="Export connector configuration",
    description="Serialize a connector configuration into a shareable JSON document.",
)
async def export_connector_config(config: ConnectorConfig) -> dict[str, Any]:
    return export_config(config)


@router.post(
    "/config/import",
    response_model=ConnectorConfig,
    response_model_by_alias=True,
    summary="Import connector configuration",
    description="Load an exported document back into a normalized connector configuration.",
)
async def import_connector_config(document: dict[str, Any] = Body(...)) -> ConnectorConfig:
    return import_config(document)


@router.post(
    "/run",
    response_model=RunResponse,
    summary="Run connector",
    description="Assemble the request body and send it to the provider.",
)
async def run_connector(config: ConnectorConfig, proxy: OpenAIProxy) -> RunResponse:
    """Assemble and send a connector request."""
    update_request_context(step_name=config.step_name or None)
    body = build_request_body(config)
    logger.log_request_body(config.provider, body)
    result = await proxy.create_response(body)
    return RunResponse(body=body, **result)
