"""
OpenAI proxy service.

Thin server-side wrapper around AsyncOpenAI so the API key never reaches
the browser. Results are returned as plain dicts in the shape the OpenAI
REST API uses; SDK exceptions propagate to the shared OpenAI exception
handler.
"""

from __future__ import annotations

import time

from typing import Any

from openai import AsyncOpenAI

from api.middleware.exception_handlers import AppException
from core.constants import (
    ALLOWED_UPLOAD_CONTENT_TYPES,
    CHAT_MODEL_PREFIXES,
    DEFAULT_VECTOR_STORE_NAME,
    MAX_UPLOAD_FILE_SIZE,
    MODERATION_SCORE_PRECISION,
    UPLOAD_FILE_PURPOSE,
    VECTOR_STORE_EXPIRATION_ANCHOR,
)
from core.exceptions import InvalidJsonError
from models.error_models import ErrorCode
from utils.json_utils import parse_json_text
from utils.logger import logger


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000


def validate_upload(filename: str, content_type: str | None, size: int, max_size: int = MAX_UPLOAD_FILE_SIZE) -> None:
    """Reject files the proxy will not forward.

    Raises:
        AppException: FILE_INVALID_TYPE for unsupported MIME types,
            FILE_TOO_LARGE above ``max_size``, VALIDATION_ERROR for empty files
    """
    if content_type not in ALLOWED_UPLOAD_CONTENT_TYPES:
        raise AppException(
            code=ErrorCode.FILE_INVALID_TYPE,
            message="Unsupported file type",
            details={"content_type": content_type or "unknown", "filename": filename},
        )
    if size == 0:
        raise AppException(
            code=ErrorCode.VALIDATION_ERROR,
            message="No valid file uploaded",
            details={"filename": filename},
        )
    if size > max_size:
        raise AppException(
            code=ErrorCode.FILE_TOO_LARGE,
            message=f"File exceeds maximum size of {max_size} bytes",
            details={"filename": filename, "size": size},
        )


def keep_chat_models(model_ids: list[str]) -> list[str]:
    """Chat-capable model IDs, sorted.

    Example:
        >>> keep_chat_models(["whisper-1", "o3-mini", "gpt-4o"])
        ['gpt-4o', 'o3-mini']
    """
    return sorted(model_id for model_id in model_ids if model_id.startswith(CHAT_MODEL_PREFIXES))


def round_moderation_scores(result: dict[str, Any], precision: int = MODERATION_SCORE_PRECISION) -> dict[str, Any]:
    """Round the first result's numeric category scores in place."""
    results = result.get("results")
    if not results or not isinstance(results[0].get("category_scores"), dict):
        return result

    scores = results[0]["category_scores"]
    results[0]["category_scores"] = {
        key: round(value, precision) if isinstance(value, (int, float)) and not isinstance(value, bool) else value
        for key, value in scores.items()
    }
    return result


def extract_structured_output(body: dict[str, Any], output_text: str | None) -> Any | None:
    """Parse the output text when the body asked for a JSON schema."""
    if "text" not in body or not output_text:
        return None
    try:
        return parse_json_text(output_text, field="output_text")
    except InvalidJsonError as e:
        logger.warning(f"Structured output did not parse: {e.reason}")
        return None


class OpenAIProxyService:
    """Forwards connector operations to the OpenAI API."""

    def __init__(self, client: AsyncOpenAI, max_upload_size: int = MAX_UPLOAD_FILE_SIZE):
        self.client = client
        self.max_upload_size = max_upload_size

    async def upload_file(self, filename: str, content: bytes, content_type: str | None) -> dict[str, Any]:
        """Upload a file for use with file search."""
        validate_upload(filename, content_type, len(content), self.max_upload_size)

        start = time.perf_counter()
        uploaded = await self.client.files.create(
            file=(filename, content, content_type),
            purpose=UPLOAD_FILE_PURPOSE,
        )
        logger.log_proxy_call("files.create", _elapsed_ms(start), file_id=uploaded.id, size=len(content))
        return uploaded.model_dump()

    async def create_vector_store(
        self,
        file_ids: list[str],
        name: str | None = None,
        expires_in_days: int | None = None,
    ) -> dict[str, Any]:
        """Create a vector store over uploaded files."""
        kwargs: dict[str, Any] = {
            "name": (name or "").strip() or DEFAULT_VECTOR_STORE_NAME,
            "file_ids": file_ids,
        }
        if expires_in_days:
            kwargs["expires_after"] = {"anchor": VECTOR_STORE_EXPIRATION_ANCHOR, "days": expires_in_days}

        start = time.perf_counter()
        store = await self.client.vector_stores.create(**kwargs)
        logger.log_proxy_call("vector_stores.create", _elapsed_ms(start), store_id=store.id, files=len(file_ids))
        return store.model_dump()

    async def list_vector_stores(self) -> dict[str, Any]:
        """List the account's vector stores."""
        start = time.perf_counter()
        page = await self.client.vector_stores.list()
        stores = [store.model_dump() for store in page.data]
        logger.log_proxy_call("vector_stores.list", _elapsed_ms(start), count=len(stores))
        return {"object": "list", "data": stores}

    async def list_models(self) -> list[str]:
        """Chat-capable model IDs available to the account, sorted."""
        start = time.perf_counter()
        page = await self.client.models.list()
        models = keep_chat_models([model.id for model in page.data])
        logger.log_proxy_call("models.list", _elapsed_ms(start), count=len(models))
        return models

    async def moderate(self, text: str) -> dict[str, Any]:
        """Run text through the moderation endpoint."""
        start = time.perf_counter()
        moderation = await self.client.moderations.create(input=text)
        result = round_moderation_scores(moderation.model_dump())
        flagged = bool(result.get("results")) and bool(result["results"][0].get("flagged"))
        logger.log_proxy_call("moderations.create", _elapsed_ms(start), flagged=flagged)
        return result

    async def create_response(self, body: dict[str, Any]) -> dict[str, Any]:
        """Send an assembled Responses API body.

        Returns:
            Dict with the raw ``response``, its ``output_text`` and, when a
            JSON schema was requested, the parsed ``structured_output``
        """
        start = time.perf_counter()
        response = await self.client.responses.create(**body)
        output_text = response.output_text or None
        logger.log_proxy_call("responses.create", _elapsed_ms(start), response_id=response.id, model=body.get("model"))
        return {
            "response": response.model_dump(),
            "output_text": output_text,
            "structured_output": extract_structured_output(body, output_text),
        }


__all__ = [
    "OpenAIProxyService",
    "extract_structured_output",
    "keep_chat_models",
    "round_moderation_scores",
    "validate_upload",
]
