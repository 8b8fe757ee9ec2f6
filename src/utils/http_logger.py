"""
HTTP request/response logging for debugging OpenAI API calls.

Captures request payloads and responses using httpx event hooks.
Credentials in headers are masked before anything is logged.
"""

from __future__ import annotations

import json

from typing import Any

import httpx

from utils.logger import logger

#: Header names whose values are masked in logs (compared case-insensitively).
SENSITIVE_HEADERS = frozenset({"authorization", "api-key", "x-api-key", "openai-organization"})

STREAMING_NOTE = {"_note": "streaming response - body not captured"}


def sanitize_headers(headers: dict[str, str]) -> dict[str, str]:
    """Mask sensitive header values, keeping only the last 4 characters.

    Example:
        >>> sanitize_headers({"Authorization": "Bearer sk-abcdef123456"})
        {'Authorization': '***3456'}
    """
    sanitized: dict[str, str] = {}
    for key, value in headers.items():
        if key.lower() in SENSITIVE_HEADERS:
            sanitized[key] = f"***{value[-4:]}" if len(value) > 4 else "***"
        else:
            sanitized[key] = value
    return sanitized


class HTTPLogger:
    """Logs HTTP requests and responses for debugging."""

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self._request_data: dict[int, dict[str, Any]] = {}

    @staticmethod
    def _decode_body(content: bytes) -> Any:
        if not content:
            return {}
        try:
            return json.loads(content.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            # Multipart uploads and other binary bodies
            return {"_bytes": len(content)}

    async def log_request(self, request: httpx.Request) -> None:
        """Log outgoing HTTP request."""
        if not self.enabled:
            return

        try:
            body = self._decode_body(request.content)
        except httpx.RequestNotRead:
            body = STREAMING_NOTE

        request_data = {
            "method": request.method,
            "url": str(request.url),
            "headers": sanitize_headers(dict(request.headers)),
        }
        self._request_data[id(request)] = request_data

        logger.info(
            f"HTTP Request: {request.method} {request.url}",
            http_request=True,
            payload=body,
            **{f"http_{key}": value for key, value in request_data.items()},
        )

    async def log_response(self, response: httpx.Response) -> None:
        """Log HTTP response status and, when already read, its body."""
        if not self.enabled:
            return

        request_data = self._request_data.pop(id(response.request), {})

        try:
            body = self._decode_body(response.content)
        except httpx.ResponseNotRead:
            body = STREAMING_NOTE

        logger.info(
            f"HTTP Response: {response.status_code} "
            f"{request_data.get('method', 'UNKNOWN')} {request_data.get('url', 'UNKNOWN')}",
            http_response=True,
            status_code=response.status_code,
            response_headers=sanitize_headers(dict(response.headers)),
            body=body,
        )


def create_logging_client(
    enabled: bool = True,
    timeout: httpx.Timeout | None = None,
) -> httpx.AsyncClient:
    """Create an httpx client with request/response logging hooks."""
    http_logger = HTTPLogger(enabled=enabled)

    event_hooks: dict[str, list[Any]] = {
        "request": [http_logger.log_request],
        "response": [http_logger.log_response],
    }
    return httpx.AsyncClient(event_hooks=event_hooks, timeout=timeout)
