"""Tests for HTTP request/response logging utilities.

Tests header masking, the HTTPLogger hooks and create_logging_client.
"""

from __future__ import annotations

import json

from unittest.mock import Mock, patch

import httpx
import pytest

from utils.http_logger import STREAMING_NOTE, HTTPLogger, create_logging_client, sanitize_headers


class TestSanitizeHeaders:
    """Tests for sanitize_headers."""

    def test_masks_authorization(self) -> None:
        assert sanitize_headers({"Authorization": "Bearer sk-abcdef123456"}) == {"Authorization": "***3456"}

    def test_case_insensitive(self) -> None:
        sanitized = sanitize_headers({"x-API-key": "abcdefgh", "OpenAI-Organization": "org-123456"})

        assert sanitized["x-API-key"] == "***efgh"
        assert sanitized["OpenAI-Organization"] == "***3456"

    def test_short_values_fully_masked(self) -> None:
        assert sanitize_headers({"api-key": "abcd"}) == {"api-key": "***"}

    def test_other_headers_untouched(self) -> None:
        headers = {"content-type": "application/json", "user-agent": "openai-python"}
        assert sanitize_headers(headers) == headers


class TestHTTPLogger:
    """Tests for HTTPLogger class."""

    def test_init(self) -> None:
        http_logger = HTTPLogger(enabled=True)

        assert http_logger.enabled is True
        assert http_logger._request_data == {}

    def test_decode_body(self) -> None:
        assert HTTPLogger._decode_body(b"") == {}
        assert HTTPLogger._decode_body(b'{"a": 1}') == {"a": 1}
        assert HTTPLogger._decode_body(b"\xff\xfe binary") == {"_bytes": 9}

    @pytest.mark.asyncio
    async def test_log_request_when_disabled(self) -> None:
        """Disabled logger never touches the request."""
        http_logger = HTTPLogger(enabled=False)

        with patch("utils.http_logger.logger") as mock_logger:
            await http_logger.log_request(Mock(spec=httpx.Request))

        mock_logger.info.assert_not_called()

    @pytest.mark.asyncio
    async def test_log_request_masks_credentials(self) -> None:
        http_logger = HTTPLogger(enabled=True)
        request = httpx.Request(
            "POST",
            "https://api.openai.com/v1/responses",
            headers={"Authorization": "Bearer sk-secret-987654"},
            content=json.dumps({"model": "gpt-4.1"}).encode(),
        )

        with patch("utils.http_logger.logger") as mock_logger:
            await http_logger.log_request(request)

        kwargs = mock_logger.info.call_args.kwargs
        assert mock_logger.info.call_args.args[0] == "HTTP Request: POST https://api.openai.com/v1/responses"
        assert kwargs["payload"] == {"model": "gpt-4.1"}
        assert kwargs["http_headers"]["authorization"] == "***7654"
        assert id(request) in http_logger._request_data

    @pytest.mark.asyncio
    async def test_log_response_pairs_with_request(self) -> None:
        http_logger = HTTPLogger(enabled=True)
        request = httpx.Request("GET", "https://api.openai.com/v1/models")
        response = httpx.Response(200, json={"data": []}, request=request)

        with patch("utils.http_logger.logger") as mock_logger:
            await http_logger.log_request(request)
            await http_logger.log_response(response)

        message = mock_logger.info.call_args.args[0]
        kwargs = mock_logger.info.call_args.kwargs
        assert message == "HTTP Response: 200 GET https://api.openai.com/v1/models"
        assert kwargs["body"] == {"data": []}
        assert http_logger._request_data == {}

    @pytest.mark.asyncio
    async def test_log_response_not_read(self) -> None:
        http_logger = HTTPLogger(enabled=True)
        request = httpx.Request("POST", "https://api.openai.com/v1/responses")
        response = httpx.Response(200, stream=httpx.ByteStream(b"data: {}"), request=request)

        with patch("utils.http_logger.logger") as mock_logger:
            await http_logger.log_response(response)

        kwargs = mock_logger.info.call_args.kwargs
        assert kwargs["body"] == STREAMING_NOTE
        assert "UNKNOWN" in mock_logger.info.call_args.args[0]


class TestCreateLoggingClient:
    """Tests for create_logging_client."""

    @pytest.mark.asyncio
    async def test_hooks_installed(self) -> None:
        timeout = httpx.Timeout(5.0)
        client = create_logging_client(enabled=True, timeout=timeout)

        try:
            assert len(client.event_hooks["request"]) == 1
            assert len(client.event_hooks["response"]) == 1
            assert client.timeout == timeout
        finally:
            await client.aclose()
