"""
Logging setup for the LLM Connector using Python's standard logging
with JSON formatting for structured logs.

Log destinations:
- Console (stderr): Human-readable colored format for debugging
- logs/connector.jsonl: JSON format for assembled requests and proxy calls
- logs/errors.jsonl: JSON format for error tracking
"""

from __future__ import annotations

import logging
import logging.handlers
import os
import re
import sys
import uuid

from typing import Any, cast

from pythonjsonlogger import json as jsonlogger

from api.middleware.request_context import get_request_context
from core.constants import (
    LOG_BACKUP_COUNT_CONNECTOR,
    LOG_BACKUP_COUNT_ERRORS,
    LOG_MAX_SIZE,
    LOG_PREVIEW_LENGTH,
    PROJECT_ROOT,
    get_settings,
)

#: Length of the per-process logger instance ID.
INSTANCE_ID_LENGTH = 8

# Secrets and PII that must never reach a log file
REDACTION_PATTERNS = [
    (r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Z|a-z]{2,}\b", "[EMAIL]"),
    (r"\b(?:\d{4}[- ]?){3}\d{4}\b", "[CARD]"),
    (r"\bBearer\s+\S+", "Bearer [REDACTED]"),
    (r"\b(sk-|pk-|api[-_]?key[-_]?)[A-Za-z0-9_-]{20,}\b", "[API_KEY]"),
    (r"\b(password|secret|token)\s*[:=]\s*\S+", "[REDACTED]"),
]


def redact(text: str) -> str:
    """Replace secrets and PII in text with placeholders."""
    if not text:
        return text

    redacted = text
    for pattern, replacement in REDACTION_PATTERNS:
        redacted = re.sub(pattern, replacement, redacted)
    return redacted


def preview(text: str, length: int = LOG_PREVIEW_LENGTH) -> str:
    """Single-line, redacted, truncated preview of user content."""
    flat = redact(text[:length].replace("\n", " "))
    if len(text) > length:
        flat += "..."
    return flat


class ConnectorFilter(logging.Filter):
    """Allow INFO and above into the connector log."""

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno >= logging.INFO


class ErrorFilter(logging.Filter):
    """Filter to only allow ERROR and CRITICAL logs"""

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno >= logging.ERROR


class ColoredConsoleFormatter(logging.Formatter):
    """
    Formatter that colors the level and standardizes the layout.
    Format: HH:MM:SS [LEVEL] logger_name - message
    """

    GREY = "\x1b[38;20m"
    GREEN = "\x1b[32;20m"
    YELLOW = "\x1b[33;20m"
    RED = "\x1b[31;20m"
    BOLD_RED = "\x1b[31;1m"
    BOLD = "\x1b[1m"
    RESET = "\x1b[0m"

    LEVEL_COLORS = {
        logging.DEBUG: GREY,
        logging.INFO: GREEN,
        logging.WARNING: YELLOW,
        logging.ERROR: RED,
        logging.CRITICAL: BOLD_RED,
    }

    def _status_color(self, status_code: int) -> str:
        if status_code < 400:
            return self.GREEN
        if status_code < 500:
            return self.YELLOW
        return self.RED

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelno, "")
        level_fmt = f"{color}[{record.levelname}]{self.RESET}" if color else f"[{record.levelname}]"
        record.asctime = self.formatTime(record, "%H:%M:%S")

        # uvicorn access args: (client_addr, method, full_path, http_version, status_code)
        if record.name == "uvicorn.access" and record.args and len(record.args) == 5:
            client_addr, method, full_path, http_version, status_code = cast(tuple[Any, ...], record.args)
            status_fmt = f"{self._status_color(int(status_code))}{status_code}{self.RESET}"
            message = f'{client_addr} - "{self.BOLD}{method}{self.RESET} {full_path} HTTP/{http_version}" {status_fmt}'
            return f"{record.asctime} {level_fmt} {record.name} - {message}"

        message = f"{record.asctime} {level_fmt} {record.name} - {record.getMessage()}"
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        return message


def configure_uvicorn_logging() -> None:
    """Route uvicorn's access and error loggers through the colored formatter."""
    formatter = ColoredConsoleFormatter()

    main_logger = logging.getLogger("uvicorn")
    main_logger.handlers = []
    main_logger.setLevel(logging.INFO)

    for name in ("uvicorn.access", "uvicorn.error"):
        uv_logger = logging.getLogger(name)
        uv_logger.handlers = []
        uv_logger.setLevel(logging.INFO)
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(formatter)
        uv_logger.addHandler(handler)
        uv_logger.propagate = False


def setup_logging(name: str = "llm-connector", debug: bool | None = None) -> logging.Logger:
    """
    Set up logging with console and rotating JSON file handlers.

    Args:
        name: Logger name
        debug: Enable debug logging (overrides DEBUG env var)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)  # Capture all, filter at handler level
    logger.handlers = []
    logger.propagate = False

    if debug is None:
        debug = os.getenv("DEBUG", "false").lower() in ("true", "1", "yes")

    # --- Console Handler (Human-readable) ---
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.DEBUG if debug else logging.INFO)
    console_handler.setFormatter(ColoredConsoleFormatter())
    logger.addHandler(console_handler)

    log_dir = PROJECT_ROOT / "logs"
    log_dir.mkdir(exist_ok=True)

    # --- Connector Log Handler (JSON) ---
    connector_handler = logging.handlers.RotatingFileHandler(
        log_dir / "connector.jsonl",
        maxBytes=LOG_MAX_SIZE,
        backupCount=LOG_BACKUP_COUNT_CONNECTOR,
        encoding="utf-8",
    )
    connector_handler.setLevel(logging.INFO)
    connector_handler.addFilter(ConnectorFilter())
    connector_handler.setFormatter(
        jsonlogger.JsonFormatter(
            "%(timestamp)s %(levelname)s %(message)s %(request_id)s %(instance_id)s",
            timestamp=True,
        )
    )
    logger.addHandler(connector_handler)

    # --- Error Log Handler (JSON) ---
    error_handler = logging.handlers.RotatingFileHandler(
        log_dir / "errors.jsonl",
        maxBytes=LOG_MAX_SIZE,
        backupCount=LOG_BACKUP_COUNT_ERRORS,
        encoding="utf-8",
    )
    error_handler.setLevel(logging.ERROR)
    error_handler.addFilter(ErrorFilter())
    error_handler.setFormatter(
        jsonlogger.JsonFormatter(
            "%(timestamp)s %(levelname)s %(name)s %(message)s",
            timestamp=True,
        )
    )
    logger.addHandler(error_handler)

    return logger


class ConnectorLogger:
    """
    High-level logging interface for the LLM Connector.
    Wraps standard Python logging with request-context enrichment.
    """

    def __init__(self, name: str = "llm-connector"):
        self.logger = setup_logging(name)
        self.instance_id = str(uuid.uuid4())[:INSTANCE_ID_LENGTH]

    def _enrich_context(self, kwargs: dict[str, Any]) -> dict[str, Any]:
        """Enrich log arguments with the instance ID and request context."""
        kwargs.setdefault("instance_id", self.instance_id)
        if ctx := get_request_context():
            kwargs.update(ctx.to_log_context())
        return kwargs

    def debug(self, message: str, **kwargs: Any) -> None:
        self.logger.debug(message, extra=self._enrich_context(kwargs))

    def info(self, message: str, **kwargs: Any) -> None:
        self.logger.info(message, extra=self._enrich_context(kwargs))

    def warning(self, message: str, **kwargs: Any) -> None:
        self.logger.warning(message, extra=self._enrich_context(kwargs))

    def error(self, message: str, exc_info: bool = False, **kwargs: Any) -> None:
        """Error level logging with optional exception info"""
        self.logger.error(message, extra=self._enrich_context(kwargs), exc_info=exc_info)

    def _should_log_content(self) -> bool:
        """Check if prompt content logging is enabled via settings."""
        try:
            return bool(get_settings().enable_content_logging)
        except Exception:
            # Settings may fail to load before .env is in place
            return False

    def log_request_body(self, provider: str, body: dict[str, Any]) -> None:
        """Log an assembled request body: metadata always, prompt preview only when enabled."""
        should_log_content = self._should_log_content()

        user_messages = [m["content"] for m in body.get("input", []) if m.get("role") == "user"]
        prompt_preview = preview(user_messages[-1]) if should_log_content and user_messages else "[HIDDEN]"
        tool_types = [tool.get("type", "?") for tool in body.get("tools", [])]

        msg_parts = [f"Request body: {provider}/{body.get('model')} prompt={prompt_preview}"]
        if tool_types:
            msg_parts.append(f"[tools: {', '.join(tool_types)}]")
        if "text" in body:
            msg_parts.append("[structured]")

        self.logger.info(
            " ".join(msg_parts),
            extra=self._enrich_context(
                {
                    "request_body": True,
                    "provider": provider,
                    "model": body.get("model"),
                    "tools": tool_types,
                    "structured_output": "text" in body,
                    "content_logging": should_log_content,
                }
            ),
        )

    def log_proxy_call(self, operation: str, duration_ms: float, **details: Any) -> None:
        """Log a completed OpenAI proxy operation."""
        summary = " ".join(f"{key}={value}" for key, value in details.items())
        message = f"OpenAI {operation} [{duration_ms:.0f}ms]"
        if summary:
            message = f"{message} {summary}"
        details.update({"proxy_call": True, "operation": operation, "ms": int(duration_ms)})
        self.logger.info(redact(message), extra=self._enrich_context(details))


# Global logger instance
logger = ConnectorLogger()
