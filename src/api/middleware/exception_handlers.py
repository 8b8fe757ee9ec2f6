"""
Global exception handlers for the LLM Connector API.

Provides centralized error handling with consistent response formatting,
proper logging, and request context integration.
"""

from __future__ import annotations

import traceback

from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from openai import (
    APIConnectionError as OpenAIConnectionError,
    APIError as OpenAIAPIError,
    APITimeoutError as OpenAITimeoutError,
    AuthenticationError as OpenAIAuthError,
    NotFoundError as OpenAINotFoundError,
    RateLimitError as OpenAIRateLimitError,
)
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.middleware.request_context import get_request_context, get_request_id
from core.constants import get_settings
from core.exceptions import ConnectorError, InvalidJsonError, MissingFieldError, SchemaParseError
from models.error_models import (
    ErrorCode,
    ErrorDetail,
    ErrorResponse,
    get_status_code,
)
from utils.logger import logger


class AppException(Exception):
    """Base application exception with error code support.

    Use this for errors outside the connector core that should return a
    specific error code and message to the client.

    Example:
        raise AppException(
            code=ErrorCode.FILE_INVALID_TYPE,
            message="Unsupported file type",
            details={"content_type": "image/png"},
        )
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ):
        self.code = code
        self.message = message
        self.details = details
        self.cause = cause
        super().__init__(message)


class ValidationException(AppException):
    """Validation errors with field-level details."""

    def __init__(
        self,
        message: str = "Validation error",
        errors: list[ErrorDetail] | None = None,
        code: ErrorCode = ErrorCode.VALIDATION_ERROR,
    ):
        super().__init__(
            code=code,
            message=message,
            details={"errors": [e.model_dump() for e in errors]} if errors else None,
        )
        self.errors = errors or []


class ExternalServiceError(AppException):
    """External service errors (OpenAI)."""

    def __init__(
        self,
        service: str,
        message: str,
        code: ErrorCode = ErrorCode.EXTERNAL_SERVICE_ERROR,
        cause: Exception | None = None,
    ):
        super().__init__(
            code=code,
            message=f"{service}: {message}",
            details={"service": service},
            cause=cause,
        )


class ConfigurationError(AppException):
    """A feature is unavailable because a setting is missing."""

    def __init__(self, setting: str, message: str | None = None):
        super().__init__(
            code=ErrorCode.INTERNAL_CONFIGURATION_ERROR,
            message=message or f"{setting} is not configured",
            details={"setting": setting},
        )


def connector_error_code(exc: ConnectorError) -> ErrorCode:
    """Map a connector core error to its API error code."""
    if isinstance(exc, (InvalidJsonError, SchemaParseError)):
        return ErrorCode.VALIDATION_INVALID_FORMAT
    if isinstance(exc, MissingFieldError):
        return ErrorCode.VALIDATION_MISSING_FIELD
    return ErrorCode.VALIDATION_ERROR


def _create_error_response(
    code: ErrorCode,
    message: str,
    request: Request | None = None,
    details: list[ErrorDetail] | None = None,
    debug_info: dict[str, Any] | None = None,
) -> ErrorResponse:
    """Create a standardized error response.

    Args:
        code: Application error code
        message: Human-readable error message
        request: FastAPI request object for path extraction
        details: List of detailed error information
        debug_info: Debug information (only included in development)
    """
    return ErrorResponse(
        code=code,
        message=message,
        request_id=get_request_id(),
        path=request.url.path if request else None,
        details=details,
        debug=debug_info,
    )


def _log_error(error: Exception, code: ErrorCode, status_code: int) -> None:
    """Log error with appropriate level and context."""
    ctx = get_request_context()
    log_context = ctx.to_log_context() if ctx else {}
    log_context["error_code"] = code.value
    log_context["status_code"] = status_code

    if status_code >= 500:
        logger.error(f"Server error: {code.value} - {error}", exc_info=True, **log_context)
    elif status_code >= 400:
        logger.warning(f"Client error: {code.value} - {error}", **log_context)


def _validation_details(errors: list[Any]) -> list[ErrorDetail]:
    return [
        ErrorDetail(
            field=".".join(str(loc) for loc in error["loc"]),
            message=error["msg"],
            code=error["type"],
        )
        for error in errors
    ]


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handle application-specific exceptions."""
    status_code = get_status_code(exc.code)

    settings = get_settings()
    debug_info = None
    if settings.debug:
        debug_info = {
            "exception_type": type(exc).__name__,
            "cause": str(exc.cause) if exc.cause else None,
        }

    details = None
    if exc.details:
        if "errors" in exc.details:
            details = [ErrorDetail(**e) for e in exc.details["errors"]]
        else:
            details = [ErrorDetail(message=str(v), field=k) for k, v in exc.details.items()]

    error_response = _create_error_response(
        code=exc.code,
        message=exc.message,
        request=request,
        details=details,
        debug_info=debug_info,
    )

    _log_error(exc, exc.code, status_code)

    return JSONResponse(
        status_code=status_code,
        content=error_response.to_dict(include_debug=settings.debug),
    )


async def connector_exception_handler(request: Request, exc: ConnectorError) -> JSONResponse:
    """Handle connector core errors (bad JSON, missing fields, malformed tools)."""
    code = connector_error_code(exc)
    status_code = get_status_code(code)

    details = [ErrorDetail(field=exc.field, message=exc.message)] if exc.field else None
    error_response = _create_error_response(code=code, message=exc.message, request=request, details=details)

    _log_error(exc, code, status_code)

    return JSONResponse(status_code=status_code, content=error_response.to_dict())


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle HTTP exceptions (including unmatched routes) with consistent formatting."""
    status_to_code = {
        400: ErrorCode.VALIDATION_ERROR,
        401: ErrorCode.EXTERNAL_AUTH_FAILED,
        404: ErrorCode.RESOURCE_NOT_FOUND,
        413: ErrorCode.REQUEST_TOO_LARGE,
        415: ErrorCode.FILE_INVALID_TYPE,
        422: ErrorCode.VALIDATION_ERROR,
        429: ErrorCode.EXTERNAL_RATE_LIMITED,
        500: ErrorCode.INTERNAL_ERROR,
        502: ErrorCode.EXTERNAL_SERVICE_ERROR,
        503: ErrorCode.EXTERNAL_TIMEOUT,
    }

    code = status_to_code.get(exc.status_code, ErrorCode.INTERNAL_ERROR)
    message = exc.detail if isinstance(exc.detail, str) else str(exc.detail)

    settings = get_settings()
    debug_info = {"original_status": exc.status_code} if settings.debug else None

    error_response = _create_error_response(
        code=code,
        message=message,
        request=request,
        debug_info=debug_info,
    )

    _log_error(exc, code, exc.status_code)

    return JSONResponse(
        status_code=exc.status_code,
        content=error_response.to_dict(include_debug=settings.debug),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle Pydantic validation errors from request parsing."""
    error_response = _create_error_response(
        code=ErrorCode.VALIDATION_ERROR,
        message="Request validation failed",
        request=request,
        details=_validation_details(list(exc.errors())),
    )

    _log_error(exc, ErrorCode.VALIDATION_ERROR, 422)

    return JSONResponse(status_code=422, content=error_response.to_dict())


async def pydantic_exception_handler(request: Request, exc: ValidationError) -> JSONResponse:
    """Handle Pydantic ValidationError from model validation."""
    error_response = _create_error_response(
        code=ErrorCode.VALIDATION_ERROR,
        message="Data validation failed",
        request=request,
        details=_validation_details(exc.errors()),
    )

    _log_error(exc, ErrorCode.VALIDATION_ERROR, 422)

    return JSONResponse(status_code=422, content=error_response.to_dict())


def openai_error_code(exc: Exception) -> tuple[ErrorCode, str]:
    """Map an OpenAI SDK exception to an error code and client message."""
    if isinstance(exc, OpenAIAuthError):
        return ErrorCode.EXTERNAL_AUTH_FAILED, "OpenAI authentication failed"
    if isinstance(exc, OpenAIRateLimitError):
        return ErrorCode.EXTERNAL_RATE_LIMITED, "OpenAI rate limit exceeded"
    if isinstance(exc, OpenAITimeoutError):
        return ErrorCode.EXTERNAL_TIMEOUT, "OpenAI request timed out"
    if isinstance(exc, OpenAIConnectionError):
        return ErrorCode.EXTERNAL_SERVICE_ERROR, "Could not reach OpenAI"
    if isinstance(exc, OpenAINotFoundError):
        return ErrorCode.RESOURCE_NOT_FOUND, f"OpenAI resource not found: {exc}"
    return ErrorCode.OPENAI_ERROR, f"OpenAI API error: {exc}"


async def openai_exception_handler(request: Request, exc: OpenAIAPIError) -> JSONResponse:
    """Handle OpenAI API errors."""
    code, message = openai_error_code(exc)
    status_code = get_status_code(code)

    settings = get_settings()
    debug_info = None
    if settings.debug:
        debug_info = {
            "openai_error_type": type(exc).__name__,
            "openai_error_code": getattr(exc, "code", None),
        }

    error_response = _create_error_response(
        code=code,
        message=message,
        request=request,
        debug_info=debug_info,
    )

    _log_error(exc, code, status_code)

    return JSONResponse(
        status_code=status_code,
        content=error_response.to_dict(include_debug=settings.debug),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions with graceful degradation."""
    settings = get_settings()

    logger.error(
        f"Unhandled exception: {type(exc).__name__}: {exc}",
        exc_info=True,
        request_id=get_request_id(),
        path=request.url.path,
    )

    debug_info = None
    if settings.debug:
        debug_info = {
            "exception_type": type(exc).__name__,
            "exception_message": str(exc),
            "traceback": traceback.format_exc(),
        }

    error_response = _create_error_response(
        code=ErrorCode.INTERNAL_UNEXPECTED,
        message="An unexpected error occurred",
        request=request,
        debug_info=debug_info,
    )

    return JSONResponse(
        status_code=500,
        content=error_response.to_dict(include_debug=settings.debug),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI application.

    Call this in main.py after creating the FastAPI app:
        register_exception_handlers(app)
    """
    # Starlette's signature expects Exception; narrower handler types are fine at runtime
    app.add_exception_handler(AppException, app_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(ConnectorError, connector_exception_handler)  # type: ignore[arg-type]

    # FastAPI/Starlette exceptions
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]

    # Pydantic exceptions
    app.add_exception_handler(ValidationError, pydantic_exception_handler)  # type: ignore[arg-type]

    # OpenAI exceptions
    app.add_exception_handler(OpenAIAPIError, openai_exception_handler)  # type: ignore[arg-type]

    # Catch-all for unexpected exceptions
    app.add_exception_handler(Exception, generic_exception_handler)


__all__ = [
    "AppException",
    "ConfigurationError",
    "ExternalServiceError",
    "ValidationException",
    "app_exception_handler",
    "connector_error_code",
    "connector_exception_handler",
    "generic_exception_handler",
    "http_exception_handler",
    "openai_error_code",
    "openai_exception_handler",
    "pydantic_exception_handler",
    "register_exception_handlers",
    "validation_exception_handler",
]
