"""
Standardized error response models for the LLM Connector API.

Every failing endpoint returns the same ``{"error": {...}}`` envelope with a
categorized code, the request ID, and optional field-level details.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class ErrorCode(str, Enum):
    """Application-specific error codes for categorization."""

    # Validation errors (2xxx)
    VALIDATION_ERROR = "VAL_2001"
    VALIDATION_MISSING_FIELD = "VAL_2002"
    VALIDATION_INVALID_FORMAT = "VAL_2003"
    VALIDATION_CONSTRAINT_VIOLATION = "VAL_2004"
    REQUEST_TOO_LARGE = "VAL_2005"

    # Resource errors (3xxx)
    RESOURCE_NOT_FOUND = "RES_3001"

    # File errors (5xxx)
    FILE_TOO_LARGE = "FILE_5002"
    FILE_INVALID_TYPE = "FILE_5003"
    FILE_UPLOAD_FAILED = "FILE_5005"

    # External service errors (7xxx)
    EXTERNAL_SERVICE_ERROR = "EXT_7001"
    EXTERNAL_TIMEOUT = "EXT_7002"
    EXTERNAL_RATE_LIMITED = "EXT_7003"
    EXTERNAL_AUTH_FAILED = "EXT_7004"
    OPENAI_ERROR = "EXT_7010"

    # Internal errors (9xxx)
    INTERNAL_ERROR = "INT_9001"
    INTERNAL_CONFIGURATION_ERROR = "INT_9002"
    INTERNAL_UNEXPECTED = "INT_9999"


class ErrorDetail(BaseModel):
    """Detailed information about a specific validation or sub-error."""

    field: str | None = None
    message: str
    code: str | None = None
    value: Any | None = Field(default=None, exclude=True)  # Excluded from response for security


class ErrorResponse(BaseModel):
    """Standardized error response model for REST endpoints.

    Example response:
    {
        "error": {
            "code": "VAL_2003",
            "message": "Invalid JSON in 'jsonSchema': Expecting value: line 1 column 1 (char 0)",
            "request_id": "req_abc123",
            "timestamp": "2025-01-15T10:30:00Z",
            "details": [{"field": "jsonSchema", "message": "..."}],
            "path": "/api/v1/connector/payload"
        }
    }
    """

    code: ErrorCode
    message: str
    request_id: str | None = None
    timestamp: str = Field(default_factory=lambda: datetime.now(UTC).isoformat())
    details: list[ErrorDetail] | None = None
    path: str | None = None
    # Debug info - only included in development mode
    debug: dict[str, Any] | None = Field(default=None, exclude=True)

    def to_dict(self, include_debug: bool = False) -> dict[str, Any]:
        """Convert to dictionary for JSON response.

        Args:
            include_debug: Include debug information (only in development)
        """
        data = self.model_dump(mode="json", exclude_none=True)
        if include_debug and self.debug:
            data["debug"] = self.debug
        return {"error": data}


class ErrorResponseWrapper(BaseModel):
    """Wrapper for error response to match {"error": {...}} format."""

    error: ErrorResponse


# HTTP status code mappings for error codes
ERROR_CODE_TO_STATUS: dict[ErrorCode, int] = {
    # 401 Unauthorized
    ErrorCode.EXTERNAL_AUTH_FAILED: 401,
    # 404 Not Found
    ErrorCode.RESOURCE_NOT_FOUND: 404,
    # 413 Payload Too Large
    ErrorCode.FILE_TOO_LARGE: 413,
    ErrorCode.REQUEST_TOO_LARGE: 413,
    # 415 Unsupported Media Type
    ErrorCode.FILE_INVALID_TYPE: 415,
    # 422 Unprocessable Entity
    ErrorCode.VALIDATION_ERROR: 422,
    ErrorCode.VALIDATION_MISSING_FIELD: 422,
    ErrorCode.VALIDATION_INVALID_FORMAT: 422,
    ErrorCode.VALIDATION_CONSTRAINT_VIOLATION: 422,
    # 429 Too Many Requests
    ErrorCode.EXTERNAL_RATE_LIMITED: 429,
    # 500 Internal Server Error
    ErrorCode.INTERNAL_ERROR: 500,
    ErrorCode.INTERNAL_UNEXPECTED: 500,
    # 502 Bad Gateway
    ErrorCode.EXTERNAL_SERVICE_ERROR: 502,
    ErrorCode.OPENAI_ERROR: 502,
    ErrorCode.FILE_UPLOAD_FAILED: 502,
    # 503 Service Unavailable
    ErrorCode.EXTERNAL_TIMEOUT: 503,
    ErrorCode.INTERNAL_CONFIGURATION_ERROR: 503,
}


def get_status_code(error_code: ErrorCode) -> int:
    """Get HTTP status code for an error code."""
    return ERROR_CODE_TO_STATUS.get(error_code, 500)


__all__ = [
    "ERROR_CODE_TO_STATUS",
    "ErrorCode",
    "ErrorDetail",
    "ErrorResponse",
    "ErrorResponseWrapper",
    "get_status_code",
]
