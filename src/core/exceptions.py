"""
Domain errors raised by the connector core.

Every error maps to one user action that can be corrected and retried,
so none of them are fatal and none are retried automatically. The API
layer translates them into the standard error envelope.
"""

from __future__ import annotations


class ConnectorError(Exception):
    """Base class for connector core errors.

    Attributes:
        message: Human-readable, user-facing message
        field: Name of the offending form field or tool, when known
    """

    def __init__(self, message: str, field: str | None = None):
        self.message = message
        self.field = field
        super().__init__(message)


class InvalidJsonError(ConnectorError):
    """User-supplied text does not parse as JSON."""

    def __init__(self, field: str | None, reason: str):
        self.reason = reason
        label = f"'{field}'" if field else "input"
        super().__init__(f"Invalid JSON in {label}: {reason}", field=field)


class ConnectorValidationError(ConnectorError):
    """A required field is missing or a tool definition is malformed."""


class MissingFieldError(ConnectorValidationError):
    """A required field is empty after trimming."""

    def __init__(self, field: str, message: str | None = None):
        super().__init__(message or f"'{field}' is required", field=field)


class SchemaParseError(ConnectorError):
    """The schema inferencer was given a non-object top-level value."""


__all__ = [
    "ConnectorError",
    "ConnectorValidationError",
    "InvalidJsonError",
    "MissingFieldError",
    "SchemaParseError",
]
