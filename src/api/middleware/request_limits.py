"""Request body size limit middleware.

Rejects oversized requests from their Content-Length header before the
body is read into memory.

Size limits vary by endpoint type:
- File uploads: the upload limit (default 5 MB)
- Everything else: the request body limit (default 1 MB)
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import JSONResponse

from api.middleware.request_context import get_request_id
from core.constants import get_settings
from models.error_models import ErrorCode, ErrorResponse
from utils.logger import logger

# Multipart framing adds a little on top of the file itself
UPLOAD_OVERHEAD_BYTES = 64 * 1024

# Paths that use the upload size limit
UPLOAD_PATTERNS: tuple[str, ...] = ("/openai/files",)


def _is_upload_path(path: str) -> bool:
    """Check if path is a file upload endpoint."""
    return any(pattern in path for pattern in UPLOAD_PATTERNS)


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """Middleware to enforce request body size limits.

    Requests without a Content-Length (chunked) are passed through; the
    upload route re-checks the actual file size.
    """

    def __init__(
        self,
        app: Callable[..., Any],
        max_body_size: int | None = None,
        max_upload_size: int | None = None,
    ) -> None:
        """Initialize middleware with size limits.

        Args:
            app: ASGI application
            max_body_size: Max size for regular requests (bytes)
            max_upload_size: Max size for upload requests (bytes)
        """
        super().__init__(app)
        settings = get_settings()
        self._max_body_size = max_body_size or settings.max_request_body_size
        self._max_upload_size = (max_upload_size or settings.max_upload_size) + UPLOAD_OVERHEAD_BYTES

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        """Check request size before processing."""
        if request.method in ("GET", "HEAD", "OPTIONS", "DELETE"):
            return await call_next(request)

        path = request.url.path
        max_size = self._max_upload_size if _is_upload_path(path) else self._max_body_size

        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit():
            size = int(content_length)
            if size > max_size:
                logger.warning(f"Request body too large: {size} bytes > {max_size} bytes (path: {path})")
                error_response = ErrorResponse(
                    code=ErrorCode.REQUEST_TOO_LARGE,
                    message=f"Request body exceeds maximum size of {max_size} bytes",
                    request_id=get_request_id(),
                    path=path,
                )
                return JSONResponse(status_code=413, content=error_response.to_dict())

        return await call_next(request)


__all__ = ["RequestSizeLimitMiddleware"]
