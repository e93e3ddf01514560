"""错误分类模块：将 HTTP 状态码和响应体映射到标准错误类别。

Error classification for Pylon API responses.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorClass(str, Enum):
    """Standard error classification."""

    INVALID_REQUEST = "invalid_request"
    """Malformed request body or invalid parameters."""

    AUTHENTICATION = "authentication"
    """Missing/invalid token."""

    PERMISSION_DENIED = "permission_denied"
    """Token is valid but not permitted to access the deployment."""

    NOT_FOUND = "not_found"
    """Deployment, namespace or key not found."""

    RATE_LIMITED = "rate_limited"
    """Throttled by the API."""

    TIMEOUT = "timeout"
    """Request timed out or deadline exceeded."""

    CONFLICT = "conflict"
    """Request conflict."""

    SERVER_ERROR = "server_error"
    """Server-side failure (5xx)."""

    OVERLOADED = "overloaded"
    """Service temporarily unavailable."""

    OTHER = "other"
    """Unknown classification."""


_DEFAULT_STATUS_MAPPING: dict[int, ErrorClass] = {
    400: ErrorClass.INVALID_REQUEST,
    401: ErrorClass.AUTHENTICATION,
    403: ErrorClass.PERMISSION_DENIED,
    404: ErrorClass.NOT_FOUND,
    408: ErrorClass.TIMEOUT,
    409: ErrorClass.CONFLICT,
    422: ErrorClass.INVALID_REQUEST,
    429: ErrorClass.RATE_LIMITED,
    500: ErrorClass.SERVER_ERROR,
    502: ErrorClass.SERVER_ERROR,
    503: ErrorClass.OVERLOADED,
    504: ErrorClass.TIMEOUT,
}


def classify_http_error(status_code: int) -> ErrorClass:
    """Classify an HTTP error status into a standard error class.

    Args:
        status_code: HTTP status code

    Returns:
        ErrorClass representing the error type
    """
    if status_code in _DEFAULT_STATUS_MAPPING:
        return _DEFAULT_STATUS_MAPPING[status_code]

    if 400 <= status_code < 500:
        return ErrorClass.INVALID_REQUEST
    if 500 <= status_code < 600:
        return ErrorClass.SERVER_ERROR

    return ErrorClass.OTHER


def extract_error_message(body: Any) -> str | None:
    """Extract error message from response body.

    Supports the envelopes the API is known to return:
    - {"msg": "..."}
    - {"message": "..."}
    - {"error": "..."} / {"error": {"message": "..."}}

    Args:
        body: Response body (parsed JSON)

    Returns:
        Error message if found, None otherwise
    """
    if not isinstance(body, dict):
        return None

    for name in ("msg", "message"):
        msg = body.get(name)
        if isinstance(msg, str):
            return msg

    error = body.get("error")
    if isinstance(error, dict):
        msg = error.get("message")
        if isinstance(msg, str):
            return msg
    elif isinstance(error, str):
        return error

    return None
