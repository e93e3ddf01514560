"""错误基类：提供分层错误体系和结构化错误上下文。

Base error classes for pylon-client.

Provides a layered error hierarchy:
- PylonError: Base class for all library errors
- ValidationError: Missing or malformed arguments (raised before any I/O)
- ProtocolError: Remote response is missing an expected field
- TransportError: HTTP/network errors
- RemoteError: Remote API errors with classification
"""

from __future__ import annotations

import contextlib
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pylon_client.errors.classification import ErrorClass


@dataclass
class ErrorContext:
    """Structured error context for diagnostics.

    Provides actionable information for debugging and error handling.
    """

    field_path: str | None = None
    """Path to the problematic field (e.g., 'response[2].value.string')"""

    details: dict[str, Any] = field(default_factory=dict)
    """Additional details about the error"""

    source: str | None = None
    """Error source (e.g., 'protocol', 'transport', 'validation')"""

    hint: str | None = None
    """Actionable hint for resolving the error"""

    def __str__(self) -> str:
        parts = []
        if self.source:
            parts.append(f"[{self.source}]")
        if self.field_path:
            parts.append(f"at '{self.field_path}'")
        if self.hint:
            parts.append(f"(hint: {self.hint})")
        return " ".join(parts)


class PylonError(Exception):
    """Base class for all pylon-client errors.

    All errors from this library inherit from this class, making it easy
    to catch all library errors with a single except clause.

    Attributes:
        message: Human-readable error message
        context: Optional structured error context
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
    ) -> None:
        self.message = message
        self.context = context or ErrorContext()
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the full error message."""
        ctx_str = str(self.context)
        if ctx_str:
            return f"{self.message} {ctx_str}"
        return self.message

    def with_hint(self, hint: str) -> PylonError:
        """Add a hint to this error."""
        self.context.hint = hint
        return self


class ValidationError(PylonError):
    """A required argument is missing or has the wrong shape.

    Raised synchronously, before any network activity.
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        *,
        field: str | None = None,
        expected: Any = None,
        actual: Any = None,
    ) -> None:
        ctx = context or ErrorContext(source="validation")
        if field:
            ctx.field_path = field
        if expected is not None:
            ctx.details["expected"] = expected
        if actual is not None:
            ctx.details["actual"] = actual
        super().__init__(message, ctx)
        self.field = field
        self.expected = expected
        self.actual = actual

    @classmethod
    def missing(cls, name: str) -> ValidationError:
        """Shortcut for a required parameter that was not given."""
        return cls(
            f"Missing required parameter '{name}'",
            ErrorContext(source="validation", hint=f"'{name}' is required"),
            field=name,
        )

    @classmethod
    def incompatible(cls, name: str, expected: str, actual: Any) -> ValidationError:
        """Shortcut for a parameter of the wrong type or shape."""
        return cls(
            f"Invalid parameter '{name}'",
            ErrorContext(source="validation", hint=f"'{name}' must be {expected}"),
            field=name,
            expected=expected,
            actual=type(actual).__name__,
        )


class ProtocolError(PylonError):
    """A remote response is missing an expected field.

    Raised at the point of decoding. The offending response is kept on
    ``response`` for diagnostics.
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        *,
        field_path: str | None = None,
        response: Any = None,
    ) -> None:
        ctx = context or ErrorContext(source="protocol")
        if field_path:
            ctx.field_path = field_path
        super().__init__(message, ctx)
        self.field_path = field_path
        self.response = response


class TransportError(PylonError):
    """Error during HTTP transport.

    Raised when:
    - Network connection failure
    - Timeout
    - SSL/TLS errors
    - Proxy errors
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        *,
        url: str | None = None,
        status_code: int | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or ErrorContext(source="transport")
        if url:
            ctx.details["url"] = url
        if status_code:
            ctx.details["status_code"] = status_code
        super().__init__(message, ctx)
        self.url = url
        self.status_code = status_code
        self.__cause__ = cause


class RemoteError(TransportError):
    """Error returned by the Pylon API.

    Attributes:
        status_code: HTTP status code
        error_class: Standardized error classification
        raw_error: Raw error response from the API
        retry_after: Suggested retry delay in seconds (from header)
        request_id: Request identifier, when the API sends one
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        error_class: ErrorClass,
        url: str | None = None,
        raw_error: Any = None,
        retry_after: float | None = None,
        request_id: str | None = None,
    ) -> None:
        ctx = ErrorContext(source="remote")
        ctx.details["error_class"] = error_class.value
        if request_id:
            ctx.details["request_id"] = request_id

        super().__init__(message, ctx, url=url, status_code=status_code)

        self.error_class = error_class
        self.raw_error = raw_error if raw_error is not None else {}
        self.retry_after = retry_after
        self.request_id = request_id

    @classmethod
    def from_response(
        cls,
        status_code: int,
        body: Any = None,
        headers: dict[str, str] | None = None,
        url: str | None = None,
    ) -> RemoteError:
        """Create RemoteError from HTTP response.

        Args:
            status_code: HTTP status code
            body: Response body (parsed JSON, if any)
            headers: Response headers
            url: Request URL

        Returns:
            RemoteError with appropriate classification
        """
        from pylon_client.errors.classification import (
            classify_http_error,
            extract_error_message,
        )

        error_class = classify_http_error(status_code)
        message = extract_error_message(body) or f"HTTP {status_code}"

        retry_after = None
        request_id = None
        if headers:
            lowered = {k.lower(): v for k, v in headers.items()}
            retry_after_str = lowered.get("retry-after")
            if retry_after_str:
                with contextlib.suppress(ValueError):
                    retry_after = float(retry_after_str)
            request_id = lowered.get("x-request-id") or lowered.get("request-id")

        return cls(
            message=message,
            status_code=status_code,
            error_class=error_class,
            url=url,
            raw_error=body,
            retry_after=retry_after,
            request_id=request_id,
        )
