"""Tests for error module."""

from pylon_client.errors import (
    ErrorClass,
    ErrorContext,
    ProtocolError,
    PylonError,
    RemoteError,
    TransportError,
    ValidationError,
    classify_http_error,
    extract_error_message,
)


class TestErrorContext:
    """Tests for ErrorContext."""

    def test_empty_context(self) -> None:
        """Test empty context string representation."""
        ctx = ErrorContext()
        assert str(ctx) == ""

    def test_context_with_source(self) -> None:
        """Test context with source."""
        ctx = ErrorContext(source="protocol")
        assert "[protocol]" in str(ctx)

    def test_context_with_field_path(self) -> None:
        """Test context with field path."""
        ctx = ErrorContext(field_path="response[0].value.string")
        assert "at 'response[0].value.string'" in str(ctx)

    def test_context_with_hint(self) -> None:
        """Test context with hint."""
        ctx = ErrorContext(hint="Check your token")
        assert "(hint: Check your token)" in str(ctx)


class TestPylonError:
    """Tests for base error class."""

    def test_basic_error(self) -> None:
        """Test basic error creation."""
        error = PylonError("Something went wrong")
        assert error.message == "Something went wrong"
        assert str(error) == "Something went wrong"

    def test_error_with_context(self) -> None:
        """Test error with context."""
        ctx = ErrorContext(source="test", hint="Try again")
        error = PylonError("Failed", ctx)
        assert "[test]" in str(error)
        assert "(hint: Try again)" in str(error)

    def test_with_hint(self) -> None:
        """Test adding hint to error."""
        error = PylonError("Failed").with_hint("Check the config")
        assert error.context.hint == "Check the config"

    def test_hierarchy(self) -> None:
        """Test that every library error is a PylonError."""
        assert issubclass(ValidationError, PylonError)
        assert issubclass(ProtocolError, PylonError)
        assert issubclass(TransportError, PylonError)
        assert issubclass(RemoteError, TransportError)


class TestValidationError:
    """Tests for ValidationError."""

    def test_missing(self) -> None:
        """Test the missing-parameter shortcut."""
        error = ValidationError.missing("namespace")
        assert error.field == "namespace"
        assert "namespace" in str(error)
        assert "[validation]" in str(error)

    def test_incompatible(self) -> None:
        """Test the wrong-shape shortcut."""
        error = ValidationError.incompatible("limit", "a non-negative integer", "ten")
        assert error.field == "limit"
        assert error.expected == "a non-negative integer"
        assert error.actual == "str"
        assert "must be a non-negative integer" in str(error)


class TestProtocolError:
    """Tests for ProtocolError."""

    def test_protocol_error(self) -> None:
        """Test protocol error creation."""
        response = [{"key": "a", "value": {}}]
        error = ProtocolError(
            "Item has no value",
            field_path="response[0].value.string",
            response=response,
        )
        assert error.field_path == "response[0].value.string"
        assert error.response is response
        assert "at 'response[0].value.string'" in str(error)


class TestTransportError:
    """Tests for TransportError."""

    def test_transport_error(self) -> None:
        """Test transport error creation."""
        cause = OSError("reset")
        error = TransportError(
            "Connection failed",
            url="https://pylon.bot/api/deployments/1",
            status_code=500,
            cause=cause,
        )
        assert error.url == "https://pylon.bot/api/deployments/1"
        assert error.status_code == 500
        assert error.__cause__ is cause


class TestRemoteError:
    """Tests for RemoteError."""

    def test_remote_error(self) -> None:
        """Test remote error creation."""
        error = RemoteError(
            message="Rate limited",
            status_code=429,
            error_class=ErrorClass.RATE_LIMITED,
            retry_after=60.0,
        )
        assert error.status_code == 429
        assert error.error_class == ErrorClass.RATE_LIMITED
        assert error.retry_after == 60.0
        assert error.raw_error == {}

    def test_from_response_not_found(self) -> None:
        """Test creating error from the API's msg envelope."""
        error = RemoteError.from_response(
            status_code=404,
            body={"msg": "Unknown Deployment"},
            url="https://pylon.bot/api/deployments/1",
        )
        assert error.error_class == ErrorClass.NOT_FOUND
        assert error.message == "Unknown Deployment"
        assert error.url == "https://pylon.bot/api/deployments/1"
        assert error.raw_error == {"msg": "Unknown Deployment"}

    def test_from_response_headers(self) -> None:
        """Test retry-after and request id extraction regardless of header case."""
        error = RemoteError.from_response(
            status_code=429,
            body={"error": {"message": "Too many requests"}},
            headers={"Retry-After": "30", "X-Request-Id": "req-1"},
        )
        assert error.retry_after == 30.0
        assert error.request_id == "req-1"
        assert error.message == "Too many requests"

    def test_from_response_without_body(self) -> None:
        """Test fallback message when the body carries none."""
        error = RemoteError.from_response(status_code=502, body="Bad Gateway")
        assert error.message == "HTTP 502"
        assert error.error_class == ErrorClass.SERVER_ERROR


class TestClassification:
    """Tests for status classification and message extraction."""

    def test_known_statuses(self) -> None:
        """Test explicitly mapped statuses."""
        assert classify_http_error(401) == ErrorClass.AUTHENTICATION
        assert classify_http_error(403) == ErrorClass.PERMISSION_DENIED
        assert classify_http_error(503) == ErrorClass.OVERLOADED

    def test_ranges(self) -> None:
        """Test fallback by status range."""
        assert classify_http_error(418) == ErrorClass.INVALID_REQUEST
        assert classify_http_error(599) == ErrorClass.SERVER_ERROR
        assert classify_http_error(302) == ErrorClass.OTHER

    def test_extract_message(self) -> None:
        """Test the supported error envelopes."""
        assert extract_error_message({"msg": "a"}) == "a"
        assert extract_error_message({"message": "b"}) == "b"
        assert extract_error_message({"error": "c"}) == "c"
        assert extract_error_message({"error": {"message": "d"}}) == "d"
        assert extract_error_message({"other": 1}) is None
        assert extract_error_message(None) is None
