"""错误体系：提供结构化错误类型。

Error hierarchy for pylon-client.
"""

from pylon_client.errors.base import (
    ErrorContext,
    ProtocolError,
    PylonError,
    RemoteError,
    TransportError,
    ValidationError,
)
from pylon_client.errors.classification import (
    ErrorClass,
    classify_http_error,
    extract_error_message,
)

__all__ = [
    "ErrorClass",
    "ErrorContext",
    "ProtocolError",
    "PylonError",
    "RemoteError",
    "TransportError",
    "ValidationError",
    "classify_http_error",
    "extract_error_message",
]
