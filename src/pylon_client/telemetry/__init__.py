"""
Telemetry - structured logging for pylon-client.
"""

from pylon_client.telemetry.logger import (
    JsonFormatter,
    LogContext,
    LogLevel,
    PylonLogger,
    SensitiveDataMasker,
    TextFormatter,
    clear_log_context,
    get_log_context,
    get_logger,
    set_log_context,
)

__all__ = [
    "JsonFormatter",
    "LogContext",
    "LogLevel",
    "PylonLogger",
    "SensitiveDataMasker",
    "TextFormatter",
    "clear_log_context",
    "get_log_context",
    "get_logger",
    "set_log_context",
]
