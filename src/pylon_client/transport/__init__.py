"""
Transport layer - HTTP client for API communication.

Provides:
- The Transport contract consumed by the KV and stream clients
- httpx-based HttpTransport
- API token resolution
"""

from pylon_client.transport.auth import get_auth_header, resolve_token
from pylon_client.transport.base import Transport
from pylon_client.transport.http import DEFAULT_BASE_URL, HttpTransport

__all__ = [
    "DEFAULT_BASE_URL",
    "HttpTransport",
    "Transport",
    "get_auth_header",
    "resolve_token",
]
