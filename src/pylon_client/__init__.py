"""Pylon 平台的 Python 客户端：部署 KV 命名空间与可重连的控制台流。

pylon-client: Python client for the Pylon deployment platform.

Provides a reconnecting console stream and a key-value namespace client
for Pylon deployments.
"""
from __future__ import annotations

from pylon_client.client import PylonClient, PylonClientBuilder
from pylon_client.errors import (
    ProtocolError,
    PylonError,
    RemoteError,
    TransportError,
    ValidationError,
)
from pylon_client.kv import UNSET, KVNamespace
from pylon_client.stream import DeploymentStream
from pylon_client.transport import HttpTransport, Transport
from pylon_client.types import (
    Deployment,
    EventType,
    KVEntry,
    NamespaceSummary,
    StreamClosed,
    StreamErrored,
    StreamOpened,
)

__version__ = "0.1.0"

__all__ = [
    # Client
    "PylonClient",
    "PylonClientBuilder",
    # Components
    "DeploymentStream",
    "HttpTransport",
    "KVNamespace",
    "Transport",
    "UNSET",
    # Errors
    "ProtocolError",
    "PylonError",
    "RemoteError",
    "TransportError",
    "ValidationError",
    # Types
    "Deployment",
    "EventType",
    "KVEntry",
    "NamespaceSummary",
    "StreamClosed",
    "StreamErrored",
    "StreamOpened",
    # Version
    "__version__",
]
