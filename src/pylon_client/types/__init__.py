"""
Type definitions for pylon-client.

pydantic models for REST payloads, deployment metadata and stream events.
"""

from pylon_client.types.deployment import Deployment
from pylon_client.types.events import (
    EventType,
    StreamClosed,
    StreamErrored,
    StreamOpened,
)
from pylon_client.types.kv import (
    KVEntry,
    KVItem,
    KVValue,
    NamespaceDeleted,
    NamespaceSummary,
)

__all__ = [
    "Deployment",
    "EventType",
    "KVEntry",
    "KVItem",
    "KVValue",
    "NamespaceDeleted",
    "NamespaceSummary",
    "StreamClosed",
    "StreamErrored",
    "StreamOpened",
]
