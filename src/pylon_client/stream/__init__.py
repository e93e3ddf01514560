"""
Console stream - reconnecting WebSocket subscription.
"""

from pylon_client.stream.client import (
    DEFAULT_RECONNECT_DELAY,
    DeploymentStream,
    websocket_connector,
)
from pylon_client.stream.emitter import EventBus, coerce_event_type
from pylon_client.stream.frames import decode_frame
from pylon_client.stream.session import SessionState, Socket

__all__ = [
    "DEFAULT_RECONNECT_DELAY",
    "DeploymentStream",
    "EventBus",
    "SessionState",
    "Socket",
    "coerce_event_type",
    "decode_frame",
    "websocket_connector",
]
