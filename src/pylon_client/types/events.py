"""
Console stream events.

Every lifecycle transition of a :class:`~pylon_client.stream.DeploymentStream`
is published as one of these. ``message`` events carry the decoded payload
directly instead of a wrapper model.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class EventType(str, Enum):
    """Kinds of stream events."""

    OPENED = "opened"
    CLOSED = "closed"
    ERRORED = "errored"
    MESSAGE = "message"


class StreamOpened(BaseModel):
    """Socket established."""

    model_config = ConfigDict(extra="allow")

    url: str = Field(description="Workbench URL the socket was opened against")
    attempt: int = Field(default=0, description="Connection generation")


class StreamClosed(BaseModel):
    """Socket closed, by the remote or by the caller."""

    model_config = ConfigDict(extra="allow")

    code: int | None = Field(default=None, description="WebSocket close code")
    reason: str | None = Field(default=None, description="Close reason")


class StreamErrored(BaseModel):
    """Socket failure or a failed reconnect."""

    model_config = ConfigDict(extra="allow", arbitrary_types_allowed=True)

    error: Any = Field(description="Underlying exception")
