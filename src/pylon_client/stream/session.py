"""
Mutable state of one console stream.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Socket(Protocol):
    """What the stream needs from a socket.

    ``websockets`` client connections satisfy this. ``close_code`` and
    ``close_reason`` are read with ``getattr`` and may be absent.
    """

    def __aiter__(self) -> Any: ...

    async def close(self) -> Any: ...


@dataclass
class SessionState:
    """Socket, reconnect flag and attempt generation of a stream.

    ``generation`` advances on every connection attempt and on close. Work
    scheduled for an older generation must be discarded.
    """

    socket: Socket | None = None
    open: bool = False
    reconnect_enabled: bool = True
    generation: int = 0
    attempts_in_flight: int = 0
    reader: asyncio.Task[None] | None = None
    reconnect_task: asyncio.Task[None] | None = None

    def advance(self) -> int:
        """Start a new generation and return it."""
        self.generation += 1
        return self.generation

    def is_current(self, generation: int) -> bool:
        return generation == self.generation

    @property
    def idle(self) -> bool:
        """No socket has been wired and no attempt is running."""
        return self.socket is None and self.attempts_in_flight == 0
