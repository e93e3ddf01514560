"""控制台流客户端：在远端周期性断开套接字时自动重连。

Reconnecting console stream for a deployment.

Pylon serves a deployment's console over a WebSocket whose URL is issued
per lookup, and the host closes that socket on an interval. The remote
reports those forced disconnects as errors, so the reconnect policy hangs
off the error path:

    error -> emit "errored" -> best-effort close -> emit "closed"
          -> wait ``reconnect_delay`` -> resolve a fresh URL -> reconnect

A clean close only emits "closed" (unless ``reconnect_on_close`` is set).
Calling :meth:`DeploymentStream.close` disables reconnection permanently.
"""

from __future__ import annotations

import asyncio
from contextlib import suppress
from typing import TYPE_CHECKING, Any

import pydantic
import websockets

from pylon_client.errors import ProtocolError, ValidationError
from pylon_client.stream.emitter import EventBus
from pylon_client.stream.frames import decode_frame
from pylon_client.stream.session import SessionState, Socket
from pylon_client.telemetry import get_logger
from pylon_client.types.deployment import Deployment
from pylon_client.types.events import (
    EventType,
    StreamClosed,
    StreamErrored,
    StreamOpened,
)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from pylon_client.stream.emitter import Handler

    Resolver = Callable[[str], Awaitable[Deployment | dict[str, Any]]]
    Connector = Callable[[str], Awaitable[Socket]]

logger = get_logger(__name__)

DEFAULT_RECONNECT_DELAY = 0.25


async def websocket_connector(url: str) -> Socket:
    """Open a client WebSocket with the ``websockets`` library."""
    return await websockets.connect(url)


def _cancel(task: asyncio.Task[Any] | None) -> None:
    # A task must not cancel itself from inside a handler it is running.
    if task is not None and not task.done() and task is not asyncio.current_task():
        task.cancel()


class DeploymentStream:
    """Durable subscription to a deployment's console output.

    Holds at most one socket at a time and replaces it whenever the remote
    drops the connection.

    Example:
        >>> stream = DeploymentStream(client.get_deployment, "1234")
        >>> @stream.on("message")
        ... def show(payload):
        ...     print(payload)
        >>> await stream.connect()
        >>> ...
        >>> await stream.close()
    """

    def __init__(
        self,
        resolver: Resolver,
        deployment_id: str | int,
        *,
        reconnect_delay: float = DEFAULT_RECONNECT_DELAY,
        connector: Connector | None = None,
        payload_type: Any = None,
        reconnect_on_close: bool = False,
    ) -> None:
        """Initialize the stream.

        Args:
            resolver: Looks up a deployment and returns its metadata
                including a fresh ``workbench_url``
            deployment_id: Deployment whose console to follow
            reconnect_delay: Seconds to wait before reconnecting after an error
            connector: Opens a socket for a URL (default: ``websockets``)
            payload_type: Optional type message payloads are validated into
            reconnect_on_close: Also reconnect after a clean remote close

        Raises:
            ValidationError: If an argument is missing or malformed
        """
        if resolver is None:
            raise ValidationError.missing("resolver")
        if not callable(resolver):
            raise ValidationError.incompatible("resolver", "a callable", resolver)
        if deployment_id is None or deployment_id == "":
            raise ValidationError.missing("deployment_id")
        if (
            isinstance(reconnect_delay, bool)
            or not isinstance(reconnect_delay, (int, float))
            or reconnect_delay < 0
        ):
            raise ValidationError.incompatible(
                "reconnect_delay", "a non-negative number of seconds", reconnect_delay
            )
        if connector is not None and not callable(connector):
            raise ValidationError.incompatible("connector", "a callable", connector)

        self.deployment_id = str(deployment_id)
        self.reconnect_delay = float(reconnect_delay)
        self.reconnect_on_close = reconnect_on_close

        self._resolver = resolver
        self._connector = connector or websocket_connector
        self._payload_adapter = (
            pydantic.TypeAdapter(payload_type) if payload_type is not None else None
        )
        self._bus = EventBus()
        self._state = SessionState()

    def __repr__(self) -> str:
        return (
            f"DeploymentStream(deployment_id={self.deployment_id!r}, "
            f"connected={self.connected}, closed={self.closed})"
        )

    @property
    def socket(self) -> Socket | None:
        """The current raw socket. Do not close it directly."""
        return self._state.socket

    @property
    def connected(self) -> bool:
        """Whether a socket is currently open."""
        return self._state.open

    @property
    def closed(self) -> bool:
        """Whether :meth:`close` has disabled the stream."""
        return not self._state.reconnect_enabled

    # ------------------------------------------------------------------
    # Subscription
    # ------------------------------------------------------------------

    def on(self, event: EventType | str, handler: Handler | None = None) -> Any:
        """Register a handler for ``opened``, ``closed``, ``errored`` or ``message``.

        Handlers may be plain functions or coroutine functions. All handlers
        of an event run in registration order. ``message`` handlers receive
        the decoded payload; the others receive a
        :class:`~pylon_client.types.events.StreamOpened`,
        :class:`~pylon_client.types.events.StreamClosed` or
        :class:`~pylon_client.types.events.StreamErrored`.

        Without ``handler`` this returns a decorator.

        Note:
            The remote reports every forced disconnect as an error, so
            ``errored`` fires each time the host rotates the socket.
        """
        if handler is None:

            def decorator(func: Handler) -> Handler:
                return self._bus.on(event, func)

            return decorator
        return self._bus.on(event, handler)

    def off(self, event: EventType | str, handler: Handler) -> bool:
        """Remove a handler registered with :meth:`on`."""
        return self._bus.off(event, handler)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def connect(self) -> None:
        """Resolve the current workbench URL and open a socket against it.

        Does nothing once the stream has been closed. Each call replaces the
        previous socket.

        Raises:
            PylonError: If the deployment lookup fails. This is not retried.
        """
        state = self._state
        if not state.reconnect_enabled:
            return

        generation = state.advance()
        state.attempts_in_flight += 1
        try:
            url = await self._resolve_url()
            if not state.is_current(generation):
                return

            try:
                socket = await self._connector(url)
            except Exception as exc:
                if state.is_current(generation):
                    await self._handle_error(None, generation, exc)
                return
        finally:
            state.attempts_in_flight -= 1

        if not state.is_current(generation):
            # Closed or superseded while the socket was opening.
            with suppress(Exception):
                await socket.close()
            return

        previous = state.socket
        _cancel(state.reader)
        if previous is not None:
            await self._release(previous)

        state.socket = socket
        state.open = True
        logger.info(
            "Console socket opened",
            deployment_id=self.deployment_id,
            attempt=generation,
        )
        await self._bus.emit(EventType.OPENED, StreamOpened(url=url, attempt=generation))

        if state.is_current(generation):
            state.reader = asyncio.create_task(self._pump(socket, generation))

    async def close(self) -> None:
        """Close the socket; reconnection will not be attempted again.

        Does nothing if the stream never connected. Idempotent.
        """
        state = self._state
        if state.idle or not state.reconnect_enabled:
            return

        state.reconnect_enabled = False
        state.advance()
        _cancel(state.reconnect_task)
        state.reconnect_task = None
        _cancel(state.reader)

        logger.info("Console stream closed by caller", deployment_id=self.deployment_id)
        if state.socket is not None:
            await self._release(state.socket)

    async def __aenter__(self) -> DeploymentStream:
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _resolve_url(self) -> str:
        deployment = await self._resolver(self.deployment_id)
        if isinstance(deployment, Deployment):
            return deployment.workbench_url
        try:
            return Deployment.model_validate(deployment).workbench_url
        except pydantic.ValidationError as e:
            raise ProtocolError(
                "Deployment lookup returned no workbench_url",
                field_path="workbench_url",
                response=deployment,
            ) from e

    async def _pump(self, socket: Socket, generation: int) -> None:
        """Read frames until the socket ends, then route to error/close handling."""
        try:
            async for frame in socket:
                if not self._state.is_current(generation):
                    return
                await self._dispatch(frame)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            if self._state.is_current(generation):
                await self._handle_error(socket, generation, exc)
            return

        if self._state.is_current(generation):
            await self._handle_close(socket, generation)

    async def _dispatch(self, frame: str | bytes) -> None:
        try:
            payload = decode_frame(frame)
            if self._payload_adapter is not None:
                payload = self._payload_adapter.validate_python(payload)
        except (ProtocolError, pydantic.ValidationError) as exc:
            logger.warning(
                "Dropping malformed console frame",
                deployment_id=self.deployment_id,
                error=str(exc),
            )
            return
        await self._bus.emit(EventType.MESSAGE, payload)

    async def _release(self, socket: Socket) -> None:
        """Close ``socket`` if it is the open one and announce the close."""
        state = self._state
        if socket is not state.socket or not state.open:
            return
        state.open = False
        # Best-effort: the socket is usually already dead here.
        with suppress(Exception):
            await socket.close()
        await self._bus.emit(
            EventType.CLOSED,
            StreamClosed(
                code=getattr(socket, "close_code", None),
                reason=getattr(socket, "close_reason", None) or None,
            ),
        )

    async def _handle_error(
        self, socket: Socket | None, generation: int, exc: BaseException
    ) -> None:
        logger.warning(
            "Console socket errored",
            deployment_id=self.deployment_id,
            attempt=generation,
            error=repr(exc),
        )
        await self._bus.emit(EventType.ERRORED, StreamErrored(error=exc))
        if socket is not None:
            await self._release(socket)
        if self._state.reconnect_enabled and self._state.is_current(generation):
            self._schedule_reconnect(generation)

    async def _handle_close(self, socket: Socket, generation: int) -> None:
        await self._release(socket)
        if (
            self.reconnect_on_close
            and self._state.reconnect_enabled
            and self._state.is_current(generation)
        ):
            self._schedule_reconnect(generation)

    def _schedule_reconnect(self, generation: int) -> None:
        logger.debug(
            "Scheduling reconnect",
            deployment_id=self.deployment_id,
            delay=self.reconnect_delay,
        )
        _cancel(self._state.reconnect_task)
        self._state.reconnect_task = asyncio.create_task(
            self._reconnect_later(generation)
        )

    async def _reconnect_later(self, generation: int) -> None:
        await asyncio.sleep(self.reconnect_delay)
        state = self._state
        if state.reconnect_task is asyncio.current_task():
            state.reconnect_task = None
        if not state.reconnect_enabled or not state.is_current(generation):
            return
        try:
            await self.connect()
        except Exception as exc:
            # Nobody awaits this task, so report instead of raising.
            logger.error(
                "Reconnect failed",
                exc_info=exc,
                deployment_id=self.deployment_id,
            )
            await self._bus.emit(EventType.ERRORED, StreamErrored(error=exc))
