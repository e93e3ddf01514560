"""
Typed event bus for stream lifecycle events.

A mapping from :class:`EventType` to an ordered list of handlers. Emission
walks a snapshot of the list, so handlers added or removed while an event
is being delivered only take effect for the next emission.
"""

from __future__ import annotations

import inspect
from typing import TYPE_CHECKING, Any

from pylon_client.errors import ValidationError
from pylon_client.telemetry import get_logger
from pylon_client.types.events import EventType

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    Handler = Callable[[Any], Awaitable[Any] | Any]

logger = get_logger(__name__)


def coerce_event_type(event: EventType | str) -> EventType:
    """Accept an EventType or its string value."""
    if isinstance(event, EventType):
        return event
    try:
        return EventType(event)
    except ValueError:
        raise ValidationError(
            f"Unknown event type: {event!r}",
            field="event",
            expected=[t.value for t in EventType],
            actual=event,
        ) from None


class EventBus:
    """Ordered fan-out of events to sync or async handlers.

    Example:
        >>> bus = EventBus()
        >>> bus.on(EventType.MESSAGE, print)
        >>> await bus.emit(EventType.MESSAGE, {"level": "log"})
    """

    def __init__(self) -> None:
        self._handlers: dict[EventType, list[Handler]] = {t: [] for t in EventType}

    def on(self, event: EventType | str, handler: Handler) -> Handler:
        """Register a handler; returns it so the call can be used as a decorator."""
        event_type = coerce_event_type(event)
        if not callable(handler):
            raise ValidationError.incompatible("handler", "a callable", handler)
        self._handlers[event_type].append(handler)
        return handler

    def off(self, event: EventType | str, handler: Handler) -> bool:
        """Remove the first registration of ``handler``.

        Returns:
            True if the handler was registered
        """
        handlers = self._handlers[coerce_event_type(event)]
        if handler in handlers:
            handlers.remove(handler)
            return True
        return False

    def handlers(self, event: EventType | str) -> tuple[Handler, ...]:
        """Handlers currently registered for ``event``, in registration order."""
        return tuple(self._handlers[coerce_event_type(event)])

    def clear(self) -> None:
        """Remove every handler."""
        for handlers in self._handlers.values():
            handlers.clear()

    async def emit(self, event: EventType, payload: Any = None) -> int:
        """Deliver ``payload`` to every handler of ``event``.

        A handler that raises is logged and does not prevent the remaining
        handlers from running.

        Returns:
            Number of handlers invoked
        """
        handlers = tuple(self._handlers[event])
        for handler in handlers:
            try:
                result = handler(payload)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception(
                    "Stream event handler failed",
                    event=event.value,
                    handler=getattr(handler, "__qualname__", repr(handler)),
                )
        return len(handlers)
