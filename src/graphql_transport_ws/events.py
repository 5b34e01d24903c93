"""Event emitter and event types shared by the client bus and transports.

EventEmitter follows DOM EventTarget semantics where they matter for protocol
routing: listeners run in registration order, registering the same handler
twice for one event is a no-op, a listener removed during a dispatch does not
run later in that dispatch, and a failing listener does not stop the others.
Unlike EventTarget, ``emit`` awaits async listeners one after another.
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from graphql_transport_ws import metrics
from graphql_transport_ws.logging_abstraction import get_logger
from graphql_transport_ws.protocol.exceptions import MessageDecodeError

__all__ = [
    "EventEmitter",
    "Handler",
    "MessageEvent",
    "invoke_handler",
    "maybe_await",
]

logger = get_logger(__name__)

Handler = Callable[[Any], Awaitable[Any] | Any]
T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class MessageEvent(Generic[T]):
    """One dispatched protocol event.

    Attributes:
        type: Event name (an EventName value)
        data: Decoded message, or the failure description for ``unknown``
        raw: Frame exactly as received from the transport
        error: Decode error behind an ``unknown`` event
    """

    type: str
    data: T
    raw: str | bytes | None = None
    error: MessageDecodeError | None = None


@dataclass(eq=False, slots=True)
class _Listener:
    handler: Handler
    once: bool = False
    removed: bool = field(default=False)


async def maybe_await(result: Any) -> Any:
    """Await ``result`` if a handler returned an awaitable."""
    if inspect.isawaitable(result):
        return await result
    return result


class EventEmitter:
    """Named events with ordered, individually removable listeners."""

    def __init__(self) -> None:
        self._listeners: dict[str, list[_Listener]] = {}

    def on(self, event: str, handler: Handler, *, once: bool = False) -> None:
        """Register ``handler`` for ``event``.

        Args:
            event: Event name
            handler: Sync or async callable receiving the event payload
            once: Remove the listener before its first invocation
        """
        listeners = self._listeners.setdefault(str(event), [])
        if any(listener.handler == handler for listener in listeners):
            return
        listeners.append(_Listener(handler, once))

    def off(self, event: str, handler: Handler) -> None:
        """Remove ``handler`` from ``event``; unknown handlers are ignored."""
        listeners = self._listeners.get(str(event))
        if not listeners:
            return
        for index, listener in enumerate(listeners):
            if listener.handler == handler:
                listener.removed = True
                del listeners[index]
                return

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(str(event), ()))

    async def emit(self, event: str, payload: Any) -> None:
        """Invoke every listener of ``event`` in order, awaiting each one."""
        name = str(event)
        for listener in list(self._listeners.get(name, ())):
            if listener.removed:
                continue
            if listener.once:
                self.off(name, listener.handler)
            await invoke_handler(name, listener.handler, payload)


async def invoke_handler(event: str, handler: Handler, payload: Any) -> None:
    """Run one handler, logging (not raising) any exception it throws."""
    try:
        await maybe_await(handler(payload))
    except Exception:
        metrics.record_handler_error(event)
        logger.exception(
            "Handler for '%s' event raised",
            event,
            extra={"event": event, "handler": getattr(handler, "__qualname__", repr(handler))},
        )
