"""Inbound event routing.

Each inbound transport frame is decoded and delivered to two sinks, in order:
1. the single-slot handler for its message type (last assignment wins)
2. the multi-listener bus under the type's event name

Frames that fail to decode become an ``unknown`` event on the bus. The
completion guard filters frames for finished subscriptions: ``next`` and
``error`` for a finalized id are dropped, and ``complete`` is delivered only
the first time an id is finalized.
"""

from __future__ import annotations

import asyncio
import time

from graphql_transport_ws import metrics
from graphql_transport_ws.correlation import correlation_context
from graphql_transport_ws.events import EventEmitter, Handler, MessageEvent, invoke_handler
from graphql_transport_ws.guard import CompletionGuard
from graphql_transport_ws.instrumentation import timed_async
from graphql_transport_ws.logging_abstraction import get_logger
from graphql_transport_ws.protocol import EventName, Message, MessageCodec, MessageType

logger = get_logger(__name__)

# Single-slot handlers exist for every message type; ``unknown`` is bus-only
SLOT_EVENTS: tuple[EventName, ...] = tuple(EventName(member.value) for member in MessageType)


class EventRouter:
    """Decodes inbound frames and dispatches them to slots and the bus.

    Handling is serialized with a lock: a frame is fully processed (every
    handler awaited) before the next frame of the same transport starts, in
    arrival order, whatever the transport's own delivery model is.
    """

    def __init__(self, bus: EventEmitter, guard: CompletionGuard) -> None:
        self.bus: EventEmitter = bus
        self.guard: CompletionGuard = guard
        self.slots: dict[EventName, Handler | None] = dict.fromkeys(SLOT_EVENTS)
        self._lock: asyncio.Lock = asyncio.Lock()

    async def handle_message(self, raw: str | bytes) -> None:
        """Transport ``message`` listener: process one inbound frame."""
        async with self._lock:
            with correlation_context():
                await self._route(raw)

    @timed_async("route_frame")
    async def _route(self, raw: str | bytes) -> None:
        start_time = time.perf_counter()
        message, error = MessageCodec.decode(raw)

        if error is not None:
            metrics.record_decode_error(error.reason)
            logger.warning(
                "Undecodable frame: %s",
                error,
                extra={"reason": error.reason, "detail": error.detail},
            )
            await self.bus.emit(
                EventName.UNKNOWN,
                MessageEvent(type=EventName.UNKNOWN, data=str(error), raw=raw, error=error),
            )
            return
        if message is None:
            return

        if not self._admit(message):
            metrics.record_frame_received(message.type, "suppressed")
            logger.debug(
                "Suppressed %s frame for finalized subscription",
                message.type,
                extra={"message_type": message.type, "subscription_id": getattr(message, "id", None)},
            )
            return

        await self.dispatch(message, raw)
        metrics.record_frame_received(message.type, "dispatched")
        metrics.record_handler_latency(message.type, time.perf_counter() - start_time)

    def _admit(self, message: Message) -> bool:
        """Apply the completion guard to an inbound message."""
        if message.type in (MessageType.NEXT, MessageType.ERROR):
            return not self.guard.has(message.id)
        if message.type == MessageType.COMPLETE:
            return self.guard.try_finalize(message.id, direction="inbound")
        return True

    async def dispatch(self, message: Message, raw: str | bytes | None = None) -> None:
        """Deliver a decoded message to its slot handler, then to the bus."""
        name = EventName(message.type)
        event = MessageEvent(type=name, data=message, raw=raw)
        logger.debug(
            "Dispatching %s",
            name,
            extra={"message_type": message.type, "subscription_id": getattr(message, "id", None)},
        )

        slot = self.slots.get(name)
        if slot is not None:
            await invoke_handler(name, slot, event)
        await self.bus.emit(name, event)
