"""graphql-transport-ws client facade.

Wires the transport, outbound sender, completion guard, event router and
subscription manager together behind one object:

    async with GraphQLTransportWs("ws://localhost:4000/graphql") as client:
        client.on_connection_ack = handle_ack
        client.connection_init({"token": token})
        handle = client.subscribe(
            {"query": "subscription { ticks }"},
            on_next=print,
        )
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from yarl import URL

from graphql_transport_ws.const import NORMAL_CLOSURE
from graphql_transport_ws.events import EventEmitter, Handler
from graphql_transport_ws.guard import CompletionGuard
from graphql_transport_ws.logging_abstraction import get_logger
from graphql_transport_ws.protocol import EventName, GraphQLFormattedError, SubscribePayload
from graphql_transport_ws.router import EventRouter
from graphql_transport_ws.sender import OutboundSender
from graphql_transport_ws.subscriptions import (
    IdFactory,
    OnComplete,
    OnError,
    OnNext,
    SubscriptionHandle,
    SubscriptionManager,
)
from graphql_transport_ws.transport import (
    AiohttpWebSocketTransport,
    ReadyState,
    Transport,
    TransportEvent,
    create_websocket,
)

logger = get_logger(__name__)


class _HandlerSlot:
    """Single-slot handler stored in the router; assignment replaces the previous one."""

    def __init__(self, event: EventName) -> None:
        self.event: EventName = event

    def __get__(self, instance: GraphQLTransportWs | None, owner: type | None = None) -> Any:
        if instance is None:
            return self
        return instance.router.slots[self.event]

    def __set__(self, instance: GraphQLTransportWs, handler: Handler | None) -> None:
        instance.router.slots[self.event] = handler


class GraphQLTransportWs:
    """Client side of the graphql-transport-ws sub-protocol."""

    on_connection_init = _HandlerSlot(EventName.CONNECTION_INIT)
    on_connection_ack = _HandlerSlot(EventName.CONNECTION_ACK)
    on_ping = _HandlerSlot(EventName.PING)
    on_pong = _HandlerSlot(EventName.PONG)
    on_subscribe = _HandlerSlot(EventName.SUBSCRIBE)
    on_next = _HandlerSlot(EventName.NEXT)
    on_error = _HandlerSlot(EventName.ERROR)
    on_complete = _HandlerSlot(EventName.COMPLETE)

    def __init__(
        self,
        socket: Transport | str | URL,
        *,
        id_factory: IdFactory | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            socket: A Transport, or a ws:// / wss:// URL for which an
                AiohttpWebSocketTransport is created (connect it with
                ``async with`` or ``await client.socket.connect()``)
            id_factory: Subscription id generator (defaults to UUID4)
        """
        self.socket: Transport = socket if isinstance(socket, Transport) else create_websocket(socket)
        self.bus: EventEmitter = EventEmitter()
        self.guard: CompletionGuard = CompletionGuard()
        self.router: EventRouter = EventRouter(self.bus, self.guard)
        self.sender: OutboundSender = OutboundSender(self.socket)
        self.subscriptions: SubscriptionManager = SubscriptionManager(
            self.bus,
            self.socket,
            self.sender,
            self.guard,
            id_factory=id_factory,
        )
        self.socket.on(TransportEvent.MESSAGE, self.router.handle_message)

    # Multi-listener bus

    def on(self, event: str, handler: Handler, *, once: bool = False) -> None:
        self.bus.on(event, handler, once=once)

    def off(self, event: str, handler: Handler) -> None:
        self.bus.off(event, handler)

    async def emit(self, event: str, payload: Any) -> None:
        """Dispatch a synthetic event to bus listeners (slots are not invoked)."""
        await self.bus.emit(event, payload)

    # Outbound messages

    def connection_init(self, payload: Mapping[str, Any] | None = None) -> None:
        self.sender.connection_init(payload)

    def connection_ack(self, payload: Mapping[str, Any] | None = None) -> None:
        self.sender.connection_ack(payload)

    def ping(self, payload: Mapping[str, Any] | None = None) -> None:
        self.sender.ping(payload)

    def pong(self, payload: Mapping[str, Any] | None = None) -> None:
        self.sender.pong(payload)

    def next(self, subscription_id: str, payload: Mapping[str, Any]) -> None:
        self.sender.next(subscription_id, payload)

    def error(
        self,
        subscription_id: str,
        payload: Sequence[GraphQLFormattedError | Mapping[str, Any]],
    ) -> None:
        """Send ``error`` for ``subscription_id`` unless it was already finalized.

        An owned subscription is released locally without callbacks. The
        payload is only validated while the id is still open.

        Raises:
            ValueError: payload is empty or holds an invalid error entry
        """
        errors = [] if self.guard.has(subscription_id) else self._coerce_errors(payload)
        if not self.guard.try_finalize(subscription_id):
            logger.debug(
                "Subscription already finalized, error not sent",
                extra={"subscription_id": subscription_id},
            )
            return
        self.sender.error(subscription_id, errors)
        self.subscriptions.release(subscription_id)

    @staticmethod
    def _coerce_errors(payload: Sequence[GraphQLFormattedError | Mapping[str, Any]]) -> list[GraphQLFormattedError]:
        errors = [
            entry if isinstance(entry, GraphQLFormattedError) else GraphQLFormattedError.model_validate(entry)
            for entry in payload
        ]
        if not errors:
            error_msg = "error payload must contain at least one error"
            raise ValueError(error_msg)
        return errors

    def complete(self, subscription_id: str) -> None:
        """Send ``complete`` for ``subscription_id`` unless it was already finalized.

        An owned subscription is released locally without callbacks.
        """
        if not self.guard.try_finalize(subscription_id):
            logger.debug(
                "Subscription already finalized, complete not sent",
                extra={"subscription_id": subscription_id},
            )
            return
        self.sender.complete(subscription_id)
        self.subscriptions.release(subscription_id)

    def subscribe(
        self,
        params: SubscribePayload | Mapping[str, Any],
        *,
        on_next: OnNext | None = None,
        on_error: OnError | None = None,
        on_complete: OnComplete | None = None,
    ) -> SubscriptionHandle:
        return self.subscriptions.subscribe(
            params,
            on_next=on_next,
            on_error=on_error,
            on_complete=on_complete,
        )

    # Lifecycle

    async def close(self, code: int = NORMAL_CLOSURE, reason: str = "") -> None:
        await self.socket.close(code, reason)

    async def __aenter__(self) -> GraphQLTransportWs:
        if isinstance(self.socket, AiohttpWebSocketTransport) and self.socket.ready_state is ReadyState.CONNECTING:
            await self.socket.connect()
        return self

    async def __aexit__(self, exc_type: object, exc: object, tb: object) -> None:
        await self.close()

    def __repr__(self) -> str:
        return f"GraphQLTransportWs({self.socket!r}, {len(self.subscriptions)} active)"
