"""Subscription lifecycle management.

State machine per subscription id:

    ACTIVE --inbound complete--> COMPLETED   (on_complete invoked)
    ACTIVE --transport close---> COMPLETED   (no callback)
    ACTIVE --local release-----> COMPLETED   (no callback)

While ACTIVE, inbound ``next`` frames call on_next and inbound ``error``
frames call on_error. An ``error`` frame does not end the subscription; only
``complete``, a local release, or the transport closing do.
"""

from __future__ import annotations

import uuid
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from graphql_transport_ws import metrics
from graphql_transport_ws.events import EventEmitter, MessageEvent, maybe_await
from graphql_transport_ws.guard import CompletionGuard
from graphql_transport_ws.logging_abstraction import get_logger
from graphql_transport_ws.protocol import (
    CompleteMessage,
    ErrorMessage,
    EventName,
    GraphQLFormattedError,
    NextMessage,
    SubscribePayload,
)
from graphql_transport_ws.sender import Disposer, OutboundSender
from graphql_transport_ws.transport.base import CloseEvent, ReadyState, Transport, TransportEvent

logger = get_logger(__name__)

OnNext = Callable[[dict[str, Any]], Awaitable[Any] | Any]
OnError = Callable[[list[GraphQLFormattedError]], Awaitable[Any] | Any]
OnComplete = Callable[[], Awaitable[Any] | Any]
IdFactory = Callable[[], str]


def generate_subscription_id() -> str:
    """Return a random 128-bit subscription id (UUID4 string)."""
    return str(uuid.uuid4())


class SubscriptionState(Enum):
    """Subscription state enumeration."""

    ACTIVE = "active"
    COMPLETED = "completed"


@dataclass(frozen=True, slots=True)
class SubscriptionHandle:
    """What the caller holds for a subscription: its id."""

    id: str


class Subscription:
    """Scoped listeners and state for one subscription id."""

    def __init__(
        self,
        subscription_id: str,
        bus: EventEmitter,
        transport: Transport,
        on_next: OnNext | None = None,
        on_error: OnError | None = None,
        on_complete: OnComplete | None = None,
        on_finished: Callable[[Subscription, str], None] | None = None,
    ) -> None:
        self.id: str = subscription_id
        self.state: SubscriptionState = SubscriptionState.ACTIVE
        self.dispose_subscribe: Disposer | None = None
        self._bus = bus
        self._transport = transport
        self._on_next = on_next
        self._on_error = on_error
        self._on_complete = on_complete
        self._on_finished = on_finished

    @property
    def is_active(self) -> bool:
        return self.state is SubscriptionState.ACTIVE

    def attach(self) -> None:
        self._bus.on(EventName.NEXT, self._handle_next)
        self._bus.on(EventName.ERROR, self._handle_error)
        self._bus.on(EventName.COMPLETE, self._handle_complete)
        self._transport.on(TransportEvent.CLOSE, self._handle_close, once=True)

    def detach(self) -> None:
        self._bus.off(EventName.NEXT, self._handle_next)
        self._bus.off(EventName.ERROR, self._handle_error)
        self._bus.off(EventName.COMPLETE, self._handle_complete)
        self._transport.off(TransportEvent.CLOSE, self._handle_close)

    def release(self) -> bool:
        """End the subscription locally: cancel a queued subscribe frame, detach, no callback."""
        if not self.is_active:
            return False
        self._cancel_subscribe()
        self._finish("local")
        return True

    async def _handle_next(self, event: MessageEvent[NextMessage]) -> None:
        if event.data.id != self.id or not self.is_active:
            return
        if self._on_next is not None:
            await maybe_await(self._on_next(event.data.payload))

    async def _handle_error(self, event: MessageEvent[ErrorMessage]) -> None:
        if event.data.id != self.id or not self.is_active:
            return
        if self._on_error is not None:
            await maybe_await(self._on_error(list(event.data.payload)))

    async def _handle_complete(self, event: MessageEvent[CompleteMessage]) -> None:
        if event.data.id != self.id or not self.is_active:
            return
        self._cancel_subscribe()
        self.state = SubscriptionState.COMPLETED
        try:
            if self._on_complete is not None:
                await maybe_await(self._on_complete())
        finally:
            self._finish("complete")

    def _handle_close(self, event: CloseEvent | None = None) -> None:
        if not self.is_active:
            return
        logger.debug(
            "Transport closed, dropping subscription listeners",
            extra={"subscription_id": self.id, "code": event.code if event else None},
        )
        self._finish("close")

    def _cancel_subscribe(self) -> None:
        if self.dispose_subscribe is not None:
            self.dispose_subscribe()
            self.dispose_subscribe = None

    def _finish(self, reason: str) -> None:
        self.state = SubscriptionState.COMPLETED
        self.detach()
        if self._on_finished is not None:
            on_finished, self._on_finished = self._on_finished, None
            on_finished(self, reason)

    def __repr__(self) -> str:
        return f"Subscription({self.id}, {self.state.value})"


class SubscriptionManager:
    """Allocates subscription ids and owns their lifecycle."""

    def __init__(
        self,
        bus: EventEmitter,
        transport: Transport,
        sender: OutboundSender,
        guard: CompletionGuard,
        id_factory: IdFactory | None = None,
    ) -> None:
        """Initialize the manager.

        Args:
            bus: Client event bus the router dispatches to
            transport: Transport whose ``close`` ends every subscription
            sender: Outbound sender used for the subscribe frame
            guard: Completion guard shared with the router and the client
            id_factory: Subscription id generator (defaults to UUID4)

        """
        self.bus: EventEmitter = bus
        self.transport: Transport = transport
        self.sender: OutboundSender = sender
        self.guard: CompletionGuard = guard
        self.id_factory: IdFactory = id_factory or generate_subscription_id
        self._subscriptions: dict[str, Subscription] = {}

    def subscribe(
        self,
        params: SubscribePayload | Mapping[str, Any],
        *,
        on_next: OnNext | None = None,
        on_error: OnError | None = None,
        on_complete: OnComplete | None = None,
    ) -> SubscriptionHandle:
        """Start a subscription and send its ``subscribe`` frame.

        Raises:
            ValueError: The id factory returned an id that is active or finalized
            pydantic.ValidationError: params are not valid request parameters

        """
        payload = params if isinstance(params, SubscribePayload) else SubscribePayload.model_validate(params)
        subscription_id = self.id_factory()
        if subscription_id in self._subscriptions or self.guard.has(subscription_id):
            error_msg = f"Subscription id {subscription_id!r} is already in use"
            raise ValueError(error_msg)

        subscription = Subscription(
            subscription_id,
            self.bus,
            self.transport,
            on_next=on_next,
            on_error=on_error,
            on_complete=on_complete,
            on_finished=self._forget,
        )

        if self.transport.ready_state is ReadyState.CLOSED:
            subscription.state = SubscriptionState.COMPLETED
            logger.warning(
                "Transport closed, subscription %s will never start",
                subscription_id,
                extra={"subscription_id": subscription_id},
            )
            return SubscriptionHandle(subscription_id)

        self._subscriptions[subscription_id] = subscription
        subscription.attach()
        subscription.dispose_subscribe = self.sender.subscribe(subscription_id, payload)
        metrics.record_subscription_started()
        logger.info(
            "Subscription started",
            extra={"subscription_id": subscription_id, "operation_name": payload.operation_name},
        )
        return SubscriptionHandle(subscription_id)

    def release(self, subscription_id: str) -> bool:
        """Tear down an owned subscription after a local complete/error.

        Returns:
            True if an active subscription was released
        """
        subscription = self._subscriptions.get(subscription_id)
        if subscription is None:
            return False
        return subscription.release()

    def get(self, subscription_id: str) -> Subscription | None:
        return self._subscriptions.get(subscription_id)

    @property
    def active_ids(self) -> list[str]:
        return list(self._subscriptions)

    def __len__(self) -> int:
        return len(self._subscriptions)

    def _forget(self, subscription: Subscription, reason: str) -> None:
        self._subscriptions.pop(subscription.id, None)
        metrics.record_subscription_finished(reason)
        logger.info(
            "Subscription finished (%s)",
            reason,
            extra={"subscription_id": subscription.id, "reason": reason},
        )
