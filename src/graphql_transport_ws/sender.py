"""Outbound sender: frames protocol messages and applies the send discipline.

Behavior by transport ready state:
- CONNECTING: encode and append to the pending queue, return immediately
- OPEN: encode and transmit immediately
- CLOSING / CLOSED: discard silently (debug log + metric)

The pending queue is flushed once, in call order, when the transport emits
``open``. A queued subscribe frame can be cancelled through the disposer that
``subscribe()`` returns; cancelled entries are skipped at flush time.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from graphql_transport_ws import metrics
from graphql_transport_ws.logging_abstraction import get_logger
from graphql_transport_ws.protocol import (
    CompleteMessage,
    ConnectionAckMessage,
    ConnectionInitMessage,
    ErrorMessage,
    GraphQLFormattedError,
    Message,
    MessageCodec,
    NextMessage,
    PingMessage,
    PongMessage,
    SubscribeMessage,
    SubscribePayload,
)
from graphql_transport_ws.transport.base import CloseEvent, ReadyState, Transport, TransportEvent

logger = get_logger(__name__)

Disposer = Callable[[], None]


@dataclass
class PendingFrame:
    """Encoded frame waiting for the transport to open.

    Attributes:
        message_type: Wire ``type`` of the frame
        data: Encoded JSON text
        subscription_id: Id for subscribe/next/error/complete frames
        cancelled: Set by a disposer before flush; the frame is then skipped
        sent: Set once the frame was handed to the transport
    """

    message_type: str
    data: str
    subscription_id: str | None = None
    cancelled: bool = False
    sent: bool = False


def _noop() -> None:
    return None


class OutboundSender:
    """One send operation per message type, queueing until the transport opens."""

    def __init__(self, transport: Transport) -> None:
        self.transport: Transport = transport
        self.pending: deque[PendingFrame] = deque()
        self._flushed: bool = transport.ready_state is not ReadyState.CONNECTING

        if not self._flushed:
            transport.on(TransportEvent.OPEN, self._flush, once=True)
            transport.on(TransportEvent.CLOSE, self._discard_pending, once=True)

    def connection_init(self, payload: Mapping[str, Any] | None = None) -> None:
        self._send(ConnectionInitMessage(payload=payload))

    def connection_ack(self, payload: Mapping[str, Any] | None = None) -> None:
        self._send(ConnectionAckMessage(payload=payload))

    def ping(self, payload: Mapping[str, Any] | None = None) -> None:
        self._send(PingMessage(payload=payload))

    def pong(self, payload: Mapping[str, Any] | None = None) -> None:
        self._send(PongMessage(payload=payload))

    def subscribe(self, subscription_id: str, params: SubscribePayload | Mapping[str, Any]) -> Disposer:
        """Send ``subscribe`` and return a disposer for the not-yet-sent frame.

        The disposer cancels the frame if it is still queued and is a no-op
        once the frame was transmitted or discarded.

        Raises:
            pydantic.ValidationError: params are not valid request parameters
        """
        frame = self._send(SubscribeMessage(id=subscription_id, payload=params))
        if frame is None or frame.sent:
            return _noop

        def dispose() -> None:
            if frame.sent or frame.cancelled:
                return
            frame.cancelled = True
            metrics.record_frame_sent(frame.message_type, "cancelled")
            logger.debug(
                "Cancelled queued subscribe frame",
                extra={"subscription_id": subscription_id},
            )

        return dispose

    def next(self, subscription_id: str, payload: Mapping[str, Any]) -> None:
        self._send(NextMessage(id=subscription_id, payload=payload))

    def error(
        self,
        subscription_id: str,
        payload: Sequence[GraphQLFormattedError | Mapping[str, Any]],
    ) -> None:
        self._send(ErrorMessage(id=subscription_id, payload=list(payload)))

    def complete(self, subscription_id: str) -> None:
        self._send(CompleteMessage(id=subscription_id))

    @property
    def pending_count(self) -> int:
        return sum(1 for frame in self.pending if not frame.cancelled)

    def _send(self, message: Message) -> PendingFrame | None:
        subscription_id = getattr(message, "id", None)
        state = self.transport.ready_state
        if state in (ReadyState.CLOSING, ReadyState.CLOSED):
            metrics.record_frame_sent(message.type, "discarded")
            logger.debug(
                "Transport %s, discarding %s frame",
                state.value,
                message.type,
                extra={"message_type": message.type, "subscription_id": subscription_id},
            )
            return None

        frame = PendingFrame(
            message_type=message.type,
            data=MessageCodec.encode(message),
            subscription_id=subscription_id,
        )
        if state is ReadyState.OPEN and self._flushed:
            self._transmit(frame)
            return frame

        self.pending.append(frame)
        metrics.record_frame_sent(frame.message_type, "queued")
        metrics.record_pending_queue_size(len(self.pending))
        logger.debug(
            "Transport not ready, queued %s frame (%d pending)",
            frame.message_type,
            len(self.pending),
            extra={"message_type": frame.message_type, "subscription_id": subscription_id},
        )
        return frame

    def _transmit(self, frame: PendingFrame) -> None:
        self.transport.send(frame.data)
        frame.sent = True
        metrics.record_frame_sent(frame.message_type, "sent")
        logger.debug(
            "Sent %s frame",
            frame.message_type,
            extra={"message_type": frame.message_type, "subscription_id": frame.subscription_id},
        )

    def _flush(self, _event: object = None) -> None:
        """Transmit queued frames in insertion order, skipping cancelled ones."""
        self._flushed = True
        self.transport.off(TransportEvent.CLOSE, self._discard_pending)
        flushed = 0
        while self.pending:
            frame = self.pending.popleft()
            if frame.cancelled:
                continue
            self._transmit(frame)
            flushed += 1
        metrics.record_pending_queue_size(0)
        if flushed:
            logger.info("Flushed %d queued frame(s)", flushed, extra={"frames": flushed})

    def _discard_pending(self, event: CloseEvent | None = None) -> None:
        """Drop queued frames when the transport closes before it ever opened."""
        self._flushed = True
        self.transport.off(TransportEvent.OPEN, self._flush)
        dropped = 0
        while self.pending:
            frame = self.pending.popleft()
            if not frame.cancelled:
                metrics.record_frame_sent(frame.message_type, "discarded")
                dropped += 1
        metrics.record_pending_queue_size(0)
        if dropped:
            logger.warning(
                "Transport closed before opening, %d queued frame(s) discarded",
                dropped,
                extra={"frames": dropped, "code": event.code if event else None},
            )
