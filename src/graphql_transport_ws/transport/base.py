"""Transport abstraction consumed by the protocol core.

A transport is an EventEmitter that emits:
- ``open`` (payload None) once, when it becomes ready to send
- ``message`` (payload: raw frame, str or bytes) per inbound frame; the
  transport awaits each emit before delivering the next frame
- ``close`` (payload: CloseEvent) once, when it is torn down
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum, StrEnum

from graphql_transport_ws.events import EventEmitter


class ReadyState(Enum):
    """Transport ready state (mirrors WebSocket.readyState)."""

    CONNECTING = "connecting"
    OPEN = "open"
    CLOSING = "closing"
    CLOSED = "closed"


class TransportEvent(StrEnum):
    OPEN = "open"
    MESSAGE = "message"
    CLOSE = "close"


@dataclass(frozen=True, slots=True)
class CloseEvent:
    """Payload of the ``close`` event.

    Attributes:
        code: WebSocket close code (1006 when the connection dropped without one)
        reason: Close reason or failure description
    """

    code: int | None = None
    reason: str = ""


class Transport(EventEmitter, ABC):
    """Bidirectional frame transport."""

    @property
    @abstractmethod
    def ready_state(self) -> ReadyState:
        """Current ready state."""

    @abstractmethod
    def send(self, data: str) -> None:
        """Transmit one frame. Only called while the transport is OPEN."""

    @abstractmethod
    async def close(self, code: int = 1000, reason: str = "") -> None:
        """Close the transport; ``close`` is emitted exactly once."""

    @property
    def is_open(self) -> bool:
        return self.ready_state is ReadyState.OPEN
