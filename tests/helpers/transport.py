"""In-memory Transport used to drive the protocol core from tests."""

from __future__ import annotations

import json
from typing import Any

from graphql_transport_ws.const import NORMAL_CLOSURE
from graphql_transport_ws.transport import CloseEvent, ReadyState, Transport, TransportEvent


class FakeTransport(Transport):
    """Records outbound frames and lets tests inject open/message/close."""

    def __init__(self, state: ReadyState = ReadyState.CONNECTING) -> None:
        super().__init__()
        self._state: ReadyState = state
        self.sent: list[str] = []
        self.close_calls: list[tuple[int, str]] = []

    @property
    def ready_state(self) -> ReadyState:
        return self._state

    def send(self, data: str) -> None:
        self.sent.append(data)

    async def open(self) -> None:
        self._state = ReadyState.OPEN
        await self.emit(TransportEvent.OPEN, None)

    async def receive(self, frame: str | bytes | dict[str, Any]) -> None:
        """Deliver one inbound frame; dicts are JSON-encoded first."""
        data = json.dumps(frame) if isinstance(frame, dict) else frame
        await self.emit(TransportEvent.MESSAGE, data)

    def begin_closing(self) -> None:
        self._state = ReadyState.CLOSING

    async def close(self, code: int = NORMAL_CLOSURE, reason: str = "") -> None:
        if self._state is ReadyState.CLOSED:
            return
        self.close_calls.append((code, reason))
        self._state = ReadyState.CLOSED
        await self.emit(TransportEvent.CLOSE, CloseEvent(code=code, reason=reason))

    @property
    def sent_messages(self) -> list[dict[str, Any]]:
        return [json.loads(frame) for frame in self.sent]

    @property
    def sent_types(self) -> list[str]:
        return [message["type"] for message in self.sent_messages]
