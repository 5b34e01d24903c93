"""Exception types for WebSocket transport errors.

Sends are best-effort and never raise; only opening a transport can fail
loudly.
"""

from __future__ import annotations

from graphql_transport_ws.protocol.exceptions import GraphQLTransportWsError


class TransportError(GraphQLTransportWsError):
    """Base exception for transport failures."""


class TransportConnectError(TransportError):
    """WebSocket could not be opened (timeout, refused, bad handshake, started twice).

    Attributes:
        reason: Specific failure reason
        state: Transport ready state when the error occurred

    """

    def __init__(self, reason: str, state: str = "unknown") -> None:
        self.reason: str = reason
        self.state: str = state
        super().__init__(f"Transport connect failed: {reason} (state: {state})")


class SubprotocolNegotiationError(TransportError):
    """Server did not accept the requested WebSocket sub-protocol.

    Attributes:
        requested: Sub-protocol the client asked for
        negotiated: Sub-protocol the server selected (None if it selected none)

    """

    def __init__(self, requested: str, negotiated: str | None) -> None:
        self.requested: str = requested
        self.negotiated: str | None = negotiated
        super().__init__(f"Server negotiated sub-protocol {negotiated!r}, expected {requested!r}")
