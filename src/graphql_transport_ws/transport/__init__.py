"""Transport package - the socket abstraction the protocol core runs on."""

from graphql_transport_ws.transport.aiohttp_transport import AiohttpWebSocketTransport, create_websocket
from graphql_transport_ws.transport.base import CloseEvent, ReadyState, Transport, TransportEvent
from graphql_transport_ws.transport.exceptions import (
    SubprotocolNegotiationError,
    TransportConnectError,
    TransportError,
)

__all__ = [
    "AiohttpWebSocketTransport",
    "CloseEvent",
    "ReadyState",
    "SubprotocolNegotiationError",
    "Transport",
    "TransportConnectError",
    "TransportError",
    "TransportEvent",
    "create_websocket",
]
