"""Client for the graphql-transport-ws WebSocket sub-protocol.

Public API:
- GraphQLTransportWs client facade
- Message models and the MessageCodec
- Transport abstraction and the aiohttp WebSocket transport
"""

__version__ = "0.3.0"

from graphql_transport_ws.client import GraphQLTransportWs  # noqa: E402
from graphql_transport_ws.const import PROTOCOL, UNKNOWN  # noqa: E402
from graphql_transport_ws.events import EventEmitter, MessageEvent  # noqa: E402
from graphql_transport_ws.protocol import (  # noqa: E402
    CompleteMessage,
    ConnectionAckMessage,
    ConnectionInitMessage,
    ErrorMessage,
    EventName,
    GraphQLFormattedError,
    Message,
    MessageCodec,
    MessageDecodeError,
    MessageType,
    NextMessage,
    PingMessage,
    PongMessage,
    SubscribeMessage,
    SubscribePayload,
)
from graphql_transport_ws.subscriptions import SubscriptionHandle, SubscriptionState  # noqa: E402
from graphql_transport_ws.transport import (  # noqa: E402
    AiohttpWebSocketTransport,
    CloseEvent,
    ReadyState,
    Transport,
    create_websocket,
)

__all__ = [
    "PROTOCOL",
    "UNKNOWN",
    "AiohttpWebSocketTransport",
    "CloseEvent",
    "CompleteMessage",
    "ConnectionAckMessage",
    "ConnectionInitMessage",
    "ErrorMessage",
    "EventEmitter",
    "EventName",
    "GraphQLFormattedError",
    "GraphQLTransportWs",
    "Message",
    "MessageCodec",
    "MessageDecodeError",
    "MessageEvent",
    "MessageType",
    "NextMessage",
    "PingMessage",
    "PongMessage",
    "ReadyState",
    "SubscribeMessage",
    "SubscribePayload",
    "SubscriptionHandle",
    "SubscriptionState",
    "Transport",
    "create_websocket",
    "__version__",
]
