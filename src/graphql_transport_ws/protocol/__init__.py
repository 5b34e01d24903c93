"""graphql-transport-ws protocol package - message models, encoding and decoding.

Public API:
- Message type and event name enums (MessageType, EventName)
- Message models (ConnectionInitMessage ... CompleteMessage) and the Message union
- Protocol encoder/decoder (MessageCodec)
- Exceptions (GraphQLTransportWsError, MessageDecodeError)
"""

from graphql_transport_ws.protocol.codec import MessageCodec
from graphql_transport_ws.protocol.exceptions import GraphQLTransportWsError, MessageDecodeError
from graphql_transport_ws.protocol.message_types import ID_MESSAGE_TYPES, EventName, MessageType
from graphql_transport_ws.protocol.messages import (
    CompleteMessage,
    ConnectionAckMessage,
    ConnectionInitMessage,
    ErrorMessage,
    GraphQLFormattedError,
    Message,
    NextMessage,
    PingMessage,
    PongMessage,
    SourceLocation,
    SubscribeMessage,
    SubscribePayload,
)

__all__ = [
    "ID_MESSAGE_TYPES",
    # Protocol encoder/decoder
    "MessageCodec",
    # Enums
    "EventName",
    "MessageType",
    # Exceptions
    "GraphQLTransportWsError",
    "MessageDecodeError",
    # Models
    "CompleteMessage",
    "ConnectionAckMessage",
    "ConnectionInitMessage",
    "ErrorMessage",
    "GraphQLFormattedError",
    "Message",
    "NextMessage",
    "PingMessage",
    "PongMessage",
    "SourceLocation",
    "SubscribeMessage",
    "SubscribePayload",
]
