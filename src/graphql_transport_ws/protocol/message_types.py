"""graphql-transport-ws message type and event name definitions.

Message Type Overview:
- connection_init/connection_ack: Handshake (client → server, server → client)
- ping/pong: Liveness, either direction
- subscribe: Client → Server: start an operation
- next: Server → Client: one execution result
- error: Server → Client: operation failed (list of GraphQL errors)
- complete: Either direction: operation finished or cancelled
"""

from enum import StrEnum

from graphql_transport_ws.const import UNKNOWN


class MessageType(StrEnum):
    """Value of the ``type`` discriminant on the wire."""

    CONNECTION_INIT = "connection_init"
    CONNECTION_ACK = "connection_ack"
    PING = "ping"
    PONG = "pong"
    SUBSCRIBE = "subscribe"
    NEXT = "next"
    ERROR = "error"
    COMPLETE = "complete"


class EventName(StrEnum):
    """Names of the events dispatched on the client bus.

    One per message type, plus ``unknown`` for frames that failed to decode.
    """

    CONNECTION_INIT = MessageType.CONNECTION_INIT.value
    CONNECTION_ACK = MessageType.CONNECTION_ACK.value
    PING = MessageType.PING.value
    PONG = MessageType.PONG.value
    SUBSCRIBE = MessageType.SUBSCRIBE.value
    NEXT = MessageType.NEXT.value
    ERROR = MessageType.ERROR.value
    COMPLETE = MessageType.COMPLETE.value
    UNKNOWN = UNKNOWN


# Message types that carry a subscription id
ID_MESSAGE_TYPES: frozenset[MessageType] = frozenset(
    {MessageType.SUBSCRIBE, MessageType.NEXT, MessageType.ERROR, MessageType.COMPLETE}
)
