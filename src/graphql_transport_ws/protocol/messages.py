"""graphql-transport-ws message models.

Each protocol message is a frozen pydantic model whose ``type`` field is a
literal discriminant, so the union ``Message`` can be validated in one pass.
Models only carry the fields valid for their variant: ``id`` exists exactly
on subscribe/next/error/complete.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_serializer

__all__ = [
    "MESSAGE_ADAPTER",
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
    "SubscriptionId",
]

SubscriptionId = Annotated[str, Field(min_length=1)]


def _drop_none(data: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in data.items() if value is not None}


class _WireModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        """Return the JSON-ready mapping for this model, omitting unset optionals."""
        return _drop_none(self.model_dump(mode="json", by_alias=True))


class SubscribePayload(_WireModel):
    """Executable GraphQL request parameters carried by ``subscribe``."""

    query: str
    operation_name: str | None = Field(default=None, alias="operationName")
    variables: dict[str, Any] | None = None
    extensions: dict[str, Any] | None = None


class SourceLocation(_WireModel):
    line: int
    column: int


class GraphQLFormattedError(_WireModel):
    """One entry of an ``error`` payload (or of ``errors`` in an execution result)."""

    message: str
    locations: list[SourceLocation] | None = None
    path: list[str | int] | None = None
    extensions: dict[str, Any] | None = None

    @field_serializer("locations")
    def _serialize_locations(self, locations: list[SourceLocation] | None) -> list[dict[str, Any]] | None:
        if locations is None:
            return None
        return [location.to_wire() for location in locations]


class ConnectionInitMessage(_WireModel):
    """Client → Server: first message after the socket opens."""

    type: Literal["connection_init"] = "connection_init"
    payload: dict[str, Any] | None = None


class ConnectionAckMessage(_WireModel):
    """Server → Client: connection_init accepted."""

    type: Literal["connection_ack"] = "connection_ack"
    payload: dict[str, Any] | None = None


class PingMessage(_WireModel):
    type: Literal["ping"] = "ping"
    payload: dict[str, Any] | None = None


class PongMessage(_WireModel):
    type: Literal["pong"] = "pong"
    payload: dict[str, Any] | None = None


class SubscribeMessage(_WireModel):
    """Client → Server: start executing an operation under ``id``."""

    type: Literal["subscribe"] = "subscribe"
    id: SubscriptionId
    payload: SubscribePayload

    @field_serializer("payload")
    def _serialize_payload(self, payload: SubscribePayload) -> dict[str, Any]:
        return payload.to_wire()


class NextMessage(_WireModel):
    """Server → Client: one execution result for ``id``."""

    type: Literal["next"] = "next"
    id: SubscriptionId
    payload: dict[str, Any]


class ErrorMessage(_WireModel):
    """Server → Client: operation ``id`` failed before or during execution."""

    type: Literal["error"] = "error"
    id: SubscriptionId
    payload: Annotated[list[GraphQLFormattedError], Field(min_length=1)]

    @field_serializer("payload")
    def _serialize_payload(self, payload: list[GraphQLFormattedError]) -> list[dict[str, Any]]:
        return [error.to_wire() for error in payload]


class CompleteMessage(_WireModel):
    """Either direction: operation ``id`` is finished."""

    type: Literal["complete"] = "complete"
    id: SubscriptionId


Message = Annotated[
    ConnectionInitMessage
    | ConnectionAckMessage
    | PingMessage
    | PongMessage
    | SubscribeMessage
    | NextMessage
    | ErrorMessage
    | CompleteMessage,
    Field(discriminator="type"),
]

MESSAGE_ADAPTER: TypeAdapter[Message] = TypeAdapter(Message)
