"""graphql-transport-ws message encoder/decoder.

Frames are JSON text. Decoding checks the frame in the same order a reader
would: is it text, is it JSON, is it an object, does it name a known type, do
the fields fit that type. The first failing step becomes the decode error's
reason code.
"""

from __future__ import annotations

import json

from pydantic import ValidationError

from graphql_transport_ws.logging_abstraction import get_logger
from graphql_transport_ws.protocol.exceptions import MessageDecodeError
from graphql_transport_ws.protocol.message_types import MessageType
from graphql_transport_ws.protocol.messages import MESSAGE_ADAPTER, Message

logger = get_logger(__name__)

_KNOWN_TYPES: frozenset[str] = frozenset(member.value for member in MessageType)

DecodeResult = tuple[Message, None] | tuple[None, MessageDecodeError]


class MessageCodec:
    """graphql-transport-ws encoder/decoder.

    All methods are stateless - no instance state maintained.
    """

    @staticmethod
    def encode(message: Message) -> str:
        """Serialize a message to its compact JSON wire form.

        Optional fields left as None are omitted from the frame.

        Example:
            >>> from graphql_transport_ws.protocol.messages import CompleteMessage
            >>> MessageCodec.encode(CompleteMessage(id="1"))
            '{"type":"complete","id":"1"}'

        """
        return json.dumps(message.to_wire(), separators=(",", ":"), ensure_ascii=False)

    @staticmethod
    def decode(raw: object) -> DecodeResult:
        """Decode a raw inbound frame.

        Never raises: every failure is returned as the second element.

        Args:
            raw: Frame data as received from the transport (str or bytes)

        Returns:
            (message, None) on success, (None, MessageDecodeError) on failure

        Example:
            >>> message, error = MessageCodec.decode('{"type":"ping"}')
            >>> message.type, error
            ('ping', None)
            >>> message, error = MessageCodec.decode("{")
            >>> message is None, error.reason
            (True, 'invalid_json')

        """
        try:
            return MessageCodec._decode(raw), None
        except MessageDecodeError as err:
            logger.debug(
                "Rejected inbound frame: %s",
                err.reason,
                extra={"reason": err.reason, "detail": err.detail},
            )
            return None, err

    @staticmethod
    def _decode(raw: object) -> Message:
        if isinstance(raw, (bytes, bytearray)):
            data: str | bytes = bytes(raw)
        elif isinstance(raw, str):
            data = raw
        else:
            error_detail = f"expected str or bytes, got {type(raw).__name__}"
            raise MessageDecodeError("unsupported_payload", error_detail)

        try:
            obj = json.loads(data)
        except (ValueError, RecursionError) as e:
            # JSONDecodeError and UnicodeDecodeError are both ValueErrors
            raise MessageDecodeError("invalid_json", str(e) or type(e).__name__, data) from e

        if not isinstance(obj, dict):
            error_detail = f"expected a JSON object, got {type(obj).__name__}"
            raise MessageDecodeError("not_an_object", error_detail, data)

        if "type" not in obj:
            raise MessageDecodeError("missing_type", "frame has no 'type' field", data)

        msg_type = obj["type"]
        if not isinstance(msg_type, str) or msg_type not in _KNOWN_TYPES:
            raise MessageDecodeError("unknown_type", f"unrecognized message type {msg_type!r}", data)

        try:
            return MESSAGE_ADAPTER.validate_python(obj)
        except ValidationError as e:
            raise MessageDecodeError("invalid_shape", _describe_validation_error(e), data) from e


def _describe_validation_error(error: ValidationError) -> str:
    """Flatten pydantic errors into "field.path: message" pairs."""
    parts = []
    for item in error.errors(include_url=False):
        # loc starts with the discriminator tag, e.g. ("next", "payload")
        location = ".".join(str(part) for part in item["loc"][1:]) or "<frame>"
        parts.append(f"{location}: {item['msg']}")
    return "; ".join(parts)
