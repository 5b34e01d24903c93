"""Exception types for graphql-transport-ws protocol errors.

MessageDecodeError is special: the codec returns it instead of raising it, so
a malformed inbound frame never interrupts the receive loop. It still derives
from the common base so callers can raise it themselves when they want to.
"""

from __future__ import annotations

# Bytes/characters of offending data kept on a decode error
DATA_PREVIEW_LENGTH = 64


class GraphQLTransportWsError(Exception):
    """Base exception for all graphql-transport-ws errors."""


class MessageDecodeError(GraphQLTransportWsError):
    """Inbound frame cannot be decoded into a protocol message.

    Attributes:
        reason: Failure reason code (e.g. "invalid_json", "unknown_type")
        detail: Human-readable description of the failure
        data_preview: Leading part of the raw frame (payloads may carry tokens)
    """

    def __init__(self, reason: str, detail: str = "", data: str | bytes = b"") -> None:
        self.reason: str = reason
        self.detail: str = detail
        self.data_preview: str | bytes = data[:DATA_PREVIEW_LENGTH] if data else data
        message = f"Message decode failed: {reason}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)
