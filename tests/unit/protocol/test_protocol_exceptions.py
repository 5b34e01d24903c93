"""Unit tests for protocol and transport exceptions."""

from __future__ import annotations

from graphql_transport_ws.protocol.exceptions import (
    DATA_PREVIEW_LENGTH,
    GraphQLTransportWsError,
    MessageDecodeError,
)
from graphql_transport_ws.transport.exceptions import (
    SubprotocolNegotiationError,
    TransportConnectError,
    TransportError,
)


class TestExceptionHierarchy:
    """Tests for exception inheritance."""

    def test_all_exceptions_inherit_from_base(self):
        """Test every library exception derives from GraphQLTransportWsError."""
        assert issubclass(MessageDecodeError, GraphQLTransportWsError)
        assert issubclass(TransportError, GraphQLTransportWsError)
        assert issubclass(TransportConnectError, TransportError)
        assert issubclass(SubprotocolNegotiationError, TransportError)


class TestMessageDecodeError:
    """Tests for MessageDecodeError."""

    def test_reason_only(self):
        """Test MessageDecodeError with a reason and no detail."""
        error = MessageDecodeError("missing_type")
        assert error.reason == "missing_type"
        assert error.detail == ""
        assert str(error) == "Message decode failed: missing_type"

    def test_reason_and_detail(self):
        """Test the detail is appended to the message."""
        error = MessageDecodeError("unknown_type", "unrecognized message type 'start'")
        assert "unknown_type" in str(error)
        assert "'start'" in str(error)

    def test_data_preview_truncated(self):
        """Test only the leading bytes of the frame are kept."""
        data = b"x" * (DATA_PREVIEW_LENGTH * 4)
        error = MessageDecodeError("invalid_json", "bad", data)
        assert error.data_preview == b"x" * DATA_PREVIEW_LENGTH

    def test_short_data_kept_whole(self):
        """Test short frames are kept unchanged."""
        error = MessageDecodeError("not_an_object", "list", "[]")
        assert error.data_preview == "[]"


class TestTransportConnectError:
    """Tests for TransportConnectError."""

    def test_default_state(self):
        """Test TransportConnectError with reason only."""
        error = TransportConnectError("timeout")
        assert error.reason == "timeout"
        assert error.state == "unknown"
        assert "timeout" in str(error)

    def test_with_state(self):
        """Test TransportConnectError with reason and state."""
        error = TransportConnectError("transport already started", state="open")
        assert error.state == "open"
        assert "open" in str(error)


class TestSubprotocolNegotiationError:
    """Tests for SubprotocolNegotiationError."""

    def test_attributes(self):
        """Test requested and negotiated sub-protocols are kept."""
        error = SubprotocolNegotiationError("graphql-transport-ws", None)
        assert error.requested == "graphql-transport-ws"
        assert error.negotiated is None
        assert "graphql-transport-ws" in str(error)
