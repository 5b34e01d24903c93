"""Unit tests for the GraphQLTransportWs client facade.

End-to-end protocol scenarios over an in-memory transport:
- handshake queued before open and flushed once
- subscribe + next delivery
- complete followed by a stray next
- double local complete
- undecodable frames surfacing as unknown events
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from graphql_transport_ws import PROTOCOL, UNKNOWN
from graphql_transport_ws.client import GraphQLTransportWs
from graphql_transport_ws.protocol import EventName, MessageType
from graphql_transport_ws.transport import AiohttpWebSocketTransport, ReadyState
from tests.helpers.transport import FakeTransport

QUERY = {"query": "subscription { ticks }"}


class TestConstruction:
    """Tests for client wiring."""

    def test_transport_exposed_as_socket(self, transport: FakeTransport):
        """Test the given transport is used as-is."""
        client = GraphQLTransportWs(transport)
        assert client.socket is transport

    def test_url_creates_aiohttp_transport(self):
        """Test an URL builds an unopened aiohttp transport for the sub-protocol."""
        client = GraphQLTransportWs("ws://localhost:4000/graphql")

        assert isinstance(client.socket, AiohttpWebSocketTransport)
        assert client.socket.protocol == PROTOCOL
        assert client.socket.ready_state is ReadyState.CONNECTING

    def test_slots_default_to_none(self, client: GraphQLTransportWs):
        """Test every single-slot handler starts unassigned."""
        for name in (
            "on_connection_init",
            "on_connection_ack",
            "on_ping",
            "on_pong",
            "on_subscribe",
            "on_next",
            "on_error",
            "on_complete",
        ):
            assert getattr(client, name) is None

    def test_slot_assignment_stored_in_router(self, client: GraphQLTransportWs):
        """Test assigning a slot registers it with the router."""
        handler = MagicMock()
        client.on_pong = handler

        assert client.on_pong is handler
        assert client.router.slots[EventName.PONG] is handler


class TestScenarios:
    """Protocol scenarios driven through the public API."""

    @pytest.mark.asyncio
    async def test_connection_init_queued_until_open(self, client: GraphQLTransportWs, transport: FakeTransport):
        """Test connection_init before open is sent exactly once on open."""
        client.connection_init({"token": "abc"})
        assert transport.sent == []

        await transport.open()
        await transport.open()

        assert transport.sent_messages == [{"type": "connection_init", "payload": {"token": "abc"}}]

    @pytest.mark.asyncio
    async def test_subscribe_then_next(self, open_client: GraphQLTransportWs, open_transport: FakeTransport):
        """Test a subscribe frame is sent and next results reach on_next."""
        on_next = MagicMock()
        handle = open_client.subscribe(QUERY, on_next=on_next)

        assert open_transport.sent_messages == [
            {"type": "subscribe", "id": handle.id, "payload": {"query": "subscription { ticks }"}}
        ]

        await open_transport.receive({"type": "next", "id": handle.id, "payload": {"data": {"ticks": 1}}})

        on_next.assert_called_once_with({"data": {"ticks": 1}})

    @pytest.mark.asyncio
    async def test_next_after_complete_suppressed(
        self, open_client: GraphQLTransportWs, open_transport: FakeTransport
    ):
        """Test a next arriving after complete invokes no handler."""
        on_next = MagicMock()
        on_complete = MagicMock()
        slot = MagicMock()
        open_client.on_next = slot
        handle = open_client.subscribe(QUERY, on_next=on_next, on_complete=on_complete)

        await open_transport.receive({"type": "complete", "id": handle.id})
        await open_transport.receive({"type": "next", "id": handle.id, "payload": {"data": {}}})

        on_complete.assert_called_once_with()
        on_next.assert_not_called()
        slot.assert_not_called()

    @pytest.mark.asyncio
    async def test_double_complete_sends_once(self, open_client: GraphQLTransportWs, open_transport: FakeTransport):
        """Test repeated local complete/error produce a single terminal frame."""
        handle = open_client.subscribe(QUERY)

        open_client.complete(handle.id)
        open_client.complete(handle.id)
        open_client.error(handle.id, [{"message": "late"}])

        assert open_transport.sent_types == ["subscribe", "complete"]

    @pytest.mark.asyncio
    async def test_invalid_json_emits_unknown(self, open_client: GraphQLTransportWs, open_transport: FakeTransport):
        """Test a malformed frame raises an unknown event with a description."""
        listener = MagicMock()
        open_client.on(UNKNOWN, listener)

        await open_transport.receive("{oops")

        event = listener.call_args.args[0]
        assert isinstance(event.data, str)
        assert event.data != ""


class TestLocalTermination:
    """Tests for client-initiated complete/error."""

    @pytest.mark.asyncio
    async def test_local_complete_releases_subscription(
        self, open_client: GraphQLTransportWs, open_transport: FakeTransport
    ):
        """Test local complete detaches listeners without calling on_complete."""
        on_next = MagicMock()
        on_complete = MagicMock()
        handle = open_client.subscribe(QUERY, on_next=on_next, on_complete=on_complete)

        open_client.complete(handle.id)
        await open_transport.receive({"type": "complete", "id": handle.id})
        await open_transport.receive({"type": "next", "id": handle.id, "payload": {}})

        on_complete.assert_not_called()
        on_next.assert_not_called()
        assert len(open_client.subscriptions) == 0

    @pytest.mark.asyncio
    async def test_local_error_releases_subscription(
        self, open_client: GraphQLTransportWs, open_transport: FakeTransport
    ):
        """Test local error sends one error frame and releases the subscription."""
        handle = open_client.subscribe(QUERY)

        open_client.error(handle.id, [{"message": "client gave up"}])
        open_client.complete(handle.id)

        assert open_transport.sent_messages[1] == {
            "type": "error",
            "id": handle.id,
            "payload": [{"message": "client gave up"}],
        }
        assert len(open_transport.sent) == 2
        assert len(open_client.subscriptions) == 0

    @pytest.mark.asyncio
    async def test_complete_before_open_cancels_subscribe(self, client: GraphQLTransportWs, transport: FakeTransport):
        """Test completing a queued subscription never transmits its subscribe frame."""
        client.connection_init()
        handle = client.subscribe(QUERY)
        client.complete(handle.id)

        await transport.open()

        assert transport.sent_messages == [
            {"type": "connection_init"},
            {"type": "complete", "id": handle.id},
        ]

    def test_empty_error_payload_rejected(self, open_client: GraphQLTransportWs, open_transport: FakeTransport):
        """Test an empty error list raises before the id is finalized."""
        handle = open_client.subscribe(QUERY)

        with pytest.raises(ValueError, match="at least one error"):
            open_client.error(handle.id, [])
        open_client.complete(handle.id)

        assert open_transport.sent_types == ["subscribe", "complete"]

    @pytest.mark.parametrize("late_payload", [[], [{"locations": "nowhere"}]])
    def test_error_after_complete_ignored_without_validation(
        self, open_client: GraphQLTransportWs, open_transport: FakeTransport, late_payload
    ):
        """Test a late error on a finalized id is a no-op even with an unusable payload."""
        open_client.complete("y")

        open_client.error("y", late_payload)

        assert open_transport.sent_messages == [{"type": "complete", "id": "y"}]

    def test_complete_unowned_id_is_sent(self, open_client: GraphQLTransportWs, open_transport: FakeTransport):
        """Test terminal frames for ids the client does not own are still guarded and sent."""
        open_client.complete("server-op")
        open_client.complete("server-op")

        assert open_transport.sent_messages == [{"type": "complete", "id": "server-op"}]


class TestBus:
    """Tests for on/off/emit."""

    @pytest.mark.asyncio
    async def test_bus_listener_after_slot(self, open_client: GraphQLTransportWs, open_transport: FakeTransport):
        """Test slot handlers run before bus listeners."""
        calls: list[str] = []
        open_client.on_ping = lambda _e: calls.append("slot")
        open_client.on(EventName.PING, lambda _e: calls.append("bus"))

        await open_transport.receive({"type": "ping"})

        assert calls == ["slot", "bus"]

    @pytest.mark.asyncio
    async def test_off_removes_listener(self, open_client: GraphQLTransportWs, open_transport: FakeTransport):
        """Test a removed listener is no longer invoked."""
        listener = MagicMock()
        open_client.on(MessageType.PONG, listener)
        open_client.off(MessageType.PONG, listener)

        await open_transport.receive({"type": "pong"})

        listener.assert_not_called()

    @pytest.mark.asyncio
    async def test_emit_reaches_bus_only(self, open_client: GraphQLTransportWs):
        """Test emit injects an event for bus listeners and skips slots."""
        slot = MagicMock()
        listener = AsyncMock()
        open_client.on_ping = slot
        open_client.on(EventName.PING, listener)

        await open_client.emit(EventName.PING, "synthetic")

        listener.assert_awaited_once_with("synthetic")
        slot.assert_not_called()

    @pytest.mark.asyncio
    async def test_ping_answered_by_caller(self, open_client: GraphQLTransportWs, open_transport: FakeTransport):
        """Test a ping is not answered automatically, only by the caller's handler."""
        await open_transport.receive({"type": "ping"})
        assert open_transport.sent == []

        open_client.on_ping = lambda _e: open_client.pong()
        await open_transport.receive({"type": "ping"})

        assert open_transport.sent_types == ["pong"]


class TestLifecycle:
    """Tests for close and the async context manager."""

    @pytest.mark.asyncio
    async def test_close_completes_subscriptions(self, open_client: GraphQLTransportWs, open_transport: FakeTransport):
        """Test closing the client closes the transport and ends subscriptions."""
        on_complete = MagicMock()
        open_client.subscribe(QUERY, on_complete=on_complete)

        await open_client.close()

        assert open_transport.close_calls == [(1000, "")]
        assert len(open_client.subscriptions) == 0
        on_complete.assert_not_called()

    @pytest.mark.asyncio
    async def test_subscribe_after_close(self, open_client: GraphQLTransportWs, open_transport: FakeTransport):
        """Test subscribing on a closed transport sends nothing."""
        await open_client.close()

        handle = open_client.subscribe(QUERY)

        assert handle.id == "sub-1"
        assert open_transport.sent == []

    @pytest.mark.asyncio
    async def test_context_manager_connects_aiohttp_transport(self):
        """Test async with connects an unopened aiohttp transport and closes it."""
        client = GraphQLTransportWs("ws://localhost:4000/graphql")
        with (
            patch.object(AiohttpWebSocketTransport, "connect", new_callable=AsyncMock) as mock_connect,
            patch.object(AiohttpWebSocketTransport, "close", new_callable=AsyncMock) as mock_close,
        ):
            async with client as entered:
                assert entered is client

        mock_connect.assert_awaited_once()
        mock_close.assert_awaited_once_with(1000, "")

    @pytest.mark.asyncio
    async def test_context_manager_with_custom_transport(self, open_transport: FakeTransport):
        """Test async with leaves other transports' connection to the caller."""
        async with GraphQLTransportWs(open_transport):
            pass

        assert open_transport.ready_state is ReadyState.CLOSED
