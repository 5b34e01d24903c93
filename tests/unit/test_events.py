"""Unit tests for EventEmitter."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from graphql_transport_ws.events import EventEmitter


@pytest.fixture
def emitter():
    return EventEmitter()


class TestRegistration:
    """Tests for on/off bookkeeping."""

    def test_duplicate_registration_is_noop(self, emitter: EventEmitter):
        """Test registering the same handler twice keeps one listener."""
        handler = MagicMock()
        emitter.on("next", handler)
        emitter.on("next", handler)
        assert emitter.listener_count("next") == 1

    def test_off_unknown_handler_is_ignored(self, emitter: EventEmitter):
        """Test removing a handler that was never added does nothing."""
        emitter.off("next", MagicMock())
        assert emitter.listener_count("next") == 0


class TestEmit:
    """Tests for emit dispatch."""

    @pytest.mark.asyncio
    async def test_listeners_run_in_registration_order(self, emitter: EventEmitter):
        """Test listeners are invoked in the order they were added."""
        calls: list[str] = []
        emitter.on("ping", lambda _e: calls.append("first"))
        emitter.on("ping", lambda _e: calls.append("second"))

        await emitter.emit("ping", None)

        assert calls == ["first", "second"]

    @pytest.mark.asyncio
    async def test_async_listener_awaited(self, emitter: EventEmitter):
        """Test coroutine listeners are awaited with the payload."""
        handler = AsyncMock()
        emitter.on("next", handler)

        await emitter.emit("next", {"n": 1})

        handler.assert_awaited_once_with({"n": 1})

    @pytest.mark.asyncio
    async def test_once_listener_runs_once(self, emitter: EventEmitter):
        """Test once listeners are removed after the first emit."""
        handler = MagicMock()
        emitter.on("open", handler, once=True)

        await emitter.emit("open", None)
        await emitter.emit("open", None)

        handler.assert_called_once_with(None)
        assert emitter.listener_count("open") == 0

    @pytest.mark.asyncio
    async def test_listener_removed_during_dispatch_is_skipped(self, emitter: EventEmitter):
        """Test a listener removed by an earlier one does not run."""
        second = MagicMock()

        def first(_event: object) -> None:
            emitter.off("next", second)

        emitter.on("next", first)
        emitter.on("next", second)

        await emitter.emit("next", None)

        second.assert_not_called()

    @pytest.mark.asyncio
    async def test_listener_added_during_dispatch_waits(self, emitter: EventEmitter):
        """Test a listener added mid-dispatch only sees later emits."""
        late = MagicMock()
        emitter.on("next", lambda _e: emitter.on("next", late))

        await emitter.emit("next", 1)
        late.assert_not_called()

        await emitter.emit("next", 2)
        late.assert_called_once_with(2)

    @pytest.mark.asyncio
    async def test_failing_listener_does_not_stop_others(self, emitter: EventEmitter):
        """Test an exception is logged and the next listener still runs."""
        after = MagicMock()
        emitter.on("next", MagicMock(side_effect=RuntimeError("boom")))
        emitter.on("next", after)

        with patch("graphql_transport_ws.events.metrics.record_handler_error") as mock_record:
            await emitter.emit("next", None)

        after.assert_called_once_with(None)
        mock_record.assert_called_once_with("next")

    @pytest.mark.asyncio
    async def test_emit_without_listeners(self, emitter: EventEmitter):
        """Test emitting an event nobody listens to is a no-op."""
        await emitter.emit("unknown", "nothing")
