"""aiohttp WebSocket transport with sub-protocol negotiation and instrumentation."""

from __future__ import annotations

import asyncio
import contextlib
import time

import aiohttp
from yarl import URL

from graphql_transport_ws.const import GQLWS_CONNECT_TIMEOUT, GQLWS_IO_TIMEOUT, NORMAL_CLOSURE, PROTOCOL
from graphql_transport_ws.logging_abstraction import get_logger
from graphql_transport_ws.transport.base import CloseEvent, ReadyState, Transport, TransportEvent
from graphql_transport_ws.transport.exceptions import SubprotocolNegotiationError, TransportConnectError

logger = get_logger(__name__)

# Close code reported when the socket ended without a close frame
ABNORMAL_CLOSURE = 1006


class AiohttpWebSocketTransport(Transport):
    """WebSocket transport on top of ``aiohttp.ClientSession.ws_connect``.

    The transport starts in CONNECTING; ``await connect()`` opens it. Inbound
    frames are emitted one at a time from a reader task, and each emit is
    awaited before the next frame is read. Outbound frames are written in
    call order by a writer task, so ``send()`` never blocks the caller.
    """

    def __init__(
        self,
        url: str | URL,
        *,
        session: aiohttp.ClientSession | None = None,
        protocol: str = PROTOCOL,
        connect_timeout: float = GQLWS_CONNECT_TIMEOUT,
        io_timeout: float = GQLWS_IO_TIMEOUT,
        heartbeat: float | None = None,
    ) -> None:
        """
        Initialize transport parameters.

        Args:
            url: ws:// or wss:// endpoint
            session: Session to connect with (one is created and owned if None)
            protocol: WebSocket sub-protocol to request
            connect_timeout: Handshake timeout in seconds
            io_timeout: Upper bound for draining queued frames on close
            heartbeat: WebSocket-level ping interval handled by aiohttp (None disables)
        """
        super().__init__()
        self.url: str = str(url)
        self.protocol: str = protocol
        self.connect_timeout: float = connect_timeout
        self.io_timeout: float = io_timeout
        self.heartbeat: float | None = heartbeat
        self._session: aiohttp.ClientSession | None = session
        self._owns_session: bool = session is None
        self._ws: aiohttp.ClientWebSocketResponse | None = None
        self._state: ReadyState = ReadyState.CONNECTING
        self._connect_started: bool = False
        self._close_emitted: bool = False
        self._outbox: asyncio.Queue[str] = asyncio.Queue()
        self._reader_task: asyncio.Task[None] | None = None
        self._writer_task: asyncio.Task[None] | None = None

    @property
    def ready_state(self) -> ReadyState:
        return self._state

    async def connect(self) -> None:
        """
        Open the WebSocket and start the reader and writer tasks.

        Raises:
            TransportConnectError: Handshake failed, timed out, or connect() was already called
            SubprotocolNegotiationError: Server did not select the requested sub-protocol
        """
        if self._connect_started or self._state is not ReadyState.CONNECTING:
            reason = "transport already started"
            raise TransportConnectError(reason, state=self._state.value)
        self._connect_started = True

        start_time = time.perf_counter()
        logger.info(
            "Connecting to %s (sub-protocol: %s, timeout: %.1fs)",
            self.url,
            self.protocol,
            self.connect_timeout,
            extra={"url": self.url, "protocol": self.protocol, "timeout": self.connect_timeout},
        )
        if self._session is None:
            self._session = aiohttp.ClientSession()

        try:
            ws = await asyncio.wait_for(
                self._session.ws_connect(self.url, protocols=(self.protocol,), heartbeat=self.heartbeat),
                timeout=self.connect_timeout,
            )
        except TimeoutError as e:
            elapsed_ms = (time.perf_counter() - start_time) * 1000
            logger.warning(
                "Connection to %s timed out after %.1fms",
                self.url,
                elapsed_ms,
                extra={"url": self.url, "elapsed_ms": elapsed_ms, "error": "timeout"},
            )
            await self._finish(ABNORMAL_CLOSURE, "connect timeout")
            reason = "timeout"
            raise TransportConnectError(reason, state=ReadyState.CONNECTING.value) from e
        except (aiohttp.ClientError, OSError) as e:
            elapsed_ms = (time.perf_counter() - start_time) * 1000
            logger.warning(
                "Connection to %s failed after %.1fms: %s",
                self.url,
                elapsed_ms,
                e,
                extra={"url": self.url, "elapsed_ms": elapsed_ms, "error": str(e)},
            )
            await self._finish(ABNORMAL_CLOSURE, str(e))
            raise TransportConnectError(str(e) or type(e).__name__, state=ReadyState.CONNECTING.value) from e

        if self._state is not ReadyState.CONNECTING:
            # close() ran while the handshake was in flight
            with contextlib.suppress(aiohttp.ClientError, OSError):
                await ws.close()
            reason = "transport closed during connect"
            raise TransportConnectError(reason, state=self._state.value)

        if ws.protocol != self.protocol:
            logger.error(
                "Server at %s negotiated sub-protocol %r, expected %r",
                self.url,
                ws.protocol,
                self.protocol,
                extra={"url": self.url, "negotiated": ws.protocol, "requested": self.protocol},
            )
            await ws.close()
            await self._finish(ws.close_code or NORMAL_CLOSURE, "sub-protocol not accepted")
            raise SubprotocolNegotiationError(self.protocol, ws.protocol)

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        self._ws = ws
        self._state = ReadyState.OPEN
        logger.info(
            "Connected to %s in %.1fms",
            self.url,
            elapsed_ms,
            extra={"url": self.url, "elapsed_ms": elapsed_ms},
        )

        self._writer_task = asyncio.create_task(self._write_loop(ws), name="gqlws-writer")
        self._writer_task.add_done_callback(self._log_task_failure)
        # Queued frames are flushed by open listeners before any inbound frame is read
        await self.emit(TransportEvent.OPEN, None)
        self._reader_task = asyncio.create_task(self._read_loop(ws), name="gqlws-reader")
        self._reader_task.add_done_callback(self._log_task_failure)

    def send(self, data: str) -> None:
        """Queue one frame for the writer task; dropped unless OPEN."""
        if self._state is not ReadyState.OPEN:
            logger.debug(
                "Cannot send: transport is %s",
                self._state.value,
                extra={"url": self.url, "bytes": len(data)},
            )
            return
        self._outbox.put_nowait(data)

    async def close(self, code: int = NORMAL_CLOSURE, reason: str = "") -> None:
        """Drain queued frames, close the socket and any owned session."""
        if self._state in (ReadyState.CLOSING, ReadyState.CLOSED):
            return

        ws = self._ws
        if ws is None:
            # Never opened (or handshake still in flight)
            await self._finish(code, reason)
            return

        self._state = ReadyState.CLOSING
        logger.info(
            "Closing connection to %s",
            self.url,
            extra={"url": self.url, "code": code, "pending_frames": self._outbox.qsize()},
        )
        with contextlib.suppress(TimeoutError):
            await asyncio.wait_for(self._outbox.join(), timeout=self.io_timeout)

        try:
            await ws.close(code=code, message=reason.encode())
        except (aiohttp.ClientError, OSError) as e:
            logger.warning(
                "Error closing connection: %s",
                e,
                extra={"url": self.url, "error": str(e), "error_type": type(e).__name__},
            )

        reader = self._reader_task
        if reader is not None and reader is not asyncio.current_task():
            # Failures are reported by the done callback
            await asyncio.wait([reader])
        await self._finish(ws.close_code or code, reason)

    async def _read_loop(self, ws: aiohttp.ClientWebSocketResponse) -> None:
        try:
            async for msg in ws:
                if msg.type in (aiohttp.WSMsgType.TEXT, aiohttp.WSMsgType.BINARY):
                    logger.debug(
                        "Received frame from %s",
                        self.url,
                        extra={"url": self.url, "bytes": len(msg.data)},
                    )
                    await self.emit(TransportEvent.MESSAGE, msg.data)
                elif msg.type is aiohttp.WSMsgType.ERROR:
                    logger.warning(
                        "WebSocket error from %s: %s",
                        self.url,
                        ws.exception(),
                        extra={"url": self.url, "error": str(ws.exception())},
                    )
                    break
        finally:
            if self._state is ReadyState.OPEN:
                logger.info(
                    "Connection closed by %s (code: %s)",
                    self.url,
                    ws.close_code,
                    extra={"url": self.url, "code": ws.close_code},
                )
            if self._state is not ReadyState.CLOSING:
                await self._finish(ws.close_code or ABNORMAL_CLOSURE, "")

    async def _write_loop(self, ws: aiohttp.ClientWebSocketResponse) -> None:
        while True:
            data = await self._outbox.get()
            try:
                await ws.send_str(data)
            except (aiohttp.ClientError, OSError) as e:
                logger.warning(
                    "Send to %s failed, frame dropped: %s",
                    self.url,
                    e,
                    extra={"url": self.url, "bytes": len(data), "error": str(e)},
                )
            finally:
                self._outbox.task_done()

    def _log_task_failure(self, task: asyncio.Task[None]) -> None:
        """Retrieve and log an unexpected exception that ended a reader or writer task."""
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                "Task %s for %s failed: %s",
                task.get_name(),
                self.url,
                exc,
                extra={"url": self.url, "task": task.get_name(), "error": str(exc), "error_type": type(exc).__name__},
            )

    async def _finish(self, code: int | None, reason: str) -> None:
        """Move to CLOSED, release resources and emit ``close`` exactly once."""
        if self._close_emitted:
            return
        self._close_emitted = True
        self._state = ReadyState.CLOSED

        writer = self._writer_task
        if writer is not None and not writer.done():
            writer.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await writer
        while not self._outbox.empty():
            self._outbox.get_nowait()
            self._outbox.task_done()

        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()

        await self.emit(TransportEvent.CLOSE, CloseEvent(code=code, reason=reason))

    def __repr__(self) -> str:
        return f"AiohttpWebSocketTransport({self.url}, {self._state.value})"


def create_websocket(url: str | URL, **kwargs: object) -> AiohttpWebSocketTransport:
    """Create a not-yet-connected transport requesting the graphql-transport-ws sub-protocol."""
    return AiohttpWebSocketTransport(url, **kwargs)  # type: ignore[arg-type]
