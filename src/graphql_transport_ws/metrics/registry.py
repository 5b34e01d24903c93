"""Prometheus metrics registry for graphql-transport-ws traffic."""

import threading
from typing import Final

from prometheus_client import (  # type: ignore[import-untyped]
    Counter,
    Gauge,
    Histogram,
    start_http_server,
)

# Outbound frames
gqlws_frames_sent_total: Final = Counter(  # type: ignore[assignment]
    "gqlws_frames_sent_total",
    "Total outbound frames by message type and outcome",
    ["message_type", "outcome"],
)

gqlws_pending_queue_size: Final = Gauge(  # type: ignore[assignment]
    "gqlws_pending_queue_size",
    "Frames waiting for the transport to open",
)

# Inbound frames
gqlws_frames_received_total: Final = Counter(  # type: ignore[assignment]
    "gqlws_frames_received_total",
    "Total inbound frames by message type and outcome",
    ["message_type", "outcome"],
)

gqlws_decode_errors_total: Final = Counter(  # type: ignore[assignment]
    "gqlws_decode_errors_total",
    "Total inbound frames that failed to decode",
    ["reason"],
)

gqlws_handler_errors_total: Final = Counter(  # type: ignore[assignment]
    "gqlws_handler_errors_total",
    "Total exceptions raised by event handlers",
    ["event"],
)

gqlws_handler_latency_seconds: Final = Histogram(  # type: ignore[assignment]
    "gqlws_handler_latency_seconds",
    "Time spent handling one inbound frame, in seconds",
    ["message_type"],
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 5.0),
)

# Subscription lifecycle
gqlws_active_subscriptions: Final = Gauge(  # type: ignore[assignment]
    "gqlws_active_subscriptions",
    "Subscriptions currently in the active state",
)

gqlws_subscriptions_finished_total: Final = Counter(  # type: ignore[assignment]
    "gqlws_subscriptions_finished_total",
    "Total subscriptions that reached the completed state",
    ["reason"],
)

gqlws_duplicate_terminal_total: Final = Counter(  # type: ignore[assignment]
    "gqlws_duplicate_terminal_total",
    "Total terminal actions suppressed by the completion guard",
    ["direction"],
)

_server_lock = threading.Lock()
_server_started = False


def record_frame_sent(message_type: str, outcome: str) -> None:
    """Record an outbound frame (outcome: sent, queued, discarded, cancelled)."""
    gqlws_frames_sent_total.labels(message_type=message_type, outcome=outcome).inc()


def record_pending_queue_size(size: int) -> None:
    """Record the current pending-send queue length."""
    gqlws_pending_queue_size.set(size)


def record_frame_received(message_type: str, outcome: str) -> None:
    """Record an inbound frame (outcome: dispatched, suppressed)."""
    gqlws_frames_received_total.labels(message_type=message_type, outcome=outcome).inc()


def record_decode_error(reason: str) -> None:
    """Record a decode failure by reason code."""
    gqlws_decode_errors_total.labels(reason=reason).inc()


def record_handler_error(event: str) -> None:
    """Record an exception raised by a handler for the given event."""
    gqlws_handler_errors_total.labels(event=event).inc()


def record_handler_latency(message_type: str, latency_seconds: float) -> None:
    """Record how long one inbound frame took to handle."""
    gqlws_handler_latency_seconds.labels(message_type=message_type).observe(latency_seconds)


def record_subscription_started() -> None:
    gqlws_active_subscriptions.inc()


def record_subscription_finished(reason: str) -> None:
    """Record a subscription leaving the active state (reason: complete, local, close)."""
    gqlws_active_subscriptions.dec()
    gqlws_subscriptions_finished_total.labels(reason=reason).inc()


def record_duplicate_terminal(direction: str) -> None:
    """Record a suppressed duplicate terminal action (direction: inbound, outbound)."""
    gqlws_duplicate_terminal_total.labels(direction=direction).inc()


def start_metrics_server(port: int = 9400) -> None:
    """Start the Prometheus HTTP endpoint once per process.

    Args:
        port: Port to expose /metrics on
    """
    global _server_started  # noqa: PLW0603
    with _server_lock:
        if _server_started:
            return
        start_http_server(port)
        _server_started = True
