"""Metrics module."""

from .registry import (
    record_decode_error,
    record_duplicate_terminal,
    record_frame_received,
    record_frame_sent,
    record_handler_error,
    record_handler_latency,
    record_pending_queue_size,
    record_subscription_finished,
    record_subscription_started,
    start_metrics_server,
)

__all__ = [
    "record_decode_error",
    "record_duplicate_terminal",
    "record_frame_received",
    "record_frame_sent",
    "record_handler_error",
    "record_handler_latency",
    "record_pending_queue_size",
    "record_subscription_finished",
    "record_subscription_started",
    "start_metrics_server",
]
