"""
Timing instrumentation for inbound frame handling.

Provides a decorator that logs how long an async operation took and warns
when it exceeds the configured threshold. Controlled by GQLWS_PERF_TRACKING
and GQLWS_PERF_THRESHOLD_MS.
"""

from __future__ import annotations

import functools
import time
from collections.abc import Callable, Coroutine
from typing import Any, ParamSpec, TypeVar

__all__ = [
    "measure_time",
    "timed_async",
]

P = ParamSpec("P")
T = TypeVar("T")


def measure_time(start_time: float) -> float:
    """
    Calculate elapsed time in milliseconds.

    Args:
        start_time: Start time from time.perf_counter()

    Returns:
        Elapsed time in milliseconds
    """
    return (time.perf_counter() - start_time) * 1000


def timed_async(
    operation_name: str | None = None,
) -> Callable[[Callable[P, Coroutine[Any, Any, T]]], Callable[P, Coroutine[Any, Any, T]]]:
    """
    Decorator for timing async functions with threshold warnings.

    Args:
        operation_name: Name for the operation (defaults to function name)

    Example:
        @timed_async("route_frame")
        async def handle_message(self, raw):
            ...
    """

    def decorator(func: Callable[P, Coroutine[Any, Any, T]]) -> Callable[P, Coroutine[Any, Any, T]]:
        @functools.wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            # Import here to avoid circular dependency
            from graphql_transport_ws.const import (  # noqa: PLC0415
                GQLWS_PERF_THRESHOLD_MS,
                GQLWS_PERF_TRACKING,
            )

            if not GQLWS_PERF_TRACKING:
                return await func(*args, **kwargs)

            op_name = operation_name or func.__name__
            start_time = time.perf_counter()
            try:
                return await func(*args, **kwargs)
            finally:
                _log_timing(op_name, measure_time(start_time), GQLWS_PERF_THRESHOLD_MS)

        return wrapper

    return decorator


def _log_timing(operation_name: str, elapsed_ms: float, threshold_ms: int) -> None:
    from graphql_transport_ws.logging_abstraction import get_logger  # noqa: PLC0415

    logger = get_logger(__name__)
    context = {
        "operation": operation_name,
        "duration_ms": round(elapsed_ms, 2),
        "threshold_ms": threshold_ms,
        "exceeded_threshold": elapsed_ms > threshold_ms,
    }
    if elapsed_ms > threshold_ms:
        logger.warning(
            "[%s] took %.1fms (threshold: %dms)",
            operation_name,
            elapsed_ms,
            threshold_ms,
            extra=context,
        )
    else:
        logger.debug("[%s] completed in %.1fms", operation_name, elapsed_ms, extra=context)
