"""
Correlation ID tracking for inbound frame handling.

Every inbound frame is routed inside its own correlation scope so that all log
lines emitted while handling it (decode, dispatch, subscription callbacks)
share one ID. Uses contextvars, so the scope follows awaits inside the handler
chain without leaking into unrelated tasks.
"""

from __future__ import annotations

import contextvars
import uuid
from collections.abc import Generator
from contextlib import contextmanager

__all__ = [
    "correlation_context",
    "generate_correlation_id",
    "get_correlation_id",
    "set_correlation_id",
]

_correlation_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "gqlws_correlation_id",
    default=None,
)


def generate_correlation_id() -> str:
    """
    Generate a new correlation ID.

    Returns:
        UUID4 hex string without dashes
    """
    return uuid.uuid4().hex


def get_correlation_id() -> str | None:
    """Return the correlation ID of the current context, if any."""
    return _correlation_id.get()


def set_correlation_id(correlation_id: str | None) -> None:
    """Set (or clear, with None) the correlation ID of the current context."""
    _correlation_id.set(correlation_id)


@contextmanager
def correlation_context(
    correlation_id: str | None = None,
    auto_generate: bool = True,
) -> Generator[str | None]:
    """
    Context manager for a correlation ID scope.

    Generates an ID when none is given and auto_generate is set, and restores
    the previous ID on exit.

    Args:
        correlation_id: Specific correlation ID to use (None to auto-generate)
        auto_generate: Generate a new ID if correlation_id is None

    Yields:
        The correlation ID active inside the scope

    Example:
        with correlation_context() as corr_id:
            await router.handle_message(raw)  # log lines carry corr_id
    """
    previous_id = get_correlation_id()

    if correlation_id is None and auto_generate:
        correlation_id = generate_correlation_id()

    set_correlation_id(correlation_id)
    try:
        yield correlation_id
    finally:
        set_correlation_id(previous_id)
