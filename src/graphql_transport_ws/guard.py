"""Completion guard: subscription ids that reached a terminal state.

Membership means no further terminal frame may be sent for the id and no
further inbound frame for it is dispatched as live data. Entries are never
removed; subscription ids are never reused.
"""

from __future__ import annotations

from graphql_transport_ws import metrics


class CompletionGuard:
    """Set of finalized subscription ids with an add-once primitive."""

    def __init__(self) -> None:
        self._finalized: set[str] = set()

    def try_finalize(self, subscription_id: str, *, direction: str = "outbound") -> bool:
        """Mark ``subscription_id`` finalized.

        Args:
            subscription_id: Subscription identifier
            direction: "outbound" (local error/complete) or "inbound" (remote complete),
                used only to label the duplicate metric

        Returns:
            True only for the call that added the id
        """
        if subscription_id in self._finalized:
            metrics.record_duplicate_terminal(direction)
            return False
        self._finalized.add(subscription_id)
        return True

    def has(self, subscription_id: str) -> bool:
        return subscription_id in self._finalized

    def __contains__(self, subscription_id: object) -> bool:
        return subscription_id in self._finalized

    def __len__(self) -> int:
        return len(self._finalized)
