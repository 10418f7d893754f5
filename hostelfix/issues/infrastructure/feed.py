"""
Live Issue Feed
===============

In-process fan-out of issue snapshots.

    subscription = feed.subscribe(IssueFilter(status=IssueStatus.OPEN))
    unsubscribe = await subscription.attach(on_snapshot)
    ...
    unsubscribe()

Every publish delivers the full, server-ordered (urgency score desc,
created_at desc) snapshot matching each subscriber's filter. Tearing a
subscription down never touches stored issues.
"""

import inspect
from typing import Awaitable, Callable, List, Optional, Union

from hostelfix.issues.application.services import IIssuePublisher
from hostelfix.issues.domain import Issue, IssueFilter
from hostelfix.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)

SnapshotCallback = Callable[[List[Issue]], Union[None, Awaitable[None]]]


def server_order(issues: List[Issue]) -> List[Issue]:
    """Urgency score desc, then newest first."""
    return sorted(issues, key=lambda issue: (-issue.effective_urgency_score, -issue.created_at))


class Subscription:
    """One filtered view onto the feed."""

    def __init__(self, feed: "IssueFeed", filters: IssueFilter):
        self._feed = feed
        self.filters = filters
        self._callback: Optional[SnapshotCallback] = None
        self.active = True

    async def attach(self, callback: SnapshotCallback) -> Callable[[], None]:
        """
        Start receiving snapshots.

        The latest known snapshot, if any, is delivered straight away.

        Returns:
            A callable that unsubscribes
        """
        self._callback = callback
        self._feed._register(self)
        if self._feed.last_snapshot is not None:
            await self.deliver(self._feed.last_snapshot)
        return self.unsubscribe

    def unsubscribe(self) -> None:
        """Stop receiving snapshots. Safe to call more than once."""
        self.active = False
        self._feed._unregister(self)

    async def deliver(self, ordered: List[Issue]) -> None:
        if not self.active or self._callback is None:
            return
        result = self._callback([issue for issue in ordered if self.filters.matches(issue)])
        if inspect.isawaitable(result):
            await result


class IssueFeed(IIssuePublisher):
    """
    Snapshot publisher for live issue listings.

    A subscriber that raises is logged and skipped; the others still
    receive the snapshot.
    """

    def __init__(self):
        self._subscriptions: List[Subscription] = []
        self.last_snapshot: Optional[List[Issue]] = None

    def subscribe(self, filters: Optional[IssueFilter] = None) -> Subscription:
        """Create a subscription; nothing is delivered until ``attach``."""
        return Subscription(self, filters or IssueFilter())

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def _register(self, subscription: Subscription) -> None:
        if subscription not in self._subscriptions:
            self._subscriptions.append(subscription)

    def _unregister(self, subscription: Subscription) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)

    async def publish(self, issues: List[Issue]) -> None:
        """Deliver a full snapshot to every active subscriber."""
        ordered = server_order(issues)
        self.last_snapshot = ordered

        for subscription in list(self._subscriptions):
            try:
                await subscription.deliver(ordered)
            except Exception as e:
                logger.error(
                    "Feed subscriber failed",
                    extra={"error_type": type(e).__name__, "error": str(e)}
                )

    def close(self) -> None:
        """Drop every subscription."""
        for subscription in list(self._subscriptions):
            subscription.unsubscribe()
        self.last_snapshot = None
