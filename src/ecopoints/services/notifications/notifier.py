"""Publish/subscribe channel for committed state changes.

Services publish only after their transaction committed, so a subscriber
never observes state that could still roll back. Delivery is best effort:
a failing subscriber is logged and skipped, it cannot undo the commit.
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from ecopoints.services.notifications.schemas import ChangeEvent, ChangeType

logger = logging.getLogger(__name__)


# Subscriber type
Subscriber = Callable[[ChangeEvent], Awaitable[None]]


@dataclass
class NotifierStats:
    """Statistics for the change notifier."""

    events_published: int = 0
    deliveries: int = 0
    delivery_errors: int = 0
    subscribers_by_type: dict[str, int] = field(default_factory=dict)


class ChangeNotifier:
    """Routes change events to subscribers.

    Supports:
    - Subscribing to one change type or to all of them
    - Error isolation between subscribers
    """

    def __init__(self):
        """Initialize notifier."""
        self._subscribers: dict[ChangeType | None, list[Subscriber]] = {}
        self._stats = NotifierStats()

    @property
    def stats(self) -> NotifierStats:
        """Get notifier statistics."""
        return self._stats

    def subscribe(
        self,
        subscriber: Subscriber,
        change_type: ChangeType | None = None,
    ) -> None:
        """Register a subscriber.

        @param subscriber - Coroutine function receiving events
        @param change_type - Type to listen for, or None for every type
        """
        self._subscribers.setdefault(change_type, []).append(subscriber)
        key = change_type.value if change_type else "*"
        self._stats.subscribers_by_type[key] = len(self._subscribers[change_type])
        logger.debug(f"Subscribed {getattr(subscriber, '__name__', subscriber)} to {key}")

    def unsubscribe(
        self,
        subscriber: Subscriber,
        change_type: ChangeType | None = None,
    ) -> bool:
        """Remove a subscriber.

        @param subscriber - Subscriber to remove
        @param change_type - Type it was registered for
        @returns True if the subscriber was found and removed
        """
        subscribers = self._subscribers.get(change_type, [])
        if subscriber not in subscribers:
            return False
        subscribers.remove(subscriber)
        key = change_type.value if change_type else "*"
        self._stats.subscribers_by_type[key] = len(subscribers)
        return True

    async def publish(self, event: ChangeEvent) -> int:
        """Deliver an event to matching subscribers.

        @param event - Event to deliver
        @returns Number of subscribers that handled the event without error
        """
        self._stats.events_published += 1

        targets = [
            *self._subscribers.get(event.type, []),
            *self._subscribers.get(None, []),
        ]

        delivered = 0
        for subscriber in targets:
            try:
                await subscriber(event)
                delivered += 1
            except Exception as e:
                self._stats.delivery_errors += 1
                logger.error(
                    f"Subscriber error for {event.type.value}: {e}",
                    extra={"user_id": event.user_id},
                )

        self._stats.deliveries += delivered
        return delivered

    def subscriber_count(self, change_type: ChangeType | None = None) -> int:
        """Get number of subscribers registered for a type (None = wildcard)."""
        return len(self._subscribers.get(change_type, []))


# Singleton notifier instance
_notifier: ChangeNotifier | None = None


def get_change_notifier() -> ChangeNotifier:
    """Get or create change notifier singleton."""
    global _notifier
    if _notifier is None:
        _notifier = ChangeNotifier()
    return _notifier


def reset_change_notifier() -> None:
    """Reset change notifier singleton (for testing)."""
    global _notifier
    _notifier = None
