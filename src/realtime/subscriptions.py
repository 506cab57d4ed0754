"""
Stable Stakes - Event Subscriptions

In-process publish/subscribe for session events. Subscribers are
invoked synchronously on the publishing thread; a failing subscriber is
logged and never interrupts the session or other subscribers.
"""

from __future__ import annotations

import logging
import threading
from itertools import count
from typing import Callable, Iterable

from src.realtime.events import EventPayload, GameEvent

logger = logging.getLogger(__name__)


class EventBus:
    """Registry of event subscribers.

    Each subscription may watch every event or a subset. Callbacks run
    on whichever thread publishes; callers should handle thread safety.
    """

    def __init__(self) -> None:
        self._subscribers: dict[int, tuple[Callable[[EventPayload], None], frozenset[GameEvent] | None]] = {}
        self._ids = count(1)
        self._lock = threading.Lock()

    def subscribe(
        self,
        on_event: Callable[[EventPayload], None],
        events: Iterable[GameEvent] | None = None,
    ) -> int:
        """Register a callback.

        Args:
            on_event: Callback receiving EventPayload for each event.
            events: Events to deliver (all events when omitted).

        Returns:
            Subscription id for unsubscribe().
        """
        watched = frozenset(events) if events is not None else None
        with self._lock:
            sub_id = next(self._ids)
            self._subscribers[sub_id] = (on_event, watched)
        logger.debug("Subscriber %d registered", sub_id)
        return sub_id

    def unsubscribe(self, sub_id: int) -> bool:
        """Remove a subscription. Returns False if it was not registered."""
        with self._lock:
            removed = self._subscribers.pop(sub_id, None)
        return removed is not None

    def unsubscribe_all(self) -> None:
        with self._lock:
            self._subscribers.clear()

    def publish(self, payload: EventPayload) -> None:
        """Deliver an event to every matching subscriber."""
        with self._lock:
            targets = list(self._subscribers.items())

        for sub_id, (callback, watched) in targets:
            if watched is not None and payload.event not in watched:
                continue
            try:
                callback(payload)
            except Exception:
                logger.exception(
                    "Subscriber %d failed handling %s", sub_id, payload.event.name
                )

    @property
    def active_subscriptions(self) -> list[int]:
        """Return ids of active subscriptions."""
        with self._lock:
            return list(self._subscribers.keys())
