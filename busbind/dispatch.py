from __future__ import annotations

import logging
import queue
from typing import Optional

from .debug import trace
from .pump import Event
from .subscriptions import SubscriptionRegistry

logger = logging.getLogger(__name__)


class EventDispatcher:
    """Consumes pump events and calls the handler bound to each key."""

    def __init__(self, subscriptions: SubscriptionRegistry, events) -> None:
        self._subscriptions = subscriptions
        self._events = events

    def dispatch(self, event: Event) -> bool:
        handler = self._subscriptions.lookup(event.key)
        if handler is None:
            trace(logger, "No handler for %s; event dropped", event.key)
            return False
        try:
            handler(*event.args)
        except Exception as exc:
            logger.error("busbind handler error on %s: %s", event.key, exc, exc_info=True)
        return True

    def dispatch_pending(self, limit: Optional[int] = None) -> int:
        """Dispatch queued events without blocking; returns how many were taken."""
        taken = 0
        while limit is None or taken < limit:
            try:
                event = self._events.get_nowait()
            except queue.Empty:
                break
            taken += 1
            self.dispatch(event)
        return taken
