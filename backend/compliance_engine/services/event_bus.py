"""Event bus — internal pub/sub routing engine events to notification channels."""

from typing import Callable, Awaitable, Dict, Set
from collections import defaultdict

import structlog

logger = structlog.get_logger()

# Type alias for event listeners
EventListener = Callable[[dict], Awaitable[None]]

VALIDATION_CHANNEL = "validation"


class EventBus:
    """In-memory pub/sub keyed by channel name.

    Each channel (e.g. "slack", "email", "validation") can have multiple
    listeners; delivery transports subscribe themselves. Events are
    fire-and-forget: if a listener fails, it's removed.
    """

    def __init__(self, max_history: int = 100):
        self._listeners: Dict[str, Set[EventListener]] = defaultdict(set)
        self._event_history: Dict[str, list] = defaultdict(list)
        self._max_history = max_history

    def subscribe(self, channel: str, listener: EventListener) -> None:
        """Subscribe a listener to events on a channel."""
        self._listeners[channel].add(listener)
        logger.debug("event_bus_subscribe", channel=channel, total_listeners=len(self._listeners[channel]))

    def unsubscribe(self, channel: str, listener: EventListener) -> None:
        """Unsubscribe a listener from a channel."""
        listeners = self._listeners.get(channel)
        if listeners is None:
            return
        listeners.discard(listener)
        if not listeners:
            del self._listeners[channel]

    async def publish(self, channel: str, event: dict) -> None:
        """Publish an event to all listeners on a channel."""
        # Store in history for late subscribers
        self._event_history[channel].append(event)
        if len(self._event_history[channel]) > self._max_history:
            self._event_history[channel] = self._event_history[channel][-self._max_history:]

        dead_listeners = set()
        for listener in list(self._listeners.get(channel, set())):
            try:
                await listener(event)
            except Exception as e:
                logger.warning("event_listener_failed", channel=channel, error=str(e))
                dead_listeners.add(listener)

        for dead in dead_listeners:
            self.unsubscribe(channel, dead)

    def get_history(self, channel: str) -> list[dict]:
        """Get event history for a channel."""
        return list(self._event_history.get(channel, []))

    def channels(self) -> list[str]:
        return list(self._listeners.keys())

    def cleanup(self, channel: str) -> None:
        """Drop all listeners and history for a channel."""
        self._listeners.pop(channel, None)
        self._event_history.pop(channel, None)
