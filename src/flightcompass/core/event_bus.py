"""Synchronous event bus used for change notifications.

The price cache and the directional orchestrator publish events here so that a
renderer (or any other consumer) can react to new prices and new directional
lists without polling.

Typical usage example:
    from flightcompass.core.event_bus import EventBus
    from flightcompass.pricing.cache import PriceCachedEvent

    bus = EventBus()
    bus.subscribe(PriceCachedEvent, lambda e: print(e.code, e.price))
"""

import time
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any


class EventPriority(Enum):
    """Priority levels for event handlers, highest first."""

    CRITICAL = auto()
    HIGH = auto()
    NORMAL = auto()
    LOW = auto()


@dataclass
class Event:
    """Base class for all events.

    Attributes:
        timestamp: Unix timestamp when the event was created.
    """

    timestamp: float = field(default_factory=time.time)


class EventBus:
    """Dispatches events to subscribers in priority order.

    Handlers run synchronously on the publishing thread. An exception raised
    by a handler propagates to the publisher.

    Examples:
        >>> bus = EventBus()
        >>> bus.subscribe(DirectionalListUpdatedEvent, on_list)
        >>> bus.publish(DirectionalListUpdatedEvent(heading=90.0, airports=[]))
    """

    def __init__(self) -> None:
        self._handlers: dict[type[Event], list[tuple[Callable[[Any], None], EventPriority]]] = {}

    def subscribe(
        self,
        event_type: type[Event],
        handler: Callable[[Any], None],
        priority: EventPriority = EventPriority.NORMAL,
    ) -> None:
        """Subscribe a handler to an event type.

        Args:
            event_type: Event class to listen for (exact type, not subclasses).
            handler: Callable receiving the event.
            priority: Handlers with higher priority are called first.
        """
        handlers = self._handlers.setdefault(event_type, [])
        handlers.append((handler, priority))
        handlers.sort(key=lambda x: x[1].value)

    def unsubscribe(self, event_type: type[Event], handler: Callable[[Any], None]) -> None:
        """Remove a handler. Unknown handlers are ignored."""
        if event_type not in self._handlers:
            return

        self._handlers[event_type] = [(h, p) for h, p in self._handlers[event_type] if h != handler]
        if not self._handlers[event_type]:
            del self._handlers[event_type]

    def publish(self, event: Event) -> None:
        """Call every handler subscribed to the event's type."""
        # Copy so handlers may unsubscribe while being dispatched
        for handler, _ in list(self._handlers.get(type(event), [])):
            handler(event)

    def clear(self) -> None:
        self._handlers.clear()

    def get_subscriber_count(self, event_type: type[Event]) -> int:
        return len(self._handlers.get(event_type, []))
