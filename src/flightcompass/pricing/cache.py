"""Flight price cache and search admission control.

The cache records one price per destination code and coordinates lookups so
that at most one lookup per destination is outstanding at any time. Callers
never write prices directly: they ask :meth:`FlightPriceCache.should_search`
for admission and report the outcome with :meth:`set_price` or
:meth:`search_failed`.

State per destination code::

    UNCACHED --should_search--> IN_FLIGHT --set_price----> PRICED
                                    |
                                    +----search_failed--> FAILED --should_search--> IN_FLIGHT

Typical usage:
    cache = FlightPriceCache()
    if cache.should_search("DEL"):
        price = await lookup("BLR", "DEL", "2025-11-25")
        if price is None:
            cache.search_failed("DEL")
        else:
            cache.set_price("DEL", price)
"""

import logging
import threading
from dataclasses import dataclass
from enum import Enum

from flightcompass.core.event_bus import Event, EventBus

logger = logging.getLogger(__name__)


class SearchState(Enum):
    """Lookup state of one destination code."""

    UNCACHED = "uncached"
    IN_FLIGHT = "in_flight"
    PRICED = "priced"
    FAILED = "failed"


@dataclass
class PriceCachedEvent(Event):
    """Published after a price is recorded."""

    code: str = ""
    price: int = 0


@dataclass
class PriceSearchFailedEvent(Event):
    """Published after a lookup is reported as failed."""

    code: str = ""
    failures: int = 0


class FlightPriceCache:
    """Thread-safe price map with per-destination admission control.

    Every operation holds one lock, so the four public operations are
    linearizable and ``should_search`` is an atomic check-and-set. The cache
    lives in memory only.

    Examples:
        >>> cache = FlightPriceCache()
        >>> cache.should_search("DEL")
        True
        >>> cache.should_search("DEL")
        False
        >>> cache.set_price("DEL", 85)
        >>> cache.get_price("DEL")
        85
    """

    def __init__(self, event_bus: EventBus | None = None) -> None:
        """Initialize an empty cache.

        Args:
            event_bus: Optional bus receiving PriceCachedEvent and
                PriceSearchFailedEvent notifications.
        """
        self._lock = threading.Lock()
        self._states: dict[str, SearchState] = {}
        self._prices: dict[str, int] = {}
        self._failures: dict[str, int] = {}
        self._event_bus = event_bus

    def should_search(self, code: str) -> bool:
        """Admit a lookup for ``code`` if none is needed or running.

        Returns True, and marks the code in flight, only when the code has no
        cached price and no lookup in flight. Codes whose last lookup failed
        are admitted again.
        """
        with self._lock:
            state = self._states.get(code, SearchState.UNCACHED)
            if state in (SearchState.IN_FLIGHT, SearchState.PRICED):
                return False
            self._states[code] = SearchState.IN_FLIGHT

        logger.debug("Admitted price search for %s", code)
        return True

    def set_price(self, code: str, price: int) -> None:
        """Record the price for ``code`` and clear its in-flight marker.

        Last write wins.

        Raises:
            ValueError: If ``price`` is negative.
        """
        if price < 0:
            raise ValueError(f"Price must not be negative, got {price} for {code}")

        with self._lock:
            self._prices[code] = price
            self._states[code] = SearchState.PRICED
            total = len(self._prices)

        logger.info("Cached %s = %d (total cached: %d)", code, price, total)
        if self._event_bus is not None:
            self._event_bus.publish(PriceCachedEvent(code=code, price=price))

    def search_failed(self, code: str) -> None:
        """Clear the in-flight marker for ``code`` without recording a price.

        The code becomes eligible for the next :meth:`should_search`. A code
        that already has a price keeps it.
        """
        with self._lock:
            if self._states.get(code) == SearchState.PRICED:
                return
            self._states[code] = SearchState.FAILED
            failures = self._failures.get(code, 0) + 1
            self._failures[code] = failures

        logger.warning("Price search failed for %s (%d failures)", code, failures)
        if self._event_bus is not None:
            self._event_bus.publish(PriceSearchFailedEvent(code=code, failures=failures))

    def get_price(self, code: str) -> int | None:
        with self._lock:
            return self._prices.get(code)

    def has_price(self, code: str) -> bool:
        with self._lock:
            return code in self._prices

    def state(self, code: str) -> SearchState:
        with self._lock:
            return self._states.get(code, SearchState.UNCACHED)

    def failure_count(self, code: str) -> int:
        """Number of failed lookups recorded for ``code``."""
        with self._lock:
            return self._failures.get(code, 0)

    def in_flight_codes(self) -> set[str]:
        with self._lock:
            return {code for code, state in self._states.items() if state == SearchState.IN_FLIGHT}

    def prices(self) -> dict[str, int]:
        """Snapshot of every cached price."""
        with self._lock:
            return dict(self._prices)

    def clear(self) -> None:
        """Forget every price, failure and finished state.

        Codes still in flight keep their marker, so no second lookup is
        admitted while the first one runs; they record their result when they
        finish.
        """
        with self._lock:
            self._states = {
                code: state for code, state in self._states.items() if state == SearchState.IN_FLIGHT
            }
            self._prices.clear()
            self._failures.clear()
        logger.info("Cleared price cache")
