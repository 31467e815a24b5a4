"""Directional update orchestration.

Glue between the sensors, the airport store and the price cache. Every
heading or location change recomputes the list of airports ahead; once the
heading has been still for a quiet period, price lookups are dispatched for
the listed airports that are not cached yet.

Event flow:
    location change -> nearest airport becomes the reference point
    heading/location change -> directional list recomputed and published
                            -> debounce timer (re)armed
    timer expiry (token still current) -> admitted lookups dispatched
    lookup completion -> set_price / search_failed

Typical usage:
    orchestrator = DirectionalUpdateOrchestrator(db, cache, client.search_flight)
    orchestrator.on_location_changed(Coordinate(12.9716, 77.5946))
    orchestrator.on_heading_changed(92.0)
    await orchestrator.wait_for_lookups()
"""

import asyncio
import functools
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date, timedelta

from flightcompass.airports.database import Airport, AirportDatabase
from flightcompass.airports.geo import LatLon
from flightcompass.core.config import CompassSettings
from flightcompass.core.event_bus import Event, EventBus
from flightcompass.pricing.cache import FlightPriceCache
from flightcompass.pricing.client import PriceLookup

logger = logging.getLogger(__name__)


@dataclass
class NearestAirportChangedEvent(Event):
    """Published when a location fix selects a (new) reference airport."""

    airport: Airport | None = None


@dataclass
class DirectionalListUpdatedEvent(Event):
    """Published after every directional list recomputation."""

    heading: float = 0.0
    airports: list[Airport] = field(default_factory=list)


@dataclass
class LookupsDispatchedEvent(Event):
    """Published when a debounce expiry dispatches price lookups."""

    origin: str = ""
    codes: list[str] = field(default_factory=list)


class DirectionalUpdateOrchestrator:
    """Drives directional queries and debounced price lookups.

    All ``on_*`` methods must be called from the thread running the asyncio
    event loop; lookups run as tasks on that loop and report back through the
    thread-safe price cache.

    Attributes:
        nearest_airport: Airport nearest to the last location fix.
        heading: Last heading received, in degrees.
        directional_airports: Published list, nearest first, capped.
    """

    def __init__(
        self,
        database: AirportDatabase,
        cache: FlightPriceCache,
        lookup: PriceLookup,
        settings: CompassSettings | None = None,
        event_bus: EventBus | None = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            database: Loaded airport store.
            cache: Price cache shared with the consumer.
            lookup: Async price source ``(origin, destination, date) -> price | None``.
            settings: Tolerance, display cap, debounce and lookup settings.
            event_bus: Optional bus for change notifications.
            today: Clock used to compute the departure date.
        """
        self.database = database
        self.cache = cache
        self.settings = settings or CompassSettings()
        self.event_bus = event_bus

        self._lookup = lookup
        self._today = today

        self.nearest_airport: Airport | None = None
        self.heading: float = 0.0
        self.directional_airports: list[Airport] = []

        self._debounce_token: object | None = None
        self._debounce_task: asyncio.Task | None = None
        self._lookup_tasks: set[asyncio.Task] = set()

    @property
    def pending_lookup_count(self) -> int:
        return len(self._lookup_tasks)

    @property
    def debounce_pending(self) -> bool:
        return self._debounce_task is not None and not self._debounce_task.done()

    def on_location_changed(self, coordinate: LatLon) -> None:
        """Handle a location fix: pick the reference airport, then recompute."""
        nearest = self.database.find_nearest_airport(coordinate)
        if nearest is not None:
            if nearest != self.nearest_airport:
                logger.info("Reference airport is now %s (%s)", nearest.code, nearest.name)
            self.nearest_airport = nearest
            self._publish(NearestAirportChangedEvent(airport=nearest))
        self._update_directional_list()

    def on_heading_changed(self, heading: float) -> None:
        """Handle a heading change in degrees."""
        self.heading = heading % 360.0
        self._update_directional_list()

    def _update_directional_list(self) -> None:
        if self.nearest_airport is None:
            logger.debug("No reference airport yet, skipping directional query")
            return

        airports = self.database.find_airports(
            self.nearest_airport.coordinate,
            self.heading,
            self.settings.tolerance_deg,
        )
        self.directional_airports = airports[: self.settings.display_cap]
        logger.debug(
            "Heading %.1f: %d airports ahead of %s",
            self.heading,
            len(self.directional_airports),
            self.nearest_airport.code,
        )
        self._publish(DirectionalListUpdatedEvent(heading=self.heading, airports=list(self.directional_airports)))
        self._restart_debounce()

    def _restart_debounce(self) -> None:
        # The token decides; cancel() only spares an idle timer
        token = object()
        self._debounce_token = token
        if self._debounce_task is not None and not self._debounce_task.done():
            self._debounce_task.cancel()
        self._debounce_task = asyncio.get_running_loop().create_task(self._debounce(token))

    async def _debounce(self, token: object) -> None:
        await asyncio.sleep(self.settings.debounce_seconds)
        if token is not self._debounce_token:
            logger.debug("Stale debounce timer expired, ignoring")
            return
        self._debounce_task = None
        self.dispatch_lookups()

    def dispatch_lookups(self) -> list[str]:
        """Start a lookup for every listed airport the cache admits.

        Returns:
            Destination codes for which a lookup was started.
        """
        origin = self.nearest_airport
        if origin is None or not self.directional_airports:
            return []

        departure = (self._today() + timedelta(days=self.settings.days_ahead)).isoformat()
        loop = asyncio.get_running_loop()
        dispatched: list[str] = []

        for airport in self.directional_airports:
            if not self.cache.should_search(airport.code):
                continue
            task = loop.create_task(self._run_lookup(origin.code, airport.code, departure))
            self._lookup_tasks.add(task)
            task.add_done_callback(functools.partial(self._on_lookup_done, airport.code))
            dispatched.append(airport.code)

        if dispatched:
            logger.info("Searching %d flights from %s on %s: %s", len(dispatched), origin.code, departure, dispatched)
            self._publish(LookupsDispatchedEvent(origin=origin.code, codes=dispatched))
        return dispatched

    async def _run_lookup(self, origin: str, destination: str, departure: str) -> None:
        try:
            price = await asyncio.wait_for(
                self._lookup(origin, destination, departure),
                timeout=self.settings.lookup_timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.warning("Price lookup %s -> %s timed out", origin, destination)
            price = None
        except Exception:  # pylint: disable=broad-exception-caught
            logger.exception("Price lookup %s -> %s raised", origin, destination)
            price = None

        if price is None or price < 0:
            self.cache.search_failed(destination)
        else:
            self.cache.set_price(destination, price)

    def _on_lookup_done(self, code: str, task: asyncio.Task) -> None:
        # Runs even when the task is cancelled before its first step.
        self._lookup_tasks.discard(task)
        if task.cancelled():
            logger.info("Price lookup for %s cancelled", code)
            self.cache.search_failed(code)

    async def wait_for_lookups(self) -> None:
        """Wait until every dispatched lookup has finished."""
        while self._lookup_tasks:
            await asyncio.gather(*list(self._lookup_tasks), return_exceptions=True)

    async def settle(self) -> None:
        """Wait for the pending quiet period, then for the lookups it started."""
        while self.debounce_pending:
            await asyncio.gather(self._debounce_task, return_exceptions=True)
        await self.wait_for_lookups()

    async def close(self, cancel_lookups: bool = False) -> None:
        """Stop the debounce timer and settle outstanding lookups.

        Args:
            cancel_lookups: Cancel in-flight lookups instead of waiting for them.
        """
        self._debounce_token = None
        if self._debounce_task is not None:
            self._debounce_task.cancel()
            await asyncio.gather(self._debounce_task, return_exceptions=True)
            self._debounce_task = None

        if cancel_lookups:
            for task in self._lookup_tasks:
                task.cancel()
        await self.wait_for_lookups()

    def _publish(self, event: Event) -> None:
        if self.event_bus is not None:
            self.event_bus.publish(event)
