"""Adapter between raw device sensor readings and the orchestrator.

Device compasses report a heading several times per second together with an
accuracy estimate (negative when the reading is invalid). The feed drops
invalid readings, applies a heading filter so tiny wobbles do not trigger
recomputation, and forwards only the first location fix.
"""

import logging
from dataclasses import dataclass
from typing import Protocol

from flightcompass.airports.geo import Coordinate, angle_difference

logger = logging.getLogger(__name__)


class HeadingListener(Protocol):
    """Receiver of filtered sensor updates."""

    def on_heading_changed(self, heading: float) -> None: ...

    def on_location_changed(self, coordinate: Coordinate) -> None: ...


@dataclass(frozen=True)
class HeadingReading:
    """One magnetic heading sample.

    Attributes:
        magnetic_heading: Heading in degrees.
        accuracy: Estimated error in degrees; negative means invalid.
    """

    magnetic_heading: float
    accuracy: float = 0.0


class SensorFeed:
    """Filters heading and location readings before they reach a listener.

    Examples:
        >>> feed = SensorFeed(orchestrator, heading_filter_deg=1.0)
        >>> feed.heading_reading(HeadingReading(90.0, accuracy=5.0))
        True
        >>> feed.heading_reading(HeadingReading(90.4, accuracy=5.0))
        False
    """

    def __init__(self, listener: HeadingListener, heading_filter_deg: float = 1.0) -> None:
        self.listener = listener
        self.heading_filter_deg = heading_filter_deg
        self.heading: float | None = None
        self.location: Coordinate | None = None

    def heading_reading(self, reading: HeadingReading) -> bool:
        """Forward a heading reading if it is valid and moved enough.

        Returns:
            True if the listener was notified.
        """
        if reading.accuracy < 0:
            logger.debug("Ignoring invalid heading reading %.1f", reading.magnetic_heading)
            return False

        heading = reading.magnetic_heading % 360.0
        if self.heading is not None and angle_difference(heading, self.heading) < self.heading_filter_deg:
            return False

        self.heading = heading
        self.listener.on_heading_changed(heading)
        return True

    def location_fix(self, latitude: float, longitude: float) -> bool:
        """Forward the first location fix; later fixes are ignored.

        Returns:
            True if the listener was notified.
        """
        if self.location is not None:
            return False

        self.location = Coordinate(latitude, longitude)
        logger.info("Got user location: %.4f, %.4f", latitude, longitude)
        self.listener.on_location_changed(self.location)
        return True

    def reset_location(self) -> None:
        """Accept the next location fix again."""
        self.location = None
