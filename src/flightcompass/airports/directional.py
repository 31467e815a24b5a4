"""Directional cone queries around a fixed reference point.

Heading updates arrive far more often than location updates, and the bearing
and distance from a fixed reference point to every airport never change. The
index computes all bearings once (vectorized) and memoizes geodesic distances
the first time an airport falls inside a cone, so answering a new heading is a
vectorized angular mask plus a sort.

Typical usage:
    from flightcompass.airports.directional import DirectionalIndex

    index = DirectionalIndex(db.airports, nearest.coordinate)
    ahead = index.query(heading=90.0, tolerance=30.0)
"""

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

import numpy as np

from flightcompass.airports.geo import (
    Coordinate,
    LatLon,
    angle_differences,
    bearings_deg,
    distance_km,
    is_valid_coordinate,
)

if TYPE_CHECKING:
    from flightcompass.airports.database import Airport

logger = logging.getLogger(__name__)


class DirectionalIndex:
    """Bearing/distance cache for one reference point.

    Attributes:
        reference: Reference point all bearings and distances are measured from.

    Examples:
        >>> index = DirectionalIndex(airports, Coordinate(13.1979, 77.7063))
        >>> [a.code for a in index.query(0.0, 30.0)]
        ['BLR', 'HYD', 'DEL']
    """

    def __init__(self, airports: Sequence["Airport"], reference: LatLon) -> None:
        """Build the index.

        Args:
            airports: Airports in store order; the order breaks distance ties.
            reference: Point to measure from.
        """
        self.reference = Coordinate(reference.latitude, reference.longitude)
        self._airports = tuple(airports)

        count = len(self._airports)
        latitudes = np.fromiter((a.latitude for a in self._airports), dtype=np.float64, count=count)
        longitudes = np.fromiter((a.longitude for a in self._airports), dtype=np.float64, count=count)

        self._bearings = bearings_deg(self.reference, latitudes, longitudes)
        self._distances = np.full(count, np.nan, dtype=np.float64)

        logger.debug(
            "Built directional index for %d airports from (%.4f, %.4f)",
            count,
            self.reference.latitude,
            self.reference.longitude,
        )

    def covers(self, reference: LatLon) -> bool:
        """Whether this index was built for ``reference``."""
        return (
            self.reference.latitude == reference.latitude
            and self.reference.longitude == reference.longitude
        )

    def distance_to(self, index: int) -> float:
        """Geodesic distance in km from the reference point to airport ``index``."""
        distance = self._distances[index]
        if np.isnan(distance):
            distance = distance_km(self.reference, self._airports[index])
            self._distances[index] = distance
        return float(distance)

    def query(self, heading: float, tolerance: float = 30.0) -> list["Airport"]:
        """Airports within ``tolerance`` degrees of ``heading``, nearest first.

        Args:
            heading: Direction of travel in degrees.
            tolerance: Half-width of the cone in degrees.

        Returns:
            Matching airports sorted by distance; ties keep store order. Empty
            when the reference point is not a valid coordinate.
        """
        if not self._airports or not is_valid_coordinate(self.reference):
            return []

        mask = angle_differences(heading, self._bearings) <= tolerance
        candidates = np.flatnonzero(mask)
        if candidates.size == 0:
            return []

        distances = np.array([self.distance_to(int(i)) for i in candidates], dtype=np.float64)
        order = np.argsort(distances, kind="stable")
        return [self._airports[int(candidates[j])] for j in order]
