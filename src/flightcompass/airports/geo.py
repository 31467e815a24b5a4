"""Geodesy helpers: distance, initial bearing and circular angle difference.

All angles are in degrees. Distances are geodesic (WGS-84) and returned in
kilometers.

Typical usage:
    from flightcompass.airports.geo import Coordinate, bearing_deg, distance_km

    bangalore = Coordinate(12.9716, 77.5946)
    km = distance_km(bangalore, airport)
    heading_to = bearing_deg(bangalore, airport)
"""

import math
from dataclasses import dataclass
from typing import Protocol

import numpy as np
import numpy.typing as npt
from geopy.distance import geodesic
from geopy.point import Point


class LatLon(Protocol):
    """Anything with ``latitude`` and ``longitude`` in degrees."""

    @property
    def latitude(self) -> float: ...

    @property
    def longitude(self) -> float: ...


@dataclass(frozen=True)
class Coordinate:
    """Geographic coordinate.

    Attributes:
        latitude: Latitude in degrees, positive north.
        longitude: Longitude in degrees, positive east.
    """

    latitude: float
    longitude: float


def is_valid_coordinate(point: LatLon) -> bool:
    """Whether ``point`` is finite with latitude in [-90, 90] and longitude in [-180, 180]."""
    latitude = point.latitude
    longitude = point.longitude
    if not (math.isfinite(latitude) and math.isfinite(longitude)):
        return False
    return -90.0 <= latitude <= 90.0 and -180.0 <= longitude <= 180.0


def distance_km(a: LatLon, b: LatLon) -> float:
    """Geodesic surface distance between two points.

    Args:
        a: First point.
        b: Second point.

    Returns:
        Distance in kilometers.

    Examples:
        >>> distance_km(Coordinate(12.9716, 77.5946), Coordinate(12.9716, 77.5946))
        0.0
    """
    start = Point(a.latitude, a.longitude)
    end = Point(b.latitude, b.longitude)
    return geodesic(start, end).meters / 1000.0


def bearing_deg(origin: LatLon, target: LatLon) -> float:
    """Initial great-circle bearing from ``origin`` to ``target``.

    Returns:
        Bearing in degrees in [0, 360), 0 = north, 90 = east.
    """
    lat1 = math.radians(origin.latitude)
    lon1 = math.radians(origin.longitude)
    lat2 = math.radians(target.latitude)
    lon2 = math.radians(target.longitude)

    dlon = lon2 - lon1
    y = math.sin(dlon) * math.cos(lat2)
    x = math.cos(lat1) * math.sin(lat2) - math.sin(lat1) * math.cos(lat2) * math.cos(dlon)

    return (math.degrees(math.atan2(y, x)) + 360.0) % 360.0


def angle_difference(a: float, b: float) -> float:
    """Smallest angle between two directions.

    Bearings wrap at 360, so 350 and 10 are 20 degrees apart.

    Returns:
        Difference in degrees in [0, 180].
    """
    diff = abs(a % 360.0 - b % 360.0)
    return min(diff, 360.0 - diff)


def bearings_deg(
    origin: LatLon, latitudes: npt.NDArray[np.float64], longitudes: npt.NDArray[np.float64]
) -> npt.NDArray[np.float64]:
    """Vectorized :func:`bearing_deg` from one origin to many targets.

    Args:
        origin: Reference point.
        latitudes: Target latitudes in degrees.
        longitudes: Target longitudes in degrees, same shape as ``latitudes``.

    Returns:
        Array of bearings in [0, 360).
    """
    lat1 = math.radians(origin.latitude)
    lon1 = math.radians(origin.longitude)
    lat2 = np.radians(latitudes)
    dlon = np.radians(longitudes) - lon1

    y = np.sin(dlon) * np.cos(lat2)
    x = math.cos(lat1) * np.sin(lat2) - math.sin(lat1) * np.cos(lat2) * np.cos(dlon)

    bearings = (np.degrees(np.arctan2(y, x)) + 360.0) % 360.0
    # A point coincident with the origin has bearing 0, as atan2(0, 0) does
    coincident = (latitudes == origin.latitude) & (longitudes == origin.longitude)
    bearings[coincident] = 0.0
    return bearings


def angle_differences(heading: float, bearings: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    """Vectorized :func:`angle_difference` of one heading against many bearings."""
    diff = np.abs(heading % 360.0 - bearings % 360.0)
    return np.minimum(diff, 360.0 - diff)


EARTH_MEAN_RADIUS_KM = 6371.0088


def haversine_km_many(
    origin: LatLon, latitudes: npt.NDArray[np.float64], longitudes: npt.NDArray[np.float64]
) -> npt.NDArray[np.float64]:
    """Spherical (haversine) distance from one origin to many targets.

    Within about 0.5% of the geodesic distance; used to shortlist candidates
    before the exact :func:`distance_km` is computed.

    Returns:
        Array of distances in kilometers.
    """
    lat1 = math.radians(origin.latitude)
    lat2 = np.radians(latitudes)
    dlat = lat2 - lat1
    dlon = np.radians(longitudes) - math.radians(origin.longitude)

    a = np.sin(dlat / 2) ** 2 + math.cos(lat1) * np.cos(lat2) * np.sin(dlon / 2) ** 2
    return 2 * EARTH_MEAN_RADIUS_KM * np.arcsin(np.sqrt(np.clip(a, 0.0, 1.0)))
