"""Airport store and geo-query engine.

Typical usage:
    from flightcompass.airports import AirportDatabase, Coordinate

    db = AirportDatabase()
    db.load_from_csv("data/airports/airports.csv")

    nearest = db.find_nearest_airport(Coordinate(12.9716, 77.5946))
    ahead = db.find_airports(nearest.coordinate, heading=90.0, tolerance=30.0)
"""

from flightcompass.airports.database import (
    Airport,
    AirportDatabase,
    is_commercial_code,
    load_and_filter,
    parse_airport_row,
)
from flightcompass.airports.directional import DirectionalIndex
from flightcompass.airports.geo import (
    Coordinate,
    angle_difference,
    bearing_deg,
    distance_km,
    is_valid_coordinate,
)

__all__ = [
    "Airport",
    "AirportDatabase",
    "Coordinate",
    "DirectionalIndex",
    "angle_difference",
    "bearing_deg",
    "distance_km",
    "is_commercial_code",
    "is_valid_coordinate",
    "load_and_filter",
    "parse_airport_row",
]
