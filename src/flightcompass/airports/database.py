"""Airport store and geo queries.

Loads the OurAirports ``airports.csv`` table, keeps commercial airports (those
with a three-letter display code) and answers the two questions the compass
asks: which airport is nearest, and which airports lie ahead.

Typical usage:
    db = AirportDatabase()
    db.load_from_csv("data/airports/airports.csv")

    nearest = db.find_nearest_airport(Coordinate(12.9716, 77.5946))
    ahead = db.find_airports(nearest.coordinate, heading=90.0)
"""

import csv
import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path

import numpy as np

from flightcompass.airports.directional import DirectionalIndex
from flightcompass.airports.geo import (
    Coordinate,
    LatLon,
    distance_km,
    haversine_km_many,
    is_valid_coordinate,
)

logger = logging.getLogger(__name__)

# Column positions in the OurAirports airports.csv table
COL_ID = 0
COL_IDENT = 1
COL_TYPE = 2
COL_NAME = 3
COL_LATITUDE = 4
COL_LONGITUDE = 5
COL_ISO_COUNTRY = 8
COL_ICAO_CODE = 12
COL_IATA_CODE = 13
MIN_FIELDS = 14

# Haversine shortlist margin; spherical and geodesic distances differ by < 0.6%
_NEAREST_SHORTLIST_FACTOR = 1.02


@dataclass(frozen=True)
class Airport:
    """Commercial airport record.

    Attributes:
        airport_id: Dataset identifier.
        code: Display code (IATA, else ICAO, else ident); three letters.
        name: Airport name.
        latitude: Latitude in degrees.
        longitude: Longitude in degrees.
        airport_type: Dataset classification, e.g. "large_airport".
        iso_country: ISO 3166-1 alpha-2 country code.
    """

    airport_id: str
    code: str
    name: str
    latitude: float
    longitude: float
    airport_type: str
    iso_country: str

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(self.latitude, self.longitude)

    def distance_to(self, other: LatLon) -> float:
        """Geodesic distance to ``other`` in kilometers."""
        return distance_km(self, other)


def is_commercial_code(code: str) -> bool:
    """Whether ``code`` looks like an airline (IATA-style) code.

    Examples:
        >>> is_commercial_code("BLR")
        True
        >>> is_commercial_code("A1B")
        False
    """
    return len(code) == 3 and not any(ch.isdigit() for ch in code)


def parse_airport_row(fields: Sequence[str]) -> Airport | None:
    """Parse one positional ``airports.csv`` row.

    The display code is the IATA code if present, otherwise the ICAO code,
    otherwise the generic identifier.

    Args:
        fields: Row already split into fields.

    Returns:
        The airport, or None if the row is too short or its coordinates
        cannot be parsed.
    """
    if len(fields) < MIN_FIELDS:
        logger.debug("Skipping short airport row (%d fields)", len(fields))
        return None

    try:
        latitude = float(fields[COL_LATITUDE])
        longitude = float(fields[COL_LONGITUDE])
    except ValueError:
        logger.debug("Skipping airport %s: bad coordinates", fields[COL_ID])
        return None

    if not is_valid_coordinate(Coordinate(latitude, longitude)):
        logger.debug("Skipping airport %s: coordinates out of range", fields[COL_ID])
        return None

    iata_code = fields[COL_IATA_CODE].strip()
    icao_code = fields[COL_ICAO_CODE].strip()
    code = iata_code or icao_code or fields[COL_IDENT].strip()

    return Airport(
        airport_id=fields[COL_ID],
        code=code,
        name=fields[COL_NAME],
        latitude=latitude,
        longitude=longitude,
        airport_type=fields[COL_TYPE],
        iso_country=fields[COL_ISO_COUNTRY],
    )


def load_and_filter(rows: Iterable[Sequence[str]]) -> list[Airport]:
    """Parse rows and keep commercial airports, preserving row order.

    Args:
        rows: Data rows (header excluded), each already split into fields.

    Returns:
        Parsed airports whose display code passes :func:`is_commercial_code`.
    """
    airports: list[Airport] = []
    skipped = 0

    for fields in rows:
        if not fields:
            continue
        airport = parse_airport_row(fields)
        if airport is None:
            skipped += 1
            continue
        if is_commercial_code(airport.code):
            airports.append(airport)

    if skipped:
        logger.info("Skipped %d malformed airport rows", skipped)
    return airports


class AirportDatabase:
    """Read-only store of commercial airports with geo queries.

    The store is filled once and never modified afterwards, so queries need
    no locking.

    Examples:
        >>> db = AirportDatabase()
        >>> db.load_from_csv("data/airports/airports.csv")
        >>> db.find_nearest_airport(Coordinate(12.9716, 77.5946)).code
        'BLR'
    """

    def __init__(self) -> None:
        self._airports: tuple[Airport, ...] = ()
        self._latitudes = np.empty(0, dtype=np.float64)
        self._longitudes = np.empty(0, dtype=np.float64)
        self._directional_index: DirectionalIndex | None = None
        self._loaded = False

    @property
    def airports(self) -> tuple[Airport, ...]:
        return self._airports

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    def load_from_csv(self, csv_path: str | Path) -> None:
        """Load airports from an OurAirports ``airports.csv`` file.

        The header row is skipped. Quoted fields may contain commas. Calling
        this on an already loaded database does nothing.

        Args:
            csv_path: Path to the CSV file.

        Raises:
            FileNotFoundError: If the file does not exist.
        """
        if self._loaded:
            logger.warning("Airports already loaded, skipping %s", csv_path)
            return

        csv_path = Path(csv_path)
        if not csv_path.exists():
            raise FileNotFoundError(f"Airports file not found: {csv_path}")

        logger.info("Loading airports from %s", csv_path)
        with open(csv_path, encoding="utf-8", newline="") as f:
            reader = csv.reader(f)
            next(reader, None)
            self.load_rows(reader)

    def load_rows(self, rows: Iterable[Sequence[str]]) -> None:
        """Load airports from pre-split data rows (no header).

        Calling this on an already loaded database does nothing.
        """
        if self._loaded:
            logger.warning("Airports already loaded, skipping")
            return

        self._airports = tuple(load_and_filter(rows))
        count = len(self._airports)
        self._latitudes = np.fromiter((a.latitude for a in self._airports), dtype=np.float64, count=count)
        self._longitudes = np.fromiter((a.longitude for a in self._airports), dtype=np.float64, count=count)
        self._loaded = True
        logger.info("Loaded %d commercial airports", count)

    def get_airport_count(self) -> int:
        return len(self._airports)

    def get_airports_by_code(self, code: str) -> list[Airport]:
        """All airports with display code ``code``; codes are not unique."""
        code = code.upper()
        return [a for a in self._airports if a.code.upper() == code]

    def find_nearest_airport(self, coordinate: LatLon) -> Airport | None:
        """Airport closest to ``coordinate``.

        Equivalent to a linear scan for the minimum geodesic distance where
        the first minimum in store order wins. A vectorized haversine pass
        shortlists candidates first so only a handful of geodesic distances
        are computed.

        Returns:
            Nearest airport, or None if the store is empty or the coordinate
            is not a valid latitude/longitude.
        """
        if not self._airports:
            logger.warning("No airports loaded")
            return None
        if not is_valid_coordinate(coordinate):
            logger.debug("Ignoring invalid coordinate (%s, %s)", coordinate.latitude, coordinate.longitude)
            return None

        approx = haversine_km_many(coordinate, self._latitudes, self._longitudes)
        limit = float(approx.min()) * _NEAREST_SHORTLIST_FACTOR + 0.001
        shortlist = np.flatnonzero(approx <= limit)

        # min() keeps the first of equal keys, and the shortlist is in store order
        nearest = min(
            (self._airports[int(i)] for i in shortlist),
            key=lambda airport: airport.distance_to(coordinate),
        )
        logger.info(
            "Nearest airport to (%.4f, %.4f): %s (%s) %.1f km",
            coordinate.latitude,
            coordinate.longitude,
            nearest.code,
            nearest.name,
            nearest.distance_to(coordinate),
        )
        return nearest

    def find_airports(self, coordinate: LatLon, heading: float, tolerance: float = 30.0) -> list[Airport]:
        """Airports within ``tolerance`` degrees of ``heading``, nearest first.

        Bearings and distances are measured from ``coordinate``. The bearing
        cache for the most recent coordinate is kept between calls.

        Args:
            coordinate: Reference point.
            heading: Direction in degrees.
            tolerance: Half-width of the cone in degrees (30 gives a 60 degree cone).

        Returns:
            Matching airports sorted by distance; ties keep store order.
        """
        if not self._airports:
            return []
        if not is_valid_coordinate(coordinate):
            logger.debug("Ignoring invalid coordinate (%s, %s)", coordinate.latitude, coordinate.longitude)
            return []

        index = self._directional_index
        if index is None or not index.covers(coordinate):
            index = DirectionalIndex(self._airports, coordinate)
            self._directional_index = index

        return index.query(heading, tolerance)
