"""Read-only view of the compass state for renderers.

Renderers never touch the cache or the orchestrator's internals; they take a
:class:`CompassSnapshot` and draw it.
"""

from dataclasses import dataclass, field

from flightcompass.airports.database import Airport
from flightcompass.airports.geo import LatLon
from flightcompass.pricing.cache import FlightPriceCache

DIRECTIONS = ("N", "NE", "E", "SE", "S", "SW", "W", "NW")

# Offset from an ASCII capital letter to its regional indicator symbol
_REGIONAL_INDICATOR_OFFSET = 127397


def flag_emoji(country_code: str) -> str:
    """Flag emoji for an ISO 3166-1 alpha-2 country code.

    Examples:
        >>> flag_emoji("in")
        '🇮🇳'
    """
    return "".join(
        chr(_REGIONAL_INDICATOR_OFFSET + ord(ch))
        for ch in country_code.upper()
        if "A" <= ch <= "Z"
    )


def cardinal_direction(heading: float) -> str:
    """Eight-point compass direction for a heading in degrees.

    Examples:
        >>> cardinal_direction(100.0)
        'E'
    """
    return DIRECTIONS[int((heading % 360.0 + 22.5) / 45.0) % 8]


def format_airport_label(airport: Airport, user_country: str | None = None) -> str:
    """Airport code, prefixed by its flag when it is in another country."""
    if user_country and airport.iso_country and airport.iso_country != user_country:
        return f"{flag_emoji(airport.iso_country)} {airport.code}"
    return airport.code


@dataclass(frozen=True)
class AirportRow:
    """One entry of the directional list as displayed."""

    code: str
    label: str
    name: str
    distance_km: float
    price: int | None


@dataclass(frozen=True)
class CompassSnapshot:
    """Everything a renderer needs for one frame.

    Attributes:
        heading: Heading in degrees.
        direction: Cardinal direction of the heading.
        nearest_code: Reference airport code, if known.
        rows: Directional list, nearest first.
    """

    heading: float
    direction: str
    nearest_code: str | None
    rows: list[AirportRow] = field(default_factory=list)


def build_snapshot(
    heading: float,
    nearest: Airport | None,
    airports: list[Airport],
    cache: FlightPriceCache,
    user_country: str | None = None,
    reference: LatLon | None = None,
) -> CompassSnapshot:
    """Assemble a snapshot from the orchestrator's published state.

    Args:
        heading: Current heading.
        nearest: Reference airport.
        airports: Published directional list.
        cache: Price cache to read prices from.
        user_country: User's country code; foreign airports get a flag.
        reference: Point distances are measured from; defaults to ``nearest``.
    """
    origin = reference or nearest
    rows = [
        AirportRow(
            code=airport.code,
            label=format_airport_label(airport, user_country),
            name=airport.name,
            distance_km=airport.distance_to(origin) if origin is not None else 0.0,
            price=cache.get_price(airport.code),
        )
        for airport in airports
    ]
    return CompassSnapshot(
        heading=heading,
        direction=cardinal_direction(heading),
        nearest_code=nearest.code if nearest else None,
        rows=rows,
    )


def render_text(snapshot: CompassSnapshot, currency: str = "USD") -> str:
    """Plain-text rendering, farthest airport on top as on the dial."""
    lines = [f"{int(snapshot.heading)}° {snapshot.direction}  from {snapshot.nearest_code or '---'}"]
    for row in reversed(snapshot.rows):
        price = f"{row.price} {currency}" if row.price is not None else "..."
        lines.append(f"  {row.label:<8} {row.distance_km:8.1f} km  {price:>10}  {row.name}")
    return "\n".join(lines)
