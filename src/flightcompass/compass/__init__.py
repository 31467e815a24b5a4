"""Compass session: sensor filtering, directional updates and display snapshots."""

from flightcompass.compass.display import (
    AirportRow,
    CompassSnapshot,
    build_snapshot,
    cardinal_direction,
    flag_emoji,
    format_airport_label,
    render_text,
)
from flightcompass.compass.orchestrator import (
    DirectionalListUpdatedEvent,
    DirectionalUpdateOrchestrator,
    LookupsDispatchedEvent,
    NearestAirportChangedEvent,
)
from flightcompass.compass.sensor import HeadingReading, SensorFeed

__all__ = [
    "AirportRow",
    "CompassSnapshot",
    "DirectionalListUpdatedEvent",
    "DirectionalUpdateOrchestrator",
    "HeadingReading",
    "LookupsDispatchedEvent",
    "NearestAirportChangedEvent",
    "SensorFeed",
    "build_snapshot",
    "cardinal_direction",
    "flag_emoji",
    "format_airport_label",
    "render_text",
]
