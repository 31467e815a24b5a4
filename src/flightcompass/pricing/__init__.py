"""Flight price cache and price source client."""

from flightcompass.pricing.cache import (
    FlightPriceCache,
    PriceCachedEvent,
    PriceSearchFailedEvent,
    SearchState,
)
from flightcompass.pricing.client import PriceLookup, PriceLookupError, SearchApiClient, cheapest_price

__all__ = [
    "FlightPriceCache",
    "PriceCachedEvent",
    "PriceLookup",
    "PriceLookupError",
    "PriceSearchFailedEvent",
    "SearchApiClient",
    "SearchState",
    "cheapest_price",
]
