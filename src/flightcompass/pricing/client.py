"""SearchApi (Google Flights engine) price lookups.

The orchestrator only needs an async callable ``(origin, destination, date)``
returning the cheapest price or None; :class:`SearchApiClient` is that callable
backed by https://www.searchapi.io.

Typical usage:
    async with SearchApiClient(api_key="...") as client:
        price = await client.search_flight("BLR", "DEL", "2025-11-25")
"""

import logging
from collections.abc import Awaitable, Callable
from typing import Any

import httpx

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://www.searchapi.io/api/v1/search"

PriceLookup = Callable[[str, str, str], Awaitable[int | None]]


class PriceLookupError(Exception):
    """Raised when a price response cannot be turned into a price."""


def cheapest_price(payload: dict[str, Any]) -> int:
    """Extract the cheapest price from a SearchApi response body.

    Args:
        payload: Decoded JSON response.

    Returns:
        Minimum ``price`` across ``best_flights``.

    Raises:
        PriceLookupError: If the response carries an error, has no flights
            or no usable price.
    """
    if not isinstance(payload, dict):
        raise PriceLookupError("Response is not a JSON object")

    error = payload.get("error")
    if error:
        raise PriceLookupError(f"API returned error: {error}")

    flights = payload.get("best_flights") or []
    prices = []
    for flight in flights:
        price = flight.get("price") if isinstance(flight, dict) else None
        # bool is an int subclass; JSON true is not a price
        if isinstance(price, int) and not isinstance(price, bool) and price >= 0:
            prices.append(price)

    if not flights:
        raise PriceLookupError("No flights found")
    if not prices:
        raise PriceLookupError("No valid prices found")
    return min(prices)


class SearchApiClient:
    """Async one-way flight price lookups.

    Every failure (missing key, HTTP error, network error, API error, empty
    result) is logged and reported as None, so the caller only has to
    distinguish "price" from "no price".

    Examples:
        >>> async with SearchApiClient(api_key=key) as client:
        ...     await client.search_flight("BLR", "BOM", "2025-11-25")
        72
    """

    def __init__(
        self,
        api_key: str | None,
        *,
        base_url: str = DEFAULT_BASE_URL,
        currency: str = "USD",
        timeout: float = 20.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Create the client.

        Args:
            api_key: SearchApi key; without one every lookup returns None.
            base_url: Search endpoint.
            currency: Currency code requested for prices.
            timeout: Per-request timeout in seconds.
            transport: Optional httpx transport (used by tests).
        """
        self.api_key = api_key
        self.base_url = base_url
        self.currency = currency
        self._http = httpx.AsyncClient(timeout=httpx.Timeout(timeout), transport=transport)

    async def __aenter__(self) -> "SearchApiClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __call__(self, origin: str, destination: str, date: str) -> int | None:
        return await self.search_flight(origin, destination, date)

    async def search_flight(self, origin: str, destination: str, date: str) -> int | None:
        """Cheapest one-way price from ``origin`` to ``destination``.

        Args:
            origin: Departure airport code.
            destination: Arrival airport code.
            date: Outbound date as ``YYYY-MM-DD``.

        Returns:
            Cheapest price, or None if nothing usable came back.
        """
        if not self.api_key:
            logger.error("No SearchApi key configured; set SEARCHAPI_API_KEY")
            return None

        params = {
            "engine": "google_flights",
            "departure_id": origin,
            "arrival_id": destination,
            "outbound_date": date,
            "flight_type": "one_way",
            "currency": self.currency,
            "api_key": self.api_key,
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}

        try:
            response = await self._http.get(self.base_url, params=params, headers=headers)
        except httpx.HTTPError as e:
            logger.warning("Network error for %s -> %s: %s", origin, destination, e)
            return None

        if response.status_code != 200:
            logger.warning(
                "SearchApi HTTP %d for %s -> %s: %s",
                response.status_code,
                origin,
                destination,
                _error_message(response),
            )
            return None

        try:
            price = cheapest_price(response.json())
        except ValueError as e:
            logger.warning("Malformed response for %s -> %s: %s", origin, destination, e)
            return None
        except PriceLookupError as e:
            logger.warning("No price for %s -> %s: %s", origin, destination, e)
            return None

        logger.info("Found flight %s -> %s: %d %s", origin, destination, price, self.currency)
        return price


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return ""
