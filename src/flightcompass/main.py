"""FlightCompass - which airports lie ahead, and what does it cost to fly there.

Command line entry point. Loads the airport dataset, feeds one location fix and
one heading through the same pipeline the device uses, optionally waits for
price lookups, and prints the resulting compass view.

Typical usage:
    flightcompass --lat 12.9716 --lon 77.5946 --heading 10
    flightcompass --lat 12.9716 --lon 77.5946 --heading 10 --prices --country IN
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from flightcompass.airports.database import AirportDatabase
from flightcompass.compass.display import CompassSnapshot, build_snapshot, render_text
from flightcompass.compass.orchestrator import DirectionalUpdateOrchestrator
from flightcompass.compass.sensor import HeadingReading, SensorFeed
from flightcompass.core.config import CompassSettings, ConfigError, ConfigLoader
from flightcompass.core.event_bus import EventBus
from flightcompass.core.logging_system import initialize_logging, shutdown_logging
from flightcompass.core.resource_path import get_config_path, get_data_path
from flightcompass.pricing.cache import FlightPriceCache
from flightcompass.pricing.client import SearchApiClient

logger = logging.getLogger(__name__)


class FlightCompass:
    """Application wiring: settings, logging, airport store and one session."""

    def __init__(self, args: argparse.Namespace) -> None:
        """Initialize logging, settings and the airport store.

        Args:
            args: Parsed command line arguments.

        Raises:
            ConfigError: If a settings file is missing or invalid.
            FileNotFoundError: If the airports file does not exist.
        """
        self.args = args

        logging_config = get_config_path("logging.yaml")
        if logging_config.exists():
            initialize_logging(str(logging_config), use_platform_dir=not args.local_logs)
        else:
            initialize_logging(use_platform_dir=not args.local_logs)
        logger.info("FlightCompass starting up...")

        self.settings = self._load_settings()
        self.database = AirportDatabase()
        self.database.load_from_csv(args.airports or get_data_path("airports/airports.csv"))

        self.event_bus = EventBus()
        self.cache = FlightPriceCache(self.event_bus)

    def _load_settings(self) -> CompassSettings:
        defaults_path = get_config_path("settings.yaml")
        config = ConfigLoader.load(defaults_path) if defaults_path.exists() else ConfigLoader()
        # A user file only needs the keys it changes
        if self.args.config:
            config.merge(ConfigLoader.load(Path(self.args.config)))
        if self.args.tolerance is not None:
            config.set("compass.tolerance_deg", self.args.tolerance)
        return CompassSettings.from_config(config)

    async def run(self) -> CompassSnapshot:
        """Run one compass session and return the final view."""
        async with SearchApiClient(
            self.settings.api_key,
            base_url=self.settings.base_url,
            currency=self.settings.currency,
            timeout=self.settings.lookup_timeout_seconds,
        ) as client:
            orchestrator = DirectionalUpdateOrchestrator(
                self.database,
                self.cache,
                client.search_flight,
                settings=self.settings,
                event_bus=self.event_bus,
            )
            feed = SensorFeed(orchestrator)
            feed.location_fix(self.args.lat, self.args.lon)
            feed.heading_reading(HeadingReading(self.args.heading))

            if self.args.prices:
                await orchestrator.settle()
            await orchestrator.close(cancel_lookups=True)

            return build_snapshot(
                orchestrator.heading,
                orchestrator.nearest_airport,
                orchestrator.directional_airports,
                self.cache,
                user_country=self.args.country,
            )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="FlightCompass - airports and fares in the direction you face")

    parser.add_argument("--lat", type=float, required=True, help="Current latitude in degrees")
    parser.add_argument("--lon", type=float, required=True, help="Current longitude in degrees")
    parser.add_argument("--heading", type=float, default=0.0, help="Heading in degrees (0 = north)")
    parser.add_argument("--tolerance", type=float, help="Cone half-width in degrees (default from settings)")
    parser.add_argument("--airports", type=str, help="Path to OurAirports airports.csv")
    parser.add_argument("--config", type=str, help="Path to settings YAML")
    parser.add_argument("--country", type=str, help="Your ISO country code; foreign airports get a flag")
    parser.add_argument("--prices", action="store_true", help="Look up fares for the airports ahead")
    parser.add_argument("--local-logs", action="store_true", help="Write logs to ./logs instead of the platform dir")

    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    Returns:
        Exit code (0 for success).
    """
    args = parse_args(argv)
    try:
        app = FlightCompass(args)
        snapshot = asyncio.run(app.run())
    except (ConfigError, FileNotFoundError) as e:
        logger.error("%s", e)
        return 1
    except Exception as e:  # pylint: disable=broad-exception-caught
        logger.exception("Fatal error: %s", e)
        return 1
    finally:
        shutdown_logging()

    print(render_text(snapshot, currency=app.settings.currency))
    return 0


if __name__ == "__main__":
    sys.exit(main())
