"""Configuration loading for the compass application.

Settings live in a YAML file with nested sections. ``ConfigLoader`` gives
dot-notation access to the raw data and ``CompassSettings`` is the validated,
typed view the rest of the application is built from.

Typical usage example:
    from flightcompass.core.config import CompassSettings, ConfigLoader

    config = ConfigLoader.load("config/settings.yaml")
    settings = CompassSettings.from_config(config)
    print(settings.tolerance_deg)
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

API_KEY_ENV_VAR = "SEARCHAPI_API_KEY"


class ConfigError(Exception):
    """Raised when configuration operations fail."""


class ConfigLoader:
    """YAML configuration with dot-notation access.

    Examples:
        >>> config = ConfigLoader.load("config/settings.yaml")
        >>> config.get("compass.display_cap", default=10)
        10
    """

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self._data = data or {}

    @classmethod
    def load(cls, path: str | Path) -> "ConfigLoader":
        """Load configuration from a YAML file.

        Args:
            path: Path to the YAML file.

        Returns:
            ConfigLoader holding the file's data.

        Raises:
            ConfigError: If the file is missing or is not valid YAML.
        """
        path = Path(path)
        if not path.exists():
            raise ConfigError(f"Configuration file not found: {path}")

        try:
            with path.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Failed to load configuration: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError(f"Configuration root must be a mapping: {path}")

        logger.info("Loaded configuration from: %s", path)
        return cls(data)

    def get(self, key: str, default: Any = None) -> Any:
        """Get a value using dot notation, e.g. ``"pricing.currency"``."""
        value: Any = self._data
        for k in key.split("."):
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default
        return value

    def set(self, key: str, value: Any) -> None:
        """Set a value using dot notation, creating sections as needed."""
        keys = key.split(".")
        data = self._data
        for k in keys[:-1]:
            data = data.setdefault(k, {})
        data[keys[-1]] = value

    def merge(self, other: "ConfigLoader") -> None:
        """Merge another configuration into this one; ``other`` wins."""
        self._data = _merge_dicts(self._data, other._data)

    def to_dict(self) -> dict[str, Any]:
        return self._data.copy()


def _merge_dicts(base: dict, override: dict) -> dict:
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _merge_dicts(result[key], value)
        else:
            result[key] = value
    return result


@dataclass(frozen=True)
class CompassSettings:
    """Validated application settings.

    Attributes:
        tolerance_deg: Half-width of the directional cone in degrees.
        display_cap: Maximum number of airports published per update.
        debounce_seconds: Quiet period before price lookups are dispatched.
        days_ahead: Departure date offset, in days from today.
        lookup_timeout_seconds: Upper bound on a single price lookup.
        currency: Currency requested from the price source.
        base_url: Price search endpoint.
        api_key: Price search API key, if any.
    """

    tolerance_deg: float = 30.0
    display_cap: int = 10
    debounce_seconds: float = 2.0
    days_ahead: int = 7
    lookup_timeout_seconds: float = 20.0
    currency: str = "USD"
    base_url: str = "https://www.searchapi.io/api/v1/search"
    api_key: str | None = None

    def __post_init__(self) -> None:
        if not 0 < self.tolerance_deg <= 180:
            raise ConfigError(f"tolerance_deg must be in (0, 180], got {self.tolerance_deg}")
        if self.display_cap < 1:
            raise ConfigError(f"display_cap must be at least 1, got {self.display_cap}")
        if self.debounce_seconds < 0:
            raise ConfigError(f"debounce_seconds must not be negative, got {self.debounce_seconds}")
        if self.days_ahead < 0:
            raise ConfigError(f"days_ahead must not be negative, got {self.days_ahead}")
        if self.lookup_timeout_seconds <= 0:
            raise ConfigError(
                f"lookup_timeout_seconds must be positive, got {self.lookup_timeout_seconds}"
            )

    @classmethod
    def from_config(cls, config: ConfigLoader) -> "CompassSettings":
        """Build settings from a loaded configuration.

        The ``SEARCHAPI_API_KEY`` environment variable overrides
        ``pricing.api_key``.

        Raises:
            ConfigError: If a value has the wrong type or is out of range.
        """
        defaults = cls()
        try:
            return cls(
                tolerance_deg=float(config.get("compass.tolerance_deg", defaults.tolerance_deg)),
                display_cap=int(config.get("compass.display_cap", defaults.display_cap)),
                debounce_seconds=float(config.get("compass.debounce_seconds", defaults.debounce_seconds)),
                days_ahead=int(config.get("pricing.days_ahead", defaults.days_ahead)),
                lookup_timeout_seconds=float(
                    config.get("pricing.lookup_timeout_seconds", defaults.lookup_timeout_seconds)
                ),
                currency=str(config.get("pricing.currency", defaults.currency)),
                base_url=str(config.get("pricing.base_url", defaults.base_url)),
                api_key=os.environ.get(API_KEY_ENV_VAR) or config.get("pricing.api_key") or None,
            )
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid configuration value: {e}") from e
