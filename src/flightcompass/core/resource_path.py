"""Locate configuration and data files.

Paths resolve against the project root when running from a source checkout and
against the extraction directory when running from a PyInstaller bundle.

Typical usage:
    from flightcompass.core.resource_path import get_config_path, get_data_path

    settings_file = get_config_path("settings.yaml")
    airports_csv = get_data_path("airports/airports.csv")
"""

import sys
from pathlib import Path


def is_bundled() -> bool:
    """Check if running from a PyInstaller bundle."""
    return hasattr(sys, "_MEIPASS")


def get_project_root() -> Path:
    """Get the directory that holds ``config/`` and ``data/``.

    Returns:
        The bundle directory when bundled, otherwise the source checkout root
        (three levels above ``src/flightcompass/core``).
    """
    if is_bundled():
        return Path(getattr(sys, "_MEIPASS"))
    return Path(__file__).resolve().parent.parent.parent.parent


def get_resource_path(relative_path: str) -> Path:
    """Get the absolute path of a resource relative to the project root."""
    return get_project_root() / relative_path


def get_config_path(config_file: str) -> Path:
    """Get the path of a file under ``config/``.

    Examples:
        >>> get_config_path("logging.yaml").name
        'logging.yaml'
    """
    return get_resource_path(f"config/{config_file}")


def get_data_path(data_file: str) -> Path:
    """Get the path of a file under ``data/``.

    Examples:
        >>> get_data_path("airports/airports.csv").parent.name
        'airports'
    """
    return get_resource_path(f"data/{data_file}")
