"""Logging setup for the compass application and its components.

Reads an optional YAML logging configuration, writes to a platform-aware log
directory and rotates the log file on every launch.

Platform-specific log locations:
    - macOS: ~/Library/Logs/FlightCompass/flightcompass.log
    - Linux: ~/.flightcompass/logs/flightcompass.log
    - Windows: %AppData%/FlightCompass/Logs/flightcompass.log

Typical usage example:
    from flightcompass.core.logging_system import get_logger, initialize_logging

    initialize_logging("config/logging.yaml")
    log = get_logger("flightcompass.pricing")
    log.info("Cached %s = %d", code, price)
"""

import logging
import os
import platform
import time
from pathlib import Path
from typing import Any

import yaml

_logging_config: dict[str, Any] = {}
_loggers_cache: dict[str, logging.Logger] = {}
_initialized = False

DEFAULT_LOG_FILENAME = "flightcompass.log"


class LoggingError(Exception):
    """Raised when the logging system cannot be initialized."""


def get_platform_log_dir() -> Path:
    """Get the platform-specific log directory.

    Returns:
        Path to the log directory for the current operating system.

    Examples:
        >>> get_platform_log_dir()
        PosixPath('/home/user/.flightcompass/logs')
    """
    system = platform.system()

    if system == "Darwin":
        return Path.home() / "Library" / "Logs" / "FlightCompass"
    if system == "Windows":
        appdata = Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
        return appdata / "FlightCompass" / "Logs"
    return Path.home() / ".flightcompass" / "logs"


def rotate_logs(log_dir: Path, log_filename: str = DEFAULT_LOG_FILENAME, keep_count: int = 5) -> None:
    """Shift the previous launches' logs, keeping the last ``keep_count``.

    ``flightcompass.log`` becomes ``flightcompass.log.1``, ``.1`` becomes
    ``.2`` and so on; the oldest one is deleted.

    Args:
        log_dir: Directory containing log files.
        log_filename: Base name of the log file.
        keep_count: Number of old logs to keep.
    """
    log_file = log_dir / log_filename
    if not log_file.exists():
        return

    oldest_log = log_dir / f"{log_filename}.{keep_count}"
    if oldest_log.exists():
        oldest_log.unlink()

    for i in range(keep_count - 1, 0, -1):
        old_log = log_dir / f"{log_filename}.{i}"
        if old_log.exists():
            old_log.rename(log_dir / f"{log_filename}.{i + 1}")

    log_file.rename(log_dir / f"{log_filename}.1")


def initialize_logging(config_path: str | Path | None = None, use_platform_dir: bool = True) -> None:
    """Initialize the logging system.

    Call once at startup before the first log record is emitted. Without a
    configuration file the built-in defaults are used.

    Args:
        config_path: Path to a logging YAML file, or None for defaults.
        use_platform_dir: Write logs to the platform log directory instead of
            the ``log_dir`` from the configuration.

    Raises:
        LoggingError: If the configuration file is missing or invalid.
    """
    global _logging_config, _initialized

    if config_path:
        config_path = Path(config_path)
        if not config_path.exists():
            raise LoggingError(f"Logging config file not found: {config_path}")
        try:
            with config_path.open("r", encoding="utf-8") as f:
                _logging_config = _merge_defaults(yaml.safe_load(f) or {})
        except (OSError, yaml.YAMLError) as e:
            raise LoggingError(f"Failed to load logging config: {e}") from e
    else:
        _logging_config = _get_default_config()

    if use_platform_dir:
        _logging_config["log_dir"] = str(get_platform_log_dir())

    file_config = _logging_config["file"]
    log_dir = Path(_logging_config["log_dir"])
    if file_config.get("enabled", True):
        log_dir.mkdir(parents=True, exist_ok=True)
        rotate_logs(
            log_dir,
            file_config.get("filename", DEFAULT_LOG_FILENAME),
            file_config.get("backup_count", 5),
        )

    _configure_root_logger()
    _loggers_cache.clear()
    _initialized = True

    # Modules log through logging.getLogger(__name__); apply their overrides now
    for name in _logging_config.get("components", {}):
        get_logger(name)


def _get_default_config() -> dict[str, Any]:
    return {
        "level": "INFO",
        "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        "date_format": "%Y-%m-%d %H:%M:%S",
        "log_dir": "logs",
        "file": {
            "enabled": True,
            "filename": DEFAULT_LOG_FILENAME,
            "backup_count": 5,
        },
        "console": {
            "enabled": True,
            "level": "INFO",
        },
        "components": {},
    }


def _merge_defaults(loaded: dict[str, Any]) -> dict[str, Any]:
    config = _get_default_config()
    for key, value in loaded.items():
        if isinstance(value, dict) and isinstance(config.get(key), dict):
            config[key] = {**config[key], **value}
        else:
            config[key] = value
    return config


def _configure_root_logger() -> None:
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.handlers.clear()

    console_config = _logging_config["console"]
    if console_config.get("enabled", True):
        console_handler = logging.StreamHandler()
        console_handler.setLevel(getattr(logging, console_config.get("level", "INFO")))
        console_handler.setFormatter(_get_formatter())
        root_logger.addHandler(console_handler)

    file_config = _logging_config["file"]
    if file_config.get("enabled", True):
        log_file = Path(_logging_config["log_dir"]) / file_config.get("filename", DEFAULT_LOG_FILENAME)
        # Rotation already happened at startup
        file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
        file_handler.setLevel(getattr(logging, _logging_config.get("level", "INFO")))
        file_handler.setFormatter(_get_formatter())
        root_logger.addHandler(file_handler)


class MillisecondFormatter(logging.Formatter):
    """Formatter that appends milliseconds with a dot separator."""

    def formatTime(self, record, datefmt=None):
        ct = self.converter(record.created)
        s = time.strftime(datefmt or "%Y-%m-%d %H:%M:%S", ct)
        return f"{s}.{int(record.msecs):03d}"


def _get_formatter() -> logging.Formatter:
    return MillisecondFormatter(
        _logging_config.get("format", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"),
        _logging_config.get("date_format", "%Y-%m-%d %H:%M:%S"),
    )


def get_logger(name: str) -> logging.Logger:
    """Get a configured logger for a component.

    Loggers are cached. A component can override its level, or be disabled,
    under the ``components`` section of the logging configuration.

    Args:
        name: Logger name, usually the module's ``__name__``.

    Returns:
        Configured logger instance.

    Examples:
        >>> log = get_logger("flightcompass.compass.orchestrator")
        >>> log.debug("Heading %.1f", heading)
    """
    if not _initialized:
        initialize_logging()

    if name in _loggers_cache:
        return _loggers_cache[name]

    logger = logging.getLogger(name)
    component_config = _logging_config.get("components", {}).get(name, {})

    if component_config.get("enabled", True):
        if "level" in component_config:
            logger.setLevel(getattr(logging, component_config["level"]))
    else:
        logger.disabled = True

    _loggers_cache[name] = logger
    return logger


def shutdown_logging() -> None:
    """Flush, close and detach every handler installed by this module."""
    global _initialized

    logging.shutdown()
    logging.getLogger().handlers.clear()
    _loggers_cache.clear()
    _initialized = False
