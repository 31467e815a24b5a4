"""Tests for the logging system: platform paths, rotation and component overrides."""

import logging
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest

from flightcompass.core.logging_system import (
    LoggingError,
    get_logger,
    get_platform_log_dir,
    initialize_logging,
    rotate_logs,
    shutdown_logging,
)

PLATFORM_DIR = "flightcompass.core.logging_system.get_platform_log_dir"


class TestPlatformLogDir:
    """Tests for get_platform_log_dir."""

    def test_macos_log_dir(self) -> None:
        """Test the macOS log directory."""
        with patch("platform.system", return_value="Darwin"):
            assert get_platform_log_dir() == Path.home() / "Library" / "Logs" / "FlightCompass"

    def test_linux_log_dir(self) -> None:
        """Test the Linux log directory."""
        with patch("platform.system", return_value="Linux"):
            assert get_platform_log_dir() == Path.home() / ".flightcompass" / "logs"

    def test_windows_log_dir(self) -> None:
        """Test the Windows log directory honours APPDATA."""
        with patch("platform.system", return_value="Windows"), patch.dict(
            "os.environ", {"APPDATA": "C:/Users/Test/AppData/Roaming"}
        ):
            log_dir = get_platform_log_dir()
            assert log_dir == Path("C:/Users/Test/AppData/Roaming") / "FlightCompass" / "Logs"


class TestLogRotation:
    """Tests for rotate_logs."""

    def test_nothing_to_rotate(self) -> None:
        """Test rotation without a current log creates nothing."""
        with tempfile.TemporaryDirectory() as tmpdir:
            rotate_logs(Path(tmpdir), "compass.log", 5)
            assert list(Path(tmpdir).iterdir()) == []

    def test_shifts_previous_logs(self) -> None:
        """Test every log moves one slot up."""
        with tempfile.TemporaryDirectory() as tmpdir:
            log_dir = Path(tmpdir)
            (log_dir / "compass.log").write_text("current")
            (log_dir / "compass.log.1").write_text("one")
            (log_dir / "compass.log.2").write_text("two")

            rotate_logs(log_dir, "compass.log", 5)

            assert not (log_dir / "compass.log").exists()
            assert (log_dir / "compass.log.1").read_text() == "current"
            assert (log_dir / "compass.log.2").read_text() == "one"
            assert (log_dir / "compass.log.3").read_text() == "two"

    def test_oldest_is_dropped(self) -> None:
        """Test the log beyond keep_count is deleted."""
        with tempfile.TemporaryDirectory() as tmpdir:
            log_dir = Path(tmpdir)
            (log_dir / "compass.log").write_text("current")
            (log_dir / "compass.log.1").write_text("one")
            (log_dir / "compass.log.2").write_text("two")

            rotate_logs(log_dir, "compass.log", keep_count=2)

            assert (log_dir / "compass.log.1").read_text() == "current"
            assert (log_dir / "compass.log.2").read_text() == "one"
            assert not (log_dir / "compass.log.3").exists()


class TestInitialization:
    """Tests for initialize_logging."""

    def test_default_file_in_platform_dir(self) -> None:
        """Test the default configuration writes flightcompass.log at INFO."""
        with tempfile.TemporaryDirectory() as tmpdir, patch(PLATFORM_DIR, return_value=Path(tmpdir)):
            initialize_logging(use_platform_dir=True)
            log = get_logger("flightcompass.test")
            log.info("Cached DEL = 85")
            log.debug("Heading 90.0")
            shutdown_logging()

            content = (Path(tmpdir) / "flightcompass.log").read_text(encoding="utf-8")
            assert "Cached DEL = 85" in content
            assert "Heading 90.0" not in content

    def test_missing_config_file(self) -> None:
        """Test a missing configuration file raises LoggingError."""
        with pytest.raises(LoggingError, match="not found"):
            initialize_logging(config_path="/nonexistent/logging.yaml")

    def test_invalid_config_file(self, tmp_path: Path) -> None:
        """Test malformed YAML raises LoggingError."""
        config = tmp_path / "logging.yaml"
        config.write_text("level: [DEBUG\n", encoding="utf-8")

        with pytest.raises(LoggingError, match="Failed to load"):
            initialize_logging(config_path=config)

    def test_config_file_and_local_dir(self, tmp_path: Path) -> None:
        """Test log_dir, filename and level come from the YAML file."""
        log_dir = tmp_path / "out"
        config = tmp_path / "logging.yaml"
        config.write_text(
            f"level: DEBUG\nlog_dir: {log_dir.as_posix()}\n"
            "file:\n  filename: custom.log\n"
            "console:\n  enabled: false\n",
            encoding="utf-8",
        )

        initialize_logging(config_path=config, use_platform_dir=False)
        get_logger("flightcompass.test").debug("debug line")
        shutdown_logging()

        assert "debug line" in (log_dir / "custom.log").read_text(encoding="utf-8")

    def test_component_overrides(self, tmp_path: Path) -> None:
        """Test per-component levels and disabling are applied at startup."""
        config = tmp_path / "logging.yaml"
        config.write_text(
            "console:\n  enabled: false\n"
            "file:\n  enabled: false\n"
            "components:\n"
            "  flightcompass.quiet:\n    level: ERROR\n"
            "  flightcompass.muted:\n    enabled: false\n",
            encoding="utf-8",
        )

        initialize_logging(config_path=config, use_platform_dir=False)
        try:
            assert logging.getLogger("flightcompass.quiet").level == logging.ERROR
            assert logging.getLogger("flightcompass.muted").disabled
        finally:
            logging.getLogger("flightcompass.quiet").setLevel(logging.NOTSET)
            logging.getLogger("flightcompass.muted").disabled = False
            shutdown_logging()

    def test_get_logger_is_cached(self) -> None:
        """Test the same logger object is returned for a name."""
        with tempfile.TemporaryDirectory() as tmpdir, patch(PLATFORM_DIR, return_value=Path(tmpdir)):
            initialize_logging(use_platform_dir=True)
            assert get_logger("flightcompass.cache") is get_logger("flightcompass.cache")
            shutdown_logging()

    def test_sessions_rotate(self) -> None:
        """Test each initialization starts a fresh file and keeps the last five."""
        with tempfile.TemporaryDirectory() as tmpdir, patch(PLATFORM_DIR, return_value=Path(tmpdir)):
            for session in range(7):
                initialize_logging(use_platform_dir=True)
                get_logger("flightcompass.test").info("Session %d", session)
                shutdown_logging()

            log_dir = Path(tmpdir)
            assert len(list(log_dir.glob("flightcompass.log*"))) == 6
            assert "Session 6" in (log_dir / "flightcompass.log").read_text(encoding="utf-8")
            assert "Session 5" in (log_dir / "flightcompass.log.1").read_text(encoding="utf-8")
            assert "Session 1" in (log_dir / "flightcompass.log.5").read_text(encoding="utf-8")
