"""Tests for the command line entry point."""

from pathlib import Path

import pytest

from flightcompass.core.config import API_KEY_ENV_VAR
from flightcompass.core.logging_system import shutdown_logging
from flightcompass.main import FlightCompass, main, parse_args


@pytest.fixture
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run from a temporary directory without an API key in the environment."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv(API_KEY_ENV_VAR, raising=False)
    return tmp_path


class TestParseArgs:
    """Test argument parsing."""

    def test_defaults(self) -> None:
        """Test optional flags default sensibly."""
        args = parse_args(["--lat", "12.97", "--lon", "77.59"])

        assert args.lat == pytest.approx(12.97)
        assert args.lon == pytest.approx(77.59)
        assert args.heading == 0.0
        assert args.tolerance is None
        assert not args.prices
        assert not args.local_logs

    def test_all_flags(self) -> None:
        """Test every flag is parsed."""
        args = parse_args(
            [
                "--lat", "1", "--lon", "2", "--heading", "275", "--tolerance", "15",
                "--airports", "a.csv", "--config", "s.yaml", "--country", "IN",
                "--prices", "--local-logs",
            ]
        )

        assert args.heading == 275.0
        assert args.tolerance == 15.0
        assert args.airports == "a.csv"
        assert args.config == "s.yaml"
        assert args.country == "IN"
        assert args.prices
        assert args.local_logs

    def test_location_is_required(self) -> None:
        """Test missing coordinates exit with a usage error."""
        with pytest.raises(SystemExit):
            parse_args(["--heading", "90"])


class TestMain:
    """Test end-to-end runs against a small airports file."""

    def test_prints_airports_ahead(self, workdir: Path, airports_csv: Path, capsys: pytest.CaptureFixture) -> None:
        """Test a run from Bangalore facing north-north-west."""
        code = main(
            ["--lat", "12.9716", "--lon", "77.5946", "--heading", "350", "--airports", str(airports_csv), "--local-logs"]
        )

        assert code == 0
        lines = capsys.readouterr().out.splitlines()
        assert lines[0].startswith("350° N")
        assert "from BLR" in lines[0]
        # Farthest first: BOM, HYD, then BLR itself
        assert [line.split()[0] for line in lines[1:]] == ["BOM", "HYD", "BLR"]
        assert all("..." in line for line in lines[1:])

    def test_tolerance_override(self, workdir: Path, airports_csv: Path, capsys: pytest.CaptureFixture) -> None:
        """Test --tolerance narrows the cone."""
        code = main(
            [
                "--lat", "12.9716", "--lon", "77.5946", "--heading", "350", "--tolerance", "15",
                "--airports", str(airports_csv), "--local-logs",
            ]
        )

        assert code == 0
        lines = capsys.readouterr().out.splitlines()
        assert [line.split()[0] for line in lines[1:]] == ["BLR"]

    def test_prices_without_key(
        self, workdir: Path, airports_csv: Path, capsys: pytest.CaptureFixture
    ) -> None:
        """Test --prices completes without a key and shows no fares."""
        settings = workdir / "settings.yaml"
        settings.write_text("compass:\n  debounce_seconds: 0.01\n", encoding="utf-8")

        code = main(
            [
                "--lat", "12.9716", "--lon", "77.5946", "--heading", "10", "--prices",
                "--airports", str(airports_csv), "--config", str(settings), "--local-logs",
            ]
        )

        assert code == 0
        lines = capsys.readouterr().out.splitlines()
        assert [line.split()[0] for line in lines[1:]] == ["HYD", "BLR"]
        assert all("..." in line for line in lines[1:])

    def test_missing_airports_file(self, workdir: Path, capsys: pytest.CaptureFixture) -> None:
        """Test a missing dataset exits with status 1."""
        code = main(["--lat", "0", "--lon", "0", "--airports", str(workdir / "none.csv"), "--local-logs"])

        assert code == 1
        assert capsys.readouterr().out == ""

    def test_invalid_settings(self, workdir: Path, airports_csv: Path) -> None:
        """Test an invalid settings file exits with status 1."""
        settings = workdir / "settings.yaml"
        settings.write_text("compass:\n  display_cap: 0\n", encoding="utf-8")

        code = main(
            ["--lat", "0", "--lon", "0", "--airports", str(airports_csv), "--config", str(settings), "--local-logs"]
        )

        assert code == 1


class TestSettingsLoading:
    """Test how the shipped defaults, --config and --tolerance combine."""

    def _settings(self, argv: list[str]):
        app = FlightCompass(parse_args(argv))
        shutdown_logging()
        return app.settings

    def test_partial_config_keeps_defaults(self, workdir: Path, airports_csv: Path) -> None:
        """Test a user file overrides only the keys it names."""
        settings_file = workdir / "settings.yaml"
        settings_file.write_text("compass:\n  debounce_seconds: 0.01\n", encoding="utf-8")

        settings = self._settings(
            ["--lat", "0", "--lon", "0", "--airports", str(airports_csv), "--config", str(settings_file), "--local-logs"]
        )

        assert settings.debounce_seconds == pytest.approx(0.01)
        assert settings.tolerance_deg == pytest.approx(30.0)
        assert settings.display_cap == 10
        assert settings.days_ahead == 7

    def test_tolerance_flag_wins_over_config(self, workdir: Path, airports_csv: Path) -> None:
        """Test --tolerance overrides the configured cone width."""
        settings_file = workdir / "settings.yaml"
        settings_file.write_text("compass:\n  tolerance_deg: 60\n", encoding="utf-8")

        settings = self._settings(
            [
                "--lat", "0", "--lon", "0", "--tolerance", "15",
                "--airports", str(airports_csv), "--config", str(settings_file), "--local-logs",
            ]
        )

        assert settings.tolerance_deg == pytest.approx(15.0)

    def test_missing_config_file(self, workdir: Path, airports_csv: Path) -> None:
        """Test a --config path that does not exist exits with status 1."""
        code = main(
            [
                "--lat", "0", "--lon", "0", "--airports", str(airports_csv),
                "--config", str(workdir / "none.yaml"), "--local-logs",
            ]
        )

        assert code == 1
