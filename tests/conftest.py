"""Pytest configuration and shared fixtures."""

from collections.abc import Callable
from pathlib import Path

import pytest

from flightcompass.airports.database import AirportDatabase

AIRPORTS_HEADER = (
    '"id","ident","type","name","latitude_deg","longitude_deg","elevation_ft",'
    '"continent","iso_country","iso_region","municipality","scheduled_service",'
    '"icao_code","iata_code","gps_code","local_code","home_link","wikipedia_link","keywords"\n'
)


def _row(
    airport_id: str,
    ident: str,
    airport_type: str,
    name: str,
    lat: str,
    lon: str,
    country: str,
    icao: str = "",
    iata: str = "",
) -> list[str]:
    return [
        airport_id, ident, airport_type, name, lat, lon, "0",
        "AS", country, f"{country}-XX", "", "yes",
        icao, iata, icao, "", "", "", "",
    ]


@pytest.fixture
def make_row() -> Callable[..., list[str]]:
    """Factory for positional airports.csv rows."""
    return _row


@pytest.fixture
def india_rows() -> list[list[str]]:
    """Rows for a handful of South Asian airports plus a few rejects."""
    return [
        _row("6523", "VOBL", "large_airport", "Kempegowda Intl", "13.1979", "77.7063", "IN", "VOBL", "BLR"),
        _row("26555", "VOMM", "large_airport", "Chennai Intl", "12.9941", "80.1709", "IN", "VOMM", "MAA"),
        _row("26434", "VOHS", "large_airport", "Rajiv Gandhi Intl", "17.2403", "78.4294", "IN", "VOHS", "HYD"),
        _row("26434b", "VIDP", "large_airport", "Indira Gandhi Intl", "28.5562", "77.1000", "IN", "VIDP", "DEL"),
        _row("26425", "VABB", "large_airport", "Chhatrapati Shivaji Intl, Mumbai", "19.0896", "72.8656", "IN", "VABB", "BOM"),
        _row("26613", "VECC", "large_airport", "Netaji Subhash Chandra Bose Intl", "22.6547", "88.4467", "IN", "VECC", "CCU"),
        _row("26560", "VOCI", "large_airport", "Cochin Intl", "10.1520", "76.4019", "IN", "VOCI", "COK"),
        _row("5960", "VCBI", "large_airport", "Bandaranaike Intl", "7.1808", "79.8841", "LK", "VCBI", "CMB"),
        # Rejects: digit in code, long ident, bad latitude, short row
        _row("900001", "A1B", "small_airport", "Digit Field", "13.0", "77.0", "IN"),
        _row("900002", "IN-0001", "heliport", "Rooftop Helipad", "12.95", "77.60", "IN"),
        _row("900003", "XBAD", "small_airport", "Broken Row", "abc", "77.0", "IN", "", "XBD"),
        ["900004", "SHORT", "small_airport"],
    ]


@pytest.fixture
def india_db(india_rows: list[list[str]]) -> AirportDatabase:
    """Database loaded from ``india_rows``."""
    db = AirportDatabase()
    db.load_rows(india_rows)
    return db


@pytest.fixture
def airports_csv(tmp_path: Path) -> Path:
    """A small airports.csv written in the OurAirports quoting style."""
    csv_path = tmp_path / "airports.csv"
    csv_path.write_text(
        AIRPORTS_HEADER
        + '6523,"VOBL","large_airport","Kempegowda Intl",13.1979,77.7063,3000,'
        '"AS","IN","IN-KA","Bangalore","yes","VOBL","BLR","VOBL","","","",""\n'
        + '26425,"VABB","large_airport","Chhatrapati Shivaji Intl, Mumbai",19.0896,72.8656,39,'
        '"AS","IN","IN-MM","Mumbai","yes","VABB","BOM","VABB","","","",""\n'
        + '26434,"VOHS","large_airport","Rajiv Gandhi Intl",17.2403,78.4294,2024,'
        '"AS","IN","IN-TG","Hyderabad","yes","VOHS","HYD","VOHS","","","",""\n'
        + '300000,"IN-0042","heliport","Hospital Helipad",12.95,77.60,3000,'
        '"AS","IN","IN-KA","Bangalore","no","","","","","","",""\n',
        encoding="utf-8",
    )
    return csv_path
