#!/usr/bin/env python3
"""Download the OurAirports airport table used by the compass.

Fetches airports.csv from the OurAirports data mirror
(https://ourairports.com/data/) into data/airports/ and reports how many
commercial airports it contains.

Usage:
    python scripts/download_airport_data.py
"""

import sys
from pathlib import Path
from urllib import request
from urllib.error import URLError

from flightcompass.airports.database import AirportDatabase

AIRPORTS_URL = "https://davidmegginson.github.io/ourairports-data/airports.csv"

DATA_DIR = Path("data/airports")


def download(url: str, output_path: Path) -> bool:
    """Download ``url`` to ``output_path``.

    Returns:
        True if the file was written.
    """
    try:
        print(f"Downloading {url}...")
        with request.urlopen(url) as response:
            content = response.read()
        output_path.write_bytes(content)
    except URLError as e:
        print(f"✗ Failed to download {url}: {e}")
        return False
    except OSError as e:
        print(f"✗ Failed to write {output_path}: {e}")
        return False

    print(f"✓ Downloaded {output_path.name} ({len(content) / (1024 * 1024):.2f} MB)")
    return True


def main() -> int:
    DATA_DIR.mkdir(parents=True, exist_ok=True)
    output_path = DATA_DIR / "airports.csv"

    if not download(AIRPORTS_URL, output_path):
        return 1

    db = AirportDatabase()
    db.load_from_csv(output_path)
    print(f"✓ {db.get_airport_count()} commercial airports available")
    return 0


if __name__ == "__main__":
    sys.exit(main())
