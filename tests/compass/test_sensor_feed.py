"""Tests for the sensor feed filter."""

from unittest.mock import Mock

import pytest

from flightcompass.airports.geo import Coordinate
from flightcompass.compass.sensor import HeadingReading, SensorFeed


@pytest.fixture
def listener() -> Mock:
    return Mock()


class TestHeadingFilter:
    """Test heading reading filtering."""

    def test_first_reading_is_forwarded(self, listener: Mock) -> None:
        """Test the first valid reading reaches the listener."""
        feed = SensorFeed(listener)

        assert feed.heading_reading(HeadingReading(90.0, accuracy=5.0))
        listener.on_heading_changed.assert_called_once_with(90.0)

    def test_invalid_accuracy_is_ignored(self, listener: Mock) -> None:
        """Test negative accuracy marks the reading invalid."""
        feed = SensorFeed(listener)

        assert not feed.heading_reading(HeadingReading(90.0, accuracy=-1.0))
        listener.on_heading_changed.assert_not_called()
        assert feed.heading is None

    def test_small_changes_are_filtered(self, listener: Mock) -> None:
        """Test changes below the heading filter are dropped."""
        feed = SensorFeed(listener, heading_filter_deg=1.0)
        feed.heading_reading(HeadingReading(90.0))

        assert not feed.heading_reading(HeadingReading(90.4))
        assert feed.heading_reading(HeadingReading(91.5))
        assert listener.on_heading_changed.call_count == 2

    def test_filter_wraps_through_north(self, listener: Mock) -> None:
        """Test 359.8 and 0.1 count as a small change."""
        feed = SensorFeed(listener, heading_filter_deg=1.0)
        feed.heading_reading(HeadingReading(359.8))

        assert not feed.heading_reading(HeadingReading(0.1))

    def test_heading_is_normalized(self, listener: Mock) -> None:
        """Test readings outside [0, 360) are wrapped."""
        feed = SensorFeed(listener)
        feed.heading_reading(HeadingReading(370.0))

        listener.on_heading_changed.assert_called_once_with(10.0)


class TestLocationFix:
    """Test one-shot location handling."""

    def test_only_first_fix_is_forwarded(self, listener: Mock) -> None:
        """Test later fixes are ignored until reset."""
        feed = SensorFeed(listener)

        assert feed.location_fix(12.9716, 77.5946)
        assert not feed.location_fix(28.6, 77.2)

        listener.on_location_changed.assert_called_once_with(Coordinate(12.9716, 77.5946))

    def test_reset_accepts_next_fix(self, listener: Mock) -> None:
        """Test reset_location re-arms the one-shot fix."""
        feed = SensorFeed(listener)
        feed.location_fix(12.9716, 77.5946)
        feed.reset_location()

        assert feed.location_fix(28.6, 77.2)
        assert listener.on_location_changed.call_count == 2
