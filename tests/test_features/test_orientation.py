"""
Tests for swellmind/features/orientation.py.

What we test
------------
relative_wind_angle():
  - Wraps into [0, 360).

calculate_wind_orientation():
  - Each angle band maps to its orientation, including band edges.
  - Unknown wind direction gives None.
"""

from __future__ import annotations

import pytest

from swellmind.features.orientation import calculate_wind_orientation, relative_wind_angle
from swellmind.taxonomy.conditions import WindOrientation


class TestRelativeWindAngle:
    def test_same_direction_is_zero(self):
        assert relative_wind_angle(270.0, 270.0) == 0.0

    def test_wraps_negative_difference(self):
        assert relative_wind_angle(10.0, 270.0) == pytest.approx(100.0)


class TestCalculateWindOrientation:
    @pytest.mark.parametrize(
        "angle,expected",
        [
            (0.0, WindOrientation.ONSHORE),
            (29.0, WindOrientation.ONSHORE),
            (30.0, WindOrientation.CROSS_ONSHORE),
            (60.0, WindOrientation.CROSS),
            (120.0, WindOrientation.CROSS_OFFSHORE),
            (150.0, WindOrientation.OFFSHORE),
            (180.0, WindOrientation.OFFSHORE),
            (210.0, WindOrientation.OFFSHORE),
            (220.0, WindOrientation.CROSS_OFFSHORE),
            (240.0, WindOrientation.CROSS),
            (300.0, WindOrientation.CROSS_ONSHORE),
            (330.0, WindOrientation.ONSHORE),
            (359.0, WindOrientation.ONSHORE),
        ],
    )
    def test_bands(self, angle, expected):
        # beach faces north (0), so wind direction == relative angle
        assert calculate_wind_orientation(angle, 0.0) == expected

    def test_west_facing_beach_with_east_wind_is_offshore(self):
        assert calculate_wind_orientation(90.0, 270.0) == WindOrientation.OFFSHORE

    def test_unknown_direction(self):
        assert calculate_wind_orientation(None, 270.0) is None
