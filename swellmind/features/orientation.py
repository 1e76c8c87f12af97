"""
Wind orientation relative to a beach.

Beach orientation is the compass direction the beach faces (where the waves
come from).  Wind direction is where the wind blows from.  The relative
angle ``(wind - beach + 360) % 360`` is 0 for wind blowing straight onshore
and 180 for wind blowing straight offshore.

    relative angle            orientation
    [150, 210]                offshore
    [120, 150) or [210, 240)  cross-offshore
    [60, 120)  or [240, 300)  cross
    [30, 60)   or [300, 330)  cross-onshore
    otherwise                 onshore
"""

from __future__ import annotations

from typing import Optional

from swellmind.taxonomy.conditions import WindOrientation


def relative_wind_angle(wind_direction: float, beach_orientation: float) -> float:
    """Angle between wind source and beach facing, in [0, 360)."""
    return (wind_direction - beach_orientation + 360.0) % 360.0


def calculate_wind_orientation(
    wind_direction: Optional[float],
    beach_orientation: float,
) -> Optional[WindOrientation]:
    """Classify wind relative to the beach.

    Args:
        wind_direction:    Direction the wind blows from, in degrees, or ``None``.
        beach_orientation: Direction the beach faces, in degrees.

    Returns:
        The ``WindOrientation``, or ``None`` when the wind direction is unknown.
    """
    if wind_direction is None:
        return None

    angle = relative_wind_angle(wind_direction, beach_orientation)

    if 150.0 <= angle <= 210.0:
        return WindOrientation.OFFSHORE
    if 120.0 <= angle < 150.0 or 210.0 < angle < 240.0:
        return WindOrientation.CROSS_OFFSHORE
    if 60.0 <= angle < 120.0 or 240.0 <= angle < 300.0:
        return WindOrientation.CROSS
    if 30.0 <= angle < 60.0 or 300.0 <= angle < 330.0:
        return WindOrientation.CROSS_ONSHORE
    return WindOrientation.ONSHORE
