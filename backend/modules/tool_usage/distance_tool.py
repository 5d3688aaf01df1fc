"""
modules/tool_usage/distance_tool.py
-------------------------------------
Great-circle distance tool using the Haversine formula with a fixed average
road speed.  No external HTTP calls are made and no road network is consulted.

Config knobs (config.py):
  EARTH_RADIUS_KM   -- sphere radius for Haversine (6371)
  AVERAGE_SPEED_KMH -- speed used for every duration estimate (default: 80)
"""

from __future__ import annotations
import math

import config

# ---------------------------------------------------------------------------
# Pure maths
# ---------------------------------------------------------------------------


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two points (Haversine formula) in km."""
    r = config.EARTH_RADIUS_KM
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lam = math.radians(lon2 - lon1)
    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lam / 2) ** 2
    )
    return 2 * r * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def round_half_up(value: float) -> int:
    """Round .5 away from zero for non-negative values (not banker's rounding)."""
    return int(math.floor(value + 0.5))


def _km_to_minutes(km: float, speed_kmh: float) -> float:
    """Straight-line km to minutes at a given speed."""
    return (km / speed_kmh) * 60.0


# ---------------------------------------------------------------------------
# DistanceTool
# ---------------------------------------------------------------------------


class DistanceTool:
    """
    Computes whole-kilometre distances and whole-minute durations between
    lat/lon points.  Duration is always derived from the rounded distance so
    that ``duration == round(distance / speed * 60)`` holds exactly.
    """

    def __init__(self, speed_kmh: float | None = None) -> None:
        self.speed_kmh: float = speed_kmh or config.AVERAGE_SPEED_KMH

    def distance_km(self, lat1: float, lon1: float, lat2: float, lon2: float) -> int:
        """Great-circle distance rounded to the nearest km."""
        if lat1 == lat2 and lon1 == lon2:
            return 0
        return round_half_up(haversine_km(lat1, lon1, lat2, lon2))

    def duration_minutes(self, distance_km: int) -> int:
        """Estimated minutes to cover *distance_km* at the configured speed."""
        return round_half_up(_km_to_minutes(distance_km, self.speed_kmh))

    def measure(
        self,
        lat1: float,
        lon1: float,
        lat2: float,
        lon2: float,
    ) -> tuple[int, int]:
        """Return ``(distance_km, duration_minutes)`` between two points."""
        km = self.distance_km(lat1, lon1, lat2, lon2)
        return km, self.duration_minutes(km)
