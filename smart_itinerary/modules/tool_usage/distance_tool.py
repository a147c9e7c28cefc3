"""
modules/tool_usage/distance_tool.py
-------------------------------------
Great-circle distances and straight-line travel times.

The Haversine distance is the engine's only distance metric (roads are
ignored).  A missing coordinate on either side yields distance 0.0 so that
incomplete research data never fails the pipeline.

Config knob (config.py):
  BIN_PACKING_SPEED_KMH -- average speed for the bin-packing travel matrix (25)
"""

from __future__ import annotations
import math
import logging
from typing import Optional, Sequence

from smart_itinerary import config
from smart_itinerary.schemas.knowledge import Coords

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Pure maths
# ---------------------------------------------------------------------------

_EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two points (Haversine formula) in km."""
    r = _EARTH_RADIUS_KM
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lam = math.radians(lon2 - lon1)
    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lam / 2) ** 2
    )
    return 2 * r * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def coords_distance_km(a: Optional[Coords], b: Optional[Coords]) -> float:
    """Haversine km between two optional coordinates (0.0 if either is missing)."""
    if a is None or b is None:
        return 0.0
    return haversine_km(a.lat, a.lng, b.lat, b.lng)


def place_distance_km(a, b) -> float:
    """Distance between two objects exposing a `.coordinates` attribute."""
    return coords_distance_km(a.coordinates, b.coordinates)


def km_to_minutes(km: float, speed_kmh: float) -> int:
    """Straight-line km to whole minutes at a given speed (rounded up)."""
    if km <= 0 or speed_kmh <= 0:
        return 0
    return math.ceil((km / speed_kmh) * 60.0)


def centroid(points: Sequence[Optional[Coords]]) -> Optional[Coords]:
    """Arithmetic mean of the known coordinates, None when there are none."""
    known = [p for p in points if p is not None]
    if not known:
        return None
    return Coords(
        lat=sum(p.lat for p in known) / len(known),
        lng=sum(p.lng for p in known) / len(known),
    )


# ---------------------------------------------------------------------------
# DistanceTool
# ---------------------------------------------------------------------------


class DistanceTool:
    """
    Computes travel times between coordinates using the Haversine formula
    plus a fixed average speed (config.BIN_PACKING_SPEED_KMH by default).
    """

    def __init__(self, speed_kmh: float | None = None) -> None:
        self.speed_kmh: float = speed_kmh or config.BIN_PACKING_SPEED_KMH

    def travel_time_minutes(self, a: Optional[Coords], b: Optional[Coords]) -> int:
        """Travel minutes between two points (0 when either point is unknown)."""
        return km_to_minutes(coords_distance_km(a, b), self.speed_kmh)

    def travel_time_matrix(self, coords: Sequence[Optional[Coords]]) -> list[list[int]]:
        """Return a full n x n travel-time matrix [minutes]."""
        n = len(coords)
        matrix = [[0] * n for _ in range(n)]
        for i in range(n):
            for j in range(i + 1, n):
                minutes = self.travel_time_minutes(coords[i], coords[j])
                matrix[i][j] = minutes
                matrix[j][i] = minutes
        missing = sum(1 for c in coords if c is None)
        if missing:
            logger.debug("[distance] %d of %d points lack coordinates; treated as distance 0", missing, n)
        return matrix
