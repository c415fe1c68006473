"""
Distance calculation using the Haversine formula.

Assumption
----------
Trip distance is the great-circle (Haversine) distance between pickup and
destination, not a road distance.  Road routing belongs to the external
mapping service and is never called from the engine.

Complexity: O(1) per call.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .entities import Coordinate

EARTH_RADIUS_KM = 6_371.0


def haversine_km(a: Coordinate, b: Coordinate) -> float:
    """Return the great-circle distance in **km** between two points."""
    lat1_r, lat2_r = math.radians(a.latitude), math.radians(b.latitude)
    dlat = math.radians(b.latitude - a.latitude)
    dlng = math.radians(b.longitude - a.longitude)

    h = (
        math.sin(dlat / 2) ** 2
        + math.cos(lat1_r) * math.cos(lat2_r) * math.sin(dlng / 2) ** 2
    )
    h = min(1.0, h)
    return 2 * EARTH_RADIUS_KM * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round like JavaScript's ``Math.round`` (halves go up, not to even)."""
    factor = 10 ** ndigits
    return math.floor(value * factor + 0.5) / factor


def round_km(distance_km: float) -> float:
    """Distances are reported with two decimals."""
    return round_half_up(distance_km, 2)
