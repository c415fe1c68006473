"""
Nearby Rider Search
===================

1. **Resolve**  -- each rider's last reported position; riders without one
   are handled by the configured ``UnknownLocationPolicy``.
2. **Measure**  -- Haversine distance from the passenger, rounded to 2 dp.
3. **Filter**   -- keep ``distance_km <= radius_km``.
4. **Rank**     -- ascending distance; ``sorted`` is stable so ties keep
   the order of the pool snapshot.

The pool is a point-in-time snapshot (at most ``rider_pool_limit`` online
riders); staleness between snapshot and dispatch is tolerated.

Complexity: O(P log P) for a pool of P riders.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from .distance import haversine_km, round_km
from .entities import Coordinate, RiderProfile
from .enums import UnknownLocationPolicy
from .errors import OutOfRange

logger = logging.getLogger(__name__)

DEFAULT_RADIUS_KM = 50.0
MIN_RADIUS_KM = 1.0
MAX_RADIUS_KM = 100.0


@dataclass(frozen=True)
class RankedRider:
    rider: RiderProfile
    location: Coordinate
    distance_km: float
    location_known: bool = True


def nearby(
    origin: Coordinate,
    pool: Iterable[RiderProfile],
    radius_km: Optional[float] = None,
    *,
    unknown_location: UnknownLocationPolicy = UnknownLocationPolicy.EXCLUDE,
    fallback: Optional[Coordinate] = None,
) -> list[RankedRider]:
    """Return riders within *radius_km* of *origin*, closest first."""
    origin.validate("origin")
    if radius_km is None:
        radius_km = DEFAULT_RADIUS_KM
    if not MIN_RADIUS_KM <= radius_km <= MAX_RADIUS_KM:
        raise OutOfRange(
            f"Radius must be between {MIN_RADIUS_KM:g} and {MAX_RADIUS_KM:g} km"
        )
    if unknown_location is UnknownLocationPolicy.FALLBACK and fallback is None:
        raise ValueError("FALLBACK policy needs a fallback coordinate")

    ranked: list[RankedRider] = []
    for rider in pool:
        location = rider.current_location
        known = location is not None and location.in_domain
        if not known:
            if unknown_location is UnknownLocationPolicy.EXCLUDE:
                logger.warning("Rider %s has no known location; skipped", rider.id)
                continue
            location = fallback

        distance = round_km(haversine_km(origin, location))
        if distance <= radius_km:
            ranked.append(RankedRider(rider, location, distance, known))

    ranked.sort(key=lambda r: r.distance_km)
    return ranked
