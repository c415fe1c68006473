"""
Trip Pricing Policy
===================

Formula
-------
Price_DA  = round(Base_Fare + Distance x Rate_Per_KM)
Duration  = round(Distance / Average_Speed x 60)          (minutes)

Defaults: base fare 100 DA, 50 DA per km, 20 km/h average speed for a
motorcycle in urban traffic.  Both functions are pure in ``distance_km``
and monotonically non-decreasing.

Complexity: O(1) per quote.
"""

from __future__ import annotations

from dataclasses import dataclass

from .distance import round_half_up, round_km
from .errors import OutOfRange


@dataclass(frozen=True)
class TripQuote:
    distance_km: float
    estimated_duration_minutes: int
    price_da: int


class PricingPolicy:
    """Linear distance-based fare used when a trip is created."""

    def __init__(
        self,
        base_fare_da: float = 100.0,
        rate_per_km_da: float = 50.0,
        average_speed_kmh: float = 20.0,
    ):
        if average_speed_kmh <= 0:
            raise ValueError("average_speed_kmh must be positive")
        self.base_fare_da = base_fare_da
        self.rate_per_km_da = rate_per_km_da
        self.average_speed_kmh = average_speed_kmh

    @staticmethod
    def _check(distance_km: float) -> None:
        if distance_km < 0:
            raise OutOfRange(f"Distance cannot be negative: {distance_km}")

    def price_da(self, distance_km: float) -> int:
        self._check(distance_km)
        return int(
            round_half_up(self.base_fare_da + distance_km * self.rate_per_km_da)
        )

    def estimated_duration_minutes(self, distance_km: float) -> int:
        self._check(distance_km)
        return int(round_half_up(distance_km / self.average_speed_kmh * 60))

    def quote(self, distance_km: float) -> TripQuote:
        """Price and duration from the unrounded distance; distance is then
        reported with two decimals."""
        return TripQuote(
            distance_km=round_km(distance_km),
            estimated_duration_minutes=self.estimated_duration_minutes(distance_km),
            price_da=self.price_da(distance_km),
        )
