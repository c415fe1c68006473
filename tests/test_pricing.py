"""Unit tests for the trip pricing policy."""

import pytest

from src.domain.errors import OutOfRange
from src.domain.pricing import PricingPolicy


class TestPricingPolicy:
    def setup_method(self):
        self.policy = PricingPolicy(
            base_fare_da=100.0, rate_per_km_da=50.0, average_speed_kmh=20.0
        )

    def test_zero_distance_is_base_fare(self):
        assert self.policy.price_da(0) == 100

    def test_ten_km(self):
        assert self.policy.price_da(10) == 600  # 100 + 10*50

    def test_price_rounds_half_up(self):
        assert self.policy.price_da(0.01) == 101  # 100.5 -> 101

    def test_price_monotonic(self):
        prices = [self.policy.price_da(d / 10) for d in range(0, 500)]
        assert prices == sorted(prices)

    def test_duration(self):
        assert self.policy.estimated_duration_minutes(0) == 0
        assert self.policy.estimated_duration_minutes(10) == 30  # 10 km @ 20 km/h
        assert self.policy.estimated_duration_minutes(5.5) == 17  # 16.5 -> 17

    def test_negative_distance_rejected(self):
        with pytest.raises(OutOfRange):
            self.policy.price_da(-1)

    def test_quote_uses_unrounded_distance(self):
        quote = self.policy.quote(3.337)
        assert quote.distance_km == 3.34
        assert quote.price_da == 267  # round(100 + 166.85)
        assert quote.estimated_duration_minutes == 10  # round(10.011)

    def test_speed_must_be_positive(self):
        with pytest.raises(ValueError):
            PricingPolicy(average_speed_kmh=0)
