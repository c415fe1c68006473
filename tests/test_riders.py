"""Unit tests for the nearby-rider search."""

import pytest

from src.domain.entities import Coordinate, RiderProfile
from src.domain.enums import RiderStatus, UnknownLocationPolicy
from src.domain.errors import OutOfRange
from src.domain.riders import nearby

ORIGIN = Coordinate(36.0, 3.0)
DEG_PER_KM = 0.0089932  # along a meridian
LAKHDARIA = Coordinate(36.5644, 3.5892)


def _rider(rider_id, km_north=None):
    location = (
        Coordinate(ORIGIN.latitude + km_north * DEG_PER_KM, ORIGIN.longitude)
        if km_north is not None
        else None
    )
    return RiderProfile(
        id=rider_id,
        display_name=f"Rider {rider_id}",
        current_location=location,
        status=RiderStatus.ONLINE,
    )


class TestNearby:
    def test_filters_and_sorts_by_distance(self):
        pool = [_rider(1, 60), _rider(2, 10), _rider(3, 2)]
        result = nearby(ORIGIN, pool, 50)
        assert [r.rider.id for r in result] == [3, 2]
        assert result[0].distance_km == pytest.approx(2.0, abs=0.01)
        assert result[1].distance_km == pytest.approx(10.0, abs=0.01)

    def test_empty_pool(self):
        assert nearby(ORIGIN, [], 50) == []

    def test_default_radius_is_fifty(self):
        pool = [_rider(1, 49), _rider(2, 51)]
        assert [r.rider.id for r in nearby(ORIGIN, pool)] == [1]

    def test_never_exceeds_radius(self):
        pool = [_rider(i, i * 1.5) for i in range(1, 40)]
        for radius in (1, 5, 17.5, 42):
            assert all(r.distance_km <= radius for r in nearby(ORIGIN, pool, radius))

    def test_ties_keep_pool_order(self):
        pool = [_rider(7, 5), _rider(3, 5), _rider(5, 5)]
        assert [r.rider.id for r in nearby(ORIGIN, pool, 10)] == [7, 3, 5]

    def test_distance_rounded_to_two_decimals(self):
        result = nearby(ORIGIN, [_rider(1, 3.33333)], 10)
        assert result[0].distance_km == round(result[0].distance_km, 2)

    def test_pool_not_mutated(self):
        pool = [_rider(1, 20), _rider(2, 3)]
        snapshot = [(r.id, r.current_location) for r in pool]
        nearby(ORIGIN, pool, 50)
        assert [(r.id, r.current_location) for r in pool] == snapshot

    def test_unknown_location_excluded_by_default(self):
        pool = [_rider(1), _rider(2, 4)]
        result = nearby(ORIGIN, pool, 50)
        assert [r.rider.id for r in result] == [2]
        assert result[0].location_known

    def test_unknown_location_fallback_is_flagged_and_deterministic(self):
        origin = Coordinate(36.56, 3.58)
        pool = [_rider(1)]
        first = nearby(
            origin,
            pool,
            50,
            unknown_location=UnknownLocationPolicy.FALLBACK,
            fallback=LAKHDARIA,
        )
        second = nearby(
            origin,
            pool,
            50,
            unknown_location=UnknownLocationPolicy.FALLBACK,
            fallback=LAKHDARIA,
        )
        assert first == second
        assert first[0].location == LAKHDARIA
        assert first[0].location_known is False

    def test_fallback_policy_requires_point(self):
        with pytest.raises(ValueError):
            nearby(ORIGIN, [], 50, unknown_location=UnknownLocationPolicy.FALLBACK)

    @pytest.mark.parametrize("radius", [0.5, 100.5, -3])
    def test_radius_out_of_range(self, radius):
        with pytest.raises(OutOfRange):
            nearby(ORIGIN, [], radius)

    def test_invalid_origin(self):
        with pytest.raises(OutOfRange):
            nearby(Coordinate(95, 3), [], 10)
