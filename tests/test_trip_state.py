"""Unit tests for the trip lifecycle (State Pattern) and trip creation."""

from datetime import datetime, timedelta, timezone

import pytest

from src.domain.entities import Coordinate, Place, Trip
from src.domain.enums import TripStatus
from src.domain.errors import InvalidTransition, OutOfRange
from src.domain.lifecycle import TripLifecycle

NOW = datetime(2026, 10, 17, 8, 30, tzinfo=timezone.utc)
GRANDE_POSTE = Place(Coordinate(36.7731, 3.0595), "Grande Poste")
BAB_EZZOUAR = Place(Coordinate(36.7213, 3.1836), "USTHB")


@pytest.fixture
def lifecycle():
    return TripLifecycle()


class TestCreate:
    def test_new_trip_is_pending_and_priced(self, lifecycle):
        trip = lifecycle.create(GRANDE_POSTE, BAB_EZZOUAR, user_id=4, now=NOW)
        assert trip.status == TripStatus.PENDING
        assert trip.requested_at == NOW
        assert trip.rider_id is None
        assert trip.distance_km == round(trip.distance_km, 2)
        assert 10 < trip.distance_km < 15
        assert abs(trip.price_da - (100 + trip.distance_km * 50)) <= 1
        assert abs(trip.estimated_duration_minutes - trip.distance_km * 3) <= 1
        assert trip.started_at is None and trip.completed_at is None

    def test_same_pickup_and_destination(self, lifecycle):
        trip = lifecycle.create(GRANDE_POSTE, GRANDE_POSTE, user_id=1, now=NOW)
        assert trip.distance_km == 0
        assert trip.price_da == 100
        assert trip.estimated_duration_minutes == 0

    def test_out_of_range_pickup(self, lifecycle):
        bad = Place(Coordinate(91, 3.0), "nowhere")
        with pytest.raises(OutOfRange):
            lifecycle.create(bad, BAB_EZZOUAR, user_id=1, now=NOW)


class TestTransitions:
    def test_full_happy_path(self, lifecycle):
        trip = lifecycle.create(GRANDE_POSTE, BAB_EZZOUAR, user_id=1, rider_id=9, now=NOW)
        lifecycle.transition(trip, TripStatus.ACCEPTED, now=NOW + timedelta(minutes=1))
        assert trip.started_at is None

        started = NOW + timedelta(minutes=5)
        lifecycle.transition(trip, TripStatus.IN_PROGRESS, now=started)
        assert trip.started_at == started

        done = NOW + timedelta(minutes=40)
        lifecycle.transition(trip, "completed", now=done)
        assert trip.status == TripStatus.COMPLETED
        assert trip.completed_at == done
        assert trip.updated_at == done

    @pytest.mark.parametrize(
        "start,target",
        [
            (TripStatus.PENDING, TripStatus.COMPLETED),
            (TripStatus.PENDING, TripStatus.IN_PROGRESS),
            (TripStatus.ACCEPTED, TripStatus.COMPLETED),
            (TripStatus.ACCEPTED, TripStatus.PENDING),
            (TripStatus.IN_PROGRESS, TripStatus.ACCEPTED),
            (TripStatus.COMPLETED, TripStatus.PENDING),
            (TripStatus.CANCELLED, TripStatus.PENDING),
        ],
    )
    def test_illegal_moves_fail(self, lifecycle, start, target):
        trip = Trip(status=start)
        with pytest.raises(InvalidTransition):
            lifecycle.transition(trip, target, now=NOW)
        assert trip.status == start

    @pytest.mark.parametrize("status", list(TripStatus))
    def test_no_self_loops(self, lifecycle, status):
        with pytest.raises(InvalidTransition):
            lifecycle.transition(Trip(status=status), status, now=NOW)

    def test_failed_transition_leaves_trip_untouched(self, lifecycle):
        trip = Trip(status=TripStatus.PENDING, updated_at=NOW)
        before = trip.copy()
        with pytest.raises(InvalidTransition):
            lifecycle.transition(trip, TripStatus.COMPLETED, now=NOW + timedelta(hours=1))
        assert trip == before

    def test_unknown_status_string(self, lifecycle):
        with pytest.raises(InvalidTransition, match="Status must be one of"):
            lifecycle.transition(Trip(), "teleported", now=NOW)


class TestCancel:
    @pytest.mark.parametrize(
        "status",
        [TripStatus.PENDING, TripStatus.ACCEPTED, TripStatus.IN_PROGRESS],
    )
    def test_cancel_from_non_terminal(self, lifecycle, status):
        trip = Trip(status=status)
        lifecycle.cancel(trip, now=NOW)
        assert trip.status == TripStatus.CANCELLED

    @pytest.mark.parametrize("status", [TripStatus.COMPLETED, TripStatus.CANCELLED])
    def test_cancel_from_terminal_fails(self, lifecycle, status):
        with pytest.raises(InvalidTransition):
            lifecycle.cancel(Trip(status=status), now=NOW)

    def test_terminal_flags(self):
        assert Trip(status=TripStatus.COMPLETED).is_terminal
        assert Trip(status=TripStatus.CANCELLED).is_terminal
        assert not Trip(status=TripStatus.IN_PROGRESS).is_terminal
