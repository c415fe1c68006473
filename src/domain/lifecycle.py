"""
Trip lifecycle operations.

``TripLifecycle`` is the only writer of ``Trip.status``.  Callers hand it a
trip that is already authorised for the acting user and persist the fields
it changed; serialising concurrent transitions on the same trip is the
store's job (see ``src.infrastructure.locks``).

Every temporal operation takes ``now`` explicitly.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional, Union

from .distance import haversine_km, round_half_up
from .entities import Place, Rating, Trip
from .enums import TripStatus
from .errors import InvalidTransition, OutOfRange, RiderNotFound, TripNotCompleted
from .pricing import PricingPolicy

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5


@dataclass(frozen=True)
class RatingSummary:
    average: float
    total: int


class TripLifecycle:
    def __init__(self, pricing: Optional[PricingPolicy] = None):
        self.pricing = pricing or PricingPolicy()

    def create(
        self,
        pickup: Place,
        destination: Place,
        user_id: int,
        rider_id: Optional[int] = None,
        *,
        now: datetime,
    ) -> Trip:
        """Build a new ``pending`` trip with distance, duration and price."""
        pickup.location.validate("pickup location")
        destination.location.validate("destination location")

        quote = self.pricing.quote(
            haversine_km(pickup.location, destination.location)
        )
        trip = Trip(
            user_id=user_id,
            rider_id=rider_id,
            pickup=pickup,
            destination=destination,
            distance_km=quote.distance_km,
            estimated_duration_minutes=quote.estimated_duration_minutes,
            price_da=quote.price_da,
            status=TripStatus.PENDING,
            requested_at=now,
            updated_at=now,
        )
        logger.info(
            "Trip quoted for user %s: %.2f km, %d min, %d DA",
            user_id,
            trip.distance_km,
            trip.estimated_duration_minutes,
            trip.price_da,
        )
        return trip

    def transition(
        self, trip: Trip, new_status: Union[TripStatus, str], *, now: datetime
    ) -> Trip:
        try:
            target = TripStatus(new_status)
        except ValueError:
            raise InvalidTransition(
                "Status must be one of: "
                + ", ".join(s.value for s in TripStatus)
            ) from None

        previous = trip.status
        trip.transition_to(target, now)
        logger.info("Trip %s: %s -> %s", trip.id, previous.value, target.value)
        return trip

    def cancel(self, trip: Trip, *, now: datetime) -> Trip:
        return self.transition(trip, TripStatus.CANCELLED, now=now)

    def rate(
        self,
        trip: Trip,
        rating: int,
        comment: Optional[str] = None,
        *,
        now: datetime,
    ) -> Rating:
        """Create the rating a passenger leaves for a completed trip."""
        if trip.status != TripStatus.COMPLETED:
            raise TripNotCompleted("You can only rate completed trips")
        if (
            isinstance(rating, bool)
            or not isinstance(rating, int)
            or not MIN_RATING <= rating <= MAX_RATING
        ):
            raise OutOfRange(
                f"Rating must be between {MIN_RATING} and {MAX_RATING}"
            )
        if trip.rider_id is None:
            raise RiderNotFound("The trip has no assigned rider")

        logger.info("Trip %s rated %d by user %s", trip.id, rating, trip.user_id)
        return Rating(
            trip_id=trip.id,
            user_id=trip.user_id,
            rider_id=trip.rider_id,
            rating=rating,
            comment=comment or None,
            created_at=now,
        )


def summarize_ratings(ratings: Iterable[Rating]) -> RatingSummary:
    values = [r.rating for r in ratings]
    if not values:
        return RatingSummary(average=0.0, total=0)
    return RatingSummary(
        average=round_half_up(sum(values) / len(values), 1),
        total=len(values),
    )
