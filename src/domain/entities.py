"""
Domain entities with business logic.

Patterns used
-------------
- **State Pattern** on ``Trip``: enforces valid lifecycle transitions
  (PENDING -> ACCEPTED -> IN_PROGRESS -> COMPLETED, CANCELLED from any
  non-terminal state) and stamps the matching timestamps.
- ``Coordinate`` is an immutable value object; range checks live on it so
  every entry point fails the same way.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Optional

from .enums import (
    TERMINAL_STATUSES,
    TRIP_TRANSITIONS,
    RiderStatus,
    RuleKind,
    TripStatus,
)
from .errors import InvalidTransition, OutOfRange


# ── Value Objects ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class Coordinate:
    latitude: float
    longitude: float

    @property
    def in_domain(self) -> bool:
        return (
            math.isfinite(self.latitude)
            and math.isfinite(self.longitude)
            and -90 <= self.latitude <= 90
            and -180 <= self.longitude <= 180
        )

    def validate(self, label: str = "coordinate") -> "Coordinate":
        if not self.in_domain:
            raise OutOfRange(
                f"Invalid {label}: ({self.latitude}, {self.longitude})"
            )
        return self


@dataclass(frozen=True)
class Place:
    """A point plus the human-entered address the passenger typed."""

    location: Coordinate
    address: str = ""


@dataclass(frozen=True)
class PromotionRule:
    """Tagged eligibility rule: ``kind`` plus its parameter, if any."""

    kind: RuleKind = RuleKind.UNCONDITIONAL
    min_completed_trips: int = 0

    @classmethod
    def unconditional(cls) -> "PromotionRule":
        return cls(RuleKind.UNCONDITIONAL)

    @classmethod
    def first_ride_only(cls) -> "PromotionRule":
        return cls(RuleKind.FIRST_RIDE_ONLY)

    @classmethod
    def min_completed(cls, n: int) -> "PromotionRule":
        return cls(RuleKind.MIN_COMPLETED_TRIPS, n)


@dataclass(frozen=True)
class TripSummary:
    """The slice of a user's trip history promotions look at."""

    id: Optional[int]
    status: TripStatus


# ── Entities ──────────────────────────────────────────────────────────


@dataclass
class RiderProfile:
    id: Optional[int] = None
    display_name: str = ""
    phone: str = ""
    rating_average: float = 4.5
    current_location: Optional[Coordinate] = None
    status: RiderStatus = RiderStatus.OFFLINE
    vehicle_type: str = "motorcycle"
    license_plate: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass
class Trip:
    id: Optional[int] = None
    user_id: int = 0
    rider_id: Optional[int] = None
    pickup: Place = field(default_factory=lambda: Place(Coordinate(0, 0)))
    destination: Place = field(default_factory=lambda: Place(Coordinate(0, 0)))
    distance_km: float = 0.0
    estimated_duration_minutes: int = 0
    price_da: int = 0
    status: TripStatus = TripStatus.PENDING
    requested_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def can_transition_to(self, new_status: TripStatus) -> bool:
        return new_status in TRIP_TRANSITIONS.get(self.status, set())

    def transition_to(self, new_status: TripStatus, now: datetime) -> None:
        """Move to *new_status* if the transition is legal, else raise."""
        if not self.can_transition_to(new_status):
            raise InvalidTransition(
                f"Cannot transition from {self.status.value} to {new_status.value}"
            )
        self.status = new_status
        self.updated_at = now
        if new_status is TripStatus.IN_PROGRESS:
            self.started_at = now
        elif new_status is TripStatus.COMPLETED:
            self.completed_at = now

    def copy(self) -> "Trip":
        return replace(self)


@dataclass
class Promotion:
    id: Optional[int] = None
    title: str = ""
    description: Optional[str] = None
    discount_percentage: Optional[float] = None
    discount_amount: Optional[float] = None
    valid_from: Optional[datetime] = None
    valid_until: Optional[datetime] = None
    is_active: bool = True
    rule: Optional[PromotionRule] = None
    created_at: Optional[datetime] = None


@dataclass
class Rating:
    trip_id: int
    user_id: int
    rider_id: int
    rating: int
    comment: Optional[str] = None
    created_at: Optional[datetime] = None
    id: Optional[int] = None
