"""Domain enumerations and state-transition rules."""

import enum


class TripStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# State machine: maps current status -> set of valid next statuses
TRIP_TRANSITIONS: dict[TripStatus, set[TripStatus]] = {
    TripStatus.PENDING: {TripStatus.ACCEPTED, TripStatus.CANCELLED},
    TripStatus.ACCEPTED: {TripStatus.IN_PROGRESS, TripStatus.CANCELLED},
    TripStatus.IN_PROGRESS: {TripStatus.COMPLETED, TripStatus.CANCELLED},
    TripStatus.COMPLETED: set(),
    TripStatus.CANCELLED: set(),
}

TERMINAL_STATUSES = frozenset(
    status for status, nxt in TRIP_TRANSITIONS.items() if not nxt
)


class RiderStatus(str, enum.Enum):
    ONLINE = "online"
    OFFLINE = "offline"
    BUSY = "busy"


class RuleKind(str, enum.Enum):
    """Eligibility rule attached to a promotion."""

    UNCONDITIONAL = "unconditional"
    FIRST_RIDE_ONLY = "first_ride_only"
    MIN_COMPLETED_TRIPS = "min_completed_trips"


class UnknownLocationPolicy(str, enum.Enum):
    """What the rider locator does with riders that have no known position."""

    EXCLUDE = "exclude"
    FALLBACK = "fallback"
