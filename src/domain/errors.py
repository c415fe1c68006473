"""
Domain errors.

Every error is a rejected operation: the entity it was raised for keeps its
prior state.  ``code`` is transport-agnostic; the API layer maps it to an
HTTP status.
"""


class DomainError(Exception):
    """Base class for all engine errors."""

    code = "domain_error"

    def __init__(self, message: str = ""):
        super().__init__(message or self.__class__.__doc__ or self.code)
        self.message = str(self)


class InvalidTransition(DomainError):
    """Raised when a trip status change violates the lifecycle graph."""

    code = "invalid_transition"


class TripNotCompleted(DomainError):
    """Only completed trips can be rated."""

    code = "trip_not_completed"


class TripBusy(DomainError):
    """Another transition for this trip is in flight."""

    code = "trip_busy"


class InvalidTripPrice(DomainError):
    """Trip price must be a positive number."""

    code = "invalid_trip_price"


class PromotionExpired(DomainError):
    """The promotion is outside its validity window."""

    code = "promotion_expired"


class PromotionInactive(DomainError):
    """The promotion has been deactivated."""

    code = "promotion_inactive"


class InvalidPromotion(DomainError):
    """The promotion definition is inconsistent."""

    code = "invalid_promotion"


class RiderNotFound(DomainError):
    """The specified rider does not exist."""

    code = "rider_not_found"


class TripNotFound(DomainError):
    """The specified trip does not exist."""

    code = "trip_not_found"


class PromotionNotFound(DomainError):
    """The specified promotion does not exist."""

    code = "promotion_not_found"


class OutOfRange(DomainError):
    """A coordinate, radius or rating value is outside its domain."""

    code = "out_of_range"


class DuplicateRating(DomainError):
    """This trip has already been rated."""

    code = "duplicate_rating"
