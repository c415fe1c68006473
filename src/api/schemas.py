"""Pydantic request / response schemas for the REST API."""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional

from pydantic import BaseModel, Field, model_validator

from src.domain.entities import (
    Coordinate,
    Place,
    Promotion,
    PromotionRule,
    Rating,
    RiderProfile,
    Trip,
)
from src.domain.enums import RuleKind, TripStatus
from src.domain.lifecycle import MAX_RATING, MIN_RATING
from src.domain.promotions import Discount, Eligibility
from src.domain.riders import MAX_RADIUS_KM, MIN_RADIUS_KM, RankedRider


# ── Shared ────────────────────────────────────────────────────────────


class CoordinateSchema(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)

    def to_domain(self) -> Coordinate:
        return Coordinate(self.latitude, self.longitude)

    @classmethod
    def from_domain(cls, c: Coordinate) -> "CoordinateSchema":
        return cls(latitude=c.latitude, longitude=c.longitude)


# ── Requests ──────────────────────────────────────────────────────────


class TripCreateRequest(BaseModel):
    pickup_location: CoordinateSchema
    pickup_address: str = Field(..., min_length=1, max_length=255)
    destination_location: CoordinateSchema
    destination_address: str = Field(..., min_length=1, max_length=255)
    rider_id: Optional[int] = Field(None, gt=0)

    def pickup(self) -> Place:
        return Place(self.pickup_location.to_domain(), self.pickup_address)

    def destination(self) -> Place:
        return Place(self.destination_location.to_domain(), self.destination_address)


class TripStatusUpdateRequest(BaseModel):
    status: TripStatus


class RatingCreateRequest(BaseModel):
    rating: int = Field(..., ge=MIN_RATING, le=MAX_RATING)
    comment: Optional[str] = Field(None, max_length=500)


class PromotionApplyRequest(BaseModel):
    # Positivity is a domain rule (InvalidTripPrice), not a schema one
    trip_price: float = Field(..., allow_inf_nan=False)


class PromotionCreateRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=120)
    description: Optional[str] = None
    discount_percentage: Optional[float] = Field(None, ge=0, le=100)
    discount_amount: Optional[float] = Field(None, ge=0)
    valid_from: datetime
    valid_until: datetime
    is_active: bool = True
    rule_kind: Optional[RuleKind] = None
    min_completed_trips: Optional[int] = Field(None, ge=1)

    @model_validator(mode="after")
    def _rule_parameters(self) -> "PromotionCreateRequest":
        if (
            self.rule_kind is RuleKind.MIN_COMPLETED_TRIPS
            and self.min_completed_trips is None
        ):
            raise ValueError("min_completed_trips is required for this rule")
        return self

    def to_domain(self) -> Promotion:
        rule = None
        if self.rule_kind is not None:
            rule = PromotionRule(self.rule_kind, self.min_completed_trips or 0)
        return Promotion(
            title=self.title,
            description=self.description,
            discount_percentage=self.discount_percentage,
            discount_amount=self.discount_amount,
            valid_from=self.valid_from,
            valid_until=self.valid_until,
            is_active=self.is_active,
            rule=rule,
        )


# ── Responses ─────────────────────────────────────────────────────────


class RiderResponse(BaseModel):
    id: int
    display_name: str
    phone: str
    rating_average: float
    current_location: Optional[CoordinateSchema] = None
    status: str
    vehicle_type: str
    license_plate: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, rider: RiderProfile) -> "RiderResponse":
        return cls(
            id=rider.id,
            display_name=rider.display_name,
            phone=rider.phone,
            rating_average=rider.rating_average,
            current_location=(
                CoordinateSchema.from_domain(rider.current_location)
                if rider.current_location
                else None
            ),
            status=rider.status.value,
            vehicle_type=rider.vehicle_type,
            license_plate=rider.license_plate,
            created_at=rider.created_at,
        )


class NearbyRiderResponse(RiderResponse):
    distance_km: float
    location_known: bool = True

    @classmethod
    def from_ranked(cls, ranked: RankedRider) -> "NearbyRiderResponse":
        base = RiderResponse.from_entity(ranked.rider).model_dump()
        base["current_location"] = CoordinateSchema.from_domain(ranked.location)
        return cls(
            **base,
            distance_km=ranked.distance_km,
            location_known=ranked.location_known,
        )


class NearbyRidersResponse(BaseModel):
    riders: list[NearbyRiderResponse]
    count: int
    search_radius: float = Field(..., ge=MIN_RADIUS_KM, le=MAX_RADIUS_KM)
    user_location: CoordinateSchema


class TripRiderSummary(BaseModel):
    name: str
    rating: float
    phone: str
    vehicle_type: str
    license_plate: Optional[str] = None


class TripResponse(BaseModel):
    id: int
    user_id: int
    rider_id: Optional[int] = None
    pickup_location: CoordinateSchema
    pickup_address: str
    destination_location: CoordinateSchema
    destination_address: str
    distance_km: float
    estimated_duration_minutes: int
    price_da: int
    status: TripStatus
    requested_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    rider: Optional[TripRiderSummary] = None

    @classmethod
    def from_entity(
        cls, trip: Trip, rider: Optional[RiderProfile] = None
    ) -> "TripResponse":
        return cls(
            id=trip.id,
            user_id=trip.user_id,
            rider_id=trip.rider_id,
            pickup_location=CoordinateSchema.from_domain(trip.pickup.location),
            pickup_address=trip.pickup.address,
            destination_location=CoordinateSchema.from_domain(
                trip.destination.location
            ),
            destination_address=trip.destination.address,
            distance_km=trip.distance_km,
            estimated_duration_minutes=trip.estimated_duration_minutes,
            price_da=trip.price_da,
            status=trip.status,
            requested_at=trip.requested_at,
            started_at=trip.started_at,
            completed_at=trip.completed_at,
            rider=(
                TripRiderSummary(
                    name=rider.display_name,
                    rating=rider.rating_average,
                    phone=rider.phone,
                    vehicle_type=rider.vehicle_type,
                    license_plate=rider.license_plate,
                )
                if rider
                else None
            ),
        )


class TripListResponse(BaseModel):
    trips: list[TripResponse]
    count: int


class TripStatusResponse(BaseModel):
    id: int
    status: TripStatus
    updated_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, trip: Trip) -> "TripStatusResponse":
        return cls(
            id=trip.id,
            status=trip.status,
            updated_at=trip.updated_at,
            started_at=trip.started_at,
            completed_at=trip.completed_at,
        )


class RatingResponse(BaseModel):
    id: Optional[int] = None
    trip_id: int
    rider_id: int
    rating: int
    comment: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, rating: Rating) -> "RatingResponse":
        return cls(
            id=rating.id,
            trip_id=rating.trip_id,
            rider_id=rating.rider_id,
            rating=rating.rating,
            comment=rating.comment,
            created_at=rating.created_at,
        )


class RiderRatingsResponse(BaseModel):
    ratings: list[RatingResponse]
    average_rating: float
    total_ratings: int


class PromotionRuleSchema(BaseModel):
    kind: RuleKind
    min_completed_trips: Optional[int] = None

    @classmethod
    def from_domain(cls, rule: PromotionRule) -> "PromotionRuleSchema":
        return cls(
            kind=rule.kind,
            min_completed_trips=(
                rule.min_completed_trips
                if rule.kind is RuleKind.MIN_COMPLETED_TRIPS
                else None
            ),
        )


class PromotionResponse(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    discount_percentage: Optional[float] = None
    discount_amount: Optional[float] = None
    valid_from: Optional[datetime] = None
    valid_until: Optional[datetime] = None
    is_active: bool
    # All must pass for a user to be eligible
    rules: list[PromotionRuleSchema]
    created_at: Optional[datetime] = None

    @classmethod
    def from_entity(
        cls, promotion: Promotion, rules: Iterable[PromotionRule]
    ) -> "PromotionResponse":
        return cls(
            id=promotion.id,
            title=promotion.title,
            description=promotion.description,
            discount_percentage=promotion.discount_percentage,
            discount_amount=promotion.discount_amount,
            valid_from=promotion.valid_from,
            valid_until=promotion.valid_until,
            is_active=promotion.is_active,
            rules=[PromotionRuleSchema.from_domain(r) for r in rules],
            created_at=promotion.created_at,
        )


class PromotionListResponse(BaseModel):
    promotions: list[PromotionResponse]
    count: int


class EligibilityResponse(BaseModel):
    eligible: bool
    reason: str
    promotion_id: int
    promotion_title: str

    @classmethod
    def from_result(
        cls, promotion: Promotion, result: Eligibility
    ) -> "EligibilityResponse":
        return cls(
            eligible=result.eligible,
            reason=result.reason,
            promotion_id=promotion.id,
            promotion_title=promotion.title,
        )


class DiscountResponse(BaseModel):
    promotion_id: int
    promotion_title: str
    original_price: float
    discount_amount: float
    final_price: float
    savings: float

    @classmethod
    def from_result(
        cls, promotion: Promotion, discount: Discount
    ) -> "DiscountResponse":
        return cls(
            promotion_id=promotion.id,
            promotion_title=promotion.title,
            original_price=discount.original_price,
            discount_amount=discount.discount_amount,
            final_price=discount.final_price,
            savings=discount.savings,
        )


class HealthResponse(BaseModel):
    status: str = "ok"
