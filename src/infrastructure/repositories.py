"""
Repository Pattern -- abstracts DB access so domain logic stays DB-agnostic.

Each repository receives an ``AsyncSession`` (unit-of-work), exposes
domain-relevant queries only and returns domain entities, never ORM rows.
Missing rows surface as the matching ``*NotFound`` domain error.

Geometry columns are written as WKT (``WKTElement``) and read back with
``ST_AsText``; both directions go through ``src.domain.location``.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, Optional

from geoalchemy2 import WKTElement
from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from .models import PromotionModel, RatingModel, RiderModel, TripModel
from src.config import settings
from src.domain.entities import (
    Coordinate,
    Place,
    Promotion,
    PromotionRule,
    Rating,
    RiderProfile,
    Trip,
    TripSummary,
)
from src.domain.enums import RiderStatus, RuleKind, TripStatus
from src.domain.errors import (
    DuplicateRating,
    PromotionNotFound,
    RiderNotFound,
    TripNotFound,
)
from src.domain.location import decode_point, encode_point
from src.domain.promotions import validate_promotion


def _aware(value: Optional[datetime]) -> Optional[datetime]:
    """Backends without timezone support hand back naive UTC datetimes."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class _GeometryRepository:
    """Point (de)serialisation shared by repositories with geometry columns."""

    def __init__(self, session: AsyncSession):
        self.session = session

    @staticmethod
    def _point_value(c: Coordinate):
        return WKTElement(encode_point(c), srid=4326)

    @staticmethod
    def _point_text(column):
        return func.ST_AsText(column)


class RiderRepository(_GeometryRepository):
    model = RiderModel

    def _select(self):
        return select(
            self.model,
            self._point_text(self.model.current_location).label("location_wkt"),
        )

    @staticmethod
    def _to_entity(row, location_wkt: Optional[str]) -> RiderProfile:
        return RiderProfile(
            id=row.id,
            display_name=row.display_name,
            phone=row.phone,
            rating_average=row.rating_average or 4.5,
            current_location=decode_point(location_wkt),
            status=RiderStatus(row.status),
            vehicle_type=row.vehicle_type or "motorcycle",
            license_plate=row.license_plate,
            created_at=_aware(row.created_at),
        )

    async def get_online(self, limit: int) -> list[RiderProfile]:
        """Point-in-time snapshot of online riders, capped at *limit*."""
        result = await self.session.execute(
            self._select()
            .where(self.model.status == RiderStatus.ONLINE)
            .order_by(self.model.id)
            .limit(limit)
        )
        return [self._to_entity(r, wkt) for r, wkt in result.all()]

    async def get_by_id(self, rider_id: int) -> RiderProfile:
        result = await self.session.execute(
            self._select().where(self.model.id == rider_id)
        )
        row = result.first()
        if row is None:
            raise RiderNotFound()
        return self._to_entity(row[0], row[1])

    async def get_many(self, rider_ids: Iterable[int]) -> dict[int, RiderProfile]:
        ids = {i for i in rider_ids if i is not None}
        if not ids:
            return {}
        result = await self.session.execute(
            self._select().where(self.model.id.in_(ids))
        )
        return {r.id: self._to_entity(r, wkt) for r, wkt in result.all()}

    async def update_location(self, rider_id: int, location: Coordinate) -> None:
        result = await self.session.execute(
            update(self.model)
            .where(self.model.id == rider_id)
            .values(current_location=self._point_value(location.validate()))
        )
        if result.rowcount == 0:
            raise RiderNotFound()


class TripRepository(_GeometryRepository):
    model = TripModel

    def _select(self):
        return select(
            self.model,
            self._point_text(self.model.pickup_location).label("pickup_wkt"),
            self._point_text(self.model.destination_location).label(
                "destination_wkt"
            ),
        )

    @staticmethod
    def _to_entity(row, pickup_wkt, destination_wkt) -> Trip:
        fallback = settings.default_center
        return Trip(
            id=row.id,
            user_id=row.user_id,
            rider_id=row.rider_id,
            pickup=Place(decode_point(pickup_wkt) or fallback, row.pickup_address),
            destination=Place(
                decode_point(destination_wkt) or fallback, row.destination_address
            ),
            distance_km=row.distance_km,
            estimated_duration_minutes=row.estimated_duration_minutes,
            price_da=row.price_da,
            status=TripStatus(row.status),
            requested_at=_aware(row.requested_at),
            started_at=_aware(row.started_at),
            completed_at=_aware(row.completed_at),
            updated_at=_aware(row.updated_at),
        )

    async def create(self, trip: Trip) -> Trip:
        row = self.model(
            user_id=trip.user_id,
            rider_id=trip.rider_id,
            pickup_location=self._point_value(trip.pickup.location),
            pickup_address=trip.pickup.address,
            destination_location=self._point_value(trip.destination.location),
            destination_address=trip.destination.address,
            distance_km=trip.distance_km,
            estimated_duration_minutes=trip.estimated_duration_minutes,
            price_da=trip.price_da,
            status=trip.status,
            requested_at=trip.requested_at,
            updated_at=trip.updated_at,
        )
        self.session.add(row)
        await self.session.flush()
        created = trip.copy()
        created.id = row.id
        return created

    async def get_for_user(
        self, trip_id: int, user_id: int, *, for_update: bool = False
    ) -> Trip:
        """Trips are only visible to the user who requested them."""
        query = self._select().where(
            self.model.id == trip_id, self.model.user_id == user_id
        )
        if for_update:
            query = query.with_for_update(of=self.model)
        row = (await self.session.execute(query)).first()
        if row is None:
            raise TripNotFound()
        return self._to_entity(*row)

    async def list_for_user(
        self,
        user_id: int,
        *,
        status: Optional[TripStatus] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[Trip]:
        query = (
            self._select()
            .where(self.model.user_id == user_id)
            .order_by(self.model.requested_at.desc(), self.model.id.desc())
            .offset(offset)
            .limit(limit)
        )
        if status is not None:
            query = query.where(self.model.status == status)
        result = await self.session.execute(query)
        return [self._to_entity(*row) for row in result.all()]

    async def history_for_user(self, user_id: int) -> list[TripSummary]:
        result = await self.session.execute(
            select(self.model.id, self.model.status).where(
                self.model.user_id == user_id
            )
        )
        return [TripSummary(i, TripStatus(s)) for i, s in result.all()]

    async def save_transition(self, trip: Trip) -> None:
        """Partial write: status and lifecycle timestamps only."""
        await self.session.execute(
            update(self.model)
            .where(self.model.id == trip.id)
            .values(
                status=trip.status,
                started_at=trip.started_at,
                completed_at=trip.completed_at,
                updated_at=trip.updated_at,
            )
        )


class RatingRepository:
    model = RatingModel

    def __init__(self, session: AsyncSession):
        self.session = session

    @staticmethod
    def _to_entity(row) -> Rating:
        return Rating(
            id=row.id,
            trip_id=row.trip_id,
            user_id=row.user_id,
            rider_id=row.rider_id,
            rating=row.rating,
            comment=row.comment,
            created_at=_aware(row.created_at),
        )

    async def create(self, rating: Rating) -> Rating:
        """Insert *rating*; the unique ``trip_id`` constraint decides
        duplicates, so concurrent requests for one trip cannot both win.
        A duplicate rolls back the session's transaction."""
        row = self.model(
            trip_id=rating.trip_id,
            user_id=rating.user_id,
            rider_id=rating.rider_id,
            rating=rating.rating,
            comment=rating.comment,
            created_at=rating.created_at,
        )
        self.session.add(row)
        try:
            await self.session.flush()
        except IntegrityError:
            await self.session.rollback()
            raise DuplicateRating() from None
        await self.session.refresh(row)
        return self._to_entity(row)

    async def recent_for_rider(self, rider_id: int, limit: int) -> list[Rating]:
        result = await self.session.execute(
            select(self.model)
            .where(self.model.rider_id == rider_id)
            .order_by(self.model.created_at.desc(), self.model.id.desc())
            .limit(limit)
        )
        return [self._to_entity(r) for r in result.scalars().all()]


class PromotionRepository:
    model = PromotionModel

    def __init__(self, session: AsyncSession):
        self.session = session

    @staticmethod
    def _to_entity(row) -> Promotion:
        rule = None
        if row.rule_kind is not None:
            rule = PromotionRule(
                RuleKind(row.rule_kind), row.min_completed_trips or 0
            )
        return Promotion(
            id=row.id,
            title=row.title,
            description=row.description,
            discount_percentage=row.discount_percentage,
            discount_amount=row.discount_amount,
            valid_from=_aware(row.valid_from),
            valid_until=_aware(row.valid_until),
            is_active=row.is_active,
            rule=rule,
            created_at=_aware(row.created_at),
        )

    async def create(self, promotion: Promotion) -> Promotion:
        validate_promotion(promotion)
        row = self.model(
            title=promotion.title,
            description=promotion.description,
            discount_percentage=promotion.discount_percentage,
            discount_amount=promotion.discount_amount,
            valid_from=promotion.valid_from,
            valid_until=promotion.valid_until,
            is_active=promotion.is_active,
            rule_kind=promotion.rule.kind if promotion.rule else None,
            min_completed_trips=(
                promotion.rule.min_completed_trips if promotion.rule else None
            ),
        )
        self.session.add(row)
        await self.session.flush()
        await self.session.refresh(row)
        return self._to_entity(row)

    async def get_by_id(self, promotion_id: int) -> Promotion:
        row = await self.session.get(self.model, promotion_id)
        if row is None:
            raise PromotionNotFound()
        return self._to_entity(row)

    async def list_active(self, now: datetime) -> list[Promotion]:
        """Active, not-yet-expired promotions, newest first."""
        result = await self.session.execute(
            select(self.model)
            .where(self.model.is_active.is_(True), self.model.valid_until >= now)
            .order_by(self.model.created_at.desc(), self.model.id.desc())
        )
        return [self._to_entity(r) for r in result.scalars().all()]
