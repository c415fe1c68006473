"""
SQLAlchemy ORM models  (maps to PostgreSQL + PostGIS).

Tables
------
* ``users``       -- registered passengers
* ``riders``      -- motorcycle drivers with their last reported position
* ``trips``       -- passenger trips, pickup to destination
* ``ratings``     -- one rating per completed trip
* ``promotions``  -- time-bounded discounts with an eligibility rule

Indexes
-------
* **GIST** on geometry columns (riders.current_location, trip endpoints).
* **B-Tree** on ``status``, ``user_id``, ``rider_id`` and the promotion
  validity columns used by the listing queries.
"""

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
)
from geoalchemy2 import Geometry

from .database import Base
from src.domain.enums import RiderStatus, RuleKind, TripStatus


def _values(enum_cls):
    return [member.value for member in enum_cls]


class UserModel(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    display_name = Column(String(50), nullable=True)
    phone_number = Column(String(20), unique=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class RiderModel(Base):
    __tablename__ = "riders"

    id = Column(Integer, primary_key=True, autoincrement=True)
    display_name = Column(String(120), nullable=False)
    phone = Column(String(20), nullable=False)
    rating_average = Column(Float, nullable=True)
    current_location = Column(Geometry("POINT", srid=4326), nullable=True)
    status = Column(
        Enum(RiderStatus, name="riderstatus", values_callable=_values),
        default=RiderStatus.OFFLINE,
        nullable=False,
    )
    vehicle_type = Column(String(30), nullable=True)
    license_plate = Column(String(20), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        Index("idx_riders_location", "current_location", postgresql_using="gist"),
        Index("idx_riders_status", "status"),
    )


class TripModel(Base):
    __tablename__ = "trips"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    rider_id = Column(Integer, ForeignKey("riders.id"), nullable=True)

    pickup_location = Column(Geometry("POINT", srid=4326), nullable=False)
    pickup_address = Column(Text, nullable=False)
    destination_location = Column(Geometry("POINT", srid=4326), nullable=False)
    destination_address = Column(Text, nullable=False)

    distance_km = Column(Float, nullable=False)
    estimated_duration_minutes = Column(Integer, nullable=False)
    price_da = Column(Integer, nullable=False)

    status = Column(
        Enum(TripStatus, name="tripstatus", values_callable=_values),
        default=TripStatus.PENDING,
        nullable=False,
    )
    requested_at = Column(DateTime(timezone=True), nullable=False)
    started_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        Index("idx_trips_pickup", "pickup_location", postgresql_using="gist"),
        Index("idx_trips_destination", "destination_location", postgresql_using="gist"),
        Index("idx_trips_user_status", "user_id", "status"),
        Index("idx_trips_rider", "rider_id"),
    )


class RatingModel(Base):
    __tablename__ = "ratings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    trip_id = Column(Integer, ForeignKey("trips.id"), unique=True, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    rider_id = Column(Integer, ForeignKey("riders.id"), nullable=False)
    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        CheckConstraint("rating BETWEEN 1 AND 5", name="ck_ratings_range"),
        Index("idx_ratings_rider_created", "rider_id", "created_at"),
    )


class PromotionModel(Base):
    __tablename__ = "promotions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(120), nullable=False)
    description = Column(Text, nullable=True)
    discount_percentage = Column(Float, nullable=True)
    discount_amount = Column(Float, nullable=True)
    valid_from = Column(DateTime(timezone=True), nullable=False)
    valid_until = Column(DateTime(timezone=True), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    # NULL for legacy promotions whose rule is derived from the title
    rule_kind = Column(
        Enum(RuleKind, name="rulekind", values_callable=_values), nullable=True
    )
    min_completed_trips = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index("idx_promotions_active_until", "is_active", "valid_until"),
    )
