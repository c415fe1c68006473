"""
Shared test fixtures.

Uses an in-memory SQLite database (via aiosqlite) so tests run without
Docker / PostgreSQL / Redis.  PostGIS geometry columns are replaced by
plain String columns holding the WKT text, and the repositories are
subclassed to read/write that text directly instead of going through
``WKTElement`` / ``ST_AsText``.
"""

from typing import AsyncGenerator

import pytest_asyncio
from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from src.domain.location import encode_point
from src.infrastructure.repositories import (
    PromotionRepository,
    RatingRepository,
    RiderRepository,
    TripRepository,
)


# ── Test DB (SQLite in-memory) ────────────────────────────────────────

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"

test_engine = create_async_engine(TEST_DB_URL, echo=False, poolclass=StaticPool)
TestSessionFactory = async_sessionmaker(
    test_engine, class_=AsyncSession, expire_on_commit=False
)


class TestBase(DeclarativeBase):
    pass


# Mirror the production models but without PostGIS Geometry columns
# (SQLite doesn't support them).


class TestUserModel(TestBase):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, autoincrement=True)
    display_name = Column(String(50), nullable=True)
    phone_number = Column(String(20), unique=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class TestRiderModel(TestBase):
    __tablename__ = "riders"
    id = Column(Integer, primary_key=True, autoincrement=True)
    display_name = Column(String(120), nullable=False)
    phone = Column(String(20), nullable=False)
    rating_average = Column(Float, nullable=True)
    current_location = Column(String, nullable=True)  # stub for Geometry
    status = Column(String(20), default="offline", nullable=False)
    vehicle_type = Column(String(30), nullable=True)
    license_plate = Column(String(20), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now())


class TestTripModel(TestBase):
    __tablename__ = "trips"
    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    rider_id = Column(Integer, ForeignKey("riders.id"), nullable=True)
    pickup_location = Column(String, nullable=False)  # stub for Geometry
    pickup_address = Column(Text, nullable=False)
    destination_location = Column(String, nullable=False)  # stub for Geometry
    destination_address = Column(Text, nullable=False)
    distance_km = Column(Float, nullable=False)
    estimated_duration_minutes = Column(Integer, nullable=False)
    price_da = Column(Integer, nullable=False)
    status = Column(String(20), default="pending", nullable=False)
    requested_at = Column(DateTime(timezone=True), nullable=False)
    started_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now())


class TestRatingModel(TestBase):
    __tablename__ = "ratings"
    id = Column(Integer, primary_key=True, autoincrement=True)
    trip_id = Column(Integer, ForeignKey("trips.id"), unique=True, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    rider_id = Column(Integer, ForeignKey("riders.id"), nullable=False)
    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class TestPromotionModel(TestBase):
    __tablename__ = "promotions"
    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(120), nullable=False)
    description = Column(Text, nullable=True)
    discount_percentage = Column(Float, nullable=True)
    discount_amount = Column(Float, nullable=True)
    valid_from = Column(DateTime(timezone=True), nullable=False)
    valid_until = Column(DateTime(timezone=True), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    rule_kind = Column(String(30), nullable=True)
    min_completed_trips = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


# ── Repositories over the test models ─────────────────────────────────


def _plain_text(column):
    return column


class TestRiderRepository(RiderRepository):
    model = TestRiderModel
    _point_value = staticmethod(encode_point)
    _point_text = staticmethod(_plain_text)


class TestTripRepository(TripRepository):
    model = TestTripModel
    _point_value = staticmethod(encode_point)
    _point_text = staticmethod(_plain_text)


class TestRatingRepository(RatingRepository):
    model = TestRatingModel


class TestPromotionRepository(PromotionRepository):
    model = TestPromotionModel


# ── Fixtures ──────────────────────────────────────────────────────────


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create tables, yield a session, then drop everything."""
    async with test_engine.begin() as conn:
        await conn.run_sync(TestBase.metadata.create_all)

    async with TestSessionFactory() as session:
        yield session

    async with test_engine.begin() as conn:
        await conn.run_sync(TestBase.metadata.drop_all)
