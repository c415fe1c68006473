"""FastAPI dependency injection helpers."""

from datetime import datetime, timezone

from fastapi import Header
from sqlalchemy.ext.asyncio import AsyncSession

from src.config import settings
from src.domain.lifecycle import TripLifecycle
from src.domain.pricing import PricingPolicy
from src.infrastructure.database import async_session_factory


async def get_db() -> AsyncSession:  # type: ignore[misc]
    """Yield an async DB session; commit on success, rollback on error."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def get_current_user_id(
    x_user_id: int = Header(..., alias="X-User-Id", gt=0),
) -> int:
    """Passenger id asserted by the upstream authentication gateway."""
    return x_user_id


def get_now() -> datetime:
    """Single source of "now" for a request; overridden in tests."""
    return datetime.now(timezone.utc)


def get_lifecycle() -> TripLifecycle:
    return TripLifecycle(
        PricingPolicy(
            base_fare_da=settings.base_fare_da,
            rate_per_km_da=settings.rate_per_km_da,
            average_speed_kmh=settings.average_speed_kmh,
        )
    )
