"""
Trip endpoints
==============

POST   /api/v1/trips                     -- request a trip (201, priced and pending)
GET    /api/v1/trips                     -- the caller's trips, newest first
GET    /api/v1/trips/{trip_id}           -- one of the caller's trips
PATCH  /api/v1/trips/{trip_id}/status    -- advance the lifecycle
DELETE /api/v1/trips/{trip_id}           -- cancel
POST   /api/v1/trips/{trip_id}/rating    -- rate a completed trip (201)

Status changes hold a per-trip Redis lock and read the row ``FOR UPDATE``
so at most one transition per trip is in flight.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

import redis.asyncio as aioredis
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import (
    get_current_user_id,
    get_db,
    get_lifecycle,
    get_now,
)
from src.api.middleware import limiter
from src.api.schemas import (
    RatingCreateRequest,
    RatingResponse,
    TripCreateRequest,
    TripListResponse,
    TripResponse,
    TripStatusResponse,
    TripStatusUpdateRequest,
)
from src.config import settings
from src.domain.entities import Trip
from src.domain.enums import TripStatus
from src.domain.lifecycle import TripLifecycle
from src.infrastructure.locks import TripLock
from src.infrastructure.redis_client import get_redis
from src.infrastructure.repositories import (
    RatingRepository,
    RiderRepository,
    TripRepository,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/trips", tags=["trips"])


async def _transition(
    db: AsyncSession,
    redis: aioredis.Redis,
    lifecycle: TripLifecycle,
    trip_id: int,
    user_id: int,
    status: TripStatus,
    now: datetime,
) -> Trip:
    repo = TripRepository(db)
    async with TripLock(redis, trip_id, settings.trip_lock_ttl_seconds):
        trip = await repo.get_for_user(trip_id, user_id, for_update=True)
        lifecycle.transition(trip, status, now=now)
        await repo.save_transition(trip)
        await db.commit()
    return trip


@router.post(
    "",
    status_code=201,
    response_model=TripResponse,
    summary="Request a trip",
)
@limiter.limit("100/minute")
async def create_trip(
    request: Request,
    body: TripCreateRequest,
    user_id: int = Depends(get_current_user_id),
    lifecycle: TripLifecycle = Depends(get_lifecycle),
    now: datetime = Depends(get_now),
    db: AsyncSession = Depends(get_db),
):
    rider = None
    if body.rider_id is not None:
        rider = await RiderRepository(db).get_by_id(body.rider_id)

    trip = lifecycle.create(
        body.pickup(), body.destination(), user_id, body.rider_id, now=now
    )
    trip = await TripRepository(db).create(trip)
    logger.info("Trip %s created for user %s", trip.id, user_id)
    return TripResponse.from_entity(trip, rider)


@router.get(
    "",
    response_model=TripListResponse,
    summary="List the caller's trips",
)
@limiter.limit("100/minute")
async def list_trips(
    request: Request,
    status: Optional[TripStatus] = None,
    limit: int = Query(settings.trip_page_size, ge=1, le=100),
    offset: int = Query(0, ge=0),
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    trips = await TripRepository(db).list_for_user(
        user_id, status=status, limit=limit, offset=offset
    )
    riders = await RiderRepository(db).get_many(t.rider_id for t in trips)
    items = [TripResponse.from_entity(t, riders.get(t.rider_id)) for t in trips]
    return TripListResponse(trips=items, count=len(items))


@router.get(
    "/{trip_id}",
    response_model=TripResponse,
    summary="Get one of the caller's trips",
)
@limiter.limit("100/minute")
async def get_trip(
    request: Request,
    trip_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
):
    trip = await TripRepository(db).get_for_user(trip_id, user_id)
    rider = None
    if trip.rider_id is not None:
        rider = (await RiderRepository(db).get_many([trip.rider_id])).get(
            trip.rider_id
        )
    return TripResponse.from_entity(trip, rider)


@router.patch(
    "/{trip_id}/status",
    response_model=TripStatusResponse,
    summary="Advance a trip through its lifecycle",
    description=(
        "pending -> accepted -> in_progress -> completed; cancelled is "
        "reachable from any non-terminal state.  Illegal moves return 409."
    ),
)
@limiter.limit("100/minute")
async def update_trip_status(
    request: Request,
    trip_id: int,
    body: TripStatusUpdateRequest,
    user_id: int = Depends(get_current_user_id),
    lifecycle: TripLifecycle = Depends(get_lifecycle),
    now: datetime = Depends(get_now),
    db: AsyncSession = Depends(get_db),
    redis: aioredis.Redis = Depends(get_redis),
):
    trip = await _transition(
        db, redis, lifecycle, trip_id, user_id, body.status, now
    )
    return TripStatusResponse.from_entity(trip)


@router.delete(
    "/{trip_id}",
    response_model=TripStatusResponse,
    summary="Cancel a trip",
)
@limiter.limit("100/minute")
async def cancel_trip(
    request: Request,
    trip_id: int,
    user_id: int = Depends(get_current_user_id),
    lifecycle: TripLifecycle = Depends(get_lifecycle),
    now: datetime = Depends(get_now),
    db: AsyncSession = Depends(get_db),
    redis: aioredis.Redis = Depends(get_redis),
):
    trip = await _transition(
        db, redis, lifecycle, trip_id, user_id, TripStatus.CANCELLED, now
    )
    return TripStatusResponse.from_entity(trip)


@router.post(
    "/{trip_id}/rating",
    status_code=201,
    response_model=RatingResponse,
    summary="Rate a completed trip",
)
@limiter.limit("100/minute")
async def rate_trip(
    request: Request,
    trip_id: int,
    body: RatingCreateRequest,
    user_id: int = Depends(get_current_user_id),
    lifecycle: TripLifecycle = Depends(get_lifecycle),
    now: datetime = Depends(get_now),
    db: AsyncSession = Depends(get_db),
):
    trip = await TripRepository(db).get_for_user(trip_id, user_id)
    rating = lifecycle.rate(trip, body.rating, body.comment, now=now)
    rating = await RatingRepository(db).create(rating)
    return RatingResponse.from_entity(rating)
