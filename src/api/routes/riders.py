"""
Rider endpoints
===============

GET   /api/v1/riders/nearby                -- ranked online riders around a point
GET   /api/v1/riders/{rider_id}            -- rider profile
PATCH /api/v1/riders/{rider_id}/location   -- report a rider's position
GET   /api/v1/riders/{rider_id}/ratings    -- most recent ratings + average
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.exceptions import RequestValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_db
from src.api.middleware import limiter
from src.api.schemas import (
    CoordinateSchema,
    NearbyRiderResponse,
    NearbyRidersResponse,
    RatingResponse,
    RiderRatingsResponse,
    RiderResponse,
)
from src.config import settings
from src.domain.entities import Coordinate
from src.domain.lifecycle import summarize_ratings
from src.domain.riders import MAX_RADIUS_KM, MIN_RADIUS_KM, nearby
from src.infrastructure.repositories import RatingRepository, RiderRepository

router = APIRouter(prefix="/riders", tags=["riders"])


@router.get(
    "/nearby",
    response_model=NearbyRidersResponse,
    summary="Find online riders near a point, closest first",
)
@limiter.limit("100/minute")
async def get_nearby_riders(
    request: Request,
    latitude: Optional[float] = Query(None, ge=-90, le=90),
    longitude: Optional[float] = Query(None, ge=-180, le=180),
    radius: Optional[float] = Query(None, ge=MIN_RADIUS_KM, le=MAX_RADIUS_KM),
    db: AsyncSession = Depends(get_db),
):
    if (latitude is None) != (longitude is None):
        missing = "longitude" if longitude is None else "latitude"
        raise RequestValidationError(
            [
                {
                    "loc": ("query", missing),
                    "msg": "latitude and longitude must be given together",
                    "type": "missing",
                }
            ]
        )
    if latitude is None:
        origin = settings.default_center
    else:
        origin = Coordinate(latitude, longitude)
    radius_km = radius if radius is not None else settings.nearby_default_radius_km

    pool = await RiderRepository(db).get_online(settings.rider_pool_limit)
    ranked = nearby(
        origin,
        pool,
        radius_km,
        unknown_location=settings.unknown_rider_location,
        fallback=settings.rider_fallback,
    )
    return NearbyRidersResponse(
        riders=[NearbyRiderResponse.from_ranked(r) for r in ranked],
        count=len(ranked),
        search_radius=radius_km,
        user_location=CoordinateSchema.from_domain(origin),
    )


@router.get(
    "/{rider_id}",
    response_model=RiderResponse,
    summary="Get rider profile",
)
@limiter.limit("100/minute")
async def get_rider(
    request: Request,
    rider_id: int,
    db: AsyncSession = Depends(get_db),
):
    rider = await RiderRepository(db).get_by_id(rider_id)
    return RiderResponse.from_entity(rider)


@router.patch(
    "/{rider_id}/location",
    response_model=CoordinateSchema,
    summary="Update a rider's current location",
)
@limiter.limit("100/minute")
async def update_rider_location(
    request: Request,
    rider_id: int,
    body: CoordinateSchema,
    db: AsyncSession = Depends(get_db),
):
    await RiderRepository(db).update_location(rider_id, body.to_domain())
    return body


@router.get(
    "/{rider_id}/ratings",
    response_model=RiderRatingsResponse,
    summary="Most recent ratings of a rider",
)
@limiter.limit("100/minute")
async def get_rider_ratings(
    request: Request,
    rider_id: int,
    limit: int = Query(settings.rating_page_size, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    ratings = await RatingRepository(db).recent_for_rider(rider_id, limit)
    summary = summarize_ratings(ratings)
    return RiderRatingsResponse(
        ratings=[RatingResponse.from_entity(r) for r in ratings],
        average_rating=summary.average,
        total_ratings=summary.total,
    )
