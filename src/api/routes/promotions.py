"""
Promotion endpoints
===================

GET  /api/v1/promotions                          -- active, unexpired, newest first
GET  /api/v1/promotions/{promotion_id}           -- one promotion
GET  /api/v1/promotions/{promotion_id}/eligibility -- can the caller use it?
POST /api/v1/promotions/{promotion_id}/apply     -- discount a trip price
"""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_current_user_id, get_db, get_now
from src.api.middleware import limiter
from src.api.schemas import (
    DiscountResponse,
    EligibilityResponse,
    PromotionApplyRequest,
    PromotionListResponse,
    PromotionResponse,
)
from src.domain.promotions import (
    apply_discount,
    check_eligibility,
    effective_rules,
    ensure_valid,
)
from src.infrastructure.repositories import PromotionRepository, TripRepository

router = APIRouter(prefix="/promotions", tags=["promotions"])


@router.get(
    "",
    response_model=PromotionListResponse,
    summary="List active promotions",
)
@limiter.limit("100/minute")
async def list_promotions(
    request: Request,
    now: datetime = Depends(get_now),
    db: AsyncSession = Depends(get_db),
):
    promotions = await PromotionRepository(db).list_active(now)
    items = [PromotionResponse.from_entity(p, effective_rules(p)) for p in promotions]
    return PromotionListResponse(promotions=items, count=len(items))


@router.get(
    "/{promotion_id}",
    response_model=PromotionResponse,
    summary="Get promotion details",
)
@limiter.limit("100/minute")
async def get_promotion(
    request: Request,
    promotion_id: int,
    db: AsyncSession = Depends(get_db),
):
    promotion = await PromotionRepository(db).get_by_id(promotion_id)
    return PromotionResponse.from_entity(promotion, effective_rules(promotion))


@router.get(
    "/{promotion_id}/eligibility",
    response_model=EligibilityResponse,
    summary="Check whether the caller may use a promotion",
)
@limiter.limit("100/minute")
async def get_eligibility(
    request: Request,
    promotion_id: int,
    user_id: int = Depends(get_current_user_id),
    now: datetime = Depends(get_now),
    db: AsyncSession = Depends(get_db),
):
    promotion = await PromotionRepository(db).get_by_id(promotion_id)
    history = await TripRepository(db).history_for_user(user_id)
    result = check_eligibility(promotion, history, now=now)
    return EligibilityResponse.from_result(promotion, result)


@router.post(
    "/{promotion_id}/apply",
    response_model=DiscountResponse,
    summary="Compute the discounted price of a trip",
    description=(
        "Requires the promotion to be active and inside its validity "
        "window.  Nothing is persisted; the trip price itself never changes."
    ),
)
@limiter.limit("100/minute")
async def apply_promotion(
    request: Request,
    promotion_id: int,
    body: PromotionApplyRequest,
    user_id: int = Depends(get_current_user_id),
    now: datetime = Depends(get_now),
    db: AsyncSession = Depends(get_db),
):
    promotion = await PromotionRepository(db).get_by_id(promotion_id)
    ensure_valid(promotion, now)
    discount = apply_discount(promotion, body.trip_price)
    return DiscountResponse.from_result(promotion, discount)
