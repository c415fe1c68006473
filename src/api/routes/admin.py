"""
Admin / observability endpoints
===============================

POST /api/v1/admin/promotions -- create a promotion (dual discounts rejected)
GET  /api/v1/admin/health     -- simple health check
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_db
from src.api.middleware import limiter
from src.api.schemas import (
    HealthResponse,
    PromotionCreateRequest,
    PromotionResponse,
)
from src.domain.promotions import effective_rules
from src.infrastructure.repositories import PromotionRepository

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post(
    "/promotions",
    status_code=201,
    response_model=PromotionResponse,
    summary="Create a promotion",
)
@limiter.limit("100/minute")
async def create_promotion(
    request: Request,
    body: PromotionCreateRequest,
    db: AsyncSession = Depends(get_db),
):
    promotion = await PromotionRepository(db).create(body.to_domain())
    return PromotionResponse.from_entity(promotion, effective_rules(promotion))


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health():
    return HealthResponse()
