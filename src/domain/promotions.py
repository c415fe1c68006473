"""
Promotion Engine
================

Three concerns, kept separate so callers decide the order:

* **Validity**     -- ``is_valid_now`` / ``ensure_valid``: active flag plus
  the inclusive ``[valid_from, valid_until]`` window.
* **Eligibility**  -- ``check_eligibility``: every rule of the promotion
  evaluated against the user's trip history; all must pass.
* **Discount**     -- ``apply_discount``: percentage takes precedence over
  a fixed amount; the final price never drops below zero.

Promotions stored before rules became explicit have ``rule=None``; their
rules are derived from the title by ``rules_from_title``.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from .distance import round_half_up
from .entities import Promotion, PromotionRule, TripSummary
from .enums import RuleKind, TripStatus
from .errors import (
    InvalidPromotion,
    InvalidTripPrice,
    PromotionExpired,
    PromotionInactive,
)

logger = logging.getLogger(__name__)

LOYALTY_MIN_COMPLETED_TRIPS = 10

ELIGIBLE_REASON = "You are eligible for this promotion"
NOT_ACTIVE_REASON = "Promotion is not currently active"
FIRST_RIDE_REASON = "This promotion is only for first-time users"


@dataclass(frozen=True)
class Eligibility:
    eligible: bool
    reason: str


@dataclass(frozen=True)
class Discount:
    original_price: float
    discount_amount: float
    final_price: float

    @property
    def savings(self) -> float:
        return self.discount_amount


# ── Rules ─────────────────────────────────────────────────────────────


def rules_from_title(title: str) -> tuple[PromotionRule, ...]:
    """Legacy mapping from display title to rules.  Every matching family
    applies; a title matching none is unconditional."""
    lowered = (title or "").lower()
    rules = []
    if "first ride" in lowered:
        rules.append(PromotionRule.first_ride_only())
    if "loyalty" in lowered:
        rules.append(PromotionRule.min_completed(LOYALTY_MIN_COMPLETED_TRIPS))
    return tuple(rules) or (PromotionRule.unconditional(),)


def effective_rules(promotion: Promotion) -> tuple[PromotionRule, ...]:
    if promotion.rule is not None:
        return (promotion.rule,)
    return rules_from_title(promotion.title)


def validate_promotion(promotion: Promotion) -> Promotion:
    """Reject inconsistent promotion definitions at creation time."""
    pct, amount = promotion.discount_percentage, promotion.discount_amount
    if pct is not None and amount is not None:
        raise InvalidPromotion(
            "Set either discount_percentage or discount_amount, not both"
        )
    if pct is not None and not 0 <= pct <= 100:
        raise InvalidPromotion("discount_percentage must be between 0 and 100")
    if amount is not None and amount < 0:
        raise InvalidPromotion("discount_amount cannot be negative")
    if (
        promotion.valid_from is not None
        and promotion.valid_until is not None
        and promotion.valid_until < promotion.valid_from
    ):
        raise InvalidPromotion("valid_until is before valid_from")
    rule = promotion.rule
    if (
        rule is not None
        and rule.kind is RuleKind.MIN_COMPLETED_TRIPS
        and rule.min_completed_trips < 1
    ):
        raise InvalidPromotion("min_completed_trips must be at least 1")
    return promotion


# ── Validity ──────────────────────────────────────────────────────────


def is_valid_now(promotion: Promotion, now: datetime) -> bool:
    if not promotion.is_active:
        return False
    if promotion.valid_from is not None and now < promotion.valid_from:
        return False
    if promotion.valid_until is not None and now > promotion.valid_until:
        return False
    return True


def ensure_valid(promotion: Promotion, now: datetime) -> None:
    if not promotion.is_active:
        raise PromotionInactive("This promotion is not currently active")
    if promotion.valid_from is not None and now < promotion.valid_from:
        raise PromotionExpired("This promotion has not started yet")
    if promotion.valid_until is not None and now > promotion.valid_until:
        raise PromotionExpired("This promotion has expired")


# ── Eligibility ───────────────────────────────────────────────────────


def check_eligibility(
    promotion: Promotion,
    history: Iterable[TripSummary],
    *,
    now: Optional[datetime] = None,
) -> Eligibility:
    if now is not None and not is_valid_now(promotion, now):
        return Eligibility(False, NOT_ACTIVE_REASON)

    completed = sum(1 for t in history if t.status == TripStatus.COMPLETED)

    # Rules are checked in order; the last failing rule supplies the reason.
    reason = None
    for rule in effective_rules(promotion):
        reason = _failure_reason(rule, completed) or reason
    if reason is not None:
        return Eligibility(False, reason)
    return Eligibility(True, ELIGIBLE_REASON)


def _failure_reason(rule: PromotionRule, completed: int) -> Optional[str]:
    if rule.kind is RuleKind.FIRST_RIDE_ONLY and completed > 0:
        return FIRST_RIDE_REASON
    if (
        rule.kind is RuleKind.MIN_COMPLETED_TRIPS
        and completed < rule.min_completed_trips
    ):
        remaining = rule.min_completed_trips - completed
        return f"Complete {remaining} more trips to unlock this promotion"
    return None


# ── Discount ──────────────────────────────────────────────────────────


def apply_discount(promotion: Promotion, trip_price: float) -> Discount:
    """Discount *trip_price*; the caller has already checked validity."""
    if trip_price is None or not math.isfinite(trip_price) or trip_price <= 0:
        raise InvalidTripPrice("Trip price must be a positive number")

    if promotion.discount_percentage:
        discount = round_half_up(trip_price * promotion.discount_percentage / 100)
    elif promotion.discount_amount:
        discount = min(promotion.discount_amount, trip_price)
    else:
        discount = 0

    final_price = max(0, trip_price - discount)
    logger.info(
        "Promotion %s applied: %s -> %s (-%s)",
        promotion.id,
        trip_price,
        final_price,
        discount,
    )
    return Discount(
        original_price=trip_price,
        discount_amount=discount,
        final_price=final_price,
    )
