"""Unit tests for promotion validity, eligibility rules and discounts."""

from datetime import datetime, timedelta, timezone

import pytest

from src.domain.entities import Promotion, PromotionRule, TripSummary
from src.domain.enums import RuleKind, TripStatus
from src.domain.errors import (
    InvalidPromotion,
    InvalidTripPrice,
    PromotionExpired,
    PromotionInactive,
)
from src.domain.promotions import (
    apply_discount,
    check_eligibility,
    ensure_valid,
    is_valid_now,
    rules_from_title,
    validate_promotion,
)

NOW = datetime(2026, 10, 17, 12, 0, tzinfo=timezone.utc)


def _promo(**kwargs):
    defaults = dict(
        id=1,
        title="Weekend Deal",
        valid_from=NOW - timedelta(days=1),
        valid_until=NOW + timedelta(days=1),
        is_active=True,
    )
    defaults.update(kwargs)
    return Promotion(**defaults)


def _history(completed=0, other=0):
    trips = [TripSummary(i, TripStatus.COMPLETED) for i in range(completed)]
    trips += [TripSummary(100 + i, TripStatus.CANCELLED) for i in range(other)]
    return trips


class TestValidity:
    def test_inside_window(self):
        assert is_valid_now(_promo(), NOW)

    def test_window_is_inclusive(self):
        promo = _promo(valid_from=NOW, valid_until=NOW)
        assert is_valid_now(promo, NOW)

    def test_before_and_after_window(self):
        promo = _promo()
        assert not is_valid_now(promo, NOW - timedelta(days=2))
        assert not is_valid_now(promo, NOW + timedelta(days=2))

    def test_inactive(self):
        assert not is_valid_now(_promo(is_active=False), NOW)

    def test_ensure_valid_raises_distinct_kinds(self):
        with pytest.raises(PromotionInactive):
            ensure_valid(_promo(is_active=False), NOW)
        with pytest.raises(PromotionExpired, match="has expired"):
            ensure_valid(_promo(), NOW + timedelta(days=5))
        ensure_valid(_promo(), NOW)

    def test_ensure_valid_before_window(self):
        with pytest.raises(PromotionExpired, match="has not started yet"):
            ensure_valid(_promo(), NOW - timedelta(days=5))


class TestEligibility:
    def test_first_ride_bonus(self):
        promo = _promo(title="First Ride Bonus")
        assert check_eligibility(promo, _history(0)).eligible
        result = check_eligibility(promo, _history(1))
        assert not result.eligible
        assert result.reason == "This promotion is only for first-time users"

    def test_first_ride_ignores_cancelled_trips(self):
        promo = _promo(title="first ride bonus")
        assert check_eligibility(promo, _history(0, other=3)).eligible

    def test_loyalty_reports_remaining_trips(self):
        promo = _promo(title="LOYALTY Reward")
        result = check_eligibility(promo, _history(7, other=4))
        assert not result.eligible
        assert result.reason == "Complete 3 more trips to unlock this promotion"
        assert check_eligibility(promo, _history(10)).eligible

    def test_unmatched_title_is_unconditional(self):
        result = check_eligibility(_promo(title="Weekend Deal"), _history(3))
        assert result.eligible
        assert result.reason == "You are eligible for this promotion"

    def test_explicit_rule_overrides_title(self):
        promo = _promo(
            title="First Ride Bonus", rule=PromotionRule.min_completed(2)
        )
        assert check_eligibility(promo, _history(2)).eligible
        assert not check_eligibility(promo, _history(1)).eligible

    def test_not_valid_now_is_ineligible(self):
        promo = _promo(is_active=False)
        result = check_eligibility(promo, _history(0), now=NOW)
        assert not result.eligible
        assert result.reason == "Promotion is not currently active"

    def test_rules_from_title(self):
        assert rules_from_title("Your First Ride") == (
            PromotionRule.first_ride_only(),
        )
        assert rules_from_title("Loyalty")[0].min_completed_trips == 10
        assert [r.kind for r in rules_from_title("First ride loyalty combo")] == [
            RuleKind.FIRST_RIDE_ONLY,
            RuleKind.MIN_COMPLETED_TRIPS,
        ]
        assert rules_from_title("")[0].kind is RuleKind.UNCONDITIONAL

    @pytest.mark.parametrize(
        "completed, reason",
        [
            (0, "Complete 10 more trips to unlock this promotion"),
            (5, "Complete 5 more trips to unlock this promotion"),
            (10, "This promotion is only for first-time users"),
        ],
    )
    def test_title_naming_both_rules_requires_both(self, completed, reason):
        promo = _promo(title="First Ride Loyalty Bonus")
        result = check_eligibility(promo, _history(completed))
        assert result.eligible is False
        assert result.reason == reason


class TestApplyDiscount:
    def test_percentage(self):
        d = apply_discount(_promo(discount_percentage=20), 1000)
        assert d.discount_amount == 200
        assert d.final_price == 800
        assert d.savings == 200

    def test_percentage_rounds_half_up(self):
        d = apply_discount(_promo(discount_percentage=15), 350)  # 52.5
        assert d.discount_amount == 53

    def test_fixed_amount_capped_at_price(self):
        assert apply_discount(_promo(discount_amount=150), 600).final_price == 450
        d = apply_discount(_promo(discount_amount=500), 300)
        assert d.discount_amount == 300
        assert d.final_price == 0

    def test_percentage_takes_precedence(self):
        d = apply_discount(_promo(discount_percentage=10, discount_amount=500), 1000)
        assert d.discount_amount == 100

    def test_no_discount_configured(self):
        d = apply_discount(_promo(), 400)
        assert d.discount_amount == 0
        assert d.final_price == 400

    @pytest.mark.parametrize(
        "price", [0, -10, float("nan"), float("inf"), float("-inf")]
    )
    def test_price_must_be_positive_and_finite(self, price):
        with pytest.raises(InvalidTripPrice):
            apply_discount(_promo(discount_percentage=20), price)


class TestValidatePromotion:
    def test_dual_discount_rejected(self):
        with pytest.raises(InvalidPromotion):
            validate_promotion(_promo(discount_percentage=10, discount_amount=50))

    def test_window_order(self):
        with pytest.raises(InvalidPromotion):
            validate_promotion(
                _promo(valid_from=NOW, valid_until=NOW - timedelta(seconds=1))
            )

    def test_percentage_bounds(self):
        with pytest.raises(InvalidPromotion):
            validate_promotion(_promo(discount_percentage=120))

    def test_min_trips_rule_needs_positive_count(self):
        with pytest.raises(InvalidPromotion):
            validate_promotion(_promo(rule=PromotionRule.min_completed(0)))

    def test_valid_promotion_passes(self):
        promo = _promo(discount_amount=100, rule=PromotionRule.first_ride_only())
        assert validate_promotion(promo) is promo
