"""Tests for coupon eligibility and discount rules."""

from datetime import UTC, datetime, timedelta
from decimal import Decimal
from uuid import uuid4

import pytest

from lms.domain.coupon import (
    AllCourses,
    CouponKind,
    CouponScopeType,
    CouponSnapshot,
    SpecificCategories,
    SpecificCourses,
    UsageLimit,
    ValidityWindow,
    build_scope,
    normalize_code,
)
from lms.domain.coupon_ledger import redeem
from lms.domain.coupon_rules import (
    IneligibilityReason,
    PurchaseContext,
    check_eligibility,
    compute_discount,
    final_amount,
)
from lms.domain.money import Money

NOW = datetime(2026, 5, 1, 12, 0, tzinfo=UTC)
WINDOW = ValidityWindow(NOW - timedelta(days=1), NOW + timedelta(days=30))


def _percentage(rate="10", **overrides) -> CouponSnapshot:  # type: ignore[no-untyped-def]
    values = {
        "code": "SAVE10",
        "kind": CouponKind.PERCENTAGE,
        "window": WINDOW,
        "percentage_rate": Decimal(rate),
    }
    values.update(overrides)
    return CouponSnapshot(**values)


def _fixed(cents=2000, **overrides) -> CouponSnapshot:  # type: ignore[no-untyped-def]
    values = {
        "code": "FLAT20",
        "kind": CouponKind.FIXED_AMOUNT,
        "window": WINDOW,
        "amount": Money(cents),
    }
    values.update(overrides)
    return CouponSnapshot(**values)


def _context(amount=10000, user_id=None, now=NOW, **overrides) -> PurchaseContext:  # type: ignore[no-untyped-def]
    return PurchaseContext(
        user_id=user_id or uuid4(),
        purchase_amount=Money(amount),
        now=now,
        **overrides,
    )


class TestNormalizeCode:
    def test_upper_cases_and_strips(self) -> None:
        assert normalize_code("  save-10_x ") == "SAVE-10_X"

    def test_rejects_invalid_characters(self) -> None:
        with pytest.raises(ValueError, match="uppercase letters"):
            normalize_code("SAVE 10!")


class TestCouponSnapshot:
    def test_code_is_normalized(self) -> None:
        assert _percentage(code="save10").code == "SAVE10"

    def test_percentage_out_of_range(self) -> None:
        with pytest.raises(ValueError, match="between 0 and 100"):
            _percentage(rate="100.01")

    def test_fixed_requires_amount(self) -> None:
        with pytest.raises(ValueError, match="amount is required"):
            CouponSnapshot(code="X1X", kind=CouponKind.FIXED_AMOUNT, window=WINDOW)

    def test_money_must_share_coupon_currency(self) -> None:
        with pytest.raises(ValueError, match="must be in USD"):
            _fixed(amount=Money(100, "EUR"))

    def test_window_end_after_start(self) -> None:
        with pytest.raises(ValueError, match="End date must be after start date"):
            ValidityWindow(NOW, NOW)

    def test_usage_limits_positive(self) -> None:
        with pytest.raises(ValueError):
            UsageLimit(total=0)
        with pytest.raises(ValueError):
            UsageLimit(per_user=0)

    def test_build_scope_from_storage_values(self) -> None:
        course_id = uuid4()
        scope = build_scope(CouponScopeType.SPECIFIC_COURSES, [course_id])
        assert scope == SpecificCourses(frozenset({course_id}))
        assert build_scope("all_courses") == AllCourses()


class TestComputeDiscount:
    def test_percentage_capped_by_maximum(self) -> None:
        """SAVE10 with a 500 cap on a 10000 purchase."""
        coupon = _percentage(maximum_discount=Money(500))
        discount = compute_discount(coupon, Money(10000))
        assert discount == Money(500)
        assert final_amount(Money(10000), discount) == Money(9500)

    def test_percentage_under_cap(self) -> None:
        coupon = _percentage(maximum_discount=Money(5000))
        assert compute_discount(coupon, Money(10000)) == Money(1000)

    def test_fixed_capped_at_purchase(self) -> None:
        coupon = _fixed(2000)
        discount = compute_discount(coupon, Money(1500))
        assert discount == Money(1500)
        assert final_amount(Money(1500), discount) == Money(0)

    def test_full_percentage_without_cap(self) -> None:
        assert compute_discount(_percentage(rate="100"), Money(4321)) == Money(4321)

    def test_zero_purchase(self) -> None:
        assert compute_discount(_percentage(), Money(0)) == Money(0)
        assert compute_discount(_fixed(), Money(0)) == Money(0)

    @pytest.mark.parametrize("amount", [0, 1, 99, 1500, 10000, 123457])
    @pytest.mark.parametrize(
        "coupon",
        [
            _percentage(rate="0"),
            _percentage(rate="33.33"),
            _percentage(rate="100", maximum_discount=Money(700)),
            _fixed(0),
            _fixed(1),
            _fixed(50000),
        ],
    )
    def test_discount_within_purchase(self, coupon: CouponSnapshot, amount: int) -> None:
        discount = compute_discount(coupon, Money(amount))
        assert Money(0) <= discount <= Money(amount)
        assert not final_amount(Money(amount), discount).is_negative


class TestCheckEligibility:
    def test_eligible(self) -> None:
        result = check_eligibility(_percentage(), _context())
        assert result.eligible
        assert result.message == "Coupon is valid"

    def test_inactive(self) -> None:
        result = check_eligibility(_percentage(active=False), _context())
        assert result.reason == IneligibilityReason.INACTIVE

    def test_validity_window(self) -> None:
        """A coupon valid one to two hours from now is early now and late in three hours."""
        window = ValidityWindow(NOW + timedelta(hours=1), NOW + timedelta(hours=2))
        coupon = _percentage(window=window)
        early = check_eligibility(coupon, _context(now=NOW))
        late = check_eligibility(coupon, _context(now=NOW + timedelta(hours=3)))
        assert early.reason == IneligibilityReason.NOT_YET_ACTIVE
        assert late.reason == IneligibilityReason.EXPIRED

    def test_window_bounds_are_inclusive(self) -> None:
        coupon = _percentage(window=ValidityWindow(NOW, NOW + timedelta(hours=1)))
        assert check_eligibility(coupon, _context(now=NOW)).eligible
        assert check_eligibility(coupon, _context(now=NOW + timedelta(hours=1))).eligible

    def test_global_limit_reached(self) -> None:
        coupon = _percentage(usage_limit=UsageLimit(total=2, per_user=5))
        for _ in range(2):
            coupon = redeem(coupon, uuid4(), "order", Money(100), NOW)
        result = check_eligibility(coupon, _context())
        assert result.reason == IneligibilityReason.GLOBAL_LIMIT_REACHED

    def test_user_limit_reached(self) -> None:
        user_id = uuid4()
        coupon = _percentage(usage_limit=UsageLimit(per_user=1))
        assert check_eligibility(coupon, _context(user_id=user_id)).eligible

        coupon = redeem(coupon, user_id, "order-1", Money(1000), NOW)
        result = check_eligibility(coupon, _context(user_id=user_id))
        assert result.reason == IneligibilityReason.USER_LIMIT_REACHED
        assert result.message == "Coupon usage limit per user reached"
        assert check_eligibility(coupon, _context()).eligible

    def test_specific_courses(self) -> None:
        allowed = uuid4()
        coupon = _percentage(scope=SpecificCourses(frozenset({allowed})))
        assert check_eligibility(coupon, _context(course_id=allowed)).eligible
        assert (
            check_eligibility(coupon, _context(course_id=uuid4())).reason
            == IneligibilityReason.NOT_APPLICABLE_TO_COURSE
        )
        assert (
            check_eligibility(coupon, _context()).reason
            == IneligibilityReason.NOT_APPLICABLE_TO_COURSE
        )

    def test_specific_categories(self) -> None:
        coupon = _percentage(scope=SpecificCategories(frozenset({"design"})))
        assert check_eligibility(coupon, _context(course_category="design")).eligible
        assert (
            check_eligibility(coupon, _context(course_category="music")).reason
            == IneligibilityReason.NOT_APPLICABLE_TO_CATEGORY
        )
        assert (
            check_eligibility(coupon, _context()).reason
            == IneligibilityReason.NOT_APPLICABLE_TO_CATEGORY
        )

    def test_all_courses_ignores_course(self) -> None:
        coupon = _percentage(scope=AllCourses())
        assert check_eligibility(coupon, _context(course_id=uuid4())).eligible

    def test_minimum_amount(self) -> None:
        coupon = _fixed(minimum_amount=Money(5000))
        assert (
            check_eligibility(coupon, _context(amount=4999)).reason
            == IneligibilityReason.BELOW_MINIMUM_AMOUNT
        )
        assert check_eligibility(coupon, _context(amount=5000)).eligible

    def test_first_failing_check_wins(self) -> None:
        window = ValidityWindow(NOW - timedelta(days=10), NOW - timedelta(days=5))
        coupon = _fixed(active=False, window=window, minimum_amount=Money(99999))
        assert check_eligibility(coupon, _context()).reason == IneligibilityReason.INACTIVE

    def test_is_idempotent(self) -> None:
        coupon = _percentage(usage_limit=UsageLimit(total=1))
        context = _context()
        assert check_eligibility(coupon, context) == check_eligibility(coupon, context)
