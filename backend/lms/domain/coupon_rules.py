"""Coupon eligibility and discount rules.

Everything here is a pure function of its arguments: no clock reads, no I/O.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID

from lms.domain.coupon import (
    CouponKind,
    CouponSnapshot,
    SpecificCategories,
    SpecificCourses,
    normalize_code,
)
from lms.domain.money import Money

__all__ = [
    "ELIGIBLE",
    "Eligibility",
    "IneligibilityReason",
    "PurchaseContext",
    "check_eligibility",
    "compute_discount",
    "final_amount",
    "normalize_code",
]


class IneligibilityReason(str, Enum):
    INACTIVE = "inactive"
    NOT_YET_ACTIVE = "not_yet_active"
    EXPIRED = "expired"
    GLOBAL_LIMIT_REACHED = "global_limit_reached"
    USER_LIMIT_REACHED = "user_limit_reached"
    NOT_APPLICABLE_TO_COURSE = "not_applicable_to_course"
    NOT_APPLICABLE_TO_CATEGORY = "not_applicable_to_category"
    BELOW_MINIMUM_AMOUNT = "below_minimum_amount"

    @property
    def message(self) -> str:
        return _MESSAGES[self]


_MESSAGES = {
    IneligibilityReason.INACTIVE: "Coupon is inactive",
    IneligibilityReason.NOT_YET_ACTIVE: "Coupon not yet active",
    IneligibilityReason.EXPIRED: "Coupon has expired",
    IneligibilityReason.GLOBAL_LIMIT_REACHED: "Coupon usage limit reached",
    IneligibilityReason.USER_LIMIT_REACHED: "Coupon usage limit per user reached",
    IneligibilityReason.NOT_APPLICABLE_TO_COURSE: "Coupon not applicable to this course",
    IneligibilityReason.NOT_APPLICABLE_TO_CATEGORY: (
        "Coupon not applicable to this course category"
    ),
    IneligibilityReason.BELOW_MINIMUM_AMOUNT: "Purchase amount is below the coupon minimum",
}


@dataclass(frozen=True)
class PurchaseContext:
    """What the buyer is trying to purchase, and when."""

    user_id: UUID
    purchase_amount: Money
    now: datetime
    course_id: UUID | None = None
    course_category: str | None = None


@dataclass(frozen=True)
class Eligibility:
    """Outcome of an eligibility check; ``reason`` is None when eligible."""

    reason: IneligibilityReason | None = None

    @property
    def eligible(self) -> bool:
        return self.reason is None

    @property
    def message(self) -> str:
        return "Coupon is valid" if self.reason is None else self.reason.message

    def __bool__(self) -> bool:
        return self.eligible


ELIGIBLE = Eligibility()


def check_eligibility(coupon: CouponSnapshot, context: PurchaseContext) -> Eligibility:
    """Run the ordered eligibility checks; the first failing check wins."""
    if not coupon.active:
        return Eligibility(IneligibilityReason.INACTIVE)

    if context.now < coupon.window.start_at:
        return Eligibility(IneligibilityReason.NOT_YET_ACTIVE)
    if context.now > coupon.window.end_at:
        return Eligibility(IneligibilityReason.EXPIRED)

    total = coupon.usage_limit.total
    if total is not None and coupon.used_count >= total:
        return Eligibility(IneligibilityReason.GLOBAL_LIMIT_REACHED)

    if coupon.redemptions_by(context.user_id) >= coupon.usage_limit.per_user:
        return Eligibility(IneligibilityReason.USER_LIMIT_REACHED)

    scope = coupon.scope
    if isinstance(scope, SpecificCourses) and context.course_id not in scope.course_ids:
        return Eligibility(IneligibilityReason.NOT_APPLICABLE_TO_COURSE)
    if isinstance(scope, SpecificCategories) and context.course_category not in scope.categories:
        return Eligibility(IneligibilityReason.NOT_APPLICABLE_TO_CATEGORY)

    if coupon.minimum_amount is not None and context.purchase_amount < coupon.minimum_amount:
        return Eligibility(IneligibilityReason.BELOW_MINIMUM_AMOUNT)

    return ELIGIBLE


def compute_discount(coupon: CouponSnapshot, purchase_amount: Money) -> Money:
    """Compute the discount for ``purchase_amount``, always within ``[0, purchase_amount]``."""
    zero = Money.zero(purchase_amount.currency)

    if coupon.kind == CouponKind.PERCENTAGE:
        discount = purchase_amount.percentage(coupon.percentage_rate)  # type: ignore[arg-type]
        if coupon.maximum_discount is not None and discount > coupon.maximum_discount:
            discount = coupon.maximum_discount
    else:
        discount = coupon.amount  # type: ignore[assignment]
        if discount > purchase_amount:  # type: ignore[operator]
            discount = purchase_amount

    return discount.clamp(zero, purchase_amount)  # type: ignore[union-attr]


def final_amount(purchase_amount: Money, discount: Money) -> Money:
    """Amount left to pay after ``discount``; never negative."""
    remaining = purchase_amount - discount
    if remaining.is_negative:
        return Money.zero(purchase_amount.currency)
    return remaining
