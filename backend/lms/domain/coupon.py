"""Coupon snapshot types shared by the rule engine and the ledger."""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from lms.domain.money import DEFAULT_CURRENCY, Money

COUPON_CODE_PATTERN = re.compile(r"^[A-Z0-9_-]+$")


class CouponKind(str, Enum):
    PERCENTAGE = "percentage"
    FIXED_AMOUNT = "fixed_amount"


class CouponScopeType(str, Enum):
    ALL_COURSES = "all_courses"
    SPECIFIC_COURSES = "specific_courses"
    SPECIFIC_CATEGORIES = "specific_categories"


class CourseCategory(str, Enum):
    DEVELOPMENT = "development"
    BUSINESS = "business"
    DESIGN = "design"
    MARKETING = "marketing"
    IT_SOFTWARE = "it-software"
    PERSONAL_DEVELOPMENT = "personal-development"
    HEALTH_FITNESS = "health-fitness"
    MUSIC = "music"
    ACADEMICS = "academics"


def normalize_code(raw: str) -> str:
    """Upper-case and validate a coupon code.

    Raises:
        ValueError: If the normalized code contains anything but A-Z, 0-9, ``_`` or ``-``.
    """
    code = raw.strip().upper()
    if not COUPON_CODE_PATTERN.match(code):
        raise ValueError(
            "Coupon code can only contain uppercase letters, numbers, underscores, and hyphens"
        )
    return code


@dataclass(frozen=True)
class AllCourses:
    pass


@dataclass(frozen=True)
class SpecificCourses:
    course_ids: frozenset[UUID]


@dataclass(frozen=True)
class SpecificCategories:
    categories: frozenset[str]


CouponScope = AllCourses | SpecificCourses | SpecificCategories


def build_scope(
    scope_type: CouponScopeType | str,
    course_ids: Iterable[UUID] | None = None,
    categories: Iterable[str] | None = None,
) -> CouponScope:
    """Build a scope value from its storage representation."""
    scope_type = CouponScopeType(scope_type)
    if scope_type == CouponScopeType.SPECIFIC_COURSES:
        return SpecificCourses(frozenset(course_ids or ()))
    if scope_type == CouponScopeType.SPECIFIC_CATEGORIES:
        return SpecificCategories(frozenset(categories or ()))
    return AllCourses()


@dataclass(frozen=True)
class ValidityWindow:
    """Inclusive ``[start_at, end_at]`` interval during which a coupon may be used."""

    start_at: datetime
    end_at: datetime

    def __post_init__(self) -> None:
        if self.end_at <= self.start_at:
            raise ValueError("End date must be after start date")

    def contains(self, now: datetime) -> bool:
        return self.start_at <= now <= self.end_at


@dataclass(frozen=True)
class UsageLimit:
    total: int | None = None
    per_user: int = 1

    def __post_init__(self) -> None:
        if self.total is not None and self.total < 1:
            raise ValueError("Total usage limit must be a positive integer")
        if self.per_user < 1:
            raise ValueError("Per user usage limit must be a positive integer")


@dataclass(frozen=True)
class Redemption:
    user_id: UUID
    order_id: str
    discount: Money
    used_at: datetime


@dataclass(frozen=True)
class CouponSnapshot:
    """Immutable view of a coupon and its redemption log.

    ``used_count`` is derived from the log, so the two can never disagree.
    """

    code: str
    kind: CouponKind
    window: ValidityWindow
    percentage_rate: Decimal | None = None
    amount: Money | None = None
    minimum_amount: Money | None = None
    maximum_discount: Money | None = None
    usage_limit: UsageLimit = field(default_factory=UsageLimit)
    scope: CouponScope = field(default_factory=AllCourses)
    active: bool = True
    redemptions: tuple[Redemption, ...] = ()
    currency: str = DEFAULT_CURRENCY
    id: UUID | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "code", normalize_code(self.code))
        object.__setattr__(self, "kind", CouponKind(self.kind))

        if self.kind == CouponKind.PERCENTAGE:
            if self.percentage_rate is None:
                raise ValueError("percentage_rate is required for percentage coupons")
            rate = Decimal(str(self.percentage_rate))
            if rate < 0 or rate > 100:
                raise ValueError("Percentage value must be between 0 and 100")
            object.__setattr__(self, "percentage_rate", rate)
        elif self.amount is None:
            raise ValueError("amount is required for fixed_amount coupons")
        elif self.amount.is_negative:
            raise ValueError("Value cannot be negative")

        for money in (self.amount, self.minimum_amount, self.maximum_discount):
            if money is None:
                continue
            if money.currency != self.currency:
                raise ValueError(
                    f"Coupon amounts must be in {self.currency}, got {money.currency}"
                )
            if money.is_negative:
                raise ValueError("Coupon amounts cannot be negative")

    @property
    def used_count(self) -> int:
        return len(self.redemptions)

    def redemptions_by(self, user_id: UUID) -> int:
        return sum(1 for r in self.redemptions if r.user_id == user_id)
