"""Coupon and redemption schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Self
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from lms.domain.coupon import CouponKind, CouponScopeType, CourseCategory, normalize_code
from lms.models.shared import as_utc


def check_value(coupon_type: CouponKind, value: Decimal) -> None:
    if coupon_type == CouponKind.PERCENTAGE and value > 100:
        raise ValueError("Percentage value must be between 0 and 100")
    if coupon_type == CouponKind.FIXED_AMOUNT and value != value.to_integral_value():
        raise ValueError("Fixed amount value must be a whole number of cents")


def check_scope(
    applicable_to: CouponScopeType, course_ids: list[UUID], categories: list[CourseCategory]
) -> None:
    if applicable_to == CouponScopeType.ALL_COURSES and (course_ids or categories):
        raise ValueError("courses and categories must be empty when applicable_to is all_courses")
    if applicable_to == CouponScopeType.SPECIFIC_COURSES:
        if not course_ids:
            raise ValueError("course_ids is required when applicable_to is specific_courses")
        if categories:
            raise ValueError("categories must be empty when applicable_to is specific_courses")
    if applicable_to == CouponScopeType.SPECIFIC_CATEGORIES:
        if not categories:
            raise ValueError("categories is required when applicable_to is specific_categories")
        if course_ids:
            raise ValueError("course_ids must be empty when applicable_to is specific_categories")


class CouponCreate(BaseModel):
    code: str = Field(min_length=3, max_length=20)
    description: str = Field(min_length=1, max_length=500)
    coupon_type: CouponKind
    value: Decimal = Field(ge=0)
    currency: str | None = Field(default=None, min_length=3, max_length=3)
    minimum_amount_cents: int | None = Field(default=None, ge=0)
    maximum_discount_cents: int | None = Field(default=None, ge=0)
    usage_limit_total: int | None = Field(default=None, ge=1)
    usage_limit_per_user: int = Field(default=1, ge=1)
    applicable_to: CouponScopeType = CouponScopeType.ALL_COURSES
    course_ids: list[UUID] = Field(default_factory=list)
    categories: list[CourseCategory] = Field(default_factory=list)
    is_active: bool = True
    start_at: datetime | None = None
    end_at: datetime

    @field_validator("code")
    @classmethod
    def validate_code(cls, value: str) -> str:
        return normalize_code(value)

    @field_validator("start_at", "end_at")
    @classmethod
    def to_utc(cls, value: datetime | None) -> datetime | None:
        return as_utc(value)

    @model_validator(mode="after")
    def validate_value(self) -> Self:
        """Validate the value range for the coupon type."""
        check_value(self.coupon_type, self.value)
        return self

    @model_validator(mode="after")
    def validate_scope(self) -> Self:
        """Validate that exactly the list matching applicable_to is populated."""
        check_scope(self.applicable_to, self.course_ids, self.categories)
        return self

    @model_validator(mode="after")
    def validate_window(self) -> Self:
        """Validate end_at is after start_at."""
        if self.start_at is not None and self.end_at <= self.start_at:
            raise ValueError("End date must be after start date")
        return self


class CouponUpdate(BaseModel):
    description: str | None = Field(default=None, min_length=1, max_length=500)
    value: Decimal | None = Field(default=None, ge=0)
    minimum_amount_cents: int | None = Field(default=None, ge=0)
    maximum_discount_cents: int | None = Field(default=None, ge=0)
    usage_limit_total: int | None = Field(default=None, ge=1)
    usage_limit_per_user: int | None = Field(default=None, ge=1)
    applicable_to: CouponScopeType | None = None
    course_ids: list[UUID] | None = None
    categories: list[CourseCategory] | None = None
    is_active: bool | None = None
    start_at: datetime | None = None
    end_at: datetime | None = None

    @field_validator("start_at", "end_at")
    @classmethod
    def to_utc(cls, value: datetime | None) -> datetime | None:
        return as_utc(value)


class CouponResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    code: str
    description: str
    coupon_type: str
    percentage_rate: Decimal | None = None
    amount_cents: int | None = None
    currency: str
    minimum_amount_cents: int | None = None
    maximum_discount_cents: int | None = None
    usage_limit_total: int | None = None
    usage_limit_per_user: int
    used_count: int
    applicable_to: str
    course_ids: list[UUID]
    categories: list[str]
    is_active: bool
    start_at: datetime
    end_at: datetime
    created_by: UUID | None = None
    created_at: datetime
    updated_at: datetime


class CouponRedemptionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    coupon_id: UUID
    user_id: UUID
    order_id: str
    discount_amount_cents: int
    currency: str
    used_at: datetime


class ValidateCouponRequest(BaseModel):
    code: str
    course_id: UUID | None = None
    course_amount_cents: int = Field(default=0, ge=0)


class CouponSummary(BaseModel):
    code: str
    coupon_type: str
    value: Decimal
    description: str


class ValidateCouponResponse(BaseModel):
    valid: bool
    message: str
    coupon: CouponSummary
    discount_amount_cents: int
    final_amount_cents: int
    savings_cents: int
    currency: str


class ApplyCouponRequest(BaseModel):
    code: str
    course_id: UUID
    order_amount_cents: int = Field(ge=0)
    order_id: str = Field(min_length=1, max_length=100)


class ApplyCouponResponse(BaseModel):
    code: str
    discount_amount_cents: int
    final_amount_cents: int
    currency: str
    used_count: int


class CouponAnalyticsResponse(BaseModel):
    """Usage figures for a coupon."""

    times_redeemed: int
    unique_users: int
    total_discount_cents: int
    currency: str
    remaining_uses: int | None = None
