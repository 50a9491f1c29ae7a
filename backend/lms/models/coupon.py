"""Coupon model for course discounts."""

from enum import Enum

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    func,
)

from lms.core.database import Base
from lms.domain.coupon import CouponKind, CouponScopeType
from lms.models.shared import UUIDType, generate_uuid

__all__ = ["Coupon", "CouponKind", "CouponListStatus", "CouponScopeType"]


class CouponListStatus(str, Enum):
    """Values accepted by the coupon list ``status`` filter."""

    ACTIVE = "active"
    EXPIRED = "expired"
    INACTIVE = "inactive"


class Coupon(Base):
    """Coupon model for course discounts.

    ``used_count`` mirrors the number of rows in ``coupon_redemptions`` and is
    the version checked by optimistic redemption writes.
    """

    __tablename__ = "coupons"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    code = Column(String(20), unique=True, index=True, nullable=False)
    description = Column(Text, nullable=False)

    coupon_type = Column(String(20), nullable=False)
    percentage_rate = Column(Numeric(5, 2), nullable=True)
    amount_cents = Column(Integer, nullable=True)
    currency = Column(String(3), nullable=False, default="USD")
    minimum_amount_cents = Column(Integer, nullable=True)
    maximum_discount_cents = Column(Integer, nullable=True)

    usage_limit_total = Column(Integer, nullable=True)
    usage_limit_per_user = Column(Integer, nullable=False, default=1)
    used_count = Column(Integer, nullable=False, default=0)

    applicable_to = Column(String(30), nullable=False, default=CouponScopeType.ALL_COURSES.value)
    course_ids = Column(JSON, nullable=False, default=list)
    categories = Column(JSON, nullable=False, default=list)

    is_active = Column(Boolean, nullable=False, default=True)
    start_at = Column(DateTime(timezone=True), nullable=False)
    end_at = Column(DateTime(timezone=True), nullable=False)

    created_by = Column(
        UUIDType, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
