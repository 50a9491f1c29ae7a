"""CouponRedemption model: the append-only redemption log of a coupon."""

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String

from lms.core.database import Base
from lms.models.shared import UUIDType, generate_uuid, utc_now


class CouponRedemption(Base):
    """One successful application of a coupon to an order. Rows are never updated."""

    __tablename__ = "coupon_redemptions"
    __table_args__ = (Index("ix_coupon_redemptions_coupon_user", "coupon_id", "user_id"),)

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    coupon_id = Column(
        UUIDType, ForeignKey("coupons.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    user_id = Column(UUIDType, nullable=False)
    order_id = Column(String(100), nullable=False)
    discount_amount_cents = Column(Integer, nullable=False)
    currency = Column(String(3), nullable=False)
    used_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
