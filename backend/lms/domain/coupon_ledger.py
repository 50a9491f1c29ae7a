"""Redemption recording for coupon snapshots."""

from dataclasses import replace
from datetime import datetime
from uuid import UUID

from lms.domain.coupon import CouponSnapshot, Redemption
from lms.domain.money import Money


def redeem(
    coupon: CouponSnapshot,
    user_id: UUID,
    order_id: str,
    discount_amount: Money,
    now: datetime,
) -> CouponSnapshot:
    """Return ``coupon`` with one more redemption appended to its log.

    The caller must have checked eligibility against this same snapshot and
    is responsible for persisting the result with an optimistic write keyed
    on the snapshot's ``used_count``.
    """
    redemption = Redemption(
        user_id=user_id,
        order_id=order_id,
        discount=discount_amount,
        used_at=now,
    )
    return replace(coupon, redemptions=(*coupon.redemptions, redemption))


def total_discount(coupon: CouponSnapshot) -> Money:
    """Sum of all discounts granted through ``coupon``."""
    total = Money.zero(coupon.currency)
    for redemption in coupon.redemptions:
        total = total + redemption.discount
    return total
