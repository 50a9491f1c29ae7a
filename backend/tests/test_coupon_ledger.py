"""Tests for coupon redemption recording."""

from datetime import UTC, datetime, timedelta
from decimal import Decimal
from uuid import uuid4

from lms.domain.coupon import CouponKind, CouponSnapshot, ValidityWindow
from lms.domain.coupon_ledger import redeem, total_discount
from lms.domain.money import Money

NOW = datetime(2026, 5, 1, tzinfo=UTC)


def _coupon() -> CouponSnapshot:
    return CouponSnapshot(
        code="LEDGER",
        kind=CouponKind.PERCENTAGE,
        window=ValidityWindow(NOW - timedelta(days=1), NOW + timedelta(days=1)),
        percentage_rate=Decimal("25"),
    )


class TestRedeem:
    def test_appends_redemption(self) -> None:
        user_id = uuid4()
        coupon = _coupon()
        updated = redeem(coupon, user_id, "order-1", Money(250), NOW)

        assert updated.used_count == 1
        assert updated.redemptions_by(user_id) == 1
        assert updated.redemptions[0].order_id == "order-1"
        assert updated.redemptions[0].used_at == NOW

    def test_does_not_mutate_original(self) -> None:
        coupon = _coupon()
        redeem(coupon, uuid4(), "order-1", Money(250), NOW)
        assert coupon.used_count == 0


class TestTotalDiscount:
    def test_sums_redemptions(self) -> None:
        coupon = _coupon()
        coupon = redeem(coupon, uuid4(), "a", Money(250), NOW)
        coupon = redeem(coupon, uuid4(), "b", Money(100), NOW)
        assert total_discount(coupon) == Money(350)

    def test_empty_log(self) -> None:
        assert total_discount(_coupon()) == Money(0)
