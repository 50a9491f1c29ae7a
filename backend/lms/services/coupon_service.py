"""Coupon validation and redemption service."""

import logging
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from sqlalchemy.orm import Session

from lms.core.config import settings
from lms.domain.coupon import CouponSnapshot
from lms.domain.coupon_ledger import redeem, total_discount
from lms.domain.coupon_rules import (
    Eligibility,
    PurchaseContext,
    check_eligibility,
    compute_discount,
    final_amount,
)
from lms.domain.money import Money
from lms.models.audit_log import AuditResourceType
from lms.models.coupon import Coupon
from lms.models.shared import utc_now
from lms.repositories.coupon_repository import CouponRepository
from lms.repositories.course_repository import CourseRepository
from lms.schemas.coupon import CouponUpdate
from lms.services.audit_service import AuditService, snapshot_fields
from lms.services.errors import ConflictError, IneligibleCouponError, NotFoundError

logger = logging.getLogger(__name__)

_EDITABLE_FIELDS = (
    "description",
    "percentage_rate",
    "amount_cents",
    "minimum_amount_cents",
    "maximum_discount_cents",
    "usage_limit_total",
    "usage_limit_per_user",
    "applicable_to",
    "course_ids",
    "categories",
    "is_active",
    "start_at",
    "end_at",
)


@dataclass
class CouponQuote:
    """A coupon evaluated against one purchase."""

    coupon: CouponSnapshot
    eligibility: Eligibility
    discount: Money
    final_amount: Money


@dataclass
class CouponAnalytics:
    times_redeemed: int
    unique_users: int
    total_discount: Money
    remaining_uses: int | None


class CouponService:
    """Service for coupon validation, application and usage reporting."""

    def __init__(self, db: Session):
        self.db = db
        self.coupon_repo = CouponRepository(db)
        self.course_repo = CourseRepository(db)

    def _load(self, code: str) -> CouponSnapshot:
        coupon = self.coupon_repo.find_by_code(code)
        if coupon is None:
            raise NotFoundError("Invalid coupon code")
        return coupon

    def _quote(
        self,
        coupon: CouponSnapshot,
        user_id: UUID,
        course_id: UUID | None,
        amount_cents: int,
        now: datetime,
    ) -> CouponQuote:
        course = self.course_repo.get_course(course_id) if course_id else None
        purchase = Money(amount_cents, coupon.currency)
        context = PurchaseContext(
            user_id=user_id,
            purchase_amount=purchase,
            now=now,
            course_id=course_id,
            course_category=course.category if course else None,
        )
        eligibility = check_eligibility(coupon, context)
        if not eligibility:
            return CouponQuote(coupon, eligibility, Money.zero(coupon.currency), purchase)
        discount = compute_discount(coupon, purchase)
        return CouponQuote(coupon, eligibility, discount, final_amount(purchase, discount))

    def validate_coupon(
        self,
        code: str,
        user_id: UUID,
        course_id: UUID | None = None,
        amount_cents: int = 0,
        now: datetime | None = None,
    ) -> CouponQuote:
        """Check a coupon against a prospective purchase without redeeming it.

        Raises:
            NotFoundError: If no coupon has this code.
            IneligibleCouponError: If any eligibility check fails.
        """
        quote = self._quote(self._load(code), user_id, course_id, amount_cents, now or utc_now())
        if not quote.eligibility:
            raise IneligibleCouponError(quote.eligibility.reason)  # type: ignore[arg-type]
        return quote

    def apply_coupon(
        self,
        code: str,
        user_id: UUID,
        course_id: UUID,
        order_amount_cents: int,
        order_id: str,
        now: datetime | None = None,
    ) -> CouponQuote:
        """Redeem a coupon for an order.

        The read-check-write cycle is retried when a concurrent redemption
        wins the optimistic write, up to ``CONFLICT_RETRY_ATTEMPTS`` times.

        Raises:
            NotFoundError: If no coupon has this code.
            IneligibleCouponError: If any eligibility check fails.
            ConflictError: If every attempt lost a race.
        """
        attempts = max(1, settings.CONFLICT_RETRY_ATTEMPTS)
        for attempt in range(1, attempts + 1):
            moment = now or utc_now()
            coupon = self._load(code)
            quote = self._quote(coupon, user_id, course_id, order_amount_cents, moment)
            if not quote.eligibility:
                logger.info(
                    "Rejected coupon %s for user %s: %s",
                    coupon.code,
                    user_id,
                    quote.eligibility.reason.value,  # type: ignore[union-attr]
                )
                raise IneligibleCouponError(quote.eligibility.reason)  # type: ignore[arg-type]

            updated = redeem(coupon, user_id, order_id, quote.discount, moment)
            try:
                saved = self.coupon_repo.save_with_optimistic_redemption(
                    updated, expected_used_count=coupon.used_count
                )
            except ConflictError:
                logger.warning(
                    "Conflict redeeming coupon %s (attempt %d of %d)", coupon.code, attempt, attempts
                )
                continue

            logger.info(
                "Coupon %s redeemed by user %s for order %s: discount %s",
                saved.code,
                user_id,
                order_id,
                quote.discount,
            )
            return CouponQuote(saved, quote.eligibility, quote.discount, quote.final_amount)

        raise ConflictError("Coupon is being redeemed concurrently, please retry")

    def update_coupon(self, code: str, data: CouponUpdate, actor_id: str | None = None) -> Coupon:
        """Update a coupon and record the changed fields.

        Raises:
            NotFoundError: If no coupon has this code.
            ValueError: If the update leaves the coupon malformed.
        """
        coupon = self.coupon_repo.get_by_code(code)
        if coupon is None:
            raise NotFoundError("Coupon not found")
        before = snapshot_fields(coupon, _EDITABLE_FIELDS)

        updated = self.coupon_repo.update(code, data)
        AuditService(self.db).log_update(
            resource_type=AuditResourceType.COUPON,
            resource_id=updated.id,  # type: ignore[union-attr, arg-type]
            actor_type="user" if actor_id else "system",
            actor_id=actor_id,
            old_data=before,
            new_data=snapshot_fields(updated, _EDITABLE_FIELDS),
        )
        return updated  # type: ignore[return-value]

    def toggle_status(self, code: str, actor_id: str | None = None) -> Coupon:
        """Activate or deactivate a coupon and record the change."""
        coupon = self.coupon_repo.toggle_status(code)
        if coupon is None:
            raise NotFoundError("Coupon not found")
        old_status, new_status = (
            ("inactive", "active") if coupon.is_active else ("active", "inactive")
        )
        AuditService(self.db).log_status_change(
            resource_type=AuditResourceType.COUPON,
            resource_id=coupon.id,  # type: ignore[arg-type]
            old_status=old_status,
            new_status=new_status,
            actor_type="user" if actor_id else "system",
            actor_id=actor_id,
        )
        logger.info("Coupon %s is now %s", coupon.code, new_status)
        return coupon

    def get_analytics(self, code: str) -> CouponAnalytics:
        coupon = self._load(code)
        total = coupon.usage_limit.total
        return CouponAnalytics(
            times_redeemed=coupon.used_count,
            unique_users=len({r.user_id for r in coupon.redemptions}),
            total_discount=total_discount(coupon),
            remaining_uses=max(total - coupon.used_count, 0) if total is not None else None,
        )
