"""Coupon repository for data access."""

import logging
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import or_, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Query, Session

from lms.core.config import settings
from lms.core.sorting import apply_sort
from lms.domain.coupon import (
    CouponKind,
    CouponScopeType,
    CouponSnapshot,
    Redemption,
    UsageLimit,
    ValidityWindow,
    build_scope,
    normalize_code,
)
from lms.domain.money import Money
from lms.domain.ports import ConflictError
from lms.models.coupon import Coupon, CouponListStatus
from lms.models.coupon_redemption import CouponRedemption
from lms.models.shared import as_utc, utc_now
from lms.schemas.coupon import CouponCreate, CouponUpdate, check_scope, check_value

logger = logging.getLogger(__name__)


def _money(cents: int | None, currency: str) -> Money | None:
    if cents is None:
        return None
    return Money(int(cents), currency)


def to_snapshot(coupon: Coupon, redemptions: list[CouponRedemption]) -> CouponSnapshot:
    """Build the immutable rule-engine view of a coupon row and its redemption log."""
    currency = str(coupon.currency)
    rate = coupon.percentage_rate
    return CouponSnapshot(
        code=str(coupon.code),
        kind=CouponKind(coupon.coupon_type),
        window=ValidityWindow(as_utc(coupon.start_at), as_utc(coupon.end_at)),  # type: ignore[arg-type]
        percentage_rate=Decimal(str(rate)) if rate is not None else None,
        amount=_money(coupon.amount_cents, currency),  # type: ignore[arg-type]
        minimum_amount=_money(coupon.minimum_amount_cents, currency),  # type: ignore[arg-type]
        maximum_discount=_money(coupon.maximum_discount_cents, currency),  # type: ignore[arg-type]
        usage_limit=UsageLimit(
            total=coupon.usage_limit_total,  # type: ignore[arg-type]
            per_user=coupon.usage_limit_per_user or 1,  # type: ignore[arg-type]
        ),
        scope=build_scope(
            coupon.applicable_to,  # type: ignore[arg-type]
            [UUID(str(course_id)) for course_id in coupon.course_ids or []],
            coupon.categories or [],  # type: ignore[arg-type]
        ),
        active=bool(coupon.is_active),
        redemptions=tuple(
            Redemption(
                user_id=r.user_id,  # type: ignore[arg-type]
                order_id=str(r.order_id),
                discount=Money(int(r.discount_amount_cents), str(r.currency)),  # type: ignore[arg-type]
                used_at=as_utc(r.used_at),  # type: ignore[arg-type]
            )
            for r in redemptions
        ),
        currency=currency,
        id=coupon.id,  # type: ignore[arg-type]
    )


class CouponRepository:
    """Repository for Coupon model."""

    def __init__(self, db: Session):
        self.db = db

    def _filtered(
        self,
        coupon_type: CouponKind | None = None,
        status: CouponListStatus | None = None,
        search: str | None = None,
        now: datetime | None = None,
    ) -> Query:  # type: ignore[type-arg]
        query = self.db.query(Coupon)
        now = now or utc_now()

        if coupon_type:
            query = query.filter(Coupon.coupon_type == coupon_type.value)
        if status == CouponListStatus.ACTIVE:
            query = query.filter(
                Coupon.is_active.is_(True), Coupon.start_at <= now, Coupon.end_at >= now
            )
        elif status == CouponListStatus.EXPIRED:
            query = query.filter(Coupon.end_at < now)
        elif status == CouponListStatus.INACTIVE:
            query = query.filter(Coupon.is_active.is_(False))
        if search:
            pattern = f"%{search}%"
            query = query.filter(
                or_(Coupon.code.ilike(pattern), Coupon.description.ilike(pattern))
            )
        return query

    def get_all(
        self,
        skip: int = 0,
        limit: int = 100,
        coupon_type: CouponKind | None = None,
        status: CouponListStatus | None = None,
        search: str | None = None,
        order_by: str | None = None,
        sort_order: str | None = "desc",
        now: datetime | None = None,
    ) -> list[Coupon]:
        """Get coupons with optional filters."""
        query = self._filtered(coupon_type, status, search, now)
        query = apply_sort(query, Coupon, order_by, sort_order)
        return query.offset(skip).limit(limit).all()

    def count(
        self,
        coupon_type: CouponKind | None = None,
        status: CouponListStatus | None = None,
        search: str | None = None,
        now: datetime | None = None,
    ) -> int:
        return self._filtered(coupon_type, status, search, now).count()

    def get_by_id(self, coupon_id: UUID) -> Coupon | None:
        """Get a coupon by ID."""
        return self.db.query(Coupon).filter(Coupon.id == coupon_id).first()

    def get_by_code(self, code: str) -> Coupon | None:
        """Get a coupon by code, case-insensitively."""
        try:
            code = normalize_code(code)
        except ValueError:
            return None
        return self.db.query(Coupon).filter(Coupon.code == code).first()

    def get_redemptions(
        self, coupon_id: UUID, skip: int = 0, limit: int | None = None
    ) -> list[CouponRedemption]:
        query = (
            self.db.query(CouponRedemption)
            .filter(CouponRedemption.coupon_id == coupon_id)
            .order_by(CouponRedemption.used_at.asc(), CouponRedemption.id.asc())
            .offset(skip)
        )
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    def _commit_valid(self, coupon: Coupon) -> Coupon:
        """Commit ``coupon`` if its stored state is a well-formed coupon."""
        try:
            to_snapshot(coupon, [])
        except ValueError:
            self.db.rollback()
            raise
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError(f"Coupon with code '{coupon.code}' already exists") from None
        self.db.refresh(coupon)
        return coupon

    def create(self, data: CouponCreate, created_by: UUID | None = None) -> Coupon:
        """Create a new coupon."""
        start_at = data.start_at or utc_now()
        if data.end_at <= start_at:
            raise ValueError("End date must be after start date")

        coupon = Coupon(
            code=data.code,
            description=data.description,
            coupon_type=data.coupon_type.value,
            currency=(data.currency or settings.DEFAULT_CURRENCY).upper(),
            minimum_amount_cents=data.minimum_amount_cents,
            maximum_discount_cents=data.maximum_discount_cents,
            usage_limit_total=data.usage_limit_total,
            usage_limit_per_user=data.usage_limit_per_user,
            used_count=0,
            applicable_to=data.applicable_to.value,
            course_ids=[str(course_id) for course_id in data.course_ids],
            categories=[category.value for category in data.categories],
            is_active=data.is_active,
            start_at=start_at,
            end_at=data.end_at,
            created_by=created_by,
        )
        self._set_value(coupon, data.value)
        self.db.add(coupon)
        return self._commit_valid(coupon)

    @staticmethod
    def _set_value(coupon: Coupon, value: Decimal) -> None:
        if coupon.coupon_type == CouponKind.PERCENTAGE.value:
            coupon.percentage_rate = value  # type: ignore[assignment]
            coupon.amount_cents = None  # type: ignore[assignment]
        else:
            coupon.amount_cents = int(value)  # type: ignore[assignment]
            coupon.percentage_rate = None  # type: ignore[assignment]

    def update(self, code: str, data: CouponUpdate) -> Coupon | None:
        """Update a coupon by code. The code itself and the coupon type are immutable."""
        coupon = self.get_by_code(code)
        if not coupon:
            return None

        update_data = data.model_dump(exclude_unset=True)
        value = update_data.pop("value", None)

        if update_data.get("applicable_to"):
            update_data["applicable_to"] = update_data["applicable_to"].value
        else:
            update_data.pop("applicable_to", None)
        for key in ("description", "usage_limit_per_user", "is_active", "start_at", "end_at"):
            if key in update_data and update_data[key] is None:
                update_data.pop(key)
        if "course_ids" in update_data:
            update_data["course_ids"] = [str(c) for c in update_data["course_ids"] or []]
        if "categories" in update_data:
            update_data["categories"] = [c.value for c in update_data["categories"] or []]

        for key, val in update_data.items():
            setattr(coupon, key, val)

        try:
            if value is not None:
                check_value(CouponKind(coupon.coupon_type), value)
                self._set_value(coupon, value)
            check_scope(
                CouponScopeType(coupon.applicable_to),
                list(coupon.course_ids or []),
                list(coupon.categories or []),
            )
        except ValueError:
            self.db.rollback()
            raise
        return self._commit_valid(coupon)

    def toggle_status(self, code: str) -> Coupon | None:
        """Flip a coupon's ``is_active`` flag."""
        coupon = self.get_by_code(code)
        if not coupon:
            return None

        coupon.is_active = not coupon.is_active  # type: ignore[assignment]
        self.db.commit()
        self.db.refresh(coupon)
        return coupon

    def delete(self, code: str) -> bool:
        """Delete a coupon by code.

        Raises:
            ConflictError: If the coupon has already been redeemed.
        """
        coupon = self.get_by_code(code)
        if not coupon:
            return False
        if coupon.used_count or self.get_redemptions(coupon.id, limit=1):  # type: ignore[arg-type]
            raise ConflictError("Coupon has been redeemed and cannot be deleted")

        self.db.delete(coupon)
        self.db.commit()
        return True

    def find_by_code(self, code: str) -> CouponSnapshot | None:
        coupon = self.get_by_code(code)
        if not coupon:
            return None
        return to_snapshot(coupon, self.get_redemptions(coupon.id))  # type: ignore[arg-type]

    def save_with_optimistic_redemption(
        self, coupon: CouponSnapshot, expected_used_count: int
    ) -> CouponSnapshot:
        """Persist redemptions appended to ``coupon`` since it was loaded.

        The counter bump is conditional on ``used_count`` still equalling
        ``expected_used_count`` and on the total limit, and the redemption rows
        are written in the same transaction.

        Raises:
            ConflictError: If another writer redeemed the coupon first.
        """
        if coupon.id is None:
            raise ValueError("Cannot save a coupon snapshot without an id")

        added = coupon.redemptions[expected_used_count:]
        if not added:
            return coupon

        stmt = (
            update(Coupon)
            .where(
                Coupon.id == coupon.id,
                Coupon.used_count == expected_used_count,
                or_(
                    Coupon.usage_limit_total.is_(None),
                    Coupon.used_count + len(added) <= Coupon.usage_limit_total,
                ),
            )
            .values(used_count=Coupon.used_count + len(added))
            .execution_options(synchronize_session=False)
        )
        result = self.db.execute(stmt)
        if result.rowcount != 1:  # type: ignore[attr-defined]
            self.db.rollback()
            logger.info(
                "Optimistic redemption of coupon %s lost the race (expected used_count=%d)",
                coupon.code,
                expected_used_count,
            )
            raise ConflictError(f"Coupon {coupon.code} was redeemed concurrently")

        for redemption in added:
            self.db.add(
                CouponRedemption(
                    coupon_id=coupon.id,
                    user_id=redemption.user_id,
                    order_id=redemption.order_id,
                    discount_amount_cents=redemption.discount.amount_cents,
                    currency=redemption.discount.currency,
                    used_at=redemption.used_at,
                )
            )
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError(f"Coupon {coupon.code} was redeemed concurrently") from None

        return self.find_by_code(coupon.code) or coupon
