"""Coupon API endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from lms.core.auth import get_current_user, require_admin
from lms.core.database import get_db
from lms.domain.coupon import CouponKind
from lms.models.coupon import Coupon, CouponListStatus
from lms.models.coupon_redemption import CouponRedemption
from lms.models.user import User
from lms.repositories.coupon_repository import CouponRepository
from lms.schemas.coupon import (
    ApplyCouponRequest,
    ApplyCouponResponse,
    CouponAnalyticsResponse,
    CouponCreate,
    CouponRedemptionResponse,
    CouponResponse,
    CouponSummary,
    CouponUpdate,
    ValidateCouponRequest,
    ValidateCouponResponse,
)
from lms.services.coupon_service import CouponQuote, CouponService
from lms.services.errors import ConflictError, IneligibleCouponError, NotFoundError

router = APIRouter()


def _summary(quote: CouponQuote, description: str) -> CouponSummary:
    coupon = quote.coupon
    if coupon.kind == CouponKind.PERCENTAGE:
        value = coupon.percentage_rate
    else:
        value = coupon.amount.amount_cents  # type: ignore[union-attr]
    return CouponSummary(
        code=coupon.code,
        coupon_type=coupon.kind.value,
        value=value,  # type: ignore[arg-type]
        description=description,
    )


@router.post(
    "/",
    response_model=CouponResponse,
    status_code=201,
    summary="Create coupon",
    responses={
        401: {"description": "Unauthorized"},
        403: {"description": "Admin access required"},
        409: {"description": "Coupon with this code already exists"},
        422: {"description": "Validation error"},
    },
)
async def create_coupon(
    data: CouponCreate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> Coupon:
    """Create a new coupon."""
    repo = CouponRepository(db)
    if repo.get_by_code(data.code):
        raise HTTPException(status_code=409, detail="Coupon with this code already exists")
    try:
        return repo.create(data, created_by=admin.id)  # type: ignore[arg-type]
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e)) from None
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from None


@router.get(
    "/",
    response_model=list[CouponResponse],
    summary="List coupons",
    responses={401: {"description": "Unauthorized"}, 403: {"description": "Forbidden"}},
)
async def list_coupons(
    response: Response,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    order_by: str | None = Query(default=None),
    sort_order: str = Query(default="desc", pattern="^(asc|desc)$"),
    coupon_type: CouponKind | None = None,
    status: CouponListStatus | None = None,
    search: str | None = Query(default=None, max_length=100),
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> list[Coupon]:
    """List coupons with optional type, status and text filters."""
    repo = CouponRepository(db)
    response.headers["X-Total-Count"] = str(
        repo.count(coupon_type=coupon_type, status=status, search=search)
    )
    return repo.get_all(
        skip=skip,
        limit=limit,
        coupon_type=coupon_type,
        status=status,
        search=search,
        order_by=order_by,
        sort_order=sort_order,
    )


@router.post(
    "/validate",
    response_model=ValidateCouponResponse,
    summary="Validate coupon",
    responses={
        400: {"description": "Coupon cannot be used for this purchase"},
        401: {"description": "Unauthorized"},
        404: {"description": "Invalid coupon code"},
    },
)
async def validate_coupon(
    data: ValidateCouponRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> ValidateCouponResponse:
    """Check a coupon against a prospective purchase and preview the discount."""
    service = CouponService(db)
    try:
        quote = service.validate_coupon(
            data.code,
            user_id=user.id,  # type: ignore[arg-type]
            course_id=data.course_id,
            amount_cents=data.course_amount_cents,
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from None
    except IneligibleCouponError as e:
        raise HTTPException(status_code=400, detail=str(e)) from None

    coupon = CouponRepository(db).get_by_code(data.code)
    return ValidateCouponResponse(
        valid=True,
        message=quote.eligibility.message,
        coupon=_summary(quote, str(coupon.description) if coupon else ""),
        discount_amount_cents=quote.discount.amount_cents,
        final_amount_cents=quote.final_amount.amount_cents,
        savings_cents=quote.discount.amount_cents,
        currency=quote.coupon.currency,
    )


@router.post(
    "/apply",
    response_model=ApplyCouponResponse,
    summary="Apply coupon",
    responses={
        400: {"description": "Coupon cannot be used for this purchase"},
        401: {"description": "Unauthorized"},
        404: {"description": "Invalid coupon code"},
        409: {"description": "Concurrent redemption, retry"},
    },
)
async def apply_coupon(
    data: ApplyCouponRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> ApplyCouponResponse:
    """Redeem a coupon for an order."""
    service = CouponService(db)
    try:
        quote = service.apply_coupon(
            data.code,
            user_id=user.id,  # type: ignore[arg-type]
            course_id=data.course_id,
            order_amount_cents=data.order_amount_cents,
            order_id=data.order_id,
        )
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from None
    except IneligibleCouponError as e:
        raise HTTPException(status_code=400, detail=str(e)) from None
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e)) from None

    return ApplyCouponResponse(
        code=quote.coupon.code,
        discount_amount_cents=quote.discount.amount_cents,
        final_amount_cents=quote.final_amount.amount_cents,
        currency=quote.coupon.currency,
        used_count=quote.coupon.used_count,
    )


@router.get(
    "/{code}",
    response_model=CouponResponse,
    summary="Get coupon",
    responses={
        401: {"description": "Unauthorized"},
        404: {"description": "Coupon not found"},
    },
)
async def get_coupon(
    code: str,
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> Coupon:
    """Get a coupon by code."""
    coupon = CouponRepository(db).get_by_code(code)
    if not coupon:
        raise HTTPException(status_code=404, detail="Coupon not found")
    return coupon


@router.put(
    "/{code}",
    response_model=CouponResponse,
    summary="Update coupon",
    responses={
        401: {"description": "Unauthorized"},
        404: {"description": "Coupon not found"},
        422: {"description": "Validation error"},
    },
)
async def update_coupon(
    code: str,
    data: CouponUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> Coupon:
    """Update a coupon by code."""
    try:
        return CouponService(db).update_coupon(code, data, actor_id=str(admin.id))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from None
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e)) from None
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from None


@router.delete(
    "/{code}",
    status_code=204,
    summary="Delete coupon",
    responses={
        401: {"description": "Unauthorized"},
        404: {"description": "Coupon not found"},
        409: {"description": "Coupon has been redeemed"},
    },
)
async def delete_coupon(
    code: str,
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> None:
    """Delete a coupon that has never been redeemed."""
    try:
        deleted = CouponRepository(db).delete(code)
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e)) from None
    if not deleted:
        raise HTTPException(status_code=404, detail="Coupon not found")


@router.put(
    "/{code}/toggle_status",
    response_model=CouponResponse,
    summary="Toggle coupon status",
    responses={
        401: {"description": "Unauthorized"},
        404: {"description": "Coupon not found"},
    },
)
async def toggle_coupon_status(
    code: str,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin),
) -> Coupon:
    """Activate an inactive coupon or deactivate an active one."""
    try:
        return CouponService(db).toggle_status(code, actor_id=str(admin.id))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from None


@router.get(
    "/{code}/redemptions",
    response_model=list[CouponRedemptionResponse],
    summary="List coupon redemptions",
    responses={
        401: {"description": "Unauthorized"},
        404: {"description": "Coupon not found"},
    },
)
async def list_coupon_redemptions(
    code: str,
    response: Response,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> list[CouponRedemption]:
    """List the redemption log of a coupon, oldest first."""
    repo = CouponRepository(db)
    coupon = repo.get_by_code(code)
    if not coupon:
        raise HTTPException(status_code=404, detail="Coupon not found")
    response.headers["X-Total-Count"] = str(coupon.used_count)
    return repo.get_redemptions(coupon.id, skip=skip, limit=limit)  # type: ignore[arg-type]


@router.get(
    "/{code}/analytics",
    response_model=CouponAnalyticsResponse,
    summary="Get coupon analytics",
    responses={
        401: {"description": "Unauthorized"},
        404: {"description": "Coupon not found"},
    },
)
async def get_coupon_analytics(
    code: str,
    db: Session = Depends(get_db),
    _admin: User = Depends(require_admin),
) -> CouponAnalyticsResponse:
    """Redemption counts and total discount granted by a coupon."""
    try:
        analytics = CouponService(db).get_analytics(code)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Coupon not found") from None
    return CouponAnalyticsResponse(
        times_redeemed=analytics.times_redeemed,
        unique_users=analytics.unique_users,
        total_discount_cents=analytics.total_discount.amount_cents,
        currency=analytics.total_discount.currency,
        remaining_uses=analytics.remaining_uses,
    )
