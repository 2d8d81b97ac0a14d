"""Coupon routes for the cart backend"""

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from pricing.coupons import resolve_coupon
from pricing.exceptions import CouponRejected
from pricing.models import AppliedCoupon

from ..database.coupons import coupon_db
from ..models.coupon import ValidateCouponRequest
from ..security.identity import optional_identity

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/coupons", tags=["Coupons"])


@router.post("/validate", response_model=AppliedCoupon)
async def validate_coupon(
    request: ValidateCouponRequest,
    subject: Optional[str] = Depends(optional_identity),
):
    """
    Validate a coupon code against an order total.

    Returns the resolved discount. Unknown codes yield 404, any other
    refusal (expired, below minimum, used up) yields 400 with the reason.
    """
    coupon = coupon_db.get_coupon(request.code)
    if not coupon:
        raise HTTPException(status_code=404, detail="Invalid coupon code")

    try:
        applied = resolve_coupon(coupon, request.order_total, now=datetime.now(timezone.utc))
    except CouponRejected as e:
        logger.info(f"Coupon {e.code} rejected for {subject or 'guest'}: {e.reason}")
        raise HTTPException(status_code=400, detail=e.reason)

    logger.info(f"Coupon {applied.code} resolved to {applied.discount_amount} for {subject or 'guest'}")
    return applied
