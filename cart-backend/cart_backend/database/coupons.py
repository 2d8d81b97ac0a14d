"""Coupon storage for the cart backend"""

from datetime import datetime, timezone
from typing import Optional

from pricing.coupons import Coupon, CouponStatus
from pricing.models import CouponDiscountType

_LAUNCH = datetime(2024, 1, 1, tzinfo=timezone.utc)

# Seed coupons
COUPONS: dict[str, Coupon] = {
    coupon.code: coupon
    for coupon in [
        Coupon(
            code="WELCOME10",
            description="10% off the first order, up to 50",
            discount_type=CouponDiscountType.PERCENTAGE,
            discount_value=10,
            start_date=_LAUNCH,
            maximum_discount=50,
        ),
        Coupon(
            code="SAVE20",
            description="20 off orders of 100 or more",
            discount_type=CouponDiscountType.FIXED_AMOUNT,
            discount_value=20,
            start_date=_LAUNCH,
            minimum_order=100,
        ),
        Coupon(
            code="SPRING5",
            discount_type=CouponDiscountType.PERCENTAGE,
            discount_value=5,
            start_date=_LAUNCH,
            end_date=datetime(2024, 6, 1, tzinfo=timezone.utc),
        ),
        Coupon(
            code="VIP50",
            discount_type=CouponDiscountType.FIXED_AMOUNT,
            discount_value=50,
            start_date=_LAUNCH,
            usage_limit=1,
            usage_count=1,
        ),
        Coupon(
            code="HOLIDAY15",
            discount_type=CouponDiscountType.PERCENTAGE,
            discount_value=15,
            status=CouponStatus.PAUSED,
            start_date=_LAUNCH,
        ),
    ]
}


class CouponDatabase:
    """In-memory coupon storage"""

    def __init__(self, coupons: Optional[dict[str, Coupon]] = None):
        self.coupons: dict[str, Coupon] = dict(COUPONS if coupons is None else coupons)

    def get_coupon(self, code: str) -> Optional[Coupon]:
        """Look up a coupon by code, case-insensitively"""
        return self.coupons.get(code.strip().upper())

    def upsert_coupon(self, coupon: Coupon) -> Coupon:
        self.coupons[coupon.code] = coupon
        return coupon


# Singleton instance
coupon_db = CouponDatabase()
