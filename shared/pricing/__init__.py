# Cart pricing: rule-engine totals and coupon composition

from .calculator import STANDARD_SHIPPING_COST, compute_totals, free_shipping_threshold, round2
from .coupons import Coupon, CouponStatus, combine_with_coupon, resolve_coupon, summarize
from .exceptions import CartError, CouponRejected, MalformedRuleError
from .models import (
    AppliedCoupon,
    CartRule,
    CartRuleStatus,
    CartRuleType,
    CartSummary,
    CartTotals,
    CouponDiscountType,
    LineItem,
)

__all__ = [
    "STANDARD_SHIPPING_COST",
    "compute_totals",
    "free_shipping_threshold",
    "round2",
    "Coupon",
    "CouponStatus",
    "combine_with_coupon",
    "resolve_coupon",
    "summarize",
    "CartError",
    "CouponRejected",
    "MalformedRuleError",
    "AppliedCoupon",
    "CartRule",
    "CartRuleStatus",
    "CartRuleType",
    "CartSummary",
    "CartTotals",
    "CouponDiscountType",
    "LineItem",
]
