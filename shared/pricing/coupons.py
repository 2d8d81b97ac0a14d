"""
Coupon handling

Resolves merchant coupon records into an AppliedCoupon and combines an
applied coupon with the rule-engine totals. Rule discounts and coupon
discounts are additive: rules are storewide policy, a coupon is a
customer-specific promotion.
"""

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Iterable, Optional

from pydantic import BaseModel, Field, field_validator

from .calculator import (
    STANDARD_SHIPPING_COST,
    compute_totals,
    free_shipping_threshold,
    round2,
)
from .exceptions import CouponRejected
from .models import (
    AppliedCoupon,
    CartRule,
    CartSummary,
    CartTotals,
    CouponDiscountType,
    LineItem,
)

logger = logging.getLogger(__name__)


class CouponStatus(str, Enum):
    ACTIVE = "active"
    PAUSED = "paused"
    EXPIRED = "expired"
    SCHEDULED = "scheduled"


class Coupon(BaseModel):
    """Merchant coupon record as stored by the backend"""
    code: str
    description: Optional[str] = None
    discount_type: CouponDiscountType
    discount_value: float = Field(ge=0, allow_inf_nan=False)
    status: CouponStatus = CouponStatus.ACTIVE
    start_date: datetime
    end_date: Optional[datetime] = None
    minimum_order: Optional[float] = None
    maximum_discount: Optional[float] = None
    usage_limit: Optional[int] = None
    usage_count: int = 0

    @field_validator("code")
    @classmethod
    def normalize_code(cls, value: str) -> str:
        return value.strip().upper()


def _as_aware(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def resolve_coupon(coupon: Coupon, order_total: float, now: datetime) -> AppliedCoupon:
    """
    Validate a coupon against an order total and compute its money amount.

    Args:
        coupon: The merchant coupon record
        order_total: Order total the coupon is applied to
        now: Evaluation time

    Returns:
        AppliedCoupon with the resolved discount amount

    Raises:
        CouponRejected: If the coupon is inactive, outside its validity
            window, below its minimum order or out of uses
    """
    now = _as_aware(now)

    if coupon.status != CouponStatus.ACTIVE:
        raise CouponRejected(coupon.code, f"Coupon is {coupon.status.value}")

    if _as_aware(coupon.start_date) > now:
        raise CouponRejected(coupon.code, "Coupon is not active yet")

    if coupon.end_date and _as_aware(coupon.end_date) < now:
        raise CouponRejected(coupon.code, "Coupon has expired")

    if coupon.minimum_order and order_total < coupon.minimum_order:
        raise CouponRejected(coupon.code, f"Minimum order is {coupon.minimum_order:.2f}")

    if coupon.usage_limit is not None and coupon.usage_count >= coupon.usage_limit:
        raise CouponRejected(coupon.code, "Coupon usage limit reached")

    if coupon.discount_type == CouponDiscountType.PERCENTAGE:
        amount = order_total * coupon.discount_value / 100
        if coupon.maximum_discount is not None:
            amount = min(amount, coupon.maximum_discount)
    else:
        amount = min(coupon.discount_value, order_total)

    return AppliedCoupon(
        code=coupon.code,
        discount_type=coupon.discount_type,
        discount_amount=round2(max(0.0, amount)),
    )


def combine_with_coupon(totals: CartTotals, coupon: Optional[AppliedCoupon]) -> CartTotals:
    """
    Add a coupon discount on top of the rule-engine discount.

    The combined discount is not capped; only the total is floored at zero.
    """
    if coupon is None:
        return totals

    combined = totals.discount + coupon.discount_amount
    return totals.model_copy(
        update={
            "discount": combined,
            "total": max(0.0, round2(totals.subtotal + totals.shipping_cost - combined)),
        }
    )


def summarize(
    items: Iterable[LineItem],
    rules: Iterable[CartRule] = (),
    coupon: Optional[AppliedCoupon] = None,
    *,
    standard_shipping: float = STANDARD_SHIPPING_COST,
    strict: bool = False,
) -> CartSummary:
    """Full cart summary: rule totals, coupon, and the free-shipping hint"""
    items = list(items)
    rules = list(rules)

    totals = compute_totals(items, rules, standard_shipping=standard_shipping, strict=strict)
    combined = combine_with_coupon(totals, coupon)
    threshold = free_shipping_threshold(rules)

    return CartSummary(
        item_count=sum(item.quantity for item in items),
        subtotal=totals.subtotal,
        shipping_cost=totals.shipping_cost,
        rule_discount=totals.discount,
        coupon_discount=coupon.discount_amount if coupon else 0.0,
        discount=combined.discount,
        total=combined.total,
        applied_coupon=coupon,
        free_shipping_threshold=threshold,
        amount_until_free_shipping=(
            round2(max(0.0, threshold - totals.subtotal)) if threshold is not None else None
        ),
        validation_errors=totals.validation_errors,
        applied_benefits=totals.applied_benefits,
    )
