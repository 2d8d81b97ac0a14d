"""Pricing data models shared by the storefront and the cart backend"""

from typing import Optional
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class CartRuleType(str, Enum):
    """Kind of merchant cart rule"""
    SHIPPING = "shipping"
    DISCOUNT = "discount"
    RESTRICTION = "restriction"
    BENEFIT = "benefit"


class CartRuleStatus(str, Enum):
    ACTIVE = "active"
    PAUSED = "paused"


class CouponDiscountType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED_AMOUNT = "fixed_amount"


class LineItem(BaseModel):
    """A product row in a cart"""
    model_config = ConfigDict(frozen=True)

    product_id: str
    title: str
    unit_price: float = Field(ge=0, allow_inf_nan=False)
    sale_price: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    quantity: int = Field(ge=1)
    max_quantity: int = Field(ge=1)
    image_ref: Optional[str] = None

    @property
    def effective_price(self) -> float:
        """Sale price when set, otherwise the list price"""
        return self.sale_price if self.sale_price is not None else self.unit_price

    @property
    def line_total(self) -> float:
        return self.effective_price * self.quantity


class CartRule(BaseModel):
    """
    Merchant-configured cart rule.

    ``value`` is interpreted per type: a subtotal threshold for shipping,
    restriction and benefit rules, a percentage for discount rules.
    Lower ``priority`` numbers are evaluated first.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    type: CartRuleType
    priority: int = 0
    value: Optional[float] = None
    status: CartRuleStatus = CartRuleStatus.ACTIVE
    description: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.status == CartRuleStatus.ACTIVE


class AppliedCoupon(BaseModel):
    """A coupon already validated and resolved to a money amount"""
    model_config = ConfigDict(frozen=True)

    code: str
    discount_type: CouponDiscountType
    discount_amount: float = Field(ge=0, allow_inf_nan=False)


class CartTotals(BaseModel):
    """Derived cart totals, never persisted"""
    model_config = ConfigDict(frozen=True)

    subtotal: float = 0.0
    shipping_cost: float = 0.0
    discount: float = 0.0
    total: float = 0.0
    validation_errors: list[str] = Field(default_factory=list)
    applied_benefits: list[str] = Field(default_factory=list)

    @property
    def checkout_allowed(self) -> bool:
        return not self.validation_errors


class CartSummary(BaseModel):
    """Totals breakdown including the coupon, as shown on the cart and checkout pages"""
    model_config = ConfigDict(frozen=True)

    item_count: int = 0
    subtotal: float = 0.0
    shipping_cost: float = 0.0
    rule_discount: float = 0.0
    coupon_discount: float = 0.0
    discount: float = 0.0
    total: float = 0.0
    applied_coupon: Optional[AppliedCoupon] = None
    free_shipping_threshold: Optional[float] = None
    amount_until_free_shipping: Optional[float] = None
    validation_errors: list[str] = Field(default_factory=list)
    applied_benefits: list[str] = Field(default_factory=list)
