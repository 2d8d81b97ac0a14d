# Database modules

from .rules import rule_db, RuleDatabase
from .coupons import coupon_db, CouponDatabase
from .carts import cart_db, UserCartDatabase

__all__ = [
    "rule_db",
    "RuleDatabase",
    "coupon_db",
    "CouponDatabase",
    "cart_db",
    "UserCartDatabase",
]
