"""Cart engine exceptions"""

from typing import Optional


class CartError(Exception):
    """Base exception for cart pricing and sync errors"""
    pass


class MalformedRuleError(CartError):
    """A cart rule carries a value the calculator cannot use"""

    def __init__(self, rule_id: str, reason: str):
        self.rule_id = rule_id
        self.reason = reason
        super().__init__(f"Cart rule {rule_id!r} is malformed: {reason}")


class CouponRejected(CartError):
    """A coupon code was refused (unknown, expired, below minimum, ...)"""

    def __init__(self, code: str, reason: str, status_code: Optional[int] = None):
        self.code = code
        self.reason = reason
        self.status_code = status_code
        super().__init__(f"Coupon {code!r} rejected: {reason}")
