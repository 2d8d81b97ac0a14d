"""Coupon request models for the cart backend"""

from pydantic import BaseModel, Field


class ValidateCouponRequest(BaseModel):
    """Request to validate a coupon code against an order total"""
    code: str = Field(min_length=1, max_length=100)
    order_total: float = Field(ge=0)
