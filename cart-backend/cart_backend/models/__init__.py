# Cart Backend Models

from .auth import TokenRequest, TokenResponse
from .coupon import ValidateCouponRequest

__all__ = [
    "TokenRequest",
    "TokenResponse",
    "ValidateCouponRequest",
]
