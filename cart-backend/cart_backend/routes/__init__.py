# API Routes

from .auth import router as auth_router
from .carts import router as carts_router
from .coupons import router as coupons_router
from .rules import router as rules_router

__all__ = ["auth_router", "carts_router", "coupons_router", "rules_router"]
