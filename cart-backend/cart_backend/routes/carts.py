"""Cloud cart routes for the cart backend"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends

from cartsync.models import Cart

from ..database.carts import cart_db
from ..security.identity import require_identity

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users/me/cart", tags=["Cart"])


@router.get("", response_model=Optional[Cart])
async def get_cart(subject: str = Depends(require_identity)):
    """Get the signed-in account's cart, or null if it has none"""
    return cart_db.get_cart(subject)


@router.put("", response_model=Cart)
async def put_cart(cart: Cart, subject: str = Depends(require_identity)):
    """Replace the signed-in account's cart"""
    stored = cart_db.put_cart(subject, cart)
    logger.info(f"Stored cart for {subject}: {len(stored.items)} items")
    return stored
