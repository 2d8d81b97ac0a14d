"""Per-account cloud cart storage for the cart backend"""

from datetime import datetime, timezone
from typing import Optional

from cartsync.models import Cart


class UserCartDatabase:
    """In-memory cloud carts keyed by account subject"""

    def __init__(self):
        self.carts: dict[str, Cart] = {}
        self.updated_at: dict[str, datetime] = {}

    def get_cart(self, subject: str) -> Optional[Cart]:
        """Get an account's cart, or None if it never stored one"""
        return self.carts.get(subject)

    def put_cart(self, subject: str, cart: Cart) -> Cart:
        """Store a cart as sent; the last write wins"""
        self.carts[subject] = cart
        self.updated_at[subject] = datetime.now(timezone.utc)
        return cart

    def clear(self) -> None:
        self.carts.clear()
        self.updated_at.clear()


# Singleton instance
cart_db = UserCartDatabase()
