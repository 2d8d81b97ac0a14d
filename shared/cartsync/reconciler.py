"""
Cart Reconciler

Keeps the device-local cart and the account cloud cart consistent at the
three lifecycle boundaries: app start, login and logout. Every transition
is idempotent and safe to retry. Cloud read failures count as "no cloud
cart"; cloud write failures are logged and never surface to the shopper.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Iterable, Optional

from .merge import merge_carts
from .models import Cart, Identity
from .state import CART_KEY
from .stores import CloudStore, LocalStore, StorageUnavailable, load_local_cart

logger = logging.getLogger(__name__)

IdentityProvider = Callable[[], Optional[Identity]]

DEFAULT_SESSION_KEYS = ("cart", "wishlist", "recentlyViewed", "session")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CartReconciler:
    """
    Merges and moves the cart between local and cloud storage.

    Usage:
        reconciler = CartReconciler(local_store, cloud_store, get_identity)
        cart = await reconciler.initialize()
        ...
        cart = await reconciler.sync_on_login(cart)
        ...
        cart = await reconciler.logout()
    """

    def __init__(
        self,
        local_store: LocalStore,
        cloud_store: CloudStore,
        identity_provider: IdentityProvider,
        session_keys: Iterable[str] = DEFAULT_SESSION_KEYS,
        clock: Callable[[], datetime] = utcnow,
    ):
        """
        Args:
            local_store: Device-scoped store
            cloud_store: Account-scoped store
            identity_provider: Returns the signed-in identity or None
            session_keys: Local keys removed on logout
            clock: Source of ``updated_at`` timestamps for merged carts
        """
        self.local_store = local_store
        self.cloud_store = cloud_store
        self.identity_provider = identity_provider
        self.session_keys = tuple(session_keys)
        self.clock = clock

    async def _read_cloud(self, identity: Identity) -> Optional[Cart]:
        try:
            return await self.cloud_store.get_cart(identity)
        except StorageUnavailable as e:
            logger.warning(f"Cloud cart unavailable for {identity.subject}, treating as empty: {e}")
            return None

    async def _write_cloud(self, identity: Identity, cart: Cart) -> bool:
        try:
            await self.cloud_store.put_cart(identity, cart)
            return True
        except StorageUnavailable as e:
            logger.warning(f"Cloud cart write failed for {identity.subject}: {e}")
            return False

    async def initialize(self) -> Cart:
        """
        Load the cart at app start.

        With a cloud cart, the local cart is merged into it, written back
        and removed from the device. Without one (or without an identity)
        the local cart is used as is.
        """
        local = load_local_cart(self.local_store)
        identity = self.identity_provider()

        cloud = await self._read_cloud(identity) if identity else None
        if cloud is None:
            logger.info(f"Cart initialized from device storage ({len(local.items)} items)")
            return local

        if local.is_empty:
            logger.info(f"Cart initialized from cloud for {identity.subject} ({len(cloud.items)} items)")
            return cloud

        merged = merge_carts(local, cloud, self.clock())
        if await self._write_cloud(identity, merged):
            self.local_store.remove(CART_KEY)

        logger.info(
            f"Cart initialized for {identity.subject}: merged {len(local.items)} local "
            f"and {len(cloud.items)} cloud items into {len(merged.items)}"
        )
        return merged

    async def sync_on_login(self, current: Cart) -> Cart:
        """
        Bind the in-memory cart to the newly signed-in account.

        Args:
            current: The cart the session holds, possibly with guest items

        Returns:
            The cart to continue with. Device cart storage is cleared
            afterwards since the cloud cart is now the source of truth.
        """
        identity = self.identity_provider()
        if identity is None:
            logger.warning("Login sync requested without a signed-in identity, keeping device cart")
            return current

        cloud = await self._read_cloud(identity)
        if cloud is not None:
            result = merge_carts(current, cloud, self.clock())
            await self._write_cloud(identity, result)
            logger.info(f"Login sync for {identity.subject}: merged into {len(result.items)} items")
        else:
            result = current
            if not current.is_empty:
                await self._write_cloud(identity, current)
            logger.info(f"Login sync for {identity.subject}: pushed {len(current.items)} items")

        self.local_store.remove(CART_KEY)
        return result

    async def logout(self) -> Cart:
        """Drop session-scoped device data; the cloud cart stays for the next login"""
        for key in self.session_keys:
            self.local_store.remove(key)

        logger.info("Device session data cleared on logout")
        return Cart(updated_at=self.clock())
