"""
Storefront cart session

Ties the reducer, the reconciler and the cloud write queue together into
the cart API the storefront calls. Mutations apply synchronously to the
in-memory state and the device store; cloud writes are queued without
waiting. Mutations issued before the cart is initialized, or while an
initialize or login sync is in flight, are held back and replayed once the
sync completes. Queued cloud writes are drained before a sync touches the
cloud so the reconciler never races a stale fire-and-forget write.
"""

import logging
from datetime import datetime
from typing import Awaitable, Callable, Optional, Protocol

from pricing.coupons import summarize
from pricing.calculator import compute_totals
from pricing.exceptions import CouponRejected
from pricing.models import AppliedCoupon, CartRule, CartSummary, CartTotals, LineItem

from .client import CartBackendClient
from .config import Settings, get_settings
from .models import Cart, CartState
from .reconciler import CartReconciler, IdentityProvider, utcnow
from .state import (
    MUTATIONS,
    Action,
    AddItem,
    ApplyCoupon,
    ClearCart,
    ClearLocal,
    CouponValidationFailed,
    CouponValidationStarted,
    Effect,
    PersistCloud,
    PersistLocal,
    RemoveCoupon,
    RemoveItem,
    SetCart,
    SyncFailed,
    SyncStarted,
    UpdateQuantity,
    reduce,
)
from .stores import (
    CloudStore,
    FileLocalStore,
    LocalStore,
    MemoryLocalStore,
    StorageUnavailable,
    save_local_cart,
)
from .write_queue import CloudWriteQueue

logger = logging.getLogger(__name__)


class RuleSource(Protocol):
    async def fetch_active_cart_rules(self) -> list[CartRule]: ...


class CouponResolver(Protocol):
    async def validate_coupon(self, code: str, order_total: float) -> AppliedCoupon: ...


class CartSession:
    """
    Cart state for one storefront session.

    Usage:
        session = CartSession.from_settings(get_identity)
        await session.initialize()
        await session.refresh_rules()
        session.add_item(item)
        summary = session.summary()
        await session.login()
        await session.logout()
    """

    def __init__(
        self,
        local_store: LocalStore,
        cloud_store: CloudStore,
        identity_provider: IdentityProvider,
        rule_source: Optional[RuleSource] = None,
        coupon_resolver: Optional[CouponResolver] = None,
        settings: Optional[Settings] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.settings = settings or get_settings()
        self.local_store = local_store
        self.identity_provider = identity_provider
        self.rule_source = rule_source
        self.coupon_resolver = coupon_resolver
        self.clock = clock

        self.reconciler = CartReconciler(
            local_store,
            cloud_store,
            identity_provider,
            session_keys=self.settings.session_keys,
            clock=clock,
        )
        self.write_queue = CloudWriteQueue(cloud_store)
        self.state = CartState()
        self.rules: list[CartRule] = []
        self._deferred: list[Action] = []

    @classmethod
    def from_settings(
        cls,
        identity_provider: IdentityProvider,
        settings: Optional[Settings] = None,
    ) -> "CartSession":
        """Session backed by the configured cart backend and device directory"""
        settings = settings or get_settings()
        client = CartBackendClient(settings.backend_base_url, timeout=settings.http_timeout)
        local_store = (
            FileLocalStore(settings.local_store_dir) if settings.local_store_dir else MemoryLocalStore()
        )
        return cls(
            local_store,
            client,
            identity_provider,
            rule_source=client,
            coupon_resolver=client,
            settings=settings,
        )

    # ==================== Dispatch ====================

    def dispatch(self, action: Action) -> CartState:
        """Apply an action and run the effects it produces"""
        if isinstance(action, MUTATIONS) and (not self.state.initialized or self.state.syncing):
            logger.debug(f"Cart not ready, deferring {type(action).__name__}")
            self._deferred.append(action)
            return self.state

        self.state, effects = reduce(self.state, action, self.clock())
        self._run_effects(effects)
        return self.state

    def _run_effects(self, effects: list[Effect]) -> None:
        for effect in effects:
            if isinstance(effect, PersistLocal):
                save_local_cart(self.local_store, effect.cart)
            elif isinstance(effect, ClearLocal):
                for key in effect.keys:
                    self.local_store.remove(key)
            elif isinstance(effect, PersistCloud):
                identity = self.identity_provider()
                if identity is not None:
                    self.write_queue.submit(identity, effect.cart)

    def _replay_deferred(self) -> None:
        deferred, self._deferred = self._deferred, []
        if deferred:
            logger.debug(f"Replaying {len(deferred)} deferred cart mutations")
        for action in deferred:
            self.dispatch(action)

    # ==================== Lifecycle ====================

    async def _synchronize(self, transition: Callable[[], Awaitable[Cart]]) -> CartState:
        # Mutations dispatched from here until SetCart are deferred.
        self.dispatch(SyncStarted())
        try:
            await self.write_queue.drain()
            cart = await transition()
        except Exception:
            self.dispatch(SyncFailed())
            self._replay_deferred()
            raise

        self.dispatch(SetCart(cart, synced=True))
        self._replay_deferred()
        return self.state

    async def initialize(self) -> CartState:
        """Load and reconcile the cart at app start"""
        return await self._synchronize(self.reconciler.initialize)

    async def login(self) -> CartState:
        """Merge the session cart into the signed-in account's cloud cart"""
        return await self._synchronize(lambda: self.reconciler.sync_on_login(self.state.cart))

    async def logout(self) -> CartState:
        """Clear device session data and start over with an empty cart"""
        cart = await self.reconciler.logout()
        self._deferred = []
        self.state = CartState()
        self.dispatch(SetCart(cart))
        return self.state

    async def flush(self) -> None:
        """Wait for queued cloud writes to settle"""
        await self.write_queue.drain()

    # ==================== Mutations ====================

    def add_item(self, item: LineItem) -> CartState:
        return self.dispatch(AddItem(item))

    def remove_item(self, product_id: str) -> CartState:
        return self.dispatch(RemoveItem(product_id))

    def update_quantity(self, product_id: str, quantity: int) -> CartState:
        return self.dispatch(UpdateQuantity(product_id, quantity))

    def apply_coupon(self, coupon: AppliedCoupon) -> CartState:
        return self.dispatch(ApplyCoupon(coupon))

    def remove_coupon(self) -> CartState:
        return self.dispatch(RemoveCoupon())

    def clear(self) -> CartState:
        """Empty the cart after an order is placed"""
        return self.dispatch(ClearCart())

    async def redeem_coupon(self, code: str) -> AppliedCoupon:
        """
        Validate a coupon code and apply it, replacing any current coupon.

        Raises:
            CouponRejected: If the code is refused or cannot be checked
        """
        if self.coupon_resolver is None:
            raise RuntimeError("No coupon resolver configured")

        code = code.strip().upper()
        self.dispatch(CouponValidationStarted(code))
        try:
            coupon = await self.coupon_resolver.validate_coupon(code, self.totals().subtotal)
        except CouponRejected as e:
            self.dispatch(CouponValidationFailed(code, e.reason))
            raise
        except StorageUnavailable as e:
            reason = "Coupon could not be validated right now"
            self.dispatch(CouponValidationFailed(code, reason))
            raise CouponRejected(code, reason) from e

        self.apply_coupon(coupon)
        return coupon

    # ==================== Rules & totals ====================

    def set_rules(self, rules: list[CartRule]) -> None:
        self.rules = list(rules)

    async def refresh_rules(self) -> list[CartRule]:
        """Fetch the active rule snapshot; on failure the previous snapshot is kept"""
        if self.rule_source is None:
            return self.rules

        try:
            self.rules = list(await self.rule_source.fetch_active_cart_rules())
        except StorageUnavailable as e:
            logger.warning(f"Could not refresh cart rules, keeping {len(self.rules)} cached: {e}")
        return self.rules

    @property
    def items(self) -> list[LineItem]:
        return self.state.items

    @property
    def item_count(self) -> int:
        return self.state.item_count

    def totals(self) -> CartTotals:
        """Rule-engine totals for the current items"""
        return compute_totals(
            self.state.items,
            self.rules,
            standard_shipping=self.settings.standard_shipping_cost,
            strict=self.settings.strict_rules,
        )

    def summary(self) -> CartSummary:
        """Totals including the applied coupon"""
        return summarize(
            self.state.items,
            self.rules,
            self.state.applied_coupon,
            standard_shipping=self.settings.standard_shipping_cost,
            strict=self.settings.strict_rules,
        )
