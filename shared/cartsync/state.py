"""
Cart state reducer

Every cart mutation goes through ``reduce``, which returns the new state
together with the persistence effects the caller must run. The reducer
itself performs no I/O.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union

from pricing.models import AppliedCoupon, LineItem

from .models import Cart, CartState, CouponEntryStatus

CART_KEY = "cart"


# ==================== Actions ====================

@dataclass(frozen=True)
class AddItem:
    item: LineItem


@dataclass(frozen=True)
class RemoveItem:
    product_id: str


@dataclass(frozen=True)
class UpdateQuantity:
    product_id: str
    quantity: int


@dataclass(frozen=True)
class ApplyCoupon:
    coupon: AppliedCoupon


@dataclass(frozen=True)
class RemoveCoupon:
    pass


@dataclass(frozen=True)
class ClearCart:
    """Order placed: empty the cart without deleting the record"""
    pass


@dataclass(frozen=True)
class SetCart:
    """Replace the cart wholesale, e.g. with a reconciler result"""
    cart: Cart
    synced: bool = False


@dataclass(frozen=True)
class SyncStarted:
    """A reconciler transition began"""
    pass


@dataclass(frozen=True)
class SyncFailed:
    """A reconciler transition failed; the cart keeps its current contents"""
    pass


@dataclass(frozen=True)
class CouponValidationStarted:
    code: str


@dataclass(frozen=True)
class CouponValidationFailed:
    code: str
    reason: str


Action = Union[
    AddItem,
    RemoveItem,
    UpdateQuantity,
    ApplyCoupon,
    RemoveCoupon,
    ClearCart,
    SetCart,
    SyncStarted,
    SyncFailed,
    CouponValidationStarted,
    CouponValidationFailed,
]

MUTATIONS = (AddItem, RemoveItem, UpdateQuantity, ApplyCoupon, RemoveCoupon, ClearCart)


# ==================== Effects ====================

@dataclass(frozen=True)
class PersistLocal:
    cart: Cart


@dataclass(frozen=True)
class PersistCloud:
    cart: Cart


@dataclass(frozen=True)
class ClearLocal:
    keys: tuple[str, ...] = (CART_KEY,)


Effect = Union[PersistLocal, PersistCloud, ClearLocal]


# ==================== Reducer ====================

def _find(items: list[LineItem], product_id: str) -> Optional[LineItem]:
    return next((item for item in items if item.product_id == product_id), None)


def _add_item(items: list[LineItem], added: LineItem) -> list[LineItem]:
    existing = _find(items, added.product_id)
    if existing is None:
        return [*items, added.model_copy(update={"quantity": min(added.quantity, added.max_quantity)})]

    quantity = min(existing.quantity + added.quantity, existing.max_quantity)
    return [
        item.model_copy(update={"quantity": quantity}) if item.product_id == added.product_id else item
        for item in items
    ]


def _update_quantity(items: list[LineItem], product_id: str, quantity: int) -> Optional[list[LineItem]]:
    existing = _find(items, product_id)
    if existing is None:
        return None

    if quantity <= 0:
        return [item for item in items if item.product_id != product_id]

    clamped = max(1, min(quantity, existing.max_quantity))
    return [
        item.model_copy(update={"quantity": clamped}) if item.product_id == product_id else item
        for item in items
    ]


def _persist(state: CartState) -> list[Effect]:
    cart = state.cart
    return [PersistLocal(cart), PersistCloud(cart)]


def reduce(state: CartState, action: Action, now: datetime) -> tuple[CartState, list[Effect]]:
    """
    Apply an action to the cart state.

    Args:
        state: Current state
        action: Action to apply
        now: Timestamp recorded as the cart's ``updated_at``

    Returns:
        (new state, effects to run). Line-item mutations made before the
        cart is initialized leave the state untouched and yield no effects.    """
    if isinstance(action, MUTATIONS) and not state.initialized:
        return state, []

    if isinstance(action, AddItem):
        new_state = state.model_copy(update={"items": _add_item(state.items, action.item), "updated_at": now})
        return new_state, _persist(new_state)

    if isinstance(action, (RemoveItem, UpdateQuantity)):
        quantity = action.quantity if isinstance(action, UpdateQuantity) else 0
        items = _update_quantity(state.items, action.product_id, quantity)
        if items is None:
            return state, []
        new_state = state.model_copy(update={"items": items, "updated_at": now})
        return new_state, _persist(new_state)

    if isinstance(action, ApplyCoupon):
        new_state = state.model_copy(
            update={
                "applied_coupon": action.coupon,
                "coupon_status": CouponEntryStatus.VALID,
                "coupon_code": action.coupon.code,
                "coupon_error": None,
                "updated_at": now,
            }
        )
        return new_state, _persist(new_state)

    if isinstance(action, RemoveCoupon):
        new_state = state.model_copy(
            update={
                "applied_coupon": None,
                "coupon_status": CouponEntryStatus.IDLE,
                "coupon_code": None,
                "coupon_error": None,
                "updated_at": now,
            }
        )
        return new_state, _persist(new_state)

    if isinstance(action, ClearCart):
        new_state = state.model_copy(
            update={
                "items": [],
                "applied_coupon": None,
                "coupon_status": CouponEntryStatus.IDLE,
                "coupon_code": None,
                "coupon_error": None,
                "updated_at": now,
            }
        )
        return new_state, [ClearLocal((CART_KEY,)), PersistCloud(new_state.cart)]

    if isinstance(action, SetCart):
        update = {
            "items": list(action.cart.items),
            "applied_coupon": action.cart.applied_coupon,
            "updated_at": action.cart.updated_at,
            "initialized": True,
            "syncing": False,
        }
        if action.synced:
            update["last_synced_at"] = now
        return state.model_copy(update=update), []

    if isinstance(action, SyncStarted):
        return state.model_copy(update={"syncing": True}), []

    if isinstance(action, SyncFailed):
        return state.model_copy(update={"syncing": False, "initialized": True}), []

    if isinstance(action, CouponValidationStarted):
        return state.model_copy(
            update={
                "coupon_status": CouponEntryStatus.VALIDATING,
                "coupon_code": action.code,
                "coupon_error": None,
            }
        ), []

    if isinstance(action, CouponValidationFailed):
        return state.model_copy(
            update={
                "coupon_status": CouponEntryStatus.INVALID,
                "coupon_code": action.code,
                "coupon_error": action.reason,
            }
        ), []

    raise TypeError(f"Unknown cart action: {action!r}")
