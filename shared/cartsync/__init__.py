# Cart persistence and local/cloud reconciliation

from .client import CartBackendClient
from .config import Settings, get_settings
from .merge import merge_carts, merge_items
from .models import Cart, CartState, CouponEntryStatus, Identity
from .reconciler import CartReconciler
from .session import CartSession
from .state import reduce
from .stores import (
    FileLocalStore,
    MemoryCloudStore,
    MemoryLocalStore,
    StorageUnavailable,
    load_local_cart,
    save_local_cart,
)
from .write_queue import CloudWriteQueue

__all__ = [
    "CartBackendClient",
    "Settings",
    "get_settings",
    "merge_carts",
    "merge_items",
    "Cart",
    "CartState",
    "CouponEntryStatus",
    "Identity",
    "CartReconciler",
    "CartSession",
    "reduce",
    "FileLocalStore",
    "MemoryCloudStore",
    "MemoryLocalStore",
    "StorageUnavailable",
    "load_local_cart",
    "save_local_cart",
    "CloudWriteQueue",
]
