"""
Cart merging

Union of a device-local cart and an account cloud cart keyed by product.
The cloud row wins every field except quantity, which takes the larger of
the two so a guest's additions are neither lost nor double-counted.

Known limitation: without removal tombstones, an item removed on one
device comes back when another device's stale copy still holds it.
"""

from datetime import datetime
from typing import Iterable

from pricing.models import LineItem

from .models import Cart


def merge_items(local: Iterable[LineItem], cloud: Iterable[LineItem]) -> list[LineItem]:
    """
    Merge local line items into cloud line items.

    Args:
        local: Items from the device-local cart
        cloud: Items from the account cloud cart

    Returns:
        One row per product id; cloud rows first, then local-only rows
    """
    merged: dict[str, LineItem] = {}

    for item in cloud:
        merged[item.product_id] = item

    for item in local:
        existing = merged.get(item.product_id)
        if existing is None:
            merged[item.product_id] = item
        elif item.quantity > existing.quantity:
            merged[item.product_id] = existing.model_copy(update={"quantity": item.quantity})

    return list(merged.values())


def merge_carts(local: Cart, cloud: Cart, now: datetime) -> Cart:
    """Merge two carts; the cloud coupon is kept when both carry one"""
    return Cart(
        items=merge_items(local.items, cloud.items),
        applied_coupon=cloud.applied_coupon or local.applied_coupon,
        updated_at=now,
    )
