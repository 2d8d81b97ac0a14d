"""Cart rule routes for the cart backend"""

from fastapi import APIRouter, Query

from pricing.models import CartRule

from ..database.rules import rule_db

router = APIRouter(prefix="/api/cart-rules", tags=["Cart Rules"])


@router.get("", response_model=list[CartRule])
async def list_cart_rules(
    active_only: bool = Query(True, description="Only return active rules"),
):
    """
    List cart rules.

    Rules are returned in storage order; clients sort by priority.
    """
    return rule_db.list_rules(active_only=active_only)
