"""Cart persistence models"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from pricing.models import AppliedCoupon, LineItem

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class Identity(BaseModel):
    """Authenticated account the cloud cart is keyed by"""
    model_config = ConfigDict(frozen=True)

    subject: str
    token: Optional[str] = None


class Cart(BaseModel):
    """The persisted cart aggregate"""
    model_config = ConfigDict(frozen=True)

    items: list[LineItem] = Field(default_factory=list)
    applied_coupon: Optional[AppliedCoupon] = None
    updated_at: datetime = EPOCH

    @property
    def is_empty(self) -> bool:
        return not self.items and self.applied_coupon is None


class CouponEntryStatus(str, Enum):
    """Progress of the coupon the shopper last entered"""
    IDLE = "idle"
    VALIDATING = "validating"
    VALID = "valid"
    INVALID = "invalid"


class CartState(BaseModel):
    """In-memory cart state threaded through the reducer"""
    model_config = ConfigDict(frozen=True)

    items: list[LineItem] = Field(default_factory=list)
    applied_coupon: Optional[AppliedCoupon] = None
    updated_at: datetime = EPOCH
    initialized: bool = False
    syncing: bool = False
    last_synced_at: Optional[datetime] = None
    coupon_status: CouponEntryStatus = CouponEntryStatus.IDLE
    coupon_code: Optional[str] = None
    coupon_error: Optional[str] = None

    @property
    def cart(self) -> Cart:
        return Cart(items=self.items, applied_coupon=self.applied_coupon, updated_at=self.updated_at)

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)
