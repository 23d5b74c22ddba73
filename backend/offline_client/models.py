"""
Records kept in the offline cache.
"""

from __future__ import annotations

import secrets
import string
import time
from datetime import datetime, timezone
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

from shared.config.constants import SyncStatus

_BASE36 = string.digits + string.ascii_lowercase

OfflineOrderStatus = Literal["PENDING", "COMPLETED", "PAID", "CANCELLED"]
SyncStatusValue = Literal["pending", "syncing", "synced", "error"]


def generate_local_id(now: float | None = None) -> str:
    """``local_{epoch milliseconds}_{9 random base36 characters}``."""
    millis = int((time.time() if now is None else now) * 1000)
    suffix = "".join(secrets.choice(_BASE36) for _ in range(9))
    return f"local_{millis}_{suffix}"


def utc_from_timestamp(timestamp: float) -> datetime:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc)


class OfflineOrderItem(BaseModel):
    product_id: int
    product_name: str
    quantity: int = Field(ge=1)
    price_cents: int = Field(ge=0)

    @property
    def total_cents(self) -> int:
        return self.price_cents * self.quantity


class OfflineOrder(BaseModel):
    """An order queued on the device until the server acknowledges it."""

    local_id: str = Field(default_factory=generate_local_id)
    restaurant_id: int
    table_id: Optional[int] = None
    customer: Optional[dict[str, Any]] = None
    status: OfflineOrderStatus = "COMPLETED"
    items: list[OfflineOrderItem] = Field(min_length=1)
    total_amount_cents: int = 0
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    sync_status: SyncStatusValue = SyncStatus.PENDING
    syncing_since: Optional[datetime] = None
    server_id: Optional[int] = None
    synced_at: Optional[datetime] = None
    sync_error: Optional[str] = None

    def model_post_init(self, __context: Any) -> None:
        if not self.total_amount_cents:
            self.total_amount_cents = sum(item.total_cents for item in self.items)

    def to_server_payload(self) -> dict[str, Any]:
        """Body for ``POST /api/orders/manual``."""
        return {
            "items": [
                {
                    "product_id": item.product_id,
                    "quantity": item.quantity,
                    "price_cents": item.price_cents,
                }
                for item in self.items
            ],
            "table_id": self.table_id,
            "customer": self.customer,
            "status": self.status,
            "local_id": self.local_id,
        }


class CachedProduct(BaseModel):
    """Snapshot of a server product. ``quantity`` is the local stock shadow."""

    id: int
    name: str
    price_cents: int
    image: Optional[str] = None
    category_id: Optional[int] = None
    is_quantifiable: bool = False
    quantity: Optional[int] = None
    status: str = "ACTIVE"


class SyncLock(BaseModel):
    locked: bool = False
    timestamp: float = 0.0
    owner: Optional[str] = None
