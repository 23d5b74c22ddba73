"""
Draft order built against the offline catalog.

Adding an item reserves it in the local stock shadow, removing it gives
the stock back. Freezing the draft queues it in the cache; from then on
the reservation belongs to the queued order.
"""

from __future__ import annotations

from typing import Any

from shared.config.constants import Limits
from .cache import OfflineOrderCache
from .exceptions import InsufficientLocalStockError, UnknownProductError
from .models import OfflineOrder, OfflineOrderItem, OfflineOrderStatus


class DraftOrder:
    def __init__(
        self,
        cache: OfflineOrderCache,
        restaurant_id: int,
        *,
        table_id: int | None = None,
        customer: dict[str, Any] | None = None,
    ):
        self._cache = cache
        self.restaurant_id = restaurant_id
        self.table_id = table_id
        self.customer = customer
        self._lines: dict[int, OfflineOrderItem] = {}

    @property
    def items(self) -> list[OfflineOrderItem]:
        return list(self._lines.values())

    @property
    def total_cents(self) -> int:
        return sum(line.total_cents for line in self._lines.values())

    def is_empty(self) -> bool:
        return not self._lines

    def add_item(self, product_id: int, quantity: int = 1) -> OfflineOrderItem:
        """
        Add ``quantity`` units of a cached product.

        Raises:
            UnknownProductError: The product is not in the offline catalog.
            InsufficientLocalStockError: The shadow holds fewer units.
        """
        if quantity < 1:
            raise ValueError("Quantity must be at least 1")

        product = self._cache.get_product(product_id)
        if product is None:
            raise UnknownProductError(product_id)

        line = self._lines.get(product_id)
        current = line.quantity if line else 0
        if current + quantity > Limits.MAX_ORDER_ITEM_QUANTITY:
            raise ValueError(f"At most {Limits.MAX_ORDER_ITEM_QUANTITY} units per item")

        available = self._cache.stock_of(product_id)
        if available is not None:
            if available < quantity:
                raise InsufficientLocalStockError(product.id, product.name, available, quantity)
            self._cache.reserve_stock(product_id, quantity)

        if line:
            line.quantity += quantity
        else:
            line = OfflineOrderItem(
                product_id=product.id,
                product_name=product.name,
                quantity=quantity,
                price_cents=product.price_cents,
            )
            self._lines[product_id] = line
        return line

    def remove_item(self, product_id: int, quantity: int | None = None) -> None:
        """Remove ``quantity`` units, or the whole line when ``quantity`` is None."""
        line = self._lines.get(product_id)
        if line is None:
            return

        removed = line.quantity if quantity is None else min(quantity, line.quantity)
        self._cache.release_stock(product_id, removed)
        line.quantity -= removed
        if line.quantity <= 0:
            del self._lines[product_id]

    def discard(self) -> None:
        """Drop every line and give all reserved stock back."""
        for product_id in list(self._lines):
            self.remove_item(product_id)

    def to_offline_order(self, status: OfflineOrderStatus = "COMPLETED") -> OfflineOrder:
        """Queue the draft as a pending order and empty it."""
        if self.is_empty():
            raise ValueError("Cannot queue an empty order")

        order = OfflineOrder(
            restaurant_id=self.restaurant_id,
            table_id=self.table_id,
            customer=self.customer,
            status=status,
            items=self.items,
            total_amount_cents=self.total_cents,
        )
        self._cache.save_order(order)
        self._lines.clear()
        return order
