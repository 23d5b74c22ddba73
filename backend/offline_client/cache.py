"""
Offline order cache.

Each queued order moves through ``pending -> syncing -> synced | error``.
Orders in ``error`` and orders stuck in ``syncing`` go back to ``pending``
to be retried.

The cache also keeps a snapshot of the catalog whose quantities act as a
local stock shadow: reserved when an item is added to a draft, released
when it is removed, and replaced by the server's figures on reconnect.
"""

from __future__ import annotations

import time
from typing import Callable, Iterable

from shared.config.constants import OfflineTimeouts, SyncStatus
from shared.config.logging import offline_logger as logger
from .exceptions import UnknownOrderError
from .models import CachedProduct, OfflineOrder, OfflineOrderStatus, utc_from_timestamp
from .storage import ORDERS_KEY, PRODUCTS_KEY, KeyValueStore


class OfflineOrderCache:
    def __init__(
        self,
        store: KeyValueStore,
        *,
        stuck_after: float = OfflineTimeouts.STUCK_SYNCING_AFTER,
        clock: Callable[[], float] = time.time,
    ):
        self._store = store
        self._stuck_after = stuck_after
        self._clock = clock

    @property
    def store(self) -> KeyValueStore:
        return self._store

    @property
    def clock(self) -> Callable[[], float]:
        return self._clock

    # =========================================================================
    # Orders
    # =========================================================================

    def _load_orders(self) -> list[OfflineOrder]:
        return [OfflineOrder.model_validate(raw) for raw in self._store.get(ORDERS_KEY, [])]

    def _save_orders(self, orders: Iterable[OfflineOrder]) -> None:
        self._store.set(ORDERS_KEY, [order.model_dump(mode="json") for order in orders])

    def _update(self, local_id: str, change: Callable[[OfflineOrder], None]) -> OfflineOrder | None:
        orders = self._load_orders()
        for order in orders:
            if order.local_id == local_id:
                change(order)
                self._save_orders(orders)
                return order
        return None

    def save_order(self, order: OfflineOrder) -> None:
        """Insert or replace by ``local_id``."""
        orders = [o for o in self._load_orders() if o.local_id != order.local_id]
        orders.append(order)
        self._save_orders(orders)

    def all_orders(self) -> list[OfflineOrder]:
        return self._load_orders()

    def get_order(self, local_id: str) -> OfflineOrder | None:
        return next((o for o in self._load_orders() if o.local_id == local_id), None)

    def pending_orders(self) -> list[OfflineOrder]:
        return [o for o in self._load_orders() if o.sync_status == SyncStatus.PENDING]

    def unsynced_count(self) -> int:
        return len(self.pending_orders())

    def mark_syncing(self, local_id: str) -> OfflineOrder | None:
        def change(order: OfflineOrder) -> None:
            order.sync_status = SyncStatus.SYNCING
            order.syncing_since = utc_from_timestamp(self._clock())

        return self._update(local_id, change)

    def mark_synced(self, local_id: str, server_id: int | None = None) -> OfflineOrder | None:
        def change(order: OfflineOrder) -> None:
            order.sync_status = SyncStatus.SYNCED
            order.synced_at = utc_from_timestamp(self._clock())
            order.syncing_since = None
            order.sync_error = None
            if server_id is not None:
                order.server_id = server_id

        return self._update(local_id, change)

    def mark_error(self, local_id: str, error: str) -> OfflineOrder | None:
        def change(order: OfflineOrder) -> None:
            order.sync_status = SyncStatus.ERROR
            order.sync_error = error
            order.syncing_since = None

        return self._update(local_id, change)

    def revert_to_pending(self, local_id: str) -> OfflineOrder | None:
        def change(order: OfflineOrder) -> None:
            order.sync_status = SyncStatus.PENDING
            order.sync_error = None
            order.syncing_since = None

        return self._update(local_id, change)

    def delete_order(self, local_id: str) -> None:
        self._save_orders(o for o in self._load_orders() if o.local_id != local_id)

    def purge_synced(self) -> int:
        """Drop orders the server has acknowledged. Returns how many were removed."""
        orders = self._load_orders()
        remaining = [o for o in orders if o.sync_status != SyncStatus.SYNCED]
        self._save_orders(remaining)
        return len(orders) - len(remaining)

    def is_safe_to_sync(self, local_id: str) -> bool:
        """
        Whether the order can be sent now.

        A ``syncing`` order whose flush started more than ``stuck_after``
        seconds ago is assumed abandoned and reset to ``pending``.
        """
        order = self.get_order(local_id)
        if order is None:
            return False

        if order.sync_status == SyncStatus.SYNCING:
            started = order.syncing_since.timestamp() if order.syncing_since else 0.0
            if self._clock() - started > self._stuck_after:
                logger.warning("Order stuck in syncing, resetting", local_id=local_id)
                self.revert_to_pending(local_id)
                return True
            return False

        return order.sync_status == SyncStatus.PENDING

    def update_status(self, local_id: str, status: OfflineOrderStatus) -> OfflineOrder:
        """
        Change the business status of a queued order.

        Cancelling gives the order's reserved stock back to the shadow.

        Raises:
            UnknownOrderError: If no order has this local id.
        """
        order = self.get_order(local_id)
        if order is None:
            raise UnknownOrderError(local_id)

        if status == "CANCELLED" and order.status != "CANCELLED":
            for item in order.items:
                self.release_stock(item.product_id, item.quantity)

        updated = OfflineOrder.model_validate({**order.model_dump(), "status": status})
        self.save_order(updated)
        return updated

    # =========================================================================
    # Product snapshot and stock shadow
    # =========================================================================

    def save_products(self, products: Iterable[CachedProduct]) -> None:
        self._store.set(PRODUCTS_KEY, [p.model_dump(mode="json") for p in products])

    def products(self) -> list[CachedProduct]:
        return [CachedProduct.model_validate(raw) for raw in self._store.get(PRODUCTS_KEY, [])]

    def get_product(self, product_id: int) -> CachedProduct | None:
        return next((p for p in self.products() if p.id == product_id), None)

    def stock_of(self, product_id: int) -> int | None:
        """Shadow quantity, or None for unknown or non-quantifiable products."""
        product = self.get_product(product_id)
        if product is None or not product.is_quantifiable:
            return None
        return product.quantity

    def _adjust_stock(self, product_id: int, delta: int) -> int | None:
        products = self.products()
        for product in products:
            if product.id != product_id:
                continue
            if not product.is_quantifiable or product.quantity is None:
                return None
            product.quantity = max(0, product.quantity + delta)
            self.save_products(products)
            return product.quantity
        return None

    def reserve_stock(self, product_id: int, quantity: int) -> int | None:
        """Subtract from the shadow, never below zero. Returns the new quantity."""
        return self._adjust_stock(product_id, -quantity)

    def release_stock(self, product_id: int, quantity: int) -> int | None:
        return self._adjust_stock(product_id, quantity)

    def reconcile_products(self, server_products: Iterable[CachedProduct]) -> list[CachedProduct]:
        """
        Replace the snapshot with the server's catalog.

        Quantities held by orders the server has not seen yet are subtracted
        again, so the shadow keeps reflecting what is still sellable.
        """
        held: dict[int, int] = {}
        for order in self._load_orders():
            if order.sync_status == SyncStatus.SYNCED or order.status == "CANCELLED":
                continue
            for item in order.items:
                held[item.product_id] = held.get(item.product_id, 0) + item.quantity

        products = []
        for product in server_products:
            if product.is_quantifiable and product.quantity is not None and product.id in held:
                product = product.model_copy(update={"quantity": max(0, product.quantity - held[product.id])})
            products.append(product)

        self.save_products(products)
        logger.info("Product snapshot reconciled", products=len(products), held_products=len(held))
        return products
