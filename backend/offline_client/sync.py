"""
Order sync client.

Sends queued orders to ``POST /api/orders/manual``. The server answers a
replayed ``local_id`` with 409 ``{"code": "DUPLICATE", "order": {...}}``,
which counts as success.

Outcome per order:
- 2xx, or 409 DUPLICATE: synced, the server id is recorded
- other 4xx: error, with the server's message, until ``retry_failed()``
- 5xx or transport failure: back to pending for the next flush
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any

import httpx

from shared.config.constants import OfflineTimeouts, SyncStatus
from shared.config.logging import offline_logger as logger
from .cache import OfflineOrderCache
from .lease import SyncLease
from .models import CachedProduct, OfflineOrder

MANUAL_ORDER_PATH = "/api/orders/manual"
PRODUCTS_PATH = "/api/products"
DUPLICATE_CODE = "DUPLICATE"


@dataclass
class SubmitResult:
    local_id: str
    server_id: int | None = None
    queued: bool = False
    error: str | None = None

    @property
    def synced(self) -> bool:
        return self.server_id is not None


@dataclass
class SyncReport:
    attempted: int = 0
    synced: int = 0
    duplicates: int = 0
    failed: int = 0
    requeued: int = 0
    skipped: int = 0
    lock_busy: bool = False

    @property
    def ok(self) -> bool:
        return not self.lock_busy and self.failed == 0 and self.requeued == 0


@dataclass
class _Outcome:
    status: str
    server_id: int | None = None
    error: str | None = None
    duplicate: bool = False


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return f"HTTP {response.status_code}"


class OrderSyncClient:
    def __init__(
        self,
        base_url: str,
        cache: OfflineOrderCache,
        *,
        session_token: str | None = None,
        cookie_name: str = "auth_token",
        lease: SyncLease | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
        reconnect_debounce: float = OfflineTimeouts.RECONNECT_DEBOUNCE,
    ):
        self._cache = cache
        self._lease = lease or SyncLease(cache.store, clock=cache.clock)
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            cookies={cookie_name: session_token} if session_token else None,
        )
        self._reconnect_debounce = reconnect_debounce
        self._reconnect_task: asyncio.Task[SyncReport] | None = None

    async def __aenter__(self) -> "OrderSyncClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    # =========================================================================
    # Sending one order
    # =========================================================================

    async def _send(self, order: OfflineOrder) -> _Outcome:
        try:
            response = await self._client.post(MANUAL_ORDER_PATH, json=order.to_server_payload())
        except httpx.RequestError as e:
            logger.warning("Order sync transport error", local_id=order.local_id, error=str(e))
            return _Outcome(SyncStatus.PENDING, error=str(e))

        if response.is_success:
            return _Outcome(SyncStatus.SYNCED, server_id=response.json().get("id"))

        if response.status_code == 409:
            try:
                body = response.json()
            except ValueError:
                body = {}
            if isinstance(body, dict) and body.get("code") == DUPLICATE_CODE:
                existing = body.get("order") or {}
                logger.info("Order already on server", local_id=order.local_id, server_id=existing.get("id"))
                return _Outcome(SyncStatus.SYNCED, server_id=existing.get("id"), duplicate=True)

        if response.is_server_error:
            logger.warning(
                "Order sync server error",
                local_id=order.local_id,
                status_code=response.status_code,
            )
            return _Outcome(SyncStatus.PENDING, error=_error_message(response))

        message = _error_message(response)
        logger.warning(
            "Order rejected by server",
            local_id=order.local_id,
            status_code=response.status_code,
            error=message,
        )
        return _Outcome(SyncStatus.ERROR, error=message)

    def _record(self, local_id: str, outcome: _Outcome) -> None:
        if outcome.status == SyncStatus.SYNCED:
            self._cache.mark_synced(local_id, outcome.server_id)
        elif outcome.status == SyncStatus.ERROR:
            self._cache.mark_error(local_id, outcome.error or "Rejected by server")
        else:
            self._cache.revert_to_pending(local_id)

    async def submit_order(self, order: OfflineOrder) -> SubmitResult:
        """
        Send a new order right away, keeping it queued if that fails.

        The order is stored in the cache before the request, so it survives
        a crash while the request is in flight.
        """
        if self._cache.get_order(order.local_id) is None:
            self._cache.save_order(order)
        self._cache.mark_syncing(order.local_id)

        outcome = await self._send(order)
        self._record(order.local_id, outcome)

        if outcome.status == SyncStatus.SYNCED:
            logger.info("Order submitted", local_id=order.local_id, server_id=outcome.server_id)
            return SubmitResult(local_id=order.local_id, server_id=outcome.server_id)

        logger.info("Order kept offline", local_id=order.local_id, sync_status=outcome.status)
        return SubmitResult(local_id=order.local_id, queued=True, error=outcome.error)

    # =========================================================================
    # Flushing the queue
    # =========================================================================

    async def sync_orders(self) -> SyncReport:
        """
        Flush pending orders one at a time under the sync lease.

        Returns immediately with ``lock_busy`` when another flush holds
        the lease. The lease is released however the flush ends.
        """
        report = SyncReport()
        if not self._lease.acquire():
            report.lock_busy = True
            return report

        try:
            # Syncing orders are included so a stuck one can be recovered
            queued = [
                o.local_id
                for o in self._cache.all_orders()
                if o.sync_status in (SyncStatus.PENDING, SyncStatus.SYNCING)
            ]
            for local_id in queued:
                if not self._cache.is_safe_to_sync(local_id):
                    report.skipped += 1
                    continue

                # Re-read: the order may have changed while an earlier one was in flight
                order = self._cache.get_order(local_id)
                if order is None:
                    report.skipped += 1
                    continue
                if order.status == "CANCELLED":
                    # Never reached the server, nothing to send
                    self._cache.delete_order(local_id)
                    report.skipped += 1
                    continue

                self._cache.mark_syncing(local_id)
                report.attempted += 1

                outcome = await self._send(order)
                self._record(order.local_id, outcome)

                if outcome.status == SyncStatus.SYNCED:
                    report.synced += 1
                    report.duplicates += int(outcome.duplicate)
                elif outcome.status == SyncStatus.ERROR:
                    report.failed += 1
                else:
                    report.requeued += 1
        finally:
            self._lease.release()

        logger.info(
            "Offline orders flushed",
            attempted=report.attempted,
            synced=report.synced,
            duplicates=report.duplicates,
            failed=report.failed,
            requeued=report.requeued,
        )
        return report

    def retry_failed(self) -> int:
        """Put every order in ``error`` back in the queue. Returns how many."""
        failed = [o for o in self._cache.all_orders() if o.sync_status == SyncStatus.ERROR]
        for order in failed:
            self._cache.revert_to_pending(order.local_id)
        return len(failed)

    # =========================================================================
    # Catalog snapshot and reconnect
    # =========================================================================

    async def refresh_products(self) -> list[CachedProduct] | None:
        """Reconcile the product snapshot with the server. None when unreachable."""
        try:
            response = await self._client.get(PRODUCTS_PATH)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning("Product snapshot refresh failed", error=str(e))
            return None

        products = [CachedProduct.model_validate(raw) for raw in response.json()]
        return self._cache.reconcile_products(products)

    async def _reconnect(self) -> SyncReport:
        if self._reconnect_debounce > 0:
            await asyncio.sleep(self._reconnect_debounce)
        report = await self.sync_orders()
        await self.refresh_products()
        return report

    async def on_connectivity_restored(self) -> SyncReport:
        """
        React to the network coming back.

        Calls arriving while a reconnect flush is scheduled or running join
        it instead of starting another.
        """
        if self._reconnect_task is None or self._reconnect_task.done():
            self._reconnect_task = asyncio.ensure_future(self._reconnect())
        return await asyncio.shield(self._reconnect_task)
