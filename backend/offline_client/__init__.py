"""
Offline order cache for the point-of-sale client.

Orders taken while the server is unreachable are queued in on-device
storage and flushed to ``POST /api/orders/manual`` once connectivity
returns. Each queued order carries a ``local_id`` that the server stores,
so a replayed order is recognized instead of recorded twice.

Usage:
    store = JsonFileStore("~/.resto-pos/offline.json")
    cache = OfflineOrderCache(store)
    async with OrderSyncClient("https://pos.example.com", cache, session_token=token) as client:
        draft = DraftOrder(cache, restaurant_id=1)
        draft.add_item(product_id=7, quantity=2)
        await client.submit_order(draft.to_offline_order(status="PAID"))
"""

from .cache import OfflineOrderCache
from .draft import DraftOrder
from .exceptions import InsufficientLocalStockError, OfflineClientError, UnknownOrderError, UnknownProductError
from .lease import SyncLease
from .models import CachedProduct, OfflineOrder, OfflineOrderItem, SyncLock, generate_local_id
from .storage import JsonFileStore, KeyValueStore, MemoryStore
from .sync import OrderSyncClient, SubmitResult, SyncReport

__all__ = [
    "CachedProduct",
    "DraftOrder",
    "InsufficientLocalStockError",
    "JsonFileStore",
    "KeyValueStore",
    "MemoryStore",
    "OfflineClientError",
    "OfflineOrder",
    "OfflineOrderCache",
    "OfflineOrderItem",
    "OrderSyncClient",
    "SubmitResult",
    "SyncLease",
    "SyncLock",
    "SyncReport",
    "UnknownOrderError",
    "UnknownProductError",
    "generate_local_id",
]
