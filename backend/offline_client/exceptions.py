"""
Exceptions raised by the offline order cache.
"""


class OfflineClientError(Exception):
    """Base class for offline client errors."""


class UnknownOrderError(OfflineClientError, KeyError):
    def __init__(self, local_id: str):
        super().__init__(f"No cached order with local id '{local_id}'")
        self.local_id = local_id


class UnknownProductError(OfflineClientError, KeyError):
    def __init__(self, product_id: int):
        super().__init__(f"Product {product_id} is not in the offline catalog")
        self.product_id = product_id


class InsufficientLocalStockError(OfflineClientError, ValueError):
    """The local stock shadow cannot cover the requested quantity."""

    def __init__(self, product_id: int, product_name: str, available: int, requested: int):
        super().__init__(
            f"Insufficient stock for '{product_name}': "
            f"{available} available, {requested} requested"
        )
        self.product_id = product_id
        self.product_name = product_name
        self.available = available
        self.requested = requested
