"""
Public routers - No authentication required.
- /api/public/* - Public menu and table lookup
- /api/orders, /api/orders/public/* - Customer orders
- /api/health - Health check
"""

from .health import router as health_router
from .menu import router as menu_router
from .orders import router as orders_router

__all__ = ["health_router", "menu_router", "orders_router"]
