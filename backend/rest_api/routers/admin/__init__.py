"""
Admin API router - combines all establishment-scoped sub-routers.

- establishment: The owner's restaurant record
- categories: Category CRUD
- products: Product CRUD and status
- tables: Table CRUD with bulk creation and deletion
- orders: Listing, manual orders, status transitions, deletion
- restock: Restock ledger
- analytics: Sales and product reports
- employees: Staff directory and schedule assignment
- schedules: Weekly work schedules
- attendance: Attendance months and daily attendance
- leave: Leave periods

All routes are prefixed with /api and require a session cookie.
"""

from fastapi import APIRouter

from .establishment import router as establishment_router
from .categories import router as categories_router
from .products import router as products_router
from .tables import router as tables_router
from .orders import router as orders_router
from .restock import router as restock_router
from .analytics import router as analytics_router
from .employees import router as employees_router
from .schedules import router as schedules_router
from .attendance import router as attendance_router
from .leave import router as leave_router


router = APIRouter(prefix="/api")

router.include_router(establishment_router)
router.include_router(categories_router)
router.include_router(products_router)
router.include_router(tables_router)
router.include_router(orders_router)
router.include_router(restock_router)
router.include_router(analytics_router)
router.include_router(employees_router)
router.include_router(schedules_router)
router.include_router(attendance_router)
router.include_router(leave_router)

__all__ = ["router"]
