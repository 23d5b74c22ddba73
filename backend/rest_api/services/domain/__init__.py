"""
Domain Services.

Services contain business logic and orchestrate operations. Routers stay
thin: they validate input with pydantic, call one service method and
serialize the result.

    Router (thin controller)
        ↓
    Service (business logic)
        ↓
    TenantRepository (data access scoped to one establishment)
        ↓
    Model (entity)

Usage:
    from rest_api.services.domain import OrderService

    service = OrderService(db)
    order = service.change_status(order_id, establishment.id, "PAID")
"""

from .analytics_service import AnalyticsService
from .attendance_service import AttendanceService, build_attendance_output
from .category_service import CategoryService
from .employee_service import EmployeeService
from .establishment_service import EstablishmentService
from .leave_service import LeaveService, build_leave_output
from .menu_service import MenuService
from .order_service import OrderService, build_order_output
from .product_service import ProductService
from .schedule_service import ScheduleService, build_schedule_output
from .stock_service import StockService
from .table_service import TableService

__all__ = [
    "AnalyticsService",
    "AttendanceService",
    "CategoryService",
    "EmployeeService",
    "EstablishmentService",
    "LeaveService",
    "MenuService",
    "OrderService",
    "ProductService",
    "ScheduleService",
    "StockService",
    "TableService",
    "build_attendance_output",
    "build_leave_output",
    "build_order_output",
    "build_schedule_output",
]
