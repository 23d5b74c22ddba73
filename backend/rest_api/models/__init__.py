"""
SQLAlchemy ORM Models Package.

All models are organized into domain-specific modules:
- base: Base class, TimestampMixin and AuditMixin
- user: User
- tenant: Establishment
- catalog: Category, Product
- table: DiningTable
- order: Order, OrderItem
- stock: RestockEvent
- staff: Employee, WorkSchedule, WorkScheduleDay
- attendance: AttendanceMonth, Attendance, LeavePeriod
"""

# Base classes
from .base import Base, AuditMixin, TimestampMixin

# Accounts and tenants
from .user import User
from .tenant import Establishment

# Catalog
from .catalog import Category, Product

# Tables
from .table import DiningTable

# Orders
from .order import Order, OrderItem

# Stock ledger
from .stock import RestockEvent

# Staff
from .staff import Employee, WorkSchedule, WorkScheduleDay
from .attendance import AttendanceMonth, Attendance, LeavePeriod

__all__ = [
    # Base
    "Base",
    "AuditMixin",
    "TimestampMixin",
    # Accounts and tenants
    "User",
    "Establishment",
    # Catalog
    "Category",
    "Product",
    # Tables
    "DiningTable",
    # Orders
    "Order",
    "OrderItem",
    # Stock
    "RestockEvent",
    # Staff
    "Employee",
    "WorkSchedule",
    "WorkScheduleDay",
    "AttendanceMonth",
    "Attendance",
    "LeavePeriod",
]
