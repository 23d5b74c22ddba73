"""
Configuration module: Settings, logging, constants.
"""

from shared.config.settings import Settings, get_settings
from shared.config.logging import get_logger, setup_logging
from shared.config.constants import (
    OrderStatus,
    ProductStatus,
    SyncStatus,
    EmployeeStatus,
    AttendanceStatus,
    LeaveStatus,
    ORDER_TRANSITIONS,
    LEAVE_TRANSITIONS,
    Limits,
)

__all__ = [
    # settings
    "Settings",
    "get_settings",
    # logging
    "get_logger",
    "setup_logging",
    # constants
    "OrderStatus",
    "ProductStatus",
    "SyncStatus",
    "EmployeeStatus",
    "AttendanceStatus",
    "LeaveStatus",
    "ORDER_TRANSITIONS",
    "LEAVE_TRANSITIONS",
    "Limits",
]
