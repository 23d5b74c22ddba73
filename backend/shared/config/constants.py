"""
Centralized constants for the backend application.

Usage:
    from shared.config.constants import OrderStatus, ORDER_TRANSITIONS

    if order.status == OrderStatus.PENDING:
        ...
"""

from typing import Final


# =============================================================================
# Entity Status Constants
# =============================================================================


class OrderStatus:
    """Order status constants."""

    PENDING: Final[str] = "PENDING"
    COMPLETED: Final[str] = "COMPLETED"
    PAID: Final[str] = "PAID"
    CANCELLED: Final[str] = "CANCELLED"

    ALL: Final[list[str]] = [PENDING, COMPLETED, PAID, CANCELLED]
    # Paid and cancelled orders are kept as history
    UNDELETABLE: Final[frozenset[str]] = frozenset({PAID, CANCELLED})


class ProductStatus:
    """Product visibility on the public menu."""

    ACTIVE: Final[str] = "ACTIVE"
    INACTIVE: Final[str] = "INACTIVE"

    ALL: Final[list[str]] = [ACTIVE, INACTIVE]


class SyncStatus:
    """Offline order sync states."""

    PENDING: Final[str] = "pending"
    SYNCING: Final[str] = "syncing"
    SYNCED: Final[str] = "synced"
    ERROR: Final[str] = "error"

    ALL: Final[list[str]] = [PENDING, SYNCING, SYNCED, ERROR]


class EmployeeStatus:
    """Employment status of a staff member."""

    ACTIVE: Final[str] = "ACTIVE"
    INACTIVE: Final[str] = "INACTIVE"

    ALL: Final[list[str]] = [ACTIVE, INACTIVE]


class Weekday:
    """Schedule weekdays, in calendar order (``date.weekday()`` indexes ALL)."""

    MONDAY: Final[str] = "MONDAY"
    TUESDAY: Final[str] = "TUESDAY"
    WEDNESDAY: Final[str] = "WEDNESDAY"
    THURSDAY: Final[str] = "THURSDAY"
    FRIDAY: Final[str] = "FRIDAY"
    SATURDAY: Final[str] = "SATURDAY"
    SUNDAY: Final[str] = "SUNDAY"

    ALL: Final[list[str]] = [MONDAY, TUESDAY, WEDNESDAY, THURSDAY, FRIDAY, SATURDAY, SUNDAY]


class AttendanceMonthStatus:
    """Attendance month lifecycle: OPEN months accept records, CLOSED are frozen."""

    OPEN: Final[str] = "OPEN"
    CLOSED: Final[str] = "CLOSED"


class AttendanceStatus:
    """Daily attendance status of an employee."""

    PRESENT: Final[str] = "PRESENT"
    ABSENT: Final[str] = "ABSENT"
    REST_DAY: Final[str] = "REST_DAY"
    LEAVE: Final[str] = "LEAVE"
    SICK: Final[str] = "SICK"
    REMOTE: Final[str] = "REMOTE"
    TRAINING: Final[str] = "TRAINING"
    OTHER: Final[str] = "OTHER"

    ALL: Final[list[str]] = [PRESENT, ABSENT, REST_DAY, LEAVE, SICK, REMOTE, TRAINING, OTHER]


class LeaveStatus:
    """Leave period approval status."""

    PENDING: Final[str] = "PENDING"
    APPROVED: Final[str] = "APPROVED"
    REJECTED: Final[str] = "REJECTED"
    CANCELLED: Final[str] = "CANCELLED"

    ALL: Final[list[str]] = [PENDING, APPROVED, REJECTED, CANCELLED]
    # Periods in these states block overlapping requests
    BLOCKING: Final[frozenset[str]] = frozenset({PENDING, APPROVED})


# =============================================================================
# Status Transitions
# =============================================================================

# Valid order status transitions (from -> [allowed to states]).
# Re-sending the current status is accepted as a no-op and is not listed.
ORDER_TRANSITIONS: Final[dict[str, list[str]]] = {
    OrderStatus.PENDING: [OrderStatus.COMPLETED, OrderStatus.PAID, OrderStatus.CANCELLED],
    OrderStatus.COMPLETED: [OrderStatus.PAID],
    OrderStatus.PAID: [],  # Terminal state
    OrderStatus.CANCELLED: [],  # Terminal state
}

# Valid leave period transitions. Rejected and cancelled periods are final.
LEAVE_TRANSITIONS: Final[dict[str, list[str]]] = {
    LeaveStatus.PENDING: [LeaveStatus.APPROVED, LeaveStatus.REJECTED, LeaveStatus.CANCELLED],
    LeaveStatus.APPROVED: [LeaveStatus.CANCELLED],
    LeaveStatus.REJECTED: [],
    LeaveStatus.CANCELLED: [],
}


# =============================================================================
# Validation Constants
# =============================================================================


class Limits:
    """Validation limits."""

    # Quantity limits
    MIN_QUANTITY: Final[int] = 1
    MAX_ORDER_ITEM_QUANTITY: Final[int] = 999
    MAX_RESTOCK_QUANTITY: Final[int] = 1_000_000

    # Price limits (in cents)
    MIN_PRICE_CENTS: Final[int] = 0
    MAX_PRICE_CENTS: Final[int] = 100_000_00

    # String lengths
    MAX_NAME_LENGTH: Final[int] = 200
    MAX_DESCRIPTION_LENGTH: Final[int] = 2000
    MAX_URL_LENGTH: Final[int] = 2048
    MIN_PASSWORD_LENGTH: Final[int] = 5

    # Establishment
    MAX_ESTABLISHMENT_IMAGES: Final[int] = 7

    # Tables
    MAX_BULK_TABLES: Final[int] = 50
    TABLE_TOKEN_LENGTH: Final[int] = 10

    # Analytics
    MAX_ANALYTICS_MONTHS: Final[int] = 12
    TOP_PRODUCTS: Final[int] = 10

    # Staff
    MIN_ATTENDANCE_YEAR: Final[int] = 2000
    MAX_ATTENDANCE_YEAR: Final[int] = 2100
    MAX_DAILY_HOURS: Final[int] = 24


class OfflineTimeouts:
    """Client-side offline sync timeouts, in seconds."""

    SYNC_LOCK_TTL: Final[float] = 120.0
    STUCK_SYNCING_AFTER: Final[float] = 60.0
    RECONNECT_DEBOUNCE: Final[float] = 3.0
