"""
Pydantic schemas for the REST API request and response bodies.
"""

from datetime import date, datetime
from typing import Annotated, Any, Literal

from pydantic import BaseModel, BeforeValidator, EmailStr, Field, field_validator, model_validator

from shared.config.constants import Limits, Weekday
from shared.utils.worktime import shift_minutes


# =============================================================================
# Common Types
# =============================================================================

def _upper(value: Any) -> Any:
    return value.strip().upper() if isinstance(value, str) else value


# Status values are accepted in any letter case
OrderStatusValue = Annotated[Literal["PENDING", "COMPLETED", "PAID", "CANCELLED"], BeforeValidator(_upper)]
ManualOrderStatus = Annotated[Literal["PENDING", "COMPLETED", "PAID"], BeforeValidator(_upper)]
ProductStatusValue = Annotated[Literal["ACTIVE", "INACTIVE"], BeforeValidator(_upper)]
EmployeeStatusValue = Annotated[Literal["ACTIVE", "INACTIVE"], BeforeValidator(_upper)]
PositionValue = Annotated[
    Literal["WAITER", "COOK", "CHEF", "CASHIER", "MANAGER", "DELIVERY"], BeforeValidator(_upper)
]
DepartmentValue = Annotated[
    Literal["DINING_ROOM", "KITCHEN", "ADMINISTRATION", "DELIVERY"], BeforeValidator(_upper)
]
ContractTypeValue = Annotated[
    Literal["PERMANENT", "FIXED_TERM", "PART_TIME", "DAILY_EXTRA"], BeforeValidator(_upper)
]
WeekdayValue = Annotated[
    Literal["MONDAY", "TUESDAY", "WEDNESDAY", "THURSDAY", "FRIDAY", "SATURDAY", "SUNDAY"],
    BeforeValidator(_upper),
]
AttendanceStatusValue = Annotated[
    Literal["PRESENT", "ABSENT", "REST_DAY", "LEAVE", "SICK", "REMOTE", "TRAINING", "OTHER"],
    BeforeValidator(_upper),
]
LeaveTypeValue = Annotated[
    Literal[
        "ANNUAL_LEAVE", "SICK_LEAVE", "MATERNITY_LEAVE", "PATERNITY_LEAVE",
        "UNPAID_LEAVE", "REMOTE_WORK", "TRAINING", "OTHER",
    ],
    BeforeValidator(_upper),
]
LeaveStatusValue = Annotated[Literal["PENDING", "APPROVED", "REJECTED", "CANCELLED"], BeforeValidator(_upper)]
LeaveDecision = Annotated[Literal["APPROVED", "REJECTED", "CANCELLED"], BeforeValidator(_upper)]

# Wall-clock time of day, 24h
ClockTime = Annotated[str, Field(pattern=r"^([01]\d|2[0-3]):[0-5]\d$")]


# =============================================================================
# Authentication Schemas
# =============================================================================


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=Limits.MIN_PASSWORD_LENGTH, max_length=128)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=128)


class UserOutput(BaseModel):
    id: int
    email: str

    class Config:
        from_attributes = True


class SessionOutput(BaseModel):
    """Current session: the user and the establishment they own, if any."""

    user: UserOutput
    establishment_id: int | None = None


# =============================================================================
# Establishment Schemas
# =============================================================================


class EstablishmentCreate(BaseModel):
    name: str = Field(min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    description: str | None = Field(default=None, max_length=Limits.MAX_DESCRIPTION_LENGTH)
    email: EmailStr | None = None
    phones: list[str] = Field(min_length=1)
    address: str = Field(min_length=1)
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)
    images: list[str] = Field(default_factory=list, max_length=Limits.MAX_ESTABLISHMENT_IMAGES)


class EstablishmentUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    description: str | None = Field(default=None, max_length=Limits.MAX_DESCRIPTION_LENGTH)
    email: EmailStr | None = None
    phones: list[str] | None = Field(default=None, min_length=1)
    address: str | None = Field(default=None, min_length=1)
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)
    images: list[str] | None = Field(default=None, max_length=Limits.MAX_ESTABLISHMENT_IMAGES)


class EstablishmentOutput(BaseModel):
    id: int
    name: str
    slug: str
    description: str | None = None
    email: str | None = None
    phones: list[str]
    address: str
    latitude: float | None = None
    longitude: float | None = None
    images: list[str]
    created_at: datetime

    class Config:
        from_attributes = True


class EstablishmentEnvelope(BaseModel):
    establishment: EstablishmentOutput | None = None


# =============================================================================
# Catalog Schemas
# =============================================================================


class CategoryCreate(BaseModel):
    name: str = Field(min_length=1, max_length=Limits.MAX_NAME_LENGTH)

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be blank")
        return value


class CategoryUpdate(CategoryCreate):
    pass


class CategoryOutput(BaseModel):
    id: int
    name: str
    product_count: int = 0
    created_at: datetime


class ProductCreate(BaseModel):
    name: str = Field(min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    description: str | None = Field(default=None, max_length=Limits.MAX_DESCRIPTION_LENGTH)
    price_cents: int = Field(ge=Limits.MIN_PRICE_CENTS, le=Limits.MAX_PRICE_CENTS)
    category_id: int | None = None
    image: str | None = Field(default=None, max_length=Limits.MAX_URL_LENGTH)
    is_quantifiable: bool = False
    quantity: int | None = Field(default=None, ge=0)
    status: ProductStatusValue = "ACTIVE"


class ProductUpdate(BaseModel):
    """
    Editable catalog fields. Stock is not among them: ``quantity`` only
    changes through paid orders and restocks, so it is ignored here.
    """

    name: str | None = Field(default=None, min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    description: str | None = Field(default=None, max_length=Limits.MAX_DESCRIPTION_LENGTH)
    price_cents: int | None = Field(default=None, ge=Limits.MIN_PRICE_CENTS, le=Limits.MAX_PRICE_CENTS)
    category_id: int | None = None
    image: str | None = Field(default=None, max_length=Limits.MAX_URL_LENGTH)


class ProductStatusUpdate(BaseModel):
    status: ProductStatusValue


class ProductOutput(BaseModel):
    id: int
    name: str
    description: str | None = None
    price_cents: int
    image: str | None = None
    category_id: int | None = None
    is_quantifiable: bool
    quantity: int | None = None
    status: str
    created_at: datetime

    class Config:
        from_attributes = True


# =============================================================================
# Table Schemas
# =============================================================================


class TableCreate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=Limits.MAX_NAME_LENGTH)


class TableBulkCreate(BaseModel):
    count: int = Field(ge=1, le=Limits.MAX_BULK_TABLES)


class TableBulkDelete(BaseModel):
    ids: list[int] = Field(min_length=1)


class TableOutput(BaseModel):
    id: int
    number: int
    name: str
    table_token: str
    qr_url: str
    created_at: datetime

    class Config:
        from_attributes = True


class PublicTableOutput(BaseModel):
    table_id: int
    table_name: str
    table_number: int
    restaurant_id: int
    restaurant_name: str
    restaurant_slug: str


# =============================================================================
# Order Schemas
# =============================================================================


class OrderItemInput(BaseModel):
    product_id: int
    quantity: int = Field(ge=Limits.MIN_QUANTITY, le=Limits.MAX_ORDER_ITEM_QUANTITY)
    price_cents: int = Field(ge=Limits.MIN_PRICE_CENTS, le=Limits.MAX_PRICE_CENTS)


class CustomerInfo(BaseModel):
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    phone: str = Field(min_length=1, max_length=40)
    address: str = Field(min_length=1, max_length=500)


class TableOrderCreate(BaseModel):
    """Order placed by a customer who scanned a table QR code."""

    restaurant_id: int
    table_token: str = Field(min_length=1, max_length=64)
    items: list[OrderItemInput] = Field(min_length=1)


class PublicOrderCreate(BaseModel):
    """Order placed from the public menu, without a table."""

    restaurant_id: int
    items: list[OrderItemInput] = Field(min_length=1)
    customer: CustomerInfo


class ManualOrderCreate(BaseModel):
    """Order entered by staff, possibly replayed by the offline client."""

    items: list[OrderItemInput] = Field(min_length=1)
    table_id: int | None = None
    customer: CustomerInfo | None = None
    status: ManualOrderStatus = "COMPLETED"
    local_id: str | None = Field(default=None, min_length=1, max_length=100)


class OrderStatusUpdate(BaseModel):
    status: OrderStatusValue


class PublicOrderAction(BaseModel):
    action: Literal["cancel"]


class OrderItemOutput(BaseModel):
    id: int
    product_id: int
    product_name: str
    quantity: int
    unit_price_cents: int
    total_cents: int


class OrderOutput(BaseModel):
    id: int
    establishment_id: int
    table_id: int | None = None
    table_name: str | None = None
    customer: CustomerInfo | None = None
    local_id: str | None = None
    status: OrderStatusValue
    total_amount_cents: int
    created_at: datetime
    updated_at: datetime | None = None
    items: list[OrderItemOutput]


# =============================================================================
# Restock Schemas
# =============================================================================


class RestockCreate(BaseModel):
    product_id: int
    quantity: int = Field(gt=0, le=Limits.MAX_RESTOCK_QUANTITY)


class RestockOutput(BaseModel):
    id: int
    product_id: int
    product_name: str
    quantity: int
    created_at: datetime


class RestockCreateResponse(BaseModel):
    restock: RestockOutput
    product: ProductOutput


class RestockStatistics(BaseModel):
    total_restocked: int
    unique_products: int
    total_records: int


class RestockListResponse(BaseModel):
    items: list[RestockOutput]
    statistics: RestockStatistics


# =============================================================================
# Analytics Schemas
# =============================================================================


class SalesPoint(BaseModel):
    label: str
    revenue_cents: int
    orders: int


class SalesSummary(BaseModel):
    total_revenue_cents: int
    total_orders: int
    average_order_value_cents: int


class SalesReport(BaseModel):
    period: str
    chart_data: list[SalesPoint]
    summary: SalesSummary


class ProductSalesRow(BaseModel):
    product_id: int
    product_name: str
    total_quantity: int
    total_revenue_cents: int
    order_count: int


class ProductSalesSummary(BaseModel):
    total_products: int
    total_quantity: int
    total_revenue_cents: int


class ProductSalesReport(BaseModel):
    period: str
    products: list[ProductSalesRow]
    top: list[ProductSalesRow]
    summary: ProductSalesSummary


# =============================================================================
# Public Menu Schemas
# =============================================================================


class MenuProduct(BaseModel):
    id: int
    name: str
    description: str | None = None
    price_cents: int
    image: str | None = None
    is_quantifiable: bool
    quantity: int | None = None

    class Config:
        from_attributes = True


class MenuCategory(BaseModel):
    id: int | None
    name: str
    products: list[MenuProduct]


class PublicEstablishment(BaseModel):
    id: int
    name: str
    slug: str
    description: str | None = None
    phones: list[str]
    address: str
    latitude: float | None = None
    longitude: float | None = None
    images: list[str]

    class Config:
        from_attributes = True


class PublicMenu(BaseModel):
    establishment: PublicEstablishment
    categories: list[MenuCategory]


# =============================================================================
# Staff Schemas
# =============================================================================


class EmployeeCreate(BaseModel):
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    phone: str = Field(min_length=1, max_length=40)
    email: EmailStr | None = None
    position: PositionValue
    department: DepartmentValue
    contract_type: ContractTypeValue
    hire_date: date
    status: EmployeeStatusValue = "ACTIVE"


class EmployeeUpdate(BaseModel):
    first_name: str | None = Field(default=None, min_length=1, max_length=100)
    last_name: str | None = Field(default=None, min_length=1, max_length=100)
    phone: str | None = Field(default=None, min_length=1, max_length=40)
    email: EmailStr | None = None
    position: PositionValue | None = None
    department: DepartmentValue | None = None
    contract_type: ContractTypeValue | None = None
    hire_date: date | None = None
    status: EmployeeStatusValue | None = None


class EmployeeOutput(BaseModel):
    id: int
    first_name: str
    last_name: str
    phone: str
    email: str | None = None
    position: str
    department: str
    contract_type: str
    hire_date: date
    status: str
    schedule_id: int | None = None
    created_at: datetime

    class Config:
        from_attributes = True


class EmployeeSummary(BaseModel):
    id: int
    first_name: str
    last_name: str
    position: str
    department: str

    class Config:
        from_attributes = True


class ScheduleAssign(BaseModel):
    """``schedule_id: null`` unassigns the employee."""

    schedule_id: int | None


class ScheduleDayInput(BaseModel):
    day_of_week: WeekdayValue
    is_working_day: bool = False
    start_time: ClockTime | None = None
    end_time: ClockTime | None = None
    manual_hours: float | None = Field(default=None, ge=0, le=Limits.MAX_DAILY_HOURS)

    @model_validator(mode="after")
    def check_working_hours(self) -> "ScheduleDayInput":
        if not self.is_working_day:
            self.start_time = self.end_time = self.manual_hours = None
            return self
        if not self.start_time or not self.end_time:
            raise ValueError(f"{self.day_of_week}: a working day needs start_time and end_time")
        try:
            shift_minutes(self.start_time, self.end_time)
        except ValueError as exc:
            raise ValueError(f"{self.day_of_week}: {exc}") from exc
        return self


class ScheduleCreate(BaseModel):
    name: str = Field(min_length=1, max_length=Limits.MAX_NAME_LENGTH)
    days: list[ScheduleDayInput] = Field(min_length=7, max_length=7)
    employee_ids: list[int] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be blank")
        return value

    @model_validator(mode="after")
    def check_each_weekday_once(self) -> "ScheduleCreate":
        if sorted(d.day_of_week for d in self.days) != sorted(Weekday.ALL):
            raise ValueError("days must list each weekday exactly once")
        return self


class ScheduleDayOutput(BaseModel):
    day_of_week: str
    is_working_day: bool
    start_time: str | None = None
    end_time: str | None = None
    planned_hours: float | None = None
    manual_hours: float | None = None
    effective_hours: float


class ScheduleOutput(BaseModel):
    id: int
    name: str
    days: list[ScheduleDayOutput]
    employees: list[EmployeeSummary]
    weekly_hours: float
    working_days: int
    average_daily_hours: float
    created_at: datetime


class EmployeeScheduleEnvelope(BaseModel):
    schedule: ScheduleOutput | None = None


# =============================================================================
# Attendance Schemas
# =============================================================================


class AttendanceMonthRef(BaseModel):
    year: int = Field(ge=Limits.MIN_ATTENDANCE_YEAR, le=Limits.MAX_ATTENDANCE_YEAR)
    month: int = Field(ge=1, le=12)


class AttendanceMonthOutput(BaseModel):
    id: int
    year: int
    month: int
    status: str
    opened_at: datetime | None = None
    closed_at: datetime | None = None

    class Config:
        from_attributes = True


class AttendanceMonthCurrent(BaseModel):
    open_month: AttendanceMonthOutput | None = None
    last_closed_month: AttendanceMonthOutput | None = None


class AttendanceCreate(BaseModel):
    employee_id: int
    status: AttendanceStatusValue
    start_time: ClockTime | None = None
    end_time: ClockTime | None = None
    is_exception: bool = False
    exception_reason: str | None = Field(default=None, max_length=500)
    notes: str | None = Field(default=None, max_length=Limits.MAX_DESCRIPTION_LENGTH)


class AttendanceUpdate(BaseModel):
    """Changes to today's record of ``employee_id``; omitted fields are kept."""

    employee_id: int
    status: AttendanceStatusValue | None = None
    start_time: ClockTime | None = None
    end_time: ClockTime | None = None
    is_exception: bool | None = None
    exception_reason: str | None = Field(default=None, max_length=500)
    notes: str | None = Field(default=None, max_length=Limits.MAX_DESCRIPTION_LENGTH)


class AttendanceOutput(BaseModel):
    id: int
    employee_id: int
    employee_name: str
    work_date: date
    status: str
    start_time: str | None = None
    end_time: str | None = None
    worked_hours: float | None = None
    late_minutes: int
    overtime_minutes: int
    is_exception: bool
    exception_reason: str | None = None
    notes: str | None = None


class AttendanceStats(BaseModel):
    total_days: int = 0
    days_present: int = 0
    days_absent: int = 0
    days_rest_day: int = 0
    days_leave: int = 0
    days_sick: int = 0
    days_remote: int = 0
    days_training: int = 0
    days_other: int = 0
    total_worked_hours: float = 0
    total_late_minutes: int = 0
    total_overtime_minutes: int = 0
    exceptions_count: int = 0


class EmployeeAttendanceStats(BaseModel):
    employee: EmployeeSummary
    stats: AttendanceStats


class GlobalAttendanceStats(BaseModel):
    total_employees: int
    total_attendances: int
    total_present: int
    total_absent: int
    total_worked_hours: float
    total_exceptions: int


class MonthlyAttendanceReport(BaseModel):
    month: AttendanceMonthOutput
    attendances: list[AttendanceOutput]
    employee_stats: list[EmployeeAttendanceStats]
    global_stats: GlobalAttendanceStats


# =============================================================================
# Leave Schemas
# =============================================================================


class LeaveCreate(BaseModel):
    employee_id: int
    start_date: date
    end_date: date
    leave_type: LeaveTypeValue
    reason: str | None = Field(default=None, max_length=500)
    notes: str | None = Field(default=None, max_length=Limits.MAX_DESCRIPTION_LENGTH)


class LeaveStatusUpdate(BaseModel):
    leave_period_id: int
    status: LeaveDecision
    notes: str | None = Field(default=None, max_length=Limits.MAX_DESCRIPTION_LENGTH)


class LeaveOutput(BaseModel):
    id: int
    employee_id: int
    leave_type: str
    start_date: date
    end_date: date
    days_count: int
    reason: str | None = None
    notes: str | None = None
    status: str
    approved_by: int | None = None
    approved_at: datetime | None = None
    is_current: bool
    is_upcoming: bool
    is_past: bool


class LeaveStatistics(BaseModel):
    total: int
    pending: int
    approved: int
    rejected: int
    cancelled: int
    upcoming: int
    current: int


class LeaveListResponse(BaseModel):
    employee: EmployeeSummary
    leave_periods: list[LeaveOutput]
    statistics: LeaveStatistics
