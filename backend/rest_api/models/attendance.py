"""
Attendance Models: AttendanceMonth, Attendance, LeavePeriod.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shared.config.constants import AttendanceMonthStatus, LeaveStatus
from .base import BigIntId, Base, TimestampMixin

if TYPE_CHECKING:
    from .staff import Employee
    from .user import User


class AttendanceMonth(TimestampMixin, Base):
    """
    A calendar month in which attendance can be recorded.
    At most one month per establishment is OPEN at a time.
    """

    __tablename__ = "attendance_month"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True)
    establishment_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("establishment.id"), nullable=False, index=True
    )
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    month: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(Text, default=AttendanceMonthStatus.OPEN, nullable=False)
    opened_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    closed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    __table_args__ = (
        UniqueConstraint("establishment_id", "year", "month", name="uq_attendance_month"),
        CheckConstraint("month BETWEEN 1 AND 12", name="chk_attendance_month_range"),
        Index(
            "uq_attendance_month_open",
            "establishment_id",
            unique=True,
            postgresql_where=text("status = 'OPEN'"),
            sqlite_where=text("status = 'OPEN'"),
        ),
    )

    # Relationships
    attendances: Mapped[list["Attendance"]] = relationship(back_populates="attendance_month")

    @property
    def label(self) -> str:
        return f"{self.month}/{self.year}"

    def __repr__(self) -> str:
        return f"<AttendanceMonth(id={self.id}, {self.label}, status='{self.status}')>"


class Attendance(TimestampMixin, Base):
    """
    One employee's attendance on one day.
    Minutes are computed against the employee's schedule when recorded.
    """

    __tablename__ = "attendance"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True)
    establishment_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("establishment.id"), nullable=False, index=True
    )
    attendance_month_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("attendance_month.id"), nullable=False, index=True
    )
    employee_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("employee.id"), nullable=False, index=True
    )
    work_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(Text, nullable=False)
    start_time: Mapped[Optional[str]] = mapped_column(Text)
    end_time: Mapped[Optional[str]] = mapped_column(Text)
    worked_minutes: Mapped[Optional[int]] = mapped_column(Integer)
    late_minutes: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    overtime_minutes: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_exception: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    exception_reason: Mapped[Optional[str]] = mapped_column(Text)
    notes: Mapped[Optional[str]] = mapped_column(Text)

    __table_args__ = (
        UniqueConstraint("employee_id", "work_date", name="uq_attendance_employee_day"),
    )

    # Relationships
    attendance_month: Mapped["AttendanceMonth"] = relationship(back_populates="attendances")
    employee: Mapped["Employee"] = relationship(back_populates="attendances")

    def __repr__(self) -> str:
        return f"<Attendance(id={self.id}, employee_id={self.employee_id}, date={self.work_date}, status='{self.status}')>"


class LeavePeriod(TimestampMixin, Base):
    """
    A requested absence of an employee, both ends inclusive.
    Starts PENDING; the owner approves, rejects or cancels it.
    """

    __tablename__ = "leave_period"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True)
    establishment_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("establishment.id"), nullable=False, index=True
    )
    employee_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("employee.id"), nullable=False, index=True
    )
    type: Mapped[str] = mapped_column(Text, nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    reason: Mapped[Optional[str]] = mapped_column(Text)
    notes: Mapped[Optional[str]] = mapped_column(Text)
    status: Mapped[str] = mapped_column(Text, default=LeaveStatus.PENDING, nullable=False)
    approved_by: Mapped[Optional[int]] = mapped_column(BigInteger, ForeignKey("app_user.id"))
    approved_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    __table_args__ = (
        CheckConstraint("end_date >= start_date", name="chk_leave_period_dates"),
        Index("ix_leave_period_employee_dates", "employee_id", "start_date", "end_date"),
    )

    # Relationships
    employee: Mapped["Employee"] = relationship(back_populates="leave_periods")
    approver: Mapped[Optional["User"]] = relationship()

    @property
    def days_count(self) -> int:
        return (self.end_date - self.start_date).days + 1

    def __repr__(self) -> str:
        return (
            f"<LeavePeriod(id={self.id}, employee_id={self.employee_id}, "
            f"{self.start_date}..{self.end_date}, status='{self.status}')>"
        )
