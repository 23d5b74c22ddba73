"""
Staff Models: Employee, WorkSchedule, WorkScheduleDay.
"""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Optional

from sqlalchemy import BigInteger, Boolean, Date, ForeignKey, Index, Integer, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shared.config.constants import EmployeeStatus, Weekday
from shared.utils.worktime import weekly_minutes
from .base import AuditMixin, BigIntId, Base, TimestampMixin

if TYPE_CHECKING:
    from .attendance import Attendance, LeavePeriod


class Employee(AuditMixin, Base):
    """
    A staff member of an establishment.
    Follows at most one weekly work schedule.
    """

    __tablename__ = "employee"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True)
    establishment_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("establishment.id"), nullable=False, index=True
    )
    schedule_id: Mapped[Optional[int]] = mapped_column(
        BigInteger, ForeignKey("work_schedule.id", ondelete="SET NULL"), index=True
    )
    first_name: Mapped[str] = mapped_column(Text, nullable=False)
    last_name: Mapped[str] = mapped_column(Text, nullable=False)
    phone: Mapped[str] = mapped_column(Text, nullable=False)
    email: Mapped[Optional[str]] = mapped_column(Text)
    position: Mapped[str] = mapped_column(Text, nullable=False)
    department: Mapped[str] = mapped_column(Text, nullable=False)
    contract_type: Mapped[str] = mapped_column(Text, nullable=False)
    hire_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(Text, default=EmployeeStatus.ACTIVE, nullable=False)

    __table_args__ = (
        Index("ix_employee_establishment_active", "establishment_id", "is_active"),
    )

    # Relationships
    schedule: Mapped[Optional["WorkSchedule"]] = relationship(back_populates="employees")
    attendances: Mapped[list["Attendance"]] = relationship(back_populates="employee")
    leave_periods: Mapped[list["LeavePeriod"]] = relationship(back_populates="employee")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self) -> str:
        return f"<Employee(id={self.id}, name='{self.full_name}', position='{self.position}')>"


class WorkSchedule(TimestampMixin, Base):
    """A named weekly schedule: seven days, each working or not."""

    __tablename__ = "work_schedule"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True)
    establishment_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("establishment.id"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)

    # Relationships
    days: Mapped[list["WorkScheduleDay"]] = relationship(
        back_populates="schedule", cascade="all, delete-orphan"
    )
    employees: Mapped[list["Employee"]] = relationship(back_populates="schedule")

    @property
    def ordered_days(self) -> list["WorkScheduleDay"]:
        return sorted(self.days, key=lambda day: Weekday.ALL.index(day.day_of_week))

    def day(self, weekday: str) -> Optional["WorkScheduleDay"]:
        return next((d for d in self.days if d.day_of_week == weekday), None)

    @property
    def weekly_minutes(self) -> int:
        return weekly_minutes(day.effective_minutes for day in self.days)

    def __repr__(self) -> str:
        return f"<WorkSchedule(id={self.id}, name='{self.name}')>"


class WorkScheduleDay(Base):
    """
    One weekday of a schedule.
    ``planned_minutes`` is derived from the clock times; ``manual_minutes``
    overrides it when the owner enters the daily hours by hand.
    """

    __tablename__ = "work_schedule_day"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True)
    schedule_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("work_schedule.id", ondelete="CASCADE"), nullable=False, index=True
    )
    day_of_week: Mapped[str] = mapped_column(Text, nullable=False)
    is_working_day: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    start_time: Mapped[Optional[str]] = mapped_column(Text)
    end_time: Mapped[Optional[str]] = mapped_column(Text)
    planned_minutes: Mapped[Optional[int]] = mapped_column(Integer)
    manual_minutes: Mapped[Optional[int]] = mapped_column(Integer)

    __table_args__ = (
        UniqueConstraint("schedule_id", "day_of_week", name="uq_schedule_day"),
    )

    # Relationships
    schedule: Mapped["WorkSchedule"] = relationship(back_populates="days")

    @property
    def effective_minutes(self) -> int:
        if not self.is_working_day:
            return 0
        if self.manual_minutes is not None:
            return self.manual_minutes
        return self.planned_minutes or 0

    def __repr__(self) -> str:
        return f"<WorkScheduleDay(schedule_id={self.schedule_id}, day='{self.day_of_week}')>"
