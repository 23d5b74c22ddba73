"""
Attendance Service.

Attendance is recorded day by day inside attendance months:
- A month must be opened before anything can be recorded in it, and only
  one month per establishment is OPEN at a time
- Closing a month freezes its records
- Each employee has at most one record per day, and only today's record
  (UTC) can be created or corrected

When the employee follows a schedule, a PRESENT record on a scheduled rest
day must be flagged as an exception. Worked, late and overtime minutes are
computed from the recorded times against the planned shift of that weekday.
"""

from __future__ import annotations

from collections import Counter
from datetime import date
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from rest_api.models import Attendance, AttendanceMonth, Employee, WorkScheduleDay
from rest_api.models.base import utcnow
from rest_api.services.domain.employee_service import EmployeeService
from shared.config.constants import (
    AttendanceMonthStatus,
    AttendanceStatus,
    EmployeeStatus,
    Limits,
    Weekday,
)
from shared.config.logging import get_logger
from shared.infrastructure.db import safe_commit
from shared.utils.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError
from shared.utils.schemas import (
    AttendanceCreate,
    AttendanceMonthCurrent,
    AttendanceMonthOutput,
    AttendanceOutput,
    AttendanceStats,
    AttendanceUpdate,
    EmployeeAttendanceStats,
    EmployeeSummary,
    GlobalAttendanceStats,
    MonthlyAttendanceReport,
)
from shared.utils.worktime import minutes_to_hours, schedule_deviation, shift_minutes, utc_today

logger = get_logger(__name__)


def build_attendance_output(attendance: Attendance) -> AttendanceOutput:
    return AttendanceOutput(
        id=attendance.id,
        employee_id=attendance.employee_id,
        employee_name=attendance.employee.full_name,
        work_date=attendance.work_date,
        status=attendance.status,
        start_time=attendance.start_time,
        end_time=attendance.end_time,
        worked_hours=(
            minutes_to_hours(attendance.worked_minutes)
            if attendance.worked_minutes is not None
            else None
        ),
        late_minutes=attendance.late_minutes,
        overtime_minutes=attendance.overtime_minutes,
        is_exception=attendance.is_exception,
        exception_reason=attendance.exception_reason,
        notes=attendance.notes,
    )


def _month_json(month: AttendanceMonth | None) -> dict[str, Any] | None:
    if month is None:
        return None
    return AttendanceMonthOutput.model_validate(month).model_dump(mode="json")


def _stats_for(records: list[Attendance]) -> AttendanceStats:
    by_status = Counter(record.status for record in records)
    return AttendanceStats(
        total_days=len(records),
        days_present=by_status[AttendanceStatus.PRESENT],
        days_absent=by_status[AttendanceStatus.ABSENT],
        days_rest_day=by_status[AttendanceStatus.REST_DAY],
        days_leave=by_status[AttendanceStatus.LEAVE],
        days_sick=by_status[AttendanceStatus.SICK],
        days_remote=by_status[AttendanceStatus.REMOTE],
        days_training=by_status[AttendanceStatus.TRAINING],
        days_other=by_status[AttendanceStatus.OTHER],
        total_worked_hours=minutes_to_hours(sum(r.worked_minutes or 0 for r in records)),
        total_late_minutes=sum(r.late_minutes for r in records),
        total_overtime_minutes=sum(r.overtime_minutes for r in records),
        exceptions_count=sum(1 for r in records if r.is_exception),
    )


class AttendanceService:
    """Service for attendance months and daily attendance."""

    def __init__(self, db: Session):
        self._db = db
        self._employees = EmployeeService(db)

    # =========================================================================
    # Months
    # =========================================================================

    def find_month(self, establishment_id: int, year: int, month: int) -> AttendanceMonth | None:
        return self._db.scalar(
            select(AttendanceMonth).where(
                AttendanceMonth.establishment_id == establishment_id,
                AttendanceMonth.year == year,
                AttendanceMonth.month == month,
            )
        )

    def _open_month(self, establishment_id: int) -> AttendanceMonth | None:
        return self._db.scalar(
            select(AttendanceMonth).where(
                AttendanceMonth.establishment_id == establishment_id,
                AttendanceMonth.status == AttendanceMonthStatus.OPEN,
            )
        )

    def current(self, establishment_id: int) -> AttendanceMonthCurrent:
        """The open month and the latest closed one; either may be missing."""
        last_closed = self._db.scalar(
            select(AttendanceMonth)
            .where(
                AttendanceMonth.establishment_id == establishment_id,
                AttendanceMonth.status == AttendanceMonthStatus.CLOSED,
            )
            .order_by(AttendanceMonth.year.desc(), AttendanceMonth.month.desc())
            .limit(1)
        )
        open_month = self._open_month(establishment_id)
        return AttendanceMonthCurrent(
            open_month=AttendanceMonthOutput.model_validate(open_month) if open_month else None,
            last_closed_month=AttendanceMonthOutput.model_validate(last_closed) if last_closed else None,
        )

    def _raise_if_open_elsewhere(self, establishment_id: int) -> None:
        open_month = self._open_month(establishment_id)
        if open_month:
            raise ConflictError(
                f"Attendance month {open_month.label} is still open; close it first",
                payload={"open_month": _month_json(open_month)},
                establishment_id=establishment_id,
            )

    def _raise_if_exists(self, establishment_id: int, year: int, month: int) -> None:
        existing = self.find_month(establishment_id, year, month)
        if existing:
            raise ConflictError(
                f"Attendance month {existing.label} already exists",
                payload={"attendance_month": _month_json(existing)},
                establishment_id=establishment_id,
            )

    def open_month(self, establishment_id: int, year: int, month: int) -> AttendanceMonth:
        """
        Open a new attendance month.

        Raises:
            ConflictError: If another month is open, or this month already exists.
        """
        self._raise_if_open_elsewhere(establishment_id)
        self._raise_if_exists(establishment_id, year, month)

        attendance_month = AttendanceMonth(
            establishment_id=establishment_id,
            year=year,
            month=month,
            status=AttendanceMonthStatus.OPEN,
            opened_at=utcnow(),
        )
        self._db.add(attendance_month)
        try:
            safe_commit(self._db)
        except IntegrityError:
            # A concurrent request opened a month first
            self._raise_if_open_elsewhere(establishment_id)
            self._raise_if_exists(establishment_id, year, month)
            raise
        self._db.refresh(attendance_month)
        logger.info(
            "Attendance month opened",
            establishment_id=establishment_id,
            year=year,
            month=month,
        )
        return attendance_month

    def close_month(self, establishment_id: int, year: int, month: int) -> AttendanceMonth:
        attendance_month = self.find_month(establishment_id, year, month)
        if not attendance_month:
            raise NotFoundError("Attendance month", f"{month}/{year}", establishment_id=establishment_id)
        if attendance_month.status == AttendanceMonthStatus.CLOSED:
            raise ConflictError(
                f"Attendance month {attendance_month.label} is already closed",
                establishment_id=establishment_id,
            )

        attendance_month.status = AttendanceMonthStatus.CLOSED
        attendance_month.closed_at = utcnow()
        safe_commit(self._db)
        self._db.refresh(attendance_month)
        logger.info(
            "Attendance month closed",
            establishment_id=establishment_id,
            year=year,
            month=month,
        )
        return attendance_month

    def _month_open_for(self, establishment_id: int, day: date) -> AttendanceMonth:
        attendance_month = self.find_month(establishment_id, day.year, day.month)
        if not attendance_month or attendance_month.status != AttendanceMonthStatus.OPEN:
            raise ForbiddenError(
                f"Attendance month {day.month}/{day.year} is not open",
                establishment_id=establishment_id,
            )
        return attendance_month

    # =========================================================================
    # Daily records
    # =========================================================================

    def _find_record(self, employee_id: int, day: date) -> Attendance | None:
        return self._db.scalar(
            select(Attendance)
            .options(joinedload(Attendance.employee))
            .where(Attendance.employee_id == employee_id, Attendance.work_date == day)
        )

    @staticmethod
    def _planned_day(employee: Employee, day: date) -> WorkScheduleDay | None:
        if employee.schedule is None:
            return None
        return employee.schedule.day(Weekday.ALL[day.weekday()])

    @staticmethod
    def _check_exception_rules(attendance: Attendance, planned: WorkScheduleDay | None) -> None:
        rest_day = planned is not None and not planned.is_working_day
        if attendance.status == AttendanceStatus.PRESENT and rest_day and not attendance.is_exception:
            raise ValidationError(
                f"{planned.day_of_week} is a rest day for this employee; "
                "mark the attendance as an exception",
                employee_id=attendance.employee_id,
            )
        if attendance.is_exception and not (attendance.exception_reason or "").strip():
            raise ValidationError(
                "An exception requires an exception_reason",
                employee_id=attendance.employee_id,
            )

    @staticmethod
    def _compute_minutes(attendance: Attendance, planned: WorkScheduleDay | None) -> None:
        attendance.worked_minutes = None
        attendance.late_minutes = 0
        attendance.overtime_minutes = 0
        if attendance.status != AttendanceStatus.PRESENT:
            return
        if not attendance.start_time or not attendance.end_time:
            return

        try:
            attendance.worked_minutes = shift_minutes(attendance.start_time, attendance.end_time)
        except ValueError as exc:
            raise ValidationError(str(exc), employee_id=attendance.employee_id) from exc

        if planned and planned.is_working_day and planned.start_time and planned.end_time:
            deviation = schedule_deviation(
                attendance.start_time,
                attendance.end_time,
                planned.start_time,
                planned.end_time,
            )
            attendance.late_minutes = deviation.late_minutes
            attendance.overtime_minutes = deviation.overtime_minutes

    def record_today(
        self,
        establishment_id: int,
        data: AttendanceCreate,
        today: date | None = None,
    ) -> Attendance:
        """
        Record an employee's attendance for today.

        Raises:
            NotFoundError: Unknown employee.
            ForbiddenError: Today's month was never opened or is closed.
            ConflictError: Today's attendance was already recorded.
            ValidationError: Rest-day or exception rules are not met.
        """
        today = today or utc_today()
        employee = self._employees.get(data.employee_id, establishment_id)
        attendance_month = self._month_open_for(establishment_id, today)
        if self._find_record(employee.id, today):
            raise ConflictError(
                f"Attendance of {employee.full_name} is already recorded for {today.isoformat()}",
                employee_id=employee.id,
            )

        attendance = Attendance(
            establishment_id=establishment_id,
            attendance_month_id=attendance_month.id,
            employee_id=employee.id,
            work_date=today,
            status=data.status,
            start_time=data.start_time,
            end_time=data.end_time,
            is_exception=data.is_exception,
            exception_reason=data.exception_reason,
            notes=data.notes,
        )
        planned = self._planned_day(employee, today)
        self._check_exception_rules(attendance, planned)
        self._compute_minutes(attendance, planned)

        self._db.add(attendance)
        try:
            safe_commit(self._db)
        except IntegrityError as exc:
            raise ConflictError(
                f"Attendance of {employee.full_name} is already recorded for {today.isoformat()}",
                employee_id=employee.id,
            ) from exc
        self._db.refresh(attendance)
        logger.info(
            "Attendance recorded",
            attendance_id=attendance.id,
            employee_id=employee.id,
            status=attendance.status,
            establishment_id=establishment_id,
        )
        return attendance

    def update_today(
        self,
        establishment_id: int,
        data: AttendanceUpdate,
        today: date | None = None,
    ) -> Attendance:
        """Correct today's record; omitted fields keep their value."""
        today = today or utc_today()
        employee = self._employees.get(data.employee_id, establishment_id)
        attendance = self._find_record(employee.id, today)
        if not attendance:
            raise NotFoundError("Attendance", employee_id=employee.id, work_date=today.isoformat())
        self._month_open_for(establishment_id, today)

        for field, value in data.model_dump(exclude_unset=True, exclude={"employee_id"}).items():
            setattr(attendance, field, value)
        planned = self._planned_day(employee, today)
        self._check_exception_rules(attendance, planned)
        self._compute_minutes(attendance, planned)

        safe_commit(self._db)
        self._db.refresh(attendance)
        logger.info(
            "Attendance updated",
            attendance_id=attendance.id,
            employee_id=employee.id,
            status=attendance.status,
        )
        return attendance

    # =========================================================================
    # Monthly report
    # =========================================================================

    def monthly_report(self, establishment_id: int, year: int, month: int) -> MonthlyAttendanceReport:
        if not 1 <= month <= 12 or not Limits.MIN_ATTENDANCE_YEAR <= year <= Limits.MAX_ATTENDANCE_YEAR:
            raise ValidationError("Invalid year or month", year=year, month=month)
        attendance_month = self.find_month(establishment_id, year, month)
        if not attendance_month:
            raise NotFoundError("Attendance month", f"{month}/{year}", establishment_id=establishment_id)

        records = list(
            self._db.scalars(
                select(Attendance)
                .join(Attendance.employee)
                .options(joinedload(Attendance.employee))
                .where(Attendance.attendance_month_id == attendance_month.id)
                .order_by(Attendance.work_date, Employee.last_name, Employee.first_name)
            ).all()
        )
        employees = self._employees.list(establishment_id, status=EmployeeStatus.ACTIVE)

        per_employee: dict[int, list[Attendance]] = {}
        for record in records:
            per_employee.setdefault(record.employee_id, []).append(record)

        by_status = Counter(record.status for record in records)
        return MonthlyAttendanceReport(
            month=AttendanceMonthOutput.model_validate(attendance_month),
            attendances=[build_attendance_output(record) for record in records],
            employee_stats=[
                EmployeeAttendanceStats(
                    employee=EmployeeSummary.model_validate(employee),
                    stats=_stats_for(per_employee.get(employee.id, [])),
                )
                for employee in employees
            ],
            global_stats=GlobalAttendanceStats(
                total_employees=len(employees),
                total_attendances=len(records),
                total_present=by_status[AttendanceStatus.PRESENT],
                total_absent=by_status[AttendanceStatus.ABSENT],
                total_worked_hours=minutes_to_hours(sum(r.worked_minutes or 0 for r in records)),
                total_exceptions=sum(1 for r in records if r.is_exception),
            ),
        )
