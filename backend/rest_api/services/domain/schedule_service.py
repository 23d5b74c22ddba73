"""
Work Schedule Service.

A schedule describes one week: each of the seven days is either a rest
day or a working day with start and end times. Planned hours come from
the clock times (wrapping past midnight); hours entered by hand override
them. Weekly hours are the sum of the effective daily hours.

Each employee follows at most one schedule. Assigning a schedule to an
employee moves them off any earlier one.
"""

from __future__ import annotations

from typing import Sequence

from sqlalchemy.orm import Session, selectinload

from rest_api.models import Employee, WorkSchedule, WorkScheduleDay
from rest_api.repositories.base import TenantRepository
from shared.config.logging import get_logger
from shared.infrastructure.db import safe_commit, unit_of_work
from shared.utils.exceptions import NotFoundError
from shared.utils.schemas import (
    EmployeeSummary,
    ScheduleCreate,
    ScheduleDayOutput,
    ScheduleOutput,
)
from shared.utils.worktime import hours_to_minutes, minutes_to_hours, shift_minutes

logger = get_logger(__name__)

_LOAD = [selectinload(WorkSchedule.days), selectinload(WorkSchedule.employees)]


def build_schedule_output(schedule: WorkSchedule) -> ScheduleOutput:
    """Serialize a schedule with its days in weekday order and its hour totals."""
    days = schedule.ordered_days
    working = [day for day in days if day.is_working_day]
    weekly = schedule.weekly_minutes
    return ScheduleOutput(
        id=schedule.id,
        name=schedule.name,
        days=[
            ScheduleDayOutput(
                day_of_week=day.day_of_week,
                is_working_day=day.is_working_day,
                start_time=day.start_time,
                end_time=day.end_time,
                planned_hours=(
                    minutes_to_hours(day.planned_minutes) if day.planned_minutes is not None else None
                ),
                manual_hours=(
                    minutes_to_hours(day.manual_minutes) if day.manual_minutes is not None else None
                ),
                effective_hours=minutes_to_hours(day.effective_minutes),
            )
            for day in days
        ],
        employees=[
            EmployeeSummary.model_validate(e)
            for e in sorted(schedule.employees, key=lambda e: (e.last_name, e.first_name))
            if e.is_active
        ],
        weekly_hours=minutes_to_hours(weekly),
        working_days=len(working),
        average_daily_hours=minutes_to_hours(weekly / len(working)) if working else 0.0,
        created_at=schedule.created_at,
    )


class ScheduleService:
    """Service for weekly work schedules."""

    def __init__(self, db: Session):
        self._db = db
        self._repo = TenantRepository(WorkSchedule, db)
        self._employees = TenantRepository(Employee, db)

    def list(self, establishment_id: int) -> Sequence[WorkSchedule]:
        return self._repo.find_all(
            establishment_id,
            options=_LOAD,
            order_by=WorkSchedule.id.desc(),
        )

    def get(self, schedule_id: int, establishment_id: int) -> WorkSchedule:
        schedule = self._repo.find_by_id(schedule_id, establishment_id, options=_LOAD)
        if not schedule:
            raise NotFoundError("Schedule", schedule_id, establishment_id=establishment_id)
        return schedule

    def create(self, establishment_id: int, data: ScheduleCreate) -> WorkSchedule:
        """
        Create a schedule with its seven days and assign it to ``employee_ids``.

        Raises:
            NotFoundError: If an employee id is unknown to the establishment.
        """
        employees = self._employees.find_by_ids(data.employee_ids, establishment_id)
        missing = [employee_id for employee_id in data.employee_ids if employee_id not in employees]
        if missing:
            raise NotFoundError("Employee", missing[0], establishment_id=establishment_id)

        schedule = WorkSchedule(
            establishment_id=establishment_id,
            name=data.name,
            days=[
                WorkScheduleDay(
                    day_of_week=day.day_of_week,
                    is_working_day=day.is_working_day,
                    start_time=day.start_time,
                    end_time=day.end_time,
                    planned_minutes=(
                        shift_minutes(day.start_time, day.end_time) if day.is_working_day else None
                    ),
                    manual_minutes=hours_to_minutes(day.manual_hours),
                )
                for day in data.days
            ],
        )

        with unit_of_work(self._db):
            self._repo.add(schedule)
            self._db.flush()
            for employee in employees.values():
                employee.schedule_id = schedule.id

        logger.info(
            "Schedule created",
            schedule_id=schedule.id,
            establishment_id=establishment_id,
            weekly_minutes=schedule.weekly_minutes,
            employees=len(employees),
        )
        return self.get(schedule.id, establishment_id)

    def delete(self, schedule_id: int, establishment_id: int) -> None:
        """Delete a schedule and its days. Its employees become unassigned."""
        schedule = self.get(schedule_id, establishment_id)
        for employee in schedule.employees:
            employee.schedule_id = None
        self._repo.delete(schedule)
        safe_commit(self._db)
        logger.info("Schedule deleted", schedule_id=schedule_id, establishment_id=establishment_id)
