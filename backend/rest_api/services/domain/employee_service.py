"""
Employee Service.

Business rules:
- Employees belong to one establishment
- Delete is a soft delete; attendance and leave history keep the employee
- An employee follows at most one schedule of the same establishment
"""

from __future__ import annotations

from typing import Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from rest_api.models import Employee, WorkSchedule
from rest_api.repositories.base import TenantRepository
from rest_api.services.domain.schedule_service import ScheduleService
from shared.config.logging import get_logger
from shared.infrastructure.db import safe_commit
from shared.utils.exceptions import NotFoundError
from shared.utils.schemas import EmployeeCreate, EmployeeUpdate

logger = get_logger(__name__)


class EmployeeService:
    """Service for the staff directory."""

    def __init__(self, db: Session):
        self._db = db
        self._repo = TenantRepository(Employee, db)
        self._schedules = ScheduleService(db)

    def list(self, establishment_id: int, *, status: str | None = None) -> Sequence[Employee]:
        query = select(Employee).where(
            Employee.establishment_id == establishment_id,
            Employee.is_active.is_(True),
        )
        if status is not None:
            query = query.where(Employee.status == status)
        return self._db.scalars(query.order_by(Employee.last_name, Employee.first_name)).all()

    def get(self, employee_id: int, establishment_id: int) -> Employee:
        employee = self._repo.find_by_id(employee_id, establishment_id)
        if not employee:
            raise NotFoundError("Employee", employee_id, establishment_id=establishment_id)
        return employee

    def create(self, establishment_id: int, data: EmployeeCreate) -> Employee:
        employee = Employee(establishment_id=establishment_id, **data.model_dump())
        self._repo.add(employee)
        safe_commit(self._db)
        self._db.refresh(employee)
        logger.info("Employee created", employee_id=employee.id, establishment_id=establishment_id)
        return employee

    def update(self, employee_id: int, establishment_id: int, data: EmployeeUpdate) -> Employee:
        employee = self.get(employee_id, establishment_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            # email is the only optional column; other nulls mean "unchanged"
            if value is None and field != "email":
                continue
            setattr(employee, field, value)
        safe_commit(self._db)
        self._db.refresh(employee)
        return employee

    def delete(self, employee_id: int, establishment_id: int) -> None:
        employee = self.get(employee_id, establishment_id)
        employee.soft_delete()
        safe_commit(self._db)
        logger.info("Employee deleted", employee_id=employee_id, establishment_id=establishment_id)

    def get_schedule(self, employee_id: int, establishment_id: int) -> WorkSchedule | None:
        employee = self.get(employee_id, establishment_id)
        if employee.schedule_id is None:
            return None
        return self._schedules.get(employee.schedule_id, establishment_id)

    def assign_schedule(
        self, employee_id: int, establishment_id: int, schedule_id: int | None
    ) -> WorkSchedule | None:
        """Replace the employee's schedule; ``None`` unassigns."""
        employee = self.get(employee_id, establishment_id)
        schedule = None
        if schedule_id is not None:
            schedule = self._schedules.get(schedule_id, establishment_id)
        employee.schedule_id = schedule.id if schedule else None
        safe_commit(self._db)
        logger.info(
            "Schedule assigned",
            employee_id=employee_id,
            schedule_id=schedule_id,
            establishment_id=establishment_id,
        )
        return self.get_schedule(employee_id, establishment_id)
