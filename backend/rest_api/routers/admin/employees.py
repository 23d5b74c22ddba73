"""
Staff directory endpoints and per-employee schedule assignment.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from shared.infrastructure.db import get_db
from shared.utils.schemas import (
    EmployeeCreate,
    EmployeeOutput,
    EmployeeScheduleEnvelope,
    EmployeeStatusValue,
    EmployeeUpdate,
    ScheduleAssign,
)
from rest_api.models import Establishment, WorkSchedule
from rest_api.routers._common import current_establishment
from rest_api.services.domain import EmployeeService, build_schedule_output


router = APIRouter(tags=["admin-employees"])


def _schedule_envelope(schedule: WorkSchedule | None) -> EmployeeScheduleEnvelope:
    return EmployeeScheduleEnvelope(schedule=build_schedule_output(schedule) if schedule else None)


@router.get("/employees", response_model=list[EmployeeOutput])
def list_employees(
    status: EmployeeStatusValue | None = None,
    db: Session = Depends(get_db),
    establishment: Establishment = Depends(current_establishment),
) -> list[EmployeeOutput]:
    """List employees by last name, optionally filtered by employment status."""
    employees = EmployeeService(db).list(establishment.id, status=status)
    return [EmployeeOutput.model_validate(e) for e in employees]


@router.post("/employees", response_model=EmployeeOutput, status_code=status.HTTP_201_CREATED)
def create_employee(
    body: EmployeeCreate,
    db: Session = Depends(get_db),
    establishment: Establishment = Depends(current_establishment),
) -> EmployeeOutput:
    return EmployeeOutput.model_validate(EmployeeService(db).create(establishment.id, body))


@router.get("/employees/{employee_id}", response_model=EmployeeOutput)
def get_employee(
    employee_id: int,
    db: Session = Depends(get_db),
    establishment: Establishment = Depends(current_establishment),
) -> EmployeeOutput:
    return EmployeeOutput.model_validate(EmployeeService(db).get(employee_id, establishment.id))


@router.put("/employees/{employee_id}", response_model=EmployeeOutput)
def update_employee(
    employee_id: int,
    body: EmployeeUpdate,
    db: Session = Depends(get_db),
    establishment: Establishment = Depends(current_establishment),
) -> EmployeeOutput:
    employee = EmployeeService(db).update(employee_id, establishment.id, body)
    return EmployeeOutput.model_validate(employee)


@router.delete("/employees/{employee_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_employee(
    employee_id: int,
    db: Session = Depends(get_db),
    establishment: Establishment = Depends(current_establishment),
) -> None:
    EmployeeService(db).delete(employee_id, establishment.id)


@router.get("/employees/{employee_id}/schedule", response_model=EmployeeScheduleEnvelope)
def get_employee_schedule(
    employee_id: int,
    db: Session = Depends(get_db),
    establishment: Establishment = Depends(current_establishment),
) -> EmployeeScheduleEnvelope:
    return _schedule_envelope(EmployeeService(db).get_schedule(employee_id, establishment.id))


@router.put("/employees/{employee_id}/schedule", response_model=EmployeeScheduleEnvelope)
def assign_employee_schedule(
    employee_id: int,
    body: ScheduleAssign,
    db: Session = Depends(get_db),
    establishment: Establishment = Depends(current_establishment),
) -> EmployeeScheduleEnvelope:
    """Assign a schedule, replacing the previous one. ``null`` unassigns."""
    schedule = EmployeeService(db).assign_schedule(employee_id, establishment.id, body.schedule_id)
    return _schedule_envelope(schedule)
