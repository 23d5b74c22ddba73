"""
Weekly work schedule endpoints.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from shared.infrastructure.db import get_db
from shared.utils.schemas import ScheduleCreate, ScheduleOutput
from rest_api.models import Establishment
from rest_api.routers._common import current_establishment
from rest_api.services.domain import ScheduleService, build_schedule_output


router = APIRouter(tags=["admin-schedules"])


@router.get("/schedules", response_model=list[ScheduleOutput])
def list_schedules(
    db: Session = Depends(get_db),
    establishment: Establishment = Depends(current_establishment),
) -> list[ScheduleOutput]:
    """Schedules newest first, with weekly hours and assigned employees."""
    return [build_schedule_output(s) for s in ScheduleService(db).list(establishment.id)]


@router.post("/schedules", response_model=ScheduleOutput, status_code=status.HTTP_201_CREATED)
def create_schedule(
    body: ScheduleCreate,
    db: Session = Depends(get_db),
    establishment: Establishment = Depends(current_establishment),
) -> ScheduleOutput:
    """Create a schedule from its seven days and assign it to ``employee_ids``."""
    return build_schedule_output(ScheduleService(db).create(establishment.id, body))


@router.get("/schedules/{schedule_id}", response_model=ScheduleOutput)
def get_schedule(
    schedule_id: int,
    db: Session = Depends(get_db),
    establishment: Establishment = Depends(current_establishment),
) -> ScheduleOutput:
    return build_schedule_output(ScheduleService(db).get(schedule_id, establishment.id))


@router.delete("/schedules/{schedule_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_schedule(
    schedule_id: int,
    db: Session = Depends(get_db),
    establishment: Establishment = Depends(current_establishment),
) -> None:
    ScheduleService(db).delete(schedule_id, establishment.id)
