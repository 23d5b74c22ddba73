"""
Leave period endpoints.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from shared.infrastructure.db import get_db
from shared.utils.schemas import (
    LeaveCreate,
    LeaveListResponse,
    LeaveOutput,
    LeaveStatusUpdate,
    LeaveStatusValue,
)
from shared.utils.worktime import utc_today
from rest_api.models import Establishment, User
from rest_api.routers._common import current_establishment, current_user
from rest_api.services.domain import LeaveService, build_leave_output


router = APIRouter(tags=["admin-leave"])


@router.post("/leave-period", response_model=LeaveOutput, status_code=status.HTTP_201_CREATED)
def request_leave(
    body: LeaveCreate,
    db: Session = Depends(get_db),
    establishment: Establishment = Depends(current_establishment),
) -> LeaveOutput:
    """Request a leave period. It starts PENDING."""
    period = LeaveService(db).create(establishment.id, body)
    return build_leave_output(period, utc_today())


@router.get("/leave-period/{employee_id}", response_model=LeaveListResponse)
def list_leave_periods(
    employee_id: int,
    status: LeaveStatusValue | None = None,
    upcoming: bool = False,
    db: Session = Depends(get_db),
    establishment: Establishment = Depends(current_establishment),
) -> LeaveListResponse:
    return LeaveService(db).list_for_employee(
        establishment.id, employee_id, status=status, upcoming=upcoming
    )


@router.patch("/leave-period/{employee_id}", response_model=LeaveOutput)
def change_leave_status(
    employee_id: int,
    body: LeaveStatusUpdate,
    db: Session = Depends(get_db),
    establishment: Establishment = Depends(current_establishment),
    user: User = Depends(current_user),
) -> LeaveOutput:
    """Approve, reject or cancel a leave period."""
    period = LeaveService(db).change_status(establishment.id, employee_id, body, user)
    return build_leave_output(period, utc_today())
