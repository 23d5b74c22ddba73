"""
Attendance month and daily attendance endpoints.

Records are only created and corrected for the current UTC day, inside an
open attendance month.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from shared.infrastructure.db import get_db
from shared.utils.schemas import (
    AttendanceCreate,
    AttendanceMonthCurrent,
    AttendanceMonthOutput,
    AttendanceMonthRef,
    AttendanceOutput,
    AttendanceUpdate,
    MonthlyAttendanceReport,
)
from rest_api.models import Establishment
from rest_api.routers._common import current_establishment
from rest_api.services.domain import AttendanceService, build_attendance_output


router = APIRouter(tags=["admin-attendance"])


@router.get("/attendance-month/current", response_model=AttendanceMonthCurrent)
def current_attendance_month(
    db: Session = Depends(get_db),
    establishment: Establishment = Depends(current_establishment),
) -> AttendanceMonthCurrent:
    return AttendanceService(db).current(establishment.id)


@router.post(
    "/attendance-month/open",
    response_model=AttendanceMonthOutput,
    status_code=status.HTTP_201_CREATED,
)
def open_attendance_month(
    body: AttendanceMonthRef,
    db: Session = Depends(get_db),
    establishment: Establishment = Depends(current_establishment),
) -> AttendanceMonthOutput:
    """Open a month. Only one month can be open at a time."""
    attendance_month = AttendanceService(db).open_month(establishment.id, body.year, body.month)
    return AttendanceMonthOutput.model_validate(attendance_month)


@router.post("/attendance-month/close", response_model=AttendanceMonthOutput)
def close_attendance_month(
    body: AttendanceMonthRef,
    db: Session = Depends(get_db),
    establishment: Establishment = Depends(current_establishment),
) -> AttendanceMonthOutput:
    attendance_month = AttendanceService(db).close_month(establishment.id, body.year, body.month)
    return AttendanceMonthOutput.model_validate(attendance_month)


@router.post("/attendance/today", response_model=AttendanceOutput, status_code=status.HTTP_201_CREATED)
def record_attendance(
    body: AttendanceCreate,
    db: Session = Depends(get_db),
    establishment: Establishment = Depends(current_establishment),
) -> AttendanceOutput:
    return build_attendance_output(AttendanceService(db).record_today(establishment.id, body))


@router.patch("/attendance/today", response_model=AttendanceOutput)
def update_attendance(
    body: AttendanceUpdate,
    db: Session = Depends(get_db),
    establishment: Establishment = Depends(current_establishment),
) -> AttendanceOutput:
    return build_attendance_output(AttendanceService(db).update_today(establishment.id, body))


@router.get("/attendance/month/{year}/{month}", response_model=MonthlyAttendanceReport)
def monthly_attendance(
    year: int,
    month: int,
    db: Session = Depends(get_db),
    establishment: Establishment = Depends(current_establishment),
) -> MonthlyAttendanceReport:
    """Every record of the month with per-employee and global statistics."""
    return AttendanceService(db).monthly_report(establishment.id, year, month)
