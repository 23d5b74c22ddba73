"""
Leave Period Service.

Business rules:
- A period covers ``start_date`` through ``end_date``, both inclusive
- It cannot start in the past (UTC) and may last a single day
- It cannot overlap a PENDING or APPROVED period of the same employee
- New periods are PENDING; PENDING -> APPROVED | REJECTED | CANCELLED,
  APPROVED -> CANCELLED. Rejected and cancelled periods are final
"""

from __future__ import annotations

from collections import Counter
from datetime import date

from sqlalchemy import select
from sqlalchemy.orm import Session

from rest_api.models import LeavePeriod, User
from rest_api.models.base import utcnow
from rest_api.services.domain.employee_service import EmployeeService
from shared.config.constants import LEAVE_TRANSITIONS, LeaveStatus
from shared.config.logging import get_logger
from shared.infrastructure.db import safe_commit
from shared.utils.exceptions import ConflictError, InvalidTransitionError, NotFoundError, ValidationError
from shared.utils.schemas import (
    EmployeeSummary,
    LeaveCreate,
    LeaveListResponse,
    LeaveOutput,
    LeaveStatistics,
    LeaveStatusUpdate,
)
from shared.utils.worktime import utc_today

logger = get_logger(__name__)


def build_leave_output(period: LeavePeriod, today: date) -> LeaveOutput:
    """Serialize a period with its position relative to ``today``."""
    return LeaveOutput(
        id=period.id,
        employee_id=period.employee_id,
        leave_type=period.type,
        start_date=period.start_date,
        end_date=period.end_date,
        days_count=period.days_count,
        reason=period.reason,
        notes=period.notes,
        status=period.status,
        approved_by=period.approved_by,
        approved_at=period.approved_at,
        is_current=period.start_date <= today <= period.end_date,
        is_upcoming=period.start_date > today,
        is_past=period.end_date < today,
    )


class LeaveService:
    """Service for employee leave periods."""

    def __init__(self, db: Session):
        self._db = db
        self._employees = EmployeeService(db)

    def _overlapping(self, employee_id: int, start: date, end: date) -> list[LeavePeriod]:
        return list(
            self._db.scalars(
                select(LeavePeriod)
                .where(
                    LeavePeriod.employee_id == employee_id,
                    LeavePeriod.status.in_(LeaveStatus.BLOCKING),
                    LeavePeriod.start_date <= end,
                    LeavePeriod.end_date >= start,
                )
                .order_by(LeavePeriod.start_date)
            ).all()
        )

    def create(self, establishment_id: int, data: LeaveCreate, today: date | None = None) -> LeavePeriod:
        """
        Request a leave period for an employee.

        Raises:
            NotFoundError: Unknown employee.
            ValidationError: Start in the past or end before start.
            ConflictError: Overlaps a pending or approved period.
        """
        today = today or utc_today()
        employee = self._employees.get(data.employee_id, establishment_id)
        if data.start_date < today:
            raise ValidationError("Leave cannot start in the past", start_date=data.start_date.isoformat())
        if data.end_date < data.start_date:
            raise ValidationError(
                "Leave end date must not be before its start date",
                start_date=data.start_date.isoformat(),
                end_date=data.end_date.isoformat(),
            )

        overlapping = self._overlapping(employee.id, data.start_date, data.end_date)
        if overlapping:
            raise ConflictError(
                "Leave period overlaps an existing one",
                payload={
                    "overlapping_periods": [
                        build_leave_output(p, today).model_dump(mode="json") for p in overlapping
                    ]
                },
                employee_id=employee.id,
            )

        period = LeavePeriod(
            establishment_id=establishment_id,
            employee_id=employee.id,
            type=data.leave_type,
            start_date=data.start_date,
            end_date=data.end_date,
            reason=data.reason,
            notes=data.notes,
            status=LeaveStatus.PENDING,
        )
        self._db.add(period)
        safe_commit(self._db)
        self._db.refresh(period)
        logger.info(
            "Leave period requested",
            leave_period_id=period.id,
            employee_id=employee.id,
            days=period.days_count,
        )
        return period

    def list_for_employee(
        self,
        establishment_id: int,
        employee_id: int,
        *,
        status: str | None = None,
        upcoming: bool = False,
        today: date | None = None,
    ) -> LeaveListResponse:
        today = today or utc_today()
        employee = self._employees.get(employee_id, establishment_id)
        query = select(LeavePeriod).where(LeavePeriod.employee_id == employee.id)
        if status is not None:
            query = query.where(LeavePeriod.status == status)
        if upcoming:
            query = query.where(LeavePeriod.start_date > today)
        periods = self._db.scalars(query.order_by(LeavePeriod.start_date.desc())).all()

        outputs = [build_leave_output(p, today) for p in periods]
        by_status = Counter(p.status for p in periods)
        blocking = [o for o in outputs if o.status in LeaveStatus.BLOCKING]
        return LeaveListResponse(
            employee=EmployeeSummary.model_validate(employee),
            leave_periods=outputs,
            statistics=LeaveStatistics(
                total=len(periods),
                pending=by_status[LeaveStatus.PENDING],
                approved=by_status[LeaveStatus.APPROVED],
                rejected=by_status[LeaveStatus.REJECTED],
                cancelled=by_status[LeaveStatus.CANCELLED],
                upcoming=sum(1 for o in blocking if o.is_upcoming),
                current=sum(1 for o in blocking if o.is_current),
            ),
        )

    def change_status(
        self,
        establishment_id: int,
        employee_id: int,
        data: LeaveStatusUpdate,
        user: User,
    ) -> LeavePeriod:
        employee = self._employees.get(employee_id, establishment_id)
        period = self._db.scalar(
            select(LeavePeriod).where(
                LeavePeriod.id == data.leave_period_id,
                LeavePeriod.employee_id == employee.id,
            )
        )
        if not period:
            raise NotFoundError("Leave period", data.leave_period_id, employee_id=employee.id)

        if data.status not in LEAVE_TRANSITIONS.get(period.status, []):
            raise InvalidTransitionError(
                "leave period", period.status, data.status, leave_period_id=period.id
            )

        from_status = period.status
        period.status = data.status
        if data.notes is not None:
            period.notes = data.notes
        if data.status == LeaveStatus.APPROVED:
            period.approved_by = user.id
            period.approved_at = utcnow()
        safe_commit(self._db)
        self._db.refresh(period)
        logger.info(
            "Leave period status changed",
            leave_period_id=period.id,
            from_status=from_status,
            to_status=period.status,
        )
        return period
