"""
Establishment endpoints: the tenant record of the logged-in owner.
"""

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from shared.infrastructure.db import get_db
from shared.utils.schemas import (
    EstablishmentCreate,
    EstablishmentEnvelope,
    EstablishmentOutput,
    EstablishmentUpdate,
)
from rest_api.models import Establishment, User
from rest_api.routers._common import current_establishment, current_user
from rest_api.services.domain import EstablishmentService


router = APIRouter(tags=["admin-establishment"])


@router.get("/establishment", response_model=EstablishmentEnvelope)
def get_establishment(
    db: Session = Depends(get_db),
    user: User = Depends(current_user),
) -> EstablishmentEnvelope:
    """The caller's establishment, or ``null`` before one is created."""
    establishment = EstablishmentService(db).get_for_user(user.id)
    if not establishment:
        return EstablishmentEnvelope(establishment=None)
    return EstablishmentEnvelope(establishment=EstablishmentOutput.model_validate(establishment))


@router.post("/establishment", response_model=EstablishmentEnvelope)
def save_establishment(
    body: EstablishmentCreate,
    response: Response,
    db: Session = Depends(get_db),
    user: User = Depends(current_user),
) -> EstablishmentEnvelope:
    """Create the establishment (201), or overwrite the existing one (200)."""
    establishment, created = EstablishmentService(db).save(user, body)
    if created:
        response.status_code = status.HTTP_201_CREATED
    return EstablishmentEnvelope(establishment=EstablishmentOutput.model_validate(establishment))


@router.put("/establishment", response_model=EstablishmentEnvelope)
def update_establishment(
    body: EstablishmentUpdate,
    db: Session = Depends(get_db),
    establishment: Establishment = Depends(current_establishment),
) -> EstablishmentEnvelope:
    """Partial update. Renaming regenerates the public slug."""
    establishment = EstablishmentService(db).update(establishment, body)
    return EstablishmentEnvelope(establishment=EstablishmentOutput.model_validate(establishment))
