"""
Establishment Service.

Each user owns at most one establishment. Its slug is derived from the name
and regenerated when the name changes.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from rest_api.models import Establishment, User
from shared.config.logging import get_logger
from shared.infrastructure.db import safe_commit
from shared.utils.exceptions import NotFoundError
from shared.utils.schemas import EstablishmentCreate, EstablishmentUpdate
from shared.utils.text import slugify

logger = get_logger(__name__)

DEFAULT_SLUG = "restaurant"


class EstablishmentService:
    """Service for the tenant record itself."""

    def __init__(self, db: Session):
        self._db = db

    def get_for_user(self, user_id: int) -> Establishment | None:
        return self._db.scalar(select(Establishment).where(Establishment.user_id == user_id))

    def get_by_slug(self, slug: str) -> Establishment:
        establishment = self._db.scalar(select(Establishment).where(Establishment.slug == slug))
        if not establishment:
            raise NotFoundError("Restaurant", slug)
        return establishment

    def get_by_id(self, establishment_id: int) -> Establishment:
        establishment = self._db.get(Establishment, establishment_id)
        if not establishment:
            raise NotFoundError("Restaurant", establishment_id)
        return establishment

    def unique_slug(self, name: str, exclude_id: int | None = None) -> str:
        """Slug for ``name``, suffixed with -2, -3... when already taken."""
        base = slugify(name) or DEFAULT_SLUG
        candidate = base
        suffix = 2
        while True:
            query = select(Establishment.id).where(Establishment.slug == candidate)
            if exclude_id is not None:
                query = query.where(Establishment.id != exclude_id)
            if self._db.scalar(query) is None:
                return candidate
            candidate = f"{base}-{suffix}"
            suffix += 1

    def save(self, user: User, data: EstablishmentCreate) -> tuple[Establishment, bool]:
        """
        Create the user's establishment, or overwrite it if it already exists.

        Returns:
            (establishment, created)
        """
        establishment = self.get_for_user(user.id)
        if establishment:
            return self.update(establishment, EstablishmentUpdate(**data.model_dump())), False

        establishment = Establishment(
            user_id=user.id,
            slug=self.unique_slug(data.name),
            **data.model_dump(),
        )
        self._db.add(establishment)
        safe_commit(self._db)
        self._db.refresh(establishment)
        logger.info("Establishment created", establishment_id=establishment.id, user_id=user.id)
        return establishment, True

    def update(self, establishment: Establishment, data: EstablishmentUpdate) -> Establishment:
        changes = data.model_dump(exclude_unset=True)
        for field in ("name", "phones", "address", "images"):
            if field in changes and changes[field] is None:
                changes.pop(field)

        if "name" in changes and changes["name"] != establishment.name:
            establishment.slug = self.unique_slug(changes["name"], exclude_id=establishment.id)

        for field, value in changes.items():
            setattr(establishment, field, value)

        safe_commit(self._db)
        self._db.refresh(establishment)
        logger.info("Establishment updated", establishment_id=establishment.id, fields=sorted(changes))
        return establishment
