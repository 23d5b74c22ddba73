"""
Repository pattern for database access with tenant isolation.

Every query issued through a TenantRepository is filtered by
``establishment_id``, so an id that belongs to another establishment
behaves exactly like an id that does not exist.

Usage:
    repo = TenantRepository(Category, db)
    categories = repo.find_all(establishment_id, order_by=Category.name)
    category = repo.find_by_id(42, establishment_id)
"""

from __future__ import annotations

from typing import Any, Generic, Sequence, TypeVar

from sqlalchemy import select
from sqlalchemy.orm import Session
from sqlalchemy.sql import Select

from rest_api.models import Base

ModelT = TypeVar("ModelT", bound=Base)


class TenantRepository(Generic[ModelT]):
    """
    Repository with automatic multi-tenant isolation.
    The model must have an ``establishment_id`` column.
    """

    def __init__(self, model: type[ModelT], session: Session):
        if not hasattr(model, "establishment_id"):
            raise AttributeError(
                f"Model {model.__name__} does not have establishment_id column"
            )
        self._model = model
        self._session = session

    @property
    def model(self) -> type[ModelT]:
        return self._model

    @property
    def session(self) -> Session:
        return self._session

    def _tenant_query(self, establishment_id: int) -> Select:
        return select(self._model).where(self._model.establishment_id == establishment_id)

    def _apply_active_filter(self, query: Select, include_inactive: bool) -> Select:
        """Apply is_active filter if model has it."""
        if hasattr(self._model, "is_active") and not include_inactive:
            query = query.where(self._model.is_active.is_(True))
        return query

    def _apply_options(self, query: Select, options: list[Any] | None) -> Select:
        if options:
            query = query.options(*options)
        return query

    def find_by_id(
        self,
        entity_id: int,
        establishment_id: int,
        *,
        options: list[Any] | None = None,
        include_inactive: bool = False,
    ) -> ModelT | None:
        """
        Find entity by ID within tenant scope.

        Returns:
            Entity or None if not found, soft-deleted, or of another tenant.
        """
        query = self._tenant_query(establishment_id).where(self._model.id == entity_id)
        query = self._apply_active_filter(query, include_inactive)
        query = self._apply_options(query, options)
        return self._session.scalar(query)

    def find_all(
        self,
        establishment_id: int,
        *,
        where: Sequence[Any] = (),
        options: list[Any] | None = None,
        include_inactive: bool = False,
        order_by: Any | None = None,
    ) -> Sequence[ModelT]:
        """List entities of the tenant; ``where`` adds column conditions."""
        query = self._tenant_query(establishment_id)
        if where:
            query = query.where(*where)
        query = self._apply_active_filter(query, include_inactive)
        query = self._apply_options(query, options)
        if order_by is not None:
            query = query.order_by(order_by)
        return self._session.scalars(query).all()

    def find_by_ids(
        self,
        entity_ids: Sequence[int],
        establishment_id: int,
        *,
        options: list[Any] | None = None,
        include_inactive: bool = False,
    ) -> dict[int, ModelT]:
        """Batch lookup keyed by id. Missing or foreign ids are simply absent."""
        if not entity_ids:
            return {}
        query = self._tenant_query(establishment_id).where(self._model.id.in_(set(entity_ids)))
        query = self._apply_active_filter(query, include_inactive)
        query = self._apply_options(query, options)
        return {entity.id: entity for entity in self._session.scalars(query).all()}

    def add(self, entity: ModelT) -> ModelT:
        """Add entity to session (not committed)."""
        self._session.add(entity)
        return entity

    def delete(self, entity: ModelT) -> None:
        """Delete entity from session (not committed)."""
        self._session.delete(entity)
