"""
Category Service.

Business rules:
- Categories belong to one establishment
- Names are unique (case-insensitive) among active categories
- Delete is a soft delete; products keep their category reference
"""

from __future__ import annotations

from sqlalchemy import and_, func, select
from sqlalchemy.orm import Session

from rest_api.models import Category, Product
from rest_api.repositories.base import TenantRepository
from shared.config.logging import get_logger
from shared.infrastructure.db import safe_commit
from shared.utils.exceptions import DuplicateEntityError, NotFoundError
from shared.utils.schemas import CategoryOutput

logger = get_logger(__name__)


class CategoryService:
    """Service for category management."""

    def __init__(self, db: Session):
        self._db = db
        self._repo = TenantRepository(Category, db)

    def list_with_counts(self, establishment_id: int) -> list[CategoryOutput]:
        """Active categories ordered by name, with their active product count."""
        rows = self._db.execute(
            select(Category, func.count(Product.id))
            .outerjoin(
                Product,
                and_(Product.category_id == Category.id, Product.is_active.is_(True)),
            )
            .where(
                Category.establishment_id == establishment_id,
                Category.is_active.is_(True),
            )
            .group_by(Category.id)
            .order_by(Category.name)
        ).all()
        return [
            CategoryOutput(
                id=category.id,
                name=category.name,
                product_count=count,
                created_at=category.created_at,
            )
            for category, count in rows
        ]

    def get(self, category_id: int, establishment_id: int) -> Category:
        category = self._repo.find_by_id(category_id, establishment_id)
        if not category:
            raise NotFoundError("Category", category_id, establishment_id=establishment_id)
        return category

    def _ensure_unique_name(self, establishment_id: int, name: str, exclude_id: int | None = None) -> None:
        query = select(Category.id).where(
            Category.establishment_id == establishment_id,
            Category.is_active.is_(True),
            func.lower(Category.name) == name.lower(),
        )
        if exclude_id is not None:
            query = query.where(Category.id != exclude_id)
        if self._db.scalar(query) is not None:
            raise DuplicateEntityError("Category", name, establishment_id=establishment_id)

    def create(self, establishment_id: int, name: str) -> Category:
        self._ensure_unique_name(establishment_id, name)
        category = Category(establishment_id=establishment_id, name=name)
        self._repo.add(category)
        safe_commit(self._db)
        self._db.refresh(category)
        logger.info("Category created", category_id=category.id, establishment_id=establishment_id)
        return category

    def rename(self, category_id: int, establishment_id: int, name: str) -> Category:
        category = self.get(category_id, establishment_id)
        self._ensure_unique_name(establishment_id, name, exclude_id=category.id)
        category.name = name
        safe_commit(self._db)
        self._db.refresh(category)
        return category

    def delete(self, category_id: int, establishment_id: int) -> None:
        category = self.get(category_id, establishment_id)
        category.soft_delete()
        safe_commit(self._db)
        logger.info("Category deleted", category_id=category_id, establishment_id=establishment_id)
