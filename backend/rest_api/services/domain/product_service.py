"""
Product Service.

Business rules:
- Products belong to one establishment and optionally to one of its categories
- ``quantity`` is only meaningful for quantifiable products (NULL otherwise)
- Creating a quantifiable product with stock records that stock as the first
  restock ledger entry, in the same transaction
- Updates never touch ``quantity`` or ``is_quantifiable``
- Delete is a soft delete so historical order items keep their product

Usage:
    service = ProductService(db)
    product = service.create(establishment.id, body)
"""

from __future__ import annotations

from typing import Sequence

from sqlalchemy.orm import Session

from rest_api.models import Category, Product, RestockEvent
from rest_api.repositories.base import TenantRepository
from shared.config.constants import ProductStatus
from shared.config.logging import get_logger
from shared.infrastructure.db import safe_commit, unit_of_work
from shared.utils.exceptions import NotFoundError
from shared.utils.schemas import ProductCreate, ProductUpdate

logger = get_logger(__name__)


class ProductService:
    """Service for product management."""

    def __init__(self, db: Session):
        self._db = db
        self._repo = TenantRepository(Product, db)
        self._categories = TenantRepository(Category, db)

    def list(
        self,
        establishment_id: int,
        *,
        category_id: int | None = None,
        status: str | None = None,
    ) -> Sequence[Product]:
        conditions = []
        if category_id is not None:
            conditions.append(Product.category_id == category_id)
        if status is not None:
            conditions.append(Product.status == status)
        return self._repo.find_all(establishment_id, where=conditions, order_by=Product.name)

    def get(self, product_id: int, establishment_id: int) -> Product:
        product = self._repo.find_by_id(product_id, establishment_id)
        if not product:
            raise NotFoundError("Product", product_id, establishment_id=establishment_id)
        return product

    def _validate_category(self, category_id: int | None, establishment_id: int) -> None:
        if category_id is None:
            return
        if not self._categories.find_by_id(category_id, establishment_id):
            raise NotFoundError("Category", category_id, establishment_id=establishment_id)

    def create(self, establishment_id: int, data: ProductCreate) -> Product:
        self._validate_category(data.category_id, establishment_id)

        quantity = (data.quantity or 0) if data.is_quantifiable else None
        product = Product(
            establishment_id=establishment_id,
            category_id=data.category_id,
            name=data.name,
            description=data.description,
            price_cents=data.price_cents,
            image=data.image,
            is_quantifiable=data.is_quantifiable,
            quantity=quantity,
            status=data.status,
        )

        with unit_of_work(self._db):
            self._repo.add(product)
            self._db.flush()
            if quantity:
                self._db.add(RestockEvent(product_id=product.id, quantity=quantity))

        self._db.refresh(product)
        logger.info(
            "Product created",
            product_id=product.id,
            establishment_id=establishment_id,
            is_quantifiable=product.is_quantifiable,
            initial_quantity=quantity,
        )
        return product

    def update(self, product_id: int, establishment_id: int, data: ProductUpdate) -> Product:
        product = self.get(product_id, establishment_id)
        changes = data.model_dump(exclude_unset=True)

        if "category_id" in changes:
            self._validate_category(changes["category_id"], establishment_id)

        for field in ("name", "description", "price_cents", "category_id", "image"):
            if field not in changes:
                continue
            if changes[field] is None and field in ("name", "price_cents"):
                continue
            setattr(product, field, changes[field])

        safe_commit(self._db)
        self._db.refresh(product)
        return product

    def set_status(self, product_id: int, establishment_id: int, status: str) -> Product:
        product = self.get(product_id, establishment_id)
        product.status = status
        safe_commit(self._db)
        self._db.refresh(product)
        logger.info("Product status changed", product_id=product.id, status=status)
        return product

    def delete(self, product_id: int, establishment_id: int) -> None:
        product = self.get(product_id, establishment_id)
        product.soft_delete()
        product.status = ProductStatus.INACTIVE
        safe_commit(self._db)
        logger.info("Product deleted", product_id=product_id, establishment_id=establishment_id)
