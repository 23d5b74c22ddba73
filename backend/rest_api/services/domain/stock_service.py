"""
Stock Domain Service.

Owns every write to ``Product.quantity``:
- decrement_for_order(): the stock-adjustment step of an order becoming PAID
- restock(): the append-only restock ledger

Both issue conditional UPDATE statements so the database row, not a value
read earlier by the application, decides whether stock is sufficient.
Callers run them inside ``unit_of_work`` so a failure rolls back every
decrement already applied in the same transaction.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from typing import Sequence

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session, joinedload

from shared.config.logging import stock_logger as logger
from shared.infrastructure.db import unit_of_work
from shared.utils.exceptions import InsufficientStockError, NotFoundError, ValidationError
from rest_api.models import Order, Product, RestockEvent
from rest_api.repositories.base import TenantRepository


class StockService:
    """Domain service for stock adjustments and the restock ledger."""

    def __init__(self, db: Session):
        self._db = db
        self._products = TenantRepository(Product, db)

    # =========================================================================
    # Stock adjustment step
    # =========================================================================

    def _current_quantity(self, product_id: int) -> int:
        return self._db.scalar(
            select(func.coalesce(Product.quantity, 0)).where(Product.id == product_id)
        ) or 0

    def decrement(self, product: Product, quantity: int, *, order_id: int | None = None) -> None:
        """
        Decrement one quantifiable product.

        Raises:
            InsufficientStockError: If fewer than ``quantity`` units are on hand.
        """
        available = self._current_quantity(product.id)
        if available < quantity:
            raise InsufficientStockError(
                product.id, product.name, available, quantity, order_id=order_id
            )

        result = self._db.execute(
            update(Product)
            .where(Product.id == product.id, Product.quantity >= quantity)
            .values(quantity=Product.quantity - quantity)
            .execution_options(synchronize_session="fetch")
        )
        if result.rowcount == 0:
            # Another transaction took the stock between the read and the update
            raise InsufficientStockError(
                product.id,
                product.name,
                self._current_quantity(product.id),
                quantity,
                order_id=order_id,
            )

    def decrement_for_order(self, order: Order) -> None:
        """
        Decrement stock for every quantifiable item of an order.

        Must be called inside the transaction that also writes the order's
        new status. The first under-stocked item raises and the caller's
        transaction rolls back the decrements applied before it.
        """
        decremented = []
        for item in order.items:
            product = item.product
            if not product.is_quantifiable:
                continue
            self.decrement(product, item.quantity, order_id=order.id)
            decremented.append((product.id, item.quantity))

        if decremented:
            logger.info(
                "Stock decremented for order",
                order_id=order.id,
                products=len(decremented),
                units=sum(qty for _, qty in decremented),
            )

    # =========================================================================
    # Restock ledger
    # =========================================================================

    def restock(self, establishment_id: int, product_id: int, quantity: int) -> tuple[RestockEvent, Product]:
        """
        Append a restock event and increment the product's quantity, atomically.

        Raises:
            ValidationError: If quantity is not positive or the product is not quantifiable.
            NotFoundError: If the product does not belong to the establishment.
        """
        if quantity <= 0:
            raise ValidationError("Quantity must be greater than zero", field="quantity", value=quantity)

        product = self._products.find_by_id(product_id, establishment_id)
        if not product:
            raise NotFoundError("Product", product_id, establishment_id=establishment_id)
        if not product.is_quantifiable:
            raise ValidationError(
                f"Product '{product.name}' does not track stock",
                product_id=product_id,
            )

        with unit_of_work(self._db):
            event = RestockEvent(product_id=product.id, quantity=quantity)
            self._db.add(event)
            self._db.execute(
                update(Product)
                .where(Product.id == product.id)
                .values(quantity=func.coalesce(Product.quantity, 0) + quantity)
                .execution_options(synchronize_session="fetch")
            )

        self._db.refresh(product)
        self._db.refresh(event)
        logger.info(
            "Restock recorded",
            product_id=product.id,
            quantity=quantity,
            new_quantity=product.quantity,
        )
        return event, product

    def list_restocks(
        self,
        establishment_id: int,
        *,
        start_date: date | None = None,
        end_date: date | None = None,
        product_id: int | None = None,
    ) -> Sequence[RestockEvent]:
        """Restock events of the establishment, newest first. ``end_date`` is inclusive."""
        query = (
            select(RestockEvent)
            .join(Product, RestockEvent.product_id == Product.id)
            .where(Product.establishment_id == establishment_id)
            .options(joinedload(RestockEvent.product))
        )
        if start_date:
            query = query.where(
                RestockEvent.created_at >= datetime.combine(start_date, time.min, tzinfo=timezone.utc)
            )
        if end_date:
            query = query.where(
                RestockEvent.created_at
                < datetime.combine(end_date + timedelta(days=1), time.min, tzinfo=timezone.utc)
            )
        if product_id:
            query = query.where(RestockEvent.product_id == product_id)

        return self._db.scalars(
            query.order_by(RestockEvent.created_at.desc(), RestockEvent.id.desc())
        ).all()
