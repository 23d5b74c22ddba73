"""
Order Domain Service.

Handles the order aggregate: creation from the three entry points (table QR,
public menu, staff/manual), status transitions with the stock-adjustment
step, deletion and listing.

Status transition rules:
- PENDING -> COMPLETED | PAID | CANCELLED
- COMPLETED -> PAID
- PAID and CANCELLED are terminal
- Re-sending the current status is a no-op (PAID -> PAID never touches stock)
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time, timedelta, timezone
from typing import Any, Sequence

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload, selectinload

from shared.config.constants import ORDER_TRANSITIONS, OrderStatus
from shared.config.logging import order_logger as logger
from shared.infrastructure.db import safe_commit, unit_of_work
from shared.utils.exceptions import (
    DuplicateOrderError,
    InvalidTransitionError,
    NotFoundError,
    OrderNotFoundError,
    TerminalStateError,
    ValidationError,
)
from shared.utils.schemas import (
    CustomerInfo,
    ManualOrderCreate,
    OrderItemInput,
    OrderItemOutput,
    OrderOutput,
    PublicOrderCreate,
    TableOrderCreate,
)
from rest_api.models import DiningTable, Establishment, Order, OrderItem, Product
from rest_api.repositories.base import TenantRepository
from rest_api.services.domain.stock_service import StockService


# Days back from today for each listing period
LIST_PERIODS: dict[str, int] = {
    "today": 0,
    "yesterday": 1,
    "day-before-yesterday": 2,
}


def build_order_output(order: Order) -> OrderOutput:
    """Serialize an order with its items and product names."""
    return OrderOutput(
        id=order.id,
        establishment_id=order.establishment_id,
        table_id=order.table_id,
        table_name=order.table.name if order.table else None,
        customer=CustomerInfo(**order.customer) if order.customer else None,
        local_id=order.local_id,
        status=order.status,
        total_amount_cents=order.total_amount_cents,
        created_at=order.created_at,
        updated_at=order.updated_at,
        items=[
            OrderItemOutput(
                id=item.id,
                product_id=item.product_id,
                product_name=item.product.name,
                quantity=item.quantity,
                unit_price_cents=item.unit_price_cents,
                total_cents=item.total_cents,
            )
            for item in order.items
        ],
    )


@dataclass
class _DraftOrder:
    items: list[OrderItem]
    total_amount_cents: int


class OrderService:
    """
    Domain service for Order operations.

    Usage:
        service = OrderService(db)
        order = service.change_status(order_id, establishment.id, "PAID")
    """

    def __init__(self, db: Session):
        self._db = db
        self._products = TenantRepository(Product, db)
        self._stock = StockService(db)

    # =========================================================================
    # Queries
    # =========================================================================

    def _order_options(self) -> list[Any]:
        return [
            selectinload(Order.items).joinedload(OrderItem.product),
            joinedload(Order.table),
        ]

    def get(self, order_id: int, establishment_id: int, *, for_update: bool = False) -> Order:
        """
        Load an order of the establishment with items and products.

        Raises:
            OrderNotFoundError: If missing or owned by another establishment.
        """
        query = (
            select(Order)
            .where(Order.id == order_id, Order.establishment_id == establishment_id)
            .options(*self._order_options())
        )
        if for_update:
            query = query.with_for_update(of=Order)
        order = self._db.scalar(query)
        if not order:
            raise OrderNotFoundError(order_id, establishment_id=establishment_id)
        return order

    def get_public(self, order_id: int) -> Order:
        """Load an order by id without tenant scope (customer order tracking)."""
        order = self._db.scalar(
            select(Order).where(Order.id == order_id).options(*self._order_options())
        )
        if not order:
            raise OrderNotFoundError(order_id)
        return order

    def find_by_local_id(self, local_id: str) -> Order | None:
        return self._db.scalar(
            select(Order).where(Order.local_id == local_id).options(*self._order_options())
        )

    def list_for_period(self, establishment_id: int, period: str = "today") -> Sequence[Order]:
        """Orders created on one UTC calendar day, newest first."""
        if period not in LIST_PERIODS:
            raise ValidationError(
                f"Invalid period '{period}'. Use one of: {', '.join(LIST_PERIODS)}",
                period=period,
            )
        day = datetime.now(timezone.utc).date() - timedelta(days=LIST_PERIODS[period])
        start = datetime.combine(day, time.min, tzinfo=timezone.utc)
        end = start + timedelta(days=1)

        return self._db.scalars(
            select(Order)
            .where(
                Order.establishment_id == establishment_id,
                Order.created_at >= start,
                Order.created_at < end,
            )
            .options(*self._order_options())
            .order_by(Order.created_at.desc(), Order.id.desc())
        ).all()

    # =========================================================================
    # Creation
    # =========================================================================

    def _build_items(self, establishment_id: int, items: Sequence[OrderItemInput]) -> _DraftOrder:
        """
        Resolve products and snapshot the submitted prices.

        Every product must belong to the establishment, which also rules out
        ordering another tenant's products.
        """
        if not items:
            raise ValidationError("An order needs at least one item")

        product_lookup = self._products.find_by_ids(
            [item.product_id for item in items], establishment_id
        )
        missing = [item.product_id for item in items if item.product_id not in product_lookup]
        if missing:
            raise NotFoundError(
                "Product", missing[0], establishment_id=establishment_id, missing=missing
            )

        order_items = []
        total = 0
        for item in items:
            line_total = item.price_cents * item.quantity
            total += line_total
            order_items.append(
                OrderItem(
                    product_id=item.product_id,
                    product=product_lookup[item.product_id],
                    quantity=item.quantity,
                    unit_price_cents=item.price_cents,
                    total_cents=line_total,
                )
            )
        return _DraftOrder(items=order_items, total_amount_cents=total)

    def create_table_order(self, request: TableOrderCreate) -> Order:
        """
        Create a PENDING order for a table reached through its QR code.

        Raises:
            NotFoundError: Unknown restaurant, table token or product.
            ValidationError: Table belongs to another restaurant.
        """
        establishment = self._db.get(Establishment, request.restaurant_id)
        if not establishment:
            raise NotFoundError("Restaurant", request.restaurant_id)

        table = self._db.scalar(
            select(DiningTable).where(
                DiningTable.table_token == request.table_token,
                DiningTable.is_active.is_(True),
            )
        )
        if not table:
            raise NotFoundError("Table")
        if table.establishment_id != establishment.id:
            raise ValidationError(
                "Table does not belong to this restaurant",
                table_id=table.id,
                restaurant_id=establishment.id,
            )

        draft = self._build_items(establishment.id, request.items)
        order = Order(
            establishment_id=establishment.id,
            table_id=table.id,
            status=OrderStatus.PENDING,
            total_amount_cents=draft.total_amount_cents,
            items=draft.items,
        )
        self._db.add(order)
        safe_commit(self._db)

        logger.info(
            "Table order created",
            order_id=order.id,
            establishment_id=establishment.id,
            table_id=table.id,
            items_count=len(draft.items),
            total_amount_cents=draft.total_amount_cents,
        )
        return order

    def create_public_order(self, request: PublicOrderCreate) -> Order:
        """Create a PENDING order from the public menu with a customer snapshot."""
        establishment = self._db.get(Establishment, request.restaurant_id)
        if not establishment:
            raise NotFoundError("Restaurant", request.restaurant_id)

        draft = self._build_items(establishment.id, request.items)
        order = Order(
            establishment_id=establishment.id,
            customer=request.customer.model_dump(),
            status=OrderStatus.PENDING,
            total_amount_cents=draft.total_amount_cents,
            items=draft.items,
        )
        self._db.add(order)
        safe_commit(self._db)

        logger.info(
            "Public order created",
            order_id=order.id,
            establishment_id=establishment.id,
            items_count=len(draft.items),
            total_amount_cents=draft.total_amount_cents,
        )
        return order

    def _raise_duplicate(self, existing: Order) -> None:
        raise DuplicateOrderError(
            existing.local_id,
            build_order_output(existing).model_dump(mode="json"),
            order_id=existing.id,
        )

    def create_manual_order(self, establishment_id: int, request: ManualOrderCreate) -> Order:
        """
        Create an order entered by staff, directly in the requested status.

        A PAID order runs the stock-adjustment step in the same transaction
        as the order insert. A ``local_id`` that was already recorded raises
        DuplicateOrderError carrying the existing order, which lets the
        offline client treat a replay as success.
        """
        if request.local_id:
            existing = self.find_by_local_id(request.local_id)
            if existing:
                self._raise_duplicate(existing)

        table_id = None
        if request.table_id is not None:
            table = TenantRepository(DiningTable, self._db).find_by_id(
                request.table_id, establishment_id
            )
            if not table:
                raise NotFoundError("Table", request.table_id, establishment_id=establishment_id)
            table_id = table.id

        draft = self._build_items(establishment_id, request.items)
        order = Order(
            establishment_id=establishment_id,
            table_id=table_id,
            customer=request.customer.model_dump() if request.customer else None,
            local_id=request.local_id,
            status=request.status,
            total_amount_cents=draft.total_amount_cents,
            items=draft.items,
        )

        try:
            with unit_of_work(self._db):
                self._db.add(order)
                self._db.flush()
                if order.status == OrderStatus.PAID:
                    self._stock.decrement_for_order(order)
        except IntegrityError:
            # Concurrent replay of the same local_id won the unique constraint
            existing = self.find_by_local_id(request.local_id) if request.local_id else None
            if existing:
                self._raise_duplicate(existing)
            raise

        logger.info(
            "Manual order created",
            order_id=order.id,
            establishment_id=establishment_id,
            status=order.status,
            local_id=order.local_id,
            items_count=len(draft.items),
            total_amount_cents=draft.total_amount_cents,
        )
        return order

    # =========================================================================
    # Status transitions
    # =========================================================================

    def _apply_status(self, order: Order, new_status: str) -> None:
        order.status = new_status

    def change_status(self, order_id: int, establishment_id: int, new_status: str) -> Order:
        """
        Validate and apply a status transition atomically.

        On a transition into PAID every quantifiable item is checked and
        decremented before the status is written, all in one transaction.
        Any failure leaves both stock and status untouched.

        Raises:
            ValidationError: Unknown status.
            OrderNotFoundError: Order missing or of another establishment.
            InvalidTransitionError: Transition not allowed from the current status.
            InsufficientStockError: A quantifiable product is under-stocked.
        """
        if new_status not in OrderStatus.ALL:
            raise ValidationError(f"Invalid status '{new_status}'", status=new_status)

        with unit_of_work(self._db):
            order = self.get(order_id, establishment_id, for_update=True)
            previous = order.status

            if new_status == previous:
                return order

            if new_status not in ORDER_TRANSITIONS.get(previous, []):
                raise InvalidTransitionError("Order", previous, new_status, order_id=order.id)

            if new_status == OrderStatus.PAID and previous != OrderStatus.PAID:
                self._stock.decrement_for_order(order)

            self._apply_status(order, new_status)

        logger.info(
            "Order status changed",
            order_id=order.id,
            establishment_id=establishment_id,
            from_status=previous,
            to_status=new_status,
        )
        return order

    def cancel_public(self, order_id: int) -> Order:
        """Customer-side cancellation, only while the order is still PENDING."""
        order = self.get_public(order_id)
        if order.status != OrderStatus.PENDING:
            raise InvalidTransitionError("Order", order.status, OrderStatus.CANCELLED, order_id=order.id)

        order.status = OrderStatus.CANCELLED
        safe_commit(self._db)
        logger.info("Order cancelled by customer", order_id=order.id)
        return order

    # =========================================================================
    # Deletion
    # =========================================================================

    def delete(self, order_id: int, establishment_id: int) -> None:
        """
        Delete an order and its items.

        Paid and cancelled orders are history and cannot be deleted.
        Deleting never restores stock.
        """
        order = self.get(order_id, establishment_id)
        if order.status in OrderStatus.UNDELETABLE:
            raise TerminalStateError("Order", order.status, "delete", order_id=order.id)

        status = order.status
        self._db.delete(order)
        safe_commit(self._db)
        logger.info(
            "Order deleted",
            order_id=order_id,
            establishment_id=establishment_id,
            status=status,
        )
