"""
Order Models: Order, OrderItem.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

from sqlalchemy import BigInteger, CheckConstraint, ForeignKey, Index, Integer, JSON, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shared.config.constants import OrderStatus
from .base import BigIntId, Base, TimestampMixin

if TYPE_CHECKING:
    from .tenant import Establishment
    from .table import DiningTable
    from .catalog import Product


class Order(TimestampMixin, Base):
    """
    An order of one establishment.

    Either references a table (QR dine-in flow), carries a customer contact
    snapshot (public flow), or neither (counter order entered by staff).
    ``total_amount_cents`` is fixed when the order is created.
    ``local_id`` is the offline client's key and makes manual sync idempotent.
    """

    __tablename__ = "app_order"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True)
    establishment_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("establishment.id"), nullable=False, index=True
    )
    table_id: Mapped[Optional[int]] = mapped_column(
        BigInteger, ForeignKey("restaurant_table.id"), index=True
    )
    local_id: Mapped[Optional[str]] = mapped_column(Text, unique=True)
    customer: Mapped[Optional[dict[str, Any]]] = mapped_column(JSON)
    status: Mapped[str] = mapped_column(Text, default=OrderStatus.PENDING, nullable=False, index=True)
    total_amount_cents: Mapped[int] = mapped_column(Integer, nullable=False)

    # Relationships
    establishment: Mapped["Establishment"] = relationship(back_populates="orders")
    table: Mapped[Optional["DiningTable"]] = relationship(back_populates="orders")
    items: Mapped[list["OrderItem"]] = relationship(
        back_populates="order", cascade="all, delete-orphan"
    )

    __table_args__ = (
        CheckConstraint("total_amount_cents >= 0", name="chk_order_total_non_negative"),
        Index("ix_order_establishment_created", "establishment_id", "created_at"),
        Index("ix_order_establishment_status", "establishment_id", "status"),
    )

    def __repr__(self) -> str:
        return f"<Order(id={self.id}, status='{self.status}', total_amount_cents={self.total_amount_cents})>"


class OrderItem(Base):
    """
    A line of an order.
    Stores the unit price at the time of order for historical accuracy.
    """

    __tablename__ = "order_item"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True)
    order_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("app_order.id", ondelete="CASCADE"), nullable=False, index=True
    )
    product_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("product.id"), nullable=False, index=True
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    total_cents: Mapped[int] = mapped_column(Integer, nullable=False)

    __table_args__ = (
        CheckConstraint("quantity > 0", name="chk_order_item_quantity_positive"),
        CheckConstraint("unit_price_cents >= 0", name="chk_order_item_price_non_negative"),
    )

    # Relationships
    order: Mapped["Order"] = relationship(back_populates="items")
    product: Mapped["Product"] = relationship()

    def __repr__(self) -> str:
        return f"<OrderItem(id={self.id}, product_id={self.product_id}, quantity={self.quantity})>"
