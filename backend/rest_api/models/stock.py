"""
Stock Model: RestockEvent (append-only ledger).
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import BigInteger, CheckConstraint, DateTime, ForeignKey, Index, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import BigIntId, Base, utcnow

if TYPE_CHECKING:
    from .catalog import Product


class RestockEvent(Base):
    """
    One manual stock replenishment of a product.
    Rows are never updated or deleted; each one was written together with
    the matching increment of ``Product.quantity``.
    """

    __tablename__ = "restock_event"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True)
    product_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("product.id"), nullable=False, index=True
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    __table_args__ = (
        CheckConstraint("quantity > 0", name="chk_restock_quantity_positive"),
        Index("ix_restock_product_created", "product_id", "created_at"),
    )

    # Relationships
    product: Mapped["Product"] = relationship(back_populates="restock_events")

    def __repr__(self) -> str:
        return f"<RestockEvent(id={self.id}, product_id={self.product_id}, quantity={self.quantity})>"
