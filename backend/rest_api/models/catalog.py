"""
Catalog Models: Category, Product.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from sqlalchemy import BigInteger, Boolean, CheckConstraint, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shared.config.constants import ProductStatus
from .base import AuditMixin, BigIntId, Base

if TYPE_CHECKING:
    from .tenant import Establishment
    from .stock import RestockEvent


class Category(AuditMixin, Base):
    """
    Product category of an establishment.
    Names are unique among the establishment's active categories.
    """

    __tablename__ = "category"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True)
    establishment_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("establishment.id"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)

    # Relationships
    establishment: Mapped["Establishment"] = relationship(back_populates="categories")
    products: Mapped[list["Product"]] = relationship(back_populates="category")

    __table_args__ = (
        Index("ix_category_establishment_active", "establishment_id", "is_active"),
    )


class Product(AuditMixin, Base):
    """
    A sellable item.

    When ``is_quantifiable`` is set, ``quantity`` tracks stock on hand and is
    only changed by paid orders and restock events. Otherwise it stays NULL.
    """

    __tablename__ = "product"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True)
    establishment_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("establishment.id"), nullable=False, index=True
    )
    category_id: Mapped[Optional[int]] = mapped_column(
        BigInteger, ForeignKey("category.id"), index=True
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    price_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    image: Mapped[Optional[str]] = mapped_column(Text)
    is_quantifiable: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    quantity: Mapped[Optional[int]] = mapped_column(Integer)
    status: Mapped[str] = mapped_column(Text, default=ProductStatus.ACTIVE, nullable=False)

    # Relationships
    establishment: Mapped["Establishment"] = relationship(back_populates="products")
    category: Mapped[Optional["Category"]] = relationship(back_populates="products")
    restock_events: Mapped[list["RestockEvent"]] = relationship(back_populates="product")

    __table_args__ = (
        CheckConstraint("price_cents >= 0", name="chk_product_price_non_negative"),
        CheckConstraint("quantity IS NULL OR quantity >= 0", name="chk_product_quantity_non_negative"),
        Index("ix_product_establishment_status", "establishment_id", "status"),
    )

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, name='{self.name}', quantity={self.quantity})>"
