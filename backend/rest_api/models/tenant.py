"""
Multi-Tenancy Model: Establishment.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from sqlalchemy import BigInteger, Float, ForeignKey, JSON, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import BigIntId, Base, TimestampMixin

if TYPE_CHECKING:
    from .user import User
    from .catalog import Category, Product
    from .table import DiningTable
    from .order import Order


class Establishment(TimestampMixin, Base):
    """
    A restaurant (the tenant).
    Every catalog entry, table and order belongs to exactly one establishment.
    Each user owns at most one establishment.
    """

    __tablename__ = "establishment"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True)
    user_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("app_user.id"), nullable=False, unique=True
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    slug: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    email: Mapped[Optional[str]] = mapped_column(Text)
    phones: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    address: Mapped[str] = mapped_column(Text, nullable=False)
    latitude: Mapped[Optional[float]] = mapped_column(Float)
    longitude: Mapped[Optional[float]] = mapped_column(Float)
    images: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)

    # Relationships
    owner: Mapped["User"] = relationship(back_populates="establishment")
    categories: Mapped[list["Category"]] = relationship(back_populates="establishment")
    products: Mapped[list["Product"]] = relationship(back_populates="establishment")
    tables: Mapped[list["DiningTable"]] = relationship(back_populates="establishment")
    orders: Mapped[list["Order"]] = relationship(back_populates="establishment")

    def __repr__(self) -> str:
        return f"<Establishment(id={self.id}, name='{self.name}', slug='{self.slug}')>"
