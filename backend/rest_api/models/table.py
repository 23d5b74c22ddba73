"""
Table Model: DiningTable.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import BigInteger, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import AuditMixin, BigIntId, Base

if TYPE_CHECKING:
    from .tenant import Establishment
    from .order import Order


class DiningTable(AuditMixin, Base):
    """
    Physical table of an establishment, reachable by customers through the
    QR code that encodes its ``table_token``.
    """

    # "table" is a reserved SQL keyword
    __tablename__ = "restaurant_table"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True)
    establishment_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("establishment.id"), nullable=False, index=True
    )
    number: Mapped[int] = mapped_column(Integer, nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    table_token: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    qr_url: Mapped[str] = mapped_column(Text, nullable=False)

    __table_args__ = (
        Index("ix_table_establishment_active", "establishment_id", "is_active"),
    )

    # Relationships
    establishment: Mapped["Establishment"] = relationship(back_populates="tables")
    orders: Mapped[list["Order"]] = relationship(back_populates="table")

    def __repr__(self) -> str:
        return f"<DiningTable(id={self.id}, number={self.number}, name='{self.name}')>"
