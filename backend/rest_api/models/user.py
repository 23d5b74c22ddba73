"""
User Model.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from sqlalchemy import Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import BigIntId, Base, TimestampMixin

if TYPE_CHECKING:
    from .tenant import Establishment


class User(TimestampMixin, Base):
    """An account that signs in to the admin dashboard and owns one establishment."""

    __tablename__ = "app_user"

    id: Mapped[int] = mapped_column(BigIntId, primary_key=True)
    email: Mapped[str] = mapped_column(Text, nullable=False, unique=True, index=True)
    password: Mapped[str] = mapped_column(Text, nullable=False)  # bcrypt hash

    # Relationships
    establishment: Mapped[Optional["Establishment"]] = relationship(
        back_populates="owner", uselist=False
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"
