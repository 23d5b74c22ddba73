"""
Table Service.

Tables are numbered sequentially per establishment and carry a random
token that the printed QR code encodes.
"""

from __future__ import annotations

import secrets
from typing import Sequence

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from rest_api.models import DiningTable, Establishment
from rest_api.repositories.base import TenantRepository
from shared.config.constants import Limits
from shared.config.logging import get_logger
from shared.infrastructure.db import safe_commit
from shared.utils.exceptions import DuplicateEntityError, NotFoundError, ValidationError

logger = get_logger(__name__)


def generate_table_token() -> str:
    return secrets.token_urlsafe(Limits.TABLE_TOKEN_LENGTH)[: Limits.TABLE_TOKEN_LENGTH]


def build_qr_url(public_base_url: str, establishment_id: int, token: str) -> str:
    return f"{public_base_url.rstrip('/')}/t/{establishment_id}/table/{token}"


class TableService:
    """Service for table management."""

    def __init__(self, db: Session, public_base_url: str):
        self._db = db
        self._repo = TenantRepository(DiningTable, db)
        self._public_base_url = public_base_url

    def list(self, establishment_id: int) -> Sequence[DiningTable]:
        return self._repo.find_all(establishment_id, order_by=DiningTable.number)

    def _next_number(self, establishment_id: int) -> int:
        current = self._db.scalar(
            select(func.max(DiningTable.number)).where(
                DiningTable.establishment_id == establishment_id,
                DiningTable.is_active.is_(True),
            )
        )
        return (current or 0) + 1

    def _active_names(self, establishment_id: int) -> set[str]:
        return {
            name.lower()
            for name in self._db.scalars(
                select(DiningTable.name).where(
                    DiningTable.establishment_id == establishment_id,
                    DiningTable.is_active.is_(True),
                )
            )
        }

    def _unique_token(self) -> str:
        while True:
            token = generate_table_token()
            taken = self._db.scalar(select(DiningTable.id).where(DiningTable.table_token == token))
            if taken is None:
                return token

    def _new_table(self, establishment_id: int, number: int, name: str) -> DiningTable:
        token = self._unique_token()
        return DiningTable(
            establishment_id=establishment_id,
            number=number,
            name=name,
            table_token=token,
            qr_url=build_qr_url(self._public_base_url, establishment_id, token),
        )

    def create(self, establishment_id: int, name: str | None = None) -> DiningTable:
        number = self._next_number(establishment_id)
        name = (name or f"Table {number}").strip()
        if name.lower() in self._active_names(establishment_id):
            raise DuplicateEntityError("Table", name, establishment_id=establishment_id)

        table = self._new_table(establishment_id, number, name)
        self._repo.add(table)
        safe_commit(self._db)
        self._db.refresh(table)
        logger.info("Table created", table_id=table.id, establishment_id=establishment_id)
        return table

    def create_bulk(self, establishment_id: int, count: int) -> list[DiningTable]:
        """Create ``count`` tables numbered after the last one."""
        if not 1 <= count <= Limits.MAX_BULK_TABLES:
            raise ValidationError(
                f"Count must be between 1 and {Limits.MAX_BULK_TABLES}", count=count
            )

        names = self._active_names(establishment_id)
        number = self._next_number(establishment_id)
        tables = []
        while len(tables) < count:
            name = f"Table {number}"
            if name.lower() not in names:
                tables.append(self._new_table(establishment_id, number, name))
                names.add(name.lower())
            number += 1

        self._db.add_all(tables)
        safe_commit(self._db)
        for table in tables:
            self._db.refresh(table)
        logger.info("Tables created", establishment_id=establishment_id, count=count)
        return tables

    def delete(self, table_id: int, establishment_id: int) -> None:
        table = self._repo.find_by_id(table_id, establishment_id)
        if not table:
            raise NotFoundError("Table", table_id, establishment_id=establishment_id)
        table.soft_delete()
        safe_commit(self._db)
        logger.info("Table deleted", table_id=table_id, establishment_id=establishment_id)

    def delete_bulk(self, table_ids: list[int], establishment_id: int) -> int:
        """Delete several tables; fails without deleting anything if one is unknown."""
        found = self._repo.find_by_ids(table_ids, establishment_id)
        missing = [table_id for table_id in table_ids if table_id not in found]
        if missing:
            raise NotFoundError("Table", missing[0], establishment_id=establishment_id)

        for table in found.values():
            table.soft_delete()
        safe_commit(self._db)
        logger.info("Tables deleted", establishment_id=establishment_id, count=len(found))
        return len(found)

    def resolve_token(self, token: str) -> tuple[DiningTable, Establishment]:
        """Public lookup of a QR token."""
        table = self._db.scalar(
            select(DiningTable).where(
                DiningTable.table_token == token,
                DiningTable.is_active.is_(True),
            )
        )
        if not table:
            raise NotFoundError("Table")
        return table, table.establishment
