"""
Public Menu Service.

Builds the customer-facing menu: ACTIVE, non-deleted products grouped under
their active categories. Products without a live category are listed last
under "Other".
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from rest_api.models import Category, Establishment, Product
from shared.config.constants import ProductStatus
from shared.utils.schemas import MenuCategory, MenuProduct, PublicEstablishment, PublicMenu

UNCATEGORIZED_NAME = "Other"


class MenuService:
    def __init__(self, db: Session):
        self._db = db

    def build(self, establishment: Establishment) -> PublicMenu:
        categories = self._db.scalars(
            select(Category)
            .where(
                Category.establishment_id == establishment.id,
                Category.is_active.is_(True),
            )
            .order_by(Category.name)
        ).all()
        products = self._db.scalars(
            select(Product)
            .where(
                Product.establishment_id == establishment.id,
                Product.is_active.is_(True),
                Product.status == ProductStatus.ACTIVE,
            )
            .order_by(Product.name)
        ).all()

        grouped: dict[int | None, list[MenuProduct]] = {}
        live_category_ids = {category.id for category in categories}
        for product in products:
            key = product.category_id if product.category_id in live_category_ids else None
            grouped.setdefault(key, []).append(MenuProduct.model_validate(product))

        sections = [
            MenuCategory(id=category.id, name=category.name, products=grouped[category.id])
            for category in categories
            if category.id in grouped
        ]
        if None in grouped:
            sections.append(MenuCategory(id=None, name=UNCATEGORIZED_NAME, products=grouped[None]))

        return PublicMenu(
            establishment=PublicEstablishment.model_validate(establishment),
            categories=sections,
        )
