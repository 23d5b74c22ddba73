"""
Category management endpoints.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from shared.infrastructure.db import get_db
from shared.utils.schemas import CategoryCreate, CategoryOutput, CategoryUpdate
from rest_api.models import Establishment
from rest_api.routers._common import current_establishment
from rest_api.services.domain import CategoryService


router = APIRouter(tags=["admin-categories"])


def _to_output(category, product_count: int = 0) -> CategoryOutput:
    return CategoryOutput(
        id=category.id,
        name=category.name,
        product_count=product_count,
        created_at=category.created_at,
    )


@router.get("/categories", response_model=list[CategoryOutput])
def list_categories(
    db: Session = Depends(get_db),
    establishment: Establishment = Depends(current_establishment),
) -> list[CategoryOutput]:
    """Active categories ordered by name, each with its product count."""
    return CategoryService(db).list_with_counts(establishment.id)


@router.post("/categories", response_model=CategoryOutput, status_code=status.HTTP_201_CREATED)
def create_category(
    body: CategoryCreate,
    db: Session = Depends(get_db),
    establishment: Establishment = Depends(current_establishment),
) -> CategoryOutput:
    category = CategoryService(db).create(establishment.id, body.name)
    return _to_output(category)


@router.put("/categories/{category_id}", response_model=CategoryOutput)
def update_category(
    category_id: int,
    body: CategoryUpdate,
    db: Session = Depends(get_db),
    establishment: Establishment = Depends(current_establishment),
) -> CategoryOutput:
    service = CategoryService(db)
    category = service.rename(category_id, establishment.id, body.name)
    counts = {c.id: c.product_count for c in service.list_with_counts(establishment.id)}
    return _to_output(category, counts.get(category.id, 0))


@router.delete("/categories/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category(
    category_id: int,
    db: Session = Depends(get_db),
    establishment: Establishment = Depends(current_establishment),
) -> None:
    """Soft delete. Products keep pointing at the category."""
    CategoryService(db).delete(category_id, establishment.id)
