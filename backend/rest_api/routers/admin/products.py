"""
Product management endpoints.

Stock is read-only here: ``quantity`` changes only through paid orders and
the restock ledger.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from shared.infrastructure.db import get_db
from shared.utils.schemas import (
    ProductCreate,
    ProductOutput,
    ProductStatusUpdate,
    ProductStatusValue,
    ProductUpdate,
)
from rest_api.models import Establishment
from rest_api.routers._common import current_establishment
from rest_api.services.domain import ProductService


router = APIRouter(tags=["admin-products"])


@router.get("/products", response_model=list[ProductOutput])
def list_products(
    category_id: int | None = None,
    status: ProductStatusValue | None = None,
    db: Session = Depends(get_db),
    establishment: Establishment = Depends(current_establishment),
) -> list[ProductOutput]:
    """List products, optionally filtered by category and status."""
    products = ProductService(db).list(establishment.id, category_id=category_id, status=status)
    return [ProductOutput.model_validate(p) for p in products]


@router.get("/products/{product_id}", response_model=ProductOutput)
def get_product(
    product_id: int,
    db: Session = Depends(get_db),
    establishment: Establishment = Depends(current_establishment),
) -> ProductOutput:
    return ProductOutput.model_validate(ProductService(db).get(product_id, establishment.id))


@router.post("/products", response_model=ProductOutput, status_code=status.HTTP_201_CREATED)
def create_product(
    body: ProductCreate,
    db: Session = Depends(get_db),
    establishment: Establishment = Depends(current_establishment),
) -> ProductOutput:
    """Create a product. An initial quantity is also recorded as a restock."""
    return ProductOutput.model_validate(ProductService(db).create(establishment.id, body))


@router.put("/products/{product_id}", response_model=ProductOutput)
def update_product(
    product_id: int,
    body: ProductUpdate,
    db: Session = Depends(get_db),
    establishment: Establishment = Depends(current_establishment),
) -> ProductOutput:
    return ProductOutput.model_validate(ProductService(db).update(product_id, establishment.id, body))


@router.patch("/products/{product_id}/status", response_model=ProductOutput)
def set_product_status(
    product_id: int,
    body: ProductStatusUpdate,
    db: Session = Depends(get_db),
    establishment: Establishment = Depends(current_establishment),
) -> ProductOutput:
    product = ProductService(db).set_status(product_id, establishment.id, body.status)
    return ProductOutput.model_validate(product)


@router.delete("/products/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_product(
    product_id: int,
    db: Session = Depends(get_db),
    establishment: Establishment = Depends(current_establishment),
) -> None:
    ProductService(db).delete(product_id, establishment.id)
