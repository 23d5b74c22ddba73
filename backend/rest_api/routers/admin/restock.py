"""
Restock ledger endpoints.
"""

from datetime import date

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from shared.infrastructure.db import get_db
from shared.utils.schemas import (
    ProductOutput,
    RestockCreate,
    RestockCreateResponse,
    RestockListResponse,
    RestockOutput,
    RestockStatistics,
)
from rest_api.models import Establishment, RestockEvent
from rest_api.routers._common import current_establishment
from rest_api.services.domain import StockService


router = APIRouter(tags=["admin-restock"])


def _to_output(event: RestockEvent) -> RestockOutput:
    return RestockOutput(
        id=event.id,
        product_id=event.product_id,
        product_name=event.product.name,
        quantity=event.quantity,
        created_at=event.created_at,
    )


@router.post("/restock", response_model=RestockCreateResponse, status_code=status.HTTP_201_CREATED)
def create_restock(
    body: RestockCreate,
    db: Session = Depends(get_db),
    establishment: Establishment = Depends(current_establishment),
) -> RestockCreateResponse:
    """Record a delivery and add it to the product's stock in one transaction."""
    event, product = StockService(db).restock(establishment.id, body.product_id, body.quantity)
    return RestockCreateResponse(
        restock=_to_output(event),
        product=ProductOutput.model_validate(product),
    )


@router.get("/restock", response_model=RestockListResponse)
def list_restocks(
    start_date: date | None = None,
    end_date: date | None = None,
    product_id: int | None = None,
    db: Session = Depends(get_db),
    establishment: Establishment = Depends(current_establishment),
) -> RestockListResponse:
    """Restock history, newest first. ``end_date`` is inclusive."""
    events = StockService(db).list_restocks(
        establishment.id,
        start_date=start_date,
        end_date=end_date,
        product_id=product_id,
    )
    return RestockListResponse(
        items=[_to_output(event) for event in events],
        statistics=RestockStatistics(
            total_restocked=sum(event.quantity for event in events),
            unique_products=len({event.product_id for event in events}),
            total_records=len(events),
        ),
    )
