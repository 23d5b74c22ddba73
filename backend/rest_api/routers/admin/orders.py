"""
Order endpoints for the establishment's staff.

- GET    /orders              orders of one calendar day
- GET    /orders/{id}         order detail
- POST   /orders/manual       staff or offline-replayed order
- PATCH  /orders/{id}         status transition (PAID decrements stock)
- DELETE /orders/{id}         delete a PENDING or COMPLETED order
"""

from typing import Literal

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from shared.infrastructure.db import get_db
from shared.utils.schemas import ManualOrderCreate, OrderOutput, OrderStatusUpdate
from rest_api.models import Establishment
from rest_api.routers._common import current_establishment
from rest_api.services.domain import OrderService, build_order_output


router = APIRouter(tags=["admin-orders"])


@router.get("/orders", response_model=list[OrderOutput])
def list_orders(
    period: Literal["today", "yesterday", "day-before-yesterday"] = "today",
    db: Session = Depends(get_db),
    establishment: Establishment = Depends(current_establishment),
) -> list[OrderOutput]:
    """Orders created on the selected UTC day, newest first."""
    orders = OrderService(db).list_for_period(establishment.id, period)
    return [build_order_output(order) for order in orders]


@router.post("/orders/manual", response_model=OrderOutput, status_code=status.HTTP_201_CREATED)
def create_manual_order(
    body: ManualOrderCreate,
    db: Session = Depends(get_db),
    establishment: Establishment = Depends(current_establishment),
) -> OrderOutput:
    """
    Create an order entered at the counter.

    Replaying a ``local_id`` that was already stored answers 409 with
    ``code="DUPLICATE"`` and the stored order.
    """
    order = OrderService(db).create_manual_order(establishment.id, body)
    return build_order_output(order)


@router.get("/orders/{order_id}", response_model=OrderOutput)
def get_order(
    order_id: int,
    db: Session = Depends(get_db),
    establishment: Establishment = Depends(current_establishment),
) -> OrderOutput:
    return build_order_output(OrderService(db).get(order_id, establishment.id))


@router.patch("/orders/{order_id}", response_model=OrderOutput)
def update_order_status(
    order_id: int,
    body: OrderStatusUpdate,
    db: Session = Depends(get_db),
    establishment: Establishment = Depends(current_establishment),
) -> OrderOutput:
    order = OrderService(db).change_status(order_id, establishment.id, body.status)
    return build_order_output(order)


@router.delete("/orders/{order_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_order(
    order_id: int,
    db: Session = Depends(get_db),
    establishment: Establishment = Depends(current_establishment),
) -> None:
    """Paid and cancelled orders are kept. Stock is never restored."""
    OrderService(db).delete(order_id, establishment.id)
