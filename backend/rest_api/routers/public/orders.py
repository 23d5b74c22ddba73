"""
Customer-facing order endpoints (no authentication, rate limited).

- POST  /api/orders              order from a table QR code
- POST  /api/orders/public       order from the public menu
- GET   /api/orders/public/{id}  order tracking
- PATCH /api/orders/public/{id}  cancellation while still pending
"""

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from shared.infrastructure.db import get_db
from shared.security.rate_limit import PUBLIC_ORDER_RATE_LIMIT, limiter
from shared.utils.schemas import OrderOutput, PublicOrderAction, PublicOrderCreate, TableOrderCreate
from rest_api.services.domain import OrderService, build_order_output


router = APIRouter(prefix="/api/orders", tags=["public-orders"])


@router.post("", response_model=OrderOutput, status_code=status.HTTP_201_CREATED)
@limiter.limit(PUBLIC_ORDER_RATE_LIMIT)
def create_table_order(
    request: Request,
    body: TableOrderCreate,
    db: Session = Depends(get_db),
) -> OrderOutput:
    """Create a PENDING order for the table identified by ``table_token``."""
    return build_order_output(OrderService(db).create_table_order(body))


@router.post("/public", response_model=OrderOutput, status_code=status.HTTP_201_CREATED)
@limiter.limit(PUBLIC_ORDER_RATE_LIMIT)
def create_public_order(
    request: Request,
    body: PublicOrderCreate,
    db: Session = Depends(get_db),
) -> OrderOutput:
    """Create a PENDING order with the customer's contact details."""
    return build_order_output(OrderService(db).create_public_order(body))


@router.get("/public/{order_id}", response_model=OrderOutput)
def get_public_order(order_id: int, db: Session = Depends(get_db)) -> OrderOutput:
    return build_order_output(OrderService(db).get_public(order_id))


@router.patch("/public/{order_id}", response_model=OrderOutput)
def cancel_public_order(
    order_id: int,
    body: PublicOrderAction,
    db: Session = Depends(get_db),
) -> OrderOutput:
    """The only customer action is ``cancel``, allowed while the order is PENDING."""
    return build_order_output(OrderService(db).cancel_public(order_id))
