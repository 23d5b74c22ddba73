"""
Sales analytics over paid orders.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.infrastructure.db import get_db
from shared.utils.schemas import ProductSalesReport, SalesReport
from rest_api.models import Establishment
from rest_api.routers._common import current_establishment
from rest_api.services.domain import AnalyticsService


router = APIRouter(prefix="/analytics", tags=["admin-analytics"])


@router.get("/sales", response_model=SalesReport)
def sales_report(
    period: str = "7days",
    db: Session = Depends(get_db),
    establishment: Establishment = Depends(current_establishment),
) -> SalesReport:
    """Revenue and order count per day (``7days``) or per month (``Nmonths``)."""
    return AnalyticsService(db).sales(establishment.id, period)


@router.get("/products", response_model=ProductSalesReport)
def products_report(
    period: str = "7days",
    db: Session = Depends(get_db),
    establishment: Establishment = Depends(current_establishment),
) -> ProductSalesReport:
    """Per-product quantity and revenue, best sellers first."""
    return AnalyticsService(db).products(establishment.id, period)
