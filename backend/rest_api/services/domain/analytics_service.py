"""
Analytics Service.

Sales and product reports over PAID orders. Periods are ``7days`` (daily
buckets, today included) or ``Nmonths`` with N between 1 and 12 (monthly
buckets, current month included). Every bucket of the window is present in
the chart, empty or not.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from rest_api.models import Order, OrderItem
from shared.config.constants import Limits, OrderStatus
from shared.utils.exceptions import ValidationError
from shared.utils.schemas import (
    ProductSalesReport,
    ProductSalesRow,
    ProductSalesSummary,
    SalesPoint,
    SalesReport,
    SalesSummary,
)

_MONTHS_PERIOD = re.compile(r"^(\d{1,2})months$")


@dataclass(frozen=True)
class ReportWindow:
    period: str
    start: date
    monthly: bool
    labels: list[str]

    def label_for(self, moment: datetime) -> str:
        day = as_utc(moment).date()
        return day.strftime("%Y-%m") if self.monthly else day.isoformat()


def as_utc(moment: datetime) -> datetime:
    # SQLite hands back naive datetimes that were written in UTC
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def _shift_months(day: date, months: int) -> date:
    """First day of the month ``months`` months before ``day``'s month."""
    index = day.year * 12 + (day.month - 1) - months
    return date(index // 12, index % 12 + 1, 1)


def parse_period(period: str, today: date | None = None) -> ReportWindow:
    """
    Resolve a period string into a reporting window.

    Raises:
        ValidationError: For anything other than ``7days`` or ``1months``..``12months``.
    """
    today = today or datetime.now(timezone.utc).date()

    if period == "7days":
        start = today - timedelta(days=6)
        labels = [(start + timedelta(days=offset)).isoformat() for offset in range(7)]
        return ReportWindow(period=period, start=start, monthly=False, labels=labels)

    match = _MONTHS_PERIOD.match(period)
    if match:
        months = int(match.group(1))
        if 1 <= months <= Limits.MAX_ANALYTICS_MONTHS:
            start = _shift_months(today, months - 1)
            labels = [
                _shift_months(today, back).strftime("%Y-%m")
                for back in range(months - 1, -1, -1)
            ]
            return ReportWindow(period=period, start=start, monthly=True, labels=labels)

    raise ValidationError(
        f"Invalid period '{period}'. Use '7days' or '1months' to '{Limits.MAX_ANALYTICS_MONTHS}months'",
        period=period,
    )


class AnalyticsService:
    def __init__(self, db: Session):
        self._db = db

    def _paid_orders(self, establishment_id: int, window: ReportWindow) -> Sequence[Order]:
        start = datetime.combine(window.start, time.min, tzinfo=timezone.utc)
        return self._db.scalars(
            select(Order)
            .where(
                Order.establishment_id == establishment_id,
                Order.status == OrderStatus.PAID,
                Order.created_at >= start,
            )
            .options(selectinload(Order.items).joinedload(OrderItem.product))
            .order_by(Order.created_at)
        ).all()

    def sales(self, establishment_id: int, period: str) -> SalesReport:
        window = parse_period(period)
        orders = self._paid_orders(establishment_id, window)

        revenue = {label: 0 for label in window.labels}
        counts = {label: 0 for label in window.labels}
        for order in orders:
            label = window.label_for(order.created_at)
            if label not in revenue:
                continue
            revenue[label] += order.total_amount_cents
            counts[label] += 1

        total_revenue = sum(revenue.values())
        total_orders = sum(counts.values())
        return SalesReport(
            period=window.period,
            chart_data=[
                SalesPoint(label=label, revenue_cents=revenue[label], orders=counts[label])
                for label in window.labels
            ],
            summary=SalesSummary(
                total_revenue_cents=total_revenue,
                total_orders=total_orders,
                average_order_value_cents=round(total_revenue / total_orders) if total_orders else 0,
            ),
        )

    def products(self, establishment_id: int, period: str) -> ProductSalesReport:
        window = parse_period(period)
        orders = self._paid_orders(establishment_id, window)

        rows: dict[int, dict] = {}
        for order in orders:
            for item in order.items:
                row = rows.setdefault(
                    item.product_id,
                    {
                        "product_name": item.product.name,
                        "total_quantity": 0,
                        "total_revenue_cents": 0,
                        "orders": set(),
                    },
                )
                row["total_quantity"] += item.quantity
                row["total_revenue_cents"] += item.total_cents
                row["orders"].add(order.id)

        ranked = sorted(
            (
                ProductSalesRow(
                    product_id=product_id,
                    product_name=row["product_name"],
                    total_quantity=row["total_quantity"],
                    total_revenue_cents=row["total_revenue_cents"],
                    order_count=len(row["orders"]),
                )
                for product_id, row in rows.items()
            ),
            key=lambda r: (-r.total_revenue_cents, r.product_id),
        )
        return ProductSalesReport(
            period=window.period,
            products=ranked,
            top=ranked[: Limits.TOP_PRODUCTS],
            summary=ProductSalesSummary(
                total_products=len(ranked),
                total_quantity=sum(r.total_quantity for r in ranked),
                total_revenue_cents=sum(r.total_revenue_cents for r in ranked),
            ),
        )
