"""
Tests for the sales and product reports.
"""

from datetime import date, datetime, timedelta, timezone

import pytest

from rest_api.services.domain.analytics_service import parse_period
from shared.utils.exceptions import ValidationError


class TestParsePeriod:
    def test_seven_days(self):
        window = parse_period("7days", today=date(2026, 3, 4))
        assert window.monthly is False
        assert window.start == date(2026, 2, 26)
        assert window.labels == [
            "2026-02-26",
            "2026-02-27",
            "2026-02-28",
            "2026-03-01",
            "2026-03-02",
            "2026-03-03",
            "2026-03-04",
        ]

    def test_months_across_year_boundary(self):
        window = parse_period("3months", today=date(2026, 2, 15))
        assert window.monthly is True
        assert window.start == date(2025, 12, 1)
        assert window.labels == ["2025-12", "2026-01", "2026-02"]

    def test_twelve_months(self):
        window = parse_period("12months", today=date(2026, 12, 31))
        assert window.labels[0] == "2026-01"
        assert len(window.labels) == 12

    @pytest.mark.parametrize("period", ["0months", "13months", "30days", "week", "", "3 months"])
    def test_invalid(self, period):
        with pytest.raises(ValidationError):
            parse_period(period)


class TestSalesReport:
    def test_empty_window_has_every_bucket(self, auth_client):
        data = auth_client.get("/api/analytics/sales").json()
        assert data["period"] == "7days"
        assert len(data["chart_data"]) == 7
        assert all(point["revenue_cents"] == 0 and point["orders"] == 0 for point in data["chart_data"])
        assert data["summary"] == {
            "total_revenue_cents": 0,
            "total_orders": 0,
            "average_order_value_cents": 0,
        }

    def test_only_paid_orders_count(self, auth_client, establishment, make_product, make_order):
        tea = make_product(establishment, "Tea", price_cents=300)
        make_order(establishment, [(tea, 1)], status="PAID")
        make_order(establishment, [(tea, 2)], status="PAID")
        make_order(establishment, [(tea, 5)], status="COMPLETED")
        make_order(establishment, [(tea, 5)], status="CANCELLED")

        data = auth_client.get("/api/analytics/sales", params={"period": "7days"}).json()
        today = data["chart_data"][-1]
        assert today["label"] == datetime.now(timezone.utc).date().isoformat()
        assert today["revenue_cents"] == 900
        assert today["orders"] == 2
        assert data["summary"] == {
            "total_revenue_cents": 900,
            "total_orders": 2,
            "average_order_value_cents": 450,
        }

    def test_orders_outside_window_ignored(self, auth_client, establishment, make_product, make_order):
        tea = make_product(establishment, "Tea", price_cents=300)
        make_order(
            establishment,
            [(tea, 1)],
            status="PAID",
            created_at=datetime.now(timezone.utc) - timedelta(days=10),
        )
        data = auth_client.get("/api/analytics/sales").json()
        assert data["summary"]["total_orders"] == 0

    def test_monthly(self, auth_client):
        data = auth_client.get("/api/analytics/sales", params={"period": "6months"}).json()
        assert len(data["chart_data"]) == 6
        assert data["chart_data"][-1]["label"] == datetime.now(timezone.utc).strftime("%Y-%m")

    def test_invalid_period(self, auth_client):
        response = auth_client.get("/api/analytics/sales", params={"period": "forever"})
        assert response.status_code == 400

    def test_other_tenant_excluded(self, auth_client, other_establishment, make_product, make_order):
        burger = make_product(other_establishment, "Burger", price_cents=900)
        make_order(other_establishment, [(burger, 1)], status="PAID")
        assert auth_client.get("/api/analytics/sales").json()["summary"]["total_orders"] == 0


class TestProductReport:
    def test_ranking_by_revenue(self, auth_client, establishment, make_product, make_order):
        tea = make_product(establishment, "Tea", price_cents=300)
        cake = make_product(establishment, "Cake", price_cents=500)
        make_order(establishment, [(tea, 2), (cake, 1)], status="PAID")
        make_order(establishment, [(cake, 2)], status="PAID")
        make_order(establishment, [(tea, 9)], status="PENDING")

        data = auth_client.get("/api/analytics/products").json()
        assert [
            (row["product_name"], row["total_quantity"], row["total_revenue_cents"], row["order_count"])
            for row in data["products"]
        ] == [
            ("Cake", 3, 1500, 2),
            ("Tea", 2, 600, 1),
        ]
        assert data["top"] == data["products"]
        assert data["summary"] == {
            "total_products": 2,
            "total_quantity": 5,
            "total_revenue_cents": 2100,
        }

    def test_uses_snapshot_prices(self, auth_client, establishment, make_product, make_order):
        tea = make_product(establishment, "Tea", price_cents=300)
        make_order(establishment, [(tea, 2)], status="PAID", price_cents=250)

        row = auth_client.get("/api/analytics/products").json()["products"][0]
        assert row["total_revenue_cents"] == 500
