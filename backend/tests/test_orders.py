"""
Tests for order creation and listing.
"""

from datetime import datetime, time, timedelta, timezone

import pytest

from rest_api.models import Order


CUSTOMER = {
    "first_name": "Ana",
    "last_name": "Ruiz",
    "phone": "+34 600 000 000",
    "address": "Calle Mayor 1",
}


class TestTableOrders:
    def test_create_snapshots_prices_and_total(self, client, establishment, make_product, make_table):
        tea = make_product(establishment, "Tea", price_cents=300)
        cake = make_product(establishment, "Cake", price_cents=450)
        table = make_table(establishment, number=5, token="tok-five")

        response = client.post(
            "/api/orders",
            json={
                "restaurant_id": establishment.id,
                "table_token": "tok-five",
                "items": [
                    {"product_id": tea.id, "quantity": 2, "price_cents": 300},
                    {"product_id": cake.id, "quantity": 1, "price_cents": 400},
                ],
            },
        )
        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "PENDING"
        assert data["table_id"] == table.id
        assert data["table_name"] == "Table 5"
        assert data["total_amount_cents"] == 1000
        assert [(i["product_name"], i["total_cents"]) for i in data["items"]] == [
            ("Tea", 600),
            ("Cake", 400),
        ]

    def test_table_of_other_restaurant_rejected(
        self, client, establishment, other_establishment, make_product, make_table
    ):
        tea = make_product(establishment, "Tea")
        make_table(other_establishment, token="tok-rival")

        response = client.post(
            "/api/orders",
            json={
                "restaurant_id": establishment.id,
                "table_token": "tok-rival",
                "items": [{"product_id": tea.id, "quantity": 1, "price_cents": 250}],
            },
        )
        assert response.status_code == 400

    def test_unknown_table_token(self, client, establishment, make_product):
        tea = make_product(establishment, "Tea")
        response = client.post(
            "/api/orders",
            json={
                "restaurant_id": establishment.id,
                "table_token": "missing",
                "items": [{"product_id": tea.id, "quantity": 1, "price_cents": 250}],
            },
        )
        assert response.status_code == 404

    def test_empty_items_rejected(self, client, establishment, make_table):
        make_table(establishment, token="tok-one")
        response = client.post(
            "/api/orders",
            json={"restaurant_id": establishment.id, "table_token": "tok-one", "items": []},
        )
        assert response.status_code == 400


class TestPublicOrders:
    def _create(self, client, establishment, product, **overrides):
        body = {
            "restaurant_id": establishment.id,
            "items": [{"product_id": product.id, "quantity": 2, "price_cents": product.price_cents}],
            "customer": CUSTOMER,
            **overrides,
        }
        return client.post("/api/orders/public", json=body)

    def test_create_stores_customer(self, client, establishment, make_product):
        tea = make_product(establishment, "Tea", price_cents=300)
        response = self._create(client, establishment, tea)
        assert response.status_code == 201
        data = response.json()
        assert data["customer"] == CUSTOMER
        assert data["table_id"] is None
        assert data["total_amount_cents"] == 600

    def test_product_of_other_restaurant_not_found(self, client, establishment, other_establishment, make_product):
        foreign = make_product(other_establishment, "Burger")
        response = self._create(client, establishment, foreign)
        assert response.status_code == 404

    def test_unknown_restaurant(self, client, establishment, make_product):
        tea = make_product(establishment, "Tea")
        response = self._create(client, establishment, tea, restaurant_id=999_999)
        assert response.status_code == 404

    def test_customer_required(self, client, establishment, make_product):
        tea = make_product(establishment, "Tea")
        response = client.post(
            "/api/orders/public",
            json={
                "restaurant_id": establishment.id,
                "items": [{"product_id": tea.id, "quantity": 1, "price_cents": 250}],
            },
        )
        assert response.status_code == 400

    def test_zero_quantity_rejected(self, client, establishment, make_product):
        tea = make_product(establishment, "Tea")
        response = client.post(
            "/api/orders/public",
            json={
                "restaurant_id": establishment.id,
                "items": [{"product_id": tea.id, "quantity": 0, "price_cents": 250}],
                "customer": CUSTOMER,
            },
        )
        assert response.status_code == 400

    def test_track_and_cancel(self, client, establishment, make_product):
        tea = make_product(establishment, "Tea")
        order_id = self._create(client, establishment, tea).json()["id"]

        assert client.get(f"/api/orders/public/{order_id}").json()["status"] == "PENDING"

        response = client.patch(f"/api/orders/public/{order_id}", json={"action": "cancel"})
        assert response.status_code == 200
        assert response.json()["status"] == "CANCELLED"

    def test_cancel_only_while_pending(self, client, establishment, make_product, make_order):
        tea = make_product(establishment, "Tea")
        order = make_order(establishment, [(tea, 1)], status="COMPLETED")
        response = client.patch(f"/api/orders/public/{order.id}", json={"action": "cancel"})
        assert response.status_code == 400

    def test_unknown_action(self, client, establishment, make_product, make_order):
        tea = make_product(establishment, "Tea")
        order = make_order(establishment, [(tea, 1)])
        response = client.patch(f"/api/orders/public/{order.id}", json={"action": "pay"})
        assert response.status_code == 400


class TestAdminOrders:
    def test_list_today(self, auth_client, establishment, make_product, make_order):
        tea = make_product(establishment, "Tea")
        older = make_order(establishment, [(tea, 1)])
        newer = make_order(establishment, [(tea, 2)])

        response = auth_client.get("/api/orders")
        assert response.status_code == 200
        assert [o["id"] for o in response.json()] == [newer.id, older.id]

    def test_list_yesterday(self, auth_client, establishment, make_product, make_order):
        tea = make_product(establishment, "Tea")
        yesterday = datetime.now(timezone.utc).date() - timedelta(days=1)
        old = make_order(
            establishment,
            [(tea, 1)],
            created_at=datetime.combine(yesterday, time(12), tzinfo=timezone.utc),
        )
        make_order(establishment, [(tea, 1)])

        data = auth_client.get("/api/orders", params={"period": "yesterday"}).json()
        assert [o["id"] for o in data] == [old.id]

    def test_list_invalid_period(self, auth_client):
        assert auth_client.get("/api/orders", params={"period": "last-week"}).status_code == 400

    def test_list_excludes_other_tenant(self, auth_client, other_establishment, make_product, make_order):
        burger = make_product(other_establishment, "Burger")
        make_order(other_establishment, [(burger, 1)])
        assert auth_client.get("/api/orders").json() == []

    def test_get_other_tenant_order_not_found(self, auth_client, other_establishment, make_product, make_order):
        burger = make_product(other_establishment, "Burger")
        order = make_order(other_establishment, [(burger, 1)])
        assert auth_client.get(f"/api/orders/{order.id}").status_code == 404
        assert auth_client.patch(f"/api/orders/{order.id}", json={"status": "PAID"}).status_code == 404

    @pytest.mark.parametrize("status", ["PENDING", "COMPLETED"])
    def test_delete_open_order(self, auth_client, db_session, establishment, make_product, make_order, status):
        tea = make_product(establishment, "Tea", quantity=3)
        order = make_order(establishment, [(tea, 1)], status=status)
        order_id = order.id

        assert auth_client.delete(f"/api/orders/{order_id}").status_code == 204
        db_session.expire_all()
        assert db_session.get(Order, order_id) is None
        db_session.refresh(tea)
        assert tea.quantity == 3

    @pytest.mark.parametrize("status", ["PAID", "CANCELLED"])
    def test_closed_order_cannot_be_deleted(self, auth_client, establishment, make_product, make_order, status):
        tea = make_product(establishment, "Tea")
        order = make_order(establishment, [(tea, 1)], status=status)
        response = auth_client.delete(f"/api/orders/{order.id}")
        assert response.status_code == 400
        assert response.json() == {"error": f"Cannot delete order in status '{status}'"}
