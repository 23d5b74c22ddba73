"""
Tests for the restock ledger.
"""

from datetime import date, datetime, timezone

from sqlalchemy import select

from rest_api.models import RestockEvent


def _event(db_session, product, quantity, day):
    event = RestockEvent(
        product_id=product.id,
        quantity=quantity,
        created_at=datetime(day.year, day.month, day.day, 15, 30, tzinfo=timezone.utc),
    )
    db_session.add(event)
    db_session.commit()
    return event


class TestRecordRestock:
    def test_increments_stock_and_writes_one_row(self, auth_client, db_session, establishment, make_product):
        croissant = make_product(establishment, "Croissant", quantity=3)

        response = auth_client.post("/api/restock", json={"product_id": croissant.id, "quantity": 12})
        assert response.status_code == 201
        data = response.json()
        assert data["restock"]["quantity"] == 12
        assert data["restock"]["product_name"] == "Croissant"
        assert data["product"]["quantity"] == 15

        events = db_session.scalars(select(RestockEvent)).all()
        assert [(e.product_id, e.quantity) for e in events] == [(croissant.id, 12)]

    def test_non_quantifiable_rejected(self, auth_client, db_session, establishment, make_product):
        coffee = make_product(establishment, "Coffee")
        response = auth_client.post("/api/restock", json={"product_id": coffee.id, "quantity": 5})
        assert response.status_code == 400
        assert db_session.scalars(select(RestockEvent)).all() == []

    def test_zero_quantity_rejected(self, auth_client, establishment, make_product):
        croissant = make_product(establishment, "Croissant", quantity=3)
        response = auth_client.post("/api/restock", json={"product_id": croissant.id, "quantity": 0})
        assert response.status_code == 400

    def test_other_tenant_product_not_found(self, auth_client, other_establishment, make_product):
        theirs = make_product(other_establishment, "Burger", quantity=1)
        response = auth_client.post("/api/restock", json={"product_id": theirs.id, "quantity": 5})
        assert response.status_code == 404


class TestRestockHistory:
    def test_statistics(self, auth_client, db_session, establishment, make_product):
        croissant = make_product(establishment, "Croissant", quantity=0)
        bread = make_product(establishment, "Bread", quantity=0)
        _event(db_session, croissant, 10, date(2026, 3, 1))
        _event(db_session, croissant, 5, date(2026, 3, 2))
        _event(db_session, bread, 7, date(2026, 3, 3))

        data = auth_client.get("/api/restock").json()
        assert [(i["product_name"], i["quantity"]) for i in data["items"]] == [
            ("Bread", 7),
            ("Croissant", 5),
            ("Croissant", 10),
        ]
        assert data["statistics"] == {
            "total_restocked": 22,
            "unique_products": 2,
            "total_records": 3,
        }

    def test_date_range_is_inclusive(self, auth_client, db_session, establishment, make_product):
        croissant = make_product(establishment, "Croissant", quantity=0)
        _event(db_session, croissant, 1, date(2026, 3, 1))
        _event(db_session, croissant, 2, date(2026, 3, 2))
        _event(db_session, croissant, 3, date(2026, 3, 3))

        data = auth_client.get(
            "/api/restock", params={"start_date": "2026-03-02", "end_date": "2026-03-03"}
        ).json()
        assert sorted(i["quantity"] for i in data["items"]) == [2, 3]

    def test_filter_by_product(self, auth_client, db_session, establishment, make_product):
        croissant = make_product(establishment, "Croissant", quantity=0)
        bread = make_product(establishment, "Bread", quantity=0)
        _event(db_session, croissant, 1, date(2026, 3, 1))
        _event(db_session, bread, 2, date(2026, 3, 1))

        data = auth_client.get("/api/restock", params={"product_id": bread.id}).json()
        assert [i["product_id"] for i in data["items"]] == [bread.id]

    def test_other_tenant_history_hidden(self, auth_client, db_session, other_establishment, make_product):
        theirs = make_product(other_establishment, "Burger", quantity=0)
        _event(db_session, theirs, 4, date(2026, 3, 1))

        data = auth_client.get("/api/restock").json()
        assert data["items"] == []
        assert data["statistics"]["total_records"] == 0
