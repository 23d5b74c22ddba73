"""
Tests for staff-entered orders and offline replays.
"""

from sqlalchemy import func, select

from rest_api.models import Order


def _body(product, quantity=1, **extra):
    return {
        "items": [{"product_id": product.id, "quantity": quantity, "price_cents": product.price_cents}],
        **extra,
    }


def _order_count(db_session):
    return db_session.scalar(select(func.count(Order.id)))


def test_defaults_to_completed(auth_client, db_session, establishment, make_product):
    croissant = make_product(establishment, "Croissant", quantity=5)
    response = auth_client.post("/api/orders/manual", json=_body(croissant, 2))
    assert response.status_code == 201
    assert response.json()["status"] == "COMPLETED"

    db_session.refresh(croissant)
    assert croissant.quantity == 5


def test_paid_decrements_stock(auth_client, db_session, establishment, make_product):
    croissant = make_product(establishment, "Croissant", price_cents=150, quantity=5)
    response = auth_client.post("/api/orders/manual", json=_body(croissant, 2, status="paid"))
    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "PAID"
    assert data["total_amount_cents"] == 300

    db_session.refresh(croissant)
    assert croissant.quantity == 3


def test_paid_with_insufficient_stock_creates_nothing(auth_client, db_session, establishment, make_product):
    croissant = make_product(establishment, "Croissant", quantity=1)
    response = auth_client.post("/api/orders/manual", json=_body(croissant, 2, status="PAID"))
    assert response.status_code == 409

    assert _order_count(db_session) == 0
    db_session.refresh(croissant)
    assert croissant.quantity == 1


def test_cancelled_is_not_a_creation_status(auth_client, establishment, make_product):
    tea = make_product(establishment, "Tea")
    response = auth_client.post("/api/orders/manual", json=_body(tea, status="CANCELLED"))
    assert response.status_code == 400


def test_with_table_and_customer(auth_client, establishment, make_product, make_table):
    tea = make_product(establishment, "Tea")
    table = make_table(establishment, number=2, token="tok-two")
    customer = {"first_name": "Li", "last_name": "Wei", "phone": "123", "address": "Here"}

    data = auth_client.post(
        "/api/orders/manual", json=_body(tea, table_id=table.id, customer=customer)
    ).json()
    assert data["table_name"] == "Table 2"
    assert data["customer"] == customer


def test_table_of_other_tenant_not_found(auth_client, establishment, other_establishment, make_product, make_table):
    tea = make_product(establishment, "Tea")
    theirs = make_table(other_establishment, token="tok-theirs")
    response = auth_client.post("/api/orders/manual", json=_body(tea, table_id=theirs.id))
    assert response.status_code == 404


def test_replayed_local_id_is_duplicate(auth_client, db_session, establishment, make_product):
    croissant = make_product(establishment, "Croissant", quantity=5)
    body = _body(croissant, 2, status="PAID", local_id="local_1700000000000_abc123xyz")

    first = auth_client.post("/api/orders/manual", json=body)
    assert first.status_code == 201

    second = auth_client.post("/api/orders/manual", json=body)
    assert second.status_code == 409
    data = second.json()
    assert data["code"] == "DUPLICATE"
    assert data["error"] == "Order already synchronized"
    assert data["order"]["id"] == first.json()["id"]
    assert data["order"]["local_id"] == "local_1700000000000_abc123xyz"

    assert _order_count(db_session) == 1
    db_session.refresh(croissant)
    assert croissant.quantity == 3
