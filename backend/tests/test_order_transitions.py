"""
Tests for order status transitions and the stock-adjustment step.
"""

import pytest

from rest_api.services.domain import OrderService
from shared.utils.exceptions import ValidationError


def _set_status(client, order, status):
    return client.patch(f"/api/orders/{order.id}", json={"status": status})


class TestPaidDecrementsStock:
    def test_paid_decrements_once(self, auth_client, db_session, establishment, make_product, make_order):
        croissant = make_product(establishment, "Croissant", quantity=5)
        order = make_order(establishment, [(croissant, 3)])

        response = _set_status(auth_client, order, "PAID")
        assert response.status_code == 200
        assert response.json()["status"] == "PAID"
        db_session.refresh(croissant)
        assert croissant.quantity == 2

        # Re-sending PAID is a no-op
        response = _set_status(auth_client, order, "paid")
        assert response.status_code == 200
        db_session.refresh(croissant)
        assert croissant.quantity == 2

    def test_completed_then_paid(self, auth_client, db_session, establishment, make_product, make_order):
        croissant = make_product(establishment, "Croissant", quantity=5)
        order = make_order(establishment, [(croissant, 2)])

        assert _set_status(auth_client, order, "COMPLETED").status_code == 200
        db_session.refresh(croissant)
        assert croissant.quantity == 5

        assert _set_status(auth_client, order, "PAID").status_code == 200
        db_session.refresh(croissant)
        assert croissant.quantity == 3

    def test_non_quantifiable_products_ignored(self, auth_client, db_session, establishment, make_product, make_order):
        coffee = make_product(establishment, "Coffee")
        croissant = make_product(establishment, "Croissant", quantity=1)
        order = make_order(establishment, [(coffee, 10), (croissant, 1)])

        assert _set_status(auth_client, order, "PAID").status_code == 200
        db_session.refresh(croissant)
        db_session.refresh(coffee)
        assert croissant.quantity == 0
        assert coffee.quantity is None

    def test_cancel_never_touches_stock(self, auth_client, db_session, establishment, make_product, make_order):
        croissant = make_product(establishment, "Croissant", quantity=5)
        order = make_order(establishment, [(croissant, 3)])

        assert _set_status(auth_client, order, "CANCELLED").status_code == 200
        db_session.refresh(croissant)
        assert croissant.quantity == 5


class TestInsufficientStock:
    def test_under_stock_keeps_order_pending(self, auth_client, db_session, establishment, make_product, make_order):
        croissant = make_product(establishment, "Croissant", quantity=2)
        order = make_order(establishment, [(croissant, 3)])

        response = _set_status(auth_client, order, "PAID")
        assert response.status_code == 409
        assert response.json()["error"] == "Insufficient stock for 'Croissant': 2 available, 3 requested"

        db_session.expire_all()
        assert croissant.quantity == 2
        assert order.status == "PENDING"

    def test_rollback_restores_earlier_items(self, auth_client, db_session, establishment, make_product, make_order):
        bread = make_product(establishment, "Bread", quantity=10)
        croissant = make_product(establishment, "Croissant", quantity=1)
        order = make_order(establishment, [(bread, 4), (croissant, 2)])

        assert _set_status(auth_client, order, "PAID").status_code == 409

        db_session.expire_all()
        assert bread.quantity == 10
        assert croissant.quantity == 1
        assert order.status == "PENDING"

    def test_failure_while_writing_status_rolls_back_stock(
        self, db_session, establishment, make_product, make_order, monkeypatch
    ):
        croissant = make_product(establishment, "Croissant", quantity=5)
        order = make_order(establishment, [(croissant, 3)])

        def fail(self, order, new_status):
            raise RuntimeError("write failed")

        monkeypatch.setattr(OrderService, "_apply_status", fail)

        with pytest.raises(RuntimeError):
            OrderService(db_session).change_status(order.id, establishment.id, "PAID")

        db_session.expire_all()
        assert croissant.quantity == 5
        assert order.status == "PENDING"


class TestForbiddenTransitions:
    @pytest.mark.parametrize(
        "current,target",
        [
            ("PAID", "PENDING"),
            ("PAID", "CANCELLED"),
            ("CANCELLED", "PAID"),
            ("CANCELLED", "PENDING"),
            ("COMPLETED", "PENDING"),
            ("COMPLETED", "CANCELLED"),
        ],
    )
    def test_rejected(self, auth_client, establishment, make_product, make_order, current, target):
        tea = make_product(establishment, "Tea")
        order = make_order(establishment, [(tea, 1)], status=current)

        response = _set_status(auth_client, order, target)
        assert response.status_code == 400
        assert response.json() == {
            "error": f"Invalid transition from '{current}' to '{target}' for Order"
        }

    def test_unknown_status(self, auth_client, establishment, make_product, make_order):
        tea = make_product(establishment, "Tea")
        order = make_order(establishment, [(tea, 1)])
        assert _set_status(auth_client, order, "SHIPPED").status_code == 400

    def test_unknown_status_in_service(self, db_session, establishment, make_product, make_order):
        tea = make_product(establishment, "Tea")
        order = make_order(establishment, [(tea, 1)])
        with pytest.raises(ValidationError):
            OrderService(db_session).change_status(order.id, establishment.id, "SHIPPED")
