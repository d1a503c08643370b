"""Order cancellation against a real database session and over HTTP

Covers the status machine driving cancellation, stock release for
converted orders, permissions and the error bodies.
"""

import pytest
from datetime import datetime, timezone
from decimal import Decimal

from prometheus_client import REGISTRY

from auth.dependencies import Requester
from auth.roles import UserRole
from models.order import Order
from models.product import Product
from orders.cancellation import cancel_order
from orders.conversion import convert_draft_to_order
from orders.errors import (
    InvalidInputError,
    InvalidOrderStateError,
    OrderAccessDeniedError,
    OrderNotFoundError,
)
from orders.status import StateTransitionError


pytestmark = pytest.mark.integration


def _stock(db_session, product_id):
    db_session.expire_all()
    return db_session.get(Product, product_id).quantity


class TestCancelOrder:
    """cancel_order below the HTTP layer"""

    def test_cancel_converted_order_restores_stock(self, db_session, make_product, make_draft, customer):
        product = make_product(quantity=5)
        draft = make_draft(lines=[(product, 2, Decimal("20.00"), Decimal("0.00"))])
        convert_draft_to_order(db_session, draft.id, customer)
        assert _stock(db_session, product.id) == 3

        order = cancel_order(db_session, draft.id, customer, reason="Changed my mind")

        assert order.status == "cancelled"
        assert order.metadata_json["cancellationReason"] == "Changed my mind"
        assert order.metadata_json["statusBeforeCancellation"] == "pending"
        assert order.metadata_json["cancelledBy"] == customer.id
        assert order.metadata_json["convertedFromDraft"] is True
        assert _stock(db_session, product.id) == 5

    def test_cancel_draft_leaves_stock_alone(self, db_session, make_product, make_draft, customer):
        product = make_product(quantity=5)
        draft = make_draft(lines=[(product, 2, Decimal("20.00"), Decimal("0.00"))])
        now = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)

        order = cancel_order(db_session, draft.id, customer, now=now)

        assert order.status == "cancelled"
        assert order.metadata_json["cancelledAt"] == "2026-10-19T12:00:00+00:00"
        assert order.metadata_json["cancellationReason"] is None
        assert _stock(db_session, product.id) == 5

    def test_digital_products_not_restocked(self, db_session, make_product, make_draft, customer):
        ebook = make_product(quantity=0, is_digital=True)
        draft = make_draft(lines=[(ebook, 3, Decimal("15.00"), Decimal("0.00"))])
        convert_draft_to_order(db_session, draft.id, customer)

        cancel_order(db_session, draft.id, customer)

        assert _stock(db_session, ebook.id) == 0

    def test_processing_order_can_be_cancelled(self, db_session, make_draft, customer):
        order = make_draft(status="processing")

        assert cancel_order(db_session, order.id, customer).status == "cancelled"

    @pytest.mark.parametrize("status", ["shipped", "delivered", "completed", "cancelled", "refunded"])
    def test_rejected_by_status_machine(self, db_session, make_product, make_draft, customer, status):
        product = make_product(quantity=5)
        order = make_draft(status=status, lines=[(product, 2, Decimal("20.00"), Decimal("0.00"))])

        with pytest.raises(StateTransitionError) as exc_info:
            cancel_order(db_session, order.id, customer)

        assert isinstance(exc_info.value, InvalidOrderStateError)
        db_session.expire_all()
        assert db_session.get(Order, order.id).status == status
        assert _stock(db_session, product.id) == 5

    def test_admin_can_cancel_any_order(self, db_session, make_draft, other_customer):
        admin = Requester(id=1, role=UserRole.ADMIN)
        order = make_draft(customer_id=other_customer.id, status="pending")

        cancelled = cancel_order(db_session, order.id, admin)

        assert cancelled.status == "cancelled"
        assert cancelled.metadata_json["cancelledBy"] == admin.id

    def test_other_customer_forbidden(self, db_session, make_draft, other_customer):
        order = make_draft(status="pending")

        with pytest.raises(OrderAccessDeniedError):
            cancel_order(db_session, order.id, other_customer)

        db_session.expire_all()
        assert db_session.get(Order, order.id).status == "pending"

    def test_unknown_order(self, db_session, customer):
        with pytest.raises(OrderNotFoundError):
            cancel_order(db_session, 9999, customer)

    def test_invalid_id(self, db_session, customer):
        with pytest.raises(InvalidInputError):
            cancel_order(db_session, "abc", customer)

    def test_counts_cancellations(self, db_session, make_draft, customer):
        before = REGISTRY.get_sample_value(
            "fastshop_order_cancellations_total", {"status": "success"}
        ) or 0.0

        cancel_order(db_session, make_draft().id, customer)

        after = REGISTRY.get_sample_value(
            "fastshop_order_cancellations_total", {"status": "success"}
        )
        assert after == before + 1


class TestCancelEndpoint:
    """POST /api/v1/orders/{id}/cancel"""

    def test_cancel_with_reason(self, customer_client, make_draft):
        order = make_draft(status="pending")

        response = customer_client.post(
            f"/api/v1/orders/{order.id}/cancel",
            json={"reason": "Ordered by mistake"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "success"
        assert body["data"]["order"]["status"] == "cancelled"
        assert body["data"]["order"]["metadata"]["cancellationReason"] == "Ordered by mistake"

    def test_cancel_without_body(self, customer_client, make_draft):
        order = make_draft()

        response = customer_client.post(f"/api/v1/orders/{order.id}/cancel")

        assert response.status_code == 200
        assert response.json()["data"]["order"]["status"] == "cancelled"

    def test_shipped_order_is_400(self, customer_client, make_draft):
        order = make_draft(status="shipped")

        response = customer_client.post(f"/api/v1/orders/{order.id}/cancel")

        assert response.status_code == 400
        assert response.json()["status"] == "error"
        assert response.json()["error"] == "invalid_state"

    def test_converting_a_cancelled_draft_is_400(self, customer_client, make_draft):
        order = make_draft()
        customer_client.post(f"/api/v1/orders/{order.id}/cancel")

        response = customer_client.post(f"/api/v1/orders/{order.id}/convert")

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_state"

    def test_other_customer_is_403(self, other_customer_client, make_draft):
        order = make_draft(status="pending")

        response = other_customer_client.post(f"/api/v1/orders/{order.id}/cancel")

        assert response.status_code == 403
        assert response.json()["error"] == "forbidden"

    def test_reason_too_long_is_422(self, customer_client, make_draft):
        order = make_draft(status="pending")

        response = customer_client.post(
            f"/api/v1/orders/{order.id}/cancel",
            json={"reason": "x" * 501},
        )

        assert response.status_code == 422
        assert response.json()["error"] == "validation_error"
