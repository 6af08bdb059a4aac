"""Unit tests for OrderApplicationService with a mocked repository and session."""
from decimal import Decimal
from typing import Any
from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import OperationalError

from src.om_common.enums import OrderStatus, PaymentMethod, PaymentStatus
from src.om_common.errors import InvalidTransitionError, PersistenceError, ValidationError
from src.om_order.application.service import OrderApplicationService
from src.om_order.domain.models import Order, OrderItem, ShippingAddress


def _payload(**kwargs: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "items": [
            {"productId": "product123", "quantity": 2, "price": 29.99, "name": "Test Product"},
        ],
        "shippingAddress": {
            "street": "123 Test St",
            "city": "Test City",
            "state": "Test State",
            "country": "Test Country",
            "zipCode": "12345",
        },
        "paymentMethod": "CREDIT_CARD",
    }
    payload.update(kwargs)
    return payload


def _make_order(**kwargs: Any) -> Order:
    defaults: dict[str, Any] = dict(
        id="order-1",
        customer_id="customer123",
        items=[OrderItem("product123", 2, Decimal("29.99"), "Test Product")],
        shipping_address=ShippingAddress("123 Test St", "Test City", "TS", "TC", "12345"),
        payment_method=PaymentMethod.CREDIT_CARD,
    )
    defaults.update(kwargs)
    return Order(**defaults)


def _repo_returning(order: Order | None) -> AsyncMock:
    repo = AsyncMock()
    repo.find_by_id_for_owner.return_value = order
    repo.update.side_effect = lambda o, db: o
    return repo


def _assign_id(order: Order, db: Any) -> Order:
    order.id = "generated-1"
    return order


class TestCreateOrder:
    async def test_creates_pending_order_with_computed_total(self) -> None:
        repo = AsyncMock()
        repo.create.side_effect = _assign_id
        db = AsyncMock()
        svc = OrderApplicationService(repo)

        order = await svc.create_order(db, "customer123", _payload())

        assert order.id == "generated-1"
        assert order.customer_id == "customer123"
        assert order.total_amount == Decimal("59.98")
        assert order.status == OrderStatus.PENDING
        assert order.payment_status == PaymentStatus.PENDING
        db.commit.assert_awaited_once()

    async def test_client_total_and_status_are_ignored(self) -> None:
        repo = AsyncMock()
        repo.create.side_effect = _assign_id
        svc = OrderApplicationService(repo)

        order = await svc.create_order(
            AsyncMock(), "customer123",
            _payload(totalAmount=0.01, status="DELIVERED", paymentStatus="COMPLETED"),
        )

        assert order.total_amount == Decimal("59.98")
        assert order.status == OrderStatus.PENDING
        assert order.payment_status == PaymentStatus.PENDING

    async def test_customer_id_comes_from_caller_not_payload(self) -> None:
        repo = AsyncMock()
        repo.create.side_effect = _assign_id
        svc = OrderApplicationService(repo)

        order = await svc.create_order(AsyncMock(), "customer123", _payload(customerId="someone-else"))

        assert order.customer_id == "customer123"

    async def test_zero_items_raises_and_persists_nothing(self) -> None:
        repo = AsyncMock()
        db = AsyncMock()
        svc = OrderApplicationService(repo)

        with pytest.raises(ValidationError, match="items"):
            await svc.create_order(db, "customer123", _payload(items=[]))
        repo.create.assert_not_awaited()
        db.commit.assert_not_awaited()

    async def test_missing_items_raises(self) -> None:
        payload = _payload()
        del payload["items"]
        with pytest.raises(ValidationError):
            await OrderApplicationService(AsyncMock()).create_order(AsyncMock(), "c", payload)

    async def test_bad_payment_method_raises(self) -> None:
        with pytest.raises(ValidationError, match="paymentMethod"):
            await OrderApplicationService(AsyncMock()).create_order(
                AsyncMock(), "c", _payload(paymentMethod="BITCOIN")
            )

    async def test_commit_failure_rolls_back_and_wraps(self) -> None:
        repo = AsyncMock()
        repo.create.side_effect = _assign_id
        db = AsyncMock()
        db.commit.side_effect = OperationalError("COMMIT", {}, Exception("disk I/O error"))
        svc = OrderApplicationService(repo)

        with pytest.raises(PersistenceError) as exc:
            await svc.create_order(db, "customer123", _payload())

        assert exc.value.message == "Failed to create order"
        assert exc.value.http_status == 500
        assert "disk I/O error" in exc.value.details
        db.rollback.assert_awaited_once()

    async def test_store_error_propagates_after_rollback(self) -> None:
        repo = AsyncMock()
        repo.create.side_effect = PersistenceError("Failed to create order")
        db = AsyncMock()

        with pytest.raises(PersistenceError):
            await OrderApplicationService(repo).create_order(db, "customer123", _payload())
        db.rollback.assert_awaited_once()
        db.commit.assert_not_awaited()


class TestGetOrder:
    async def test_returns_order(self) -> None:
        order = _make_order()
        repo = _repo_returning(order)
        result = await OrderApplicationService(repo).get_order(AsyncMock(), "order-1", "customer123")
        assert result is order
        repo.find_by_id_for_owner.assert_awaited_once()
        args = repo.find_by_id_for_owner.await_args.args
        assert args[:2] == ("order-1", "customer123")

    async def test_other_customer_gets_none(self) -> None:
        repo = _repo_returning(None)
        result = await OrderApplicationService(repo).get_order(AsyncMock(), "order-1", "wrong-customer")
        assert result is None


class TestListOrders:
    async def test_defaults_and_page_metadata(self) -> None:
        repo = AsyncMock()
        repo.find_by_owner.return_value = ([_make_order()], 21)
        page = await OrderApplicationService(repo).list_orders(AsyncMock(), "customer123")

        assert page.page == 1
        assert page.limit == 10
        assert page.total == 21
        assert page.pages == 3
        kwargs = repo.find_by_owner.await_args.kwargs
        assert kwargs["status"] is None
        assert kwargs["page"] == 1
        assert kwargs["limit"] == 10

    async def test_status_filter_is_coerced(self) -> None:
        repo = AsyncMock()
        repo.find_by_owner.return_value = ([], 0)
        page = await OrderApplicationService(repo).list_orders(
            AsyncMock(), "customer123", page=2, limit=5, status="SHIPPED"
        )
        assert repo.find_by_owner.await_args.kwargs["status"] is OrderStatus.SHIPPED
        assert page.orders == []
        assert page.total == 0
        assert page.pages == 0

    @pytest.mark.parametrize(
        "kwargs",
        [{"page": 0}, {"limit": 0}, {"limit": 101}, {"status": "LOST"}],
    )
    async def test_bad_options_raise(self, kwargs: dict[str, Any]) -> None:
        repo = AsyncMock()
        with pytest.raises(ValidationError):
            await OrderApplicationService(repo).list_orders(AsyncMock(), "customer123", **kwargs)
        repo.find_by_owner.assert_not_awaited()


class TestUpdateOrderStatus:
    async def test_pending_to_shipped(self) -> None:
        repo = _repo_returning(_make_order())
        db = AsyncMock()
        order = await OrderApplicationService(repo).update_order_status(
            db, "order-1", "SHIPPED", "customer123"
        )
        assert order is not None
        assert order.status == OrderStatus.SHIPPED
        assert order.payment_status == PaymentStatus.PENDING
        repo.update.assert_awaited_once()
        db.commit.assert_awaited_once()

    async def test_cancel_via_update_writes_status_and_refund_together(self) -> None:
        repo = _repo_returning(_make_order())
        await OrderApplicationService(repo).update_order_status(
            AsyncMock(), "order-1", OrderStatus.CANCELLED, "customer123"
        )
        written: Order = repo.update.await_args.args[0]
        assert written.status == OrderStatus.CANCELLED
        assert written.payment_status == PaymentStatus.REFUNDED
        assert repo.update.await_count == 1

    async def test_tracking_number_is_passed_through(self) -> None:
        repo = _repo_returning(_make_order())
        order = await OrderApplicationService(repo).update_order_status(
            AsyncMock(), "order-1", "SHIPPED", "customer123", tracking_number="TRK-42"
        )
        assert order is not None
        assert order.tracking_number == "TRK-42"

    async def test_not_found_returns_none(self) -> None:
        repo = _repo_returning(None)
        db = AsyncMock()
        result = await OrderApplicationService(repo).update_order_status(
            db, "missing", "SHIPPED", "customer123"
        )
        assert result is None
        repo.update.assert_not_awaited()
        db.commit.assert_not_awaited()

    async def test_cancelled_order_cannot_be_updated(self) -> None:
        repo = _repo_returning(_make_order(status=OrderStatus.CANCELLED))
        with pytest.raises(InvalidTransitionError, match="Cannot update a cancelled order"):
            await OrderApplicationService(repo).update_order_status(
                AsyncMock(), "order-1", "SHIPPED", "customer123"
            )
        repo.update.assert_not_awaited()

    async def test_delivered_order_cannot_be_updated(self) -> None:
        repo = _repo_returning(_make_order(status=OrderStatus.DELIVERED))
        with pytest.raises(InvalidTransitionError, match="Cannot update a delivered order"):
            await OrderApplicationService(repo).update_order_status(
                AsyncMock(), "order-1", "CANCELLED", "customer123"
            )

    async def test_unknown_status_rejected_before_lookup(self) -> None:
        repo = _repo_returning(_make_order())
        with pytest.raises(ValidationError):
            await OrderApplicationService(repo).update_order_status(
                AsyncMock(), "order-1", "LOST", "customer123"
            )
        repo.find_by_id_for_owner.assert_not_awaited()

    async def test_write_conflict_surfaces_as_persistence_error(self) -> None:
        repo = _repo_returning(_make_order())
        repo.update.side_effect = PersistenceError("Failed to update order: write conflict")
        db = AsyncMock()
        with pytest.raises(PersistenceError, match="write conflict"):
            await OrderApplicationService(repo).update_order_status(
                db, "order-1", "SHIPPED", "customer123"
            )
        db.rollback.assert_awaited_once()


class TestCancelOrder:
    async def test_cancel_pending_order(self) -> None:
        repo = _repo_returning(_make_order())
        order = await OrderApplicationService(repo).cancel_order(AsyncMock(), "order-1", "customer123")
        assert order is not None
        assert order.status == OrderStatus.CANCELLED
        assert order.payment_status == PaymentStatus.REFUNDED
        repo.update.assert_awaited_once()

    async def test_cancel_delivered_order_fails(self) -> None:
        repo = _repo_returning(_make_order(status=OrderStatus.DELIVERED))
        with pytest.raises(InvalidTransitionError, match="Cannot cancel a delivered order"):
            await OrderApplicationService(repo).cancel_order(AsyncMock(), "order-1", "customer123")
        repo.update.assert_not_awaited()

    async def test_cancel_cancelled_order_fails(self) -> None:
        repo = _repo_returning(_make_order(status=OrderStatus.CANCELLED))
        with pytest.raises(InvalidTransitionError, match="Order is already cancelled"):
            await OrderApplicationService(repo).cancel_order(AsyncMock(), "order-1", "customer123")

    async def test_cancel_missing_returns_none(self) -> None:
        repo = _repo_returning(None)
        result = await OrderApplicationService(repo).cancel_order(AsyncMock(), "nope", "customer123")
        assert result is None
