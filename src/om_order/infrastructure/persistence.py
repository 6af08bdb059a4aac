# src/om_order/infrastructure/persistence.py
"""OrderRepository: SQLAlchemy Core persistence implementation."""
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from decimal import Decimal
from typing import Any

from sqlalchemy import func, insert, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.om_common.datetime_utils import as_utc, utc_now
from src.om_common.enums import OrderStatus
from src.om_common.errors import PersistenceError
from src.om_common.id_generator import generate_id
from src.om_order.domain.models import Order, OrderItem, ShippingAddress
from src.om_order.infrastructure.db_models import OrderORM

logger = logging.getLogger(__name__)

_orders = OrderORM.__table__


# ---------------------------------------------------------------------------
# Mappers
# ---------------------------------------------------------------------------


def _items_to_json(items: list[OrderItem]) -> list[dict[str, Any]]:
    return [
        {
            "product_id": item.product_id,
            "quantity": item.quantity,
            "price": str(item.price),
            "name": item.name,
        }
        for item in items
    ]


def _address_to_json(address: ShippingAddress) -> dict[str, str]:
    return {
        "street": address.street,
        "city": address.city,
        "state": address.state,
        "country": address.country,
        "zip_code": address.zip_code,
    }


def _mutable_columns(order: Order) -> dict[str, Any]:
    return {
        "items": _items_to_json(order.items),
        "total_amount": order.total_amount,
        "status": order.status.value,
        "payment_status": order.payment_status.value,
        "tracking_number": order.tracking_number,
    }


def _row_to_order(row: Any) -> Order:
    """Convert a DB result row to an Order domain object."""
    return Order(
        id=row.id,
        customer_id=row.customer_id,
        items=[
            OrderItem(
                product_id=i["product_id"],
                quantity=i["quantity"],
                price=Decimal(i["price"]),
                name=i["name"],
            )
            for i in row.items
        ],
        shipping_address=ShippingAddress(**row.shipping_address),
        payment_method=row.payment_method,
        status=row.status,
        payment_status=row.payment_status,
        tracking_number=row.tracking_number,
        created_at=as_utc(row.created_at),
        updated_at=as_utc(row.updated_at),
    )


@contextmanager
def _store_errors(action: str) -> Iterator[None]:
    """Re-raise driver/ORM failures as PersistenceError, keeping the cause."""
    try:
        yield
    except SQLAlchemyError as exc:
        logger.error("Order store failed to %s: %s", action, exc, exc_info=True)
        raise PersistenceError(f"Failed to {action}", cause=exc) from exc


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class OrderRepository:
    """Concrete implementation of OrderRepositoryProtocol."""

    async def create(self, order: Order, db: AsyncSession) -> Order:
        order.validate()
        order_id = order.id or generate_id()
        now = utc_now()
        with _store_errors("create order"):
            await db.execute(
                insert(_orders).values(
                    id=order_id,
                    customer_id=order.customer_id,
                    shipping_address=_address_to_json(order.shipping_address),
                    payment_method=order.payment_method.value,
                    created_at=now,
                    updated_at=now,
                    **_mutable_columns(order),
                )
            )
        order.id = order_id
        order.created_at = now
        order.updated_at = now
        return order

    async def find_by_id_for_owner(
        self, order_id: str, customer_id: str, db: AsyncSession
    ) -> Order | None:
        stmt = select(_orders).where(
            _orders.c.id == order_id, _orders.c.customer_id == customer_id
        )
        with _store_errors("retrieve order"):
            result = await db.execute(stmt)
            row = result.fetchone()
        return _row_to_order(row) if row else None

    async def find_by_owner(
        self,
        customer_id: str,
        db: AsyncSession,
        status: OrderStatus | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> tuple[list[Order], int]:
        conditions = [_orders.c.customer_id == customer_id]
        if status is not None:
            conditions.append(_orders.c.status == OrderStatus(status).value)

        page_stmt = (
            select(_orders)
            .where(*conditions)
            .order_by(_orders.c.created_at.desc(), _orders.c.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        count_stmt = select(func.count()).select_from(_orders).where(*conditions)

        with _store_errors("retrieve orders"):
            rows = (await db.execute(page_stmt)).fetchall()
            total = (await db.execute(count_stmt)).scalar_one()
        return [_row_to_order(row) for row in rows], int(total)

    async def update(self, order: Order, db: AsyncSession) -> Order:
        if order.id is None:
            raise PersistenceError("Failed to update order: order has no id")
        order.validate()
        now = utc_now()
        stmt = (
            update(_orders)
            .where(_orders.c.id == order.id, _orders.c.customer_id == order.customer_id)
            .values(updated_at=now, **_mutable_columns(order))
        )
        with _store_errors("update order"):
            result = await db.execute(stmt)
        if result.rowcount == 0:
            logger.warning("Order %s vanished before update (write conflict)", order.id)
            raise PersistenceError("Failed to update order: write conflict")
        order.updated_at = now
        return order
