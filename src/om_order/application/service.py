# src/om_order/application/service.py
"""OrderApplicationService: order lifecycle and queries for one owner.

Every operation takes the authenticated ``customer_id`` explicitly. Reads run
without an explicit transaction; create/update/cancel commit on success and
roll back on any failure. "Not found" is returned as ``None``.
"""
import logging
from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.om_common.enums import OrderStatus
from src.om_common.errors import PersistenceError, ValidationError
from src.om_order.application.schemas import CreateOrderRequest, parse_create_order
from src.om_order.domain.lifecycle import apply_cancel, apply_status_update
from src.om_order.domain.models import Order, OrderPage, coerce_enum
from src.om_order.domain.repository import OrderRepositoryProtocol
from src.om_order.infrastructure.persistence import OrderRepository

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _transaction(db: AsyncSession, action: str) -> AsyncIterator[None]:
    """Commit the block's writes, or roll back and re-raise."""
    try:
        yield
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.error("Failed to %s: %s", action, exc, exc_info=True)
        raise PersistenceError(f"Failed to {action}", cause=exc) from exc
    except Exception:
        await db.rollback()
        raise


class OrderApplicationService:
    def __init__(self, repo: OrderRepositoryProtocol | None = None) -> None:
        self._repo: OrderRepositoryProtocol = repo or OrderRepository()

    async def create_order(
        self,
        db: AsyncSession,
        customer_id: str,
        payload: Mapping[str, Any] | CreateOrderRequest,
    ) -> Order:
        order = parse_create_order(payload).to_domain(customer_id)
        async with _transaction(db, "create order"):
            order = await self._repo.create(order, db)
        logger.info("Order created: %s for customer: %s", order.id, customer_id)
        return order

    async def get_order(
        self, db: AsyncSession, order_id: str, customer_id: str
    ) -> Order | None:
        return await self._repo.find_by_id_for_owner(order_id, customer_id, db)

    async def list_orders(
        self,
        db: AsyncSession,
        customer_id: str,
        page: int = 1,
        limit: int | None = None,
        status: OrderStatus | str | None = None,
    ) -> OrderPage:
        if limit is None:
            limit = settings.DEFAULT_PAGE_LIMIT
        if page < 1:
            raise ValidationError("page must be greater than or equal to 1")
        if not (1 <= limit <= settings.MAX_PAGE_LIMIT):
            raise ValidationError(f"limit must be between 1 and {settings.MAX_PAGE_LIMIT}")
        status_filter = coerce_enum(OrderStatus, status, "status") if status else None

        orders, total = await self._repo.find_by_owner(
            customer_id, db, status=status_filter, page=page, limit=limit
        )
        return OrderPage(orders=orders, total=total, page=page, limit=limit)

    async def update_order_status(
        self,
        db: AsyncSession,
        order_id: str,
        new_status: OrderStatus | str,
        customer_id: str,
        tracking_number: str | None = None,
    ) -> Order | None:
        target = coerce_enum(OrderStatus, new_status, "status")
        order = await self._repo.find_by_id_for_owner(order_id, customer_id, db)
        if order is None:
            return None

        apply_status_update(order, target, tracking_number)
        async with _transaction(db, "update order status"):
            order = await self._repo.update(order, db)
        logger.info("Order %s status updated to %s", order_id, target.value)
        return order

    async def cancel_order(
        self, db: AsyncSession, order_id: str, customer_id: str
    ) -> Order | None:
        order = await self._repo.find_by_id_for_owner(order_id, customer_id, db)
        if order is None:
            return None

        apply_cancel(order)
        async with _transaction(db, "cancel order"):
            order = await self._repo.update(order, db)
        logger.info("Order %s cancelled by customer %s", order_id, customer_id)
        return order
