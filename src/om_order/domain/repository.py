# src/om_order/domain/repository.py
"""OrderRepository Protocol: interface contract for persistence layer.

Unit tests inject a mock that conforms to this Protocol.
Implementations never commit; the application service owns the transaction.
"""
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.om_common.enums import OrderStatus
from src.om_order.domain.models import Order


class OrderRepositoryProtocol(Protocol):
    async def create(self, order: Order, db: AsyncSession) -> Order: ...

    async def find_by_id_for_owner(
        self, order_id: str, customer_id: str, db: AsyncSession
    ) -> Order | None: ...

    async def find_by_owner(
        self,
        customer_id: str,
        db: AsyncSession,
        status: OrderStatus | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> tuple[list[Order], int]: ...

    async def update(self, order: Order, db: AsyncSession) -> Order: ...
