# src/om_order/api/router.py
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.om_common.database import get_db_session
from src.om_common.enums import OrderStatus
from src.om_common.response import json_envelope
from src.om_gateway.auth.dependencies import get_current_customer_id
from src.om_gateway.middleware.request_log import request_id_of
from src.om_order.application.schemas import (
    CreateOrderRequest,
    OrderEnvelopeData,
    OrderListData,
    OrderResponse,
    UpdateOrderStatusRequest,
)
from src.om_order.application.service import OrderApplicationService
from src.om_order.domain.models import Order

router = APIRouter(prefix="/orders", tags=["orders"])

_service = OrderApplicationService()


def get_order_service() -> OrderApplicationService:
    return _service


CustomerId = Annotated[str, Depends(get_current_customer_id)]
Db = Annotated[AsyncSession, Depends(get_db_session)]
Service = Annotated[OrderApplicationService, Depends(get_order_service)]


def _order_envelope(
    request: Request, status_code: int, message: str, order: Order | None
) -> JSONResponse:
    if order is None:
        return json_envelope(404, "Order not found", request_id=request_id_of(request))
    data = OrderEnvelopeData(order=OrderResponse.from_domain(order))
    return json_envelope(
        status_code,
        message,
        data.model_dump(mode="json", by_alias=True),
        request_id=request_id_of(request),
    )


@router.post("", status_code=201)
async def create_order(
    req: CreateOrderRequest,
    request: Request,
    customer_id: CustomerId,
    db: Db,
    svc: Service,
) -> JSONResponse:
    order = await svc.create_order(db, customer_id, req)
    return _order_envelope(request, 201, "Order created successfully", order)


@router.get("")
async def list_orders(
    request: Request,
    customer_id: CustomerId,
    db: Db,
    svc: Service,
    page: int = Query(1, ge=1, description="Page number (1-based)"),
    limit: int = Query(
        settings.DEFAULT_PAGE_LIMIT, ge=1, le=settings.MAX_PAGE_LIMIT, description="Items per page"
    ),
    status: OrderStatus | None = Query(None, description="Filter by order status"),
) -> JSONResponse:
    result = await svc.list_orders(db, customer_id, page=page, limit=limit, status=status)
    return json_envelope(
        200,
        "Orders retrieved successfully",
        OrderListData.from_page(result).model_dump(mode="json", by_alias=True),
        request_id=request_id_of(request),
    )


@router.get("/{order_id}")
async def get_order(
    order_id: str,
    request: Request,
    customer_id: CustomerId,
    db: Db,
    svc: Service,
) -> JSONResponse:
    order = await svc.get_order(db, order_id, customer_id)
    return _order_envelope(request, 200, "Order retrieved successfully", order)


@router.patch("/{order_id}")
async def update_order_status(
    order_id: str,
    req: UpdateOrderStatusRequest,
    request: Request,
    customer_id: CustomerId,
    db: Db,
    svc: Service,
) -> JSONResponse:
    order = await svc.update_order_status(
        db, order_id, req.status, customer_id, tracking_number=req.tracking_number
    )
    return _order_envelope(request, 200, "Order status updated successfully", order)


@router.delete("/{order_id}")
async def cancel_order(
    order_id: str,
    request: Request,
    customer_id: CustomerId,
    db: Db,
    svc: Service,
) -> JSONResponse:
    order = await svc.cancel_order(db, order_id, customer_id)
    return _order_envelope(request, 200, "Order cancelled successfully", order)
