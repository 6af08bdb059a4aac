# src/om_order/application/schemas.py
"""Pydantic request/response schemas for orders.

Wire format is camelCase (``shippingAddress.zipCode``, ``totalAmount``);
Python attributes stay snake_case. Request models ignore unknown fields, so a
client-supplied ``totalAmount`` or ``status`` never reaches the domain.

``parse_create_order`` / ``parse_status_update`` validate plain mappings
without any HTTP request object, raising the domain ``ValidationError``.
"""
from collections.abc import Mapping, Sequence
from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from src.om_common.enums import OrderStatus, PaymentMethod, PaymentStatus
from src.om_common.errors import ValidationError
from src.om_order.domain.models import Order, OrderItem, OrderPage, ShippingAddress


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class OrderItemIn(_CamelModel):
    product_id: str = Field(min_length=1)
    quantity: int = Field(ge=1)
    price: Decimal = Field(ge=0, allow_inf_nan=False)
    name: str = Field(min_length=1)

    def to_domain(self) -> OrderItem:
        return OrderItem(
            product_id=self.product_id,
            quantity=self.quantity,
            price=self.price,
            name=self.name,
        )


class ShippingAddressIn(_CamelModel):
    street: str = Field(min_length=1)
    city: str = Field(min_length=1)
    state: str = Field(min_length=1)
    country: str = Field(min_length=1)
    zip_code: str = Field(min_length=1)

    def to_domain(self) -> ShippingAddress:
        return ShippingAddress(**self.model_dump())


class CreateOrderRequest(_CamelModel):
    items: list[OrderItemIn] = Field(min_length=1)
    shipping_address: ShippingAddressIn
    payment_method: PaymentMethod

    def to_domain(self, customer_id: str) -> Order:
        return Order(
            customer_id=customer_id,
            items=[item.to_domain() for item in self.items],
            shipping_address=self.shipping_address.to_domain(),
            payment_method=self.payment_method,
        )


class UpdateOrderStatusRequest(_CamelModel):
    status: OrderStatus
    tracking_number: str | None = Field(default=None, min_length=1, max_length=100)


def format_validation_errors(errors: Sequence[Mapping[str, Any]]) -> str:
    """Join pydantic errors into one message: 'items: List should have ...'."""
    parts = []
    for err in errors:
        loc = ".".join(str(p) for p in err["loc"] if p != "body")
        parts.append(f"{loc}: {err['msg']}" if loc else err["msg"])
    return ", ".join(parts)


def parse_create_order(payload: Mapping[str, Any] | CreateOrderRequest) -> CreateOrderRequest:
    if isinstance(payload, CreateOrderRequest):
        return payload
    try:
        return CreateOrderRequest.model_validate(payload)
    except PydanticValidationError as exc:
        raise ValidationError(format_validation_errors(exc.errors())) from None


def parse_status_update(
    payload: Mapping[str, Any] | UpdateOrderStatusRequest,
) -> UpdateOrderStatusRequest:
    if isinstance(payload, UpdateOrderStatusRequest):
        return payload
    try:
        return UpdateOrderStatusRequest.model_validate(payload)
    except PydanticValidationError as exc:
        raise ValidationError(format_validation_errors(exc.errors())) from None


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class _CamelResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class OrderItemResponse(_CamelResponse):
    product_id: str
    quantity: int
    price: Decimal
    name: str

    @field_serializer("price", when_used="json")
    def _price_as_number(self, value: Decimal) -> float:
        return float(value)


class ShippingAddressResponse(_CamelResponse):
    street: str
    city: str
    state: str
    country: str
    zip_code: str


class OrderResponse(_CamelResponse):
    id: str
    customer_id: str
    items: list[OrderItemResponse]
    total_amount: Decimal
    status: OrderStatus
    shipping_address: ShippingAddressResponse
    payment_method: PaymentMethod
    payment_status: PaymentStatus
    tracking_number: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_serializer("total_amount", when_used="json")
    def _total_as_number(self, value: Decimal) -> float:
        return float(value)

    @classmethod
    def from_domain(cls, order: Order) -> "OrderResponse":
        return cls(
            id=order.id or "",
            customer_id=order.customer_id,
            items=[
                OrderItemResponse(
                    product_id=i.product_id,
                    quantity=i.quantity,
                    price=i.price,
                    name=i.name,
                )
                for i in order.items
            ],
            total_amount=order.total_amount,
            status=order.status,
            shipping_address=ShippingAddressResponse(
                street=order.shipping_address.street,
                city=order.shipping_address.city,
                state=order.shipping_address.state,
                country=order.shipping_address.country,
                zip_code=order.shipping_address.zip_code,
            ),
            payment_method=order.payment_method,
            payment_status=order.payment_status,
            tracking_number=order.tracking_number,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )


class OrderEnvelopeData(_CamelResponse):
    order: OrderResponse


class PaginationResponse(_CamelResponse):
    total: int
    page: int
    limit: int
    pages: int


class OrderListData(_CamelResponse):
    orders: list[OrderResponse]
    pagination: PaginationResponse

    @classmethod
    def from_page(cls, page: OrderPage) -> "OrderListData":
        return cls(
            orders=[OrderResponse.from_domain(o) for o in page.orders],
            pagination=PaginationResponse(
                total=page.total,
                page=page.page,
                limit=page.limit,
                pages=page.pages,
            ),
        )
