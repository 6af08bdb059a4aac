"""Order domain model: pure dataclasses, no SQLAlchemy dependency.

Invariants are enforced on construction and re-checked by ``Order.validate``
before every write:
  - at least one item, each with quantity >= 1 and price >= 0
  - status / payment_method / payment_status are known enum values
  - total_amount == sum(price * quantity), never taken from the caller
"""
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, TypeVar

from src.om_common.enums import (
    TERMINAL_STATUSES,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
)
from src.om_common.errors import ValidationError
from src.om_common.money import line_total, to_amount

_E = TypeVar("_E", bound=Enum)


def coerce_enum(enum_cls: type[_E], value: Any, field_name: str) -> _E:
    """Return ``value`` as a member of ``enum_cls`` or raise ValidationError."""
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(
            f"{field_name} must be one of [{allowed}], got {value!r}"
        ) from None


def _require_text(value: Any, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value


@dataclass(frozen=True)
class OrderItem:
    product_id: str
    quantity: int
    price: Decimal
    name: str

    def __post_init__(self) -> None:
        _require_text(self.product_id, "productId")
        _require_text(self.name, "name")
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int):
            raise ValidationError("quantity must be an integer")
        if self.quantity < 1:
            raise ValidationError("quantity must be greater than or equal to 1")
        try:
            price = to_amount(self.price)
        except ValueError as exc:
            raise ValidationError(f"price is invalid: {exc}") from None
        if price.is_signed():
            raise ValidationError("price must be greater than or equal to 0")
        object.__setattr__(self, "price", price)

    @property
    def subtotal(self) -> Decimal:
        return line_total(self.price, self.quantity)


@dataclass(frozen=True)
class ShippingAddress:
    street: str
    city: str
    state: str
    country: str
    zip_code: str

    def __post_init__(self) -> None:
        _require_text(self.street, "shippingAddress.street")
        _require_text(self.city, "shippingAddress.city")
        _require_text(self.state, "shippingAddress.state")
        _require_text(self.country, "shippingAddress.country")
        _require_text(self.zip_code, "shippingAddress.zipCode")


def compute_total(items: Iterable[OrderItem]) -> Decimal:
    return to_amount(sum((item.subtotal for item in items), Decimal("0")))


@dataclass
class Order:
    customer_id: str
    items: list[OrderItem]
    shipping_address: ShippingAddress
    payment_method: PaymentMethod
    id: str | None = None  # assigned by the store
    status: OrderStatus = OrderStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.PENDING
    tracking_number: str | None = None
    total_amount: Decimal = field(init=False)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        _require_text(self.customer_id, "customerId")
        self.items = list(self.items)
        self.validate()

    # -- invariants --------------------------------------------------------

    def validate(self) -> None:
        """Re-check every invariant and recompute derived fields."""
        if not self.items:
            raise ValidationError("Order must have at least one item")
        for item in self.items:
            if not isinstance(item, OrderItem):
                raise ValidationError("items must contain OrderItem values")
        if not isinstance(self.shipping_address, ShippingAddress):
            raise ValidationError("shippingAddress is required")
        self.status = coerce_enum(OrderStatus, self.status, "status")
        self.payment_method = coerce_enum(PaymentMethod, self.payment_method, "paymentMethod")
        self.payment_status = coerce_enum(PaymentStatus, self.payment_status, "paymentStatus")
        self.recompute_total()

    def recompute_total(self) -> Decimal:
        self.total_amount = compute_total(self.items)
        return self.total_amount

    # -- mutation ----------------------------------------------------------

    def replace_items(self, items: Iterable[OrderItem]) -> None:
        new_items = list(items)
        if not new_items:
            raise ValidationError("Order must have at least one item")
        previous = self.items
        self.items = new_items
        try:
            self.validate()
        except ValidationError:
            self.items = previous
            self.recompute_total()
            raise

    def __setattr__(self, name: str, value: Any) -> None:
        if name == "payment_method" and "payment_method" in self.__dict__:
            current = self.__dict__["payment_method"]
            if coerce_enum(PaymentMethod, value, "paymentMethod") != current:
                raise ValidationError("paymentMethod cannot be changed after creation")
        super().__setattr__(name, value)

    # -- state -------------------------------------------------------------

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def is_cancellable(self) -> bool:
        return not self.is_terminal


@dataclass(frozen=True)
class OrderPage:
    """One page of an owner's orders plus the full matching count."""
    orders: list[Order]
    total: int
    page: int
    limit: int

    @property
    def pages(self) -> int:
        return -(-self.total // self.limit) if self.limit else 0
