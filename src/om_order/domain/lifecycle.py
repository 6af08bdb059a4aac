"""Order lifecycle rules.

    PENDING → PROCESSING → SHIPPED → DELIVERED
        └──────────┴───────────┴──→ CANCELLED

DELIVERED and CANCELLED are terminal. Moving to CANCELLED refunds the payment
in the same mutation. These functions only mutate the in-memory Order; the
caller persists it with a single write.
"""
from src.om_common.enums import OrderStatus, PaymentStatus
from src.om_common.errors import InvalidTransitionError, ValidationError
from src.om_order.domain.models import Order, coerce_enum

# PENDING is the creation state and cannot be requested through an update.
UPDATABLE_TARGETS = frozenset({
    OrderStatus.PROCESSING,
    OrderStatus.SHIPPED,
    OrderStatus.DELIVERED,
    OrderStatus.CANCELLED,
})


def parse_target_status(value: object) -> OrderStatus:
    status = coerce_enum(OrderStatus, value, "status")
    if status not in UPDATABLE_TARGETS:
        allowed = ", ".join(s.value for s in OrderStatus if s in UPDATABLE_TARGETS)
        raise ValidationError(f"status must be one of [{allowed}], got {status.value!r}")
    return status


def check_status_update(order: Order) -> None:
    if order.status == OrderStatus.CANCELLED:
        raise InvalidTransitionError("Cannot update a cancelled order")
    if order.status == OrderStatus.DELIVERED:
        raise InvalidTransitionError("Cannot update a delivered order")


def check_cancel(order: Order) -> None:
    if order.is_cancellable:
        return
    if order.status == OrderStatus.CANCELLED:
        raise InvalidTransitionError("Order is already cancelled")
    raise InvalidTransitionError("Cannot cancel a delivered order")


def _mark_cancelled(order: Order) -> None:
    order.status = OrderStatus.CANCELLED
    order.payment_status = PaymentStatus.REFUNDED


def apply_status_update(
    order: Order, new_status: object, tracking_number: str | None = None
) -> Order:
    """Move ``order`` to ``new_status`` or raise without touching it.

    Terminal orders are rejected before the target is looked at.
    """
    check_status_update(order)
    target = parse_target_status(new_status)

    if target == OrderStatus.CANCELLED:
        _mark_cancelled(order)
    else:
        order.status = target
    if tracking_number is not None:
        order.tracking_number = tracking_number
    order.validate()
    return order


def apply_cancel(order: Order) -> Order:
    check_cancel(order)
    _mark_cancelled(order)
    order.validate()
    return order
