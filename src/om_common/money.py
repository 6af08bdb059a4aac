"""Decimal money utilities.

Prices and totals are Decimal with two fractional digits. Never float.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

_CENT = Decimal("0.01")


def to_amount(value: Decimal | int | float | str) -> Decimal:
    """Convert to a 2-dp Decimal: 29.99 -> Decimal('29.99').

    Floats go through ``str`` so that 29.99 is not read as 29.989999...
    Raises ValueError for values that are not finite numbers.
    """
    if isinstance(value, bool):
        raise ValueError(f"Not a monetary amount: {value!r}")
    try:
        amount = Decimal(str(value)) if isinstance(value, float) else Decimal(value)
    except (InvalidOperation, TypeError):
        raise ValueError(f"Not a monetary amount: {value!r}") from None
    if not amount.is_finite():
        raise ValueError(f"Not a monetary amount: {value!r}")
    return amount.quantize(_CENT, rounding=ROUND_HALF_UP)


def line_total(price: Decimal, quantity: int) -> Decimal:
    """price * quantity, quantized to cents."""
    return to_amount(price * quantity)
