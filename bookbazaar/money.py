"""
Money Utilities - Safe Decimal operations for book prices.

The API sends prices as JSON numbers; everything past the model boundary is
Decimal to avoid float drift in cart and order totals.
"""
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Iterable, Union

Numeric = Union[str, int, float, Decimal]

# Default precision for money operations (2 decimal places)
MONEY_PRECISION = Decimal("0.01")


def to_decimal(value: Union[Numeric, None]) -> Decimal:
    """
    Convert any value to Decimal safely.

    Args:
        value: Value to convert (str, int, float, Decimal, or None)

    Returns:
        Decimal representation of the value, or Decimal("0") if None/invalid
    """
    if value is None:
        return Decimal("0")

    if isinstance(value, Decimal):
        return value

    try:
        if isinstance(value, float):
            # Go through str so 5.5 becomes Decimal("5.5"), not its binary expansion
            return Decimal(str(value))
        return Decimal(value)
    except (InvalidOperation, ValueError, TypeError):
        return Decimal("0")


def round_money(value: Numeric) -> Decimal:
    """Round a monetary value to cents."""
    return to_decimal(value).quantize(MONEY_PRECISION, rounding=ROUND_HALF_UP)


def multiply(value: Numeric, factor: Numeric) -> Decimal:
    """Safe multiplication of monetary value by a factor."""
    return to_decimal(value) * to_decimal(factor)


def total(values: Iterable[Numeric]) -> Decimal:
    """Sum monetary values, starting from Decimal zero."""
    result = Decimal("0")
    for value in values:
        result += to_decimal(value)
    return result


def format_money(value: Numeric) -> str:
    """Format a price the way the storefront shows it, e.g. ``$1,234.50``."""
    return f"${round_money(value):,.2f}"
