"""Decimal helpers for monetary amounts.

Amounts travel as strings (``"15.50"``) at the edges and as ``Decimal``
quantized to cents everywhere else. Floats are never accepted.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Union

from .errors import ValidationError

CENTS = Decimal("0.01")
ZERO = Decimal("0.00")
# Largest value a NUMERIC(12, 2) column holds
MAX_AMOUNT = Decimal("9999999999.99")

AmountLike = Union[str, int, Decimal]


def quantize(value: Decimal) -> Decimal:
    """Round a decimal to two places."""
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def to_decimal(value: AmountLike) -> Decimal:
    """Convert an amount to a two-place ``Decimal``.

    Raises:
        ValidationError: If the value is not a finite decimal number or
            does not fit a money column
    """
    if isinstance(value, bool) or isinstance(value, float):
        raise ValidationError("Invalid amount")
    if isinstance(value, str):
        value = value.strip()
    try:
        result = Decimal(value)
        if not result.is_finite():
            raise ValidationError("Invalid amount")
        result = quantize(result)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError("Invalid amount")
    if abs(result) > MAX_AMOUNT:
        raise ValidationError("Invalid amount")
    return result


def parse_positive_amount(value: AmountLike) -> Decimal:
    """Parse an amount that must be strictly positive after rounding."""
    amount = to_decimal(value)
    if amount <= ZERO:
        raise ValidationError("Invalid amount")
    return amount


def format_amount(value: Decimal) -> str:
    """Format an amount as a two-decimal string."""
    return str(quantize(Decimal(value)))
