"""
Helper utilities
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Union

CENT = Decimal("0.01")

Number = Union[Decimal, int, float, str]

def to_decimal(value: Number) -> Decimal:
    """Decimal from a db or JSON number without float artefacts"""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))

def round_money(amount: Number) -> Decimal:
    """
    Round an amount to cents using half-up rounding

    Args:
        amount: Amount in full precision

    Returns:
        Amount with exactly two decimal places
    """
    return to_decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)

def sum_money(amounts: Iterable[Number]) -> Decimal:
    return sum((to_decimal(a) for a in amounts), Decimal("0"))
