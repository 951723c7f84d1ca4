"""Monetary rules for KRW invoicing

Every KRW line, subtotal, VAT and total value is truncated down to the
nearest 100 won. Arithmetic is done in Decimal so results are exact.
"""

from decimal import Decimal, ROUND_FLOOR
from typing import Optional, Union

Number = Union[Decimal, int, str, float]

HUNDRED = Decimal("100")
VAT_RATE = Decimal("0.07")
VAT_SERVICE_CODE = "VAT_7"
VAT_DESCRIPTION = "VAT 7%"


def to_decimal(value: Optional[Number]) -> Decimal:
    """Convert to Decimal, treating None as zero"""
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        # repr keeps the shortest round-tripping literal (39.1234, not 39.12339999...)
        return Decimal(repr(value))
    return Decimal(value)


def truncate_to_hundred(value: Optional[Number]) -> Decimal:
    """floor(value / 100) * 100"""
    amount = to_decimal(value)
    return (amount / HUNDRED).to_integral_value(rounding=ROUND_FLOOR) * HUNDRED


def resolve_amount(
    amount: Optional[Number], unit_price: Optional[Number], qty: Optional[Number]
) -> Decimal:
    """Explicit amount wins, otherwise unit_price * qty (missing values count as zero)"""
    if amount is not None:
        return to_decimal(amount)
    return to_decimal(unit_price) * to_decimal(qty)


def calculate_vat(subtotal: Number) -> Decimal:
    return truncate_to_hundred(to_decimal(subtotal) * VAT_RATE)
