"""Invoice item aggregation and totals

Pure functions used by invoice generation. Inputs are already-normalized
KRW amounts per event, in event insertion order.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Iterable, List, Tuple

from src.domain.money import calculate_vat, to_decimal, truncate_to_hundred


@dataclass
class ItemDraft:
    service_code: str
    qty: Decimal
    unit_price_krw: Decimal
    amount_krw: Decimal


@dataclass
class InvoiceTotals:
    subtotal_krw: Decimal
    vat_krw: Decimal
    total_krw: Decimal


def aggregate_items(lines: Iterable[Tuple[str, Decimal, Decimal]]) -> List[ItemDraft]:
    """
    Group (service_code, qty, amount_krw) lines into one item per service

    Groups keep the order in which each service code is first seen.
    """
    groups: Dict[str, List[Decimal]] = {}
    for service_code, qty, amount in lines:
        group = groups.setdefault(service_code, [Decimal("0"), Decimal("0")])
        group[0] += to_decimal(qty)
        group[1] += to_decimal(amount)

    items = []
    for service_code, (qty, amount) in groups.items():
        line_amount = truncate_to_hundred(amount)
        if qty > 0:
            unit_price = truncate_to_hundred(line_amount / qty)
        else:
            unit_price = line_amount
        items.append(
            ItemDraft(
                service_code=service_code,
                qty=qty,
                unit_price_krw=unit_price,
                amount_krw=line_amount,
            )
        )
    return items


def compute_totals(items: Iterable[ItemDraft]) -> InvoiceTotals:
    """subtotal = trunc(sum), vat = trunc(subtotal * 7%), total = trunc(subtotal + vat)"""
    subtotal = truncate_to_hundred(sum((item.amount_krw for item in items), Decimal("0")))
    vat = calculate_vat(subtotal)
    return InvoiceTotals(
        subtotal_krw=subtotal,
        vat_krw=vat,
        total_krw=truncate_to_hundred(subtotal + vat),
    )
