from .base import BaseModel, IdType
from .client import Client
from .service_catalog import (
    ServiceCatalog,
    BillingUnit,
    PricingPolicy,
    Currency,
    ServiceStatus,
)
from .contract_rate import ClientContractRate
from .exchange_rate import ExchangeRate, ExchangeRateStatus, ExchangeRateSource
from .billing_event import BillingEvent, BillingEventStatus
from .invoice import Invoice, InvoiceStatus, month_range
from .invoice_item import InvoiceItem
from .invoice_sequence import InvoiceSequence, build_invoice_number, to_yyyymm
from .invoice_builder import ItemDraft, InvoiceTotals, aggregate_items, compute_totals

__all__ = [
    "BaseModel",
    "IdType",
    "Client",
    "ServiceCatalog",
    "BillingUnit",
    "PricingPolicy",
    "Currency",
    "ServiceStatus",
    "ClientContractRate",
    "ExchangeRate",
    "ExchangeRateStatus",
    "ExchangeRateSource",
    "BillingEvent",
    "BillingEventStatus",
    "Invoice",
    "InvoiceStatus",
    "month_range",
    "InvoiceItem",
    "InvoiceSequence",
    "build_invoice_number",
    "to_yyyymm",
    "ItemDraft",
    "InvoiceTotals",
    "aggregate_items",
    "compute_totals",
]
