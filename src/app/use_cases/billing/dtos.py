"""Data Transfer Objects for Billing Use Cases

Pydantic models for command inputs and response outputs.
"""

import re
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

from src.domain.billing_event import BillingEventStatus
from src.domain.exchange_rate import ExchangeRateSource, ExchangeRateStatus
from src.domain.service_catalog import (
    BillingUnit,
    Currency,
    PricingPolicy,
    ServiceStatus,
)

INVOICE_MONTH_PATTERN = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


def validate_invoice_month(value: str) -> str:
    if not INVOICE_MONTH_PATTERN.match(value):
        raise ValueError("invoice_month must be YYYY-MM")
    return value


# ---------------------------------------------------------------------------
# Invoice generation and lifecycle
# ---------------------------------------------------------------------------


class GenerateInvoiceCommandDTO(BaseModel):
    """
    Command DTO for generating a monthly invoice

    Used as input to GenerateInvoice use case.
    """

    client_id: int = Field(..., gt=0, description="Client to invoice")

    invoice_month: str = Field(
        ...,
        description="Month whose pending events are invoiced (YYYY-MM)"
    )

    invoice_date: date = Field(
        ...,
        description="Invoice date; selects the exchange rate"
    )

    regenerate_draft: bool = Field(
        default=False,
        description="Rebuild an existing draft instead of reusing it"
    )

    created_by: Optional[int] = Field(
        default=None,
        gt=0,
        description="Actor generating the invoice"
    )

    @field_validator("invoice_month")
    @classmethod
    def check_invoice_month(cls, v):
        return validate_invoice_month(v)

    class Config:
        json_schema_extra = {
            "example": {
                "client_id": 1,
                "invoice_month": "2026-01",
                "invoice_date": "2026-02-01",
                "regenerate_draft": False,
                "created_by": 1
            }
        }


class InvoiceDTO(BaseModel):
    """Invoice header"""

    id: int
    client_id: int
    invoice_no: str
    invoice_month: str
    invoice_date: date
    issue_date: date
    due_date: Optional[date] = None
    currency: str
    fx_rate_thbkrw: Decimal
    subtotal_krw: Decimal
    vat_krw: Decimal
    total_krw: Decimal
    status: str
    created_by: Optional[int] = None
    created_at: datetime
    updated_at: datetime


class InvoiceItemDTO(BaseModel):
    """Invoice line item with truncation flags"""

    id: int
    invoice_id: int
    service_code: str
    description: str
    qty: Decimal
    unit_price_krw: Decimal
    amount_krw: Decimal
    unit_price_trunc100: bool
    amount_trunc100: bool


class GenerateInvoiceResponseDTO(BaseModel):
    """
    Response DTO for invoice generation

    reused=True means an existing draft was returned unchanged.
    """

    invoice: InvoiceDTO
    items: List[InvoiceItemDTO]
    reused: bool
    events_count: Optional[int] = Field(
        default=None,
        description="Events consumed (None when an existing draft was reused)"
    )
    fx_rate_id: Optional[int] = Field(
        default=None,
        description="Exchange rate locked by this generation"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "invoice": {
                    "id": 10,
                    "client_id": 1,
                    "invoice_no": "KRW-1-202601-0001",
                    "invoice_month": "2026-01",
                    "invoice_date": "2026-02-01",
                    "issue_date": "2026-02-01",
                    "currency": "KRW",
                    "fx_rate_thbkrw": "39.123400",
                    "subtotal_krw": "15100",
                    "vat_krw": "1000",
                    "total_krw": "16100",
                    "status": "draft"
                },
                "items": [],
                "reused": False,
                "events_count": 3,
                "fx_rate_id": 4
            }
        }


class InvoiceDetailDTO(BaseModel):
    """Invoice with its live items and truncation flags for each total"""

    invoice: InvoiceDTO
    items: List[InvoiceItemDTO]
    subtotal_trunc100: bool
    vat_trunc100: bool
    total_trunc100: bool


class ListInvoicesResponseDTO(BaseModel):
    invoices: List[InvoiceDTO]


class InvoicePdfExportDTO(BaseModel):
    """Response DTO for PDF export"""

    invoice_id: int
    invoice_no: str
    status: str
    message: str
    download_url: Optional[str] = None


# ---------------------------------------------------------------------------
# Billing event ledger
# ---------------------------------------------------------------------------


class RecordBillingEventCommandDTO(BaseModel):
    """
    Command DTO for appending a billing event

    THB_BASED events take unit_price_thb/amount_thb, KRW_FIXED events take
    unit_price_krw/amount_krw. A missing amount is unit price times qty.
    """

    client_id: int = Field(..., gt=0)
    warehouse_id: Optional[int] = Field(default=None, gt=0)
    service_code: str = Field(..., min_length=1, max_length=80)
    reference_type: str = Field(..., min_length=1, max_length=40)
    reference_id: Optional[str] = Field(default=None, max_length=120)
    event_date: date
    qty: Decimal = Field(default=Decimal("0"), ge=0)
    pricing_policy: PricingPolicy
    unit_price_thb: Optional[Decimal] = Field(default=None, ge=0)
    amount_thb: Optional[Decimal] = Field(default=None, ge=0)
    unit_price_krw: Optional[Decimal] = Field(default=None, ge=0)
    amount_krw: Optional[Decimal] = Field(default=None, ge=0)

    class Config:
        json_schema_extra = {
            "example": {
                "client_id": 1,
                "service_code": "TH_SHIPPING",
                "reference_type": "SHIPPING",
                "reference_id": "SHP-001",
                "event_date": "2026-01-03",
                "qty": "1",
                "pricing_policy": "THB_BASED",
                "unit_price_thb": "120",
                "amount_thb": "120"
            }
        }


class BillingEventFiltersDTO(BaseModel):
    """Filters shared by event listing and CSV export"""

    client_id: Optional[int] = None
    status: Optional[BillingEventStatus] = None
    service_code: Optional[str] = None
    warehouse_id: Optional[int] = None
    invoice_month: Optional[str] = None

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, v):
        # Unknown statuses are ignored rather than rejected
        if isinstance(v, str):
            v = v.upper()
            if v not in BillingEventStatus.__members__:
                return None
        return v

    @field_validator("invoice_month")
    @classmethod
    def drop_malformed_month(cls, v):
        # Malformed months are ignored rather than rejected
        if v is not None and not INVOICE_MONTH_PATTERN.match(v):
            return None
        return v


class BillingEventDTO(BaseModel):
    id: int
    client_id: int
    warehouse_id: Optional[int] = None
    service_code: str
    reference_type: str
    reference_id: Optional[str] = None
    event_date: date
    qty: Decimal
    pricing_policy: str
    unit_price_thb: Optional[Decimal] = None
    amount_thb: Optional[Decimal] = None
    unit_price_krw: Optional[Decimal] = None
    amount_krw: Optional[Decimal] = None
    fx_rate_thbkrw: Optional[Decimal] = None
    status: str
    invoice_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime


class BillingEventAlertsDTO(BaseModel):
    missing_warehouse_id: int = 0


class ListBillingEventsResponseDTO(BaseModel):
    events: List[BillingEventDTO]
    alerts: BillingEventAlertsDTO


class MarkEventsPendingCommandDTO(BaseModel):
    """Command DTO for returning invoiced events to PENDING"""

    ids: List[int] = Field(..., min_length=1)

    @field_validator("ids")
    @classmethod
    def positive_ids(cls, v):
        if any(event_id <= 0 for event_id in v):
            raise ValueError("Event ids must be positive")
        return v


class MarkEventsPendingResponseDTO(BaseModel):
    updated: int


class SeedSampleEventsCommandDTO(BaseModel):
    """Command DTO for inserting the three demo events of a month"""

    client_id: int = Field(default=1, gt=0)
    warehouse_id: Optional[int] = Field(default=None, gt=0)
    invoice_month: str = Field(default="2026-01")

    @field_validator("invoice_month")
    @classmethod
    def check_invoice_month(cls, v):
        return validate_invoice_month(v)


class SeedSampleEventsResponseDTO(BaseModel):
    client_id: int
    invoice_month: str
    seeded: bool
    event_ids: List[int]


# ---------------------------------------------------------------------------
# Rate settings
# ---------------------------------------------------------------------------


class ExchangeRateCommandDTO(BaseModel):
    """Command DTO for creating or replacing a THB/KRW rate"""

    rate_date: date
    rate: Decimal = Field(..., gt=0, description="KRW per 1 THB")
    source: ExchangeRateSource = ExchangeRateSource.MANUAL
    locked: bool = False
    status: ExchangeRateStatus = ExchangeRateStatus.ACTIVE
    entered_by: Optional[int] = Field(default=None, gt=0)

    class Config:
        json_schema_extra = {
            "example": {
                "rate_date": "2026-01-31",
                "rate": "39.1234",
                "source": "manual",
                "status": "active"
            }
        }


class ExchangeRateDTO(BaseModel):
    id: int
    rate_date: date
    base_currency: str
    quote_currency: str
    rate: Decimal
    source: str
    locked: bool
    status: str
    entered_by: Optional[int] = None
    used_invoice_count: int = 0
    created_at: datetime
    updated_at: datetime


class ServiceCatalogCommandDTO(BaseModel):
    service_code: str = Field(..., min_length=1, max_length=80)
    service_name: str = Field(..., min_length=1, max_length=255)
    billing_unit: BillingUnit
    pricing_policy: PricingPolicy
    default_currency: Currency
    default_rate: Decimal = Field(..., ge=0)
    status: ServiceStatus = ServiceStatus.ACTIVE


class ServiceCatalogDTO(BaseModel):
    id: int
    service_code: str
    service_name: str
    billing_unit: str
    pricing_policy: str
    default_currency: str
    default_rate: Decimal
    status: str
    created_at: datetime
    updated_at: datetime


class ContractRateCommandDTO(BaseModel):
    client_id: int = Field(..., gt=0)
    service_code: str = Field(..., min_length=1, max_length=80)
    custom_rate: Decimal = Field(..., ge=0)
    currency: Currency
    effective_date: date


class ContractRateDTO(BaseModel):
    id: int
    client_id: int
    service_code: str
    custom_rate: Decimal
    currency: str
    effective_date: date
    created_at: datetime
    updated_at: datetime


class DeletedResponseDTO(BaseModel):
    ok: bool = True


