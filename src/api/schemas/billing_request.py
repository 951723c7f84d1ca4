"""Request schemas for Billing API

Pydantic models for validating incoming HTTP requests.
"""

from datetime import date
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

from src.app.use_cases.billing.dtos import validate_invoice_month
from src.domain.exchange_rate import ExchangeRateSource, ExchangeRateStatus
from src.domain.service_catalog import BillingUnit, Currency, PricingPolicy, ServiceStatus


class GenerateInvoiceRequestSchema(BaseModel):
    """
    Request schema for generating a monthly invoice

    Used for POST /billing/invoices/generate endpoint.
    """

    client_id: int = Field(..., gt=0, description="Client to invoice")

    invoice_month: str = Field(..., description="Month to invoice (YYYY-MM)")

    invoice_date: date = Field(..., description="Invoice date; selects the exchange rate")

    regenerate_draft: bool = Field(
        default=False,
        description="Rebuild an existing draft instead of returning it"
    )

    created_by: Optional[int] = Field(default=None, gt=0)

    @field_validator("invoice_month")
    @classmethod
    def validate_month(cls, v):
        return validate_invoice_month(v)

    class Config:
        json_schema_extra = {
            "example": {
                "client_id": 1,
                "invoice_month": "2026-01",
                "invoice_date": "2026-02-01",
                "regenerate_draft": False
            }
        }


class MarkPendingRequestSchema(BaseModel):
    """Used for POST /billing/events/mark-pending endpoint."""

    ids: List[int] = Field(..., min_length=1, description="Billing event IDs")

    @field_validator("ids")
    @classmethod
    def validate_ids(cls, v):
        if any(event_id <= 0 for event_id in v):
            raise ValueError("Event ids must be positive")
        return v


class BillingEventRequestSchema(BaseModel):
    """
    Request schema for recording a billing event

    Used for POST /billing/events endpoint.
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
                "service_code": "OUTBOUND_FEE",
                "reference_type": "OUTBOUND",
                "reference_id": "OUT-2026-0001",
                "event_date": "2026-01-07",
                "qty": "3",
                "pricing_policy": "KRW_FIXED",
                "unit_price_krw": "3500"
            }
        }


class SampleEventsRequestSchema(BaseModel):
    """Used for POST /billing/events/sample endpoint."""

    client_id: int = Field(default=1, gt=0)
    warehouse_id: Optional[int] = Field(default=None, gt=0)
    invoice_month: str = Field(default="2026-01")

    @field_validator("invoice_month")
    @classmethod
    def validate_month(cls, v):
        return validate_invoice_month(v)


class ExchangeRateRequestSchema(BaseModel):
    """Used for POST/PUT /billing/settings/exchange-rates endpoints."""

    rate_date: date
    rate: Decimal = Field(..., gt=0, description="KRW per 1 THB")
    source: ExchangeRateSource = ExchangeRateSource.MANUAL
    locked: bool = False
    status: ExchangeRateStatus = ExchangeRateStatus.ACTIVE
    entered_by: Optional[int] = Field(default=None, gt=0)


class ServiceCatalogRequestSchema(BaseModel):
    """Used for POST/PUT /billing/settings/service-catalog endpoints."""

    service_code: str = Field(..., min_length=1, max_length=80)
    service_name: str = Field(..., min_length=1, max_length=255)
    billing_unit: BillingUnit
    pricing_policy: PricingPolicy
    default_currency: Currency
    default_rate: Decimal = Field(..., ge=0)
    status: ServiceStatus = ServiceStatus.ACTIVE


class ContractRateRequestSchema(BaseModel):
    """Used for POST/PUT /billing/settings/client-contract-rates endpoints."""

    client_id: int = Field(..., gt=0)
    service_code: str = Field(..., min_length=1, max_length=80)
    custom_rate: Decimal = Field(..., ge=0)
    currency: Currency
    effective_date: date
