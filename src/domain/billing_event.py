"""Billing Event Domain Entity

One chargeable unit of service usage awaiting invoicing. Events are
appended by operations and consumed by monthly invoice generation.
"""

from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import BigInteger, Date, Numeric, String
from src.domain.base import BaseModel, IdType
from src.domain.money import resolve_amount, truncate_to_hundred
from src.domain.service_catalog import PricingPolicy


class BillingEventStatus(str, Enum):
    """Billing event lifecycle"""
    PENDING = "PENDING"
    INVOICED = "INVOICED"


class BillingEvent(BaseModel, table=True):
    """
    Billing Event - Metered charge for a client

    Domain Rules:
    - Created PENDING with no invoice link
    - Moves to INVOICED exactly once, stamping fx_rate_thbkrw and invoice_id
    - Reverts to PENDING only while its invoice is still draft
    - THB_BASED events carry THB amounts, KRW_FIXED events carry KRW amounts
    """

    __tablename__ = "billing_events"
    __table_args__ = (
        Index("ix_billing_events_client_status_date", "client_id", "status", "event_date"),
        Index("ix_billing_events_invoice_id", "invoice_id"),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
        description="Insertion-ordered identifier; drives item aggregation order"
    )

    client_id: int = Field(
        sa_column=Column(BigInteger, nullable=False),
        description="Client being charged"
    )

    warehouse_id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigInteger, nullable=True),
        description="Warehouse the service was performed in (resolved at entry)"
    )

    service_code: str = Field(
        sa_column=Column(String(80), nullable=False),
    )

    reference_type: str = Field(
        sa_column=Column(String(40), nullable=False),
        description="Origin of the charge (e.g., OUTBOUND, SHIPPING)"
    )

    reference_id: Optional[str] = Field(
        default=None,
        sa_column=Column(String(120), nullable=True),
        description="Identifier of the originating document"
    )

    event_date: date = Field(
        sa_column=Column(Date, nullable=False),
    )

    qty: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(18, 3), nullable=False, default=0),
    )

    pricing_policy: PricingPolicy = Field(description="THB_BASED or KRW_FIXED")

    unit_price_thb: Optional[Decimal] = Field(
        default=None,
        sa_column=Column(Numeric(18, 4), nullable=True),
    )

    amount_thb: Optional[Decimal] = Field(
        default=None,
        sa_column=Column(Numeric(18, 4), nullable=True),
    )

    unit_price_krw: Optional[Decimal] = Field(
        default=None,
        sa_column=Column(Numeric(18, 2), nullable=True),
    )

    amount_krw: Optional[Decimal] = Field(
        default=None,
        sa_column=Column(Numeric(18, 2), nullable=True),
        description="Raw KRW amount; replaced by the normalized amount when invoiced"
    )

    fx_rate_thbkrw: Optional[Decimal] = Field(
        default=None,
        sa_column=Column(Numeric(18, 6), nullable=True),
        description="Rate frozen at invoicing (null while pending)"
    )

    status: BillingEventStatus = Field(default=BillingEventStatus.PENDING)

    invoice_id: Optional[int] = Field(
        default=None,
        sa_column=Column(BigInteger, nullable=True),
    )

    deleted_at: Optional[datetime] = Field(default=None)

    created_at: datetime = Field(default_factory=datetime.utcnow)

    updated_at: datetime = Field(default_factory=datetime.utcnow)

    def source_amount(self) -> Decimal:
        """Amount in the currency selected by the pricing policy"""
        if self.pricing_policy == PricingPolicy.THB_BASED:
            return resolve_amount(self.amount_thb, self.unit_price_thb, self.qty)
        return resolve_amount(self.amount_krw, self.unit_price_krw, self.qty)

    def normalized_amount_krw(self, fx_rate: Decimal) -> Decimal:
        """KRW amount to invoice, truncated to 100 won"""
        if self.pricing_policy == PricingPolicy.THB_BASED:
            return truncate_to_hundred(self.source_amount() * fx_rate)
        return truncate_to_hundred(self.source_amount())
