"""Invoice Item Domain Entity

Aggregated line of an invoice: one per service code plus one VAT line.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import BigInteger, Numeric, String
from src.domain.base import BaseModel, IdType


class InvoiceItem(BaseModel, table=True):
    """
    Invoice Item - Line item within an invoice

    Domain Rules:
    - Each item belongs to exactly one invoice
    - amount_krw and unit_price_krw are truncated to 100 won
    - Exactly one VAT_7 item per invoice
    - Soft deleted and recreated when a draft invoice is regenerated
    """

    __tablename__ = "invoice_items"
    __table_args__ = (
        Index("ix_invoice_items_invoice_id", "invoice_id"),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
    )

    invoice_id: int = Field(
        sa_column=Column(BigInteger, nullable=False),
        description="Owning invoice"
    )

    service_code: str = Field(
        sa_column=Column(String(80), nullable=False),
    )

    description: str = Field(
        sa_column=Column(String(255), nullable=False),
        description="Service name from the catalog, or the code itself"
    )

    qty: Decimal = Field(
        sa_column=Column(Numeric(18, 3), nullable=False),
    )

    unit_price_krw: Decimal = Field(
        sa_column=Column(Numeric(18, 2), nullable=False),
    )

    amount_krw: Decimal = Field(
        sa_column=Column(Numeric(18, 2), nullable=False),
    )

    deleted_at: Optional[datetime] = Field(default=None)

    created_at: datetime = Field(default_factory=datetime.utcnow)

    updated_at: datetime = Field(default_factory=datetime.utcnow)
