"""Invoice Domain Entity

Monthly KRW invoice for a client, built from billing events.
"""

from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional, Tuple
from sqlmodel import Field, Column, Index
from sqlalchemy import BigInteger, Date, Numeric, String
from src.domain.base import BaseModel, IdType


class InvoiceStatus(str, Enum):
    """Invoice status types"""
    DRAFT = "draft"
    ISSUED = "issued"
    PAID = "paid"

    @property
    def rank(self) -> int:
        return _STATUS_RANK[self]

    def can_transition_to(self, target: "InvoiceStatus") -> bool:
        """Only single forward steps: draft -> issued -> paid"""
        return target.rank == self.rank + 1


_STATUS_RANK = {
    InvoiceStatus.DRAFT: 0,
    InvoiceStatus.ISSUED: 1,
    InvoiceStatus.PAID: 2,
}


def month_range(invoice_month: str) -> Tuple[date, date]:
    """Half-open [first day, first day of next month) for a YYYY-MM month"""
    year, month = (int(part) for part in invoice_month.split("-"))
    start = date(year, month, 1)
    if month == 12:
        end = date(year + 1, 1, 1)
    else:
        end = date(year, month + 1, 1)
    return start, end


class Invoice(BaseModel, table=True):
    """
    Invoice - Monthly KRW billing invoice for a client

    Domain Rules:
    - invoice_no must be unique (KRW-{client}-{yyyymm}-{seq})
    - Generation keeps one live invoice per (client_id, invoice_month);
      soft delete frees the month for regeneration
    - Status transitions: draft -> issued -> paid, never backwards
    - subtotal/vat/total are truncated to 100 won and total = subtotal + vat
    - fx_rate_thbkrw is frozen at generation
    """

    __tablename__ = "invoices"
    __table_args__ = (
        Index("ix_invoices_client_month", "client_id", "invoice_month"),
        Index("ix_invoices_status", "status"),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
        description="Unique invoice identifier (auto-increment)"
    )

    client_id: int = Field(
        sa_column=Column(BigInteger, nullable=False),
        description="Invoiced client"
    )

    invoice_month: str = Field(
        sa_column=Column(String(7), nullable=False),
        description="Month the invoice aggregates events for (YYYY-MM)"
    )

    invoice_no: str = Field(
        sa_column=Column(String(50), nullable=False, unique=True),
        description="Unique invoice number (e.g., KRW-1-202601-0001)"
    )

    status: InvoiceStatus = Field(
        default=InvoiceStatus.DRAFT,
        description="Invoice status (draft, issued, paid)"
    )

    issue_date: date = Field(
        sa_column=Column(Date, nullable=False),
    )

    invoice_date: date = Field(
        sa_column=Column(Date, nullable=False),
        description="Date used to select the exchange rate"
    )

    due_date: Optional[date] = Field(
        default=None,
        sa_column=Column(Date, nullable=True),
    )

    currency: str = Field(
        default="KRW",
        sa_column=Column(String(3), nullable=False, default="KRW"),
    )

    fx_rate_thbkrw: Decimal = Field(
        sa_column=Column(Numeric(18, 6), nullable=False),
        description="THB->KRW rate frozen at generation"
    )

    subtotal_krw: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(18, 2), nullable=False, default=0),
    )

    vat_krw: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(18, 2), nullable=False, default=0),
    )

    total_krw: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(18, 2), nullable=False, default=0),
    )

    created_by: Optional[int] = Field(
        default=None,
        sa_column=Column(BigInteger, nullable=True),
    )

    deleted_at: Optional[datetime] = Field(default=None)

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Invoice creation timestamp"
    )

    updated_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Last update timestamp"
    )
