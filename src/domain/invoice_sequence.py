"""Invoice Sequence Domain Entity

Per client-month counter behind invoice numbers.
"""

from datetime import datetime
from typing import Optional
from sqlmodel import Field, Column
from sqlalchemy import BigInteger, Integer, String, UniqueConstraint
from src.domain.base import BaseModel, IdType


def to_yyyymm(invoice_month: str) -> str:
    """2026-01 -> 202601"""
    return invoice_month.replace("-", "")


def build_invoice_number(prefix: str, client_id: int, yyyymm: str, seq: int) -> str:
    """Format: {prefix}-{client}-{yyyymm}-{seq:04d} (e.g., KRW-7-202601-0001)"""
    return f"{prefix}-{client_id}-{yyyymm}-{seq:04d}"


class InvoiceSequence(BaseModel, table=True):
    """
    Invoice Sequence - Monotonic counter per (client_id, yyyymm)

    Domain Rules:
    - One counter per client and month
    - last_seq only grows, and only under a row lock
    """

    __tablename__ = "invoice_sequences"
    __table_args__ = (
        UniqueConstraint("client_id", "yyyymm", name="uq_invoice_sequences_client_month"),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
    )

    client_id: int = Field(
        sa_column=Column(BigInteger, nullable=False),
    )

    yyyymm: str = Field(
        sa_column=Column(String(6), nullable=False),
    )

    last_seq: int = Field(
        sa_column=Column(Integer, nullable=False),
    )

    created_at: datetime = Field(default_factory=datetime.utcnow)

    updated_at: datetime = Field(default_factory=datetime.utcnow)
