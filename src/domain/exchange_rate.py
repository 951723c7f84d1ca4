"""Exchange Rate Domain Entity

THB -> KRW rates anchored to a date. A rate is frozen into every invoice
generated with it and becomes immutable from then on.
"""

from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import BigInteger, Boolean, Date, Numeric, String, UniqueConstraint
from src.domain.base import BaseModel, IdType


class ExchangeRateStatus(str, Enum):
    """Exchange rate status types"""
    DRAFT = "draft"
    ACTIVE = "active"
    SUPERSEDED = "superseded"


class ExchangeRateSource(str, Enum):
    MANUAL = "manual"
    API = "api"


class ExchangeRate(BaseModel, table=True):
    """
    Exchange Rate - Daily THB/KRW conversion rate

    Domain Rules:
    - One rate per (base_currency, quote_currency, rate_date)
    - Only active rates are applied by invoice generation
    - locked is set by invoice generation and never cleared
    - Locked or invoice-referenced rates cannot be updated or deleted
    """

    __tablename__ = "exchange_rates"
    __table_args__ = (
        UniqueConstraint(
            "base_currency", "quote_currency", "rate_date",
            name="uq_exchange_rates_pair_date",
        ),
        Index("ix_exchange_rates_rate_date", "rate_date"),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
        description="Unique exchange rate identifier (auto-increment)"
    )

    rate_date: date = Field(
        sa_column=Column(Date, nullable=False),
        description="Date the rate is effective from"
    )

    base_currency: str = Field(
        default="THB",
        sa_column=Column(String(3), nullable=False, default="THB"),
    )

    quote_currency: str = Field(
        default="KRW",
        sa_column=Column(String(3), nullable=False, default="KRW"),
    )

    rate: Decimal = Field(
        sa_column=Column(Numeric(18, 6), nullable=False),
        description="KRW per 1 THB"
    )

    source: ExchangeRateSource = Field(default=ExchangeRateSource.MANUAL)

    status: ExchangeRateStatus = Field(default=ExchangeRateStatus.ACTIVE)

    locked: bool = Field(
        default=False,
        sa_column=Column(Boolean, nullable=False, default=False),
        description="Set once the rate has been consumed by invoice generation"
    )

    entered_by: Optional[int] = Field(
        default=None,
        sa_column=Column(BigInteger, nullable=True),
        description="Actor who entered the rate"
    )

    deleted_at: Optional[datetime] = Field(default=None)

    created_at: datetime = Field(default_factory=datetime.utcnow)

    updated_at: datetime = Field(default_factory=datetime.utcnow)

    def is_mutable(self, usage_count: int) -> bool:
        """A rate can change only while unlocked and unused by any invoice"""
        return not self.locked and usage_count == 0
