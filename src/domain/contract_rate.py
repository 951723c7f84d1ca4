"""Client Contract Rate Domain Entity

Per-client override of a service's default rate from an effective date.
"""

from datetime import datetime, date
from decimal import Decimal
from typing import Optional
from sqlmodel import Field, Column
from sqlalchemy import BigInteger, Date, Numeric, String, UniqueConstraint
from src.domain.base import BaseModel, IdType
from src.domain.service_catalog import Currency


class ClientContractRate(BaseModel, table=True):
    """
    Client Contract Rate - Negotiated price for one client and service

    Domain Rules:
    - One rate per (client_id, service_code, effective_date)
    - Soft deleted via deleted_at
    """

    __tablename__ = "client_contract_rates"
    __table_args__ = (
        UniqueConstraint(
            "client_id", "service_code", "effective_date",
            name="uq_client_contract_rates_client_service_date",
        ),
    )

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
    )

    client_id: int = Field(
        sa_column=Column(BigInteger, nullable=False, index=True),
        description="Client the rate applies to"
    )

    service_code: str = Field(
        sa_column=Column(String(80), nullable=False),
        description="Service the rate applies to"
    )

    custom_rate: Decimal = Field(
        sa_column=Column(Numeric(18, 4), nullable=False),
        description="Negotiated unit price"
    )

    currency: Currency = Field(description="Currency of custom_rate")

    effective_date: date = Field(
        sa_column=Column(Date, nullable=False),
        description="First day the rate applies"
    )

    deleted_at: Optional[datetime] = Field(default=None)

    created_at: datetime = Field(default_factory=datetime.utcnow)

    updated_at: datetime = Field(default_factory=datetime.utcnow)
