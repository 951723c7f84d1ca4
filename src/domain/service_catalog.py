"""Service Catalog Domain Entity

Billable warehouse services. Maps service_code to the name printed on
invoice items and carries the default rate for the service.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column
from sqlalchemy import Numeric, String
from src.domain.base import BaseModel, IdType


class BillingUnit(str, Enum):
    """Unit a service is charged per"""
    ORDER = "ORDER"
    SKU = "SKU"
    BOX = "BOX"
    CBM = "CBM"
    PALLET = "PALLET"
    EVENT = "EVENT"
    MONTH = "MONTH"


class PricingPolicy(str, Enum):
    """Which currency fields of a charge are authoritative"""
    THB_BASED = "THB_BASED"    # priced in baht, converted at invoicing
    KRW_FIXED = "KRW_FIXED"    # priced in won, passes through unconverted


class Currency(str, Enum):
    THB = "THB"
    KRW = "KRW"


class ServiceStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class ServiceCatalog(BaseModel, table=True):
    """
    Service Catalog - Billable service definition

    Domain Rules:
    - service_code is unique
    - service_name is used as the invoice item description
    - Soft deleted via deleted_at
    """

    __tablename__ = "service_catalog"

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(IdType, primary_key=True, autoincrement=True),
    )

    service_code: str = Field(
        sa_column=Column(String(80), nullable=False, unique=True),
        description="Unique service code (e.g., TH_SHIPPING)"
    )

    service_name: str = Field(
        sa_column=Column(String(255), nullable=False),
        description="Human readable name printed on invoices"
    )

    billing_unit: BillingUnit = Field(description="Charging unit")

    pricing_policy: PricingPolicy = Field(description="THB_BASED or KRW_FIXED")

    default_currency: Currency = Field(description="Currency of default_rate")

    default_rate: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(18, 4), nullable=False, default=0),
        description="Default unit price"
    )

    status: ServiceStatus = Field(default=ServiceStatus.ACTIVE)

    deleted_at: Optional[datetime] = Field(default=None)

    created_at: datetime = Field(default_factory=datetime.utcnow)

    updated_at: datetime = Field(default_factory=datetime.utcnow)
